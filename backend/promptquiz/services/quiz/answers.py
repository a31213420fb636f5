import asyncio
import re
from dataclasses import dataclass, field
from typing import List, Optional, Union

from flask import current_app

from promptquiz.models import Answer, answer_key, utcnow
from .errors import GameNotFoundError, InvalidGameStateError, NoPlayersError, NoQuestionsError


_DISALLOWED_CHARS = re.compile(r"""[^\w\s.,?!;:()'"]""")
_WHITESPACE_RUN = re.compile(r'\s+')

CONTENT_FILTER_MARKERS = ('content_filter', 'content filter', 'moderation')


def sanitize_input(text: Optional[str]) -> str:
    """Replace characters outside a small allow-list and collapse whitespace.

    Keeps the meaning of a prompt while avoiding symbols that tend to trip
    the provider's content filter.
    """
    if not text:
        return ''
    text = _DISALLOWED_CHARS.sub(' ', text)
    return _WHITESPACE_RUN.sub(' ', text).strip()


def build_answer_prompt(assistant_prompt: str, question: str) -> str:
    return (
        "You are an AI assistant with the following characteristics:\n"
        f"{assistant_prompt}\n\n"
        "Please respond to this question in a helpful, accurate, and appropriate manner:\n"
        f"\"{question}\"\n\n"
        "Keep your answer concise (no more than 1-2 sentences)."
    )


def classify_answer_error(message: str) -> str:
    lowered = message.lower()
    if any(marker in lowered for marker in CONTENT_FILTER_MARKERS):
        return 'Content filter triggered'
    return 'Error generating response'


@dataclass
class AnswerError:
    player_id: str
    question_id: str
    error: str
    details: Optional[str] = None

    def to_dict(self):
        data = {'playerId': self.player_id, 'questionId': self.question_id, 'error': self.error}
        if self.details is not None:
            data['details'] = self.details
        return data


@dataclass
class AnswerSettings:
    model: str = 'gpt-35-turbo-16k'
    temperature: float = 0.7
    max_tokens: int = 800

    @classmethod
    def from_config(cls, config):
        return cls(
            model=config.get('ANSWER_MODEL', cls.model),
            temperature=float(config.get('ANSWER_TEMPERATURE', cls.temperature)),
            max_tokens=int(config.get('ANSWER_MAX_TOKENS', cls.max_tokens)),
        )


@dataclass
class AnswerRun:
    game_id: str
    total_players: int
    total_questions: int
    responses: List[Union[Answer, AnswerError]] = field(default_factory=list)

    @property
    def answers(self) -> List[Answer]:
        return [r for r in self.responses if not isinstance(r, AnswerError)]

    @property
    def errors(self) -> List[AnswerError]:
        return [r for r in self.responses if isinstance(r, AnswerError)]

    @property
    def expected_total(self) -> int:
        return self.total_players * self.total_questions

    def to_dict(self):
        return {
            'gameId': self.game_id,
            'processedCount': len(self.answers),
            'errorCount': len(self.errors),
            'totalPlayers': self.total_players,
            'totalQuestions': self.total_questions,
            'expectedTotal': self.expected_total,
            'responses': [r.to_dict() for r in self.responses],
        }


async def answer_question(client, game_id, player, question, settings: AnswerSettings):
    """Ask the model to answer one question in the persona of one player's prompt.

    Never raises: every failure comes back as an :class:`AnswerError`.
    """
    question_id = question.question_id
    try:
        prompt = build_answer_prompt(sanitize_input(player.prompt), sanitize_input(question.content))
        current_app.logger.info(f"[answers] request game={game_id} player={player.id} question={question_id}")
        response = await client.chat.completions.create(
            model=settings.model,
            messages=[{'role': 'user', 'content': prompt}],
            temperature=settings.temperature,
            max_tokens=settings.max_tokens,
        )
        choices = getattr(response, 'choices', None)
        if not choices:
            current_app.logger.warning(f"[answers] empty response game={game_id} player={player.id} question={question_id}")
            return AnswerError(player.id, question_id, 'Empty response from AI service')
        message = getattr(choices[0], 'message', None)
        return Answer(
            id=answer_key(game_id, player.id, question_id),
            game_id=game_id,
            player_id=player.id,
            player_name=player.screen_name or 'Unknown Player',
            question_id=question_id,
            question=question.content,
            assistant_prompt=player.prompt,
            answer=(getattr(message, 'content', None) or ''),
            timestamp=utcnow(),
        )
    except Exception as exc:
        detail = str(exc) or exc.__class__.__name__
        current_app.logger.error(f"[answers] failed game={game_id} player={player.id} question={question_id}: {detail}")
        return AnswerError(player.id, question_id, classify_answer_error(detail), details=detail)


async def generate_answers(game_id, *, games, players, client, settings=None, notifier=None) -> AnswerRun:
    """Answer every judge question once per player, in parallel.

    Raises a :class:`PipelineInputError` subclass when the game is missing,
    already judged, or has no questions or players. Per-pair failures are
    returned as :class:`AnswerError` entries and never abort sibling pairs.
    Successful answers are stored on the game; a storage failure is logged
    and the in-memory result is still returned.
    """
    settings = settings or AnswerSettings()

    game = games.get(game_id)
    if game is None:
        raise GameNotFoundError(game_id)
    if game.status == 'judged':
        raise InvalidGameStateError(game_id, game.status, 'generate answers')
    questions = list(game.questions)
    if not questions:
        raise NoQuestionsError(game_id)
    player_list = players.list_for_game(game_id)
    if not player_list:
        raise NoPlayersError(game_id)

    responses = await asyncio.gather(*[
        answer_question(client, game_id, player, question, settings)
        for player in player_list
        for question in questions
    ])
    run = AnswerRun(
        game_id=game_id,
        total_players=len(player_list),
        total_questions=len(questions),
        responses=list(responses),
    )

    if run.answers:
        try:
            stored = games.save_answers(game_id, run.answers)
            games.set_status(game_id, 'in_progress')
            current_app.logger.info(f"[answers] stored {stored} responses game={game_id}")
        except Exception as exc:
            current_app.logger.error(f"[answers] error storing responses game={game_id}: {exc}")

    for err in run.errors:
        current_app.logger.info(f"[answers] player={err.player_id} question={err.question_id}: {err.error} - {err.details or 'No details'}")

    if notifier is not None:
        notifier.publish(game_id, 'answers_generated', {
            'processedCount': len(run.answers),
            'errorCount': len(run.errors),
        })
    return run
