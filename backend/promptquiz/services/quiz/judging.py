import asyncio
import re
from dataclasses import dataclass, field
from typing import List, Optional

import openai
from flask import current_app

from promptquiz.models import Judgement, judgement_key, utcnow
from .errors import (
    EmptyResponseError,
    GameNotFoundError,
    JudgeRunError,
    JudgementFailed,
    MissingTextContentError,
    NoAnswersError,
    ResponseParseError,
    RunTerminatedError,
    RunTimeoutError,
    UnsupportedRunStateError,
)
from .parsing import ParsedJudgement, parse_judge_response
from .scoring import aggregate_scores


TERMINATED_STATUSES = ('failed', 'cancelled', 'expired')
# "try again in 7 seconds" (Azure), "try again in 20s" / "in 350ms" (OpenAI)
_RETRY_HINT = re.compile(r'try again in (\d+(?:\.\d+)?)\s*(ms|s|seconds?)\b', re.I)


def rate_limit_delay(exc, default):
    """Seconds to wait if ``exc`` is a provider rate limit, otherwise None."""
    message = str(exc)
    hint = _RETRY_HINT.search(message)
    if not (isinstance(exc, openai.RateLimitError) or hint or 'rate limit' in message.lower()):
        return None
    if hint is None:
        return default
    delay = float(hint.group(1))
    return delay / 1000 if hint.group(2).lower() == 'ms' else delay


def format_judge_message(question, answer):
    return f'Q: "{question}"\n\nA: "{answer}"'


class JudgeRunner:
    """Scores one answer through a throwaway judge conversation.

    create thread -> post message -> start run -> poll -> read newest
    message -> parse, deleting the thread on every exit path.
    """

    def __init__(self, client, *, poll_interval=1.0, max_attempts=30, rate_limit_wait=60.0, sleep=asyncio.sleep):
        self.client = client
        self.poll_interval = poll_interval
        self.max_attempts = max_attempts
        self.rate_limit_wait = rate_limit_wait
        self.sleep = sleep

    @classmethod
    def from_config(cls, client, config, **kwargs):
        return cls(
            client,
            poll_interval=float(config.get('JUDGE_POLL_INTERVAL_SEC', 1.0)),
            max_attempts=int(config.get('JUDGE_MAX_POLL_ATTEMPTS', 30)),
            rate_limit_wait=float(config.get('JUDGE_RATE_LIMIT_WAIT_SEC', 60.0)),
            **kwargs,
        )

    async def judge(self, answer, assistant_id) -> ParsedJudgement:
        threads = self.client.beta.threads
        thread = None
        try:
            thread = await threads.create(metadata={'gameId': answer.game_id, 'answerId': answer.id})
            await threads.messages.create(
                thread_id=thread.id,
                role='user',
                content=format_judge_message(answer.question, answer.answer),
            )
            run = await threads.runs.create(thread_id=thread.id, assistant_id=assistant_id)
            await self.wait_for_run(thread.id, run.id)
            text = await self.fetch_result(thread.id)
            current_app.logger.info(f"[judge] response player={answer.player_id} question={answer.question_id}")
            current_app.logger.debug(text)
            return parse_judge_response(text)
        except Exception as exc:
            current_app.logger.error(f"[judge] error processing answer={answer.id}: {exc}")
            raise JudgementFailed(answer.id, exc) from exc
        finally:
            if thread is not None:
                await self._delete_thread(thread.id)

    async def wait_for_run(self, thread_id, run_id):
        attempts = 0
        while attempts < self.max_attempts:
            try:
                run = await self.client.beta.threads.runs.retrieve(run_id=run_id, thread_id=thread_id)
            except Exception as exc:
                delay = rate_limit_delay(exc, self.rate_limit_wait)
                if delay is None:
                    raise
                # Rate limits retry the same attempt
                current_app.logger.warning(f"[judge] rate limit hit thread={thread_id}, waiting {delay}s before retry")
                await self.sleep(delay)
                continue

            status = run.status
            if status == 'completed':
                return run
            if status in TERMINATED_STATUSES:
                last_error = getattr(run, 'last_error', None)
                raise RunTerminatedError(status, getattr(last_error, 'message', None))
            if status == 'requires_action':
                raise UnsupportedRunStateError(status)
            attempts += 1
            await self.sleep(self.poll_interval)
        raise RunTimeoutError(self.max_attempts)

    async def fetch_result(self, thread_id) -> str:
        messages = await self.client.beta.threads.messages.list(thread_id=thread_id, order='desc')
        data = getattr(messages, 'data', None) or []
        if not data:
            raise EmptyResponseError()
        for block in data[0].content or []:
            text = getattr(block, 'text', None)
            if getattr(block, 'type', None) == 'text' and text is not None:
                return text.value
        raise MissingTextContentError()

    async def _delete_thread(self, thread_id):
        try:
            await self.client.beta.threads.delete(thread_id=thread_id)
        except Exception as exc:
            current_app.logger.error(f"[judge] error cleaning up thread={thread_id}: {exc}")


@dataclass
class JudgementError:
    answer_id: str
    player_id: str
    question_id: str
    error: str
    details: Optional[str] = None

    def to_dict(self):
        return {
            'aiAnswerId': self.answer_id,
            'playerId': self.player_id,
            'questionId': self.question_id,
            'error': self.error,
            'details': self.details,
        }


@dataclass
class JudgementRun:
    game_id: str
    judgements: List[Judgement] = field(default_factory=list)
    errors: List[JudgementError] = field(default_factory=list)
    updated_players: List[str] = field(default_factory=list)

    def to_dict(self):
        return {
            'gameId': self.game_id,
            'processedCount': len(self.judgements),
            'errorCount': len(self.errors),
            'judgements': [j.to_dict() for j in self.judgements],
            'errors': [e.to_dict() for e in self.errors],
            'updatedPlayers': self.updated_players,
        }


def _classify(cause):
    if isinstance(cause, ResponseParseError):
        return 'Could not parse judge response'
    if isinstance(cause, JudgeRunError):
        return 'Judge run failed'
    return 'Error judging response'


async def judge_answer(runner, game_id, answer, assistant_id):
    """Judge one stored answer; failures come back as a :class:`JudgementError`."""
    try:
        parsed = await runner.judge(answer, assistant_id)
    except JudgementFailed as failed:
        return JudgementError(
            answer_id=answer.id,
            player_id=answer.player_id,
            question_id=answer.question_id,
            error=_classify(failed.cause),
            details=str(failed.cause),
        )
    return Judgement(
        id=judgement_key(game_id, answer.id),
        game_id=game_id,
        ai_answer_id=answer.id,
        player_id=answer.player_id,
        player_name=answer.player_name,
        question_id=answer.question_id,
        context_score=parsed.context_score,
        technical_score=parsed.technical_score,
        clarity_score=parsed.clarity_score,
        total_score=parsed.total_score,
        justification=parsed.justification,
        timestamp=utcnow(),
    )


async def generate_judgements(game_id, *, games, players, runner, notifier=None) -> JudgementRun:
    """Judge every stored answer of a game in parallel, then update player totals.

    Each answer is judged independently; a failed judgement is reported in
    ``errors`` and the rest of the run carries on.
    """
    game = games.get(game_id)
    if game is None:
        raise GameNotFoundError(game_id)
    answers = games.list_answers(game_id)
    if not answers:
        raise NoAnswersError(game_id)
    assistant_id = game.assistant_id
    theme_name = game.theme

    results = await asyncio.gather(*[
        judge_answer(runner, game_id, answer, assistant_id) for answer in answers
    ])
    run = JudgementRun(game_id=game_id)
    for result in results:
        if isinstance(result, JudgementError):
            run.errors.append(result)
        else:
            run.judgements.append(result)

    saved = False
    if run.judgements:
        try:
            stored = games.save_judgements(game_id, run.judgements)
            saved = True
            games.set_status(game_id, 'judged')
            current_app.logger.info(f"[judge] stored {stored} judgements game={game_id}")
        except Exception as exc:
            current_app.logger.error(f"[judge] error storing judgements game={game_id}: {exc}")

    # Totals come from every judgement stored for the game, so an answer that
    # fails on a re-run keeps its earlier score.
    scored = run.judgements
    if saved or not run.judgements:
        try:
            scored = games.list_judgements(game_id)
        except Exception as exc:
            current_app.logger.error(f"[judge] error reading judgements game={game_id}: {exc}")

    run.updated_players = await aggregate_scores(game_id, scored, theme_name, players=players)

    if run.errors:
        current_app.logger.warning(f"[judge] {len(run.errors)} of {len(answers)} answers could not be judged game={game_id}")
    if notifier is not None:
        notifier.publish(game_id, 'judgements_generated', {
            'processedCount': len(run.judgements),
            'errorCount': len(run.errors),
        })
        notifier.publish(game_id, 'scores_updated', {'playerIds': run.updated_players})
    return run
