"""Game lifecycle around the pipeline: set-up, players, prompts, leaderboard."""

import random

from flask import current_app

from promptquiz import db
from promptquiz.models import Game, GameQuestion, Judge, Player
from .errors import GameNotFoundError, NoJudgesError, PlayerNotFoundError


def create_game(questions_per_game=3, rng=random):
    """Open a game with a random judge and questions drawn without replacement."""
    judges = Judge.query.all()
    if not judges:
        raise NoJudgesError()
    judge = rng.choice(judges)
    pool = list(judge.questions)
    drawn = rng.sample(pool, min(questions_per_game, len(pool)))

    game = Game(status='waiting', judge_id=judge.id, theme=judge.theme, assistant_id=judge.assistant_id)
    db.session.add(game)
    db.session.flush()
    for position, question in enumerate(drawn):
        game.questions.append(GameQuestion(question_id=question.id, content=question.content, position=position))
    db.session.commit()
    current_app.logger.info(f"[game-created] game={game.id} theme={game.theme} questions={len(drawn)}")
    return game


def register_player(game_id, user_id, screen_name, email, notifier=None):
    game = db.session.get(Game, game_id)
    if game is None:
        raise GameNotFoundError(game_id)
    player = db.session.get(Player, (user_id, game_id))
    if player is None:
        player = Player(id=user_id, game_id=game_id)
        db.session.add(player)
    player.screen_name = screen_name
    player.email = email
    db.session.commit()
    if notifier is not None:
        notifier.publish(game_id, 'player_joined', {'message': 'A new player joined the game', 'player': player.to_dict()})
    return game, player


def submit_prompt(game_id, user_id, prompt, notifier=None):
    player = db.session.get(Player, (user_id, game_id))
    if player is None:
        raise PlayerNotFoundError(game_id, user_id)
    player.prompt = prompt
    db.session.commit()
    if notifier is not None:
        notifier.publish(game_id, 'prompt_submitted', {'message': 'A player has submitted a prompt', 'player': player.to_dict()})
    return player


def leaderboard(game_id=None, limit=5):
    query = Player.query.filter(Player.total_score.isnot(None))
    if game_id:
        query = query.filter_by(game_id=game_id)
    top = query.order_by(Player.total_score.desc()).limit(limit).all()
    return [
        {
            'rank': idx,
            'id': p.id,
            'name': p.screen_name,
            'score': p.total_score,
            'theme': p.theme_name,
            'gameId': p.game_id,
        }
        for idx, p in enumerate(top, start=1)
    ]
