import asyncio

from flask import Blueprint, jsonify, request, current_app
from promptquiz import db, socketio
from promptquiz.services.quiz.answers import AnswerSettings, generate_answers
from promptquiz.services.quiz.errors import PipelineInputError
from promptquiz.services.quiz.judging import JudgeRunner, generate_judgements
from promptquiz.services.quiz.notifier import GameNotifier
from promptquiz.services.quiz.store import GameStore, PlayerStore


pipeline = Blueprint('pipeline', __name__)


def _game_id_from_request():
    data = request.get_json(silent=True) or {}
    return request.args.get('gameId') or data.get('gameId')


def _run_stage(stage):
    """Run one async pipeline stage on a fresh model client, closing it afterwards."""
    factory = current_app.extensions['ai_client_factory']

    async def _runner():
        client = factory()
        try:
            return await stage(client)
        finally:
            await client.close()

    return asyncio.run(_runner())


def _server_error(tag, game_id, exc):
    current_app.logger.error(f"[{tag}] global error game={game_id}: {exc}")
    return jsonify({
        'error': 'Internal server error occurred',
        'message': str(exc) or 'Unknown error',
    }), 500


@pipeline.route('/generate-answers', methods=['GET', 'POST'])
def generate_answers_route():
    current_app.logger.info(f"[answers] processing request url={request.url}")
    game_id = _game_id_from_request()
    if not game_id:
        return jsonify({'error': 'Missing gameId parameter'}), 400

    games, players = GameStore(db.session), PlayerStore(db.session)
    settings = AnswerSettings.from_config(current_app.config)
    notifier = GameNotifier(socketio)
    try:
        run = _run_stage(lambda client: generate_answers(
            game_id, games=games, players=players, client=client, settings=settings, notifier=notifier,
        ))
    except PipelineInputError as exc:
        return jsonify({'error': str(exc)}), exc.status_code
    except Exception as exc:
        return _server_error('answers', game_id, exc)

    payload = run.to_dict()
    payload['message'] = 'Processed player assistants with questions'
    return jsonify(payload)


@pipeline.route('/generate-judgements', methods=['GET', 'POST'])
def generate_judgements_route():
    current_app.logger.info(f"[judge] processing request url={request.url}")
    game_id = _game_id_from_request()
    if not game_id:
        return jsonify({'error': 'Missing gameId parameter'}), 400

    games, players = GameStore(db.session), PlayerStore(db.session)
    config = current_app.config
    notifier = GameNotifier(socketio)
    try:
        run = _run_stage(lambda client: generate_judgements(
            game_id,
            games=games,
            players=players,
            runner=JudgeRunner.from_config(client, config),
            notifier=notifier,
        ))
    except PipelineInputError as exc:
        return jsonify({'error': str(exc)}), exc.status_code
    except Exception as exc:
        return _server_error('judge', game_id, exc)

    payload = run.to_dict()
    if run.errors:
        payload['message'] = 'Generated judgements with some failures'
    else:
        payload['message'] = 'Successfully generated judgements and updated player scores'
    return jsonify(payload)
