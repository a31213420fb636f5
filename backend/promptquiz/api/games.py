from flask import Blueprint, jsonify, request, current_app
from promptquiz import db, socketio
from promptquiz.models import Game
from promptquiz.services.quiz import lifecycle
from promptquiz.services.quiz.errors import PipelineInputError
from promptquiz.services.quiz.notifier import GameNotifier


games = Blueprint('games', __name__)


@games.route('/create', methods=['POST'])
def create_game():
    try:
        game = lifecycle.create_game(questions_per_game=int(current_app.config.get('QUESTIONS_PER_GAME', 3)))
    except PipelineInputError as exc:
        return jsonify({'error': str(exc)}), exc.status_code
    return jsonify(game.to_dict(include_results=False)), 201


@games.route('/<string:game_id>', methods=['GET'])
def get_game(game_id):
    game = db.session.get(Game, game_id)
    if not game:
        return jsonify({'error': 'Game not found'}), 404
    return jsonify({
        'id': game.id,
        'status': game.status,
        'theme': game.theme,
        'players': [p.to_dict() for p in game.players],
    })


@games.route('/<string:game_id>/results', methods=['GET'])
def get_game_results(game_id):
    game = db.session.get(Game, game_id)
    if not game:
        return jsonify({'error': 'Game not found'}), 404
    return jsonify(game.to_dict())


@games.route('/<string:game_id>/players', methods=['POST'])
def register_player(game_id):
    data = request.get_json(silent=True) or {}
    screen_name = data.get('screenName')
    email = data.get('email')
    user_id = data.get('userId')
    if not all([screen_name, email]):
        return jsonify({'error': 'Screen name and email are required'}), 400
    if not user_id:
        return jsonify({'error': 'userId is required'}), 400

    current_app.logger.info(f"[player-reg] game={game_id} user={user_id} name={screen_name}")
    try:
        game, player = lifecycle.register_player(game_id, user_id, screen_name, email, notifier=GameNotifier(socketio))
    except PipelineInputError as exc:
        return jsonify({'error': str(exc)}), exc.status_code

    return jsonify({
        'message': 'Successfully created player',
        'createdPlayer': player.to_dict(),
        'theme': game.theme,
    }), 201


@games.route('/<string:game_id>/prompt', methods=['POST'])
def submit_prompt(game_id):
    data = request.get_json(silent=True) or {}
    user_id = data.get('userId')
    prompt = data.get('prompt')
    if not all([user_id, prompt]):
        return jsonify({'error': 'userId and prompt are required'}), 400

    try:
        lifecycle.submit_prompt(game_id, user_id, prompt, notifier=GameNotifier(socketio))
    except PipelineInputError as exc:
        return jsonify({'error': str(exc)}), exc.status_code
    current_app.logger.info(f"[prompt] game={game_id} user={user_id} submitted prompt")
    return jsonify({'message': 'Prompt submitted'})
