from datetime import datetime, timezone

from flask import Blueprint, jsonify, request, current_app
from promptquiz.services.quiz.lifecycle import leaderboard

main = Blueprint('main', __name__)


@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the Prompt Quiz server!'})


@main.route('/api/leaderboard', methods=['GET'])
def get_leaderboard():
    game_id = request.args.get('gameId')
    try:
        rows = leaderboard(game_id=game_id, limit=int(current_app.config.get('LEADERBOARD_LIMIT', 5)))
    except Exception as exc:
        current_app.logger.error(f"[leaderboard] error retrieving leaderboard: {exc}")
        return jsonify({'error': 'Error retrieving leaderboard', 'message': str(exc)}), 500
    return jsonify({
        'leaderboard': rows,
        'timestamp': datetime.now(timezone.utc).isoformat(),
    })
