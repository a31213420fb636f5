from flask_socketio import join_room, leave_room, emit
from promptquiz import socketio
from promptquiz.services.quiz.notifier import game_room

# Browsers subscribe to a game's room to receive pipeline progress events
GAME_NAMESPACE = '/ws'


def _room_from(data):
    game_id = (data or {}).get('gameId')
    if not game_id:
        emit('error', {'message': 'gameId is required'})
        return None, None
    return game_id, game_room(game_id)


def handle_connect():
    emit('connected', {'message': f'Connected to {GAME_NAMESPACE}'})


def handle_join_game(data):
    game_id, room = _room_from(data)
    if room is None:
        return
    join_room(room)
    emit('joined', {'room': room, 'gameId': game_id})


def handle_leave_game(data):
    game_id, room = _room_from(data)
    if room is None:
        return
    leave_room(room)
    emit('left', {'room': room, 'gameId': game_id})


def handle_ping(data):
    emit('pong', data or {})


_HANDLERS = (
    ('connect', handle_connect),
    ('join_game', handle_join_game),
    ('leave_game', handle_leave_game),
    ('ping', handle_ping),
)


def register_socketio_handlers(testing: bool = False) -> None:
    """Bind the game room handlers on ``/ws``.

    The Flask-SocketIO test client talks to ``/`` unless told otherwise, so
    tests get the same handlers there too.
    """
    namespaces = [GAME_NAMESPACE, '/'] if testing else [GAME_NAMESPACE]
    for namespace in namespaces:
        for event, handler in _HANDLERS:
            socketio.on_event(event, handler, namespace=namespace)
