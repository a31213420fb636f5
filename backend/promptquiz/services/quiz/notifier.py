from flask import current_app


def game_room(game_id):
    return f"game:{game_id}"


class GameNotifier:
    """Best-effort publish to everyone in a game's Socket.IO room."""

    def __init__(self, socketio, namespace='/ws'):
        self.socketio = socketio
        self.namespace = namespace

    def publish(self, game_id, event, payload=None):
        message = {'gameId': game_id}
        message.update(payload or {})
        try:
            self.socketio.emit(event, message, to=game_room(game_id), namespace=self.namespace)
        except Exception as exc:
            current_app.logger.error(f"[notify-failed] game={game_id} event={event}: {exc}")
