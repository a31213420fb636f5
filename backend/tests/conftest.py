import os
import sys
import pytest

# Ensure the backend root (containing the `promptquiz` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from promptquiz import create_app, db, socketio, seed_judges
from fakes import FakeAIClient


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    CORS_ORIGINS = ['http://localhost:5173']
    OPENAI_API_KEY = 'test-key'
    ANSWER_MODEL = 'test-model'
    ANSWER_TEMPERATURE = 0.7
    ANSWER_MAX_TOKENS = 800
    JUDGE_POLL_INTERVAL_SEC = 0
    JUDGE_MAX_POLL_ATTEMPTS = 30
    JUDGE_RATE_LIMIT_WAIT_SEC = 0
    QUESTIONS_PER_GAME = 3
    LEADERBOARD_LIMIT = 5


@pytest.fixture()
def fake_ai():
    return FakeAIClient()


@pytest.fixture()
def flask_app(fake_ai):
    application = create_app(TestConfig, ai_client_factory=lambda: fake_ai)
    with application.app_context():
        # Ensure models are imported so tables are created
        import promptquiz.models  # noqa: F401
        db.create_all()
        seed_judges()
        yield application
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_client(flask_app):
    test_client = socketio.test_client(
        flask_app,
        flask_test_client=flask_app.test_client(),
        namespace='/ws'
    )
    yield test_client
    try:
        test_client.disconnect(namespace='/ws')
    except Exception:
        pass


@pytest.fixture()
def make_game(flask_app):
    """Insert a game with the given players (``(id, name, prompt)``) and question count."""
    from promptquiz.models import Game, GameQuestion, Player

    def _make(players=(('p1', 'Alice', 'A cheerful barista'), ('p2', 'Bob', 'A grumpy pirate')),
              questions=3, status='waiting'):
        game = Game(status=status, theme='Coffee', assistant_id='asst_test')
        db.session.add(game)
        db.session.flush()
        for idx in range(questions):
            game.questions.append(GameQuestion(question_id=f"q{idx + 1}", content=f"Question {idx + 1}?", position=idx))
        for player_id, name, prompt in players:
            db.session.add(Player(id=player_id, game_id=game.id, screen_name=name, email=f"{name}@example.com", prompt=prompt))
        db.session.commit()
        return game.id

    return _make
