from functools import partial

from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_cors import CORS
from flask_migrate import Migrate
from flask_socketio import SocketIO
import click
from config import Config

db = SQLAlchemy()
migrate = Migrate()
socketio = SocketIO(async_mode=None)

# Judge catalogue used by `flask db-reset`
SEED_JUDGES = [
    {
        'theme': 'Coffee',
        'assistant_id': 'asst_coffee_judge',
        'questions': [
            'How should I brew a great cup of pour-over coffee?',
            'What is the difference between arabica and robusta beans?',
            'How do I descale an espresso machine?',
            'Why does my cold brew taste bitter?',
            'What grind size should I use for a French press?',
        ],
    },
    {
        'theme': 'Microsoft',
        'assistant_id': 'asst_microsoft_judge',
        'questions': [
            'How do I share a large file with a colleague using OneDrive?',
            'What is the quickest way to build a pivot table in Excel?',
            'How can I schedule a recurring meeting in Teams?',
            'How do I deploy a simple web app to Azure?',
            'What does Windows Defender protect me from?',
        ],
    },
    {
        'theme': 'Space',
        'assistant_id': 'asst_space_judge',
        'questions': [
            'Why is Mars red?',
            'How do astronauts sleep on the International Space Station?',
            'What would happen if you fell into a black hole?',
            'How far away is the nearest star?',
            'Why does the Moon always show the same face to Earth?',
        ],
    },
]


def create_app(config_class=Config, ai_client_factory=None):
    """Build the Flask app.

    ``ai_client_factory`` returns a fresh async model client per pipeline
    run; tests pass one that builds fakes.
    """
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    allowed_origins = flask_app.config.get('CORS_ORIGINS') or []
    db.init_app(flask_app)
    migrate.init_app(flask_app, db)
    CORS(flask_app, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    from promptquiz.services.ai import create_openai_client
    flask_app.extensions['ai_client_factory'] = ai_client_factory or partial(create_openai_client, flask_app.config)

    from promptquiz.main import main
    flask_app.register_blueprint(main)

    from promptquiz.api.games import games
    flask_app.register_blueprint(games, url_prefix='/api/games')

    from promptquiz.api.pipeline import pipeline
    flask_app.register_blueprint(pipeline, url_prefix='/api')

    from promptquiz.socketio_events import register_socketio_handlers
    register_socketio_handlers(testing=flask_app.config.get('TESTING', False))

    @click.command('db-reset')
    def db_reset_command():
        """Drops, recreates, and seeds the judge catalogue."""
        with flask_app.app_context():
            db.drop_all()
            db.create_all()
            seed_judges()
            print('Database has been reset and seeded!')

    flask_app.cli.add_command(db_reset_command)

    return flask_app


def seed_judges(judges=None):
    from promptquiz.models import Judge, JudgeQuestion

    for entry in judges or SEED_JUDGES:
        judge = Judge(theme=entry['theme'], assistant_id=entry['assistant_id'])
        db.session.add(judge)
        prefix = entry['theme'].lower()
        for idx, content in enumerate(entry['questions'], start=1):
            judge.questions.append(JudgeQuestion(id=f"{prefix}-q{idx}", content=content))
    db.session.commit()
