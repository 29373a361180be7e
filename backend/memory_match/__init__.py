import logging

import click
from flask import Flask
from flask_cors import CORS
from flask_migrate import Migrate
from flask_socketio import SocketIO
from flask_sqlalchemy import SQLAlchemy

from config import Config
from memory_match.services.game.registry import SessionRegistry

db = SQLAlchemy()
migrate = Migrate()
socketio = SocketIO(async_mode=None)
sessions = SessionRegistry()


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    level = getattr(logging, str(flask_app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO)
    logging.basicConfig(level=level)
    flask_app.logger.setLevel(level)

    allowed_origins = flask_app.config.get('CORS_ORIGINS') or []

    db.init_app(flask_app)
    migrate.init_app(flask_app, db)
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)
    sessions.init_app(flask_app, socketio=socketio)

    from memory_match.main import main
    flask_app.register_blueprint(main)

    from memory_match.api.games import games
    flask_app.register_blueprint(games, url_prefix='/api/games')

    from memory_match.socketio_events import register_socketio_handlers
    register_socketio_handlers(testing=flask_app.config.get('TESTING', False))

    @click.command('db-reset')
    def db_reset_command():
        """Drops and recreates the database, clearing every leaderboard."""
        with flask_app.app_context():
            import memory_match.models  # noqa: F401
            db.drop_all()
            db.create_all()
            print('Database has been reset!')

    flask_app.cli.add_command(db_reset_command)

    return flask_app
