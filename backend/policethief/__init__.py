from flask import Flask, current_app
from flask_cors import CORS
from flask_socketio import SocketIO
from config import Config

socketio = SocketIO(async_mode=None)


def _allowed_origins(value):
    if not value or value.strip() == '*':
        return '*'
    return [origin.strip() for origin in value.split(',') if origin.strip()]


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    flask_app.logger.setLevel(flask_app.config.get('LOG_LEVEL', 'INFO'))

    allowed_origins = _allowed_origins(flask_app.config.get('CORS_ORIGINS', '*'))
    CORS(flask_app, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)
    namespace = flask_app.config.get('SOCKETIO_NAMESPACE', '/ws')

    # One game service (and session registry) per app
    from policethief.services.games.fanout import SocketIOChannel
    from policethief.services.games.lifecycle import GameService
    flask_app.extensions['game_service'] = GameService.from_config(
        flask_app.config, SocketIOChannel(socketio, namespace)
    )

    from policethief.api.sessions import sessions
    flask_app.register_blueprint(sessions, url_prefix='/api')

    # Importing here ensures the handlers bind to the initialized socketio instance
    from policethief.socketio_events import register_socketio_handlers
    register_socketio_handlers(namespace)

    flask_app.logger.info(f"[app] namespace={namespace} origins={allowed_origins}")
    return flask_app


def get_game_service():
    return current_app.extensions['game_service']
