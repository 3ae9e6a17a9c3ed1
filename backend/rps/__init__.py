import logging

from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
from config import Config

socketio = SocketIO(async_mode=None)


def create_app(config_class=Config, scheduler=None, rng=None):
    """Build the Flask app, the Socket.IO layer and the matchmaking engine.

    ``scheduler`` and ``rng`` are injection points for tests; by default round
    timers run as Socket.IO background tasks and random moves come from the
    ``random`` module.
    """
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    flask_app.logger.setLevel(flask_app.config.get('LOG_LEVEL', 'INFO'))
    logging.getLogger('rps').setLevel(flask_app.config.get('LOG_LEVEL', 'INFO'))

    allowed_origins = flask_app.config.get('CORS_ORIGINS') or []
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    from rps.connections import ConnectionRegistry
    from rps.services.games.engine import MatchmakingEngine
    from rps.services.games.scheduler import SocketIOScheduler

    if scheduler is None:
        scheduler = SocketIOScheduler(
            socketio,
            logger=flask_app.logger,
            heartbeat_sec=flask_app.config.get('TIMER_HEARTBEAT_SEC', 0),
        )
    connections = ConnectionRegistry()
    engine = MatchmakingEngine(
        scheduler,
        round_duration=flask_app.config.get('ROUND_DURATION_SEC', 10),
        rng=rng,
        logger=flask_app.logger,
    )
    flask_app.extensions['rps_connections'] = connections
    flask_app.extensions['rps_engine'] = engine

    from rps.routes import main
    flask_app.register_blueprint(main)

    from rps.socketio_events import register_socketio_handlers
    register_socketio_handlers(testing=flask_app.config.get('TESTING', False))

    return flask_app
