"""
Cafe Games Server Application Package

Daily engagement games for the cafe ordering app: a five-letter word puzzle
and a "guess the top answers" feud, each locked to one play per day and
browsing session.
"""

from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
from .config import Config


def create_app(config_class=Config, services=None):
    """
    Application factory pattern for creating Flask app instances.

    Args:
        config_class: Configuration class to use
        services: Pre-built GameServices; the global instance is used (and
            created if needed) when omitted

    Returns:
        Tuple of (Flask app, SocketIO) with all extensions initialized
    """
    from .services.game_service import get_game_services, initialize_game_services
    from .services.platform import ServerPlatform

    app = Flask(__name__)
    app.config.from_object(config_class)

    # Initialize extensions
    CORS(app, origins=app.config.get('CORS_ORIGINS', '*'), supports_credentials=True)
    socketio = SocketIO(app, cors_allowed_origins=app.config.get('CORS_ORIGINS', '*'),
                        logger=False, engineio_logger=False)

    if services is None:
        services = get_game_services() or initialize_game_services(config_class)
    if isinstance(services.platform, ServerPlatform):
        services.platform.bind_emitter(socketio.emit)

    # Register blueprints
    from .controllers.game_controller import game_bp
    app.register_blueprint(game_bp, url_prefix='/api')

    # Register WebSocket handlers
    from .websocket.handlers import register_websocket_handlers
    register_websocket_handlers(socketio)

    # Store instances for use in other modules
    app.socketio = socketio
    app.extensions['cafe_games'] = services

    return app, socketio
