"""
Cafe Games Server - Main Entry Point

This is the main entry point for the cafe games server.
It initializes all services and starts the Flask-SocketIO application.
"""

from cafe_games import create_app
from cafe_games.config import Config, validate_feud_questions, validate_spin_segments, validate_word_list_integrity
from cafe_games.services.game_service import initialize_game_services
from cafe_games.utils.game_logger import game_logger


def main():
    """Main function to initialize services and start the server."""
    lifecycle = None
    try:
        print("Initializing services...")

        # Refuse to start with broken game content
        validate_word_list_integrity()
        validate_feud_questions()
        validate_spin_segments()
        print("✓ Game content validated")

        services = initialize_game_services(Config)
        print(f"✓ Game services initialized ({services.storage_backend})")

        print("Creating Flask application...")
        app, socketio = create_app(Config, services)
        print("✓ Flask application created successfully")

        lifecycle = services.build_lifecycle(Config.STALE_SWEEP_INTERVAL_SECONDS)
        app.lifecycle = lifecycle
        lifecycle.start()
        print(f"✓ Stale record sweep scheduled every {Config.STALE_SWEEP_INTERVAL_SECONDS} seconds")

        game_logger.logger.info("Cafe Games Server starting")

        print(f"\nStarting Cafe Games Server on {Config.HOST}:{Config.PORT}")
        print(f"Debug mode: {Config.DEBUG}")
        print(f"Persistent storage: {services.persistent and services.storage_backend != 'MemoryStore'}")
        print("=" * 50)

        socketio.run(app, host=Config.HOST, port=Config.PORT, debug=Config.DEBUG)

    except KeyboardInterrupt:
        print("\nServer shutting down...")
        game_logger.logger.info("Cafe Games Server shutting down (KeyboardInterrupt)")
    except Exception as e:
        print(f"Error starting server: {e}")
        game_logger.logger.error(f"Error starting server: {e}")
        raise
    finally:
        if lifecycle is not None:
            lifecycle.stop()


if __name__ == '__main__':
    main()
