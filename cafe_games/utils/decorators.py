"""
Session Decorators

Contains decorators that attach the browsing-session identity to HTTP requests.
"""

from functools import wraps
from flask import jsonify, request, session

from .helpers import SESSION_COOKIE_KEY


def require_session(f):
    """
    Decorator for endpoints that act on a player's daily games.

    Creates the browsing-session id on first use and caches it in the
    signed session cookie, then exposes it as request.session_id.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        from ..services.game_service import current_game_services
        from ..services.puzzle_selector import new_session_id

        services = current_game_services()
        if not services:
            return jsonify({
                'success': False,
                'error': 'Game service unavailable'
            }), 500

        session_id = session.get(SESSION_COOKIE_KEY)
        if not session_id:
            session_id = new_session_id(services.platform)
            session[SESSION_COOKIE_KEY] = session_id

        request.session_id = session_id
        return f(*args, **kwargs)

    return decorated_function
