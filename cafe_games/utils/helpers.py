"""
Helper Functions

Contains utility functions used throughout the application.
"""

from typing import Dict, Optional
from flask import has_request_context, request, session

SESSION_COOKIE_KEY = 'cafe_session_id'


def current_session_id() -> Optional[str]:
    """Session id stored in the signed Flask session cookie, if any."""
    if not has_request_context():
        return None
    return session.get(SESSION_COOKIE_KEY)


def get_user_identity(request_obj=None) -> Dict[str, Optional[str]]:
    """Extract user identity information from request."""
    if request_obj is None:
        request_obj = request

    user_ip = getattr(request_obj, 'remote_addr', None) or 'unknown'
    session_id = getattr(request_obj, 'session_id', None) or current_session_id()

    return {
        'user_ip': user_ip,
        'session_id': session_id
    }
