"""
Utilities Package

Contains utility functions, decorators, and helper modules.
"""

from .decorators import require_session
from .helpers import current_session_id, get_user_identity
from .game_logger import game_logger

__all__ = ['require_session', 'current_session_id', 'get_user_identity', 'game_logger']
