"""
WebSocket Event Handlers

Players join a room named after their browsing session so audio cues and
game events can be pushed to just their tabs.
"""

from flask import request
from flask_socketio import emit, join_room, leave_room
from ..utils.game_logger import game_logger
from ..utils.helpers import current_session_id

# Simple tracking of connected sockets
connected_sessions = {}  # socket_id -> session_id


def session_room(session_id):
    return f"session_{session_id}"


def register_websocket_handlers(socketio):
    """Register all WebSocket event handlers."""

    @socketio.on('connect')
    def handle_connect():
        """Join the caller's session room, if the session cookie carries one."""
        session_id = current_session_id()
        if not session_id:
            emit('session_required', {'error': 'Call /api/session before connecting'})
            return
        join_room(session_room(session_id))
        connected_sessions[request.sid] = session_id
        game_logger.logger.debug(f"WebSocket: session {session_id} connected")

    @socketio.on('disconnect')
    def handle_disconnect(*args):
        """Forget the socket. Committed game state is untouched."""
        session_id = connected_sessions.pop(request.sid, None)
        if session_id:
            leave_room(session_room(session_id))

    @socketio.on('ping_session')
    def handle_ping_session(data=None):
        """Lets a client confirm which session its socket is bound to."""
        emit('session_bound', {'session_id': connected_sessions.get(request.sid)})


def broadcast_game_event(socketio, session_id, game, event, **payload):
    """Push a game event to every tab of one session."""
    try:
        socketio.emit('game_event', {
            'game': game,
            'event': event,
            **payload
        }, to=session_room(session_id))
    except Exception as e:
        game_logger.logger.error(f"Error broadcasting {event} for session {session_id}: {e}")
