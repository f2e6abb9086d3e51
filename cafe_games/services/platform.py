"""
Platform Capabilities

Secure randomness and audio feedback sit behind this small interface so the
game logic never talks to a browser, a socket or the OS directly.
"""

import logging
import secrets
from typing import Callable, Optional

from ..config.game_settings import TONES

logger = logging.getLogger(__name__)


class Platform:
    """Capability interface used by the game services."""

    def secure_random_bytes(self, n: int) -> bytes:
        raise NotImplementedError

    def play_tone(self, frequency: float, duration: float, wave: str = "sine",
                  session_id: Optional[str] = None) -> None:
        raise NotImplementedError

    def play_cue(self, cue: str, session_id: Optional[str] = None) -> None:
        """Play one of the named cues from TONES. Never raises."""
        tone = TONES.get(cue)
        if tone is None:
            logger.debug("Unknown audio cue %s", cue)
            return
        frequency, duration, wave = tone
        try:
            self.play_tone(frequency, duration, wave, session_id=session_id)
        except Exception as e:
            # audio must never gate a state transition
            logger.warning("Audio cue %s failed: %s", cue, e)


class ServerPlatform(Platform):
    """
    Production platform.

    Randomness comes from the OS CSPRNG. Tones are pushed to the player's
    browser as Socket.IO events; the browser synthesizes them.
    """

    def __init__(self, emit: Optional[Callable] = None):
        # emit(event, payload, room) - normally SocketIO.emit bound by the app factory
        self._emit = emit

    def bind_emitter(self, emit: Callable) -> None:
        self._emit = emit

    def secure_random_bytes(self, n: int) -> bytes:
        return secrets.token_bytes(n)

    def play_tone(self, frequency: float, duration: float, wave: str = "sine",
                  session_id: Optional[str] = None) -> None:
        if self._emit is None or session_id is None:
            return
        self._emit('play_tone', {
            'frequency': frequency,
            'duration': duration,
            'wave': wave
        }, to=f"session_{session_id}")
