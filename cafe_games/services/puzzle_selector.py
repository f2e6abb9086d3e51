"""
Puzzle Selector

Derives today's puzzle from the calendar day and the browsing session id.
The same (day, session) pair always lands on the same word, so reloading
the page cannot reroll the puzzle.
"""

import base64
from datetime import date
from typing import Sequence

from .platform import Platform

SESSION_ID_BYTES = 16


def rolling_hash(text: str) -> int:
    """
    32-bit polynomial string hash (h = h * 31 + c) with signed wraparound.

    Characters are fed as UTF-16 code units so identifiers containing
    astral characters hash the same way a browser would hash them.
    """
    h = 0
    encoded = text.encode('utf-16-le')
    for i in range(0, len(encoded), 2):
        code_unit = encoded[i] | (encoded[i + 1] << 8)
        h = (h * 31 + code_unit) & 0xFFFFFFFF
    if h >= 0x80000000:
        h -= 0x100000000
    return h


def select_daily_index(day: date, session_id: str, list_length: int) -> int:
    """
    Pick an index in [0, list_length) for this session on this day.

    Args:
        day: Local calendar day
        session_id: Opaque per-session identifier
        list_length: Size of the list being indexed

    Returns:
        int: Deterministic index for (day, session_id)
    """
    if list_length <= 0:
        raise ValueError("list_length must be positive")
    seed = day.isoformat() + session_id
    return abs(rolling_hash(seed)) % list_length


def select_daily_word(day: date, session_id: str, words: Sequence[str]) -> str:
    return words[select_daily_index(day, session_id, len(words))]


def new_session_id(platform: Platform) -> str:
    """Generate a fresh browsing-session identifier from the secure random source."""
    raw = platform.secure_random_bytes(SESSION_ID_BYTES)
    return base64.urlsafe_b64encode(raw).rstrip(b'=').decode('ascii')
