"""
Reward Code Generator

Coupon codes granted by the daily games: WTXXXXXXXX for solving the word
puzzle, SAVE-XXXX-XXXX and GIFT-XXXX-XXXX for spin prizes.
"""

from typing import Optional

from ..config.game_settings import REWARD_ALPHABET, REWARD_BODY_LENGTH, REWARD_PREFIX
from .platform import Platform


def format_reward_code(prefix: str, body: str, group_size: Optional[int] = None) -> str:
    """Join prefix and body, optionally splitting the body into dash-separated groups."""
    if not group_size:
        return prefix + body
    groups = [body[i:i + group_size] for i in range(0, len(body), group_size)]
    return "-".join([prefix] + groups)


def generate_reward_code(platform: Platform, prefix: str = REWARD_PREFIX,
                         group_size: Optional[int] = None) -> str:
    """
    Build a prefixed code from the unambiguous alphabet.

    One secure random byte per character; the alphabet has 32 symbols so
    byte % 32 is uniform.
    """
    raw = platform.secure_random_bytes(REWARD_BODY_LENGTH)
    body = ''.join(REWARD_ALPHABET[b % len(REWARD_ALPHABET)] for b in raw)
    return format_reward_code(prefix, body, group_size)


def is_valid_reward_code(code: str, prefix: str = REWARD_PREFIX, group_size: Optional[int] = None) -> bool:
    if not isinstance(code, str) or not code.startswith(prefix):
        return False
    body = code[len(prefix):].replace("-", "") if group_size else code[len(prefix):]
    if len(body) != REWARD_BODY_LENGTH or not all(c in REWARD_ALPHABET for c in body):
        return False
    return code == format_reward_code(prefix, body, group_size)
