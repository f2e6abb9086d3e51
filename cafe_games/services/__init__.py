"""
Services Package

Contains all business logic and service classes.
"""

from .game_service import GameServices, get_game_services, initialize_game_services
from .word_game import WordGameService, WordRound
from .feud_game import FeudGameService, FeudRound
from .spin_game import SpinGameService, SpinRound

__all__ = [
    'GameServices', 'get_game_services', 'initialize_game_services',
    'WordGameService', 'WordRound',
    'FeudGameService', 'FeudRound',
    'SpinGameService', 'SpinRound'
]
