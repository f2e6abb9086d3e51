"""
Configuration Package

Contains all configuration-related files and settings.

This package separates two types of configuration:
- app_config.py: Flask application configuration (environment-based)
- game_settings.py: Game rules and static content (business logic)
"""

from .app_config import Config, DevelopmentConfig, ProductionConfig, TestingConfig, config
from .game_settings import (
    FEUD_QUESTIONS,
    SPIN_SEGMENTS,
    MAX_GUESSES,
    MAX_STRIKES,
    WORD_LENGTH,
    WORD_LIST,
    get_word_statistics,
    validate_feud_questions,
    validate_spin_segments,
    validate_word_list_integrity,
)

__all__ = [
    # App configuration
    'Config', 'DevelopmentConfig', 'ProductionConfig', 'TestingConfig', 'config',
    # Game rules
    'WORD_LIST', 'FEUD_QUESTIONS', 'SPIN_SEGMENTS', 'WORD_LENGTH', 'MAX_GUESSES', 'MAX_STRIKES',
    'validate_word_list_integrity', 'validate_feud_questions', 'validate_spin_segments', 'get_word_statistics'
]
