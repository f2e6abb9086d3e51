"""
Data Models Package

Contains all data models and schemas used throughout the application.
"""

from .game import (
    ErrorKind,
    FeudAnswer,
    FeudPhase,
    FeudQuestion,
    FeudRoundState,
    GuessRecord,
    LetterStatus,
    MoveResult,
    WordPhase,
    WordRoundState,
)

__all__ = [
    'ErrorKind', 'FeudAnswer', 'FeudPhase', 'FeudQuestion', 'FeudRoundState',
    'GuessRecord', 'LetterStatus', 'MoveResult', 'WordPhase', 'WordRoundState',
]
