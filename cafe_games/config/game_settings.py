"""
Game Configuration Constants Module

This module defines the rules and static content of the daily cafe games.
All game parameters are centralized here to enable easy modification.
"""

import json
import os
from typing import Dict, Final, List, Tuple

from ..models.game import FeudQuestion, SpinSegment

# Word puzzle rules
WORD_LENGTH: Final[int] = 5
MAX_GUESSES: Final[int] = 6
"""
Maximum number of guess attempts allowed per daily word puzzle.
Type: Final[int] - Immutable to prevent accidental modification
"""

# Feud rules
MAX_STRIKES: Final[int] = 3

# Reward codes: no 0/O or 1/I so codes survive being read aloud at the till
REWARD_PREFIX: Final[str] = "WT"
REWARD_ALPHABET: Final[str] = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
REWARD_BODY_LENGTH: Final[int] = 8

# Spin prizes are printed PREFIX-XXXX-XXXX
PRIZE_CODE_PREFIXES: Final[Dict[str, str]] = {"discount": "SAVE", "item": "GIFT"}
PRIZE_CODE_GROUP: Final[int] = 4
PRIZE_TYPES: Final[Tuple[str, ...]] = ("discount", "item", "none")

# Full turns the wheel makes before settling; only the animation uses it
SPIN_MIN_TURNS: Final[int] = 5

# Daily lock keys
WORDLE_GAME_KEY: Final[str] = "wordle_state"
FEUD_GAME_KEY: Final[str] = "search_game_state"
SPIN_GAME_KEY: Final[str] = "spin_state"
STORAGE_NAMESPACE: Final[str] = "cafe"

# Audio cues: (frequency Hz, duration s, waveform)
TONES: Final[Dict[str, Tuple[float, float, str]]] = {
    "correct": (500.0, 0.3, "sine"),
    "wrong": (200.0, 0.3, "sawtooth"),
    "reveal": (300.0, 0.4, "triangle"),
    "win": (880.0, 0.5, "sine"),
    "lose": (150.0, 0.5, "sawtooth"),
    "error": (120.0, 0.15, "square"),
}

_CONFIG_DIR = os.path.dirname(os.path.abspath(__file__))


def _load_json(file_name: str):
    json_file_path = os.path.join(_CONFIG_DIR, file_name)
    try:
        with open(json_file_path, 'r', encoding='utf-8') as f:
            return json.load(f)
    except FileNotFoundError:
        raise FileNotFoundError(f"Game content file not found: {json_file_path}")


def _load_word_list() -> List[str]:
    """
    Load the curated cafe word list from words.json.

    Returns:
        List[str]: List of uppercase 5-letter words

    Raises:
        FileNotFoundError: If words.json file is not found
        ValueError: If word list is empty or contains invalid words
    """
    word_list = _load_json('words.json')

    if not isinstance(word_list, list):
        raise ValueError("JSON file must contain an array of words")

    if not word_list:
        raise ValueError("Word list cannot be empty")

    uppercase_words = [word.upper() for word in word_list]

    for word in uppercase_words:
        if len(word) != WORD_LENGTH:
            raise ValueError(f"Word '{word}' is not {WORD_LENGTH} characters long")
        if not word.isalpha():
            raise ValueError(f"Word '{word}' contains non-alphabetic characters")

    return uppercase_words


def _load_feud_questions() -> Tuple[FeudQuestion, ...]:
    raw_questions = _load_json('feud_questions.json')
    if not isinstance(raw_questions, list) or not raw_questions:
        raise ValueError("Feud question bank must be a non-empty array")
    return tuple(FeudQuestion.from_dict(item) for item in raw_questions)


def _load_spin_segments() -> Tuple[SpinSegment, ...]:
    raw_segments = _load_json('spin_segments.json')
    if not isinstance(raw_segments, list) or not raw_segments:
        raise ValueError("Spin wheel must be a non-empty array")
    return tuple(SpinSegment.from_dict(item) for item in raw_segments)


# Curated content loaded from JSON files
WORD_LIST: Final[List[str]] = _load_word_list()
FEUD_QUESTIONS: Final[Tuple[FeudQuestion, ...]] = _load_feud_questions()
SPIN_SEGMENTS: Final[Tuple[SpinSegment, ...]] = _load_spin_segments()


def validate_word_list_integrity(word_list: List[str] = None) -> bool:
    """
    Validates the integrity and consistency of the word database.

    This function performs validation to ensure:
    1. Length validation: All words must be exactly 5 characters
    2. Character validation: Only alphabetic characters allowed
    3. Uniqueness validation: No duplicate entries
    4. Format validation: Consistent uppercase formatting

    Returns:
        bool: True if word list passes all validation checks

    Raises:
        ValueError: If any validation check fails with detailed error message
    """
    words = WORD_LIST if word_list is None else word_list
    if not words:
        raise ValueError("Word list cannot be empty")

    for index, word in enumerate(words):
        if len(word) != WORD_LENGTH:
            raise ValueError(f"Word at index {index} '{word}' is not {WORD_LENGTH} characters long")

        if not word.isalpha():
            raise ValueError(f"Word at index {index} '{word}' contains non-alphabetic characters")

        if not word.isupper():
            raise ValueError(f"Word at index {index} '{word}' is not in uppercase format")

    if len(words) != len(set(words)):
        duplicates = sorted({word for word in words if words.count(word) > 1})
        raise ValueError(f"Duplicate words found in word list: {duplicates}")

    return True


def validate_feud_questions(questions: Tuple[FeudQuestion, ...] = None) -> bool:
    """
    Checks every question has answers, ranks in order and unique answer texts.

    Raises:
        ValueError: On the first problem found
    """
    bank = FEUD_QUESTIONS if questions is None else questions
    if not bank:
        raise ValueError("Feud question bank cannot be empty")

    for question in bank:
        if not question.answers:
            raise ValueError(f"Question {question.question_id} has no answers")

        texts = [answer.text.strip().casefold() for answer in question.answers]
        if len(texts) != len(set(texts)):
            raise ValueError(f"Question {question.question_id} has duplicate answers")

        ranks = [answer.rank for answer in question.answers]
        if ranks != sorted(ranks):
            raise ValueError(f"Question {question.question_id} answers are not in rank order")

        if any(answer.points < 0 for answer in question.answers):
            raise ValueError(f"Question {question.question_id} has negative points")

    return True


def validate_spin_segments(segments: Tuple[SpinSegment, ...] = None) -> bool:
    """
    Checks the prize wheel: unique ids, known prize types, discounts within 1-100.

    Raises:
        ValueError: On the first problem found
    """
    wheel = SPIN_SEGMENTS if segments is None else segments
    if not wheel:
        raise ValueError("Spin wheel cannot be empty")
    if 360 % len(wheel) != 0:
        raise ValueError(f"Spin wheel of {len(wheel)} segments does not divide 360 degrees evenly")

    ids = [segment.segment_id for segment in wheel]
    if len(ids) != len(set(ids)):
        raise ValueError("Spin wheel has duplicate segment ids")

    for segment in wheel:
        if segment.prize_type not in PRIZE_TYPES:
            raise ValueError(f"Segment {segment.segment_id} has unknown prize type '{segment.prize_type}'")
        if segment.prize_type == "discount" and not (isinstance(segment.value, int) and 0 < segment.value <= 100):
            raise ValueError(f"Segment {segment.segment_id} discount must be 1-100 percent")

    return True


def get_word_statistics() -> dict:
    """
    Analyzes word list and returns statistical information for game balancing.

    Returns:
        dict: Statistical analysis including:
            - total_words: Number of words in database
            - avg_vowel_count: Average vowels per word
            - letter_frequency: Distribution of letters across all words
            - most_common_letters: Top five letters by frequency
    """
    if not WORD_LIST:
        return {"error": "Word list is empty"}

    vowels = set('AEIOU')
    total_vowels = sum(len([char for char in word if char in vowels]) for word in WORD_LIST)

    letter_frequency = {}
    for word in WORD_LIST:
        for char in word:
            letter_frequency[char] = letter_frequency.get(char, 0) + 1

    return {
        "total_words": len(WORD_LIST),
        "avg_vowel_count": round(total_vowels / len(WORD_LIST), 2),
        "letter_frequency": letter_frequency,
        "most_common_letters": sorted(letter_frequency.items(), key=lambda x: x[1], reverse=True)[:5]
    }


if __name__ == "__main__":

    try:
        validate_word_list_integrity()
        validate_feud_questions()
        validate_spin_segments()
        print(" Content validation passed")

        stats = get_word_statistics()
        print(f" Word statistics: {stats}")
    except ValueError as config_error:
        print(f" Configuration validation failed: {config_error}")
        exit(1)
