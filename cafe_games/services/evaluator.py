"""
Guess Evaluation

Scores a guess against the solution and folds past guesses into the
per-letter keyboard hints.
"""

from collections import Counter
from string import ascii_uppercase
from typing import Dict, Iterable, List, Optional

from ..models.game import LETTER_STATUS_RANK, LetterStatus


def evaluate_guess(guess: str, solution: str) -> List[LetterStatus]:
    """
    Implements the Wordle letter evaluation algorithm.

    Exact matches are settled first and consume their letter, so a repeated
    guess letter is never credited more times than it occurs in the solution.

    Args:
        guess: Uppercase guess
        solution: Uppercase solution of the same length

    Returns:
        List[LetterStatus]: One verdict per position
    """
    if len(guess) != len(solution):
        raise ValueError("Guess and solution must be the same length")

    remaining = Counter(solution)
    verdicts: List[Optional[LetterStatus]] = [None] * len(guess)

    # First pass: exact positions
    for i, (g, s) in enumerate(zip(guess, solution)):
        if g == s:
            verdicts[i] = LetterStatus.CORRECT
            remaining[g] -= 1

    # Second pass: misplaced letters take whatever count is left
    for i, letter in enumerate(guess):
        if verdicts[i] is not None:
            continue
        if remaining[letter] > 0:
            verdicts[i] = LetterStatus.PRESENT
            remaining[letter] -= 1
        else:
            verdicts[i] = LetterStatus.ABSENT

    return verdicts


def merge_letter_status(current: LetterStatus, new: LetterStatus) -> LetterStatus:
    """Status can only progress in priority order: unused < absent < present < correct."""
    if LETTER_STATUS_RANK[new] > LETTER_STATUS_RANK[current]:
        return new
    return current


def status_for(letter: str, past_guesses: Iterable[str], solution: str) -> LetterStatus:
    """Best verdict the letter has received across every past guess."""
    letter = letter.upper()
    status = LetterStatus.UNUSED
    for guess in past_guesses:
        for g, verdict in zip(guess, evaluate_guess(guess, solution)):
            if g == letter:
                status = merge_letter_status(status, verdict)
    return status


def keyboard_status(past_guesses: Iterable[str], solution: str) -> Dict[str, str]:
    """
    Best verdict per keyboard letter across all past guesses.

    Returns:
        Dict[str, str]: Status value for every letter A-Z
    """
    statuses = {letter: LetterStatus.UNUSED for letter in ascii_uppercase}
    for guess in past_guesses:
        for letter, verdict in zip(guess, evaluate_guess(guess, solution)):
            if letter in statuses:
                statuses[letter] = merge_letter_status(statuses[letter], verdict)
    return {letter: status.value for letter, status in statuses.items()}
