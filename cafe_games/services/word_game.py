"""
Word Game Service

Contains the daily word puzzle: the per-round state machine and the service
that ties it to sessions, the daily lock and the reward generator.
"""

import logging
import re
from datetime import date
from typing import Callable, Dict, List, Optional, Tuple

from ..config.game_settings import MAX_GUESSES, WORD_LENGTH, WORD_LIST, WORDLE_GAME_KEY
from ..models.game import ErrorKind, GuessRecord, MoveResult, WordPhase, WordRoundState
from .daily_lock import DailyLockStore, lock_key
from .evaluator import evaluate_guess, keyboard_status
from .platform import Platform
from .puzzle_selector import select_daily_word
from .reward_codes import generate_reward_code
from .session_games import SessionGameService

logger = logging.getLogger(__name__)

_LETTERS = re.compile(r'^[A-Z]+$')


class WordRound:
    """
    State machine for one day's word puzzle.

    playing -> won and playing -> lost are the only transitions; both end
    states are frozen.
    """

    def __init__(self, state: WordRoundState, reward_generator: Callable[[], str]):
        self.state = state
        self._reward_generator = reward_generator

    @classmethod
    def new(cls, solution: str, reward_generator: Callable[[], str]) -> "WordRound":
        return cls(WordRoundState(solution=solution.upper()), reward_generator)

    @classmethod
    def from_record(cls, record: Dict, reward_generator: Callable[[], str]) -> "WordRound":
        """
        Rebuild a round from its persisted record.

        The phase is derived from the guesses rather than trusted, and a
        stored coupon is kept as-is; it is never regenerated here.
        """
        solution = record["solution"].upper()
        words = [g.upper() for g in record.get("guesses", [])
                 if isinstance(g, str) and len(g) == len(solution) and _LETTERS.match(g.upper())][:MAX_GUESSES]
        guesses = [GuessRecord(word=w, verdicts=tuple(evaluate_guess(w, solution))) for w in words]

        if solution in words:
            phase = WordPhase.WON
        elif len(words) >= MAX_GUESSES:
            phase = WordPhase.LOST
        else:
            phase = WordPhase.PLAYING

        stored_phase = record.get("gameState")
        if stored_phase and stored_phase != phase.value:
            logger.warning("Stored word phase %s disagrees with guesses, using %s", stored_phase, phase.value)

        reward_code = record.get("couponCode") or None
        if phase != WordPhase.WON:
            reward_code = None

        state = WordRoundState(solution=solution, guesses=guesses, phase=phase, reward_code=reward_code)
        return cls(state, reward_generator)

    @property
    def phase(self) -> WordPhase:
        return self.state.phase

    @property
    def is_over(self) -> bool:
        return self.state.phase != WordPhase.PLAYING

    @property
    def guess_words(self) -> List[str]:
        return [g.word for g in self.state.guesses]

    def validate_guess(self, guess: str) -> Tuple[Optional[ErrorKind], str]:
        """
        Validates a normalized guess against the current round.

        Returns:
            Tuple of (error_kind, error_message); error_kind is None when valid
        """
        if self.is_over:
            return ErrorKind.GAME_OVER, "Game is already over"

        if len(guess) < WORD_LENGTH:
            return ErrorKind.INVALID_GUESS_LENGTH, "Not enough letters"

        if len(guess) != WORD_LENGTH or not _LETTERS.match(guess):
            return ErrorKind.INVALID_GUESS_LENGTH, f"Guess must be exactly {WORD_LENGTH} letters"

        return None, ""

    def submit_guess(self, raw_guess: str) -> MoveResult:
        """
        Processes a guess and updates round state.

        Verdicts are computed here, once, and stored with the guess.
        """
        guess = (raw_guess or "").strip().upper()
        error_kind, message = self.validate_guess(guess)
        if error_kind is not None:
            return MoveResult(accepted=False, error_kind=error_kind, message=message)

        verdicts = tuple(evaluate_guess(guess, self.state.solution))
        self.state.guesses.append(GuessRecord(word=guess, verdicts=verdicts))
        events = ["guess_accepted"]

        if guess == self.state.solution:
            self.state.phase = WordPhase.WON
            if self.state.reward_code is None:
                self.state.reward_code = self._reward_generator()
            events.append("won")
        elif len(self.state.guesses) >= MAX_GUESSES:
            self.state.phase = WordPhase.LOST
            events.append("lost")

        return MoveResult(accepted=True, verdicts=verdicts, events=events)

    def keyboard(self) -> Dict[str, str]:
        return keyboard_status(self.guess_words, self.state.solution)

    def to_record(self, day: date) -> Dict:
        record = {
            "date": day.isoformat(),
            "solution": self.state.solution,
            "guesses": self.guess_words,
            "gameState": self.state.phase.value,
        }
        if self.state.reward_code is not None:
            record["couponCode"] = self.state.reward_code
        return record

    def public_view(self) -> Dict:
        """Client-facing state. The solution stays hidden until the round ends."""
        return {
            "guesses": [g.to_dict() for g in self.state.guesses],
            "guesses_used": len(self.state.guesses),
            "max_guesses": MAX_GUESSES,
            "word_length": WORD_LENGTH,
            "game_state": self.state.phase.value,
            "game_over": self.is_over,
            "won": self.state.phase == WordPhase.WON,
            "letter_status": self.keyboard(),
            "answer": self.state.solution if self.is_over else None,
            "coupon_code": self.state.reward_code,
        }


class WordGameService(SessionGameService):
    """
    Daily word puzzle sessions.

    This class handles:
    - Deterministic word selection per (day, session)
    - Restoring today's round from the daily lock, or starting a fresh one
    - Writing every accepted guess straight through to the lock store
    - Granting exactly one reward code per winning round
    """

    game_key = WORDLE_GAME_KEY

    def __init__(self, locks: DailyLockStore, platform: Platform, word_list: List[str] = None):
        super().__init__(locks, platform)
        self.word_list = list(word_list or WORD_LIST)

    def _new_reward_code(self) -> str:
        return generate_reward_code(self.platform)

    def get_round(self, session_id: str) -> WordRound:
        """
        Returns today's round for the session, restoring it if one was saved.
        """
        with self.locked(session_id):
            today = self.locks.clock()
            word_round = self._cached(session_id, today.isoformat())
            if word_round is not None:
                return word_round

            key = lock_key(session_id, WORDLE_GAME_KEY)
            record = self.locks.load(key)
            if record is not None:
                word_round = WordRound.from_record(record, self._new_reward_code)
                logger.debug("Restored word round for session %s (%s)", session_id, word_round.phase.value)
            else:
                solution = select_daily_word(today, session_id, self.word_list)
                word_round = WordRound.new(solution, self._new_reward_code)
                self.locks.save(key, word_round.to_record(today))

            self._remember(session_id, today.isoformat(), word_round)
            return word_round

    def submit_guess(self, session_id: str, guess: str) -> Tuple[WordRound, MoveResult]:
        with self.locked(session_id):
            word_round = self.get_round(session_id)
            result = word_round.submit_guess(guess)

            if not result.accepted:
                if result.error_kind == ErrorKind.INVALID_GUESS_LENGTH:
                    self.platform.play_cue("error", session_id=session_id)
                return word_round, result

            self._save(session_id, word_round)

        if "won" in result.events:
            logger.info("Session %s solved the daily word in %d guesses",
                        session_id, len(word_round.state.guesses))
            self.platform.play_cue("win", session_id=session_id)
        elif "lost" in result.events:
            self.platform.play_cue("lose", session_id=session_id)
        else:
            self.platform.play_cue("reveal", session_id=session_id)

        return word_round, result
