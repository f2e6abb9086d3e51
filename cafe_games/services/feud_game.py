"""
Feud Game Service

"Guess the top answers" rounds: each round shows a search prompt and the
player names the most popular completions before collecting three strikes.
"""

import logging
from datetime import date
from typing import Dict, Optional, Sequence, Tuple

from ..config.game_settings import FEUD_GAME_KEY, FEUD_QUESTIONS, MAX_STRIKES
from ..models.game import ErrorKind, FeudPhase, FeudQuestion, FeudRoundState, MoveResult
from .daily_lock import DailyLockStore, lock_key
from .platform import Platform
from .session_games import SessionGameService

logger = logging.getLogger(__name__)


def normalize_answer(text: str) -> str:
    """Trim, collapse inner whitespace and case-fold."""
    return " ".join((text or "").split()).casefold()


class FeudRound:
    """
    State machine for a day's feud session.

    playing -> roundOver -> playing (next question) or gameComplete.
    """

    def __init__(self, questions: Sequence[FeudQuestion], state: FeudRoundState = None):
        if not questions:
            raise ValueError("At least one feud question is required")
        self.questions = tuple(questions)
        self.state = state or FeudRoundState()

    @classmethod
    def from_record(cls, record: Dict, questions: Sequence[FeudQuestion]) -> "FeudRound":
        """
        Rebuild a session from its persisted record, repairing anything out of range.
        """
        feud = cls(questions)
        state = feud.state
        state.score = max(0, int(record.get("score", 0)))

        if record.get("gameStatus") == FeudPhase.SESSION_COMPLETE.value:
            state.phase = FeudPhase.SESSION_COMPLETE
            state.question_index = len(feud.questions) - 1
            return feud

        index = int(record.get("questionIndex", 0))
        if index >= len(feud.questions):
            state.phase = FeudPhase.SESSION_COMPLETE
            state.question_index = len(feud.questions) - 1
            return feud

        state.question_index = max(0, index)
        answer_count = len(feud.current_question.answers)
        state.revealed = {int(i) for i in record.get("revealed", []) if 0 <= int(i) < answer_count}
        state.strikes = min(max(0, int(record.get("strikes", 0))), MAX_STRIKES)

        if state.strikes >= MAX_STRIKES:
            state.revealed = set(range(answer_count))
        if state.strikes >= MAX_STRIKES or len(state.revealed) == answer_count:
            state.phase = FeudPhase.ROUND_OVER
        else:
            state.phase = FeudPhase.PLAYING
        return feud

    @property
    def current_question(self) -> FeudQuestion:
        return self.questions[self.state.question_index]

    @property
    def phase(self) -> FeudPhase:
        return self.state.phase

    def _end_round(self, events) -> None:
        self.state.phase = FeudPhase.ROUND_OVER
        self.state.revealed = set(range(len(self.current_question.answers)))
        events.append("round_over")

    def submit_guess(self, raw_guess: str) -> MoveResult:
        guess = normalize_answer(raw_guess)
        if not guess:
            return MoveResult(accepted=False, error_kind=ErrorKind.EMPTY_GUESS, message="Type an answer first")

        if self.state.phase != FeudPhase.PLAYING:
            return MoveResult(accepted=False, error_kind=ErrorKind.ROUND_NOT_ACTIVE,
                              message="This round is not accepting answers")

        match_index: Optional[int] = None
        for index, answer in enumerate(self.current_question.answers):
            if normalize_answer(answer.text) == guess:
                match_index = index
                break

        if match_index is not None and match_index in self.state.revealed:
            return MoveResult(accepted=False, error_kind=ErrorKind.DUPLICATE_ANSWER, message="Already guessed!")

        events = []
        if match_index is not None:
            points = self.current_question.answers[match_index].points
            self.state.revealed.add(match_index)
            self.state.score += points
            events.append("answer_revealed")
            if len(self.state.revealed) == len(self.current_question.answers):
                self._end_round(events)
            return MoveResult(accepted=True, answer_index=match_index, points=points, events=events)

        self.state.strikes += 1
        events.append("strike")
        if self.state.strikes >= MAX_STRIKES:
            self._end_round(events)
        return MoveResult(accepted=True, message="Not on the board", events=events)

    def advance(self) -> MoveResult:
        """Move on from a finished round to the next question or to the end of the session."""
        if self.state.phase != FeudPhase.ROUND_OVER:
            return MoveResult(accepted=False, error_kind=ErrorKind.ROUND_NOT_OVER,
                              message="Finish the current round first")

        if self.state.question_index < len(self.questions) - 1:
            self.state.question_index += 1
            self.state.strikes = 0
            self.state.revealed = set()
            self.state.phase = FeudPhase.PLAYING
            return MoveResult(accepted=True, events=["next_round"])

        self.state.phase = FeudPhase.SESSION_COMPLETE
        return MoveResult(accepted=True, events=["session_complete"])

    def to_record(self, day: date) -> Dict:
        return {
            "date": day.isoformat(),
            "score": self.state.score,
            "gameStatus": self.state.phase.value,
            "questionIndex": self.state.question_index,
            "revealed": sorted(self.state.revealed),
            "strikes": self.state.strikes,
        }

    def public_view(self) -> Dict:
        view = {
            "game_status": self.state.phase.value,
            "score": self.state.score,
            "strikes": self.state.strikes,
            "max_strikes": MAX_STRIKES,
            "round": self.state.question_index + 1,
            "total_rounds": len(self.questions),
        }
        if self.state.phase == FeudPhase.SESSION_COMPLETE:
            view["question"] = None
            return view

        question = self.current_question
        answers = []
        for index, answer in enumerate(question.answers):
            if index in self.state.revealed:
                answers.append({"rank": answer.rank, "text": answer.text, "points": answer.points, "revealed": True})
            else:
                answers.append({"rank": answer.rank, "revealed": False})
        view["question"] = {"prompt": question.prompt, "answers": answers}
        return view


class FeudGameService(SessionGameService):
    """
    Daily feud sessions keyed by browsing session.

    Every accepted move is saved immediately; a completed session is kept
    for the rest of the day so it cannot be replayed.
    """

    game_key = FEUD_GAME_KEY

    def __init__(self, locks: DailyLockStore, platform: Platform, questions: Sequence[FeudQuestion] = None):
        super().__init__(locks, platform)
        self.questions = tuple(questions or FEUD_QUESTIONS)

    def get_round(self, session_id: str) -> FeudRound:
        with self.locked(session_id):
            today = self.locks.clock()
            feud = self._cached(session_id, today.isoformat())
            if feud is not None:
                return feud

            key = lock_key(session_id, FEUD_GAME_KEY)
            record = self.locks.load(key)
            if record is not None:
                feud = FeudRound.from_record(record, self.questions)
            else:
                feud = FeudRound(self.questions)
                self.locks.save(key, feud.to_record(today))

            self._remember(session_id, today.isoformat(), feud)
            return feud

    def submit_guess(self, session_id: str, guess: str) -> Tuple[FeudRound, MoveResult]:
        with self.locked(session_id):
            feud = self.get_round(session_id)
            result = feud.submit_guess(guess)
            if result.accepted:
                self._save(session_id, feud)

        if result.error_kind == ErrorKind.DUPLICATE_ANSWER:
            self.platform.play_cue("error", session_id=session_id)
        if not result.accepted:
            return feud, result

        if "answer_revealed" in result.events:
            self.platform.play_cue("correct", session_id=session_id)
        else:
            self.platform.play_cue("wrong", session_id=session_id)
        if "round_over" in result.events:
            self.platform.play_cue("reveal", session_id=session_id)

        return feud, result

    def advance(self, session_id: str) -> Tuple[FeudRound, MoveResult]:
        with self.locked(session_id):
            feud = self.get_round(session_id)
            result = feud.advance()
            if result.accepted:
                self._save(session_id, feud)
        if "session_complete" in result.events:
            logger.info("Session %s finished the feud with %d points", session_id, feud.state.score)
        return feud, result
