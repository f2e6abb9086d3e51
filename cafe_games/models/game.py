"""
Game Data Models

Contains all game-related data structures and enums.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Set, Tuple, Union


class LetterStatus(Enum):
    """Per-letter verdict. UNUSED only appears in keyboard aggregation."""
    CORRECT = "correct"
    PRESENT = "present"
    ABSENT = "absent"
    UNUSED = "unused"


# Higher rank wins when folding verdicts for the keyboard
LETTER_STATUS_RANK: Dict[LetterStatus, int] = {
    LetterStatus.UNUSED: 0,
    LetterStatus.ABSENT: 1,
    LetterStatus.PRESENT: 2,
    LetterStatus.CORRECT: 3,
}


class WordPhase(Enum):
    PLAYING = "playing"
    WON = "won"
    LOST = "lost"


class FeudPhase(Enum):
    PLAYING = "playing"
    ROUND_OVER = "roundOver"
    SESSION_COMPLETE = "gameComplete"


class SpinPhase(Enum):
    READY = "ready"
    SPUN = "spun"


class ErrorKind(Enum):
    """Recoverable error conditions surfaced to the player."""
    INVALID_GUESS_LENGTH = "invalid_guess_length"
    DUPLICATE_ANSWER = "duplicate_answer"
    STORAGE_UNAVAILABLE = "storage_unavailable"
    EMPTY_GUESS = "empty_guess"
    GAME_OVER = "game_over"
    ROUND_NOT_ACTIVE = "round_not_active"
    ROUND_NOT_OVER = "round_not_over"
    ALREADY_SPUN = "already_spun"


@dataclass(frozen=True)
class GuessRecord:
    """A submitted guess and the verdicts computed when it was submitted."""
    word: str
    verdicts: Tuple[LetterStatus, ...]

    def to_dict(self) -> Dict:
        return {
            "word": self.word,
            "verdicts": [status.value for status in self.verdicts],
        }


@dataclass
class WordRoundState:
    """Server-side state of today's word puzzle for one session."""
    solution: str
    guesses: List[GuessRecord] = field(default_factory=list)
    phase: WordPhase = WordPhase.PLAYING
    reward_code: Optional[str] = None


@dataclass(frozen=True)
class FeudAnswer:
    text: str
    rank: int
    points: int


@dataclass(frozen=True)
class FeudQuestion:
    """One search prompt and its ranked answers."""
    question_id: int
    prompt: str
    answers: Tuple[FeudAnswer, ...]

    @classmethod
    def from_dict(cls, data: Dict) -> "FeudQuestion":
        answers = tuple(
            FeudAnswer(text=a["text"], rank=int(a["rank"]), points=int(a["points"]))
            for a in data["answers"]
        )
        return cls(question_id=int(data["id"]), prompt=data["query"], answers=answers)


@dataclass
class FeudRoundState:
    """Progress through today's feud session."""
    question_index: int = 0
    revealed: Set[int] = field(default_factory=set)
    strikes: int = 0
    score: int = 0
    phase: FeudPhase = FeudPhase.PLAYING


@dataclass(frozen=True)
class SpinSegment:
    """One slice of the prize wheel. value is a percentage for discounts, an item name for items."""
    segment_id: int
    label: str
    prize_type: str
    value: Optional[Union[int, str]] = None

    @property
    def is_prize(self) -> bool:
        return self.prize_type != "none"

    @classmethod
    def from_dict(cls, data: Dict) -> "SpinSegment":
        return cls(segment_id=int(data["id"]), label=data["label"],
                   prize_type=data["type"], value=data.get("value"))

    def to_dict(self) -> Dict:
        return {"id": self.segment_id, "label": self.label, "type": self.prize_type, "value": self.value}


@dataclass
class SpinState:
    """Today's spin for one session."""
    phase: SpinPhase = SpinPhase.READY
    degrees: Optional[int] = None
    segment_index: Optional[int] = None
    prize_code: Optional[str] = None


@dataclass
class MoveResult:
    """
    Outcome of a single player action against a state machine.

    Player mistakes are reported here rather than raised, so the caller
    can show a transient message and carry on.
    """
    accepted: bool
    error_kind: Optional[ErrorKind] = None
    message: str = ""
    verdicts: Optional[Tuple[LetterStatus, ...]] = None
    answer_index: Optional[int] = None
    points: int = 0
    events: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict:
        data = {
            "accepted": self.accepted,
            "error_kind": self.error_kind.value if self.error_kind else None,
            "message": self.message,
            "events": list(self.events),
        }
        if self.verdicts is not None:
            data["verdicts"] = [status.value for status in self.verdicts]
        if self.answer_index is not None:
            data["answer_index"] = self.answer_index
            data["points"] = self.points
        return data
