"""
Spin Game Service

The daily prize wheel: one spin per session per day. The server picks the
landing angle, so the browser only animates to the result it is given.
"""

import logging
from datetime import date
from typing import Callable, Dict, Optional, Sequence, Tuple

from ..config.game_settings import (
    PRIZE_CODE_GROUP,
    PRIZE_CODE_PREFIXES,
    SPIN_GAME_KEY,
    SPIN_MIN_TURNS,
    SPIN_SEGMENTS,
)
from ..models.game import ErrorKind, MoveResult, SpinPhase, SpinSegment, SpinState
from .daily_lock import DailyLockStore, lock_key
from .platform import Platform
from .reward_codes import generate_reward_code
from .session_games import SessionGameService

logger = logging.getLogger(__name__)


def secure_randbelow(platform: Platform, upper: int) -> int:
    """Uniform integer in [0, upper) from the platform CSPRNG, by rejection sampling."""
    if not 0 < upper <= 0x10000:
        raise ValueError("upper must be in 1..65536")
    limit = 0x10000 - 0x10000 % upper
    while True:
        value = int.from_bytes(platform.secure_random_bytes(2), "big")
        if value < limit:
            return value % upper


def segment_at_pointer(degrees: int, segment_count: int) -> int:
    """
    Index of the segment under the top pointer after a clockwise turn.

    Segment i spans [i, i + 1) * 360 / n degrees clockwise from the pointer
    at rest, so turning the wheel by `degrees` brings angle (360 - degrees)
    under the pointer.
    """
    angle = (360 - degrees % 360) % 360
    return angle * segment_count // 360


class SpinRound:
    """ready -> spun, once."""

    def __init__(self, segments: Sequence[SpinSegment], state: SpinState = None):
        if not segments:
            raise ValueError("At least one spin segment is required")
        self.segments = tuple(segments)
        self.state = state or SpinState()

    @classmethod
    def from_record(cls, record: Dict, segments: Sequence[SpinSegment]) -> "SpinRound":
        spin = cls(segments)
        if not record.get("spun"):
            return spin

        degrees = int(record.get("degrees", 0)) % 360
        index = next((i for i, s in enumerate(spin.segments) if s.segment_id == record.get("segmentId")), None)
        if index is None:
            index = segment_at_pointer(degrees, len(spin.segments))

        spin.state.phase = SpinPhase.SPUN
        spin.state.degrees = degrees
        spin.state.segment_index = index
        if spin.segments[index].is_prize:
            spin.state.prize_code = record.get("couponCode") or None
        return spin

    @property
    def phase(self) -> SpinPhase:
        return self.state.phase

    @property
    def segment(self) -> Optional[SpinSegment]:
        if self.state.segment_index is None:
            return None
        return self.segments[self.state.segment_index]

    def spin(self, degrees: int, code_generator: Callable[[str], str]) -> MoveResult:
        """
        Settle the wheel at `degrees` and award the prize under the pointer.

        code_generator receives the prize type and returns its coupon code.
        """
        if self.state.phase == SpinPhase.SPUN:
            return MoveResult(accepted=False, error_kind=ErrorKind.ALREADY_SPUN,
                              message="You've already spun today. Come back tomorrow!")

        self.state.degrees = degrees % 360
        self.state.segment_index = segment_at_pointer(self.state.degrees, len(self.segments))
        self.state.phase = SpinPhase.SPUN

        segment = self.segment
        if segment.is_prize:
            self.state.prize_code = code_generator(segment.prize_type)
            events = ["spun", "prize_won"]
        else:
            events = ["spun", "no_prize"]
        return MoveResult(accepted=True, answer_index=self.state.segment_index, events=events)

    def to_record(self, day: date) -> Dict:
        record = {"date": day.isoformat(), "spun": self.state.phase == SpinPhase.SPUN}
        if self.state.phase == SpinPhase.SPUN:
            record["degrees"] = self.state.degrees
            record["segmentId"] = self.segment.segment_id
        if self.state.prize_code is not None:
            record["couponCode"] = self.state.prize_code
        return record

    def public_view(self) -> Dict:
        spun = self.state.phase == SpinPhase.SPUN
        return {
            "spin_state": self.state.phase.value,
            "segments": [segment.to_dict() for segment in self.segments],
            "segment_index": self.state.segment_index,
            "prize": self.segment.to_dict() if spun else None,
            # total turn for the wheel animation, landing on the same angle
            "rotation": SPIN_MIN_TURNS * 360 + self.state.degrees if spun else None,
            "coupon_code": self.state.prize_code,
        }


class SpinGameService(SessionGameService):
    """Daily prize wheel sessions."""

    game_key = SPIN_GAME_KEY

    def __init__(self, locks: DailyLockStore, platform: Platform, segments: Sequence[SpinSegment] = None):
        super().__init__(locks, platform)
        self.segments = tuple(segments or SPIN_SEGMENTS)

    def _prize_code(self, prize_type: str) -> str:
        return generate_reward_code(self.platform, PRIZE_CODE_PREFIXES[prize_type], PRIZE_CODE_GROUP)

    def get_round(self, session_id: str) -> SpinRound:
        with self.locked(session_id):
            today = self.locks.clock()
            spin = self._cached(session_id, today.isoformat())
            if spin is not None:
                return spin

            record = self.locks.load(lock_key(session_id, SPIN_GAME_KEY))
            spin = SpinRound.from_record(record, self.segments) if record is not None else SpinRound(self.segments)
            self._remember(session_id, today.isoformat(), spin)
            return spin

    def spin(self, session_id: str) -> Tuple[SpinRound, MoveResult]:
        with self.locked(session_id):
            spin = self.get_round(session_id)
            degrees = secure_randbelow(self.platform, 360) if spin.phase == SpinPhase.READY else 0
            result = spin.spin(degrees, self._prize_code)
            if result.accepted:
                self._save(session_id, spin)

        if not result.accepted:
            self.platform.play_cue("error", session_id=session_id)
        elif "prize_won" in result.events:
            logger.info("Session %s won %s on the daily spin", session_id, spin.segment.label)
            self.platform.play_cue("win", session_id=session_id)
        else:
            self.platform.play_cue("lose", session_id=session_id)
        return spin, result
