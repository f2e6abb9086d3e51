from datetime import date

import pytest

from cafe_games.config import SPIN_SEGMENTS
from cafe_games.config.game_settings import SPIN_GAME_KEY
from cafe_games.models.game import ErrorKind, SpinPhase, SpinSegment
from cafe_games.services.daily_lock import lock_key
from cafe_games.services.game_service import GameServices
from cafe_games.services.reward_codes import is_valid_reward_code
from cafe_games.services.spin_game import SpinRound, secure_randbelow, segment_at_pointer

DAY = date(2026, 3, 14)
SESSION = "s1"


def _fixed_code(prize_type):
    return f"{prize_type.upper()}-CODE"


def _degrees(value):
    return value.to_bytes(2, "big")


@pytest.mark.parametrize("degrees, index", [
    (0, 0), (1, 5), (60, 5), (61, 4), (160, 3), (300, 1), (359, 0), (720, 0),
])
def test_segment_under_pointer(degrees, index):
    assert segment_at_pointer(degrees, 6) == index


def test_randbelow_rejects_the_biased_tail(scripted_platform):
    # 65535 falls in the last partial block of 360 and is drawn again
    platform = scripted_platform(b"\xff\xff" + _degrees(5))
    assert secure_randbelow(platform, 360) == 5
    assert platform.bytes_requested == 4


def test_randbelow_stays_in_range(platform):
    draws = {secure_randbelow(platform, 6) for _ in range(500)}
    assert draws == set(range(6))
    with pytest.raises(ValueError):
        secure_randbelow(platform, 0)


def test_spin_awards_prize_under_pointer():
    spin = SpinRound(SPIN_SEGMENTS)
    result = spin.spin(300, _fixed_code)

    assert result.accepted
    assert result.events == ["spun", "prize_won"]
    assert spin.phase == SpinPhase.SPUN
    assert spin.segment.label == "Free Cookie"
    assert spin.state.prize_code == "ITEM-CODE"

    view = spin.public_view()
    assert view["spin_state"] == "spun"
    assert view["rotation"] == 5 * 360 + 300
    assert view["prize"]["type"] == "item"


def test_try_again_has_no_code():
    spin = SpinRound(SPIN_SEGMENTS)
    result = spin.spin(160, _fixed_code)
    assert result.events == ["spun", "no_prize"]
    assert spin.segment.label == "Try Again"
    assert spin.state.prize_code is None
    assert "couponCode" not in spin.to_record(DAY)


def test_second_spin_is_rejected():
    spin = SpinRound(SPIN_SEGMENTS)
    spin.spin(0, _fixed_code)
    again = spin.spin(120, _fixed_code)

    assert not again.accepted
    assert again.error_kind == ErrorKind.ALREADY_SPUN
    assert spin.state.degrees == 0
    assert spin.state.prize_code == "DISCOUNT-CODE"


def test_record_restores_prize():
    spin = SpinRound(SPIN_SEGMENTS)
    spin.spin(0, _fixed_code)
    record = spin.to_record(DAY)
    assert record == {"date": "2026-03-14", "spun": True, "degrees": 0,
                      "segmentId": 1, "couponCode": "DISCOUNT-CODE"}

    restored = SpinRound.from_record(record, SPIN_SEGMENTS)
    assert restored.phase == SpinPhase.SPUN
    assert restored.segment.label == "10% OFF"
    assert restored.state.prize_code == "DISCOUNT-CODE"


def test_record_without_spin_is_ready():
    spin = SpinRound.from_record({"date": "2026-03-14", "spun": False}, SPIN_SEGMENTS)
    assert spin.phase == SpinPhase.READY
    assert spin.public_view()["prize"] is None


def test_unknown_segment_id_falls_back_to_angle():
    record = {"date": "2026-03-14", "spun": True, "degrees": 300, "segmentId": 99, "couponCode": "X"}
    spin = SpinRound.from_record(record, SPIN_SEGMENTS)
    assert spin.segment.label == "Free Cookie"


def test_empty_wheel_is_rejected():
    with pytest.raises(ValueError):
        SpinRound(())


def test_service_spins_once_per_day(store, scripted_platform, clock):
    platform = scripted_platform(_degrees(300) + bytes(range(8)))
    services = GameServices(store, platform, clock)

    spin, result = services.spin_game.spin(SESSION)
    assert result.accepted
    assert spin.state.prize_code == "GIFT-ABCD-EFGH"
    assert is_valid_reward_code(spin.state.prize_code, "GIFT", 4)
    assert store.get(lock_key(SESSION, SPIN_GAME_KEY))["couponCode"] == "GIFT-ABCD-EFGH"

    _, again = services.spin_game.spin(SESSION)
    assert again.error_kind == ErrorKind.ALREADY_SPUN
    assert platform.cues() == ["win", "error"]

    # a restart still remembers today's spin
    reloaded = GameServices(store, scripted_platform(), clock)
    restored = reloaded.spin_game.get_round(SESSION)
    assert restored.phase == SpinPhase.SPUN
    assert restored.state.prize_code == "GIFT-ABCD-EFGH"
    _, blocked = reloaded.spin_game.spin(SESSION)
    assert blocked.error_kind == ErrorKind.ALREADY_SPUN


def test_discount_codes_use_save_prefix(scripted_platform, store, clock):
    services = GameServices(store, scripted_platform(_degrees(0) + bytes(range(8))), clock)
    spin, _ = services.spin_game.spin(SESSION)
    assert spin.segment.prize_type == "discount"
    assert spin.state.prize_code == "SAVE-ABCD-EFGH"


def test_losing_spin_plays_lose_cue(store, scripted_platform, clock):
    platform = scripted_platform(_degrees(160))
    services = GameServices(store, platform, clock)
    spin, result = services.spin_game.spin(SESSION)
    assert result.events == ["spun", "no_prize"]
    assert platform.cues() == ["lose"]


def test_viewing_the_wheel_does_not_use_the_spin(services, store):
    assert services.spin_game.get_round(SESSION).phase == SpinPhase.READY
    assert store.get(lock_key(SESSION, SPIN_GAME_KEY)) is None


def test_next_day_allows_another_spin(services, clock):
    services.spin_game.spin(SESSION)
    clock.advance()
    spin, result = services.spin_game.spin(SESSION)
    assert result.accepted
    assert spin.phase == SpinPhase.SPUN


def test_custom_wheel():
    wheel = (SpinSegment(1, "Free Tea", "item", "tea"), SpinSegment(2, "Nothing", "none", None))
    spin = SpinRound(wheel)
    spin.spin(90, _fixed_code)
    assert spin.segment.label == "Nothing"
