from datetime import date

import pytest

from cafe_games.config import WORD_LIST
from cafe_games.services.puzzle_selector import (
    new_session_id,
    rolling_hash,
    select_daily_index,
    select_daily_word,
)

DAY = date(2026, 3, 14)


def test_rolling_hash_known_values():
    assert rolling_hash("") == 0
    assert rolling_hash("a") == 97
    assert rolling_hash("ab") == 97 * 31 + 98
    assert rolling_hash("hello") == 99162322


def test_rolling_hash_wraps_to_signed_32_bits():
    assert rolling_hash("polygenelubricants") == -2 ** 31
    for text in ("2026-03-14" + "x" * n for n in range(50)):
        assert -2 ** 31 <= rolling_hash(text) < 2 ** 31


def test_min_int_hash_still_yields_valid_index():
    # abs(-2**31) does not overflow here; the index must stay in range
    assert 0 <= abs(rolling_hash("polygenelubricants")) % 35 < 35


def test_same_day_and_session_is_stable():
    first = select_daily_index(DAY, "session-abc", len(WORD_LIST))
    for _ in range(10):
        assert select_daily_index(DAY, "session-abc", len(WORD_LIST)) == first


def test_index_is_in_range():
    for n in range(200):
        index = select_daily_index(DAY, f"s{n}", 7)
        assert 0 <= index < 7


def test_sessions_and_days_spread_across_list():
    by_session = {select_daily_index(DAY, f"session-{n}", len(WORD_LIST)) for n in range(100)}
    by_day = {select_daily_index(date(2026, 1, d), "fixed", len(WORD_LIST)) for d in range(1, 29)}
    assert len(by_session) > 1
    assert len(by_day) > 1


def test_index_uses_iso_date_prefix():
    expected = abs(rolling_hash("2026-03-14abc")) % 35
    assert select_daily_index(DAY, "abc", 35) == expected


def test_empty_list_is_rejected():
    with pytest.raises(ValueError):
        select_daily_index(DAY, "abc", 0)


def test_select_daily_word_comes_from_list():
    assert select_daily_word(DAY, "abc", WORD_LIST) in WORD_LIST


def test_new_session_id_uses_secure_bytes(scripted_platform):
    platform = scripted_platform(b"\x00" * 16)
    assert new_session_id(platform) == "A" * 22
    assert platform.bytes_requested == 16


def test_new_session_ids_differ(platform):
    ids = {new_session_id(platform) for _ in range(100)}
    assert len(ids) == 100
