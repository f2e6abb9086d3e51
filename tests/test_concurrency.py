import sys
import threading
from functools import partial

import pytest

from cafe_games.config.game_settings import MAX_GUESSES, WORDLE_GAME_KEY
from cafe_games.models.game import ErrorKind, FeudPhase, WordPhase
from cafe_games.services.daily_lock import DailyLockStore, lock_key
from cafe_games.services.feud_game import FeudGameService
from cafe_games.services.word_game import WordGameService

MISSES = ["MOCHA", "BAGEL", "DONUT", "CREAM", "SUGAR"]
TRIALS = 200


@pytest.fixture
def fast_switching():
    """Make the interpreter switch threads as often as it can."""
    previous = sys.getswitchinterval()
    sys.setswitchinterval(1e-6)
    try:
        yield
    finally:
        sys.setswitchinterval(previous)


def _race(*calls):
    """Release every call at once and return their results in call order."""
    barrier = threading.Barrier(len(calls))
    results = [None] * len(calls)
    errors = []

    def run(index, call):
        barrier.wait()
        try:
            results[index] = call()
        except Exception as e:  # surfaced by the assert below
            errors.append(e)

    threads = [threading.Thread(target=run, args=(i, call)) for i, call in enumerate(calls)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    assert errors == []
    return results


def test_last_turn_accepts_exactly_one_guess(fast_switching, store, platform, clock):
    word_game = WordGameService(DailyLockStore(store, clock), platform, word_list=["LATTE"])

    for trial in range(TRIALS):
        session_id = f"race-{trial}"
        for word in MISSES:
            word_game.submit_guess(session_id, word)

        outcomes = _race(
            partial(word_game.submit_guess, session_id, "LATTE"),
            partial(word_game.submit_guess, session_id, "LATTE"),
            partial(word_game.submit_guess, session_id, "FRESH"),
        )

        accepted = [result for _, result in outcomes if result.accepted]
        assert len(accepted) == 1
        for _, result in outcomes:
            if not result.accepted:
                assert result.error_kind == ErrorKind.GAME_OVER

        word_round = word_game.get_round(session_id)
        words = word_round.guess_words
        assert len(words) == MAX_GUESSES
        assert (word_round.phase == WordPhase.WON) == (words[-1] == "LATTE")
        assert (word_round.state.reward_code is not None) == (word_round.phase == WordPhase.WON)

        record = store.get(lock_key(session_id, WORDLE_GAME_KEY))
        assert record == word_round.to_record(clock())


def test_first_visit_creates_one_round(fast_switching, store, platform, clock):
    word_game = WordGameService(DailyLockStore(store, clock), platform)

    for trial in range(TRIALS):
        session_id = f"first-{trial}"
        rounds = _race(*[partial(word_game.get_round, session_id)] * 4)
        assert all(word_round is rounds[0] for word_round in rounds)

    assert word_game.active_games == TRIALS


def test_third_strike_is_counted_once(fast_switching, store, platform, clock):
    feud_game = FeudGameService(DailyLockStore(store, clock), platform)

    for trial in range(TRIALS):
        session_id = f"feud-{trial}"
        feud_game.submit_guess(session_id, "xyzzy one")
        feud_game.submit_guess(session_id, "xyzzy two")

        outcomes = _race(*[partial(feud_game.submit_guess, session_id, f"xyzzy {n}") for n in range(3)])

        accepted = [result for _, result in outcomes if result.accepted]
        assert len(accepted) == 1
        feud = feud_game.get_round(session_id)
        assert feud.state.strikes == 3
        assert feud.phase == FeudPhase.ROUND_OVER


def test_sweep_runs_while_sessions_arrive(fast_switching, services, clock):
    # yesterday's games give the sweep something to evict
    for n in range(50):
        services.word_game.get_round(f"old-{n}")
    clock.advance()

    stop = threading.Event()
    errors = []

    def sweep():
        while not stop.is_set():
            try:
                services.sweep_stale_records()
            except Exception as e:
                errors.append(e)
                return

    sweeper = threading.Thread(target=sweep)
    sweeper.start()
    try:
        for n in range(300):
            services.word_game.get_round(f"new-{n}")
            services.feud_game.get_round(f"new-{n}")
    finally:
        stop.set()
        sweeper.join()

    assert errors == []
    services.sweep_stale_records()
    assert services.word_game.active_games == 300
    assert services.feud_game.active_games == 300


def test_concurrent_failures_swap_store_once(fast_switching, failing_store, clock):
    locks = DailyLockStore(failing_store, clock)
    keys = [f"k{n}" for n in range(8)]

    _race(*[partial(locks.save, key, {"n": n}) for n, key in enumerate(keys)])

    assert not locks.persistent
    for n, key in enumerate(keys):
        assert locks.load(key)["n"] == n
