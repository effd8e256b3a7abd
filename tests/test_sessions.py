import threading

import pytest
from minesweeper.board import InvalidConfiguration
from minesweeper.game_engine import GameStatus
from minesweeper.sessions import InMemorySessions


def test_start_get_and_replace():
    s = InMemorySessions()
    assert s.get("p1") is None
    state = s.start("p1", 4, 5, 3, rng_seed=1)
    assert state.num_rows == 4 and state.num_cols == 5
    assert s.get("p1") == state
    s.reveal("p1", 0, 0)
    fresh = s.start("p1", 4, 5, 3, rng_seed=1)
    assert fresh.revealed_total == 0
    assert fresh.status == GameStatus.IN_PROGRESS


def test_start_invalid_configuration_keeps_previous_session():
    s = InMemorySessions()
    s.start("p1", 3, 3, 1, rng_seed=2)
    with pytest.raises(InvalidConfiguration):
        s.start("p1", 3, 3, 10)
    assert s.get("p1") is not None


def test_moves_without_session_raise_key_error():
    s = InMemorySessions()
    with pytest.raises(KeyError):
        s.reveal("nobody", 0, 0)
    with pytest.raises(KeyError):
        s.flag("nobody", 0, 0)
    with pytest.raises(KeyError):
        s.end("nobody")


def test_gestures_map_to_reveal_and_flag():
    s = InMemorySessions()
    s.start("p1", 5, 5, 0)
    state, move = s.gesture("p1", "long_press", 2, 2)
    assert move["action"] == "flag"
    assert state.cell(2, 2).is_flagged is True
    state, move = s.gesture("p1", "tap", 2, 2)
    assert move["changed"] is False
    state, move = s.gesture("p1", "tap", 0, 0)
    assert move["action"] == "reveal"
    assert state.cell(0, 0).is_covered is False
    with pytest.raises(ValueError, match="unknown_gesture"):
        s.gesture("p1", "swipe", 0, 0)


def test_players_are_isolated():
    s = InMemorySessions()
    s.start("a", 4, 4, 2, rng_seed=3)
    s.start("b", 4, 4, 2, rng_seed=3)
    s.flag("a", 1, 1)
    assert s.get("a").flags_total == 1
    assert s.get("b").flags_total == 0


def test_end_discards_session():
    s = InMemorySessions()
    s.start("p1", 2, 2, 1)
    s.end("p1")
    assert s.get("p1") is None


def test_to_client_payload():
    s = InMemorySessions()
    state = s.start("p1", 3, 4, 2, rng_seed=9)
    state, _ = s.flag("p1", 0, 0)
    payload = s.to_client(state)
    assert payload["status"] == "in_progress"
    assert payload["num_rows"] == 3 and payload["num_cols"] == 4 and payload["num_mines"] == 2
    assert len(payload["board"]) == 3 and all(len(r) == 4 for r in payload["board"])
    assert payload["board"][0][0] == "F"
    assert payload["flags_total"] == 1
    assert payload["mines_remaining"] == 1
    assert payload["revealed_total"] == 0


def test_concurrent_gestures_are_serialized():
    s = InMemorySessions()
    s.start("p1", 3, 3, 0)
    workers, presses = 8, 25
    barrier = threading.Barrier(workers)

    def press():
        barrier.wait()
        for _ in range(presses):
            s.gesture("p1", "long_press", 1, 1)

    threads = [threading.Thread(target=press) for _ in range(workers)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert s.get("p1").cell(1, 1).is_flagged is False

    s.flag("p1", 1, 1)
    assert s.get("p1").cell(1, 1).is_flagged is True
    assert s.get("p1").flags_total == 1
