"""Unit tests for the live state store."""
from __future__ import annotations

import random
import threading

import pytest

from shared.errors import NoSuchTeam, PayloadError, TransportError
from shared.models.enums import ErrorKind, League
from shared.store import LiveStateStore, clamp_offset

from payloads import BOS, FETCHED_AT, NYY, make_game, make_snapshot


def snapshot_of(count: int, prefix: str = "g"):
    return make_snapshot(*(make_game(f"{prefix}{i}", home=NYY, away=BOS) for i in range(count)))


@pytest.fixture
def store() -> LiveStateStore:
    return LiveStateStore(League.MLB)


# ── Scroll ──────────────────────────────────────────────────────────────

@pytest.mark.parametrize(
    "offset,count,viewport,expected",
    [(0, 0, 5, 0), (3, 2, 5, 0), (-4, 10, 3, 0), (9, 10, 3, 7), (4, 10, 3, 4), (2, 10, 0, 2)],
)
def test_clamp_offset(offset: int, count: int, viewport: int, expected: int) -> None:
    assert clamp_offset(offset, count, viewport) == expected


def test_scroll_stays_in_bounds_for_any_delta_sequence(store: LiveStateStore) -> None:
    rng = random.Random(1234)
    store.commit_snapshot(snapshot_of(12))
    for _ in range(500):
        viewport = rng.randint(0, 15)
        offset = store.scroll(rng.randint(-7, 7), viewport)
        assert 0 <= offset <= max(0, 12 - viewport)
        assert store.read().view.scroll_offset == offset


def test_scroll_without_snapshot_stays_at_zero(store: LiveStateStore) -> None:
    assert store.scroll(5, 3) == 0


def test_new_snapshot_reclamps_offset(store: LiveStateStore) -> None:
    store.commit_snapshot(snapshot_of(10))
    assert store.scroll(100, 4) == 6
    store.commit_snapshot(snapshot_of(5))
    assert store.read().view.scroll_offset == 1


# ── Commit ──────────────────────────────────────────────────────────────

def test_success_replaces_snapshot_and_clears_error(store: LiveStateStore) -> None:
    store.commit_snapshot(TransportError("down"))
    assert store.read().view.last_error == ErrorKind.TRANSPORT

    snap = snapshot_of(3)
    assert store.commit_snapshot(snap) is True
    current = store.read()
    assert current.snapshot is snap
    assert current.view.last_error is None
    assert current.view.error_message is None
    assert current.view.last_refresh_at == FETCHED_AT


@pytest.mark.parametrize("error", [TransportError("timed out"), PayloadError("bad json"), NoSuchTeam("xyz")])
def test_failure_keeps_previous_snapshot(store: LiveStateStore, error) -> None:
    snap = snapshot_of(4)
    store.commit_snapshot(snap)
    store.commit_snapshot(error)

    current = store.read()
    assert current.snapshot is snap
    assert current.game_count == 4
    assert current.view.last_error == error.kind
    assert current.view.error_message == error.message
    assert current.view.last_refresh_at == FETCHED_AT


def test_result_for_superseded_filter_is_discarded(store: LiveStateStore) -> None:
    token = store.begin_refresh()
    store.set_filter(League.MLB, "yankees")
    assert store.commit_snapshot(snapshot_of(3), generation=token) is False
    assert store.read().snapshot is None


def test_result_after_close_is_discarded(store: LiveStateStore) -> None:
    token = store.begin_refresh()
    store.close()
    assert store.commit_snapshot(snapshot_of(3), generation=token) is False
    assert store.read().snapshot is None
    assert store.begin_refresh() is None


def test_reader_never_sees_mixed_snapshots(store: LiveStateStore) -> None:
    a = snapshot_of(50, prefix="a")
    b = snapshot_of(50, prefix="b")
    stop = threading.Event()

    def writer() -> None:
        while not stop.is_set():
            store.commit_snapshot(a)
            store.commit_snapshot(b)

    thread = threading.Thread(target=writer)
    thread.start()
    try:
        for _ in range(2000):
            snapshot = store.read().snapshot
            if snapshot is None:
                continue
            prefixes = {game.id[0] for game in snapshot.games}
            assert len(prefixes) == 1
    finally:
        stop.set()
        thread.join()


# ── Refresh flags ───────────────────────────────────────────────────────

def test_only_one_refresh_in_flight(store: LiveStateStore) -> None:
    first = store.begin_refresh()
    assert first == 0
    assert store.read().view.refreshing is True
    assert store.begin_refresh() is None
    store.end_refresh()
    assert store.read().view.refreshing is False
    assert store.begin_refresh() == 0


# ── Filter ──────────────────────────────────────────────────────────────

def test_set_filter_resets_view(store: LiveStateStore) -> None:
    store.commit_snapshot(snapshot_of(10))
    store.scroll(3, 4)
    store.commit_snapshot(NoSuchTeam("abc"))

    generation = store.set_filter(League.MLB, "  yankees ")
    view = store.read().view
    assert generation == 1
    assert view.team_filter == "yankees"
    assert view.scroll_offset == 0
    assert view.refreshing is True
    assert view.last_error is None
    # same league: old games stay visible until the refresh lands
    assert store.read().snapshot is not None


def test_league_change_drops_snapshot(store: LiveStateStore) -> None:
    store.commit_snapshot(snapshot_of(3))
    store.set_filter(League.NHL, None)
    current = store.read()
    assert current.snapshot is None
    assert current.view.league == League.NHL
    assert current.view.team_filter is None
