import pytest

from midi_playback.core.song import ToOutput, TrackEvent
from midi_playback.core.track_store import TrackProgress, TrackStore


def event(delta, tag):
    return TrackEvent(delta, ToOutput(tag))


@pytest.fixture
def store():
    return TrackStore([
        (event(0, b'a'), event(2, b'b'), event(0, b'c')),
        (event(10, b'x'), event(20, b'y'), event(30, b'z')),
        (),
    ])


def advance(store, track_index):
    fired = []
    store.advance(track_index, lambda payload: fired.append(payload.data))
    return fired


def test_starts_at_the_beginning(store):
    assert store.progress == [TrackProgress(0, 0)] * 3
    assert len(store) == 3


def test_advance_fires_due_events_in_order(store):
    assert advance(store, 0) == [b'a']
    assert store.progress[0] == TrackProgress(0, 1)

    assert advance(store, 0) == []
    assert store.progress[0] == TrackProgress(1, 1)

    # b comes due and c follows it in the same tick
    assert advance(store, 0) == [b'b', b'c']
    assert store.progress[0] == TrackProgress(0, 3)
    assert store.is_exhausted(0)


def test_advance_only_touches_one_track(store):
    advance(store, 1)
    assert store.progress[0] == TrackProgress(0, 0)
    assert store.progress[1] == TrackProgress(1, 0)


def test_advance_past_the_end_only_counts_ticks(store):
    for _ in range(3):
        advance(store, 0)
    assert advance(store, 0) == []
    assert store.progress[0] == TrackProgress(1, 3)


def test_empty_track_is_exhausted(store):
    assert store.is_exhausted(2)
    assert not store.all_exhausted()
    assert advance(store, 2) == []


def test_length_ticks(store):
    assert store.length_ticks(0) == 2
    assert store.length_ticks(1) == 60
    assert store.length_ticks(2) == 0


@pytest.mark.parametrize('target, expected', [
    (0, (0, 0)),
    (5, (0, 5)),
    (10, (1, 0)),
    (25, (1, 15)),
    (30, (2, 0)),
    (59, (2, 29)),
    (60, (3, 0)),
    (100, (3, 40)),
])
def test_locate(store, target, expected):
    assert store.locate(1, target) == expected


def test_seek_track_then_continue(store):
    store.seek_track(1, 25)
    assert store.progress[1] == TrackProgress(15, 1)

    fired = []
    for _ in range(5):
        fired += advance(store, 1)
    assert fired == [b'y']
    assert store.progress[1] == TrackProgress(0, 2)


def test_rewind_and_finish(store):
    store.finish_track(1)
    assert store.is_exhausted(1)
    store.rewind_track(1)
    assert store.progress[1] == TrackProgress(0, 0)
