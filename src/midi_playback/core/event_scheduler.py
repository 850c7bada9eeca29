from dataclasses import dataclass
from typing import Callable, Union

from .playback_mode import TrackLayout
from .song import EventPayload
from .track_store import TrackStore


@dataclass(frozen=True)
class Sequential:
    """Tracks play one after another; only ``current_track_index`` advances.

    ``current_track_index`` equal to the track count means every track has
    finished. It is never used as an index in that state.
    """
    current_track_index: int = 0


@dataclass(frozen=True)
class Parallel:
    """Every track advances on every tick."""


PlaybackFormat = Union[Sequential, Parallel]


class EventScheduler:
    """Event scheduler class deciding which tracks advance on each tick

    The format is chosen once from the song's layout. The only transition is
    Sequential(n) -> Sequential(n + 1) when track n runs out of events, plus
    the re-selection a seek performs.
    """

    def __init__(self, layout: TrackLayout, store: TrackStore):
        """Initialize event scheduler

        Args:
            layout: Declared layout of the loaded song
            store: Tracks and cursors of the loaded song
        """
        self.store = store
        if layout is TrackLayout.PARALLEL:
            self.format: PlaybackFormat = Parallel()
        else:
            self.format = Sequential(0)

    @property
    def layout(self) -> TrackLayout:
        if isinstance(self.format, Parallel):
            return TrackLayout.PARALLEL
        return TrackLayout.SEQUENTIAL

    def at_end(self) -> bool:
        """Check whether the song has played to its end (loop point ignored)"""
        if isinstance(self.format, Sequential):
            return self.format.current_track_index >= len(self.store)
        return self.store.all_exhausted()

    def tick(self, dispatch: Callable[[EventPayload], None]):
        """Advance the active track(s) by one tick

        Args:
            dispatch: Receives every payload that comes due during this tick
        """
        if isinstance(self.format, Parallel):
            for track_index in range(len(self.store)):
                self.store.advance(track_index, dispatch)
            return

        if self.at_end():
            return

        current = self.format.current_track_index
        self.store.advance(current, dispatch)
        if self.store.is_exhausted(current):
            # May step onto the "all finished" sentinel
            self.format = Sequential(current + 1)

    def seek(self, target_ticks: int):
        """Move every cursor to ``target_ticks`` from the start of the song

        Parallel tracks all start at tick 0, so each one is located
        independently. Sequential tracks are laid end to end: tracks that end
        before the target are left exhausted, the track containing the target
        becomes current and later tracks are rewound.
        """
        if isinstance(self.format, Parallel):
            for track_index in range(len(self.store)):
                self.store.seek_track(track_index, target_ticks)
            return

        remaining = target_ticks
        current = None
        for track_index in range(len(self.store)):
            if current is not None:
                self.store.rewind_track(track_index)
                continue

            length = self.store.length_ticks(track_index)
            if remaining >= length:
                self.store.finish_track(track_index)
                remaining -= length
            else:
                self.store.seek_track(track_index, remaining)
                current = track_index

        if current is None:
            current = len(self.store)
        self.format = Sequential(current)
