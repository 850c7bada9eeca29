from dataclasses import dataclass
from typing import Callable, List, Sequence, Tuple

from .song import EventPayload, Track


@dataclass
class TrackProgress:
    """Playback cursor of one track"""
    ticks_since_last_fired: int = 0
    next_event_index: int = 0


class TrackStore:
    """Owns the event sequences of a loaded song and one cursor per track

    Tracks are never consumed; playing only moves the cursors, which lets a
    seek or loop rewind to any point in the file.
    """

    def __init__(self, tracks: Sequence[Track]):
        """Initialize track store

        Args:
            tracks: Decoded tracks of the loaded song
        """
        self.tracks: List[Track] = list(tracks)
        self.progress: List[TrackProgress] = [TrackProgress() for _ in self.tracks]

    def __len__(self) -> int:
        return len(self.tracks)

    def is_exhausted(self, track_index: int) -> bool:
        """Check whether every event of a track has fired"""
        return self.progress[track_index].next_event_index >= len(self.tracks[track_index])

    def all_exhausted(self) -> bool:
        return all(self.is_exhausted(i) for i in range(len(self.tracks)))

    def length_ticks(self, track_index: int) -> int:
        """Tick offset of the last event of a track"""
        return sum(event.delta_ticks for event in self.tracks[track_index])

    def advance(self, track_index: int, dispatch: Callable[[EventPayload], None]):
        """Move one track forward by one tick and fire every event that came due

        Args:
            track_index: Track to advance
            dispatch: Called with each due payload, in track order
        """
        track = self.tracks[track_index]
        progress = self.progress[track_index]
        progress.ticks_since_last_fired += 1

        while progress.next_event_index < len(track):
            event = track[progress.next_event_index]
            if event.delta_ticks > progress.ticks_since_last_fired:
                # Not due yet
                break

            progress.ticks_since_last_fired = 0
            progress.next_event_index += 1
            dispatch(event.payload)

    def locate(self, track_index: int, target_ticks: int) -> Tuple[int, int]:
        """Find where a track's cursor sits ``target_ticks`` after its start

        Returns:
            Tuple[int, int]: (next_event_index, ticks_since_last_fired). The
            index is the first event whose cumulative offset exceeds the
            target, or the track length when none does.
        """
        cumulative = 0
        track = self.tracks[track_index]
        for index, event in enumerate(track):
            if cumulative + event.delta_ticks > target_ticks:
                return index, max(0, target_ticks - cumulative)
            cumulative += event.delta_ticks
        return len(track), max(0, target_ticks - cumulative)

    def seek_track(self, track_index: int, target_ticks: int):
        """Position a track's cursor ``target_ticks`` after its start"""
        next_event_index, ticks_since = self.locate(track_index, target_ticks)
        progress = self.progress[track_index]
        progress.next_event_index = next_event_index
        progress.ticks_since_last_fired = ticks_since

    def rewind_track(self, track_index: int):
        self.progress[track_index] = TrackProgress()

    def finish_track(self, track_index: int):
        """Mark a track as fully played"""
        self.progress[track_index] = TrackProgress(0, len(self.tracks[track_index]))
