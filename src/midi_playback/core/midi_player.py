"""Player session management.

This module wraps the playback engine for callers that drive playback from a
frame loop:
- Wall-clock bookkeeping, so each frame only calls ``update()``
- Optional song: every operation is defined with or without a loaded song
"""

import time
from dataclasses import dataclass
from typing import Callable, Optional, Union

from .midi_engine import PlaybackEngine
from .output import MidiOutput, all_sound_off
from .song import Song


@dataclass(frozen=True)
class NoFile:
    """No song loaded: controls do nothing and playback counts as finished."""


@dataclass(frozen=True)
class Loaded:
    """A song is loaded and every control goes to its engine."""
    engine: PlaybackEngine


PlayerState = Union[NoFile, Loaded]


class MidiPlayer:
    """Manages the playback session of one output port."""

    def __init__(self, output: MidiOutput, clock: Callable[[], float] = time.perf_counter):
        """Initialize a new player with no song loaded

        Args:
            output: Port every message is sent to
            clock: Monotonic time source in seconds
        """
        self.output = output
        self._clock = clock
        self.state: PlayerState = NoFile()
        self.last_update_time: float = clock()

    @property
    def engine(self) -> Optional[PlaybackEngine]:
        if isinstance(self.state, Loaded):
            return self.state.engine
        return None

    @property
    def is_paused(self) -> bool:
        if isinstance(self.state, Loaded):
            return self.state.engine.is_paused
        return False

    def set_midi_file(self, song: Song):
        """Load a song, replacing the current one

        Pausing carries over from the replaced song.
        """
        if isinstance(self.state, Loaded):
            self.state.engine.load(song)
        else:
            self.state = Loaded(PlaybackEngine(song, self.output))
        # Time spent before the swap must not be played back
        self.last_update_time = self._clock()

    def unload(self):
        """Drop the current song and silence the output"""
        if isinstance(self.state, Loaded):
            all_sound_off(self.output)
        self.state = NoFile()

    def set_paused(self, paused: bool):
        if isinstance(self.state, Loaded):
            self.state.engine.set_paused(paused)

        # Don't suddenly jump ahead when unpausing.
        self.last_update_time = self._clock()

    def is_finished(self) -> bool:
        if isinstance(self.state, Loaded):
            return self.state.engine.is_finished()
        return True

    def set_loop_point(self, loop_point: Optional[float]):
        """Set the current song to loop at the given time in seconds"""
        if isinstance(self.state, Loaded):
            self.state.engine.set_loop_point(loop_point)

    def seek_to(self, seconds: float):
        """Seek to the given time in seconds"""
        if isinstance(self.state, Loaded):
            self.state.engine.seek_to(seconds)

    def update(self):
        """Play everything that came due since the previous call"""
        now = self._clock()
        delta_time = (now - self.last_update_time) * 1_000_000

        if isinstance(self.state, Loaded):
            self.state.engine.update(delta_time)

        self.last_update_time = now

    def __str__(self):
        """Return a string representation of the session state."""
        if isinstance(self.state, NoFile):
            return "No file loaded"

        engine = self.state.engine
        status = [f"Song: {engine.song.name or 'unnamed'}", f"Layout: {engine.layout}"]
        if engine.is_paused:
            status.append("Paused")
        if engine.loop_point is not None:
            status.append(f"Loop point: {engine.loop_point:.3f}s")
        if engine.is_finished():
            status.append("Finished")
        return ", ".join(status)
