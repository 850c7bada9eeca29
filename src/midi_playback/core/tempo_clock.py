"""
Tick clock for MIDI playback

Converts elapsed wall-clock time (microseconds) into whole MIDI ticks using
the tempo currently in effect. Time that does not add up to a full tick is
carried over to the next call, so playback never drifts regardless of how
the caller slices time.
"""

import math
from typing import Iterator

# Tempo the MIDI standard assumes until a file sets one (120 BPM)
DEFAULT_MICROSECONDS_PER_QUARTER_NOTE = 500_000

# Absorbs float error so 2.0 s at 500000/480 gives 1920 ticks, not 1919
TICK_EPSILON = 1e-9


class TempoClock:
    """Virtual clock driven by caller supplied time deltas

    ``microseconds_per_tick`` starts at 0 and is only set by tempo events, so
    ticks before the file's first tempo event cost no time.
    """

    def __init__(self, ticks_per_beat: int):
        """Initialize tempo clock

        Args:
            ticks_per_beat: Pulses per quarter note of the loaded file
        """
        self.ticks_per_beat: int = ticks_per_beat
        self.microseconds_per_tick: float = 0.0
        self.timer: float = 0.0  # Microseconds not yet converted to ticks

    def set_tempo(self, microseconds_per_quarter_note: int):
        """Apply a tempo event; takes effect for the next tick

        Args:
            microseconds_per_quarter_note: Tempo meta event value
        """
        self.microseconds_per_tick = microseconds_per_quarter_note / self.ticks_per_beat

    @property
    def has_tempo(self) -> bool:
        return self.microseconds_per_tick > 0

    @property
    def seek_microseconds_per_tick(self) -> float:
        """Tick length used to turn seconds into ticks when seeking."""
        if self.has_tempo:
            return self.microseconds_per_tick
        return DEFAULT_MICROSECONDS_PER_QUARTER_NOTE / self.ticks_per_beat

    def seconds_to_ticks(self, seconds: float) -> int:
        """Convert seconds to whole ticks at the current tempo

        Tempo changes between 0 and ``seconds`` are not taken into account.
        """
        ticks = seconds * 1_000_000 / self.seek_microseconds_per_tick
        return max(0, math.floor(ticks + TICK_EPSILON))

    def advance_ticks(self, delta_microseconds: float) -> Iterator[int]:
        """Add elapsed time and yield once per whole tick it pays for

        Each tick is charged before it is yielded, at the tempo in effect when
        it starts. A tempo change made by the consumer between two ticks is
        picked up by the next comparison.

        Args:
            delta_microseconds: Elapsed time since the previous call

        Yields:
            int: Running count of ticks produced by this call
        """
        self.timer += delta_microseconds
        count = 0
        while self.timer > self.microseconds_per_tick:
            self.timer -= self.microseconds_per_tick
            count += 1
            yield count

    def drain(self):
        """Drop any accumulated time that has not been turned into ticks."""
        self.timer = 0.0
