"""Track layout definitions for loaded MIDI files.

This module defines how the tracks of a file are played:
- SEQUENTIAL: one track after another (MIDI types 0 and 2)
- PARALLEL: every track at the same time (MIDI type 1)
"""

from enum import Enum, auto

from .errors import MalformedInputError


class TrackLayout(Enum):
    """Enum defining the declared layout of a MIDI file."""

    SEQUENTIAL = auto()  # Single track files and type 2 (independent patterns)
    PARALLEL = auto()    # Type 1, tracks share one timeline

    @classmethod
    def from_midi_type(cls, midi_type: int) -> "TrackLayout":
        """Map the header's format word onto a layout.

        Args:
            midi_type: Format field of the MThd chunk (0, 1 or 2)

        Returns:
            TrackLayout: Layout used to schedule the file's tracks
        """
        if midi_type in (0, 2):
            return cls.SEQUENTIAL
        if midi_type == 1:
            return cls.PARALLEL
        raise MalformedInputError(f"Invalid MIDI file type: {midi_type}")

    def __str__(self):
        """Return a user-friendly string representation."""
        return self.name.capitalize()
