"""Playback-ready MIDI song data.

A Song is built once from a parsed ``mido.MidiFile`` and owns copies of every
track event, already reduced to what playback needs:
- ToOutput: fully encoded bytes for the output port
- TempoChange: a new tempo in microseconds per quarter note
- Ignored: meta events with no effect on playback
"""

from __future__ import annotations

import io
import logging
import struct
from dataclasses import dataclass, field
from typing import List, Optional, Tuple, Union

import mido

from .errors import MalformedInputError, UnsupportedFeatureError
from .playback_mode import TrackLayout
from .track_chunks import check_track_chunks

logger = logging.getLogger(__name__)

CHANNEL_MESSAGE_TYPES = frozenset([
    'note_off',
    'note_on',
    'polytouch',
    'control_change',
    'program_change',
    'aftertouch',
    'pitchwheel',
])


@dataclass(frozen=True)
class ToOutput:
    """A message to transmit as-is."""
    data: bytes


@dataclass(frozen=True)
class TempoChange:
    """Tempo meta event."""
    microseconds_per_quarter_note: int


@dataclass(frozen=True)
class Ignored:
    """Meta event that playback skips over."""


EventPayload = Union[ToOutput, TempoChange, Ignored]

IGNORED = Ignored()


@dataclass(frozen=True)
class TrackEvent:
    """Event payload and its distance in ticks from the previous event of the same track."""
    delta_ticks: int
    payload: EventPayload


Track = Tuple[TrackEvent, ...]


def decode_message(msg) -> EventPayload:
    """Reduce one mido message to its playback payload

    Args:
        msg: mido Message or MetaMessage read from a track

    Returns:
        EventPayload: What playback does when the event comes due

    Raises:
        UnsupportedFeatureError: For system common/realtime messages, which a
            file can only carry inside escape events
    """
    if msg.is_meta:
        if msg.type == 'set_tempo':
            return TempoChange(msg.tempo)
        return IGNORED

    if msg.type in CHANNEL_MESSAGE_TYPES:
        return ToOutput(bytes(msg.bytes()))

    if msg.type == 'sysex':
        # mido strips the framing bytes when reading; bytes() puts 0xF0 ... 0xF7 back.
        # Escapes and split packets also read as sysex; from_bytes rejects those first.
        return ToOutput(bytes(msg.bytes()))

    raise UnsupportedFeatureError(
        f"'{msg.type}' message found in track data; MIDI escape events are not supported"
    )


def decode_track(track) -> Track:
    """Copy a mido track into engine-owned track events

    Args:
        track: Iterable of mido messages whose ``time`` is a delta in ticks

    Returns:
        Track: Tuple of TrackEvent in file order
    """
    events = []
    for index, msg in enumerate(track):
        delta = msg.time
        if not isinstance(delta, int) or delta < 0:
            raise MalformedInputError(
                f"Event {index} has invalid delta time {delta!r} (expected non-negative ticks)"
            )
        events.append(TrackEvent(delta, decode_message(msg)))
    return tuple(events)


@dataclass
class Song:
    """A MIDI file ready to be handed to the playback engine."""

    ticks_per_beat: int
    layout: TrackLayout
    tracks: List[Track] = field(default_factory=list)
    name: Optional[str] = None

    @classmethod
    def from_midi_file(cls, midi_file: mido.MidiFile, name: Optional[str] = None) -> "Song":
        """Build a song from an already parsed mido file

        Args:
            midi_file: Parsed MIDI file
            name: Optional display name (defaults to the file's filename)

        Returns:
            Song: Engine-owned copy of the file's events
        """
        ticks_per_beat = midi_file.ticks_per_beat
        if ticks_per_beat < 0:
            # Negative division word means SMPTE frames per second and ticks per frame
            raise UnsupportedFeatureError("Timecode (SMPTE) timing is not supported")
        if ticks_per_beat == 0:
            raise MalformedInputError("MIDI header declares 0 ticks per beat")

        layout = TrackLayout.from_midi_type(midi_file.type)
        tracks = [decode_track(track) for track in midi_file.tracks]

        if name is None and midi_file.filename:
            name = str(midi_file.filename)

        song = cls(ticks_per_beat=ticks_per_beat, layout=layout, tracks=tracks, name=name)
        logger.debug(
            "[Song] Decoded %s: layout=%s, tracks=%d, events=%d, ticks_per_beat=%d",
            name or "<unnamed>", layout, song.track_count, song.event_count, ticks_per_beat,
        )
        return song

    @classmethod
    def from_bytes(cls, data: bytes, name: Optional[str] = None) -> "Song":
        """Parse raw Standard MIDI File bytes

        Raises:
            MalformedInputError: If the bytes are not a readable MIDI file
            UnsupportedFeatureError: If the file uses unsupported features,
                including escape events and split system exclusive
        """
        check_track_chunks(data)
        try:
            midi_file = mido.MidiFile(file=io.BytesIO(data))
        except (OSError, EOFError, ValueError, KeyError, TypeError, struct.error) as e:
            raise MalformedInputError(f"Failed to parse MIDI data: {e}") from e
        return cls.from_midi_file(midi_file, name=name)

    @classmethod
    def from_path(cls, path) -> "Song":
        """Read and parse a MIDI file from disk

        Args:
            path: Path to a .mid file

        Returns:
            Song: Parsed song named after the file
        """
        with open(path, 'rb') as f:
            data = f.read()
        return cls.from_bytes(data, name=str(path))

    @property
    def track_count(self) -> int:
        return len(self.tracks)

    @property
    def event_count(self) -> int:
        return sum(len(track) for track in self.tracks)

    @property
    def initial_tempo(self) -> Optional[int]:
        """First tempo found in track order, in microseconds per quarter note."""
        for track in self.tracks:
            for event in track:
                if isinstance(event.payload, TempoChange):
                    return event.payload.microseconds_per_quarter_note
        return None
