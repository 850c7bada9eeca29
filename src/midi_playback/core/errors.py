"""Exception types raised by the playback engine.

- UnsupportedFeatureError: the file uses something playback cannot honour,
  such as timecode timing, or escape events and multi-packet system exclusive
  in the raw file bytes (Song.from_bytes, Song.from_path)
- MalformedInputError: the file bytes could not be parsed
- OutputFailureError: the output port rejected a message
"""


class MidiPlaybackError(Exception):
    """Base class for every error raised by midi_playback."""


class UnsupportedFeatureError(MidiPlaybackError):
    """Raised at load or decode time for MIDI features playback does not support."""


class MalformedInputError(MidiPlaybackError):
    """Raised when MIDI file bytes fail to parse."""


class OutputFailureError(MidiPlaybackError):
    """Raised when sending a message to the output port fails.

    Sends are never retried; the caller decides whether to keep playing.
    """
