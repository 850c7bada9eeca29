"""
Core Components for MIDI playback

This package contains the playback engine and its building blocks:
- Song decoding from parsed MIDI files
- Tempo clock and track cursors
- Event scheduler for sequential and parallel layouts
- Playback engine and frame-driven player
- MIDI output ports
"""

from .errors import (
    MalformedInputError,
    MidiPlaybackError,
    OutputFailureError,
    UnsupportedFeatureError,
)
from .event_scheduler import EventScheduler, Parallel, Sequential
from .midi_engine import PlaybackEngine
from .midi_player import Loaded, MidiPlayer, NoFile
from .output import MidiOutput, RtMidiOutput, all_sound_off
from .playback_mode import TrackLayout
from .song import Ignored, Song, TempoChange, ToOutput, TrackEvent
from .tempo_clock import TempoClock
from .track_store import TrackProgress, TrackStore

__all__ = [
    'MidiPlaybackError',
    'UnsupportedFeatureError',
    'MalformedInputError',
    'OutputFailureError',
    'EventScheduler',
    'Sequential',
    'Parallel',
    'PlaybackEngine',
    'MidiPlayer',
    'NoFile',
    'Loaded',
    'MidiOutput',
    'RtMidiOutput',
    'all_sound_off',
    'TrackLayout',
    'Song',
    'TrackEvent',
    'ToOutput',
    'TempoChange',
    'Ignored',
    'TempoClock',
    'TrackProgress',
    'TrackStore',
]
