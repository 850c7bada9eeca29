"""Real-time playback of MIDI files.

Load a file, hand the player an output port and call ``update()`` once per
frame:

```python
from midi_playback import MidiPlayer, RtMidiOutput, Song

output = RtMidiOutput()
output.open(0)
player = MidiPlayer(output)
player.set_midi_file(Song.from_path("song.mid"))
while not player.is_finished():
    player.update()
```

Pause, seek, loop and swapping songs never leave notes hanging: every channel
receives All Sound Off whenever playback jumps or stops.
"""

from .config import PlayerConfig, configure_logging
from .core import (
    EventScheduler,
    Ignored,
    Loaded,
    MalformedInputError,
    MidiOutput,
    MidiPlaybackError,
    MidiPlayer,
    NoFile,
    OutputFailureError,
    Parallel,
    PlaybackEngine,
    RtMidiOutput,
    Sequential,
    Song,
    TempoChange,
    TempoClock,
    ToOutput,
    TrackEvent,
    TrackLayout,
    TrackProgress,
    TrackStore,
    UnsupportedFeatureError,
    all_sound_off,
)

__version__ = "0.3.0"

__all__ = [
    'PlayerConfig',
    'configure_logging',
    'EventScheduler',
    'Ignored',
    'Loaded',
    'MalformedInputError',
    'MidiOutput',
    'MidiPlaybackError',
    'MidiPlayer',
    'NoFile',
    'OutputFailureError',
    'Parallel',
    'PlaybackEngine',
    'RtMidiOutput',
    'Sequential',
    'Song',
    'TempoChange',
    'TempoClock',
    'ToOutput',
    'TrackEvent',
    'TrackLayout',
    'TrackProgress',
    'TrackStore',
    'UnsupportedFeatureError',
    'all_sound_off',
]
