import mido
import pytest

from midi_playback.core.output import all_sound_off_messages
from midi_playback.core.song import Song

# 100 ticks per beat at one beat per second: every tick lasts exactly 10 ms
PPQ = 100
TEMPO = 1_000_000
MPT = TEMPO / PPQ

ALL_SOUND_OFF = all_sound_off_messages()


class RecordingOutput:
    """Output port that keeps every message it is sent."""

    def __init__(self):
        self.sent = []

    def send(self, data):
        self.sent.append(bytes(data))

    def notes(self):
        """Note numbers of the note_on messages sent so far, in order"""
        return [data[1] for data in self.sent if data[0] & 0xF0 == 0x90]


class FakeClock:
    """Monotonic clock the test moves by hand."""

    def __init__(self, now=0.0):
        self.now = now

    def __call__(self):
        return self.now


def note_on(note, time=0, channel=0):
    return mido.Message('note_on', note=note, velocity=64, channel=channel, time=time)


def set_tempo(tempo=TEMPO, time=0):
    return mido.MetaMessage('set_tempo', tempo=tempo, time=time)


def note_on_bytes(note, channel=0):
    return bytes([0x90 | channel, note, 64])


def make_midi_file(tracks, midi_type=1, ticks_per_beat=PPQ):
    midi_file = mido.MidiFile(type=midi_type, ticks_per_beat=ticks_per_beat)
    for messages in tracks:
        midi_file.tracks.append(mido.MidiTrack(messages))
    return midi_file


def make_song(tracks, midi_type=1, ticks_per_beat=PPQ):
    return Song.from_midi_file(make_midi_file(tracks, midi_type, ticks_per_beat))


@pytest.fixture
def output():
    return RecordingOutput()


@pytest.fixture
def clock():
    return FakeClock()
