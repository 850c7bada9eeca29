import logging
from typing import List, Optional

from .event_scheduler import EventScheduler
from .output import MidiOutput, all_sound_off, send_message
from .playback_mode import TrackLayout
from .song import EventPayload, Ignored, Song, TempoChange, ToOutput
from .tempo_clock import TempoClock
from .track_store import TrackProgress, TrackStore

logger = logging.getLogger(__name__)


class PlaybackEngine:
    """Playback engine class responsible for turning elapsed time into MIDI output

    The engine has no thread or timer of its own. Every call to ``update``
    converts the supplied time into ticks and fires whatever events those
    ticks reach, so identical delta sequences always produce identical output.

    All Sound Off Safety:
    =====================
    Every channel receives All Sound Off (CC 123) when:
    - playback is paused
    - a new song replaces the current one
    - playback seeks, including the automatic seek of a loop
    """

    def __init__(self, song: Song, output: MidiOutput, paused: bool = False):
        """Initialize playback engine

        Args:
            song: Song to play
            output: Destination of every outgoing message
            paused: Initial pause state
        """
        self.output = output
        self.is_paused: bool = paused
        self.load(song)

    def load(self, song: Song):
        """Replace the loaded song, discarding all playback state

        The pause state carries over to the new song.

        Args:
            song: Song to play from the beginning
        """
        all_sound_off(self.output)

        self.song = song
        self.clock = TempoClock(song.ticks_per_beat)
        self.store = TrackStore(song.tracks)
        self.scheduler = EventScheduler(song.layout, self.store)
        self.loop_point: Optional[float] = None

        logger.info(
            "[MidiEngine] Loaded %s: %s layout, %d tracks, %d ticks per beat",
            song.name or "song", song.layout, song.track_count, song.ticks_per_beat,
        )

    @property
    def ticks_per_beat(self) -> int:
        return self.clock.ticks_per_beat

    @property
    def microseconds_per_tick(self) -> float:
        return self.clock.microseconds_per_tick

    @property
    def timer(self) -> float:
        return self.clock.timer

    @property
    def layout(self) -> TrackLayout:
        return self.scheduler.layout

    @property
    def progress(self) -> List[TrackProgress]:
        """Snapshot of every track cursor"""
        return [TrackProgress(p.ticks_since_last_fired, p.next_event_index)
                for p in self.store.progress]

    def set_paused(self, paused: bool):
        """Pause or resume playback

        Args:
            paused: True to pause; going from playing to paused silences every channel
        """
        if paused == self.is_paused:
            return

        self.is_paused = paused
        if paused:
            all_sound_off(self.output)
            logger.debug("[MidiEngine] Paused")
        else:
            logger.debug("[MidiEngine] Resumed")

    def set_loop_point(self, loop_point: Optional[float]):
        """Set the time in seconds playback jumps back to at the end of the song

        Args:
            loop_point: Seconds from the start, or None to stop looping
        """
        self.loop_point = loop_point

    def at_end_of_file(self) -> bool:
        """Like is_finished, but ignores the loop point"""
        return self.scheduler.at_end()

    def is_finished(self) -> bool:
        """Check whether playback is over; a looping song never finishes"""
        if self.loop_point is not None:
            return False
        return self.at_end_of_file()

    def seek_to(self, seconds: float):
        """Jump to a position in seconds

        The position is converted to ticks with the tempo currently in effect
        (120 BPM if the song has not set one yet).

        Args:
            seconds: Target position from the start of the song
        """
        all_sound_off(self.output)
        target_ticks = self.clock.seconds_to_ticks(seconds)
        self.scheduler.seek(target_ticks)
        logger.debug("[MidiEngine] Seek to %.3fs (tick %d)", seconds, target_ticks)

    def update(self, delta_time: float):
        """Advance playback by elapsed time

        Args:
            delta_time: Microseconds elapsed since the previous update
        """
        if self.is_paused or self.is_finished():
            return

        for _ in self.clock.advance_ticks(delta_time):
            self.scheduler.tick(self._dispatch)

            if not self.at_end_of_file():
                continue

            if self.loop_point is None:
                # Leftover time belongs to no tick
                self.clock.drain()
                break

            logger.debug("[MidiEngine] End of song reached, looping to %.3fs", self.loop_point)
            self.seek_to(self.loop_point)
            if self.at_end_of_file() or not self.clock.has_tempo:
                # Loop point at or past the end, or free ticks: loop at most once per update
                self.clock.drain()
                break

    def _dispatch(self, payload: EventPayload):
        """Carry out one due event"""
        if isinstance(payload, ToOutput):
            send_message(self.output, payload.data)
        elif isinstance(payload, TempoChange):
            self.clock.set_tempo(payload.microseconds_per_quarter_note)
        elif isinstance(payload, Ignored):
            pass
        else:
            raise TypeError(f"Unknown event payload: {payload!r}")
