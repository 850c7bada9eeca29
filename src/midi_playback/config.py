"""
Configuration module for the MIDI player.

Provides a dataclass configuration with sensible defaults and the logging setup
shared by the command line player.
"""

import logging
import os
import sys
from dataclasses import dataclass, field
from typing import Optional


def debug_from_env() -> bool:
    """Debug mode is enabled with the environment variable MIDI_PLAYBACK_DEBUG=1"""
    return os.environ.get('MIDI_PLAYBACK_DEBUG', '0') == '1'


@dataclass
class PlayerConfig:
    """Configuration for a playback session."""

    client_name: str = "midi-playback"
    """Client name reported to the MIDI system."""

    port: Optional[int] = None
    """Output port index. None = ask interactively."""

    virtual_port_name: str = "MIDI Player Virtual Output"
    """Name of the virtual port created when no output port exists."""

    poll_interval_sec: float = 0.000001
    """Sleep between two player updates in the playback loop."""

    loop_point_sec: Optional[float] = None
    """Loop back to this position when the song ends. None = play once."""

    start_sec: Optional[float] = None
    """Seek to this position before playback starts."""

    debug: bool = field(default_factory=debug_from_env)
    """Enable verbose logging."""

    def __post_init__(self):
        if self.poll_interval_sec < 0:
            raise ValueError(f"poll_interval_sec must be >= 0, got {self.poll_interval_sec}")
        if self.loop_point_sec is not None and self.loop_point_sec < 0:
            raise ValueError(f"loop_point_sec must be >= 0, got {self.loop_point_sec}")
        if self.start_sec is not None and self.start_sec < 0:
            raise ValueError(f"start_sec must be >= 0, got {self.start_sec}")


def configure_logging(debug: bool = False):
    """Send midi_playback log records to stderr

    Args:
        debug: Log DEBUG records too (INFO and above otherwise)
    """
    logger = logging.getLogger('midi_playback')
    logger.setLevel(logging.DEBUG if debug else logging.INFO)
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter('%(asctime)s %(levelname)s %(message)s'))
        logger.addHandler(handler)
