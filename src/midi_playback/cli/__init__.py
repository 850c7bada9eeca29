"""Command line player.

This package provides the ``midi-playback`` command, which plays a MIDI file
through a MIDI output port.
"""

from .play_cli import main

__all__ = ['main']
