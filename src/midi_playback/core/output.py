"""MIDI output ports.

The engine only needs an object with ``send(data: bytes)``. RtMidiOutput
provides that on top of python-rtmidi and also covers port discovery for the
command line player.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Protocol

import mido

from .errors import OutputFailureError

logger = logging.getLogger(__name__)

ALL_SOUND_OFF_CC = 123
MIDI_CHANNELS = 16


class MidiOutput(Protocol):
    """Anything that can transmit one encoded MIDI message."""

    def send(self, data: bytes) -> None:
        ...


def all_sound_off_messages() -> List[bytes]:
    """All Sound Off (CC 123, value 0) for channels 0-15, in channel order"""
    return [
        bytes(mido.Message('control_change', channel=channel,
                           control=ALL_SOUND_OFF_CC, value=0).bytes())
        for channel in range(MIDI_CHANNELS)
    ]


def send_message(output: MidiOutput, data: bytes):
    """Send one message, turning transport errors into OutputFailureError

    Failed sends are not retried.
    """
    try:
        output.send(data)
    except OutputFailureError:
        raise
    except Exception as e:
        logger.error("[MidiOutput] Error sending MIDI message %s: %s", data.hex(' '), e)
        raise OutputFailureError(f"Failed to send MIDI message: {e}") from e


def all_sound_off(output: MidiOutput):
    """Silence every channel so no note is left hanging"""
    for data in all_sound_off_messages():
        send_message(output, data)


class RtMidiOutput:
    """MIDI output device backed by python-rtmidi"""

    def __init__(self, client_name: str = "midi-playback"):
        """Initialize MIDI output device

        Args:
            client_name: Client name shown to other MIDI software
        """
        import rtmidi

        self._rtmidi = rtmidi
        self.client_name = client_name
        self.midi_out = rtmidi.MidiOut(name=client_name)
        self.port_index: Optional[int] = None

    def list_ports(self) -> List[str]:
        """Names of the available output ports, by index"""
        return self.midi_out.get_ports()

    def port_count(self) -> int:
        return self.midi_out.get_port_count()

    def port_name(self, index: int) -> str:
        """Resolve the display name of a port

        Raises:
            ValueError: If no port has that index
        """
        name = self.midi_out.get_port_name(index)
        if name is None:
            raise ValueError(f"No MIDI output port with index {index}")
        return name

    def open(self, index: int):
        """Open a connection to a port

        Args:
            index: Port index from ``list_ports()``
        """
        if not 0 <= index < self.port_count():
            raise ValueError(
                f"Port index {index} out of range (last port is {self.port_count() - 1})"
            )
        self.midi_out.open_port(index, name=self.client_name)
        self.port_index = index
        logger.info("[MidiOutput] Connected to MIDI output device: %s", self.port_name(index))

    def open_virtual(self, name: str):
        """Create a virtual output port other applications can connect to"""
        self.midi_out.open_virtual_port(name)
        logger.info("[MidiOutput] Created virtual MIDI output port: %s", name)

    @property
    def is_open(self) -> bool:
        return self.midi_out is not None and self.midi_out.is_port_open()

    def send(self, data: bytes):
        """Transmit one encoded MIDI message

        Raises:
            OutputFailureError: If no port is open or the backend rejects the message
        """
        if not self.is_open:
            raise OutputFailureError("MIDI output port is not open")
        try:
            self.midi_out.send_message(data)
        except (self._rtmidi.RtMidiError, ValueError, TypeError) as e:
            raise OutputFailureError(f"Failed to send MIDI message: {e}") from e

    def close(self):
        """Close the port and release the rtmidi handle"""
        if self.midi_out is not None:
            self.midi_out.close_port()
            self.midi_out.delete()
            self.midi_out = None
            self.port_index = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()
