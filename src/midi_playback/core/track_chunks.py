"""Raw track chunk checks.

mido reads escape events (status 0xF7) and system exclusive packets that do
not end in 0xF7 as ordinary ``sysex`` messages, so a parsed file cannot tell
them apart from complete sysex. This module walks the undecoded MTrk chunks
and rejects both before the bytes are handed to mido.

The walk stops quietly at anything it cannot read (truncated chunks, a data
byte with no running status); mido reports those as parse errors.
"""

import struct
from typing import Optional, Tuple

from .errors import UnsupportedFeatureError

CHUNK_HEADER = struct.Struct('>4sL')
TRACK_CHUNK_ID = b'MTrk'

SYSEX = 0xF0
ESCAPE = 0xF7
META = 0xFF

# Data bytes following each channel voice status
CHANNEL_DATA_BYTES = {
    0x80: 2,
    0x90: 2,
    0xA0: 2,
    0xB0: 2,
    0xC0: 1,
    0xD0: 1,
    0xE0: 2,
}


def read_variable_length(data: bytes, pos: int, end: int) -> Optional[Tuple[int, int]]:
    """Read a variable-length quantity (at most 4 bytes)

    Returns:
        Optional[Tuple[int, int]]: (value, position after it), or None when
        the number runs past ``end`` or is longer than 4 bytes
    """
    value = 0
    for _ in range(4):
        if pos >= end:
            return None
        byte = data[pos]
        pos += 1
        value = (value << 7) | (byte & 0x7F)
        if not byte & 0x80:
            return value, pos
    return None


def check_track_events(data: bytes, pos: int, end: int, track_index: int):
    """Walk the events of one track chunk

    Args:
        data: Whole file contents
        pos: Offset of the first event
        end: Offset just past the chunk
        track_index: Track number used in error messages

    Raises:
        UnsupportedFeatureError: On an escape event, a split system exclusive
            packet or a system common/realtime status
    """
    running_status = None
    event_index = 0

    while pos < end:
        delta = read_variable_length(data, pos, end)
        if delta is None or delta[1] >= end:
            return
        pos = delta[1]

        status = data[pos]
        if status < 0x80:
            if running_status is None:
                return
            # Running status: pos already sits on the first data byte
            status = running_status
        else:
            pos += 1

        if status == META:
            length = read_variable_length(data, pos + 1, end)
            if length is None:
                return
            pos = length[1] + length[0]
        elif status == SYSEX:
            length = read_variable_length(data, pos, end)
            if length is None:
                return
            size, pos = length
            if pos + size > end:
                return
            if size == 0 or data[pos + size - 1] != ESCAPE:
                raise UnsupportedFeatureError(
                    f"Track {track_index}, event {event_index}: system exclusive "
                    f"split over several packets is not supported"
                )
            pos += size
            running_status = None
        elif status == ESCAPE:
            raise UnsupportedFeatureError(
                f"Track {track_index}, event {event_index}: MIDI escape events are not supported"
            )
        elif status > SYSEX:
            raise UnsupportedFeatureError(
                f"Track {track_index}, event {event_index}: status 0x{status:02X} "
                f"is only allowed inside escape events"
            )
        else:
            running_status = status
            pos += CHANNEL_DATA_BYTES[status & 0xF0]

        event_index += 1


def check_track_chunks(data: bytes):
    """Reject escape events and split sysex anywhere in a Standard MIDI File

    Args:
        data: Raw file contents

    Raises:
        UnsupportedFeatureError: If any track holds an event playback cannot forward
    """
    pos = 0
    track_index = 0
    while pos + CHUNK_HEADER.size <= len(data):
        chunk_id, length = CHUNK_HEADER.unpack_from(data, pos)
        pos += CHUNK_HEADER.size
        if chunk_id == TRACK_CHUNK_ID:
            check_track_events(data, pos, min(pos + length, len(data)), track_index)
            track_index += 1
        pos += length
