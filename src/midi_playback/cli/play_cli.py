"""MIDI Player CLI.

Plays a MIDI file through a MIDI output port in real time.

Usage:
    midi-playback song.mid
    midi-playback song.mid --port 1 --loop 2.0
    midi-playback --list-ports
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from typing import Callable, List, Optional

from ..config import PlayerConfig, configure_logging
from ..core import MidiPlaybackError, MidiPlayer, RtMidiOutput, Song

logger = logging.getLogger(__name__)


def select_port(output: RtMidiOutput, input_func: Callable[[str], str] = input) -> int:
    """Ask for an output port until a valid index is entered

    Args:
        output: Output device whose ports are listed
        input_func: Prompt function (``input`` by default)

    Returns:
        int: Index of the chosen port
    """
    while True:
        print("Available MIDI ports:")
        for i, name in enumerate(output.list_ports()):
            print(f"{i}: {name}")

        trimmed_input = input_func("Please select a port: ").strip()
        try:
            port_number = int(trimmed_input)
        except ValueError:
            print(f"port number must be a number (got {trimmed_input})")
            continue

        last_port = output.port_count() - 1
        if not 0 <= port_number <= last_port:
            print(f"port number is out of range (last port is {last_port})")
            continue

        return port_number


class PlayCLI:
    """CLI service for real-time MIDI playback."""

    def __init__(
        self,
        song_path: str,
        config: Optional[PlayerConfig] = None,
        output_factory: Callable[[str], RtMidiOutput] = RtMidiOutput,
        input_func: Callable[[str], str] = input,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """Initialize player CLI.

        Args:
            song_path: Path to the MIDI file to play
            config: Session configuration
            output_factory: Creates the output device from a client name
            input_func: Prompt function used for port selection
            sleep: Sleep function used between updates
        """
        self.song_path = song_path
        self.config = config or PlayerConfig()
        self.output_factory = output_factory
        self.input_func = input_func
        self.sleep = sleep

    def open_output(self) -> RtMidiOutput:
        """Create the output device and connect it to the configured port"""
        output = self.output_factory(self.config.client_name)

        if output.port_count() == 0:
            # Nothing to connect to; let other software connect to us
            output.open_virtual(self.config.virtual_port_name)
            return output

        port = self.config.port
        if port is None:
            port = select_port(output, self.input_func)
        output.open(port)
        return output

    def run(self) -> int:
        """Play the song to the end.

        Returns:
            int: Process exit status
        """
        song = Song.from_path(self.song_path)

        with self.open_output() as output:
            player = MidiPlayer(output)
            player.set_midi_file(song)

            if self.config.start_sec is not None:
                player.seek_to(self.config.start_sec)
            if self.config.loop_point_sec is not None:
                player.set_loop_point(self.config.loop_point_sec)

            logger.info("[PlayCLI] %s", player)
            try:
                while not player.is_finished():
                    player.update()
                    self.sleep(self.config.poll_interval_sec)
            except KeyboardInterrupt:
                # Pausing silences every channel before the port closes
                player.set_paused(True)
                print("Playback interrupted")
                return 130

        print("Playback finished")
        return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="midi-playback",
        description="Play a MIDI file through a MIDI output port",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Choose a port interactively
  midi-playback song.mid

  # Play on port 1, looping back to 2 seconds at the end
  midi-playback song.mid --port 1 --loop 2.0

  # Show available ports
  midi-playback --list-ports
        """
    )

    parser.add_argument(
        'file',
        nargs='?',
        help='MIDI file to play'
    )
    parser.add_argument(
        '--port',
        type=int,
        default=None,
        help='Output port index (default: ask)'
    )
    parser.add_argument(
        '--list-ports',
        action='store_true',
        help='List output ports and exit'
    )
    parser.add_argument(
        '--loop',
        type=float,
        default=None,
        metavar='SECONDS',
        help='Loop back to this position when the song ends'
    )
    parser.add_argument(
        '--seek',
        type=float,
        default=None,
        metavar='SECONDS',
        help='Start playback at this position'
    )
    parser.add_argument(
        '--client-name',
        default=PlayerConfig.client_name,
        help=f'MIDI client name (default: {PlayerConfig.client_name})'
    )
    parser.add_argument(
        '--debug',
        action='store_true',
        help='Verbose logging (also enabled by MIDI_PLAYBACK_DEBUG=1)'
    )
    return parser


def list_ports(output_factory: Callable[[str], RtMidiOutput], client_name: str) -> int:
    with output_factory(client_name) as output:
        ports = output.list_ports()
        if not ports:
            print("No MIDI output ports available")
        for i, name in enumerate(ports):
            print(f"{i}: {name}")
    return 0


def main(
    argv: Optional[List[str]] = None,
    output_factory: Callable[[str], RtMidiOutput] = RtMidiOutput,
    input_func: Callable[[str], str] = input,
) -> int:
    """Main entry point for CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.list_ports:
        return list_ports(output_factory, args.client_name)

    if args.file is None:
        parser.error("the following arguments are required: file")

    try:
        config = PlayerConfig(
            client_name=args.client_name,
            port=args.port,
            loop_point_sec=args.loop,
            start_sec=args.seek,
        )
    except ValueError as e:
        parser.error(str(e))

    if args.debug:
        config.debug = True
    configure_logging(config.debug)

    try:
        cli = PlayCLI(args.file, config, output_factory=output_factory, input_func=input_func)
        return cli.run()
    except (MidiPlaybackError, OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
