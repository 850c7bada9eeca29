import logging

import pytest

from midi_playback.cli.play_cli import PlayCLI, main, select_port
from midi_playback.config import PlayerConfig

from conftest import ALL_SOUND_OFF, make_midi_file, note_on, note_on_bytes, set_tempo


class FakeOutput:
    """Stands in for RtMidiOutput."""

    instances = []

    def __init__(self, client_name="midi-playback", ports=("Synth A", "Synth B")):
        self.client_name = client_name
        self.ports = list(ports)
        self.sent = []
        self.opened = None
        self.virtual = None
        self.closed = False
        FakeOutput.instances.append(self)

    def list_ports(self):
        return list(self.ports)

    def port_count(self):
        return len(self.ports)

    def open(self, index):
        self.opened = index

    def open_virtual(self, name):
        self.virtual = name

    def send(self, data):
        self.sent.append(bytes(data))

    def close(self):
        self.closed = True

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()


@pytest.fixture(autouse=True)
def reset_instances():
    FakeOutput.instances = []
    yield
    # main() attaches a stderr handler bound to this test's captured stream
    package_logger = logging.getLogger('midi_playback')
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
    package_logger.setLevel(logging.NOTSET)


@pytest.fixture
def song_path(tmp_path):
    path = tmp_path / 'song.mid'
    make_midi_file([[set_tempo(), note_on(60, time=2)]], midi_type=0).save(str(path))
    return str(path)


def answers(*replies):
    replies = list(replies)
    return lambda prompt: replies.pop(0)


def test_select_port_retries_until_valid(capsys):
    port = select_port(FakeOutput(), answers("abc", "5", "-1", " 1 "))

    assert port == 1
    out = capsys.readouterr().out
    assert "0: Synth A" in out
    assert "1: Synth B" in out
    assert "port number must be a number (got abc)" in out
    assert "port number is out of range (last port is 1)" in out


def test_list_ports(capsys):
    assert main(['--list-ports'], output_factory=FakeOutput) == 0
    assert capsys.readouterr().out.splitlines() == ["0: Synth A", "1: Synth B"]
    assert FakeOutput.instances[0].closed


def test_plays_file_on_chosen_port(song_path, capsys):
    status = main([song_path, '--port', '1'], output_factory=FakeOutput)

    assert status == 0
    output = FakeOutput.instances[0]
    assert output.opened == 1
    assert output.sent[:16] == ALL_SOUND_OFF
    assert note_on_bytes(60) in output.sent
    assert output.closed
    assert "Playback finished" in capsys.readouterr().out


def test_prompts_for_port_when_not_given(song_path):
    status = main([song_path], output_factory=FakeOutput, input_func=answers("0"))
    assert status == 0
    assert FakeOutput.instances[0].opened == 0


def test_virtual_port_when_no_ports_exist(song_path):
    cli = PlayCLI(
        song_path,
        PlayerConfig(debug=False),
        output_factory=lambda name: FakeOutput(name, ports=()),
        sleep=lambda seconds: None,
    )
    assert cli.run() == 0
    output = FakeOutput.instances[0]
    assert output.virtual == PlayerConfig.virtual_port_name
    assert output.opened is None


def test_seek_option_skips_ahead(song_path):
    status = main([song_path, '--port', '0', '--seek', '5.0'], output_factory=FakeOutput)
    assert status == 0
    output = FakeOutput.instances[0]
    assert note_on_bytes(60) not in output.sent
    assert output.sent == ALL_SOUND_OFF * 2


def test_missing_file_exits_with_error(tmp_path, capsys):
    status = main([str(tmp_path / 'missing.mid'), '--port', '0'], output_factory=FakeOutput)
    assert status == 1
    assert "Error:" in capsys.readouterr().err


def test_malformed_file_exits_with_error(tmp_path, capsys):
    path = tmp_path / 'bad.mid'
    path.write_bytes(b'not a midi file at all')
    status = main([str(path), '--port', '0'], output_factory=FakeOutput)
    assert status == 1
    assert "Failed to parse MIDI data" in capsys.readouterr().err


def test_file_argument_is_required():
    with pytest.raises(SystemExit) as exc_info:
        main([], output_factory=FakeOutput)
    assert exc_info.value.code == 2


def test_negative_loop_point_is_rejected(song_path):
    with pytest.raises(SystemExit):
        main([song_path, '--loop', '-1'], output_factory=FakeOutput)


def test_config_debug_from_environment(monkeypatch):
    monkeypatch.setenv('MIDI_PLAYBACK_DEBUG', '1')
    assert PlayerConfig().debug
    monkeypatch.setenv('MIDI_PLAYBACK_DEBUG', '0')
    assert not PlayerConfig().debug
