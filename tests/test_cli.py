"""Tests for the command-line interface."""

from tts_switchboard import __version__
from tts_switchboard.cli import main
from tts_switchboard.testing import FakeRemoteClient, MockConfig, create_test_switchboard, remote_failure
from tts_switchboard.types import Environment


class TestCLI:
    """Tests for main()."""

    def test_version(self, capsys):
        assert main(["version"]) == 0
        assert f"tts-switchboard {__version__}" in capsys.readouterr().out

    def test_no_command_prints_help(self, capsys):
        assert main([]) == 0
        assert "usage: tts-switchboard" in capsys.readouterr().out

    def test_engines(self, capsys):
        board = create_test_switchboard(engines=["mock", "azure"])

        assert main(["engines"], switchboard=board) == 0

        out = capsys.readouterr().out
        assert "Engines (mode: server)" in out
        assert "Best engine: azure" in out
        assert "enabled, compatible" in out

    def test_engines_none_enabled(self, capsys):
        board = create_test_switchboard(engines=[])
        assert main(["engines", "-m", "server"], switchboard=board) == 0
        out = capsys.readouterr().out
        assert "Engines (mode: hybrid)" in out
        assert "Best engine: none" in out

    def test_mode(self, capsys):
        board = create_test_switchboard(engines=["azure"])

        assert main(["mode", "browser"], switchboard=board) == 0

        out = capsys.readouterr().out
        assert "Requested:   browser" in out
        assert "Effective:   server" in out
        assert "Offline:     no" in out

    def test_voices(self, capsys):
        board = create_test_switchboard(engines=["mock"], environment=Environment.BROWSER)

        assert main(["voices", "mock", "-m", "browser"], switchboard=board) == 0
        assert "mock-voice" in capsys.readouterr().out

    def test_voices_empty(self, capsys):
        board = create_test_switchboard(engines=["azure"], remote=FakeRemoteClient())
        assert main(["voices", "azure"], switchboard=board) == 0
        assert "No voices available." in capsys.readouterr().out

    def test_speak(self, capsys, tmp_path):
        board = create_test_switchboard(engines=["mock"], environment=Environment.BROWSER)
        output = tmp_path / "hello.wav"

        code = main(
            ["speak", "Hello", "-e", "mock", "-m", "browser", "-r", "1.2", "-o", str(output)],
            switchboard=board,
        )

        assert code == 0
        assert output.read_bytes() == MockConfig().audio
        out = capsys.readouterr().out
        assert f"Audio saved to: {output}" in out
        assert "Voice: mock-voice" in out
        assert "in_process, browser mode" in out

    def test_speak_failure_returns_error(self, capsys, tmp_path):
        remote = FakeRemoteClient()
        remote.fail_synthesis = remote_failure(message="Failed to synthesize speech: 503 Service Unavailable")
        board = create_test_switchboard(engines=["azure"], remote=remote)

        code = main(
            ["speak", "Hello", "-e", "azure", "-v", "jenny", "-o", str(tmp_path / "x.wav")],
            switchboard=board,
        )

        assert code == 1
        assert "Error: Failed to synthesize speech" in capsys.readouterr().err
        assert not (tmp_path / "x.wav").exists()

    def test_speak_without_engine(self, capsys):
        board = create_test_switchboard(engines=[])
        assert main(["speak", "Hello"], switchboard=board) == 1
        assert "no usable engine" in capsys.readouterr().err
