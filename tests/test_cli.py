"""Tests for the command-line interface."""

import pytest
import yaml

from ffmedia.cli import build_config, build_format, get_args, run
from ffmedia.domain.exceptions import InvalidConfiguration
from ffmedia.domain.formats import X264, Aac
from ffmedia.services.driver import FFProbeDriver
from ffmedia.services.ffmpeg_service import FFMpeg
from tests.conftest import RecordingDriver, make_probe


def make_ffmpeg(driver, probe=None):
    probe = probe or make_probe()
    return FFMpeg(driver, FFProbeDriver(prober=lambda filename, cmd=None: probe))


class TestGetArgs:
    """Tests for argument parsing."""

    def test_waveform_colors(self):
        """--color can be repeated."""
        args = get_args(["waveform", "in.mp3", "out.png", "--color", "#FF0000", "--color", "#00FF00"])
        assert args.command == "waveform"
        assert args.colors == ["#FF0000", "#00FF00"]
        assert (args.width, args.height) == (640, 120)

    def test_cmd_log_default_name(self):
        """--cmd-log without a value uses the default file name."""
        args = get_args(["--cmd-log", "--log-level", "DEBUG", "probe", "in.mp3"])
        assert args.cmd_log == "cmd.txt"

    def test_unknown_format(self):
        """Only known formats are accepted."""
        with pytest.raises(SystemExit):
            get_args(["transcode", "in.wav", "out.opus", "--format", "opus"])

    def test_build_config(self):
        """Only options given on the command line are set."""
        args = get_args(["--ffmpeg-binary", "/opt/ffmpeg", "--threads", "2", "probe", "in.mp3"])
        assert build_config(args) == {"ffmpeg_binary": "/opt/ffmpeg", "threads": 2}


class TestBuildFormat:
    """Tests for build_format."""

    def test_audio_format(self):
        """Audio options are applied to the format."""
        args = get_args(["transcode", "a", "b", "--format", "aac", "--codec", "aac", "--bitrate", "96", "--channels", "1"])
        fmt = build_format(args)
        assert isinstance(fmt, Aac)
        assert fmt.audio_tokens() == ["-acodec", "aac", "-b:a", "96k", "-ac", "1"]

    def test_video_format(self):
        """Video options are applied to video formats."""
        args = get_args(["transcode", "a", "b", "--format", "x264", "--video-bitrate", "2000", "--passes", "1"])
        fmt = build_format(args)
        assert isinstance(fmt, X264)
        assert fmt.get_kilo_bitrate() == 2000
        assert fmt.get_passes() == 1

    def test_invalid_value(self):
        """Values rejected by the format raise InvalidConfiguration."""
        args = get_args(["transcode", "a", "b", "--format", "mp3", "--bitrate", "0"])
        with pytest.raises(InvalidConfiguration):
            build_format(args)


class TestRun:
    """Tests for run()."""

    def test_waveform(self, audio_file, tmp_path):
        """The waveform command renders through ffmpeg."""
        driver = RecordingDriver()
        output = tmp_path / "wave.png"
        args = get_args(["waveform", str(audio_file), str(output), "--color", "#FFFFFF", "--downmix"])
        assert run(args, make_ffmpeg(driver)) == 0
        assert driver.calls == [[
            "-y", "-i", str(audio_file),
            "-filter_complex", "showwavespic=colors=#FFFFFF:s=640x120",
            "-ac", "1",
            "-frames:v", "1",
            str(output),
        ]]

    def test_invalid_color(self, audio_file, tmp_path):
        """An invalid color fails without running ffmpeg."""
        driver = RecordingDriver()
        args = get_args(["waveform", str(audio_file), str(tmp_path / "w.png"), "--color", "white"])
        assert run(args, make_ffmpeg(driver)) == 1
        assert driver.calls == []

    def test_transcode(self, audio_file, tmp_path):
        """The transcode command uses the requested format."""
        driver = RecordingDriver()
        args = get_args(["transcode", str(audio_file), str(tmp_path / "out.flac"), "--format", "flac"])
        assert run(args, make_ffmpeg(driver)) == 0
        assert driver.calls[0][-5:] == ["-acodec", "flac", "-b:a", "128k", str(tmp_path / "out.flac")]

    def test_execution_failure(self, audio_file, tmp_path):
        """A failing ffmpeg gives exit status 1."""
        args = get_args(["waveform", str(audio_file), str(tmp_path / "w.png")])
        assert run(args, make_ffmpeg(RecordingDriver(fail=True))) == 1

    def test_missing_input(self, tmp_path):
        """A missing input gives exit status 1."""
        args = get_args(["waveform", str(tmp_path / "missing.mp3"), str(tmp_path / "w.png")])
        assert run(args, make_ffmpeg(RecordingDriver())) == 1

    def test_frame(self, video_file, tmp_path):
        """The frame command seeks to the requested position."""
        driver = RecordingDriver()
        args = get_args(["frame", str(video_file), str(tmp_path / "f.jpg"), "--at", "2.5"])
        assert run(args, make_ffmpeg(driver, make_probe(video=True))) == 0
        assert driver.calls[0][:3] == ["-y", "-ss", "00:00:02.50"]

    def test_frame_from_audio(self, audio_file, tmp_path):
        """Audio files have no frames."""
        driver = RecordingDriver()
        args = get_args(["frame", str(audio_file), str(tmp_path / "f.jpg")])
        assert run(args, make_ffmpeg(driver)) == 1
        assert driver.calls == []

    def test_probe(self, audio_file, capsys):
        """The probe command prints a YAML summary."""
        args = get_args(["probe", str(audio_file)])
        assert run(args, make_ffmpeg(RecordingDriver(), make_probe(duration="3.5", channels=1))) == 0
        summary = yaml.safe_load(capsys.readouterr().out)
        assert summary["duration"] == 3.5
        assert summary["channels"] == 1
        assert summary["audio_streams"] == ["mp3"]
        assert summary["video_streams"] == []
