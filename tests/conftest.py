"""Shared fixtures: a recording stand-in for the ffmpeg driver and canned probe data."""

from pathlib import Path

import pytest

from ffmedia.services.driver import CommandResult, DriverExecutionError, FFProbeDriver
from ffmedia.services.media_types import Audio, Video


class RecordingDriver:
    """Records the tokens it is asked to run instead of spawning ffmpeg.

    Args:
        fail: Raise DriverExecutionError after recording the call.
        stderr_lines: Lines fed to the progress listeners during the call.
        write_output: Create the destination file (last token) before
            returning or failing, like ffmpeg does when it dies half-way.
    """

    def __init__(self, fail=False, returncode=1, stderr="Error while decoding stream",
                 stderr_lines=(), write_output=False, threads=None):
        self.fail = fail
        self.returncode = returncode
        self.stderr = stderr
        self.stderr_lines = list(stderr_lines)
        self.write_output = write_output
        self.threads = threads
        self.calls = []
        self.cmd_log_paths = []

    def run(self, args, listeners=None, cmd_log_file_path=None):
        self.calls.append(list(args))
        self.cmd_log_paths.append(cmd_log_file_path)
        for line in self.stderr_lines:
            for listener in listeners or []:
                listener.handle(line)
        if self.write_output:
            Path(args[-1]).write_bytes(b"partial")
        if self.fail:
            raise DriverExecutionError(
                f"Command failed with exit code {self.returncode}",
                returncode=self.returncode,
                stderr=self.stderr,
                command=["ffmpeg", *args],
            )
        return CommandResult(0, "", "", ("ffmpeg", *args))


def make_probe(duration="10.000000", channels=2, video=False, attached_pic=False):
    streams = [{"index": 0, "codec_type": "audio", "codec_name": "mp3", "channels": channels}]
    if video:
        streams.insert(0, {
            "index": 1,
            "codec_type": "video",
            "codec_name": "mjpeg" if attached_pic else "h264",
            "width": 1280,
            "height": 720,
            "disposition": {"attached_pic": 1 if attached_pic else 0},
        })
    probe = {"streams": streams, "format": {"filename": "in", "format_name": "mp3"}}
    if duration is not None:
        probe["format"]["duration"] = duration
    return probe


@pytest.fixture
def driver():
    return RecordingDriver()


@pytest.fixture
def failing_driver():
    return RecordingDriver(fail=True, write_output=True)


@pytest.fixture
def probe_data():
    return make_probe()


@pytest.fixture
def ffprobe(probe_data):
    return FFProbeDriver(binary="ffprobe", prober=lambda filename, cmd=None: probe_data)


@pytest.fixture
def audio_file(tmp_path):
    path = tmp_path / "in.mp3"
    path.write_bytes(b"ID3")
    return path


@pytest.fixture
def audio(audio_file, driver, ffprobe):
    return Audio(audio_file, driver, ffprobe)


@pytest.fixture
def video_file(tmp_path):
    path = tmp_path / "in.mp4"
    path.write_bytes(b"\x00\x00\x00\x18ftypmp42")
    return path


@pytest.fixture
def video(video_file, driver):
    probe = make_probe(video=True)
    return Video(video_file, driver, FFProbeDriver(prober=lambda filename, cmd=None: probe))
