"""Tests for the media types: transcoding, frame extraction and opening files."""

from pathlib import Path

import pytest

from ffmedia.domain.exceptions import ExecutionFailed, InvalidConfiguration, MediaFileException, NoDurationFoundException
from ffmedia.domain.formats import X264, Mp3, Vorbis
from ffmedia.services.driver import FFProbeDriver
from ffmedia.services.ffmpeg_service import FFMpeg
from ffmedia.services.media_types import Audio, Frame, Video
from tests.conftest import RecordingDriver, make_probe


def ffprobe_for(probe):
    return FFProbeDriver(prober=lambda filename, cmd=None: probe)


class TestAudioSave:
    """Tests for Audio.save."""

    def test_tokens(self, ffprobe):
        """Input, threads, filters, then the format's audio options."""
        driver = RecordingDriver(threads=4)
        audio = Audio("in.wav", driver, ffprobe)
        audio.filters().resample(44100)
        result = audio.save(Mp3().set_audio_kilo_bitrate(192), "out.mp3")

        assert driver.calls == [[
            "-y", "-i", "in.wav", "-threads", "4",
            "-ac", "2", "-ar", "44100",
            "-acodec", "libmp3lame", "-b:a", "192k",
            "out.mp3",
        ]]
        assert result.path == Path("out.mp3")

    def test_vorbis_tokens(self, ffprobe):
        """Vorbis adds the experimental flag after the codec."""
        driver = RecordingDriver()
        Audio("in.wav", driver, ffprobe).save(Vorbis().set_audio_channels(2), "out.ogg")
        assert driver.calls[0] == [
            "-y", "-i", "in.wav", "-acodec", "vorbis", "-strict", "-2", "-b:a", "128k", "-ac", "2", "out.ogg",
        ]

    def test_progress(self, audio_file, ffprobe):
        """Status lines are reported through the callback."""
        reports = []
        driver = RecordingDriver(stderr_lines=[
            "Input #0, mp3, from 'in.mp3':",
            "size=      64kB time=00:00:05.00 bitrate= 104.9kbits/s speed=50x",
        ])
        Audio(audio_file, driver, ffprobe).save(Mp3(), audio_file.with_suffix(".aac"), on_progress=reports.append)
        assert [info.percent for info in reports] == [50]

    def test_no_probe_without_progress(self, driver):
        """Without a callback the file is not probed."""

        def prober(filename, cmd=None):
            raise AssertionError("unexpected probe")

        Audio("in.wav", driver, FFProbeDriver(prober=prober)).save(Mp3(), "out.mp3")
        assert len(driver.calls) == 1

    def test_progress_needs_duration(self, audio_file):
        """Progress cannot be reported without a duration, and ffmpeg is not run."""
        driver = RecordingDriver()
        audio = Audio(audio_file, driver, ffprobe_for(make_probe(duration=None)))
        with pytest.raises(NoDurationFoundException):
            audio.save(Mp3(), audio_file.with_suffix(".aac"), on_progress=lambda info: None)
        assert driver.calls == []

    def test_no_duration_without_progress(self, audio_file):
        """Transcoding without a callback does not need a duration."""
        driver = RecordingDriver()
        Audio(audio_file, driver, ffprobe_for(make_probe(duration=None))).save(Mp3(), audio_file.with_suffix(".aac"))
        assert len(driver.calls) == 1

    def test_failure_removes_output(self, audio_file, ffprobe, tmp_path):
        """A failed transcode leaves no output behind."""
        destination = tmp_path / "out.mp3"
        with pytest.raises(ExecutionFailed):
            Audio(audio_file, RecordingDriver(fail=True, write_output=True), ffprobe).save(Mp3(), destination)
        assert not destination.exists()


class TestVideoSave:
    """Tests for Video.save."""

    def test_two_passes(self, video, driver, tmp_path):
        """X264 runs two passes sharing a pass log that is removed afterwards."""
        destination = tmp_path / "out.mp4"
        video.save(X264(), destination)

        assert len(driver.calls) == 2
        first, second = driver.calls
        assert first[:3] == ["-y", "-i", str(video.get_pathfile())]
        assert first[3:11] == ["-vcodec", "libx264", "-b:v", "1000k", "-acodec", "aac", "-b:a", "128k"]
        assert first[11:13] == ["-pass", "1"]
        assert second[11:13] == ["-pass", "2"]
        assert first[13] == "-passlogfile"
        assert first[14] == second[14]
        assert first[-1] == second[-1] == str(destination)
        assert not Path(first[14]).parent.exists()

    def test_single_pass(self, video, driver, tmp_path):
        """A single pass has no pass options."""
        fmt = X264().set_passes(1).set_kilo_bitrate(0)
        fmt.set_initial_parameters(["-hwaccel", "auto"]).set_additional_parameters(["-preset", "fast"])
        video.save(fmt, tmp_path / "out.mp4")

        assert driver.calls == [[
            "-y", "-hwaccel", "auto", "-i", str(video.get_pathfile()),
            "-vcodec", "libx264", "-acodec", "aac", "-b:a", "128k", "-preset", "fast",
            str(tmp_path / "out.mp4"),
        ]]

    def test_filters_before_codec_options(self, video, driver, tmp_path):
        """Video filters come between the input and the output options."""
        video.filters().resize(640, 360).rotate(90)
        video.save(X264().set_passes(1), tmp_path / "out.mp4")
        tokens = driver.calls[0]
        assert tokens[3:7] == ["-vf", "scale=640:360,transpose=1", "-metadata:s:v:0", "rotate=0"]
        assert tokens[7] == "-vcodec"

    def test_progress_per_pass(self, video_file, tmp_path):
        """Progress spans both passes."""
        reports = []
        driver = RecordingDriver(stderr_lines=["frame=  100 fps=50 q=28.0 size=  256kB time=00:00:05.00 bitrate=1x"])
        video = Video(video_file, driver, ffprobe_for(make_probe(video=True)))
        video.save(X264(), tmp_path / "out.mp4", on_progress=reports.append)
        assert [info.percent for info in reports] == [25, 75]

    def test_audio_format(self, video, driver, tmp_path):
        """Saving a video to an audio format extracts the audio."""
        video.save(Mp3(), tmp_path / "out.mp3")
        assert driver.calls[0] == [
            "-y", "-i", str(video.get_pathfile()), "-acodec", "libmp3lame", "-b:a", "128k", str(tmp_path / "out.mp3"),
        ]

    def test_failed_first_pass(self, video_file, tmp_path):
        """A failing pass stops the encoding and cleans up."""
        driver = RecordingDriver(fail=True, write_output=True)
        video = Video(video_file, driver, ffprobe_for(make_probe(video=True)))
        destination = tmp_path / "out.mp4"
        with pytest.raises(ExecutionFailed):
            video.save(X264(), destination)
        assert len(driver.calls) == 1
        assert not destination.exists()
        assert not Path(driver.calls[0][14]).parent.exists()


class TestFrame:
    """Tests for Frame.save."""

    def test_fast_seek(self, video, driver, tmp_path):
        """By default the position is set before the input."""
        frame = video.frame(12.5)
        assert isinstance(frame, Frame)
        frame.save(tmp_path / "frame.jpg")
        assert driver.calls[0] == [
            "-y", "-ss", "00:00:12.50", "-i", str(video.get_pathfile()),
            "-frames:v", "1", "-f", "image2", str(tmp_path / "frame.jpg"),
        ]

    def test_accurate_seek(self, video, driver, tmp_path):
        """Accurate extraction seeks after opening the input."""
        video.frame("00:01:00.00").save(tmp_path / "frame.png", accurate=True)
        assert driver.calls[0][:5] == ["-y", "-i", str(video.get_pathfile()), "-ss", "00:01:00.00"]

    def test_invalid_position(self, video):
        """Unparseable positions are rejected."""
        with pytest.raises(InvalidConfiguration):
            video.frame("soon")

    def test_get_video(self, video):
        """The frame keeps a reference to its video."""
        frame = video.frame(0)
        assert frame.get_video() is video
        assert str(frame.get_timecode()) == "00:00:00.00"


class TestFFMpegOpen:
    """Tests for FFMpeg.open."""

    def test_audio(self, audio_file):
        """A file with only audio opens as Audio."""
        media = FFMpeg(RecordingDriver(), ffprobe_for(make_probe())).open(audio_file)
        assert type(media) is Audio

    def test_video(self, video_file):
        """A file with a video stream opens as Video."""
        media = FFMpeg(RecordingDriver(), ffprobe_for(make_probe(video=True))).open(video_file)
        assert isinstance(media, Video)

    def test_cover_art(self, audio_file):
        """Embedded cover art does not make a file a video."""
        media = FFMpeg(RecordingDriver(), ffprobe_for(make_probe(video=True, attached_pic=True))).open(audio_file)
        assert type(media) is Audio

    def test_no_streams(self, audio_file):
        """Files with neither audio nor video are rejected."""
        probe = {"streams": [], "format": {"duration": "1.0"}}
        with pytest.raises(MediaFileException):
            FFMpeg(RecordingDriver(), ffprobe_for(probe)).open(audio_file)

    def test_without_duration(self, audio_file, tmp_path):
        """A file without a duration still opens and renders a waveform."""
        driver = RecordingDriver()
        media = FFMpeg(driver, ffprobe_for(make_probe(duration=None))).open(audio_file)
        media.waveform().save(tmp_path / "wave.png")
        assert len(driver.calls) == 1

    def test_missing_file(self, tmp_path):
        """Opening a missing file fails."""
        with pytest.raises(FileNotFoundError):
            FFMpeg(RecordingDriver(), ffprobe_for(make_probe())).open(tmp_path / "missing.mp3")

    def test_cmd_log_shared(self, audio_file, tmp_path):
        """Opened media run through the instance's orchestrator."""
        driver = RecordingDriver()
        log_path = tmp_path / "cmd.txt"
        ffmpeg = FFMpeg(driver, ffprobe_for(make_probe()), cmd_log_file_path=log_path)
        ffmpeg.open(audio_file).waveform().save(tmp_path / "wave.png")
        assert driver.cmd_log_paths == [log_path]
        assert ffmpeg.get_driver() is driver
