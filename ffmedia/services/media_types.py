"""
Media types and the operations they offer.

An `Audio` can be transcoded or rendered as a waveform picture, a `Video` can
additionally be transcoded to a video format or have a still frame extracted.
Each operation collects the caller's configuration (format, filters, colors)
and hands it to the `CommandOrchestrator`, which assembles and runs the ffmpeg
command.
"""
import re
import shutil
import tempfile
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Union

from loguru import logger

from .driver import FFMpegDriver, FFProbeDriver
from .orchestrator import CommandOrchestrator, OperationConfiguration, OperationResult
from .progress import ProgressInfo
from ..config.audio import (
    WAVEFORM_COLOR_PATTERN,
    WAVEFORM_DEFAULT_COLOR,
    WAVEFORM_DEFAULT_HEIGHT,
    WAVEFORM_DEFAULT_WIDTH,
    WAVEFORM_FILTER_NAME,
)
from ..config.video import FRAME_COUNT, FRAME_IMAGE_MUXER, PASS_LOG_PREFIX
from ..domain.exceptions import InvalidConfiguration
from ..domain.formats import DefaultAudio, DefaultVideo
from ..domain.media import MediaFile, MediaSource
from ..filters.audio import AudioFilters
from ..filters.base import Filter, FilterPipeline
from ..filters.video import VideoFilters
from ..filters.waveform import WaveformFilters
from ..utils.format_utils import TimeCode, to_timecode

ProgressCallback = Callable[[ProgressInfo], None]

_COLOR = re.compile(WAVEFORM_COLOR_PATTERN)


class AbstractMediaType:
    """
    Base class of every media type.

    Args:
        pathfile: The file the media type reads from.
        driver: Runs ffmpeg.
        ffprobe: Probes the file when metadata is needed.
        orchestrator: Assembles and runs commands; built from `driver` when omitted.
    """

    def __init__(
        self,
        pathfile: Union[str, Path],
        driver: FFMpegDriver,
        ffprobe: FFProbeDriver,
        orchestrator: Optional[CommandOrchestrator] = None,
    ):
        self.pathfile = Path(pathfile)
        self.driver = driver
        self.ffprobe = ffprobe
        self.orchestrator = orchestrator or CommandOrchestrator(driver)
        self._filters = FilterPipeline()

    def get_pathfile(self) -> Path:
        return self.pathfile

    def get_source(self) -> MediaSource:
        return MediaSource(self.pathfile)

    def get_media_file(self) -> MediaFile:
        """The probe results of the file, read on first use."""
        return self.ffprobe.probe(self.pathfile)

    def get_filters_collection(self) -> FilterPipeline:
        return self._filters

    def add_filter(self, filter_obj: Filter):
        self._filters.add(filter_obj)
        return self

    def filters(self):
        raise NotImplementedError("Subclasses must implement the filters() method.")

    def __repr__(self) -> str:
        return f"{type(self).__name__}('{self.pathfile}')"


class HasAssociatedAudio:
    """Capability of media types derived from an audio track."""

    def get_audio(self) -> "Audio":
        raise NotImplementedError("Subclasses must implement the get_audio() method.")


class AudioTranscode(OperationConfiguration):
    """
    Transcoding of the audio track of `media` to an audio format.

    Command: `-y -i SRC [-threads N] <filters> [-acodec C] <extra> -b:a Nk [-ac N] OUT`
    """

    def __init__(self, media: "Audio", format: DefaultAudio, threads: Optional[int] = None):
        self.media = media
        self.format = format
        self.threads = threads

    def get_audio(self) -> "Audio":
        return self.media

    def preamble(self, source: MediaSource) -> List[str]:
        commands = ["-y", "-i", str(source)]
        if self.threads:
            commands.extend(["-threads", str(self.threads)])
        return commands

    def trailer(self) -> List[str]:
        return self.format.audio_tokens()


class VideoTranscode(OperationConfiguration):
    """
    One pass of the transcoding of `media` to a video format.

    Multi-pass formats get `-pass N -passlogfile PREFIX` so that ffmpeg finds
    the statistics written by the previous pass.
    """

    def __init__(
        self,
        media: "Video",
        format: DefaultVideo,
        threads: Optional[int] = None,
        current_pass: int = 1,
        total_passes: int = 1,
        pass_log_prefix: Optional[Path] = None,
    ):
        self.media = media
        self.format = format
        self.threads = threads
        self.current_pass = current_pass
        self.total_passes = total_passes
        self.pass_log_prefix = pass_log_prefix

    def get_audio(self) -> "Video":
        return self.media

    def preamble(self, source: MediaSource) -> List[str]:
        commands = ["-y", *self.format.get_initial_parameters(), "-i", str(source)]
        if self.threads:
            commands.extend(["-threads", str(self.threads)])
        return commands

    def trailer(self) -> List[str]:
        commands = self.format.video_tokens()
        commands.extend(self.format.audio_tokens())
        commands.extend(self.format.get_additional_parameters())
        if self.total_passes > 1:
            commands.extend(["-pass", str(self.current_pass), "-passlogfile", str(self.pass_log_prefix)])
        return commands


class Audio(AbstractMediaType):
    """An audio file."""

    def filters(self) -> AudioFilters:
        return AudioFilters(self)

    def save(
        self,
        format: DefaultAudio,
        output_pathfile: Union[str, Path],
        on_progress: Optional[ProgressCallback] = None,
    ) -> OperationResult:
        """
        Transcodes the audio to `format` and writes it to `output_pathfile`.

        Args:
            format: The target audio format.
            output_pathfile: Where the transcoded file is written.
            on_progress: Called with a `ProgressInfo` while ffmpeg runs.

        Raises:
            NoDurationFoundException: If progress is requested for a file
                                      without a known duration.
            ExecutionFailed: If ffmpeg fails; the partial output is removed.
        """
        operation = AudioTranscode(self, format, threads=self.driver.threads)
        listeners = []
        if on_progress is not None:
            listeners = format.create_progress_listener(self.get_media_file().require_duration(), on_progress)
        logger.info(f"Transcoding {self.pathfile.name} to {output_pathfile} with {format!r}")
        return self.orchestrator.execute(
            self.get_source(), operation, self._filters, output_pathfile, listeners=listeners
        )

    def waveform(
        self,
        width: int = WAVEFORM_DEFAULT_WIDTH,
        height: int = WAVEFORM_DEFAULT_HEIGHT,
        colors: Sequence[str] = (WAVEFORM_DEFAULT_COLOR,),
    ) -> "Waveform":
        """Creates a waveform picture operation for this audio."""
        return Waveform(self, self.driver, self.ffprobe, width, height, colors, orchestrator=self.orchestrator)


class Video(Audio):
    """A video file, possibly with audio tracks."""

    def filters(self) -> VideoFilters:
        return VideoFilters(self)

    def save(
        self,
        format: DefaultVideo,
        output_pathfile: Union[str, Path],
        on_progress: Optional[ProgressCallback] = None,
    ) -> OperationResult:
        """
        Transcodes the video to `format`, running one ffmpeg invocation per pass.

        The pass statistics are written in a temporary directory that is
        removed afterwards, whatever the outcome.

        Raises:
            ExecutionFailed: If any pass fails; the partial output is removed.
            NoDurationFoundException: If progress is requested for a file
                                      without a known duration.
        """
        if not isinstance(format, DefaultVideo):
            return super().save(format, output_pathfile, on_progress)

        total_passes = format.get_passes()
        duration = self.get_media_file().require_duration() if on_progress is not None else 0
        pass_log_dir = Path(tempfile.mkdtemp(prefix="ffmedia-passes-")) if total_passes > 1 else None
        result = None
        try:
            for current_pass in range(1, total_passes + 1):
                operation = VideoTranscode(
                    self,
                    format,
                    threads=self.driver.threads,
                    current_pass=current_pass,
                    total_passes=total_passes,
                    pass_log_prefix=pass_log_dir / PASS_LOG_PREFIX if pass_log_dir else None,
                )
                listeners = []
                if on_progress is not None:
                    listeners = format.create_progress_listener(duration, on_progress, current_pass, total_passes)
                logger.info(f"Encoding {self.pathfile.name} to {output_pathfile}, pass {current_pass}/{total_passes}")
                result = self.orchestrator.execute(
                    self.get_source(), operation, self._filters, output_pathfile, listeners=listeners
                )
        finally:
            if pass_log_dir is not None:
                shutil.rmtree(pass_log_dir, ignore_errors=True)
        return result

    def frame(self, at: Union[TimeCode, float, str]) -> "Frame":
        """Creates a still frame extraction at the given position."""
        return Frame(self, self.driver, self.ffprobe, at, orchestrator=self.orchestrator)


class Frame(AbstractMediaType, OperationConfiguration):
    """
    A single frame of a video, saved as an image.

    By default ffmpeg seeks before opening the input, which is fast but snaps
    to the nearest key frame. `save(..., accurate=True)` decodes up to the
    exact position instead.
    """

    def __init__(
        self,
        video: Video,
        driver: FFMpegDriver,
        ffprobe: FFProbeDriver,
        timecode: Union[TimeCode, float, str],
        orchestrator: Optional[CommandOrchestrator] = None,
    ):
        super().__init__(video.get_pathfile(), driver, ffprobe, orchestrator)
        self.video = video
        try:
            self.timecode = to_timecode(timecode)
        except ValueError as e:
            raise InvalidConfiguration(str(e)) from e
        self.accurate = False

    def get_video(self) -> Video:
        return self.video

    def get_timecode(self) -> TimeCode:
        return self.timecode

    def filters(self) -> VideoFilters:
        return VideoFilters(self)

    def preamble(self, source: MediaSource) -> List[str]:
        if self.accurate:
            return ["-y", "-i", str(source), "-ss", str(self.timecode)]
        return ["-y", "-ss", str(self.timecode), "-i", str(source)]

    def trailer(self) -> List[str]:
        return ["-frames:v", str(FRAME_COUNT), "-f", FRAME_IMAGE_MUXER]

    def save(self, pathfile: Union[str, Path], accurate: bool = False) -> OperationResult:
        """
        Saves the frame as an image.

        Raises:
            ExecutionFailed: If ffmpeg fails; the partial image is removed.
        """
        self.accurate = accurate
        return self.orchestrator.execute(self.get_source(), self, self._filters, pathfile)


class Waveform(AbstractMediaType, OperationConfiguration, HasAssociatedAudio):
    """
    A picture of the waveform of an audio track.

    Colors apply only to the waveform itself. The background cannot be
    controlled as easily; saving the waveform as a transparent PNG and adding
    the background afterwards is the simplest way. Saving to PNG is strongly
    recommended, a black waveform saved as JPEG appears completely black.
    """

    DEFAULT_COLOR = WAVEFORM_DEFAULT_COLOR

    def __init__(
        self,
        audio: Audio,
        driver: FFMpegDriver,
        ffprobe: FFProbeDriver,
        width: int = WAVEFORM_DEFAULT_WIDTH,
        height: int = WAVEFORM_DEFAULT_HEIGHT,
        colors: Sequence[str] = (WAVEFORM_DEFAULT_COLOR,),
        orchestrator: Optional[CommandOrchestrator] = None,
    ):
        super().__init__(audio.get_pathfile(), driver, ffprobe, orchestrator)
        self.audio = audio
        self.width = self._dimension(width, "width")
        self.height = self._dimension(height, "height")
        self.colors: List[str] = [self.DEFAULT_COLOR]
        self.set_colors(colors)

    @staticmethod
    def _dimension(value, name: str) -> int:
        if isinstance(value, bool) or not isinstance(value, int) or value < 1:
            raise InvalidConfiguration(f"Invalid waveform {name} {value!r}, a positive integer is expected")
        return value

    def get_audio(self) -> Audio:
        return self.audio

    def filters(self) -> WaveformFilters:
        return WaveformFilters(self)

    def set_colors(self, colors: Sequence[str]):
        """
        Replaces the waveform colors.

        Every entry must be an HTML color string such as `#FFFFFF`. The list
        is validated as a whole: one invalid entry rejects the call and the
        current colors stay in place. An empty list keeps the current colors.

        Raises:
            InvalidConfiguration: If any entry is not a `#RRGGBB` string.
        """
        if isinstance(colors, str):
            colors = [colors]
        colors = list(colors)
        for value in colors:
            if not isinstance(value, str) or not _COLOR.fullmatch(value):
                raise InvalidConfiguration(f"The provided color '{value}' is invalid")

        if colors:
            self.colors = colors
        return self

    def get_colors(self) -> List[str]:
        """The colors passed to ffmpeg, never empty."""
        return list(self.colors)

    def compile_colors(self) -> str:
        return "|".join(self.colors)

    def preamble(self, source: MediaSource) -> List[str]:
        graph = f"{WAVEFORM_FILTER_NAME}=colors={self.compile_colors()}:s={self.width}x{self.height}"
        return ["-y", "-i", str(source), "-filter_complex", graph]

    def trailer(self) -> List[str]:
        return ["-frames:v", str(FRAME_COUNT)]

    def save(self, pathfile: Union[str, Path]) -> OperationResult:
        """
        Renders the waveform into `pathfile`.

        Raises:
            ExecutionFailed: If ffmpeg fails; the partial picture is removed.
        """
        logger.info(f"Rendering waveform of {self.pathfile.name} ({self.width}x{self.height}) to {pathfile}")
        return self.orchestrator.execute(self.get_source(), self, self._filters, pathfile)
