import re
from dataclasses import dataclass
from pathlib import Path
from pprint import pformat
from typing import Callable, Optional, Union

import ffmpeg
from loguru import logger

from .exceptions import MediaFileException, NoDurationFoundException, ProbeFailed
from ..config.common import FFPROBE_BINARY


@dataclass(frozen=True)
class MediaSource:
    """
    An immutable reference to the input file of an operation.

    Attributes:
        path (Path): The input file as given by the caller.
    """

    path: Path

    @classmethod
    def of(cls, path: Union[str, Path, "MediaSource"]) -> "MediaSource":
        if isinstance(path, MediaSource):
            return path
        return cls(Path(path))

    def __str__(self) -> str:
        return str(self.path)


def parse_duration(duration_str: str) -> float:
    """
    Parses a duration string into total seconds.

    This function is designed to handle two common duration formats provided by ffprobe:
    1. A simple string representing a floating-point number of seconds (e.g., "3600.5").
    2. A timecode string in the format 'HH:MM:SS.sss' (e.g., "01:00:00.500").
       Hours are optional in the timecode format.

    Args:
        duration_str: The string containing the duration to parse.

    Returns:
        The total duration in seconds as a float. Returns 0.0 if parsing fails.
    """
    try:
        return float(duration_str)
    except ValueError:
        pattern = r"(?:(\d{1,2}):)?(\d{1,2}):(\d{1,2}(?:\.\d+)?)"
        match = re.fullmatch(pattern, duration_str)
        if match:
            hours_str, minutes_str, seconds_str = match.groups()
            hours = int(hours_str) if hours_str else 0
            minutes = int(minutes_str)
            seconds = float(seconds_str)
            return float(hours * 3600 + minutes * 60 + seconds)
        logger.warning(f"Could not parse duration string: {duration_str}")
    return 0.0


class MediaFile:
    """
    Represents a single media file and provides a clean interface to its metadata.

    When instantiated with a file path, it uses `ffprobe` (via the ffmpeg-python
    library) to analyze the file and populates its attributes with the duration
    and the streams found in it. Operations use it to compute progress
    percentages and to find out how many audio channels a source has.

    Attributes:
        path (Path): The absolute path to the media file.
        filename (str): The name of the file, including its extension.
        size (int): The size of the file in bytes.
        probe (dict): The raw `ffprobe` output as a nested dictionary.
        duration (float): The duration of the media in seconds.
        video_streams (list): A list of dictionaries, each representing a video stream.
        audio_streams (list): A list of dictionaries, each representing an audio stream.
    """

    def __init__(
        self,
        path: Union[str, Path],
        ffprobe_binary: str = FFPROBE_BINARY,
        prober: Optional[Callable[..., dict]] = None,
    ):
        """
        Initializes the MediaFile object by probing the file at the given path.

        Args:
            path: The media file to analyze.
            ffprobe_binary: The ffprobe executable passed to `ffmpeg.probe`.
            prober: Replacement for `ffmpeg.probe`, called with the file name
                    and a `cmd` keyword argument.

        Raises:
            FileNotFoundError: If the file does not exist at the given path.
            ProbeFailed: If ffprobe cannot read the file.
        """
        path = Path(path)
        if not path.exists():
            logger.error(f"MediaFile initialization error: File does not exist at {path}")
            raise FileNotFoundError(f"Media file not found: {path}")

        self.path: Path = path.resolve()
        self.filename: str = self.path.name
        self.size: int = self.path.stat().st_size
        self.ffprobe_binary = ffprobe_binary
        self._prober = prober or ffmpeg.probe
        self.probe: dict = {}
        self.duration: float = 0
        self.video_streams: list = []
        self.audio_streams: list = []

        self.set_probe()
        self.set_streams()
        self.set_duration()

    def set_probe(self):
        """
        Probes the media file to extract all metadata.

        Raises:
            ProbeFailed: If ffprobe exits with an error or returns something
                         that is not a JSON object.
        """
        try:
            probe = self._prober(str(self.path), cmd=self.ffprobe_binary)
        except ffmpeg.Error as e:
            stderr = e.stderr.decode("utf-8", errors="replace") if isinstance(e.stderr, bytes) else str(e.stderr)
            logger.error(f"ffmpeg.probe failed for {self.path}: {stderr}")
            raise ProbeFailed(f"Failed to probe media file {self.path}: {stderr}") from e
        except FileNotFoundError as e:
            logger.error(f"ffprobe executable '{self.ffprobe_binary}' not found.")
            raise ProbeFailed(f"ffprobe executable '{self.ffprobe_binary}' not found") from e

        if not isinstance(probe, dict):
            raise ProbeFailed(f"Unexpected probe output for {self.path}: {probe!r}")
        self.probe = probe
        logger.debug(f"Probe data for {self.filename}:\n{pformat(self.probe)}")

    def set_streams(self):
        """
        Iterates through all streams in the probe data and sorts the audio and
        video streams into their own lists.
        """
        self.video_streams = []
        self.audio_streams = []

        for stream in self.probe.get("streams", []):
            codec_type = stream.get("codec_type")
            if codec_type == "video":
                self.video_streams.append(stream)
            elif codec_type == "audio":
                self.audio_streams.append(stream)
        logger.debug(
            f"For {self.filename}: {len(self.video_streams)} video, {len(self.audio_streams)} audio streams."
        )

    def set_duration(self):
        """
        Sets the duration of the media file from the probe data.

        It first looks for the duration in the 'format' section of the probe
        data, which is the most reliable source. If not found, it checks
        individual streams. As a last resort, it calculates the duration from
        the frame count and frame rate of the first video stream.

        Without any positive duration the attribute is left at 0.0; only
        progress reporting needs it, see `require_duration`.
        """
        duration_val = self.probe.get("format", {}).get("duration")

        if not duration_val:
            for stream in self.probe.get("streams", []):
                if "duration" in stream:
                    duration_val = stream["duration"]
                    break

        if duration_val is not None:
            self.duration = parse_duration(str(duration_val))
        else:
            logger.warning(
                f"Primary 'duration' key not found for {self.filename}. Trying to calculate from video stream."
            )
            self.duration = self._calculate_duration_from_video_stream_data()

        if self.duration <= 0:
            logger.warning(f"No valid positive duration for {self.path}, progress cannot be reported. Calculated: {self.duration}")
            self.duration = 0.0
            return
        logger.debug(f"Duration for {self.filename}: {self.duration}s")

    def require_duration(self) -> float:
        """
        The duration in seconds, for operations that cannot work without it.

        Raises:
            NoDurationFoundException: If no positive duration was found.
        """
        if self.duration <= 0:
            raise NoDurationFoundException(f"No valid (positive) duration found for {self.path}")
        return self.duration

    def _calculate_duration_from_video_stream_data(self) -> float:
        if not self.video_streams:
            return 0.0

        video_stream = self.video_streams[0]
        nb_frames_str = video_stream.get("nb_frames")
        avg_frame_rate_str = video_stream.get("avg_frame_rate")

        if nb_frames_str and avg_frame_rate_str and avg_frame_rate_str != "0/0":
            try:
                nb_frames = int(nb_frames_str)
                num, den = map(int, avg_frame_rate_str.split("/"))
                if den == 0:
                    return 0.0
                avg_frame_rate = num / den
                if nb_frames > 0 and avg_frame_rate > 0:
                    return nb_frames / avg_frame_rate
            except ValueError as e:
                logger.warning(f"Could not parse nb_frames/avg_frame_rate for {self.filename}: {e}")
        return 0.0

    @property
    def channels(self) -> Optional[int]:
        """Channel count of the first audio stream, None without audio."""
        if not self.audio_streams:
            return None
        try:
            return int(self.audio_streams[0].get("channels"))
        except (TypeError, ValueError):
            return None

    @property
    def has_video(self) -> bool:
        """True when a video stream other than embedded cover art is present."""
        return any(
            not stream.get("disposition", {}).get("attached_pic") for stream in self.video_streams
        )

    @property
    def has_audio(self) -> bool:
        return bool(self.audio_streams)

    def dimensions(self) -> tuple:
        """
        Width and height of the first video stream.

        Raises:
            MediaFileException: If the file has no video stream with dimensions.
        """
        for stream in self.video_streams:
            if stream.get("width") and stream.get("height"):
                return int(stream["width"]), int(stream["height"])
        raise MediaFileException(f"No video dimensions found for {self.path}")
