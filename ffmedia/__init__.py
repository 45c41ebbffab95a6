"""
ffmedia: an object-oriented façade over the ffmpeg command-line tools.

Typical use::

    from ffmedia import FFMpeg, Mp3

    ffmpeg = FFMpeg.create()
    audio = ffmpeg.open("talk.wav")
    audio.save(Mp3().set_audio_kilo_bitrate(192), "talk.mp3")
    audio.waveform(640, 120, ["#FFFFFF"]).save("talk.png")
"""
from .domain.exceptions import (
    ExecutableNotFound,
    ExecutionFailed,
    FFMediaException,
    InvalidConfiguration,
    MediaFileException,
    NoDurationFoundException,
    ProbeFailed,
)
from .domain.formats import WMV, X264, Aac, DefaultAudio, DefaultVideo, Flac, Mp3, Ogg, Vorbis, Wav, WebM
from .domain.media import MediaFile, MediaSource
from .filters.base import Filter, FilterPipeline
from .services.driver import FFMpegDriver, FFProbeDriver
from .services.ffmpeg_service import FFMpeg
from .services.media_types import Audio, Frame, Video, Waveform
from .services.orchestrator import CommandOrchestrator, OperationResult
from .services.progress import ProgressInfo
from .utils.format_utils import TimeCode

__version__ = "0.1.0"

__all__ = [
    "Aac",
    "Audio",
    "CommandOrchestrator",
    "DefaultAudio",
    "DefaultVideo",
    "ExecutableNotFound",
    "ExecutionFailed",
    "FFMediaException",
    "FFMpeg",
    "FFMpegDriver",
    "FFProbeDriver",
    "Filter",
    "FilterPipeline",
    "Flac",
    "Frame",
    "InvalidConfiguration",
    "MediaFile",
    "MediaFileException",
    "MediaSource",
    "Mp3",
    "NoDurationFoundException",
    "Ogg",
    "OperationResult",
    "ProbeFailed",
    "ProgressInfo",
    "TimeCode",
    "Video",
    "Vorbis",
    "Wav",
    "Waveform",
    "WebM",
    "WMV",
    "X264",
]
