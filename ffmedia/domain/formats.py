"""
Audio and video output formats.

A format is a mutable value object describing what ffmpeg should produce:
the codecs, the bitrates and the channel count. Every setter validates its
argument immediately, raises `InvalidConfiguration` when the value is not
acceptable (leaving the previous value in place) and returns the format
itself, so calls can be chained::

    fmt = Mp3().set_audio_kilo_bitrate(256).set_audio_channels(2)

A codec left unset (`None`) means ffmpeg picks its own default for the
output container.
"""
import math
from numbers import Real
from typing import Callable, List, Optional, Sequence, Tuple

from .exceptions import InvalidConfiguration
from ..config.audio import (
    AAC_AUDIO_CODECS,
    DEFAULT_AUDIO_KILO_BITRATE,
    FLAC_AUDIO_CODECS,
    MP3_AUDIO_CODECS,
    VORBIS_AUDIO_CODECS,
    VORBIS_EXTRA_PARAMS,
    WAV_AUDIO_CODECS,
)
from ..config.video import (
    DEFAULT_MODULUS,
    DEFAULT_VIDEO_KILO_BITRATE,
    OGG_AUDIO_CODECS,
    OGG_VIDEO_CODECS,
    WEBM_AUDIO_CODECS,
    WEBM_EXTRA_PARAMS,
    WEBM_VIDEO_CODECS,
    WMV_AUDIO_CODECS,
    WMV_EXTRA_PARAMS,
    WMV_VIDEO_CODECS,
    X264_AUDIO_CODECS,
    X264_PASSES,
    X264_VIDEO_CODECS,
)
from ..services.progress import AUDIO, VIDEO, ProgressInfo, ProgressListener


def _to_int(value, name: str, minimum: int) -> int:
    """Validates a numeric setting, truncating it to an integer."""
    if isinstance(value, bool) or not isinstance(value, Real):
        raise InvalidConfiguration(f"Wrong {name} value {value!r}, a number is expected")
    if not math.isfinite(value):
        raise InvalidConfiguration(f"Wrong {name} value {value!r}, a finite number is expected")
    if value < minimum:
        raise InvalidConfiguration(f"Wrong {name} value {value!r}, it must be at least {minimum}")
    return int(value)


def _to_tokens(values, name: str) -> List[str]:
    if isinstance(values, str) or not all(isinstance(v, str) for v in values):
        raise InvalidConfiguration(f"Wrong {name} value {values!r}, a list of strings is expected")
    return list(values)


class DefaultAudio:
    """
    Base class of every audio format.

    Subclasses declare the codecs they accept in `available_audio_codecs`;
    the first one becomes the format's default codec.
    """

    available_audio_codecs: Tuple[str, ...] = ()
    extra_params: Tuple[str, ...] = ()

    def __init__(self):
        self.audio_codec: Optional[str] = None
        self.audio_kilo_bitrate: int = DEFAULT_AUDIO_KILO_BITRATE
        self.audio_channels: Optional[int] = None
        if self.available_audio_codecs:
            self.audio_codec = self.available_audio_codecs[0]

    def get_extra_params(self) -> List[str]:
        """Output options placed right after the codec option."""
        return list(self.extra_params)

    def get_available_audio_codecs(self) -> List[str]:
        return list(self.available_audio_codecs)

    def get_audio_codec(self) -> Optional[str]:
        return self.audio_codec

    def set_audio_codec(self, audio_codec: str):
        """
        Sets the audio codec. It must be one of `get_available_audio_codecs()`.

        Raises:
            InvalidConfiguration: If the codec is not available for this format.
        """
        if audio_codec not in self.available_audio_codecs:
            raise InvalidConfiguration(
                f"Wrong audiocodec value for {audio_codec}, available formats are "
                f"{', '.join(self.available_audio_codecs)}"
            )
        self.audio_codec = audio_codec
        return self

    def get_audio_kilo_bitrate(self) -> int:
        return self.audio_kilo_bitrate

    def set_audio_kilo_bitrate(self, kilo_bitrate: int):
        """
        Sets the audio bitrate in kilobits per second.

        Raises:
            InvalidConfiguration: If the bitrate is lower than 1.
        """
        self.audio_kilo_bitrate = _to_int(kilo_bitrate, "kiloBitrate", 1)
        return self

    def get_audio_channels(self) -> Optional[int]:
        return self.audio_channels

    def set_audio_channels(self, channels: int):
        """
        Sets the number of output audio channels.

        Raises:
            InvalidConfiguration: If the channel count is lower than 1.
        """
        self.audio_channels = _to_int(channels, "channels", 1)
        return self

    def get_passes(self) -> int:
        return 1

    def audio_tokens(self) -> List[str]:
        """
        The output options describing this format's audio stream.

        Returns:
            `-acodec` (when a codec is set), the extra parameters, `-b:a` and
            `-ac` (when a channel count is set), in that order.
        """
        tokens: List[str] = []
        if self.audio_codec is not None:
            tokens.extend(["-acodec", self.audio_codec])
        tokens.extend(self.get_extra_params())
        tokens.extend(["-b:a", f"{self.audio_kilo_bitrate}k"])
        if self.audio_channels is not None:
            tokens.extend(["-ac", str(self.audio_channels)])
        return tokens

    def create_progress_listener(
        self,
        duration: float,
        callback: Callable[[ProgressInfo], None],
        current_pass: int = 1,
        total_passes: int = 1,
    ) -> List[ProgressListener]:
        """Listeners reporting the progress of one pass of this format."""
        return [ProgressListener(duration, callback, current_pass, total_passes, kind=AUDIO)]

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(audio_codec={self.audio_codec!r}, "
            f"audio_kilo_bitrate={self.audio_kilo_bitrate}, audio_channels={self.audio_channels})"
        )


class Mp3(DefaultAudio):
    available_audio_codecs = MP3_AUDIO_CODECS


class Aac(DefaultAudio):
    available_audio_codecs = AAC_AUDIO_CODECS


class Flac(DefaultAudio):
    available_audio_codecs = FLAC_AUDIO_CODECS


class Vorbis(DefaultAudio):
    available_audio_codecs = VORBIS_AUDIO_CODECS
    extra_params = VORBIS_EXTRA_PARAMS


class Wav(DefaultAudio):
    available_audio_codecs = WAV_AUDIO_CODECS


class DefaultVideo(DefaultAudio):
    """
    Base class of every video format.

    A video format also carries an audio configuration, inherited from
    `DefaultAudio`. A video kilobitrate of 0 leaves the video bitrate to ffmpeg.
    """

    available_video_codecs: Tuple[str, ...] = ()
    default_passes: int = 1

    def __init__(self, audio_codec: Optional[str] = None, video_codec: Optional[str] = None):
        super().__init__()
        self.video_codec: Optional[str] = None
        self.kilo_bitrate: int = DEFAULT_VIDEO_KILO_BITRATE
        self.modulus: int = DEFAULT_MODULUS
        self.additional_parameters: List[str] = []
        self.initial_parameters: List[str] = []
        self.passes: int = self.default_passes
        if self.available_video_codecs:
            self.video_codec = self.available_video_codecs[0]
        if audio_codec is not None:
            self.set_audio_codec(audio_codec)
        if video_codec is not None:
            self.set_video_codec(video_codec)

    def get_available_video_codecs(self) -> List[str]:
        return list(self.available_video_codecs)

    def get_video_codec(self) -> Optional[str]:
        return self.video_codec

    def set_video_codec(self, video_codec: str):
        if video_codec not in self.available_video_codecs:
            raise InvalidConfiguration(
                f"Wrong videocodec value for {video_codec}, available formats are "
                f"{', '.join(self.available_video_codecs)}"
            )
        self.video_codec = video_codec
        return self

    def get_kilo_bitrate(self) -> int:
        return self.kilo_bitrate

    def set_kilo_bitrate(self, kilo_bitrate: int):
        self.kilo_bitrate = _to_int(kilo_bitrate, "kiloBitrate", 0)
        return self

    def get_modulus(self) -> int:
        return self.modulus

    def get_passes(self) -> int:
        return self.passes

    def set_passes(self, passes: int):
        self.passes = _to_int(passes, "passes", 1)
        return self

    def get_additional_parameters(self) -> List[str]:
        return list(self.additional_parameters)

    def set_additional_parameters(self, parameters: Sequence[str]):
        """Output options appended after the codec and bitrate options."""
        self.additional_parameters = _to_tokens(parameters, "additional parameters")
        return self

    def get_initial_parameters(self) -> List[str]:
        return list(self.initial_parameters)

    def set_initial_parameters(self, parameters: Sequence[str]):
        """Input options placed before `-i`, e.g. hardware decoding flags."""
        self.initial_parameters = _to_tokens(parameters, "initial parameters")
        return self

    def video_tokens(self) -> List[str]:
        tokens: List[str] = []
        if self.video_codec is not None:
            tokens.extend(["-vcodec", self.video_codec])
        if self.kilo_bitrate:
            tokens.extend(["-b:v", f"{self.kilo_bitrate}k"])
        return tokens

    def create_progress_listener(
        self,
        duration: float,
        callback: Callable[[ProgressInfo], None],
        current_pass: int = 1,
        total_passes: int = 1,
    ) -> List[ProgressListener]:
        return [ProgressListener(duration, callback, current_pass, total_passes, kind=VIDEO)]


class X264(DefaultVideo):
    available_audio_codecs = X264_AUDIO_CODECS
    available_video_codecs = X264_VIDEO_CODECS
    default_passes = X264_PASSES


class WebM(DefaultVideo):
    available_audio_codecs = WEBM_AUDIO_CODECS
    available_video_codecs = WEBM_VIDEO_CODECS
    extra_params = WEBM_EXTRA_PARAMS


class WMV(DefaultVideo):
    available_audio_codecs = WMV_AUDIO_CODECS
    available_video_codecs = WMV_VIDEO_CODECS
    extra_params = WMV_EXTRA_PARAMS


class Ogg(DefaultVideo):
    available_audio_codecs = OGG_AUDIO_CODECS
    available_video_codecs = OGG_VIDEO_CODECS
