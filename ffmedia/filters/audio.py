"""Filters applicable to audio transcoding operations."""
from typing import Any, Dict, List, Optional, Sequence, Union

from .base import Filter
from ..domain.exceptions import InvalidConfiguration
from ..utils.format_utils import TimeCode, to_timecode


class SimpleFilter(Filter):
    """Passes a fixed list of tokens through unchanged."""

    def __init__(self, params: Sequence[str]):
        if isinstance(params, str):
            raise InvalidConfiguration("SimpleFilter expects a list of tokens, not a string")
        self.params = [str(param) for param in params]

    def apply(self, context: Any) -> List[str]:
        return list(self.params)


class AudioResamplableFilter(Filter):
    """Resamples the audio to `rate` Hz, forcing stereo output."""

    def __init__(self, rate: int):
        if isinstance(rate, bool) or not isinstance(rate, int) or rate < 1:
            raise InvalidConfiguration(f"Invalid sample rate {rate!r}")
        self.rate = rate

    def apply(self, context: Any) -> List[str]:
        return ["-ac", "2", "-ar", str(self.rate)]


class AudioClipFilter(Filter):
    """
    Keeps only part of the audio.

    Args:
        start: Where the clip starts (TimeCode, seconds or `HH:MM:SS.ff`).
        duration: Length of the clip; None keeps everything after `start`.
    """

    def __init__(
        self,
        start: Union[TimeCode, float, str],
        duration: Optional[Union[TimeCode, float, str]] = None,
    ):
        try:
            self.start = to_timecode(start)
            self.duration = to_timecode(duration) if duration is not None else None
        except ValueError as e:
            raise InvalidConfiguration(str(e)) from e

    def apply(self, context: Any) -> List[str]:
        tokens = ["-ss", str(self.start)]
        if self.duration is not None:
            tokens.extend(["-t", str(self.duration)])
        return tokens


class AddMetadataFilter(Filter):
    """
    Writes metadata tags into the output.

    With no data at all, every metadata tag of the source is stripped instead.
    """

    def __init__(self, data: Optional[Dict[str, Any]] = None):
        self.data = dict(data) if data is not None else None

    def apply(self, context: Any) -> List[str]:
        if not self.data:
            return ["-map_metadata", "-1"]
        tokens: List[str] = []
        for key, value in self.data.items():
            tokens.extend(["-metadata", f"{key}={value}"])
        return tokens


class AudioFilters:
    """
    Fluent helper returned by `Audio.filters()`; each method adds one filter
    to the media it was created for.
    """

    def __init__(self, media):
        self.media = media

    def resample(self, rate: int) -> "AudioFilters":
        self.media.add_filter(AudioResamplableFilter(rate))
        return self

    def clip(self, start, duration=None) -> "AudioFilters":
        self.media.add_filter(AudioClipFilter(start, duration))
        return self

    def add_metadata(self, data: Optional[Dict[str, Any]] = None) -> "AudioFilters":
        self.media.add_filter(AddMetadataFilter(data))
        return self

    def custom(self, params: Sequence[str]) -> "AudioFilters":
        self.media.add_filter(SimpleFilter(params))
        return self
