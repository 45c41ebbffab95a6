"""Filters applicable to waveform rendering."""
from typing import Any, List

from loguru import logger

from .base import Filter
from ..domain.exceptions import MediaFileException


class WaveformDownmixFilter(Filter):
    """
    Renders a single waveform for all channels instead of one per channel.

    The filter only contributes tokens when downmixing is enabled and the
    audio behind the waveform has more than one channel. It relies on the
    waveform exposing `get_audio()`, and on that audio exposing its probe
    results through `get_media_file()`.
    """

    def __init__(self, downmix: bool = False):
        self.downmix = bool(downmix)

    def get_downmix(self) -> bool:
        return self.downmix

    def apply(self, context: Any) -> List[str]:
        if not self.downmix:
            return []
        try:
            channels = context.get_audio().get_media_file().channels
        except (MediaFileException, FileNotFoundError) as e:
            logger.warning(f"Cannot read the channel count of {context!r}, not downmixing: {e}")
            return []
        if channels is None or channels <= 1:
            return []
        return ["-ac", "1"]


class WaveformFilters:
    """Fluent helper returned by `Waveform.filters()`."""

    def __init__(self, media):
        self.media = media

    def set_downmix(self, downmix: bool = True) -> "WaveformFilters":
        self.media.add_filter(WaveformDownmixFilter(downmix))
        return self
