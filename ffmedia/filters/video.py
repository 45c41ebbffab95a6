"""Filters applicable to video transcoding operations."""
from typing import Any, List

from .audio import AudioClipFilter, AudioFilters
from .base import Filter
from ..domain.exceptions import InvalidConfiguration

RESIZEMODE_EXACT = "exact"
RESIZEMODE_INSET = "inset"


def _dimension(value, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise InvalidConfiguration(f"Invalid {name} {value!r}, a positive integer is expected")
    return value


class VideoGraphFilter(Filter):
    """
    A filter expressed as one step of ffmpeg's `-vf` filter graph.

    Used on its own it contributes its own `-vf` option. ffmpeg keeps only the
    last `-vf` of an output, so several of them belong in a `VideoFilterChain`.
    """

    def graph(self) -> str:
        raise NotImplementedError("Subclasses must implement the graph() method.")

    def extra_tokens(self) -> List[str]:
        """Options that accompany the graph step, placed after `-vf`."""
        return []

    def apply(self, context: Any) -> List[str]:
        return ["-vf", self.graph(), *self.extra_tokens()]


class VideoFilterChain(Filter):
    """Applies several graph filters, in the order they were added, through a single `-vf`."""

    def __init__(self):
        self.filters: List[VideoGraphFilter] = []

    def append(self, filter_obj: VideoGraphFilter) -> "VideoFilterChain":
        self.filters.append(filter_obj)
        return self

    def apply(self, context: Any) -> List[str]:
        if not self.filters:
            return []
        tokens = ["-vf", ",".join(filter_obj.graph() for filter_obj in self.filters)]
        for filter_obj in self.filters:
            tokens.extend(filter_obj.extra_tokens())
        return tokens


class ResizeFilter(VideoGraphFilter):
    """
    Scales the video.

    In `RESIZEMODE_EXACT` the output has exactly the requested size. In
    `RESIZEMODE_INSET` the picture keeps its aspect ratio and fits inside the
    requested box.
    """

    def __init__(self, width: int, height: int, mode: str = RESIZEMODE_EXACT):
        if mode not in (RESIZEMODE_EXACT, RESIZEMODE_INSET):
            raise InvalidConfiguration(f"Unknown resize mode '{mode}'")
        self.width = _dimension(width, "width")
        self.height = _dimension(height, "height")
        self.mode = mode

    def graph(self) -> str:
        scale = f"scale={self.width}:{self.height}"
        if self.mode == RESIZEMODE_INSET:
            scale += ":force_original_aspect_ratio=decrease"
        return scale


class RotateFilter(VideoGraphFilter):
    """Rotates the video clockwise by 90, 180 or 270 degrees."""

    _TRANSFORMS = {
        90: "transpose=1",
        180: "hflip,vflip",
        270: "transpose=2",
    }

    def __init__(self, angle: int):
        if angle not in self._TRANSFORMS:
            raise InvalidConfiguration(f"Invalid angle {angle!r}, use 90, 180 or 270")
        self.angle = angle

    def graph(self) -> str:
        return self._TRANSFORMS[self.angle]

    def extra_tokens(self) -> List[str]:
        return ["-metadata:s:v:0", "rotate=0"]


class CropFilter(VideoGraphFilter):
    """Keeps the `width` x `height` rectangle whose top-left corner is at (`x`, `y`)."""

    def __init__(self, x: int, y: int, width: int, height: int):
        if isinstance(x, bool) or isinstance(y, bool) or not isinstance(x, int) or not isinstance(y, int) or x < 0 or y < 0:
            raise InvalidConfiguration(f"Invalid crop origin ({x!r}, {y!r})")
        self.x = x
        self.y = y
        self.width = _dimension(width, "width")
        self.height = _dimension(height, "height")

    def graph(self) -> str:
        return f"crop={self.width}:{self.height}:{self.x}:{self.y}"


class FrameRateFilter(Filter):
    """
    Changes the frame rate.

    Args:
        rate: Output frames per second.
        gop: Distance between two key frames, in frames.
    """

    def __init__(self, rate: float, gop: int):
        if isinstance(rate, bool) or not isinstance(rate, (int, float)) or rate <= 0:
            raise InvalidConfiguration(f"Invalid frame rate {rate!r}")
        self.rate = rate
        self.gop = _dimension(gop, "GOP size")

    def apply(self, context: Any) -> List[str]:
        return ["-r", f"{self.rate:g}", "-b_strategy", "1", "-bf", "3", "-g", str(self.gop)]


class ClipFilter(AudioClipFilter):
    """Keeps only part of the video, see `AudioClipFilter`."""


class VideoFilters(AudioFilters):
    """
    Fluent helper returned by `Video.filters()`.

    Resize, rotate and crop share one `VideoFilterChain` per media, so they
    end up in a single `-vf` option in the order they were requested.
    """

    def _chain(self, filter_obj: VideoGraphFilter) -> "VideoFilters":
        for existing in self.media.get_filters_collection():
            if isinstance(existing, VideoFilterChain):
                existing.append(filter_obj)
                return self
        self.media.add_filter(VideoFilterChain().append(filter_obj))
        return self

    def resize(self, width: int, height: int, mode: str = RESIZEMODE_EXACT) -> "VideoFilters":
        return self._chain(ResizeFilter(width, height, mode))

    def rotate(self, angle: int) -> "VideoFilters":
        return self._chain(RotateFilter(angle))

    def crop(self, x: int, y: int, width: int, height: int) -> "VideoFilters":
        return self._chain(CropFilter(x, y, width, height))

    def framerate(self, rate: float, gop: int) -> "VideoFilters":
        self.media.add_filter(FrameRateFilter(rate, gop))
        return self

    def clip(self, start, duration=None) -> "VideoFilters":
        self.media.add_filter(ClipFilter(start, duration))
        return self
