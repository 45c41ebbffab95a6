"""
Filters contribute extra command-line tokens to a media operation.

Modules:
    base.py: The `Filter` base class and the ordered `FilterPipeline`.
    audio.py: Resampling, clipping, metadata and pass-through filters.
    video.py: Resize, rotate, crop, frame rate and clip filters.
    waveform.py: Channel downmixing for waveform rendering.
"""
from .base import Filter, FilterPipeline

__all__ = ["Filter", "FilterPipeline"]
