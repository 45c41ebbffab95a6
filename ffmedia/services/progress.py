"""
Progress reporting for running ffmpeg processes.

ffmpeg writes a status line to its standard error several times per second,
for example::

    frame=  240 fps= 60 q=28.0 size=     512KiB time=00:00:08.00 bitrate= 524.3kbits/s speed=2x

The driver hands every line it reads to the listeners registered for the
call. A `ProgressListener` turns the lines it understands into a `ProgressInfo`
and passes it to the caller's callback. Everything happens on the thread that
called the driver; no background threads are involved.
"""
import re
import time
from dataclasses import dataclass
from typing import Callable, Optional

from loguru import logger

from ..domain.media import parse_duration

AUDIO = "audio"
VIDEO = "video"

_AUDIO_LINE = re.compile(
    r"size=\s*(\d+)\s*(?:kB|KiB)\s+time=\s*(\d+:\d+:\d+(?:\.\d+)?)", re.IGNORECASE
)
_VIDEO_LINE = re.compile(
    r"frame=\s*(\d+).*?size=\s*(\d+)\s*(?:kB|KiB)\s+time=\s*(\d+:\d+:\d+(?:\.\d+)?)",
    re.IGNORECASE,
)


@dataclass
class ProgressInfo:
    """
    A snapshot of the progress of one operation.

    Attributes:
        percent (int): Overall completion, 0 to 100, across all passes.
        remaining (int): Estimated seconds left for the current pass.
        rate (int): Output growth in kilobytes per second.
        current_pass (int): 1-based number of the running pass.
        total_passes (int): Number of passes of the operation.
        position (float): Media time reached by ffmpeg, in seconds.
        frame (int | None): Frame counter, video operations only.
    """

    percent: int = 0
    remaining: int = 0
    rate: int = 0
    current_pass: int = 1
    total_passes: int = 1
    position: float = 0.0
    frame: Optional[int] = None


class ProgressListener:
    """
    Parses ffmpeg status lines and reports progress through a callback.

    Args:
        duration: Duration of the source in seconds. Without a positive
                  duration the percentage stays at the start of the pass.
        callback: Called with a `ProgressInfo` for every status line.
        current_pass: 1-based number of the pass this listener watches.
        total_passes: Number of passes of the whole operation.
        kind: `AUDIO` or `VIDEO`; selects the status line layout.
        clock: Monotonic clock in seconds, replaceable for tests.
    """

    def __init__(
        self,
        duration: float,
        callback: Callable[[ProgressInfo], None],
        current_pass: int = 1,
        total_passes: int = 1,
        kind: str = AUDIO,
        clock: Callable[[], float] = time.monotonic,
    ):
        if kind not in (AUDIO, VIDEO):
            raise ValueError(f"Unknown progress listener kind '{kind}'")
        self.duration = duration
        self.callback = callback
        self.current_pass = current_pass
        self.total_passes = max(total_passes, 1)
        self.kind = kind
        self._clock = clock
        self._started_at: Optional[float] = None
        self._last_at: Optional[float] = None
        self._last_size: int = 0
        self.last_info: Optional[ProgressInfo] = None

    def handle(self, line: str) -> None:
        """Feeds one line of ffmpeg's standard error to the listener."""
        info = self.parse(line)
        if info is None:
            return
        self.last_info = info
        self.callback(info)

    def parse(self, line: str) -> Optional[ProgressInfo]:
        """
        Turns a status line into a `ProgressInfo`.

        Returns:
            None for lines that are not status lines.
        """
        frame = None
        if self.kind == VIDEO:
            match = _VIDEO_LINE.search(line)
            if not match:
                return None
            frame = int(match.group(1))
            size_kb, position_str = int(match.group(2)), match.group(3)
        else:
            match = _AUDIO_LINE.search(line)
            if not match:
                return None
            size_kb, position_str = int(match.group(1)), match.group(2)

        now = self._clock()
        position = parse_duration(position_str)
        fraction = 0.0
        if self.duration > 0:
            fraction = max(0.0, min(1.0, position / self.duration))

        rate = 0
        remaining = 0
        if self._started_at is None:
            self._started_at = now
        elif self._last_at is not None and now > self._last_at:
            rate = max(0, int((size_kb - self._last_size) / (now - self._last_at)))
            elapsed = now - self._started_at
            if fraction > 0:
                remaining = int(elapsed / fraction - elapsed)
        self._last_at = now
        self._last_size = size_kb

        overall = (self.current_pass - 1 + fraction) / self.total_passes
        percent = int(overall * 100)
        logger.trace(f"Progress {percent}% (pass {self.current_pass}/{self.total_passes}) at {position}s")
        return ProgressInfo(
            percent=percent,
            remaining=remaining,
            rate=rate,
            current_pass=self.current_pass,
            total_passes=self.total_passes,
            position=position,
            frame=frame,
        )
