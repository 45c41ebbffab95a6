"""
This module contains helpers that turn values into the strings ffmpeg expects
on its command line, or into human-readable strings for log messages.
"""
import re
from typing import Union

_TIMECODE_PATTERN = re.compile(r"^(\d+):(\d+):(\d+)\.(\d+)$")


class TimeCode:
    """
    A position in a media stream, written as `HH:MM:SS.ff` on the command line.

    The last field holds hundredths of a second, which is the precision ffmpeg
    accepts for `-ss` and `-t`.
    """

    def __init__(self, hours: int, minutes: int, seconds: int, frames: int):
        self.hours = hours
        self.minutes = minutes
        self.seconds = seconds
        self.frames = frames

    def __str__(self) -> str:
        return f"{self.hours:02d}:{self.minutes:02d}:{self.seconds:02d}.{self.frames:02d}"

    def __repr__(self) -> str:
        return f"TimeCode('{self}')"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TimeCode):
            return NotImplemented
        return str(self) == str(other)

    def __hash__(self) -> int:
        return hash(str(self))

    @classmethod
    def from_string(cls, timecode: str) -> "TimeCode":
        """
        Parses a `HH:MM:SS.ff` string.

        Raises:
            ValueError: If the string is not a timecode.
        """
        match = _TIMECODE_PATTERN.match(timecode.strip())
        if not match:
            raise ValueError(f"Unable to parse timecode '{timecode}'")
        hours, minutes, seconds = (int(part) for part in match.groups()[:3])
        # The fraction is a decimal part: ".5" is 50 hundredths, digits past
        # the hundredths are dropped.
        frames = int(match.group(4).ljust(2, "0")[:2])
        return cls(hours, minutes, seconds, frames)

    @classmethod
    def from_seconds(cls, quantity: float) -> "TimeCode":
        if quantity < 0:
            raise ValueError(f"A timecode cannot be negative, got {quantity}")
        total_hundredths = int(round(quantity * 100))
        total_seconds, frames = divmod(total_hundredths, 100)
        minutes, seconds = divmod(total_seconds, 60)
        hours, minutes = divmod(minutes, 60)
        return cls(hours, minutes, seconds, frames)

    def to_seconds(self) -> float:
        return self.hours * 3600 + self.minutes * 60 + self.seconds + self.frames / 100

    def is_after(self, other: "TimeCode") -> bool:
        return self.to_seconds() > other.to_seconds()


def to_timecode(value: Union["TimeCode", float, int, str]) -> TimeCode:
    """
    Accepts a `TimeCode`, a number of seconds or a `HH:MM:SS.ff` string.
    """
    if isinstance(value, TimeCode):
        return value
    if isinstance(value, (int, float)):
        return TimeCode.from_seconds(value)
    return TimeCode.from_string(value)


def formatted_size(size_bytes: int) -> str:
    """
    Converts a size in bytes to a human-readable string (e.g., B, KB, MB, GB, TB).

    Args:
        size_bytes: The size of the file in bytes.

    Returns:
        A formatted string with the appropriate unit.
        For example, 1536 becomes "1.50 KB", and 2097152 becomes "2 MB".
    """
    if size_bytes < 0:
        size_bytes = 0

    units = ["B", "KB", "MB", "GB", "TB", "PB"]
    factor = 1024.0

    if size_bytes == 0:
        return "0 B"

    for unit in units:
        if size_bytes < factor:
            if unit == "B":
                return f"{size_bytes} {unit}"
            # Clean up ".00" for whole numbers (e.g., "2.00 MB" -> "2 MB").
            return f"{size_bytes:.2f} {unit}".replace(".00", "")
        size_bytes /= factor

    return f"{size_bytes:.2f} {units[-1]}".replace(".00", "")
