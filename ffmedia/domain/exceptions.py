"""
Defines custom exception types for ffmedia.

These exceptions allow callers to tell apart a configuration mistake, which is
reported the moment a bad value is set, from a failure of the external ffmpeg
process, which is reported once the command has run. Collaborator errors (for
example the driver's own exception type) are always translated into one of
the types below before they reach the caller.

All custom exceptions inherit from the base `FFMediaException`.
"""
from typing import Optional, Sequence


class FFMediaException(Exception):
    """Base class for all custom exceptions in ffmedia."""

    pass


# --- Configuration Exceptions ---
class InvalidConfiguration(FFMediaException, ValueError):
    """
    Raised when a configuration value is rejected at the moment it is set.

    Typical causes are a bitrate or channel count below one, a codec that the
    format does not support, or a waveform color that is not an HTML color
    string. The object being configured keeps the value it had before the call.
    """

    pass


# --- Execution Exceptions ---
class ExecutionFailed(FFMediaException):
    """
    Raised when the external ffmpeg process could not produce the requested output.

    This covers a non-zero exit status, a missing executable and a timeout.
    The diagnostic reported by the process is kept on the exception so that
    callers can log or display it.

    Attributes:
        returncode (int | None): The exit status of the process, None when it never ran.
        stderr (str): The trailing part of the process' standard error.
        command (tuple[str, ...]): The argument tokens that were executed.
    """

    def __init__(
        self,
        message: str,
        returncode: Optional[int] = None,
        stderr: str = "",
        command: Sequence[str] = (),
    ):
        super().__init__(message)
        self.returncode = returncode
        self.stderr = stderr
        self.command = tuple(command)

    def __str__(self) -> str:
        message = super().__str__()
        if self.returncode is not None:
            message = f"{message} (exit code {self.returncode})"
        if self.stderr.strip():
            message = f"{message}: {self.stderr.strip().splitlines()[-1]}"
        return message


# --- MediaFile / Probe Specific Exceptions ---
class MediaFileException(FFMediaException):
    """
    Base class for exceptions related to media file analysis (probing with ffprobe).
    """

    pass


class ProbeFailed(MediaFileException):
    """
    Raised when ffprobe cannot read a media file.

    This usually means the file is corrupted or in a format ffprobe does not
    understand.
    """

    pass


class NoDurationFoundException(MediaFileException):
    """
    Raised when duration information cannot be obtained for a media file.

    Progress reporting needs the duration of the source, a file without a
    determinable duration cannot report progress.
    """

    pass


class ExecutableNotFound(FFMediaException):
    """
    Raised when the ffmpeg or ffprobe executable cannot be located.

    Neither the configured path nor the system PATH provides the binary.
    """

    pass
