"""
This module runs the external ffmpeg and ffprobe executables.

`FFMpegDriver.run` is the single place where a process is spawned. It takes
the argument tokens (without the executable), logs the command, streams the
process' standard error to any progress listeners, and reports a failed run
by raising `DriverExecutionError`. That exception belongs to this layer; the
orchestrator translates it into `ExecutionFailed` before it reaches callers.
"""
import os
import shlex
import shutil
import subprocess
import tempfile
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Union

from loguru import logger

from ..config.common import (
    FFMPEG_BINARY,
    FFMPEG_THREADS,
    FFMPEG_TIMEOUT,
    FFPROBE_BINARY,
    STDERR_EXCERPT_LENGTH,
)
from ..domain.exceptions import ExecutableNotFound
from ..domain.media import MediaFile


class DriverExecutionError(Exception):
    """
    The process could not be started, timed out or exited with a non-zero status.

    Attributes:
        returncode (int | None): The exit status, None if the process never ran.
        stderr (str): The process' standard error, possibly truncated.
        command (tuple[str, ...]): The full command line, executable included.
    """

    def __init__(self, message: str, returncode: Optional[int] = None, stderr: str = "", command: Sequence[str] = ()):
        super().__init__(message)
        self.returncode = returncode
        self.stderr = stderr
        self.command = tuple(command)


@dataclass(frozen=True)
class CommandResult:
    """The outcome of a successful run."""

    returncode: int
    stdout: str
    stderr: str
    command: Tuple[str, ...]


def display_command(cmd_list: Sequence[str]) -> str:
    """Quotes a command list the way the current platform's shell expects."""
    if os.name == "nt":
        return subprocess.list2cmdline(list(cmd_list))
    return shlex.join(cmd_list)


def _kill_on_timeout(process: subprocess.Popen, timed_out: threading.Event):
    if process.poll() is None:
        timed_out.set()
        process.kill()


def resolve_binary(binary: str) -> str:
    """
    Finds an executable by absolute path or on the system PATH.

    Raises:
        ExecutableNotFound: If the executable does not exist.
    """
    resolved = shutil.which(binary)
    if resolved is None:
        raise ExecutableNotFound(
            f"Executable '{binary}' not found. Set its path in config.user.yaml or add it to your PATH."
        )
    return resolved


class FFMpegDriver:
    """
    Runs ffmpeg with a list of argument tokens.

    Args:
        binary: The ffmpeg executable.
        timeout: Maximum run time in seconds, None for no limit.
        threads: Value for ffmpeg's `-threads` option, None to leave it out.
    """

    def __init__(self, binary: str = FFMPEG_BINARY, timeout: Optional[float] = FFMPEG_TIMEOUT, threads: Optional[int] = FFMPEG_THREADS):
        self.binary = binary
        self.timeout = timeout
        self.threads = threads

    @classmethod
    def create(cls, config: Optional[Dict[str, Any]] = None) -> "FFMpegDriver":
        """
        Builds a driver from a configuration dictionary.

        Recognized keys are `ffmpeg_binary`, `timeout` and `threads`; missing
        keys fall back to the values from `ffmedia.config.common`.

        Raises:
            ExecutableNotFound: If the ffmpeg executable cannot be located.
        """
        config = config or {}
        binary = resolve_binary(config.get("ffmpeg_binary") or FFMPEG_BINARY)
        logger.debug(f"Using ffmpeg executable {binary}")
        return cls(binary, timeout=config.get("timeout", FFMPEG_TIMEOUT), threads=config.get("threads", FFMPEG_THREADS))

    def run(
        self,
        args: Sequence[str],
        listeners: Optional[Iterable[Any]] = None,
        cmd_log_file_path: Optional[Path] = None,
    ) -> CommandResult:
        """
        Executes ffmpeg and waits for it to finish.

        Every line written to standard error is passed to the `handle(line)`
        method of each listener, on the calling thread, while the process runs.

        Args:
            args: The argument tokens, without the executable.
            listeners: Objects with a `handle(line)` method.
            cmd_log_file_path: If provided, the command is appended to this file.

        Returns:
            A `CommandResult` holding the captured output.

        Raises:
            DriverExecutionError: If the executable is missing, the run times
                                  out or the exit status is not zero.
        """
        cmd_list: List[str] = [self.binary, *[str(arg) for arg in args]]
        display_cmd_str = display_command(cmd_list)
        logger.debug(f"Executing command: {display_cmd_str}")

        if cmd_log_file_path:
            try:
                cmd_log_file_path.parent.mkdir(parents=True, exist_ok=True)
                with cmd_log_file_path.open("a", encoding="utf-8") as cmd_f:
                    cmd_f.write(display_cmd_str + "\n")
            except OSError as e:
                logger.error(f"Failed to write command to log file {cmd_log_file_path}: {e}")

        listeners = list(listeners or [])
        try:
            returncode, stdout, stderr = self._execute(cmd_list, listeners)
        except FileNotFoundError as e:
            logger.error(
                f"Error: Command not found ('{cmd_list[0]}'). Ensure it's in your system's PATH or configured correctly."
            )
            raise DriverExecutionError(f"Executable '{cmd_list[0]}' not found", command=cmd_list) from e
        except subprocess.TimeoutExpired as e:
            logger.error(f"Error: Command timed out after {self.timeout}s. Command: {display_cmd_str}")
            raise DriverExecutionError(f"Command timed out after {self.timeout}s", command=cmd_list) from e
        except OSError as e:
            logger.error(f"Could not start {cmd_list[0]}: {e}")
            raise DriverExecutionError(f"Could not start '{cmd_list[0]}': {e}", command=cmd_list) from e

        if stdout:
            logger.trace(f"Command stdout: {stdout[:500]}")

        if returncode != 0:
            logger.debug(f"Command stderr (error, rc={returncode}): {stderr}")
            raise DriverExecutionError(
                f"Command failed with exit code {returncode}",
                returncode=returncode,
                stderr=stderr[-STDERR_EXCERPT_LENGTH:],
                command=cmd_list,
            )
        if stderr:
            logger.trace(f"Command stderr (non-error, rc={returncode}): {stderr}")
        return CommandResult(returncode, stdout, stderr, tuple(cmd_list))

    def _execute(self, cmd_list: List[str], listeners: List[Any]) -> Tuple[int, str, str]:
        if not listeners:
            result = subprocess.run(
                cmd_list,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                timeout=self.timeout,
                shell=False,
            )
            return result.returncode, result.stdout, result.stderr

        # stdout goes to a temporary file so that reading stderr line by line
        # cannot block on a full stdout pipe.
        timed_out = threading.Event()
        stderr_lines: List[str] = []
        with tempfile.TemporaryFile() as stdout_file:
            with subprocess.Popen(
                cmd_list,
                stdout=stdout_file,
                stderr=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                errors="replace",
                shell=False,
            ) as process:
                # Kills the process at the deadline, also while stderr is silent.
                watchdog = None
                if self.timeout:
                    watchdog = threading.Timer(self.timeout, _kill_on_timeout, args=(process, timed_out))
                    watchdog.daemon = True
                    watchdog.start()
                try:
                    for line in process.stderr:
                        stderr_lines.append(line)
                        for listener in listeners:
                            listener.handle(line.rstrip("\n"))
                    returncode = process.wait()
                except BaseException:
                    process.kill()
                    raise
                finally:
                    if watchdog is not None:
                        watchdog.cancel()
            if timed_out.is_set():
                raise subprocess.TimeoutExpired(cmd_list, self.timeout)
            stdout_file.seek(0)
            stdout = stdout_file.read().decode("utf-8", errors="replace")
        return returncode, stdout, "".join(stderr_lines)

    def __repr__(self) -> str:
        return f"FFMpegDriver(binary={self.binary!r}, timeout={self.timeout!r}, threads={self.threads!r})"


class FFProbeDriver:
    """
    Probes media files with ffprobe through ffmpeg-python.

    Results are cached per resolved path for the lifetime of the driver.
    """

    def __init__(self, binary: str = FFPROBE_BINARY, prober=None):
        self.binary = binary
        self._prober = prober
        self._cache: Dict[Path, MediaFile] = {}

    @classmethod
    def create(cls, config: Optional[Dict[str, Any]] = None) -> "FFProbeDriver":
        config = config or {}
        return cls(resolve_binary(config.get("ffprobe_binary") or FFPROBE_BINARY))

    def probe(self, path: Union[str, Path]) -> MediaFile:
        """
        Returns the metadata of a media file, probing it on first use.

        Raises:
            FileNotFoundError: If the file does not exist.
            MediaFileException: If ffprobe cannot read it.
        """
        key = Path(path).resolve()
        if key not in self._cache:
            self._cache[key] = MediaFile(key, ffprobe_binary=self.binary, prober=self._prober)
        return self._cache[key]

    def clear_cache(self):
        self._cache.clear()
