"""
This module assembles ffmpeg command lines and runs them.

`CommandOrchestrator.execute` is the one path every operation goes through:

1. the operation's preamble (overwrite flag, inputs, complex filter graph);
2. the tokens of each filter of the pipeline, in insertion order;
3. the operation's trailer (codec options, frame limits and the like);
4. the destination path, always last.

ffmpeg reads its options positionally (input options before `-i`, output
options before the output path), so this order is never changed. When the
driver reports a failure the orchestrator removes whatever was written at the
destination and raises `ExecutionFailed`.
"""
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, List, Optional, Tuple, Union

from loguru import logger

from .driver import CommandResult, DriverExecutionError, FFMpegDriver
from ..domain.exceptions import ExecutionFailed
from ..domain.media import MediaSource
from ..filters.base import FilterPipeline
from ..utils.format_utils import formatted_size


@dataclass(frozen=True)
class OperationResult:
    """
    A successful operation.

    Attributes:
        path (Path): The artifact ffmpeg produced.
        command (tuple[str, ...]): The argument tokens that were executed.
        stdout (str): ffmpeg's standard output.
        stderr (str): ffmpeg's standard error (its log).
    """

    path: Path
    command: Tuple[str, ...]
    stdout: str = ""
    stderr: str = ""


class OperationConfiguration:
    """
    What an operation contributes around the filter tokens.

    Operations (waveform rendering, transcoding, frame extraction) subclass
    this and return the tokens that must come before and after the filters.
    """

    def preamble(self, source: MediaSource) -> List[str]:
        raise NotImplementedError("Subclasses must implement the preamble() method.")

    def trailer(self) -> List[str]:
        return []


class CommandOrchestrator:
    """
    Builds the command of an operation, runs it and translates failures.

    Args:
        driver: Runs the assembled tokens; see `FFMpegDriver.run`.
        cmd_log_file_path: If set, every executed command is appended to this file.
    """

    def __init__(self, driver: FFMpegDriver, cmd_log_file_path: Optional[Path] = None):
        self.driver = driver
        self.cmd_log_file_path = cmd_log_file_path

    @staticmethod
    def assemble(
        source: MediaSource,
        config: OperationConfiguration,
        pipeline: FilterPipeline,
        destination: Union[str, Path],
    ) -> Tuple[str, ...]:
        """
        Assembles the command tokens of one operation.

        Returns:
            The tokens as an immutable tuple, destination last.
        """
        commands: List[str] = [str(token) for token in config.preamble(source)]
        commands.extend(pipeline.apply(config))
        commands.extend(str(token) for token in config.trailer())
        # add location where the output should be saved to
        commands.append(str(destination))
        return tuple(commands)

    def execute(
        self,
        source: Union[str, Path, MediaSource],
        config: OperationConfiguration,
        pipeline: FilterPipeline,
        destination: Union[str, Path],
        listeners: Optional[Iterable[Any]] = None,
    ) -> OperationResult:
        """
        Runs one operation from `source` to `destination`.

        Args:
            source: The input file.
            config: The operation; provides the preamble and trailer tokens and
                    is handed to every filter as its context.
            pipeline: The filters of the operation.
            destination: The output file.
            listeners: Progress listeners, called on this thread during the run.

        Returns:
            An `OperationResult` referencing `destination`.

        Raises:
            ExecutionFailed: If ffmpeg could not produce the output. A partially
                             written destination file has been removed.
        """
        source = MediaSource.of(source)
        destination = Path(destination)
        command = self.assemble(source, config, pipeline, destination)

        try:
            result: CommandResult = self.driver.run(
                list(command), listeners=listeners, cmd_log_file_path=self.cmd_log_file_path
            )
        except DriverExecutionError as e:
            self.cleanup_temporary_file(destination)
            logger.error(f"ffmpeg failed producing {destination} from {source}: {e}")
            raise ExecutionFailed(
                f"Unable to produce {destination.name}",
                returncode=e.returncode,
                stderr=e.stderr,
                command=command,
            ) from e

        if destination.exists():
            logger.info(f"Created {destination} ({formatted_size(destination.stat().st_size)})")
        else:
            logger.debug(f"ffmpeg finished, {destination} is not a regular file on disk")
        return OperationResult(path=destination, command=command, stdout=result.stdout, stderr=result.stderr)

    @staticmethod
    def cleanup_temporary_file(path: Union[str, Path]):
        """
        Removes a partially written output, ignoring any error.
        """
        path = Path(path)
        try:
            if path.is_file():
                path.unlink()
                logger.debug(f"Removed partial output {path}")
        except OSError as e:
            logger.warning(f"Could not remove partial output {path}: {e}")
