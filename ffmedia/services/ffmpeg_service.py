"""
Entry point of the library.

`FFMpeg` owns the drivers and turns file paths into media objects::

    ffmpeg = FFMpeg.create()
    audio = ffmpeg.open("talk.mp3")
    audio.waveform(1024, 200, ["#3366FF"]).save("talk.png")
"""
from pathlib import Path
from typing import Any, Dict, Optional, Union

from loguru import logger

from .driver import FFMpegDriver, FFProbeDriver
from .media_types import Audio, Video
from .orchestrator import CommandOrchestrator
from ..domain.exceptions import MediaFileException


class FFMpeg:
    """
    Opens media files for processing.

    Args:
        driver: Runs ffmpeg.
        ffprobe: Probes the files being opened.
        cmd_log_file_path: If set, every executed command is appended to this file.
    """

    def __init__(self, driver: FFMpegDriver, ffprobe: FFProbeDriver, cmd_log_file_path: Optional[Path] = None):
        self.driver = driver
        self.ffprobe = ffprobe
        self.orchestrator = CommandOrchestrator(driver, cmd_log_file_path=cmd_log_file_path)

    @classmethod
    def create(cls, config: Optional[Dict[str, Any]] = None, cmd_log_file_path: Optional[Path] = None) -> "FFMpeg":
        """
        Creates an instance with drivers located from `config`, the user
        configuration file or the system PATH.

        Raises:
            ExecutableNotFound: If ffmpeg or ffprobe cannot be located.
        """
        return cls(FFMpegDriver.create(config), FFProbeDriver.create(config), cmd_log_file_path)

    def get_driver(self) -> FFMpegDriver:
        return self.driver

    def get_ffprobe(self) -> FFProbeDriver:
        return self.ffprobe

    def open(self, pathfile: Union[str, Path]) -> Audio:
        """
        Opens a media file.

        Returns:
            A `Video` when the file holds a video stream (embedded cover art
            does not count), an `Audio` when it only holds audio.

        Raises:
            FileNotFoundError: If the file does not exist.
            MediaFileException: If ffprobe cannot read the file, or it has
                                neither audio nor video.
        """
        media_file = self.ffprobe.probe(pathfile)
        if media_file.has_video:
            logger.debug(f"Opened {pathfile} as video")
            return Video(pathfile, self.driver, self.ffprobe, self.orchestrator)
        if media_file.has_audio:
            logger.debug(f"Opened {pathfile} as audio")
            return Audio(pathfile, self.driver, self.ffprobe, self.orchestrator)

        raise MediaFileException(f"Unable to detect file format, only audio and video supported: {pathfile}")
