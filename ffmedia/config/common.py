"""
Common configuration settings used throughout the application.

This module contains globally shared configuration settings and constants that are
used across ffmedia. It centralizes the logging format, the locations of the
external `ffmpeg` / `ffprobe` executables and the default execution limits.
It also handles the loading of user-specific configuration from an external
YAML file, allowing for easy customization without modifying the source code.
"""
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from loguru import logger

# --- User-Defined Configuration ---
# This block loads user-specific settings from a 'config.user.yaml' file located
# at the project root. The expected layout is:
#
#   ffmpeg:
#     ffmpeg_binary: /opt/ffmpeg/bin/ffmpeg
#     ffprobe_binary: /opt/ffmpeg/bin/ffprobe
#     timeout: 3600
#     threads: 4

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
USER_CONFIG_PATH = PROJECT_ROOT / "config.user.yaml"

# Names looked up on the system PATH when no explicit binary is configured.
DEFAULT_FFMPEG_BINARY = "ffmpeg"
DEFAULT_FFPROBE_BINARY = "ffprobe"


def load_user_config(config_path: Path = USER_CONFIG_PATH) -> Dict[str, Any]:
    """
    Reads the `ffmpeg` section of a user configuration file.

    Unknown keys are ignored. A missing file, an empty file or a file that
    cannot be parsed results in an empty dictionary, so callers can always
    fall back to the defaults.

    Args:
        config_path: The YAML file to read.

    Returns:
        A dictionary holding any of `ffmpeg_binary`, `ffprobe_binary`,
        `timeout` and `threads`.
    """
    if not config_path.is_file():
        logger.debug(f"User config '{config_path}' not found. Relying on system PATH for executables.")
        return {}

    try:
        with config_path.open("r", encoding="utf-8") as f:
            user_config = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        logger.warning(f"Could not load or parse '{config_path}': {e}")
        return {}

    section = (user_config or {}).get("ffmpeg") or {}
    if not isinstance(section, dict):
        logger.warning(f"Ignoring malformed 'ffmpeg' section in '{config_path}'.")
        return {}

    settings: Dict[str, Any] = {}
    for key in ("ffmpeg_binary", "ffprobe_binary"):
        if section.get(key):
            settings[key] = str(section[key])
    for key in ("timeout", "threads"):
        if section.get(key) is not None:
            settings[key] = section[key]
    return settings


_USER_SETTINGS = load_user_config()

# The ffmpeg executable. An absolute path from 'config.user.yaml' or a bare
# name resolved against the PATH.
FFMPEG_BINARY: str = _USER_SETTINGS.get("ffmpeg_binary", DEFAULT_FFMPEG_BINARY)

# The ffprobe executable, resolved the same way as `FFMPEG_BINARY`.
FFPROBE_BINARY: str = _USER_SETTINGS.get("ffprobe_binary", DEFAULT_FFPROBE_BINARY)

# Maximum run time of a single ffmpeg invocation in seconds. None disables it.
FFMPEG_TIMEOUT: Optional[float] = _USER_SETTINGS.get("timeout")

# Value passed to ffmpeg's `-threads` option for transcoding operations.
# None leaves the choice to ffmpeg.
FFMPEG_THREADS: Optional[int] = _USER_SETTINGS.get("threads")


# --- Logging Configuration ---

# The format string for the Loguru logger. It defines the structure and appearance
# of log messages, including timestamp, level, module name, and the message itself.
LOGGER_FORMAT = (
    "<green>{time:MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "{process} - <level>{message}</level>"
)

# The filename for the text file that logs the exact ffmpeg command executed
# for an operation when command logging is requested.
COMMAND_TEXT = "cmd.txt"

# Number of trailing stderr characters kept on an `ExecutionFailed` error.
STDERR_EXCERPT_LENGTH = 2000
