"""
Command-Line Interface (CLI) for ffmedia.

This module uses Python's `argparse` to define the sub-commands that expose
the library's operations:

- `waveform`: render the waveform of an audio file as a picture;
- `transcode`: convert a file to one of the supported audio or video formats;
- `frame`: extract a still image from a video;
- `probe`: print the duration and streams of a file as YAML.
"""
import argparse
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from loguru import logger

from .config.common import COMMAND_TEXT, LOGGER_FORMAT
from .domain.exceptions import FFMediaException
from .domain.formats import WMV, X264, Aac, DefaultVideo, Flac, Mp3, Ogg, Vorbis, Wav, WebM
from .services.ffmpeg_service import FFMpeg
from .services.media_types import Video
from .services.progress import ProgressInfo

FORMATS = {
    "mp3": Mp3,
    "aac": Aac,
    "flac": Flac,
    "vorbis": Vorbis,
    "wav": Wav,
    "x264": X264,
    "webm": WebM,
    "wmv": WMV,
    "ogg": Ogg,
}


def get_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parses command-line arguments for ffmedia.

    Args:
        argv: The arguments to parse; `sys.argv[1:]` when None.

    Returns:
        argparse.Namespace: An object containing the parsed command-line
                            arguments as attributes.
    """
    parser = argparse.ArgumentParser(prog="ffmedia", description="Object-oriented façade over ffmpeg.")
    parser.add_argument(
        "--log-level", type=str, default="INFO", choices=["TRACE", "DEBUG", "INFO", "WARNING", "ERROR"],
        help="Set the logging level."
    )
    parser.add_argument("--ffmpeg-binary", type=str, default=None, help="Path of the ffmpeg executable.")
    parser.add_argument("--ffprobe-binary", type=str, default=None, help="Path of the ffprobe executable.")
    parser.add_argument("--timeout", type=float, default=None, help="Maximum run time of ffmpeg, in seconds.")
    parser.add_argument("--threads", type=int, default=None, help="Value of ffmpeg's -threads option.")
    parser.add_argument(
        "--cmd-log", type=str, default=None, nargs="?", const=COMMAND_TEXT,
        help=f"Append every executed command to this file (default name: {COMMAND_TEXT})."
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    waveform = subparsers.add_parser("waveform", help="Render the waveform of an audio file.")
    waveform.add_argument("input", type=str)
    waveform.add_argument("output", type=str, help="Output picture, PNG recommended.")
    waveform.add_argument("--width", type=int, default=640)
    waveform.add_argument("--height", type=int, default=120)
    waveform.add_argument(
        "--color", dest="colors", action="append", default=[],
        help="Waveform color as #RRGGBB. Repeat for one color per channel."
    )
    waveform.add_argument("--downmix", action="store_true", help="Draw all channels as a single waveform.")

    transcode = subparsers.add_parser("transcode", help="Convert a file to another format.")
    transcode.add_argument("input", type=str)
    transcode.add_argument("output", type=str)
    transcode.add_argument("--format", dest="format_name", choices=sorted(FORMATS), required=True)
    transcode.add_argument("--codec", type=str, default=None, help="Audio codec.")
    transcode.add_argument("--bitrate", type=int, default=None, help="Audio bitrate in kilobits per second.")
    transcode.add_argument("--channels", type=int, default=None, help="Number of audio channels.")
    transcode.add_argument("--video-codec", type=str, default=None)
    transcode.add_argument("--video-bitrate", type=int, default=None, help="Video bitrate in kilobits per second.")
    transcode.add_argument("--passes", type=int, default=None, help="Number of encoding passes (video only).")

    frame = subparsers.add_parser("frame", help="Extract a still image from a video.")
    frame.add_argument("input", type=str)
    frame.add_argument("output", type=str)
    frame.add_argument("--at", type=str, default="0", help="Position in seconds or HH:MM:SS.ff.")
    frame.add_argument("--accurate", action="store_true", help="Seek to the exact frame (slower).")

    probe = subparsers.add_parser("probe", help="Print the duration and streams of a file.")
    probe.add_argument("input", type=str)

    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> Dict[str, Any]:
    """Driver settings given on the command line, overriding the user config."""
    config: Dict[str, Any] = {}
    if args.ffmpeg_binary:
        config["ffmpeg_binary"] = args.ffmpeg_binary
    if args.ffprobe_binary:
        config["ffprobe_binary"] = args.ffprobe_binary
    if args.timeout is not None:
        config["timeout"] = args.timeout
    if args.threads is not None:
        config["threads"] = args.threads
    return config


def build_format(args: argparse.Namespace):
    """
    Creates the output format described by the `transcode` arguments.

    Raises:
        InvalidConfiguration: If a value is rejected by the format.
    """
    fmt = FORMATS[args.format_name]()
    if args.codec:
        fmt.set_audio_codec(args.codec)
    if args.bitrate is not None:
        fmt.set_audio_kilo_bitrate(args.bitrate)
    if args.channels is not None:
        fmt.set_audio_channels(args.channels)
    if isinstance(fmt, DefaultVideo):
        if args.video_codec:
            fmt.set_video_codec(args.video_codec)
        if args.video_bitrate is not None:
            fmt.set_kilo_bitrate(args.video_bitrate)
        if args.passes is not None:
            fmt.set_passes(args.passes)
    return fmt


def _log_progress(info: ProgressInfo):
    logger.info(
        f"{info.percent:3d}% (pass {info.current_pass}/{info.total_passes}, "
        f"{info.remaining}s left, {info.rate} kB/s)"
    )


def run(args: argparse.Namespace, ffmpeg: Optional[FFMpeg] = None) -> int:
    """
    Executes the sub-command selected in `args`.

    Returns:
        The process exit status: 0 on success, 1 when an operation failed.
    """
    try:
        if ffmpeg is None:
            cmd_log = Path(args.cmd_log) if args.cmd_log else None
            ffmpeg = FFMpeg.create(build_config(args), cmd_log_file_path=cmd_log)

        if args.command == "probe":
            media_file = ffmpeg.get_ffprobe().probe(args.input)
            summary = {
                "path": str(media_file.path),
                "duration": media_file.duration,
                "size": media_file.size,
                "audio_streams": [s.get("codec_name") for s in media_file.audio_streams],
                "video_streams": [s.get("codec_name") for s in media_file.video_streams],
                "channels": media_file.channels,
            }
            sys.stdout.write(yaml.safe_dump(summary, sort_keys=False, allow_unicode=True))
            return 0

        media = ffmpeg.open(args.input)

        if args.command == "waveform":
            waveform = media.waveform(args.width, args.height, args.colors)
            if args.downmix:
                waveform.filters().set_downmix(True)
            result = waveform.save(args.output)
        elif args.command == "transcode":
            result = media.save(build_format(args), args.output, on_progress=_log_progress)
        elif args.command == "frame":
            if not isinstance(media, Video):
                logger.error(f"{args.input} has no video stream, cannot extract a frame.")
                return 1
            at = float(args.at) if args.at.replace(".", "", 1).isdigit() else args.at
            result = media.frame(at).save(args.output, accurate=args.accurate)
        else:
            logger.error(f"Unknown command {args.command}")
            return 1
    except (FFMediaException, FileNotFoundError) as e:
        logger.error(str(e))
        return 1

    logger.success(f"Wrote {result.path}")
    return 0


def main(argv: Optional[List[str]] = None):
    """Console entry point: parses arguments, configures logging and runs."""
    args = get_args(argv)
    logger.remove()
    logger.add(sys.stderr, level=args.log_level, format=LOGGER_FORMAT)
    logger.debug(f"Parsed arguments: {args}")
    sys.exit(run(args))
