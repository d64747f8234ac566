"""Command line entry point.

Usage:
    stagterm [options] FILE

Examples:
    stagterm photo.png
    stagterm --size 80x40 --invert logo.png
    stagterm --loop --scale 1.5 clip.mp4
"""

from __future__ import annotations

import argparse
import logging
import sys

from . import __version__
from .app import play_media
from .config import PlaybackConfig, settings
from .errors import StagTermError


def positive_float(text: str) -> float:
    """argparse type for --scale."""
    try:
        value = float(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid scale factor: {text!r}")
    if value <= 0:
        raise argparse.ArgumentTypeError(f"scale factor must be positive, got {text}")
    return value


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="stagterm",
        description="Render an image or video to the terminal.",
    )
    parser.add_argument("file", metavar="FILE", help="Path to a media file to render.")
    parser.add_argument("--invert", action="store_true", help="Invert all color")
    parser.add_argument("--flip-h", action="store_true", help="Flip image horizontally")
    parser.add_argument("--flip-v", action="store_true", help="Flip image vertically")
    parser.add_argument(
        "--size", metavar="WxH", help="Dimensions to adjust to, in the format NxN"
    )
    parser.add_argument("--scale", type=positive_float, help="Factor to scale by")
    parser.add_argument(
        "--preserve-dims",
        action="store_true",
        help="Avoid automatically resizing the image",
    )
    parser.add_argument("--loop", action="store_true", help="Loop video playback")
    parser.add_argument("--mute", action="store_true", help="Mute audio if any is present")
    parser.add_argument("-d", "--debug", action="store_true", help="Enable debug logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: list[str] | None = None) -> int:
    """Run stagterm and return the process exit status."""
    parser = build_parser()
    args = parser.parse_args(argv)

    level = logging.DEBUG if args.debug else settings.LOG_LEVEL.upper()
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")

    config = PlaybackConfig.from_namespace(args)
    try:
        play_media(config)
    except StagTermError as e:
        print(f"{parser.prog}: error: {e}", file=sys.stderr, flush=True)
        return 1
    except KeyboardInterrupt:
        pass
    return 0


__all__ = ["build_parser", "main", "positive_float"]
