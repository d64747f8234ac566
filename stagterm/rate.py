"""Frame rate resolution from decoder metadata.

The delay is computed once per playback and reused for every frame. There is
no drift correction.
"""

from __future__ import annotations

import logging
import re

from .errors import MetadataError

logger = logging.getLogger(__name__)

_FPS_PATTERN = re.compile(r"(\d+(?:\.\d+)?|\.\d+) fps")

FRAMERATE_ERROR = "Could not determine framerate of video!"


def parse_framerate(metadata: str) -> float:
    """Extract the frames per second from ffprobe style stream info.

    :param metadata: Text such as "Stream #0:0: Video: h264, ... 29.97 fps, ..."
    :return: The frame rate
    """
    match = _FPS_PATTERN.search(metadata)
    if match is None:
        raise MetadataError(FRAMERATE_ERROR)
    fps = float(match.group(1))
    if fps <= 0:
        raise MetadataError(FRAMERATE_ERROR)
    return fps


def frame_delay_ms(fps: float) -> int:
    """Milliseconds between two frames, halves rounded up (80 fps is 13 ms)."""
    return int(1000 / fps + 0.5)


def resolve_frame_delay(metadata: str) -> float:
    """Parse the metadata and return the inter-frame delay in seconds."""
    fps = parse_framerate(metadata)
    delay = frame_delay_ms(fps)
    logger.debug(f"Source frame rate {fps} fps, frame delay {delay} ms")
    return delay / 1000.0


__all__ = ["FRAMERATE_ERROR", "parse_framerate", "frame_delay_ms", "resolve_frame_delay"]
