"""
Transform stage - size, recolor and flip every frame of a sequence.

The target geometry is computed once from the first frame and applied to all
frames, so a video keeps a single size for its whole run. Resizing uses
nearest-neighbor sampling to keep the blocky look that suits low resolution
terminal output.

Per frame the order is fixed: resize, invert, flip horizontally, flip
vertically.
"""

from __future__ import annotations

import logging
import re

import cv2
import numpy as np

from .config import PlaybackConfig, SizePolicy
from .errors import InputValidationError
from .frames import Bitmap, FrameSequence

logger = logging.getLogger(__name__)

DEFAULT_THUMBNAIL_SIZE = 64
MAX_DIMENSION = 2**15  # Per side, after scaling

_SIZE_PATTERN = re.compile(r"(\d+)x(\d+)")

SIZE_FORMAT_ERROR = "Invalid coordinates supplied to --size: must be in format NUMxNUM"


def parse_size(text: str) -> tuple[int, int]:
    """Parse a "WxH" size string.

    :param text: The size, e.g. "80x40"
    :return: (width, height), both positive
    """
    match = _SIZE_PATTERN.fullmatch(text.strip())
    if match is None:
        raise InputValidationError(SIZE_FORMAT_ERROR)
    width, height = int(match.group(1)), int(match.group(2))
    if width == 0 or height == 0:
        raise InputValidationError(SIZE_FORMAT_ERROR)
    return width, height


def compute_target_size(
    width: int,
    height: int,
    config: PlaybackConfig,
    thumbnail_size: int = DEFAULT_THUMBNAIL_SIZE,
) -> tuple[int, int]:
    """
    Compute the output dimensions for a source of the given size.

    :param width: Source width in pixels
    :param height: Source height in pixels
    :param config: The playback configuration
    :param thumbnail_size: Longer side used by the default size policy
    :return: (width, height) of the transformed frames
    """
    policy = config.size_policy
    if policy == SizePolicy.EXPLICIT:
        new_w, new_h = parse_size(config.size)
    elif policy == SizePolicy.THUMBNAIL:
        if width >= height:
            new_w, new_h = thumbnail_size, int(thumbnail_size * (height / width))
        else:
            new_w, new_h = int(thumbnail_size * (width / height)), thumbnail_size
    else:
        new_w, new_h = width, height

    if config.scale is not None:
        new_w = int(new_w * config.scale)
        new_h = int(new_h * config.scale)

    if new_w > MAX_DIMENSION or new_h > MAX_DIMENSION:
        raise InputValidationError(
            f"Target size {new_w}x{new_h} is too large: "
            f"at most {MAX_DIMENSION} pixels per side are supported"
        )

    # An empty target can come from extreme aspect ratios or tiny scales
    return max(1, new_w), max(1, new_h)


def invert_colors(bitmap: Bitmap) -> Bitmap:
    """Invert the RGB channels in place. Alpha is left untouched."""
    bitmap[:, :, :3] = 255 - bitmap[:, :, :3]
    return bitmap


def flip_horizontal(bitmap: Bitmap) -> Bitmap:
    """Mirror left to right."""
    return cv2.flip(bitmap, 1)


def flip_vertical(bitmap: Bitmap) -> Bitmap:
    """Mirror top to bottom."""
    return cv2.flip(bitmap, 0)


def transform_frame(
    bitmap: Bitmap, size: tuple[int, int], config: PlaybackConfig
) -> Bitmap:
    """Apply resize, invert and flips to a single frame.

    :param bitmap: The RGBA source frame
    :param size: Target (width, height)
    :param config: The playback configuration
    :return: The transformed frame (a new array)
    """
    if (bitmap.shape[1], bitmap.shape[0]) != size:
        frame = cv2.resize(bitmap, size, interpolation=cv2.INTER_NEAREST)
    else:
        frame = bitmap.copy()
    frame = np.ascontiguousarray(frame, dtype=np.uint8)

    if config.invert:
        invert_colors(frame)
    if config.flip_h:
        frame = flip_horizontal(frame)
    if config.flip_v:
        frame = flip_vertical(frame)
    return frame


def transform_sequence(
    sequence: FrameSequence,
    config: PlaybackConfig,
    thumbnail_size: int = DEFAULT_THUMBNAIL_SIZE,
) -> tuple[int, int]:
    """Transform every frame of a sequence in place.

    The size is validated before any frame is touched, so an invalid --size
    leaves the sequence unchanged.

    :param sequence: The frames to transform
    :param config: The playback configuration
    :param thumbnail_size: Longer side used by the default size policy
    :return: The common (width, height) of all frames afterwards
    """
    if not sequence:
        return (0, 0)

    src_w, src_h = sequence.dimensions
    size = compute_target_size(src_w, src_h, config, thumbnail_size)
    logger.debug(
        f"Transforming {len(sequence)} frame(s): {src_w}x{src_h} -> "
        f"{size[0]}x{size[1]} ({config.size_policy.value})"
    )

    for index in range(len(sequence)):
        sequence[index] = transform_frame(sequence[index], size, config)
    return size


__all__ = [
    "DEFAULT_THUMBNAIL_SIZE",
    "MAX_DIMENSION",
    "SIZE_FORMAT_ERROR",
    "parse_size",
    "compute_target_size",
    "invert_colors",
    "flip_horizontal",
    "flip_vertical",
    "transform_frame",
    "transform_sequence",
]
