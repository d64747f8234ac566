"""
Frame store - the ordered RGBA bitmaps of one image or video.

Frames are kept as ``(height, width, 4)`` uint8 numpy arrays. A sequence with
a single frame is a still image, anything longer is a video.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Iterator

import numpy as np
import PIL.Image

from .errors import DecodeError, StorageAccessError

logger = logging.getLogger(__name__)

Bitmap = np.ndarray
"An RGBA pixel grid of shape (height, width, 4) and dtype uint8"

_DIGITS = re.compile(r"(\d+)")


def natural_key(name: str) -> list[int | str]:
    """Sort key which compares digit runs by value ("frame2" < "frame10").

    :param name: The file name
    :return: Alternating text and integer chunks
    """
    return [int(chunk) if chunk.isdigit() else chunk for chunk in _DIGITS.split(name)]


def sorted_frame_paths(paths: Iterable[Path]) -> list[Path]:
    """Order frame files by presentation order.

    :param paths: Frame file paths in any order
    :return: The paths sorted numerically by name
    """
    return sorted(paths, key=lambda p: natural_key(p.name))


def load_bitmap(path: Path) -> Bitmap:
    """Decode an image file into an RGBA bitmap.

    Raises PIL.UnidentifiedImageError or OSError on failure.
    """
    with PIL.Image.open(path) as img:
        return np.array(img.convert("RGBA"), dtype=np.uint8)


@dataclass
class FrameSequence:
    """Ordered frames of one media item.

    :ivar frames: The RGBA bitmaps in presentation order
    :ivar source: The media file the frames were decoded from
    """

    frames: list[Bitmap] = field(default_factory=list)
    source: str = ""

    def __len__(self) -> int:
        return len(self.frames)

    def __bool__(self) -> bool:
        return len(self.frames) > 0

    def __iter__(self) -> Iterator[Bitmap]:
        return iter(self.frames)

    def __getitem__(self, index: int) -> Bitmap:
        return self.frames[index]

    def __setitem__(self, index: int, bitmap: Bitmap) -> None:
        self.frames[index] = bitmap

    @property
    def is_video(self) -> bool:
        """True for more than one frame. Length is the only discriminator."""
        return len(self.frames) > 1

    @property
    def dimensions(self) -> tuple[int, int]:
        """(width, height) of the first frame."""
        if not self.frames:
            return (0, 0)
        height, width = self.frames[0].shape[:2]
        return (width, height)

    @classmethod
    def from_directory(
        cls, directory: Path, source: str, pattern: str = "frame*.png"
    ) -> "FrameSequence":
        """Decode every frame file of a directory in numeric order.

        :param directory: Directory holding the extracted frames
        :param source: Name of the original media file, used in error messages
        :param pattern: Glob selecting the frame files
        :return: The loaded sequence
        """
        try:
            paths = sorted_frame_paths(directory.glob(pattern))
        except OSError as e:
            raise StorageAccessError(
                f"Unable to read from temp directory {directory}: {e}"
            ) from e

        total = len(paths)
        logger.debug(f"Loading {total} frame(s) from {directory}")
        frames: list[Bitmap] = []
        for index, path in enumerate(paths):
            try:
                frames.append(load_bitmap(path))
            except PIL.UnidentifiedImageError as e:
                raise DecodeError(
                    f"Unable to decode {cls._describe(source, index, total)}: {e}"
                ) from e
            except (FileNotFoundError, PermissionError) as e:
                raise StorageAccessError(
                    f"Unable to read from temp directory {directory}: {e}"
                ) from e
            except (OSError, ValueError) as e:
                raise DecodeError(
                    f"Unable to decode {cls._describe(source, index, total)}: {e}"
                ) from e
        return cls(frames=frames, source=source)

    @staticmethod
    def _describe(source: str, index: int, total: int) -> str:
        """Name a frame for error messages."""
        if total == 1:
            return source
        return f"frame {index + 1}/{total} of {source}"


__all__ = [
    "Bitmap",
    "FrameSequence",
    "load_bitmap",
    "natural_key",
    "sorted_frame_paths",
]
