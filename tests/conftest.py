"""
Pytest fixtures for stagterm tests
"""

from contextlib import contextmanager

import numpy as np
import pytest

from stagterm import FrameSequence, PlaybackConfig


class FakeTerminal:
    """Stands in for blessed.Terminal: scripted keys, recorded raw mode."""

    def __init__(self, keys=(), location=(5, 0)):
        self.keys = list(keys)
        self.location = location
        self.in_raw = False
        self.raw_entered = 0
        self.raw_exited = 0
        self.polls = 0
        self.location_queries = 0

    def get_location(self, timeout=None):
        self.location_queries += 1
        return self.location

    @contextmanager
    def raw(self):
        self.in_raw = True
        self.raw_entered += 1
        try:
            yield
        finally:
            self.in_raw = False
            self.raw_exited += 1

    @contextmanager
    def hidden_cursor(self):
        yield

    def inkey(self, timeout=None):
        self.polls += 1
        if self.keys:
            key = self.keys.pop(0)
            if isinstance(key, Exception):
                raise key
            return key
        return ""


def solid(width: int, height: int, rgba=(255, 0, 0, 255)) -> np.ndarray:
    """Create a bitmap filled with one color."""
    bitmap = np.zeros((height, width, 4), dtype=np.uint8)
    bitmap[:, :] = rgba
    return bitmap


@pytest.fixture
def make_bitmap():
    """Factory for single color RGBA bitmaps."""
    return solid


@pytest.fixture
def gradient() -> np.ndarray:
    """A 6x4 opaque bitmap where every pixel has a unique color (x, y, 7)."""
    bitmap = np.zeros((4, 6, 4), dtype=np.uint8)
    for y in range(4):
        for x in range(6):
            bitmap[y, x] = (x, y, 7, 255)
    return bitmap


@pytest.fixture
def video() -> FrameSequence:
    """A three frame 4x4 video."""
    return FrameSequence(
        frames=[solid(4, 4, (i * 50, 0, 0, 255)) for i in range(3)],
        source="clip.mp4",
    )


@pytest.fixture
def still() -> FrameSequence:
    """A single 4x4 frame."""
    return FrameSequence(frames=[solid(4, 4)], source="photo.png")


@pytest.fixture
def config() -> PlaybackConfig:
    """Default configuration for clip.mp4."""
    return PlaybackConfig(file="clip.mp4")
