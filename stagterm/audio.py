"""Audio playback through pygame's mixer.

The mixer plays on its own SDL thread. The player only controls lifetime:
every pass of a video starts a fresh :class:`AudioHandle` and releases it
after the pass's last frame.

Example:
    with AudioTrack(path) as track:
        handle = track.start()
        ...  # draw frames
        handle.release()
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

# Suppress pygame welcome message
os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")

import pygame

from .errors import AudioDeviceError, DecodeError

logger = logging.getLogger(__name__)


class AudioHandle:
    """A running playback of an :class:`AudioTrack`.

    The sound stops when the handle is released, so it must be kept until the
    frames it accompanies have been drawn.
    """

    def __init__(self, track: "AudioTrack"):
        self.track = track
        self._active = True

    @property
    def active(self) -> bool:
        """Whether this handle still owns the playback."""
        return self._active

    @property
    def position(self) -> float:
        """Seconds played since the handle was started (0 once released)."""
        if not self._active:
            return 0.0
        millis = pygame.mixer.music.get_pos()
        return max(0, millis) / 1000.0

    def release(self) -> None:
        """Stop the playback. Safe to call more than once."""
        if self._active:
            self._active = False
            pygame.mixer.music.stop()


class AudioTrack:
    """An audio file loaded into the mixer, ready to be (re)started."""

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self._opened = False

    def __enter__(self) -> "AudioTrack":
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def open(self) -> None:
        """Acquire the output device and load the file."""
        try:
            pygame.mixer.init()
        except pygame.error as e:
            raise AudioDeviceError(f"Unable to open audio output device: {e}") from e
        self._opened = True
        try:
            pygame.mixer.music.load(str(self.path))
        except pygame.error as e:
            self.close()
            raise DecodeError(f"Unable to decode audio track {self.path}: {e}") from e
        logger.debug(f"Audio track loaded: {self.path}")

    def close(self) -> None:
        """Stop any playback and release the device."""
        if not self._opened:
            return
        self._opened = False
        pygame.mixer.music.stop()
        pygame.mixer.quit()

    def start(self) -> AudioHandle:
        """Play the track from the beginning."""
        if not self._opened:
            raise AudioDeviceError("Audio track is not open")
        pygame.mixer.music.play()
        return AudioHandle(self)


__all__ = ["AudioHandle", "AudioTrack"]
