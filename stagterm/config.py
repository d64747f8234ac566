"""Configuration for stagterm.

Two layers:

- :class:`Settings` holds process-wide environment settings (tool paths,
  temp location, polling interval) and can be overridden with ``STAGTERM_*``
  environment variables.
- :class:`PlaybackConfig` is the immutable snapshot of what the user asked
  for on the command line. It is built once and shared by reference.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings."""

    # External tools
    FFMPEG_BINARY: str = "ffmpeg"
    FFPROBE_BINARY: str = "ffprobe"

    # Temporary storage
    TEMP_ROOT: Path | None = None  # None = system temp directory
    FRAME_PATTERN: str = "frame%d.png"
    AUDIO_FILENAME: str = "audio.wav"

    # Rendering and playback
    THUMBNAIL_SIZE: int = 64  # Longer side for the default size policy
    POLL_TIMEOUT: float = 0.001  # Seconds

    LOG_LEVEL: str = "WARNING"

    model_config = {"env_prefix": "STAGTERM_"}


settings = Settings()


class SizePolicy(Enum):
    """Which rule decides the target frame size."""

    EXPLICIT = "explicit"  # --size WxH
    THUMBNAIL = "thumbnail"  # Longer side scaled to THUMBNAIL_SIZE
    PRESERVE = "preserve"  # Keep the source dimensions


@dataclass(frozen=True)
class PlaybackConfig:
    """What to play and how to present it."""

    file: str
    invert: bool = False
    flip_h: bool = False
    flip_v: bool = False
    size: str | None = None  # "WxH"
    scale: float | None = None  # Applied after sizing
    preserve_dims: bool = False
    loop: bool = False
    mute: bool = False

    @property
    def size_policy(self) -> SizePolicy:
        """The sizing rule this configuration selects."""
        if self.size is not None:
            return SizePolicy.EXPLICIT
        if self.preserve_dims:
            return SizePolicy.PRESERVE
        return SizePolicy.THUMBNAIL

    @classmethod
    def from_namespace(cls, namespace: Any) -> "PlaybackConfig":
        """Build a configuration from parsed command line arguments.

        :param namespace: An ``argparse.Namespace`` (or any object) carrying
            the option attributes
        :return: The frozen configuration
        """
        return cls(
            file=str(namespace.file),
            invert=bool(namespace.invert),
            flip_h=bool(namespace.flip_h),
            flip_v=bool(namespace.flip_v),
            size=namespace.size,
            scale=namespace.scale,
            preserve_dims=bool(namespace.preserve_dims),
            loop=bool(namespace.loop),
            mute=bool(namespace.mute),
        )


__all__ = ["Settings", "settings", "SizePolicy", "PlaybackConfig"]
