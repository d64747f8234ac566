"""Media session - external decoder calls and temporary frame storage.

A :class:`MediaSession` owns a private temporary directory for the lifetime of
one playback. ffmpeg splits the input file into numbered PNG frames (and,
unless muted, a WAV audio track) inside it, ffprobe reports the stream
metadata, and the directory is removed when the session ends.

Example:
    with MediaSession("clip.mp4") as session:
        session.generate_frames()
        frames = session.load_frames()
        audio = session.extract_audio()
"""

from __future__ import annotations

import logging
import shutil
import subprocess
import tempfile
from pathlib import Path

from .config import Settings, settings as default_settings
from .errors import DecodeError, DecoderNotFoundError, StorageAccessError
from .frames import FrameSequence

logger = logging.getLogger(__name__)


class MediaSession:
    """Scoped temporary storage plus the ffmpeg/ffprobe collaborators."""

    def __init__(self, file: str, settings: Settings | None = None) -> None:
        """
        :param file: Path of the media file to decode
        :param settings: Settings to use (module defaults if None)
        """
        self.file = file
        self.settings = settings or default_settings
        self._storage: Path | None = None

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def __enter__(self) -> "MediaSession":
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.cleanup()

    def open(self) -> Path:
        """Create the temporary storage directory."""
        root = self.settings.TEMP_ROOT
        try:
            self._storage = Path(
                tempfile.mkdtemp(prefix="stagterm-", dir=str(root) if root else None)
            )
        except OSError as e:
            raise StorageAccessError(
                f"Unable to create output directory at {root or tempfile.gettempdir()}: {e}"
            ) from e
        logger.debug(f"Session storage: {self._storage}")
        return self._storage

    def cleanup(self) -> None:
        """Remove the storage directory. A failed removal raises."""
        if self._storage is None:
            return
        storage, self._storage = self._storage, None
        try:
            shutil.rmtree(storage)
        except FileNotFoundError:
            pass
        except OSError as e:
            raise StorageAccessError(
                f"Failed to clean temp directory {storage}: {e}"
            ) from e

    @property
    def storage(self) -> Path:
        """The session's temporary directory."""
        if self._storage is None:
            raise StorageAccessError("Media session is not open")
        return self._storage

    @property
    def audio_path(self) -> Path:
        """Fixed location of the extracted audio track."""
        return self.storage / self.settings.AUDIO_FILENAME

    # -------------------------------------------------------------------------
    # Decoder calls
    # -------------------------------------------------------------------------

    def _run(self, args: list[str], **kwargs) -> subprocess.CompletedProcess:
        """Run an external tool, mapping a missing binary to its own error."""
        logger.debug(f"Running: {' '.join(args)}")
        try:
            return subprocess.run(args, check=False, **kwargs)
        except FileNotFoundError as e:
            raise DecoderNotFoundError(
                f"Could not find {args[0]}: is it installed and on your PATH?"
            ) from e

    def generate_frames(self) -> int:
        """Split the input into numbered still frames.

        :return: Number of frame files produced
        """
        result = self._run(
            [
                self.settings.FFMPEG_BINARY,
                "-hide_banner",
                "-i",
                self.file,
                str(self.storage / self.settings.FRAME_PATTERN),
            ],
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
        )
        count = len(list(self.storage.glob(self._frame_glob)))
        if result.returncode != 0:
            if count == 0:
                raise DecodeError(
                    f"Unable to decode {self.file}: "
                    f"{self.settings.FFMPEG_BINARY} exited with status {result.returncode}"
                )
            logger.warning(
                f"{self.settings.FFMPEG_BINARY} exited with status "
                f"{result.returncode} after producing {count} frame(s)"
            )
        logger.debug(f"Extracted {count} frame(s) from {self.file}")
        return count

    def extract_audio(self) -> Path | None:
        """Extract the audio track.

        :return: The audio file, or None if the input has no usable audio
        """
        target = self.audio_path
        result = self._run(
            [
                self.settings.FFMPEG_BINARY,
                "-hide_banner",
                "-y",
                "-i",
                self.file,
                "-vn",
                str(target),
            ],
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
        )
        if result.returncode != 0 or not target.exists() or target.stat().st_size == 0:
            logger.info(f"No audio track extracted from {self.file}, playing silently")
            return None
        return target

    def probe_metadata(self) -> str:
        """Human readable stream information as printed by ffprobe."""
        result = self._run(
            [self.settings.FFPROBE_BINARY, "-hide_banner", "-i", self.file],
            stdout=subprocess.DEVNULL,
            stderr=subprocess.PIPE,
        )
        return result.stderr.decode("utf-8", errors="replace")

    def load_frames(self) -> FrameSequence:
        """Decode the extracted frames in presentation order."""
        sequence = FrameSequence.from_directory(
            self.storage, self.file, pattern=self._frame_glob
        )
        if not sequence:
            raise DecodeError(f"Unable to decode {self.file}: no frames were produced")
        return sequence

    @property
    def _frame_glob(self) -> str:
        """Glob matching the files written by FRAME_PATTERN."""
        return self.settings.FRAME_PATTERN.replace("%d", "*")


__all__ = ["MediaSession"]
