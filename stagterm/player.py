"""
Terminal Player - paced playback of a frame sequence.

A single frame is drawn once. Longer sequences play as a video: every frame
is drawn over the previous one at the source frame rate, optional audio is
restarted with each pass, and ``q`` or Ctrl+C stops playback between frames.

Example:
    from stagterm.player import TerminalPlayer

    player = TerminalPlayer(sequence, config, delay_resolver=lambda: 1 / 25)
    session = player.play()

Controls (video only):
    Q       - Stop playback
    Ctrl+C  - Stop playback
"""

from __future__ import annotations

import logging
import sys
import termios
import time
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Callable, TextIO

from blessed import Terminal

from .config import PlaybackConfig, Settings, settings as default_settings
from .errors import DecodeError, RenderIOError, TerminalEnvironmentError
from .frames import Bitmap, FrameSequence
from .renderer import ESC, HalfBlockRenderer, rows_for

if TYPE_CHECKING:
    from .audio import AudioHandle, AudioTrack

logger = logging.getLogger(__name__)

# ANSI escape codes
SAVE_CURSOR = f"{ESC}7"
RESTORE_CURSOR = f"{ESC}8"
CURSOR_COLUMN_ZERO = f"{ESC}[0G"

CTRL_C = "\x03"

LOCATION_TIMEOUT = 1.0  # Seconds to wait for the terminal's cursor report


class PlaybackState(Enum):
    """Playback state machine."""

    IDLE = "idle"
    PRIMING = "priming"
    FRAME_DISPLAY = "frame_display"
    CANCELLED = "cancelled"
    TERMINAL = "terminal"


class PlaybackMode(Enum):
    """The two variants of playback, chosen by sequence length."""

    STILL = "still"
    VIDEO = "video"


@dataclass
class PlaybackSession:
    """Transient state of one playback."""

    mode: PlaybackMode = PlaybackMode.STILL
    state: PlaybackState = PlaybackState.IDLE
    frame_index: int = 0
    passes: int = 0
    frames_shown: int = 0
    cancelled: bool = False


@dataclass
class CursorAnchor:
    """Where the first frame starts, so later frames overwrite it.

    Holds an absolute 0-based position when the terminal reports one.
    Otherwise the position is kept by the terminal itself (save/restore
    cursor) and ``row``/``col`` stay None.
    """

    row: int | None = None
    col: int | None = None

    @classmethod
    def capture(cls, terminal: Terminal, out: TextIO) -> "CursorAnchor":
        """Record the current cursor position.

        :param terminal: Terminal used to query the position
        :param out: Stream receiving the save-cursor fallback
        :return: The anchor
        """
        row, col = terminal.get_location(timeout=LOCATION_TIMEOUT)
        if row >= 0 and col >= 0:
            return cls(row=row, col=col)
        logger.debug("Cursor position unavailable, using save/restore cursor")
        out.write(SAVE_CURSOR)
        out.flush()
        return cls()

    @property
    def is_absolute(self) -> bool:
        """Whether the anchor holds a known terminal coordinate."""
        return self.row is not None and self.col is not None

    def sequence(self) -> str:
        """Escape sequence moving the cursor back to the anchor."""
        if self.is_absolute:
            return f"{ESC}[{self.row + 1};{self.col + 1}H"
        return RESTORE_CURSOR


class KeyboardHandler:
    """Poll keyboard input using blessed and dispatch bound keys."""

    def __init__(self, terminal: Terminal):
        self.terminal = terminal
        self._bindings: dict[str, Callable[[], None]] = {}
        self._char_bindings: dict[str, Callable[[], None]] = {}

    def bind(self, key: str, handler: Callable[[], None]) -> None:
        """Bind a handler to a key.

        Key can be a key name (e.g., 'KEY_ESCAPE') or a character.
        """
        if key.startswith("KEY_"):
            self._bindings[key] = handler
        else:
            self._char_bindings[key] = handler

    def unbind(self, key: str) -> None:
        """Remove a key binding."""
        if key.startswith("KEY_"):
            self._bindings.pop(key, None)
        else:
            self._char_bindings.pop(key, None)

    def process(self, timeout: float = 0.001) -> bool:
        """Wait up to ``timeout`` seconds for a key and dispatch it.

        A failing poll is logged and treated as "no key pressed".

        :return: True if a bound key was handled
        """
        try:
            key = self.terminal.inkey(timeout=timeout)
        except OSError as e:
            logger.debug(f"Ignoring input poll error: {e}")
            return False
        if not key:
            return False

        name = getattr(key, "name", None)
        if name and name in self._bindings:
            self._bindings[name]()
            return True

        char = str(key)
        if char in self._char_bindings:
            self._char_bindings[char]()
            return True
        return False


class TerminalPlayer:
    """
    Plays a transformed frame sequence in the terminal.

    Still images and videos share the renderer. Videos additionally need a
    frame delay, raw keyboard input and optionally an audio track.
    """

    def __init__(
        self,
        sequence: FrameSequence,
        config: PlaybackConfig,
        *,
        delay_resolver: Callable[[], float] | None = None,
        audio_track: "AudioTrack | None" = None,
        terminal: Terminal | None = None,
        renderer: HalfBlockRenderer | None = None,
        out: TextIO | None = None,
        settings: Settings | None = None,
    ):
        """
        :param sequence: Frames of uniform size, in presentation order
        :param config: The playback configuration (loop flag)
        :param delay_resolver: Returns the inter-frame delay in seconds.
            Only called for videos.
        :param audio_track: Opened audio track to restart with every pass
        :param terminal: blessed Terminal (created on demand if None)
        :param renderer: Glyph renderer (writes to ``out`` if None)
        :param out: Output stream (standard output if None)
        :param settings: Settings to use (module defaults if None)
        """
        self.sequence = sequence
        self.config = config
        self.settings = settings or default_settings
        self.out = out if out is not None else sys.stdout
        self._delay_resolver = delay_resolver
        self._audio_track = audio_track
        self._terminal = terminal
        self._renderer = renderer or HalfBlockRenderer(self.out)
        self._keyboard: KeyboardHandler | None = None
        self._anchor: CursorAnchor | None = None
        self.session = PlaybackSession()

    @property
    def terminal(self) -> Terminal:
        """The blessed terminal, created on first use."""
        if self._terminal is None:
            self._terminal = Terminal()
        return self._terminal

    @property
    def anchor(self) -> CursorAnchor | None:
        """The cursor anchor of the current session."""
        return self._anchor

    @property
    def rows(self) -> int:
        """Terminal lines occupied by one frame."""
        _, height = self.sequence.dimensions
        return rows_for(height)

    def play(self) -> PlaybackSession:
        """Play the sequence until it ends or the user cancels.

        :return: The finished session
        """
        if not self.sequence:
            raise DecodeError(f"Nothing to play in {self.sequence.source or 'sequence'}")

        mode = PlaybackMode.VIDEO if self.sequence.is_video else PlaybackMode.STILL
        self.session = PlaybackSession(mode=mode)

        if mode == PlaybackMode.STILL:
            self._prime(anchor=False)
            self._show_frame(self.sequence[0])
            self.session.state = PlaybackState.TERMINAL
            return self.session

        delay = self._resolve_delay()
        self._prime()
        self._play_video(delay)
        return self.session

    # -------------------------------------------------------------------------
    # Phases
    # -------------------------------------------------------------------------

    def _resolve_delay(self) -> float:
        """Inter-frame delay in seconds, resolved before anything is drawn."""
        if self._delay_resolver is None:
            raise TerminalEnvironmentError("No frame rate source for video playback")
        delay = self._delay_resolver()
        logger.debug(f"Frame delay: {delay * 1000:.0f} ms")
        return delay

    def _prime(self, anchor: bool = True) -> None:
        """Reserve vertical space for a frame.

        :param anchor: Also record the cursor anchor. Only videos redraw, so
            only they need it.
        """
        self.session.state = PlaybackState.PRIMING
        rows = self.rows
        self._write("\n" * rows + f"{ESC}[{rows}A" + CURSOR_COLUMN_ZERO)
        if anchor:
            self._anchor = CursorAnchor.capture(self.terminal, self.out)
        logger.debug(f"Anchor: {self._anchor}, reserved {rows} row(s)")

    def _play_video(self, delay: float) -> None:
        """Run passes over the sequence in raw input mode."""
        self._keyboard = KeyboardHandler(self.terminal)
        self._keyboard.bind("q", self._on_cancel)
        self._keyboard.bind(CTRL_C, self._on_cancel)

        try:
            with self.terminal.raw(), self.terminal.hidden_cursor():
                while True:
                    self.session.passes += 1
                    logger.debug(f"Starting pass {self.session.passes}")
                    audio = self._audio_track.start() if self._audio_track else None
                    try:
                        self._play_pass(delay, audio)
                    finally:
                        if audio is not None:
                            audio.release()

                    if self.session.cancelled:
                        self.session.state = PlaybackState.CANCELLED
                        break
                    if not self.config.loop:
                        self.session.state = PlaybackState.TERMINAL
                        break
        except (OSError, termios.error) as e:
            raise TerminalEnvironmentError(f"Unable to switch terminal input mode: {e}") from e

        self._leave_drawing_region()

    def _play_pass(self, delay: float, audio: "AudioHandle | None") -> None:
        """Draw every frame once, keeping ``audio`` alive throughout.

        :param delay: Seconds to wait after each frame
        :param audio: The pass's audio playback, released by the caller
        """
        for index, frame in enumerate(self.sequence):
            self.session.frame_index = index
            self._show_frame(frame)
            self._write(self._anchor.sequence())
            if audio is not None:
                self._log_drift(audio, index, delay)

            time.sleep(delay)
            self._keyboard.process(timeout=self.settings.POLL_TIMEOUT)
            if self.session.cancelled:
                return

    def _show_frame(self, frame: Bitmap) -> None:
        """Render one frame at the current cursor position."""
        self.session.state = PlaybackState.FRAME_DISPLAY
        self._renderer.render(frame)
        self.session.frames_shown += 1

    def _leave_drawing_region(self) -> None:
        """Put the cursor on the line below the frame."""
        self._write(f"{self._anchor.sequence()}{ESC}[{self.rows}B{CURSOR_COLUMN_ZERO}")

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _on_cancel(self) -> None:
        """Handle q / Ctrl+C."""
        self.session.cancelled = True

    def _log_drift(self, audio: "AudioHandle", index: int, delay: float) -> None:
        """Log how far the picture runs ahead of the sound."""
        if not logger.isEnabledFor(logging.DEBUG):
            return
        drift = index * delay - audio.position
        logger.debug(f"Frame {index}: video ahead of audio by {drift * 1000:.0f} ms")

    def _write(self, text: str) -> None:
        """Write control output and flush."""
        try:
            self.out.write(text)
            self.out.flush()
        except (OSError, ValueError) as e:
            raise RenderIOError(f"Failed to write to terminal: {e}") from e


__all__ = [
    "CTRL_C",
    "CursorAnchor",
    "KeyboardHandler",
    "PlaybackMode",
    "PlaybackSession",
    "PlaybackState",
    "TerminalPlayer",
]
