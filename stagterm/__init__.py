"""
stagterm - Render images and videos as colored half-block text in the terminal
"""

from .config import PlaybackConfig, Settings, SizePolicy, settings
from .errors import (
    AudioDeviceError,
    DecodeError,
    DecoderNotFoundError,
    InputValidationError,
    MetadataError,
    RenderIOError,
    StagTermError,
    StorageAccessError,
    TerminalEnvironmentError,
)
from .frames import Bitmap, FrameSequence
from .renderer import HalfBlockRenderer, encode_cell
from .transform import compute_target_size, parse_size, transform_sequence
from .rate import frame_delay_ms, parse_framerate, resolve_frame_delay
from .player import (
    CursorAnchor,
    KeyboardHandler,
    PlaybackMode,
    PlaybackSession,
    PlaybackState,
    TerminalPlayer,
)

__version__ = "0.1.0"

__all__ = [
    # Configuration
    "PlaybackConfig",
    "Settings",
    "SizePolicy",
    "settings",
    # Errors
    "StagTermError",
    "TerminalEnvironmentError",
    "DecoderNotFoundError",
    "InputValidationError",
    "StorageAccessError",
    "DecodeError",
    "MetadataError",
    "RenderIOError",
    "AudioDeviceError",
    # Frames
    "Bitmap",
    "FrameSequence",
    # Transform
    "compute_target_size",
    "parse_size",
    "transform_sequence",
    # Rate
    "frame_delay_ms",
    "parse_framerate",
    "resolve_frame_delay",
    # Rendering and playback
    "HalfBlockRenderer",
    "encode_cell",
    "CursorAnchor",
    "KeyboardHandler",
    "PlaybackMode",
    "PlaybackSession",
    "PlaybackState",
    "TerminalPlayer",
]
