"""Exception hierarchy.

Every failure the CLI reports derives from :class:`StagTermError`, so the
entry point can turn it into a single line of text.
"""


class StagTermError(Exception):
    """Base class for all stagterm errors."""


class TerminalEnvironmentError(StagTermError):
    """The environment cannot support playback (output device, raw mode)."""


class DecoderNotFoundError(TerminalEnvironmentError):
    """ffmpeg or ffprobe could not be located."""


class InputValidationError(StagTermError):
    """A user supplied option is malformed."""


class StorageAccessError(StagTermError):
    """The temporary frame directory could not be created, read or removed."""


class DecodeError(StagTermError):
    """A frame or audio file could not be decoded."""


class MetadataError(StagTermError):
    """Stream metadata lacks a usable value (e.g. the frame rate)."""


class RenderIOError(StagTermError):
    """Writing or flushing terminal output failed."""


class AudioDeviceError(StagTermError):
    """No audio output device could be acquired."""


__all__ = [
    "StagTermError",
    "TerminalEnvironmentError",
    "DecoderNotFoundError",
    "InputValidationError",
    "StorageAccessError",
    "DecodeError",
    "MetadataError",
    "RenderIOError",
    "AudioDeviceError",
]
