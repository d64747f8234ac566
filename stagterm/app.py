"""Playback pipeline: decode, transform, then play."""

from __future__ import annotations

import logging
from contextlib import ExitStack
from typing import TextIO

from .audio import AudioTrack
from .config import PlaybackConfig, Settings, settings as default_settings
from .media import MediaSession
from .player import PlaybackSession, TerminalPlayer
from .rate import resolve_frame_delay
from .transform import parse_size, transform_sequence

logger = logging.getLogger(__name__)


def play_media(
    config: PlaybackConfig,
    settings: Settings | None = None,
    out: TextIO | None = None,
) -> PlaybackSession:
    """
    Decode ``config.file`` and play it in the terminal.

    The temporary frame directory is removed when this returns or raises.

    :param config: What to play and how
    :param settings: Settings to use (module defaults if None)
    :param out: Output stream (standard output if None)
    :return: The finished playback session
    """
    settings = settings or default_settings
    if config.size is not None:
        parse_size(config.size)

    with MediaSession(config.file, settings) as session:
        session.generate_frames()
        sequence = session.load_frames()
        transform_sequence(sequence, config, settings.THUMBNAIL_SIZE)

        audio_path = None if config.mute else session.extract_audio()

        with ExitStack() as stack:
            track = None
            if audio_path is not None and sequence.is_video:
                track = stack.enter_context(AudioTrack(audio_path))

            player = TerminalPlayer(
                sequence,
                config,
                delay_resolver=lambda: resolve_frame_delay(session.probe_metadata()),
                audio_track=track,
                out=out,
                settings=settings,
            )
            result = player.play()

    logger.debug(
        f"Playback finished: {result.state.value}, {result.frames_shown} frame(s), "
        f"{result.passes} pass(es)"
    )
    return result


__all__ = ["play_media"]
