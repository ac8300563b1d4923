"""Music playback package."""

from .music import (
    MusicController,
    MusicError,
    MusicMode,
    MusicPlayer,
    MusicPolicy,
    LoggingMusicPlayer,
)

__all__ = [
    "MusicController",
    "MusicError",
    "MusicMode",
    "MusicPlayer",
    "MusicPolicy",
    "LoggingMusicPlayer",
]
