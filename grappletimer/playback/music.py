"""Music playback policy.

Music runs during work rounds and stops for rests and at the end of a
session.  Which music plays is a user choice: whatever the player was
already playing, or a specific playlist.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import Enum

from ..timer.session import Phase, PhaseKind

log = logging.getLogger(__name__)


class MusicMode(Enum):
    CURRENT_PLAYBACK = "current"
    PLAYLIST = "playlist"

    @property
    def display_name(self) -> str:
        if self == MusicMode.CURRENT_PLAYBACK:
            return "Current Playback"
        return "Custom Playlist"


_PLAYLIST_URI = re.compile(r"^[a-z]+:playlist:[A-Za-z0-9]+$")


def is_playlist_uri(uri: str) -> bool:
    return bool(_PLAYLIST_URI.match(uri or ""))


# ── errors ────────────────────────────────────────────────────────────────


class MusicError(Exception):
    """Base class for music playback failures."""


class MusicNotConnectedError(MusicError):
    def __init__(self) -> None:
        super().__init__("Music player is not connected")


class InvalidPlaylistURIError(MusicError):
    def __init__(self, uri: str) -> None:
        self.uri = uri
        super().__init__(f"Invalid playlist URI: {uri!r}")


# ── policy ────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class MusicPolicy:
    mode: MusicMode = MusicMode.CURRENT_PLAYBACK
    playlist_uri: str | None = None

    @classmethod
    def from_settings(cls, mode: str, playlist_uri: str | None) -> MusicPolicy:
        try:
            music_mode = MusicMode(mode)
        except ValueError:
            log.warning("Unknown music mode %r, using current playback", mode)
            music_mode = MusicMode.CURRENT_PLAYBACK
        return cls(music_mode, playlist_uri)


# ── players ───────────────────────────────────────────────────────────────


class MusicPlayer:
    """Interface every music backend implements."""

    current_uri: str | None = None

    @property
    def is_connected(self) -> bool:
        raise NotImplementedError

    @property
    def is_playing(self) -> bool:
        raise NotImplementedError

    def connect(self) -> None:
        raise NotImplementedError

    def disconnect(self) -> None:
        raise NotImplementedError

    def play(self, playlist_uri: str) -> None:
        raise NotImplementedError

    def pause(self) -> None:
        raise NotImplementedError

    def resume(self) -> None:
        raise NotImplementedError


class LoggingMusicPlayer(MusicPlayer):
    """Stand-in player that tracks state and logs what it would do."""

    def __init__(self) -> None:
        self._connected = False
        self._playing = False
        self.current_uri: str | None = None

    @property
    def is_connected(self) -> bool:
        return self._connected

    @property
    def is_playing(self) -> bool:
        return self._playing

    def connect(self) -> None:
        self._connected = True
        log.info("Music player connected")

    def disconnect(self) -> None:
        self._connected = False
        self._playing = False
        log.info("Music player disconnected")

    def play(self, playlist_uri: str) -> None:
        self._require_connection()
        if not is_playlist_uri(playlist_uri):
            raise InvalidPlaylistURIError(playlist_uri)
        self.current_uri = playlist_uri
        self._playing = True
        log.info("Playing %s", playlist_uri)

    def pause(self) -> None:
        self._require_connection()
        self._playing = False
        log.info("Music paused")

    def resume(self) -> None:
        self._require_connection()
        self._playing = True
        log.info("Music resumed")

    def _require_connection(self) -> None:
        if not self._connected:
            raise MusicNotConnectedError()


# ── controller ────────────────────────────────────────────────────────────


class MusicController:
    """Starts and stops music as the session moves between phases."""

    def __init__(self, player: MusicPlayer, policy: MusicPolicy | None = None) -> None:
        self.player = player
        self.policy = policy or MusicPolicy()

    def on_phase_changed(self, old: Phase, new: Phase) -> None:
        try:
            if new.kind == PhaseKind.WORK:
                self._start_music()
            elif new.kind in (PhaseKind.REST, PhaseKind.DONE):
                self.player.pause()
            elif new.kind == PhaseKind.IDLE and old.is_active:
                self.player.pause()
        except MusicError as exc:
            log.warning("Music control failed entering %s: %s", new, exc)

    def _start_music(self) -> None:
        if not self.player.is_connected:
            self.player.connect()
        uri = self.policy.playlist_uri
        if self.policy.mode == MusicMode.PLAYLIST and uri and self.player.current_uri != uri:
            self.player.play(uri)
        else:
            self.player.resume()
