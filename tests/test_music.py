"""Tests for the music playback policy."""

import pytest

from grappletimer.playback.music import (
    LoggingMusicPlayer, MusicController, MusicMode, MusicPolicy,
    MusicError, MusicNotConnectedError, InvalidPlaylistURIError,
    is_playlist_uri,
)
from grappletimer.timer.session import Phase, IDLE, DONE


PLAYLIST = "spotify:playlist:2P2oppRNcZgcyyhW2dhS9k"


class RecordingPlayer(LoggingMusicPlayer):
    def __init__(self):
        super().__init__()
        self.calls = []

    def play(self, playlist_uri):
        self.calls.append(("play", playlist_uri))
        super().play(playlist_uri)

    def pause(self):
        self.calls.append(("pause",))
        super().pause()

    def resume(self):
        self.calls.append(("resume",))
        super().resume()


class TestPolicy:

    def test_from_settings(self):
        policy = MusicPolicy.from_settings("playlist", PLAYLIST)
        assert policy.mode == MusicMode.PLAYLIST
        assert policy.playlist_uri == PLAYLIST

    def test_unknown_mode_falls_back(self):
        assert MusicPolicy.from_settings("radio", None).mode == MusicMode.CURRENT_PLAYBACK

    def test_display_names(self):
        assert MusicMode.CURRENT_PLAYBACK.display_name == "Current Playback"
        assert MusicMode.PLAYLIST.display_name == "Custom Playlist"

    @pytest.mark.parametrize("uri, ok", [
        (PLAYLIST, True),
        ("spotify:track:abc", False),
        ("", False),
        ("playlist", False),
    ])
    def test_is_playlist_uri(self, uri, ok):
        assert is_playlist_uri(uri) is ok


class TestLoggingMusicPlayer:

    def test_requires_connection(self):
        player = LoggingMusicPlayer()
        with pytest.raises(MusicNotConnectedError):
            player.resume()

    def test_rejects_bad_uri(self):
        player = LoggingMusicPlayer()
        player.connect()
        with pytest.raises(InvalidPlaylistURIError):
            player.play("not a uri")

    def test_play_pause(self):
        player = LoggingMusicPlayer()
        player.connect()
        player.play(PLAYLIST)
        assert player.is_playing
        assert player.current_uri == PLAYLIST
        player.pause()
        assert not player.is_playing

    def test_disconnect_stops(self):
        player = LoggingMusicPlayer()
        player.connect()
        player.resume()
        player.disconnect()
        assert not player.is_connected
        assert not player.is_playing


class TestMusicController:

    def test_work_resumes_current_playback(self):
        player = RecordingPlayer()
        ctl = MusicController(player, MusicPolicy(MusicMode.CURRENT_PLAYBACK))
        ctl.on_phase_changed(IDLE, Phase.work(1, 3))
        assert player.is_connected
        assert player.calls == [("resume",)]

    def test_work_plays_playlist_once(self):
        player = RecordingPlayer()
        ctl = MusicController(player, MusicPolicy(MusicMode.PLAYLIST, PLAYLIST))
        ctl.on_phase_changed(IDLE, Phase.work(1, 3))
        ctl.on_phase_changed(Phase.work(1, 3), Phase.rest(1, 3))
        ctl.on_phase_changed(Phase.rest(1, 3), Phase.work(2, 3))
        assert player.calls == [("play", PLAYLIST), ("pause",), ("resume",)]
        assert player.is_playing

    def test_rest_and_done_pause(self):
        player = RecordingPlayer()
        player.connect()
        ctl = MusicController(player)
        ctl.on_phase_changed(Phase.work(1, 2), Phase.rest(1, 2))
        ctl.on_phase_changed(Phase.work(2, 2), DONE)
        assert player.calls == [("pause",), ("pause",)]

    def test_manual_stop_pauses(self):
        player = RecordingPlayer()
        player.connect()
        ctl = MusicController(player)
        ctl.on_phase_changed(Phase.work(1, 2), IDLE)
        assert player.calls == [("pause",)]

    def test_idle_after_done_does_nothing(self):
        player = RecordingPlayer()
        player.connect()
        ctl = MusicController(player)
        ctl.on_phase_changed(DONE, IDLE)
        assert player.calls == []

    def test_starting_does_nothing(self):
        player = RecordingPlayer()
        ctl = MusicController(player)
        ctl.on_phase_changed(IDLE, Phase.starting(3))
        assert player.calls == []

    def test_failures_are_contained(self, caplog):
        player = RecordingPlayer()
        ctl = MusicController(player, MusicPolicy(MusicMode.PLAYLIST, "bad uri"))
        ctl.on_phase_changed(IDLE, Phase.work(1, 2))
        assert "Music control failed" in caplog.text

    def test_pause_without_connection_is_contained(self):
        ctl = MusicController(RecordingPlayer())
        ctl.on_phase_changed(Phase.work(1, 2), Phase.rest(1, 2))

    def test_error_hierarchy(self):
        assert issubclass(MusicNotConnectedError, MusicError)
        assert issubclass(InvalidPlaylistURIError, MusicError)
