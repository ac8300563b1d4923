"""Host-side wiring between the timer engine and its collaborators.

The coordinator owns exactly one :class:`TimerEngine` and connects its
signals to the cue player, the notification scheduler, and the music
controller.  None of the collaborators touch engine state; they only
react to events.
"""

from __future__ import annotations

import logging
from urllib.parse import parse_qsl, urlsplit

from PyQt6.QtCore import QObject, pyqtSignal

from .audio.cues import cue_for_phase
from .notifications.scheduler import NotificationScheduler
from .playback.music import MusicController
from .settings import Settings
from .timer.engine import TimerEngine
from .timer.session import DEFAULT_CONFIGURATION, Phase, PhaseKind, TimerConfiguration

log = logging.getLogger(__name__)


URL_SCHEME = "grappletimer"
START_TIMER_HOST = "start-timer"

# query parameter → (configuration field, converter)
_LINK_PARAMS = {
    "round": ("round_duration", float),
    "rest": ("rest_duration", float),
    "rounds": ("rounds", int),
    "clapper": ("clapper_offset", float),
}


def parse_start_link(url: str, start_delay: float = 0) -> TimerConfiguration | None:
    """Configuration described by a ``grappletimer://start-timer?...`` link.

    Returns None for any other URL.  Missing or unparseable values fall
    back to the defaults; the result is not validated.
    """
    parts = urlsplit(url)
    if parts.scheme != URL_SCHEME or parts.netloc != START_TIMER_HOST:
        return None

    values = DEFAULT_CONFIGURATION.to_dict()
    for key, raw in parse_qsl(parts.query):
        if key not in _LINK_PARAMS:
            continue
        field_name, convert = _LINK_PARAMS[key]
        try:
            values[field_name] = convert(raw)
        except ValueError:
            log.debug("Ignoring bad %s=%r in link", key, raw)
    values["start_delay"] = start_delay
    return TimerConfiguration.from_dict(values)


class AppCoordinator(QObject):
    """Owns one engine plus the collaborators that react to it.

    Signals
    -------
    session_started(configuration: TimerConfiguration)
    session_finished()
        Emitted when a session runs all the way to DONE.
    """

    session_started = pyqtSignal(object)
    session_finished = pyqtSignal()

    def __init__(
        self,
        parent: QObject | None = None,
        *,
        settings: Settings | None = None,
        engine: TimerEngine | None = None,
        sound_player=None,
        notifications: NotificationScheduler | None = None,
        music: MusicController | None = None,
    ) -> None:
        super().__init__(parent)
        self._settings = settings or Settings()
        self.engine = engine or TimerEngine(self)
        self.sound_player = sound_player
        self.notifications = notifications or NotificationScheduler(
            self, enabled=self._settings.notifications_enabled,
        )
        self.music = music

        # ── wire signals ──────────────────────────────────────────────
        self.engine.phase_changed.connect(self._on_phase_changed)
        self.engine.clapper.connect(self._on_clapper)
        self.engine.paused.connect(self.notifications.suspend)
        self.engine.resumed.connect(self.notifications.resume)

    @property
    def settings(self) -> Settings:
        return self._settings

    # ══════════════════════════════════════════════════════════════════
    #  CONTROLS
    # ══════════════════════════════════════════════════════════════════

    def start_session(self, configuration: TimerConfiguration) -> bool:
        """Start ``configuration``.  Returns False if it was rejected."""
        if not configuration.is_valid:
            log.warning("Not starting invalid configuration %s", configuration)
            return False

        self._settings.remember(configuration)
        self.engine.start(configuration)
        session = self.engine.session
        if session is None:
            return False

        self.notifications.schedule_session(session, self.engine.now())
        self.session_started.emit(configuration)
        return True

    def pause(self) -> None:
        self.engine.pause()

    def resume(self) -> None:
        self.engine.resume()

    def stop(self) -> None:
        self.engine.stop()

    def handle_url(self, url: str) -> bool:
        """Start a session from a deep link.  Returns True if one started."""
        configuration = parse_start_link(url, start_delay=self._settings.start_delay)
        if configuration is None:
            log.debug("Unhandled URL %s", url)
            return False
        return self.start_session(configuration)

    # ══════════════════════════════════════════════════════════════════
    #  ENGINE SIGNALS
    # ══════════════════════════════════════════════════════════════════

    def _play(self, name: str | None) -> None:
        if name is None or self.sound_player is None:
            return
        if not self._settings.sound_enabled:
            return
        self.sound_player.play(name)

    def _on_phase_changed(self, old: Phase, new: Phase) -> None:
        self._play(cue_for_phase(new))

        if self.music is not None:
            self.music.on_phase_changed(old, new)

        if new.kind == PhaseKind.IDLE:
            self.notifications.clear_all()
        elif new.kind == PhaseKind.DONE:
            log.info("Session complete")
            self.session_finished.emit()

    def _on_clapper(self) -> None:
        self._play("clapper")
