"""Polling driver for interval-training sessions.

The engine owns at most one :class:`TimerSession`.  While a session is
running and not paused a ``QTimer`` fires every ``POLL_INTERVAL_MS`` and
the engine re-derives the phase from the clock, emitting one-shot events
when something changes.

Lifecycle
---------
IDLE → active phases        (start)
active → frozen             (pause; no ticks are evaluated)
frozen → active             (resume; pause time is excluded from elapsed)
any → IDLE                  (stop, or automatically after DONE)

Every operation is a no-op rather than an error when it does not apply,
so hosts can call controls from UI without precondition checks.
"""

from __future__ import annotations

import logging
import math
import time
from dataclasses import replace
from typing import Callable

from PyQt6.QtCore import QObject, QTimer, pyqtSignal

from .session import (
    CLAPPER_TOLERANCE,
    IDLE,
    DONE,
    Phase,
    PhaseKind,
    TimerConfiguration,
    TimerSession,
)

log = logging.getLogger(__name__)


# ── constants ─────────────────────────────────────────────────────────────

POLL_INTERVAL_MS = 100


def format_time(seconds: float) -> str:
    """``125`` → ``"2:05"``."""
    whole = int(seconds)
    return f"{whole // 60}:{whole % 60:02d}"


def format_time_with_tenths(seconds: float) -> str:
    """``125.5`` → ``"2:05.5"``."""
    whole = int(seconds)
    tenths = int(round(math.fmod(seconds, 1) * 10)) % 10
    return f"{whole // 60}:{whole % 60:02d}.{tenths}"


# ── engine ────────────────────────────────────────────────────────────────


class TimerEngine(QObject):
    """Qt-based interval timer driven by wall-clock re-derivation.

    Signals
    -------
    phase_changed(old: Phase, new: Phase)
        Emitted whenever the observed phase differs from the previous one,
        including the initial phase on ``start`` and the final ``IDLE`` on
        ``stop``.
    clapper()
        Emitted exactly once per work round, ``clapper_offset`` seconds
        before it ends.
    tick(time_remaining: float)
        Emitted on every evaluated poll.
    paused()
        Emitted after the running session is paused.
    resumed(pause_duration: float)
        Emitted after a paused session resumes.
    """

    phase_changed = pyqtSignal(object, object)
    clapper = pyqtSignal()
    tick = pyqtSignal(float)
    paused = pyqtSignal()
    resumed = pyqtSignal(float)

    def __init__(
        self,
        parent: QObject | None = None,
        *,
        clock: Callable[[], float] = time.monotonic,
        poll_interval_ms: int = POLL_INTERVAL_MS,
    ) -> None:
        if not 0 < poll_interval_ms / 2000 < CLAPPER_TOLERANCE:
            raise ValueError(
                f"poll interval {poll_interval_ms}ms is too coarse for a "
                f"{CLAPPER_TOLERANCE}s clapper window"
            )
        super().__init__(parent)
        self._clock = clock

        # ── session state ─────────────────────────────────────────────
        self._session: TimerSession | None = None
        self._phase: Phase = IDLE
        self._time_remaining: float = 0.0
        self._fired_clapper_keys: set[tuple[int, int]] = set()

        # ── Qt timer ──────────────────────────────────────────────────
        self._qt_timer = QTimer(self)
        self._qt_timer.setInterval(poll_interval_ms)
        self._qt_timer.timeout.connect(self._on_tick)

    # ══════════════════════════════════════════════════════════════════
    #  PUBLIC PROPERTIES
    # ══════════════════════════════════════════════════════════════════

    @property
    def phase(self) -> Phase:
        return self._phase

    @property
    def time_remaining(self) -> float:
        """Seconds left in the current phase as of the last evaluation."""
        return self._time_remaining

    @property
    def is_paused(self) -> bool:
        return self._session is not None and self._session.is_paused

    @property
    def is_polling(self) -> bool:
        return self._qt_timer.isActive()

    @property
    def session(self) -> TimerSession | None:
        """A snapshot of the current session; mutating it has no effect."""
        if self._session is None:
            return None
        return replace(self._session)

    @property
    def poll_interval_ms(self) -> int:
        return self._qt_timer.interval()

    def now(self) -> float:
        """Current reading of the engine's clock."""
        return self._clock()

    # ══════════════════════════════════════════════════════════════════
    #  CONTROLS
    # ══════════════════════════════════════════════════════════════════

    def start(self, configuration: TimerConfiguration) -> None:
        """Begin a fresh session.  Invalid configurations are ignored."""
        problems = configuration.problems()
        if problems:
            log.warning("Ignoring invalid configuration: %s", "; ".join(problems))
            return

        self.stop()

        now = self._clock()
        session = TimerSession(configuration=configuration, start_time=now)
        self._session = session
        self._fired_clapper_keys.clear()
        log.info(
            "Session started: %d x %ss work / %ss rest, clapper %ss, delay %ss",
            configuration.rounds,
            configuration.round_duration,
            configuration.rest_duration,
            configuration.clapper_offset,
            configuration.start_delay,
        )

        new_phase = session.phase_at(now)
        self._time_remaining = session.time_remaining(new_phase, now)
        if new_phase != self._phase:
            self._set_phase(new_phase)
            # A handler may have stopped or restarted us.
            if self._session is not session or session.is_paused:
                return

        self._qt_timer.start()

    def pause(self) -> None:
        if self._session is None or self._session.is_paused:
            return
        self._qt_timer.stop()
        self._session.pause(self._clock())
        log.info("Session paused in %s", self._phase)
        self.paused.emit()

    def resume(self) -> None:
        if self._session is None or not self._session.is_paused:
            return
        pause_duration = self._session.resume(self._clock())
        log.info("Session resumed after %.1fs", pause_duration)
        self._qt_timer.start()
        self.resumed.emit(pause_duration)

    def stop(self) -> None:
        """Halt polling and drop the session.  Idempotent."""
        self._qt_timer.stop()
        had_session = self._session is not None
        self._session = None
        self._time_remaining = 0.0
        self._fired_clapper_keys.clear()
        if had_session:
            log.info("Session stopped")
        if self._phase != IDLE:
            self._set_phase(IDLE)

    # ══════════════════════════════════════════════════════════════════
    #  INTERNAL — timer mechanics
    # ══════════════════════════════════════════════════════════════════

    def _on_tick(self) -> None:
        session = self._session
        if session is None or session.is_paused:
            return

        now = self._clock()
        new_phase = session.phase_at(now)

        if new_phase != self._phase:
            self._set_phase(new_phase)
            if new_phase == DONE:
                # A handler may already have started the next session.
                if self._session is session:
                    self.stop()
                return
            if self._session is not session or session.is_paused:
                return

        self._time_remaining = session.time_remaining(new_phase, now)
        self.tick.emit(self._time_remaining)
        if self._session is not session or session.is_paused:
            return

        if new_phase.kind == PhaseKind.WORK:
            key = session.clapper_key(new_phase.round, self._time_remaining)
            if session.clapper_due(now) and key not in self._fired_clapper_keys:
                self._fired_clapper_keys.add(key)
                log.debug(
                    "Clapper for round %d at %.2fs remaining",
                    new_phase.round,
                    self._time_remaining,
                )
                self.clapper.emit()

    def _set_phase(self, new_phase: Phase) -> None:
        old_phase = self._phase
        self._phase = new_phase
        log.info("Phase %s -> %s", old_phase, new_phase)
        self.phase_changed.emit(old_phase, new_phase)
