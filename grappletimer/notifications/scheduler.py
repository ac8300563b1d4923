"""Absolute-time notifications for every upcoming phase boundary.

A backgrounded host cannot watch the engine's live ``phase_changed``
signal, so when a session starts the whole plan is worked out up front:
one notification per work start, rest start, and the completion instant.
Pausing suspends delivery; resuming pushes every pending fire time back by
the length of the pause.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from typing import Callable

from PyQt6.QtCore import QObject, QTimer, pyqtSignal

from ..timer.session import PhaseKind, TimerSession

log = logging.getLogger(__name__)


CHECK_INTERVAL_MS = 1000

CATEGORY_PHASE = "TIMER_PHASE"
CATEGORY_COMPLETE = "TIMER_COMPLETE"


@dataclass(frozen=True)
class ScheduledNotification:
    identifier: str
    title: str
    body: str
    category: str
    fire_at: datetime

    def shifted(self, seconds: float) -> ScheduledNotification:
        return replace(self, fire_at=self.fire_at + timedelta(seconds=seconds))


def _minutes(seconds: float) -> str:
    mins = int(seconds // 60)
    if mins < 1:
        return f"{int(seconds)} seconds"
    return f"{mins} minute{'s' if mins != 1 else ''}"


def build_notifications(
    session: TimerSession,
    now: float,
    wall_now: datetime,
) -> list[ScheduledNotification]:
    """Plan notifications for every boundary still ahead of ``now``.

    ``now`` is a reading of the session's clock and ``wall_now`` the
    matching wall-clock time; boundaries are placed relative to both.
    """
    cfg = session.configuration
    elapsed = session.elapsed_active_time(now)
    plan: list[ScheduledNotification] = []

    for offset, phase in session.boundaries():
        delay = offset - elapsed
        if delay <= 0:
            continue

        if phase.kind == PhaseKind.WORK:
            title = f"Round {phase.round} - WORK"
            body = f"Time to work! {_minutes(cfg.round_duration)}"
            category = CATEGORY_PHASE
            prefix = f"work_{phase.round}"
        elif phase.kind == PhaseKind.REST:
            title = f"Round {phase.round} - REST"
            body = f"Rest time! {_minutes(cfg.rest_duration)}"
            category = CATEGORY_PHASE
            prefix = f"rest_{phase.round}"
        else:
            title = "Session Complete!"
            body = f"Great work! You completed all {cfg.rounds} rounds"
            category = CATEGORY_COMPLETE
            prefix = "done"

        plan.append(ScheduledNotification(
            identifier=f"{prefix}_{uuid.uuid4().hex}",
            title=title,
            body=body,
            category=category,
            fire_at=wall_now + timedelta(seconds=delay),
        ))
    return plan


class NotificationScheduler(QObject):
    """Holds the pending notification plan and delivers it on time.

    Signals
    -------
    notification_due(notification: ScheduledNotification)
        Emitted once per notification when its fire time has passed.
    """

    notification_due = pyqtSignal(object)

    def __init__(
        self,
        parent: QObject | None = None,
        *,
        wall_clock: Callable[[], datetime] = datetime.now,
        check_interval_ms: int = CHECK_INTERVAL_MS,
        enabled: bool = True,
    ) -> None:
        super().__init__(parent)
        self._wall_clock = wall_clock
        self._enabled = enabled
        self._pending: list[ScheduledNotification] = []
        self._suspended = False

        self._qt_timer = QTimer(self)
        self._qt_timer.setInterval(check_interval_ms)
        self._qt_timer.timeout.connect(self.deliver_due)

    # ── properties ────────────────────────────────────────────────────

    @property
    def pending(self) -> tuple[ScheduledNotification, ...]:
        return tuple(self._pending)

    @property
    def is_suspended(self) -> bool:
        return self._suspended

    @property
    def enabled(self) -> bool:
        return self._enabled

    def set_enabled(self, enabled: bool) -> None:
        self._enabled = enabled
        if not enabled:
            self.clear_all()

    # ── scheduling ────────────────────────────────────────────────────

    def schedule_session(self, session: TimerSession, now: float) -> None:
        """Replace whatever is pending with the plan for ``session``."""
        self.clear_all()
        if not self._enabled:
            return
        self._pending = build_notifications(session, now, self._wall_clock())
        log.info("Scheduled %d notifications", len(self._pending))
        if self._pending:
            self._qt_timer.start()

    def clear_all(self) -> None:
        self._qt_timer.stop()
        self._pending.clear()
        self._suspended = False

    def suspend(self) -> None:
        """Hold every pending notification until :meth:`resume`."""
        if not self._pending or self._suspended:
            return
        self._suspended = True
        self._qt_timer.stop()
        log.debug("Suspended %d notifications", len(self._pending))

    def resume(self, pause_duration: float) -> None:
        """Shift every pending notification by ``pause_duration`` seconds."""
        if not self._suspended:
            return
        self._suspended = False
        self._pending = [n.shifted(pause_duration) for n in self._pending]
        log.debug(
            "Shifted %d notifications by %.1fs", len(self._pending), pause_duration,
        )
        if self._pending:
            self._qt_timer.start()

    def deliver_due(self) -> list[ScheduledNotification]:
        """Emit and drop every pending notification whose time has come."""
        if self._suspended:
            return []
        now = self._wall_clock()
        due = [n for n in self._pending if n.fire_at <= now]
        if not due:
            return []
        self._pending = [n for n in self._pending if n.fire_at > now]
        if not self._pending:
            self._qt_timer.stop()
        for notification in due:
            log.info("Notification: %s", notification.title)
            self.notification_due.emit(notification)
        return due
