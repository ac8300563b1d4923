"""Pure time arithmetic for an interval-training session.

A session is nothing more than a configuration, the instant it started,
and some pause bookkeeping.  Every question about it ("which phase are we
in?", "how long until the bell?") is answered by re-deriving from the
clock reading passed in, never from a decrementing counter, so a stalled
poll loop cannot desynchronise displayed time from real elapsed time.

Phases
------
IDLE       No session.
STARTING   Pre-session delay (``countdown`` whole seconds left, always > 0).
WORK       Work round ``round`` of ``total_rounds`` (1-indexed).
REST       Rest after round ``round``; never follows the final round.
DONE       Terminal.

All instants and durations are float seconds on whichever clock the
caller uses (the engine defaults to ``time.monotonic``).
"""

from __future__ import annotations

import math
from dataclasses import dataclass, asdict, fields
from enum import Enum


# ── constants ─────────────────────────────────────────────────────────────

CLAPPER_TOLERANCE = 0.5  # seconds either side of the clapper offset


class ConfigurationError(ValueError):
    """Raised when a configuration violates one or more constraints."""

    def __init__(self, problems: list[str]) -> None:
        self.problems = list(problems)
        super().__init__("; ".join(self.problems))


# ══════════════════════════════════════════════════════════════════════════
#  CONFIGURATION
# ══════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class TimerConfiguration:
    """Declarative description of a workout."""

    round_duration: float
    rest_duration: float
    rounds: int
    clapper_offset: float
    start_delay: float = 0.0

    def problems(self) -> list[str]:
        """Every violated constraint, in a human-readable form."""
        # Written so that NaN fails every check.
        found: list[str] = []
        if not 0 < self.round_duration < math.inf:
            found.append("round duration must be a positive number")
        if not 0 < self.rest_duration < math.inf:
            found.append("rest duration must be a positive number")
        if not 0 < self.rounds < math.inf:
            found.append("rounds must be positive")
        if not 0 <= self.clapper_offset < math.inf:
            found.append("clapper offset must be zero or more")
        elif not self.clapper_offset < self.round_duration:
            found.append("clapper offset must be shorter than the round")
        if not 0 <= self.start_delay < math.inf:
            found.append("start delay must be zero or more")
        return found

    @property
    def is_valid(self) -> bool:
        return not self.problems()

    def validate(self) -> None:
        problems = self.problems()
        if problems:
            raise ConfigurationError(problems)

    def with_start_delay(self, seconds: float) -> TimerConfiguration:
        return TimerConfiguration(
            round_duration=self.round_duration,
            rest_duration=self.rest_duration,
            rounds=self.rounds,
            clapper_offset=self.clapper_offset,
            start_delay=seconds,
        )

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> TimerConfiguration:
        """Build from a mapping, ignoring keys this class does not know."""
        valid_keys = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in valid_keys})


DEFAULT_CONFIGURATION = TimerConfiguration(
    round_duration=300,
    rest_duration=60,
    rounds=5,
    clapper_offset=10,
    start_delay=0,
)


# ══════════════════════════════════════════════════════════════════════════
#  PHASE
# ══════════════════════════════════════════════════════════════════════════


class PhaseKind(Enum):
    IDLE = "idle"
    STARTING = "starting"
    WORK = "work"
    REST = "rest"
    DONE = "done"


_DISPLAY_NAMES: dict[PhaseKind, str] = {
    PhaseKind.IDLE: "Ready",
    PhaseKind.STARTING: "Get Ready",
    PhaseKind.WORK: "WORK",
    PhaseKind.REST: "REST",
    PhaseKind.DONE: "DONE",
}


@dataclass(frozen=True)
class Phase:
    """One stage of a session.  Equality is structural.

    Use the factory classmethods rather than the constructor::

        Phase.work(2, 5) == Phase.work(2, 5)  # True
    """

    kind: PhaseKind
    round: int = 0
    total_rounds: int = 0
    countdown: int = 0

    @classmethod
    def idle(cls) -> Phase:
        return cls(PhaseKind.IDLE)

    @classmethod
    def starting(cls, countdown: int) -> Phase:
        return cls(PhaseKind.STARTING, countdown=countdown)

    @classmethod
    def work(cls, round: int, total_rounds: int) -> Phase:
        return cls(PhaseKind.WORK, round=round, total_rounds=total_rounds)

    @classmethod
    def rest(cls, round: int, total_rounds: int) -> Phase:
        return cls(PhaseKind.REST, round=round, total_rounds=total_rounds)

    @classmethod
    def done(cls) -> Phase:
        return cls(PhaseKind.DONE)

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self.kind]

    @property
    def is_active(self) -> bool:
        """True while a session is counting (starting, work or rest)."""
        return self.kind in (PhaseKind.STARTING, PhaseKind.WORK, PhaseKind.REST)

    def __str__(self) -> str:
        if self.kind == PhaseKind.STARTING:
            return f"{self.display_name} ({self.countdown})"
        if self.kind in (PhaseKind.WORK, PhaseKind.REST):
            return f"{self.display_name} {self.round}/{self.total_rounds}"
        return self.display_name


IDLE = Phase.idle()
DONE = Phase.done()


# ══════════════════════════════════════════════════════════════════════════
#  SESSION
# ══════════════════════════════════════════════════════════════════════════


@dataclass
class TimerSession:
    """One run of a configuration.

    ``paused_at`` is set iff the session is currently paused.
    ``accumulated_pause_time`` only ever grows.
    """

    configuration: TimerConfiguration
    start_time: float
    paused_at: float | None = None
    accumulated_pause_time: float = 0.0

    # ── pause bookkeeping ─────────────────────────────────────────────

    @property
    def is_paused(self) -> bool:
        return self.paused_at is not None

    def pause(self, now: float) -> None:
        if self.paused_at is None:
            self.paused_at = now

    def resume(self, now: float) -> float:
        """Close the open pause interval and return its length."""
        if self.paused_at is None:
            return 0.0
        pause_duration = max(0.0, now - self.paused_at)
        self.accumulated_pause_time += pause_duration
        self.paused_at = None
        return pause_duration

    # ── time arithmetic ───────────────────────────────────────────────

    def elapsed_active_time(self, now: float) -> float:
        """Seconds of un-paused time since ``start_time``."""
        reference = self.paused_at if self.paused_at is not None else now
        return reference - self.start_time - self.accumulated_pause_time

    def total_duration(self) -> float:
        cfg = self.configuration
        return (
            cfg.start_delay
            + cfg.round_duration * cfg.rounds
            + cfg.rest_duration * (cfg.rounds - 1)
        )

    def _cycle_length(self) -> float:
        return self.configuration.round_duration + self.configuration.rest_duration

    def work_end(self, round: int) -> float:
        """Active-time offset (after the start delay) where ``round`` ends."""
        return (round - 1) * self._cycle_length() + self.configuration.round_duration

    def rest_end(self, round: int) -> float:
        return round * self._cycle_length()

    def phase_at(self, now: float) -> Phase:
        cfg = self.configuration
        elapsed = self.elapsed_active_time(now)

        if elapsed < 0:
            return IDLE

        if elapsed < cfg.start_delay:
            return Phase.starting(math.ceil(cfg.start_delay - elapsed))

        active = elapsed - cfg.start_delay
        if active >= self.total_duration() - cfg.start_delay:
            return DONE

        for round in range(1, cfg.rounds + 1):
            if active < self.work_end(round):
                return Phase.work(round, cfg.rounds)
            if round < cfg.rounds and active < self.rest_end(round):
                return Phase.rest(round, cfg.rounds)

        # float edge at the very last boundary
        return DONE

    def time_remaining(self, phase: Phase, now: float) -> float:
        """Seconds left in ``phase``.  Never negative."""
        if phase.kind == PhaseKind.STARTING:
            return float(max(0, phase.countdown))

        active = self.elapsed_active_time(now) - self.configuration.start_delay
        if phase.kind == PhaseKind.WORK:
            return max(0.0, self.work_end(phase.round) - active)
        if phase.kind == PhaseKind.REST:
            return max(0.0, self.rest_end(phase.round) - active)
        return 0.0

    def clapper_due(self, now: float) -> bool:
        phase = self.phase_at(now)
        if phase.kind != PhaseKind.WORK:
            return False
        remaining = self.time_remaining(phase, now)
        return abs(remaining - self.configuration.clapper_offset) < CLAPPER_TOLERANCE

    def clapper_key(self, round: int, remaining: float) -> tuple[int, int]:
        """De-duplication key for a clapper sample.

        Constant for every sample inside one round's tolerance window and
        distinct across whole seconds and rounds.
        """
        offset = remaining - self.configuration.clapper_offset
        return (round, math.floor(offset + CLAPPER_TOLERANCE))

    def next_phase(self, phase: Phase) -> Phase | None:
        """Static transition table; live state always comes from ``phase_at``."""
        cfg = self.configuration
        if phase.kind == PhaseKind.IDLE:
            if cfg.start_delay > 0:
                return Phase.starting(math.ceil(cfg.start_delay))
            return Phase.work(1, cfg.rounds)
        if phase.kind == PhaseKind.STARTING:
            return Phase.work(1, cfg.rounds)
        if phase.kind == PhaseKind.WORK:
            if phase.round < phase.total_rounds:
                return Phase.rest(phase.round, phase.total_rounds)
            return DONE
        if phase.kind == PhaseKind.REST:
            if phase.round < phase.total_rounds:
                return Phase.work(phase.round + 1, phase.total_rounds)
            return DONE
        return None

    def boundaries(self) -> list[tuple[float, Phase]]:
        """``(elapsed_active_time, phase)`` for every phase start, Done included."""
        cfg = self.configuration
        points: list[tuple[float, Phase]] = []
        cursor = cfg.start_delay
        for round in range(1, cfg.rounds + 1):
            points.append((cursor, Phase.work(round, cfg.rounds)))
            cursor += cfg.round_duration
            if round < cfg.rounds:
                points.append((cursor, Phase.rest(round, cfg.rounds)))
                cursor += cfg.rest_duration
        points.append((cursor, DONE))
        return points
