"""Shared test helpers for GrappleTimer."""

from grappletimer.timer.engine import TimerEngine


class SignalCollector:
    """Utility to capture pyqtSignal emissions into a list."""

    def __init__(self):
        self.items: list = []

    def slot(self, *args):
        self.items.append(args if len(args) > 1 else args[0] if args else None)

    def __call__(self, *args):
        self.slot(*args)

    def __len__(self):
        return len(self.items)

    def __getitem__(self, idx):
        return self.items[idx]

    @property
    def last(self):
        return self.items[-1] if self.items else None

    def clear(self):
        self.items.clear()


class FakeClock:
    """Manually advanced clock; call it to read the time."""

    def __init__(self, start: float = 0.0):
        self.start = start
        self._offset = 0.0

    def __call__(self) -> float:
        return self.start + self._offset

    def advance(self, seconds: float) -> None:
        self._offset += seconds

    def set(self, elapsed: float) -> None:
        """Jump to ``start + elapsed``."""
        self._offset = elapsed


def run_for(engine: TimerEngine, clock: FakeClock, seconds: float, step: float = 0.1) -> None:
    """Advance the clock in ``step`` increments, polling after each one."""
    base = clock._offset
    steps = int(round(seconds / step))
    for i in range(1, steps + 1):
        clock.set(base + i * step)
        engine._on_tick()
