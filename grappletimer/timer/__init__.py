"""Timer package."""

from .session import (
    TimerConfiguration,
    TimerSession,
    Phase,
    PhaseKind,
    ConfigurationError,
    DEFAULT_CONFIGURATION,
    CLAPPER_TOLERANCE,
)
from .engine import (
    TimerEngine,
    POLL_INTERVAL_MS,
    format_time,
    format_time_with_tenths,
)

__all__ = [
    "TimerEngine",
    "TimerConfiguration",
    "TimerSession",
    "Phase",
    "PhaseKind",
    "ConfigurationError",
    "DEFAULT_CONFIGURATION",
    "CLAPPER_TOLERANCE",
    "POLL_INTERVAL_MS",
    "format_time",
    "format_time_with_tenths",
]
