"""Application settings with JSON persistence.

Settings are stored at:
    ~/Library/Application Support/GrappleTimer/settings.json

Usage::

    settings = load_settings()
    settings.sound_volume = 50
    save_settings(settings)
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, asdict, field, fields
from pathlib import Path

from .timer.session import DEFAULT_CONFIGURATION, TimerConfiguration

log = logging.getLogger(__name__)


APP_SUPPORT_DIR = Path.home() / "Library" / "Application Support" / "GrappleTimer"
SETTINGS_PATH = APP_SUPPORT_DIR / "settings.json"

START_DELAY_SECONDS = 3
DEFAULT_PLAYLIST_URI = "spotify:playlist:2P2oppRNcZgcyyhW2dhS9k"


# ── presets ───────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Preset:
    name: str
    configuration: TimerConfiguration


DEFAULT_PRESETS: tuple[Preset, ...] = (
    Preset("10×5:00/1:00", TimerConfiguration(300, 60, 10, 10)),
    Preset("15×3:00/1:00", TimerConfiguration(180, 60, 15, 10)),
    Preset("5×10:00/2:00", TimerConfiguration(600, 120, 5, 10)),
)


def find_preset(name: str) -> Preset | None:
    """Look up a built-in preset, ignoring case and spaces."""
    wanted = name.replace(" ", "").lower()
    for preset in DEFAULT_PRESETS:
        if preset.name.replace(" ", "").lower() == wanted:
            return preset
    return None


# ── settings ──────────────────────────────────────────────────────────────


@dataclass
class Settings:
    """All user-configurable preferences."""

    # ── timer ─────────────────────────────────────────────────────────
    enable_start_delay: bool = False
    show_tenths: bool = False
    last_configuration: dict = field(
        default_factory=DEFAULT_CONFIGURATION.to_dict,
    )

    # ── music ─────────────────────────────────────────────────────────
    music_mode: str = "playlist"           # current | playlist
    playlist_uri: str = DEFAULT_PLAYLIST_URI

    # ── audio ─────────────────────────────────────────────────────────
    sound_enabled: bool = True
    sound_volume: int = 80                 # 0-100

    # ── notifications ─────────────────────────────────────────────────
    notifications_enabled: bool = True

    @property
    def start_delay(self) -> float:
        return START_DELAY_SECONDS if self.enable_start_delay else 0

    def configuration(self) -> TimerConfiguration:
        """The last-used configuration, with the current start delay."""
        try:
            cfg = TimerConfiguration.from_dict(self.last_configuration)
            problems = cfg.problems()
        except (TypeError, AttributeError, ValueError) as exc:
            problems = [str(exc)]
        if problems:
            log.warning(
                "Ignoring stored configuration %r: %s",
                self.last_configuration, "; ".join(problems),
            )
            cfg = DEFAULT_CONFIGURATION
        return cfg.with_start_delay(self.start_delay)

    def remember(self, configuration: TimerConfiguration) -> None:
        self.last_configuration = configuration.to_dict()


def load_settings() -> Settings:
    """Load settings from disk, falling back to defaults."""
    try:
        if SETTINGS_PATH.exists():
            data = json.loads(SETTINGS_PATH.read_text(encoding="utf-8"))
            valid_keys = {f.name for f in fields(Settings)}
            filtered = {k: v for k, v in data.items() if k in valid_keys}
            return Settings(**filtered)
    except (OSError, ValueError, TypeError) as exc:
        log.warning("Could not read %s, using defaults: %s", SETTINGS_PATH, exc)
    return Settings()


def save_settings(settings: Settings) -> None:
    """Write settings to disk as JSON."""
    APP_SUPPORT_DIR.mkdir(parents=True, exist_ok=True)
    SETTINGS_PATH.write_text(
        json.dumps(asdict(settings), indent=2) + "\n",
        encoding="utf-8",
    )
