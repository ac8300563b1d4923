"""Allow running GrappleTimer as a module: python -m grappletimer."""

from __future__ import annotations

import argparse
import logging
import signal
import sys
from pathlib import Path

from PyQt6.QtCore import QCoreApplication

from .coordinator import AppCoordinator
from .logger import configure_logging
from .playback.music import LoggingMusicPlayer, MusicController, MusicPolicy
from .settings import DEFAULT_PRESETS, find_preset, load_settings, save_settings
from .timer.engine import format_time, format_time_with_tenths
from .timer.session import ConfigurationError, TimerConfiguration


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="grappletimer",
        description="Round/rest interval timer with a clapper warning.",
    )
    parser.add_argument("--round", type=float, dest="round_duration",
                        help="work round length in seconds")
    parser.add_argument("--rest", type=float, dest="rest_duration",
                        help="rest length in seconds")
    parser.add_argument("--rounds", type=int, help="number of work rounds")
    parser.add_argument("--clapper", type=float, dest="clapper_offset",
                        help="seconds before the end of a round to clap")
    parser.add_argument("--delay", type=float, dest="start_delay",
                        help="countdown before the first round, in seconds")
    parser.add_argument("--preset", help="start from a built-in preset: " + ", ".join(
        p.name for p in DEFAULT_PRESETS))
    parser.add_argument("--no-sound", action="store_true", help="disable audio cues")
    parser.add_argument("--no-music", action="store_true", help="disable music control")
    parser.add_argument("--verbose", "-v", action="store_true", help="debug logging")
    parser.add_argument("--log-dir", type=Path, help="also write logs to this directory")
    return parser


def resolve_configuration(args: argparse.Namespace, settings) -> TimerConfiguration:
    """Preset (or last-used configuration) overridden by explicit flags."""
    if args.preset:
        preset = find_preset(args.preset)
        if preset is None:
            raise ConfigurationError([f"unknown preset {args.preset!r}"])
        base = preset.configuration.with_start_delay(settings.start_delay)
    else:
        base = settings.configuration()

    values = base.to_dict()
    for name in ("round_duration", "rest_duration", "rounds", "clapper_offset", "start_delay"):
        value = getattr(args, name)
        if value is not None:
            values[name] = value
    configuration = TimerConfiguration.from_dict(values)
    configuration.validate()
    return configuration


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    configure_logging(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        log_dir=args.log_dir,
    )

    settings = load_settings()
    try:
        configuration = resolve_configuration(args, settings)
    except ConfigurationError as exc:
        print(f"grappletimer: invalid configuration: {exc}", file=sys.stderr)
        sys.exit(2)

    app = QCoreApplication(sys.argv)
    app.setApplicationName("GrappleTimer")
    app.setOrganizationName("GrappleTimer")

    sound_player = None
    if settings.sound_enabled and not args.no_sound:
        from .audio.cues import SoundManager
        sound_player = SoundManager(app)
        sound_player.set_volume(settings.sound_volume)

    music = None
    if not args.no_music:
        music = MusicController(
            LoggingMusicPlayer(),
            MusicPolicy.from_settings(settings.music_mode, settings.playlist_uri),
        )

    coordinator = AppCoordinator(
        app,
        settings=settings,
        sound_player=sound_player,
        music=music,
    )
    engine = coordinator.engine
    fmt = format_time_with_tenths if settings.show_tenths else format_time
    last_second: list[str] = []

    def on_phase(old, new) -> None:
        print(f"{new}  ({fmt(engine.time_remaining)})", flush=True)

    def on_tick(remaining: float) -> None:
        second = format_time(remaining)
        if last_second != [second]:
            last_second[:] = [second]
            print(f"  {engine.phase.display_name} {fmt(remaining)}", flush=True)

    engine.phase_changed.connect(on_phase)
    engine.tick.connect(on_tick)
    engine.clapper.connect(lambda: print("  *clap clap*", flush=True))
    coordinator.notifications.notification_due.connect(
        lambda n: print(f"[{n.title}] {n.body}", flush=True),
    )
    coordinator.session_finished.connect(app.quit)

    if not coordinator.start_session(configuration):
        sys.exit(2)
    save_settings(settings)

    print("GrappleTimer running — Ctrl+C to abort.", flush=True)
    # Let Ctrl+C terminate the Qt event loop.
    signal.signal(signal.SIGINT, signal.SIG_DFL)
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
