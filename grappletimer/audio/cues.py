"""Cue synthesis and playback using numpy + QSoundEffect.

All cues are generated programmatically as WAV files using sine-wave
synthesis with ADSR envelopes.  Files are cached to disk so subsequent
launches are instant.

Cue names
---------
- ``countdown`` — short high beep during the start delay
- ``horn``      — low brassy blast when a work round begins
- ``bell``      — ringing bell when a rest begins
- ``finish``    — three descending horn blasts at session end
- ``clapper``   — two sharp wooden clacks before a round ends
"""

from __future__ import annotations

import io
import logging
import wave
from pathlib import Path

import numpy as np

from PyQt6.QtCore import QObject, QUrl
from PyQt6.QtMultimedia import QSoundEffect

from ..settings import APP_SUPPORT_DIR
from ..timer.session import Phase, PhaseKind

log = logging.getLogger(__name__)


# ── paths ────────────────────────────────────────────────────────────────

SOUNDS_DIR = APP_SUPPORT_DIR / "sounds"

SOUND_NAMES = (
    "countdown",
    "horn",
    "bell",
    "finish",
    "clapper",
)

SAMPLE_RATE = 44100

_PHASE_CUES: dict[PhaseKind, str] = {
    PhaseKind.STARTING: "countdown",
    PhaseKind.WORK: "horn",
    PhaseKind.REST: "bell",
    PhaseKind.DONE: "finish",
}


def cue_for_phase(phase: Phase) -> str | None:
    """Name of the cue announcing ``phase``; None for IDLE."""
    return _PHASE_CUES.get(phase.kind)


# ═══════════════════════════════════════════════════════════════════════════
#  WAV SYNTHESIS HELPERS
# ═══════════════════════════════════════════════════════════════════════════


def _make_envelope(
    length: int,
    attack: int = 200,
    decay: int = 400,
    sustain_level: float = 0.7,
    release: int = 800,
) -> np.ndarray:
    """ADSR envelope (all durations in samples)."""
    env = np.ones(length, dtype=np.float64)
    a = min(attack, length)
    if a > 0:
        env[:a] = np.linspace(0.0, 1.0, a)
    d_end = min(a + decay, length)
    if decay > 0 and d_end > a:
        env[a:d_end] = np.linspace(1.0, sustain_level, d_end - a)
    s_end = max(length - release, d_end)
    if s_end > d_end:
        env[d_end:s_end] = sustain_level
    if release > 0 and s_end < length:
        env[s_end:] = np.linspace(sustain_level, 0.0, length - s_end)
    return env


def _sine(freq: float, duration_s: float) -> np.ndarray:
    """Pure sine wave at *freq* Hz for *duration_s* seconds."""
    t = np.linspace(0, duration_s, int(SAMPLE_RATE * duration_s), endpoint=False)
    return np.sin(2 * np.pi * freq * t)


def _silence(duration_s: float) -> np.ndarray:
    return np.zeros(int(SAMPLE_RATE * duration_s))


def _to_wav_bytes(samples: np.ndarray) -> bytes:
    """Convert a float64 numpy array (-1..1) to 16-bit PCM WAV bytes."""
    samples = np.clip(samples, -1.0, 1.0)
    int_samples = (samples * 32767).astype(np.int16)

    buf = io.BytesIO()
    with wave.open(buf, "wb") as wf:
        wf.setnchannels(1)
        wf.setsampwidth(2)
        wf.setframerate(SAMPLE_RATE)
        wf.writeframes(int_samples.tobytes())
    return buf.getvalue()


# ═══════════════════════════════════════════════════════════════════════════
#  CUE GENERATORS
# ═══════════════════════════════════════════════════════════════════════════


def _horn_blast(freq: float, duration_s: float) -> np.ndarray:
    # Odd harmonics give the reedy, brassy character.
    tone = sum(
        _sine(freq * n, duration_s) * (0.5 / n)
        for n in (1, 3, 5, 7)
    )
    env = _make_envelope(
        len(tone),
        attack=int(SAMPLE_RATE * 0.03),
        decay=int(SAMPLE_RATE * 0.1),
        sustain_level=0.8,
        release=int(SAMPLE_RATE * 0.15),
    )
    return tone * env


def _generate_countdown() -> bytes:
    """Start delay — short 880 Hz beep."""
    tone = _sine(880.0, 0.12) * 0.5
    env = _make_envelope(len(tone), attack=60, decay=200, sustain_level=0.5, release=400)
    return _to_wav_bytes(np.concatenate([tone * env, _silence(0.05)]))


def _generate_horn() -> bytes:
    """Work start — single 0.8 s blast at A3."""
    return _to_wav_bytes(np.concatenate([_horn_blast(220.0, 0.8), _silence(0.05)]))


def _generate_bell() -> bytes:
    """Rest start — boxing-ring bell (E6 with inharmonic overtones), long decay."""
    duration = 1.2
    combined = (
        _sine(1318.5, duration) * 0.35
        + _sine(1318.5 * 2.76, duration) * 0.12
        + _sine(1318.5 * 5.4, duration) * 0.05
    )
    env = _make_envelope(
        len(combined),
        attack=int(SAMPLE_RATE * 0.005),
        decay=int(SAMPLE_RATE * 0.2),
        sustain_level=0.3,
        release=int(SAMPLE_RATE * 0.9),
    )
    return _to_wav_bytes(combined * env)


def _generate_finish() -> bytes:
    """Session complete — three descending blasts (C4→A3→F3)."""
    parts: list[np.ndarray] = []
    for freq, dur in ((261.63, 0.25), (220.0, 0.25), (174.61, 0.7)):
        parts.append(_horn_blast(freq, dur))
        parts.append(_silence(0.06))
    return _to_wav_bytes(np.concatenate(parts))


def _generate_clapper() -> bytes:
    """Clapper warning — two sharp clacks, 120 ms apart."""
    clack_dur = 0.03
    clack = _sine(2200.0, clack_dur) * 0.5 + _sine(3100.0, clack_dur) * 0.3
    env = _make_envelope(len(clack), attack=10, decay=150, sustain_level=0.2, release=600)
    clack = clack * env
    return _to_wav_bytes(np.concatenate([clack, _silence(0.12), clack, _silence(0.05)]))


_GENERATORS: dict[str, callable] = {
    "countdown": _generate_countdown,
    "horn": _generate_horn,
    "bell": _generate_bell,
    "finish": _generate_finish,
    "clapper": _generate_clapper,
}


# ═══════════════════════════════════════════════════════════════════════════
#  SOUND MANAGER
# ═══════════════════════════════════════════════════════════════════════════


class SoundManager(QObject):
    """Manages cue synthesis, caching, and playback.

    Usage::

        mgr = SoundManager(parent=self)
        mgr.set_volume(80)
        mgr.play("horn")
    """

    def __init__(
        self,
        parent: QObject | None = None,
        *,
        sounds_dir: Path | None = None,
    ) -> None:
        super().__init__(parent)
        self._enabled = True
        self._volume = 0.8  # 0.0–1.0
        self._sounds_dir = sounds_dir or SOUNDS_DIR
        self._effects: dict[str, QSoundEffect] = {}

        self._ensure_wav_files()
        self._load_effects()

    # ── public API ────────────────────────────────────────────────────

    def set_volume(self, level: int) -> None:
        """Set volume (0-100).  Updates all loaded effects."""
        self._volume = max(0, min(level, 100)) / 100.0
        for effect in self._effects.values():
            effect.setVolume(self._volume)

    def set_enabled(self, enabled: bool) -> None:
        self._enabled = enabled

    def play(self, name: str) -> None:
        """Play a cue by name.  No-op if disabled or name unknown."""
        if not self._enabled:
            return
        effect = self._effects.get(name)
        if effect is None:
            log.debug("No cue named %r", name)
            return
        effect.play()

    @property
    def volume(self) -> int:
        """Current volume as 0-100 integer."""
        return round(self._volume * 100)

    @property
    def enabled(self) -> bool:
        return self._enabled

    # ── internal ──────────────────────────────────────────────────────

    def _ensure_wav_files(self) -> None:
        """Generate any missing WAV files to the cache directory."""
        self._sounds_dir.mkdir(parents=True, exist_ok=True)
        for name, gen_fn in _GENERATORS.items():
            path = self._sounds_dir / f"{name}.wav"
            if not path.exists():
                path.write_bytes(gen_fn())
                log.debug("Generated cue %s", path)

    def _load_effects(self) -> None:
        """Create QSoundEffect instances from cached WAV files."""
        for name in SOUND_NAMES:
            path = self._sounds_dir / f"{name}.wav"
            if path.exists():
                effect = QSoundEffect(self)
                effect.setSource(QUrl.fromLocalFile(str(path)))
                effect.setVolume(self._volume)
                self._effects[name] = effect
