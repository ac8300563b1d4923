"""Audio cue package."""

from .cues import SoundManager, SOUND_NAMES, cue_for_phase

__all__ = ["SoundManager", "SOUND_NAMES", "cue_for_phase"]
