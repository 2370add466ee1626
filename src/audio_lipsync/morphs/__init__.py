"""Feature-to-morph classification."""

from audio_lipsync.morphs.classifier import MORPH_NAMES, MorphWeights, classify_morphs

__all__ = ["MORPH_NAMES", "MorphWeights", "classify_morphs"]
