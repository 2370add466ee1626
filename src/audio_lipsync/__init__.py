"""Audio-driven lipsync - FFT features, smoothing, morph classification, analyzer."""

from audio_lipsync.audio.config import LipSyncConfig
from audio_lipsync.morphs import MORPH_NAMES, classify_morphs
from audio_lipsync.pipeline import LipSyncAnalyzer

__all__ = ["LipSyncAnalyzer", "LipSyncConfig", "MORPH_NAMES", "classify_morphs"]
