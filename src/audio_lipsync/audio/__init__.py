"""Feature extraction: FFT resources, per-frame features, smoothing, audio sources."""

from audio_lipsync.audio.config import LipSyncConfig
from audio_lipsync.audio.features import RawFeatures, analyze_frame
from audio_lipsync.audio.fft import FFTResourceManager, FFTResourceSet
from audio_lipsync.audio.smoothing import FeatureSmoother, SmoothedFeatures

__all__ = [
    "LipSyncConfig",
    "FFTResourceManager",
    "FFTResourceSet",
    "RawFeatures",
    "analyze_frame",
    "FeatureSmoother",
    "SmoothedFeatures",
]
