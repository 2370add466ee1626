"""Centralized lipsync analysis configuration.

Feature defaults:
- Smoothing: EMA, 0.25 for volume / 0.35 for spectral features and ZCR
- Silence: RMS below 0.003 closes the mouth (MBP)
- Noise: rolloff above 5 kHz or ZCR above 0.12 opens fricatives (FV / ShCh)
- Vowel bands: centroid < 800 Hz rounded, 800-2500 Hz open, >= 2500 Hz bright
- Rolloff: 85% of total spectral magnitude
"""

from dataclasses import dataclass


def _clamp_unit(value: float) -> float:
    return min(max(float(value), 0.0), 1.0)


@dataclass(frozen=True)
class LipSyncConfig:
    """Feature smoothing and morph classification parameters."""

    # Smoothing (EMA weight of the newest frame)
    volume_smoothing: float = 0.25
    feature_smoothing: float = 0.35

    # Classification thresholds
    silence_volume_threshold: float = 0.003
    noise_rolloff_threshold: float = 5000.0  # Hz
    noise_zero_crossing_threshold: float = 0.12
    rounded_centroid_upper_bound: float = 800.0  # Hz
    bright_centroid_lower_bound: float = 2500.0  # Hz

    # Spectral rolloff energy fraction
    rolloff_percentile: float = 0.85

    def __post_init__(self) -> None:
        # Thresholds are tuning knobs and pass through untouched.
        object.__setattr__(self, "volume_smoothing", _clamp_unit(self.volume_smoothing))
        object.__setattr__(self, "feature_smoothing", _clamp_unit(self.feature_smoothing))
