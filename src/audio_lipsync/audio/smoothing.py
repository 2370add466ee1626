"""Exponential moving average over the per-frame feature streams."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from audio_lipsync.audio.config import LipSyncConfig
from audio_lipsync.audio.features import RawFeatures


@dataclass(frozen=True)
class SmoothedFeatures:
    """Feature values after temporal smoothing; same fields as RawFeatures."""

    volume: float = 0.0
    zero_crossing_rate: float = 0.0
    spectral_centroid_hz: float = 0.0
    spectral_rolloff_hz: float = 0.0


def _ema(new: float, previous: float, factor: float) -> float:
    return new * factor + previous * (1.0 - factor)


class FeatureSmoother:
    """Keeps EMA state across frames.

    State starts at zero and is never reset by format changes; create a new
    smoother to start over.
    """

    def __init__(self, config: Optional[LipSyncConfig] = None):
        self.config = config or LipSyncConfig()
        self._state = SmoothedFeatures()

    @property
    def state(self) -> SmoothedFeatures:
        return self._state

    def smooth(self, raw: RawFeatures) -> SmoothedFeatures:
        """Fold ``raw`` into the running averages and return the new state."""
        prev = self._state
        volume_factor = self.config.volume_smoothing
        feature_factor = self.config.feature_smoothing
        self._state = SmoothedFeatures(
            volume=_ema(raw.volume, prev.volume, volume_factor),
            zero_crossing_rate=_ema(raw.zero_crossing_rate, prev.zero_crossing_rate, feature_factor),
            spectral_centroid_hz=_ema(raw.spectral_centroid_hz, prev.spectral_centroid_hz, feature_factor),
            spectral_rolloff_hz=_ema(raw.spectral_rolloff_hz, prev.spectral_rolloff_hz, feature_factor),
        )
        return self._state
