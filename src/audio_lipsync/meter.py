"""Unweighted RMS level metering for interleaved int16 PCM."""

from __future__ import annotations

import math
from typing import Callable, Optional

import numpy as np

LevelCallback = Callable[[float], None]


def level_db(rms: float, floor: float = 1e-4) -> float:
    """RMS as dBFS, floored so silence maps to -80 dB instead of -inf."""
    return 20.0 * math.log10(max(rms, floor))


class RMSLevelMeter:
    """Reports one RMS value per rendered buffer, across all channels."""

    def __init__(self, callback: Optional[LevelCallback] = None):
        self.callback = callback

    def render_data(
        self,
        audio_data: Optional[np.ndarray],
        num_frames: int,
        num_channels: int = 1,
    ) -> Optional[float]:
        """Measure ``num_frames * num_channels`` interleaved int16 samples.

        Returns:
            RMS in [0, 1], or None when there is nothing to measure.
        """
        if audio_data is None:
            return None
        total = num_frames * num_channels
        if total <= 0:
            return None
        pcm = np.asarray(audio_data).reshape(-1)
        if pcm.size < total:
            raise ValueError(f"buffer holds {pcm.size} samples, expected {total}")

        values = pcm[:total].astype(np.float64) / 32768.0
        rms = float(np.sqrt(np.dot(values, values) / total))
        if self.callback is not None:
            self.callback(rms)
        return rms
