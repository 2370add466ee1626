"""Per-frame features: RMS volume, zero-crossing rate, spectral centroid and rolloff."""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np

from audio_lipsync.audio.fft import FFTResourceSet


def to_mono_float(audio: np.ndarray) -> np.ndarray:
    """Channel 0 of ``audio`` as float32; int16 is scaled to [-1, 1)."""
    audio = np.asarray(audio)
    if audio.ndim == 2:
        audio = audio[:, 0]
    if audio.dtype == np.int16:
        return audio.astype(np.float32) / 32768.0
    return audio.astype(np.float32, copy=False)


# Total magnitude below this is treated as an empty spectrum.
SPECTRUM_EPSILON = 1e-4


@dataclass(frozen=True)
class RawFeatures:
    """Instantaneous features of a single frame."""

    volume: float = 0.0
    zero_crossing_rate: float = 0.0
    spectral_centroid_hz: float = 0.0
    spectral_rolloff_hz: float = 0.0

    def is_finite(self) -> bool:
        return all(
            math.isfinite(value)
            for value in (
                self.volume,
                self.zero_crossing_rate,
                self.spectral_centroid_hz,
                self.spectral_rolloff_hz,
            )
        )


def rms_volume(samples: np.ndarray) -> float:
    """Root-mean-square of ``samples``; 0 for an empty frame."""
    n = len(samples)
    if n == 0:
        return 0.0
    # float64 accumulation; float32 squares overflow for loud frames
    energy = float(np.einsum("i,i->", samples, samples, dtype=np.float64))
    if energy <= 0.0:
        return 0.0
    return float(np.sqrt(energy / n))


def zero_crossing_rate(samples: np.ndarray, resources: FFTResourceSet) -> float:
    """Fraction of adjacent sample pairs with strictly opposite sign."""
    n = len(samples)
    if n < 2:
        return 0.0
    products = resources.products[: n - 1]
    crossings = resources.crossings[: n - 1]
    with np.errstate(over="ignore"):
        # Only the sign of each product matters.
        np.multiply(samples[1:], samples[:-1], out=products)
    np.less(products, 0.0, out=crossings)
    return float(np.count_nonzero(crossings) / n)


def spectral_centroid(resources: FFTResourceSet, total_magnitude: float) -> float:
    """Magnitude-weighted mean frequency of the current magnitude spectrum."""
    if total_magnitude < SPECTRUM_EPSILON:
        return 0.0
    np.multiply(resources.frequency_axis, resources.magnitudes, out=resources.weighted)
    return float(resources.weighted.sum(dtype=np.float64)) / total_magnitude


def spectral_rolloff(resources: FFTResourceSet, total_magnitude: float, percentile: float) -> float:
    """Lowest frequency whose cumulative magnitude reaches ``percentile`` of the total."""
    if total_magnitude < SPECTRUM_EPSILON:
        return 0.0
    np.cumsum(resources.magnitudes, out=resources.cumulative)
    threshold = total_magnitude * percentile
    index = int(np.searchsorted(resources.cumulative, threshold, side="left"))
    if index >= resources.half_length:
        # Rounding can leave the running sum just short of the total.
        index = resources.half_length - 1
    return float(resources.frequency_axis[index])


def analyze_frame(
    samples: np.ndarray,
    resources: FFTResourceSet,
    rolloff_percentile: float = 0.85,
) -> RawFeatures:
    """Compute raw features for one frame.

    Args:
        samples: Mono float samples, length must equal ``resources.frame_length``.
            Read only.
        resources: Resource set whose scratch buffers receive intermediate results.
        rolloff_percentile: Energy fraction for the rolloff frequency.

    Returns:
        RawFeatures with all fields non-negative.
    """
    if len(samples) != resources.frame_length:
        raise ValueError(
            f"frame has {len(samples)} samples, resources expect {resources.frame_length}"
        )

    volume = rms_volume(samples)
    zcr = zero_crossing_rate(samples, resources)

    magnitudes = resources.magnitude_spectrum(samples)
    total = float(magnitudes.sum(dtype=np.float64))

    return RawFeatures(
        volume=volume,
        zero_crossing_rate=zcr,
        spectral_centroid_hz=spectral_centroid(resources, total),
        spectral_rolloff_hz=spectral_rolloff(resources, total, rolloff_percentile),
    )
