"""Rule-based mapping from smoothed audio features to mouth morph weights.

Rules, in order:
  1. Silence (volume below threshold): MBP = 1, nothing else.
  2. Noise overlay (high rolloff or high ZCR): FV and ShCh, scaled by volume.
  3. Vowel shape by centroid band:
       rounded  (< 800 Hz)         U, O = 0.7 U, WQ = 0.4 U
       open     (800 - 2500 Hz)    AI
       bright   (>= 2500 Hz)       E, L = 0.2 E
  4. Normalize down when the total exceeds 1.

The overlay and the vowel shape can both be active for the same frame.
"""

from __future__ import annotations

from typing import Dict, Optional

from audio_lipsync.audio.config import LipSyncConfig
from audio_lipsync.audio.smoothing import SmoothedFeatures

MORPH_NAMES = ("AI", "E", "U", "FV", "MBP", "ShCh", "O", "L", "WQ")

MorphWeights = Dict[str, float]


def empty_morphs() -> MorphWeights:
    """All morphs at zero."""
    return {name: 0.0 for name in MORPH_NAMES}


def _scaled(volume: float, gain: float) -> float:
    return min(volume * gain, 1.0)


def normalize_morphs(morphs: MorphWeights) -> MorphWeights:
    """Scale weights down in place so they sum to 1; a sum <= 1 is left alone."""
    total = sum(morphs.values())
    if total > 1.0:
        for name in morphs:
            morphs[name] /= total
    return morphs


def classify_morphs(
    features: SmoothedFeatures,
    config: Optional[LipSyncConfig] = None,
) -> MorphWeights:
    """Map smoothed features to a complete morph weight map.

    Args:
        features: Smoothed volume, ZCR, centroid and rolloff.
        config: Thresholds (defaults when None).

    Returns:
        Dict with every name in MORPH_NAMES, weights in [0, 1], sum <= 1.
    """
    config = config or LipSyncConfig()
    morphs = empty_morphs()
    volume = max(features.volume, 0.0)

    if volume < config.silence_volume_threshold:
        morphs["MBP"] = 1.0
        return morphs

    if (
        features.spectral_rolloff_hz > config.noise_rolloff_threshold
        or features.zero_crossing_rate > config.noise_zero_crossing_threshold
    ):
        morphs["FV"] = _scaled(volume, 6.0)
        morphs["ShCh"] = _scaled(volume, 4.0)

    centroid = features.spectral_centroid_hz
    if centroid < config.rounded_centroid_upper_bound:
        rounded = _scaled(volume, 3.0)
        morphs["U"] = rounded
        morphs["O"] = 0.7 * rounded
        morphs["WQ"] = 0.4 * rounded
    elif centroid < config.bright_centroid_lower_bound:
        morphs["AI"] = _scaled(volume, 4.0)
    else:
        bright = _scaled(volume, 5.0)
        morphs["E"] = bright
        morphs["L"] = 0.2 * bright

    return normalize_morphs(morphs)


def dominant_morph(morphs: MorphWeights) -> str:
    """Name of the heaviest morph (first in MORPH_NAMES order on ties)."""
    return max(MORPH_NAMES, key=lambda name: morphs.get(name, 0.0))


def top_morphs(morphs: MorphWeights, n: int = 5) -> str:
    """Compact "name=weight" summary of the ``n`` heaviest morphs."""
    ranked = sorted(morphs.items(), key=lambda item: item[1], reverse=True)[:n]
    return ", ".join(f"{name}={weight:.2f}" for name, weight in ranked)
