"""Streaming lipsync: frame -> FFT resources -> features -> smoothing -> morph weights.

One analyzer instance serves one audio stream and must be called from a
single thread (typically the audio callback). Frame length and sample rate
may change between calls; buffers are rebuilt as needed.
"""

from __future__ import annotations

import logging
import math
from typing import Callable, Iterable, Optional

import numpy as np

from audio_lipsync.audio.config import LipSyncConfig
from audio_lipsync.audio.features import RawFeatures, analyze_frame, to_mono_float
from audio_lipsync.audio.fft import FFTResourceManager, FFTResourceSet
from audio_lipsync.audio.smoothing import FeatureSmoother, SmoothedFeatures
from audio_lipsync.morphs.classifier import MorphWeights, classify_morphs, top_morphs

logger = logging.getLogger("audio_lipsync.pipeline.analyzer")

MorphCallback = Callable[[MorphWeights], None]


class LipSyncAnalyzer:
    """Turns PCM frames into mouth morph weights.

    Interface:
      analyzer = LipSyncAnalyzer(config=LipSyncConfig(), on_morphs=apply_to_face)
      morphs = analyzer.process_frame(samples, sample_rate)  # None if skipped
      analyzer.run(frames, sample_rate)  # loop; stop() from the callback to exit
    """

    def __init__(
        self,
        config: Optional[LipSyncConfig] = None,
        on_morphs: Optional[MorphCallback] = None,
    ):
        self.config = config or LipSyncConfig()
        self.on_morphs = on_morphs or (lambda m: None)

        self._fft = FFTResourceManager()
        self._smoother = FeatureSmoother(self.config)
        self._last_raw: Optional[RawFeatures] = None
        self._stopped = False

        # Diagnostics
        self._logged_format = False
        self._last_length_warning: Optional[int] = None

    @property
    def resources(self) -> Optional[FFTResourceSet]:
        return self._fft.resources

    @property
    def features(self) -> SmoothedFeatures:
        return self._smoother.state

    @property
    def last_raw_features(self) -> Optional[RawFeatures]:
        return self._last_raw

    def stop(self) -> None:
        """Signal the run loop to exit (checked each iteration)."""
        self._stopped = True

    def _prepare_samples(self, samples: object) -> Optional[np.ndarray]:
        if samples is None:
            logger.debug("Missing channel data")
            return None
        frame = np.asarray(samples)
        if frame.ndim not in (1, 2):
            return None
        return to_mono_float(frame)

    def process_frame(self, samples: object, sample_rate: float) -> Optional[MorphWeights]:
        """Analyze one frame and return the morph weights.

        Args:
            samples: Channel-0 samples (float or int16). A 2-D (frames, channels)
                array is reduced to its first channel.
            sample_rate: Sample rate in Hz of this frame.

        Returns:
            All nine morph weights, or None when the frame was skipped
            (missing or empty data, unusable frame length, bad sample rate,
            non-finite samples or features).
        """
        frame = self._prepare_samples(samples)
        if frame is None or frame.size == 0:
            return None

        frame_length = int(frame.size)
        resources = self._fft.ensure(frame_length, sample_rate)
        if resources is None:
            if self._last_length_warning != frame_length:
                self._last_length_warning = frame_length
                logger.warning(
                    "Skipping frame: FFT not configured for length %d (sample_rate=%s)",
                    frame_length,
                    sample_rate,
                )
            return None

        if not np.isfinite(frame).all():
            logger.debug("Skipping frame with non-finite samples")
            return None

        if not self._logged_format:
            self._logged_format = True
            logger.debug(
                "Analyzer attached: sample_rate=%.1f frame_length=%d",
                resources.sample_rate,
                frame_length,
            )

        raw = analyze_frame(frame, resources, self.config.rolloff_percentile)
        if not raw.is_finite():
            logger.debug("Skipping frame with non-finite features: %s", raw)
            return None
        self._last_raw = raw
        smoothed = self._smoother.smooth(raw)
        morphs = classify_morphs(smoothed, self.config)

        if logger.isEnabledFor(logging.DEBUG):
            if max(morphs.values()) > 0.02 or smoothed.volume > 0.002:
                rms_db = 20 * math.log10(max(smoothed.volume, 1e-4))
                logger.debug("RMS=%.1fdB | %s", rms_db, top_morphs(morphs))

        self.on_morphs(morphs)
        return morphs

    def run(self, frames: Iterable[np.ndarray], sample_rate: float) -> int:
        """Process frames until stopped or the iterator is exhausted.

        Returns:
            Number of frames that produced morph weights.
        """
        self._stopped = False
        emitted = 0
        for frame in frames:
            if self._stopped:
                break
            if self.process_frame(frame, sample_rate) is not None:
                emitted += 1
        return emitted
