"""Unit tests for per-frame feature extraction."""

from __future__ import annotations

import unittest

import numpy as np

from audio_lipsync.audio.features import (
    RawFeatures,
    analyze_frame,
    rms_volume,
    to_mono_float,
    zero_crossing_rate,
)
from audio_lipsync.audio.fft import FFTResourceManager, FFTResourceSet


def _tone(freq_hz: float, frame_length: int, sample_rate: float, amplitude: float = 0.5) -> np.ndarray:
    t = np.arange(frame_length) / sample_rate
    return (amplitude * np.sin(2 * np.pi * freq_hz * t)).astype(np.float32)


class TestTimeDomainFeatures(unittest.TestCase):
    """RMS volume and zero-crossing rate."""

    def test_rms_constant(self) -> None:
        self.assertAlmostEqual(rms_volume(np.full(480, 0.5, dtype=np.float32)), 0.5, places=6)

    def test_rms_silence_and_empty(self) -> None:
        self.assertEqual(rms_volume(np.zeros(480, dtype=np.float32)), 0.0)
        self.assertEqual(rms_volume(np.zeros(0, dtype=np.float32)), 0.0)

    def test_rms_sine(self) -> None:
        """A full-cycle sine has RMS amplitude / sqrt(2)."""
        samples = _tone(1000, 480, 48_000, amplitude=1.0)
        self.assertAlmostEqual(rms_volume(samples), 1 / np.sqrt(2), places=4)

    def test_zcr_alternating(self) -> None:
        """Every adjacent pair crosses: (N - 1) / N."""
        res = FFTResourceSet(480, 48_000)
        samples = np.tile(np.array([1.0, -1.0], dtype=np.float32), 240)
        self.assertAlmostEqual(zero_crossing_rate(samples, res), 479 / 480)

    def test_zcr_ignores_zero_samples(self) -> None:
        """A product of exactly zero is not a crossing."""
        res = FFTResourceSet(4, 48_000)
        samples = np.array([1.0, 0.0, -1.0, 0.0], dtype=np.float32)
        self.assertEqual(zero_crossing_rate(samples, res), 0.0)

    def test_zcr_sine(self) -> None:
        """A 1 kHz tone at 48 kHz crosses about 2000 / 48000 of the time."""
        res = FFTResourceSet(480, 48_000)
        samples = _tone(1000, 480, 48_000) + np.float32(1e-3)
        self.assertAlmostEqual(zero_crossing_rate(samples, res), 20 / 480, delta=2 / 480)

    def test_zcr_is_plain_float(self) -> None:
        res = FFTResourceSet(4, 48_000)
        rate = zero_crossing_rate(np.array([1.0, -1.0, 1.0, -1.0], dtype=np.float32), res)
        self.assertIs(type(rate), float)
        self.assertAlmostEqual(rate, 0.75)

    def test_rms_of_loud_float32_frame_is_finite(self) -> None:
        """Squares are accumulated in float64, so 1e20 samples do not overflow."""
        loud = np.full(480, 1e20, dtype=np.float32)
        volume = rms_volume(loud)
        self.assertTrue(np.isfinite(volume))
        self.assertAlmostEqual(volume / 1e20, 1.0, places=5)

    def test_to_mono_float_int16_stereo(self) -> None:
        pcm = np.array([[16384, -32768], [-16384, 0]], dtype=np.int16)
        mono = to_mono_float(pcm)
        self.assertEqual(mono.dtype, np.float32)
        np.testing.assert_allclose(mono, [0.5, -0.5])


class TestSpectralFeatures(unittest.TestCase):
    """Spectral centroid and rolloff via analyze_frame."""

    def test_silence_is_all_zero(self) -> None:
        res = FFTResourceSet(480, 48_000)
        features = analyze_frame(np.zeros(480, dtype=np.float32), res)
        self.assertEqual(features, RawFeatures())

    def test_length_mismatch_raises(self) -> None:
        res = FFTResourceSet(480, 48_000)
        with self.assertRaises(ValueError):
            analyze_frame(np.zeros(1024, dtype=np.float32), res)

    def test_centroid_of_pure_tone(self) -> None:
        """An on-bin tone has its centroid at the tone frequency."""
        res = FFTResourceSet(480, 48_000)
        for freq in (300.0, 1000.0, 2600.0, 6000.0):
            features = analyze_frame(_tone(freq, 480, 48_000), res)
            self.assertAlmostEqual(features.spectral_centroid_hz, freq, delta=20.0)

    def test_rolloff_of_pure_tone(self) -> None:
        """Rolloff lands on or just above the tone's bin."""
        res = FFTResourceSet(480, 48_000)
        features = analyze_frame(_tone(1000, 480, 48_000), res)
        self.assertGreaterEqual(features.spectral_rolloff_hz, 1000.0)
        self.assertLessEqual(features.spectral_rolloff_hz, 1200.0)

    def test_rolloff_of_white_noise(self) -> None:
        """Flat spectrum: 85% of the energy lies below 0.85 * Nyquist."""
        sample_rate = 48_000
        res = FFTResourceSet(4096, sample_rate)
        rng = np.random.default_rng(1234)
        noise = (rng.standard_normal(4096) * 0.2).astype(np.float32)
        features = analyze_frame(noise, res)
        nyquist = sample_rate / 2
        self.assertAlmostEqual(features.spectral_rolloff_hz, 0.85 * nyquist, delta=0.03 * nyquist)

    def test_custom_rolloff_percentile(self) -> None:
        res = FFTResourceSet(4096, 48_000)
        rng = np.random.default_rng(99)
        noise = (rng.standard_normal(4096) * 0.2).astype(np.float32)
        half = analyze_frame(noise, res, rolloff_percentile=0.5)
        self.assertAlmostEqual(half.spectral_rolloff_hz, 0.5 * 24_000, delta=0.03 * 24_000)

    def test_features_non_negative_for_clipped_input(self) -> None:
        res = FFTResourceSet(480, 48_000)
        rng = np.random.default_rng(3)
        clipped = np.clip(rng.standard_normal(480) * 10, -1, 1).astype(np.float32)
        features = analyze_frame(clipped, res)
        for value in (
            features.volume,
            features.zero_crossing_rate,
            features.spectral_centroid_hz,
            features.spectral_rolloff_hz,
        ):
            self.assertGreaterEqual(value, 0.0)
            self.assertTrue(np.isfinite(value))

    def test_sample_rate_rescales_centroid(self) -> None:
        """Same samples at a third of the sample rate: centroid / 3."""
        manager = FFTResourceManager()
        samples = _tone(1500, 480, 48_000)
        high = analyze_frame(samples, manager.ensure(480, 48_000))
        low = analyze_frame(samples, manager.ensure(480, 16_000))
        self.assertAlmostEqual(low.spectral_centroid_hz, high.spectral_centroid_hz / 3, delta=1.0)
        self.assertAlmostEqual(low.volume, high.volume)


if __name__ == "__main__":
    unittest.main()
