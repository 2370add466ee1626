"""FFT resources: window, frequency axis, and per-frame scratch buffers.

A resource set is bound to one (frame_length, sample_rate) pair. The real
transform of frame_length samples is computed as one complex FFT of
frame_length / 2 points over the interleaved (even, odd) sample pairs,
followed by an even/odd recombination with precomputed twiddles.
"""

from __future__ import annotations

import logging
import math
from typing import Optional

import numpy as np
from scipy import fft as sp_fft
from scipy.signal import get_window

logger = logging.getLogger("audio_lipsync.audio.fft")


class FFTResourceSet:
    """Buffers and transform tables for one frame length.

    Use ``FFTResourceSet.create`` to get ``None`` instead of an exception for
    frame lengths that cannot be split into complex pairs.
    """

    def __init__(self, frame_length: int, sample_rate: float):
        if frame_length <= 0 or frame_length % 2 != 0:
            raise ValueError(f"frame_length must be positive and even, got {frame_length}")
        if not math.isfinite(sample_rate) or sample_rate <= 0:
            raise ValueError(f"sample_rate must be positive, got {sample_rate}")

        self.frame_length = int(frame_length)
        self.half_length = self.frame_length // 2
        self.sample_rate = float(sample_rate)

        n = self.frame_length
        half = self.half_length

        # Periodic Hann: 0.5 * (1 - cos(2*pi*k / N)), peak 1.0
        self.window = get_window("hann", n, fftbins=True).astype(np.float32)
        self._bins = np.arange(half, dtype=np.float32)
        self.frequency_axis = self._bins * np.float32(self.sample_rate / n)

        # Even/odd recombination tables
        k = np.arange(half)
        self._mirror = (-k) % half
        self._odd_twiddle = (-0.5j * np.exp(-2j * np.pi * k / n)).astype(np.complex64)

        # Scratch
        self.windowed = np.zeros(n, dtype=np.float32)
        self.real = np.zeros(half, dtype=np.float32)
        self.imag = np.zeros(half, dtype=np.float32)
        self.magnitudes = np.zeros(half, dtype=np.float32)
        self.weighted = np.zeros(half, dtype=np.float32)
        self.cumulative = np.zeros(half, dtype=np.float32)
        self.products = np.zeros(max(n - 1, 1), dtype=np.float32)
        self.crossings = np.zeros(max(n - 1, 1), dtype=bool)
        self._mirrored = np.zeros(half, dtype=np.complex64)
        self._even = np.zeros(half, dtype=np.complex64)
        self._odd = np.zeros(half, dtype=np.complex64)

    @classmethod
    def create(cls, frame_length: int, sample_rate: float) -> Optional["FFTResourceSet"]:
        """Build a resource set, or return None when the parameters are unusable."""
        try:
            return cls(frame_length, sample_rate)
        except ValueError as exc:
            logger.debug("FFT resources unavailable: %s", exc)
            return None

    def set_sample_rate(self, sample_rate: float) -> None:
        """Rebind to a new sample rate; only the frequency axis changes."""
        self.sample_rate = float(sample_rate)
        np.multiply(
            self._bins,
            np.float32(self.sample_rate / self.frame_length),
            out=self.frequency_axis,
        )

    def magnitude_spectrum(self, samples: np.ndarray) -> np.ndarray:
        """Window ``samples`` and fill ``self.magnitudes`` with the one-sided spectrum.

        Returns the ``magnitudes`` buffer itself (length half_length).
        """
        np.multiply(samples, self.window, out=self.windowed)

        # x[2n] + i*x[2n+1] as half_length complex points
        packed = self.windowed.view(np.complex64)
        spectrum = sp_fft.fft(packed)

        # X[k] = E[k] + W^k * O[k]
        #   E[k] = (Z[k] + conj(Z[-k])) / 2
        #   O[k] = (Z[k] - conj(Z[-k])) / 2i
        np.take(spectrum, self._mirror, out=self._mirrored)
        np.conjugate(self._mirrored, out=self._mirrored)
        np.add(spectrum, self._mirrored, out=self._even)
        self._even *= 0.5
        np.subtract(spectrum, self._mirrored, out=self._odd)
        self._odd *= self._odd_twiddle
        self._even += self._odd

        np.copyto(self.real, self._even.real)
        np.copyto(self.imag, self._even.imag)
        np.hypot(self.real, self.imag, out=self.magnitudes)
        return self.magnitudes


class FFTResourceManager:
    """Owns the current resource set and replaces it when the frame format changes."""

    def __init__(self) -> None:
        self._resources: Optional[FFTResourceSet] = None

    @property
    def resources(self) -> Optional[FFTResourceSet]:
        return self._resources

    def ensure(self, frame_length: int, sample_rate: float) -> Optional[FFTResourceSet]:
        """Return a resource set valid for ``(frame_length, sample_rate)``.

        Same frame length and sample rate: the current set, untouched.
        Same frame length, new sample rate: the current set with its
        frequency axis recomputed in place.
        New frame length: a freshly built set replaces the old one.
        Returns None when no set can be built for the request; the previous
        set is dropped so that it is never used for a mismatched frame.
        """
        if not math.isfinite(sample_rate) or sample_rate <= 0:
            return None

        current = self._resources
        if current is not None and current.frame_length == frame_length:
            if current.sample_rate != sample_rate:
                current.set_sample_rate(sample_rate)
                logger.debug(
                    "FFT sample rate updated: frame_length=%d sample_rate=%.1f",
                    frame_length,
                    sample_rate,
                )
            return current

        replacement = FFTResourceSet.create(frame_length, sample_rate)
        self._resources = replacement
        if replacement is not None:
            logger.debug(
                "FFT configured: frame_length=%d sample_rate=%.1f",
                frame_length,
                sample_rate,
            )
        return replacement
