"""Unit tests for audio sources and the command-line entry point."""

from __future__ import annotations

import io
import os
import tempfile
import unittest
from contextlib import redirect_stdout
from unittest import mock

import numpy as np
import scipy.io.wavfile as wavfile

from audio_lipsync import cli
from audio_lipsync.audio.collector import read_wav, split_frames


def _write_tone_wav(path: str, sample_rate: int = 16_000, num_samples: int = 4800) -> None:
    t = np.arange(num_samples) / sample_rate
    tone = 0.3 * np.sin(2 * np.pi * 440 * t)
    stereo = np.stack([tone, np.zeros_like(tone)], axis=1)
    wavfile.write(path, sample_rate, (stereo * 32767).astype(np.int16))


class TestAudioSources(unittest.TestCase):
    """split_frames and read_wav."""

    def test_split_frames(self) -> None:
        frames = list(split_frames(np.arange(1000, dtype=np.float32), 480))
        self.assertEqual([len(f) for f in frames], [480, 480, 40])
        self.assertEqual(frames[1][0], 480)

    def test_split_frames_rejects_bad_length(self) -> None:
        with self.assertRaises(ValueError):
            list(split_frames(np.zeros(10, dtype=np.float32), 0))

    def test_read_wav_mono_float(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "tone.wav")
            _write_tone_wav(path)
            audio, sample_rate = read_wav(path)
        self.assertEqual(sample_rate, 16_000)
        self.assertEqual(audio.ndim, 1)
        self.assertEqual(audio.dtype, np.float32)
        self.assertLessEqual(float(np.abs(audio).max()), 1.0)
        self.assertGreater(float(np.abs(audio).max()), 0.25)


class TestCli(unittest.TestCase):
    """audio-lipsync on a WAV file."""

    def test_analyze_file(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "tone.wav")
            _write_tone_wav(path)
            out = io.StringIO()
            argv = ["audio-lipsync", path, "--frame-length", "160", "--print-every", "5"]
            with mock.patch("sys.argv", argv), redirect_stdout(out):
                cli.main()
        lines = out.getvalue().splitlines()
        self.assertTrue(lines[-1].startswith("Processed 30 frames"))
        self.assertEqual(len(lines), 1 + 6)

    def test_requires_input_without_live(self) -> None:
        with mock.patch("sys.argv", ["audio-lipsync"]), redirect_stdout(io.StringIO()):
            with self.assertRaises(SystemExit):
                cli.main()


if __name__ == "__main__":
    unittest.main()
