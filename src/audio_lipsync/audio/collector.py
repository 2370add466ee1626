"""Audio sources for the lipsync analyzer: live microphone frames and WAV files."""

import queue
from typing import Iterator, Optional, Tuple

import numpy as np

from audio_lipsync.audio.features import to_mono_float

try:
    import sounddevice as sd
except (ImportError, OSError):
    sd = None  # type: ignore


def split_frames(audio: np.ndarray, frame_length: int) -> Iterator[np.ndarray]:
    """Yield consecutive frames of ``frame_length`` samples.

    The trailing partial frame is yielded as-is; the analyzer decides
    whether its length is usable.
    """
    if frame_length <= 0:
        raise ValueError(f"frame_length must be positive, got {frame_length}")
    for start in range(0, len(audio), frame_length):
        yield audio[start : start + frame_length]


def read_wav(filepath: str) -> Tuple[np.ndarray, int]:
    """Read a WAV file as mono float32.

    Returns:
        (samples, sample_rate)
    """
    import scipy.io.wavfile as wavfile

    sample_rate, audio = wavfile.read(filepath)
    return to_mono_float(audio), int(sample_rate)


class AudioCollector:
    """Streams microphone audio in fixed-length frames."""

    def __init__(self, sample_rate: int = 48_000, channels: int = 1):
        self.sample_rate = sample_rate
        self.channels = channels

    def record_stream(
        self,
        frame_length: int,
        device: Optional[int] = None,
    ) -> Iterator[np.ndarray]:
        """Stream audio frames continuously.

        Args:
            frame_length: Samples per yielded frame (the device block size).
            device: Input device index (None = default).

        Yields:
            Mono float32 frames, shape (frame_length,).
        """
        if sd is None:
            raise ImportError("sounddevice is required for recording. pip install sounddevice")

        q: "queue.Queue[np.ndarray]" = queue.Queue()

        def callback(indata: np.ndarray, _frames: int, _time: object, _status: object) -> None:
            q.put(to_mono_float(indata.copy()))

        with sd.InputStream(
            samplerate=self.sample_rate,
            channels=self.channels,
            dtype="float32",
            blocksize=frame_length,
            device=device,
            callback=callback,
        ):
            while True:
                yield q.get()
