"""CLI: print mouth morph weights for a WAV file or live microphone input."""

import argparse
import logging
import sys
from pathlib import Path

from audio_lipsync.audio.collector import AudioCollector, read_wav, split_frames
from audio_lipsync.audio.config import LipSyncConfig
from audio_lipsync.morphs.classifier import MorphWeights, top_morphs
from audio_lipsync.pipeline import LipSyncAnalyzer


def _printer(every: int):
    count = 0

    def on_morphs(morphs: MorphWeights) -> None:
        nonlocal count
        if count % every == 0:
            print(f"[{count:6d}] {top_morphs(morphs, 3)}")
        count += 1

    return on_morphs


def main() -> None:
    parser = argparse.ArgumentParser(description="Heuristic audio-driven lipsync morph weights")
    parser.add_argument(
        "input",
        type=Path,
        nargs="?",
        default=None,
        help="WAV file to analyze (omit with --live)",
    )
    parser.add_argument(
        "--frame-length",
        type=int,
        default=480,
        help="Samples per analysis frame, must be even (default: 480)",
    )
    parser.add_argument(
        "--print-every",
        type=int,
        default=1,
        help="Print one line every N processed frames (default: 1)",
    )
    parser.add_argument(
        "--live",
        action="store_true",
        help="Analyze the microphone instead of a file",
    )
    parser.add_argument(
        "--sample-rate",
        type=int,
        default=48_000,
        help="Microphone sample rate for --live (default: 48000)",
    )
    parser.add_argument(
        "--duration",
        type=float,
        default=None,
        help="Stop --live after this many seconds (default: run until Ctrl+C)",
    )
    parser.add_argument(
        "--device",
        type=int,
        default=None,
        help="Input device index (list with --list-devices)",
    )
    parser.add_argument(
        "--list-devices",
        action="store_true",
        help="List available audio input devices and exit",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Log analyzer diagnostics",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    if args.list_devices:
        try:
            import sounddevice as sd
            print(sd.query_devices())
        except (ImportError, OSError):
            print("sounddevice not installed: pip install sounddevice", file=sys.stderr)
            sys.exit(1)
        return

    if args.frame_length <= 0:
        parser.error("--frame-length must be positive")
    every = max(args.print_every, 1)
    analyzer = LipSyncAnalyzer(LipSyncConfig(), on_morphs=_printer(every))

    if args.live:
        collector = AudioCollector(sample_rate=args.sample_rate)
        frames = collector.record_stream(args.frame_length, device=args.device)
        limit = None
        if args.duration is not None:
            limit = int(args.duration * args.sample_rate / args.frame_length)
        print(f"Listening (mono {args.sample_rate} Hz, {args.frame_length}-sample frames)...")
        try:
            for index, frame in enumerate(frames):
                if limit is not None and index >= limit:
                    break
                analyzer.process_frame(frame, args.sample_rate)
        except KeyboardInterrupt:
            pass
        except ImportError as exc:
            print(str(exc), file=sys.stderr)
            sys.exit(1)
        return

    if args.input is None:
        parser.error("an input WAV file is required unless --live is given")

    audio, sample_rate = read_wav(str(args.input))
    emitted = analyzer.run(split_frames(audio, args.frame_length), sample_rate)
    print(f"Processed {emitted} frames from {args.input} ({sample_rate} Hz)")


if __name__ == "__main__":
    main()
