"""Per-frame lipsync pipeline."""

from audio_lipsync.pipeline.analyzer import LipSyncAnalyzer

__all__ = ["LipSyncAnalyzer"]
