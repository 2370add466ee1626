"""Morph animation drivers."""

from audio_lipsync.animation.text_controller import MouthMorphMap, TextLipSyncController

__all__ = ["MouthMorphMap", "TextLipSyncController"]
