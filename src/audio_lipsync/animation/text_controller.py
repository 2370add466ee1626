"""Text-driven mouth animation.

Approximates mouth shapes from streamed text deltas (e.g. a chat reply being
spoken) and writes three morph weights on a morph target. Weights pulse up on
each delta and decay toward zero on every display tick. For better fidelity
drive the face from audio with LipSyncAnalyzer instead.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Iterable, Optional, Protocol

logger = logging.getLogger("audio_lipsync.animation.text_controller")

VOWELS = frozenset("aeiouyаеёиоуыэюя")
ROUNDERS = frozenset("ouwоую")


class MorphTarget(Protocol):
    """Anything that exposes named blend shapes."""

    def morph_names(self) -> Iterable[str]:
        ...

    def set_weight(self, name: str, weight: float) -> None:
        ...


@dataclass(frozen=True)
class MouthMorphMap:
    """Target morph names for the three mouth channels."""

    mouth_open: str
    mouth_round: str
    mouth_narrow: str

    @property
    def names(self) -> tuple:
        return (self.mouth_open, self.mouth_round, self.mouth_narrow)


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


class TextLipSyncController:
    """Pulses mouth morphs from text and decays them at display rate.

    Call ``tick()`` from the render loop at ``tick_hz``.
    """

    def __init__(
        self,
        target: Optional[MorphTarget],
        morph_map: MouthMorphMap,
        decay_per_tick: float = 0.08,
        tick_hz: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.target = target
        self.morph_map = morph_map
        self.decay_per_tick = decay_per_tick
        self.tick_hz = tick_hz
        self._clock = clock
        self._known = set(target.morph_names()) if target is not None else set()
        missing = [name for name in morph_map.names if name not in self._known]
        if target is not None and missing:
            logger.debug("Morph target has no blend shapes named %s", ", ".join(missing))

        self.open = 0.0
        self.round = 0.0
        self.narrow = 0.0

        self._active = False
        self._ticking = False
        self._stop_at: Optional[float] = None

    @property
    def tick_interval(self) -> float:
        """Seconds between ticks."""
        return 1.0 / self.tick_hz

    @property
    def is_active(self) -> bool:
        return self._active

    @property
    def is_ticking(self) -> bool:
        """True while weights are still decaying."""
        return self._ticking

    def start_if_needed(self) -> None:
        if self._active:
            return
        self._active = True
        self._ticking = True

    def handle_delta(self, delta: str) -> None:
        """Raise mouth weights from a chunk of text."""
        if not delta:
            return
        self.start_if_needed()

        lower = delta.lower()
        length = len(lower)
        vowel_count = sum(1 for ch in lower if ch in VOWELS)
        round_count = sum(1 for ch in lower if ch in ROUNDERS)
        consonant_count = max(0, length - vowel_count)

        open_pulse = _clamp(0.2 + 0.02 * length + 0.12 * vowel_count, 0.0, 1.0)
        round_pulse = _clamp(0.15 * round_count, 0.0, 0.8)
        narrow_pulse = _clamp(0.05 * consonant_count, 0.0, 0.5)

        self.open = max(self.open, open_pulse)
        self.round = max(self.round, round_pulse)
        self.narrow = max(self.narrow, narrow_pulse)
        self._ticking = True
        self._apply()

    def stop(self, after: float = 0.15) -> None:
        """Close the mouth and go idle ``after`` seconds from now (on a later tick)."""
        if not self._active:
            return
        self._stop_at = self._clock() + after

    def tick(self) -> None:
        """Advance one display frame."""
        if self._stop_at is not None and self._clock() >= self._stop_at:
            self._stop_at = None
            self.open = self.round = self.narrow = 0.0
            self._apply()
            self._ticking = False
            self._active = False
            return

        if not self._ticking:
            return

        new_open = max(0.0, self.open - self.decay_per_tick)
        new_round = max(0.0, self.round - self.decay_per_tick)
        new_narrow = max(0.0, self.narrow - self.decay_per_tick)

        if (new_open, new_round, new_narrow) != (self.open, self.round, self.narrow):
            self.open, self.round, self.narrow = new_open, new_round, new_narrow
            self._apply()

        if self.open == 0 and self.round == 0 and self.narrow == 0:
            self._ticking = False

    def _apply(self) -> None:
        if self.target is None:
            return
        for name, weight in (
            (self.morph_map.mouth_open, self.open),
            (self.morph_map.mouth_round, self.round),
            (self.morph_map.mouth_narrow, self.narrow),
        ):
            if name in self._known:
                self.target.set_weight(name, weight)
