"""Progress of a pathway through its desensitization window."""

from __future__ import annotations

import math
from dataclasses import dataclass

from ..engine.receptors import clamp01


@dataclass(frozen=True)
class RecoveryClock:
    """Elapsed/remaining time since a pool became desensitization-dominant.

    ``start_min`` is the simulated minute the mark was set; the window is
    floor-clamped to one minute like the kinetics themselves.
    """

    start_min: float
    now_min: float
    window_min: float

    @property
    def window(self) -> float:
        return max(1.0, self.window_min)

    @property
    def elapsed_min(self) -> float:
        return max(0.0, self.now_min - self.start_min)

    @property
    def progress(self) -> float:
        return clamp01(self.elapsed_min / self.window)

    @property
    def remaining_min(self) -> int:
        return max(0, math.ceil(self.window - self.elapsed_min))

    def to_dict(self) -> dict[str, float]:
        return {
            "start_min": self.start_min,
            "now_min": self.now_min,
            "window_min": self.window,
            "elapsed_min": self.elapsed_min,
            "progress": self.progress,
            "remaining_min": self.remaining_min,
        }


__all__ = ["RecoveryClock"]
