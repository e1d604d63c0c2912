"""Bounded history of derived observables feeding the timeline display."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Deque, Dict, Iterable, Iterator, List, Sequence, Tuple

import numpy as np
import numpy.typing as npt

from ..engine.pharmacodynamics import PharmacodynamicState

WINDOW_MIN = 60.0
BATCH_CAP = 900
MIN_VALUE_SPAN = 0.15


@dataclass(frozen=True)
class TracePoint:
    """One sample of the timeline."""

    t: float
    da: float
    gaba: float
    nic: float
    desens_total: float
    puff_occurred: bool

    @classmethod
    def from_state(cls, t: float, state: PharmacodynamicState, puff_occurred: bool) -> "TracePoint":
        return cls(
            t=t,
            da=state.da,
            gaba=state.gaba,
            nic=state.nicotine,
            desens_total=state.desens_total,
            puff_occurred=puff_occurred,
        )


@dataclass(frozen=True)
class TimelineBand:
    """Down-sampled nicotine/desensitization cell drawn under the curves."""

    index: int
    t: float
    nic: float
    desens_total: float


class TraceBuffer:
    """Append-only series of :class:`TracePoint` with two retention policies.

    ``append`` keeps a rolling window of ``window_min`` minutes behind the
    newest point (continuous mode).  ``extend`` appends a whole batch and then
    keeps only the newest ``cap`` points regardless of age (fast-forward).
    """

    def __init__(self, window_min: float = WINDOW_MIN, cap: int = BATCH_CAP) -> None:
        self.window_min = float(window_min)
        self.cap = int(cap)
        self._points: Deque[TracePoint] = deque()

    def __len__(self) -> int:
        return len(self._points)

    def __iter__(self) -> Iterator[TracePoint]:
        return iter(self._points)

    @property
    def latest(self) -> TracePoint | None:
        return self._points[-1] if self._points else None

    def points(self) -> Tuple[TracePoint, ...]:
        return tuple(self._points)

    def clear(self) -> None:
        self._points.clear()

    def append(self, point: TracePoint) -> None:
        self._check_order(point)
        self._points.append(point)
        cutoff = point.t - self.window_min
        while self._points and self._points[0].t < cutoff:
            self._points.popleft()

    def extend(self, points: Iterable[TracePoint]) -> None:
        for point in points:
            self._check_order(point)
            self._points.append(point)
        while len(self._points) > self.cap:
            self._points.popleft()

    def _check_order(self, point: TracePoint) -> None:
        latest = self.latest
        if latest is not None and point.t < latest.t:
            raise ValueError(f"trace points must be appended in time order ({point.t} < {latest.t})")

    def as_arrays(self) -> Dict[str, npt.NDArray[np.float64]]:
        """Return the buffer as one NumPy array per field."""

        points = self._points
        return {
            "t": np.fromiter((p.t for p in points), dtype=float, count=len(points)),
            "da": np.fromiter((p.da for p in points), dtype=float, count=len(points)),
            "gaba": np.fromiter((p.gaba for p in points), dtype=float, count=len(points)),
            "nic": np.fromiter((p.nic for p in points), dtype=float, count=len(points)),
            "desens_total": np.fromiter((p.desens_total for p in points), dtype=float, count=len(points)),
            "puff_occurred": np.fromiter((p.puff_occurred for p in points), dtype=bool, count=len(points)),
        }

    def value_range(self) -> Tuple[float, float]:
        """Vertical domain for the DA/GABA curves.

        Spans at least ``MIN_VALUE_SPAN`` around the data midpoint, adds 10%
        padding and never leaves the unit interval.
        """

        if len(self._points) < 2:
            return 0.0, 1.0
        arrays = self.as_arrays()
        values = np.concatenate([arrays["da"], arrays["gaba"]])
        low = float(np.min(values))
        high = float(np.max(values))
        if high - low < MIN_VALUE_SPAN:
            mid = (low + high) / 2.0
            low = mid - MIN_VALUE_SPAN / 2.0
            high = mid + MIN_VALUE_SPAN / 2.0
        padding = 0.1 * (high - low)
        return max(0.0, low - padding), min(1.0, high + padding)

    def bands(self, bins: int = 60) -> List[TimelineBand]:
        """Sample nicotine and combined desensitization into ``bins`` cells."""

        n = len(self._points)
        if n < 2 or bins < 2:
            return []
        points: Sequence[TracePoint] = tuple(self._points)
        # Half-up rounding so the last bin always lands on the newest point.
        indices = np.floor(np.arange(bins) / (bins - 1) * (n - 1) + 0.5).astype(int)
        bands: List[TimelineBand] = []
        for bin_index, idx in enumerate(indices):
            point = points[int(idx)]
            bands.append(
                TimelineBand(
                    index=bin_index,
                    t=point.t,
                    nic=float(np.clip(point.nic, 0.0, 1.0)),
                    desens_total=float(np.clip(point.desens_total, 0.0, 1.0)),
                )
            )
        return bands

    def puff_times(self, window_min: float | None = None) -> List[float]:
        """Times of sampled puffs within the trailing window."""

        latest = self.latest
        if latest is None:
            return []
        span = self.window_min if window_min is None else float(window_min)
        start = latest.t - span
        return [p.t for p in self._points if p.puff_occurred and start <= p.t <= latest.t]


__all__ = ["BATCH_CAP", "TimelineBand", "TracePoint", "TraceBuffer", "WINDOW_MIN"]
