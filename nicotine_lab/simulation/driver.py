"""Session driver owning the circuit state, the puff sampler and the timeline."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, Mapping, Tuple

import numpy as np

from ..engine.parameters import DEFAULT_PARAMETERS, ParameterError, ParameterSet
from ..engine.pharmacodynamics import PharmacodynamicState, advance_state
from ..engine.receptors import Alpha4b2State, clamp01, dominant_state
from .presets import DEFAULT_PRESET, Preset, get_preset
from .recovery import RecoveryClock
from .trace import TraceBuffer, TracePoint

LOGGER = logging.getLogger(__name__)

PATHWAYS: Tuple[str, ...] = ("da", "gaba")
BATCH_STEPS = 60
BATCH_DT_MIN = 1.0


class SimulationError(Exception):
    """Raised when the driver is asked to do something outside its input domain."""


@dataclass(frozen=True)
class TickResult:
    """State and timeline sample produced by one continuous-mode tick."""

    state: PharmacodynamicState
    point: TracePoint


@dataclass(frozen=True)
class BatchResult:
    """Outcome of a fast-forward batch."""

    state: PharmacodynamicState
    new_points: Tuple[TracePoint, ...]


@dataclass(frozen=True)
class DriverSnapshot:
    """Read-only view handed to renderers after each operation."""

    state: PharmacodynamicState
    params: ParameterSet
    sim_min: float
    preset: Preset
    puffs_per_min: float
    running: bool
    dominant_states: Dict[str, Alpha4b2State]
    desens_start: Dict[str, float | None]


def _checked_dt(dt_min: float) -> float:
    dt = float(dt_min)
    if not math.isfinite(dt) or dt < 0:
        raise SimulationError(f"dt_min must be a non-negative number (received {dt_min!r})")
    return dt


def _pool_states(state: PharmacodynamicState) -> Dict[str, Alpha4b2State]:
    return {"da": dominant_state(state.pool_da), "gaba": dominant_state(state.pool_gaba)}


def _next_marks(
    marks: Mapping[str, float | None],
    state: PharmacodynamicState,
    now_min: float,
) -> Dict[str, float | None]:
    updated: Dict[str, float | None] = {}
    for pathway, current in _pool_states(state).items():
        if current is Alpha4b2State.DESENSITIZED:
            previous = marks.get(pathway)
            updated[pathway] = now_min if previous is None else previous
        else:
            updated[pathway] = None
    return updated


class SimulationDriver:
    """Drive :func:`~nicotine_lab.engine.step_model` in the three operating modes.

    The driver is the single owner of the session: parameters, circuit state,
    simulated clock, puff rate, trace buffer and desensitization marks.  Every
    public operation runs to completion and commits all of those fields
    together, so callers never observe a half-applied step.

    Parameters
    ----------
    params:
        Initial :class:`ParameterSet`; defaults to the published constants.
    rng:
        Random generator used for continuous-mode puff sampling.  Pass a
        seeded ``numpy.random.Generator`` (or ``seed``) for reproducible runs.
    seed:
        Seed for a fresh ``numpy.random.default_rng`` when ``rng`` is omitted.
    preset:
        Scenario loaded on construction.
    """

    def __init__(
        self,
        params: ParameterSet | None = None,
        *,
        rng: np.random.Generator | None = None,
        seed: int | None = None,
        preset: Preset | str = DEFAULT_PRESET,
    ) -> None:
        self._params = params or DEFAULT_PARAMETERS
        self._rng = rng if rng is not None else np.random.default_rng(seed)
        self._trace = TraceBuffer()
        self._running = True
        self.apply_preset(preset)

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def state(self) -> PharmacodynamicState:
        return self._state

    @property
    def params(self) -> ParameterSet:
        return self._params

    @property
    def sim_min(self) -> float:
        return self._sim_min

    @property
    def preset(self) -> Preset:
        return self._preset

    @property
    def puffs_per_min(self) -> float:
        return self._puffs_per_min

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def trace(self) -> TraceBuffer:
        """Timeline buffer; callers must treat it as read-only."""

        return self._trace

    @property
    def desens_start(self) -> Dict[str, float | None]:
        return dict(self._desens_start)

    def snapshot(self) -> DriverSnapshot:
        return DriverSnapshot(
            state=self._state,
            params=self._params,
            sim_min=self._sim_min,
            preset=self._preset,
            puffs_per_min=self._puffs_per_min,
            running=self._running,
            dominant_states=_pool_states(self._state),
            desens_start=dict(self._desens_start),
        )

    def recovery_clock(self, pathway: str) -> RecoveryClock | None:
        """Recovery progress for ``pathway`` (``"da"`` or ``"gaba"``)."""

        if pathway not in PATHWAYS:
            raise SimulationError(f"Unknown pathway '{pathway}'; expected one of {list(PATHWAYS)}")
        start = self._desens_start[pathway]
        if start is None:
            return None
        return RecoveryClock(start_min=start, now_min=self._sim_min, window_min=self._params.desens_window_min)

    # ------------------------------------------------------------------
    # Session control
    # ------------------------------------------------------------------

    def apply_preset(self, preset: Preset | str) -> None:
        """Load a canonical scenario, clearing the timeline and the clock."""

        try:
            name = Preset(preset)
        except ValueError as exc:
            raise SimulationError(f"Unknown preset '{preset}'") from exc
        config = get_preset(name)
        state = config.initial_state(self._params)
        marks = _next_marks({}, state, 0.0)

        self._trace.clear()
        self._state = state
        self._sim_min = 0.0
        self._puffs_per_min = config.puffs_per_min
        self._preset = name
        self._desens_start = marks
        LOGGER.debug("Applied preset %s (puffs_per_min=%.2f)", name.value, config.puffs_per_min)

    def reset(self) -> None:
        """Return to session defaults; parameters are left untouched."""

        self.apply_preset(DEFAULT_PRESET)
        LOGGER.info("Simulation session reset")

    def set_params(self, update: Mapping[str, float]) -> ParameterSet:
        """Merge a partial update into the parameters; rejects invalid values."""

        try:
            merged = self._params.merged(update)
        except ParameterError as exc:
            LOGGER.warning("Rejected parameter update %s: %s", dict(update), exc)
            raise
        self._params = merged
        LOGGER.debug("Parameters updated: %s", merged)
        return merged

    def set_puff_rate(self, puffs_per_min: float) -> None:
        rate = float(puffs_per_min)
        if not math.isfinite(rate) or rate < 0:
            raise SimulationError(f"Puff rate must be a non-negative number (received {puffs_per_min!r})")
        self._puffs_per_min = rate

    def pause(self) -> None:
        self._running = False

    def resume(self) -> None:
        self._running = True

    # ------------------------------------------------------------------
    # Stepping
    # ------------------------------------------------------------------

    def tick(self, dt_min: float, puff_occurred: bool) -> TickResult:
        """Advance by ``dt_min`` minutes and record one timeline point.

        This is the primitive the frame scheduler calls; the puff decision is
        made by the caller.  Applies the rolling-window retention policy.
        """

        dt = _checked_dt(dt_min)
        state = advance_state(self._state, dt, bool(puff_occurred), self._params)
        now = self._sim_min + dt
        point = TracePoint.from_state(now, state, bool(puff_occurred))
        marks = _next_marks(self._desens_start, state, now)

        self._trace.append(point)
        self._state = state
        self._sim_min = now
        self._desens_start = marks
        return TickResult(state=state, point=point)

    def sample_puff(self, dt_min: float) -> bool:
        """Bernoulli draw with probability ``clamp01(puffs_per_min * dt_min)``."""

        probability = clamp01(self._puffs_per_min * float(dt_min))
        return bool(self._rng.random() < probability)

    def continuous_tick(self, dt_min: float) -> TickResult | None:
        """Sample a puff and tick; returns ``None`` while paused."""

        if not self._running:
            return None
        # A rejected delta must not consume a draw.
        dt = _checked_dt(dt_min)
        return self.tick(dt, self.sample_puff(dt))

    def run_continuous(self, deltas: Iterable[float]) -> Iterator[TickResult]:
        """Consume a time source, yielding one result per delivered delta.

        Deltas arriving while the driver is paused are dropped.
        """

        for dt_min in deltas:
            result = self.continuous_tick(dt_min)
            if result is not None:
                yield result

    def do_puff(self) -> PharmacodynamicState:
        """Apply an instantaneous nicotine bolus with no elapsed kinetics."""

        state = advance_state(self._state, 0.0, True, self._params)
        marks = _next_marks(self._desens_start, state, self._sim_min)

        self._state = state
        self._desens_start = marks
        return state

    def advance60(self) -> BatchResult:
        """Fast-forward 60 one-minute steps without puffs as one update."""

        state = self._state
        marks = dict(self._desens_start)
        start = self._sim_min
        points = []
        for step in range(1, BATCH_STEPS + 1):
            state = advance_state(state, BATCH_DT_MIN, False, self._params)
            now = start + step * BATCH_DT_MIN
            points.append(TracePoint.from_state(now, state, False))
            marks = _next_marks(marks, state, now)

        self._trace.extend(points)
        self._state = state
        self._sim_min = points[-1].t
        self._desens_start = marks
        LOGGER.debug("Advanced %d minutes to t=%.1f (trace=%d points)", BATCH_STEPS, self._sim_min, len(self._trace))
        return BatchResult(state=state, new_points=tuple(points))


__all__ = [
    "BATCH_STEPS",
    "BatchResult",
    "DriverSnapshot",
    "PATHWAYS",
    "SimulationDriver",
    "SimulationError",
    "TickResult",
]
