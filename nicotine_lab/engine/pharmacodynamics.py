"""Single-step pharmacodynamic transition for the nicotine reward circuit."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict

from .parameters import ParameterSet
from .receptors import BASAL_POOL, ReceptorPool, clamp01, step_alpha4b2

PUFF_BOLUS = 0.25


@dataclass(frozen=True)
class PharmacodynamicState:
    """Snapshot of the circuit after one step.

    Only ``nicotine`` and the two pools carry over between steps; everything
    else is derived from them and recomputed on every transition.
    """

    nicotine: float
    pool_da: ReceptorPool
    pool_gaba: ReceptorPool
    alpha7_ach_on: bool
    alpha7_glu_on: bool
    ach_drive: float
    glu_drive: float
    gaba: float
    da: float
    direct: float
    indirect: float

    @property
    def desens_total(self) -> float:
        """Combined desensitization shown on the timeline bands."""

        return clamp01(0.5 * self.pool_da.desensitized + 0.5 * self.pool_gaba.desensitized)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "nicotine": self.nicotine,
            "pool_da": self.pool_da.to_dict(),
            "pool_gaba": self.pool_gaba.to_dict(),
            "alpha7_ach_on": self.alpha7_ach_on,
            "alpha7_glu_on": self.alpha7_glu_on,
            "ach_drive": self.ach_drive,
            "glu_drive": self.glu_drive,
            "gaba": self.gaba,
            "da": self.da,
            "direct": self.direct,
            "indirect": self.indirect,
        }


def step_model(
    dt_min: float,
    nicotine: float,
    pool_da: ReceptorPool,
    pool_gaba: ReceptorPool,
    puff_now: bool,
    params: ParameterSet,
) -> PharmacodynamicState:
    """Advance nicotine, both α4β2 pools and the pathway outputs by one step.

    The function is pure: identical inputs always produce an identical state.
    Callers are responsible for passing a non-negative ``dt_min``.
    """

    nic = nicotine
    if puff_now:
        nic = clamp01(nic + PUFF_BOLUS)
    nic = clamp01(nic * 0.5 ** (dt_min / params.nicotine_half_life_min))

    # Presynaptic α7 gates share a threshold but are evaluated separately.
    alpha7_ach_on = nic > params.alpha7_threshold
    alpha7_glu_on = nic > params.alpha7_threshold
    ach_drive = clamp01(0.35 + (0.45 * nic if alpha7_ach_on else 0.05))
    glu_drive = clamp01(0.3 + (0.55 * nic if alpha7_glu_on else 0.05))

    next_pool_da = step_alpha4b2(dt_min, nic, pool_da, params, params.desens_rate_da)
    next_pool_gaba = step_alpha4b2(dt_min, nic, pool_gaba, params, params.desens_rate_gaba)

    direct = clamp01(0.15 + 0.95 * next_pool_da.activated * (0.55 * ach_drive + 0.65 * glu_drive))
    gaba = clamp01(0.25 + 0.95 * next_pool_gaba.activated - 0.85 * next_pool_gaba.desensitized)
    indirect = clamp01(0.15 + 0.9 * (1.0 - gaba))
    da = clamp01(0.1 + 0.75 * direct + 0.35 * indirect)

    return PharmacodynamicState(
        nicotine=nic,
        pool_da=next_pool_da,
        pool_gaba=next_pool_gaba,
        alpha7_ach_on=alpha7_ach_on,
        alpha7_glu_on=alpha7_glu_on,
        ach_drive=ach_drive,
        glu_drive=glu_drive,
        gaba=gaba,
        da=da,
        direct=direct,
        indirect=indirect,
    )


def derive_state(
    nicotine: float,
    pool_da: ReceptorPool,
    pool_gaba: ReceptorPool,
    params: ParameterSet,
) -> PharmacodynamicState:
    """Return the state whose outputs are consistent with the given inputs."""

    return step_model(0.0, nicotine, pool_da, pool_gaba, False, params)


def advance_state(
    state: PharmacodynamicState,
    dt_min: float,
    puff_now: bool,
    params: ParameterSet,
) -> PharmacodynamicState:
    """Convenience wrapper feeding the carried-over fields of ``state``."""

    return step_model(dt_min, state.nicotine, state.pool_da, state.pool_gaba, puff_now, params)


def resting_state(params: ParameterSet) -> PharmacodynamicState:
    """Nicotine-free circuit with both pools fully basal."""

    return derive_state(0.0, BASAL_POOL, BASAL_POOL, params)


__all__ = [
    "PUFF_BOLUS",
    "PharmacodynamicState",
    "advance_state",
    "derive_state",
    "resting_state",
    "step_model",
]
