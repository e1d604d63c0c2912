"""
receptors
=========

Three-state fractional model of the α4β2 nicotinic receptor population.

Each pathway of the circuit carries one :class:`ReceptorPool` describing how
its α4β2 receptors are split between three states:

``basal``
    Resting receptors available for activation.

``activated``
    Receptors opened by nicotine.  On dopamine neurons they feed the
    *direct* pathway; on GABA interneurons they raise inhibitory tone.

``desensitized``
    Receptors that have closed in the continued presence of agonist and do
    not respond until they recover.  Desensitization of the GABA pool is what
    disinhibits dopamine output on the *indirect* pathway.

Fluxes move fractions basal → activated → desensitized → basal.  Activation
and desensitization only occur while nicotine sits above the activation
threshold; recovery runs at ``1 / desens_window_min`` per minute when
nicotine is low and at 35% of that rate while nicotine is still present.
Pools are renormalised after every update so the three fractions always sum
to one.

The α7 receptors of the circuit are not pooled: they are modelled as simple
threshold gates in :mod:`nicotine_lab.engine.pharmacodynamics`.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum

from .parameters import ParameterSet

ACTIVATION_RATE = 0.25
LOW_NICOTINE_FRACTION = 0.9
SLOW_RECOVERY_FACTOR = 0.35


def clamp01(value: float) -> float:
    """Clamp ``value`` to the closed unit interval.

    NaN is returned unchanged rather than saturating to either bound.
    """

    if math.isnan(value):
        return value
    return max(0.0, min(1.0, value))


class Alpha4b2State(str, Enum):
    """Dominant state of a receptor pool."""

    BASAL = "basal"
    ACTIVATED = "activated"
    DESENSITIZED = "desensitized"


@dataclass(frozen=True)
class ReceptorPool:
    """Fractions of one pathway's α4β2 receptors in each state."""

    basal: float = 1.0
    activated: float = 0.0
    desensitized: float = 0.0

    @property
    def total(self) -> float:
        return self.basal + self.activated + self.desensitized

    @property
    def dominant_state(self) -> Alpha4b2State:
        return dominant_state(self)

    def to_dict(self) -> dict[str, float]:
        return {
            "basal": self.basal,
            "activated": self.activated,
            "desensitized": self.desensitized,
        }


BASAL_POOL = ReceptorPool(1.0, 0.0, 0.0)


def normalize_pool(basal: float, activated: float, desensitized: float) -> ReceptorPool:
    """Build a pool whose fractions sum to one.

    Parameters
    ----------
    basal, activated, desensitized:
        Raw, possibly unnormalised fractions.

    Returns
    -------
    ReceptorPool
        The rescaled pool, or a pure basal pool when the raw sum is not
        positive.
    """

    total = basal + activated + desensitized
    if total <= 0:
        return BASAL_POOL
    return ReceptorPool(basal / total, activated / total, desensitized / total)


def dominant_state(pool: ReceptorPool) -> Alpha4b2State:
    """Return the largest fraction of ``pool``.

    Ties resolve in favour of ``desensitized``, then ``activated``.
    """

    if pool.desensitized >= pool.basal and pool.desensitized >= pool.activated:
        return Alpha4b2State.DESENSITIZED
    if pool.activated >= pool.basal and pool.activated >= pool.desensitized:
        return Alpha4b2State.ACTIVATED
    return Alpha4b2State.BASAL


def step_alpha4b2(
    dt_min: float,
    nicotine: float,
    pool: ReceptorPool,
    params: ParameterSet,
    desens_rate: float,
) -> ReceptorPool:
    """Advance one pathway's pool by ``dt_min`` simulated minutes.

    Parameters
    ----------
    dt_min:
        Non-negative time step in minutes.  ``0`` leaves the fractions
        untouched apart from renormalisation.
    nicotine:
        Post-decay nicotine level on the 0–1 proxy scale.
    pool:
        Pool at the start of the step.
    params:
        Session parameters; ``act_threshold`` and ``desens_window_min`` are
        read here.
    desens_rate:
        Pathway-specific activated → desensitized rate per minute.

    Returns
    -------
    ReceptorPool
        A new, renormalised pool.  The input pool is not modified.
    """

    basal = pool.basal
    activated = pool.activated
    desensitized = pool.desensitized

    threshold = params.act_threshold
    above_threshold = nicotine > threshold
    recover_rate = 1.0 / max(1.0, params.desens_window_min)
    nic_drive = clamp01((nicotine - threshold) / (1.0 - threshold))

    # Each flux is capped at its source fraction so nothing goes negative.
    to_active = min(basal, basal * (ACTIVATION_RATE * nic_drive if above_threshold else 0.0) * dt_min)
    basal -= to_active
    activated += to_active

    to_desens = min(activated, activated * (desens_rate if above_threshold else 0.0) * dt_min)
    activated -= to_desens
    desensitized += to_desens

    if nicotine < threshold * LOW_NICOTINE_FRACTION:
        k = recover_rate
    else:
        k = recover_rate * SLOW_RECOVERY_FACTOR
    to_basal = min(desensitized, desensitized * k * dt_min)
    desensitized -= to_basal
    basal += to_basal

    return normalize_pool(basal, activated, desensitized)


__all__ = [
    "Alpha4b2State",
    "BASAL_POOL",
    "ReceptorPool",
    "clamp01",
    "dominant_state",
    "normalize_pool",
    "step_alpha4b2",
]
