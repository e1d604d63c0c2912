"""
nicotine_lab.engine
===================

Core computational primitives of the nicotine circuit simulator.  The
package separates three concerns:

* :mod:`parameters` holds the operator-controlled :class:`ParameterSet` and
  its validation rules;
* :mod:`receptors` implements the three-state α4β2 receptor pool and its
  kinetics for a single pathway;
* :mod:`pharmacodynamics` combines nicotine decay, the α7 presynaptic gates,
  both receptor pools and the direct/indirect pathway formulas into one pure
  transition, :func:`step_model`.

Everything in this package is a pure function of its inputs.  Session state,
puff sampling and the timeline buffer live in :mod:`nicotine_lab.simulation`.
"""

from .parameters import DEFAULT_PARAMETERS, ParameterError, ParameterSet  # noqa: F401
from .pharmacodynamics import (  # noqa: F401
    PharmacodynamicState,
    advance_state,
    derive_state,
    resting_state,
    step_model,
)
from .receptors import (  # noqa: F401
    Alpha4b2State,
    BASAL_POOL,
    ReceptorPool,
    clamp01,
    dominant_state,
    normalize_pool,
    step_alpha4b2,
)

__all__ = [
    "Alpha4b2State",
    "BASAL_POOL",
    "DEFAULT_PARAMETERS",
    "ParameterError",
    "ParameterSet",
    "PharmacodynamicState",
    "ReceptorPool",
    "advance_state",
    "clamp01",
    "derive_state",
    "dominant_state",
    "normalize_pool",
    "resting_state",
    "step_alpha4b2",
    "step_model",
]
