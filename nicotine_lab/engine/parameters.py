"""Operator-controlled parameters for the nicotine circuit model."""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass, fields, replace
from typing import Dict, Mapping


class ParameterError(ValueError):
    """Raised when a parameter update falls outside the declared bounds."""

    def __init__(self, message: str, problems: Mapping[str, str] | None = None) -> None:
        super().__init__(message)
        self.problems: Dict[str, str] = dict(problems or {})


# Names used by the browser front-end; accepted on partial updates.
PARAMETER_ALIASES: Mapping[str, str] = {
    "nicotineHalfLifeMin": "nicotine_half_life_min",
    "actThreshold": "act_threshold",
    "desensRateDA": "desens_rate_da",
    "desensRateGABA": "desens_rate_gaba",
    "alpha7Threshold": "alpha7_threshold",
    "desensWindowMin": "desens_window_min",
}


@dataclass(frozen=True)
class ParameterSet:
    """Kinetic constants for one simulation session.

    ``nicotine_half_life_min`` and ``desens_window_min`` are expressed in
    simulated minutes; the desensitization rates are fractions per minute.
    Thresholds share the 0–1 scale of the nicotine proxy.
    """

    nicotine_half_life_min: float = 120.0
    act_threshold: float = 0.15
    desens_rate_da: float = 0.03
    desens_rate_gaba: float = 0.04
    alpha7_threshold: float = 0.08
    desens_window_min: float = 45.0

    def __post_init__(self) -> None:
        problems = _check_bounds(self)
        if problems:
            detail = ", ".join(f"{name} {reason}" for name, reason in problems.items())
            raise ParameterError(f"Invalid parameters: {detail}", problems)

    def merged(self, update: Mapping[str, float]) -> "ParameterSet":
        """Return a copy with ``update`` applied.

        Keys may use either the snake_case field names or the camelCase
        aliases in :data:`PARAMETER_ALIASES`.  Unknown keys and values outside
        the declared bounds raise :class:`ParameterError`; ``self`` is never
        modified.
        """

        changes: Dict[str, float] = {}
        problems: Dict[str, str] = {}
        for raw_key, raw_value in update.items():
            key = canonical_parameter_name(raw_key)
            if key is None:
                problems[str(raw_key)] = "is not a recognised parameter"
                continue
            try:
                changes[key] = float(raw_value)
            except (TypeError, ValueError):
                problems[key] = f"must be numeric (received {raw_value!r})"
        if problems:
            detail = ", ".join(f"{name} {reason}" for name, reason in problems.items())
            raise ParameterError(f"Invalid parameter update: {detail}", problems)
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


def canonical_parameter_name(name: str) -> str | None:
    """Return the dataclass field name for ``name`` or ``None`` when unknown."""

    if name in PARAMETER_ALIASES:
        return PARAMETER_ALIASES[name]
    candidate = name.strip().lower()
    if candidate in PARAMETER_FIELDS:
        return candidate
    return None


def _check_bounds(params: ParameterSet) -> Dict[str, str]:
    problems: Dict[str, str] = {}
    for spec in fields(params):
        value = getattr(params, spec.name)
        if not isinstance(value, (int, float)) or not math.isfinite(value):
            problems[spec.name] = "must be a finite number"
    if problems:
        return problems

    if params.nicotine_half_life_min <= 0:
        problems["nicotine_half_life_min"] = "must be greater than 0"
    if not 0.0 <= params.act_threshold < 1.0:
        problems["act_threshold"] = "must lie in [0, 1)"
    if params.desens_rate_da < 0:
        problems["desens_rate_da"] = "must be non-negative"
    if params.desens_rate_gaba < 0:
        problems["desens_rate_gaba"] = "must be non-negative"
    if not 0.0 <= params.alpha7_threshold <= 1.0:
        problems["alpha7_threshold"] = "must lie in [0, 1]"
    if params.desens_window_min < 1:
        problems["desens_window_min"] = "must be at least 1 minute"
    return problems


PARAMETER_FIELDS: tuple[str, ...] = tuple(spec.name for spec in fields(ParameterSet))
DEFAULT_PARAMETERS = ParameterSet()


__all__ = [
    "DEFAULT_PARAMETERS",
    "PARAMETER_ALIASES",
    "PARAMETER_FIELDS",
    "ParameterError",
    "ParameterSet",
    "canonical_parameter_name",
]
