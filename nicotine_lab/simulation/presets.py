"""Canonical starting scenarios for a simulation session."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Mapping

from ..engine.parameters import ParameterSet
from ..engine.pharmacodynamics import PharmacodynamicState, derive_state
from ..engine.receptors import BASAL_POOL, ReceptorPool, normalize_pool


class Preset(str, Enum):
    """Scenario names exposed to the front-end."""

    SINGLE_PUFF = "single-puff"
    REPEATED = "repeated"
    ABSTINENCE = "abstinence"


DEFAULT_PRESET = Preset.SINGLE_PUFF


@dataclass(frozen=True)
class PresetConfig:
    """Initial conditions and puff rate of a preset."""

    puffs_per_min: float
    nicotine: float
    pool_da: ReceptorPool
    pool_gaba: ReceptorPool
    description: str

    def initial_state(self, params: ParameterSet) -> PharmacodynamicState:
        return derive_state(self.nicotine, self.pool_da, self.pool_gaba, params)


_PRESETS: Dict[Preset, PresetConfig] = {
    Preset.SINGLE_PUFF: PresetConfig(
        puffs_per_min=0.0,
        nicotine=0.0,
        pool_da=BASAL_POOL,
        pool_gaba=BASAL_POOL,
        description="Nicotine-naive circuit; trigger puffs manually.",
    ),
    Preset.REPEATED: PresetConfig(
        puffs_per_min=0.18,
        nicotine=0.0,
        pool_da=BASAL_POOL,
        pool_gaba=BASAL_POOL,
        description="Stochastic puffing at roughly one puff every five to six minutes.",
    ),
    Preset.ABSTINENCE: PresetConfig(
        puffs_per_min=0.0,
        nicotine=0.02,
        pool_da=normalize_pool(0.35, 0.05, 0.60),
        pool_gaba=normalize_pool(0.40, 0.05, 0.55),
        description="Residual nicotine with both pools mostly desensitized, ready to recover.",
    ),
}


def available_presets() -> Mapping[Preset, PresetConfig]:
    """Return the preset configurations shipped with the simulator."""

    return dict(_PRESETS)


def get_preset(preset: Preset | str) -> PresetConfig:
    """Look up a preset by enum member or value; raises ``ValueError`` when unknown."""

    return _PRESETS[Preset(preset)]


__all__ = ["DEFAULT_PRESET", "Preset", "PresetConfig", "available_presets", "get_preset"]
