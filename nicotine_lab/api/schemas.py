"""Pydantic schemas used by the public API surface."""

from __future__ import annotations

from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field

from ..engine.parameters import ParameterSet
from ..engine.pharmacodynamics import PharmacodynamicState
from ..engine.receptors import Alpha4b2State, ReceptorPool
from ..simulation import (
    BatchResult,
    DriverSnapshot,
    Preset,
    RecoveryClock,
    TickResult,
    TimelineBand,
    TracePoint,
)


# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------


class ErrorPayload(BaseModel):
    """Standard error envelope returned by API endpoints."""

    code: str = Field(..., description="Machine readable error identifier")
    message: str = Field(..., description="Human readable explanation")
    context: Dict[str, Any] = Field(default_factory=dict, description="Additional context")


# ---------------------------------------------------------------------------
# Domain views
# ---------------------------------------------------------------------------


class ReceptorPoolView(BaseModel):
    """Fractions of one α4β2 pool."""

    basal: float = Field(..., ge=0.0, le=1.0)
    activated: float = Field(..., ge=0.0, le=1.0)
    desensitized: float = Field(..., ge=0.0, le=1.0)
    dominant_state: Alpha4b2State

    @classmethod
    def from_domain(cls, pool: ReceptorPool) -> "ReceptorPoolView":
        return cls(
            basal=pool.basal,
            activated=pool.activated,
            desensitized=pool.desensitized,
            dominant_state=pool.dominant_state,
        )


class CircuitState(BaseModel):
    """Pharmacodynamic state after the most recent step."""

    nicotine: float = Field(..., ge=0.0, le=1.0)
    pool_da: ReceptorPoolView
    pool_gaba: ReceptorPoolView
    alpha7_ach_on: bool
    alpha7_glu_on: bool
    ach_drive: float
    glu_drive: float
    gaba: float
    da: float
    direct: float
    indirect: float
    desens_total: float

    @classmethod
    def from_domain(cls, state: PharmacodynamicState) -> "CircuitState":
        return cls(
            nicotine=state.nicotine,
            pool_da=ReceptorPoolView.from_domain(state.pool_da),
            pool_gaba=ReceptorPoolView.from_domain(state.pool_gaba),
            alpha7_ach_on=state.alpha7_ach_on,
            alpha7_glu_on=state.alpha7_glu_on,
            ach_drive=state.ach_drive,
            glu_drive=state.glu_drive,
            gaba=state.gaba,
            da=state.da,
            direct=state.direct,
            indirect=state.indirect,
            desens_total=state.desens_total,
        )


class Parameters(BaseModel):
    """Current kinetic parameters."""

    nicotine_half_life_min: float
    act_threshold: float
    desens_rate_da: float
    desens_rate_gaba: float
    alpha7_threshold: float
    desens_window_min: float

    @classmethod
    def from_domain(cls, params: ParameterSet) -> "Parameters":
        return cls(**params.to_dict())


class TracePointView(BaseModel):
    t: float
    da: float
    gaba: float
    nic: float
    desens_total: float
    puff_occurred: bool

    @classmethod
    def from_domain(cls, point: TracePoint) -> "TracePointView":
        return cls(
            t=point.t,
            da=point.da,
            gaba=point.gaba,
            nic=point.nic,
            desens_total=point.desens_total,
            puff_occurred=point.puff_occurred,
        )


class TimelineBandView(BaseModel):
    index: int
    t: float
    nic: float
    desens_total: float

    @classmethod
    def from_domain(cls, band: TimelineBand) -> "TimelineBandView":
        return cls(index=band.index, t=band.t, nic=band.nic, desens_total=band.desens_total)


class SessionSnapshot(BaseModel):
    """Everything a renderer needs to draw the circuit."""

    state: CircuitState
    params: Parameters
    sim_min: float
    preset: Preset
    puffs_per_min: float
    running: bool
    dominant_states: Dict[str, Alpha4b2State]
    desens_start: Dict[str, float | None]

    @classmethod
    def from_domain(cls, snapshot: DriverSnapshot) -> "SessionSnapshot":
        return cls(
            state=CircuitState.from_domain(snapshot.state),
            params=Parameters.from_domain(snapshot.params),
            sim_min=snapshot.sim_min,
            preset=snapshot.preset,
            puffs_per_min=snapshot.puffs_per_min,
            running=snapshot.running,
            dominant_states=dict(snapshot.dominant_states),
            desens_start=dict(snapshot.desens_start),
        )


class RecoveryClockView(BaseModel):
    pathway: str
    active: bool
    start_min: float | None = None
    elapsed_min: float | None = None
    window_min: float | None = None
    progress: float | None = Field(default=None, ge=0.0, le=1.0)
    remaining_min: int | None = None

    @classmethod
    def from_domain(cls, pathway: str, clock: RecoveryClock | None) -> "RecoveryClockView":
        if clock is None:
            return cls(pathway=pathway, active=False)
        return cls(
            pathway=pathway,
            active=True,
            start_min=clock.start_min,
            elapsed_min=clock.elapsed_min,
            window_min=clock.window,
            progress=clock.progress,
            remaining_min=clock.remaining_min,
        )


# ---------------------------------------------------------------------------
# Requests and responses
# ---------------------------------------------------------------------------


class PresetRequest(BaseModel):
    preset: Preset = Field(..., description="Scenario to load")


class TickRequest(BaseModel):
    dt_min: float = Field(
        ...,
        ge=0.0,
        allow_inf_nan=False,
        description="Elapsed simulated minutes since the previous frame",
    )
    puff_occurred: bool | None = Field(
        default=None,
        description="Explicit puff decision; omit to sample from the session puff rate",
    )


class TickResponse(BaseModel):
    state: CircuitState
    point: TracePointView
    sim_min: float

    @classmethod
    def from_domain(cls, result: TickResult, sim_min: float) -> "TickResponse":
        return cls(
            state=CircuitState.from_domain(result.state),
            point=TracePointView.from_domain(result.point),
            sim_min=sim_min,
        )


class AdvanceResponse(BaseModel):
    state: CircuitState
    new_points: List[TracePointView]
    sim_min: float

    @classmethod
    def from_domain(cls, result: BatchResult, sim_min: float) -> "AdvanceResponse":
        return cls(
            state=CircuitState.from_domain(result.state),
            new_points=[TracePointView.from_domain(point) for point in result.new_points],
            sim_min=sim_min,
        )


class ParameterUpdate(BaseModel):
    """Partial parameter update; snake_case names or the front-end aliases."""

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    nicotine_half_life_min: float | None = Field(default=None, alias="nicotineHalfLifeMin")
    act_threshold: float | None = Field(default=None, alias="actThreshold")
    desens_rate_da: float | None = Field(default=None, alias="desensRateDA")
    desens_rate_gaba: float | None = Field(default=None, alias="desensRateGABA")
    alpha7_threshold: float | None = Field(default=None, alias="alpha7Threshold")
    desens_window_min: float | None = Field(default=None, alias="desensWindowMin")

    def changes(self) -> Dict[str, float]:
        return self.model_dump(exclude_none=True)


class PuffRateRequest(BaseModel):
    puffs_per_min: float = Field(..., ge=0.0, le=0.5, description="Expected puffs per simulated minute")


class TraceResponse(BaseModel):
    points: List[TracePointView]
    value_min: float
    value_max: float
    bands: List[TimelineBandView]
    puff_times: List[float]
