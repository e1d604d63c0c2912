"""FastAPI router exposing the simulation driver to the front-end."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Dict

from fastapi import APIRouter, Depends, HTTPException, status

from ..config import DEFAULT_SIMULATION_SETTINGS, SimulationSettings
from ..engine.parameters import ParameterError
from ..simulation import SimulationDriver, SimulationError
from . import schemas

LOGGER = logging.getLogger(__name__)


def build_driver(settings: SimulationSettings) -> SimulationDriver:
    """Create a driver from environment-derived settings."""

    return SimulationDriver(
        settings.build_parameters(),
        seed=settings.seed,
        preset=settings.preset,
    )


@dataclass
class ServiceRegistry:
    """Container bundling the session driver and its lock.

    FastAPI runs sync handlers on a worker pool, so every access to the
    driver goes through :attr:`lock`.
    """

    driver: SimulationDriver = field(default_factory=lambda: build_driver(DEFAULT_SIMULATION_SETTINGS))
    lock: threading.Lock = field(default_factory=threading.Lock)

    def configure(self, *, driver: SimulationDriver | None = None) -> None:
        if driver is not None:
            with self.lock:
                self.driver = driver


services = ServiceRegistry()


def configure_services(*, driver: SimulationDriver | None = None) -> None:
    """Configure the shared service registry used by API routes."""

    services.configure(driver=driver)


def get_services() -> ServiceRegistry:
    return services


def _http_error(status_code: int, code: str, message: str, *, context: Dict[str, object] | None = None) -> HTTPException:
    payload = schemas.ErrorPayload(code=code, message=message, context=context or {})
    return HTTPException(status_code=status_code, detail=payload.model_dump())


router = APIRouter(prefix="/session", tags=["session"])


@router.get("", response_model=schemas.SessionSnapshot)
def read_session(svc: ServiceRegistry = Depends(get_services)) -> schemas.SessionSnapshot:
    with svc.lock:
        return schemas.SessionSnapshot.from_domain(svc.driver.snapshot())


@router.post("/preset", response_model=schemas.SessionSnapshot)
def apply_preset(
    request: schemas.PresetRequest,
    svc: ServiceRegistry = Depends(get_services),
) -> schemas.SessionSnapshot:
    with svc.lock:
        svc.driver.apply_preset(request.preset)
        return schemas.SessionSnapshot.from_domain(svc.driver.snapshot())


@router.post("/reset", response_model=schemas.SessionSnapshot)
def reset_session(svc: ServiceRegistry = Depends(get_services)) -> schemas.SessionSnapshot:
    with svc.lock:
        svc.driver.reset()
        return schemas.SessionSnapshot.from_domain(svc.driver.snapshot())


@router.post("/puff", response_model=schemas.CircuitState)
def puff(svc: ServiceRegistry = Depends(get_services)) -> schemas.CircuitState:
    with svc.lock:
        return schemas.CircuitState.from_domain(svc.driver.do_puff())


@router.post("/advance", response_model=schemas.AdvanceResponse)
def advance(svc: ServiceRegistry = Depends(get_services)) -> schemas.AdvanceResponse:
    with svc.lock:
        result = svc.driver.advance60()
        return schemas.AdvanceResponse.from_domain(result, svc.driver.sim_min)


@router.post("/tick", response_model=schemas.TickResponse)
def tick(
    request: schemas.TickRequest,
    svc: ServiceRegistry = Depends(get_services),
) -> schemas.TickResponse:
    with svc.lock:
        driver = svc.driver
        try:
            if request.puff_occurred is None:
                result = driver.continuous_tick(request.dt_min)
            else:
                result = driver.tick(request.dt_min, request.puff_occurred)
        except SimulationError as exc:
            raise _http_error(status.HTTP_422_UNPROCESSABLE_ENTITY, "invalid_tick", str(exc)) from exc
        if result is None:
            raise _http_error(
                status.HTTP_409_CONFLICT,
                "session_paused",
                "Continuous mode is paused; resume the session or pass puff_occurred explicitly",
            )
        return schemas.TickResponse.from_domain(result, driver.sim_min)


@router.patch("/params", response_model=schemas.Parameters)
def update_params(
    request: schemas.ParameterUpdate,
    svc: ServiceRegistry = Depends(get_services),
) -> schemas.Parameters:
    with svc.lock:
        try:
            params = svc.driver.set_params(request.changes())
        except ParameterError as exc:
            raise _http_error(
                status.HTTP_422_UNPROCESSABLE_ENTITY,
                "invalid_parameters",
                str(exc),
                context={"fields": exc.problems},
            ) from exc
        return schemas.Parameters.from_domain(params)


@router.put("/puff-rate", response_model=schemas.SessionSnapshot)
def set_puff_rate(
    request: schemas.PuffRateRequest,
    svc: ServiceRegistry = Depends(get_services),
) -> schemas.SessionSnapshot:
    with svc.lock:
        svc.driver.set_puff_rate(request.puffs_per_min)
        return schemas.SessionSnapshot.from_domain(svc.driver.snapshot())


@router.post("/pause", response_model=schemas.SessionSnapshot)
def pause(svc: ServiceRegistry = Depends(get_services)) -> schemas.SessionSnapshot:
    with svc.lock:
        svc.driver.pause()
        return schemas.SessionSnapshot.from_domain(svc.driver.snapshot())


@router.post("/resume", response_model=schemas.SessionSnapshot)
def resume(svc: ServiceRegistry = Depends(get_services)) -> schemas.SessionSnapshot:
    with svc.lock:
        svc.driver.resume()
        return schemas.SessionSnapshot.from_domain(svc.driver.snapshot())


@router.get("/trace", response_model=schemas.TraceResponse)
def read_trace(
    bins: int = 60,
    svc: ServiceRegistry = Depends(get_services),
) -> schemas.TraceResponse:
    if bins < 2:
        raise _http_error(status.HTTP_422_UNPROCESSABLE_ENTITY, "invalid_bins", "bins must be at least 2")
    with svc.lock:
        trace = svc.driver.trace
        value_min, value_max = trace.value_range()
        return schemas.TraceResponse(
            points=[schemas.TracePointView.from_domain(point) for point in trace],
            value_min=value_min,
            value_max=value_max,
            bands=[schemas.TimelineBandView.from_domain(band) for band in trace.bands(bins)],
            puff_times=trace.puff_times(),
        )


@router.get("/recovery/{pathway}", response_model=schemas.RecoveryClockView)
def read_recovery(
    pathway: str,
    svc: ServiceRegistry = Depends(get_services),
) -> schemas.RecoveryClockView:
    with svc.lock:
        try:
            clock = svc.driver.recovery_clock(pathway)
        except SimulationError as exc:
            raise _http_error(
                status.HTTP_404_NOT_FOUND,
                "unknown_pathway",
                str(exc),
                context={"pathway": pathway},
            ) from exc
        return schemas.RecoveryClockView.from_domain(pathway, clock)


__all__ = ["ServiceRegistry", "build_driver", "configure_services", "get_services", "router", "services"]
