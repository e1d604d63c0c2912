"""Configuration helpers for the simulator and its HTTP service."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional

import os

from .engine.parameters import PARAMETER_FIELDS, ParameterSet
from .simulation.presets import DEFAULT_PRESET, Preset


@dataclass(slots=True)
class SimulationSettings:
    """Session defaults applied when a driver is created."""

    seed: Optional[int] = None
    preset: Preset = DEFAULT_PRESET
    parameter_overrides: Dict[str, float] = field(default_factory=dict)

    def build_parameters(self) -> ParameterSet:
        """Return the default :class:`ParameterSet` with overrides applied.

        Raises :class:`~nicotine_lab.engine.ParameterError` when an override is
        out of range.
        """

        return ParameterSet().merged(self.parameter_overrides)

    @classmethod
    def from_env(
        cls,
        env: Mapping[str, str] | None = None,
        prefix: str = "NICSIM_",
    ) -> "SimulationSettings":
        """Create settings from environment variables.

        ``<PREFIX>SEED``
            Integer seed for the puff sampler.  Unset or unparseable values
            leave the sampler unseeded.

        ``<PREFIX>PRESET``
            Scenario loaded on start-up (``single-puff``, ``repeated`` or
            ``abstinence``).

        ``<PREFIX>PARAM_<FIELD>``
            Override for a :class:`ParameterSet` field, e.g.
            ``NICSIM_PARAM_DESENS_WINDOW_MIN=30``.
        """

        env = os.environ if env is None else env

        def _parse_seed(raw: str | None) -> Optional[int]:
            if raw is None:
                return None
            try:
                return int(raw)
            except (TypeError, ValueError):
                return None

        def _parse_preset(raw: str | None) -> Preset:
            if not raw:
                return DEFAULT_PRESET
            try:
                return Preset(raw.strip().lower())
            except ValueError:
                return DEFAULT_PRESET

        overrides: Dict[str, float] = {}
        param_prefix = f"{prefix}PARAM_"
        for key, value in env.items():
            if not key.startswith(param_prefix):
                continue
            name = key[len(param_prefix) :].lower()
            if name not in PARAMETER_FIELDS:
                continue
            try:
                overrides[name] = float(value)
            except (TypeError, ValueError):
                continue

        return cls(
            seed=_parse_seed(env.get(f"{prefix}SEED")),
            preset=_parse_preset(env.get(f"{prefix}PRESET")),
            parameter_overrides=overrides,
        )


@dataclass(slots=True)
class TelemetryConfig:
    """Runtime configuration for OpenTelemetry exporters."""

    enabled: bool = False
    service_name: str = "nicotine-circuit-lab"
    environment: str = "development"
    exporter_endpoint: Optional[str] = None
    exporter_protocol: str = "http/protobuf"
    sampling_ratio: float = 0.1
    capture_traces: bool = True

    @classmethod
    def from_env(
        cls,
        env: Mapping[str, str] | None = None,
        prefix: str = "OTEL_",
    ) -> "TelemetryConfig":
        """Construct a configuration object from environment variables."""

        env = os.environ if env is None else env
        enabled_raw = env.get(f"{prefix}ENABLED") or env.get("ENABLE_TELEMETRY")
        enabled = False
        if enabled_raw is not None:
            enabled = str(enabled_raw).strip().lower() not in {"0", "false", "no"}
        endpoint = env.get(f"{prefix}EXPORTER_OTLP_ENDPOINT")
        protocol = env.get(f"{prefix}EXPORTER_OTLP_PROTOCOL")
        service_name = env.get(f"{prefix}SERVICE_NAME") or env.get("SERVICE_NAME") or "nicotine-circuit-lab"
        environment_name = env.get(f"{prefix}ENVIRONMENT") or env.get("DEPLOYMENT_ENV", "development")

        def _parse_ratio(raw: str | None, default: float) -> float:
            if raw is None:
                return default
            try:
                parsed = float(raw)
            except (TypeError, ValueError):
                return default
            if parsed <= 0.0:
                return 0.0
            if parsed >= 1.0:
                return 1.0
            return parsed

        sampling_ratio = _parse_ratio(
            env.get(f"{prefix}SAMPLING_RATIO") or env.get("OTEL_TRACES_SAMPLER_ARG"),
            0.1,
        )
        capture_traces = env.get(f"{prefix}CAPTURE_TRACES", "1").lower() not in {"0", "false", "no"}

        return cls(
            enabled=enabled or bool(endpoint),
            service_name=service_name,
            environment=environment_name,
            exporter_endpoint=endpoint,
            exporter_protocol=protocol or "http/protobuf",
            sampling_ratio=sampling_ratio,
            capture_traces=capture_traces,
        )


DEFAULT_SIMULATION_SETTINGS = SimulationSettings.from_env()
DEFAULT_TELEMETRY_CONFIG = TelemetryConfig.from_env()
