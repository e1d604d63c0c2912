"""OpenTelemetry bootstrap utilities for the simulator service."""

from __future__ import annotations

from dataclasses import dataclass, field
import importlib
import logging
from typing import TYPE_CHECKING, Callable, List, Optional

from .config import TelemetryConfig

LOGGER = logging.getLogger(__name__)

if TYPE_CHECKING:  # pragma: no cover - typing only
    from fastapi import FastAPI

_SPAN_EXPORTER_MODULES = {
    "grpc": "opentelemetry.exporter.otlp.proto.grpc.trace_exporter",
    "http/protobuf": "opentelemetry.exporter.otlp.proto.http.trace_exporter",
}


def span_exporter_module(protocol: str) -> str:
    """Return the OTLP span exporter module for ``protocol``.

    Unknown protocols fall back to ``http/protobuf``, the OTLP default.
    """

    key = (protocol or "").strip().lower()
    if key not in _SPAN_EXPORTER_MODULES:
        LOGGER.warning("Unsupported OTLP protocol %r; using http/protobuf", protocol)
        key = "http/protobuf"
    return _SPAN_EXPORTER_MODULES[key]


@dataclass
class TelemetryManager:
    """Configure a tracing exporter when the SDK is available."""

    config: TelemetryConfig
    _shutdown_hooks: List[Callable[[], None]] = field(default_factory=list)
    _instrument_fastapi: Optional[Callable[["FastAPI"], None]] = None
    _enabled: bool = False

    @property
    def enabled(self) -> bool:
        return self._enabled

    def configure(self) -> None:
        if not self.config.enabled or not self.config.capture_traces:
            LOGGER.debug("Telemetry disabled by configuration")
            return
        try:
            from opentelemetry import trace
            from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
            from opentelemetry.sdk.resources import Resource
            from opentelemetry.sdk.trace import TracerProvider
            from opentelemetry.sdk.trace.export import BatchSpanProcessor
            from opentelemetry.sdk.trace.sampling import TraceIdRatioBased
            exporter_module = importlib.import_module(span_exporter_module(self.config.exporter_protocol))
        except ImportError:
            LOGGER.warning("OpenTelemetry SDK not available; telemetry disabled")
            return

        resource = Resource.create(
            {
                "service.name": self.config.service_name,
                "deployment.environment": self.config.environment,
            }
        )
        sampler = TraceIdRatioBased(max(min(self.config.sampling_ratio, 1.0), 0.0))
        provider = TracerProvider(resource=resource, sampler=sampler)
        try:
            span_exporter = exporter_module.OTLPSpanExporter(endpoint=self.config.exporter_endpoint)
            provider.add_span_processor(BatchSpanProcessor(span_exporter))
        except Exception as exc:  # pragma: no cover - exporter wiring
            LOGGER.warning("Failed to initialise OTLP span exporter: %s", exc)
            return
        trace.set_tracer_provider(provider)
        self._shutdown_hooks.append(provider.shutdown)
        LOGGER.info(
            "OpenTelemetry tracing configured (endpoint=%s, protocol=%s)",
            self.config.exporter_endpoint,
            self.config.exporter_protocol,
        )

        self._instrument_fastapi = FastAPIInstrumentor().instrument_app  # type: ignore[attr-defined]
        self._enabled = True

    def instrument_app(self, app: "FastAPI") -> None:
        if self._instrument_fastapi is None:
            return
        try:
            self._instrument_fastapi(app)
        except Exception as exc:  # pragma: no cover - instrumentation failure
            LOGGER.warning("Failed to instrument FastAPI: %s", exc)

    def shutdown(self) -> None:
        for hook in reversed(self._shutdown_hooks):
            try:
                hook()
            except Exception as exc:  # pragma: no cover - best effort cleanup
                LOGGER.debug("Telemetry shutdown hook failed: %s", exc)


def configure_telemetry(config: TelemetryConfig) -> TelemetryManager:
    manager = TelemetryManager(config=config)
    manager.configure()
    return manager


__all__ = ["TelemetryManager", "configure_telemetry", "span_exporter_module"]
