from __future__ import annotations

from nicotine_lab.config import TelemetryConfig
from nicotine_lab.telemetry import configure_telemetry, span_exporter_module


def test_exporter_module_follows_configured_protocol():
    assert span_exporter_module("grpc") == "opentelemetry.exporter.otlp.proto.grpc.trace_exporter"
    assert span_exporter_module("HTTP/Protobuf") == "opentelemetry.exporter.otlp.proto.http.trace_exporter"
    assert span_exporter_module("carrier-pigeon") == span_exporter_module("http/protobuf")


def test_protocol_is_read_from_environment():
    config = TelemetryConfig.from_env({"OTEL_EXPORTER_OTLP_PROTOCOL": "grpc"})

    assert span_exporter_module(config.exporter_protocol).endswith("grpc.trace_exporter")


def test_disabled_config_leaves_telemetry_off():
    manager = configure_telemetry(TelemetryConfig(enabled=False))

    assert manager.enabled is False
    manager.shutdown()
