"""Telemetry configuration loaded from the environment."""

from __future__ import annotations

import os
from functools import lru_cache
from typing import Any

from pydantic import BaseModel, Field

from .logger import init_logging
from .metrics import init_metrics
from .tracer import init_tracing

TRUTHY = {"1", "true", "yes", "on"}

_FLAG_ENV: dict[str, tuple[str, ...]] = {
    "enable_tracing": ("BATTLESHIPS_ENABLE_TRACING", "OTEL_TRACES_ENABLED"),
    "enable_metrics": ("BATTLESHIPS_ENABLE_METRICS", "OTEL_METRICS_ENABLED"),
    "enable_logging": ("BATTLESHIPS_ENABLE_LOGGING", "OTEL_LOGS_ENABLED"),
}

# field -> (signal specific variable, path appended to OTEL_EXPORTER_OTLP_ENDPOINT)
_ENDPOINT_ENV: dict[str, tuple[str, str]] = {
    "otlp_traces_endpoint": ("OTEL_EXPORTER_OTLP_TRACES_ENDPOINT", "v1/traces"),
    "otlp_metrics_endpoint": ("OTEL_EXPORTER_OTLP_METRICS_ENDPOINT", "v1/metrics"),
    "otlp_logs_endpoint": ("OTEL_EXPORTER_OTLP_LOGS_ENDPOINT", "v1/logs"),
}

_ENABLED_BY_ENDPOINT = {
    "otlp_traces_endpoint": "enable_tracing",
    "otlp_metrics_endpoint": "enable_metrics",
    "otlp_logs_endpoint": "enable_logging",
}


class TelemetryConfig(BaseModel):
    """Which telemetry signals to export, and where."""

    enable_tracing: bool = False
    enable_metrics: bool = False
    enable_logging: bool = False
    otlp_traces_endpoint: str | None = None
    otlp_metrics_endpoint: str | None = None
    otlp_logs_endpoint: str | None = None
    service_name: str = "battleships"
    service_namespace: str = "game"
    resource_attributes: dict[str, str] = Field(default_factory=dict)

    @property
    def resource(self) -> dict[str, str]:
        """Attributes describing this service on every exported signal."""
        attributes = {
            "service.name": self.service_name,
            "service.namespace": self.service_namespace,
        }
        attributes.update(self.resource_attributes)
        return attributes

    @classmethod
    def from_env(cls, **overrides: Any) -> TelemetryConfig:
        """Build a config from ``BATTLESHIPS_*`` and standard ``OTEL_*`` variables."""
        data: dict[str, Any] = {}

        for field, names in _FLAG_ENV.items():
            for name in names:
                value = os.getenv(name)
                if value is not None:
                    data[field] = value.strip().lower() in TRUTHY
                    break

        base_endpoint = os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT")
        for field, (name, suffix) in _ENDPOINT_ENV.items():
            endpoint = os.getenv(name)
            if not endpoint and base_endpoint:
                endpoint = f"{base_endpoint.rstrip('/')}/{suffix}"
            if endpoint:
                data[field] = endpoint

        if os.getenv("OTEL_SERVICE_NAME"):
            data["service_name"] = os.environ["OTEL_SERVICE_NAME"]
        if os.getenv("OTEL_SERVICE_NAMESPACE"):
            data["service_namespace"] = os.environ["OTEL_SERVICE_NAMESPACE"]

        resource_env = os.getenv("OTEL_RESOURCE_ATTRIBUTES", "")
        attributes: dict[str, str] = {}
        for part in resource_env.split(","):
            key, sep, value = part.partition("=")
            if sep and key.strip():
                attributes[key.strip()] = value.strip()
        if attributes:
            data["resource_attributes"] = attributes

        data.update(overrides)

        # A configured endpoint switches its exporter on.
        for endpoint_field, flag in _ENABLED_BY_ENDPOINT.items():
            if data.get(endpoint_field):
                data[flag] = True

        return cls(**data)


@lru_cache(maxsize=1)
def load_telemetry_config() -> TelemetryConfig:
    """Load and cache telemetry config from the environment."""
    return TelemetryConfig.from_env()


def init_telemetry(config: TelemetryConfig | None = None) -> TelemetryConfig:
    """Start the telemetry signals the config enables."""
    resolved = config or load_telemetry_config()
    if resolved.enable_tracing:
        init_tracing(resolved)
    if resolved.enable_metrics:
        init_metrics(resolved)
    if resolved.enable_logging:
        init_logging(resolved)
    return resolved
