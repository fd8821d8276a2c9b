"""
Configuration Schema Validation

Pydantic models for the tracing-relevant keys of the process configuration.
Only the ``tracing`` section is consumed; the rest of the configuration is
owned by the host process.

Expected layout::

    tracing:
      backend: opentelemetry
      collector: jaeger
      service_name: unitrace
      environment: production
      opentelemetry:
        jaeger:
          enabled: true
          endpoint: http://collector:14268
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError

from unitrace.core.domain.enums import TracingBackend
from unitrace.core.domain.errors import ConfigError

DEFAULT_COLLECTOR = "jaeger"
DEFAULT_SERVICE_NAME = "unitrace"
DEFAULT_ENVIRONMENT = "production"


class CollectorSectionSchema(BaseModel):
    """Schema for a ``tracing.<backend>.<collector>`` section."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    enabled: bool = Field(
        False,
        description="Whether spans are recorded and exported",
    )
    endpoint: str = Field(
        "",
        validation_alias=AliasChoices("endpoint", "address"),
        description="Collector endpoint URL (e.g. http://collector:14268)",
    )


class TracingSectionSchema(BaseModel):
    """Schema for the top-level ``tracing`` section."""

    model_config = ConfigDict(extra="ignore")

    backend: TracingBackend = Field(
        TracingBackend.OPENTELEMETRY,
        description="Span/tracer family: 'opentelemetry' or 'opentracing'",
    )
    collector: str = Field(
        DEFAULT_COLLECTOR,
        min_length=1,
        pattern="^[a-zA-Z0-9_-]+$",
        description="Name of the collector-kind subsection",
    )
    service_name: str = Field(
        DEFAULT_SERVICE_NAME,
        min_length=1,
        description="service.name resource attribute",
    )
    environment: str = Field(
        DEFAULT_ENVIRONMENT,
        min_length=1,
        description="deployment.environment resource attribute",
    )
    opentelemetry: dict[str, Any] = Field(
        default_factory=dict,
        description="Collector sections for the OpenTelemetry backend",
    )
    opentracing: dict[str, Any] = Field(
        default_factory=dict,
        description="Collector sections for the OpenTracing backend",
    )


@dataclass(frozen=True)
class TracingSettings:
    """Tracing settings extracted from the process configuration."""

    backend: TracingBackend
    collector: str
    enabled: bool = False
    endpoint: str = ""
    service_name: str = DEFAULT_SERVICE_NAME
    environment: str = DEFAULT_ENVIRONMENT

    @property
    def section_path(self) -> str:
        return f"tracing.{self.backend.value}.{self.collector}"


def extract_tracing_settings(
    config: Mapping[str, Any],
    *,
    backend: Optional[TracingBackend | str] = None,
    collector: Optional[str] = None,
) -> TracingSettings:
    """
    Extract tracing settings from a configuration mapping.

    Args:
        config: Parsed process configuration (must contain ``tracing``)
        backend: Override for ``tracing.backend``
        collector: Override for ``tracing.collector``

    Returns:
        Validated TracingSettings

    Raises:
        ConfigError: If the section is absent or malformed
    """
    if not isinstance(config, Mapping):
        raise ConfigError(
            "Configuration must be a mapping",
            details={"type": type(config).__name__},
        )

    raw_tracing = config.get("tracing")
    if raw_tracing is None:
        raise ConfigError("Missing 'tracing' section")

    try:
        tracing = TracingSectionSchema.model_validate(raw_tracing)
        if backend is not None:
            tracing.backend = TracingBackend(backend)
    except (ValidationError, ValueError) as e:
        raise ConfigError(
            f"Invalid 'tracing' section: {e}",
            details={"section": "tracing"},
        ) from e

    collector_name = collector or tracing.collector
    section_path = f"tracing.{tracing.backend.value}.{collector_name}"
    sections = getattr(tracing, tracing.backend.value)

    if collector_name not in sections:
        raise ConfigError(
            f"Missing '{section_path}' section",
            details={"section": section_path},
        )

    # An empty YAML mapping ("jaeger:") parses as None; treat it as all defaults.
    raw_section = sections[collector_name] or {}
    try:
        section = CollectorSectionSchema.model_validate(raw_section)
    except ValidationError as e:
        raise ConfigError(
            f"Invalid '{section_path}' section: {e}",
            details={"section": section_path},
        ) from e

    return TracingSettings(
        backend=tracing.backend,
        collector=collector_name,
        enabled=section.enabled,
        endpoint=section.endpoint.strip(),
        service_name=tracing.service_name,
        environment=tracing.environment,
    )
