"""
Infrastructure Layer - Tracing

This module provides the concrete tracer variants behind TracerProtocol:
- OpenTelemetry (attribute-based spans, batched export)
- OpenTracing (legacy tag-based spans)
- No-op (inert spans)

plus the process-wide tracer registry and the default exporter factory.
"""

from unitrace.infrastructure.tracing.exporters import (
    ExporterFactory,
    normalize_endpoint,
    otlp_exporter_factory,
)
from unitrace.infrastructure.tracing.noop_tracer import (
    NOOP_SPAN,
    NOOP_TRACER,
    NoopSpan,
    NoopTracer,
)
from unitrace.infrastructure.tracing.opentracing_tracer import (
    OpenTracingSpan,
    OpenTracingTracer,
    context_with_span,
    span_from_context,
)
from unitrace.infrastructure.tracing.otel_tracer import (
    OpenTelemetrySpan,
    OpenTelemetryTracer,
    build_tracer_provider,
)
from unitrace.infrastructure.tracing.registry import TracerRegistry, default_registry

__all__ = [
    # OpenTelemetry
    "OpenTelemetrySpan",
    "OpenTelemetryTracer",
    "build_tracer_provider",
    # OpenTracing
    "OpenTracingSpan",
    "OpenTracingTracer",
    "context_with_span",
    "span_from_context",
    # No-op
    "NoopSpan",
    "NoopTracer",
    "NOOP_SPAN",
    "NOOP_TRACER",
    # Wiring
    "TracerRegistry",
    "default_registry",
    "ExporterFactory",
    "normalize_endpoint",
    "otlp_exporter_factory",
]
