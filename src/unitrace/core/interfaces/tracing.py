"""
Protocol definitions for tracing.

These are the only tracing types application code should depend on. The
concrete variants (OpenTelemetry, OpenTracing, no-op) live in
``unitrace.infrastructure.tracing`` and are selected once at startup.

The execution context is OpenTelemetry's immutable ``Context``: attaching an
active span produces a new context and never mutates the one passed in.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Protocol

from opentelemetry.context import Context
from opentelemetry.sdk.trace import ReadableSpan
from opentelemetry.sdk.trace.export import SpanExportResult
from opentelemetry.trace import SpanKind


class SpanProtocol(Protocol):
    """One unit of traced work."""

    def end(self) -> None:
        """Mark the span complete and hand it to the owning pipeline.

        Must be called at most once. Further calls are ignored and logged.
        """
        ...

    def set_attributes(self, attributes: Mapping[str, Any]) -> None:
        """Attach key/value pairs to the span.

        Ignored once the span has ended.
        """
        ...


class TracerProtocol(Protocol):
    """Factory for spans, independent of the active tracing backend."""

    def start(
        self,
        ctx: Context | None,
        name: str,
        *,
        kind: SpanKind | None = None,
        attributes: Mapping[str, Any] | None = None,
    ) -> tuple[Context, SpanProtocol]:
        """Start a span.

        If ``ctx`` carries an active span the new span is its child, otherwise
        a root span is created. Never raises and never returns ``None``.

        Returns:
            Tuple of (context with the new span active, span)
        """
        ...

    def close(self) -> None:
        """Stop producing recording spans; later ``start`` calls are inert."""
        ...


class SpanExporterProtocol(Protocol):
    """Sink for finished spans (OpenTelemetry ``SpanExporter`` shape)."""

    def export(self, spans: Sequence[ReadableSpan]) -> SpanExportResult:
        """Ship a batch of finished spans."""
        ...

    def shutdown(self) -> None:
        """Release resources; called once after the final export."""
        ...

    def force_flush(self, timeout_millis: int = 30000) -> bool:
        """Flush anything buffered inside the exporter."""
        ...
