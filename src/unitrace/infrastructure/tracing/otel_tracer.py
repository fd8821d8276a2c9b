"""
OpenTelemetry Tracer Variant

Adapts OpenTelemetry tracers and spans to the unitrace Tracer/Span
contract, and builds the batching TracerProvider that owns the exporter.

Usage:
    provider = build_tracer_provider(exporter, service_name="api")
    tracer = OpenTelemetryTracer(provider.get_tracer("unitrace"))

    ctx, span = tracer.start(None, "handle_request")
    span.set_attributes({"http.method": "GET"})
    span.end()
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import structlog
from opentelemetry import trace
from opentelemetry.context import Context
from opentelemetry.sdk.resources import SERVICE_NAME, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.trace import SpanKind

from unitrace.core.interfaces.tracing import SpanExporterProtocol, SpanProtocol
from unitrace.infrastructure.tracing.noop_tracer import NOOP_TRACER

logger = structlog.get_logger(__name__)

DEPLOYMENT_ENVIRONMENT = "deployment.environment"


def build_tracer_provider(
    exporter: SpanExporterProtocol,
    *,
    service_name: str,
    environment: str,
) -> TracerProvider:
    """
    Build a TracerProvider that batches finished spans into ``exporter``.

    The SDK's atexit hook is disabled: the owner must call ``shutdown()``
    explicitly to flush pending spans.

    Args:
        exporter: Sink for finished spans
        service_name: ``service.name`` resource attribute
        environment: ``deployment.environment`` resource attribute

    Returns:
        Configured TracerProvider
    """
    resource = Resource.create(
        {
            SERVICE_NAME: service_name,
            DEPLOYMENT_ENVIRONMENT: environment,
        }
    )
    provider = TracerProvider(resource=resource, shutdown_on_exit=False)
    provider.add_span_processor(BatchSpanProcessor(exporter))
    return provider


class OpenTelemetrySpan:
    """SpanProtocol adapter around an OpenTelemetry span."""

    def __init__(self, span: trace.Span, name: str) -> None:
        self._span = span
        self._name = name
        self._ended = False

    @property
    def name(self) -> str:
        return self._name

    @property
    def span_context(self) -> trace.SpanContext:
        return self._span.get_span_context()

    def end(self) -> None:
        if self._ended:
            logger.warning("span_end_called_twice", span_name=self._name)
            return
        self._ended = True
        self._span.end()

    def set_attributes(self, attributes: Mapping[str, Any]) -> None:
        if self._ended:
            logger.debug("span_attributes_after_end", span_name=self._name)
            return
        if not attributes:
            return
        try:
            self._span.set_attributes(dict(attributes))
        except Exception:
            # Span operations never fail outwardly.
            logger.debug(
                "span_set_attributes_failed",
                span_name=self._name,
                keys=[str(k) for k in attributes],
                exc_info=True,
            )


class OpenTelemetryTracer:
    """TracerProtocol adapter around an OpenTelemetry tracer.

    Wrapping ``trace.NoOpTracer()`` gives a tracer whose spans are all
    non-recording, which is how a disabled backend is represented.
    """

    def __init__(self, tracer: trace.Tracer) -> None:
        self._tracer = tracer
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def start(
        self,
        ctx: Context | None,
        name: str,
        *,
        kind: SpanKind | None = None,
        attributes: Mapping[str, Any] | None = None,
    ) -> tuple[Context, SpanProtocol]:
        if self._closed:
            return NOOP_TRACER.start(ctx, name)

        # ``None`` means no parent; never fall back to the implicit current context.
        parent_ctx = ctx if ctx is not None else Context()
        try:
            span = self._tracer.start_span(
                name,
                context=parent_ctx,
                kind=kind or SpanKind.INTERNAL,
                attributes=dict(attributes) if attributes else None,
            )
            new_ctx = trace.set_span_in_context(span, parent_ctx)
        except Exception:
            logger.warning("span_start_failed", span_name=name, exc_info=True)
            return NOOP_TRACER.start(ctx, name)

        return new_ctx, OpenTelemetrySpan(span, name)

    def close(self) -> None:
        self._closed = True
