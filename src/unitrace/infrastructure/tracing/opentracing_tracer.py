"""
OpenTracing Tracer Variant

Adapts a legacy, tag-based OpenTracing tracer to the unitrace Tracer/Span
contract. The legacy tracer is initialized and shut down by its own owner;
this module only starts, tags and finishes spans.

The active OpenTracing span travels in the same immutable OpenTelemetry
``Context`` the rest of the package uses, under a private key.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import opentracing
import structlog
from opentelemetry.context import Context, create_key, get_value, set_value
from opentelemetry.trace import SpanKind
from opentracing.ext import tags as ot_tags

from unitrace.core.interfaces.tracing import SpanProtocol
from unitrace.infrastructure.tracing.noop_tracer import NOOP_TRACER

logger = structlog.get_logger(__name__)

_ACTIVE_SPAN_KEY = create_key("unitrace-opentracing-span")

_SPAN_KIND_TAGS = {
    SpanKind.CLIENT: ot_tags.SPAN_KIND_RPC_CLIENT,
    SpanKind.SERVER: ot_tags.SPAN_KIND_RPC_SERVER,
    SpanKind.PRODUCER: ot_tags.SPAN_KIND_PRODUCER,
    SpanKind.CONSUMER: ot_tags.SPAN_KIND_CONSUMER,
}


def span_from_context(ctx: Context | None) -> opentracing.Span | None:
    """Return the active OpenTracing span carried by ``ctx``, if any."""
    if ctx is None:
        return None
    return get_value(_ACTIVE_SPAN_KEY, ctx)


def context_with_span(span: opentracing.Span, ctx: Context | None = None) -> Context:
    """Return a new context with ``span`` active; ``ctx`` is not modified."""
    return set_value(_ACTIVE_SPAN_KEY, span, ctx if ctx is not None else Context())


def _as_tags(attributes: Mapping[Any, Any]) -> dict[str, Any]:
    # Legacy tags are flat strings: typed keys degrade to their str() form.
    return {str(key): value for key, value in attributes.items()}


class OpenTracingSpan:
    """SpanProtocol adapter around an OpenTracing span."""

    def __init__(self, span: opentracing.Span, name: str) -> None:
        self._span = span
        self._name = name
        self._ended = False

    @property
    def name(self) -> str:
        return self._name

    @property
    def span(self) -> opentracing.Span:
        return self._span

    def end(self) -> None:
        if self._ended:
            logger.warning("span_end_called_twice", span_name=self._name)
            return
        self._ended = True
        self._span.finish()

    def set_attributes(self, attributes: Mapping[Any, Any]) -> None:
        if self._ended:
            logger.debug("span_attributes_after_end", span_name=self._name)
            return
        for key, value in _as_tags(attributes or {}).items():
            try:
                self._span.set_tag(key, value)
            except Exception:
                logger.debug(
                    "span_set_tag_failed",
                    span_name=self._name,
                    key=key,
                    exc_info=True,
                )


class OpenTracingTracer:
    """TracerProtocol adapter around an OpenTracing tracer.

    Args:
        tracer: Legacy tracer to delegate to. If omitted, the tracer
            registered with ``opentracing.set_global_tracer`` is looked up on
            every ``start`` so late registration by its owner is honoured.
    """

    def __init__(self, tracer: opentracing.Tracer | None = None) -> None:
        self._tracer = tracer
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def tracer(self) -> opentracing.Tracer:
        return self._tracer if self._tracer is not None else opentracing.global_tracer()

    def start(
        self,
        ctx: Context | None,
        name: str,
        *,
        kind: SpanKind | None = None,
        attributes: Mapping[Any, Any] | None = None,
    ) -> tuple[Context, SpanProtocol]:
        if self._closed:
            return NOOP_TRACER.start(ctx, name)

        tags = _as_tags(attributes or {})
        if kind in _SPAN_KIND_TAGS:
            tags[ot_tags.SPAN_KIND] = _SPAN_KIND_TAGS[kind]

        try:
            span = self.tracer.start_span(
                operation_name=name,
                child_of=span_from_context(ctx),
                tags=tags or None,
                ignore_active_span=True,
            )
        except Exception:
            logger.warning("span_start_failed", span_name=name, exc_info=True)
            return NOOP_TRACER.start(ctx, name)

        return context_with_span(span, ctx), OpenTracingSpan(span, name)

    def close(self) -> None:
        self._closed = True
