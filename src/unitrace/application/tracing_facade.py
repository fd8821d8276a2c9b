"""
Application Layer - Tracing Facade

Provides application-level access to the process tracer, maintaining clean
architecture boundaries. Application code imports from here instead of
directly from infrastructure, and never branches on the active backend.

The tracer is installed by ``TracingService``; reads before that point get
inert spans rather than errors.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from typing import Any

from opentelemetry.context import Context
from opentelemetry.trace import SpanKind

from unitrace.core.interfaces.tracing import SpanProtocol, TracerProtocol
from unitrace.infrastructure.tracing.registry import default_registry


def get_tracer() -> TracerProtocol:
    """Get the process tracer (inert until the tracing service is built)."""
    return default_registry.get()


def wait_for_tracer(timeout: float | None = None) -> bool:
    """Block until the process tracer is installed. Returns False on timeout."""
    return default_registry.wait(timeout)


def start_span(
    ctx: Context | None,
    name: str,
    *,
    kind: SpanKind | None = None,
    attributes: Mapping[str, Any] | None = None,
) -> tuple[Context, SpanProtocol]:
    """
    Start a span on the process tracer.

    Args:
        ctx: Parent context, or None for a root span
        name: Span name
        kind: Optional OpenTelemetry span kind
        attributes: Optional initial attributes

    Returns:
        Tuple of (context with the new span active, span)
    """
    return get_tracer().start(ctx, name, kind=kind, attributes=attributes)


@contextmanager
def span(
    name: str,
    ctx: Context | None = None,
    *,
    kind: SpanKind | None = None,
    attributes: Mapping[str, Any] | None = None,
) -> Iterator[tuple[Context, SpanProtocol]]:
    """
    Span context for a block of work; the span is always ended.

    Usage:
        with span("load_user", ctx, attributes={"user.id": user_id}) as (ctx, s):
            s.set_attributes({"cache.hit": False})
            ...
    """
    child_ctx, current = start_span(ctx, name, kind=kind, attributes=attributes)
    try:
        yield child_ctx, current
    finally:
        current.end()


__all__ = [
    "get_tracer",
    "wait_for_tracer",
    "start_span",
    "span",
]
