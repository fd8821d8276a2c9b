"""
Inert tracer variant.

Used when no tracer has been installed yet and after a tracer has been
closed. Spans satisfy the full contract with no observable side effects.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from opentelemetry.context import Context
from opentelemetry.trace import SpanKind


class NoopSpan:
    """Span that records nothing."""

    __slots__ = ()

    def end(self) -> None:
        return None

    def set_attributes(self, attributes: Mapping[str, Any]) -> None:
        return None


NOOP_SPAN = NoopSpan()


class NoopTracer:
    """Tracer whose spans are all inert. The context is returned unchanged."""

    def start(
        self,
        ctx: Context | None,
        name: str,
        *,
        kind: SpanKind | None = None,
        attributes: Mapping[str, Any] | None = None,
    ) -> tuple[Context, NoopSpan]:
        return (ctx if ctx is not None else Context()), NOOP_SPAN

    def close(self) -> None:
        return None


NOOP_TRACER = NoopTracer()
