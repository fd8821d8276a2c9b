"""
Core Protocol Interfaces

Protocols for the tracing capabilities exposed to the rest of the process
and for the collaborators consumed by the tracing service.

Available Protocols:
    - SpanProtocol: End a span and attach attributes
    - TracerProtocol: Start spans from an execution context
    - SpanExporterProtocol: Export and shut down finished-span sinks
    - LoggerProtocol: Structured logging

Usage:
    from unitrace.core.interfaces import TracerProtocol

    def handle(tracer: TracerProtocol, ctx):
        ctx, span = tracer.start(ctx, "handle")
        try:
            ...
        finally:
            span.end()
"""

from unitrace.core.interfaces.logging import LoggerProtocol
from unitrace.core.interfaces.tracing import (
    SpanExporterProtocol,
    SpanProtocol,
    TracerProtocol,
)

__all__ = [
    "LoggerProtocol",
    "SpanProtocol",
    "TracerProtocol",
    "SpanExporterProtocol",
]
