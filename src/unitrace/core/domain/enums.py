"""
Core Domain Enums

Defines the tracing backends and service lifecycle states
to eliminate magic strings throughout the codebase.
"""

from enum import Enum


class TracingBackend(str, Enum):
    """Span/tracer family selected once at process startup."""

    OPENTELEMETRY = "opentelemetry"
    OPENTRACING = "opentracing"


class ServiceState(str, Enum):
    """Lifecycle state of the tracing service."""

    RUNNING = "running"
    SHUTTING_DOWN = "shutting_down"
    STOPPED = "stopped"
