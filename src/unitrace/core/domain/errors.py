"""Domain-specific exception types for unitrace."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict


@dataclass
class UnitraceError(Exception):
    """Base exception for unitrace domain errors."""

    message: str
    code: str = "unitrace_error"
    details: Dict[str, Any] | None = None

    def __post_init__(self) -> None:
        super().__init__(self.message)
        if self.details is None:
            self.details = {}


class ConfigError(UnitraceError):
    """Error raised when the tracing configuration cannot be extracted."""

    def __init__(self, message: str, *, details: Dict[str, Any] | None = None) -> None:
        super().__init__(message=message, code="config_error", details=details)


class InitError(UnitraceError):
    """Error raised when the exporter or provider cannot be constructed."""

    def __init__(self, message: str, *, details: Dict[str, Any] | None = None) -> None:
        super().__init__(message=message, code="init_error", details=details)


class TracingError(UnitraceError):
    """Error raised for tracing lifecycle misuse."""

    def __init__(self, message: str, *, details: Dict[str, Any] | None = None) -> None:
        super().__init__(message=message, code="tracing_error", details=details)


class ShutdownError(UnitraceError):
    """Error raised when flushing the tracing pipeline fails or times out.

    The service still reaches its terminal state; the caller decides whether
    the failure is fatal.
    """

    def __init__(
        self,
        message: str,
        *,
        timeout: float | None = None,
        details: Dict[str, Any] | None = None,
    ) -> None:
        details = dict(details or {})
        if timeout is not None:
            details.setdefault("timeout_seconds", timeout)
        self.timeout = timeout
        super().__init__(message=message, code="shutdown_error", details=details)


def error_payload(error: UnitraceError, extra: Dict[str, Any] | None = None) -> Dict[str, Any]:
    """Convert a UnitraceError into a flat dict suitable for structured logs."""
    payload = {
        "error": str(error),
        "error_type": type(error).__name__,
        "error_code": error.code,
        "details": error.details or {},
    }
    if extra:
        payload.update(extra)
    return payload
