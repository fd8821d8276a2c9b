"""
Logging Protocol Interface.

The tracing service logs through any structlog-compatible bound logger.
Hosts that already configure structlog can pass their own logger so tracing
lifecycle events carry the host's bound context.
"""

from __future__ import annotations

from typing import Any, Protocol


class LoggerProtocol(Protocol):
    """Subset of structlog's BoundLogger used by unitrace."""

    def bind(self, **kwargs: Any) -> LoggerProtocol:
        """Return a logger with additional context bound."""
        ...

    def info(self, event: str, **kwargs: Any) -> None:
        ...

    def warning(self, event: str, **kwargs: Any) -> None:
        ...

    def error(self, event: str, **kwargs: Any) -> None:
        ...

    def debug(self, event: str, **kwargs: Any) -> None:
        ...
