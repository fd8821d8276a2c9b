"""
Process-wide tracer reference.

The reference is written exactly once during startup and read by arbitrary
call sites afterwards. ``install`` is the initialization barrier: worker
threads may block on ``wait`` until it has completed.
"""

from __future__ import annotations

import threading

import structlog

from unitrace.core.domain.errors import TracingError
from unitrace.core.interfaces.tracing import TracerProtocol
from unitrace.infrastructure.tracing.noop_tracer import NOOP_TRACER

logger = structlog.get_logger(__name__)


class TracerRegistry:
    """Single-assignment holder for the process tracer."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._installed = threading.Event()
        self._tracer: TracerProtocol | None = None
        self._warned = False

    @property
    def is_installed(self) -> bool:
        return self._installed.is_set()

    def install(self, tracer: TracerProtocol) -> None:
        """
        Install the process tracer.

        Raises:
            TracingError: If a tracer has already been installed
        """
        with self._lock:
            if self._tracer is not None:
                raise TracingError(
                    "A tracer has already been installed",
                    details={"installed": type(self._tracer).__name__},
                )
            self._tracer = tracer
            self._installed.set()

        logger.debug("tracer_installed", tracer=type(tracer).__name__)

    def wait(self, timeout: float | None = None) -> bool:
        """Block until a tracer is installed. Returns False on timeout."""
        return self._installed.wait(timeout)

    def get(self) -> TracerProtocol:
        """
        Return the installed tracer.

        Reading before ``install`` breaks the startup ordering contract but
        must not break the caller, so an inert tracer is returned instead.
        """
        if self._installed.is_set():
            return self._tracer  # type: ignore[return-value]

        with self._lock:
            first_read = not self._warned
            self._warned = True

        if first_read:
            logger.warning(
                "tracer_not_initialized",
                hint="Construct the TracingService before starting request tasks",
            )
        return NOOP_TRACER


# Process-wide registry used when no registry is injected.
default_registry = TracerRegistry()
