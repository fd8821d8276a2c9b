"""
Tracing lifespan for async hosts.

Wraps the startup ordering the tracing service relies on: the service is
constructed (and the tracer installed) before the body runs, ``run`` is
driven by a background task, and leaving the block triggers the bounded
flush.

Usage:
    @asynccontextmanager
    async def lifespan(app):
        async with tracing_lifespan(load_config_file("config.yaml")):
            yield
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Mapping
from contextlib import asynccontextmanager
from typing import Any

import structlog

from unitrace.application.tracing_service import TracingService
from unitrace.core.domain.errors import ShutdownError, TracingError, error_payload

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def tracing_lifespan(
    config: Mapping[str, Any],
    *,
    raise_on_shutdown_error: bool = False,
    **service_kwargs: Any,
) -> AsyncIterator[TracingService]:
    """
    Run a TracingService for the duration of the block.

    Args:
        config: Process configuration mapping
        raise_on_shutdown_error: Re-raise ShutdownError after logging it
        **service_kwargs: Forwarded to TracingService

    Yields:
        The running TracingService

    Raises:
        ConfigError, InitError: From service construction
        ShutdownError: Only if ``raise_on_shutdown_error`` is set
    """
    service = TracingService(config, **service_kwargs)
    stop = asyncio.Event()
    run_task = asyncio.create_task(service.run(stop), name="unitrace-tracing-run")

    try:
        yield service
    finally:
        stop.set()
        try:
            await run_task
        except ShutdownError as e:
            logger.error("tracing_shutdown_failed", **error_payload(e))
            if raise_on_shutdown_error:
                raise
        except TracingError as e:
            # The body already called service.shutdown().
            logger.warning("tracing_run_rejected", **error_payload(e))
