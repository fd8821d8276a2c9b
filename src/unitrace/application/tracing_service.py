"""
Tracing Service
===============

Lifecycle component for process tracing.

Responsibilities:
- Extract the tracing settings from the process configuration
- Build the exporter and batching TracerProvider (OpenTelemetry backend)
- Select one tracer variant and install it as the process tracer
- Wait for the stop signal and flush the pipeline within a bounded timeout

Construction is the initialization barrier: once ``TracingService(...)``
returns, the selected tracer is installed and request tasks may start.

Usage:
    service = TracingService(config)
    stop = asyncio.Event()
    run_task = asyncio.create_task(service.run(stop))
    ...
    stop.set()
    await run_task  # raises ShutdownError if the flush failed or timed out
"""

from __future__ import annotations

import asyncio
import threading
from collections.abc import Callable, Mapping
from typing import Any

import opentracing
import structlog
from opentelemetry import trace
from opentelemetry.context import Context
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.trace import SpanKind

from unitrace.core.domain.config_schema import TracingSettings, extract_tracing_settings
from unitrace.core.domain.enums import ServiceState, TracingBackend
from unitrace.core.domain.errors import InitError, ShutdownError, TracingError, error_payload
from unitrace.core.interfaces.logging import LoggerProtocol
from unitrace.core.interfaces.tracing import SpanProtocol, TracerProtocol
from unitrace.infrastructure.tracing.exporters import ExporterFactory, otlp_exporter_factory
from unitrace.infrastructure.tracing.opentracing_tracer import OpenTracingTracer
from unitrace.infrastructure.tracing.otel_tracer import (
    OpenTelemetryTracer,
    build_tracer_provider,
)
from unitrace.infrastructure.tracing.registry import TracerRegistry, default_registry

logger = structlog.get_logger(__name__)

DEFAULT_SHUTDOWN_TIMEOUT = 5.0
TRACER_NAME = "unitrace"


class TracingService:
    """Build, install and shut down the process tracer.

    Args:
        config: Process configuration mapping containing a ``tracing`` section.
        backend: Override for ``tracing.backend``.
        collector: Override for ``tracing.collector``.
        exporter_factory: Builds the span exporter from the collector endpoint.
            Defaults to the OTLP/HTTP exporter.
        registry: Registry to install the tracer into. Defaults to the
            process-wide registry used by ``tracing_facade``.
        legacy_tracer: OpenTracing tracer for the legacy backend. Defaults to
            ``opentracing.global_tracer()``.
        shutdown_timeout: Seconds allowed for the final flush.
        set_otel_global: Also register the provider as OpenTelemetry's global
            provider so third-party instrumentation shares it.
        log: structlog-compatible logger.

    Raises:
        ConfigError: If the tracing section is absent or malformed.
        InitError: If the exporter or provider cannot be built.
        TracingError: If the registry already holds a tracer.
    """

    def __init__(
        self,
        config: Mapping[str, Any],
        *,
        backend: TracingBackend | str | None = None,
        collector: str | None = None,
        exporter_factory: ExporterFactory | None = None,
        registry: TracerRegistry | None = None,
        legacy_tracer: opentracing.Tracer | None = None,
        shutdown_timeout: float = DEFAULT_SHUTDOWN_TIMEOUT,
        set_otel_global: bool = True,
        log: LoggerProtocol | None = None,
    ) -> None:
        self._logger = (log or logger).bind(component="tracing_service")
        self._settings = extract_tracing_settings(config, backend=backend, collector=collector)
        self._registry = registry if registry is not None else default_registry
        self._shutdown_timeout = shutdown_timeout
        self._provider: TracerProvider | None = None
        self._state = ServiceState.RUNNING
        self._run_claimed = False

        self._tracer = self._build_tracer(
            exporter_factory or otlp_exporter_factory,
            legacy_tracer,
        )

        try:
            self._registry.install(self._tracer)
        except TracingError:
            self._discard_provider()
            raise

        if set_otel_global and self._settings.enabled and self._provider is not None:
            trace.set_tracer_provider(self._provider)

        self._logger.info(
            "tracing_initialized",
            backend=self._settings.backend.value,
            section=self._settings.section_path,
            enabled=self._settings.enabled,
            endpoint=self._settings.endpoint or None,
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def settings(self) -> TracingSettings:
        return self._settings

    @property
    def state(self) -> ServiceState:
        return self._state

    @property
    def tracer(self) -> TracerProtocol:
        return self._tracer

    def start(
        self,
        ctx: Context | None,
        name: str,
        *,
        kind: SpanKind | None = None,
        attributes: Mapping[str, Any] | None = None,
    ) -> tuple[Context, SpanProtocol]:
        """Start a span with the tracer selected by this service."""
        return self._tracer.start(ctx, name, kind=kind, attributes=attributes)

    def force_flush(self, timeout_millis: int = 30000) -> bool:
        """Export all finished spans without shutting down.

        Returns:
            True if the flush completed (always True without a provider)
        """
        if self._provider is None:
            return True
        return self._provider.force_flush(timeout_millis)

    async def run(self, stop: asyncio.Event) -> None:
        """
        Wait for ``stop`` and then shut the tracing pipeline down.

        The flush is bounded by ``shutdown_timeout`` and is not cancelled by
        further signals. The service reaches ``STOPPED`` in every case.

        Raises:
            TracingError: If ``run`` or ``shutdown`` was already called
            ShutdownError: If the flush failed or exceeded the timeout
        """
        self._claim_run()
        await stop.wait()

        self._begin_shutdown()
        try:
            await self._shutdown_provider_async()
        finally:
            self._state = ServiceState.STOPPED

        self._logger.info("tracing_shutdown_complete", backend=self._settings.backend.value)

    def shutdown(self) -> None:
        """
        Shut the tracing pipeline down immediately from synchronous code.

        Same guarantees as ``run`` for hosts without an event loop.

        Raises:
            TracingError: If ``run`` or ``shutdown`` was already called
            ShutdownError: If the flush failed or exceeded the timeout
        """
        self._claim_run()

        self._begin_shutdown()
        try:
            self._shutdown_provider_blocking()
        finally:
            self._state = ServiceState.STOPPED

        self._logger.info("tracing_shutdown_complete", backend=self._settings.backend.value)

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    def _build_tracer(
        self,
        exporter_factory: ExporterFactory,
        legacy_tracer: opentracing.Tracer | None,
    ) -> TracerProtocol:
        settings = self._settings

        if settings.backend is TracingBackend.OPENTRACING:
            if settings.enabled:
                return OpenTracingTracer(legacy_tracer)
            # The OpenTracing base class is the library's no-op tracer.
            return OpenTracingTracer(opentracing.Tracer())

        self._provider = self._init_tracer_provider(exporter_factory)
        if not settings.enabled:
            return OpenTelemetryTracer(trace.NoOpTracer())

        return OpenTelemetryTracer(self._provider.get_tracer(TRACER_NAME))

    def _init_tracer_provider(self, exporter_factory: ExporterFactory) -> TracerProvider:
        settings = self._settings
        try:
            exporter = exporter_factory(settings.endpoint)
        except InitError:
            raise
        except Exception as e:
            raise InitError(
                f"Failed to create span exporter: {e}",
                details={"endpoint": settings.endpoint, "error_type": type(e).__name__},
            ) from e

        try:
            return build_tracer_provider(
                exporter,
                service_name=settings.service_name,
                environment=settings.environment,
            )
        except Exception as e:
            try:
                exporter.shutdown()
            except Exception:
                self._logger.warning("span_exporter_cleanup_failed", exc_info=True)
            raise InitError(
                f"Failed to create tracer provider: {e}",
                details={"error_type": type(e).__name__},
            ) from e

    # ------------------------------------------------------------------
    # Shutdown
    # ------------------------------------------------------------------

    def _claim_run(self) -> None:
        if self._run_claimed:
            raise TracingError(
                "Tracing service cannot be run twice or restarted",
                details={"state": self._state.value},
            )
        self._run_claimed = True

    def _discard_provider(self) -> None:
        # Bounded by shutdown_timeout like a regular shutdown.
        try:
            self._shutdown_provider_blocking()
        except ShutdownError as e:
            self._logger.warning("tracing_provider_discard_failed", **error_payload(e))
        self._provider = None

    def _begin_shutdown(self) -> None:
        self._logger.info("tracing_closing", backend=self._settings.backend.value)
        self._state = ServiceState.SHUTTING_DOWN
        self._tracer.close()

    def _spawn_provider_shutdown(
        self, on_done: Callable[[BaseException | None], None]
    ) -> None:
        # Daemon thread: an exporter that never returns must not block process exit.
        provider = self._provider

        def _target() -> None:
            error: BaseException | None = None
            try:
                provider.shutdown()
            except Exception as e:
                error = e
            on_done(error)

        threading.Thread(target=_target, name="unitrace-tracing-shutdown", daemon=True).start()

    async def _shutdown_provider_async(self) -> None:
        if self._provider is None:
            return

        loop = asyncio.get_running_loop()
        finished: asyncio.Future[BaseException | None] = loop.create_future()

        def _resolve(error: BaseException | None) -> None:
            if not finished.done():
                finished.set_result(error)

        def _on_done(error: BaseException | None) -> None:
            try:
                loop.call_soon_threadsafe(_resolve, error)
            except RuntimeError:
                # Event loop already closed; nobody is waiting any more.
                pass

        self._spawn_provider_shutdown(_on_done)
        waiter = asyncio.ensure_future(
            asyncio.wait_for(finished, timeout=self._shutdown_timeout)
        )

        # Once started the flush is not re-cancellable: a cancelled task still
        # waits for completion or timeout, then re-raises the cancellation.
        cancelled = False
        while not waiter.done():
            try:
                await asyncio.wait({waiter})
            except asyncio.CancelledError:
                cancelled = True

        shutdown_error: ShutdownError | None = None
        try:
            error = waiter.result()
        except asyncio.TimeoutError as e:
            shutdown_error = self._timeout_error()
            shutdown_error.__cause__ = e
        else:
            if error is not None:
                shutdown_error = self._failure_error(error)
                shutdown_error.__cause__ = error

        if cancelled:
            if shutdown_error is not None:
                self._logger.error("tracing_shutdown_failed", **error_payload(shutdown_error))
            raise asyncio.CancelledError()
        if shutdown_error is not None:
            raise shutdown_error

    def _shutdown_provider_blocking(self) -> None:
        if self._provider is None:
            return

        finished = threading.Event()
        outcome: list[BaseException | None] = []

        def _on_done(error: BaseException | None) -> None:
            outcome.append(error)
            finished.set()

        self._spawn_provider_shutdown(_on_done)
        if not finished.wait(self._shutdown_timeout):
            raise self._timeout_error()
        if outcome[0] is not None:
            raise self._failure_error(outcome[0]) from outcome[0]

    def _timeout_error(self) -> ShutdownError:
        self._logger.warning(
            "tracing_shutdown_timeout",
            timeout_seconds=self._shutdown_timeout,
        )
        return ShutdownError(
            f"Tracing shutdown did not finish within {self._shutdown_timeout}s",
            timeout=self._shutdown_timeout,
        )

    def _failure_error(self, error: BaseException) -> ShutdownError:
        return ShutdownError(
            f"Tracing shutdown failed: {error}",
            timeout=self._shutdown_timeout,
            details={"error_type": type(error).__name__},
        )
