"""Test configuration and shared fixtures."""

from __future__ import annotations

import threading
from collections.abc import Callable, Iterator, Sequence
from contextlib import suppress
from typing import Any

import pytest
from opentelemetry.sdk.trace import ReadableSpan
from opentelemetry.sdk.trace.export import SpanExporter, SpanExportResult

from unitrace.application.tracing_service import TracingService
from unitrace.core.domain.enums import ServiceState
from unitrace.core.domain.errors import ShutdownError, TracingError
from unitrace.infrastructure.tracing.registry import TracerRegistry

COLLECTOR_ENDPOINT = "http://collector:14268"


class RecordingExporter(SpanExporter):
    """Exporter fake that keeps every exported batch."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.batches: list[list[ReadableSpan]] = []
        self.shutdown_calls = 0

    def export(self, spans: Sequence[ReadableSpan]) -> SpanExportResult:
        if not spans:
            return SpanExportResult.SUCCESS
        with self._lock:
            self.batches.append(list(spans))
        return SpanExportResult.SUCCESS

    def shutdown(self) -> None:
        self.shutdown_calls += 1

    def force_flush(self, timeout_millis: int = 30000) -> bool:
        return True

    @property
    def spans(self) -> list[ReadableSpan]:
        with self._lock:
            return [span for batch in self.batches for span in batch]

    def spans_named(self, name: str) -> list[ReadableSpan]:
        return [span for span in self.spans if span.name == name]


class HangingExporter(RecordingExporter):
    """Exporter fake whose shutdown never acknowledges until released."""

    def __init__(self) -> None:
        super().__init__()
        self.release = threading.Event()

    def shutdown(self) -> None:
        self.shutdown_calls += 1
        self.release.wait()


def _make_config(
    *,
    enabled: bool = True,
    endpoint: str | None = COLLECTOR_ENDPOINT,
    backend: str = "opentelemetry",
    collector: str = "jaeger",
    **tracing: Any,
) -> dict[str, Any]:
    """Build a process configuration with one collector section."""
    section: dict[str, Any] = {"enabled": enabled}
    if endpoint is not None:
        section["endpoint"] = endpoint
    return {
        "tracing": {
            "backend": backend,
            "collector": collector,
            backend: {collector: section},
            **tracing,
        }
    }


@pytest.fixture
def registry() -> TracerRegistry:
    return TracerRegistry()


@pytest.fixture
def exporter() -> RecordingExporter:
    return RecordingExporter()


@pytest.fixture
def hanging_exporter() -> Iterator[HangingExporter]:
    exporter = HangingExporter()
    yield exporter
    exporter.release.set()


@pytest.fixture
def make_service(
    registry: TracerRegistry, exporter: RecordingExporter
) -> Iterator[Callable[..., TracingService]]:
    """Factory for services wired to a private registry and a recording exporter."""
    created: list[TracingService] = []

    def _make(config: dict[str, Any] | None = None, **kwargs: Any) -> TracingService:
        kwargs.setdefault("registry", registry)
        kwargs.setdefault("exporter_factory", lambda endpoint: exporter)
        kwargs.setdefault("set_otel_global", False)
        kwargs.setdefault("shutdown_timeout", 2.0)
        service = TracingService(config if config is not None else _make_config(), **kwargs)
        created.append(service)
        return service

    yield _make

    for service in created:
        if service.state is ServiceState.RUNNING:
            with suppress(TracingError, ShutdownError):
                service.shutdown()


@pytest.fixture
def make_config() -> Callable[..., dict[str, Any]]:
    """Factory for process configurations with one collector section."""
    return _make_config
