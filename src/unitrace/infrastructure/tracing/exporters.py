"""
Span exporter construction.

The exporter is an external collaborator; this module only binds the
default OTLP/HTTP exporter to the configured collector endpoint. Tests and
alternative transports inject their own factory instead.
"""

from __future__ import annotations

from collections.abc import Callable
from urllib.parse import urlsplit, urlunsplit

from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter

from unitrace.core.domain.errors import InitError
from unitrace.core.interfaces.tracing import SpanExporterProtocol

ExporterFactory = Callable[[str], SpanExporterProtocol]

OTLP_TRACES_PATH = "/v1/traces"
_ALLOWED_SCHEMES = ("http", "https")


def normalize_endpoint(endpoint: str) -> str:
    """
    Validate a collector endpoint and add the OTLP traces path if missing.

    Args:
        endpoint: Collector URL such as ``http://collector:4318``

    Returns:
        Endpoint URL with a path

    Raises:
        InitError: If the endpoint is not an absolute http(s) URL
    """
    try:
        parts = urlsplit(endpoint)
        # Accessing .port validates the port component.
        _ = parts.port
    except ValueError as e:
        raise InitError(
            f"Malformed collector endpoint: {endpoint!r}",
            details={"endpoint": endpoint},
        ) from e

    if parts.scheme not in _ALLOWED_SCHEMES or not parts.hostname:
        raise InitError(
            f"Collector endpoint must be an absolute http(s) URL: {endpoint!r}",
            details={"endpoint": endpoint},
        )

    path = parts.path if parts.path not in ("", "/") else OTLP_TRACES_PATH
    return urlunsplit((parts.scheme, parts.netloc, path, parts.query, ""))


def otlp_exporter_factory(endpoint: str) -> SpanExporterProtocol:
    """
    Build an OTLP/HTTP span exporter bound to ``endpoint``.

    An empty endpoint leaves the choice to the exporter, which honours
    ``OTEL_EXPORTER_OTLP_TRACES_ENDPOINT`` and falls back to localhost.
    """
    if not endpoint:
        return OTLPSpanExporter()
    return OTLPSpanExporter(endpoint=normalize_endpoint(endpoint))
