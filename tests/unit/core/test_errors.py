"""Unit tests for the unitrace exception hierarchy."""

from __future__ import annotations

import pytest

from unitrace.core.domain.errors import (
    ConfigError,
    InitError,
    ShutdownError,
    TracingError,
    UnitraceError,
    error_payload,
)


@pytest.mark.parametrize(
    ("error_cls", "code"),
    [
        (ConfigError, "config_error"),
        (InitError, "init_error"),
        (TracingError, "tracing_error"),
        (ShutdownError, "shutdown_error"),
    ],
)
def test_codes_and_hierarchy(error_cls: type[UnitraceError], code: str) -> None:
    error = error_cls("boom")

    assert isinstance(error, UnitraceError)
    assert error.code == code
    assert error.details == {}
    assert str(error) == "boom"


def test_shutdown_error_records_timeout() -> None:
    error = ShutdownError("too slow", timeout=5.0, details={"error_type": "TimeoutError"})

    assert error.timeout == 5.0
    assert error.details == {"timeout_seconds": 5.0, "error_type": "TimeoutError"}


def test_error_payload() -> None:
    payload = error_payload(InitError("bad endpoint", details={"endpoint": "x"}), {"phase": "init"})

    assert payload == {
        "error": "bad endpoint",
        "error_type": "InitError",
        "error_code": "init_error",
        "details": {"endpoint": "x"},
        "phase": "init",
    }
