"""
Domain Models and Business Logic

This package contains the core domain types for unitrace:
- Tracing backends and lifecycle states
- Configuration schema and extracted settings
- Exception hierarchy
"""

from unitrace.core.domain.config_schema import TracingSettings, extract_tracing_settings
from unitrace.core.domain.enums import ServiceState, TracingBackend
from unitrace.core.domain.errors import (
    ConfigError,
    InitError,
    ShutdownError,
    TracingError,
    UnitraceError,
)

__all__ = [
    "TracingSettings",
    "extract_tracing_settings",
    "ServiceState",
    "TracingBackend",
    "UnitraceError",
    "ConfigError",
    "InitError",
    "TracingError",
    "ShutdownError",
]
