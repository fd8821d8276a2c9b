"""
Unit tests for tracing settings extraction.

Tests cover:
- Defaults for enabled/endpoint and process identity
- The ``address`` alias for the collector endpoint
- Backend/collector selection and overrides
- ConfigError for absent or malformed sections
"""

from __future__ import annotations

import pytest

from unitrace.core.domain.config_schema import TracingSettings, extract_tracing_settings
from unitrace.core.domain.enums import TracingBackend
from unitrace.core.domain.errors import ConfigError


class TestExtractTracingSettings:
    """Tests for extract_tracing_settings."""

    def test_enabled_section(self) -> None:
        config = {
            "tracing": {
                "opentelemetry": {
                    "jaeger": {"enabled": True, "endpoint": "http://collector:14268"}
                }
            }
        }

        settings = extract_tracing_settings(config)

        assert settings == TracingSettings(
            backend=TracingBackend.OPENTELEMETRY,
            collector="jaeger",
            enabled=True,
            endpoint="http://collector:14268",
            service_name="unitrace",
            environment="production",
        )
        assert settings.section_path == "tracing.opentelemetry.jaeger"

    def test_enabled_defaults_to_false(self) -> None:
        settings = extract_tracing_settings({"tracing": {"opentelemetry": {"jaeger": {}}}})

        assert settings.enabled is False
        assert settings.endpoint == ""

    def test_empty_yaml_section_uses_defaults(self) -> None:
        settings = extract_tracing_settings({"tracing": {"opentelemetry": {"jaeger": None}}})

        assert settings.enabled is False

    def test_address_alias(self) -> None:
        config = {
            "tracing": {
                "opentelemetry": {"jaeger": {"enabled": True, "address": " http://c:4318 "}}
            }
        }

        assert extract_tracing_settings(config).endpoint == "http://c:4318"

    def test_process_identity_overrides(self) -> None:
        config = {
            "tracing": {
                "service_name": "billing",
                "environment": "staging",
                "opentelemetry": {"jaeger": {}},
            }
        }

        settings = extract_tracing_settings(config)

        assert settings.service_name == "billing"
        assert settings.environment == "staging"

    def test_legacy_backend_from_config(self) -> None:
        config = {
            "tracing": {
                "backend": "opentracing",
                "opentracing": {"jaeger": {"enabled": "true"}},
            }
        }

        settings = extract_tracing_settings(config)

        assert settings.backend is TracingBackend.OPENTRACING
        assert settings.enabled is True

    def test_backend_and_collector_overrides(self) -> None:
        config = {"tracing": {"opentracing": {"zipkin": {"enabled": True}}}}

        settings = extract_tracing_settings(config, backend="opentracing", collector="zipkin")

        assert settings.section_path == "tracing.opentracing.zipkin"
        assert settings.enabled is True

    def test_unrelated_keys_are_ignored(self) -> None:
        config = {
            "server": {"port": 8080},
            "tracing": {"sampler": "always", "opentelemetry": {"jaeger": {"x": 1}}},
        }

        assert extract_tracing_settings(config).enabled is False


class TestExtractTracingSettingsErrors:
    """ConfigError cases."""

    def test_missing_tracing_section(self) -> None:
        with pytest.raises(ConfigError, match="Missing 'tracing' section") as exc_info:
            extract_tracing_settings({"server": {}})

        assert exc_info.value.code == "config_error"

    def test_missing_collector_section(self) -> None:
        with pytest.raises(ConfigError) as exc_info:
            extract_tracing_settings({"tracing": {"opentelemetry": {}}})

        assert exc_info.value.details == {"section": "tracing.opentelemetry.jaeger"}

    def test_config_must_be_mapping(self) -> None:
        with pytest.raises(ConfigError):
            extract_tracing_settings(["tracing"])  # type: ignore[arg-type]

    def test_tracing_section_must_be_mapping(self) -> None:
        with pytest.raises(ConfigError, match="Invalid 'tracing' section"):
            extract_tracing_settings({"tracing": "on"})

    def test_unknown_backend(self) -> None:
        with pytest.raises(ConfigError):
            extract_tracing_settings({"tracing": {"backend": "zipkin-v1"}})

    def test_unknown_backend_override(self) -> None:
        with pytest.raises(ConfigError):
            extract_tracing_settings(
                {"tracing": {"opentelemetry": {"jaeger": {}}}}, backend="xray"
            )

    def test_malformed_enabled_flag(self) -> None:
        config = {"tracing": {"opentelemetry": {"jaeger": {"enabled": "maybe"}}}}

        with pytest.raises(ConfigError, match="tracing.opentelemetry.jaeger"):
            extract_tracing_settings(config)

    def test_malformed_collector_section(self) -> None:
        config = {"tracing": {"opentelemetry": {"jaeger": ["enabled"]}}}

        with pytest.raises(ConfigError):
            extract_tracing_settings(config)
