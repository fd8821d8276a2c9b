"""Infrastructure Layer - Configuration file loading."""

from unitrace.infrastructure.config.config_loader import (
    load_config_file,
    load_config_file_async,
)

__all__ = ["load_config_file", "load_config_file_async"]
