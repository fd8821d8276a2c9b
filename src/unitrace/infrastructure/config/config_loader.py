"""
Process configuration loading.

Reads the YAML configuration file of the host process. Only the ``tracing``
section is interpreted by unitrace (see ``core.domain.config_schema``); the
rest of the document is returned untouched.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import aiofiles
import structlog
import yaml

from unitrace.core.domain.errors import ConfigError

logger = structlog.get_logger(__name__)


def _parse(text: str, path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ConfigError(
            f"Invalid YAML in config file: {path}",
            details={"path": str(path)},
        ) from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(
            f"Config file must contain a mapping: {path}",
            details={"path": str(path), "type": type(data).__name__},
        )

    logger.debug("config_loaded", path=str(path), config_keys=list(data.keys()))
    return data


def load_config_file(path: str | Path) -> dict[str, Any]:
    """
    Load a YAML configuration file.

    Args:
        path: Path to the YAML file

    Returns:
        Parsed configuration dictionary (empty for an empty file)

    Raises:
        ConfigError: If the file is missing, unreadable or not a YAML mapping
    """
    config_path = Path(path)
    try:
        text = config_path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(
            f"Config file not readable: {config_path}",
            details={"path": str(config_path)},
        ) from e
    return _parse(text, config_path)


async def load_config_file_async(path: str | Path) -> dict[str, Any]:
    """Async variant of :func:`load_config_file` for use inside the event loop."""
    config_path = Path(path)
    try:
        async with aiofiles.open(config_path, encoding="utf-8") as f:
            text = await f.read()
    except OSError as e:
        raise ConfigError(
            f"Config file not readable: {config_path}",
            details={"path": str(config_path)},
        ) from e
    return _parse(text, config_path)
