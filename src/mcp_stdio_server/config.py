"""Server configuration loader.

This module loads server configuration from YAML files into a
``ServerConfig``.
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any

import yaml

from mcp_stdio_server.logger import LOG_LEVELS
from mcp_stdio_server.protocol.capabilities import (
    capability_from_dict,
    default_capabilities,
    merge_capabilities,
)
from mcp_stdio_server.server import ServerConfig


class ConfigLoadError(Exception):
    """Raised when configuration loading or validation fails."""

    pass


ENV_VAR_PATTERN = re.compile(r"\$\{([^}]+)\}")


def expand_env_vars(value: str) -> str:
    """Replace ${NAME} references with environment values.

    References to unset variables stay as written, except ${HOME} which
    falls back to the user's home directory.
    """

    def lookup(match: re.Match[str]) -> str:
        name = match.group(1)
        if name in os.environ:
            return os.environ[name]
        if name == "HOME":
            return os.path.expanduser("~")
        return match.group(0)

    return ENV_VAR_PATTERN.sub(lookup, value)


def config_from_dict(config: dict[str, Any]) -> ServerConfig:
    """Create a ServerConfig from a configuration dictionary.

    Args:
        config: Dictionary parsed from YAML configuration.

    Returns:
        ServerConfig with all settings populated.

    Raises:
        ConfigLoadError: If a setting is missing or invalid.
    """
    name = config.get("name")
    if not isinstance(name, str) or not name:
        raise ConfigLoadError("Configuration requires a non-empty 'name'")

    capabilities_section = config.get("capabilities") or {}
    if not isinstance(capabilities_section, dict):
        raise ConfigLoadError("'capabilities' must be a mapping")
    try:
        overrides = [
            capability_from_dict(kind, options) for kind, options in capabilities_section.items()
        ]
    except ValueError as e:
        raise ConfigLoadError(str(e)) from e

    logging_section = config.get("logging") or {}
    if not isinstance(logging_section, dict):
        raise ConfigLoadError("'logging' must be a mapping")
    log_level = logging_section.get("level", "info")
    if log_level not in LOG_LEVELS:
        raise ConfigLoadError(f"Unknown log level: {log_level}")

    traffic_log = logging_section.get("traffic_log") or ""
    if not isinstance(traffic_log, str):
        raise ConfigLoadError("'logging.traffic_log' must be a path")

    components = config.get("components") or []
    if not isinstance(components, list) or not all(isinstance(c, str) for c in components):
        raise ConfigLoadError("'components' must be a list of module names")

    return ServerConfig(
        name=name,
        version=str(config.get("version", "1.0.0")),
        description=config.get("description", ""),
        capabilities=merge_capabilities(default_capabilities(), overrides),
        instructions=config.get("instructions", ""),
        log_level=log_level,
        traffic_log=expand_env_vars(traffic_log),
        components=components,
    )


def load_config(path: Path) -> ServerConfig:
    """Load server configuration from a YAML file.

    Args:
        path: Path to the YAML configuration file.

    Returns:
        Loaded ServerConfig.

    Raises:
        ConfigLoadError: If the file cannot be loaded or is invalid.
    """
    if not path.exists():
        raise ConfigLoadError(f"Configuration file not found: {path}")

    try:
        with open(path, encoding="utf-8") as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigLoadError(f"Invalid YAML in configuration file: {e}") from e
    except OSError as e:
        raise ConfigLoadError(f"Cannot read configuration file: {e}") from e

    if not isinstance(config, dict):
        raise ConfigLoadError("Configuration file must contain a YAML mapping")

    return config_from_dict(config)
