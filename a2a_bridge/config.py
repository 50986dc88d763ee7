"""
Bridge configuration.

Resolved once at process start and handed to the registry and client as
plain values. Precedence: explicit argument (CLI) > environment > YAML
config file > defaults.
"""

import logging
import os
import sys
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ValidationError

from .errors import ConfigError

#: Environment variable names
REGISTRY_DIR_ENV = "A2A_SERVER_CONFIG_LOCATION"
MOCK_ENV = "MOCK_A2A"
REQUEST_TIMEOUT_ENV = "A2A_REQUEST_TIMEOUT"
LOG_LEVEL_ENV = "A2A_BRIDGE_LOG_LEVEL"
CONFIG_FILE_ENV = "A2A_BRIDGE_CONFIG"

DEFAULT_REGISTRY_DIR = "./a2a-servers"

_TRUTHY = {"1", "true", "yes", "on"}

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


class BridgeConfig(BaseModel):
    registry_dir: Path = Path(DEFAULT_REGISTRY_DIR)
    mock_a2a: bool = False
    request_timeout: float = 30.0
    log_level: str = "INFO"


def _load_config_file(path: Path) -> dict[str, Any]:
    """Read bridge settings from a YAML file (top-level mapping)."""
    if not path.exists():
        raise ConfigError(f"Config file not found: {path}")
    with open(path, "r") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping, got {type(data).__name__}")
    return data


def _env_flag(name: str) -> bool | None:
    value = os.environ.get(name)
    if value is None or not value.strip():
        return None
    return value.strip().lower() in _TRUTHY


def load_config(
    registry_dir: str | None = None,
    config_file: str | None = None,
    mock: bool | None = None,
    log_level: str | None = None,
) -> BridgeConfig:
    """
    Build the bridge configuration.

    Args:
        registry_dir: Registry directory from the command line (--a2a-server-config-location)
        config_file: Optional YAML config path (--config); falls back to A2A_BRIDGE_CONFIG
        mock: Force mock A2A transport on (--mock); None means "not given"
        log_level: Log level from the command line

    Returns:
        Resolved BridgeConfig

    Raises:
        ConfigError: If the config file is missing/invalid or a value fails validation
    """
    values: dict[str, Any] = {}

    config_path = config_file or os.environ.get(CONFIG_FILE_ENV)
    if config_path:
        values.update(_load_config_file(Path(config_path)))

    if os.environ.get(REGISTRY_DIR_ENV):
        values["registry_dir"] = os.environ[REGISTRY_DIR_ENV]
    env_mock = _env_flag(MOCK_ENV)
    if env_mock is not None:
        values["mock_a2a"] = env_mock
    if os.environ.get(REQUEST_TIMEOUT_ENV):
        values["request_timeout"] = os.environ[REQUEST_TIMEOUT_ENV]
    if os.environ.get(LOG_LEVEL_ENV):
        values["log_level"] = os.environ[LOG_LEVEL_ENV]

    if registry_dir:
        values["registry_dir"] = registry_dir
    if mock:
        values["mock_a2a"] = True
    if log_level:
        values["log_level"] = log_level

    try:
        config = BridgeConfig(**values)
    except ValidationError as e:
        raise ConfigError(f"Invalid bridge configuration: {e}") from e
    config.log_level = config.log_level.upper()
    if config.log_level not in logging.getLevelNamesMapping():
        raise ConfigError(f"Unknown log level: {config.log_level}")
    return config


def configure_logging(level: str = "INFO") -> None:
    """Send all logs to stderr; stdout belongs to the MCP stdio transport."""
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(level.upper())
