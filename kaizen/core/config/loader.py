"""
Configuration loader — server settings from kaizen.yml and the environment.

Precedence (highest first):
    environment (API_SECRET, PORT, KAIZEN_DATA_DIR, KAIZEN_HOST)
    kaizen.yml (``server:`` section, or a flat mapping)
    built-in defaults
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)

# Default config filename
CONFIG_FILE = "kaizen.yml"

DEFAULT_API_SECRET = "change_me"

_ENV_OVERRIDES = {
    "API_SECRET": "api_secret",
    "PORT": "port",
    "KAIZEN_DATA_DIR": "data_dir",
    "KAIZEN_HOST": "host",
}


class ConfigError(Exception):
    """Raised when configuration is invalid or unreadable."""


class ServerConfig(BaseModel):
    """Settings for the remote state service and webhook sink."""

    api_secret: str = DEFAULT_API_SECRET
    host: str = "127.0.0.1"
    port: int = Field(default=3000, ge=1, le=65535)
    data_dir: Path = Path("data")

    @property
    def state_file(self) -> Path:
        return self.data_dir / "state.json"

    @property
    def webhook_log(self) -> Path:
        return self.data_dir / "webhooks.log"


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Search for kaizen.yml starting from the given directory, walking up."""
    current = (start_dir or Path.cwd()).resolve()

    for _ in range(20):  # safety limit
        candidate = current / CONFIG_FILE
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            break  # filesystem root
        current = parent

    return None


def _read_yaml(path: Path) -> dict[str, Any]:
    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    # Either nested under "server" or flat
    section = data.get("server", data)
    if not isinstance(section, dict):
        raise ConfigError(f"Expected 'server' to be a mapping in {path}")
    return dict(section)


def load_server_config(
    path: Path | None = None,
    environ: dict[str, str] | None = None,
) -> ServerConfig:
    """Load server configuration.

    Args:
        path: Explicit kaizen.yml. If None, searches upward; absence is fine.
        environ: Environment mapping (default: os.environ).

    Raises:
        ConfigError: Unreadable/invalid YAML or invalid values.
    """
    env = os.environ if environ is None else environ

    if path is None:
        path = find_config_file()

    values: dict[str, Any] = {}
    if path is not None:
        logger.debug("Loading server config from %s", path)
        values.update(_read_yaml(path))
        data_dir = values.get("data_dir")
        if data_dir and not Path(str(data_dir)).is_absolute():
            values["data_dir"] = path.parent / str(data_dir)

    for var, key in _ENV_OVERRIDES.items():
        if env.get(var):
            values[key] = env[var]

    try:
        config = ServerConfig.model_validate(values)
    except ValidationError as e:
        raise ConfigError(f"Invalid server configuration: {e}") from e

    if config.api_secret == DEFAULT_API_SECRET:
        logger.warning("API_SECRET is not set — using the insecure default")
    return config
