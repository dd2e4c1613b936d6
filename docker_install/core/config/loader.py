"""
Configuration loader — reads docker-install.yml into InstallerConfig.

The config file is optional. Resolution order:
    --config flag  >  DOCKER_INSTALL_CONFIG env var  >
    docker-install.yml found walking up from the cwd  >  built-in defaults
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

import yaml

from docker_install.core.models.config import InstallerConfig

logger = logging.getLogger(__name__)

# Default config filename
CONFIG_FILE = "docker-install.yml"
CONFIG_ENV_VAR = "DOCKER_INSTALL_CONFIG"


class ConfigError(Exception):
    """Raised when installer configuration is invalid or unreadable."""


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Search for docker-install.yml starting from the given directory, walking up.

    Args:
        start_dir: Directory to start searching from (default: cwd).

    Returns:
        Path to docker-install.yml, or None if not found.
    """
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


def resolve_config_path(path: Path | None = None) -> Path | None:
    """Apply the resolution order and return the file to load, if any."""
    if path is not None:
        return path
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path)
    return find_config_file()


def load_config(path: Path | None = None) -> InstallerConfig:
    """Load and validate installer configuration.

    Args:
        path: Explicit path to a config file. If None, the env var and
            an upward search are tried; defaults are used when nothing
            is found.

    Returns:
        Validated InstallerConfig.

    Raises:
        ConfigError: If an explicitly named file is missing or any file is invalid.
    """
    path = resolve_config_path(path)

    if path is None:
        logger.debug("No %s found, using defaults", CONFIG_FILE)
        return InstallerConfig()

    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    logger.debug("Loading installer config from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return InstallerConfig()

    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    # The YAML may wrap everything under an "installer" key or be flat
    config_data = data.get("installer", data)

    try:
        config = InstallerConfig.model_validate(config_data)
    except Exception as e:
        raise ConfigError(f"Invalid installer configuration: {e}") from e

    logger.debug("Loaded installer config from %s", path)
    return config
