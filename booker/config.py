"""Environment configuration for the booking API under test."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml
from omegaconf import OmegaConf
from omegaconf.errors import OmegaConfBaseException

from booker.constants import (
    DEFAULT_CONFIG_DIR,
    DEFAULT_ENVIRONMENT,
    DEFAULT_REQUEST_TIMEOUT_SECONDS,
    ENV_VAR_CONFIG_DIR,
    ENV_VAR_ENVIRONMENT,
    MASKED_SECRET,
)
from booker.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

BUILT_IN_DEFAULTS: dict[str, Any] = {
    "request_timeout": DEFAULT_REQUEST_TIMEOUT_SECONDS,
    "log_level": "INFO",
}


@dataclass(frozen=True)
class EnvironmentConfig:
    """Resolved configuration of one target environment.

    Built once per process and passed by reference to every collaborator
    that needs it. Instances are immutable, so clients sharing one are safe
    across concurrent scenarios.

    Attributes
    ----------
    name : str
        Environment name (e.g. "test", "staging")
    base_url : str
        Base URL of the booking API, without trailing slash
    admin_username : str
        Username of the administrative account used for cleanup
    admin_password : str
        Password of the administrative account
    request_timeout : float
        Timeout in seconds applied to every HTTP call
    log_level : str
        Logging level name for the run
    """

    name: str
    base_url: str
    admin_username: str
    admin_password: str
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT_SECONDS
    log_level: str = "INFO"

    def masked(self) -> dict[str, Any]:
        """Return the configuration as a dict with the password hidden."""
        return {
            "name": self.name,
            "base_url": self.base_url,
            "admin_username": self.admin_username,
            "admin_password": MASKED_SECRET,
            "request_timeout": self.request_timeout,
            "log_level": self.log_level,
        }


def resolve_config_path(env: str | None = None, config_dir: str | Path | None = None) -> Path:
    """Return the YAML file backing an environment.

    Parameters
    ----------
    env : str | None
        Environment name. If None, reads BOOKER_ENV, falling back to "test"
    config_dir : str | Path | None
        Directory holding ``<env>.yaml`` files. If None, reads
        BOOKER_CONFIG_DIR, falling back to ``./config``

    Returns
    -------
    Path
        Path to ``<config_dir>/<env>.yaml``
    """
    if env is None:
        env = os.environ.get(ENV_VAR_ENVIRONMENT, DEFAULT_ENVIRONMENT)

    if config_dir is None:
        config_dir = os.environ.get(ENV_VAR_CONFIG_DIR, DEFAULT_CONFIG_DIR)

    return Path(config_dir) / f"{env}.yaml"


def load_environment_config(
    env: str | None = None, config_dir: str | Path | None = None
) -> EnvironmentConfig:
    """Load and validate the configuration of one environment.

    Parameters
    ----------
    env : str | None
        Environment name (default: BOOKER_ENV or "test")
    config_dir : str | Path | None
        Directory containing environment files (default: BOOKER_CONFIG_DIR
        or ``./config``)

    Returns
    -------
    EnvironmentConfig
        Fully resolved configuration

    Raises
    ------
    ConfigurationError
        If the file is missing or unreadable, the YAML is invalid, an
        interpolation cannot be resolved, or a required value is missing
    """
    config_file = resolve_config_path(env, config_dir)
    env_name = config_file.stem

    if not config_file.exists():
        raise ConfigurationError(f"Configuration file not found: {config_file}")

    try:
        cfg = OmegaConf.load(config_file)
    except yaml.YAMLError as e:
        logger.error("Failed to parse YAML config file %s: %s", config_file, e)
        raise ConfigurationError(f"Invalid YAML in {config_file}: {e}") from e
    except OSError as e:
        logger.error("Failed to read config file %s: %s", config_file, e)
        raise ConfigurationError(f"Failed to read config file {config_file}: {e}") from e

    if cfg is None or not OmegaConf.is_dict(cfg):
        raise ConfigurationError(f"Configuration file {config_file} must contain a mapping")

    merged = OmegaConf.merge(OmegaConf.create(BUILT_IN_DEFAULTS), cfg)

    try:
        data = OmegaConf.to_container(merged, resolve=True, throw_on_missing=True)
    except OmegaConfBaseException as e:
        logger.error("Failed to resolve configuration variables: %s", e)
        raise ConfigurationError(f"Configuration variable resolution error: {e}") from e

    config = _build_config(env_name, data)
    logger.debug("Loaded configuration for environment '%s' from %s", env_name, config_file)
    return config


def _build_config(env_name: str, data: dict[str, Any]) -> EnvironmentConfig:
    """Validate resolved configuration data and build the config value.

    Parameters
    ----------
    env_name : str
        Environment name
    data : dict[str, Any]
        Resolved configuration mapping

    Returns
    -------
    EnvironmentConfig
        Validated configuration

    Raises
    ------
    ConfigurationError
        If a required value is missing or a value has the wrong type
    """
    base_url = _require_string(data, "base_url")

    admin = data.get("admin")
    if not isinstance(admin, dict):
        raise ConfigurationError("Configuration is missing the 'admin' section")

    username = _require_string(admin, "username", prefix="admin.")
    password = _require_string(admin, "password", prefix="admin.")

    try:
        timeout = float(data["request_timeout"])
    except (TypeError, ValueError) as e:
        raise ConfigurationError(
            f"request_timeout must be a number, got {data['request_timeout']!r}"
        ) from e

    if timeout <= 0:
        raise ConfigurationError(f"request_timeout must be positive, got {timeout}")

    log_level = str(data["log_level"]).upper()
    if logging.getLevelName(log_level) == f"Level {log_level}":
        raise ConfigurationError(f"Unknown log_level: {data['log_level']!r}")

    return EnvironmentConfig(
        name=env_name,
        base_url=base_url.rstrip("/"),
        admin_username=username,
        admin_password=password,
        request_timeout=timeout,
        log_level=log_level,
    )


def _require_string(data: dict[str, Any], key: str, prefix: str = "") -> str:
    value = data.get(key)

    if not isinstance(value, str) or not value.strip():
        raise ConfigurationError(f"Configuration value '{prefix}{key}' is required")

    return value
