"""Configuration loader and validator."""

from pathlib import Path
from typing import Any, Optional

import yaml

DEFAULT_STATE_KEY = "round-robin-doubles"
DEFAULT_SECRET_KEY = "rrdoubles-secret-key-change-me"


class ConfigError(Exception):
    """Configuration validation error."""

    pass


def load_config(path: str) -> dict[str, Any]:
    """Load configuration from YAML file.

    Args:
        path: Path to YAML config file

    Returns:
        Dictionary with configuration values

    Raises:
        ConfigError: If file not found or invalid YAML
    """
    config_file = Path(path)

    if not config_file.exists():
        raise ConfigError(f"Config file not found: {path}")

    try:
        with open(config_file, "r", encoding="utf-8") as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in config file: {e}")

    if config is None:
        raise ConfigError("Config file is empty")

    if not isinstance(config, dict):
        raise ConfigError("Config file must contain a mapping")

    return config


def validate_config(config: dict[str, Any]) -> dict[str, Any]:
    """Validate configuration values.

    Args:
        config: Configuration dictionary

    Returns:
        Validated and normalized configuration

    Raises:
        ConfigError: If validation fails
    """
    validated = {}

    # Random seed (optional, default None = different schedule every time)
    seed = config.get("random_seed")
    if seed is not None and (not isinstance(seed, int) or isinstance(seed, bool)):
        raise ConfigError("random_seed must be an integer or null")
    validated["random_seed"] = seed

    # Database path (optional, resolved against the data dir when missing)
    db_path = config.get("db_path")
    if db_path is not None and not isinstance(db_path, str):
        raise ConfigError("db_path must be a string")
    validated["db_path"] = db_path

    state_key = config.get("state_key", DEFAULT_STATE_KEY)
    if not isinstance(state_key, str) or not state_key.strip():
        raise ConfigError("state_key must be a non-empty string")
    validated["state_key"] = state_key

    secret_key = config.get("secret_key", DEFAULT_SECRET_KEY)
    if not isinstance(secret_key, str) or not secret_key:
        raise ConfigError("secret_key must be a non-empty string")
    validated["secret_key"] = secret_key

    return validated


def load_and_validate_config(path: Optional[str] = None) -> dict[str, Any]:
    """Load and validate configuration in one step.

    Args:
        path: Path to YAML config file; defaults are returned when None

    Returns:
        Validated configuration dictionary

    Raises:
        ConfigError: If loading or validation fails
    """
    if path is None:
        return validate_config({})
    config = load_config(path)
    return validate_config(config)
