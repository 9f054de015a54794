"""Configuration loading for the health tracker harness.

Settings are resolved from, lowest to highest priority:
1. Built-in defaults (a backend on localhost:8080)
2. A JSON config file (tracker.json by default, optional)
3. Environment variables (for CI/CD)
4. Command-line flags (applied by the CLI via apply_overrides)

Environment Variables:
    TRACKER_BASE_URL=http://localhost:8080
    TRACKER_TIMEOUT=30
    TRACKER_PASSWORD=securePassword123

Example tracker.json:
    {
        "base_url": "http://staging.example.com:8080",
        "timeout": 10,
        "health_check": true
    }
"""

import json
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Optional

DEFAULT_CONFIG_PATH = "tracker.json"

ENV_VARIABLES = {
    "TRACKER_BASE_URL": "base_url",
    "TRACKER_TIMEOUT": "timeout",
    "TRACKER_PASSWORD": "password",
}


class ConfigError(Exception):
    """Raised when configuration loading fails."""

    pass


@dataclass
class HarnessConfig:
    """Settings for one harness run."""

    base_url: str = "http://localhost:8080"
    timeout: float = 30.0
    password: str = "securePassword123"
    age: int = 30
    weight_kg: float = 75
    height_m: float = 1.8
    gender: str = "male"
    health_check: bool = False


def _field_names() -> set[str]:
    return {f.name for f in fields(HarnessConfig)}


def _require_positive(name: str, value: Any, kinds: tuple[type, ...]) -> None:
    if isinstance(value, bool) or not isinstance(value, kinds) or value <= 0:
        raise ConfigError(f"{name} must be a positive number, got {value!r}")


def validate(config: HarnessConfig) -> HarnessConfig:
    """Check and normalize a configuration.

    Raises:
        ConfigError: If any value has the wrong type or is out of range.
    """
    if not isinstance(config.base_url, str) or not config.base_url.startswith(("http://", "https://")):
        raise ConfigError(f"Base URL must start with http:// or https://: {config.base_url}")

    try:
        timeout = float(config.timeout)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid timeout: {config.timeout!r}") from e

    if timeout <= 0:
        raise ConfigError(f"Timeout must be positive, got {timeout}")

    if not isinstance(config.health_check, bool):
        raise ConfigError(f"health_check must be true or false, got {config.health_check!r}")

    _require_positive("age", config.age, (int,))
    _require_positive("weight_kg", config.weight_kg, (int, float))
    _require_positive("height_m", config.height_m, (int, float))

    for name in ("password", "gender"):
        value = getattr(config, name)
        if not isinstance(value, str) or not value:
            raise ConfigError(f"{name} must be a non-empty string, got {value!r}")

    return replace(config, base_url=config.base_url.rstrip("/"), timeout=timeout)


def load_from_json(config_path: str) -> dict[str, Any]:
    """Load settings from a JSON file.

    Args:
        config_path: Path to the config file.

    Returns:
        Dictionary of settings keyed by HarnessConfig field name.

    Raises:
        ConfigError: If the file contains invalid JSON, is not an object,
                    or names an unknown setting.
    """
    path = Path(config_path)

    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in config file: {e}") from e
    except OSError as e:
        raise ConfigError(f"Cannot read config file {config_path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Config file must contain a JSON object: {config_path}")

    unknown = sorted(set(data) - _field_names())
    if unknown:
        raise ConfigError(f"Unknown setting(s) in {config_path}: {', '.join(unknown)}")

    return data


def load_from_env() -> dict[str, Any]:
    """Load settings from TRACKER_* environment variables."""
    settings: dict[str, Any] = {}
    for env_key, field_name in ENV_VARIABLES.items():
        value = os.environ.get(env_key)
        if value:
            settings[field_name] = value
    return settings


def apply_overrides(config: HarnessConfig, **overrides: Optional[Any]) -> HarnessConfig:
    """Return a validated copy of config with non-None overrides applied."""
    changes = {k: v for k, v in overrides.items() if v is not None}
    return validate(replace(config, **changes))


def load_config(
    config_path: str = DEFAULT_CONFIG_PATH,
    required: bool = False,
) -> HarnessConfig:
    """Resolve the configuration from defaults, file and environment.

    Args:
        config_path: Path to the JSON config file.
        required: If True, a missing config file is an error.

    Returns:
        Validated HarnessConfig.

    Raises:
        ConfigError: If the file is required but missing, or any value is invalid.
    """
    settings: dict[str, Any] = {}

    if Path(config_path).exists():
        settings.update(load_from_json(config_path))
    elif required:
        raise ConfigError(f"Config file not found: {config_path}")

    settings.update(load_from_env())

    return validate(HarnessConfig(**settings))
