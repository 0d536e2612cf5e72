"""
Configuration loading.

Settings are layered, later sources winning:
1. Defaults from settings.py
2. A YAML file
3. Environment variables named REFINERY__{SECTION}__{KEY},
   e.g. REFINERY__EXTRACTOR__DECISIVE_SCORE_RATIO=3.5
"""

import os
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from refinery.config.settings import Settings
from refinery.core.exceptions import ConfigurationError

_settings_instance: Settings | None = None


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge ``override`` into a copy of ``base``."""
    result = base.copy()
    for key, value in override.items():
        if isinstance(result.get(key), dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _parse_env_value(value: str) -> Any:
    """Best-effort conversion of an environment string to bool, None, int or float."""
    lowered = value.lower()
    if lowered in ("true", "yes", "on"):
        return True
    if lowered in ("false", "no", "off"):
        return False
    if lowered in ("none", "null", ""):
        return None

    for convert in (int, float):
        try:
            return convert(value)
        except ValueError:
            pass
    return value


def _load_env_overrides(prefix: str = "REFINERY") -> dict[str, Any]:
    """
    Collect ``{prefix}__SECTION__KEY`` variables into a nested dict.

    Variables with fewer than two path parts are ignored.
    """
    overrides: dict[str, Any] = {}
    marker = f"{prefix}__"

    for key, value in os.environ.items():
        if not key.startswith(marker):
            continue

        path = key[len(marker):].lower().split("__")
        if len(path) < 2:
            continue

        section = overrides
        for part in path[:-1]:
            section = section.setdefault(part, {})
        section[path[-1]] = _parse_env_value(value)

    return overrides


def _load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Read a YAML mapping.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ConfigurationError: If the file isn't valid YAML or isn't a mapping
    """
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        try:
            content = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(
                f"Invalid YAML in configuration file: {e}",
                details={"path": str(path)},
            ) from e

    if content is None:
        return {}
    if not isinstance(content, dict):
        raise ConfigurationError(
            f"Configuration file must contain a mapping, got: {type(content).__name__}",
            details={"path": str(path)},
        )
    return content


def load_config(
    config_path: Path | str | None = None,
    env_prefix: str = "REFINERY",
) -> Settings:
    """
    Build Settings from defaults, an optional YAML file and the environment.

    Args:
        config_path: YAML file to read. None means defaults and environment only.
        env_prefix: Prefix of the environment variables to apply

    Returns:
        Validated Settings instance

    Raises:
        FileNotFoundError: If config_path is given but doesn't exist
        ConfigurationError: If the file is malformed or a value is invalid
    """
    config_data: dict[str, Any] = {}

    if config_path is not None:
        config_data = _deep_merge(config_data, _load_yaml_file(Path(config_path)))

    config_data = _deep_merge(config_data, _load_env_overrides(env_prefix))

    try:
        return Settings(**config_data)
    except ValidationError as e:
        raise ConfigurationError(
            "Configuration values failed validation",
            details={"errors": e.error_count()},
        ) from e


def get_settings(
    config_path: Path | str | None = None,
    reload: bool = False,
) -> Settings:
    """
    Process-wide Settings, loaded on first use.

    ``config_path`` is only read when loading, i.e. on first call or with
    ``reload=True``.
    """
    global _settings_instance

    if _settings_instance is None or reload:
        _settings_instance = load_config(config_path)
    return _settings_instance


def reset_settings() -> None:
    """Forget the cached Settings so the next get_settings reloads."""
    global _settings_instance
    _settings_instance = None


@lru_cache(maxsize=1)
def get_default_config_path() -> Path | None:
    """
    First existing configuration file among the usual locations.

    Looks for ./refinery.yaml, ./config/refinery.yaml and
    ~/.refinery/config.yaml, in that order.
    """
    search_paths = [
        Path.cwd() / "refinery.yaml",
        Path.cwd() / "config" / "refinery.yaml",
        Path.home() / ".refinery" / "config.yaml",
    ]
    for path in search_paths:
        if path.exists():
            return path
    return None
