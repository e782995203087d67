# -*- coding: utf-8 -*-
"""Settings persistence and validation."""

from __future__ import annotations

from copy import deepcopy
from pathlib import Path
from typing import Any

from medtriage.constants import DEFAULT_SETTINGS_FILE, DEFAULT_STORE_FILE
from medtriage.utils.file_utils import read_json_file, write_json_file


DEFAULT_CONFIG: dict[str, Any] = {
    "api": {
        "url": "http://127.0.0.1:5000/api/analysis",
        "timeout_seconds": 60,
        "token": "",
    },
    "upload": {"field_name": "file", "content_type": "application/dicom"},
    "history": {"store_path": DEFAULT_STORE_FILE},
    "export": {"format": "markdown", "output_dir": "reports"},
    "security": {"require_unlock": False},
}

EXPORT_FORMATS = ("markdown", "html")


class ConfigError(ValueError):
    """Raised when settings are invalid."""


def get_default_config() -> dict[str, Any]:
    """Return a deep copy of the default config."""
    return deepcopy(DEFAULT_CONFIG)


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged = deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _load_env_file(env_path: Path) -> dict[str, str]:
    """Load a simple .env file (KEY=VALUE)."""
    values: dict[str, str] = {}
    if not env_path.exists():
        return values

    for raw_line in env_path.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip()
        if not key:
            continue
        if (value.startswith('"') and value.endswith('"')) or (
            value.startswith("'") and value.endswith("'")
        ):
            value = value[1:-1]
        values[key] = value
    return values


def _apply_env_overrides(config: dict[str, Any], env_values: dict[str, str]) -> dict[str, Any]:
    """Apply environment-based overrides to runtime config."""
    merged = deepcopy(config)
    api_url = env_values.get("MEDTRIAGE_API_URL", "").strip()
    api_token = env_values.get("MEDTRIAGE_API_TOKEN", "").strip()

    if api_url:
        merged.setdefault("api", {})
        merged["api"]["url"] = api_url
    if api_token:
        merged.setdefault("api", {})
        merged["api"]["token"] = api_token
    return merged


def validate_config(config: dict[str, Any]) -> None:
    """Validate the fields the scan pipeline depends on."""
    url = config.get("api", {}).get("url")
    if not isinstance(url, str) or not url.startswith(("http://", "https://")):
        raise ConfigError("api.url must be an http(s) URL")

    timeout = config.get("api", {}).get("timeout_seconds")
    if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or not (1 <= timeout <= 600):
        raise ConfigError("api.timeout_seconds must be a number in range 1..600")

    store_path = config.get("history", {}).get("store_path")
    if not isinstance(store_path, str) or not store_path.strip():
        raise ConfigError("history.store_path must be a non-empty string")

    export_format = config.get("export", {}).get("format")
    if export_format not in EXPORT_FORMATS:
        raise ConfigError("export.format must be 'markdown' or 'html'")


def load_config(path: str | Path | None = None) -> dict[str, Any]:
    """Load config from JSON and merge into defaults."""
    config_path = Path(path or DEFAULT_SETTINGS_FILE)
    env_values = _load_env_file(config_path.parent / ".env")
    if not config_path.exists():
        return _apply_env_overrides(get_default_config(), env_values)

    loaded = read_json_file(config_path)
    merged = _deep_merge(get_default_config(), loaded)
    merged = _apply_env_overrides(merged, env_values)
    validate_config(merged)
    return merged


def _strip_secrets(config: dict[str, Any]) -> dict[str, Any]:
    """Remove the API token from config before saving to disk."""
    config_copy = deepcopy(config)
    api = config_copy.get("api", {})
    token = api.get("token")
    # Anything longer than a placeholder is treated as a real secret.
    if token and len(str(token)) > 20:
        api["token"] = "USE_ENV_FILE"
    return config_copy


def save_config(config: dict[str, Any], path: str | Path | None = None) -> Path:
    """Validate and save config as JSON, without the API token.

    The token belongs in the .env file next to settings.json.
    """
    validate_config(config)
    config_path = Path(path or DEFAULT_SETTINGS_FILE)
    write_json_file(config_path, _strip_secrets(config))
    return config_path
