"""Configuration loading.

Reads a YAML file into TrustyConfig, then applies environment overrides.
The file is located by the ``path`` argument, else ``$TRUSTY_CONFIG``, else
``./config.yaml``; a missing default file means all defaults.

Accepted layouts::

    backend: {provider: ollama, host: http://localhost:11434, model: qwen2.5}
    report: {base_url: https://api.trustypkg.dev, timeout: 30}
    turn_timeout: 30

    # provider sections, as older configs used
    ollama: {host: http://localhost:11434, model: qwen2.5}
    openai: {api_key: sk-..., model: gpt-4o-mini}
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from trusty.exceptions import ConfigError
from trusty.models.config import TrustyConfig

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "config.yaml"

_PROVIDER_SECTIONS = ("ollama", "openai")

# env var -> (section, key); section None means top level
_ENV_OVERRIDES: dict[str, tuple[str | None, str]] = {
    "TRUSTY_BACKEND_PROVIDER": ("backend", "provider"),
    "TRUSTY_BACKEND_HOST": ("backend", "host"),
    "TRUSTY_BACKEND_MODEL": ("backend", "model"),
    "TRUSTY_OPENAI_API_KEY": ("backend", "api_key"),
    "TRUSTY_REPORT_URL": ("report", "base_url"),
    "TRUSTY_TURN_TIMEOUT": (None, "turn_timeout"),
}


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")
    return raw


def _normalize(raw: dict[str, Any]) -> dict[str, Any]:
    """Fold provider sections (``ollama:``/``openai:``) into ``backend:``."""
    data = dict(raw)
    backend = dict(data.get("backend") or {})
    for provider in _PROVIDER_SECTIONS:
        section = data.pop(provider, None)
        if section is None:
            continue
        if not isinstance(section, dict):
            raise ConfigError(f"Config section '{provider}' must be a mapping")
        if "provider" in backend and backend["provider"] != provider:
            continue
        backend.setdefault("provider", provider)
        for key, value in section.items():
            backend.setdefault(key, value)
    if backend:
        data["backend"] = backend
    return data


def _apply_env(data: dict[str, Any]) -> dict[str, Any]:
    for var, (section, key) in _ENV_OVERRIDES.items():
        value = os.environ.get(var)
        if not value:
            continue
        if section is None:
            data[key] = value
        else:
            data[section] = {**(data.get(section) or {}), key: value}
    return data


def load_config(path: str | os.PathLike[str] | None = None) -> TrustyConfig:
    """Load configuration from YAML plus environment overrides.

    Raises:
        ConfigError: If an explicitly named file is missing, or any file
            is unreadable or fails validation.
    """
    explicit = path is not None or bool(os.environ.get("TRUSTY_CONFIG"))
    config_path = Path(path or os.environ.get("TRUSTY_CONFIG") or DEFAULT_CONFIG_PATH)

    if config_path.exists():
        raw = _read_yaml(config_path)
        logger.debug("Loaded config from %s", config_path)
    elif explicit:
        raise ConfigError(f"Config file not found: {config_path}")
    else:
        logger.debug("No %s found; using defaults", config_path)
        raw = {}

    data = _apply_env(_normalize(raw))
    try:
        return TrustyConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e
