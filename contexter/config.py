"""
Persistent client settings.

Settings live in a small JSON file (API key, server URL, theme). Environment
variables override what is on disk so the CLI can be scripted without
touching the file.
"""
from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, ValidationError, field_validator

logger = logging.getLogger(__name__)

DEFAULT_SERVER_URL = "http://localhost:3030"
CONFIG_ENV = "CONTEXTER_CONFIG"
API_KEY_ENV = "CONTEXTER_API_KEY"
SERVER_URL_ENV = "CONTEXTER_SERVER_URL"


class ConfigError(Exception):
    """Settings file exists but cannot be read or does not validate."""


class Settings(BaseModel):
    api_key: str = ""
    server_url: str = DEFAULT_SERVER_URL
    theme: Literal["system", "light", "dark"] = "system"

    @field_validator("server_url")
    @classmethod
    def _strip_slash(cls, value: str) -> str:
        return value.rstrip("/")


def default_config_path() -> Path:
    override = os.environ.get(CONFIG_ENV)
    if override:
        return Path(override)
    return Path.home() / ".config" / "contexter" / "settings.json"


def _read_settings_file(path: Path) -> Settings:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return Settings.model_validate(data)
    except (OSError, json.JSONDecodeError, ValidationError) as e:
        raise ConfigError(f"Invalid settings file {path}: {e}") from e


def load_settings(path: Optional[Path] = None, apply_env: bool = True) -> Settings:
    """
    Load settings from `path` (or the default location), falling back to
    defaults when the file is missing or broken, then apply env overrides.
    With `apply_env=False` the result is exactly what the file holds, which
    is what must be written back when the file is updated.
    """
    path = path or default_config_path()
    settings = Settings()
    if path.is_file():
        try:
            settings = _read_settings_file(path)
        except ConfigError as e:
            logger.warning("%s; using defaults", e)

    if not apply_env:
        return settings
    return update_settings(
        settings,
        api_key=os.environ.get(API_KEY_ENV),
        server_url=os.environ.get(SERVER_URL_ENV),
    )


def save_settings(settings: Settings, path: Optional[Path] = None) -> Path:
    path = path or default_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(settings.model_dump_json(indent=2), encoding="utf-8")
    logger.debug("Settings written to %s", path)
    return path


def update_settings(settings: Settings, **changes: Optional[str]) -> Settings:
    """Merge the non-None `changes` into a new Settings object."""
    merged = settings.model_dump()
    merged.update({k: v for k, v in changes.items() if v is not None})
    return Settings.model_validate(merged)
