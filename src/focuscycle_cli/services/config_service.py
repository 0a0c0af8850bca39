"""Configuration service for focuscycle.

This module provides the ConfigService class, the single source of truth for
configuration. It handles:

- Loading and saving config.json
- Dot-separated key access (``session.work_duration_min``)
- Validating session settings before they reach the controller
"""

from __future__ import annotations

import json
import logging
from functools import lru_cache
from json import JSONDecodeError
from pathlib import Path
from typing import Any

from platformdirs import user_config_dir
from pydantic import BaseModel, ValidationError

from focuscycle_cli.models.config_models import AppConfig, OutputConfig, SessionConfig

logger = logging.getLogger(__name__)


class ConfigError(Exception):
    """Raised when a configuration value is rejected."""


class ConfigService:
    """Service for loading, validating and saving application configuration."""

    def __init__(self, config_dir: Path | None = None):
        self.config_dir = config_dir or Path(user_config_dir("focuscycle_cli"))
        self.config_path = self.config_dir / "config.json"
        self.config_dir.mkdir(parents=True, exist_ok=True)

        self._config: AppConfig | None = None
        self.load_errors: list[str] = []

    @property
    def config(self) -> AppConfig:
        """Get or load the current configuration."""
        if self._config is None:
            self._config = self.load_config()
        return self._config

    @property
    def session(self) -> SessionConfig:
        return self.config.session

    def load_config(self) -> AppConfig:
        """Load configuration from disk.

        A missing file creates the defaults. A section that fails validation
        falls back to its defaults and the problem is kept in ``load_errors``.
        """
        if self._config is not None:
            return self._config

        self.load_errors = []
        try:
            with open(self.config_path, encoding="utf-8") as f:
                raw = json.load(f)
        except FileNotFoundError:
            # First run
            self._config = AppConfig()
            self.save_config()
            return self._config
        except JSONDecodeError as e:
            self._record_load_error(f"config.json is not valid JSON: {e}")
            self._config = AppConfig()
            return self._config

        if not isinstance(raw, dict):
            self._record_load_error("config.json must contain an object")
            self._config = AppConfig()
            return self._config

        self._config = AppConfig(
            session=self._load_section("session", raw.get("session"), SessionConfig),
            output=self._load_section("output", raw.get("output"), OutputConfig),
        )
        return self._config

    def _load_section(self, name: str, data: Any, model: type[BaseModel]) -> Any:
        if data is None:
            return model()
        try:
            return model.model_validate(data)
        except ValidationError as e:
            self._record_load_error(f"Invalid '{name}' settings, using defaults: {_summarize(e)}")
            return model()

    def _record_load_error(self, message: str) -> None:
        self.load_errors.append(message)
        logger.warning(message)

    def save_config(self) -> None:
        """Save the current configuration to disk."""
        if self._config is None:
            raise RuntimeError("No configuration to save")

        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.config_path, "w", encoding="utf-8") as f:
            f.write(self._config.model_dump_json(indent=4))
        self.config_path.chmod(0o600)

    def reset_config(self, key: str | None = None) -> None:
        """Reset the whole configuration, or a single key, to defaults."""
        if key is None:
            self._config = AppConfig()
            self.load_errors = []
            self.save_config()
            logger.info("Configuration reset to defaults")
            return

        default_value = _lookup(AppConfig(), key)
        self.set(key, default_value)

    def get(self, key: str) -> Any:
        """Get a configuration value by dot-separated key."""
        return _lookup(self.config, key)

    def set(self, key: str, value: Any) -> AppConfig:
        """Set a configuration value by dot-separated key.

        Raises ConfigError for unknown keys or values that fail validation;
        the previous configuration stays in force.
        """
        keys = key.split(".")
        config_dict = self.config.model_dump()

        current = config_dict
        for k in keys[:-1]:
            if not isinstance(current.get(k), dict):
                raise ConfigError(f"Unknown configuration key: {key}")
            current = current[k]
        if keys[-1] not in current:
            raise ConfigError(f"Unknown configuration key: {key}")
        current[keys[-1]] = value

        try:
            new_config = AppConfig.model_validate(config_dict)
        except ValidationError as e:
            raise ConfigError(f"Invalid value for '{key}': {_summarize(e)}") from e

        self._config = new_config
        self.save_config()
        logger.info("Configuration updated: %s=%r", key, value)
        return new_config

    def update_session_config(self, **changes: Any) -> SessionConfig:
        """Validate and apply session setting changes."""
        data = self.session.model_dump()
        data.update(changes)
        try:
            session = SessionConfig.model_validate(data)
        except ValidationError as e:
            raise ConfigError(f"Invalid session settings: {_summarize(e)}") from e

        self._config = self.config.model_copy(update={"session": session})
        self.save_config()
        logger.info("Session settings updated: %s", ", ".join(sorted(changes)))
        return session


def _lookup(config: AppConfig, key: str) -> Any:
    value: Any = config
    for k in key.split("."):
        if isinstance(value, BaseModel) and k in type(value).model_fields:
            value = getattr(value, k)
        else:
            return None
    return value


def _summarize(error: ValidationError) -> str:
    parts = []
    for item in error.errors():
        location = ".".join(str(p) for p in item["loc"]) or "value"
        parts.append(f"{location}: {item['msg']}")
    return "; ".join(parts)


@lru_cache(maxsize=1)
def get_config_service() -> ConfigService:
    """Get a cached ConfigService instance."""
    config_service = ConfigService()
    config_service.load_config()
    return config_service
