"""Configuration management for Todry."""

import json
import logging
from pathlib import Path
from typing import Any, Optional

from platformdirs import user_config_dir
from pydantic import BaseModel, Field, ValidationError


logger = logging.getLogger(__name__)


class StorageConfig(BaseModel):
    """Storage configuration."""

    path: Optional[str] = Field(default=None)


class AuthConfig(BaseModel):
    """Authentication configuration."""

    min_password_length: int = Field(default=4, ge=1)


class UndoConfig(BaseModel):
    """How long notices stay on screen, in seconds."""

    task_window: float = Field(default=4.0, gt=0)
    category_window: float = Field(default=4.0, gt=0)
    notice_window: float = Field(default=3.0, gt=0)


class OutputConfig(BaseModel):
    """Output configuration."""

    format: str = Field(default="table", pattern="^(table|json|yaml)$")
    color: bool = Field(default=True)


class Config(BaseModel):
    """Main configuration."""

    storage: StorageConfig = Field(default_factory=StorageConfig)
    auth: AuthConfig = Field(default_factory=AuthConfig)
    undo: UndoConfig = Field(default_factory=UndoConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)


class ConfigManager:
    """Manages Todry configuration."""

    def __init__(self, profile: str = "default"):
        self.profile = profile
        self.config_dir = Path(user_config_dir("todry"))
        self.config_file = self.config_dir / f"{profile}.json"

        self.config_dir.mkdir(parents=True, exist_ok=True)

        self._config: Optional[Config] = None

    @property
    def config(self) -> Config:
        """Get the current configuration."""
        if self._config is None:
            self._config = self.load_config()
        return self._config

    def load_config(self) -> Config:
        """Load configuration from file."""
        if self.config_file.exists():
            try:
                with open(self.config_file, "r") as f:
                    data = json.load(f)
                return Config(**data)
            except (OSError, json.JSONDecodeError, ValidationError, TypeError) as e:
                # If config is corrupted, return default
                logger.warning(
                    "ignoring unreadable config %s: %s", self.config_file, e
                )
                return Config()
        return Config()

    def save_config(self, config: Optional[Config] = None) -> None:
        """Save configuration to file."""
        if config is None:
            config = self.config

        with open(self.config_file, "w") as f:
            json.dump(config.model_dump(), f, indent=2)

    def get(self, key: str) -> Any:
        """Get a configuration value by dot-separated key."""
        return self.get_from_config(self.config, key)

    def set(self, key: str, value: Any) -> None:
        """Set a configuration value by dot-separated key.

        Raises:
            KeyError: If the key does not name a configuration field
            pydantic.ValidationError: If the value is invalid for the field
        """
        keys = key.split(".")
        config_dict = self.config.model_dump()

        current = config_dict
        for k in keys[:-1]:
            if not isinstance(current.get(k), dict):
                raise KeyError(key)
            current = current[k]
        if keys[-1] not in current:
            raise KeyError(key)

        current[keys[-1]] = value

        # Reload config from the modified dictionary
        self._config = Config(**config_dict)
        self.save_config()

    def reset(self, key: Optional[str] = None) -> None:
        """Reset configuration to defaults."""
        if key is None:
            self._config = Config()
        else:
            default_value = self.get_from_config(Config(), key)
            if isinstance(default_value, BaseModel):
                default_value = default_value.model_dump()
            self.set(key, default_value)
        self.save_config()

    def get_from_config(self, config: Config, key: str) -> Any:
        """Get value from a config object using dot notation."""
        keys = key.split(".")
        value: Any = config
        for k in keys:
            if isinstance(value, BaseModel):
                value = getattr(value, k, None)
            else:
                return None
        return value


# Global config manager instance
_config_manager: Optional[ConfigManager] = None


def get_config_manager(profile: str = "default") -> ConfigManager:
    """Get or create the global config manager."""
    global _config_manager
    if _config_manager is None or _config_manager.profile != profile:
        _config_manager = ConfigManager(profile)
    return _config_manager
