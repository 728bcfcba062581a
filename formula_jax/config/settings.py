"""
Configuration management system for formula-jax.

Provides a hierarchical configuration system with support for file-based
configuration, environment variables, and runtime updates.
"""

import os
import yaml
from pathlib import Path
from typing import Dict, Any, Optional, Union
from pydantic import BaseModel, ConfigDict, Field, field_validator
from enum import Enum

from ..core.exceptions import ConfigurationError


class LogLevel(str, Enum):
    """Logging levels."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class ArrayBackend(str, Enum):
    """Array libraries that back the default function namespace."""
    JAX = "jax"
    NUMPY = "numpy"


class ParsingConfig(BaseModel):
    """Formula parsing configuration."""
    model_config = ConfigDict(validate_assignment=True, validate_default=True, use_enum_values=True)

    backend: ArrayBackend = ArrayBackend.JAX
    implicit_intercept: bool = True
    deduplicate_terms: bool = True


class LoggingConfig(BaseModel):
    """Logging configuration."""
    model_config = ConfigDict(validate_assignment=True, validate_default=True, use_enum_values=True)

    level: LogLevel = LogLevel.WARNING
    file_logging: bool = False
    log_file: Optional[Path] = None
    console_logging: bool = True
    format_string: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    @field_validator('log_file', mode='before')
    @classmethod
    def validate_log_file(cls, v):
        return Path(v) if v else None


class FormulaJaxConfig(BaseModel):
    """Main configuration class for formula-jax."""

    model_config = ConfigDict(validate_assignment=True, validate_default=True, use_enum_values=True)

    parsing: ParsingConfig = Field(default_factory=ParsingConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    def __init__(self, config_file: Optional[Union[str, Path]] = None, **kwargs):
        """
        Initialize configuration.

        Args:
            config_file: Path to YAML configuration file
            **kwargs: Override specific configuration values
        """
        config_data: Dict[str, Any] = {}
        if config_file:
            config_data = _load_config_file(config_file)

        _merge_sections(config_data, _load_environment_variables())
        _merge_sections(config_data, kwargs)

        try:
            super().__init__(**config_data)
        except ValueError as e:
            raise ConfigurationError(
                config_key=", ".join(sorted(config_data)) or None,
                reason=str(e),
            ) from e

    def save_config(self, config_file: Union[str, Path]) -> None:
        """Save current configuration to YAML file."""
        config_path = Path(config_file)
        config_path.parent.mkdir(parents=True, exist_ok=True)

        with open(config_path, 'w') as f:
            yaml.safe_dump(self.model_dump(mode='json'), f, default_flow_style=False, indent=2)

    def update(self, **kwargs) -> None:
        """Update configuration values, accepting dotted keys like 'parsing.backend'."""
        for key, value in kwargs.items():
            if hasattr(self, key):
                target, name = self, key
            else:
                section, _, subkey = key.partition('.')
                target, name = getattr(self, section, None), subkey
                if not subkey or target is None or not hasattr(target, subkey):
                    raise ConfigurationError(config_key=key)

            try:
                setattr(target, name, value)
            except ValueError as e:
                raise ConfigurationError(config_key=key, reason=str(e)) from e

    @classmethod
    def get_user_config_path(cls) -> Path:
        """Get the user's configuration file path."""
        return Path.home() / ".formula_jax" / "config.yaml"

    @classmethod
    def from_user_config(cls, **kwargs) -> "FormulaJaxConfig":
        """
        Build a configuration from the user's file, if it exists.

        Environment variables and keyword arguments still take precedence
        over values read from the file.
        """
        user_config = cls.get_user_config_path()
        return cls(config_file=user_config if user_config.exists() else None, **kwargs)


def _load_config_file(config_file: Union[str, Path]) -> Dict[str, Any]:
    """Load configuration from YAML file."""
    config_path = Path(config_file)
    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path, 'r') as f:
        return yaml.safe_load(f) or {}


def _load_environment_variables() -> Dict[str, Any]:
    """Load configuration from environment variables."""
    config: Dict[str, Any] = {}

    env_mappings = {
        'FORMULA_JAX_LOG_LEVEL': ('logging', 'level'),
        'FORMULA_JAX_BACKEND': ('parsing', 'backend'),
        'FORMULA_JAX_IMPLICIT_INTERCEPT': ('parsing', 'implicit_intercept'),
    }

    for env_var, (section, key) in env_mappings.items():
        value = os.getenv(env_var)
        if value is not None:
            if key in ['implicit_intercept']:
                value = value.lower() in ('true', '1', 'yes', 'on')
            elif key in ['level']:
                value = value.upper()
            else:
                value = value.lower()

            config.setdefault(section, {})[key] = value

    return config


def _merge_sections(target: Dict[str, Any], overrides: Dict[str, Any]) -> None:
    """Merge override sections into target, one level deep."""
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(target.get(key), dict):
            target[key] = {**target[key], **value}
        else:
            target[key] = value


# Default configuration instance
_default_config: Optional[FormulaJaxConfig] = None

def get_default_config() -> FormulaJaxConfig:
    """Get the default configuration instance."""
    global _default_config
    if _default_config is None:
        _default_config = FormulaJaxConfig.from_user_config()
    return _default_config


def reset_default_config() -> None:
    """Discard the default configuration so it is rebuilt on next access."""
    global _default_config
    _default_config = None
