"""Configuration management for formula-jax."""

from .settings import (
    FormulaJaxConfig,
    ParsingConfig,
    LoggingConfig,
    ArrayBackend,
    LogLevel,
    get_default_config,
    reset_default_config,
)

__all__ = [
    "FormulaJaxConfig",
    "ParsingConfig",
    "LoggingConfig",
    "ArrayBackend",
    "LogLevel",
    "get_default_config",
    "reset_default_config",
]
