"""Core functionality for formula-jax."""

from .exceptions import (
    FormulaJaxError,
    FormulaSyntaxError,
    UnsupportedSyntaxError,
    UnresolvedFunctionError,
    MissingVariableError,
    ConfigurationError,
)

__all__ = [
    "FormulaJaxError",
    "FormulaSyntaxError",
    "UnsupportedSyntaxError",
    "UnresolvedFunctionError",
    "MissingVariableError",
    "ConfigurationError",
]
