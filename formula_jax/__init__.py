"""
formula-jax: model formulas for JAX and NumPy based statistical modeling

Parses formulas such as ``y ~ a + b*log(c)`` into terms, expanding the
formula operators and capturing ordinary function calls for evaluation
against data later.
"""

__version__ = "0.1.0"

# Formula system
from .formulas import (
    parse_formula,
    parse_expression,
    validate_formula_syntax,
    rewrite,
    capture_call,
    FormulaParser,
    Formula,
    Term,
    ConstantTerm,
    AbsentTerm,
    InteractionTerm,
    CapturedCallTerm,
)

# Configuration
from .config.settings import FormulaJaxConfig, get_default_config

# Import key exception classes
from .core.exceptions import (
    FormulaJaxError,
    FormulaSyntaxError,
    UnsupportedSyntaxError,
    UnresolvedFunctionError,
    MissingVariableError,
    ConfigurationError,
)

__all__ = [
    # Version info
    "__version__",

    # Formula system
    "parse_formula",
    "parse_expression",
    "validate_formula_syntax",
    "rewrite",
    "capture_call",
    "FormulaParser",
    "Formula",
    "Term",
    "ConstantTerm",
    "AbsentTerm",
    "InteractionTerm",
    "CapturedCallTerm",

    # Configuration
    "FormulaJaxConfig",
    "get_config",
    "configure",

    # Exceptions
    "FormulaJaxError",
    "FormulaSyntaxError",
    "UnsupportedSyntaxError",
    "UnresolvedFunctionError",
    "MissingVariableError",
    "ConfigurationError",
]


def get_config() -> FormulaJaxConfig:
    """Get the global configuration instance."""
    return get_default_config()


def configure(**kwargs) -> None:
    """Update global configuration, e.g. ``configure(**{"parsing.backend": "numpy"})``."""
    get_config().update(**kwargs)
