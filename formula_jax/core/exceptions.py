"""
Exception classes for formula-jax.

Provides rich error information with actionable suggestions.
"""

from typing import List, Optional, Dict, Any, Sequence


class FormulaJaxError(Exception):
    """
    Base exception class for formula-jax with rich error information.

    Provides structured error information including suggestions for resolution
    and the offending expression where one is known.
    """

    def __init__(
        self,
        message: str,
        suggestions: Optional[List[str]] = None,
        error_code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None
    ):
        self.suggestions = suggestions or []
        self.error_code = error_code
        self.context = context or {}
        super().__init__(message)

    @property
    def message(self) -> str:
        return super().__str__()

    def __str__(self) -> str:
        """Return formatted error message with suggestions."""
        message = super().__str__()

        if self.error_code:
            message = f"[{self.error_code}] {message}"

        if self.suggestions:
            message += "\n\nSuggestions:"
            for i, suggestion in enumerate(self.suggestions, 1):
                message += f"\n  {i}. {suggestion}"

        return message


class FormulaSyntaxError(FormulaJaxError):
    """Exception raised for malformed formula expressions."""

    def __init__(
        self,
        expression: Any = None,
        reason: Optional[str] = None,
        position: Optional[int] = None,
        **kwargs
    ):
        self.expression = expression
        self.reason = reason
        self.position = position

        if reason and expression is not None:
            message = f"{reason}: {expression}"
        elif reason:
            message = reason
        elif expression is not None:
            message = f"Invalid formula expression: {expression}"
        else:
            message = "Formula syntax error"

        if position is not None:
            message += f" (at position {position})"

        suggestions = kwargs.pop('suggestions', None) or [
            "Formulas have the form 'response ~ predictors'",
            "Use '~ predictors' for a one-sided formula",
            "Supported operators: ~, +, &, *, and ordinary function calls",
            "Examples: 'y ~ a + b', 'y ~ a * b', 'y ~ 1 + log(x)'",
        ]

        super().__init__(
            message=message,
            suggestions=suggestions,
            error_code="FORMULA_SYNTAX",
            context={"expression": expression, "reason": reason, "position": position},
            **kwargs
        )


class UnsupportedSyntaxError(FormulaJaxError):
    """Exception raised when an interpolation ($) marker appears in a formula."""

    def __init__(self, expression: Any = None, **kwargs):
        self.expression = expression

        if expression is not None:
            message = f"Interpolation with $ is not supported in formulas: {expression}"
        else:
            message = "Interpolation with $ is not supported in formulas"

        kwargs.pop('suggestions', None)

        super().__init__(
            message=message,
            suggestions=[
                "Build the formula text with the value already substituted",
                "Pass values through the namespace argument instead",
            ],
            error_code="UNSUPPORTED_SYNTAX",
            context={"expression": expression},
            **kwargs
        )


class UnresolvedFunctionError(FormulaJaxError):
    """Exception raised when a function in a formula cannot be resolved."""

    def __init__(
        self,
        function_name: Optional[str] = None,
        expression: Any = None,
        available: Optional[Sequence[str]] = None,
        **kwargs
    ):
        self.function_name = function_name
        self.expression = expression

        if function_name and expression is not None:
            message = f"Function '{function_name}' is not defined in {expression}"
        elif function_name:
            message = f"Function '{function_name}' is not defined"
        else:
            message = "Unresolved function in formula"

        suggestions = [
            "Check the function name spelling",
            "Pass the function through the namespace argument",
        ]
        if available:
            suggestions.insert(0, f"Available functions: {', '.join(sorted(available))}")

        kwargs.pop('suggestions', None)

        super().__init__(
            message=message,
            suggestions=suggestions,
            error_code="UNRESOLVED_FUNCTION",
            context={"function_name": function_name, "expression": expression},
            **kwargs
        )


class MissingVariableError(FormulaJaxError):
    """Exception raised when variables required by a term are not available."""

    def __init__(
        self,
        missing: Optional[Sequence[str]] = None,
        available: Optional[Sequence[str]] = None,
        expression: Any = None,
        **kwargs
    ):
        self.missing = list(missing or [])
        self.expression = expression

        if self.missing and expression is not None:
            message = f"Variables {self.missing} required by {expression} are not available"
        elif self.missing:
            message = f"Variables not available: {self.missing}"
        else:
            message = "Missing variables"

        suggestions = [
            "Check variable name spelling and case sensitivity",
            "Ensure every variable referenced in the formula is provided",
        ]
        if available is not None:
            suggestions.insert(0, f"Available variables: {', '.join(sorted(available))}")

        kwargs.pop('suggestions', None)

        super().__init__(
            message=message,
            suggestions=suggestions,
            error_code="MISSING_VARIABLE",
            context={
                "missing": self.missing,
                "available": list(available) if available is not None else None,
                "expression": expression,
            },
            **kwargs
        )


class ConfigurationError(FormulaJaxError):
    """Exception raised for configuration issues."""

    def __init__(
        self,
        config_key: Optional[str] = None,
        reason: Optional[str] = None,
        **kwargs
    ):
        if config_key:
            message = f"Invalid configuration for '{config_key}'"
            if reason:
                message += f": {reason}"
            suggestions = [
                f"Check the value for configuration key '{config_key}'",
                "Review configuration file syntax",
                "Check environment variable formatting",
                "Use formula_jax.get_config() to inspect current settings",
            ]
        else:
            message = "Configuration error"
            suggestions = [
                "Check configuration file syntax",
                "Review configuration documentation",
            ]

        kwargs.pop('suggestions', None)

        super().__init__(
            message=message,
            suggestions=suggestions,
            error_code="CONFIG",
            context={"config_key": config_key, "reason": reason},
            **kwargs
        )
