"""
Tests for the exception hierarchy.
"""

import pytest

from formula_jax.core.exceptions import (
    ConfigurationError,
    FormulaJaxError,
    FormulaSyntaxError,
    MissingVariableError,
    UnresolvedFunctionError,
    UnsupportedSyntaxError,
)
from formula_jax.formulas.nodes import Escape, Symbol

pytestmark = pytest.mark.unit


class TestFormulaJaxError:
    """Test the base error formatting."""

    def test_message_with_code_and_suggestions(self):
        error = FormulaJaxError("Something failed", suggestions=["Try again"], error_code="X")

        assert error.message == "Something failed"
        assert str(error) == "[X] Something failed\n\nSuggestions:\n  1. Try again"

    def test_plain_message(self):
        assert str(FormulaJaxError("Plain")) == "Plain"

    @pytest.mark.parametrize("error", [
        FormulaSyntaxError(expression=Symbol("a"), reason="Bad"),
        UnsupportedSyntaxError(expression=Escape(Symbol("x"))),
        UnresolvedFunctionError(function_name="f"),
        MissingVariableError(missing=["a"]),
        ConfigurationError(config_key="parsing.backend"),
    ])
    def test_subclasses(self, error):
        assert isinstance(error, FormulaJaxError)
        assert error.error_code
        assert error.suggestions
        assert "Documentation" not in str(error)


class TestFormulaSyntaxError:
    """Test syntax error details."""

    def test_expression_and_position(self):
        error = FormulaSyntaxError(expression="y ~ @", reason="Unexpected character '@'", position=4)

        assert error.message == "Unexpected character '@': y ~ @ (at position 4)"
        assert error.context["position"] == 4

    def test_custom_suggestions(self):
        error = FormulaSyntaxError(reason="Bad", suggestions=["Fix it"])

        assert error.suggestions == ["Fix it"]
