"""
Tests for formula text parsing.
"""

import pytest

from formula_jax.core.exceptions import (
    FormulaSyntaxError,
    UnresolvedFunctionError,
    UnsupportedSyntaxError,
)
from formula_jax.formulas.formula import Formula
from formula_jax.formulas.nodes import Absent, Call, Escape, NumberLiteral, Symbol
from formula_jax.formulas.parser import (
    FormulaParser,
    parse_expression,
    parse_formula,
    tokenize,
    validate_formula_syntax,
)
from formula_jax.formulas.terms import ConstantTerm, InteractionTerm, Term

pytestmark = pytest.mark.unit


class TestTokenizer:
    """Test splitting formula text into tokens."""

    def test_tokens(self):
        tokens = tokenize("y ~ log(x1) + 2.5")

        assert [(t.kind, t.text) for t in tokens] == [
            ("name", "y"),
            ("op", "~"),
            ("name", "log"),
            ("op", "("),
            ("name", "x1"),
            ("op", ")"),
            ("op", "+"),
            ("number", "2.5"),
            ("end", ""),
        ]

    def test_positions(self):
        tokens = tokenize("a +  b")

        assert [t.position for t in tokens] == [0, 2, 5, 6]

    def test_scientific_notation(self):
        assert tokenize("1e-3")[0] == ("number", "1e-3", 0)

    def test_unexpected_character(self):
        with pytest.raises(FormulaSyntaxError) as exc_info:
            tokenize("y ~ a @ b")

        assert exc_info.value.position == 6
        assert "'@'" in str(exc_info.value)


class TestParseExpression:
    """Test parsing text into expression nodes."""

    def test_formula(self):
        assert parse_expression("y ~ a + b") == Call("~", (
            Symbol("y"),
            Call("+", (Symbol("a"), Symbol("b"))),
        ))

    def test_one_sided(self):
        assert parse_expression("~ x") == Call("~", (Absent(), Symbol("x")))

    def test_sum_chain(self):
        assert parse_expression("a + b + c") == Call("+", (Symbol("a"), Symbol("b"), Symbol("c")))

    def test_parentheses_break_chain(self):
        assert parse_expression("(a + b) + c") == Call("+", (
            Call("+", (Symbol("a"), Symbol("b"))),
            Symbol("c"),
        ))

    def test_star_chain(self):
        assert parse_expression("a * b * c") == Call("*", (Symbol("a"), Symbol("b"), Symbol("c")))

    def test_mixed_product_operators(self):
        """& and * bind equally tightly and group from the left."""
        assert parse_expression("a & b * c") == Call("*", (
            Call("&", (Symbol("a"), Symbol("b"))),
            Symbol("c"),
        ))

    def test_product_binds_tighter_than_sum(self):
        assert parse_expression("a + b * c") == Call("+", (
            Symbol("a"),
            Call("*", (Symbol("b"), Symbol("c"))),
        ))

    def test_subtraction_is_binary(self):
        assert parse_expression("a - b - c") == Call("-", (
            Call("-", (Symbol("a"), Symbol("b"))),
            Symbol("c"),
        ))

    def test_division(self):
        assert parse_expression("a / b / c") == Call("/", (
            Call("/", (Symbol("a"), Symbol("b"))),
            Symbol("c"),
        ))

    def test_literals(self):
        assert parse_expression("1") == NumberLiteral(1)
        assert isinstance(parse_expression("1").value, int)
        assert parse_expression("2.5") == NumberLiteral(2.5)
        assert isinstance(parse_expression("3.").value, float)

    def test_negative_literal(self):
        assert parse_expression("-1") == NumberLiteral(-1)

    def test_unary_minus(self):
        assert parse_expression("-x") == Call("-", (Symbol("x"),))

    def test_unary_plus(self):
        assert parse_expression("+x") == Symbol("x")

    def test_escape(self):
        assert parse_expression("$x") == Escape(Symbol("x"))
        assert parse_expression("$(a + b)") == Escape(Call("+", (Symbol("a"), Symbol("b"))))

    def test_power_right_associative(self):
        assert parse_expression("a ^ b ^ c") == Call("^", (
            Symbol("a"),
            Call("^", (Symbol("b"), Symbol("c"))),
        ))

    def test_power_binds_tighter_than_unary_minus(self):
        assert parse_expression("-a^2") == Call("-", (Call("^", (Symbol("a"), NumberLiteral(2))),))

    def test_calls(self):
        assert parse_expression("f()") == Call("f", ())
        assert parse_expression("f(a, b + c)") == Call("f", (
            Symbol("a"),
            Call("+", (Symbol("b"), Symbol("c"))),
        ))

    def test_separator_chain(self):
        node = parse_expression("y ~ x ~ z")

        assert node.operator == "~"
        assert node.args == (Symbol("y"), Symbol("x"), Symbol("z"))

    def test_parenthesized_formula(self):
        assert parse_expression("a + (y ~ x)") == Call("+", (
            Symbol("a"),
            Call("~", (Symbol("y"), Symbol("x"))),
        ))


class TestParseErrors:
    """Test malformed formula text."""

    def test_empty(self):
        with pytest.raises(FormulaSyntaxError) as exc_info:
            parse_expression("   ")

        assert "Empty formula" in str(exc_info.value)

    def test_unclosed_parenthesis(self):
        with pytest.raises(FormulaSyntaxError) as exc_info:
            parse_expression("log(x")

        assert exc_info.value.position == 5
        assert "expected ')'" in str(exc_info.value)

    def test_dangling_operator(self):
        with pytest.raises(FormulaSyntaxError) as exc_info:
            parse_expression("y ~ a +")

        assert "end of formula" in str(exc_info.value)

    def test_trailing_tokens(self):
        with pytest.raises(FormulaSyntaxError) as exc_info:
            parse_expression("a b")

        assert exc_info.value.position == 2

    def test_non_string(self):
        with pytest.raises(FormulaSyntaxError):
            parse_expression(42)


class TestFormulaParser:
    """Test the full parsing pipeline."""

    def test_parse(self, parser):
        formula = parser.parse("y ~ a + b")

        assert isinstance(formula, Formula)
        assert formula.lhs == (Term("y"),)
        assert formula.rhs == (Term("a"), Term("b"))

    def test_parse_node(self, parser):
        node = Call("~", (Symbol("y"), Call("&", (Symbol("a"), Symbol("b")))))
        formula = parser.parse(node)

        assert formula.original_expression is node
        assert formula.rhs == (InteractionTerm((Term("a"), Term("b"))),)

    def test_bare_symbol(self, parser):
        with pytest.raises(FormulaSyntaxError):
            parser.parse("y")

    def test_three_sided(self, parser):
        with pytest.raises(FormulaSyntaxError):
            parser.parse("y ~ x ~ z")

    def test_absent_below_root(self, parser):
        node = Call("~", (Symbol("y"), Call("+", (Symbol("a"), Absent()))))

        with pytest.raises(FormulaSyntaxError):
            parser.parse(node)

    def test_missing_right_hand_side(self, parser):
        with pytest.raises(FormulaSyntaxError) as exc_info:
            parser.parse(Call("~", (Symbol("y"), Absent())))

        assert "Missing right-hand side" in str(exc_info.value)

    def test_escape(self, parser):
        with pytest.raises(UnsupportedSyntaxError):
            parser.parse("y ~ $x")

    def test_unresolved_function(self, parser):
        with pytest.raises(UnresolvedFunctionError):
            parser.parse("y ~ nope(x)")

    def test_user_namespace(self, numpy_config):
        parser = FormulaParser(namespace={"double": lambda x: 2 * x}, config=numpy_config)
        formula = parser.parse("y ~ double(x)")

        (term,) = formula.rhs
        assert term.evaluate({"x": 4}) == 8

    def test_implicit_intercept_from_config(self, numpy_config):
        numpy_config.parsing.implicit_intercept = False
        formula = FormulaParser(config=numpy_config).parse("y ~ x")

        assert not formula.has_intercept

    def test_deduplicate_from_config(self, numpy_config):
        numpy_config.parsing.deduplicate_terms = False
        formula = FormulaParser(config=numpy_config).parse("y ~ a + a")

        assert formula.rhs == (Term("a"), Term("a"))

    def test_parse_many(self, parser):
        formulas = parser.parse_many(["y ~ a", "y ~ a * b"])

        assert [len(f.rhs) for f in formulas] == [1, 3]

    def test_parse_many_raises(self, parser):
        with pytest.raises(FormulaSyntaxError):
            parser.parse_many(["y ~ a", "y ~"])

    def test_parse_many_skip_invalid(self, parser):
        formulas = parser.parse_many(["y ~ a", "y ~", "y ~ $b", "~ c"], skip_invalid=True)

        assert [str(f) for f in formulas] == ["y ~ a", "~ c"]


class TestConvenienceFunctions:
    """Test module level helpers."""

    def test_parse_formula(self, numpy_config):
        formula = parse_formula("y ~ 1 + x", config=numpy_config)

        assert formula.rhs == (ConstantTerm(1), Term("x"))

    def test_parse_formula_with_namespace(self, numpy_config):
        formula = parse_formula("y ~ f(x)", namespace={"f": abs}, config=numpy_config)

        assert formula.rhs[0].function is abs

    def test_validate_formula_syntax(self):
        assert validate_formula_syntax("y ~ a * log(b)") is True
        assert validate_formula_syntax("~ x") is True

    def test_validate_formula_syntax_errors(self):
        with pytest.raises(FormulaSyntaxError):
            validate_formula_syntax("a + b")
        with pytest.raises(UnsupportedSyntaxError):
            validate_formula_syntax("y ~ $a")

    def test_validate_does_not_resolve_functions(self):
        assert validate_formula_syntax("y ~ unknown_function(x)") is True
