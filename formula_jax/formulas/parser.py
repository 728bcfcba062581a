"""
Formula parser for formula-jax.

Parses formula text such as ``"y ~ a + b*log(c)"`` into expression nodes,
validates it, rewrites it into terms and applies the term algebra.
"""

import re
from typing import Iterable, List, NamedTuple, Optional, Union

from .algebra import lower
from .formula import Formula
from .namespace import Namespace, build_namespace
from .nodes import Absent, Call, Escape, Node, NumberLiteral, Symbol
from .rewriter import rewrite
from .validation import check_formula, reject_escape
from ..config.settings import FormulaJaxConfig, get_default_config
from ..core.exceptions import FormulaJaxError, FormulaSyntaxError
from ..utils.logging import get_logger


logger = get_logger(__name__)

_TOKEN_PATTERN = re.compile(
    r"""
    (?P<space>\s+)
    |(?P<number>(?:\d+\.\d*|\.\d+|\d+)(?:[eE][+-]?\d+)?)
    |(?P<name>[A-Za-z_][A-Za-z0-9_]*)
    |(?P<op>[~+\-*/&^$(),])
    """,
    re.VERBOSE,
)


class Token(NamedTuple):
    kind: str
    text: str
    position: int


def tokenize(text: str) -> List[Token]:
    """Split formula text into tokens, ending with an 'end' token."""
    tokens = []
    position = 0
    while position < len(text):
        match = _TOKEN_PATTERN.match(text, position)
        if match is None:
            raise FormulaSyntaxError(
                expression=text,
                reason=f"Unexpected character {text[position]!r}",
                position=position,
            )
        kind = match.lastgroup
        if kind != "space":
            tokens.append(Token(kind, match.group(), position))
        position = match.end()
    tokens.append(Token("end", "", len(text)))
    return tokens


class _ExpressionParser:
    """
    Recursive descent parser for formula text.

    Binding from loosest to tightest: ``~``, ``+ -``, ``* / &``, unary
    ``- + $``, ``^`` and finally names, numbers, calls and parentheses.
    Chains of the same ``~ + * &`` operator become one call with many
    arguments; parentheses break a chain.
    """

    def __init__(self, text: str):
        self.text = text
        self.tokens = tokenize(text)
        self.index = 0

    def parse(self) -> Node:
        if self._peek().kind == "end":
            raise FormulaSyntaxError(expression=self.text, reason="Empty formula")
        node = self._formula()
        token = self._peek()
        if token.kind != "end":
            self._unexpected(token)
        return node

    def _peek(self) -> Token:
        return self.tokens[self.index]

    def _peek_op(self) -> Optional[str]:
        token = self._peek()
        return token.text if token.kind == "op" else None

    def _advance(self) -> Token:
        token = self.tokens[self.index]
        self.index += 1
        return token

    def _accept(self, op: str) -> bool:
        if self._peek_op() == op:
            self.index += 1
            return True
        return False

    def _expect(self, op: str) -> None:
        if not self._accept(op):
            self._unexpected(self._peek(), expected=op)

    def _unexpected(self, token: Token, expected: Optional[str] = None):
        found = "end of formula" if token.kind == "end" else repr(token.text)
        reason = f"Unexpected {found}"
        if expected:
            reason += f", expected {expected!r}"
        raise FormulaSyntaxError(expression=self.text, reason=reason, position=token.position)

    def _formula(self) -> Node:
        if self._accept("~"):
            args = [Absent(), self._sum()]
        else:
            lhs = self._sum()
            if self._peek_op() != "~":
                return lhs
            args = [lhs]
            self._expect("~")
            args.append(self._sum())

        while self._accept("~"):
            args.append(self._sum())
        return Call("~", args)

    def _sum(self) -> Node:
        left = self._product()
        while self._peek_op() in ("+", "-"):
            if self._accept("+"):
                operands = [left, self._product()]
                while self._accept("+"):
                    operands.append(self._product())
                left = Call("+", operands)
            else:
                self._expect("-")
                left = Call("-", (left, self._product()))
        return left

    def _product(self) -> Node:
        left = self._unary()
        while self._peek_op() in ("*", "&", "/"):
            op = self._advance().text
            if op == "/":
                left = Call("/", (left, self._unary()))
                continue
            operands = [left, self._unary()]
            while self._accept(op):
                operands.append(self._unary())
            left = Call(op, operands)
        return left

    def _unary(self) -> Node:
        if self._accept("-"):
            operand = self._unary()
            if isinstance(operand, NumberLiteral):
                return NumberLiteral(-operand.value)
            return Call("-", (operand,))
        if self._accept("+"):
            return self._unary()
        if self._accept("$"):
            return Escape(self._unary())
        return self._power()

    def _power(self) -> Node:
        base = self._atom()
        if self._accept("^"):
            return Call("^", (base, self._unary()))
        return base

    def _atom(self) -> Node:
        token = self._advance()

        if token.kind == "number":
            text = token.text
            if re.fullmatch(r"\d+", text):
                return NumberLiteral(int(text))
            return NumberLiteral(float(text))

        if token.kind == "name":
            if not self._accept("("):
                return Symbol(token.text)
            args = []
            if not self._accept(")"):
                args.append(self._sum())
                while self._accept(","):
                    args.append(self._sum())
                self._expect(")")
            return Call(token.text, args)

        if token.kind == "op" and token.text == "(":
            inner = self._formula()
            self._expect(")")
            return inner

        self._unexpected(token)


def parse_expression(text: str) -> Node:
    """
    Parse formula text into expression nodes without validating it.

    Examples:
        "y ~ a + b"   -> Call("~", (Symbol("y"), Call("+", (Symbol("a"), Symbol("b")))))
        "~ log(x)"    -> Call("~", (Absent(), Call("log", (Symbol("x"),))))
        "x - 1"       -> Call("-", (Symbol("x"), NumberLiteral(1)))
    """
    if not isinstance(text, str):
        raise FormulaSyntaxError(expression=text, reason="Formula text must be a string")
    return _ExpressionParser(text).parse()


class FormulaParser:
    """
    Parser for model formulas.

    Supports:
    - Response and predictors: y ~ a + b
    - One-sided formulas: ~ a + b
    - Interactions: a & b
    - Full expansion: a * b (a + b + a & b)
    - Function calls: log(a), I(a^2), captured for later evaluation
    - Intercept control: 1 (present), 0 or -1 (absent), x - 1
    """

    def __init__(
        self,
        namespace: Optional[Namespace] = None,
        config: Optional[FormulaJaxConfig] = None,
    ):
        self.config = config or get_default_config()
        self.namespace = build_namespace(namespace, backend=self.config.parsing.backend)
        self.logger = get_logger(self.__class__.__name__)

    def parse_expression(self, text: str) -> Node:
        """Parse formula text into expression nodes."""
        return parse_expression(text)

    def parse(self, formula: Union[str, Node]) -> Formula:
        """
        Parse a formula.

        Args:
            formula: Formula text or an expression node

        Returns:
            Formula with the original expression, the rewritten expression and
            the terms on each side

        Raises:
            FormulaSyntaxError: If the formula is malformed
            UnsupportedSyntaxError: If the formula contains $ interpolation
            UnresolvedFunctionError: If a called function is not in the namespace
        """
        expression = self.parse_expression(formula) if isinstance(formula, str) else formula
        self.logger.debug(f"Parsing formula: {expression}")

        root = check_formula(expression)
        reject_escape(root)
        if isinstance(root.args[1], Absent):
            raise FormulaSyntaxError(expression=root, reason="Missing right-hand side")

        normalized = rewrite(root, self.namespace)

        deduplicate = self.config.parsing.deduplicate_terms
        lhs = lower(normalized.args[0], deduplicate=deduplicate)
        rhs = lower(normalized.args[1], deduplicate=deduplicate)

        parsed = Formula(
            original_expression=root,
            normalized_expression=normalized,
            lhs=lhs,
            rhs=rhs,
            implicit_intercept=self.config.parsing.implicit_intercept,
        )

        self.logger.debug(
            f"Parsed formula: {parsed}",
            lhs_terms=len(lhs),
            rhs_terms=len(rhs),
            intercept=parsed.has_intercept,
        )
        return parsed

    def parse_many(
        self,
        formulas: Iterable[Union[str, Node]],
        skip_invalid: bool = False,
    ) -> List[Formula]:
        """
        Parse several formulas.

        Args:
            formulas: Formula texts or expression nodes
            skip_invalid: Log and skip formulas that fail to parse instead of raising

        Returns:
            List of parsed formulas
        """
        parsed = []
        for i, formula in enumerate(formulas):
            try:
                parsed.append(self.parse(formula))
            except FormulaJaxError as e:
                if not skip_invalid:
                    raise
                self.logger.warning(f"Skipping invalid formula {i + 1}: {e.message}")
        return parsed


# Convenience functions for common use cases


def parse_formula(
    formula: Union[str, Node],
    namespace: Optional[Namespace] = None,
    config: Optional[FormulaJaxConfig] = None,
) -> Formula:
    """
    Parse a single formula.

    Args:
        formula: Formula text or expression node
        namespace: Functions available to captured calls, layered over the defaults
        config: Configuration; the global configuration when omitted

    Returns:
        Formula object

    Examples:
        parse_formula("y ~ a + b")
        parse_formula("~ 1 + log(x)")
        parse_formula("y ~ scale(x)", namespace={"scale": my_scale})
    """
    return FormulaParser(namespace=namespace, config=config).parse(formula)


def validate_formula_syntax(formula: Union[str, Node]) -> bool:
    """
    Validate formula structure without rewriting it.

    Returns:
        True if the formula is well formed

    Raises:
        FormulaSyntaxError: If the formula is malformed
        UnsupportedSyntaxError: If the formula contains $ interpolation
    """
    expression = parse_expression(formula) if isinstance(formula, str) else formula
    reject_escape(check_formula(expression))
    return True
