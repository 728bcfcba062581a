"""
Rewriting of formula expressions into term trees.

The rewriter walks an expression once and replaces

* symbols with ``Term``,
* numbers with ``ConstantTerm``,
* a missing left-hand side with ``AbsentTerm``,
* calls to ordinary functions with ``CapturedCallTerm``,

while keeping calls to the formula operators ``~ + & *`` in place with their
arguments rewritten. Expanding those operators (``a*b`` into
``a + b + a&b`` and so on) is left to :mod:`formula_jax.formulas.algebra`.

The output is not a formula expression any more; rewriting it again is not
supported and raises ``FormulaSyntaxError``.
"""

from typing import Any, Optional

from .capture import capture_call_expression
from .namespace import Namespace, build_namespace
from .nodes import Absent, Call, Escape, NumberLiteral, Symbol
from .terms import AbsentTerm, ConstantTerm, Term
from .validation import reject_escape
from ..core.exceptions import FormulaSyntaxError, UnsupportedSyntaxError

SPECIALS = frozenset({"+", "&", "*", "~"})


def rewrite(node: Any, namespace: Optional[Namespace] = None) -> Any:
    """
    Rewrite an expression into a term tree.

    Args:
        node: Expression node
        namespace: Functions available to captured calls; layered over the
            default namespace when given, the default namespace otherwise

    Returns:
        The rewritten tree

    Examples:
        Symbol("a")                              -> Term("a")
        NumberLiteral(1)                         -> ConstantTerm(1)
        Call("+", (Symbol("a"), Symbol("b")))    -> Call("+", (Term("a"), Term("b")))
        Call("log", (Symbol("a"),))              -> CapturedCallTerm(log(a), ...)
    """
    reject_escape(node)
    return _rewrite(node, build_namespace(namespace))


def _rewrite(node: Any, namespace: Namespace) -> Any:
    if isinstance(node, Absent):
        return AbsentTerm()

    if isinstance(node, Symbol):
        return Term(node.name)

    if isinstance(node, NumberLiteral):
        return ConstantTerm(node.value)

    if isinstance(node, Escape):
        raise UnsupportedSyntaxError(expression=node)

    if not isinstance(node, Call):
        raise FormulaSyntaxError(
            expression=node,
            reason="Cannot rewrite non-expression value",
            suggestions=[
                "Only formula expressions can be rewritten",
                "Rewritten term trees cannot be rewritten again",
            ],
        )

    args = tuple(_rewrite(arg, namespace) for arg in node.args)

    if node.operator in SPECIALS:
        return Call(node.operator, args)

    return capture_call_expression(node, args, namespace)
