"""
Structural checks applied to formula expressions before rewriting.
"""

from typing import Any, Optional

from .nodes import Call, Escape, Node
from ..core.exceptions import FormulaSyntaxError, UnsupportedSyntaxError


def is_call(node: Any, operator: Optional[str] = None) -> bool:
    """True if ``node`` is a call, and, when given, a call to ``operator``."""
    if not isinstance(node, Call):
        return False
    return operator is None or node.operator == operator


def check_call(node: Any) -> Call:
    """Return ``node`` unchanged if it is a call, otherwise raise."""
    if not is_call(node):
        raise FormulaSyntaxError(
            expression=node,
            reason="Non-call expression encountered",
        )
    return node


def reject_escape(node: Any) -> None:
    """Raise if an interpolation marker appears anywhere inside ``node``."""
    if not isinstance(node, Node):
        return
    for child in node.walk():
        if isinstance(child, Escape):
            raise UnsupportedSyntaxError(expression=child)


def check_formula(node: Any) -> Call:
    """
    Validate the root of a formula.

    The root must be a ``~`` call with exactly two arguments (left and right
    hand side). Anything else, including ``a ~ b ~ c``, is rejected.
    """
    if not is_call(node, "~"):
        raise FormulaSyntaxError(
            expression=node,
            reason="Expected formula separator ~",
            suggestions=[
                "Formulas have the form 'response ~ predictors'",
                "Use '~ predictors' for a one-sided formula",
            ],
        )
    if len(node.args) != 2:
        raise FormulaSyntaxError(
            expression=node,
            reason=f"Malformed formula, ~ takes 2 arguments, got {len(node.args)}",
            suggestions=[
                "Use exactly one ~ per formula",
                "Nested formulas are not supported",
            ],
        )
    return node
