"""
Term algebra for rewritten formulas.

Turns one side of a rewritten formula into a flat tuple of terms by applying
the formula rules:

* ``+`` is associative: ``(a + b) + c`` is ``a + b + c``
* ``&`` distributes over ``+``: ``(a + b) & c`` is ``a&c + b&c``
* ``*`` expands to all main effects and interactions: ``a*b*c`` is
  ``a + b + c + a&b + a&c + b&c + a&b&c``
* subtracting the literal 1 is adding -1: ``x - 1`` is ``x + -1``
* an interaction of a single term is the term itself
"""

import itertools
from typing import Any, Iterable, List, Sequence, Tuple

from .nodes import Call
from .terms import (
    AbsentTerm,
    AbstractTerm,
    CapturedCallTerm,
    ConstantTerm,
    InteractionTerm,
)
from ..core.exceptions import FormulaSyntaxError

TermTuple = Tuple[AbstractTerm, ...]


def lower(node: Any, deduplicate: bool = True) -> TermTuple:
    """
    Lower one side of a rewritten formula to a tuple of terms.

    Args:
        node: Rewritten tree for one side of a formula
        deduplicate: Drop repeated terms, keeping the first occurrence

    Returns:
        Tuple of terms; empty for the missing side of a one-sided formula
    """
    if isinstance(node, AbsentTerm):
        return ()
    terms = _lower(node)
    return unique_terms(terms) if deduplicate else terms


def unique_terms(terms: Iterable[AbstractTerm]) -> TermTuple:
    """Remove duplicate terms, preserving order."""
    return tuple(dict.fromkeys(terms))


def interact(terms: Sequence[AbstractTerm]) -> AbstractTerm:
    """
    Interaction of ``terms``.

    Nested interactions are flattened and repeated terms dropped; a single
    remaining term is returned as is.
    """
    components: List[AbstractTerm] = []
    for term in terms:
        if isinstance(term, InteractionTerm):
            components.extend(term.terms)
        else:
            components.append(term)

    components = list(unique_terms(components))
    if len(components) == 1:
        return components[0]
    return InteractionTerm(tuple(components))


def distribute(operands: Sequence[TermTuple]) -> TermTuple:
    """Interaction of sums: one interaction per choice of a term from each sum."""
    return tuple(interact(choice) for choice in itertools.product(*operands))


def expand_star(operands: Sequence[TermTuple]) -> TermTuple:
    """Main effects and interactions of every non-empty subset of ``operands``."""
    expanded: List[AbstractTerm] = []
    for size in range(1, len(operands) + 1):
        for subset in itertools.combinations(operands, size):
            expanded.extend(distribute(subset))
    return tuple(expanded)


def _is_literal_one(term: Any) -> bool:
    return isinstance(term, ConstantTerm) and term.value == 1


def _lower_captured(term: CapturedCallTerm) -> TermTuple:
    args = term.lowered_args
    if term.function_name == "-" and len(args) == 2 and _is_literal_one(args[1]):
        return _lower(args[0]) + (ConstantTerm(-1),)
    return (term,)


def _lower(node: Any) -> TermTuple:
    if isinstance(node, AbsentTerm):
        raise FormulaSyntaxError(
            reason="Missing expression inside a formula side",
            suggestions=["Only the left-hand side of a formula may be left empty"],
        )

    if isinstance(node, CapturedCallTerm):
        return _lower_captured(node)

    if isinstance(node, AbstractTerm):
        return (node,)

    if isinstance(node, Call):
        if node.operator == "~":
            raise FormulaSyntaxError(
                expression=node,
                reason="Nested formula separator ~",
                suggestions=["Use exactly one ~ per formula"],
            )

        operands = [_lower(arg) for arg in node.args]

        if node.operator == "+":
            return tuple(itertools.chain.from_iterable(operands))

        if node.operator == "&":
            return distribute(operands)

        if node.operator == "*":
            return expand_star(operands)

    raise FormulaSyntaxError(
        expression=node,
        reason="Cannot interpret as formula terms",
        suggestions=["Lower the output of rewrite(), not a raw expression"],
    )
