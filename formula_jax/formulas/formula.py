"""
Formula values for formula-jax.

A ``Formula`` keeps the expression as written, its rewritten form, and the
terms on each side after the term algebra has been applied.
"""

from dataclasses import dataclass, field
from typing import Any, Collection, Dict, Tuple

from .nodes import Call, Node
from .terms import AbsentTerm, AbstractTerm, ConstantTerm
from ..core.exceptions import MissingVariableError


@dataclass(frozen=True)
class Formula:
    """
    Parsed model formula.

    Examples:
        y ~ a + b        -> lhs=(y,), rhs=(a, b)
        y ~ a * b        -> lhs=(y,), rhs=(a, b, a & b)
        ~ 1 + log(x)     -> lhs=(), rhs=(1, log(x))
        0 ~ x            -> lhs=(0,), rhs=(x,)
    """

    original_expression: Node
    normalized_expression: Call
    lhs: Tuple[AbstractTerm, ...]
    rhs: Tuple[AbstractTerm, ...]
    implicit_intercept: bool = field(default=True, compare=False)

    @property
    def is_one_sided(self) -> bool:
        return isinstance(self.normalized_expression.args[0], AbsentTerm)

    @property
    def has_intercept(self) -> bool:
        """
        Whether the right-hand side includes an intercept.

        The last of the markers 1 (present), 0 or -1 (absent) wins; without a
        marker the formula's implicit intercept setting applies.
        """
        markers = [
            term.intercept_marker
            for term in self.rhs
            if isinstance(term, ConstantTerm) and term.intercept_marker is not None
        ]
        if markers:
            return markers[-1]
        return self.implicit_intercept

    @property
    def predictor_terms(self) -> Tuple[AbstractTerm, ...]:
        """Right-hand side terms other than the intercept markers."""
        return tuple(
            term
            for term in self.rhs
            if not (isinstance(term, ConstantTerm) and term.intercept_marker is not None)
        )

    def get_variable_names(self) -> Tuple[str, ...]:
        """Variables used on either side, left-hand side first."""
        names: Dict[str, None] = {}
        for term in self.lhs + self.rhs:
            for name in term.get_variable_names():
                names.setdefault(name, None)
        return tuple(names)

    def validate_variables(self, available_variables: Collection[str]) -> None:
        """
        Validate that every variable in the formula is available.

        Raises:
            MissingVariableError: If any variable is missing
        """
        missing = [name for name in self.get_variable_names() if name not in available_variables]
        if missing:
            raise MissingVariableError(
                missing=missing,
                available=list(available_variables),
                expression=self.to_string(),
            )

    def to_string(self) -> str:
        rhs = " + ".join(_term_string(term) for term in self.rhs)
        if self.is_one_sided:
            return f"~ {rhs}"
        lhs = " + ".join(_term_string(term) for term in self.lhs)
        return f"{lhs} ~ {rhs}"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "formula": str(self.original_expression),
            "lhs": [term.to_string() for term in self.lhs],
            "rhs": [term.to_string() for term in self.rhs],
            "has_intercept": self.has_intercept,
            "variables": list(self.get_variable_names()),
        }

    def __str__(self) -> str:
        return self.to_string()


def _term_string(term: AbstractTerm) -> str:
    text = term.to_string()
    if isinstance(term, ConstantTerm) and term.value < 0:
        return f"({text})"
    return text
