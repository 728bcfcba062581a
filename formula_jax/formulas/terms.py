"""
Formula term representations for formula-jax.

Defines the values that parsed formulas are made of. Terms are immutable and
compare structurally, so they can be deduplicated and used as dictionary keys.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Collection, Mapping, Optional, Tuple

from .nodes import Node, Number
from ..core.exceptions import FormulaSyntaxError, MissingVariableError


class AbstractTerm(ABC):
    """Abstract base class for formula terms."""

    @abstractmethod
    def get_variable_names(self) -> Tuple[str, ...]:
        """Get the variable names used in this term, in order of appearance."""

    @abstractmethod
    def to_string(self) -> str:
        """Convert term to string representation."""

    def validate_variables(self, available_variables: Collection[str]) -> None:
        """Check that every variable used by this term is available."""
        missing = [
            name for name in self.get_variable_names() if name not in available_variables
        ]
        if missing:
            raise MissingVariableError(
                missing=missing,
                available=list(available_variables),
                expression=self.to_string(),
            )

    def __str__(self) -> str:
        return self.to_string()


@dataclass(frozen=True)
class Term(AbstractTerm):
    """Reference to a named data column."""

    name: str

    def __post_init__(self):
        if not self.name or not isinstance(self.name, str):
            raise FormulaSyntaxError(
                expression=self.name,
                reason="Invalid variable name",
                suggestions=[
                    "Variable names must be non-empty strings",
                    "Examples: 'age', 'sex', 'weight'",
                ],
            )

    def get_variable_names(self) -> Tuple[str, ...]:
        return (self.name,)

    def to_string(self) -> str:
        return self.name


@dataclass(frozen=True)
class ConstantTerm(AbstractTerm):
    """
    Numeric literal.

    In a sum of terms, 1 requests an intercept and 0 or -1 suppress it.
    """

    value: Number

    def get_variable_names(self) -> Tuple[str, ...]:
        return ()

    def to_string(self) -> str:
        return str(self.value)

    @property
    def intercept_marker(self) -> Optional[bool]:
        """True for 1, False for 0 or -1, None for any other constant."""
        if self.value == 1:
            return True
        if self.value in (0, -1):
            return False
        return None


@dataclass(frozen=True)
class AbsentTerm(AbstractTerm):
    """Left-hand side of a one-sided formula."""

    def get_variable_names(self) -> Tuple[str, ...]:
        return ()

    def to_string(self) -> str:
        return ""


@dataclass(frozen=True)
class InteractionTerm(AbstractTerm):
    """Interaction between two or more terms (e.g., a & b)."""

    terms: Tuple[AbstractTerm, ...]

    def __post_init__(self):
        if not isinstance(self.terms, tuple):
            object.__setattr__(self, "terms", tuple(self.terms))

        if len(self.terms) < 2:
            raise FormulaSyntaxError(
                expression=self.terms,
                reason="Interaction requires at least 2 terms",
                suggestions=["For a single term, use the term itself"],
            )

        if len(set(self.terms)) != len(self.terms):
            raise FormulaSyntaxError(
                expression=self.terms,
                reason="Duplicate terms in interaction",
                suggestions=["Each term should appear once per interaction"],
            )

    def get_variable_names(self) -> Tuple[str, ...]:
        names = {}
        for term in self.terms:
            for name in term.get_variable_names():
                names.setdefault(name, None)
        return tuple(names)

    def to_string(self) -> str:
        return " & ".join(term.to_string() for term in self.terms)


@dataclass(frozen=True)
class CapturedCallTerm(AbstractTerm):
    """
    A call to an ordinary function, kept for evaluation against data later.

    Attributes:
        function: The callable bound to the call's name when it was captured
        closure: Callable taking a mapping of variable name to value and
            returning the result of the original call
        free_variables: Names the call reads from its environment
        original_expression: The call as written, before rewriting
        lowered_args: The call's arguments rewritten as formula terms, so
            that ``f(a + b)`` still exposes the term sum ``a + b``
    """

    function: Callable[..., Any] = field(hash=False)
    closure: Callable[[Mapping[str, Any]], Any] = field(compare=False, hash=False)
    free_variables: Tuple[str, ...]
    original_expression: Node
    lowered_args: Tuple[Any, ...]

    def get_variable_names(self) -> Tuple[str, ...]:
        return self.free_variables

    def to_string(self) -> str:
        return str(self.original_expression)

    @property
    def function_name(self) -> str:
        return self.original_expression.operator

    def evaluate(self, environment: Mapping[str, Any]) -> Any:
        """Evaluate the original call with variables bound from ``environment``."""
        return self.closure(environment)

    def __repr__(self) -> str:
        return (
            f"CapturedCallTerm({self.to_string()!r}, "
            f"free_variables={self.free_variables!r}, "
            f"lowered_args={self.lowered_args!r})"
        )
