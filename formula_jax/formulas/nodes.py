"""
Expression nodes for formula-jax.

Formula text is parsed into an immutable tree built from four variants
(``Call``, ``Symbol``, ``NumberLiteral``, ``Absent``) plus the ``Escape``
marker, which the parser produces for ``$x`` and which the validator always
rejects.
"""

from dataclasses import dataclass, field
from typing import Any, Iterator, Tuple, Union

Number = Union[int, float]

# Binding strength used when rendering nodes back to formula text
_PRECEDENCE = {
    "~": 1,
    "+": 2,
    "-": 2,
    "*": 3,
    "/": 3,
    "&": 3,
    "^": 5,
}
_UNARY_PRECEDENCE = 4
_ATOM_PRECEDENCE = 6


class Node:
    """Base class for formula expression nodes."""

    def children(self) -> Tuple["Node", ...]:
        return ()

    def walk(self) -> Iterator["Node"]:
        """Yield this node and every descendant, depth first, left to right."""
        yield self
        for child in self.children():
            yield from child.walk()

    def __str__(self) -> str:
        return format_expression(self)


@dataclass(frozen=True, repr=False)
class Call(Node):
    """Application of ``operator`` to ``args``; formula operators included."""

    operator: str
    args: Tuple[Node, ...] = field(default_factory=tuple)

    def __post_init__(self):
        if not isinstance(self.args, tuple):
            object.__setattr__(self, "args", tuple(self.args))

    def children(self) -> Tuple[Node, ...]:
        return self.args

    def __repr__(self) -> str:
        args = ", ".join(repr(arg) for arg in self.args)
        return f"Call({self.operator!r}, ({args}{',' if len(self.args) == 1 else ''}))"


@dataclass(frozen=True, repr=False)
class Symbol(Node):
    """A bare name; a data column unless it is in call position."""

    name: str

    def __repr__(self) -> str:
        return f"Symbol({self.name!r})"


@dataclass(frozen=True, repr=False)
class NumberLiteral(Node):
    """A numeric literal."""

    value: Number

    def __repr__(self) -> str:
        return f"NumberLiteral({self.value!r})"


@dataclass(frozen=True, repr=False)
class Absent(Node):
    """The missing left-hand side of a one-sided formula."""

    def __repr__(self) -> str:
        return "Absent()"


@dataclass(frozen=True, repr=False)
class Escape(Node):
    """An interpolation marker (``$expr``)."""

    expression: Node

    def children(self) -> Tuple[Node, ...]:
        return (self.expression,)

    def __repr__(self) -> str:
        return f"Escape({self.expression!r})"


def extract_free_variables(node: Any) -> Tuple[str, ...]:
    """
    Collect the variable names referenced by an expression.

    Names are returned once each, in order of first appearance in a depth
    first, left to right walk. Operators in call position are not variables.

    Examples:
        log(a + b)    -> ("a", "b")
        f(b, g(a, b)) -> ("b", "a")
        1             -> ()
    """
    if not isinstance(node, Node):
        return ()

    seen = {}
    for child in node.walk():
        if isinstance(child, Symbol):
            seen.setdefault(child.name, None)
    return tuple(seen)


def format_expression(node: Node) -> str:
    """Render a node as formula text."""
    return _format(node)


def _node_precedence(node: Any) -> int:
    if isinstance(node, Call):
        if node.operator in _PRECEDENCE and len(node.args) >= 2:
            return _PRECEDENCE[node.operator]
        if node.operator in ("-", "+") and len(node.args) == 1:
            return _UNARY_PRECEDENCE
        return _ATOM_PRECEDENCE
    if isinstance(node, Escape):
        return _UNARY_PRECEDENCE
    if isinstance(node, NumberLiteral) and node.value < 0:
        return _UNARY_PRECEDENCE
    return _ATOM_PRECEDENCE


def _wrap(text: str, needs_parens: bool) -> str:
    return f"({text})" if needs_parens else text


def _format_number(value: Number) -> str:
    if isinstance(value, float) and value.is_integer() and abs(value) < 1e16:
        return f"{value:.1f}"
    return repr(value)


def _format(node: Any) -> str:
    if isinstance(node, Symbol):
        return node.name
    if isinstance(node, NumberLiteral):
        return _format_number(node.value)
    if isinstance(node, Absent):
        return ""
    if isinstance(node, Escape):
        inner = node.expression
        return "$" + _wrap(_format(inner), _node_precedence(inner) < _ATOM_PRECEDENCE)
    if not isinstance(node, Call):
        # Term values and other foreign objects inside rewritten trees
        to_string = getattr(node, "to_string", None)
        return to_string() if callable(to_string) else str(node)

    op, args = node.operator, node.args

    if op in _PRECEDENCE and len(args) >= 2:
        prec = _PRECEDENCE[op]
        if op == "~" and isinstance(args[0], Absent):
            return "~ " + " ~ ".join(_format(arg) for arg in args[1:])

        parts = []
        for i, arg in enumerate(args):
            child_prec = _node_precedence(arg)
            if op == "^":
                # right associative
                needs_parens = child_prec < prec or (i == 0 and child_prec == prec)
            else:
                same_op = isinstance(arg, Call) and arg.operator == op
                needs_parens = child_prec < prec or (
                    child_prec == prec and (i > 0 or same_op)
                )
            parts.append(_wrap(_format(arg), needs_parens))

        separator = "^" if op == "^" else f" {op} "
        return separator.join(parts)

    if op in ("-", "+") and len(args) == 1:
        arg = args[0]
        return op + _wrap(_format(arg), _node_precedence(arg) <= _UNARY_PRECEDENCE)

    return f"{op}({', '.join(_format(arg) for arg in args)})"
