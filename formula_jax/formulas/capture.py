"""
Capture of ordinary function calls appearing in formulas.

Any call whose operator is not a formula operator (``log(x)``, ``I(a^2)``,
``x - 1``) is kept as a ``CapturedCallTerm``: the function bound to its name,
a closure that evaluates the call once variable values are known, the
variables it reads, the call as written, and its arguments rewritten as
formula terms.
"""

import copy
from typing import Any, Callable, Dict, Mapping, Optional, Sequence

from .namespace import Namespace, resolve_function
from .nodes import Absent, Escape, Node, NumberLiteral, Symbol, extract_free_variables
from .terms import CapturedCallTerm
from .validation import check_call
from ..core.exceptions import FormulaSyntaxError, MissingVariableError, UnsupportedSyntaxError

Evaluator = Callable[[Mapping[str, Any]], Any]


class ExpressionClosure:
    """
    Evaluate a stored expression against an environment of variable values.

    Every function named in the expression is looked up when the closure is
    built. Calling the closure only substitutes variable values, so later
    changes to the namespace do not affect it.

    Examples:
        >>> closure = ExpressionClosure(parse_expression("log(a + b)"), ("a", "b"), ns)
        >>> closure({"a": 1.0, "b": 2.0})
    """

    def __init__(self, expression: Node, free_variables: Sequence[str], namespace: Namespace):
        self.expression = expression
        self.free_variables = tuple(free_variables)
        self._evaluate = compile_expression(expression, namespace)

    def __call__(self, environment: Optional[Mapping[str, Any]] = None, **bindings) -> Any:
        values: Dict[str, Any] = dict(environment or {})
        values.update(bindings)

        missing = [name for name in self.free_variables if name not in values]
        if missing:
            raise MissingVariableError(
                missing=missing,
                available=list(values),
                expression=self.expression,
            )
        return self._evaluate(values)

    def __repr__(self) -> str:
        return f"ExpressionClosure({str(self.expression)!r}, free_variables={self.free_variables!r})"


def compile_expression(node: Node, namespace: Namespace) -> Evaluator:
    """Turn an expression into a function of an environment mapping."""
    if isinstance(node, Symbol):
        name = node.name

        def lookup(environment):
            return environment[name]
        return lookup

    if isinstance(node, NumberLiteral):
        value = node.value

        def constant(environment):
            return value
        return constant

    if isinstance(node, Absent):
        return lambda environment: None

    if isinstance(node, Escape):
        raise UnsupportedSyntaxError(expression=node)

    call = check_call(node)
    function = resolve_function(call.operator, namespace, call)
    arguments = [compile_expression(arg, namespace) for arg in call.args]

    def apply(environment):
        return function(*[argument(environment) for argument in arguments])
    return apply


def capture_call(
    function: Callable[..., Any],
    closure: Callable[[Mapping[str, Any]], Any],
    free_variables: Sequence[str],
    original_expression: Node,
    lowered_args: Sequence[Any],
) -> CapturedCallTerm:
    """Construct a captured call term."""
    return CapturedCallTerm(
        function=function,
        closure=closure,
        free_variables=tuple(free_variables),
        original_expression=original_expression,
        lowered_args=tuple(lowered_args),
    )


def capture_call_expression(
    node: Any,
    lowered_args: Sequence[Any],
    namespace: Namespace,
) -> CapturedCallTerm:
    """
    Capture a call that is not a formula operator.

    Args:
        node: The call as written
        lowered_args: The call's arguments, already rewritten as formula terms
        namespace: Functions available to the formula

    Returns:
        CapturedCallTerm for the call

    Raises:
        FormulaSyntaxError: If ``node`` is not a call
        UnresolvedFunctionError: If a function in the call is not in the namespace
    """
    call = check_call(node)
    if len(lowered_args) != len(call.args):
        raise FormulaSyntaxError(
            expression=call,
            reason=f"Expected {len(call.args)} lowered arguments, got {len(lowered_args)}",
        )

    function = resolve_function(call.operator, namespace, call)
    free_variables = extract_free_variables(call)
    closure = ExpressionClosure(call, free_variables, namespace)

    return capture_call(
        function,
        closure,
        free_variables,
        copy.deepcopy(call),
        lowered_args,
    )
