"""
Function namespaces used to resolve calls captured from formulas.

A formula such as ``y ~ log(x)`` binds ``log`` when the formula is parsed, not
when data arrives. The namespace passed to the parser is layered over a
default one holding the arithmetic operators and the common elementwise
functions of the configured array backend.
"""

import functools
import operator
from typing import Any, Callable, Dict, Mapping, Optional, Union

import jax.numpy as jnp
import numpy as np

from ..config.settings import ArrayBackend, get_default_config
from ..core.exceptions import ConfigurationError, UnresolvedFunctionError

Namespace = Mapping[str, Callable[..., Any]]

ELEMENTWISE_FUNCTIONS = (
    "log",
    "log1p",
    "log2",
    "log10",
    "exp",
    "expm1",
    "sqrt",
    "square",
    "abs",
    "sin",
    "cos",
    "tan",
    "tanh",
)


def _plus(*args):
    """Arithmetic sum; unary plus returns its argument."""
    return functools.reduce(operator.add, args)


def _minus(left, right=None):
    """Binary subtraction or unary negation."""
    if right is None:
        return operator.neg(left)
    return operator.sub(left, right)


def _times(*args):
    return functools.reduce(operator.mul, args)


def _bitwise_and(*args):
    return functools.reduce(operator.and_, args)


def identity(value):
    """Protect an expression from formula interpretation, as in ``I(a + b)``."""
    return value


OPERATORS: Dict[str, Callable[..., Any]] = {
    "+": _plus,
    "-": _minus,
    "*": _times,
    "/": operator.truediv,
    "^": operator.pow,
    "&": _bitwise_and,
}


@functools.lru_cache(maxsize=None)
def _backend_functions(backend: str) -> Dict[str, Callable[..., Any]]:
    module = jnp if backend == ArrayBackend.JAX else np
    return {name: getattr(module, name) for name in ELEMENTWISE_FUNCTIONS}


def default_namespace(backend: Optional[Union[str, ArrayBackend]] = None) -> Dict[str, Callable[..., Any]]:
    """
    Build the default function namespace.

    Args:
        backend: "jax" or "numpy"; defaults to the configured backend

    Returns:
        New dictionary mapping names to callables
    """
    if backend is None:
        backend = get_default_config().parsing.backend
    try:
        backend = ArrayBackend(backend).value
    except ValueError:
        raise ConfigurationError(
            config_key="parsing.backend",
            reason=f"unknown array backend {backend!r}",
        ) from None

    namespace = dict(OPERATORS)
    namespace.update(_backend_functions(backend))
    namespace["I"] = identity
    return namespace


def build_namespace(
    namespace: Optional[Namespace] = None,
    backend: Optional[Union[str, ArrayBackend]] = None,
) -> Dict[str, Callable[..., Any]]:
    """Layer a user namespace over the default one."""
    combined = default_namespace(backend)
    if namespace:
        combined.update(namespace)
    return combined


def resolve_function(name: str, namespace: Namespace, expression: Any = None) -> Callable[..., Any]:
    """Look up the function bound to ``name``, raising if it is not callable."""
    try:
        function = namespace[name]
    except KeyError:
        raise UnresolvedFunctionError(
            function_name=name,
            expression=expression,
            available=[key for key in namespace if key.isidentifier()],
        ) from None

    if not callable(function):
        raise UnresolvedFunctionError(
            function_name=name,
            expression=expression,
        )
    return function
