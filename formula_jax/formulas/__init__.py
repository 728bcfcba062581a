"""
Formula system for formula-jax.

Parses model formulas, rewrites them into terms and captures ordinary
function calls for evaluation against data later.
"""

from .nodes import Node, Call, Symbol, NumberLiteral, Absent, Escape, extract_free_variables
from .validation import is_call, check_call, reject_escape, check_formula
from .terms import (
    AbstractTerm,
    Term,
    ConstantTerm,
    AbsentTerm,
    InteractionTerm,
    CapturedCallTerm,
)
from .namespace import default_namespace, build_namespace, resolve_function
from .capture import ExpressionClosure, capture_call, capture_call_expression
from .rewriter import SPECIALS, rewrite
from .algebra import lower
from .formula import Formula
from .parser import (
    FormulaParser,
    parse_formula,
    parse_expression,
    validate_formula_syntax,
)

__all__ = [
    # Main API
    "parse_formula",
    "parse_expression",
    "validate_formula_syntax",
    "rewrite",
    "lower",
    "capture_call",
    "FormulaParser",
    "Formula",
    "SPECIALS",
    # Expression nodes
    "Node",
    "Call",
    "Symbol",
    "NumberLiteral",
    "Absent",
    "Escape",
    "extract_free_variables",
    # Validation
    "is_call",
    "check_call",
    "reject_escape",
    "check_formula",
    # Term types
    "AbstractTerm",
    "Term",
    "ConstantTerm",
    "AbsentTerm",
    "InteractionTerm",
    "CapturedCallTerm",
    # Captured calls
    "ExpressionClosure",
    "capture_call_expression",
    "default_namespace",
    "build_namespace",
    "resolve_function",
]
