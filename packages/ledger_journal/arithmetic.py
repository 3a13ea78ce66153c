"""Evaluate parenthesized amount expressions such as ``(123 * 3)``.

The expression is parsed with :mod:`ast` and walked over a small whitelist of
node types: binary ``+ - * /``, unary ``+``/``-`` and numeric literals.
Literals are re-read from their source text so that ``0.1`` becomes
``Decimal("0.1")`` rather than the nearest float; all arithmetic happens in
:class:`decimal.Decimal`.
"""

from __future__ import annotations

import ast
import decimal
import operator
import re
from collections.abc import Callable
from decimal import Decimal

from .errors import ExpressionError

_BINARY_OPS: dict[type[ast.operator], Callable[[Decimal, Decimal], Decimal]] = {
    ast.Add: operator.add,
    ast.Sub: operator.sub,
    ast.Mult: operator.mul,
    ast.Div: operator.truediv,
}

_UNARY_OPS: dict[type[ast.unaryop], Callable[[Decimal], Decimal]] = {
    ast.UAdd: operator.pos,
    ast.USub: operator.neg,
}

# Integer literals with leading zeros are a syntax error for ``ast``.
_LEADING_ZEROS = re.compile(r"(?<![\d.])0+(?=\d)")


def _eval_node(node: ast.AST, source: str) -> Decimal:
    if isinstance(node, ast.BinOp):
        op = _BINARY_OPS.get(type(node.op))
        if op is None:
            raise ExpressionError(f"unsupported operator {type(node.op).__name__}")
        return op(_eval_node(node.left, source), _eval_node(node.right, source))
    if isinstance(node, ast.UnaryOp):
        uop = _UNARY_OPS.get(type(node.op))
        if uop is None:
            raise ExpressionError(f"unsupported operator {type(node.op).__name__}")
        return uop(_eval_node(node.operand, source))
    if isinstance(node, ast.Constant) and type(node.value) in (int, float):
        text = ast.get_source_segment(source, node)
        return Decimal(text if text is not None else str(node.value))
    raise ExpressionError(f"unsupported element {type(node).__name__}")


def evaluate(expression: str) -> Decimal:
    """Evaluate ``expression`` and return its exact decimal value.

    Raises :class:`ExpressionError` for syntax errors, anything beyond the
    four arithmetic operators, and division by zero.
    """

    source = _LEADING_ZEROS.sub("", expression.strip())
    if not source:
        raise ExpressionError("empty expression")
    try:
        tree = ast.parse(source, mode="eval")
    except (SyntaxError, RecursionError, MemoryError) as exc:
        raise ExpressionError(f"invalid expression {expression!r}") from exc
    try:
        return _eval_node(tree.body, source)
    except RecursionError as exc:
        raise ExpressionError(f"expression too deeply nested {expression!r}") from exc
    except (decimal.DivisionByZero, decimal.InvalidOperation) as exc:
        raise ExpressionError(f"cannot evaluate {expression!r}: division by zero") from exc


__all__ = ["evaluate"]
