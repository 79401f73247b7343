"""Safe arithmetic evaluation for the assistant's ``evaluate_math`` tool call.

Expressions are validated against a character and identifier allow-list,
then evaluated by walking the Python AST. Nothing is passed to ``eval``.
"""

from __future__ import annotations

import ast
import math
import operator
import re
from collections.abc import Callable
from typing import Any

MAX_EXPRESSION_CHARS = 200
RESULT_DECIMALS = 10

_INVALID_CHARS_RE = re.compile(r"[^0-9+\-*/%^().,\sA-Za-z]")
_IDENTIFIER_RE = re.compile(r"[A-Za-z]+")


def _round_result(value: float) -> float:
    scale = 10**RESULT_DECIMALS
    if abs(value) * scale >= 2**53:
        # Already coarser than the display precision
        return value
    return math.floor(value * scale + 0.5) / scale


def _round(x: float) -> float:
    # Halves round up, as calculators do
    return math.floor(x + 0.5)


ALLOWED_FUNCTIONS: dict[str, Callable[..., float]] = {
    "abs": abs,
    "ceil": math.ceil,
    "floor": math.floor,
    "round": _round,
    "sqrt": math.sqrt,
    "log": math.log,
    "ln": math.log,
    "exp": math.exp,
    "pow": math.pow,
    "max": max,
    "min": min,
    "sin": math.sin,
    "cos": math.cos,
    "tan": math.tan,
}

ALLOWED_CONSTANTS: dict[str, float] = {
    "pi": math.pi,
    "e": math.e,
}

_BINARY_OPERATORS: dict[type[ast.operator], Callable[[float, float], float]] = {
    ast.Add: operator.add,
    ast.Sub: operator.sub,
    ast.Mult: operator.mul,
    ast.Div: operator.truediv,
    ast.Mod: math.fmod,  # remainder keeps the dividend's sign
    ast.Pow: math.pow,
}

_UNARY_OPERATORS: dict[type[ast.unaryop], Callable[[float], float]] = {
    ast.UAdd: operator.pos,
    ast.USub: operator.neg,
}

MATH_TOOL_DEFINITION: dict[str, Any] = {
    "type": "function",
    "function": {
        "name": "evaluate_math",
        "description": (
            "Safely evaluate a mathematical expression when you need exact arithmetic "
            "or ROI-related calculations."
        ),
        "parameters": {
            "type": "object",
            "properties": {
                "expression": {
                    "type": "string",
                    "description": (
                        "The mathematical expression to evaluate. Supports +, -, *, /, %, "
                        "^ (exponent), parentheses, and functions: abs, ceil, floor, round, "
                        "sqrt, log/ln, exp, pow, max, min, sin, cos, tan. Constants: pi, e."
                    ),
                },
            },
            "required": ["expression"],
        },
    },
}


class MathExpressionError(ValueError):
    """Expression rejected by validation or not evaluable to a finite number."""


def validate_expression(expression: Any) -> str:
    """
    Check an expression against the allow-lists.

    Returns:
        The trimmed expression

    Raises:
        MathExpressionError: On empty, overlong, or disallowed input
    """
    if not isinstance(expression, str):
        raise MathExpressionError("Expression must be a string.")

    trimmed = expression.strip()
    if not trimmed:
        raise MathExpressionError("Expression cannot be empty.")
    if len(trimmed) > MAX_EXPRESSION_CHARS:
        raise MathExpressionError("Expression is too long. Keep it concise.")
    if _INVALID_CHARS_RE.search(trimmed):
        raise MathExpressionError("Unsupported characters detected in expression.")

    unknown = [
        token.lower()
        for token in _IDENTIFIER_RE.findall(trimmed)
        if token.lower() not in ALLOWED_FUNCTIONS and token.lower() not in ALLOWED_CONSTANTS
    ]
    if unknown:
        raise MathExpressionError(
            f"Unsupported functions/constants: {', '.join(dict.fromkeys(unknown))}."
        )

    return trimmed


def _evaluate_node(node: ast.AST) -> float:
    if isinstance(node, ast.Expression):
        return _evaluate_node(node.body)

    if isinstance(node, ast.Constant) and isinstance(node.value, (int, float)):
        # Floats everywhere so huge powers overflow instead of growing ints
        return float(node.value)

    if isinstance(node, ast.Name) and node.id in ALLOWED_CONSTANTS:
        return ALLOWED_CONSTANTS[node.id]

    if isinstance(node, ast.BinOp) and type(node.op) in _BINARY_OPERATORS:
        left = _evaluate_node(node.left)
        right = _evaluate_node(node.right)
        return _BINARY_OPERATORS[type(node.op)](left, right)

    if isinstance(node, ast.UnaryOp) and type(node.op) in _UNARY_OPERATORS:
        return _UNARY_OPERATORS[type(node.op)](_evaluate_node(node.operand))

    if (
        isinstance(node, ast.Call)
        and isinstance(node.func, ast.Name)
        and node.func.id in ALLOWED_FUNCTIONS
        and not node.keywords
    ):
        args = [_evaluate_node(arg) for arg in node.args]
        return float(ALLOWED_FUNCTIONS[node.func.id](*args))

    raise MathExpressionError("Unsupported expression syntax.")


def evaluate_math(expression: Any) -> dict[str, Any]:
    """
    Evaluate an arithmetic expression safely.

    ``^`` is exponentiation; ``log`` and ``ln`` are both natural log.

    Returns:
        {"expression": <validated expression>, "result": <float, 10 decimals>}

    Raises:
        MathExpressionError: On invalid syntax, disallowed names, or a
            non-finite result (division by zero, domain errors, overflow)
    """
    validated = validate_expression(expression)
    normalized = validated.replace("^", "**").lower()

    try:
        tree = ast.parse(normalized, mode="eval")
    except SyntaxError as e:
        raise MathExpressionError(f"Invalid expression syntax: {e.msg}") from e

    try:
        raw_result = _evaluate_node(tree)
    except MathExpressionError:
        raise
    except (ZeroDivisionError, OverflowError, ValueError, TypeError) as e:
        raise MathExpressionError("Expression did not evaluate to a finite number.") from e

    if not math.isfinite(raw_result):
        raise MathExpressionError("Expression did not evaluate to a finite number.")

    return {"expression": validated, "result": _round_result(raw_result)}
