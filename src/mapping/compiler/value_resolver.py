"""Resolve expressions to constants.

Strings resolve from literals and named string constants; numbers are
constant-folded over + - * / % with named numeric constants. Anything
else resolves to None, never raises.
"""

from __future__ import annotations

import math
from collections.abc import Mapping

from src.mapping.syntax import (
    Binary,
    Cast,
    Expression,
    Identifier,
    Literal,
    LiteralKind,
    MemberAccess,
    Parenthesized,
    Unary,
)
from src.models.mapping_document import ConditionValue


def resolve_string(expression: Expression | None, strings: Mapping[str, str]) -> str | None:
    """Resolve a string literal or a reference to a string constant."""
    match expression:
        case Literal(kind=LiteralKind.STRING, value=value):
            return value
        case Identifier(name=name) | MemberAccess(name=name) if name in strings:
            return strings[name]
    return None


def evaluate_numeric(expression: Expression | None, numbers: Mapping[str, float]) -> float | None:
    """Constant-fold a numeric expression.

    Division or modulo by zero yields None rather than inf/nan.
    """
    match expression:
        case Literal(kind=LiteralKind.NUMBER, value=value):
            return float(value)
        case Unary(operator="-", operand=operand):
            inner = evaluate_numeric(operand, numbers)
            return -inner if inner is not None else None
        case Unary(operator="+", operand=operand):
            return evaluate_numeric(operand, numbers)
        case Parenthesized(inner=inner) | Cast(operand=inner):
            return evaluate_numeric(inner, numbers)
        case Identifier(name=name) | MemberAccess(name=name) if name in numbers:
            return numbers[name]
        case Binary(operator=operator, left=left, right=right):
            return _evaluate_binary(operator, left, right, numbers)
    return None


def _evaluate_binary(
    operator: str, left: Expression, right: Expression, numbers: Mapping[str, float]
) -> float | None:
    lhs = evaluate_numeric(left, numbers)
    rhs = evaluate_numeric(right, numbers)
    if lhs is None or rhs is None:
        return None

    match operator:
        case "+":
            return lhs + rhs
        case "-":
            return lhs - rhs
        case "*":
            return lhs * rhs
        case "/":
            return lhs / rhs if rhs != 0 else None
        case "%":
            # C# remainder keeps the sign of the dividend
            return math.fmod(lhs, rhs) if rhs != 0 else None
    return None


def comparable_value(expression: Expression | None, strings: Mapping[str, str]) -> ConditionValue | None:
    """Literal value usable as the right-hand side of a rule term.

    Numbers keep their literal kind (int stays int), `Enum.3`-style member
    names that are integers resolve to that integer, casts and parentheses
    are transparent.
    """
    match expression:
        case Literal(kind=LiteralKind.NUMBER | LiteralKind.STRING | LiteralKind.BOOL, value=value):
            return value
        case Identifier(name=name) if name in strings:
            return strings[name]
        case MemberAccess(name=name):
            try:
                return int(name)
            except ValueError:
                return None
        case Unary(operator="-", operand=operand):
            inner = comparable_value(operand, strings)
            if isinstance(inner, (int, float)) and not isinstance(inner, bool):
                return -inner
            return None
        case Cast(operand=inner) | Parenthesized(inner=inner):
            return comparable_value(inner, strings)
    return None


def property_path(expression: Expression | None) -> str | None:
    """Binding name a condition operand refers to: `x` or `x.floatValue` -> "x"."""
    match expression:
        case MemberAccess(target=Identifier(name=name)):
            return name
        case Identifier(name=name):
            return name
    return None


def round_half_even(value: float) -> int | None:
    """Round to the nearest integer, ties to even; None for inf and NaN."""
    if not math.isfinite(value):
        return None
    return int(round(value))
