"""Condition builder for turning `if` tests into visibility rules.

A visibility predicate is kept in disjunctive normal form:

- a Term is one `path == value` constraint
- a Rule is a conjunction of terms
- a RuleSet is a disjunction of rules (empty means "no constraint learned")

Only a fixed vocabulary of test shapes is understood: parentheses, `!`,
`&&`, `||`, `==`/`!=` against literals or string constants, ordered
comparisons against bounded bindings, and bare boolean bindings. Anything
else yields an empty RuleSet. Negation only inverts booleans and the 0/1
sentinels; a rule holding any other value is dropped when negated.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Mapping
from typing import Protocol

from src.mapping.compiler.value_resolver import comparable_value, property_path, round_half_even
from src.mapping.syntax import Binary, Expression, Identifier, Parenthesized, Unary
from src.models.mapping_document import ConditionalRule, ConditionValue

logger = logging.getLogger(__name__)

Term = tuple[str, ConditionValue]
Rule = tuple[Term, ...]
RuleSet = tuple[Rule, ...]

EMPTY: RuleSet = ()

# Largest value set an ordered comparison may be enumerated into
MAX_ENUMERATED_VALUES = 256
# Largest disjunction an AND may expand into
MAX_COMBINED_RULES = 1024

_FLOAT_SENTINEL_EPSILON = 0.0001

_MIRRORED_OPERATORS = {"<": ">", "<=": ">=", ">": "<", ">=": "<="}


class BoundedBinding(Protocol):
    """What the builder needs to know about a binding to bound a comparison."""

    enum_values: list[str]
    range_min: float | None
    range_max: float | None


# =============================================================================
# Rule algebra
# =============================================================================


def make_rule(path: str, value: ConditionValue) -> Rule:
    return ((path, value),)


def combine_and(left: RuleSet, right: RuleSet) -> RuleSet:
    """Cartesian product of two disjunctions; an empty side is the identity."""
    if not left:
        return right
    if not right:
        return left
    if len(left) * len(right) > MAX_COMBINED_RULES:
        logger.debug(
            f"Dropping AND operand: {len(left)} x {len(right)} rules exceeds {MAX_COMBINED_RULES}"
        )
        return left
    return tuple(lhs + rhs for lhs in left for rhs in right)


def combine_or(left: RuleSet, right: RuleSet) -> RuleSet:
    return left + right


def invert_value(value: ConditionValue) -> ConditionValue | None:
    """Invert a boolean or 0/1 sentinel; None when the value has no inverse."""
    if isinstance(value, bool):
        return not value
    if isinstance(value, int):
        if value in (0, 1):
            return 1 - value
        return None
    if isinstance(value, float):
        if abs(value) < _FLOAT_SENTINEL_EPSILON:
            return 1.0
        if abs(value - 1.0) < _FLOAT_SENTINEL_EPSILON:
            return 0.0
    return None


def negate_rule(rule: Rule) -> RuleSet:
    """NOT (a AND b) == (NOT a) OR (NOT b); empty when any term is not invertible."""
    negated: list[Rule] = []
    for path, value in rule:
        inverted = invert_value(value)
        if inverted is None:
            logger.debug(f"Dropping non-invertible rule on '{path}' == {value!r}")
            return EMPTY
        negated.append(make_rule(path, inverted))
    return tuple(negated)


def negate(rules: RuleSet) -> RuleSet:
    """NOT (r1 OR r2) == (NOT r1) AND (NOT r2), skipping rules that cannot be negated."""
    result: RuleSet = EMPTY
    for rule in rules:
        negated = negate_rule(rule)
        if negated:
            result = combine_and(result, negated)
    return result


def rule_key(rule: Rule) -> tuple:
    """Identity of a rule that keeps `True`, `1` and `1.0` apart."""
    return tuple((path, type(value).__name__, value) for path, value in rule)


def dedupe(rules: Iterable[Rule]) -> RuleSet:
    seen: set[tuple] = set()
    unique: list[Rule] = []
    for rule in rules:
        key = rule_key(rule)
        if key not in seen:
            seen.add(key)
            unique.append(rule)
    return tuple(unique)


def to_conditional_rule(rule: Rule) -> ConditionalRule:
    return ConditionalRule(paths=[path for path, _ in rule], values=[value for _, value in rule])


def from_conditional_rule(rule: ConditionalRule) -> Rule:
    return tuple(rule.terms())


# =============================================================================
# Public API
# =============================================================================


def build_conditions(
    test: Expression,
    strings: Mapping[str, str],
    bindings: Mapping[str, BoundedBinding | None],
) -> RuleSet:
    """Translate an `if` test into a RuleSet.

    Args:
        test: The condition expression.
        strings: Named string constants.
        bindings: Known bindings by local name. A value of None marks a
            plain boolean binding with no numeric bounds.

    Returns:
        Disjunction of rules; empty when nothing could be learned.
    """
    return ConditionBuilder(strings, bindings).build(test)


class ConditionBuilder:
    """Recursive translator from expressions to RuleSets."""

    def __init__(self, strings: Mapping[str, str], bindings: Mapping[str, BoundedBinding | None]):
        self.strings = strings
        self.bindings = bindings

    def build(self, expression: Expression) -> RuleSet:
        match expression:
            case Parenthesized(inner=inner):
                return self.build(inner)
            case Unary(operator="!", operand=operand):
                return self._build_not(operand)
            case Binary(operator="&&", left=left, right=right):
                return combine_and(self.build(left), self.build(right))
            case Binary(operator="||", left=left, right=right):
                return combine_or(self.build(left), self.build(right))
            case Binary(operator="==" | "!=" as operator, left=left, right=right):
                return self._build_equality(left, right, equals=operator == "==")
            case Binary(operator="<" | "<=" | ">" | ">=" as operator, left=left, right=right):
                return self._build_ordered(operator, left, right)
            case Identifier(name=name) if name in self.bindings:
                return (make_rule(name, True),)
        return EMPTY

    def _known_path(self, expression: Expression) -> str | None:
        path = property_path(expression)
        return path if path in self.bindings else None

    def _build_not(self, operand: Expression) -> RuleSet:
        if isinstance(operand, Identifier):
            if operand.name in self.bindings:
                return (make_rule(operand.name, False),)
            return EMPTY
        return negate(self.build(operand))

    def _build_equality(self, left: Expression, right: Expression, equals: bool) -> RuleSet:
        left_path = self._known_path(left)
        right_path = self._known_path(right)
        if (left_path is None) == (right_path is None):
            return EMPTY

        path, other = (left_path, right) if left_path else (right_path, left)
        value = comparable_value(other, self.strings)
        if value is None:
            return EMPTY
        if not equals:
            value = invert_value(value)
            if value is None:
                logger.debug(f"Dropping '!=' comparison on '{path}': value has no inverse")
                return EMPTY
        return (make_rule(path, value),)

    def _build_ordered(self, operator: str, left: Expression, right: Expression) -> RuleSet:
        left_path = self._known_path(left)
        right_path = self._known_path(right)
        if (left_path is None) == (right_path is None):
            return EMPTY

        if left_path:
            path, boundary = left_path, comparable_value(right, self.strings)
        else:
            # `1 < x` is `x > 1`
            path, boundary = right_path, comparable_value(left, self.strings)
            operator = _MIRRORED_OPERATORS[operator]

        if isinstance(boundary, bool) or not isinstance(boundary, (int, float)):
            return EMPTY

        binding = self.bindings[path]
        if binding is None:
            return EMPTY

        values = enumerate_comparison(binding, operator, float(boundary))
        # len() overflows on ranges wider than sys.maxsize
        count = values.stop - values.start
        if count <= 0:
            return EMPTY
        if count > MAX_ENUMERATED_VALUES:
            logger.debug(f"Dropping comparison on '{path}': {count} values exceeds {MAX_ENUMERATED_VALUES}")
            return EMPTY
        return tuple(make_rule(path, value) for value in values)


def binding_bounds(binding: BoundedBinding) -> tuple[int, int] | None:
    """Inclusive integer domain of a bounded binding.

    The upper bound is the last enum ordinal when labels are known, else the
    rounded range maximum. The lower bound is the rounded range minimum or 0.
    """
    if binding.enum_values:
        upper = len(binding.enum_values) - 1
    elif binding.range_max is not None and math.isfinite(binding.range_max):
        upper = round_half_even(binding.range_max)
    else:
        return None

    lower = 0
    if binding.range_min is not None and math.isfinite(binding.range_min):
        lower = round_half_even(binding.range_min)
    return lower, upper


def enumerate_comparison(binding: BoundedBinding, operator: str, boundary: float) -> range:
    """Every integer in the binding's domain that satisfies `x <op> boundary`."""
    bounds = binding_bounds(binding)
    if bounds is None or not math.isfinite(boundary):
        return range(0)
    lower, upper = bounds

    match operator:
        case ">":
            start, end = math.floor(boundary) + 1, upper
        case ">=":
            start, end = math.ceil(boundary), upper
        case "<":
            start, end = lower, math.ceil(boundary) - 1
        case "<=":
            start, end = lower, math.floor(boundary)
        case _:
            return range(0)
    return range(max(start, lower), min(end, upper) + 1)
