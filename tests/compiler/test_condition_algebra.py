"""Tests for condition_builder module.

Covers the rule algebra (AND/OR/NOT over disjunctions of conjunctions),
sentinel inversion, and translation of `if` tests into RuleSets,
including enumeration of ordered comparisons against bounded bindings.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import pytest

from src.mapping.compiler.condition_builder import (
    EMPTY,
    MAX_COMBINED_RULES,
    binding_bounds,
    build_conditions,
    combine_and,
    combine_or,
    dedupe,
    enumerate_comparison,
    invert_value,
    make_rule,
    negate,
    negate_rule,
    rule_key,
    to_conditional_rule,
)
from src.mapping.syntax import Parenthesized
from tests.syntax_builders import binary, ident, member, neg, not_

# =============================================================================
# Helpers
# =============================================================================


@dataclass
class _Bounded:
    enum_values: list[str] = field(default_factory=list)
    range_min: float | None = None
    range_max: float | None = None


def _build(test, bindings=None, strings=None):
    return build_conditions(test, strings or {}, bindings if bindings is not None else {})


def _values(rules, path):
    return [rule[0][1] for rule in rules if rule[0][0] == path]


# =============================================================================
# Algebra
# =============================================================================


class TestCombine:
    def test_and_is_cartesian_product(self):
        left = (make_rule("a", True), make_rule("b", True))
        right = (make_rule("c", 1), make_rule("d", 2))

        result = combine_and(left, right)

        assert result == (
            (("a", True), ("c", 1)),
            (("a", True), ("d", 2)),
            (("b", True), ("c", 1)),
            (("b", True), ("d", 2)),
        )

    def test_and_with_empty_side_is_identity(self):
        rules = (make_rule("a", True),)
        assert combine_and(EMPTY, rules) == rules
        assert combine_and(rules, EMPTY) == rules

    def test_and_past_cap_keeps_left(self):
        left = tuple(make_rule("a", i) for i in range(MAX_COMBINED_RULES))
        right = (make_rule("b", 0), make_rule("b", 1))
        assert combine_and(left, right) == left

    def test_or_concatenates(self):
        left = (make_rule("a", True),)
        right = (make_rule("b", False),)
        assert combine_or(left, right) == (make_rule("a", True), make_rule("b", False))


class TestInversion:
    @pytest.mark.parametrize(
        "value,expected",
        [
            (True, False),
            (False, True),
            (0, 1),
            (1, 0),
            (0.0, 1.0),
            (1.0, 0.0),
            (0.00005, 1.0),
        ],
    )
    def test_invertible_values(self, value, expected):
        assert invert_value(value) == expected

    @pytest.mark.parametrize("value", [2, -1, 0.5, "on"])
    def test_non_invertible_values(self, value):
        assert invert_value(value) is None

    def test_negating_toggle_rule(self):
        assert negate((make_rule("toggle", True),)) == (make_rule("toggle", False),)

    def test_negating_non_sentinel_drops_rule(self):
        assert negate((make_rule("mode", 2),)) == EMPTY

    def test_negate_rule_is_de_morgan(self):
        rule = (("a", True), ("b", 0))
        assert negate_rule(rule) == (make_rule("a", False), make_rule("b", 1))

    def test_negate_disjunction_conjoins_negations(self):
        rules = (make_rule("a", True), make_rule("b", True))
        assert negate(rules) == ((("a", False), ("b", False)),)


class TestRuleIdentity:
    def test_rule_key_distinguishes_bool_and_int(self):
        assert rule_key(make_rule("a", True)) != rule_key(make_rule("a", 1))
        assert rule_key(make_rule("a", 1)) != rule_key(make_rule("a", 1.0))

    def test_dedupe_keeps_first_occurrence(self):
        rules = (make_rule("a", True), make_rule("a", 1), make_rule("a", True))
        assert dedupe(rules) == (make_rule("a", True), make_rule("a", 1))

    def test_to_conditional_rule_keeps_lists_parallel(self):
        rule = to_conditional_rule((("a", True), ("b", 2)))
        assert rule.paths == ["a", "b"]
        assert rule.values == [True, 2]


# =============================================================================
# build_conditions
# =============================================================================


class TestBuildConditions:
    def test_bare_known_identifier(self):
        assert _build(ident("glowToggle"), {"glowToggle": None}) == (make_rule("glowToggle", True),)

    def test_bare_unknown_identifier(self):
        assert _build(ident("somethingElse"), {"glowToggle": None}) == EMPTY

    def test_not_known_identifier(self):
        assert _build(not_(ident("t")), {"t": None}) == (make_rule("t", False),)

    def test_not_compound_negates(self):
        test = not_(Parenthesized(inner=binary("==", ident("mode"), 1)))
        assert _build(test, {"mode": None}) == (make_rule("mode", 0),)

    def test_parentheses_are_transparent(self):
        assert _build(Parenthesized(inner=ident("t")), {"t": None}) == (make_rule("t", True),)

    def test_and_of_two_bindings(self):
        test = binary("&&", ident("a"), ident("b"))
        assert _build(test, {"a": None, "b": None}) == ((("a", True), ("b", True)),)

    def test_or_of_two_bindings(self):
        test = binary("||", ident("a"), ident("b"))
        assert _build(test, {"a": None, "b": None}) == (make_rule("a", True), make_rule("b", True))

    def test_equality_with_member_access(self):
        test = binary("==", member("mode", "intValue"), 2)
        assert _build(test, {"mode": None}) == (make_rule("mode", 2),)

    def test_equality_binding_on_right(self):
        test = binary("==", 3, member("mode", "intValue"))
        assert _build(test, {"mode": None}) == (make_rule("mode", 3),)

    def test_equality_with_string_constant(self):
        test = binary("==", ident("shape"), ident("kCircle"))
        result = _build(test, {"shape": None}, strings={"kCircle": "Circle"})
        assert result == (make_rule("shape", "Circle"),)

    def test_equality_with_negative_literal(self):
        test = binary("==", ident("offset"), neg(1))
        assert _build(test, {"offset": None}) == (make_rule("offset", -1),)

    def test_equality_between_two_bindings_is_dropped(self):
        test = binary("==", ident("a"), ident("b"))
        assert _build(test, {"a": None, "b": None}) == EMPTY

    def test_not_equal_inverts_sentinel(self):
        test = binary("!=", member("p", "floatValue"), 0.0)
        assert _build(test, {"p": None}) == (make_rule("p", 1.0),)

    def test_not_equal_non_sentinel_is_dropped(self):
        test = binary("!=", ident("mode"), 3)
        assert _build(test, {"mode": None}) == EMPTY

    def test_unrecognized_shape_yields_nothing(self):
        test = binary("+", ident("a"), 1)
        assert _build(test, {"a": None}) == EMPTY


# =============================================================================
# Ordered comparisons
# =============================================================================


class TestOrderedComparisons:
    def test_greater_than_over_range(self):
        bindings = {"x": _Bounded(range_min=0, range_max=3)}
        result = _build(binary(">", member("x", "floatValue"), 1), bindings)
        assert result == (make_rule("x", 2), make_rule("x", 3))
        assert all(len(rule) == 1 for rule in result)

    def test_greater_or_equal_with_fractional_boundary(self):
        bindings = {"x": _Bounded(range_min=0, range_max=3)}
        assert _values(_build(binary(">=", ident("x"), 1.5), bindings), "x") == [2, 3]

    def test_less_than_over_enum(self):
        bindings = {"mode": _Bounded(enum_values=["Off", "Low", "Mid", "High"])}
        assert _values(_build(binary("<", member("mode", "intValue"), 2), bindings), "mode") == [0, 1]

    def test_less_or_equal(self):
        bindings = {"mode": _Bounded(enum_values=["Off", "Low", "Mid", "High"])}
        assert _values(_build(binary("<=", ident("mode"), 2), bindings), "mode") == [0, 1, 2]

    def test_mirrored_when_binding_on_right(self):
        bindings = {"x": _Bounded(range_min=0, range_max=3)}
        assert _values(_build(binary("<", 1, ident("x")), bindings), "x") == [2, 3]

    def test_unbounded_binding_is_dropped(self):
        assert _build(binary(">", ident("x"), 1), {"x": None}) == EMPTY
        assert _build(binary(">", ident("x"), 1), {"x": _Bounded()}) == EMPTY

    def test_boolean_boundary_is_dropped(self):
        bindings = {"x": _Bounded(range_min=0, range_max=3)}
        assert _build(binary(">", ident("x"), True), bindings) == EMPTY

    def test_empty_result_when_nothing_satisfies(self):
        bindings = {"x": _Bounded(range_min=0, range_max=3)}
        assert _build(binary(">", ident("x"), 5), bindings) == EMPTY

    def test_enumeration_over_cap_is_dropped(self):
        bindings = {"x": _Bounded(range_min=0, range_max=1000)}
        assert _build(binary(">", ident("x"), 0), bindings) == EMPTY

    def test_enumeration_over_huge_range_is_dropped(self):
        bindings = {"x": _Bounded(range_min=0, range_max=1e20)}
        assert _build(binary(">", member("x", "floatValue"), 1), bindings) == EMPTY

    def test_infinite_boundary_is_dropped(self):
        bindings = {"x": _Bounded(range_min=0, range_max=3)}
        assert list(enumerate_comparison(bindings["x"], ">", float("inf"))) == []
        assert _build(binary("<", ident("x"), float("inf")), bindings) == EMPTY

    def test_bounds_round_half_to_even(self):
        assert binding_bounds(_Bounded(range_min=0.5, range_max=2.5)) == (0, 2)
        assert binding_bounds(_Bounded(range_min=1.5, range_max=3.5)) == (2, 4)

    def test_enum_bounds_take_precedence(self):
        assert binding_bounds(_Bounded(enum_values=["A", "B"], range_max=10)) == (0, 1)

    def test_enumerate_unknown_operator(self):
        assert list(enumerate_comparison(_Bounded(range_max=3), "==", 1)) == []

    def test_comparison_against_literal_only(self):
        # `x > y` where y is not a constant
        bindings = {"x": _Bounded(range_min=0, range_max=3)}
        assert _build(binary(">", ident("x"), ident("y")), bindings) == EMPTY
