"""Tests for value_resolver: string resolution, constant folding, comparables."""

import pytest

from src.mapping.compiler.value_resolver import (
    comparable_value,
    evaluate_numeric,
    property_path,
    resolve_string,
    round_half_even,
)
from src.mapping.syntax import Cast, Parenthesized
from tests.syntax_builders import binary, ident, lit, member, neg

# =============================================================================
# resolve_string
# =============================================================================


def test_resolve_string_literal():
    assert resolve_string(lit("Glow"), {}) == "Glow"


def test_resolve_string_constant_by_identifier_and_member():
    strings = {"kGlow": "Glow"}
    assert resolve_string(ident("kGlow"), strings) == "Glow"
    assert resolve_string(member("Names", "kGlow"), strings) == "Glow"


def test_resolve_string_unknown():
    assert resolve_string(ident("other"), {}) is None
    assert resolve_string(lit(3), {}) is None
    assert resolve_string(None, {}) is None


# =============================================================================
# evaluate_numeric
# =============================================================================


class TestEvaluateNumeric:
    @pytest.mark.parametrize(
        "operator,left,right,expected",
        [
            ("+", 2, 3, 5.0),
            ("-", 2, 3, -1.0),
            ("*", 2, 3, 6.0),
            ("/", 3, 2, 1.5),
            ("%", 7, 3, 1.0),
            ("%", -7, 3, -1.0),
        ],
    )
    def test_binary_operators(self, operator, left, right, expected):
        left_expr = neg(-left) if left < 0 else left
        assert evaluate_numeric(binary(operator, left_expr, right), {}) == expected

    def test_division_by_zero_is_none(self):
        assert evaluate_numeric(binary("/", 1, 0), {}) is None
        assert evaluate_numeric(binary("%", 1, 0), {}) is None

    def test_named_constants(self):
        numbers = {"kMax": 4.0}
        assert evaluate_numeric(binary("*", ident("kMax"), 2), numbers) == 8.0
        assert evaluate_numeric(member("Limits", "kMax"), numbers) == 4.0

    def test_casts_and_parentheses_are_transparent(self):
        expression = Cast(type_name="float", operand=Parenthesized(inner=binary("+", 1, 1)))
        assert evaluate_numeric(expression, {}) == 2.0

    def test_unary_minus(self):
        assert evaluate_numeric(neg(0.5), {}) == -0.5

    def test_unresolvable_operand(self):
        assert evaluate_numeric(binary("+", ident("unknown"), 1), {}) is None
        assert evaluate_numeric(lit("text"), {}) is None


# =============================================================================
# comparable_value / property_path
# =============================================================================


class TestComparableValue:
    def test_literals_keep_their_kind(self):
        assert comparable_value(lit(2), {}) == 2
        assert isinstance(comparable_value(lit(2), {}), int)
        assert comparable_value(lit(True), {}) is True
        assert comparable_value(lit("a"), {}) == "a"

    def test_string_constant(self):
        assert comparable_value(ident("kName"), {"kName": "Circle"}) == "Circle"

    def test_integer_member_name(self):
        assert comparable_value(member("Mode", "3"), {}) == 3
        assert comparable_value(member("Mode", "Bright"), {}) is None

    def test_negation_of_number_only(self):
        assert comparable_value(neg(2), {}) == -2
        assert comparable_value(neg(True), {}) is None

    def test_cast_is_transparent(self):
        assert comparable_value(Cast(type_name="int", operand=lit(1)), {}) == 1


def test_property_path():
    assert property_path(ident("p")) == "p"
    assert property_path(member("p", "floatValue")) == "p"
    assert property_path(member("a.b", "c")) is None
    assert property_path(lit(1)) is None


def test_round_half_even():
    assert round_half_even(0.5) == 0
    assert round_half_even(1.5) == 2
    assert round_half_even(2.5) == 2
    assert round_half_even(2.6) == 3


def test_round_half_even_rejects_non_finite():
    assert round_half_even(float("inf")) is None
    assert round_half_even(float("-inf")) is None
    assert round_half_even(float("nan")) is None
