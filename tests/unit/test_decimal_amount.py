"""
Unit tests for DecimalAmount and rounding.

Verifies:
- Exact construction from Decimal, str and int
- Float prohibition
- Exact add/multiply, rounded divide
- Every rounding rule, including UNNECESSARY
- Plain-string rendering without exponents
"""

from decimal import Decimal

import pytest

from money_kernel.domain.decimal_amount import DecimalAmount
from money_kernel.domain.rounding import RoundingRule, divide_rounded
from money_kernel.exceptions import (
    DivisionByZeroError,
    InvalidFormatError,
    NullArgumentError,
    RoundingNecessaryError,
)


def d(text: str) -> DecimalAmount:
    return DecimalAmount.parse(text)


class TestConstruction:
    """Tests for DecimalAmount.of and parse."""

    def test_from_string_keeps_scale(self):
        value = DecimalAmount.of("12.340")
        assert value.unscaled == 12340
        assert value.scale == 3

    def test_from_decimal(self):
        value = DecimalAmount.of(Decimal("-0.05"))
        assert value.unscaled == -5
        assert value.scale == 2

    def test_from_decimal_with_positive_exponent(self):
        value = DecimalAmount.of(Decimal("1E+3"))
        assert value.scale == -3
        assert value.to_plain_string() == "1000"

    def test_from_int(self):
        assert DecimalAmount.of(42) == DecimalAmount(42, 0)

    def test_float_rejected(self):
        with pytest.raises(TypeError):
            DecimalAmount.of(1.5)

    def test_bool_rejected(self):
        with pytest.raises(TypeError):
            DecimalAmount.of(True)

    def test_none_rejected(self):
        with pytest.raises(NullArgumentError):
            DecimalAmount.of(None)

    def test_non_finite_decimal_rejected(self):
        with pytest.raises(InvalidFormatError):
            DecimalAmount.of(Decimal("NaN"))

    @pytest.mark.parametrize(
        "text", ["", "abc", "1.", ".5", "1e5", "1,000", " 1", "--1", "1\n", "1.5\n", "\u0661"]
    )
    def test_parse_rejects_malformed(self, text):
        with pytest.raises(InvalidFormatError):
            DecimalAmount.parse(text)

    def test_parse_sign(self):
        assert d("+1.5") == d("1.5")
        assert d("-1.5").is_negative

    def test_non_int_parts_rejected(self):
        with pytest.raises(TypeError):
            DecimalAmount(1.5, 0)


class TestArithmetic:
    """Exact arithmetic."""

    def test_plus_aligns_scale(self):
        result = d("1.5").plus(d("2.25"))
        assert result.to_plain_string() == "3.75"
        assert result.scale == 2

    def test_minus(self):
        assert d("1.00").minus("0.01").to_plain_string() == "0.99"

    def test_multiply_adds_scales(self):
        result = d("1.5").multiplied_by(d("1.25"))
        assert result.to_plain_string() == "1.875"
        assert result.scale == 3

    def test_multiply_by_int(self):
        assert d("0.10").multiplied_by(3).to_plain_string() == "0.30"

    def test_divide_keeps_dividend_scale(self):
        assert d("10.00").divided_by(3, RoundingRule.HALF_UP).to_plain_string() == "3.33"

    def test_divide_explicit_scale(self):
        result = d("1").divided_by(3, RoundingRule.DOWN, scale=5)
        assert result.to_plain_string() == "0.33333"

    def test_divide_by_zero(self):
        with pytest.raises(DivisionByZeroError):
            d("1").divided_by(0, RoundingRule.HALF_UP)

    def test_negated_and_abs(self):
        assert d("-1.20").negated() == d("1.2")
        assert d("-1.20").abs() == d("1.20")
        assert abs(d("1.20")) == d("1.20")

    def test_operators(self):
        assert d("1.1") + d("2.2") == d("3.3")
        assert d("1.1") - 1 == d("0.1")
        assert d("1.1") * 2 == d("2.2")
        assert -d("1.1") == d("-1.1")


class TestRounding:
    """Every rule applied to the same boundary values."""

    @pytest.mark.parametrize(
        "rule, expected",
        [
            (RoundingRule.UP, ["6", "2", "2", "-2", "-3", "-6"]),
            (RoundingRule.DOWN, ["5", "1", "1", "-1", "-2", "-5"]),
            (RoundingRule.CEILING, ["6", "2", "2", "-1", "-2", "-5"]),
            (RoundingRule.FLOOR, ["5", "1", "1", "-2", "-3", "-6"]),
            (RoundingRule.HALF_UP, ["6", "2", "2", "-2", "-3", "-6"]),
            (RoundingRule.HALF_DOWN, ["5", "1", "2", "-2", "-2", "-5"]),
            (RoundingRule.HALF_EVEN, ["6", "2", "2", "-2", "-2", "-6"]),
        ],
    )
    def test_rules(self, rule, expected):
        inputs = ["5.5", "1.5", "1.6", "-1.6", "-2.5", "-5.5"]
        results = [d(v).with_scale(0, rule).to_plain_string() for v in inputs]
        assert results == expected

    def test_truncate_is_down(self):
        assert RoundingRule.TRUNCATE is RoundingRule.DOWN

    def test_unnecessary_exact(self):
        assert d("1.50").with_scale(1, RoundingRule.UNNECESSARY) == d("1.5")

    def test_unnecessary_raises(self):
        with pytest.raises(RoundingNecessaryError):
            d("1.55").with_scale(1, RoundingRule.UNNECESSARY)

    def test_default_with_scale_is_unnecessary(self):
        with pytest.raises(RoundingNecessaryError):
            d("1.55").with_scale(1)

    def test_rule_by_name_or_constant(self):
        assert RoundingRule.of("HALF_UP") is RoundingRule.HALF_UP
        assert RoundingRule.of("ROUND_HALF_EVEN") is RoundingRule.HALF_EVEN

    def test_rule_interoperates_with_decimal(self):
        rounded = Decimal("2.5").quantize(Decimal("1"), rounding=RoundingRule.HALF_EVEN.value)
        assert rounded == Decimal("2")

    def test_rounding_beyond_default_context_precision(self):
        big = "1" + "0" * 39
        assert d(big + ".5").with_scale(0, RoundingRule.HALF_EVEN).to_plain_string() == big
        assert d(big + ".5").with_scale(0, RoundingRule.HALF_UP).to_plain_string() == big[:-1] + "1"
        third = d(big).divided_by(3, RoundingRule.DOWN, 2)
        assert third.to_plain_string() == "3" * 39 + ".33"

    def test_divide_rounded_exact(self):
        assert divide_rounded(-10, 5, RoundingRule.UNNECESSARY) == -2

    def test_negative_scale(self):
        assert d("432.34").with_scale(-1, RoundingRule.DOWN).to_plain_string() == "430"


class TestComparison:
    """Numeric equality ignores scale."""

    def test_equal_across_scales(self):
        assert d("1.0") == d("1.00")
        assert hash(d("1.0")) == hash(d("1.00"))

    def test_ordering(self):
        assert d("1.01") > d("1.0")
        assert d("-1") < d("0")
        assert d("2").compare_to("2.000") == 0

    def test_predicates(self):
        assert d("0.00").is_zero
        assert d("0.01").is_positive
        assert d("-0.01").is_negative
        assert d("-3").signum == -1


class TestConversion:
    """Rendering and point moves."""

    @pytest.mark.parametrize(
        "value, expected",
        [
            (DecimalAmount(5, 3), "0.005"),
            (DecimalAmount(-5, 3), "-0.005"),
            (DecimalAmount(12345, 2), "123.45"),
            (DecimalAmount(5, -2), "500"),
            (DecimalAmount(0, 2), "0.00"),
        ],
    )
    def test_plain_string(self, value, expected):
        assert value.to_plain_string() == expected
        assert str(value) == expected

    def test_to_decimal_exact(self):
        assert d("123.450").to_decimal() == Decimal("123.450")
        assert str(d("123.450").to_decimal()) == "123.450"

    def test_stripped(self):
        assert d("1.2300").stripped() == DecimalAmount(123, 2)
        assert d("1.2300").stripped().scale == 2
        assert d("0.000").stripped().scale == 0
        assert d("100").stripped().scale == -2

    def test_move_point(self):
        assert d("1.23").move_point_right(2) == DecimalAmount(123, 0)
        assert d("1.23").move_point_right(4).scale == 0
        assert d("1.23").move_point_right(4).to_plain_string() == "12300"
        assert d("1.23").move_point_left(2).to_plain_string() == "0.0123"
