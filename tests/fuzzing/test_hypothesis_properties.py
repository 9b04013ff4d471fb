"""
Property-based tests for the money kernel.

Uses Hypothesis to generate amounts, rates and currencies and verify the
algebraic properties callers rely on.

Properties covered:
- Inverting a rate twice returns the original within rounding precision
- Formatting then parsing a monetary value returns an equal value
- The identity rate leaves any amount unchanged
- Decimal addition and subtraction are exact inverses
- Fixed-point addition either matches the exact sum or raises, never wraps
- Rounding moves a value by less than one unit at the target scale
"""

from decimal import Decimal, localcontext

import pytest
from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st
from hypothesis.strategies import composite

from money_kernel.domain.big_money import BigMoney
from money_kernel.domain.decimal_amount import DecimalAmount
from money_kernel.domain.exchange_rate import ExchangeRate
from money_kernel.domain.money import INT64_MAX, INT64_MIN, Money
from money_kernel.domain.rounding import RoundingRule
from money_kernel.exceptions import ArithmeticOverflowError

CURRENCY_CODES = ["GBP", "EUR", "USD", "JPY", "KWD", "CLF", "PLN", "CHF", "XAU"]

SETTINGS = settings(max_examples=200, suppress_health_check=[HealthCheck.function_scoped_fixture])


@composite
def currency_pairs(draw):
    """Two distinct currency codes."""
    base = draw(st.sampled_from(CURRENCY_CODES))
    counter = draw(st.sampled_from([c for c in CURRENCY_CODES if c != base]))
    return base, counter


@composite
def decimal_amounts(draw, max_scale=8):
    """Exact decimal amounts with a non-negative scale."""
    scale = draw(st.integers(min_value=0, max_value=max_scale))
    unscaled = draw(st.integers(min_value=-(10**24), max_value=10**24))
    return DecimalAmount(unscaled, scale)


rates = st.decimals(
    min_value=Decimal("0.001"),
    max_value=Decimal("100000"),
    places=6,
    allow_nan=False,
    allow_infinity=False,
)

rounding_rules = st.sampled_from(
    [
        RoundingRule.UP,
        RoundingRule.DOWN,
        RoundingRule.CEILING,
        RoundingRule.FLOOR,
        RoundingRule.HALF_UP,
        RoundingRule.HALF_DOWN,
        RoundingRule.HALF_EVEN,
    ]
)


class TestRateProperties:
    """Properties of the exchange-rate algebra."""

    @given(pair=currency_pairs(), value=rates)
    @SETTINGS
    def test_double_inversion_returns_original(self, pair, value):
        original = ExchangeRate.of(pair[0], pair[1], value)
        twice = original.invert().invert()

        assert twice.pair == original.pair
        relative = abs(twice.rate.to_decimal() - value) / value
        assert relative <= Decimal("1E-9"), (
            f"{original} inverted twice gave {twice}"
        )

    @given(code=st.sampled_from(CURRENCY_CODES), amount=decimal_amounts())
    @SETTINGS
    def test_identity_exchange_unchanged(self, code, amount):
        value = BigMoney.of(code, amount)
        assert ExchangeRate.identity(code).exchange(value) == value

    @given(pair=currency_pairs(), value=rates)
    @SETTINGS
    def test_rate_text_round_trip(self, pair, value):
        original = ExchangeRate.of(pair[0], pair[1], value)
        assert ExchangeRate.parse(str(original)) == original


class TestFormatParseProperties:
    """Formatting then parsing returns an equal value."""

    @given(code=st.sampled_from(CURRENCY_CODES), amount=decimal_amounts())
    @SETTINGS
    def test_big_money_round_trip(self, code, amount):
        money = BigMoney.of(code, amount)
        parsed = BigMoney.parse(str(money))
        assert parsed == money
        assert parsed.scale == money.scale

    @given(
        code=st.sampled_from(CURRENCY_CODES),
        minor=st.integers(min_value=INT64_MIN, max_value=INT64_MAX),
    )
    @SETTINGS
    def test_money_round_trip(self, code, minor):
        money = Money.of_minor(code, minor)
        assert Money.parse(str(money)) == money


class TestArithmeticProperties:
    """Exactness of arithmetic."""

    @given(a=decimal_amounts(), b=decimal_amounts())
    @SETTINGS
    def test_plus_minus_inverse(self, a, b):
        assert a.plus(b).minus(b) == a
        with localcontext() as ctx:
            ctx.prec = 100
            assert a.plus(b).to_decimal() == a.to_decimal() + b.to_decimal()

    @given(
        a=st.integers(min_value=INT64_MIN, max_value=INT64_MAX),
        b=st.integers(min_value=INT64_MIN, max_value=INT64_MAX),
    )
    @SETTINGS
    def test_fixed_point_addition_never_wraps(self, a, b):
        left = Money.of_minor("GBP", a)
        right = Money.of_minor("GBP", b)
        exact = a + b
        if INT64_MIN <= exact <= INT64_MAX:
            assert left.plus(right).minor_units == exact
        else:
            with pytest.raises(ArithmeticOverflowError):
                left.plus(right)

    @given(
        amount=decimal_amounts(),
        scale=st.integers(min_value=-3, max_value=4),
        rule=rounding_rules,
    )
    @SETTINGS
    def test_rounding_error_below_one_unit(self, amount, scale, rule):
        rounded = amount.with_scale(scale, rule)
        unit = Decimal(1).scaleb(-scale)
        assert abs(rounded.to_decimal() - amount.to_decimal()) < unit
