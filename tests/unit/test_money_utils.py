"""Tests for the None-tolerant money helpers."""

import pytest

from money_kernel.domain import money_utils
from money_kernel.domain.big_money import BigMoney
from money_kernel.domain.money import Money
from money_kernel.exceptions import CurrencyMismatchError, NullArgumentError

GBP_1 = ("GBP", "1.00")
GBP_2 = ("GBP", "2.00")


class TestIsZero:
    def test_none_is_zero(self):
        assert money_utils.is_zero(None)

    def test_values(self):
        assert money_utils.is_zero(Money.zero("GBP"))
        assert money_utils.is_zero(BigMoney.of("GBP", "0.000"))
        assert not money_utils.is_zero(Money.of(*GBP_1))


class TestDefaultToZero:
    def test_none_becomes_zero(self):
        result = money_utils.default_to_zero(None, "JPY")
        assert result == Money.zero("JPY")

    def test_value_returned(self):
        money = Money.of(*GBP_1)
        assert money_utils.default_to_zero(money, "GBP") is money


class TestMaxMin:
    def test_max(self):
        a, b = Money.of(*GBP_1), Money.of(*GBP_2)
        assert money_utils.max_of(a, b) is b
        assert money_utils.max_of(b, a) is b

    def test_min(self):
        a, b = Money.of(*GBP_1), Money.of(*GBP_2)
        assert money_utils.min_of(a, b) is a
        assert money_utils.min_of(b, a) is a

    def test_none_yields_other(self):
        a = BigMoney.of(*GBP_1)
        assert money_utils.max_of(None, a) is a
        assert money_utils.min_of(a, None) is a
        assert money_utils.max_of(None, None) is None

    def test_mismatch(self):
        with pytest.raises(CurrencyMismatchError):
            money_utils.max_of(Money.of(*GBP_1), Money.of("USD", 1))


class TestAddSubtract:
    def test_add(self):
        assert money_utils.add(Money.of(*GBP_1), Money.of(*GBP_2)) == Money.of("GBP", 3)

    def test_add_none(self):
        a = Money.of(*GBP_1)
        assert money_utils.add(a, None) is a
        assert money_utils.add(None, a) is a
        assert money_utils.add(None, None) is None

    def test_subtract(self):
        assert money_utils.subtract(Money.of(*GBP_2), Money.of(*GBP_1)) == Money.of(*GBP_1)

    def test_subtract_none_left_negates(self):
        assert money_utils.subtract(None, Money.of(*GBP_1)) == Money.of("GBP", -1)

    def test_subtract_none_right(self):
        a = BigMoney.of(*GBP_1)
        assert money_utils.subtract(a, None) is a

    def test_add_mismatch(self):
        with pytest.raises(CurrencyMismatchError):
            money_utils.add(BigMoney.of(*GBP_1), BigMoney.of("EUR", 1))


class TestTotal:
    def test_total(self):
        values = [Money.of("GBP", "1.10"), Money.of("GBP", "2.20"), Money.of("GBP", "3.30")]
        assert money_utils.total(values) == Money.of("GBP", "6.60")

    def test_total_generator(self):
        result = money_utils.total(BigMoney.of("EUR", n) for n in range(1, 5))
        assert result == BigMoney.of("EUR", 10)

    def test_empty_rejected(self):
        with pytest.raises(NullArgumentError):
            money_utils.total([])

    def test_none_element_rejected(self):
        with pytest.raises(NullArgumentError):
            money_utils.total([Money.of(*GBP_1), None])
        with pytest.raises(NullArgumentError):
            money_utils.total([None])

    def test_mismatch(self):
        with pytest.raises(CurrencyMismatchError):
            money_utils.total([Money.of(*GBP_1), Money.of("USD", 1)])
