"""MoneyUtils -- None-tolerant helpers over BigMoney and Money.

Each helper treats ``None`` as "no value" rather than zero, except
``is_zero`` which treats ``None`` as zero. Currencies are still checked
whenever two values are present.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TypeVar

from money_kernel.domain.big_money import BigMoney
from money_kernel.domain.currency import Currency
from money_kernel.domain.money import Money
from money_kernel.domain.monetary import resolve_currency
from money_kernel.exceptions import NullArgumentError

M = TypeVar("M", BigMoney, Money)


def is_zero(money: M | None) -> bool:
    """True if money is None or zero."""
    return money is None or money.is_zero


def default_to_zero(money: Money | None, currency: Currency | str) -> Money:
    """Return money, or zero in ``currency`` when money is None."""
    return Money.zero(resolve_currency(currency)) if money is None else money


def max_of(money1: M | None, money2: M | None) -> M | None:
    """
    Larger of two values; a None argument yields the other.

    Raises:
        CurrencyMismatchError: If both are present in different currencies.
    """
    if money1 is None:
        return money2
    if money2 is None:
        return money1
    return money1 if money1.compare_to(money2) >= 0 else money2


def min_of(money1: M | None, money2: M | None) -> M | None:
    """Smaller of two values; a None argument yields the other."""
    if money1 is None:
        return money2
    if money2 is None:
        return money1
    return money1 if money1.compare_to(money2) <= 0 else money2


def add(money1: M | None, money2: M | None) -> M | None:
    """Sum of two values; a None argument yields the other."""
    if money1 is None:
        return money2
    if money2 is None:
        return money1
    return money1.plus(money2)


def subtract(money1: M | None, money2: M | None) -> M | None:
    """Difference; None on the left yields the negated right-hand value."""
    if money2 is None:
        return money1
    if money1 is None:
        return money2.negated()
    return money1.minus(money2)


def total(monies: Iterable[M]) -> M:
    """
    Sum a non-empty iterable of values sharing one currency.

    Raises:
        NullArgumentError: If the iterable is empty or holds None.
        CurrencyMismatchError: If the currencies differ.
    """
    iterator = iter(monies)
    try:
        result = next(iterator)
    except StopIteration:
        raise NullArgumentError("monies (at least one value is required)") from None
    if result is None:
        raise NullArgumentError("money")
    for money in iterator:
        if money is None:
            raise NullArgumentError("money")
        result = result.plus(money)
    return result
