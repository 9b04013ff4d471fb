"""
ExchangeRate -- Validated currency pair rate and its algebra.

Responsibility:
    Represents "1 base = rate counter" and provides the operations on
    rates: identity, inversion, combination through a shared currency, and
    application to a monetary value. All rounding happens in
    ExchangeRateOperations at an explicit (scale, rounding) pair.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    Works on any MonetaryAmount (BigMoney or Money) and returns the same
    variant it was given.

Invariants enforced:
    - rate > 0
    - rate == 1 whenever base == counter
    - Each derived rate or exchanged amount is rounded in a single step

Failure modes:
    - InvalidRateError on a non-positive rate or a same-currency rate != 1
    - NoCommonCurrencyError when combining rates without a shared currency
    - NotExchangeableError when applying a rate to a foreign currency
    - InvalidFormatError / UnknownCurrencyError from parse()

Audit relevance:
    Triangulated rates carry their rounding parameters explicitly, so a
    combined rate can be recomputed bit-for-bit from its inputs.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TypeVar

from money_kernel.domain.big_money import BigMoney
from money_kernel.domain.currency import Currency, CurrencyRegistry
from money_kernel.domain.decimal_amount import AmountLike, DecimalAmount
from money_kernel.domain.monetary import MonetaryAmount, resolve_currency
from money_kernel.domain.money import Money
from money_kernel.domain.rounding import RoundingRule
from money_kernel.exceptions import (
    InvalidFormatError,
    InvalidRateError,
    InvalidScaleError,
    NoCommonCurrencyError,
    NotExchangeableError,
    NullArgumentError,
)

DEFAULT_SCALE = 16
DEFAULT_ROUNDING = RoundingRule.HALF_EVEN

_ONE = DecimalAmount(1, 0)
_RATE_PATTERN = re.compile(r"([A-Z]{3})/([A-Z]{3}) ([0-9]+(?:\.[0-9]+)?)")

M = TypeVar("M", BigMoney, Money)


@dataclass(frozen=True, slots=True, eq=False)
class ExchangeRate:
    """
    Exchange rate: 1 unit of ``base`` buys ``rate`` units of ``counter``.

    Contract:
        ``ExchangeRate.of("EUR", "PLN", "4.31")`` reads "1 EUR = 4.31 PLN".

    Guarantees:
        - Immutable and hashable (frozen dataclass with slots)
        - rate is a positive DecimalAmount; exactly 1 for same-currency pairs
        - Equal when both currencies match and the rates are numerically equal

    Non-goals:
        - Does NOT store effective dates or rate sources
    """

    base: Currency
    counter: Currency
    rate: DecimalAmount

    def __post_init__(self) -> None:
        if self.base is None:
            raise NullArgumentError("base currency")
        if self.counter is None:
            raise NullArgumentError("counter currency")
        object.__setattr__(self, "base", resolve_currency(self.base))
        object.__setattr__(self, "counter", resolve_currency(self.counter))
        rate = DecimalAmount.of(self.rate)
        object.__setattr__(self, "rate", rate)

        # INVARIANT: rates are strictly positive
        if not rate.is_positive:
            raise InvalidRateError(rate.to_plain_string(), "rate must be greater than zero")

        # INVARIANT: a currency trades with itself at exactly 1
        if self.base == self.counter and rate != _ONE:
            raise InvalidRateError(
                rate.to_plain_string(),
                f"rate must be 1 when base and counter are both {self.base.code}",
            )

    @classmethod
    def of(
        cls,
        base: Currency | str,
        counter: Currency | str,
        rate: AmountLike,
    ) -> ExchangeRate:
        """
        Create a validated rate.

        Raises:
            NullArgumentError: If any argument is None.
            InvalidRateError: If rate <= 0, or base == counter and rate != 1.
        """
        if rate is None:
            raise NullArgumentError("rate")
        return cls(base=base, counter=counter, rate=rate)

    @classmethod
    def identity(cls, currency: Currency | str) -> ExchangeRate:
        """The rate 1 between a currency and itself."""
        return cls(base=currency, counter=currency, rate=_ONE)

    @classmethod
    def parse(cls, text: str) -> ExchangeRate:
        """
        Parse ``"<BASE>/<COUNTER> <RATE>"``, e.g. ``"EUR/USD 1.0836"``.

        Surrounding whitespace, signs and exponents are rejected.

        Raises:
            NullArgumentError: If text is None.
            InvalidFormatError: If the text does not match the grammar.
            UnknownCurrencyError: If a code is not registered.
            InvalidRateError: If the parsed rate violates the rate invariants.
        """
        if text is None:
            raise NullArgumentError("exchange rate text")
        match = _RATE_PATTERN.fullmatch(text)
        if match is None:
            raise InvalidFormatError(text, "'<BASE>/<COUNTER> <RATE>'")
        base, counter, rate = match.groups()
        return cls.of(
            CurrencyRegistry.lookup(base),
            CurrencyRegistry.lookup(counter),
            DecimalAmount.parse(rate),
        )

    def with_rate(self, rate: AmountLike) -> ExchangeRate:
        """Same currency pair, new rate (validated)."""
        return ExchangeRate.of(self.base, self.counter, rate)

    @property
    def is_identity(self) -> bool:
        return self.base == self.counter

    @property
    def pair(self) -> tuple[str, str]:
        return (self.base.code, self.counter.code)

    def contains(self, currency: Currency) -> bool:
        return currency == self.base or currency == self.counter

    def operations(
        self,
        scale: int = DEFAULT_SCALE,
        rounding: RoundingRule | str = DEFAULT_ROUNDING,
    ) -> ExchangeRateOperations:
        """Operations on this rate rounding at ``scale`` with ``rounding``."""
        return ExchangeRateOperations(rate=self, scale=scale, rounding=rounding)

    def invert(self) -> ExchangeRate:
        return self.operations().invert()

    def combine(self, other: ExchangeRate) -> ExchangeRate:
        return self.operations().combine(other)

    def exchange(self, value: M, rounding: RoundingRule | str = RoundingRule.HALF_UP) -> M:
        return self.operations().exchange(value, rounding)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ExchangeRate):
            return NotImplemented
        return (
            self.base == other.base
            and self.counter == other.counter
            and self.rate == other.rate
        )

    def __hash__(self) -> int:
        return hash((self.base, self.counter, self.rate))

    def __reduce__(self):
        from money_kernel import serialization

        return (serialization.loads, (serialization.dumps(self),))

    def __str__(self) -> str:
        return f"{self.base.code}/{self.counter.code} {self.rate.to_plain_string()}"

    def __repr__(self) -> str:
        return (
            f"ExchangeRate({self.base.code!r}, {self.counter.code!r}, "
            f"{self.rate.to_plain_string()!r})"
        )


@dataclass(frozen=True, slots=True)
class ExchangeRateOperations:
    """
    Rate algebra bound to a rounding context.

    ``scale`` is the number of fraction digits kept in derived rates;
    ``rounding`` resolves the digits beyond it.
    """

    rate: ExchangeRate
    scale: int = DEFAULT_SCALE
    rounding: RoundingRule = DEFAULT_ROUNDING

    def __post_init__(self) -> None:
        if self.rate is None:
            raise NullArgumentError("exchange rate")
        if self.rounding is None:
            raise NullArgumentError("rounding")
        object.__setattr__(self, "rounding", RoundingRule.of(self.rounding))
        if self.scale < 0:
            raise InvalidScaleError(self.scale, "rate scale must be zero or greater")

    def _reciprocal(self, value: DecimalAmount) -> DecimalAmount:
        return _ONE.divided_by(value, self.rounding, self.scale).stripped()

    def _quotient(self, dividend: DecimalAmount, divisor: DecimalAmount) -> DecimalAmount:
        return dividend.divided_by(divisor, self.rounding, self.scale).stripped()

    def _product(self, left: DecimalAmount, right: DecimalAmount) -> DecimalAmount:
        return left.multiplied_by(right).with_scale(self.scale, self.rounding).stripped()

    def invert(self) -> ExchangeRate:
        """
        Swap base and counter; the new rate is ``1 / rate``.

        The reciprocal is rounded at (scale, rounding) and stripped of
        trailing zeros. An identity rate inverts to itself.
        """
        rate = self.rate
        if rate.is_identity:
            return rate
        return ExchangeRate.of(rate.counter, rate.base, self._reciprocal(rate.rate))

    def combine(self, other: ExchangeRate) -> ExchangeRate:
        """
        Triangulate through the currency both rates share.

        The shared currency is this rate's counter when ``other`` quotes it,
        otherwise this rate's base. The result's base is this rate's other
        currency and its counter is ``other``'s non-shared currency. When
        those coincide the result is the identity rate.

        ``(USD/PLN 3.50).combine(EUR/PLN 4.00)`` gives ``USD/EUR 0.875``.

        Raises:
            NullArgumentError: If other is None.
            NoCommonCurrencyError: If the rates share no currency.
        """
        if other is None:
            raise NullArgumentError("exchange rate")
        this = self.rate
        if other.contains(this.counter):
            shared, result_base = this.counter, this.base
        elif other.contains(this.base):
            shared, result_base = this.base, this.counter
        else:
            raise NoCommonCurrencyError(str(this), str(other))

        other_quotes_shared = other.counter == shared
        result_counter = other.base if other_quotes_shared else other.counter
        if result_base == result_counter:
            return ExchangeRate.identity(result_base)

        if shared == this.counter:
            # 1 result_base = this.rate shared
            if other_quotes_shared:
                value = self._quotient(this.rate, other.rate)
            else:
                value = self._product(this.rate, other.rate)
        elif other_quotes_shared:
            # 1 result_base = 1/this.rate shared
            value = self._reciprocal(this.rate.multiplied_by(other.rate))
        else:
            value = self._quotient(other.rate, this.rate)
        return ExchangeRate.of(result_base, result_counter, value)

    def exchange(self, value: M, rounding: RoundingRule | str = RoundingRule.HALF_UP) -> M:
        """
        Apply the rate to a monetary value.

        A value in the base currency is multiplied and comes back in the
        counter currency; a value in the counter currency is divided and
        comes back in the base currency. The result is rounded once to the
        target currency's canonical scale.

        Raises:
            NullArgumentError: If value is None.
            NotExchangeableError: If the value's currency is neither base
                nor counter.
        """
        if value is None:
            raise NullArgumentError("money")
        rate = self.rate
        currency = value.currency
        if not rate.contains(currency):
            raise NotExchangeableError(str(value), str(rate))
        if rate.is_identity:
            return value

        if currency == rate.base:
            target = rate.counter
            amount = value.amount.multiplied_by(rate.rate).with_scale(
                target.decimal_places, rounding
            )
        else:
            target = rate.base
            amount = value.amount.divided_by(rate.rate, rounding, target.decimal_places)
        return _same_variant(value, target, amount)


def _same_variant(value: MonetaryAmount, currency: Currency, amount: DecimalAmount):
    if isinstance(value, Money):
        return Money.of(currency, amount)
    return BigMoney.of(currency, amount)
