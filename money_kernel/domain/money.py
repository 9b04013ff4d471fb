"""
Money -- Fixed-point monetary value in signed 64-bit minor units.

Responsibility:
    Holds an amount as a count of minor units (pence, cents, yen) at the
    currency's canonical scale. Every result is checked against the signed
    64-bit range so values fit a BIGINT column.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    Implements the MonetaryAmount protocol alongside BigMoney; converts to
    BigMoney for anything needing extra precision.

Invariants enforced:
    - minor_units lies in [-2**63, 2**63 - 1]; overflow raises, never wraps
    - The scale is always the currency's canonical scale
    - Factories that would drop digits require an explicit rounding rule

Failure modes:
    - ArithmeticOverflowError when a result leaves the 64-bit range
    - RoundingNecessaryError when UNNECESSARY would discard digits
    - CurrencyMismatchError across currencies
    - InvalidScaleError from rounded() above the canonical scale
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from money_kernel.domain.big_money import BigMoney
from money_kernel.domain.currency import Currency
from money_kernel.domain.decimal_amount import AmountLike, DecimalAmount
from money_kernel.domain.monetary import (
    MonetaryAmount,
    check_currency_match,
    is_monetary,
    parse_money_text,
    resolve_currency,
)
from money_kernel.domain.rounding import RoundingRule, divide_rounded
from money_kernel.exceptions import (
    ArithmeticOverflowError,
    InvalidScaleError,
    NegativeMultiplierError,
    NullArgumentError,
    SameCurrencyError,
)

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1


def _checked(operation: str, currency: Currency, minor_units: int) -> int:
    if not INT64_MIN <= minor_units <= INT64_MAX:
        raise ArithmeticOverflowError(operation, currency.code, minor_units)
    return minor_units


@dataclass(frozen=True, slots=True, eq=False)
class Money:
    """
    Currency-bound amount stored as 64-bit minor units.

    Contract:
        ``Money.of("GBP", "2.34")`` stores 234 pence. ``Money.of("GBP",
        "2.345")`` fails unless a rounding rule is supplied.

    Guarantees:
        - Immutable and hashable (frozen dataclass with slots)
        - Every constructor and operation checks the 64-bit range
    """

    currency: Currency
    minor_units: int

    def __post_init__(self) -> None:
        object.__setattr__(self, "currency", resolve_currency(self.currency))
        if self.minor_units is None:
            raise NullArgumentError("minor_units")
        if isinstance(self.minor_units, bool) or not isinstance(self.minor_units, int):
            raise TypeError(f"minor_units must be int, got {type(self.minor_units)}")
        _checked("construct", self.currency, self.minor_units)

    # ------------------------------------------------------------------
    # Factories
    # ------------------------------------------------------------------

    @classmethod
    def of(
        cls,
        currency: Currency | str,
        amount: AmountLike,
        rounding: RoundingRule | str = RoundingRule.UNNECESSARY,
    ) -> Money:
        """
        Create from a decimal amount, rescaled to the currency's scale.

        Raises:
            RoundingNecessaryError: If the amount has more fraction digits than
                the currency allows and no rounding rule was given.
            ArithmeticOverflowError: If the minor-unit count exceeds 64 bits.
        """
        resolved = resolve_currency(currency)
        minor = DecimalAmount.of(amount).with_scale(resolved.decimal_places, rounding).unscaled
        return cls(currency=resolved, minor_units=_checked("of", resolved, minor))

    @classmethod
    def of_major(cls, currency: Currency | str, amount_major: int) -> Money:
        resolved = resolve_currency(currency)
        minor = amount_major * 10 ** resolved.decimal_places
        return cls(currency=resolved, minor_units=_checked("of_major", resolved, minor))

    @classmethod
    def of_minor(cls, currency: Currency | str, amount_minor: int) -> Money:
        resolved = resolve_currency(currency)
        return cls(currency=resolved, minor_units=_checked("of_minor", resolved, amount_minor))

    @classmethod
    def zero(cls, currency: Currency | str) -> Money:
        return cls(currency=currency, minor_units=0)

    @classmethod
    def parse(cls, text: str) -> Money:
        """
        Parse ``"<CODE> <AMOUNT>"``.

        Raises:
            InvalidFormatError: If the text is malformed.
            RoundingNecessaryError: If the amount has too many fraction digits.
        """
        currency, amount = parse_money_text(text)
        return cls.of(currency, amount)

    @classmethod
    def from_big_money(
        cls,
        money: MonetaryAmount,
        rounding: RoundingRule | str = RoundingRule.UNNECESSARY,
    ) -> Money:
        if money is None:
            raise NullArgumentError("money")
        if isinstance(money, Money):
            return money
        return cls.of(money.currency, money.amount, rounding)

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def scale(self) -> int:
        return self.currency.decimal_places

    @property
    def amount(self) -> DecimalAmount:
        return DecimalAmount(self.minor_units, self.currency.decimal_places)

    @property
    def amount_major(self) -> int:
        """Whole major units, truncated toward zero."""
        return divide_rounded(
            self.minor_units, 10 ** self.currency.decimal_places, RoundingRule.DOWN
        )

    @property
    def amount_minor(self) -> int:
        return self.minor_units

    @property
    def minor_part(self) -> int:
        """Minor units beyond the whole major units, carrying the value's sign."""
        return self.minor_units - self.amount_major * 10 ** self.currency.decimal_places

    @property
    def is_zero(self) -> bool:
        return self.minor_units == 0

    @property
    def is_positive(self) -> bool:
        return self.minor_units > 0

    @property
    def is_positive_or_zero(self) -> bool:
        return self.minor_units >= 0

    @property
    def is_negative(self) -> bool:
        return self.minor_units < 0

    @property
    def is_negative_or_zero(self) -> bool:
        return self.minor_units <= 0

    def to_big_money(self) -> BigMoney:
        return BigMoney(currency=self.currency, amount=self.amount)

    # ------------------------------------------------------------------
    # Derived values
    # ------------------------------------------------------------------

    def _with_minor(self, operation: str, minor_units: int) -> Money:
        return Money(
            currency=self.currency,
            minor_units=_checked(operation, self.currency, minor_units),
        )

    def _to_minor(self, value: AmountLike, rounding: RoundingRule | str) -> int:
        return DecimalAmount.of(value).with_scale(self.currency.decimal_places, rounding).unscaled

    def with_amount(
        self,
        amount: AmountLike,
        rounding: RoundingRule | str = RoundingRule.UNNECESSARY,
    ) -> Money:
        return self._with_minor("with_amount", self._to_minor(amount, rounding))

    def with_currency(
        self,
        currency: Currency | str,
        rounding: RoundingRule | str = RoundingRule.UNNECESSARY,
    ) -> Money:
        """Same amount in a different currency, rescaled to its canonical scale."""
        return Money.of(currency, self.amount, rounding)

    def rounded(self, scale: int, rounding: RoundingRule | str) -> Money:
        """
        Round at ``scale`` keeping the canonical scale.

        Raises:
            InvalidScaleError: If ``scale`` exceeds the canonical scale.
        """
        current = self.currency.decimal_places
        if scale > current:
            raise InvalidScaleError(scale, f"cannot round beyond currency scale {current}")
        if scale == current:
            return self
        value = self.amount.with_scale(scale, rounding).with_scale(current)
        return self._with_minor("rounded", value.unscaled)

    # ------------------------------------------------------------------
    # Arithmetic
    # ------------------------------------------------------------------

    def _operand_minor(self, other: Any, rounding: RoundingRule | str) -> int:
        if other is None:
            raise NullArgumentError("operand")
        if is_monetary(other):
            check_currency_match(self.currency, other.currency)
            if isinstance(other, Money):
                return other.minor_units
            return self._to_minor(other.amount, rounding)
        return self._to_minor(other, rounding)

    def plus(
        self,
        other: MonetaryAmount | AmountLike,
        rounding: RoundingRule | str = RoundingRule.UNNECESSARY,
    ) -> Money:
        """
        Add a monetary value or a decimal amount.

        Operands finer than the canonical scale are rounded with ``rounding``.

        Raises:
            CurrencyMismatchError: If a monetary operand has another currency.
            ArithmeticOverflowError: If the sum leaves the 64-bit range.
        """
        return self._with_minor("plus", self.minor_units + self._operand_minor(other, rounding))

    def minus(
        self,
        other: MonetaryAmount | AmountLike,
        rounding: RoundingRule | str = RoundingRule.UNNECESSARY,
    ) -> Money:
        return self._with_minor("minus", self.minor_units - self._operand_minor(other, rounding))

    def plus_major(self, amount: int) -> Money:
        return self._with_minor(
            "plus_major", self.minor_units + amount * 10 ** self.currency.decimal_places
        )

    def plus_minor(self, amount: int) -> Money:
        return self._with_minor("plus_minor", self.minor_units + amount)

    def minus_major(self, amount: int) -> Money:
        return self._with_minor(
            "minus_major", self.minor_units - amount * 10 ** self.currency.decimal_places
        )

    def minus_minor(self, amount: int) -> Money:
        return self._with_minor("minus_minor", self.minor_units - amount)

    def multiplied_by(
        self,
        factor: AmountLike,
        rounding: RoundingRule | str = RoundingRule.UNNECESSARY,
    ) -> Money:
        """
        Multiply by an integer (exact) or a decimal factor (rounded with ``rounding``).

        Raises:
            ArithmeticOverflowError: If the product leaves the 64-bit range.
        """
        if isinstance(factor, int) and not isinstance(factor, bool):
            return self._with_minor("multiplied_by", self.minor_units * factor)
        product = self.amount.multiplied_by(factor)
        return self._with_minor("multiplied_by", self._to_minor(product, rounding))

    def divided_by(
        self,
        divisor: AmountLike,
        rounding: RoundingRule | str = RoundingRule.DOWN,
    ) -> Money:
        """Divide at the canonical scale, truncating unless a rule is given."""
        quotient = self.amount.divided_by(divisor, rounding, self.currency.decimal_places)
        return self._with_minor("divided_by", quotient.unscaled)

    def negated(self) -> Money:
        return self._with_minor("negated", -self.minor_units)

    def abs(self) -> Money:
        return self if self.minor_units >= 0 else self._with_minor("abs", -self.minor_units)

    def converted_to(
        self,
        currency: Currency | str,
        multiplier: AmountLike,
        rounding: RoundingRule | str,
    ) -> Money:
        """
        Convert into another currency by an explicit multiplier.

        The product is rounded once to the target's canonical scale.

        Raises:
            SameCurrencyError: If the target is this currency.
            NegativeMultiplierError: If multiplier is zero or negative.
            ArithmeticOverflowError: If the result leaves the 64-bit range.
        """
        target = resolve_currency(currency)
        if target == self.currency:
            raise SameCurrencyError(target.code)
        factor = DecimalAmount.of(multiplier)
        if not factor.is_positive:
            raise NegativeMultiplierError(factor.to_plain_string())
        product = self.amount.multiplied_by(factor).with_scale(target.decimal_places, rounding)
        return Money(
            currency=target,
            minor_units=_checked("converted_to", target, product.unscaled),
        )

    # ------------------------------------------------------------------
    # Comparison
    # ------------------------------------------------------------------

    def is_same_currency(self, other: MonetaryAmount) -> bool:
        if other is None:
            raise NullArgumentError("money")
        return self.currency == other.currency

    def compare_to(self, other: MonetaryAmount) -> int:
        """
        Compare numeric values of two amounts in the same currency.

        Raises:
            CurrencyMismatchError: If the currencies differ.
        """
        if other is None:
            raise NullArgumentError("money")
        check_currency_match(self.currency, other.currency)
        if isinstance(other, Money):
            return (self.minor_units > other.minor_units) - (self.minor_units < other.minor_units)
        return self.amount.compare_to(other.amount)

    def is_equal(self, other: MonetaryAmount) -> bool:
        return self.compare_to(other) == 0

    def is_greater_than(self, other: MonetaryAmount) -> bool:
        return self.compare_to(other) > 0

    def is_greater_than_or_equal(self, other: MonetaryAmount) -> bool:
        return self.compare_to(other) >= 0

    def is_less_than(self, other: MonetaryAmount) -> bool:
        return self.compare_to(other) < 0

    def is_less_than_or_equal(self, other: MonetaryAmount) -> bool:
        return self.compare_to(other) <= 0

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        return self.currency == other.currency and self.minor_units == other.minor_units

    def __hash__(self) -> int:
        return hash((self.currency, self.minor_units))

    def __lt__(self, other: MonetaryAmount) -> bool:
        if not is_monetary(other):
            return NotImplemented
        return self.compare_to(other) < 0

    def __le__(self, other: MonetaryAmount) -> bool:
        if not is_monetary(other):
            return NotImplemented
        return self.compare_to(other) <= 0

    def __gt__(self, other: MonetaryAmount) -> bool:
        if not is_monetary(other):
            return NotImplemented
        return self.compare_to(other) > 0

    def __ge__(self, other: MonetaryAmount) -> bool:
        if not is_monetary(other):
            return NotImplemented
        return self.compare_to(other) >= 0

    # ------------------------------------------------------------------
    # Operators
    # ------------------------------------------------------------------

    def __add__(self, other: MonetaryAmount) -> Money:
        if not is_monetary(other):
            return NotImplemented
        return self.plus(other)

    def __sub__(self, other: MonetaryAmount) -> Money:
        if not is_monetary(other):
            return NotImplemented
        return self.minus(other)

    def __neg__(self) -> Money:
        return self.negated()

    def __abs__(self) -> Money:
        return self.abs()

    def __reduce__(self):
        from money_kernel import serialization

        return (serialization.loads, (serialization.dumps(self),))

    def __str__(self) -> str:
        return f"{self.currency.code} {self.amount.to_plain_string()}"

    def __repr__(self) -> str:
        return f"Money({self.currency.code!r}, {self.amount.to_plain_string()!r})"
