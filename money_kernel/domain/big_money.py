"""
BigMoney -- Arbitrary-precision monetary value.

Responsibility:
    Pairs a Currency with a DecimalAmount of any scale. Used where
    intermediate results must keep more precision than the currency's
    canonical scale (pricing, allocation, exchange calculations).

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    Implements the MonetaryAmount protocol alongside Money.

Invariants enforced:
    - Amount and currency are never separated
    - No implicit rounding: only methods taking a rounding rule round
    - Arithmetic and comparison across currencies raise CurrencyMismatchError
    - Scale is never negative (negative scales are expanded exactly)

Failure modes:
    - NullArgumentError on None currency or amount
    - CurrencyMismatchError when currencies differ
    - InvalidScaleError when rounding would invent precision
    - SameCurrencyError / NegativeMultiplierError on bad conversions
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from money_kernel.domain.currency import Currency
from money_kernel.domain.decimal_amount import AmountLike, DecimalAmount
from money_kernel.domain.monetary import (
    MonetaryAmount,
    check_currency_match,
    is_monetary,
    parse_money_text,
    resolve_currency,
)
from money_kernel.domain.rounding import RoundingRule
from money_kernel.exceptions import (
    InvalidScaleError,
    NegativeMultiplierError,
    NullArgumentError,
    SameCurrencyError,
)

if TYPE_CHECKING:
    from money_kernel.domain.money import Money


@dataclass(frozen=True, slots=True, eq=False)
class BigMoney:
    """
    Currency-bound amount with unlimited precision.

    Contract:
        ``BigMoney.of("GBP", "2.345")`` keeps all three fraction digits.
        Use ``with_currency_scale`` or ``rounded`` to reduce precision.

    Guarantees:
        - Immutable and hashable (frozen dataclass with slots)
        - Equal when currencies match and amounts are numerically equal
    """

    currency: Currency
    amount: DecimalAmount

    def __post_init__(self) -> None:
        object.__setattr__(self, "currency", resolve_currency(self.currency))
        amount = DecimalAmount.of(self.amount)
        if amount.scale < 0:
            amount = amount.with_scale(0)
        object.__setattr__(self, "amount", amount)

    # ------------------------------------------------------------------
    # Factories
    # ------------------------------------------------------------------

    @classmethod
    def of(cls, currency: Currency | str, amount: AmountLike) -> BigMoney:
        """
        Create a BigMoney holding exactly ``amount``.

        Preconditions:
            - amount is a DecimalAmount, Decimal, str or int (never float)

        Postconditions:
            - The scale of ``amount`` is kept (floored at zero)

        Raises:
            NullArgumentError: If currency or amount is None.
            UnknownCurrencyError: If a currency code is not registered.
        """
        return cls(currency=currency, amount=amount)

    @classmethod
    def of_scale(cls, currency: Currency | str, unscaled: int, scale: int) -> BigMoney:
        """Create from an unscaled integer and a scale: (GBP, 234, 2) is GBP 2.34."""
        return cls(currency=currency, amount=DecimalAmount(unscaled, scale))

    @classmethod
    def of_major(cls, currency: Currency | str, amount_major: int) -> BigMoney:
        return cls(currency=currency, amount=DecimalAmount(amount_major, 0))

    @classmethod
    def of_minor(cls, currency: Currency | str, amount_minor: int) -> BigMoney:
        resolved = resolve_currency(currency)
        return cls(
            currency=resolved,
            amount=DecimalAmount(amount_minor, resolved.decimal_places),
        )

    @classmethod
    def zero(cls, currency: Currency | str, scale: int = 0) -> BigMoney:
        return cls(currency=currency, amount=DecimalAmount(0, scale))

    @classmethod
    def of_currency_scale(
        cls,
        currency: Currency | str,
        amount: AmountLike,
        rounding: RoundingRule | str = RoundingRule.UNNECESSARY,
    ) -> BigMoney:
        """Create at the currency's canonical scale, rounding if needed."""
        resolved = resolve_currency(currency)
        value = DecimalAmount.of(amount).with_scale(resolved.decimal_places, rounding)
        return cls(currency=resolved, amount=value)

    @classmethod
    def parse(cls, text: str) -> BigMoney:
        """Parse ``"<CODE> <AMOUNT>"``, keeping the scale written in the text."""
        currency, amount = parse_money_text(text)
        return cls(currency=currency, amount=amount)

    @classmethod
    def from_money(cls, money: MonetaryAmount) -> BigMoney:
        if money is None:
            raise NullArgumentError("money")
        return money.to_big_money()

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def scale(self) -> int:
        return self.amount.scale

    @property
    def is_currency_scale(self) -> bool:
        return self.amount.scale == self.currency.decimal_places

    @property
    def amount_major(self) -> int:
        """Whole major units, truncated toward zero."""
        return self.amount.with_scale(0, RoundingRule.DOWN).unscaled

    @property
    def amount_minor(self) -> int:
        """Total amount in minor units, truncated toward zero."""
        return self.amount.with_scale(self.currency.decimal_places, RoundingRule.DOWN).unscaled

    @property
    def minor_part(self) -> int:
        """Minor units beyond the whole major units, carrying the value's sign."""
        return self.amount_minor - self.amount_major * 10 ** self.currency.decimal_places

    @property
    def is_zero(self) -> bool:
        return self.amount.is_zero

    @property
    def is_positive(self) -> bool:
        return self.amount.is_positive

    @property
    def is_positive_or_zero(self) -> bool:
        return not self.amount.is_negative

    @property
    def is_negative(self) -> bool:
        return self.amount.is_negative

    @property
    def is_negative_or_zero(self) -> bool:
        return not self.amount.is_positive

    def to_big_money(self) -> BigMoney:
        return self

    def to_money(self, rounding: RoundingRule | str = RoundingRule.UNNECESSARY) -> Money:
        """Convert to fixed-point Money at the canonical scale."""
        from money_kernel.domain.money import Money

        return Money.from_big_money(self, rounding)

    # ------------------------------------------------------------------
    # Derived values
    # ------------------------------------------------------------------

    def with_amount(self, amount: AmountLike) -> BigMoney:
        return BigMoney(currency=self.currency, amount=amount)

    def with_currency(self, currency: Currency | str) -> BigMoney:
        """Same amount and scale, different currency."""
        return BigMoney(currency=currency, amount=self.amount)

    def with_scale(
        self,
        scale: int,
        rounding: RoundingRule | str = RoundingRule.UNNECESSARY,
    ) -> BigMoney:
        return BigMoney(currency=self.currency, amount=self.amount.with_scale(scale, rounding))

    def with_currency_scale(
        self,
        rounding: RoundingRule | str = RoundingRule.UNNECESSARY,
    ) -> BigMoney:
        return self.with_scale(self.currency.decimal_places, rounding)

    def rounded(self, scale: int, rounding: RoundingRule | str) -> BigMoney:
        """
        Round at ``scale`` while keeping the current scale.

        ``GBP 432.34`` rounded(-1, DOWN) is ``GBP 430.00``.

        Raises:
            InvalidScaleError: If ``scale`` is greater than the current scale.
        """
        current = self.amount.scale
        if scale > current:
            raise InvalidScaleError(scale, f"cannot round beyond current scale {current}")
        if scale == current:
            return self
        value = self.amount.with_scale(scale, rounding).with_scale(current)
        return BigMoney(currency=self.currency, amount=value)

    # ------------------------------------------------------------------
    # Arithmetic
    # ------------------------------------------------------------------

    def _operand(self, other: Any) -> DecimalAmount:
        if other is None:
            raise NullArgumentError("operand")
        if is_monetary(other):
            check_currency_match(self.currency, other.currency)
            return other.amount
        return DecimalAmount.of(other)

    def plus(self, other: MonetaryAmount | AmountLike) -> BigMoney:
        """Exact sum. Monetary operands must share this currency."""
        return BigMoney(currency=self.currency, amount=self.amount.plus(self._operand(other)))

    def minus(self, other: MonetaryAmount | AmountLike) -> BigMoney:
        """Exact difference. Monetary operands must share this currency."""
        return BigMoney(currency=self.currency, amount=self.amount.minus(self._operand(other)))

    def plus_major(self, amount: int) -> BigMoney:
        return self.plus(DecimalAmount(amount, 0))

    def plus_minor(self, amount: int) -> BigMoney:
        return self.plus(DecimalAmount(amount, self.currency.decimal_places))

    def minus_major(self, amount: int) -> BigMoney:
        return self.minus(DecimalAmount(amount, 0))

    def minus_minor(self, amount: int) -> BigMoney:
        return self.minus(DecimalAmount(amount, self.currency.decimal_places))

    def multiplied_by(self, factor: AmountLike) -> BigMoney:
        """Exact product; the scale grows by the factor's scale."""
        return BigMoney(currency=self.currency, amount=self.amount.multiplied_by(factor))

    def multiply_retain_scale(self, factor: AmountLike, rounding: RoundingRule | str) -> BigMoney:
        """Multiply, then round back to the current scale."""
        product = self.amount.multiplied_by(factor).with_scale(self.amount.scale, rounding)
        return BigMoney(currency=self.currency, amount=product)

    def divided_by(self, divisor: AmountLike, rounding: RoundingRule | str) -> BigMoney:
        """Divide keeping the current scale."""
        return BigMoney(currency=self.currency, amount=self.amount.divided_by(divisor, rounding))

    def negated(self) -> BigMoney:
        return BigMoney(currency=self.currency, amount=self.amount.negated())

    def abs(self) -> BigMoney:
        return self if not self.amount.is_negative else self.negated()

    def converted_to(
        self,
        currency: Currency | str,
        multiplier: AmountLike,
        rounding: RoundingRule | str | None = None,
    ) -> BigMoney:
        """
        Convert into another currency by an explicit multiplier.

        Preconditions:
            - currency differs from this currency
            - multiplier > 0

        Postconditions:
            - The product is exact; with ``rounding`` it is brought to the
              target currency's canonical scale.

        Raises:
            SameCurrencyError: If the target is this currency.
            NegativeMultiplierError: If multiplier is zero or negative.
        """
        target = resolve_currency(currency)
        if target == self.currency:
            raise SameCurrencyError(target.code)
        factor = DecimalAmount.of(multiplier)
        if not factor.is_positive:
            raise NegativeMultiplierError(factor.to_plain_string())
        converted = BigMoney(currency=target, amount=self.amount.multiplied_by(factor))
        if rounding is None:
            return converted
        return converted.with_currency_scale(rounding)

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
        if not isinstance(other, BigMoney):
            return NotImplemented
        return self.currency == other.currency and self.amount == other.amount

    def __hash__(self) -> int:
        return hash((self.currency, self.amount))

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

    def __add__(self, other: MonetaryAmount) -> BigMoney:
        if not is_monetary(other):
            return NotImplemented
        return self.plus(other)

    def __sub__(self, other: MonetaryAmount) -> BigMoney:
        if not is_monetary(other):
            return NotImplemented
        return self.minus(other)

    def __neg__(self) -> BigMoney:
        return self.negated()

    def __abs__(self) -> BigMoney:
        return self.abs()

    def __reduce__(self):
        from money_kernel import serialization

        return (serialization.loads, (serialization.dumps(self),))

    def __str__(self) -> str:
        return f"{self.currency.code} {self.amount.to_plain_string()}"

    def __repr__(self) -> str:
        return f"BigMoney({self.currency.code!r}, {self.amount.to_plain_string()!r})"
