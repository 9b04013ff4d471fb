"""MonetaryAmount -- capability shared by BigMoney and Money, plus helpers both use."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from money_kernel.domain.currency import Currency, CurrencyRegistry
from money_kernel.domain.decimal_amount import AmountLike, DecimalAmount
from money_kernel.domain.rounding import RoundingRule
from money_kernel.exceptions import (
    CurrencyMismatchError,
    InvalidFormatError,
    NullArgumentError,
)

if TYPE_CHECKING:
    from money_kernel.domain.big_money import BigMoney


@runtime_checkable
class MonetaryAmount(Protocol):
    """Protocol for a currency-bound amount.

    Implementations: BigMoney (arbitrary precision), Money (fixed-point).
    Operations return the implementing type.
    """

    @property
    def currency(self) -> Currency: ...

    @property
    def amount(self) -> DecimalAmount: ...

    def to_big_money(self) -> BigMoney: ...

    def is_same_currency(self, other: MonetaryAmount) -> bool: ...

    def compare_to(self, other: MonetaryAmount) -> int: ...

    def plus(self, other: Any) -> MonetaryAmount: ...

    def minus(self, other: Any) -> MonetaryAmount: ...

    def multiplied_by(self, factor: Any) -> MonetaryAmount: ...

    def divided_by(self, divisor: Any, rounding: RoundingRule | str) -> MonetaryAmount: ...

    def negated(self) -> MonetaryAmount: ...

    def converted_to(
        self,
        currency: Currency | str,
        multiplier: AmountLike,
        rounding: RoundingRule | str,
    ) -> MonetaryAmount: ...


def resolve_currency(currency: Currency | str) -> Currency:
    """Accept a Currency or a registered code."""
    if currency is None:
        raise NullArgumentError("currency")
    if isinstance(currency, Currency):
        return currency
    if isinstance(currency, str):
        return CurrencyRegistry.lookup(currency)
    raise TypeError(f"currency must be Currency or str, got {type(currency)}")


def check_currency_match(left: Currency, right: Currency) -> None:
    if left != right:
        raise CurrencyMismatchError(left.code, right.code)


def is_monetary(value: Any) -> bool:
    return isinstance(value, MonetaryAmount) and not isinstance(value, type)


def parse_money_text(text: str) -> tuple[Currency, DecimalAmount]:
    """
    Split ``"GBP 25.95"`` into its currency and amount.

    The code occupies the first three characters and exactly one space
    separates it from the amount.

    Raises:
        NullArgumentError: If text is None.
        InvalidFormatError: If the layout or the amount is malformed.
        UnknownCurrencyError: If the code is not registered.
    """
    if text is None:
        raise NullArgumentError("money text")
    if len(text) < 5 or text[3] != " ":
        raise InvalidFormatError(text, "'<CODE> <AMOUNT>'")
    try:
        amount = DecimalAmount.parse(text[4:])
    except InvalidFormatError as e:
        raise InvalidFormatError(text, "'<CODE> <AMOUNT>'") from e
    return CurrencyRegistry.lookup(text[:3]), amount
