"""
DecimalAmount -- Arbitrary-precision signed decimal number.

Responsibility:
    The numeric engine beneath every monetary value and exchange rate.
    A value is ``unscaled * 10 ** -scale`` with both parts held as Python
    ``int``, so addition, subtraction and multiplication are exact and
    unbounded. Operations that shrink the scale take an explicit
    RoundingRule.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    Imported by BigMoney, Money and ExchangeRate. Depends only on
    money_kernel.domain.rounding and money_kernel.exceptions.

Invariants enforced:
    - unscaled and scale are always ``int`` (never float, never bool)
    - Equality, ordering and hashing use the numeric value, so
      ``1.0 == 1.00`` and both hash alike
    - No operation rounds unless it was handed a rounding rule

Failure modes:
    - TypeError on float input or non-integer parts
    - InvalidFormatError on unparseable text
    - DivisionByZeroError when dividing by zero
    - RoundingNecessaryError when UNNECESSARY would discard digits
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from decimal import Decimal
from typing import Union

from money_kernel.domain.rounding import RoundingRule, divide_rounded
from money_kernel.exceptions import (
    DivisionByZeroError,
    InvalidFormatError,
    NullArgumentError,
)

_DECIMAL_PATTERN = re.compile(r"([+-]?)([0-9]+)(?:\.([0-9]+))?")

AmountLike = Union["DecimalAmount", Decimal, str, int]


def _pow10(exponent: int) -> int:
    return 10 ** exponent


@dataclass(frozen=True, slots=True, eq=False)
class DecimalAmount:
    """
    Immutable decimal value with explicit scale.

    Contract:
        ``DecimalAmount(unscaled=12345, scale=2)`` is 123.45. A negative
        scale multiplies: ``DecimalAmount(5, -2)`` is 500.

    Guarantees:
        - Immutable and hashable (frozen dataclass with slots)
        - Scale is preserved by exact operations and only changed by
          ``with_scale`` / ``stripped`` / ``divided_by``
    """

    unscaled: int
    scale: int

    def __post_init__(self) -> None:
        if isinstance(self.unscaled, bool) or not isinstance(self.unscaled, int):
            raise TypeError(f"unscaled must be int, got {type(self.unscaled)}")
        if isinstance(self.scale, bool) or not isinstance(self.scale, int):
            raise TypeError(f"scale must be int, got {type(self.scale)}")

    # ------------------------------------------------------------------
    # Factories
    # ------------------------------------------------------------------

    @classmethod
    def of(cls, value: AmountLike) -> DecimalAmount:
        """
        Convert a Decimal, string or int to a DecimalAmount.

        Floats are rejected: binary fractions cannot represent money.

        Raises:
            NullArgumentError: If value is None.
            TypeError: If value is a float or another unsupported type.
            InvalidFormatError: If a string or Decimal is not a finite number.
        """
        if value is None:
            raise NullArgumentError("amount")
        if isinstance(value, DecimalAmount):
            return value
        if isinstance(value, bool):
            raise TypeError("amount must not be bool")
        if isinstance(value, int):
            return cls(value, 0)
        if isinstance(value, float):
            raise TypeError("float amounts are not supported, use Decimal or str")
        if isinstance(value, str):
            return cls.parse(value)
        if isinstance(value, Decimal):
            if not value.is_finite():
                raise InvalidFormatError(str(value), "a finite decimal number")
            sign, digits, exponent = value.as_tuple()
            unscaled = int("".join(map(str, digits)) or "0")
            return cls(-unscaled if sign else unscaled, -exponent)
        raise TypeError(f"amount must be Decimal, str or int, got {type(value)}")

    @classmethod
    def parse(cls, text: str) -> DecimalAmount:
        """
        Parse plain decimal text such as ``"-12.340"``.

        The scale equals the number of fraction digits written.

        Raises:
            NullArgumentError: If text is None.
            InvalidFormatError: If text is not ``[+-]digits[.digits]``.
        """
        if text is None:
            raise NullArgumentError("text")
        match = _DECIMAL_PATTERN.fullmatch(text)
        if match is None:
            raise InvalidFormatError(text, "[+-]<digits>[.<digits>]")
        sign, whole, fraction = match.groups()
        fraction = fraction or ""
        unscaled = int(whole + fraction)
        return cls(-unscaled if sign == "-" else unscaled, len(fraction))

    @classmethod
    def zero(cls, scale: int = 0) -> DecimalAmount:
        return cls(0, scale)

    # ------------------------------------------------------------------
    # Predicates
    # ------------------------------------------------------------------

    @property
    def is_zero(self) -> bool:
        return self.unscaled == 0

    @property
    def is_positive(self) -> bool:
        return self.unscaled > 0

    @property
    def is_negative(self) -> bool:
        return self.unscaled < 0

    @property
    def signum(self) -> int:
        """-1, 0 or 1 according to the sign of the value."""
        return (self.unscaled > 0) - (self.unscaled < 0)

    # ------------------------------------------------------------------
    # Arithmetic
    # ------------------------------------------------------------------

    def _aligned(self, other: DecimalAmount) -> tuple[int, int, int]:
        scale = max(self.scale, other.scale)
        return (
            self.unscaled * _pow10(scale - self.scale),
            other.unscaled * _pow10(scale - other.scale),
            scale,
        )

    def plus(self, other: AmountLike) -> DecimalAmount:
        """Exact sum at the larger of the two scales."""
        left, right, scale = self._aligned(DecimalAmount.of(other))
        return DecimalAmount(left + right, scale)

    def minus(self, other: AmountLike) -> DecimalAmount:
        """Exact difference at the larger of the two scales."""
        left, right, scale = self._aligned(DecimalAmount.of(other))
        return DecimalAmount(left - right, scale)

    def multiplied_by(self, other: AmountLike) -> DecimalAmount:
        """Exact product; the result scale is the sum of the scales."""
        factor = DecimalAmount.of(other)
        return DecimalAmount(self.unscaled * factor.unscaled, self.scale + factor.scale)

    def divided_by(
        self,
        divisor: AmountLike,
        rounding: RoundingRule | str,
        scale: int | None = None,
    ) -> DecimalAmount:
        """
        Divide, rounding the quotient once at ``scale``.

        Preconditions:
            - ``scale`` defaults to this value's scale.

        Raises:
            DivisionByZeroError: If divisor is zero.
            RoundingNecessaryError: If rounding is UNNECESSARY and the
                quotient does not fit ``scale``.
        """
        rule = RoundingRule.of(rounding)
        other = DecimalAmount.of(divisor)
        if other.is_zero:
            raise DivisionByZeroError(self.to_plain_string())
        target = self.scale if scale is None else scale
        exponent = other.scale + target - self.scale
        numerator = self.unscaled
        denominator = other.unscaled
        if exponent >= 0:
            numerator *= _pow10(exponent)
        else:
            denominator *= _pow10(-exponent)
        return DecimalAmount(
            divide_rounded(numerator, denominator, rule, scale=target), target
        )

    def negated(self) -> DecimalAmount:
        return DecimalAmount(-self.unscaled, self.scale)

    def abs(self) -> DecimalAmount:
        return self if self.unscaled >= 0 else self.negated()

    def with_scale(
        self,
        scale: int,
        rounding: RoundingRule | str = RoundingRule.UNNECESSARY,
    ) -> DecimalAmount:
        """
        Re-express this value at ``scale``.

        Increasing the scale is always exact. Decreasing it rounds with
        ``rounding``; the default UNNECESSARY refuses to lose digits.
        """
        if scale == self.scale:
            return self
        if scale > self.scale:
            return DecimalAmount(self.unscaled * _pow10(scale - self.scale), scale)
        rule = RoundingRule.of(rounding)
        return DecimalAmount(
            divide_rounded(self.unscaled, _pow10(self.scale - scale), rule, scale=scale),
            scale,
        )

    def stripped(self) -> DecimalAmount:
        """Remove trailing zeros from the unscaled value. Zero becomes 0 at scale 0."""
        if self.unscaled == 0:
            return DecimalAmount(0, 0)
        unscaled, scale = self.unscaled, self.scale
        while unscaled % 10 == 0:
            unscaled //= 10
            scale -= 1
        return DecimalAmount(unscaled, scale)

    def move_point_right(self, places: int) -> DecimalAmount:
        """Multiply by ``10 ** places``; the result scale never drops below zero."""
        scale = self.scale - places
        if scale < 0:
            return DecimalAmount(self.unscaled * _pow10(-scale), 0)
        return DecimalAmount(self.unscaled, scale)

    def move_point_left(self, places: int) -> DecimalAmount:
        """Divide by ``10 ** places``; the result scale never drops below zero."""
        return self.move_point_right(-places)

    # ------------------------------------------------------------------
    # Comparison
    # ------------------------------------------------------------------

    def compare_to(self, other: AmountLike) -> int:
        """Numeric comparison ignoring scale: -1, 0 or 1."""
        left, right, _ = self._aligned(DecimalAmount.of(other))
        return (left > right) - (left < right)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DecimalAmount):
            return NotImplemented
        return self.compare_to(other) == 0

    def __hash__(self) -> int:
        return hash(self.to_decimal())

    def __lt__(self, other: DecimalAmount) -> bool:
        if not isinstance(other, DecimalAmount):
            return NotImplemented
        return self.compare_to(other) < 0

    def __le__(self, other: DecimalAmount) -> bool:
        if not isinstance(other, DecimalAmount):
            return NotImplemented
        return self.compare_to(other) <= 0

    def __gt__(self, other: DecimalAmount) -> bool:
        if not isinstance(other, DecimalAmount):
            return NotImplemented
        return self.compare_to(other) > 0

    def __ge__(self, other: DecimalAmount) -> bool:
        if not isinstance(other, DecimalAmount):
            return NotImplemented
        return self.compare_to(other) >= 0

    # ------------------------------------------------------------------
    # Operators
    # ------------------------------------------------------------------

    def __add__(self, other: AmountLike) -> DecimalAmount:
        if isinstance(other, float):
            return NotImplemented
        return self.plus(other)

    def __sub__(self, other: AmountLike) -> DecimalAmount:
        if isinstance(other, float):
            return NotImplemented
        return self.minus(other)

    def __mul__(self, other: AmountLike) -> DecimalAmount:
        if isinstance(other, float):
            return NotImplemented
        return self.multiplied_by(other)

    def __neg__(self) -> DecimalAmount:
        return self.negated()

    def __abs__(self) -> DecimalAmount:
        return self.abs()

    # ------------------------------------------------------------------
    # Conversion
    # ------------------------------------------------------------------

    def to_decimal(self) -> Decimal:
        """Exact ``Decimal`` with the same unscaled value and exponent."""
        return Decimal(f"{self.unscaled}E{-self.scale}")

    def to_plain_string(self) -> str:
        """Render without exponent notation, keeping every scale digit."""
        if self.scale <= 0:
            return str(self.unscaled * _pow10(-self.scale))
        digits = str(abs(self.unscaled)).rjust(self.scale + 1, "0")
        sign = "-" if self.unscaled < 0 else ""
        return f"{sign}{digits[:-self.scale]}.{digits[-self.scale:]}"

    def __reduce__(self):
        from money_kernel import serialization

        return (serialization.loads, (serialization.dumps(self),))

    def __str__(self) -> str:
        return self.to_plain_string()

    def __repr__(self) -> str:
        return f"DecimalAmount({self.to_plain_string()!r})"
