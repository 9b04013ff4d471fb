"""Rounding -- closed set of rounding rules and the integer rounding kernel.

Every operation that reduces scale (division, rescaling, conversion, rate
inversion, exchange) funnels through ``divide_rounded`` so that all value
types round identically.

The rules are applied to Python ints rather than through
``Decimal.quantize``: operands have no size limit, and under any fixed
``localcontext`` precision an intermediate product or quotient can be
rounded by the context before the rule ever sees it.
"""

from __future__ import annotations

from decimal import (
    ROUND_CEILING,
    ROUND_DOWN,
    ROUND_FLOOR,
    ROUND_HALF_DOWN,
    ROUND_HALF_EVEN,
    ROUND_HALF_UP,
    ROUND_UP,
)
from enum import Enum

from money_kernel.exceptions import RoundingNecessaryError


class RoundingRule(str, Enum):
    """How discarded digits are resolved.

    Values are the ``decimal`` module's ``ROUND_*`` constants so a rule can be
    handed straight to ``Decimal.quantize``. ``UNNECESSARY`` has no decimal
    counterpart; it asserts that no non-zero digit is discarded.
    """

    UP = ROUND_UP
    DOWN = ROUND_DOWN
    CEILING = ROUND_CEILING
    FLOOR = ROUND_FLOOR
    HALF_UP = ROUND_HALF_UP
    HALF_DOWN = ROUND_HALF_DOWN
    HALF_EVEN = ROUND_HALF_EVEN
    UNNECESSARY = "ROUND_UNNECESSARY"

    # Alias: truncation is rounding toward zero.
    TRUNCATE = ROUND_DOWN

    @classmethod
    def of(cls, rule: RoundingRule | str) -> RoundingRule:
        """Resolve a rule from an enum member, member name, or decimal constant."""
        if isinstance(rule, cls):
            return rule
        if isinstance(rule, str):
            if rule in cls.__members__:
                return cls.__members__[rule]
            return cls(rule)
        raise TypeError(f"rounding must be RoundingRule or str, got {type(rule)}")


def divide_rounded(
    numerator: int,
    denominator: int,
    rule: RoundingRule,
    *,
    scale: int = 0,
) -> int:
    """
    Divide two integers and round the quotient to an integer.

    Preconditions:
        - denominator != 0 (callers raise DivisionByZeroError first)

    Postconditions:
        - Exact quotients are returned unchanged under every rule.
        - Inexact quotients are resolved by ``rule``.

    Raises:
        RoundingNecessaryError: If ``rule`` is UNNECESSARY and the quotient
            is inexact. ``scale`` is reported in the error.
    """
    negative = (numerator < 0) != (denominator < 0)
    quotient, remainder = divmod(abs(numerator), abs(denominator))
    if remainder == 0:
        return -quotient if negative else quotient

    divisor = abs(denominator)
    if rule is RoundingRule.UNNECESSARY:
        raise RoundingNecessaryError(f"{numerator}/{denominator}", scale)

    if rule is RoundingRule.UP:
        increment = True
    elif rule is RoundingRule.DOWN:
        increment = False
    elif rule is RoundingRule.CEILING:
        increment = not negative
    elif rule is RoundingRule.FLOOR:
        increment = negative
    else:
        twice = remainder * 2
        if twice > divisor:
            increment = True
        elif twice < divisor:
            increment = False
        elif rule is RoundingRule.HALF_UP:
            increment = True
        elif rule is RoundingRule.HALF_DOWN:
            increment = False
        else:
            increment = quotient % 2 == 1

    if increment:
        quotient += 1
    return -quotient if negative else quotient
