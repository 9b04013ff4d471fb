"""
Pure domain layer.

This module contains the money value objects and the exchange-rate
algebra with NO dependencies on:
- Database
- Files or environment
- Time/clock

All domain objects are immutable and deterministic.
"""

from money_kernel.domain.big_money import BigMoney
from money_kernel.domain.currency import (
    BASELINE_CURRENCIES,
    PSEUDO_DECIMAL_PLACES,
    Currency,
    CurrencyRecord,
    CurrencyRegistry,
)
from money_kernel.domain.decimal_amount import DecimalAmount
from money_kernel.domain.exchange_rate import ExchangeRate, ExchangeRateOperations
from money_kernel.domain.monetary import MonetaryAmount
from money_kernel.domain.money import Money
from money_kernel.domain.rounding import RoundingRule

__all__ = [
    # Currency
    "Currency",
    "CurrencyRecord",
    "CurrencyRegistry",
    "BASELINE_CURRENCIES",
    "PSEUDO_DECIMAL_PLACES",
    # Numbers
    "DecimalAmount",
    "RoundingRule",
    # Monetary values
    "MonetaryAmount",
    "BigMoney",
    "Money",
    # Exchange rates
    "ExchangeRate",
    "ExchangeRateOperations",
]
