"""
Typed Exception Hierarchy for the Money Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Monetary code must fail precisely. Callers catch by type and read structured
attributes, never by parsing message strings:

    try:
        total = price.plus(shipping)
    except CurrencyMismatchError as e:
        log.warning("mixed_currencies", extra={"left": e.currency1, "right": e.currency2})
        api_response(code=e.code)

Every exception:
  1. Has a TYPED class (catch by type, not message)
  2. Has a CODE class attribute (machine-readable, API-safe)
  3. Carries structured DATA as instance attributes

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    MoneyKernelError (base)
    |
    +-- NullArgumentError
    +-- InvalidFormatError
    |
    +-- CurrencyError
    |   +-- UnknownCurrencyError
    |   +-- UnknownCountryError
    |   +-- CurrencyMismatchError
    |   +-- SameCurrencyError
    |   +-- InvalidCurrencyDataError
    |   +-- RegistryAlreadyInitializedError
    |
    +-- MoneyArithmeticError
    |   +-- ArithmeticOverflowError
    |   +-- RoundingNecessaryError
    |   +-- DivisionByZeroError
    |   +-- InvalidScaleError
    |   +-- NegativeMultiplierError
    |
    +-- ExchangeRateError
    |   +-- InvalidRateError
    |   +-- NoCommonCurrencyError
    |   +-- NotExchangeableError
    |
    +-- SerializationError
        +-- CorruptedDataError
        +-- InvalidPersistedStateError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                          | When Raised
----------------|-------------------------------|-------------------------------------
Argument        | NULL_ARGUMENT                 | Required argument is None
                | INVALID_FORMAT                | Money / rate / decimal text unparseable
----------------|-------------------------------|-------------------------------------
Currency        | UNKNOWN_CURRENCY              | Code not in the registry
                | UNKNOWN_COUNTRY               | No currency mapped to the country
                | CURRENCY_MISMATCH             | Arithmetic/compare across currencies
                | SAME_CURRENCY                 | Conversion into the source currency
                | INVALID_CURRENCY_DATA         | Malformed registry record
                | REGISTRY_ALREADY_INITIALIZED  | Second explicit registry load
----------------|-------------------------------|-------------------------------------
Arithmetic      | ARITHMETIC_OVERFLOW           | Fixed-point 64-bit range exceeded
                | ROUNDING_NECESSARY            | UNNECESSARY rule would drop digits
                | DIVISION_BY_ZERO              | Divisor is zero
                | INVALID_SCALE                 | Scale cannot be honoured
                | NEGATIVE_MULTIPLIER           | Conversion multiplier <= 0
----------------|-------------------------------|-------------------------------------
Exchange Rate   | INVALID_RATE                  | Rate <= 0, or same-currency rate != 1
                | NO_COMMON_CURRENCY            | Combining rates with no shared currency
                | NOT_EXCHANGEABLE              | Value currency is neither base nor counter
----------------|-------------------------------|-------------------------------------
Serialization   | CORRUPTED_DATA                | Raw bytes cannot be decoded
                | INVALID_PERSISTED_STATE       | Decoded fields violate an invariant

===============================================================================
DESIGN DECISIONS
===============================================================================

1. Inherit from Exception, not ValueError/ArithmeticError. Domain errors are
   catchable as a group and never confused with programming errors.

2. ``code`` is a class attribute. Codes are static per type, so
   ``ArithmeticOverflowError.code`` works without an instance.

3. No error is recovered internally. Every failure is surfaced to the
   immediate caller, who must fix the input.
"""

from typing import Any


class MoneyKernelError(Exception):
    """
    Base exception for all money kernel errors.

    All subclasses must have a ``code`` class attribute for machine-readable
    error identification.
    """

    code: str = "MONEY_KERNEL_ERROR"


# Argument exceptions


class NullArgumentError(MoneyKernelError):
    """A required argument was None."""

    code: str = "NULL_ARGUMENT"

    def __init__(self, argument: str):
        self.argument = argument
        super().__init__(f"{argument} must not be None")


class InvalidFormatError(MoneyKernelError):
    """Text did not match the expected grammar."""

    code: str = "INVALID_FORMAT"

    def __init__(self, text: str, expected: str):
        self.text = text
        self.expected = expected
        super().__init__(f"Cannot parse {text!r}: expected {expected}")


# Currency exceptions


class CurrencyError(MoneyKernelError):
    """Base exception for currency errors."""

    code: str = "CURRENCY_ERROR"


class UnknownCurrencyError(CurrencyError):
    """Currency code is not present in the registry."""

    code: str = "UNKNOWN_CURRENCY"

    def __init__(self, currency: str):
        self.currency = currency
        super().__init__(f"Unknown currency: {currency!r}")


class UnknownCountryError(CurrencyError):
    """No currency is mapped to the country code."""

    code: str = "UNKNOWN_COUNTRY"

    def __init__(self, country_code: str):
        self.country_code = country_code
        super().__init__(f"No currency registered for country: {country_code!r}")


class CurrencyMismatchError(CurrencyError):
    """Two monetary values with different currencies were combined."""

    code: str = "CURRENCY_MISMATCH"

    def __init__(self, currency1: str, currency2: str):
        self.currency1 = currency1
        self.currency2 = currency2
        super().__init__(f"Currencies differ: {currency1} and {currency2}")


class SameCurrencyError(CurrencyError):
    """A conversion targeted the value's own currency."""

    code: str = "SAME_CURRENCY"

    def __init__(self, currency: str):
        self.currency = currency
        super().__init__(f"Cannot convert to the same currency: {currency}")


class InvalidCurrencyDataError(CurrencyError):
    """A currency data record is malformed."""

    code: str = "INVALID_CURRENCY_DATA"

    def __init__(self, record: Any, reason: str):
        self.record = str(record)
        self.reason = reason
        super().__init__(f"Invalid currency data {record!r}: {reason}")


class RegistryAlreadyInitializedError(CurrencyError):
    """The currency registry was initialized explicitly after it was built."""

    code: str = "REGISTRY_ALREADY_INITIALIZED"

    def __init__(self, currency_count: int):
        self.currency_count = currency_count
        super().__init__(
            f"Currency registry already initialized with {currency_count} currencies"
        )


# Arithmetic exceptions


class MoneyArithmeticError(MoneyKernelError):
    """Base exception for arithmetic failures."""

    code: str = "MONEY_ARITHMETIC_ERROR"


class ArithmeticOverflowError(MoneyArithmeticError):
    """
    A fixed-point result does not fit in a signed 64-bit minor-unit count.

    The result is never wrapped or truncated.
    """

    code: str = "ARITHMETIC_OVERFLOW"

    def __init__(self, operation: str, currency: str, value: int):
        self.operation = operation
        self.currency = currency
        self.value = str(value)
        super().__init__(
            f"{operation} overflows 64-bit minor units for {currency}: {value}"
        )


class RoundingNecessaryError(MoneyArithmeticError):
    """Rounding rule UNNECESSARY was given but digits would be discarded."""

    code: str = "ROUNDING_NECESSARY"

    def __init__(self, value: str, scale: int):
        self.value = value
        self.scale = scale
        super().__init__(f"Rounding necessary to bring {value} to scale {scale}")


class DivisionByZeroError(MoneyArithmeticError):
    """Division by zero."""

    code: str = "DIVISION_BY_ZERO"

    def __init__(self, dividend: str):
        self.dividend = dividend
        super().__init__(f"Cannot divide {dividend} by zero")


class InvalidScaleError(MoneyArithmeticError):
    """Requested scale cannot be honoured."""

    code: str = "INVALID_SCALE"

    def __init__(self, scale: int, reason: str):
        self.scale = scale
        self.reason = reason
        super().__init__(f"Invalid scale {scale}: {reason}")


class NegativeMultiplierError(MoneyArithmeticError):
    """Currency conversion multiplier is zero or negative."""

    code: str = "NEGATIVE_MULTIPLIER"

    def __init__(self, multiplier: str):
        self.multiplier = multiplier
        super().__init__(
            f"Conversion multiplier must be greater than zero: {multiplier}"
        )


# Exchange rate exceptions


class ExchangeRateError(MoneyKernelError):
    """Base exception for exchange rate errors."""

    code: str = "EXCHANGE_RATE_ERROR"


class InvalidRateError(ExchangeRateError):
    """
    Exchange rate violates its invariant.

    Rates must be positive; a rate between a currency and itself must be 1.
    """

    code: str = "INVALID_RATE"

    def __init__(self, rate_value: str, reason: str):
        self.rate_value = rate_value
        self.reason = reason
        super().__init__(f"Invalid exchange rate {rate_value}: {reason}")


class NoCommonCurrencyError(ExchangeRateError):
    """Two rates were combined but share no currency."""

    code: str = "NO_COMMON_CURRENCY"

    def __init__(self, rate1: str, rate2: str):
        self.rate1 = rate1
        self.rate2 = rate2
        super().__init__(f"Rates {rate1} and {rate2} have no currency in common")


class NotExchangeableError(ExchangeRateError):
    """A rate was applied to a value in a currency it does not quote."""

    code: str = "NOT_EXCHANGEABLE"

    def __init__(self, money: str, rate: str):
        self.money = money
        self.rate = rate
        super().__init__(f"{money} cannot be exchanged using {rate}")


# Serialization exceptions


class SerializationError(MoneyKernelError):
    """Base exception for binary serialization errors."""

    code: str = "SERIALIZATION_ERROR"


class CorruptedDataError(SerializationError):
    """Serialized bytes could not be decoded into raw fields."""

    code: str = "CORRUPTED_DATA"

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Serialized data is corrupted: {reason}")


class InvalidPersistedStateError(SerializationError):
    """
    Decoded fields violate the type's invariants.

    Raised after raw decoding succeeded, during the validation pass. No
    instance is ever returned for such data.
    """

    code: str = "INVALID_PERSISTED_STATE"

    def __init__(self, type_name: str, reason: str, violation_code: str | None = None):
        self.type_name = type_name
        self.reason = reason
        self.violation_code = violation_code
        super().__init__(f"Persisted {type_name} is invalid: {reason}")
