"""
Serialization -- Tagged binary codec for money kernel value objects.

Responsibility:
    Encodes Currency, DecimalAmount, BigMoney, Money and ExchangeRate into
    compact bytes and decodes them back. Pickling of these types routes
    through the same codec (each type's ``__reduce__``), so there is exactly
    one way back from bytes to objects.

Architecture position:
    Kernel -- pure, no I/O. Callers decide where the bytes are stored.

Wire format (all integers big-endian):
    tag      1 byte   b"C" currency, b"D" decimal, b"B" big money,
                      b"M" money, b"E" exchange rate
    code     u16 length + UTF-8 bytes
    bigint   u32 length + two's-complement bytes
    scale    i32

    C: code, i16 numeric code (-1 if none), i8 declared decimal places
    D: bigint unscaled, scale
    B: code, bigint unscaled, scale
    M: code, bigint minor units
    E: base code, counter code, bigint unscaled rate, scale

Invariants enforced:
    - Decoding is two-step: raw field decoding, then a validation pass that
      runs the constructors' own checks. No instance is returned for bytes
      violating an invariant.

Failure modes:
    - CorruptedDataError: truncated input, trailing bytes, unknown tag,
      undecodable text
    - InvalidPersistedStateError: fields decode but violate an invariant
      (non-positive rate, out-of-range minor units, unknown currency,
      currency data disagreeing with the registry, a scale outside
      +/-MAX_PERSISTED_SCALE)
"""

from __future__ import annotations

import struct
from collections.abc import Callable
from typing import Any

from money_kernel.domain.big_money import BigMoney
from money_kernel.domain.currency import NO_NUMERIC_CODE, Currency, CurrencyRegistry
from money_kernel.domain.decimal_amount import DecimalAmount
from money_kernel.domain.exchange_rate import ExchangeRate
from money_kernel.domain.money import Money
from money_kernel.exceptions import (
    CorruptedDataError,
    InvalidPersistedStateError,
    InvalidScaleError,
    MoneyKernelError,
)
from money_kernel.logging_config import get_logger

logger = get_logger("serialization")

TAG_CURRENCY = b"C"
TAG_DECIMAL = b"D"
TAG_BIG_MONEY = b"B"
TAG_MONEY = b"M"
TAG_EXCHANGE_RATE = b"E"

# Scales beyond this are rejected before any value is built; expanding
# them would need a power of ten with billions of digits.
MAX_PERSISTED_SCALE = 1000

_U16 = struct.Struct(">H")
_U32 = struct.Struct(">I")
_I32 = struct.Struct(">i")
_I16 = struct.Struct(">h")
_I8 = struct.Struct(">b")


# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------


def _code(text: str) -> bytes:
    raw = text.encode("utf-8")
    return _U16.pack(len(raw)) + raw


def _bigint(value: int) -> bytes:
    raw = value.to_bytes((value.bit_length() + 8) // 8, "big", signed=True)
    return _U32.pack(len(raw)) + raw


def _decimal(value: DecimalAmount) -> bytes:
    return _bigint(value.unscaled) + _I32.pack(value.scale)


def dumps(obj: Any) -> bytes:
    """
    Encode a money kernel value object.

    Raises:
        TypeError: If obj is not a supported type.
    """
    if isinstance(obj, Currency):
        numeric = NO_NUMERIC_CODE if obj.numeric_code is None else obj.numeric_code
        return (
            TAG_CURRENCY
            + _code(obj.code)
            + _I16.pack(numeric)
            + _I8.pack(obj.declared_decimal_places)
        )
    if isinstance(obj, DecimalAmount):
        return TAG_DECIMAL + _decimal(obj)
    if isinstance(obj, BigMoney):
        return TAG_BIG_MONEY + _code(obj.currency.code) + _decimal(obj.amount)
    if isinstance(obj, Money):
        return TAG_MONEY + _code(obj.currency.code) + _bigint(obj.minor_units)
    if isinstance(obj, ExchangeRate):
        return (
            TAG_EXCHANGE_RATE
            + _code(obj.base.code)
            + _code(obj.counter.code)
            + _decimal(obj.rate)
        )
    raise TypeError(f"Cannot serialize {type(obj).__name__}")


# ---------------------------------------------------------------------------
# Raw decoding
# ---------------------------------------------------------------------------


class _Reader:
    """Cursor over serialized bytes; every short read is corruption."""

    def __init__(self, data: bytes):
        self._data = data
        self._pos = 0

    def take(self, size: int) -> bytes:
        end = self._pos + size
        if end > len(self._data):
            raise CorruptedDataError(
                f"truncated input: needed {size} bytes at offset {self._pos}"
            )
        chunk = self._data[self._pos:end]
        self._pos = end
        return chunk

    def unpack(self, fmt: struct.Struct) -> int:
        return fmt.unpack(self.take(fmt.size))[0]

    def code(self) -> str:
        raw = self.take(self.unpack(_U16))
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise CorruptedDataError(f"invalid UTF-8 in currency code: {raw!r}") from e

    def bigint(self) -> int:
        size = self.unpack(_U32)
        if size == 0:
            raise CorruptedDataError("empty integer field")
        return int.from_bytes(self.take(size), "big", signed=True)

    def decimal(self) -> tuple[int, int]:
        unscaled = self.bigint()
        return unscaled, self.unpack(_I32)

    def finish(self) -> None:
        if self._pos != len(self._data):
            raise CorruptedDataError(
                f"{len(self._data) - self._pos} trailing bytes after value"
            )


def _decode_fields(data: bytes) -> tuple[bytes, tuple[Any, ...]]:
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise TypeError(f"data must be bytes, got {type(data)}")
    reader = _Reader(bytes(data))
    tag = reader.take(1)
    if tag == TAG_CURRENCY:
        fields: tuple[Any, ...] = (reader.code(), reader.unpack(_I16), reader.unpack(_I8))
    elif tag == TAG_DECIMAL:
        fields = reader.decimal()
    elif tag == TAG_BIG_MONEY:
        fields = (reader.code(), *reader.decimal())
    elif tag == TAG_MONEY:
        fields = (reader.code(), reader.bigint())
    elif tag == TAG_EXCHANGE_RATE:
        fields = (reader.code(), reader.code(), *reader.decimal())
    else:
        raise CorruptedDataError(f"unknown type tag {tag!r}")
    reader.finish()
    return tag, fields


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


def _restore_currency(code: str, numeric_code: int, decimal_places: int) -> Currency:
    persisted = Currency(code, numeric_code, decimal_places)
    registered = CurrencyRegistry.lookup(persisted.code)
    if (
        registered.numeric_code != persisted.numeric_code
        or registered.declared_decimal_places != persisted.declared_decimal_places
    ):
        raise InvalidPersistedStateError(
            "Currency",
            f"persisted data for {code} disagrees with the currency registry",
        )
    return registered


def _checked_scale(scale: int) -> int:
    if not -MAX_PERSISTED_SCALE <= scale <= MAX_PERSISTED_SCALE:
        raise InvalidScaleError(
            scale, f"persisted scale must lie within +/-{MAX_PERSISTED_SCALE}"
        )
    return scale


def _restore_decimal(unscaled: int, scale: int) -> DecimalAmount:
    return DecimalAmount(unscaled, _checked_scale(scale))


def _restore_big_money(code: str, unscaled: int, scale: int) -> BigMoney:
    amount = DecimalAmount(unscaled, _checked_scale(scale))
    return BigMoney.of(CurrencyRegistry.lookup(code), amount)


def _restore_money(code: str, minor_units: int) -> Money:
    return Money.of_minor(CurrencyRegistry.lookup(code), minor_units)


def _restore_exchange_rate(base: str, counter: str, unscaled: int, scale: int) -> ExchangeRate:
    return ExchangeRate.of(
        CurrencyRegistry.lookup(base),
        CurrencyRegistry.lookup(counter),
        DecimalAmount(unscaled, _checked_scale(scale)),
    )


_RESTORERS: dict[bytes, tuple[str, Callable[..., Any]]] = {
    TAG_CURRENCY: ("Currency", _restore_currency),
    TAG_DECIMAL: ("DecimalAmount", _restore_decimal),
    TAG_BIG_MONEY: ("BigMoney", _restore_big_money),
    TAG_MONEY: ("Money", _restore_money),
    TAG_EXCHANGE_RATE: ("ExchangeRate", _restore_exchange_rate),
}


def loads(data: bytes) -> Any:
    """
    Decode bytes produced by ``dumps``.

    Preconditions:
        - data was produced by ``dumps`` (possibly by another process)

    Postconditions:
        - The returned object satisfies every invariant its constructor
          enforces; otherwise nothing is returned.

    Raises:
        CorruptedDataError: If the bytes cannot be decoded into fields.
        InvalidPersistedStateError: If the decoded fields are invalid.
    """
    try:
        tag, fields = _decode_fields(data)
    except CorruptedDataError as e:
        logger.warning(
            "persisted_state_rejected",
            extra={"error_code": e.code, "reason": e.reason},
        )
        raise

    type_name, restore = _RESTORERS[tag]
    try:
        return restore(*fields)
    except InvalidPersistedStateError as e:
        logger.warning(
            "persisted_state_rejected",
            extra={"type_name": type_name, "error_code": e.code, "reason": e.reason},
        )
        raise
    except MoneyKernelError as e:
        logger.warning(
            "persisted_state_rejected",
            extra={"type_name": type_name, "error_code": e.code, "reason": str(e)},
        )
        raise InvalidPersistedStateError(type_name, str(e), e.code) from e
