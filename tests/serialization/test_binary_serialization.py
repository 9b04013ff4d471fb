"""
Binary serialization tests.

Validates that persisted value objects decode back to equal objects and
that corrupted or crafted bytes never produce an instance violating an
invariant.
"""

from __future__ import annotations

import pickle
import struct

import pytest

from money_kernel import serialization
from money_kernel.domain.big_money import BigMoney
from money_kernel.domain.currency import Currency, CurrencyRecord, CurrencyRegistry
from money_kernel.domain.decimal_amount import DecimalAmount
from money_kernel.domain.exchange_rate import ExchangeRate
from money_kernel.domain.money import INT64_MAX, INT64_MIN, Money
from money_kernel.exceptions import (
    CorruptedDataError,
    InvalidPersistedStateError,
    SerializationError,
)


def _code(text: str) -> bytes:
    raw = text.encode("utf-8")
    return struct.pack(">H", len(raw)) + raw


def _bigint(value: int) -> bytes:
    raw = value.to_bytes((value.bit_length() + 8) // 8, "big", signed=True)
    return struct.pack(">I", len(raw)) + raw


def _rate_bytes(base: str, counter: str, unscaled: int, scale: int) -> bytes:
    return b"E" + _code(base) + _code(counter) + _bigint(unscaled) + struct.pack(">i", scale)


class TestRoundTrip:
    """dumps then loads yields an equal value."""

    @pytest.mark.parametrize(
        "value",
        [
            lambda: Currency.of("GBP"),
            lambda: Currency.of("XAU"),
            lambda: DecimalAmount.parse("-123.4500"),
            lambda: DecimalAmount(5, -3),
            lambda: BigMoney.of("GBP", "2.345"),
            lambda: BigMoney.of("JPY", "-1000000000000000000000000"),
            lambda: Money.of("KWD", "-1.234"),
            lambda: Money.of_minor("GBP", INT64_MAX),
            lambda: Money.of_minor("GBP", INT64_MIN),
            lambda: ExchangeRate.parse("EUR/USD 1.0836"),
            lambda: ExchangeRate.identity("CHF"),
        ],
    )
    def test_round_trip(self, value):
        original = value()
        assert serialization.loads(serialization.dumps(original)) == original

    def test_scale_preserved(self):
        restored = serialization.loads(serialization.dumps(BigMoney.of("GBP", "1.230")))
        assert restored.scale == 3

    def test_currency_restores_registered_instance(self):
        gbp = Currency.of("GBP")
        assert serialization.loads(serialization.dumps(gbp)) is gbp

    def test_extension_currency(self):
        CurrencyRegistry.initialize(extension=[CurrencyRecord("BTC", -1, 8)])
        btc = Money.of("BTC", "0.00000001")
        assert serialization.loads(serialization.dumps(btc)) == btc

    def test_unsupported_type(self):
        with pytest.raises(TypeError):
            serialization.dumps("GBP 1.00")

    def test_non_bytes_input(self):
        with pytest.raises(TypeError):
            serialization.loads("GBP 1.00")

    def test_bytearray_accepted(self):
        data = bytearray(serialization.dumps(Money.of("GBP", 1)))
        assert serialization.loads(data) == Money.of("GBP", 1)


class TestPickle:
    """Pickling routes through the same validated codec."""

    @pytest.mark.parametrize(
        "value",
        [
            lambda: Currency.of("EUR"),
            lambda: DecimalAmount.parse("0.001"),
            lambda: BigMoney.of("EUR", "9.999"),
            lambda: Money.of("EUR", "9.99"),
            lambda: ExchangeRate.parse("EUR/PLN 4.31"),
        ],
    )
    def test_pickle_round_trip(self, value):
        original = value()
        assert pickle.loads(pickle.dumps(original)) == original

    def test_pickle_currency_is_registry_instance(self):
        assert pickle.loads(pickle.dumps(Currency.of("USD"))) is Currency.of("USD")


class TestCorruptedData:
    """Undecodable bytes raise CorruptedDataError."""

    def test_empty(self):
        with pytest.raises(CorruptedDataError):
            serialization.loads(b"")

    def test_truncated(self):
        data = serialization.dumps(ExchangeRate.parse("EUR/USD 1.0836"))
        for end in range(1, len(data)):
            with pytest.raises(CorruptedDataError):
                serialization.loads(data[:end])

    def test_trailing_bytes(self):
        data = serialization.dumps(Money.of("GBP", 1))
        with pytest.raises(CorruptedDataError):
            serialization.loads(data + b"\x00")

    def test_unknown_tag(self):
        with pytest.raises(CorruptedDataError) as exc_info:
            serialization.loads(b"Z" + _code("GBP"))
        assert exc_info.value.code == "CORRUPTED_DATA"

    def test_invalid_utf8_code(self):
        data = b"M" + struct.pack(">H", 2) + b"\xff\xfe" + _bigint(100)
        with pytest.raises(CorruptedDataError):
            serialization.loads(data)

    def test_empty_integer_field(self):
        data = b"D" + struct.pack(">I", 0) + struct.pack(">i", 0)
        with pytest.raises(CorruptedDataError):
            serialization.loads(data)

    def test_is_serialization_error(self):
        with pytest.raises(SerializationError):
            serialization.loads(b"Q")


class TestInvalidPersistedState:
    """Decodable bytes that violate an invariant are rejected."""

    @pytest.mark.parametrize("unscaled", [0, -5])
    def test_non_positive_rate(self, unscaled):
        with pytest.raises(InvalidPersistedStateError) as exc_info:
            serialization.loads(_rate_bytes("EUR", "USD", unscaled, 2))
        assert exc_info.value.type_name == "ExchangeRate"
        assert exc_info.value.violation_code == "INVALID_RATE"

    def test_same_currency_rate_not_one(self):
        with pytest.raises(InvalidPersistedStateError) as exc_info:
            serialization.loads(_rate_bytes("EUR", "EUR", 2, 0))
        assert exc_info.value.violation_code == "INVALID_RATE"

    def test_money_out_of_range(self):
        data = b"M" + _code("GBP") + _bigint(INT64_MAX + 1)
        with pytest.raises(InvalidPersistedStateError) as exc_info:
            serialization.loads(data)
        assert exc_info.value.violation_code == "ARITHMETIC_OVERFLOW"

    def test_unknown_currency(self):
        data = b"B" + _code("ZZZ") + _bigint(100) + struct.pack(">i", 2)
        with pytest.raises(InvalidPersistedStateError) as exc_info:
            serialization.loads(data)
        assert exc_info.value.violation_code == "UNKNOWN_CURRENCY"

    def test_malformed_currency_code(self):
        data = b"C" + _code("gb") + struct.pack(">h", 826) + struct.pack(">b", 2)
        with pytest.raises(InvalidPersistedStateError) as exc_info:
            serialization.loads(data)
        assert exc_info.value.violation_code == "INVALID_CURRENCY_DATA"

    def test_currency_disagrees_with_registry(self):
        data = b"C" + _code("GBP") + struct.pack(">h", 826) + struct.pack(">b", 3)
        with pytest.raises(InvalidPersistedStateError) as exc_info:
            serialization.loads(data)
        assert exc_info.value.type_name == "Currency"
        assert exc_info.value.violation_code is None

    @pytest.mark.parametrize(
        "data",
        [
            b"B" + _code("GBP") + _bigint(1) + struct.pack(">i", -2**31),
            b"B" + _code("GBP") + _bigint(1) + struct.pack(">i", 2**31 - 1),
            _rate_bytes("XXX", "XXX", 1, -2**31),
            _rate_bytes("EUR", "USD", 1, 2**31 - 1),
            b"D" + _bigint(7) + struct.pack(">i", serialization.MAX_PERSISTED_SCALE + 1),
            b"D" + _bigint(7) + struct.pack(">i", -serialization.MAX_PERSISTED_SCALE - 1),
        ],
    )
    def test_extreme_scale_rejected(self, data):
        with pytest.raises(InvalidPersistedStateError) as exc_info:
            serialization.loads(data)
        assert exc_info.value.violation_code == "INVALID_SCALE"

    def test_scale_at_limit_accepted(self):
        limit = serialization.MAX_PERSISTED_SCALE
        data = b"D" + _bigint(7) + struct.pack(">i", limit)
        assert serialization.loads(data) == DecimalAmount(7, limit)
        data = b"B" + _code("GBP") + _bigint(7) + struct.pack(">i", -limit)
        assert serialization.loads(data) == BigMoney.of_scale("GBP", 7 * 10**limit, 0)

    def test_rejection_logged(self, captured_logs):
        with pytest.raises(InvalidPersistedStateError):
            serialization.loads(_rate_bytes("EUR", "USD", 0, 0))
        rejected = [r for r in captured_logs() if r["message"] == "persisted_state_rejected"]
        assert len(rejected) == 1
        assert rejected[0]["level"] == "WARNING"
        assert rejected[0]["type_name"] == "ExchangeRate"
        assert rejected[0]["error_code"] == "INVALID_RATE"

    def test_corruption_logged(self, captured_logs):
        with pytest.raises(CorruptedDataError):
            serialization.loads(b"Z")
        rejected = [r for r in captured_logs() if r["message"] == "persisted_state_rejected"]
        assert rejected[0]["error_code"] == "CORRUPTED_DATA"

    def test_pickle_of_crafted_state_rejected(self):
        crafted = pickle.dumps(ExchangeRate.parse("EUR/USD 1.5"))
        good = serialization.dumps(ExchangeRate.parse("EUR/USD 1.5"))
        bad = _rate_bytes("EUR", "USD", -15, 1)
        assert len(good) == len(bad)
        with pytest.raises(InvalidPersistedStateError):
            pickle.loads(crafted.replace(good, bad))
