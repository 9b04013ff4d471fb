"""
Currency -- ISO 4217 currency units and the process-wide registry.

Responsibility:
    Defines the Currency value object and CurrencyRegistry, the single table
    mapping currency codes and country codes to Currency instances. Every
    monetary value derives its canonical scale from the registry.

Architecture position:
    Kernel > Domain -- pure functional core. The registry is fed records
    (CurrencyRecord); reading them from files is money_config's job.

Invariants enforced:
    - Codes are exactly three uppercase ASCII letters
    - Numeric codes lie in 0..999 (or are absent)
    - Decimal places lie in -1..30; -1 marks a pseudo-currency
    - The table is built once and never mutated afterwards

Failure modes:
    - UnknownCurrencyError / UnknownCountryError on failed lookups
    - InvalidCurrencyDataError on malformed records
    - RegistryAlreadyInitializedError on a second explicit initialize()

Audit relevance:
    Initialization logs the currency and override counts so the active
    currency table can be reconstructed from the log stream.
"""

from __future__ import annotations

import re
import threading
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any, ClassVar

from money_kernel.exceptions import (
    InvalidCurrencyDataError,
    NullArgumentError,
    RegistryAlreadyInitializedError,
    UnknownCountryError,
    UnknownCurrencyError,
)
from money_kernel.logging_config import get_logger

logger = get_logger("domain.currency")

PSEUDO_DECIMAL_PLACES = -1
MAX_DECIMAL_PLACES = 30
NO_NUMERIC_CODE = -1

_CODE_PATTERN = re.compile(r"[A-Z]{3}")
_COUNTRY_PATTERN = re.compile(r"[A-Z]{2}")


def _validate_fields(
    record: Any,
    code: Any,
    numeric_code: Any,
    decimal_places: Any,
    country_codes: Iterable[Any],
) -> None:
    if not isinstance(code, str) or not _CODE_PATTERN.fullmatch(code):
        raise InvalidCurrencyDataError(record, "code must be three uppercase letters")
    if isinstance(numeric_code, bool) or not isinstance(numeric_code, int):
        raise InvalidCurrencyDataError(record, "numeric code must be an integer")
    if not NO_NUMERIC_CODE <= numeric_code <= 999:
        raise InvalidCurrencyDataError(record, "numeric code must be between -1 and 999")
    if isinstance(decimal_places, bool) or not isinstance(decimal_places, int):
        raise InvalidCurrencyDataError(record, "decimal places must be an integer")
    if not PSEUDO_DECIMAL_PLACES <= decimal_places <= MAX_DECIMAL_PLACES:
        raise InvalidCurrencyDataError(
            record, f"decimal places must be between -1 and {MAX_DECIMAL_PLACES}"
        )
    for country in country_codes:
        if not isinstance(country, str) or not _COUNTRY_PATTERN.fullmatch(country):
            raise InvalidCurrencyDataError(
                record, f"country code must be two uppercase letters: {country!r}"
            )


@dataclass(frozen=True, slots=True, eq=False)
class Currency:
    """
    A currency unit: ISO code, numeric code and canonical decimal places.

    Contract:
        Obtained from CurrencyRegistry (or ``Currency.of``). Two Currency
        instances are equal when their codes are equal.

    Guarantees:
        - Immutable and hashable (frozen dataclass with slots)
        - ``decimal_places`` is never negative; pseudo-currencies report 0
          and ``is_pseudo_currency`` is True

    Non-goals:
        - Does NOT carry display names or symbols (no locale data)
    """

    code: str
    numeric_code: int | None
    declared_decimal_places: int
    country_codes: frozenset[str] = frozenset()

    def __post_init__(self) -> None:
        if not isinstance(self.country_codes, frozenset):
            object.__setattr__(self, "country_codes", frozenset(self.country_codes))
        numeric = NO_NUMERIC_CODE if self.numeric_code is None else self.numeric_code
        _validate_fields(
            self.code, self.code, numeric, self.declared_decimal_places, self.country_codes
        )
        if numeric == NO_NUMERIC_CODE:
            object.__setattr__(self, "numeric_code", None)

    @classmethod
    def of(cls, code: str) -> Currency:
        """Look up a registered currency by code."""
        return CurrencyRegistry.lookup(code)

    @classmethod
    def of_country(cls, country_code: str) -> Currency:
        """Look up the currency registered for an ISO 3166 country code."""
        return CurrencyRegistry.country_to_currency(country_code)

    @property
    def decimal_places(self) -> int:
        """Canonical scale of amounts in this currency (0 for pseudo-currencies)."""
        return max(self.declared_decimal_places, 0)

    @property
    def is_pseudo_currency(self) -> bool:
        return self.declared_decimal_places == PSEUDO_DECIMAL_PLACES

    @property
    def numeric_3_code(self) -> str:
        """Numeric code zero-padded to three digits, or '' if there is none."""
        if self.numeric_code is None:
            return ""
        return f"{self.numeric_code:03d}"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Currency):
            return NotImplemented
        return self.code == other.code

    def __hash__(self) -> int:
        return hash(self.code)

    def __lt__(self, other: Currency) -> bool:
        if not isinstance(other, Currency):
            return NotImplemented
        return self.code < other.code

    def __le__(self, other: Currency) -> bool:
        if not isinstance(other, Currency):
            return NotImplemented
        return self.code <= other.code

    def __gt__(self, other: Currency) -> bool:
        if not isinstance(other, Currency):
            return NotImplemented
        return self.code > other.code

    def __ge__(self, other: Currency) -> bool:
        if not isinstance(other, Currency):
            return NotImplemented
        return self.code >= other.code

    def __reduce__(self):
        from money_kernel import serialization

        return (serialization.loads, (serialization.dumps(self),))

    def __str__(self) -> str:
        return self.code

    def __repr__(self) -> str:
        return f"Currency({self.code!r})"


@dataclass(frozen=True, slots=True)
class CurrencyRecord:
    """One row of currency data as supplied to the registry."""

    code: str
    numeric_code: int
    decimal_places: int
    country_codes: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if isinstance(self.country_codes, str):
            raise InvalidCurrencyDataError(self, "country codes must be a sequence")
        if not isinstance(self.country_codes, tuple):
            try:
                object.__setattr__(self, "country_codes", tuple(self.country_codes))
            except TypeError as e:
                raise InvalidCurrencyDataError(self, "country codes must be a sequence") from e
        _validate_fields(
            self, self.code, self.numeric_code, self.decimal_places, self.country_codes
        )

    def to_currency(self) -> Currency:
        return Currency(
            code=self.code,
            numeric_code=self.numeric_code,
            declared_decimal_places=self.decimal_places,
            country_codes=frozenset(self.country_codes),
        )


# ISO 4217 baseline.
# Source: https://www.iso.org/iso-4217-currency-codes.html
BASELINE_CURRENCIES: tuple[CurrencyRecord, ...] = (
    CurrencyRecord("AED", 784, 2, ("AE",)),
    CurrencyRecord("AFN", 971, 2, ("AF",)),
    CurrencyRecord("ALL", 8, 2, ("AL",)),
    CurrencyRecord("AMD", 51, 2, ("AM",)),
    CurrencyRecord("ANG", 532, 2, ("CW", "SX")),
    CurrencyRecord("AOA", 973, 2, ("AO",)),
    CurrencyRecord("ARS", 32, 2, ("AR",)),
    CurrencyRecord("AUD", 36, 2, ("AU", "CC", "CX", "HM", "KI", "NF", "NR", "TV")),
    CurrencyRecord("AWG", 533, 2, ("AW",)),
    CurrencyRecord("AZN", 944, 2, ("AZ",)),
    CurrencyRecord("BAM", 977, 2, ("BA",)),
    CurrencyRecord("BBD", 52, 2, ("BB",)),
    CurrencyRecord("BDT", 50, 2, ("BD",)),
    CurrencyRecord("BGN", 975, 2, ("BG",)),
    CurrencyRecord("BHD", 48, 3, ("BH",)),
    CurrencyRecord("BIF", 108, 0, ("BI",)),
    CurrencyRecord("BMD", 60, 2, ("BM",)),
    CurrencyRecord("BND", 96, 2, ("BN",)),
    CurrencyRecord("BOB", 68, 2, ("BO",)),
    CurrencyRecord("BRL", 986, 2, ("BR",)),
    CurrencyRecord("BSD", 44, 2, ("BS",)),
    CurrencyRecord("BTN", 64, 2, ("BT",)),
    CurrencyRecord("BWP", 72, 2, ("BW",)),
    CurrencyRecord("BYN", 933, 2, ("BY",)),
    CurrencyRecord("BZD", 84, 2, ("BZ",)),
    CurrencyRecord("CAD", 124, 2, ("CA",)),
    CurrencyRecord("CDF", 976, 2, ("CD",)),
    CurrencyRecord("CHF", 756, 2, ("CH", "LI")),
    CurrencyRecord("CLF", 990, 4, ()),
    CurrencyRecord("CLP", 152, 0, ("CL",)),
    CurrencyRecord("CNY", 156, 2, ("CN",)),
    CurrencyRecord("COP", 170, 2, ("CO",)),
    CurrencyRecord("CRC", 188, 2, ("CR",)),
    CurrencyRecord("CUP", 192, 2, ("CU",)),
    CurrencyRecord("CVE", 132, 2, ("CV",)),
    CurrencyRecord("CZK", 203, 2, ("CZ",)),
    CurrencyRecord("DJF", 262, 0, ("DJ",)),
    CurrencyRecord("DKK", 208, 2, ("DK", "FO", "GL")),
    CurrencyRecord("DOP", 214, 2, ("DO",)),
    CurrencyRecord("DZD", 12, 2, ("DZ",)),
    CurrencyRecord("EGP", 818, 2, ("EG",)),
    CurrencyRecord("ETB", 230, 2, ("ET",)),
    CurrencyRecord(
        "EUR",
        978,
        2,
        (
            "AD", "AT", "BE", "CY", "DE", "EE", "ES", "FI", "FR", "GR", "HR", "IE",
            "IT", "LT", "LU", "LV", "MC", "ME", "MT", "NL", "PT", "SI", "SK", "SM",
            "VA",
        ),
    ),
    CurrencyRecord("FJD", 242, 2, ("FJ",)),
    CurrencyRecord("GBP", 826, 2, ("GB", "GG", "IM", "JE")),
    CurrencyRecord("GEL", 981, 2, ("GE",)),
    CurrencyRecord("GHS", 936, 2, ("GH",)),
    CurrencyRecord("GNF", 324, 0, ("GN",)),
    CurrencyRecord("HKD", 344, 2, ("HK",)),
    CurrencyRecord("HUF", 348, 2, ("HU",)),
    CurrencyRecord("IDR", 360, 2, ("ID",)),
    CurrencyRecord("ILS", 376, 2, ("IL", "PS")),
    CurrencyRecord("INR", 356, 2, ("IN",)),
    CurrencyRecord("IQD", 368, 3, ("IQ",)),
    CurrencyRecord("ISK", 352, 0, ("IS",)),
    CurrencyRecord("JMD", 388, 2, ("JM",)),
    CurrencyRecord("JOD", 400, 3, ("JO",)),
    CurrencyRecord("JPY", 392, 0, ("JP",)),
    CurrencyRecord("KES", 404, 2, ("KE",)),
    CurrencyRecord("KMF", 174, 0, ("KM",)),
    CurrencyRecord("KRW", 410, 0, ("KR",)),
    CurrencyRecord("KWD", 414, 3, ("KW",)),
    CurrencyRecord("KZT", 398, 2, ("KZ",)),
    CurrencyRecord("LBP", 422, 2, ("LB",)),
    CurrencyRecord("LKR", 144, 2, ("LK",)),
    CurrencyRecord("LYD", 434, 3, ("LY",)),
    CurrencyRecord("MAD", 504, 2, ("EH", "MA")),
    CurrencyRecord("MXN", 484, 2, ("MX",)),
    CurrencyRecord("MYR", 458, 2, ("MY",)),
    CurrencyRecord("NGN", 566, 2, ("NG",)),
    CurrencyRecord("NOK", 578, 2, ("BV", "NO", "SJ")),
    CurrencyRecord("NPR", 524, 2, ("NP",)),
    CurrencyRecord("NZD", 554, 2, ("CK", "NU", "NZ", "PN", "TK")),
    CurrencyRecord("OMR", 512, 3, ("OM",)),
    CurrencyRecord("PEN", 604, 2, ("PE",)),
    CurrencyRecord("PHP", 608, 2, ("PH",)),
    CurrencyRecord("PKR", 586, 2, ("PK",)),
    CurrencyRecord("PLN", 985, 2, ("PL",)),
    CurrencyRecord("PYG", 600, 0, ("PY",)),
    CurrencyRecord("QAR", 634, 2, ("QA",)),
    CurrencyRecord("RON", 946, 2, ("RO",)),
    CurrencyRecord("RSD", 941, 2, ("RS",)),
    CurrencyRecord("RUB", 643, 2, ("RU",)),
    CurrencyRecord("RWF", 646, 0, ("RW",)),
    CurrencyRecord("SAR", 682, 2, ("SA",)),
    CurrencyRecord("SEK", 752, 2, ("SE",)),
    CurrencyRecord("SGD", 702, 2, ("SG",)),
    CurrencyRecord("THB", 764, 2, ("TH",)),
    CurrencyRecord("TND", 788, 3, ("TN",)),
    CurrencyRecord("TRY", 949, 2, ("TR",)),
    CurrencyRecord("TWD", 901, 2, ("TW",)),
    CurrencyRecord("UAH", 980, 2, ("UA",)),
    CurrencyRecord("UGX", 800, 0, ("UG",)),
    CurrencyRecord(
        "USD",
        840,
        2,
        (
            "AS", "BQ", "EC", "FM", "GU", "IO", "MH", "MP", "PR", "PW", "TC", "TL",
            "UM", "US", "VG", "VI",
        ),
    ),
    CurrencyRecord("UYU", 858, 2, ("UY",)),
    CurrencyRecord("UZS", 860, 2, ("UZ",)),
    CurrencyRecord("VND", 704, 0, ("VN",)),
    CurrencyRecord("VUV", 548, 0, ("VU",)),
    CurrencyRecord("XAF", 950, 0, ("CF", "CG", "CM", "GA", "GQ", "TD")),
    CurrencyRecord("XAG", 961, PSEUDO_DECIMAL_PLACES, ()),
    CurrencyRecord("XAU", 959, PSEUDO_DECIMAL_PLACES, ()),
    CurrencyRecord("XCD", 951, 2, ("AG", "AI", "DM", "GD", "KN", "LC", "MS", "VC")),
    CurrencyRecord("XDR", 960, PSEUDO_DECIMAL_PLACES, ()),
    CurrencyRecord("XOF", 952, 0, ("BF", "BJ", "CI", "GW", "ML", "NE", "SN", "TG")),
    CurrencyRecord("XPD", 964, PSEUDO_DECIMAL_PLACES, ()),
    CurrencyRecord("XPF", 953, 0, ("NC", "PF", "WF")),
    CurrencyRecord("XPT", 962, PSEUDO_DECIMAL_PLACES, ()),
    CurrencyRecord("XXX", 999, PSEUDO_DECIMAL_PLACES, ()),
    CurrencyRecord("ZAR", 710, 2, ("LS", "NA", "ZA")),
    CurrencyRecord("ZMW", 967, 2, ("ZM",)),
)


class CurrencyRegistry:
    """
    Process-wide table of currencies, built once and read lock-free.

    The first lookup builds the table from BASELINE_CURRENCIES. Call
    ``initialize`` before any lookup to supply a different baseline or an
    extension overlay.
    """

    _by_code: ClassVar[dict[str, Currency] | None] = None
    _by_country: ClassVar[dict[str, Currency]] = {}
    _lock: ClassVar[threading.Lock] = threading.Lock()

    @classmethod
    def initialize(
        cls,
        baseline: Iterable[CurrencyRecord] | None = None,
        extension: Iterable[CurrencyRecord] = (),
    ) -> None:
        """
        Build the currency table explicitly.

        Preconditions:
            - No lookup has happened yet and initialize() was not called.

        Postconditions:
            - Extension records replace baseline records with the same code;
              the last record loaded wins for codes and for country mappings.

        Raises:
            RegistryAlreadyInitializedError: If the table already exists.
            InvalidCurrencyDataError: If a record is malformed.
        """
        with cls._lock:
            if cls._by_code is not None:
                raise RegistryAlreadyInitializedError(len(cls._by_code))
            cls._build(
                BASELINE_CURRENCIES if baseline is None else baseline,
                extension,
            )

    @classmethod
    def _ensure_initialized(cls) -> dict[str, Currency]:
        table = cls._by_code
        if table is not None:
            return table
        with cls._lock:
            if cls._by_code is None:
                cls._build(BASELINE_CURRENCIES, ())
            return cls._by_code

    @classmethod
    def _build(
        cls,
        baseline: Iterable[CurrencyRecord],
        extension: Iterable[CurrencyRecord],
    ) -> None:
        by_code: dict[str, Currency] = {}
        by_country: dict[str, Currency] = {}
        for record in baseline:
            currency = cls._to_currency(record)
            by_code[currency.code] = currency
            for country in currency.country_codes:
                by_country[country] = currency

        override_count = 0
        for record in extension:
            currency = cls._to_currency(record)
            previous = by_code.get(currency.code)
            if previous is not None:
                override_count += 1
                logger.debug(
                    "currency_overridden",
                    extra={
                        "currency": currency.code,
                        "previous_decimal_places": previous.declared_decimal_places,
                        "decimal_places": currency.declared_decimal_places,
                    },
                )
            by_code[currency.code] = currency
            for country in currency.country_codes:
                by_country[country] = currency

        # Drop country mappings that an override no longer lists.
        cls._by_country = {
            country: by_code[currency.code]
            for country, currency in by_country.items()
            if country in by_code[currency.code].country_codes
        }
        cls._by_code = by_code

        logger.info(
            "currency_registry_initialized",
            extra={
                "currency_count": len(by_code),
                "country_count": len(cls._by_country),
                "override_count": override_count,
            },
        )

    @staticmethod
    def _to_currency(record: Any) -> Currency:
        if not isinstance(record, CurrencyRecord):
            raise InvalidCurrencyDataError(record, "expected a CurrencyRecord")
        return record.to_currency()

    @classmethod
    def lookup(cls, code: str) -> Currency:
        """
        Return the currency registered under ``code``.

        Codes match exactly; "gbp" is not "GBP".

        Raises:
            NullArgumentError: If code is None.
            UnknownCurrencyError: If no currency has that code.
        """
        if code is None:
            raise NullArgumentError("currency code")
        currency = cls._ensure_initialized().get(code)
        if currency is None:
            raise UnknownCurrencyError(code)
        return currency

    @classmethod
    def country_to_currency(cls, country_code: str) -> Currency:
        """Return the currency mapped to an ISO 3166 country code."""
        if country_code is None:
            raise NullArgumentError("country code")
        cls._ensure_initialized()
        currency = cls._by_country.get(country_code)
        if currency is None:
            raise UnknownCountryError(country_code)
        return currency

    @classmethod
    def is_registered(cls, code: str) -> bool:
        if code is None:
            return False
        return code in cls._ensure_initialized()

    @classmethod
    def all(cls) -> tuple[Currency, ...]:
        """Every registered currency, sorted by code."""
        return tuple(sorted(cls._ensure_initialized().values()))

    @classmethod
    def all_codes(cls) -> frozenset[str]:
        return frozenset(cls._ensure_initialized())


def reset_registry() -> None:
    """Discard the currency table. FOR TESTING ONLY."""
    with CurrencyRegistry._lock:
        CurrencyRegistry._by_code = None
        CurrencyRegistry._by_country = {}
