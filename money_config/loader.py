"""
Currency Data Loader (``money_config.loader``).

Responsibility
--------------
Reads YAML currency data files and turns them into
``money_kernel.domain.currency.CurrencyRecord`` instances for the
currency registry. The kernel never touches files; this module does.

Expected document shape::

    currencies:
      - code: BTC
        numeric_code: -1
        decimal_places: 8
        countries: []

``numeric_code`` may be omitted or null (no numeric code). ``countries``
may be omitted (no country mappings). Country codes must be quoted:
YAML 1.1 reads a bare ``NO`` (Norway) as ``false``.

Architecture position
---------------------
**Config layer** -- infrastructure tooling above ``money_kernel``. The
kernel MUST NEVER import from ``money_config``.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing keys or bad values  -> ``InvalidCurrencyDataError``.

Audit relevance
---------------
``compute_checksum`` fingerprints the loaded records so the exact
currency table in force can be tied back to its source file.
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any

import yaml

from money_kernel.domain.currency import NO_NUMERIC_CODE, CurrencyRecord
from money_kernel.exceptions import InvalidCurrencyDataError


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Preconditions:
        - ``path`` must point to an existing, readable YAML file.
    Postconditions:
        - Returns a ``dict`` (possibly empty if the YAML is empty).
    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def parse_currency_record(data: Any) -> CurrencyRecord:
    """
    Parse one ``CurrencyRecord`` from a YAML mapping.

    Raises:
        InvalidCurrencyDataError: if a required key is missing or a value
            violates the record constraints.
    """
    if not isinstance(data, dict):
        raise InvalidCurrencyDataError(data, "currency entry must be a mapping")
    for key in ("code", "decimal_places"):
        if key not in data:
            raise InvalidCurrencyDataError(data, f"missing required key {key!r}")

    numeric_code = data.get("numeric_code")
    countries = data.get("countries") or []
    if not isinstance(countries, list):
        raise InvalidCurrencyDataError(data, "countries must be a list")
    if any(isinstance(country, bool) for country in countries):
        raise InvalidCurrencyDataError(
            data, "country codes must be quoted strings; YAML reads a bare NO as false"
        )

    return CurrencyRecord(
        code=data["code"],
        numeric_code=NO_NUMERIC_CODE if numeric_code is None else numeric_code,
        decimal_places=data["decimal_places"],
        country_codes=tuple(countries),
    )


def parse_currency_document(document: dict[str, Any]) -> tuple[CurrencyRecord, ...]:
    """Parse the ``currencies`` list of a loaded document."""
    if not isinstance(document, dict):
        raise InvalidCurrencyDataError(document, "document must be a mapping")
    entries = document.get("currencies", [])
    if entries is None:
        return ()
    if not isinstance(entries, list):
        raise InvalidCurrencyDataError(entries, "'currencies' must be a list")
    return tuple(parse_currency_record(entry) for entry in entries)


def load_currency_records(path: Path | str) -> tuple[CurrencyRecord, ...]:
    """
    Load currency records from a YAML file.

    Preconditions:
        - ``path`` points to a YAML document with a ``currencies`` list.
    Postconditions:
        - Records are returned in file order (later entries win on load).
    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        InvalidCurrencyDataError: if an entry is malformed.
    """
    return parse_currency_document(load_yaml_file(Path(path)))


def compute_checksum(records: tuple[CurrencyRecord, ...]) -> str:
    """
    Compute SHA-256 checksum of the canonical JSON form of ``records``.

    Postconditions:
        - Identical records in identical order always produce identical
          checksums (deterministic).
    """
    canonical = json.dumps(
        [
            [r.code, r.numeric_code, r.decimal_places, list(r.country_codes)]
            for r in records
        ],
        sort_keys=True,
    )
    return hashlib.sha256(canonical.encode()).hexdigest()
