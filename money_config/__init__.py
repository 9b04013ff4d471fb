"""
money_config -- currency data configuration for the money kernel.

Responsibility:
    The only component that reads currency data files or environment
    variables. Loads YAML extension files and hands their records to
    ``CurrencyRegistry.initialize`` as an overlay on the ISO baseline.

Architecture position:
    Configuration -- sits above ``money_kernel``. The kernel MUST NEVER
    import from ``money_config``.

Failure modes:
    - ``FileNotFoundError`` -- extension file does not exist.
    - ``yaml.YAMLError`` -- malformed YAML.
    - ``InvalidCurrencyDataError`` -- a record is malformed.
    - ``RegistryAlreadyInitializedError`` -- the registry was already built
      (by an earlier initialize or by a lookup).

Audit relevance:
    Each overlay emits a ``currency_extension_loaded`` log entry with the
    source path, record count and content checksum.
"""

from __future__ import annotations

import os
from pathlib import Path

from money_config.loader import compute_checksum, load_currency_records
from money_kernel.domain.currency import CurrencyRegistry
from money_kernel.logging_config import get_logger

logger = get_logger("config")

EXTENSION_ENV_VAR = "MONEY_KERNEL_CURRENCY_EXTENSION"


def initialize_from_file(path: Path | str) -> None:
    """
    Initialize the currency registry with ``path`` as an extension overlay.

    Preconditions:
        - The registry has not been built yet.

    Postconditions:
        - The registry holds the ISO baseline overlaid with the file's
          records (file entries win on shared codes).

    Raises:
        FileNotFoundError: If the file does not exist.
        yaml.YAMLError: If the file is not valid YAML.
        InvalidCurrencyDataError: If a record is malformed.
        RegistryAlreadyInitializedError: If the registry is already built.
    """
    records = load_currency_records(path)
    logger.info(
        "currency_extension_loaded",
        extra={
            "path": str(path),
            "record_count": len(records),
            "checksum": compute_checksum(records),
        },
    )
    CurrencyRegistry.initialize(extension=records)


def initialize_from_environment() -> bool:
    """
    Initialize the registry from the file named by
    ``MONEY_KERNEL_CURRENCY_EXTENSION``, if set.

    Returns:
        True if an extension file was loaded, False if the variable is
        unset or empty (the registry is left untouched).
    """
    path = os.environ.get(EXTENSION_ENV_VAR)
    if not path:
        logger.debug("currency_extension_not_configured", extra={"env_var": EXTENSION_ENV_VAR})
        return False
    initialize_from_file(path)
    return True


__all__ = [
    "EXTENSION_ENV_VAR",
    "initialize_from_environment",
    "initialize_from_file",
    "load_currency_records",
]
