"""
Pytest fixtures for the money kernel test suite.

Provides:
- Structured logging configured for every test session
- A fresh currency registry for every test
- Log capture as parsed JSON records
"""

import json
import logging
from io import StringIO

import pytest

from money_kernel.domain.currency import CurrencyRegistry, reset_registry
from money_kernel.logging_config import (
    StructuredFormatter,
    configure_logging,
    reset_logging,
)


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture
def captured_logs():
    """
    Capture money_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs):
            CurrencyRegistry.lookup("GBP")
            logs = captured_logs()
            assert any(r["message"] == "currency_registry_initialized" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("money_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Currency registry fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def _fresh_currency_registry():
    """Every test starts with an unbuilt registry."""
    reset_registry()
    yield
    reset_registry()


@pytest.fixture
def registry():
    """The currency registry, built from the ISO baseline."""
    CurrencyRegistry.initialize()
    return CurrencyRegistry
