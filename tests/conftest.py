"""
Pytest fixtures for the payroll core test suite.

Provides:
- Band tables built in code (independent of the YAML rule sets)
- The shipped 2024-25 configuration
- Deterministic clocks
- A JSON log capture handler
"""

import json
import logging
from datetime import date
from decimal import Decimal
from io import StringIO

import pytest

from payroll_config import get_tax_year_config
from payroll_kernel.domain.clock import DeterministicClock
from payroll_kernel.domain.statutory import StatutorySickPayRates, TaxBand, TaxBandTable
from payroll_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    reset_logging,
)


@pytest.fixture
def ruk_bands() -> TaxBandTable:
    """rest-of-UK bands for 2023-24 onwards: 20% / 40% / 45%."""
    return TaxBandTable(
        region="rUK",
        bands=(
            TaxBand("basic", Decimal("0.20"), Decimal("37700")),
            TaxBand("higher", Decimal("0.40"), Decimal("125140")),
            TaxBand("additional", Decimal("0.45")),
        ),
        flat_rates=(
            ("BR", Decimal("0.20")),
            ("D0", Decimal("0.40")),
            ("D1", Decimal("0.45")),
        ),
    )


@pytest.fixture
def ssp_rates() -> StatutorySickPayRates:
    return StatutorySickPayRates(weekly_rate=Decimal("116.75"))


@pytest.fixture
def config_2024():
    return get_tax_year_config("2024-25")


@pytest.fixture
def fixed_clock() -> DeterministicClock:
    return DeterministicClock(date(2025, 7, 14))


@pytest.fixture
def log_stream():
    """Capture payroll_kernel log records as JSON lines."""
    reset_logging()
    LogContext.clear()
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("payroll_kernel")
    root.addHandler(handler)
    root.setLevel(logging.DEBUG)
    yield stream
    root.removeHandler(handler)
    LogContext.clear()
    reset_logging()


@pytest.fixture
def read_logs(log_stream):
    """Callable returning the captured log lines as dicts."""

    def _read() -> list[dict]:
        return [
            json.loads(line)
            for line in log_stream.getvalue().splitlines()
            if line.strip()
        ]

    return _read
