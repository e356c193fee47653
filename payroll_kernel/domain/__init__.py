"""
Pure domain layer.

Value objects and the clock abstraction, with NO dependencies on
configuration files, persistence or the current date.
"""

from payroll_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from payroll_kernel.domain.statutory import (
    PERIODS_PER_YEAR,
    StatutorySickPayRates,
    TaxBand,
    TaxBandTable,
)
from payroll_kernel.domain.values import (
    INFINITY,
    PENNY,
    ZERO,
    floor_to_pound,
    round_to_penny,
    round_up_to_penny,
    to_amount,
    to_pennies,
)

__all__ = [
    "Clock",
    "DeterministicClock",
    "SystemClock",
    "PERIODS_PER_YEAR",
    "StatutorySickPayRates",
    "TaxBand",
    "TaxBandTable",
    "INFINITY",
    "PENNY",
    "ZERO",
    "floor_to_pound",
    "round_to_penny",
    "round_up_to_penny",
    "to_amount",
    "to_pennies",
]
