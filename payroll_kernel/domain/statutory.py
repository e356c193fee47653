"""
Statutory -- Value objects for the per-tax-year statutory rates.

Responsibility:
    Immutable, self-validating representations of the data a tax year
    supplies to the engines: income tax bands for a region, the flat rates
    used by BR/D0/D1 codes, and statutory sick pay constants.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.  Built by
    ``payroll_config`` from YAML and consumed by ``payroll_engines``, so
    neither layer depends on the other.

Invariants enforced:
    - Band thresholds are strictly increasing and only the last band is
      unbounded.
    - Rates lie in [0, 1].
    - Period thresholds are pro-rated and floored to whole pounds.

Failure modes:
    - ValueError on construction with inconsistent band data.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from payroll_kernel.domain.values import ZERO, floor_to_pound

PERIODS_PER_YEAR = 12


@dataclass(frozen=True, slots=True)
class TaxBand:
    """
    One income tax band.

    ``upper_threshold`` is the top of the band measured in annual taxable
    pay (after free pay); None marks the open-ended top band.
    """

    name: str
    rate: Decimal
    upper_threshold: Decimal | None = None

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Tax band name is required")
        if not ZERO <= self.rate <= Decimal("1"):
            raise ValueError(f"Tax band rate must be between 0 and 1: {self.rate}")
        if self.upper_threshold is not None and self.upper_threshold <= ZERO:
            raise ValueError(
                f"Tax band upper threshold must be positive: {self.upper_threshold}"
            )


@dataclass(frozen=True, slots=True)
class TaxBandTable:
    """
    Progressive band table for one region in one tax year.

    Contract:
        Bands are ordered lowest first; each bounded band ends at its
        ``upper_threshold`` and the next starts there.

    Guarantees:
        - ``period_thresholds(p)`` returns the cumulative thresholds for
          pay period ``p``: ``floor(annual * p / 12)``.  Period 12 yields
          the annual figures.
        - ``flat_rate(code)`` returns the rate for BR/D0/D1 style codes.
    """

    region: str
    bands: tuple[TaxBand, ...]
    flat_rates: tuple[tuple[str, Decimal], ...] = ()

    def __post_init__(self) -> None:
        if not self.bands:
            raise ValueError(f"Band table for {self.region} has no bands")
        if self.bands[-1].upper_threshold is not None:
            raise ValueError(
                f"Top band of {self.region} table must have no upper threshold"
            )
        previous = ZERO
        for band in self.bands[:-1]:
            if band.upper_threshold is None:
                raise ValueError(
                    f"Only the top band of {self.region} may be unbounded "
                    f"({band.name})"
                )
            if band.upper_threshold <= previous:
                raise ValueError(
                    f"Band thresholds for {self.region} must increase "
                    f"({band.name} at {band.upper_threshold})"
                )
            previous = band.upper_threshold
        for code, rate in self.flat_rates:
            if not ZERO <= rate <= Decimal("1"):
                raise ValueError(f"Flat rate for {code} must be between 0 and 1")

    def period_thresholds(self, period: int) -> tuple[Decimal | None, ...]:
        """Upper thresholds pro-rated to ``period`` twelfths of the year."""
        return tuple(
            None
            if band.upper_threshold is None
            else floor_to_pound(band.upper_threshold * period / PERIODS_PER_YEAR)
            for band in self.bands
        )

    def flat_rate(self, code: str) -> Decimal | None:
        """Rate applied to all taxable pay for a flat-rate code, if configured."""
        for flat_code, rate in self.flat_rates:
            if flat_code == code:
                return rate
        return None


@dataclass(frozen=True, slots=True)
class StatutorySickPayRates:
    """Statutory sick pay constants for one tax year."""

    weekly_rate: Decimal
    waiting_days: int = 3
    piw_min_days: int = 4
    linking_gap_days: int = 56
    max_weeks: int = 28

    def __post_init__(self) -> None:
        if self.weekly_rate < ZERO:
            raise ValueError("SSP weekly rate cannot be negative")
        if self.waiting_days < 0 or self.piw_min_days < 1:
            raise ValueError("SSP waiting days cannot be negative and a PIW needs a day")
        if self.linking_gap_days < 0 or self.max_weeks <= 0:
            raise ValueError("SSP linking gap and maximum weeks must be positive")
