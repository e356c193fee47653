"""
TaxYearConfig schema.

The parsed, immutable form of one ``tax_years/<year>.yaml`` file.  YAML is
parsed into these types by the loader; engines receive the kernel value
objects (``TaxBandTable``, ``StatutorySickPayRates``) they carry, never
the config object itself.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from payroll_kernel.domain.statutory import StatutorySickPayRates, TaxBandTable
from payroll_kernel.exceptions import RegionNotConfiguredError

TAX_YEAR_PATTERN = re.compile(r"^(\d{4})-(\d{2})$")
DEFAULT_REGION = "rUK"
EMERGENCY_MARKER = "M1"


@dataclass(frozen=True)
class TaxYearConfig:
    """Statutory rates for one tax year."""

    tax_year: str
    effective_from: date
    effective_to: date
    personal_allowance: Decimal
    band_tables: tuple[TaxBandTable, ...]
    sick_pay: StatutorySickPayRates
    checksum: str = ""

    def __post_init__(self) -> None:
        match = TAX_YEAR_PATTERN.match(self.tax_year)
        if not match:
            raise ValueError(f"Tax year must look like 2024-25: {self.tax_year!r}")
        start, end = int(match.group(1)), int(match.group(2))
        if (start + 1) % 100 != end:
            raise ValueError(f"Tax year {self.tax_year} must span consecutive years")
        if self.effective_from != date(start, 4, 6):
            raise ValueError(
                f"Tax year {self.tax_year} must start on 6 April {start}, "
                f"not {self.effective_from}"
            )
        if self.effective_to != date(start + 1, 4, 5):
            raise ValueError(
                f"Tax year {self.tax_year} must end on 5 April {start + 1}, "
                f"not {self.effective_to}"
            )
        regions = [table.region for table in self.band_tables]
        if len(set(regions)) != len(regions):
            raise ValueError(f"Duplicate region band tables in {self.tax_year}")
        # tax codes carry the allowance divided by ten
        if self.personal_allowance < 0 or self.personal_allowance % 10 != 0:
            raise ValueError(
                f"Personal allowance for {self.tax_year} must be a non-negative "
                f"multiple of 10: {self.personal_allowance}"
            )

    @property
    def regions(self) -> tuple[str, ...]:
        return tuple(table.region for table in self.band_tables)

    @property
    def standard_tax_code(self) -> str:
        """The code for the full personal allowance, e.g. ``1257L``."""
        return f"{int(self.personal_allowance) // 10}L"

    @property
    def emergency_tax_code(self) -> str:
        """Standard code on the Week1/Month1 basis, e.g. ``1257L M1``."""
        return f"{self.standard_tax_code} {EMERGENCY_MARKER}"

    def bands(self, region: str = DEFAULT_REGION) -> TaxBandTable:
        """Band table for ``region``; raises if the year does not define it."""
        for table in self.band_tables:
            if table.region == region:
                return table
        raise RegionNotConfiguredError(region, self.tax_year)

    def covers(self, on_date: date) -> bool:
        return self.effective_from <= on_date <= self.effective_to
