"""
Income tax primitives shared by the cumulative and Week1/Month1 calculators.

Contract:
    Pure functions over Decimal amounts.  Taxable pay is floored to whole
    pounds before any band is applied; tax is rounded half up to the penny
    once, on the total.

Guarantees:
    - ``taxable_pay`` is never negative and is zero under infinite free pay.
    - ``tax_due`` for a flat-rate code applies the configured rate to all
      taxable pay, ignoring bands.
    - ``banded_tax`` with thresholds for period ``p`` uses the cumulative
      thresholds ``floor(annual * p / 12)``.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from payroll_engines.tax_code import ParsedTaxCode, TaxCodeMode, parse_tax_code
from payroll_kernel.domain.statutory import PERIODS_PER_YEAR, TaxBandTable
from payroll_kernel.domain.values import (
    ZERO,
    Amount,
    floor_to_pound,
    round_to_penny,
    to_amount,
)
from payroll_kernel.exceptions import InvalidPeriodError, InvalidTaxCodeError


class TaxBasis(str, Enum):
    """Basis on which PAYE tax is computed for a pay period."""

    CUMULATIVE = "cumulative"
    WEEK1_MONTH1 = "week1_month1"


@dataclass(frozen=True)
class BandCharge:
    """Tax charged within one band (or at one flat rate)."""

    band_name: str
    rate: Decimal
    taxable_amount: Decimal
    tax: Decimal


@dataclass(frozen=True)
class PayPeriodTaxInput:
    """One employee's figures for a monthly pay period."""

    period: int
    gross_pay_ytd: Decimal
    tax_code: str
    previous_tax_paid_ytd: Decimal = ZERO
    gross_pay_this_period: Decimal | None = None
    emergency_basis: bool = False

    def __post_init__(self) -> None:
        validate_period(self.period)
        object.__setattr__(self, "gross_pay_ytd", to_amount(self.gross_pay_ytd))
        object.__setattr__(
            self, "previous_tax_paid_ytd", to_amount(self.previous_tax_paid_ytd)
        )
        if self.gross_pay_this_period is not None:
            object.__setattr__(
                self, "gross_pay_this_period", to_amount(self.gross_pay_this_period)
            )


@dataclass(frozen=True)
class TaxResult:
    """
    Outcome of a tax calculation.

    On the Week1/Month1 basis each period stands alone, so the ``*_ytd``
    fields hold the single-period figures and ``tax_this_period`` equals
    ``tax_due_ytd``.
    """

    tax_code: str
    basis: TaxBasis
    period: int | None
    free_pay_ytd: Decimal
    taxable_pay_ytd: Decimal
    tax_due_ytd: Decimal
    tax_this_period: Decimal
    band_charges: tuple[BandCharge, ...] = ()

    @property
    def is_refund(self) -> bool:
        return self.tax_this_period < ZERO


def validate_period(period: int) -> int:
    """Reject anything but an integer period in 1..12."""
    if isinstance(period, bool) or not isinstance(period, int):
        raise InvalidPeriodError(period, PERIODS_PER_YEAR)
    if not 1 <= period <= PERIODS_PER_YEAR:
        raise InvalidPeriodError(period, PERIODS_PER_YEAR)
    return period


def resolve_tax_code(tax_code: str | ParsedTaxCode) -> ParsedTaxCode:
    if isinstance(tax_code, ParsedTaxCode):
        return tax_code
    return parse_tax_code(tax_code)


def taxable_pay(gross_pay: Amount, free_pay: Decimal) -> Decimal:
    """``max(0, floor(gross - free pay))`` in whole pounds."""
    if free_pay.is_infinite() and free_pay > ZERO:
        return ZERO
    taxable = floor_to_pound(to_amount(gross_pay) - free_pay)
    return max(ZERO, taxable)


def banded_tax(
    taxable: Decimal,
    bands: TaxBandTable,
    period: int = PERIODS_PER_YEAR,
) -> tuple[Decimal, tuple[BandCharge, ...]]:
    """Progressive tax on ``taxable`` using thresholds pro-rated to ``period``."""
    charges: list[BandCharge] = []
    total = ZERO
    lower = ZERO
    for band, upper in zip(bands.bands, bands.period_thresholds(period)):
        if taxable <= lower:
            break
        top = taxable if upper is None else min(taxable, upper)
        portion = top - lower
        if portion > ZERO:
            band_tax = portion * band.rate
            total += band_tax
            charges.append(
                BandCharge(
                    band_name=band.name,
                    rate=band.rate,
                    taxable_amount=portion,
                    tax=round_to_penny(band_tax),
                )
            )
        if upper is None:
            break
        lower = upper
    return round_to_penny(total), tuple(charges)


def tax_due(
    parsed: ParsedTaxCode,
    taxable: Decimal,
    bands: TaxBandTable,
    period: int = PERIODS_PER_YEAR,
) -> tuple[Decimal, tuple[BandCharge, ...]]:
    """Tax due on ``taxable`` pay for the code's mode."""
    if parsed.mode == TaxCodeMode.NO_TAX:
        return round_to_penny(ZERO), ()

    if parsed.mode == TaxCodeMode.FLAT_RATE:
        rate = bands.flat_rate(parsed.code)
        if rate is None:
            raise InvalidTaxCodeError(
                parsed.code, f"no flat rate configured for region {bands.region}"
            )
        tax = round_to_penny(taxable * rate)
        return tax, (
            BandCharge(band_name=parsed.code, rate=rate, taxable_amount=taxable, tax=tax),
        )

    return banded_tax(taxable, bands, period)
