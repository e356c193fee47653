"""
Cumulative Tax Calculator.

Computes PAYE income tax on the cumulative basis: the employee's whole
year to date is taxed afresh each period and the tax already paid is
subtracted, so over-payments in earlier periods come back as refunds.

Contract:
    Pure and stateless apart from the band table supplied at construction.

Guarantees:
    - ``free_pay_ytd = monthly_free_pay * period``.
    - ``taxable_pay_ytd = max(0, floor(gross_pay_ytd - free_pay_ytd))``.
    - Band thresholds are pro-rated to the period:
      ``floor(annual * period / 12)``.
    - ``tax_this_period = tax_due_ytd - previous_tax_paid_ytd`` and may be
      negative (a refund).  NT refunds everything previously paid.

Non-goals:
    - Week1/Month1 codes are handled by ``NonCumulativeTaxCalculator``.
    - Overpayment limits (the 50% regulatory limit) are a pay-run concern.
"""

from __future__ import annotations

from decimal import Decimal

from payroll_engines.income_tax import (
    PayPeriodTaxInput,
    TaxBasis,
    TaxResult,
    resolve_tax_code,
    tax_due,
    taxable_pay,
    validate_period,
)
from payroll_engines.tax_code import ParsedTaxCode
from payroll_engines.tracer import traced_engine
from payroll_kernel.domain.statutory import TaxBandTable
from payroll_kernel.domain.values import ZERO, Amount, round_to_penny, to_amount
from payroll_kernel.logging_config import get_logger

logger = get_logger("engines.cumulative_tax")


class CumulativeTaxCalculator:
    """
    Year-to-date PAYE calculator for one region's band table.

    Usage:
        calculator = CumulativeTaxCalculator(config.bands("rUK"))
        result = calculator.calculate(
            period=1,
            gross_pay_ytd=Decimal("1156.25"),
            tax_code="1257L",
            previous_tax_paid_ytd=Decimal("0"),
        )
        result.tax_this_period   # Decimal("21.60")
    """

    def __init__(self, bands: TaxBandTable):
        self._bands = bands

    @property
    def bands(self) -> TaxBandTable:
        return self._bands

    @traced_engine(
        "cumulative_tax",
        "1.0",
        fingerprint_fields=("period", "gross_pay_ytd", "tax_code", "previous_tax_paid_ytd"),
    )
    def calculate(
        self,
        *,
        period: int,
        gross_pay_ytd: Amount,
        tax_code: str | ParsedTaxCode,
        previous_tax_paid_ytd: Amount = ZERO,
    ) -> TaxResult:
        """
        Tax for pay period ``period`` on the cumulative basis.

        Raises:
            InvalidPeriodError: period outside 1..12.
            InvalidTaxCodeError: unrecognised code, or a flat-rate code the
                band table has no rate for.
        """
        validate_period(period)
        gross = to_amount(gross_pay_ytd)
        previous = to_amount(previous_tax_paid_ytd)
        parsed = resolve_tax_code(tax_code)

        free_pay = parsed.free_pay_for_periods(period)
        taxable = taxable_pay(gross, free_pay)
        due, charges = tax_due(parsed, taxable, self._bands, period)
        this_period = round_to_penny(due - previous)

        logger.debug(
            "cumulative_tax_calculated",
            extra={
                "tax_code": parsed.code,
                "period": period,
                "region": self._bands.region,
                "taxable_pay_ytd": str(taxable),
                "tax_due_ytd": str(due),
                "tax_this_period": str(this_period),
            },
        )

        return TaxResult(
            tax_code=parsed.code,
            basis=TaxBasis.CUMULATIVE,
            period=period,
            free_pay_ytd=free_pay,
            taxable_pay_ytd=taxable,
            tax_due_ytd=due,
            tax_this_period=this_period,
            band_charges=charges,
        )

    def calculate_input(self, tax_input: PayPeriodTaxInput) -> TaxResult:
        """Calculate from a ``PayPeriodTaxInput``."""
        return self.calculate(
            period=tax_input.period,
            gross_pay_ytd=tax_input.gross_pay_ytd,
            tax_code=tax_input.tax_code,
            previous_tax_paid_ytd=tax_input.previous_tax_paid_ytd,
        )


def calculate_cumulative_tax(
    period: int,
    gross_pay_ytd: Amount,
    tax_code: str,
    previous_tax_paid_ytd: Amount,
    bands: TaxBandTable,
) -> Decimal:
    """Convenience wrapper returning only the tax for this period."""
    return CumulativeTaxCalculator(bands).calculate(
        period=period,
        gross_pay_ytd=gross_pay_ytd,
        tax_code=tax_code,
        previous_tax_paid_ytd=previous_tax_paid_ytd,
    ).tax_this_period
