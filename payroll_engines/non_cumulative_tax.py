"""
Non-Cumulative (Week1/Month1) Tax Calculator.

Each pay period is taxed in isolation, as if it were period 1: one
month's free pay against monthly thresholds ``floor(annual / 12)``.  Used
for emergency codes and wherever the employee's year-to-date history is
not trusted.

Guarantees:
    - ``taxable = max(0, floor(gross_pay_this_period - monthly_free_pay))``.
    - Tax is never negative; no refunds arise on this basis.
    - The result depends only on the gross pay and the code, never on the
      period number or prior periods.
"""

from __future__ import annotations

from decimal import Decimal

from payroll_engines.income_tax import (
    TaxBasis,
    TaxResult,
    resolve_tax_code,
    tax_due,
    taxable_pay,
)
from payroll_engines.tax_code import ParsedTaxCode
from payroll_engines.tracer import traced_engine
from payroll_kernel.domain.statutory import TaxBandTable
from payroll_kernel.domain.values import Amount, to_amount
from payroll_kernel.logging_config import get_logger

logger = get_logger("engines.non_cumulative_tax")

_SINGLE_PERIOD = 1


class NonCumulativeTaxCalculator:
    """Week1/Month1 PAYE calculator for one region's band table."""

    def __init__(self, bands: TaxBandTable):
        self._bands = bands

    @property
    def bands(self) -> TaxBandTable:
        return self._bands

    @traced_engine(
        "non_cumulative_tax",
        "1.0",
        fingerprint_fields=("gross_pay_this_period", "tax_code"),
    )
    def calculate(
        self,
        *,
        gross_pay_this_period: Amount,
        tax_code: str | ParsedTaxCode,
        period: int | None = None,
    ) -> TaxResult:
        """
        Tax for one period on the Week1/Month1 basis.

        ``period`` is carried into the result for reporting only.
        """
        gross = to_amount(gross_pay_this_period)
        parsed = resolve_tax_code(tax_code)

        free_pay = parsed.free_pay_for_periods(_SINGLE_PERIOD)
        taxable = taxable_pay(gross, free_pay)
        due, charges = tax_due(parsed, taxable, self._bands, _SINGLE_PERIOD)

        logger.debug(
            "non_cumulative_tax_calculated",
            extra={
                "tax_code": parsed.code,
                "region": self._bands.region,
                "taxable_pay": str(taxable),
                "tax_due": str(due),
            },
        )

        return TaxResult(
            tax_code=parsed.code,
            basis=TaxBasis.WEEK1_MONTH1,
            period=period,
            free_pay_ytd=free_pay,
            taxable_pay_ytd=taxable,
            tax_due_ytd=due,
            tax_this_period=due,
            band_charges=charges,
        )


def calculate_non_cumulative_tax(
    gross_pay_this_period: Amount,
    tax_code: str,
    bands: TaxBandTable,
) -> Decimal:
    """Convenience wrapper returning only the tax for the period."""
    return NonCumulativeTaxCalculator(bands).calculate(
        gross_pay_this_period=gross_pay_this_period,
        tax_code=tax_code,
    ).tax_this_period
