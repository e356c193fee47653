"""
payroll_services.pay_run_service -- Per-pay-run facade over the pure engines.

Responsibility:
    Binds tax year configuration and an injected clock to the pure
    statutory engines.  Chooses the cumulative or Week1/Month1 basis for
    each employee, and defaults sickness reference dates to "today" from
    the clock.

Architecture position:
    Services -- orchestration over ``payroll_config`` and
    ``payroll_engines``.  The only layer that reads configuration or the
    clock.

Invariants enforced:
    - Engines receive explicit inputs only: band tables, SSP rates and
      reference dates are resolved here and passed down.
    - The Week1/Month1 basis is used when the input flags it or when the
      tax code carries a W1/M1/X marker.

Failure modes:
    - ``TaxYearNotConfiguredError`` / ``RegionNotConfiguredError`` from
      configuration lookup.
    - ``ValueError`` when the Week1/Month1 basis applies but no
      single-period gross pay was supplied.
    - Engine errors propagate unchanged.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date
from pathlib import Path

from payroll_config import (
    DEFAULT_REGION,
    TaxYearConfig,
    get_tax_year_config,
    tax_year_for_date,
)
from payroll_engines.cumulative_tax import CumulativeTaxCalculator
from payroll_engines.eligibility import DEFAULT_WORKING_DAYS_PER_WEEK, SicknessScheme
from payroll_engines.income_tax import PayPeriodTaxInput, TaxResult
from payroll_engines.non_cumulative_tax import NonCumulativeTaxCalculator
from payroll_engines.sickness import (
    EntitlementAllocation,
    EntitlementSummary,
    OpeningBalance,
    RollingWindow,
    SicknessEntitlementEngine,
    SicknessRecord,
)
from payroll_engines.ssp import MONDAY_TO_FRIDAY, SspUsage, StatutorySickPayCalculator
from payroll_engines.tax_code import parse_tax_code
from payroll_kernel.domain.clock import Clock, SystemClock
from payroll_kernel.logging_config import LogContext, get_logger

logger = get_logger("services.pay_run")


class PayrollCalculationService:
    """
    Statutory calculations for a pay run.

    Contract:
        One instance per pay run.  Tax year configurations are loaded on
        first use and held for the lifetime of the instance.

    Usage:
        service = PayrollCalculationService(clock=DeterministicClock(date(2024, 5, 31)))
        result = service.calculate_income_tax(
            PayPeriodTaxInput(period=2, gross_pay_ytd=Decimal("2312.51"),
                              tax_code="1257L",
                              previous_tax_paid_ytd=Decimal("21.60")),
            tax_year="2024-25",
        )
    """

    def __init__(
        self,
        clock: Clock | None = None,
        config_dir: Path | None = None,
    ):
        self._clock = clock or SystemClock()
        self._config_dir = config_dir
        self._configs: dict[str, TaxYearConfig] = {}

    def config_for(self, tax_year: str) -> TaxYearConfig:
        if tax_year not in self._configs:
            self._configs[tax_year] = get_tax_year_config(tax_year, self._config_dir)
        return self._configs[tax_year]

    def emergency_tax_code(self, tax_year: str) -> str:
        """Code for a starter with no previous pay details, on the Week1/Month1 basis."""
        return self.config_for(tax_year).emergency_tax_code

    def calculate_income_tax(
        self,
        tax_input: PayPeriodTaxInput,
        tax_year: str,
        region: str = DEFAULT_REGION,
        employee_id: str | None = None,
    ) -> TaxResult:
        """PAYE for one employee and period on the basis their code requires."""
        bands = self.config_for(tax_year).bands(region)
        parsed = parse_tax_code(tax_input.tax_code)

        with LogContext.bind(employee_id=employee_id, tax_year=tax_year):
            if tax_input.emergency_basis or parsed.emergency_basis:
                if tax_input.gross_pay_this_period is None:
                    raise ValueError(
                        "Week1/Month1 basis requires gross_pay_this_period"
                    )
                result = NonCumulativeTaxCalculator(bands).calculate(
                    gross_pay_this_period=tax_input.gross_pay_this_period,
                    tax_code=parsed,
                    period=tax_input.period,
                )
            else:
                result = CumulativeTaxCalculator(bands).calculate(
                    period=tax_input.period,
                    gross_pay_ytd=tax_input.gross_pay_ytd,
                    tax_code=parsed,
                    previous_tax_paid_ytd=tax_input.previous_tax_paid_ytd,
                )

            logger.info(
                "income_tax_calculated",
                extra={
                    "basis": result.basis.value,
                    "period": tax_input.period,
                    "region": region,
                    "tax_this_period": str(result.tax_this_period),
                    "is_refund": result.is_refund,
                },
            )
        return result

    def _reference_date(self, reference_date: date | None) -> date:
        return reference_date if reference_date is not None else self._clock.today()

    def allocate_sickness(
        self,
        records: Sequence[SicknessRecord],
        scheme: SicknessScheme,
        hire_date: date,
        reference_date: date | None = None,
        working_days_per_week: int = DEFAULT_WORKING_DAYS_PER_WEEK,
        employee_id: str | None = None,
        opening_balance: OpeningBalance | None = None,
    ) -> list[EntitlementAllocation]:
        """Company sick pay allocation; ``reference_date`` defaults to today."""
        engine = SicknessEntitlementEngine(working_days_per_week=working_days_per_week)
        with LogContext.bind(employee_id=employee_id):
            return engine.allocate(
                records=records,
                scheme=scheme,
                hire_date=hire_date,
                reference_date=self._reference_date(reference_date),
                opening_balance=opening_balance,
            )

    def summarize_sickness(
        self,
        records: Sequence[SicknessRecord],
        scheme: SicknessScheme,
        hire_date: date,
        reference_date: date | None = None,
        working_days_per_week: int = DEFAULT_WORKING_DAYS_PER_WEEK,
        employee_id: str | None = None,
        opening_balance: OpeningBalance | None = None,
    ) -> EntitlementSummary:
        engine = SicknessEntitlementEngine(working_days_per_week=working_days_per_week)
        with LogContext.bind(employee_id=employee_id):
            return engine.summarize(
                records=records,
                scheme=scheme,
                hire_date=hire_date,
                reference_date=self._reference_date(reference_date),
                opening_balance=opening_balance,
            )

    def statutory_sick_pay(
        self,
        records: Sequence[SicknessRecord],
        reference_date: date | None = None,
        qualifying_weekdays: frozenset[int] = MONDAY_TO_FRIDAY,
        employee_id: str | None = None,
    ) -> SspUsage:
        """
        SSP over the rolling 12-month window ending on ``reference_date``,
        at the rates of the tax year containing that date.
        """
        reference = self._reference_date(reference_date)
        tax_year = tax_year_for_date(reference)
        rates = self.config_for(tax_year).sick_pay
        window = RollingWindow.ending_on(reference)
        calculator = StatutorySickPayCalculator(rates, qualifying_weekdays)
        with LogContext.bind(employee_id=employee_id, tax_year=tax_year):
            return calculator.calculate_usage(
                records=records,
                range_start=window.start,
                range_end=window.end,
            )
