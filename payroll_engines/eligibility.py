"""
Sick pay eligibility rules.

Contract:
    A ``SicknessScheme`` is an explicit table of ``EligibilityRule`` tiers
    keyed by minimum service length in months.  ``rule_for`` performs a
    greatest-lower-bound lookup and returns None when no tier applies; the
    allocation engine turns that None into an error.

Guarantees:
    - Tiers are held sorted by ``service_months_from`` with no duplicates.
    - Entitlement amounts convert to days deterministically:
      days as-is, weeks times working days per week, months as
      ``floor(amount * working_days_per_week * 52.14 / 12)``.
    - ``service_months_at`` counts completed calendar months and is zero
      before the hire date.
"""

from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date
from decimal import ROUND_FLOOR, Decimal
from enum import Enum

from payroll_kernel.domain.values import ZERO, to_amount

DEFAULT_WORKING_DAYS_PER_WEEK = 5
WEEKS_PER_YEAR = Decimal("52.14")
MONTHS_PER_YEAR = 12


class EntitlementUnit(str, Enum):
    """Unit an entitlement amount is expressed in."""

    DAYS = "days"
    WEEKS = "weeks"
    MONTHS = "months"


def convert_to_days(
    amount: Decimal | int | str,
    unit: EntitlementUnit,
    working_days_per_week: int = DEFAULT_WORKING_DAYS_PER_WEEK,
) -> int:
    """Entitlement amount expressed as whole working days."""
    if not 1 <= working_days_per_week <= 7:
        raise ValueError(
            f"working_days_per_week must be between 1 and 7: {working_days_per_week}"
        )
    value = to_amount(amount)
    if unit == EntitlementUnit.DAYS:
        days = value
    elif unit == EntitlementUnit.WEEKS:
        days = value * working_days_per_week
    else:
        days = value * working_days_per_week * WEEKS_PER_YEAR / MONTHS_PER_YEAR
    return int(days.to_integral_value(rounding=ROUND_FLOOR))


@dataclass(frozen=True)
class EligibilityRule:
    """One tier of a company sick pay scheme."""

    service_months_from: int
    full_pay_amount: Decimal
    half_pay_amount: Decimal
    full_pay_unit: EntitlementUnit = EntitlementUnit.DAYS
    half_pay_unit: EntitlementUnit = EntitlementUnit.DAYS
    has_waiting_days: bool = False
    rule_id: str | None = None

    def __post_init__(self) -> None:
        if self.service_months_from < 0:
            raise ValueError("service_months_from cannot be negative")
        object.__setattr__(self, "full_pay_amount", to_amount(self.full_pay_amount))
        object.__setattr__(self, "half_pay_amount", to_amount(self.half_pay_amount))
        if self.full_pay_amount < ZERO or self.half_pay_amount < ZERO:
            raise ValueError("Entitlement amounts cannot be negative")

    def full_pay_days(
        self, working_days_per_week: int = DEFAULT_WORKING_DAYS_PER_WEEK
    ) -> int:
        return convert_to_days(self.full_pay_amount, self.full_pay_unit, working_days_per_week)

    def half_pay_days(
        self, working_days_per_week: int = DEFAULT_WORKING_DAYS_PER_WEEK
    ) -> int:
        return convert_to_days(self.half_pay_amount, self.half_pay_unit, working_days_per_week)


@dataclass(frozen=True)
class SicknessScheme:
    """Ordered eligibility table."""

    rules: tuple[EligibilityRule, ...]
    name: str = "default"

    def __post_init__(self) -> None:
        ordered = tuple(sorted(self.rules, key=lambda r: r.service_months_from))
        bounds = [r.service_months_from for r in ordered]
        if len(set(bounds)) != len(bounds):
            raise ValueError(
                f"Scheme {self.name} has duplicate service-month lower bounds"
            )
        object.__setattr__(self, "rules", ordered)

    def rule_for(self, service_months: int) -> EligibilityRule | None:
        """Tier with the greatest lower bound not exceeding ``service_months``."""
        selected: EligibilityRule | None = None
        for rule in self.rules:
            if rule.service_months_from > service_months:
                break
            selected = rule
        return selected


def service_months_at(hire_date: date, on_date: date) -> int:
    """
    Completed months of service on ``on_date``.

    A month completes on the same day-of-month as the hire date, or on the
    last day of a shorter month (hired 31 Jan, one month on 29 Feb).
    """
    if on_date < hire_date:
        return 0
    months = (on_date.year - hire_date.year) * 12 + (on_date.month - hire_date.month)
    if on_date.day < hire_date.day:
        last_day = calendar.monthrange(on_date.year, on_date.month)[1]
        if on_date.day != last_day:
            months -= 1
    return max(0, months)
