"""
Statutory Sick Pay calculator.

Contract:
    Pure calculation of SSP days and amounts for one employee from their
    sickness records, the tax year's SSP constants and the employee's
    qualifying weekdays.

Guarantees:
    - Overlapping or adjacent records merge into one absence; an absence
      of at least ``piw_min_days`` calendar days is a period of incapacity
      for work (PIW).  Shorter absences never attract SSP.
    - PIWs separated by ``linking_gap_days`` days or fewer form one chain.
      Waiting days are served once per chain, on its first qualifying
      days.
    - At most ``max_weeks * qualifying days per week`` days are paid per
      chain.
    - The amount for a range is ``weekly_rate * days / qualifying days per
      week``, rounded up to the penny.

Non-goals:
    - The lower earnings limit test and the employer's notification rules.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal

from payroll_engines.sickness import SicknessRecord
from payroll_engines.tracer import traced_engine
from payroll_kernel.domain.statutory import StatutorySickPayRates
from payroll_kernel.domain.values import round_up_to_penny
from payroll_kernel.logging_config import get_logger

logger = get_logger("engines.ssp")

# date.weekday() numbering
MONDAY_TO_FRIDAY = frozenset({0, 1, 2, 3, 4})


@dataclass(frozen=True)
class PeriodOfIncapacity:
    start: date
    end: date
    qualifying_days: tuple[date, ...]

    @property
    def calendar_days(self) -> int:
        return (self.end - self.start).days + 1


@dataclass(frozen=True)
class SspUsage:
    """SSP position for a date range."""

    range_start: date
    range_end: date
    qualifying_days_per_week: int
    entitled_days: int
    days_paid: int
    waiting_days_served: int
    amount: Decimal
    linked_chains: int


def qualifying_days_between(
    start: date, end: date, weekdays: frozenset[int]
) -> tuple[date, ...]:
    days = []
    current = start
    while current <= end:
        if current.weekday() in weekdays:
            days.append(current)
        current += timedelta(days=1)
    return tuple(days)


def merge_absences(
    records: Iterable[SicknessRecord], open_end: date
) -> list[tuple[date, date]]:
    """Merge overlapping or adjacent absences; ongoing ones run to ``open_end``."""
    spans = sorted(
        (r.start_date, r.end_date if r.end_date is not None else open_end)
        for r in records
    )
    merged: list[tuple[date, date]] = []
    for start, end in spans:
        if end < start:
            continue
        if merged and start <= merged[-1][1] + timedelta(days=1):
            merged[-1] = (merged[-1][0], max(merged[-1][1], end))
        else:
            merged.append((start, end))
    return merged


def link_periods(
    periods: Sequence[PeriodOfIncapacity], linking_gap_days: int
) -> list[list[PeriodOfIncapacity]]:
    """Group PIWs into linked chains."""
    chains: list[list[PeriodOfIncapacity]] = []
    for piw in periods:
        if chains:
            gap = (piw.start - chains[-1][-1].end).days - 1
            if gap <= linking_gap_days:
                chains[-1].append(piw)
                continue
        chains.append([piw])
    return chains


class StatutorySickPayCalculator:
    """SSP for one employee's qualifying-day pattern."""

    def __init__(
        self,
        rates: StatutorySickPayRates,
        qualifying_weekdays: frozenset[int] = MONDAY_TO_FRIDAY,
    ):
        weekdays = frozenset(qualifying_weekdays)
        if not weekdays or not weekdays <= frozenset(range(7)):
            raise ValueError(f"Qualifying weekdays must be a non-empty subset of 0..6: {sorted(weekdays)}")
        self._rates = rates
        self._weekdays = weekdays

    @property
    def qualifying_days_per_week(self) -> int:
        return len(self._weekdays)

    @property
    def entitled_days(self) -> int:
        return self._rates.max_weeks * self.qualifying_days_per_week

    def periods_of_incapacity(
        self, records: Iterable[SicknessRecord], open_end: date
    ) -> list[PeriodOfIncapacity]:
        periods = []
        for start, end in merge_absences(records, open_end):
            if (end - start).days + 1 < self._rates.piw_min_days:
                continue
            periods.append(
                PeriodOfIncapacity(
                    start=start,
                    end=end,
                    qualifying_days=qualifying_days_between(start, end, self._weekdays),
                )
            )
        return periods

    @traced_engine(
        "statutory_sick_pay",
        "1.0",
        fingerprint_fields=("records", "range_start", "range_end"),
    )
    def calculate_usage(
        self,
        *,
        records: Sequence[SicknessRecord],
        range_start: date,
        range_end: date,
    ) -> SspUsage:
        """SSP days and amount falling within ``[range_start, range_end]``."""
        if range_end < range_start:
            raise ValueError("range_end is before range_start")

        periods = self.periods_of_incapacity(records, open_end=range_end)
        chains = link_periods(periods, self._rates.linking_gap_days)

        days_paid = 0
        waiting_served = 0
        for chain in chains:
            waiting_left = self._rates.waiting_days
            paid_in_chain = 0
            for day in (d for piw in chain for d in piw.qualifying_days):
                in_range = range_start <= day <= range_end
                if waiting_left > 0:
                    waiting_left -= 1
                    if in_range:
                        waiting_served += 1
                    continue
                if paid_in_chain >= self.entitled_days:
                    break
                paid_in_chain += 1
                if in_range:
                    days_paid += 1

        amount = round_up_to_penny(
            self._rates.weekly_rate * days_paid / self.qualifying_days_per_week
        )

        logger.debug(
            "ssp_usage_calculated",
            extra={
                "range_start": range_start.isoformat(),
                "range_end": range_end.isoformat(),
                "piw_count": len(periods),
                "linked_chains": len(chains),
                "days_paid": days_paid,
                "amount": str(amount),
            },
        )

        return SspUsage(
            range_start=range_start,
            range_end=range_end,
            qualifying_days_per_week=self.qualifying_days_per_week,
            entitled_days=self.entitled_days,
            days_paid=days_paid,
            waiting_days_served=waiting_served,
            amount=amount,
            linked_chains=len(chains),
        )
