"""
Sickness Entitlement Engine.

Allocates each sickness absence to full pay, half pay, no pay and unpaid
waiting days under a tiered company sick pay scheme with a rolling
12-month entitlement window.

Contract:
    ``SicknessEntitlementEngine.allocate`` is a pure function of the record
    set, the scheme, the hire date and the reference date.  Records are
    processed in a total chronological order (start date, end date,
    record id) as a fold over an explicit ``AllocationState``; results are
    returned in the caller's input order.

Guarantees:
    - Records with no day inside the rolling window are historical: no pay
      impact, every day reported as no pay, and the running counter is
      untouched.
    - The tier is chosen by service length at each record's start date.
    - Waiting days (up to 3) apply only when the tier has them and the
      absence does not continue the previous one (start on or before the
      day after the latest previous end).
    - ``full + half + no_pay + waiting == total_days`` for every allocation.
    - Available full pay is ``max(0, full - used)``; available half pay is
      ``max(0, half - max(0, used - full))``.
    - An ``OpeningBalance`` dated inside the window starts ``used`` at the
      days it carries over.  Records it already covers must not be passed
      in as well.
    - Records may not overlap one another; an overlap raises
      ``InvalidSicknessRecordError`` naming the later record.

Non-goals:
    - Pay amounts.  The engine allocates days; valuing them is a pay-run
      concern.
    - Statutory sick pay (see ``payroll_engines.ssp``).

Usage:
    engine = SicknessEntitlementEngine()
    allocations = engine.allocate(
        records=records,
        scheme=scheme,
        hire_date=date(2022, 9, 20),
        reference_date=date(2025, 7, 14),
    )
"""

from __future__ import annotations

import calendar
from collections.abc import Sequence
from dataclasses import dataclass, replace
from datetime import date, timedelta

from payroll_engines.eligibility import (
    DEFAULT_WORKING_DAYS_PER_WEEK,
    EligibilityRule,
    SicknessScheme,
    service_months_at,
)
from payroll_engines.tracer import traced_engine
from payroll_kernel.exceptions import (
    EligibilityRuleNotFoundError,
    InvalidSicknessRecordError,
)
from payroll_kernel.logging_config import get_logger

logger = get_logger("engines.sickness")

MAX_WAITING_DAYS = 3
ROLLING_WINDOW_MONTHS = 12


@dataclass(frozen=True)
class SicknessRecord:
    """One absence.  ``end_date`` is None while the absence is ongoing."""

    record_id: str
    start_date: date
    end_date: date | None
    total_days: int

    def __post_init__(self) -> None:
        if self.total_days < 0:
            raise InvalidSicknessRecordError(self.record_id, "total_days cannot be negative")
        if self.end_date is not None and self.end_date < self.start_date:
            raise InvalidSicknessRecordError(self.record_id, "end_date is before start_date")

    @property
    def is_ongoing(self) -> bool:
        return self.end_date is None


@dataclass(frozen=True)
class OpeningBalance:
    """
    Sick days already taken before records were kept here, for example
    under a previous payroll provider, counted up to ``as_of``.
    """

    full_pay_days: int
    half_pay_days: int
    as_of: date
    notes: str | None = None

    def __post_init__(self) -> None:
        if self.full_pay_days < 0 or self.half_pay_days < 0:
            raise ValueError("Opening balance days cannot be negative")

    @property
    def days_used(self) -> int:
        return self.full_pay_days + self.half_pay_days


@dataclass(frozen=True)
class RollingWindow:
    """Inclusive date range ``[start, end]``."""

    start: date
    end: date

    def __post_init__(self) -> None:
        if self.end < self.start:
            raise ValueError("Rolling window end is before its start")

    @classmethod
    def ending_on(cls, reference_date: date, months: int = ROLLING_WINDOW_MONTHS) -> RollingWindow:
        """The window of ``months`` months up to and including ``reference_date``."""
        return cls(start=subtract_months(reference_date, months), end=reference_date)

    def contains(self, on_date: date) -> bool:
        return self.start <= on_date <= self.end

    def overlaps(self, record: SicknessRecord) -> bool:
        """True when any day of ``record`` falls inside the window."""
        if record.start_date > self.end:
            return False
        last_day = record.end_date if record.end_date is not None else self.end
        return last_day >= self.start


@dataclass(frozen=True)
class EntitlementAllocation:
    """How one record's days were paid."""

    record_id: str
    total_days: int
    full_pay_days: int
    half_pay_days: int
    no_pay_days: int
    waiting_days: int
    is_historical: bool
    description: str
    service_months: int | None = None
    rule: EligibilityRule | None = None

    def __post_init__(self) -> None:
        parts = (self.full_pay_days, self.half_pay_days, self.no_pay_days, self.waiting_days)
        if any(p < 0 for p in parts):
            raise ValueError(f"Negative day count in allocation for {self.record_id}")
        if sum(parts) != self.total_days:
            raise ValueError(
                f"Allocation for {self.record_id} does not account for "
                f"{self.total_days} days: {parts}"
            )

    @property
    def paid_days(self) -> int:
        return self.full_pay_days + self.half_pay_days


@dataclass(frozen=True)
class AllocationState:
    """
    Accumulator threaded through the allocation fold.

    ``cumulative_total_days`` counts the non-waiting days of in-window
    records processed so far.  ``latest_end`` is the latest end date of any
    record processed so far (``date.max`` while one is ongoing).
    """

    cumulative_total_days: int = 0
    latest_end: date | None = None


@dataclass(frozen=True)
class EntitlementSummary:
    """Entitlement position at a reference date."""

    reference_date: date
    window: RollingWindow
    service_months: int
    rule: EligibilityRule
    full_pay_entitlement: int
    half_pay_entitlement: int
    days_used: int
    full_pay_used: int
    half_pay_used: int
    full_pay_remaining: int
    half_pay_remaining: int
    full_pay_days_paid: int
    half_pay_days_paid: int
    waiting_days: int
    opening_balance_days: int = 0


def subtract_months(on_date: date, months: int) -> date:
    """``on_date`` moved back ``months`` months, clamped to month end."""
    total = on_date.year * 12 + (on_date.month - 1) - months
    year, month = divmod(total, 12)
    month += 1
    day = min(on_date.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def available_capacity(cumulative_days: int, full_days: int, half_days: int) -> tuple[int, int]:
    """Full and half pay days still available after ``cumulative_days`` used."""
    full_available = max(0, full_days - cumulative_days)
    half_available = max(0, half_days - max(0, cumulative_days - full_days))
    return full_available, half_available


def _days(count: int) -> str:
    return f"{count} day" if count == 1 else f"{count} days"


def describe_allocation(
    full_pay_days: int,
    half_pay_days: int,
    no_pay_days: int,
    waiting_days: int,
    is_historical: bool = False,
) -> str:
    """Human-readable summary such as ``"3 days Full, 2 days No Pay"``."""
    if is_historical:
        return "Historical"
    total = full_pay_days + half_pay_days + no_pay_days + waiting_days
    if total == 0:
        return "No Days"
    if full_pay_days == total:
        return "Full Pay"
    if half_pay_days == total:
        return "Half Pay"
    if no_pay_days == total:
        return "No Pay"

    parts = []
    if waiting_days:
        parts.append(f"{_days(waiting_days)} Waiting")
    if full_pay_days:
        parts.append(f"{_days(full_pay_days)} Full")
    if half_pay_days:
        parts.append(f"{_days(half_pay_days)} Half")
    if no_pay_days:
        parts.append(f"{_days(no_pay_days)} No Pay")
    return ", ".join(parts)


def is_continuous(state: AllocationState, record: SicknessRecord) -> bool:
    """Whether ``record`` starts no later than the day after the previous absence ended."""
    if state.latest_end is None:
        return False
    if state.latest_end == date.max:
        return True
    return record.start_date <= state.latest_end + timedelta(days=1)


def allocate_record(
    state: AllocationState,
    record: SicknessRecord,
    scheme: SicknessScheme,
    hire_date: date,
    window: RollingWindow,
    working_days_per_week: int = DEFAULT_WORKING_DAYS_PER_WEEK,
    max_waiting_days: int = MAX_WAITING_DAYS,
) -> tuple[EntitlementAllocation, AllocationState]:
    """
    One step of the allocation fold.

    Raises:
        InvalidSicknessRecordError: ``record`` starts on or before the end
            of an absence already processed.
        EligibilityRuleNotFoundError: no tier covers the service length at
            an in-window record's start date.
    """
    if state.latest_end is not None and record.start_date <= state.latest_end:
        ended = "is ongoing" if state.latest_end == date.max else f"ends {state.latest_end}"
        raise InvalidSicknessRecordError(
            record.record_id, f"overlaps an earlier absence that {ended}"
        )

    continuous = is_continuous(state, record)
    record_end = record.end_date if record.end_date is not None else date.max
    latest_end = record_end if state.latest_end is None else max(state.latest_end, record_end)

    if not window.overlaps(record):
        allocation = EntitlementAllocation(
            record_id=record.record_id,
            total_days=record.total_days,
            full_pay_days=0,
            half_pay_days=0,
            no_pay_days=record.total_days,
            waiting_days=0,
            is_historical=True,
            description=describe_allocation(0, 0, record.total_days, 0, is_historical=True),
        )
        return allocation, replace(state, latest_end=latest_end)

    months = service_months_at(hire_date, record.start_date)
    rule = scheme.rule_for(months)
    if rule is None:
        raise EligibilityRuleNotFoundError(
            months, record.start_date.isoformat(), record_id=record.record_id
        )

    waiting = 0
    if rule.has_waiting_days and not continuous:
        waiting = min(max_waiting_days, record.total_days)
    payable = record.total_days - waiting

    full_available, half_available = available_capacity(
        state.cumulative_total_days,
        rule.full_pay_days(working_days_per_week),
        rule.half_pay_days(working_days_per_week),
    )
    full = min(payable, full_available)
    half = min(payable - full, half_available)
    no_pay = payable - full - half

    allocation = EntitlementAllocation(
        record_id=record.record_id,
        total_days=record.total_days,
        full_pay_days=full,
        half_pay_days=half,
        no_pay_days=no_pay,
        waiting_days=waiting,
        is_historical=False,
        description=describe_allocation(full, half, no_pay, waiting),
        service_months=months,
        rule=rule,
    )
    new_state = AllocationState(
        cumulative_total_days=state.cumulative_total_days + payable,
        latest_end=latest_end,
    )
    return allocation, new_state


def opening_state(
    opening_balance: OpeningBalance | None, window: RollingWindow
) -> AllocationState:
    """Initial fold state; a balance dated outside the window is ignored."""
    if opening_balance is None or not window.contains(opening_balance.as_of):
        return AllocationState()
    return AllocationState(cumulative_total_days=opening_balance.days_used)


def chronological_key(record: SicknessRecord) -> tuple[date, date, str]:
    return (
        record.start_date,
        record.end_date if record.end_date is not None else date.max,
        record.record_id,
    )


class SicknessEntitlementEngine:
    """Rolling-window tiered sick pay allocator."""

    def __init__(
        self,
        working_days_per_week: int = DEFAULT_WORKING_DAYS_PER_WEEK,
        max_waiting_days: int = MAX_WAITING_DAYS,
    ):
        self._working_days_per_week = working_days_per_week
        self._max_waiting_days = max_waiting_days

    @traced_engine(
        "sickness_entitlement",
        "1.0",
        fingerprint_fields=(
            "records",
            "scheme",
            "hire_date",
            "reference_date",
            "opening_balance",
        ),
    )
    def allocate(
        self,
        *,
        records: Sequence[SicknessRecord],
        scheme: SicknessScheme,
        hire_date: date,
        reference_date: date,
        opening_balance: OpeningBalance | None = None,
    ) -> list[EntitlementAllocation]:
        """Allocate every record; results follow the input order."""
        window = RollingWindow.ending_on(reference_date)
        order = sorted(range(len(records)), key=lambda i: chronological_key(records[i]))

        results: dict[int, EntitlementAllocation] = {}
        state = opening_state(opening_balance, window)
        opening_days = state.cumulative_total_days
        for index in order:
            allocation, state = allocate_record(
                state,
                records[index],
                scheme,
                hire_date,
                window,
                self._working_days_per_week,
                self._max_waiting_days,
            )
            results[index] = allocation

        logger.info(
            "sickness_allocation_complete",
            extra={
                "scheme": scheme.name,
                "record_count": len(records),
                "window_start": window.start.isoformat(),
                "window_end": window.end.isoformat(),
                "opening_balance_days": opening_days,
                "cumulative_total_days": state.cumulative_total_days,
            },
        )
        return [results[i] for i in range(len(records))]

    def summarize(
        self,
        *,
        records: Sequence[SicknessRecord],
        scheme: SicknessScheme,
        hire_date: date,
        reference_date: date,
        opening_balance: OpeningBalance | None = None,
    ) -> EntitlementSummary:
        """
        Entitlement used and remaining under the tier in force on
        ``reference_date``.

        Days used, including any opening balance in the window, fill full
        pay entitlement first, then half pay.

        Raises:
            EligibilityRuleNotFoundError: no tier covers the service length
                on ``reference_date``.
        """
        allocations = self.allocate(
            records=records,
            scheme=scheme,
            hire_date=hire_date,
            reference_date=reference_date,
            opening_balance=opening_balance,
        )
        months = service_months_at(hire_date, reference_date)
        rule = scheme.rule_for(months)
        if rule is None:
            raise EligibilityRuleNotFoundError(months, reference_date.isoformat())

        window = RollingWindow.ending_on(reference_date)
        opening_days = opening_state(opening_balance, window).cumulative_total_days
        current = [a for a in allocations if not a.is_historical]
        used = opening_days + sum(a.total_days - a.waiting_days for a in current)
        full_entitlement = rule.full_pay_days(self._working_days_per_week)
        half_entitlement = rule.half_pay_days(self._working_days_per_week)
        full_used = min(used, full_entitlement)
        half_used = min(used - full_used, half_entitlement)

        return EntitlementSummary(
            reference_date=reference_date,
            window=window,
            service_months=months,
            rule=rule,
            full_pay_entitlement=full_entitlement,
            half_pay_entitlement=half_entitlement,
            days_used=used,
            full_pay_used=full_used,
            half_pay_used=half_used,
            full_pay_remaining=full_entitlement - full_used,
            half_pay_remaining=half_entitlement - half_used,
            full_pay_days_paid=sum(a.full_pay_days for a in current),
            half_pay_days_paid=sum(a.half_pay_days for a in current),
            waiting_days=sum(a.waiting_days for a in current),
            opening_balance_days=opening_days,
        )
