"""
Property-based tests for sick pay allocation.

Properties:
- Every record's days are fully accounted for
- Allocation does not depend on the order records are supplied in
- Paid days never exceed the tier's entitlement
- An opening balance can only reduce paid days
- A duplicated absence is always rejected
- SSP never pays more than the statutory maximum per linked chain
"""

from datetime import date, timedelta
from decimal import Decimal

import pytest
from hypothesis import assume, given, settings
from hypothesis import strategies as st
from hypothesis.strategies import composite

from payroll_engines.eligibility import EligibilityRule, SicknessScheme
from payroll_engines.sickness import (
    OpeningBalance,
    SicknessEntitlementEngine,
    SicknessRecord,
    available_capacity,
)
from payroll_engines.ssp import StatutorySickPayCalculator
from payroll_kernel.domain.statutory import StatutorySickPayRates
from payroll_kernel.exceptions import InvalidSicknessRecordError

HIRE_DATE = date(2020, 1, 6)
REFERENCE_DATE = date(2025, 3, 31)


@composite
def sickness_records(draw, max_records=8):
    """Non-overlapping absences in date order; only the last may be ongoing."""
    count = draw(st.integers(min_value=0, max_value=max_records))
    records = []
    start = date(2023, 6, 1) + timedelta(days=draw(st.integers(min_value=0, max_value=60)))
    for index in range(count):
        length = draw(st.integers(min_value=0, max_value=30))
        end = start + timedelta(days=length)
        # roughly one in ten final absences is still open
        ongoing = index == count - 1 and draw(st.integers(min_value=0, max_value=9)) == 0
        total_days = draw(st.integers(min_value=0, max_value=length + 1))
        records.append(SicknessRecord(f"r{index}", start, None if ongoing else end, total_days))
        start = end + timedelta(days=1 + draw(st.integers(min_value=0, max_value=90)))
    return records


@composite
def schemes(draw):
    return SicknessScheme(
        rules=(
            EligibilityRule(
                0,
                Decimal(draw(st.integers(min_value=0, max_value=40))),
                Decimal(draw(st.integers(min_value=0, max_value=40))),
                has_waiting_days=draw(st.booleans()),
            ),
        )
    )


class TestAllocationProperties:
    @given(records=sickness_records(), scheme=schemes())
    @settings(max_examples=200)
    def test_days_conserved(self, records, scheme):
        allocations = SicknessEntitlementEngine().allocate(
            records=records,
            scheme=scheme,
            hire_date=HIRE_DATE,
            reference_date=REFERENCE_DATE,
        )

        assert [a.record_id for a in allocations] == [r.record_id for r in records]
        for record, allocation in zip(records, allocations):
            assert (
                allocation.full_pay_days
                + allocation.half_pay_days
                + allocation.no_pay_days
                + allocation.waiting_days
            ) == record.total_days

    @given(records=sickness_records(), scheme=schemes(), data=st.data())
    @settings(max_examples=200)
    def test_order_independent(self, records, scheme, data):
        engine = SicknessEntitlementEngine()
        shuffled = data.draw(st.permutations(records))

        original = engine.allocate(
            records=records, scheme=scheme, hire_date=HIRE_DATE, reference_date=REFERENCE_DATE
        )
        reordered = engine.allocate(
            records=shuffled, scheme=scheme, hire_date=HIRE_DATE, reference_date=REFERENCE_DATE
        )

        assert {a.record_id: a for a in original} == {a.record_id: a for a in reordered}

    @given(records=sickness_records(), scheme=schemes())
    @settings(max_examples=200)
    def test_entitlement_never_exceeded(self, records, scheme):
        (rule,) = scheme.rules
        allocations = SicknessEntitlementEngine().allocate(
            records=records,
            scheme=scheme,
            hire_date=HIRE_DATE,
            reference_date=REFERENCE_DATE,
        )

        assert sum(a.full_pay_days for a in allocations) <= rule.full_pay_days()
        assert sum(a.half_pay_days for a in allocations) <= rule.half_pay_days()

    @given(
        records=sickness_records(),
        scheme=schemes(),
        full=st.integers(min_value=0, max_value=40),
        half=st.integers(min_value=0, max_value=40),
    )
    @settings(max_examples=200)
    def test_opening_balance_never_adds_pay(self, records, scheme, full, half):
        engine = SicknessEntitlementEngine()
        balance = OpeningBalance(full_pay_days=full, half_pay_days=half, as_of=date(2024, 6, 1))

        without = engine.allocate(
            records=records, scheme=scheme, hire_date=HIRE_DATE, reference_date=REFERENCE_DATE
        )
        with_balance = engine.allocate(
            records=records,
            scheme=scheme,
            hire_date=HIRE_DATE,
            reference_date=REFERENCE_DATE,
            opening_balance=balance,
        )

        for plain, reduced in zip(without, with_balance):
            assert reduced.paid_days <= plain.paid_days
            assert reduced.waiting_days == plain.waiting_days

    @given(records=sickness_records(), scheme=schemes(), data=st.data())
    @settings(max_examples=100)
    def test_duplicated_record_rejected(self, records, scheme, data):
        assume(records)
        original = data.draw(st.sampled_from(records))
        duplicate = SicknessRecord(
            f"{original.record_id}-dup", original.start_date, original.end_date, original.total_days
        )

        with pytest.raises(InvalidSicknessRecordError):
            SicknessEntitlementEngine().allocate(
                records=[*records, duplicate],
                scheme=scheme,
                hire_date=HIRE_DATE,
                reference_date=REFERENCE_DATE,
            )

    @given(
        used=st.integers(min_value=0, max_value=1000),
        full=st.integers(min_value=0, max_value=500),
        half=st.integers(min_value=0, max_value=500),
    )
    def test_capacity_never_negative(self, used, full, half):
        full_available, half_available = available_capacity(used, full, half)

        assert 0 <= full_available <= full
        assert 0 <= half_available <= half


class TestStatutorySickPayProperties:
    @given(records=sickness_records(max_records=12))
    @settings(max_examples=100)
    def test_paid_days_bounded(self, records):
        calculator = StatutorySickPayCalculator(
            StatutorySickPayRates(weekly_rate=Decimal("116.75"))
        )

        usage = calculator.calculate_usage(
            records=records,
            range_start=date(2023, 6, 1),
            range_end=date(2025, 6, 30),
        )

        assert 0 <= usage.days_paid <= usage.entitled_days * max(usage.linked_chains, 1)
        assert usage.amount >= 0
