"""Tests for the engine tracer (PAYROLL_ENGINE_TRACE)."""

from datetime import date
from decimal import Decimal

from payroll_engines.cumulative_tax import CumulativeTaxCalculator
from payroll_engines.eligibility import EntitlementUnit
from payroll_engines.sickness import SicknessRecord
from payroll_engines.tracer import _canonicalize, compute_input_fingerprint, traced_engine


class TestFingerprint:
    def test_deterministic(self):
        kwargs = {"period": 3, "gross_pay_ytd": Decimal("100.00")}

        assert compute_input_fingerprint(("period", "gross_pay_ytd"), kwargs) == (
            compute_input_fingerprint(("period", "gross_pay_ytd"), dict(kwargs))
        )

    def test_sensitive_to_values(self):
        a = compute_input_fingerprint(("period",), {"period": 3})
        b = compute_input_fingerprint(("period",), {"period": 4})

        assert a != b
        assert len(a) == 16

    def test_missing_field_is_null(self):
        assert compute_input_fingerprint(("x",), {}) == compute_input_fingerprint(
            ("x",), {"x": None}
        )

    def test_canonical_forms(self):
        record = SicknessRecord("r1", date(2024, 1, 1), None, 2)

        assert _canonicalize(date(2024, 1, 1)) == "2024-01-01"
        assert _canonicalize(EntitlementUnit.WEEKS) == "weeks"
        assert _canonicalize({"b": 1, "a": 2}) == "{a:2,b:1}"
        assert _canonicalize(frozenset({2, 1})) == "[1,2]"
        assert "record_id:r1" in _canonicalize(record)


class TestTraceEmission:
    def test_decorated_function(self, read_logs):
        @traced_engine("demo", "2.0", fingerprint_fields=("x",))
        def double(*, x):
            return x * 2

        assert double(x=4) == 8

        (trace,) = [r for r in read_logs() if r["message"] == "PAYROLL_ENGINE_TRACE"]
        assert trace["engine_name"] == "demo"
        assert trace["engine_version"] == "2.0"
        assert trace["input_fingerprint"] == compute_input_fingerprint(("x",), {"x": 4})
        assert trace["function"].endswith("double")

    def test_calculator_is_traced(self, read_logs, ruk_bands):
        CumulativeTaxCalculator(ruk_bands).calculate(
            period=1,
            gross_pay_ytd=Decimal("1156.25"),
            tax_code="1257L",
            previous_tax_paid_ytd=Decimal("0"),
        )

        names = [r.get("engine_name") for r in read_logs() if r["message"] == "PAYROLL_ENGINE_TRACE"]
        assert names == ["cumulative_tax"]
