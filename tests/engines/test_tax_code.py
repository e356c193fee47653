"""
Tests for the Tax Code Interpreter.

Covers:
- Standard suffix codes and the rounded-up monthly free pay
- K codes (negative allowance)
- Flat-rate and no-tax codes
- Normalization and Week1/Month1 markers
- Rejection of unrecognised codes
"""

from decimal import Decimal

import pytest

from payroll_engines.tax_code import (
    ParsedTaxCode,
    TaxCodeMode,
    monthly_free_pay_for,
    parse_tax_code,
)
from payroll_kernel.exceptions import InvalidTaxCodeError


class TestStandardCodes:
    """Tests for <digits><L|M|N|T> codes."""

    def test_1257l(self):
        """The standard personal allowance code."""
        code = parse_tax_code("1257L")

        assert code.code == "1257L"
        assert code.mode == TaxCodeMode.STANDARD
        assert code.allowance == Decimal("12570")
        assert code.monthly_free_pay == Decimal("1048.25")
        assert code.numeric_part == 1257
        assert code.suffix == "L"
        assert code.prefix is None
        assert code.special is None

    def test_free_pay_rounds_up_to_penny(self):
        """(n*10 + 9) / 12 is rounded up, never to nearest."""
        assert parse_tax_code("1L").monthly_free_pay == Decimal("1.59")
        assert parse_tax_code("100L").monthly_free_pay == Decimal("84.09")

    def test_exact_twelfth_is_not_rounded(self):
        """45L gives exactly 459 / 12 = 38.25."""
        assert parse_tax_code("45L").monthly_free_pay == Decimal("38.25")

    @pytest.mark.parametrize("suffix", ["L", "M", "N", "T"])
    def test_all_suffixes_accepted(self, suffix):
        code = parse_tax_code(f"1257{suffix}")

        assert code.suffix == suffix
        assert code.monthly_free_pay == Decimal("1048.25")

    def test_zero_t_has_no_free_pay(self):
        """0T is banded but carries no allowance."""
        code = parse_tax_code("0T")

        assert code.mode == TaxCodeMode.STANDARD
        assert code.allowance == Decimal("0")
        assert code.monthly_free_pay == Decimal("0")

    def test_free_pay_for_periods(self):
        code = parse_tax_code("1257L")

        assert code.free_pay_for_periods(1) == Decimal("1048.25")
        assert code.free_pay_for_periods(12) == Decimal("12579.00")

    def test_free_pay_for_zero_periods_rejected(self):
        with pytest.raises(ValueError):
            parse_tax_code("1257L").free_pay_for_periods(0)


class TestKCodes:
    """Tests for K (negative allowance) codes."""

    def test_k497(self):
        code = parse_tax_code("K497")

        assert code.mode == TaxCodeMode.NEGATIVE_ALLOWANCE
        assert code.allowance == Decimal("-4970")
        assert code.monthly_free_pay == Decimal("-414.92")
        assert code.prefix == "K"
        assert code.numeric_part == 497

    def test_k_free_pay_mirrors_standard_code(self):
        """K100 free pay is the negation of 100L free pay."""
        assert parse_tax_code("K100").monthly_free_pay == -parse_tax_code(
            "100L"
        ).monthly_free_pay

    def test_k_free_pay_accrues_negatively(self):
        assert parse_tax_code("K497").free_pay_for_periods(3) == Decimal("-1244.76")


class TestSpecialCodes:
    """Tests for BR, D0, D1 and NT."""

    @pytest.mark.parametrize("raw", ["BR", "D0", "D1"])
    def test_flat_rate_codes(self, raw):
        code = parse_tax_code(raw)

        assert code.mode == TaxCodeMode.FLAT_RATE
        assert code.is_flat_rate
        assert code.special == raw
        assert code.allowance == Decimal("0")
        assert code.monthly_free_pay == Decimal("0")

    def test_nt_has_infinite_free_pay(self):
        code = parse_tax_code("NT")

        assert code.mode == TaxCodeMode.NO_TAX
        assert code.is_no_tax
        assert code.special == "NT"
        assert code.allowance.is_infinite()
        assert code.monthly_free_pay.is_infinite()
        assert code.free_pay_for_periods(6).is_infinite()


class TestNormalization:
    """Tests for case, whitespace and emergency markers."""

    def test_case_and_whitespace(self):
        code = parse_tax_code("  1257l ")

        assert code.code == "1257L"

    def test_lowercase_special(self):
        assert parse_tax_code("br").code == "BR"
        assert parse_tax_code("nt").code == "NT"
        assert parse_tax_code("k497").code == "K497"

    @pytest.mark.parametrize("raw", ["1257L M1", "1257L W1", "1257L X", "1257L/M1", "1257l  m1"])
    def test_emergency_markers(self, raw):
        code = parse_tax_code(raw)

        assert code.code == "1257L"
        assert code.emergency_basis is True
        assert code.monthly_free_pay == Decimal("1048.25")

    def test_plain_code_is_cumulative(self):
        assert parse_tax_code("1257L").emergency_basis is False

    def test_flat_rate_with_marker(self):
        code = parse_tax_code("BR M1")

        assert code.code == "BR"
        assert code.emergency_basis is True


class TestInvalidCodes:
    """Unrecognised codes raise instead of defaulting."""

    @pytest.mark.parametrize(
        "raw",
        ["", "   ", "ABC", "1257", "K", "L", "12.5L", "KBR", "1257LX", "D2", "S1257L"],
    )
    def test_rejected(self, raw):
        with pytest.raises(InvalidTaxCodeError) as exc_info:
            parse_tax_code(raw)

        assert exc_info.value.code == "INVALID_TAX_CODE"
        assert exc_info.value.tax_code == raw

    def test_non_string_rejected(self):
        with pytest.raises(InvalidTaxCodeError):
            parse_tax_code(1257)


class TestMonthlyFreePayFor:
    """Tests for the free pay table formula."""

    def test_formula(self):
        assert monthly_free_pay_for(1257) == Decimal("1048.25")
        assert monthly_free_pay_for(45) == Decimal("38.25")

    def test_returns_two_decimal_places(self):
        assert monthly_free_pay_for(1).as_tuple().exponent == -2

    def test_parsed_code_is_frozen(self):
        code = parse_tax_code("1257L")

        assert isinstance(code, ParsedTaxCode)
        with pytest.raises(AttributeError):
            code.allowance = Decimal("0")
