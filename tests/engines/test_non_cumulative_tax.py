"""
Tests for the Non-Cumulative (Week1/Month1) Tax Calculator.

Covers:
- Penny boundaries around monthly free pay and thresholds
- Higher and additional rate on monthly thresholds
- Flat-rate, NT, 0T and K codes
- Equivalence with cumulative period 1
"""

from decimal import Decimal

import pytest

from payroll_engines.cumulative_tax import CumulativeTaxCalculator
from payroll_engines.income_tax import TaxBasis
from payroll_engines.non_cumulative_tax import (
    NonCumulativeTaxCalculator,
    calculate_non_cumulative_tax,
)


class TestMonthOneBoundaries:
    """45L has exactly 38.25 monthly free pay."""

    @pytest.fixture(autouse=True)
    def _calculator(self, ruk_bands):
        self.calculator = NonCumulativeTaxCalculator(ruk_bands)

    @pytest.mark.parametrize(
        "gross, expected",
        [
            ("39.24", "0.00"),
            ("39.25", "0.20"),
            ("3164.24", "625.00"),
            ("3164.25", "625.20"),
            ("3179.25", "628.20"),
            ("3279.25", "668.20"),
            ("10566.25", "3588.00"),
        ],
    )
    def test_45l(self, gross, expected):
        result = self.calculator.calculate(
            gross_pay_this_period=Decimal(gross), tax_code="45L"
        )

        assert result.tax_this_period == Decimal(expected)
        assert result.tax_due_ytd == result.tax_this_period
        assert result.basis == TaxBasis.WEEK1_MONTH1

    def test_all_three_bands(self):
        result = self.calculator.calculate(
            gross_pay_this_period=Decimal("10566.25"), tax_code="45L"
        )

        assert [c.band_name for c in result.band_charges] == [
            "basic",
            "higher",
            "additional",
        ]
        assert [c.taxable_amount for c in result.band_charges] == [
            Decimal("3141"),
            Decimal("7287"),
            Decimal("100"),
        ]


class TestCodes:
    """Code types on the Week1/Month1 basis."""

    @pytest.fixture(autouse=True)
    def _calculator(self, ruk_bands):
        self.calculator = NonCumulativeTaxCalculator(ruk_bands)

    @pytest.mark.parametrize(
        "code, expected", [("BR", "19.80"), ("D0", "39.60"), ("D1", "44.55")]
    )
    def test_flat_rate(self, code, expected):
        result = self.calculator.calculate(
            gross_pay_this_period=Decimal("99.99"), tax_code=code
        )

        assert result.taxable_pay_ytd == Decimal("99")
        assert result.tax_this_period == Decimal(expected)

    def test_nt(self):
        result = self.calculator.calculate(
            gross_pay_this_period=Decimal("50000"), tax_code="NT"
        )

        assert result.tax_this_period == Decimal("0")

    def test_zero_t(self):
        result = self.calculator.calculate(
            gross_pay_this_period=Decimal("5000"), tax_code="0T"
        )

        assert result.taxable_pay_ytd == Decimal("5000")
        assert result.tax_this_period == Decimal("1371.80")

    def test_1257l(self):
        result = self.calculator.calculate(
            gross_pay_this_period=Decimal("2000"), tax_code="1257L"
        )

        assert result.taxable_pay_ytd == Decimal("951")
        assert result.tax_this_period == Decimal("190.20")

    def test_k_codes(self):
        assert self.calculator.calculate(
            gross_pay_this_period=Decimal("500"), tax_code="K497"
        ).tax_this_period == Decimal("182.80")
        assert self.calculator.calculate(
            gross_pay_this_period=Decimal("0"), tax_code="K100"
        ).tax_this_period == Decimal("16.80")

    def test_never_negative(self):
        result = self.calculator.calculate(
            gross_pay_this_period=Decimal("-250"), tax_code="1257L"
        )

        assert result.taxable_pay_ytd == Decimal("0")
        assert result.tax_this_period == Decimal("0")
        assert not result.is_refund

    def test_period_is_reported_only(self):
        a = self.calculator.calculate(
            gross_pay_this_period=Decimal("2500"), tax_code="1257L", period=3
        )
        b = self.calculator.calculate(
            gross_pay_this_period=Decimal("2500"), tax_code="1257L", period=11
        )

        assert a.tax_this_period == b.tax_this_period
        assert (a.period, b.period) == (3, 11)


class TestEquivalence:
    """Week1/Month1 equals cumulative period 1 with nothing paid."""

    @pytest.mark.parametrize("code", ["1257L", "45L", "0T", "K497", "BR", "D1", "NT"])
    @pytest.mark.parametrize("gross", ["0", "1156.25", "3164.25", "10566.25", "25000"])
    def test_matches_cumulative_period_one(self, ruk_bands, code, gross):
        non_cumulative = NonCumulativeTaxCalculator(ruk_bands).calculate(
            gross_pay_this_period=Decimal(gross), tax_code=code
        )
        cumulative = CumulativeTaxCalculator(ruk_bands).calculate(
            period=1,
            gross_pay_ytd=Decimal(gross),
            tax_code=code,
            previous_tax_paid_ytd=Decimal("0"),
        )

        assert non_cumulative.tax_this_period == cumulative.tax_this_period

    def test_convenience_function(self, ruk_bands):
        assert calculate_non_cumulative_tax(
            Decimal("39.25"), "45L", ruk_bands
        ) == Decimal("0.20")


class TestScottishBands:
    """Regional tables come from configuration."""

    def test_scottish_month_one(self, config_2024):
        calculator = NonCumulativeTaxCalculator(config_2024.bands("scotland"))

        result = calculator.calculate(
            gross_pay_this_period=Decimal("3000"), tax_code="1257L"
        )

        assert result.taxable_pay_ytd == Decimal("1951")
        assert [c.band_name for c in result.band_charges] == [
            "starter",
            "basic",
            "intermediate",
        ]
        assert result.tax_this_period == Decimal("396.14")
