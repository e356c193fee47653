"""
Typed Exception Hierarchy for the Payroll Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

A payroll run touches hundreds of employees. When one of them has a tax
code nobody recognises, or a sickness absence that falls outside every
configured eligibility tier, the run must stop for that employee with an
error the caller can act on. Parsing messages is fragile, so:

  1. Every error has a TYPED exception class (catch by type, not message)
  2. Every exception has a CODE attribute (machine-readable, API-safe)
  3. Exceptions carry structured DATA (not just a message string)

Example:
    try:
        result = calculator.calculate(period=3, gross_pay_ytd=..., ...)
    except InvalidTaxCodeError as e:
        flag_for_review(employee_id, code=e.code, tax_code=e.tax_code)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    PayrollKernelError (base)
    |
    +-- TaxCalculationError
    |   +-- InvalidTaxCodeError
    |   +-- InvalidPeriodError
    |
    +-- SicknessError
    |   +-- EligibilityRuleNotFoundError
    |   +-- InvalidSicknessRecordError
    |
    +-- ConfigurationError
        +-- TaxYearNotConfiguredError
        +-- RegionNotConfiguredError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                        | When Raised
----------------|-----------------------------|-----------------------------------------
Tax             | INVALID_TAX_CODE            | Code matches no recognised pattern
                | INVALID_PERIOD              | Pay period outside 1..12
----------------|-----------------------------|-----------------------------------------
Sickness        | ELIGIBILITY_RULE_NOT_FOUND  | No tier covers the service length
                | INVALID_SICKNESS_RECORD     | Record data is inconsistent
----------------|-----------------------------|-----------------------------------------
Configuration   | TAX_YEAR_NOT_CONFIGURED     | No rule set for the tax year
                | REGION_NOT_CONFIGURED       | No band table for the region

===============================================================================
DESIGN DECISIONS
===============================================================================

1. Inherit from Exception, not ValueError. Domain errors are catchable as
   a group and stay separate from programming errors. Value objects that
   reject bad constructor arguments still raise ValueError.

2. No silent defaults. An unrecognised tax code is never treated as the
   standard personal allowance; a missing eligibility tier is never
   treated as "no entitlement".

===============================================================================
"""


class PayrollKernelError(Exception):
    """
    Base exception for all payroll kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "PAYROLL_KERNEL_ERROR"


# Tax calculation exceptions


class TaxCalculationError(PayrollKernelError):
    """Base exception for income tax calculation errors."""

    code: str = "TAX_CALCULATION_ERROR"


class InvalidTaxCodeError(TaxCalculationError):
    """Tax code does not match any recognised pattern."""

    code: str = "INVALID_TAX_CODE"

    def __init__(self, tax_code: str, reason: str = "unrecognised format"):
        self.tax_code = tax_code
        self.reason = reason
        super().__init__(f"Invalid tax code {tax_code!r}: {reason}")


class InvalidPeriodError(TaxCalculationError):
    """Pay period number is outside the tax year."""

    code: str = "INVALID_PERIOD"

    def __init__(self, period: int, max_period: int = 12):
        self.period = period
        self.max_period = max_period
        super().__init__(
            f"Pay period {period} is outside the range 1..{max_period}"
        )


# Sickness exceptions


class SicknessError(PayrollKernelError):
    """Base exception for sick pay entitlement errors."""

    code: str = "SICKNESS_ERROR"


class EligibilityRuleNotFoundError(SicknessError):
    """No eligibility tier covers the employee's service length."""

    code: str = "ELIGIBILITY_RULE_NOT_FOUND"

    def __init__(self, service_months: int, as_of: str, record_id: str | None = None):
        self.service_months = service_months
        self.as_of = as_of
        self.record_id = record_id
        super().__init__(
            f"No eligibility rule covers {service_months} months of service "
            f"as of {as_of}"
        )


class InvalidSicknessRecordError(SicknessError):
    """Sickness record data is inconsistent."""

    code: str = "INVALID_SICKNESS_RECORD"

    def __init__(self, record_id: str, reason: str):
        self.record_id = record_id
        self.reason = reason
        super().__init__(f"Invalid sickness record {record_id}: {reason}")


# Configuration exceptions


class ConfigurationError(PayrollKernelError):
    """Base exception for statutory configuration errors."""

    code: str = "CONFIGURATION_ERROR"


class TaxYearNotConfiguredError(ConfigurationError):
    """No rule set is available for the requested tax year."""

    code: str = "TAX_YEAR_NOT_CONFIGURED"

    def __init__(self, tax_year: str, available: tuple[str, ...] = ()):
        self.tax_year = tax_year
        self.available = available
        super().__init__(
            f"Tax year {tax_year} is not configured "
            f"(available: {', '.join(available) or 'none'})"
        )


class RegionNotConfiguredError(ConfigurationError):
    """The tax year has no band table for the requested region."""

    code: str = "REGION_NOT_CONFIGURED"

    def __init__(self, region: str, tax_year: str):
        self.region = region
        self.tax_year = tax_year
        super().__init__(
            f"No tax band table for region {region!r} in tax year {tax_year}"
        )
