"""
Module: payroll_engines
Responsibility:
    Package entrypoint that re-exports the public symbols of the pure
    statutory calculation engines.  This is the import surface for
    ``payroll_services``.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import ``payroll_kernel`` (and sibling engine modules).
    MUST NOT import ``payroll_config`` or ``payroll_services``.

Invariants enforced:
    - Purity: engines NEVER call ``date.today()``; reference dates are
      explicit parameters.
    - Decimal-only arithmetic: floats are rejected at the boundary.
    - Determinism: identical inputs always produce identical outputs.

Audit relevance:
    Every engine entry point is traced via ``@traced_engine`` (see
    ``payroll_engines.tracer``), emitting PAYROLL_ENGINE_TRACE records with
    engine name, version, input fingerprint and duration.

Usage:
    from payroll_engines import CumulativeTaxCalculator, parse_tax_code
    from payroll_engines import SicknessEntitlementEngine, SicknessScheme
"""

from payroll_engines.cumulative_tax import (
    CumulativeTaxCalculator,
    calculate_cumulative_tax,
)
from payroll_engines.eligibility import (
    EligibilityRule,
    EntitlementUnit,
    SicknessScheme,
    convert_to_days,
    service_months_at,
)
from payroll_engines.income_tax import (
    BandCharge,
    PayPeriodTaxInput,
    TaxBasis,
    TaxResult,
)
from payroll_engines.non_cumulative_tax import (
    NonCumulativeTaxCalculator,
    calculate_non_cumulative_tax,
)
from payroll_engines.sickness import (
    AllocationState,
    EntitlementAllocation,
    EntitlementSummary,
    OpeningBalance,
    RollingWindow,
    SicknessEntitlementEngine,
    SicknessRecord,
    allocate_record,
    available_capacity,
    describe_allocation,
)
from payroll_engines.ssp import (
    MONDAY_TO_FRIDAY,
    SspUsage,
    StatutorySickPayCalculator,
)
from payroll_engines.tax_code import ParsedTaxCode, TaxCodeMode, parse_tax_code
from payroll_engines.tracer import traced_engine

__all__ = [
    # Tax
    "BandCharge",
    "CumulativeTaxCalculator",
    "NonCumulativeTaxCalculator",
    "ParsedTaxCode",
    "PayPeriodTaxInput",
    "TaxBasis",
    "TaxCodeMode",
    "TaxResult",
    "calculate_cumulative_tax",
    "calculate_non_cumulative_tax",
    "parse_tax_code",
    # Sickness
    "AllocationState",
    "EligibilityRule",
    "EntitlementAllocation",
    "EntitlementSummary",
    "EntitlementUnit",
    "OpeningBalance",
    "RollingWindow",
    "SicknessEntitlementEngine",
    "SicknessRecord",
    "SicknessScheme",
    "allocate_record",
    "available_capacity",
    "convert_to_days",
    "describe_allocation",
    "service_months_at",
    # Statutory sick pay
    "MONDAY_TO_FRIDAY",
    "SspUsage",
    "StatutorySickPayCalculator",
    # Tracing
    "traced_engine",
]
