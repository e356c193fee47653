"""
Tax Code Interpreter.

Pure functions that turn a PAYE tax code string into the values the tax
calculators need: the annual allowance, the monthly free pay and the
calculation mode.

Contract:
    ``parse_tax_code`` is total over valid codes and raises
    ``InvalidTaxCodeError`` for everything else.  There is no fallback to
    the standard personal allowance.

Guarantees:
    - Parsing is case-insensitive and whitespace-tolerant; the canonical
      code is uppercase.
    - ``monthly_free_pay`` for ``<n><L|M|N|T>`` is ``(n*10 + 9) / 12``
      rounded UP to the penny; K codes carry the negated figure.
    - ``NT`` has infinite allowance and free pay.

Non-goals:
    - Scottish and Welsh prefixes (S, C) are not recognised; regional bands
      are selected by the caller, not by the code.

Usage:
    from payroll_engines.tax_code import parse_tax_code

    code = parse_tax_code("1257L")
    code.monthly_free_pay   # Decimal("1048.25")
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from payroll_kernel.domain.statutory import PERIODS_PER_YEAR
from payroll_kernel.domain.values import INFINITY, ZERO, round_up_to_penny
from payroll_kernel.exceptions import InvalidTaxCodeError
from payroll_kernel.logging_config import get_logger

logger = get_logger("engines.tax_code")

FLAT_RATE_CODES = frozenset({"BR", "D0", "D1"})
NO_TAX_CODE = "NT"

_STANDARD_PATTERN = re.compile(r"^(\d+)([LMNT])$")
_K_PATTERN = re.compile(r"^K(\d+)$")
_EMERGENCY_PATTERN = re.compile(r"^(?P<code>\S+?)(?:\s+|/)(?P<marker>W1|M1|X)$")


class TaxCodeMode(str, Enum):
    """How a tax code drives the calculation."""

    STANDARD = "standard"
    NEGATIVE_ALLOWANCE = "negative_allowance"
    FLAT_RATE = "flat_rate"
    NO_TAX = "no_tax"


@dataclass(frozen=True)
class ParsedTaxCode:
    """An interpreted tax code."""

    code: str
    mode: TaxCodeMode
    allowance: Decimal
    monthly_free_pay: Decimal
    numeric_part: int | None = None
    prefix: str | None = None
    suffix: str | None = None
    emergency_basis: bool = False

    @property
    def special(self) -> str | None:
        """The code itself for BR/D0/D1/NT, otherwise None."""
        if self.mode in (TaxCodeMode.FLAT_RATE, TaxCodeMode.NO_TAX):
            return self.code
        return None

    @property
    def is_flat_rate(self) -> bool:
        return self.mode == TaxCodeMode.FLAT_RATE

    @property
    def is_no_tax(self) -> bool:
        return self.mode == TaxCodeMode.NO_TAX

    def free_pay_for_periods(self, periods: int) -> Decimal:
        """Free pay accrued over ``periods`` monthly periods."""
        if periods < 1:
            raise ValueError("periods must be at least 1")
        return self.monthly_free_pay * periods


def monthly_free_pay_for(numeric_part: int) -> Decimal:
    """Monthly free pay for a code number: (n*10 + 9) / 12, rounded up to the penny."""
    annual = Decimal(numeric_part * 10 + 9)
    return round_up_to_penny(annual / PERIODS_PER_YEAR)


def normalize_tax_code(code: str) -> str:
    """Uppercase and collapse whitespace."""
    return " ".join(code.split()).upper()


def parse_tax_code(code: str) -> ParsedTaxCode:
    """
    Interpret a tax code.

    Raises:
        InvalidTaxCodeError: if the code is empty or matches no pattern.
    """
    if not isinstance(code, str):
        raise InvalidTaxCodeError(repr(code), "tax code must be a string")

    normalized = normalize_tax_code(code)
    if not normalized:
        raise InvalidTaxCodeError(code, "tax code is empty")

    emergency = False
    marker = _EMERGENCY_PATTERN.match(normalized)
    if marker:
        normalized = marker.group("code")
        emergency = True

    parsed = _parse_base_code(normalized, original=code)
    if emergency:
        parsed = ParsedTaxCode(
            code=parsed.code,
            mode=parsed.mode,
            allowance=parsed.allowance,
            monthly_free_pay=parsed.monthly_free_pay,
            numeric_part=parsed.numeric_part,
            prefix=parsed.prefix,
            suffix=parsed.suffix,
            emergency_basis=True,
        )

    logger.debug(
        "tax_code_parsed",
        extra={
            "tax_code": parsed.code,
            "mode": parsed.mode.value,
            "monthly_free_pay": str(parsed.monthly_free_pay),
            "emergency_basis": parsed.emergency_basis,
        },
    )
    return parsed


def _parse_base_code(normalized: str, original: str) -> ParsedTaxCode:
    if normalized in FLAT_RATE_CODES:
        return ParsedTaxCode(
            code=normalized,
            mode=TaxCodeMode.FLAT_RATE,
            allowance=ZERO,
            monthly_free_pay=ZERO,
        )

    if normalized == NO_TAX_CODE:
        return ParsedTaxCode(
            code=normalized,
            mode=TaxCodeMode.NO_TAX,
            allowance=INFINITY,
            monthly_free_pay=INFINITY,
        )

    match = _STANDARD_PATTERN.match(normalized)
    if match:
        number = int(match.group(1))
        return ParsedTaxCode(
            code=normalized,
            mode=TaxCodeMode.STANDARD,
            allowance=Decimal(number * 10),
            # 0T and friends carry no free pay at all
            monthly_free_pay=monthly_free_pay_for(number) if number else ZERO,
            numeric_part=number,
            suffix=match.group(2),
        )

    match = _K_PATTERN.match(normalized)
    if match:
        number = int(match.group(1))
        return ParsedTaxCode(
            code=normalized,
            mode=TaxCodeMode.NEGATIVE_ALLOWANCE,
            allowance=Decimal(-number * 10),
            monthly_free_pay=-monthly_free_pay_for(number) if number else ZERO,
            numeric_part=number,
            prefix="K",
        )

    raise InvalidTaxCodeError(original)
