"""
payroll_config -- single public entrypoint for statutory payroll rates.

Responsibility:
    Provides the ONLY way to obtain tax bands and statutory sick pay
    constants at runtime, through ``get_tax_year_config()``.  Engines never
    read configuration; callers pass them the band table or rate object
    for the tax year in question.

Architecture position:
    Configuration -- YAML-driven, one file per tax year under
    ``payroll_config/tax_years/``.  Sits above ``payroll_kernel`` and below
    ``payroll_services``.  The kernel and engines MUST NEVER import from
    ``payroll_config``.

Invariants enforced:
    - Single entrypoint: all runtime rates flow through
      ``get_tax_year_config()``.
    - Tax years run from 6 April to 5 April; ``tax_year_for_date`` applies
      that boundary.
    - Deterministic: the same YAML always produces the same checksum.

Failure modes:
    - ``TaxYearNotConfiguredError`` -- no file for the requested year.
    - ``ValueError`` / ``KeyError`` -- malformed configuration.

Audit relevance:
    Every successful ``get_tax_year_config()`` call emits a
    ``PAYROLL_CONFIG_TRACE`` log entry with the tax year, regions and
    checksum, tying each calculation to the exact rates that governed it.
"""

from __future__ import annotations

from datetime import date
from pathlib import Path

from payroll_config.loader import discover_tax_years, load_tax_year
from payroll_config.schema import DEFAULT_REGION, TaxYearConfig
from payroll_kernel.exceptions import TaxYearNotConfiguredError
from payroll_kernel.logging_config import get_logger

_logger = get_logger("config")

# Default tax year directory
_DEFAULT_CONFIG_DIR = Path(__file__).parent / "tax_years"

TAX_YEAR_START_MONTH = 4
TAX_YEAR_START_DAY = 6


def tax_year_for_date(on_date: date) -> str:
    """Label of the tax year containing ``on_date``, e.g. ``"2024-25"``."""
    start_year = on_date.year
    if (on_date.month, on_date.day) < (TAX_YEAR_START_MONTH, TAX_YEAR_START_DAY):
        start_year -= 1
    return f"{start_year}-{(start_year + 1) % 100:02d}"


def tax_period_for_date(on_date: date) -> int:
    """Monthly pay period (1..12) containing ``on_date``; month 1 starts 6 April."""
    months = on_date.month - TAX_YEAR_START_MONTH
    if on_date.day < TAX_YEAR_START_DAY:
        months -= 1
    return months % 12 + 1


def available_tax_years(config_dir: Path | None = None) -> tuple[str, ...]:
    """Tax years with a configuration file, oldest first."""
    return tuple(discover_tax_years(config_dir or _DEFAULT_CONFIG_DIR))


def get_tax_year_config(
    tax_year: str,
    config_dir: Path | None = None,
) -> TaxYearConfig:
    """The ONLY public configuration entrypoint.

    Guarantees:
        - The returned ``TaxYearConfig`` has passed schema validation and
          its ``tax_year`` matches the requested label.
        - A ``PAYROLL_CONFIG_TRACE`` log entry is emitted on every
          successful call.

    Non-goals:
        - No caching across calls; callers hold the config for the
          duration of a pay run.

    Args:
        tax_year: Label such as ``"2024-25"``.
        config_dir: Override path to the tax year directory.
            Defaults to payroll_config/tax_years/.

    Raises:
        TaxYearNotConfiguredError: If no file exists for ``tax_year``.
        ValueError: If the file fails validation or is mislabelled.
    """
    years = discover_tax_years(config_dir or _DEFAULT_CONFIG_DIR)
    path = years.get(tax_year)
    if path is None:
        raise TaxYearNotConfiguredError(tax_year, tuple(years))

    config = load_tax_year(path)
    if config.tax_year != tax_year:
        raise ValueError(
            f"{path.name} declares tax year {config.tax_year}, expected {tax_year}"
        )

    _logger.info(
        "PAYROLL_CONFIG_TRACE",
        extra={
            "trace_type": "PAYROLL_CONFIG_TRACE",
            "config_tax_year": config.tax_year,
            "config_source": path.name,
            "checksum": config.checksum,
            "regions": list(config.regions),
            "standard_tax_code": config.standard_tax_code,
            "ssp_weekly_rate": str(config.sick_pay.weekly_rate),
        },
    )
    return config


def get_tax_year_config_for_date(
    on_date: date,
    config_dir: Path | None = None,
) -> TaxYearConfig:
    """Configuration for the tax year containing ``on_date``."""
    return get_tax_year_config(tax_year_for_date(on_date), config_dir)


__all__ = [
    "DEFAULT_REGION",
    "TaxYearConfig",
    "available_tax_years",
    "get_tax_year_config",
    "get_tax_year_config_for_date",
    "tax_period_for_date",
    "tax_year_for_date",
]
