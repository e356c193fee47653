"""
Configuration Loader (``payroll_config.loader``).

Responsibility
--------------
Loads tax year YAML files and parses them into ``TaxYearConfig``
instances.  Runtime callers go through
``payroll_config.get_tax_year_config()``; this module is its internal
tooling and the place tests use to load ad-hoc fixture files.

Architecture position
---------------------
**Config layer**.  Depends on ``payroll_kernel`` value objects; never on
engines or services.

Invariants enforced
-------------------
* No silent defaults for required fields: missing keys raise ``KeyError``.
* Money and rates must be quoted strings or integers.  A YAML float such
  as ``0.2`` is rejected so that no binary fraction reaches a rate.
* ``compute_checksum`` produces a deterministic SHA-256 hash of the
  parsed source for configuration identity.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing required keys  -> ``KeyError`` propagates.
* Invalid values  -> ``ValueError`` from parsing or value-object
  validation.
"""

from __future__ import annotations

import hashlib
import json
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Any

import yaml

from payroll_config.schema import TAX_YEAR_PATTERN, TaxYearConfig
from payroll_kernel.domain.statutory import (
    StatutorySickPayRates,
    TaxBand,
    TaxBandTable,
)
from payroll_kernel.domain.values import to_amount


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def parse_date(value: Any) -> date:
    """Parse a date from YAML (string or date object)."""
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return date.fromisoformat(value)
    raise ValueError(f"Cannot parse date from {value!r}")


def parse_decimal(value: Any, field_name: str) -> Decimal:
    """Parse an exact decimal from a quoted string or an integer."""
    if isinstance(value, float):
        raise ValueError(
            f"{field_name} must be quoted in YAML to stay exact, got float {value!r}"
        )
    try:
        return to_amount(value)
    except TypeError as e:
        raise ValueError(f"{field_name} has unsupported value {value!r}") from e


def parse_band(data: dict[str, Any]) -> TaxBand:
    """Parse a TaxBand from a dict."""
    upper = data.get("upper_threshold")
    return TaxBand(
        name=data["name"],
        rate=parse_decimal(data["rate"], f"band {data['name']} rate"),
        upper_threshold=(
            parse_decimal(upper, f"band {data['name']} upper_threshold")
            if upper is not None
            else None
        ),
    )


def parse_band_table(region: str, data: dict[str, Any]) -> TaxBandTable:
    """Parse a TaxBandTable for one region."""
    flat_rates = data.get("flat_rates") or {}
    return TaxBandTable(
        region=region,
        bands=tuple(parse_band(b) for b in data["bands"]),
        flat_rates=tuple(
            (str(code).upper(), parse_decimal(rate, f"flat rate {code}"))
            for code, rate in sorted(flat_rates.items())
        ),
    )


def parse_sick_pay(data: dict[str, Any]) -> StatutorySickPayRates:
    """Parse statutory sick pay constants; omitted counts use the statutory defaults."""
    defaults = StatutorySickPayRates(weekly_rate=Decimal("0"))
    return StatutorySickPayRates(
        weekly_rate=parse_decimal(data["weekly_rate"], "statutory_sick_pay.weekly_rate"),
        waiting_days=int(data.get("waiting_days", defaults.waiting_days)),
        piw_min_days=int(data.get("piw_min_days", defaults.piw_min_days)),
        linking_gap_days=int(data.get("linking_gap_days", defaults.linking_gap_days)),
        max_weeks=int(data.get("max_weeks", defaults.max_weeks)),
    )


def parse_tax_year(data: dict[str, Any]) -> TaxYearConfig:
    """
    Parse a ``TaxYearConfig`` from the contents of one YAML file.

    Postconditions:
        - The returned config carries the checksum of ``data``.
    Raises:
        KeyError: if a required key is missing.
        ValueError: if any value fails validation.
    """
    regions = data["regions"]
    if not regions:
        raise ValueError(f"Tax year {data['tax_year']} defines no regions")
    return TaxYearConfig(
        tax_year=str(data["tax_year"]),
        effective_from=parse_date(data["effective_from"]),
        effective_to=parse_date(data["effective_to"]),
        personal_allowance=parse_decimal(
            data["personal_allowance"], "personal_allowance"
        ),
        band_tables=tuple(
            parse_band_table(region, table) for region, table in regions.items()
        ),
        sick_pay=parse_sick_pay(data["statutory_sick_pay"]),
        checksum=compute_checksum(data),
    )


def load_tax_year(path: Path) -> TaxYearConfig:
    """Load and parse one tax year file."""
    return parse_tax_year(load_yaml_file(path))


def discover_tax_years(config_dir: Path) -> dict[str, Path]:
    """Map tax year labels to their YAML files in ``config_dir``."""
    found: dict[str, Path] = {}
    for path in sorted(config_dir.glob("*.yaml")):
        if TAX_YEAR_PATTERN.match(path.stem):
            found[path.stem] = path
    return found


def compute_checksum(data: dict[str, Any]) -> str:
    """
    Compute SHA-256 checksum of canonical JSON serialization.

    Identical ``data`` always produces identical checksums.
    """
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()
