"""
Settings Loader (``payroll_config.loader``).

Responsibility
--------------
Loads YAML settings files and wire mappings and parses them into the
frozen ``payroll_config.schema`` dataclasses.  Mappings may use the
camelCase wire keys (``sgkRate``, ``taxBrackets``) or snake_case keys;
``taxBrackets`` may be a list or a JSON-encoded string.

Architecture position
---------------------
**Config layer**.  Depends on ``payroll_kernel`` value types only; has no
dependency on engines or modules.

Invariants enforced
-------------------
* Rates and the minimum wage are required; a missing one raises
  ``ConfigurationError``.  Daily hours, multipliers and brackets fall back
  to the documented defaults (``DEFAULT_*``).
* Numbers are read through ``str`` so YAML floats do not leak binary
  rounding into Decimal values.
* ``compute_checksum`` produces a deterministic SHA-256 hash of the
  canonical settings for configuration identity and change detection.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing or invalid settings values  -> ``ConfigurationError``.

Audit relevance
---------------
``compute_checksum`` lets an auditor confirm that a pay statement was
computed under a known, version-controlled settings baseline.
"""

from __future__ import annotations

import hashlib
import json
from collections.abc import Mapping
from decimal import Decimal
from pathlib import Path
from typing import Any

import yaml

from payroll_config.schema import PayrollSettings, PayrollSettingsSet
from payroll_kernel.domain.tax_brackets import TaxBracket, setting_decimal
from payroll_kernel.exceptions import ConfigurationError

DEFAULT_DAILY_WORK_HOURS = Decimal("8")
DEFAULT_OVERTIME_MULTIPLIER = Decimal("1.5")
DEFAULT_WEEKEND_MULTIPLIER = Decimal("2.0")
DEFAULT_HOLIDAY_MULTIPLIER = Decimal("2.0")
DEFAULT_TAX_BRACKETS: tuple[TaxBracket, ...] = (
    TaxBracket(Decimal("110000"), Decimal("0.15")),
    TaxBracket(Decimal("230000"), Decimal("0.20")),
    TaxBracket(Decimal("580000"), Decimal("0.27")),
    TaxBracket(Decimal("3000000"), Decimal("0.35")),
    TaxBracket(None, Decimal("0.40")),
)

# snake_case field -> camelCase wire key
_WIRE_KEYS: dict[str, str] = {
    "sgk_rate": "sgkRate",
    "unemployment_rate": "unemploymentRate",
    "stamp_tax_rate": "stampTaxRate",
    "minimum_wage": "minimumWage",
    "daily_work_hours": "dailyWorkHours",
    "overtime_multiplier": "overtimeMultiplier",
    "weekend_multiplier": "weekendMultiplier",
    "holiday_multiplier": "holidayMultiplier",
    "tax_brackets": "taxBrackets",
}

_REQUIRED = ("sgk_rate", "unemployment_rate", "stamp_tax_rate", "minimum_wage")

_OPTIONAL_DEFAULTS: dict[str, Decimal] = {
    "daily_work_hours": DEFAULT_DAILY_WORK_HOURS,
    "overtime_multiplier": DEFAULT_OVERTIME_MULTIPLIER,
    "weekend_multiplier": DEFAULT_WEEKEND_MULTIPLIER,
    "holiday_multiplier": DEFAULT_HOLIDAY_MULTIPLIER,
}


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        data = yaml.safe_load(f)
    return data or {}


def _lookup(data: Mapping[str, Any], name: str) -> Any:
    if name in data:
        return data[name]
    return data.get(_WIRE_KEYS[name])


def parse_tax_brackets(raw: Any) -> tuple[TaxBracket, ...]:
    """
    Parse a bracket schedule.

    Accepts a sequence of ``{limit, rate}`` mappings or ``TaxBracket``
    instances, or a JSON string encoding such a list.  A ``null`` limit
    marks the open-ended top bracket.
    """
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise ConfigurationError("tax_brackets", f"invalid JSON: {exc.msg}") from exc
    if not isinstance(raw, (list, tuple)):
        raise ConfigurationError("tax_brackets", "must be a list of {limit, rate} entries")

    brackets: list[TaxBracket] = []
    for position, entry in enumerate(raw, start=1):
        if isinstance(entry, TaxBracket):
            brackets.append(entry)
            continue
        if not isinstance(entry, Mapping) or "rate" not in entry:
            raise ConfigurationError(
                "tax_brackets", f"bracket {position} must be a mapping with a rate"
            )
        limit = entry.get("limit")
        brackets.append(
            TaxBracket(
                limit=None if limit is None else setting_decimal(limit, f"tax_brackets[{position}].limit"),
                rate=setting_decimal(entry["rate"], f"tax_brackets[{position}].rate"),
            )
        )
    return tuple(brackets)


def parse_settings(data: Mapping[str, Any]) -> PayrollSettings:
    """
    Parse a settings mapping into ``PayrollSettings``.

    Preconditions:
        ``data`` is a mapping with camelCase or snake_case keys.
    Postconditions:
        Returns a validated, frozen ``PayrollSettings``.
    Raises:
        ConfigurationError: on a missing required key or any invalid value.
    """
    if not isinstance(data, Mapping):
        raise ConfigurationError("settings", "must be a mapping")

    values: dict[str, Any] = {}
    for name in _REQUIRED:
        raw = _lookup(data, name)
        if raw is None:
            raise ConfigurationError(name, "required setting is missing")
        values[name] = setting_decimal(raw, name)

    for name, default in _OPTIONAL_DEFAULTS.items():
        raw = _lookup(data, name)
        values[name] = default if raw is None else setting_decimal(raw, name)

    raw_brackets = _lookup(data, "tax_brackets")
    values["tax_brackets"] = (
        DEFAULT_TAX_BRACKETS if raw_brackets is None else parse_tax_brackets(raw_brackets)
    )
    return PayrollSettings(**values)


def _canonical(value: Decimal) -> str:
    return format(value.normalize(), "f")


def settings_to_dict(settings: PayrollSettings) -> dict[str, Any]:
    """
    Canonical, JSON-safe snake_case form of ``settings``.

    Amounts are normalized strings, so 20002.5 and 20002.50 hash alike.
    """
    return {
        "sgk_rate": _canonical(settings.sgk_rate),
        "unemployment_rate": _canonical(settings.unemployment_rate),
        "stamp_tax_rate": _canonical(settings.stamp_tax_rate),
        "minimum_wage": _canonical(settings.minimum_wage),
        "daily_work_hours": _canonical(settings.daily_work_hours),
        "overtime_multiplier": _canonical(settings.overtime_multiplier),
        "weekend_multiplier": _canonical(settings.weekend_multiplier),
        "holiday_multiplier": _canonical(settings.holiday_multiplier),
        "tax_brackets": [
            {"limit": None if b.limit is None else _canonical(b.limit), "rate": _canonical(b.rate)}
            for b in settings.tax_brackets
        ],
    }


def compute_checksum(data: dict[str, Any]) -> str:
    """
    Compute SHA-256 checksum of canonical JSON serialization.

    Identical ``data`` always produces identical checksums.
    """
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()


def settings_checksum(settings: PayrollSettings) -> str:
    return compute_checksum(settings_to_dict(settings))


def parse_settings_set(data: Mapping[str, Any]) -> PayrollSettingsSet:
    """Parse a settings-set document (metadata plus a ``settings`` mapping)."""
    for key in ("settings_id", "effective_year", "settings"):
        if key not in data:
            raise ConfigurationError(key, "required key is missing from settings set")
    settings = parse_settings(data["settings"])
    return PayrollSettingsSet(
        settings_id=str(data["settings_id"]),
        version=int(data.get("version", 1)),
        effective_year=int(data["effective_year"]),
        settings=settings,
        description=str(data.get("description", "")),
        jurisdiction=str(data.get("jurisdiction", "TR")),
        checksum=settings_checksum(settings),
    )


def load_settings_file(path: Path) -> PayrollSettingsSet:
    """Load and parse one YAML settings-set file."""
    return parse_settings_set(load_yaml_file(path))
