"""
payroll_config -- single public entrypoint for payroll settings.

Responsibility:
    Resolves the ``PayrollSettings`` a computation runs under, either from
    a packaged YAML settings set (``get_active_settings``) or from a caller
    supplied mapping / object (``resolve_settings``).  Every resolved value
    has been parsed, range-checked and validated.

Architecture position:
    Configuration -- sits above ``payroll_kernel`` and below
    ``payroll_modules``.  Engines never import this package; settings are
    threaded into every engine call explicitly.

Invariants enforced:
    - Settings with validation errors are never returned.
    - Deterministic checksums: the same values always hash identically.

Failure modes:
    - ``FileNotFoundError`` -- no settings set for the requested year.
    - ``ConfigurationError`` -- missing keys, bad values, or validation
      errors.
    - ``InvalidInputError`` -- no settings supplied at all.

Audit relevance:
    Every resolution emits a ``PAYROLL_CONFIG_TRACE`` log entry carrying
    the settings id and checksum, tying each pay statement to the exact
    settings that produced it.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

from payroll_config.loader import (
    DEFAULT_TAX_BRACKETS,
    compute_checksum,
    load_settings_file,
    parse_settings,
    parse_tax_brackets,
    settings_checksum,
    settings_to_dict,
)
from payroll_config.schema import PayrollSettings, PayrollSettingsSet
from payroll_config.validator import SettingsValidationResult, validate_settings
from payroll_kernel.exceptions import ConfigurationError, InvalidInputError
from payroll_kernel.logging_config import get_logger

_logger = get_logger("config")

_DEFAULT_CONFIG_DIR = Path(__file__).parent / "sets"
DEFAULT_SETTINGS_ID = "tr_2025"


def _ensure_valid(settings: PayrollSettings, source: str) -> PayrollSettings:
    validation = validate_settings(settings)
    for warning in validation.warnings:
        _logger.warning("payroll_settings_warning", extra={"source": source, "detail": warning})
    if not validation.is_valid:
        raise ConfigurationError(source, "; ".join(validation.errors))
    return settings


def _emit_trace(settings_id: str, settings: PayrollSettings, checksum: str) -> None:
    _logger.info(
        "PAYROLL_CONFIG_TRACE",
        extra={
            "trace_type": "PAYROLL_CONFIG_TRACE",
            "settings_id": settings_id,
            "checksum": checksum,
            "bracket_count": len(settings.tax_brackets),
            "minimum_wage": str(settings.minimum_wage),
        },
    )


def list_settings_sets(config_dir: Path | None = None) -> list[PayrollSettingsSet]:
    """Load every ``*.yaml`` settings set in ``config_dir``, sorted by year."""
    sets_dir = config_dir or _DEFAULT_CONFIG_DIR
    if not sets_dir.is_dir():
        raise FileNotFoundError(f"Settings directory not found: {sets_dir}")
    loaded = [load_settings_file(path) for path in sorted(sets_dir.glob("*.yaml"))]
    return sorted(loaded, key=lambda s: (s.effective_year, s.version))


def get_active_settings(
    year: int | None = None,
    config_dir: Path | None = None,
) -> PayrollSettingsSet:
    """
    Return the settings set in force for ``year``.

    Picks the highest-version set with the latest ``effective_year`` not
    after ``year``; with no year, the latest set overall.

    Raises:
        FileNotFoundError: if no set applies.
        ConfigurationError: if the chosen set fails validation.
    """
    candidates = list_settings_sets(config_dir)
    if year is not None:
        candidates = [s for s in candidates if s.effective_year <= year]
    if not candidates:
        raise FileNotFoundError(f"No payroll settings set effective for year {year}")

    chosen = candidates[-1]
    _ensure_valid(chosen.settings, chosen.settings_id)
    _emit_trace(chosen.settings_id, chosen.settings, chosen.checksum)
    return chosen


def get_default_settings() -> PayrollSettings:
    """The packaged default settings (``sets/tr_2025.yaml``)."""
    chosen = load_settings_file(_DEFAULT_CONFIG_DIR / f"{DEFAULT_SETTINGS_ID}.yaml")
    return _ensure_valid(chosen.settings, chosen.settings_id)


def resolve_settings(source: PayrollSettings | Mapping[str, Any] | None) -> PayrollSettings:
    """
    Turn caller-supplied settings into validated ``PayrollSettings``.

    Accepts a ``PayrollSettings`` (validated again) or a camelCase /
    snake_case mapping.

    Raises:
        InvalidInputError: if ``source`` is None.
        ConfigurationError: on any invalid value.
    """
    if source is None:
        raise InvalidInputError("settings", "settings are required")
    if isinstance(source, PayrollSettings):
        settings = source
        origin = "object"
    else:
        settings = parse_settings(source)
        origin = "mapping"
    _ensure_valid(settings, "settings")
    _emit_trace(origin, settings, settings_checksum(settings))
    return settings


__all__ = [
    "DEFAULT_SETTINGS_ID",
    "DEFAULT_TAX_BRACKETS",
    "PayrollSettings",
    "PayrollSettingsSet",
    "SettingsValidationResult",
    "compute_checksum",
    "get_active_settings",
    "get_default_settings",
    "list_settings_sets",
    "load_settings_file",
    "parse_settings",
    "parse_tax_brackets",
    "resolve_settings",
    "settings_checksum",
    "settings_to_dict",
    "validate_settings",
]
