"""
Settings Validator (``payroll_config.validator``).

Responsibility
--------------
Reviews an already well-formed ``PayrollSettings`` for values that are
legal but suspicious, or that make a pay statement impossible.

Architecture position
---------------------
**Config layer**.  Called by ``payroll_config`` after parsing and before
the settings are handed to the assembler.

Invariants enforced
-------------------
* Employee deductions (SGK + unemployment + stamp) must leave part of
  gross pay; a combined rate of 100 % or more is an error.
* Unusual but legal values produce warnings: a top bracket rate above
  50 %, bracket rates that fall as income rises, overtime multipliers
  below 1, or a working day longer than 12 hours.

Failure modes
-------------
* Validation errors (``SettingsValidationResult.errors``)  -> settings
  MUST NOT be used.
* Validation warnings  -> settings may be used but should be reviewed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

from payroll_config.schema import PayrollSettings

_TOP_RATE_WARNING = Decimal("0.5")
_LONG_WORKDAY = Decimal("12")
_ONE = Decimal("1")


@dataclass
class SettingsValidationResult:
    """
    Result of settings validation.

    ``is_valid`` returns ``True`` only when ``errors`` is empty.
    """

    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return len(self.errors) == 0

    def add_error(self, msg: str) -> None:
        self.errors.append(msg)

    def add_warning(self, msg: str) -> None:
        self.warnings.append(msg)


def validate_settings(settings: PayrollSettings) -> SettingsValidationResult:
    """Validate ``settings``, collecting every error and warning."""
    result = SettingsValidationResult()

    combined = settings.sgk_rate + settings.unemployment_rate + settings.stamp_tax_rate
    if combined >= _ONE:
        result.add_error(
            f"combined deduction rate {combined} leaves nothing of gross pay"
        )

    if settings.top_rate > _TOP_RATE_WARNING:
        result.add_warning(f"top bracket rate {settings.top_rate} exceeds 50%")

    rates = [b.rate for b in settings.tax_brackets]
    for lower, higher in zip(rates, rates[1:]):
        if higher < lower:
            result.add_warning(
                f"bracket rates decrease ({lower} then {higher}); schedule is not progressive"
            )
            break

    for name in ("overtime_multiplier", "weekend_multiplier", "holiday_multiplier"):
        if getattr(settings, name) < _ONE:
            result.add_warning(f"{name} {getattr(settings, name)} pays overtime below the regular rate")

    if settings.daily_work_hours > _LONG_WORKDAY:
        result.add_warning(f"daily_work_hours {settings.daily_work_hours} exceeds 12")

    return result
