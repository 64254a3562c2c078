"""
PayrollSettings schema.

Defines the effective payroll settings every computation is threaded
through: contribution and tax rates, the minimum wage, daily working hours,
overtime multipliers and the progressive tax schedule.  YAML files and wire
mappings are parsed into these types by ``payroll_config.loader``.

Key distinction:
  PayrollSettingsSet = source artifact (a versioned YAML file with metadata)
  PayrollSettings    = the frozen values handed to the assembler
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

from payroll_kernel.domain.tax_brackets import TaxBracket, setting_decimal, validate_brackets
from payroll_kernel.domain.values import ZERO
from payroll_kernel.exceptions import ConfigurationError

_ONE = Decimal("1")
_HOURS_PER_DAY = Decimal("24")
_DECIMAL_FIELDS = (
    "sgk_rate",
    "unemployment_rate",
    "stamp_tax_rate",
    "minimum_wage",
    "daily_work_hours",
    "overtime_multiplier",
    "weekend_multiplier",
    "holiday_multiplier",
)


@dataclass(frozen=True)
class PayrollSettings:
    """
    Settings effective at computation time.

    Contract:
        Numeric fields are coerced to finite ``Decimal`` (ints, floats and
        strings are accepted); construction validates ranges and the
        bracket schedule and raises ``ConfigurationError`` on any
        violation.  Nothing is auto-corrected.
    """

    sgk_rate: Decimal
    unemployment_rate: Decimal
    stamp_tax_rate: Decimal
    minimum_wage: Decimal
    daily_work_hours: Decimal
    overtime_multiplier: Decimal
    weekend_multiplier: Decimal
    holiday_multiplier: Decimal
    tax_brackets: tuple[TaxBracket, ...]

    def __post_init__(self) -> None:
        for name in _DECIMAL_FIELDS:
            object.__setattr__(self, name, setting_decimal(getattr(self, name), name))
        for name in ("sgk_rate", "unemployment_rate", "stamp_tax_rate"):
            value = getattr(self, name)
            if value < ZERO or value > _ONE:
                raise ConfigurationError(name, f"rate must be between 0 and 1, got {value}")
        if self.minimum_wage <= ZERO:
            raise ConfigurationError(
                "minimum_wage", f"must be greater than zero, got {self.minimum_wage}"
            )
        if self.daily_work_hours <= ZERO or self.daily_work_hours > _HOURS_PER_DAY:
            raise ConfigurationError(
                "daily_work_hours", f"must be in (0, 24], got {self.daily_work_hours}"
            )
        for name in ("overtime_multiplier", "weekend_multiplier", "holiday_multiplier"):
            value = getattr(self, name)
            if value < ZERO:
                raise ConfigurationError(name, f"multiplier must not be negative, got {value}")
        object.__setattr__(self, "tax_brackets", validate_brackets(self.tax_brackets))

    @property
    def top_rate(self) -> Decimal:
        return self.tax_brackets[-1].rate


@dataclass(frozen=True)
class PayrollSettingsSet:
    """A named, versioned settings file as loaded from YAML."""

    settings_id: str
    version: int
    effective_year: int
    settings: PayrollSettings
    description: str = ""
    jurisdiction: str = "TR"
    checksum: str = field(default="", compare=False)
