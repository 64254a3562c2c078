"""
Tax brackets -- ordered progressive income-tax schedule.

Responsibility:
    Value object for one bracket and validation of an ordered schedule.
    Shared by ``payroll_config`` (which parses brackets from YAML or wire
    mappings) and ``payroll_engines.progressive_tax`` (which walks them).

Architecture position:
    Kernel > Domain -- pure, zero I/O.

Invariants enforced:
    - Limits and rates are coerced to finite ``Decimal`` on construction,
      so plain ints, floats and strings are accepted.
    - Schedule is non-empty.
    - Limits are positive and strictly increasing.
    - Exactly one bracket is open-ended (``limit is None``) and it is last.
    - Rates lie in [0, 1].

Failure modes:
    - ConfigurationError for every violation above.  Schedules are never
      re-sorted or patched; a malformed schedule is rejected.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from payroll_kernel.domain.values import to_decimal
from payroll_kernel.exceptions import ConfigurationError, InvalidInputError

INFINITY = Decimal("Infinity")


def setting_decimal(value: Any, setting: str) -> Decimal:
    """Coerce a configuration value to a finite Decimal or raise ConfigurationError."""
    try:
        return to_decimal(value, setting, allow_negative=True)
    except InvalidInputError as exc:
        raise ConfigurationError(setting, exc.reason) from exc


@dataclass(frozen=True)
class TaxBracket:
    """
    One bracket of a cumulative progressive schedule.

    ``limit`` is the upper bound of year-to-date taxable income covered by
    this bracket (exclusive of higher brackets); ``None`` means unbounded.
    """

    limit: Decimal | None
    rate: Decimal

    def __post_init__(self) -> None:
        if self.limit is not None:
            object.__setattr__(self, "limit", setting_decimal(self.limit, "tax_brackets.limit"))
        object.__setattr__(self, "rate", setting_decimal(self.rate, "tax_brackets.rate"))
        if self.limit is not None and self.limit <= 0:
            raise ConfigurationError(
                "tax_brackets", f"bracket limit must be a positive number, got {self.limit}"
            )
        if self.rate < 0 or self.rate > 1:
            raise ConfigurationError(
                "tax_brackets", f"bracket rate must be between 0 and 1, got {self.rate}"
            )

    @property
    def effective_limit(self) -> Decimal:
        """Upper bound with ``None`` mapped to +infinity."""
        return INFINITY if self.limit is None else self.limit

    @property
    def is_open(self) -> bool:
        return self.limit is None


def validate_brackets(brackets: Iterable[TaxBracket]) -> tuple[TaxBracket, ...]:
    """
    Validate an ordered bracket schedule and return it as a tuple.

    Preconditions:
        ``brackets`` is iterable in ascending order.
    Postconditions:
        Returns the same brackets, unchanged, as a tuple.
    Raises:
        ConfigurationError: if the schedule is empty, not ascending, or
            does not end with exactly one open-ended bracket.
    """
    schedule = tuple(brackets)
    if not schedule:
        raise ConfigurationError("tax_brackets", "at least one bracket is required")

    for position, bracket in enumerate(schedule[:-1]):
        if bracket.is_open:
            raise ConfigurationError(
                "tax_brackets",
                f"bracket {position + 1} has no limit; only the last bracket may be open-ended",
            )
    if not schedule[-1].is_open:
        raise ConfigurationError(
            "tax_brackets", "the last bracket must have no limit (null)"
        )

    limits = [b.limit for b in schedule[:-1]]
    for previous, current in zip(limits, limits[1:]):
        if current <= previous:
            raise ConfigurationError(
                "tax_brackets",
                f"limits must be strictly increasing ({previous} then {current})",
            )

    return schedule
