"""
Module: payroll_engines.progressive_tax
Responsibility:
    Cumulative progressive income tax.  Walks an ordered bracket schedule
    starting from the employee's year-to-date position, so a single month's
    base is split across brackets when the cumulative total crosses a
    boundary mid-month.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - tax >= 0 and sum(slice.taxable) == income_tax_base.
    - Non-decreasing in income_tax_base and in previous_cumulative_income.
    - Brackets are validated before the walk; never re-sorted.

Failure modes:
    - InvalidInputError on negative or non-finite inputs.
    - ConfigurationError on a malformed bracket schedule.

Audit relevance:
    Each ``BracketSlice`` shows how much of the month's base was taxed at
    which rate, which is what a payroll auditor reconciles against the
    statutory schedule.

Usage:
    result = calculate_progressive_tax(
        income_tax_base=Decimal("20000"),
        previous_cumulative_income=Decimal("100000"),
        brackets=schedule,
    )
    result.tax  # 10000 * 0.15 + 10000 * 0.20 = 3500
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from decimal import Decimal

from payroll_engines.tracer import traced_engine
from payroll_kernel.domain.tax_brackets import TaxBracket, validate_brackets
from payroll_kernel.domain.values import ZERO, to_decimal


@dataclass(frozen=True)
class BracketSlice:
    """The portion of a month's base taxed inside one bracket."""

    lower: Decimal
    upper: Decimal | None
    rate: Decimal
    taxable: Decimal
    tax: Decimal


@dataclass(frozen=True)
class ProgressiveTaxResult:
    """Total tax plus the per-bracket breakdown of how it was reached."""

    tax: Decimal
    slices: tuple[BracketSlice, ...] = ()

    @property
    def taxed_amount(self) -> Decimal:
        return sum((s.taxable for s in self.slices), ZERO)

    @property
    def marginal_rate(self) -> Decimal:
        """Rate of the highest bracket touched, zero when nothing was taxed."""
        return self.slices[-1].rate if self.slices else ZERO


@traced_engine(
    "progressive_tax",
    "1.0",
    fingerprint_fields=("income_tax_base", "previous_cumulative_income", "brackets"),
)
def calculate_progressive_tax(
    *,
    income_tax_base: Decimal,
    previous_cumulative_income: Decimal,
    brackets: Sequence[TaxBracket],
) -> ProgressiveTaxResult:
    """
    Walk ``brackets`` from ``previous_cumulative_income`` over ``income_tax_base``.

    Preconditions:
        Both amounts are finite and >= 0; brackets ascend and end open.
    Postconditions:
        One slice per bracket that received taxable income.
    Raises:
        InvalidInputError, ConfigurationError.
    """
    base = to_decimal(income_tax_base, "income_tax_base")
    cumulative = to_decimal(previous_cumulative_income, "previous_cumulative_income")
    schedule = validate_brackets(brackets)

    remaining = base
    tax = ZERO
    slices: list[BracketSlice] = []
    lower = ZERO

    for bracket in schedule:
        if remaining <= ZERO:
            break
        room = max(ZERO, bracket.effective_limit - cumulative)
        if room > ZERO:
            taxable = min(remaining, room)
            bracket_tax = taxable * bracket.rate
            tax += bracket_tax
            remaining -= taxable
            cumulative += taxable
            slices.append(
                BracketSlice(
                    lower=lower,
                    upper=bracket.limit,
                    rate=bracket.rate,
                    taxable=taxable,
                    tax=bracket_tax,
                )
            )
        if bracket.limit is not None:
            lower = bracket.limit

    return ProgressiveTaxResult(tax=tax, slices=tuple(slices))
