"""
Module: payroll_engines.exemption
Responsibility:
    Minimum-wage exemption.  The income tax and stamp tax attributable to a
    minimum-wage income are never charged: both are computed for the
    minimum wage and subtracted, floored at zero, from the employee's own
    figures.  Also owns the employee contribution split (SGK and
    unemployment) so the exemption baseline and the pay statement share
    one rounding.

Architecture position:
    Engines -- pure calculation layer, zero I/O.  Reuses
    ``payroll_engines.progressive_tax``.

Invariants enforced:
    - The income-tax exemption is always a zero-cumulative walk over the
      minimum wage's income-tax base, whatever the employee's own
      year-to-date position.
    - The minimum wage's SGK and unemployment are rounded per line before
      the exemption base is taken, so the base can differ from the
      unrounded formula by up to 0.01.
    - final_income_tax = max(0, computed_tax - exemption) <= computed_tax.
    - final_stamp_tax = max(0, gross * stamp_rate - minimum_wage * stamp_rate).

Failure modes:
    - InvalidInputError on negative or non-finite amounts or rates.
    - ConfigurationError on a malformed bracket schedule.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from decimal import Decimal

from payroll_engines.progressive_tax import ProgressiveTaxResult, calculate_progressive_tax
from payroll_engines.tracer import traced_engine
from payroll_kernel.domain.tax_brackets import TaxBracket
from payroll_kernel.domain.values import ZERO, round_money, to_decimal


@dataclass(frozen=True)
class EmployeeContributions:
    """Employee-side SGK and unemployment premiums, rounded to 0.01."""

    sgk_employee: Decimal
    unemployment: Decimal

    @property
    def total(self) -> Decimal:
        return self.sgk_employee + self.unemployment


@dataclass(frozen=True)
class MinimumWageExemption:
    """Tax amounts a minimum-wage income would owe, hence exempt for everyone."""

    minimum_wage: Decimal
    income_tax_base: Decimal
    income_tax_exemption: Decimal
    stamp_tax_exemption: Decimal
    income_tax_walk: ProgressiveTaxResult


def employee_contributions(
    gross_salary: Decimal, sgk_rate: Decimal, unemployment_rate: Decimal
) -> EmployeeContributions:
    """SGK and unemployment premiums on ``gross_salary``, each rounded to 0.01."""
    gross = to_decimal(gross_salary, "gross_salary")
    return EmployeeContributions(
        sgk_employee=round_money(gross * to_decimal(sgk_rate, "sgk_rate")),
        unemployment=round_money(gross * to_decimal(unemployment_rate, "unemployment_rate")),
    )


@traced_engine(
    "minimum_wage_exemption",
    "1.0",
    fingerprint_fields=("minimum_wage", "sgk_rate", "unemployment_rate", "stamp_tax_rate"),
)
def calculate_minimum_wage_exemption(
    *,
    minimum_wage: Decimal,
    sgk_rate: Decimal,
    unemployment_rate: Decimal,
    stamp_tax_rate: Decimal,
    brackets: Sequence[TaxBracket],
) -> MinimumWageExemption:
    """Compute the income-tax and stamp-tax exemptions for the minimum wage."""
    wage = to_decimal(minimum_wage, "minimum_wage")
    contributions = employee_contributions(wage, sgk_rate, unemployment_rate)
    base = wage - contributions.total
    walk = calculate_progressive_tax(
        income_tax_base=base,
        previous_cumulative_income=ZERO,
        brackets=brackets,
    )
    return MinimumWageExemption(
        minimum_wage=wage,
        income_tax_base=base,
        income_tax_exemption=walk.tax,
        stamp_tax_exemption=wage * to_decimal(stamp_tax_rate, "stamp_tax_rate"),
        income_tax_walk=walk,
    )


def apply_income_tax_exemption(computed_tax: Decimal, exemption: MinimumWageExemption) -> Decimal:
    """max(0, computed_tax - exemption)."""
    return max(ZERO, to_decimal(computed_tax, "computed_tax") - exemption.income_tax_exemption)


def calculate_stamp_tax(
    *, gross_salary: Decimal, stamp_tax_rate: Decimal, exemption: MinimumWageExemption
) -> Decimal:
    """Stamp tax on gross, less the minimum-wage stamp exemption, floored at zero."""
    gross = to_decimal(gross_salary, "gross_salary")
    charged = gross * to_decimal(stamp_tax_rate, "stamp_tax_rate")
    return max(ZERO, charged - exemption.stamp_tax_exemption)
