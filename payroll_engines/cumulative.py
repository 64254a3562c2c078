"""
Module: payroll_engines.cumulative
Responsibility:
    Year-to-date cumulative income tracker.  Folds over prior payroll
    summaries of the same employee and year to find where the target month
    starts in the progressive bracket schedule.

Architecture position:
    Engines -- pure calculation layer, zero I/O.  The caller supplies the
    summaries (the payroll service reads them from storage).

Invariants enforced:
    - Only months 1..target_month-1 of the target year and employee count.
    - Each counted month contributes its income-tax base
      (gross_salary - sgk_employee - unemployment), never net pay.
    - Months without a summary contribute nothing; January starts at 0.
    - At most one summary per (employee, year, month).

Failure modes:
    - InvalidInputError on duplicate summaries for one month, a target
      month outside 1..12, or negative amounts.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal
from uuid import UUID

from payroll_engines.tracer import traced_engine
from payroll_kernel.domain.values import ZERO, to_decimal
from payroll_kernel.exceptions import InvalidInputError


@dataclass(frozen=True)
class PriorPayroll:
    """The part of a persisted payroll the cumulative tracker needs."""

    employee_id: UUID | str
    year: int
    month: int
    gross_salary: Decimal
    sgk_employee: Decimal
    unemployment: Decimal

    @property
    def income_tax_base(self) -> Decimal:
        return self.gross_salary - self.sgk_employee - self.unemployment


@traced_engine("cumulative_income", "1.0", fingerprint_fields=("employee_id", "year", "month"))
def cumulative_income_before(
    *,
    employee_id: UUID | str,
    year: int,
    month: int,
    prior_payrolls: Iterable[PriorPayroll],
) -> Decimal:
    """
    Sum the income-tax base of months before ``month`` in ``year``.

    Summaries for other employees, other years, or months >= ``month``
    are ignored.
    """
    if isinstance(month, bool) or not isinstance(month, int) or not 1 <= month <= 12:
        raise InvalidInputError("month", "must be an integer from 1 to 12", month)

    target_employee = str(employee_id)
    seen: set[int] = set()
    cumulative = ZERO
    for prior in prior_payrolls:
        if str(prior.employee_id) != target_employee or prior.year != year:
            continue
        if not 1 <= prior.month < month:
            continue
        if prior.month in seen:
            raise InvalidInputError(
                "prior_payrolls",
                f"more than one payroll for {year}-{prior.month:02d}",
                prior.month,
            )
        seen.add(prior.month)
        cumulative += (
            to_decimal(prior.gross_salary, "prior.gross_salary")
            - to_decimal(prior.sgk_employee, "prior.sgk_employee")
            - to_decimal(prior.unemployment, "prior.unemployment")
        )
    return cumulative
