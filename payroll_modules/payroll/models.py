"""
Payroll Domain Models (``payroll_modules.payroll.models``).

Responsibility
--------------
Frozen dataclass value objects representing the nouns of payroll:
employees, monthly timesheets, payroll records (the pay statement), the
audit breakdown of a calculation, batch results and period summaries.

Architecture position
---------------------
**Modules layer** -- pure data definitions with ZERO I/O.  Consumed by
the assembler and ``PayrollService`` and returned to callers.

Invariants enforced
-------------------
* All models are ``frozen=True`` (immutable after construction).
* All monetary fields use ``Decimal`` -- NEVER ``float``.
* An ``Employee`` always has a monthly salary greater than zero.
* A ``PayrollRecord`` is approved exactly when ``approved_at`` is set.

Failure modes
-------------
* ``InvalidInputError`` on a non-positive salary, a month outside 1..12
  or an approved record without an approval timestamp.

Audit relevance
---------------
``PayrollCalculation`` carries every intermediate figure (day counts,
earnings, cumulative position, bracket slices, exemptions) so a pay
statement can be explained line by line.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID

from payroll_engines.cumulative import PriorPayroll
from payroll_engines.earnings import EarningsBreakdown
from payroll_engines.exemption import MinimumWageExemption
from payroll_engines.progressive_tax import ProgressiveTaxResult
from payroll_engines.timesheet import TimesheetSummary
from payroll_kernel.domain.values import ZERO, to_decimal
from payroll_kernel.exceptions import InvalidInputError
from payroll_kernel.logging_config import get_logger

logger = get_logger("modules.payroll.models")


def _check_month(month: int) -> None:
    if isinstance(month, bool) or not isinstance(month, int) or not 1 <= month <= 12:
        raise InvalidInputError("month", "must be an integer from 1 to 12", month)


class EmployeeStatus(Enum):
    """Employment states."""
    ACTIVE = "active"
    INACTIVE = "inactive"


class PayrollStatus(Enum):
    """Lifecycle state of the payroll for one (employee, year, month)."""
    UNSAVED = "unsaved"
    PENDING = "pending"
    APPROVED = "approved"


@dataclass(frozen=True)
class Employee:
    """An employee for payroll purposes."""
    id: UUID
    monthly_salary: Decimal
    department_id: UUID | None = None
    status: EmployeeStatus = EmployeeStatus.ACTIVE
    employee_number: str | None = None
    first_name: str = ""
    last_name: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(
            self,
            "monthly_salary",
            to_decimal(self.monthly_salary, "monthly_salary", allow_zero=False),
        )
        if not isinstance(self.status, EmployeeStatus):
            object.__setattr__(self, "status", EmployeeStatus(self.status))

    @property
    def is_active(self) -> bool:
        return self.status is EmployeeStatus.ACTIVE

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


@dataclass(frozen=True)
class Timesheet:
    """
    One employee's attendance for one month.

    ``days`` maps day-of-month (int or digit string) to a raw day entry:
    a status string or ``{status, hours?, isWeekend?, isHoliday?}``.  It is
    normalized by the timesheet engine, not here.
    """
    employee_id: UUID
    year: int
    month: int
    days: dict[Any, Any] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        _check_month(self.month)


@dataclass(frozen=True)
class PayrollRecord:
    """
    The persisted pay statement for one (employee, year, month).

    Amounts are rounded to 0.01.  ``id`` is None until stored.
    """
    employee_id: UUID
    year: int
    month: int
    worked_days: int
    overtime_days: int
    days_in_month: int
    daily_salary: Decimal
    gross_salary: Decimal
    sgk_employee: Decimal
    unemployment: Decimal
    income_tax: Decimal
    stamp_tax: Decimal
    total_deductions: Decimal
    net_salary: Decimal
    approved: bool = False
    approved_at: datetime | None = None
    approved_by: UUID | None = None
    id: UUID | None = None

    def __post_init__(self) -> None:
        _check_month(self.month)
        if self.approved and self.approved_at is None:
            raise InvalidInputError(
                "approved_at", "an approved payroll must carry its approval time"
            )

    @property
    def status(self) -> PayrollStatus:
        return PayrollStatus.APPROVED if self.approved else PayrollStatus.PENDING

    @property
    def period(self) -> str:
        return f"{self.year}-{self.month:02d}"

    @property
    def income_tax_base(self) -> Decimal:
        return self.gross_salary - self.sgk_employee - self.unemployment

    def to_prior(self) -> PriorPayroll:
        """The summary later months fold over for cumulative income."""
        return PriorPayroll(
            employee_id=self.employee_id,
            year=self.year,
            month=self.month,
            gross_salary=self.gross_salary,
            sgk_employee=self.sgk_employee,
            unemployment=self.unemployment,
        )


@dataclass(frozen=True)
class PayrollCalculation:
    """A computed payroll record plus the breakdown that produced it."""
    record: PayrollRecord
    timesheet: TimesheetSummary
    earnings: EarningsBreakdown
    previous_cumulative_income: Decimal
    income_tax_base: Decimal
    computed_income_tax: ProgressiveTaxResult
    exemption: MinimumWageExemption
    settings_checksum: str

    @property
    def income_tax_exemption_applied(self) -> Decimal:
        return self.computed_income_tax.tax - self.record.income_tax


@dataclass(frozen=True)
class BatchResult:
    """Outcome of generating payroll for every employee of a period."""
    year: int
    month: int
    generated: tuple[PayrollRecord, ...] = ()
    skipped_employee_ids: tuple[UUID, ...] = ()

    @property
    def generated_count(self) -> int:
        return len(self.generated)


@dataclass(frozen=True)
class PeriodSummary:
    """Totals over the stored payrolls of one period."""
    year: int
    month: int
    payroll_count: int = 0
    approved_count: int = 0
    pending_count: int = 0
    total_gross: Decimal = ZERO
    total_deductions: Decimal = ZERO
    total_net: Decimal = ZERO
    total_income_tax: Decimal = ZERO
    total_stamp_tax: Decimal = ZERO
