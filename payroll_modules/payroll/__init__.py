"""
Payroll Module (``payroll_modules.payroll``).

Responsibility
--------------
Monthly pay statements: attendance in, gross pay, employee SGK and
unemployment premiums, cumulative progressive income tax less the
minimum-wage exemption, stamp tax and net pay out, plus the pending /
approved lifecycle of each stored statement.

Architecture position
---------------------
**Modules layer** -- value objects, a pure assembler over
``payroll_engines``, an approval workflow, an ORM model, and a service
facade owning the transaction boundary.

Invariants enforced
-------------------
* One stored payroll per (employee, year, month).
* Recomputation never resets approval.
* Cumulative income comes only from the employee's earlier stored months
  of the same year.

Failure modes
-------------
* ``InvalidInputError`` / ``ConfigurationError`` on bad inputs.
* ``PayrollNotFoundError`` / ``InvalidTransitionError`` on lifecycle misuse.
"""

from payroll_modules.payroll.assembler import assemble_payroll
from payroll_modules.payroll.models import (
    BatchResult,
    Employee,
    EmployeeStatus,
    PayrollCalculation,
    PayrollRecord,
    PayrollStatus,
    PeriodSummary,
    Timesheet,
)
from payroll_modules.payroll.workflows import PAYROLL_APPROVAL_WORKFLOW

__all__ = [
    "BatchResult",
    "Employee",
    "EmployeeStatus",
    "PayrollCalculation",
    "PayrollRecord",
    "PayrollStatus",
    "PeriodSummary",
    "Timesheet",
    "assemble_payroll",
    "PAYROLL_APPROVAL_WORKFLOW",
]
