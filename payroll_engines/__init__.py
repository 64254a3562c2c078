"""
Module: payroll_engines
Responsibility:
    Package entrypoint that re-exports the public symbols of the pure
    payroll calculation engines.  This is the canonical import surface for
    ``payroll_modules``.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import payroll_kernel (and sibling engine modules).
    MUST NOT import payroll_config or payroll_modules.

Invariants enforced:
    - Purity: engines never read the clock, the database or process-wide
      settings.  Settings values are passed in by the caller.
    - Decimal-only arithmetic; floats are converted through ``str`` at the
      boundary.
    - Determinism: identical inputs always produce identical outputs.

Audit relevance:
    Every engine invocation is traced via ``@traced_engine`` (see
    ``payroll_engines.tracer``), emitting PAYROLL_ENGINE_TRACE records.

Usage:
    from payroll_engines import aggregate_timesheet, calculate_progressive_tax
"""

from payroll_engines.cumulative import PriorPayroll, cumulative_income_before
from payroll_engines.earnings import (
    EarningsBreakdown,
    OvertimeMultipliers,
    calculate_earnings,
)
from payroll_engines.exemption import (
    EmployeeContributions,
    MinimumWageExemption,
    apply_income_tax_exemption,
    calculate_minimum_wage_exemption,
    calculate_stamp_tax,
    employee_contributions,
)
from payroll_engines.progressive_tax import (
    BracketSlice,
    ProgressiveTaxResult,
    calculate_progressive_tax,
)
from payroll_engines.timesheet import (
    DayEntry,
    DayStatus,
    DetailedDay,
    OvertimeCategory,
    SimpleDay,
    TimesheetSummary,
    aggregate_timesheet,
    days_in_month,
    normalize_day_entry,
    normalize_days,
)
from payroll_engines.tracer import compute_input_fingerprint, traced_engine

__all__ = [
    "BracketSlice",
    "DayEntry",
    "DayStatus",
    "DetailedDay",
    "EarningsBreakdown",
    "EmployeeContributions",
    "MinimumWageExemption",
    "OvertimeCategory",
    "OvertimeMultipliers",
    "PriorPayroll",
    "ProgressiveTaxResult",
    "SimpleDay",
    "TimesheetSummary",
    "aggregate_timesheet",
    "apply_income_tax_exemption",
    "calculate_earnings",
    "calculate_minimum_wage_exemption",
    "calculate_progressive_tax",
    "calculate_stamp_tax",
    "compute_input_fingerprint",
    "cumulative_income_before",
    "days_in_month",
    "employee_contributions",
    "normalize_day_entry",
    "normalize_days",
    "traced_engine",
]
