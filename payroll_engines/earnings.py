"""
Module: payroll_engines.earnings
Responsibility:
    Derive daily salary, hourly rate, base salary, overtime pay and gross
    salary from a monthly salary, a timesheet summary and the effective
    daily hours and overtime multipliers.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - daily_salary = monthly_salary / calendar days in the month.
    - hourly_rate = daily_salary / daily_work_hours.
    - base_salary = paid_days * daily_salary.
    - gross_salary = base_salary + overtime_pay, with no upper cap.
    - Results are unrounded; rounding belongs to the assembler.

Failure modes:
    - InvalidInputError when monthly_salary <= 0, days_in_month <= 0,
      daily_work_hours <= 0 or a multiplier is negative.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from payroll_engines.timesheet import TimesheetSummary
from payroll_engines.tracer import traced_engine
from payroll_kernel.domain.values import to_decimal
from payroll_kernel.exceptions import InvalidInputError


@dataclass(frozen=True)
class OvertimeMultipliers:
    """Pay multipliers applied to the hourly rate per overtime category."""

    weekday: Decimal = Decimal("1.5")
    weekend: Decimal = Decimal("2.0")
    holiday: Decimal = Decimal("2.0")


@dataclass(frozen=True)
class EarningsBreakdown:
    """Unrounded earnings for one employee-month."""

    daily_salary: Decimal
    hourly_rate: Decimal
    base_salary: Decimal
    weekday_overtime_pay: Decimal
    weekend_overtime_pay: Decimal
    holiday_overtime_pay: Decimal

    @property
    def overtime_pay(self) -> Decimal:
        return (
            self.weekday_overtime_pay
            + self.weekend_overtime_pay
            + self.holiday_overtime_pay
        )

    @property
    def gross_salary(self) -> Decimal:
        return self.base_salary + self.overtime_pay


@traced_engine(
    "earnings",
    "1.0",
    fingerprint_fields=("monthly_salary", "days_in_month", "summary", "daily_work_hours"),
)
def calculate_earnings(
    *,
    monthly_salary: Decimal,
    days_in_month: int,
    summary: TimesheetSummary,
    daily_work_hours: Decimal,
    multipliers: OvertimeMultipliers,
) -> EarningsBreakdown:
    """
    Compute the earnings breakdown for one month.

    Raises:
        InvalidInputError: on non-positive salary, day count or daily hours,
            or a negative multiplier.
    """
    salary = to_decimal(monthly_salary, "monthly_salary", allow_zero=False)
    if isinstance(days_in_month, bool) or not isinstance(days_in_month, int) or days_in_month <= 0:
        raise InvalidInputError("days_in_month", "must be a positive integer", days_in_month)
    hours_per_day = to_decimal(daily_work_hours, "daily_work_hours", allow_zero=False)
    for name in ("weekday", "weekend", "holiday"):
        to_decimal(getattr(multipliers, name), f"{name}_multiplier")

    daily_salary = salary / Decimal(days_in_month)
    hourly_rate = daily_salary / hours_per_day

    return EarningsBreakdown(
        daily_salary=daily_salary,
        hourly_rate=hourly_rate,
        base_salary=Decimal(summary.paid_days) * daily_salary,
        weekday_overtime_pay=summary.weekday_overtime_hours * hourly_rate * multipliers.weekday,
        weekend_overtime_pay=summary.weekend_overtime_hours * hourly_rate * multipliers.weekend,
        holiday_overtime_pay=summary.holiday_overtime_hours * hourly_rate * multipliers.holiday,
    )
