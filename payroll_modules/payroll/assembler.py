"""
Payroll Assembler (``payroll_modules.payroll.assembler``).

Responsibility
--------------
Pure composition of the payroll engines into one pay statement: timesheet
aggregation, earnings, employee contributions, cumulative income tax with
the minimum-wage exemption, stamp tax, and the resulting net pay.

Architecture position
---------------------
**Modules layer** -- pure function with ZERO I/O.  ``PayrollService``
calls it with data read from storage; the CLI calls it directly.

Invariants enforced
-------------------
* Statement lines are rounded to 0.01 (ROUND_HALF_UP) in this order:
  daily salary and gross, then SGK and unemployment on the rounded gross,
  then income tax and stamp tax.
* The rounded income tax never exceeds the unrounded bracket tax; when
  HALF_UP would round above it, the line is truncated to the cent below.
* total_deductions = sgk + unemployment + income_tax + stamp_tax and
  net_salary = gross_salary - total_deductions, exactly.
* An existing record's approval fields and id are carried over unchanged.
* Identical inputs always produce an identical record.

Failure modes
-------------
* ``InvalidInputError`` -- employee or settings missing, or a timesheet
  for a different employee or period.
* Any engine error propagates unchanged.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from payroll_config import resolve_settings
from payroll_config.loader import settings_checksum
from payroll_config.schema import PayrollSettings
from payroll_engines import (
    OvertimeMultipliers,
    PriorPayroll,
    aggregate_timesheet,
    apply_income_tax_exemption,
    calculate_earnings,
    calculate_minimum_wage_exemption,
    calculate_progressive_tax,
    calculate_stamp_tax,
    cumulative_income_before,
    days_in_month,
    employee_contributions,
)
from payroll_kernel.domain.values import floor_money, round_money
from payroll_kernel.exceptions import InvalidInputError
from payroll_kernel.logging_config import get_logger
from payroll_modules.payroll.models import (
    Employee,
    PayrollCalculation,
    PayrollRecord,
    Timesheet,
)

logger = get_logger("modules.payroll.assembler")


def overtime_multipliers(settings: PayrollSettings) -> OvertimeMultipliers:
    return OvertimeMultipliers(
        weekday=settings.overtime_multiplier,
        weekend=settings.weekend_multiplier,
        holiday=settings.holiday_multiplier,
    )


def _as_prior(item: PriorPayroll | PayrollRecord) -> PriorPayroll:
    return item.to_prior() if isinstance(item, PayrollRecord) else item


def assemble_payroll(
    *,
    employee: Employee | None,
    year: int,
    month: int,
    timesheet: Timesheet | None,
    settings: PayrollSettings | Mapping[str, Any] | None,
    prior_payrolls: Iterable[PriorPayroll | PayrollRecord] = (),
    existing: PayrollRecord | None = None,
) -> PayrollCalculation:
    """
    Compute the pay statement for ``employee`` in ``year``-``month``.

    Args:
        employee: The employee being paid.
        year: Calendar year.
        month: Calendar month, 1..12.
        timesheet: The month's attendance; None counts as an empty month.
        settings: ``PayrollSettings`` or a settings mapping.
        prior_payrolls: Stored payrolls (or their summaries) of this
            employee; only earlier months of ``year`` are counted.
        existing: The stored record being recomputed, whose approval state
            is preserved.

    Returns:
        ``PayrollCalculation`` with the record and its audit breakdown.
    """
    if employee is None:
        raise InvalidInputError("employee", "employee is required")
    if settings is None:
        raise InvalidInputError("settings", "settings are required")
    if not isinstance(settings, PayrollSettings):
        settings = resolve_settings(settings)

    month_days = days_in_month(year, month)
    if timesheet is not None and (
        str(timesheet.employee_id) != str(employee.id)
        or timesheet.year != year
        or timesheet.month != month
    ):
        raise InvalidInputError(
            "timesheet",
            f"timesheet is for {timesheet.employee_id} {timesheet.year}-{timesheet.month:02d}",
        )
    if existing is not None and (
        str(existing.employee_id) != str(employee.id)
        or existing.year != year
        or existing.month != month
    ):
        raise InvalidInputError("existing", f"record is for {existing.period}")

    summary = aggregate_timesheet(
        days=timesheet.days if timesheet is not None else None,
        year=year,
        month=month,
    )
    earnings = calculate_earnings(
        monthly_salary=employee.monthly_salary,
        days_in_month=month_days,
        summary=summary,
        daily_work_hours=settings.daily_work_hours,
        multipliers=overtime_multipliers(settings),
    )

    gross = round_money(earnings.gross_salary)
    contributions = employee_contributions(gross, settings.sgk_rate, settings.unemployment_rate)
    income_tax_base = gross - contributions.total

    previous = cumulative_income_before(
        employee_id=employee.id,
        year=year,
        month=month,
        prior_payrolls=[_as_prior(p) for p in prior_payrolls],
    )
    computed = calculate_progressive_tax(
        income_tax_base=income_tax_base,
        previous_cumulative_income=previous,
        brackets=settings.tax_brackets,
    )
    exemption = calculate_minimum_wage_exemption(
        minimum_wage=settings.minimum_wage,
        sgk_rate=settings.sgk_rate,
        unemployment_rate=settings.unemployment_rate,
        stamp_tax_rate=settings.stamp_tax_rate,
        brackets=settings.tax_brackets,
    )
    income_tax = min(
        round_money(apply_income_tax_exemption(computed.tax, exemption)),
        floor_money(computed.tax),
    )
    stamp_tax = round_money(
        calculate_stamp_tax(
            gross_salary=gross,
            stamp_tax_rate=settings.stamp_tax_rate,
            exemption=exemption,
        )
    )
    total_deductions = contributions.total + income_tax + stamp_tax

    record = PayrollRecord(
        employee_id=employee.id,
        year=year,
        month=month,
        worked_days=summary.worked,
        overtime_days=summary.overtime_days,
        days_in_month=month_days,
        daily_salary=round_money(earnings.daily_salary),
        gross_salary=gross,
        sgk_employee=contributions.sgk_employee,
        unemployment=contributions.unemployment,
        income_tax=income_tax,
        stamp_tax=stamp_tax,
        total_deductions=total_deductions,
        net_salary=gross - total_deductions,
        approved=existing.approved if existing is not None else False,
        approved_at=existing.approved_at if existing is not None else None,
        approved_by=existing.approved_by if existing is not None else None,
        id=existing.id if existing is not None else None,
    )

    if existing is not None and existing.approved:
        logger.warning(
            "approved_payroll_recomputed",
            extra={
                "employee_id": str(employee.id),
                "period": record.period,
                "previous_net_salary": str(existing.net_salary),
                "net_salary": str(record.net_salary),
            },
        )

    logger.info(
        "payroll_assembled",
        extra={
            "employee_id": str(employee.id),
            "period": record.period,
            "gross_salary": str(record.gross_salary),
            "income_tax": str(record.income_tax),
            "net_salary": str(record.net_salary),
            "previous_cumulative_income": str(previous),
        },
    )

    return PayrollCalculation(
        record=record,
        timesheet=summary,
        earnings=earnings,
        previous_cumulative_income=previous,
        income_tax_base=income_tax_base,
        computed_income_tax=computed,
        exemption=exemption,
        settings_checksum=settings_checksum(settings),
    )
