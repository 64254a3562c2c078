"""
Module: payroll_engines.timesheet
Responsibility:
    Normalize a month's raw attendance entries into typed day entries and
    reduce them to day-type counts plus overtime hours split by category
    (weekday, weekend, holiday).

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import payroll_kernel.

Invariants enforced:
    - Every day key lies in [1, days_in_month(year, month)].
    - An ``overtime`` day always counts as worked AND as an overtime day.
    - Overtime hours land in exactly one bucket: holiday > weekend > weekday.
    - Hours on non-overtime days are ignored.
    - A day missing from the map counts toward nothing.

Failure modes:
    - InvalidInputError on an unknown status, negative or non-finite hours,
      a non-integer day key, a day key outside the month, or a month
      outside 1..12.

Audit relevance:
    The summary is the only attendance input the earnings engine sees, so
    the day counts on a pay statement can always be re-derived from it.

Usage:
    from payroll_engines.timesheet import aggregate_timesheet

    summary = aggregate_timesheet(
        days={"1": "worked", "2": {"status": "overtime", "hours": 3, "isWeekend": True}},
        year=2025,
        month=3,
    )
    summary.paid_days  # 2
"""

from __future__ import annotations

import calendar
from collections.abc import Mapping
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any

from payroll_engines.tracer import traced_engine
from payroll_kernel.domain.values import ZERO, to_decimal
from payroll_kernel.exceptions import InvalidInputError
from payroll_kernel.logging_config import get_logger

logger = get_logger("engines.timesheet")


class DayStatus(str, Enum):
    """Attendance status of one calendar day (wire values preserved)."""

    WORKED = "worked"
    NOT_WORKED = "notWorked"
    PAID_LEAVE = "paidLeave"
    UNPAID_LEAVE = "unpaidLeave"
    OVERTIME = "overtime"
    SICK_LEAVE = "sickLeave"
    WEEKEND = "weekend"
    PUBLIC_HOLIDAY = "publicHoliday"

    @classmethod
    def parse(cls, raw: Any, day: int) -> DayStatus:
        if isinstance(raw, DayStatus):
            return raw
        try:
            return cls(raw)
        except ValueError:
            raise InvalidInputError(
                f"days[{day}].status", "unknown day status", raw
            ) from None


class OvertimeCategory(str, Enum):
    """Multiplier bucket an overtime day's hours are paid under."""

    WEEKDAY = "weekday"
    WEEKEND = "weekend"
    HOLIDAY = "holiday"


@dataclass(frozen=True)
class SimpleDay:
    """A day carrying only a status."""

    status: DayStatus


@dataclass(frozen=True)
class DetailedDay:
    """
    A day with hours and weekend/holiday flags.

    Guarantees:
        - ``hours`` is a finite, non-negative Decimal.
    """

    status: DayStatus
    hours: Decimal = ZERO
    is_weekend: bool = False
    is_holiday: bool = False

    @property
    def overtime_category(self) -> OvertimeCategory:
        if self.is_holiday:
            return OvertimeCategory.HOLIDAY
        if self.is_weekend:
            return OvertimeCategory.WEEKEND
        return OvertimeCategory.WEEKDAY


DayEntry = SimpleDay | DetailedDay


@dataclass(frozen=True)
class TimesheetSummary:
    """
    Day-type counts and overtime-hour totals for one employee-month.

    ``worked`` includes overtime days.
    """

    worked: int = 0
    overtime_days: int = 0
    paid_leave: int = 0
    unpaid_leave: int = 0
    sick_leave: int = 0
    weekend: int = 0
    public_holiday: int = 0
    not_worked: int = 0
    weekday_overtime_hours: Decimal = ZERO
    weekend_overtime_hours: Decimal = ZERO
    holiday_overtime_hours: Decimal = ZERO

    @property
    def paid_days(self) -> int:
        """worked + paid_leave + weekend + public_holiday."""
        return self.worked + self.paid_leave + self.weekend + self.public_holiday

    @property
    def unpaid_days(self) -> int:
        return self.unpaid_leave + self.sick_leave + self.not_worked

    @property
    def total_overtime_hours(self) -> Decimal:
        return (
            self.weekday_overtime_hours
            + self.weekend_overtime_hours
            + self.holiday_overtime_hours
        )


def days_in_month(year: int, month: int) -> int:
    """Number of calendar days in ``month`` (1..12) of ``year``."""
    if isinstance(year, bool) or not isinstance(year, int) or year < 1:
        raise InvalidInputError("year", "must be a positive integer", year)
    if isinstance(month, bool) or not isinstance(month, int) or not 1 <= month <= 12:
        raise InvalidInputError("month", "must be an integer from 1 to 12", month)
    return calendar.monthrange(year, month)[1]


def _flag(raw: Mapping[str, Any], camel: str, snake: str) -> bool:
    return bool(raw.get(camel, raw.get(snake, False)))


def normalize_day_entry(raw: Any, day: int) -> DayEntry:
    """
    Convert one wire entry to a typed ``DayEntry``.

    Accepts an existing ``SimpleDay``/``DetailedDay``, a bare status string,
    or a mapping ``{status, hours?, isWeekend?, isHoliday?}`` (snake_case
    flag names are accepted too).
    """
    if isinstance(raw, (SimpleDay, DetailedDay)):
        if isinstance(raw, DetailedDay) and raw.hours < ZERO:
            raise InvalidInputError(f"days[{day}].hours", "must not be negative", raw.hours)
        return raw
    if isinstance(raw, (str, DayStatus)):
        return SimpleDay(DayStatus.parse(raw, day))
    if isinstance(raw, Mapping):
        if "status" not in raw:
            raise InvalidInputError(f"days[{day}].status", "status is required", None)
        status = DayStatus.parse(raw["status"], day)
        hours_raw = raw.get("hours")
        hours = ZERO if hours_raw is None else to_decimal(hours_raw, f"days[{day}].hours")
        return DetailedDay(
            status=status,
            hours=hours,
            is_weekend=_flag(raw, "isWeekend", "is_weekend"),
            is_holiday=_flag(raw, "isHoliday", "is_holiday"),
        )
    raise InvalidInputError(
        f"days[{day}]", f"unsupported day entry type {type(raw).__name__}", raw
    )


def _coerce_day_key(key: Any, limit: int) -> int:
    if isinstance(key, bool):
        raise InvalidInputError("days", "day key must be an integer", key)
    if isinstance(key, int):
        day = key
    elif isinstance(key, str) and key.strip().isdigit():
        day = int(key.strip())
    else:
        raise InvalidInputError("days", "day key must be an integer", key)
    if not 1 <= day <= limit:
        raise InvalidInputError("days", f"day key must be between 1 and {limit}", key)
    return day


def normalize_days(
    days: Mapping[Any, Any] | None, year: int, month: int
) -> dict[int, DayEntry]:
    """Normalize a raw days map once, returning ``{day_number: DayEntry}``."""
    limit = days_in_month(year, month)
    if not days:
        return {}
    normalized: dict[int, DayEntry] = {}
    for key, raw in days.items():
        day = _coerce_day_key(key, limit)
        if day in normalized:
            raise InvalidInputError("days", "duplicate day key", key)
        normalized[day] = normalize_day_entry(raw, day)
    return normalized


@traced_engine("timesheet_aggregator", "1.0", fingerprint_fields=("year", "month", "days"))
def aggregate_timesheet(
    *,
    days: Mapping[Any, Any] | None,
    year: int,
    month: int,
) -> TimesheetSummary:
    """
    Reduce a month's day entries to a ``TimesheetSummary``.

    Preconditions:
        ``month`` is 1..12; keys are day numbers (int or digit string).
    Postconditions:
        Empty or missing ``days`` yields an all-zero summary.
    Raises:
        InvalidInputError: on bad keys, statuses or hours.
    """
    counts = {
        DayStatus.WORKED: 0,
        DayStatus.OVERTIME: 0,
        DayStatus.PAID_LEAVE: 0,
        DayStatus.UNPAID_LEAVE: 0,
        DayStatus.SICK_LEAVE: 0,
        DayStatus.WEEKEND: 0,
        DayStatus.PUBLIC_HOLIDAY: 0,
        DayStatus.NOT_WORKED: 0,
    }
    hours = {category: ZERO for category in OvertimeCategory}

    for entry in normalize_days(days, year, month).values():
        counts[entry.status] += 1
        if entry.status is DayStatus.OVERTIME and isinstance(entry, DetailedDay):
            hours[entry.overtime_category] += entry.hours

    summary = TimesheetSummary(
        worked=counts[DayStatus.WORKED] + counts[DayStatus.OVERTIME],
        overtime_days=counts[DayStatus.OVERTIME],
        paid_leave=counts[DayStatus.PAID_LEAVE],
        unpaid_leave=counts[DayStatus.UNPAID_LEAVE],
        sick_leave=counts[DayStatus.SICK_LEAVE],
        weekend=counts[DayStatus.WEEKEND],
        public_holiday=counts[DayStatus.PUBLIC_HOLIDAY],
        not_worked=counts[DayStatus.NOT_WORKED],
        weekday_overtime_hours=hours[OvertimeCategory.WEEKDAY],
        weekend_overtime_hours=hours[OvertimeCategory.WEEKEND],
        holiday_overtime_hours=hours[OvertimeCategory.HOLIDAY],
    )

    logger.debug(
        "timesheet_aggregated",
        extra={
            "period": f"{year}-{month:02d}",
            "worked": summary.worked,
            "overtime_days": summary.overtime_days,
            "paid_days": summary.paid_days,
            "overtime_hours": str(summary.total_overtime_hours),
        },
    )
    return summary
