#!/usr/bin/env python3
"""
Compute one employee's monthly payroll from a JSON input document.

Usage:
    python scripts/compute_payroll.py input.json
    python scripts/compute_payroll.py input.json --settings my_settings.yaml
    python scripts/compute_payroll.py - --breakdown < input.json

Input document (camelCase or snake_case keys):
    {
      "employee": {"id": "<uuid>", "monthlySalary": "30000"},
      "year": 2025,
      "month": 3,
      "days": {"1": "worked", "2": {"status": "overtime", "hours": 3, "isWeekend": true}},
      "priorPayrolls": [
        {"month": 1, "grossSalary": "30000", "sgkEmployee": "4200", "unemployment": "300"}
      ],
      "settings": {"sgkRate": "0.14", ...}
    }

Settings precedence: --settings YAML file, then the document's "settings"
mapping, then the packaged default set.  Prints the computed record as JSON.
Breakdown amounts are shown rounded to 0.01; the record lines are the
rounded statement itself.  Exit status is 0 on success, 2 on invalid input
or configuration.
"""

import argparse
import json
import logging
import sys
from decimal import Decimal
from pathlib import Path
from typing import Any
from uuid import UUID

# Add project root to path
ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

from payroll_config import get_default_settings, resolve_settings
from payroll_config.loader import load_settings_file
from payroll_engines import PriorPayroll
from payroll_kernel.domain.values import round_money, to_decimal
from payroll_kernel.exceptions import PayrollEngineError
from payroll_kernel.logging_config import configure_logging, get_logger
from payroll_modules.payroll import Employee, PayrollCalculation, Timesheet, assemble_payroll

logger = get_logger("scripts.compute_payroll")


def _get(doc: dict[str, Any], snake: str, camel: str, default: Any = None) -> Any:
    if snake in doc:
        return doc[snake]
    return doc.get(camel, default)


def _json_default(value: Any) -> Any:
    if isinstance(value, (Decimal, UUID)):
        return str(value)
    if hasattr(value, "isoformat"):
        return value.isoformat()
    raise TypeError(f"not JSON serializable: {type(value).__name__}")


def read_document(source: str) -> dict[str, Any]:
    """Read the input document from a path, or stdin for ``-``."""
    if source == "-":
        return json.load(sys.stdin, parse_float=Decimal)
    with open(source) as f:
        return json.load(f, parse_float=Decimal)


def compute(doc: dict[str, Any], settings_path: Path | None = None) -> PayrollCalculation:
    """Build the inputs from ``doc`` and run the assembler."""
    raw_employee = doc.get("employee") or {}
    employee_id = UUID(str(raw_employee["id"])) if "id" in raw_employee else UUID(int=0)
    employee = Employee(
        id=employee_id,
        monthly_salary=_get(raw_employee, "monthly_salary", "monthlySalary"),
        department_id=None,
    )
    year = int(doc["year"])
    month = int(doc["month"])

    if settings_path is not None:
        settings = resolve_settings(load_settings_file(settings_path).settings)
    elif doc.get("settings") is not None:
        settings = resolve_settings(doc["settings"])
    else:
        settings = get_default_settings()

    priors = [
        PriorPayroll(
            employee_id=employee_id,
            year=int(p.get("year", year)),
            month=int(p["month"]),
            gross_salary=to_decimal(_get(p, "gross_salary", "grossSalary"), "gross_salary"),
            sgk_employee=to_decimal(_get(p, "sgk_employee", "sgkEmployee"), "sgk_employee"),
            unemployment=to_decimal(p.get("unemployment"), "unemployment"),
        )
        for p in _get(doc, "prior_payrolls", "priorPayrolls", [])
    ]

    return assemble_payroll(
        employee=employee,
        year=year,
        month=month,
        timesheet=Timesheet(employee_id=employee_id, year=year, month=month, days=doc.get("days") or {}),
        settings=settings,
        prior_payrolls=priors,
    )


def render(calculation: PayrollCalculation, breakdown: bool = False) -> dict[str, Any]:
    record = calculation.record
    output: dict[str, Any] = {
        "employeeId": record.employee_id,
        "year": record.year,
        "month": record.month,
        "workedDays": record.worked_days,
        "overtimeDays": record.overtime_days,
        "daysInMonth": record.days_in_month,
        "dailySalary": record.daily_salary,
        "grossSalary": record.gross_salary,
        "sgkEmployee": record.sgk_employee,
        "unemployment": record.unemployment,
        "incomeTax": record.income_tax,
        "stampTax": record.stamp_tax,
        "totalDeductions": record.total_deductions,
        "netSalary": record.net_salary,
        "approved": record.approved,
    }
    if breakdown:
        output["breakdown"] = {
            "paidDays": calculation.timesheet.paid_days,
            "overtimePay": round_money(calculation.earnings.overtime_pay),
            "incomeTaxBase": round_money(calculation.income_tax_base),
            "previousCumulativeIncome": round_money(calculation.previous_cumulative_income),
            "computedIncomeTax": round_money(calculation.computed_income_tax.tax),
            "incomeTaxExemption": round_money(calculation.exemption.income_tax_exemption),
            "stampTaxExemption": round_money(calculation.exemption.stamp_tax_exemption),
            "brackets": [
                {
                    "lower": s.lower,
                    "upper": s.upper,
                    "rate": s.rate,
                    "taxable": round_money(s.taxable),
                    "tax": round_money(s.tax),
                }
                for s in calculation.computed_income_tax.slices
            ],
            "settingsChecksum": calculation.settings_checksum,
        }
    return output


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Compute a monthly payroll record")
    parser.add_argument("input", help="JSON input document, or - for stdin")
    parser.add_argument("--settings", type=Path, help="YAML settings set to use")
    parser.add_argument("--breakdown", action="store_true", help="include the audit breakdown")
    parser.add_argument("--log-level", default="WARNING", help="log level for stderr (default WARNING)")
    args = parser.parse_args(argv)

    configure_logging(level=getattr(logging, args.log_level.upper(), logging.WARNING))

    try:
        calculation = compute(read_document(args.input), args.settings)
    except (PayrollEngineError, KeyError, ValueError, OSError) as exc:
        code = getattr(exc, "code", type(exc).__name__)
        print(f"Error [{code}]: {exc}", file=sys.stderr)
        return 2

    json.dump(render(calculation, args.breakdown), sys.stdout, default=_json_default, indent=2)
    sys.stdout.write("\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
