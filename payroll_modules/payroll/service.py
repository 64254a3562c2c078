"""
Payroll Module Service (``payroll_modules.payroll.service``).

Responsibility
--------------
Persistence-backed payroll lifecycle: generate (compute and save) one
payroll, generate a whole period from one settings snapshot, generate an
employee's year to date in month order, approve / unapprove / toggle,
look up, delete, and summarize a period.  All computation is delegated to
the pure ``assemble_payroll``; this service only reads inputs from and
writes records to the session.

Architecture position
---------------------
**Modules layer** -- thin glue.  ``PayrollService`` is the sole public
entry point for stored payroll operations.

Invariants enforced
-------------------
* Each public mutating method owns the transaction boundary
  (``commit`` on success, ``rollback`` and re-raise on any exception).
* One row per (employee, year, month): generation updates the existing
  row in place and never touches its approval fields.
* Cumulative income is read only from this employee's stored payrolls of
  earlier months in the same year.
* Approval transitions are resolved through
  ``PAYROLL_APPROVAL_WORKFLOW``; timestamps come from the injected clock.

Failure modes
-------------
* ``PayrollNotFoundError`` -- approve/unapprove/toggle/delete on a period
  with no stored payroll.
* ``InvalidTransitionError`` -- approving an approved payroll or
  unapproving a pending one.
* ``InvalidInputError`` / ``ConfigurationError`` -- from the assembler;
  the session is rolled back.

Audit relevance
---------------
Structured log events are emitted at operation start and on commit or
rollback, carrying the employee, period and actor, and the amounts as
strings.

Usage::

    service = PayrollService(session, clock=clock)
    calculation = service.generate(
        employee=employee, year=2025, month=3, timesheet=timesheet,
        settings=get_default_settings(), actor_id=actor_id,
    )
    service.approve(employee.id, 2025, 3, actor_id=actor_id)
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import replace
from typing import Any
from uuid import UUID, uuid4

from sqlalchemy.orm import Session

from payroll_config import resolve_settings
from payroll_config.schema import PayrollSettings
from payroll_kernel.domain.clock import Clock, SystemClock
from payroll_kernel.domain.values import ZERO
from payroll_kernel.exceptions import PayrollNotFoundError
from payroll_kernel.logging_config import LogContext, get_logger
from payroll_modules.payroll.assembler import assemble_payroll
from payroll_modules.payroll.models import (
    BatchResult,
    Employee,
    PayrollCalculation,
    PayrollRecord,
    PayrollStatus,
    PeriodSummary,
    Timesheet,
)
from payroll_modules.payroll.orm import PayrollModel
from payroll_modules.payroll.workflows import (
    APPROVE,
    APPROVED,
    PAYROLL_APPROVAL_WORKFLOW,
    PENDING,
    UNAPPROVE,
)

logger = get_logger("modules.payroll.service")

SettingsSource = PayrollSettings | Mapping[str, Any]


def _period(year: int, month: int) -> str:
    return f"{year}-{month:02d}"


class PayrollService:
    """
    Orchestrates stored payroll operations over one SQLAlchemy session.

    Guarantees
    ----------
    * Session is committed only when the whole operation succeeds.
    * A batch or year-to-date run is one transaction: all records or none.
    * Clock is injectable for deterministic testing.

    Non-goals
    ---------
    * Does NOT store employees or timesheets; callers pass them in.
    * Does NOT refresh later months when an earlier month is regenerated;
      use ``generate_year_to_date`` to recompute in order.
    """

    def __init__(self, session: Session, clock: Clock | None = None):
        self._session = session
        self._clock = clock or SystemClock()

    # =========================================================================
    # Queries
    # =========================================================================

    def _find(self, employee_id: UUID, year: int, month: int) -> PayrollModel | None:
        return (
            self._session.query(PayrollModel)
            .filter_by(employee_id=employee_id, year=year, month=month)
            .first()
        )

    def _require(self, employee_id: UUID, year: int, month: int) -> PayrollModel:
        model = self._find(employee_id, year, month)
        if model is None:
            raise PayrollNotFoundError(str(employee_id), year, month)
        return model

    def _prior_records(self, employee_id: UUID, year: int, month: int) -> list[PayrollRecord]:
        rows = (
            self._session.query(PayrollModel)
            .filter(
                PayrollModel.employee_id == employee_id,
                PayrollModel.year == year,
                PayrollModel.month < month,
            )
            .order_by(PayrollModel.month)
            .all()
        )
        return [row.to_dto() for row in rows]

    def get(self, employee_id: UUID, year: int, month: int) -> PayrollRecord | None:
        """The stored payroll for the period, or None when Unsaved."""
        model = self._find(employee_id, year, month)
        return model.to_dto() if model is not None else None

    def status(self, employee_id: UUID, year: int, month: int) -> PayrollStatus:
        record = self.get(employee_id, year, month)
        return PayrollStatus.UNSAVED if record is None else record.status

    def list_for_period(
        self,
        year: int,
        month: int,
        employee_ids: Iterable[UUID] | None = None,
    ) -> list[PayrollRecord]:
        """Stored payrolls of one period, optionally limited to some employees."""
        query = self._session.query(PayrollModel).filter_by(year=year, month=month)
        if employee_ids is not None:
            query = query.filter(PayrollModel.employee_id.in_(list(employee_ids)))
        rows = query.all()
        return sorted((row.to_dto() for row in rows), key=lambda r: str(r.employee_id))

    def list_for_employee(self, employee_id: UUID, year: int) -> list[PayrollRecord]:
        """One employee's stored payrolls for ``year`` in month order."""
        return self._prior_records(employee_id, year, 13)

    def summarize_period(
        self,
        year: int,
        month: int,
        employee_ids: Iterable[UUID] | None = None,
    ) -> PeriodSummary:
        """
        Totals of gross, deductions and net over a period's stored payrolls.

        ``employee_ids`` restricts the summary, e.g. to one department.
        """
        records = self.list_for_period(year, month, employee_ids)
        approved = sum(1 for r in records if r.approved)
        summary = PeriodSummary(
            year=year,
            month=month,
            payroll_count=len(records),
            approved_count=approved,
            pending_count=len(records) - approved,
            total_gross=sum((r.gross_salary for r in records), ZERO),
            total_deductions=sum((r.total_deductions for r in records), ZERO),
            total_net=sum((r.net_salary for r in records), ZERO),
            total_income_tax=sum((r.income_tax for r in records), ZERO),
            total_stamp_tax=sum((r.stamp_tax for r in records), ZERO),
        )
        logger.info(
            "payroll_period_summarized",
            extra={
                "period": _period(year, month),
                "payroll_count": summary.payroll_count,
                "total_net": str(summary.total_net),
            },
        )
        return summary

    # =========================================================================
    # Computation
    # =========================================================================

    def _compute(
        self,
        employee: Employee,
        year: int,
        month: int,
        timesheet: Timesheet | None,
        settings: PayrollSettings,
    ) -> tuple[PayrollCalculation, PayrollModel | None]:
        model = self._find(employee.id, year, month) if employee is not None else None
        calculation = assemble_payroll(
            employee=employee,
            year=year,
            month=month,
            timesheet=timesheet,
            settings=settings,
            prior_payrolls=self._prior_records(employee.id, year, month) if employee is not None else (),
            existing=model.to_dto() if model is not None else None,
        )
        return calculation, model

    def _save(
        self,
        calculation: PayrollCalculation,
        model: PayrollModel | None,
        actor_id: UUID,
    ) -> PayrollCalculation:
        if model is None:
            model = PayrollModel.from_dto(calculation.record, created_by_id=actor_id)
            self._session.add(model)
        else:
            model.apply_figures(calculation.record, updated_by_id=actor_id)
        self._session.flush()
        return replace(calculation, record=replace(calculation.record, id=model.id))

    def preview(
        self,
        employee: Employee,
        year: int,
        month: int,
        timesheet: Timesheet | None,
        settings: SettingsSource,
    ) -> PayrollCalculation:
        """Compute against stored history without saving anything."""
        calculation, _ = self._compute(
            employee, year, month, timesheet, resolve_settings(settings)
        )
        return calculation

    def generate(
        self,
        employee: Employee,
        year: int,
        month: int,
        timesheet: Timesheet | None,
        settings: SettingsSource,
        actor_id: UUID,
    ) -> PayrollCalculation:
        """
        Compute and store the payroll for one employee and period.

        Unsaved becomes Pending; an existing row is overwritten in place,
        keeping its approval state.
        """
        period = _period(year, month)
        with LogContext.bind(
            employee_id=str(employee.id) if employee is not None else None,
            actor_id=str(actor_id),
            period=period,
        ):
            logger.info("payroll_generate_started")
            try:
                resolved = resolve_settings(settings)
                calculation, model = self._compute(employee, year, month, timesheet, resolved)
                calculation = self._save(calculation, model, actor_id)
                self._session.commit()
            except Exception:
                self._session.rollback()
                logger.exception("payroll_generate_rolled_back")
                raise

            logger.info(
                "payroll_generate_committed",
                extra={
                    "payroll_id": str(calculation.record.id),
                    "gross_salary": str(calculation.record.gross_salary),
                    "net_salary": str(calculation.record.net_salary),
                    "approved": calculation.record.approved,
                },
            )
            return calculation

    def generate_batch(
        self,
        employees: Sequence[Employee],
        timesheets: Iterable[Timesheet],
        year: int,
        month: int,
        settings: SettingsSource,
        actor_id: UUID,
    ) -> BatchResult:
        """
        Generate a period's payroll for every employee in one transaction.

        Settings are resolved once for the whole batch.  Employees whose
        month has no worked day (including those without a timesheet) are
        skipped and get no record.
        """
        by_employee = {str(t.employee_id): t for t in timesheets}
        batch_id = str(uuid4())
        with LogContext.bind(
            batch_id=batch_id, actor_id=str(actor_id), period=_period(year, month)
        ):
            logger.info("payroll_batch_started", extra={"employee_count": len(employees)})
            generated: list[PayrollRecord] = []
            skipped: list[UUID] = []
            try:
                resolved = resolve_settings(settings)
                for employee in employees:
                    timesheet = by_employee.get(str(employee.id))
                    calculation, model = self._compute(employee, year, month, timesheet, resolved)
                    if calculation.record.worked_days == 0:
                        skipped.append(employee.id)
                        logger.info(
                            "payroll_batch_employee_skipped",
                            extra={"skipped_employee_id": str(employee.id)},
                        )
                        continue
                    generated.append(self._save(calculation, model, actor_id).record)
                self._session.commit()
            except Exception:
                self._session.rollback()
                logger.exception("payroll_batch_rolled_back")
                raise

            logger.info(
                "payroll_batch_committed",
                extra={
                    "generated_count": len(generated),
                    "skipped_count": len(skipped),
                    "total_net": str(sum((r.net_salary for r in generated), ZERO)),
                },
            )
            return BatchResult(
                year=year,
                month=month,
                generated=tuple(generated),
                skipped_employee_ids=tuple(skipped),
            )

    def generate_year_to_date(
        self,
        employee: Employee,
        year: int,
        timesheets: Iterable[Timesheet],
        settings: SettingsSource,
        actor_id: UUID,
        through_month: int = 12,
    ) -> list[PayrollCalculation]:
        """
        Regenerate one employee's months 1..through_month in ascending order.

        Each month sees the freshly stored figures of the months before
        it, so a corrected early month propagates into later cumulative
        tax.  Months without a timesheet are left as stored.
        """
        by_month: dict[int, Timesheet] = {}
        for timesheet in timesheets:
            if timesheet.year == year and str(timesheet.employee_id) == str(employee.id):
                by_month[timesheet.month] = timesheet

        with LogContext.bind(employee_id=str(employee.id), actor_id=str(actor_id)):
            logger.info(
                "payroll_year_to_date_started",
                extra={"year": year, "months": sorted(by_month)},
            )
            results: list[PayrollCalculation] = []
            try:
                resolved = resolve_settings(settings)
                for month in range(1, through_month + 1):
                    if month not in by_month:
                        continue
                    calculation, model = self._compute(
                        employee, year, month, by_month[month], resolved
                    )
                    results.append(self._save(calculation, model, actor_id))
                self._session.commit()
            except Exception:
                self._session.rollback()
                logger.exception("payroll_year_to_date_rolled_back")
                raise

            logger.info(
                "payroll_year_to_date_committed",
                extra={"year": year, "generated_count": len(results)},
            )
            return results

    # =========================================================================
    # Approval lifecycle
    # =========================================================================

    def _transition(
        self, employee_id: UUID, year: int, month: int, action: str | None, actor_id: UUID
    ) -> PayrollRecord:
        with LogContext.bind(
            employee_id=str(employee_id), actor_id=str(actor_id), period=_period(year, month)
        ):
            try:
                model = self._require(employee_id, year, month)
                current = APPROVED if model.approved else PENDING
                if action is None:
                    action = UNAPPROVE if model.approved else APPROVE
                transition = PAYROLL_APPROVAL_WORKFLOW.resolve(current, action)

                if transition.stamps_approval:
                    model.approved = True
                    model.approved_at = self._clock.now()
                    model.approved_by = actor_id
                elif transition.clears_approval:
                    model.approved = False
                    model.approved_at = None
                    model.approved_by = None
                model.updated_by_id = actor_id

                self._session.flush()
                record = model.to_dto()
                self._session.commit()
            except Exception:
                self._session.rollback()
                logger.warning(
                    "payroll_transition_rejected",
                    extra={"action": action or "toggle"},
                    exc_info=True,
                )
                raise

            logger.info(
                "payroll_transition_committed",
                extra={
                    "action": transition.action,
                    "from_state": transition.from_state,
                    "to_state": transition.to_state,
                },
            )
            return record

    def approve(self, employee_id: UUID, year: int, month: int, actor_id: UUID) -> PayrollRecord:
        """Pending -> Approved, stamping approved_at and approved_by."""
        return self._transition(employee_id, year, month, APPROVE, actor_id)

    def unapprove(self, employee_id: UUID, year: int, month: int, actor_id: UUID) -> PayrollRecord:
        """Approved -> Pending, clearing approved_at and approved_by."""
        return self._transition(employee_id, year, month, UNAPPROVE, actor_id)

    def toggle_approval(
        self, employee_id: UUID, year: int, month: int, actor_id: UUID
    ) -> PayrollRecord:
        """Approve a pending payroll or unapprove an approved one."""
        return self._transition(employee_id, year, month, None, actor_id)

    def delete(self, employee_id: UUID, year: int, month: int, actor_id: UUID) -> None:
        """Remove the stored payroll, returning the period to Unsaved."""
        with LogContext.bind(
            employee_id=str(employee_id), actor_id=str(actor_id), period=_period(year, month)
        ):
            try:
                model = self._require(employee_id, year, month)
                was_approved = model.approved
                self._session.delete(model)
                self._session.commit()
            except Exception:
                self._session.rollback()
                logger.warning("payroll_delete_rejected", exc_info=True)
                raise

            logger.info("payroll_deleted", extra={"was_approved": was_approved})
