"""
Payroll ORM Persistence Models (``payroll_modules.payroll.orm``).

Responsibility:
    SQLAlchemy ORM model persisting ``PayrollRecord`` with ``to_dto()`` /
    ``from_dto()`` conversion.

Architecture position:
    **Modules layer** -- persistence companion to the pure DTO models.
    Inherits from ``AuditedBase`` (kernel DB base): UUID primary key,
    created/updated timestamps and actors.  ``approved_at`` uses the
    kernel UTC column type, so it reads back timezone-aware.

Invariants enforced:
    - One row per (employee_id, year, month) (uq_payroll_record_period).
    - All monetary fields use Decimal (maps to Numeric(38,9)) -- NEVER float.
    - Month is stored 1..12 (ck_payroll_record_month).

Audit relevance:
    These rows are the only source later months consult for cumulative
    income, and carry who approved each statement and when.
"""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import Boolean, CheckConstraint, Index, Integer, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from payroll_kernel.db.base import AuditedBase
from payroll_kernel.domain.values import round_money


class PayrollModel(AuditedBase):
    """
    ORM model for ``PayrollRecord`` -- one employee's pay statement for one month.

    Guarantees:
        - ``(employee_id, year, month)`` is unique.
        - ``approved`` is true exactly when ``approved_at`` is set.
    """

    __tablename__ = "payroll_records"

    employee_id: Mapped[UUID] = mapped_column(nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    month: Mapped[int] = mapped_column(Integer, nullable=False)
    worked_days: Mapped[int] = mapped_column(Integer, nullable=False)
    overtime_days: Mapped[int] = mapped_column(Integer, nullable=False)
    days_in_month: Mapped[int] = mapped_column(Integer, nullable=False)
    daily_salary: Mapped[Decimal] = mapped_column(nullable=False)
    gross_salary: Mapped[Decimal] = mapped_column(nullable=False)
    sgk_employee: Mapped[Decimal] = mapped_column(nullable=False)
    unemployment: Mapped[Decimal] = mapped_column(nullable=False)
    income_tax: Mapped[Decimal] = mapped_column(nullable=False)
    stamp_tax: Mapped[Decimal] = mapped_column(nullable=False)
    total_deductions: Mapped[Decimal] = mapped_column(nullable=False)
    net_salary: Mapped[Decimal] = mapped_column(nullable=False)
    approved: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    approved_at: Mapped[datetime | None] = mapped_column(nullable=True)
    approved_by: Mapped[UUID | None] = mapped_column(nullable=True)

    __table_args__ = (
        UniqueConstraint("employee_id", "year", "month", name="uq_payroll_record_period"),
        CheckConstraint("month >= 1 AND month <= 12", name="ck_payroll_record_month"),
        Index("idx_payroll_record_period", "year", "month"),
        Index("idx_payroll_record_employee_year", "employee_id", "year"),
    )

    def apply_figures(self, dto, updated_by_id: UUID | None = None) -> None:
        """Overwrite the computed figures from ``dto``; approval is untouched."""
        self.worked_days = dto.worked_days
        self.overtime_days = dto.overtime_days
        self.days_in_month = dto.days_in_month
        self.daily_salary = dto.daily_salary
        self.gross_salary = dto.gross_salary
        self.sgk_employee = dto.sgk_employee
        self.unemployment = dto.unemployment
        self.income_tax = dto.income_tax
        self.stamp_tax = dto.stamp_tax
        self.total_deductions = dto.total_deductions
        self.net_salary = dto.net_salary
        if updated_by_id is not None:
            self.updated_by_id = updated_by_id

    def to_dto(self):
        from payroll_modules.payroll.models import PayrollRecord
        return PayrollRecord(
            id=self.id,
            employee_id=self.employee_id,
            year=self.year,
            month=self.month,
            worked_days=self.worked_days,
            overtime_days=self.overtime_days,
            days_in_month=self.days_in_month,
            daily_salary=round_money(self.daily_salary),
            gross_salary=round_money(self.gross_salary),
            sgk_employee=round_money(self.sgk_employee),
            unemployment=round_money(self.unemployment),
            income_tax=round_money(self.income_tax),
            stamp_tax=round_money(self.stamp_tax),
            total_deductions=round_money(self.total_deductions),
            net_salary=round_money(self.net_salary),
            approved=self.approved,
            approved_at=self.approved_at,
            approved_by=self.approved_by,
        )

    @classmethod
    def from_dto(cls, dto, created_by_id: UUID) -> "PayrollModel":
        model = cls(
            employee_id=dto.employee_id,
            year=dto.year,
            month=dto.month,
            approved=dto.approved,
            approved_at=dto.approved_at,
            approved_by=dto.approved_by,
            created_by_id=created_by_id,
        )
        if dto.id is not None:
            model.id = dto.id
        model.apply_figures(dto)
        return model

    def __repr__(self) -> str:
        state = "approved" if self.approved else "pending"
        return (
            f"<PayrollModel {self.employee_id} {self.year}-{self.month:02d}: "
            f"net {self.net_salary} ({state})>"
        )
