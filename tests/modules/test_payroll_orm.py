"""ORM round-trip tests for the payroll record table.

Verifies that a PayrollRecord can be persisted through PayrollModel,
queried back with the same field values, and that the period unique
constraint and the month check constraint are enforced by the database.
"""

from dataclasses import replace
from datetime import UTC, datetime
from decimal import Decimal
from uuid import uuid4

import pytest
from sqlalchemy.exc import IntegrityError

from payroll_modules.payroll.models import PayrollRecord
from payroll_modules.payroll.orm import PayrollModel

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _record(**overrides) -> PayrollRecord:
    defaults = dict(
        employee_id=uuid4(),
        year=2025,
        month=1,
        worked_days=31,
        overtime_days=0,
        days_in_month=31,
        daily_salary=Decimal("1000.00"),
        gross_salary=Decimal("31000.00"),
        sgk_employee=Decimal("4340.00"),
        unemployment=Decimal("310.00"),
        income_tax=Decimal("1402.18"),
        stamp_tax=Decimal("83.47"),
        total_deductions=Decimal("6135.65"),
        net_salary=Decimal("24864.35"),
    )
    defaults.update(overrides)
    return PayrollRecord(**defaults)


def _store(session, record, actor_id) -> PayrollModel:
    model = PayrollModel.from_dto(record, created_by_id=actor_id)
    session.add(model)
    session.flush()
    return model


class TestPayrollModelRoundTrip:
    """Persist and read back payroll records."""

    def test_pending_round_trip(self, session, test_actor_id):
        record = _record()
        model = _store(session, record, test_actor_id)
        session.expire_all()

        loaded = session.get(PayrollModel, model.id)
        assert loaded.to_dto() == replace(record, id=model.id)
        assert loaded.created_by_id == test_actor_id

    def test_approved_round_trip(self, session, test_actor_id):
        approved_at = datetime(2025, 2, 3, 10, 30, tzinfo=UTC)
        record = _record(approved=True, approved_at=approved_at, approved_by=test_actor_id)
        model = _store(session, record, test_actor_id)
        session.expire_all()

        dto = session.get(PayrollModel, model.id).to_dto()
        assert dto.approved
        assert dto.approved_at == approved_at
        assert dto.approved_by == test_actor_id

    def test_existing_id_is_kept(self, session, test_actor_id):
        record_id = uuid4()
        model = _store(session, _record(id=record_id), test_actor_id)
        assert model.id == record_id

    def test_query_by_period(self, session, test_actor_id):
        record = _record()
        _store(session, record, test_actor_id)
        found = (
            session.query(PayrollModel)
            .filter_by(employee_id=record.employee_id, year=2025, month=1)
            .first()
        )
        assert found is not None
        assert found.net_salary == Decimal("24864.35")

    def test_apply_figures_keeps_approval(self, session, test_actor_id):
        approved_at = datetime(2025, 2, 3, tzinfo=UTC)
        model = _store(
            session,
            _record(approved=True, approved_at=approved_at, approved_by=test_actor_id),
            test_actor_id,
        )
        updater = uuid4()
        model.apply_figures(
            _record(net_salary=Decimal("1.00"), total_deductions=Decimal("30999.00")),
            updated_by_id=updater,
        )
        session.flush()

        dto = model.to_dto()
        assert dto.net_salary == Decimal("1.00")
        assert dto.approved
        assert model.updated_by_id == updater

    def test_repr(self, session, test_actor_id):
        model = _store(session, _record(), test_actor_id)
        assert "2025-01" in repr(model)
        assert "pending" in repr(model)


class TestPayrollModelConstraints:
    """Database-level constraints."""

    def test_one_row_per_period(self, session, test_actor_id):
        employee_id = uuid4()
        _store(session, _record(employee_id=employee_id), test_actor_id)
        session.add(PayrollModel.from_dto(_record(employee_id=employee_id), created_by_id=test_actor_id))
        with pytest.raises(IntegrityError):
            session.flush()

    def test_same_month_other_year_allowed(self, session, test_actor_id):
        employee_id = uuid4()
        _store(session, _record(employee_id=employee_id), test_actor_id)
        _store(session, _record(employee_id=employee_id, year=2026), test_actor_id)
        assert session.query(PayrollModel).filter_by(employee_id=employee_id).count() == 2

    def test_month_out_of_range_rejected(self, session, test_actor_id):
        model = PayrollModel.from_dto(_record(), created_by_id=test_actor_id)
        model.month = 13
        session.add(model)
        with pytest.raises(IntegrityError):
            session.flush()

    def test_creator_required(self, session):
        session.add(PayrollModel.from_dto(_record(), created_by_id=None))
        with pytest.raises(IntegrityError):
            session.flush()
