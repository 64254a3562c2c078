"""
Shared fixtures for the payroll test suite.

- JSON logging at DEBUG for the run; LogContext emptied around each test
- ``captured_logs``: parsed JSON records emitted during a test
- ``session``: a fresh database per test (``$PAYROLL_DATABASE_URL``, else
  in-memory SQLite) with the payroll table created
- Domain helpers: a pinned clock, a fixed actor, the packaged 2025
  settings, and factories for employees and full-month timesheets
"""

import calendar
import json
import logging
from decimal import Decimal
from io import StringIO
from uuid import UUID, uuid4

import pytest

from payroll_config import get_default_settings
from payroll_kernel.db import engine as db
from payroll_kernel.domain.clock import DeterministicClock
from payroll_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from payroll_modules.payroll.models import Employee, Timesheet

TEST_ACTOR_ID = UUID("00000000-0000-4000-8000-000000000001")


# -----------------------------------------------------------------------------
# Logging
# -----------------------------------------------------------------------------


@pytest.fixture(autouse=True, scope="session")
def _json_logging():
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _empty_log_context():
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Callable returning the JSON records logged so far in this test.

        def test_commit_logged(captured_logs, payroll_service):
            ...
            assert "payroll_generate_committed" in [r["message"] for r in captured_logs()]
    """
    buffer = StringIO()
    handler = logging.StreamHandler(buffer)
    handler.setFormatter(StructuredFormatter())
    namespace = logging.getLogger("payroll_kernel")
    saved_level = namespace.level
    namespace.setLevel(logging.DEBUG)
    namespace.addHandler(handler)

    yield lambda: [json.loads(line) for line in buffer.getvalue().splitlines() if line]

    namespace.removeHandler(handler)
    namespace.setLevel(saved_level)


# -----------------------------------------------------------------------------
# Database
# -----------------------------------------------------------------------------


@pytest.fixture
def db_engine():
    engine = db.init_engine_from_url(db.database_url_from_env())
    db.create_tables()
    yield engine
    db.drop_tables()
    db.reset_engine()


@pytest.fixture
def session(db_engine):
    sess = db.get_session()
    yield sess
    sess.rollback()
    sess.close()


# -----------------------------------------------------------------------------
# Domain
# -----------------------------------------------------------------------------


@pytest.fixture
def deterministic_clock() -> DeterministicClock:
    return DeterministicClock()


@pytest.fixture
def test_actor_id() -> UUID:
    return TEST_ACTOR_ID


@pytest.fixture
def default_settings():
    return get_default_settings()


@pytest.fixture
def make_employee():
    """``make_employee("31000")`` builds an active employee with that salary."""

    def _employee(salary="30000", **fields) -> Employee:
        fields.setdefault("id", uuid4())
        return Employee(monthly_salary=Decimal(str(salary)), **fields)

    return _employee


@pytest.fixture
def full_month_timesheet():
    """
    Timesheet with every calendar day ``worked``; ``overrides`` replaces
    individual days, e.g. ``{31: "unpaidLeave"}``.
    """

    def _timesheet(employee_id: UUID, year: int, month: int, overrides: dict | None = None) -> Timesheet:
        last_day = calendar.monthrange(year, month)[1]
        days = {str(day): "worked" for day in range(1, last_day + 1)}
        for day, entry in (overrides or {}).items():
            days[str(day)] = entry
        return Timesheet(employee_id=employee_id, year=year, month=month, days=days)

    return _timesheet
