"""
Module: payroll_kernel.db.engine
Responsibility: One process-wide SQLAlchemy engine and session factory for
    the payroll store, plus a commit-or-rollback ``session_scope``.
Architecture position: Kernel > DB.  ``create_tables`` imports the payroll
    ORM module so its table is registered on ``Base.metadata``.

Invariants enforced:
    - In-memory SQLite shares one connection (StaticPool) so every session
      sees the same database.
    - Server databases get a pre-pinged QueuePool at READ COMMITTED.
    - Sessions keep loaded attributes after commit (``expire_on_commit``
      off), so DTOs can be built from committed rows.

Failure modes:
    - RuntimeError from any accessor before ``init_engine_from_url``.
"""

import os
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import QueuePool, StaticPool

from payroll_kernel.logging_config import get_logger

logger = get_logger("db.engine")

DATABASE_URL_ENV = "PAYROLL_DATABASE_URL"
DEFAULT_DATABASE_URL = "sqlite:///:memory:"

_engine: Engine | None = None
_sessions: sessionmaker[Session] | None = None


def database_url_from_env() -> str:
    """``$PAYROLL_DATABASE_URL``, or in-memory SQLite when unset."""
    return os.environ.get(DATABASE_URL_ENV) or DEFAULT_DATABASE_URL


def _engine_options(database_url: str, pool_size: int, max_overflow: int) -> dict:
    url = make_url(database_url)
    if url.get_backend_name() != "sqlite":
        return {
            "poolclass": QueuePool,
            "pool_size": pool_size,
            "max_overflow": max_overflow,
            "pool_pre_ping": True,
            "isolation_level": "READ COMMITTED",
        }
    if url.database in (None, "", ":memory:"):
        return {"poolclass": StaticPool, "connect_args": {"check_same_thread": False}}
    return {}


def init_engine_from_url(
    database_url: str,
    echo: bool = False,
    pool_size: int = 5,
    max_overflow: int = 10,
) -> Engine:
    """
    Create the engine and session factory, replacing any previous ones.

    Args:
        database_url: SQLAlchemy URL, e.g. ``postgresql+psycopg://...`` or
            ``sqlite:///payroll.db``.
        echo: Log SQL statements through SQLAlchemy.
        pool_size: Persistent connections for server databases.
        max_overflow: Extra connections allowed above ``pool_size``.
    """
    global _engine, _sessions
    reset_engine()

    _engine = create_engine(
        database_url, echo=echo, **_engine_options(database_url, pool_size, max_overflow)
    )
    _sessions = sessionmaker(bind=_engine, expire_on_commit=False)
    logger.info(
        "engine_initialized",
        extra={"dialect": _engine.dialect.name, "pool": type(_engine.pool).__name__},
    )
    return _engine


def _require_initialized() -> None:
    if _engine is None or _sessions is None:
        raise RuntimeError("Engine not initialized. Call init_engine_from_url() first.")


def get_engine() -> Engine:
    _require_initialized()
    return _engine


def get_session() -> Session:
    """A new session; the caller owns commit and close."""
    _require_initialized()
    return _sessions()


@contextmanager
def session_scope() -> Iterator[Session]:
    """
    Session committed when the block exits normally, rolled back (and the
    exception re-raised) otherwise; closed either way.

    Usage::

        with session_scope() as session:
            PayrollService(session).approve(employee_id, 2025, 3, actor_id=actor_id)
    """
    session = get_session()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        logger.warning("transaction_rolled_back", exc_info=True)
        raise
    finally:
        session.close()


def create_tables() -> None:
    from payroll_kernel.db.base import Base
    import payroll_modules.payroll.orm  # noqa: F401

    Base.metadata.create_all(get_engine())
    logger.info("tables_created", extra={"tables": sorted(Base.metadata.tables)})


def drop_tables() -> None:
    """Drop every payroll table (tests and local resets only)."""
    from payroll_kernel.db.base import Base

    Base.metadata.drop_all(get_engine())


def reset_engine() -> None:
    """Dispose the engine and forget the session factory."""
    global _engine, _sessions
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _sessions = None
