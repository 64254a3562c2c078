"""
Module: payroll_kernel.db.base
Responsibility: Declarative base and portable column types for payroll
    tables.  Rows must read back identically on PostgreSQL and SQLite, so
    identifiers, instants and amounts go through types that normalize them.
Architecture position: Kernel > DB.  Imported by ORM models only.  MUST NOT
    import from payroll_engines, payroll_config or payroll_modules.

Invariants enforced:
    - Identifiers are UUIDs in Python and 36-character strings in storage.
    - Instants are stored as UTC and always come back timezone-aware, even
      from SQLite, which keeps no offset.
    - Amounts map to Numeric(38, 9); never float.
    - Every audited row records its creating actor (NOT NULL).
"""

from datetime import datetime, timezone
from decimal import Decimal
from typing import ClassVar
from uuid import UUID, uuid4

from sqlalchemy import DateTime, Numeric, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import TypeDecorator


class GUID(TypeDecorator):
    """UUID column stored as its canonical string form."""

    impl = String(36)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return str(value if isinstance(value, UUID) else UUID(str(value)))

    def process_result_value(self, value, dialect):
        return None if value is None else UUID(value)


class UTCDateTime(TypeDecorator):
    """Timezone-aware datetime persisted as UTC."""

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            raise ValueError(f"naive datetime {value!r} cannot be stored as UTC")
        return value.astimezone(timezone.utc)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


class Base(DeclarativeBase):
    """Declarative base: UUID primary key plus the payroll type map."""

    type_annotation_map: ClassVar[dict] = {
        Decimal: Numeric(38, 9),
        datetime: UTCDateTime(),
        UUID: GUID(),
    }

    id: Mapped[UUID] = mapped_column(GUID(), primary_key=True, default=uuid4)


class AuditedBase(Base):
    """
    Abstract base recording when and by whom a row was written.

    ``created_at``/``updated_at`` come from the database clock;
    ``created_by_id`` is required, ``updated_by_id`` is set on changes.
    """

    __abstract__ = True

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )
    created_by_id: Mapped[UUID] = mapped_column(GUID(), nullable=False)
    updated_by_id: Mapped[UUID | None] = mapped_column(GUID(), nullable=True)
