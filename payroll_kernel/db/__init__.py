"""Database layer: declarative base, portable column types, engine and sessions."""

from payroll_kernel.db.base import GUID, AuditedBase, Base, UTCDateTime

__all__ = ["AuditedBase", "Base", "GUID", "UTCDateTime"]
