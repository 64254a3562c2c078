"""
Structured JSON logging for the payroll engine.

Every record is one JSON object per line under the ``payroll_kernel``
logger namespace.  Fields bound with ``LogContext`` (which employee, which
period, which actor, which batch) are merged into every record emitted
while they are bound, so a pay statement's log lines can be collected by
``employee_id`` and ``period`` without threading them through each call.

Record layout::

    {"ts": ..., "level": "INFO", "logger": "payroll_kernel.modules.payroll.service",
     "message": "payroll_generate_committed", "employee_id": ..., "period": "2025-03",
     "net_salary": "24864.35"}

Exceptions logged with ``exc_info`` add an ``error`` object holding the
exception type, message, the ``code`` of a ``PayrollEngineError`` and its
structured attributes, plus the formatted ``traceback``.
"""

import json
import logging
import sys
import threading
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, date, datetime
from decimal import Decimal
from enum import Enum
from types import MappingProxyType
from typing import Any
from uuid import UUID

__all__ = [
    "CONTEXT_FIELDS",
    "LogContext",
    "StructuredFormatter",
    "configure_logging",
    "get_logger",
    "reset_logging",
]

CONTEXT_FIELDS = ("correlation_id", "employee_id", "actor_id", "period", "batch_id")

_EMPTY: Mapping[str, str] = MappingProxyType({})
_context: ContextVar[Mapping[str, str]] = ContextVar("payroll_log_context", default=_EMPTY)


def _checked(fields: Mapping[str, Any]) -> dict[str, str]:
    unknown = set(fields) - set(CONTEXT_FIELDS)
    if unknown:
        raise TypeError(f"unknown log context field(s): {', '.join(sorted(unknown))}")
    return {k: str(v) for k, v in fields.items() if v is not None}


class LogContext:
    """Log fields scoped to the current thread or task."""

    @staticmethod
    def set(**fields: Any) -> None:
        """Add or replace fields; None values are ignored."""
        merged = {**_context.get(), **_checked(fields)}
        _context.set(MappingProxyType(merged))

    @staticmethod
    def get_all() -> dict[str, str]:
        return dict(_context.get())

    @staticmethod
    def clear() -> None:
        _context.set(_EMPTY)

    @staticmethod
    @contextmanager
    def bind(**fields: Any) -> Iterator[None]:
        """Bind fields for the duration of a ``with`` block, then restore."""
        token = _context.set(MappingProxyType({**_context.get(), **_checked(fields)}))
        try:
            yield
        finally:
            _context.reset(token)


# ---------------------------------------------------------------------------
# Formatter
# ---------------------------------------------------------------------------

_RECORD_ATTRIBUTES = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None))
) | {"message", "asctime", "taskName"}


def _json_default(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, (Decimal, UUID)):
        return str(value)
    return repr(value)


def _error_payload(exc: BaseException) -> dict[str, Any]:
    error: dict[str, Any] = {"type": type(exc).__name__, "message": str(exc)}
    code = getattr(exc, "code", None)
    if code is not None:
        error["code"] = code
    for name, value in vars(exc).items():
        if not name.startswith("_"):
            error.setdefault(name, value)
    return error


class StructuredFormatter(logging.Formatter):
    """One JSON object per record: base fields, context, extras, error."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **_context.get(),
        }
        for key, value in vars(record).items():
            if key not in _RECORD_ATTRIBUTES:
                payload.setdefault(key, value)

        if record.exc_info and record.exc_info[1] is not None:
            payload["error"] = _error_payload(record.exc_info[1])
            payload["traceback"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=_json_default)


# ---------------------------------------------------------------------------
# Setup
# ---------------------------------------------------------------------------

_NAMESPACE = "payroll_kernel"
_setup_lock = threading.Lock()
_configured = False


def get_logger(name: str) -> logging.Logger:
    """Logger ``payroll_kernel.<name>``."""
    return logging.getLogger(f"{_NAMESPACE}.{name}")


def configure_logging(
    *,
    level: int = logging.INFO,
    stream: Any = None,
    handler: logging.Handler | None = None,
) -> logging.Logger:
    """
    Attach one JSON handler to the ``payroll_kernel`` logger.

    Only the first call has an effect until ``reset_logging()``.  Records do
    not propagate to the root logger.
    """
    global _configured
    logger = logging.getLogger(_NAMESPACE)
    with _setup_lock:
        if _configured:
            return logger
        _configured = True

    if handler is None:
        handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(StructuredFormatter())
    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False
    return logger


def reset_logging() -> None:
    """Drop handlers and allow ``configure_logging`` again (tests only)."""
    global _configured
    with _setup_lock:
        _configured = False
    logger = logging.getLogger(_NAMESPACE)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.WARNING)
