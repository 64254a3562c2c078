"""
payroll_engines.tracer -- PAYROLL_ENGINE_TRACE records for engine calls.

Responsibility:
    ``@traced_engine`` logs one DEBUG record per engine call with the engine
    name and version, a fingerprint of the inputs that determine the result,
    the elapsed time and whether the call raised.

Architecture position:
    Engines -- support code for the calculation layer.  Emits a log record
    and nothing else; engines stay free of I/O.

Invariants enforced:
    - Equal inputs give equal fingerprints: Decimals are normalized
      (``100`` and ``100.00`` agree), mapping keys are sorted, enums use
      their value, dataclasses are expanded field by field.
    - Positional and keyword calls of the same engine fingerprint alike.
    - The wrapped function's result or exception passes through untouched.

Audit relevance:
    Recomputing a pay statement from the same timesheet and settings yields
    the same fingerprints, so a changed figure can be traced to the engine
    whose inputs changed.

Usage:
    @traced_engine("progressive_tax", "1.0", fingerprint_fields=("income_tax_base",))
    def calculate_progressive_tax(*, income_tax_base, previous_cumulative_income, brackets):
        ...
"""

from __future__ import annotations

import functools
import hashlib
import inspect
import time
from collections.abc import Callable, Mapping
from dataclasses import fields, is_dataclass
from decimal import Decimal
from enum import Enum
from typing import Any

from payroll_kernel.logging_config import get_logger

_logger = get_logger("engines.tracer")

TRACE_TYPE = "PAYROLL_ENGINE_TRACE"


def _canonicalize(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, Enum):
        return _canonicalize(value.value)
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Decimal):
        return format(value.normalize(), "f") if value.is_finite() else str(value)
    if isinstance(value, (int, float)):
        return _canonicalize(Decimal(str(value)))
    if isinstance(value, str):
        return value
    if isinstance(value, Mapping):
        items = sorted((str(k), _canonicalize(v)) for k, v in value.items())
        return "{" + ",".join(f"{k}:{v}" for k, v in items) + "}"
    if isinstance(value, (list, tuple)):
        return "[" + ",".join(_canonicalize(v) for v in value) + "]"
    if is_dataclass(value) and not isinstance(value, type):
        body = ",".join(f"{f.name}={_canonicalize(getattr(value, f.name))}" for f in fields(value))
        return f"{type(value).__name__}({body})"
    return str(value)


def compute_input_fingerprint(
    fingerprint_fields: tuple[str, ...],
    arguments: Mapping[str, Any],
) -> str:
    """First 16 hex characters of SHA-256 over the named arguments.

    An absent argument fingerprints the same as ``None``.
    """
    canonical = "|".join(
        f"{name}={_canonicalize(arguments.get(name))}" for name in fingerprint_fields
    )
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()[:16]


def traced_engine(
    engine_name: str,
    engine_version: str,
    fingerprint_fields: tuple[str, ...] = (),
) -> Callable:
    """Wrap an engine function so each call emits a trace record.

    Args:
        engine_name: Stable engine identifier, e.g. ``"progressive_tax"``.
        engine_version: Bumped whenever the engine's arithmetic changes.
        fingerprint_fields: Parameter names whose values determine the result.
    """

    def decorator(func: Callable) -> Callable:
        signature = inspect.signature(func)

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            fingerprint = ""
            if fingerprint_fields:
                bound = signature.bind_partial(*args, **kwargs)
                fingerprint = compute_input_fingerprint(fingerprint_fields, bound.arguments)

            started = time.perf_counter()
            outcome = "ok"
            try:
                return func(*args, **kwargs)
            except Exception as exc:
                outcome = type(exc).__name__
                raise
            finally:
                _logger.debug(
                    TRACE_TYPE,
                    extra={
                        "trace_type": TRACE_TYPE,
                        "engine_name": engine_name,
                        "engine_version": engine_version,
                        "input_fingerprint": fingerprint,
                        "duration_ms": round((time.perf_counter() - started) * 1000, 3),
                        "outcome": outcome,
                        "function": func.__qualname__,
                    },
                )

        return wrapper

    return decorator
