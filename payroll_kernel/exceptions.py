"""
Typed Exception Hierarchy for the Payroll Engine.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Payroll figures end up on legally binding pay statements. Callers need to
tell "the user typed a negative salary" apart from "the tax table is broken"
without parsing message strings, so:
  1. Every error has a TYPED exception class (catch by type, not message)
  2. Every exception has a CODE attribute (machine-readable, API-safe)
  3. Exceptions carry structured DATA (not just a message string)

Example:
    try:
        calculation = assembler.assemble(employee, timesheet, settings, priors)
    except InvalidInputError as e:
        api_response(code=e.code, field=e.field, value=e.value)
    except ConfigurationError as e:
        alert_admin(code=e.code, setting=e.setting)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    PayrollEngineError (base)
    |
    +-- InvalidInputError          missing Employee/Settings, negative or
    |                              non-finite amounts, bad timesheet keys
    |
    +-- ConfigurationError         malformed tax brackets, invalid rates
    |
    +-- PayrollStateError
        +-- PayrollNotFoundError   no payroll row for (employee, year, month)
        +-- InvalidTransitionError action not allowed from current state

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                   | When Raised
----------------|------------------------|--------------------------------------
Input           | INVALID_INPUT          | Employee/Settings absent, salary <= 0,
                |                        | hours < 0, day outside month, ...
----------------|------------------------|--------------------------------------
Configuration   | INVALID_CONFIGURATION  | Brackets empty / not ascending / no
                |                        | open top bracket; rate out of range
----------------|------------------------|--------------------------------------
State           | PAYROLL_NOT_FOUND      | Approve/unapprove/delete on Unsaved
                | INVALID_TRANSITION     | Approve twice, unapprove pending
"""

from typing import Any


class PayrollEngineError(Exception):
    """
    Base exception for all payroll engine errors.

    All subclasses carry a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "PAYROLL_ENGINE_ERROR"


class InvalidInputError(PayrollEngineError):
    """An input value is missing, negative, non-finite or out of range."""

    code: str = "INVALID_INPUT"

    def __init__(self, field: str, reason: str, value: Any = None):
        self.field = field
        self.reason = reason
        self.value = value
        super().__init__(f"Invalid input '{field}': {reason}")


class ConfigurationError(PayrollEngineError):
    """Settings or tax bracket configuration is malformed.

    Never auto-corrected: the caller must fix the configuration.
    """

    code: str = "INVALID_CONFIGURATION"

    def __init__(self, setting: str, reason: str):
        self.setting = setting
        self.reason = reason
        super().__init__(f"Invalid configuration '{setting}': {reason}")


class PayrollStateError(PayrollEngineError):
    """Base exception for payroll lifecycle errors."""

    code: str = "PAYROLL_STATE_ERROR"


class PayrollNotFoundError(PayrollStateError):
    """No payroll exists for the given employee and period."""

    code: str = "PAYROLL_NOT_FOUND"

    def __init__(self, employee_id: str, year: int, month: int):
        self.employee_id = employee_id
        self.year = year
        self.month = month
        super().__init__(
            f"No payroll for employee {employee_id} in {year}-{month:02d}"
        )


class InvalidTransitionError(PayrollStateError):
    """The requested lifecycle action is not allowed from the current state."""

    code: str = "INVALID_TRANSITION"

    def __init__(self, current_state: str, action: str):
        self.current_state = current_state
        self.action = action
        super().__init__(
            f"Action '{action}' is not allowed from state '{current_state}'"
        )
