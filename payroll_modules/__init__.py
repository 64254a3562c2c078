"""
Payroll Modules.

Thin orchestration layers over the payroll kernel, engines and
configuration.  Each module contains:
- Domain models (the nouns)
- Workflows (state machines)
- An assembler (pure composition of engines)
- ORM models and a service owning the transaction boundary

Modules:
- Payroll: monthly pay statements with cumulative income tax, the
  minimum-wage exemption and an approval lifecycle
"""

from payroll_modules import payroll

__all__ = ["payroll"]
