"""
Payroll Kernel

Shared foundation for the payroll engine:
- Structured JSON logging with request-scoped context
- Typed exception hierarchy with machine-readable codes
- Injectable clock and workflow value objects
- Tax bracket value objects shared by engines and configuration
- SQLAlchemy declarative base and session helpers
"""

__version__ = "0.1.0"
