"""Pure domain value objects for the payroll kernel. Zero I/O."""
