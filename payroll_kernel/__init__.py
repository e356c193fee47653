"""
Payroll Kernel

Shared foundation for the UK statutory payroll core:
- Typed exceptions with machine-readable codes
- Structured JSON logging with pay-run context
- Injectable clock
- Decimal-only currency helpers and statutory rate value objects
"""

__version__ = "0.1.0"
