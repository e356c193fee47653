"""
Payroll services -- orchestration over configuration and the pure engines.
"""

from payroll_services.pay_run_service import PayrollCalculationService

__all__ = ["PayrollCalculationService"]
