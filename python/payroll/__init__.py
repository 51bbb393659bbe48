"""
Payroll Module

Monthly four major social-insurance premium calculations.
"""

from .insurance_calculator import (
    InsuranceCalculator,
    InsurancePortion,
    InsuranceResult,
    InsuranceSide,
)

__all__ = [
    "InsuranceCalculator",
    "InsurancePortion",
    "InsuranceResult",
    "InsuranceSide",
]
