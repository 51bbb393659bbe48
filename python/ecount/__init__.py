"""
Ecount Module

Ecount ERP Open API client and card-expense registration.
"""

from .client import (
    EcountClient,
    EcountConfig,
    EcountError,
    EcountSession,
    PurchaseSlipItem,
    PurchaseSlipRequest,
    slip_rows,
)
from .expense_register import (
    ExpenseArgs,
    ExpenseResult,
    register_expense,
    split_vat,
)

__all__ = [
    # API Client
    "EcountClient",
    "EcountConfig",
    "EcountError",
    "EcountSession",
    "PurchaseSlipItem",
    "PurchaseSlipRequest",
    "slip_rows",
    # Expense Registration
    "ExpenseArgs",
    "ExpenseResult",
    "register_expense",
    "split_vat",
]
