"""
Data Models Package

This package contains all Pydantic models used by the Budget Ledger engine.
All data flowing through the system must conform to these schemas.
"""

from budget_ledger.models.account import (
    Account,
    AccountDetail,
    AccountSummary,
    DeleteResult,
    GlobalInfo,
    LedgerModel,
    Page,
    Pageable,
    Transaction,
    utc_now,
)
from budget_ledger.models.payloads import (
    CreateAccountPayload,
    UpdateAccountPayload,
    ValidationIssue,
    to_decimal,
)

__all__ = [
    # Account models
    "Account",
    "AccountDetail",
    "AccountSummary",
    "DeleteResult",
    "GlobalInfo",
    "LedgerModel",
    "Page",
    "Pageable",
    "Transaction",
    "utc_now",
    # Payloads
    "CreateAccountPayload",
    "UpdateAccountPayload",
    "ValidationIssue",
    "to_decimal",
]
