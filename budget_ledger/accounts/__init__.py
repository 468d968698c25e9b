"""Account aggregate package."""

from budget_ledger.accounts.service import ACCOUNT_SORT_FIELDS, AccountService
from budget_ledger.accounts.summary import UNTYPED_KEY, summarize

__all__ = [
    "ACCOUNT_SORT_FIELDS",
    "AccountService",
    "UNTYPED_KEY",
    "summarize",
]
