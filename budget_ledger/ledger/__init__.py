"""Transaction ledger package."""

from budget_ledger.ledger.ledger import (
    DEFAULT_TRANSACTION_SORT,
    TRANSACTION_SORT_FIELDS,
    TransactionLedger,
)

__all__ = [
    "DEFAULT_TRANSACTION_SORT",
    "TRANSACTION_SORT_FIELDS",
    "TransactionLedger",
]
