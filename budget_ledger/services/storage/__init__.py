"""
Storage Services Package

Provides the abstract interface and concrete implementations for
account storage. In-memory storage is the default; Google Sheets is
available as a persistent backend.
"""

from budget_ledger.services.storage.interface import (
    AccountStorageInterface,
    IdentityInterface,
)
from budget_ledger.services.storage.memory import InMemoryAccountStorage
from budget_ledger.services.storage.google_sheets import (
    GoogleSheetsAccountStorage,
    GoogleSheetsClient,
)

__all__ = [
    # Interfaces
    "AccountStorageInterface",
    "IdentityInterface",
    # Implementations
    "InMemoryAccountStorage",
    "GoogleSheetsAccountStorage",
    "GoogleSheetsClient",
]
