"""Services package."""

from budget_ledger.errors import (
    ConcurrentUpdateError,
    DuplicateError,
    StorageConnectionError,
    StorageError,
)
from budget_ledger.services.identity import InMemoryIdentity, PassthroughIdentity
from budget_ledger.services.storage import (
    AccountStorageInterface,
    GoogleSheetsAccountStorage,
    GoogleSheetsClient,
    IdentityInterface,
    InMemoryAccountStorage,
)

__all__ = [
    # Identity
    "IdentityInterface",
    "InMemoryIdentity",
    "PassthroughIdentity",
    # Storage
    "AccountStorageInterface",
    "GoogleSheetsAccountStorage",
    "GoogleSheetsClient",
    "InMemoryAccountStorage",
    # Exceptions
    "ConcurrentUpdateError",
    "DuplicateError",
    "StorageConnectionError",
    "StorageError",
]
