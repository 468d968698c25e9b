"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Swap Google Sheets for a real database later
2. Use in-memory storage for testing
3. Keep business logic decoupled from storage implementation

An account is one storage unit: its transactions are embedded in the
same record, so balance and ledger are always written together.

Every implementation must honour the version check in ``save`` - it is
what prevents two concurrent read-modify-write cycles from silently
overwriting each other.
"""

from abc import ABC, abstractmethod
from typing import Optional

from budget_ledger.models import Account


class AccountStorageInterface(ABC):
    """
    Abstract interface for account storage operations.

    Any storage implementation (Google Sheets, PostgreSQL, etc.)
    must implement these methods. Implementations return independent
    copies; mutating a returned Account never changes stored state.
    """

    @abstractmethod
    async def find_one(self, account_id: str) -> Optional[Account]:
        """
        Retrieve an account by its ID.

        Returns:
            The account if found, None otherwise

        Raises:
            StorageError: If the backend cannot be read
        """
        pass

    @abstractmethod
    async def find(self, owner_id: str) -> list[Account]:
        """
        All accounts of one owner, in insertion order.

        Raises:
            StorageError: If the backend cannot be read
        """
        pass

    @abstractmethod
    async def save(
        self,
        account: Account,
        expected_version: Optional[int] = None,
    ) -> Account:
        """
        Insert or replace an account.

        Args:
            account: The record to write (already carrying its new version)
            expected_version: None to insert; otherwise the version the
                              caller read, which must still be stored

        Returns:
            The stored account

        Raises:
            DuplicateError: Insert of an id that already exists
            NotFoundError: Replace of an id that does not exist
            ConcurrentUpdateError: Stored version differs from expected_version
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    async def find_one_and_delete(self, account_id: str) -> Optional[Account]:
        """
        Delete an account (with its embedded transactions).

        Returns:
            The deleted account, or None if it did not exist
        """
        pass

    @abstractmethod
    async def count_documents(self, owner_id: str) -> int:
        """Number of accounts owned by ``owner_id``."""
        pass


class IdentityInterface(ABC):
    """Resolves a caller's user id to the owner reference stored on accounts."""

    @abstractmethod
    async def resolve_owner(self, user_id: str) -> str:
        """
        Raises:
            NotFoundError: If the user is unknown
        """
        pass
