"""
In-Memory Storage

Process-local implementation of AccountStorageInterface. Used by the
test suite and as the default backend for local runs.

Each method completes without awaiting, so under asyncio a version
check and the write that follows it cannot interleave with another
coroutine.
"""

from typing import Optional

from budget_ledger.errors import ConcurrentUpdateError, DuplicateError, NotFoundError
from budget_ledger.models import Account
from budget_ledger.services.storage.interface import AccountStorageInterface


class InMemoryAccountStorage(AccountStorageInterface):
    """Accounts kept in an insertion-ordered dict, copied on the way in and out."""

    def __init__(self):
        self._accounts: dict[str, Account] = {}

    async def find_one(self, account_id: str) -> Optional[Account]:
        account = self._accounts.get(str(account_id))
        return account.model_copy(deep=True) if account else None

    async def find(self, owner_id: str) -> list[Account]:
        return [
            account.model_copy(deep=True)
            for account in self._accounts.values()
            if account.owner_id == owner_id
        ]

    async def save(
        self,
        account: Account,
        expected_version: Optional[int] = None,
    ) -> Account:
        key = str(account.id)
        stored = self._accounts.get(key)

        if expected_version is None:
            if stored is not None:
                raise DuplicateError(f"Account already exists: {key}", account_id=key)
        else:
            if stored is None:
                raise NotFoundError("Account not found.", account_id=key)
            if stored.version != expected_version:
                raise ConcurrentUpdateError(
                    f"Account {key} was modified concurrently",
                    account_id=key,
                    expected_version=expected_version,
                    stored_version=stored.version,
                )

        self._accounts[key] = account.model_copy(deep=True)
        return account.model_copy(deep=True)

    async def find_one_and_delete(self, account_id: str) -> Optional[Account]:
        return self._accounts.pop(str(account_id), None)

    async def count_documents(self, owner_id: str) -> int:
        return sum(1 for account in self._accounts.values() if account.owner_id == owner_id)
