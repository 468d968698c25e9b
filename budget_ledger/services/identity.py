"""
Identity Collaborators

Authentication lives outside this engine. All the engine needs is to
turn the caller's user id into the owner reference stored on accounts.
"""

from typing import Mapping, Optional

from budget_ledger.errors import NotFoundError
from budget_ledger.services.storage.interface import IdentityInterface


class PassthroughIdentity(IdentityInterface):
    """The user id already is the owner reference."""

    async def resolve_owner(self, user_id: str) -> str:
        return str(user_id)


class InMemoryIdentity(IdentityInterface):
    """Known users only; unknown user ids are rejected."""

    def __init__(self, users: Optional[Mapping[str, str]] = None):
        self._users: dict[str, str] = dict(users or {})

    def register(self, user_id: str, owner_ref: Optional[str] = None) -> str:
        self._users[str(user_id)] = owner_ref or str(user_id)
        return self._users[str(user_id)]

    async def resolve_owner(self, user_id: str) -> str:
        try:
            return self._users[str(user_id)]
        except KeyError:
            raise NotFoundError("User not found.", user_id=user_id)
