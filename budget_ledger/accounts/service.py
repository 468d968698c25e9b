"""
Account Service

Every operation that changes an account is one read-modify-write cycle:

1. Read the account from storage (NotFoundError if absent)
2. Apply the change to a deep copy
3. Recompute the balance from the ledger
4. Save the copy with the version that was read

The save in step 4 is the only commit point. If it raises, the whole
operation failed and nothing the caller can observe has changed. If
another writer saved in between, storage raises ConcurrentUpdateError
instead of silently losing one of the two updates. The service never
retries; that is the caller's decision.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Callable, Mapping, Optional, Union
from uuid import UUID, uuid4

from budget_ledger.accounts.summary import summarize
from budget_ledger.config import LedgerSettings
from budget_ledger.errors import BalanceOverrideError, NotFoundError
from budget_ledger.ledger import TransactionLedger
from budget_ledger.logs import get_logger
from budget_ledger.models import (
    Account,
    AccountDetail,
    AccountSummary,
    CreateAccountPayload,
    DeleteResult,
    GlobalInfo,
    Page,
    Transaction,
    utc_now,
)
from budget_ledger.queries import (
    apply_sort,
    build_pageable,
    compile_sort,
    format_sort,
    paginate,
    resolve_limit,
)
from budget_ledger.services import (
    AccountStorageInterface,
    IdentityInterface,
    PassthroughIdentity,
)
from budget_ledger.validation import PayloadValidator


ACCOUNT_SORT_FIELDS = frozenset({
    "name",
    "description",
    "isFavorite",
    "budget",
    "currentBalance",
})

AccountId = Union[UUID, str]


class AccountService:
    """
    Account and transaction operations for the layer above
    (HTTP controllers, bots, CLIs).

    Returns plain pydantic models and raises the errors from
    ``budget_ledger.errors``; mapping those to responses is the
    caller's job.
    """

    def __init__(
        self,
        storage: AccountStorageInterface,
        identity: Optional[IdentityInterface] = None,
        settings: Optional[LedgerSettings] = None,
        validator: Optional[PayloadValidator] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._storage = storage
        self._identity = identity or PassthroughIdentity()
        self._settings = settings or LedgerSettings()
        self._validator = validator or PayloadValidator()
        self._clock = clock or utc_now
        self._logger = get_logger(__name__)

    # =========================================================================
    # ACCOUNTS
    # =========================================================================

    async def create_account(
        self,
        user_id: str,
        payload: Union[Mapping[str, Any], CreateAccountPayload],
    ) -> Account:
        """
        Create an empty account for a user.

        Name defaults to the configured placeholder, description to "".

        Raises:
            ValidationError: Payload has neither name nor description, or bad types
            NotFoundError: Unknown user (depends on the identity collaborator)
        """
        data = self._validator.validate_create(payload)
        owner_id = await self._identity.resolve_owner(user_id)

        now = self._clock()
        account = Account(
            id=uuid4(),
            name=data.name or self._settings.default_account_name,
            description=data.description or "",
            budget=data.budget,
            current_balance=Decimal("0"),
            is_favorite=False,
            owner_id=owner_id,
            transactions=[],
            created_at=now,
            updated_at=now,
            version=1,
        )

        saved = await self._storage.save(account, expected_version=None)

        self._logger.info(
            "account_created",
            account_id=str(saved.id),
            owner_id=owner_id,
            budget=str(saved.budget),
        )
        return saved

    async def get_account(self, account_id: AccountId) -> AccountDetail:
        """
        Raises:
            NotFoundError: Account does not exist
        """
        account = await self._load(account_id)
        return account.to_detail()

    async def list_accounts(
        self,
        user_id: str,
        limit: Optional[int] = None,
        offset: int = 0,
        sort: Optional[str] = None,
    ) -> Page[AccountSummary]:
        """
        One page of a user's accounts, without transactions.

        Unsorted listings come back in creation order.

        Raises:
            InvalidFieldError, InvalidDirectionError: Bad sort expression
            ValidationError: Bad limit/offset
        """
        keys = compile_sort(sort, ACCOUNT_SORT_FIELDS)
        limit = resolve_limit(
            limit,
            self._settings.default_page_limit,
            self._settings.max_page_limit,
        )
        owner_id = await self._identity.resolve_owner(user_id)

        total = await self._storage.count_documents(owner_id)
        pageable = build_pageable(limit=limit, offset=offset, total=total)

        accounts = await self._storage.find(owner_id)
        if keys:
            accounts = apply_sort(accounts, keys)

        self._logger.debug(
            "accounts_listed",
            owner_id=owner_id,
            sort=format_sort(keys),
            limit=limit,
            offset=offset,
            total=total,
        )
        return Page[AccountSummary](
            data=[account.to_summary() for account in paginate(accounts, limit, offset)],
            pageable=pageable,
        )

    async def update_account(
        self,
        account_id: AccountId,
        payload: Mapping[str, Any],
    ) -> Account:
        """
        Change name, description, favorite flag and/or budget.

        Omitted or null fields are left as they are; other keys are ignored.

        Raises:
            NotFoundError: Account does not exist
            TypeMismatchError: A value's type disagrees with the stored field
            ValidationError: A value fails the schema (e.g. empty name)
        """
        account = await self._load(account_id)
        changes = self._validator.validate_update(payload, account)

        working = account.model_copy(update=changes, deep=True)
        saved = await self._commit(working, account.version)

        self._logger.info(
            "account_updated",
            account_id=str(saved.id),
            fields=sorted(changes),
        )
        return saved

    async def toggle_favorite(self, account_id: AccountId) -> dict[str, bool]:
        """
        Flip the favorite flag.

        Raises:
            NotFoundError: Account does not exist
        """
        account = await self._load(account_id)

        working = account.model_copy(deep=True)
        working.is_favorite = not account.is_favorite
        saved = await self._commit(working, account.version)

        self._logger.info(
            "account_favorite_toggled",
            account_id=str(saved.id),
            is_favorite=saved.is_favorite,
        )
        return {"status": saved.is_favorite}

    async def delete_account(self, account_id: AccountId) -> Account:
        """
        Delete an account together with all of its transactions.

        Raises:
            NotFoundError: Account does not exist
        """
        await self._load(account_id)

        deleted = await self._storage.find_one_and_delete(str(account_id))
        if deleted is None:
            # Removed by someone else between the read and the delete
            raise NotFoundError("Account not found.", account_id=str(account_id))

        self._logger.info(
            "account_deleted",
            account_id=str(deleted.id),
            transaction_count=len(deleted.transactions),
        )
        return deleted

    # =========================================================================
    # BALANCE
    # =========================================================================

    async def get_balance(self, account_id: AccountId) -> Decimal:
        """
        Balance derived from the ledger.

        Raises:
            NotFoundError: Account does not exist
        """
        account = await self._load(account_id)
        return TransactionLedger(account.transactions).balance()

    async def set_current_balance(
        self,
        account_id: AccountId,
        value: Any,
        reason: str,
    ) -> Account:
        """
        Administrative override of the stored balance.

        This deliberately breaks "balance == sum of ledger" until the next
        transaction change or ``reconcile_balance``. It only works when
        ``allow_balance_override`` is enabled, and every use is logged
        at warning level with its reason.

        Raises:
            BalanceOverrideError: Overrides are disabled or no reason given
            ValidationError: Value is not a number
            NotFoundError: Account does not exist
        """
        if not self._settings.allow_balance_override:
            raise BalanceOverrideError(
                "Direct balance overrides are disabled",
                account_id=str(account_id),
            )
        if not reason or not reason.strip():
            raise BalanceOverrideError(
                "A reason is required for a balance override",
                account_id=str(account_id),
            )
        amount = self._validator.validate_number(value, "currentBalance")

        account = await self._load(account_id)

        working = account.model_copy(deep=True)
        working.current_balance = amount
        saved = await self._commit(working, account.version)

        self._logger.warning(
            "balance_overridden",
            account_id=str(saved.id),
            previous_balance=str(account.current_balance),
            ledger_balance=str(account.ledger_balance),
            new_balance=str(amount),
            reason=reason.strip(),
        )
        return saved

    async def reconcile_balance(self, account_id: AccountId) -> Account:
        """
        Re-derive the stored balance from the ledger.

        Raises:
            NotFoundError: Account does not exist
        """
        account = await self._load(account_id)

        working = account.model_copy(deep=True)
        working.current_balance = TransactionLedger(working.transactions).balance()
        saved = await self._commit(working, account.version)

        if account.current_balance != saved.current_balance:
            self._logger.warning(
                "balance_reconciled",
                account_id=str(saved.id),
                previous_balance=str(account.current_balance),
                new_balance=str(saved.current_balance),
            )
        return saved

    # =========================================================================
    # TRANSACTIONS
    # =========================================================================

    async def create_transaction(
        self,
        account_id: AccountId,
        value: Any,
        type: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Transaction:
        """
        Append a transaction and recompute the balance.

        Raises:
            NotFoundError: Account does not exist
            InvalidAmountError: Value is zero, missing or not a number
        """
        account = await self._load(account_id)

        working = account.model_copy(deep=True)
        ledger = TransactionLedger(working.transactions, clock=self._clock, validator=self._validator)
        transaction = ledger.append(value, type=type, description=description)
        working.current_balance = ledger.balance()

        saved = await self._commit(working, account.version)

        self._logger.info(
            "transaction_created",
            account_id=str(saved.id),
            transaction_id=str(transaction.id),
            value=str(transaction.value),
            type=transaction.type,
            balance=str(saved.current_balance),
        )
        return transaction

    async def delete_transaction(
        self,
        account_id: AccountId,
        transaction_id: Union[UUID, str],
    ) -> DeleteResult:
        """
        Remove one transaction and recompute the balance.

        Raises:
            NotFoundError: Account or transaction does not exist
        """
        account = await self._load(account_id)

        working = account.model_copy(deep=True)
        ledger = TransactionLedger(working.transactions, clock=self._clock, validator=self._validator)
        ledger.remove_by_id(transaction_id)
        working.current_balance = ledger.balance()

        saved = await self._commit(working, account.version)

        self._logger.info(
            "transaction_deleted",
            account_id=str(saved.id),
            transaction_id=str(transaction_id),
            balance=str(saved.current_balance),
        )
        return DeleteResult(acknowledged=True, deleted_count=1)

    async def list_transactions(
        self,
        account_id: AccountId,
        limit: Optional[int] = None,
        offset: int = 0,
        sort: Optional[str] = None,
    ) -> Page[Transaction]:
        """
        One page of an account's transactions, newest first by default.

        Raises:
            NotFoundError: Account does not exist
            InvalidFieldError, InvalidDirectionError: Bad sort expression
            ValidationError: Bad limit/offset
        """
        limit = resolve_limit(
            limit,
            self._settings.default_page_limit,
            self._settings.max_page_limit,
        )
        account = await self._load(account_id)
        return TransactionLedger(account.transactions).list_page(limit, offset, sort)

    # =========================================================================
    # SUMMARY
    # =========================================================================

    async def get_global_info(self, user_id: str) -> GlobalInfo:
        """Budget and spend statistics across all of a user's accounts."""
        owner_id = await self._identity.resolve_owner(user_id)
        accounts = await self._storage.find(owner_id)
        return summarize(
            accounts,
            now=self._clock(),
            tz=self._settings.summary_tzinfo,
            untyped_key=self._settings.untyped_key,
        )

    # =========================================================================
    # INTERNALS
    # =========================================================================

    async def _load(self, account_id: AccountId) -> Account:
        account = await self._storage.find_one(str(account_id))
        if account is None:
            raise NotFoundError("Account not found.", account_id=str(account_id))
        return account

    async def _commit(self, working: Account, read_version: int) -> Account:
        """Save a modified copy; the only point where a mutation takes effect."""
        working.version = read_version + 1
        working.updated_at = self._clock()
        try:
            return await self._storage.save(working, expected_version=read_version)
        except Exception as e:
            self._logger.error(
                "account_save_failed",
                account_id=str(working.id),
                error_type=type(e).__name__,
                error=str(e),
            )
            raise
