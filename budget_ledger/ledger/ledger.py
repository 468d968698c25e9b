"""
Transaction Ledger

The ordered list of transactions embedded in one account.

DESIGN DECISION: The balance is never kept as a running total.
``balance()`` sums the whole ledger every time it is asked, so a
failed or partial mutation can never leave a drifted total behind.

The ledger wraps the list it is given and mutates it in place. The
account service hands it a working copy of the account, so nothing
changes for other readers until that copy is saved.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Callable, Iterator, Optional, Union
from uuid import UUID, uuid4

from pydantic import ValidationError as PydanticValidationError

from budget_ledger.errors import NotFoundError, ValidationError
from budget_ledger.models import Page, Transaction, utc_now
from budget_ledger.queries import (
    SortDirection,
    SortKey,
    apply_sort,
    build_pageable,
    compile_sort,
    paginate,
)
from budget_ledger.validation import PayloadValidator, issues_from_pydantic


TRANSACTION_SORT_FIELDS = frozenset({
    "createdAt",
    "updatedAt",
    "value",
    "type",
    "description",
})

# Most recent first
DEFAULT_TRANSACTION_SORT = (SortKey("createdAt", SortDirection.DESC),)


class TransactionLedger:
    """Append/remove/sum/list operations over an account's transactions."""

    def __init__(
        self,
        transactions: Optional[list[Transaction]] = None,
        clock: Optional[Callable[[], datetime]] = None,
        validator: Optional[PayloadValidator] = None,
    ):
        self._transactions = transactions if transactions is not None else []
        self._clock = clock or utc_now
        self._validator = validator or PayloadValidator()

    def __len__(self) -> int:
        return len(self._transactions)

    def __iter__(self) -> Iterator[Transaction]:
        return iter(self._transactions)

    @property
    def transactions(self) -> list[Transaction]:
        return self._transactions

    def append(
        self,
        value: Any,
        type: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Transaction:
        """
        Append a new transaction at the end of the ledger.

        Raises:
            InvalidAmountError: If value is zero, missing or not a number
            ValidationError: If type or description is not a string or is too long
        """
        amount = self._validator.validate_amount(value)
        type = self._validator.validate_optional_text(type, "type")
        description = self._validator.validate_optional_text(description, "description")

        now = self._clock()
        try:
            transaction = Transaction(
                id=uuid4(),
                value=amount,
                type=type,
                description=description,
                created_at=now,
                updated_at=now,
            )
        except PydanticValidationError as e:
            raise ValidationError(
                "Transaction is not valid",
                issues=issues_from_pydantic(e),
            ) from e
        self._transactions.append(transaction)
        return transaction

    def get(self, transaction_id: Union[UUID, str]) -> Transaction:
        """
        Find a transaction by id.

        Raises:
            NotFoundError: If no transaction has this id
        """
        return self._transactions[self._index_of(transaction_id)]

    def remove_by_id(self, transaction_id: Union[UUID, str]) -> bool:
        """
        Remove exactly one transaction.

        Raises:
            NotFoundError: If no transaction has this id
        """
        del self._transactions[self._index_of(transaction_id)]
        return True

    def balance(self) -> Decimal:
        """Sum of every transaction value."""
        return sum((t.value for t in self._transactions), Decimal("0"))

    def list_page(
        self,
        limit: int,
        offset: int = 0,
        sort: Optional[str] = None,
    ) -> Page[Transaction]:
        """
        One page of transactions.

        Ordered newest first unless ``sort`` says otherwise. The sort is
        stable: equal keys keep insertion order.

        Raises:
            InvalidFieldError, InvalidDirectionError: Bad sort expression
            ValidationError: Negative limit or offset
        """
        keys = compile_sort(sort, TRANSACTION_SORT_FIELDS) or DEFAULT_TRANSACTION_SORT
        pageable = build_pageable(limit=limit, offset=offset, total=len(self._transactions))
        ordered = apply_sort(self._transactions, keys)
        return Page[Transaction](
            data=paginate(ordered, limit, offset),
            pageable=pageable,
        )

    def _index_of(self, transaction_id: Union[UUID, str]) -> int:
        wanted = str(transaction_id)
        for idx, transaction in enumerate(self._transactions):
            if str(transaction.id) == wanted:
                return idx
        raise NotFoundError(
            "Transaction not found.",
            transaction_id=wanted,
        )
