"""
Core Data Models for Budget Ledger

These models define the schemas for all data flowing through the engine.
They are designed to:
1. Enforce type safety at runtime
2. Serialize with the camelCase names API consumers expect
3. Be serializable for storage and logging

DESIGN DECISION: An account embeds its transactions. The account record
is the unit of storage, so balance and ledger are always written together.

Views of the same record:
- AccountSummary: list items (no transactions, no owner)
- AccountDetail:  single account lookups (no owner)
- Account:        the full stored record
"""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Generic, Optional, TypeVar
from uuid import UUID, uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)
from pydantic.alias_generators import to_camel


T = TypeVar("T")


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


class LedgerModel(BaseModel):
    """Base model: snake_case in Python, camelCase on the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )


# =============================================================================
# TRANSACTION
# =============================================================================

class Transaction(LedgerModel):
    """
    A single ledger entry.

    Positive values are credits, negative values are debits.
    Zero is never a valid transaction. Entries are immutable once
    created; the only allowed change is removal from the ledger.
    """
    model_config = ConfigDict(frozen=True)

    id: UUID = Field(
        default_factory=uuid4,
        description="Unique transaction ID"
    )
    value: Decimal = Field(
        ...,
        description="Signed amount (positive = credit, negative = debit)"
    )
    type: Optional[str] = Field(
        default=None,
        max_length=100,
        description="Free-form category tag"
    )
    description: Optional[str] = Field(
        default=None,
        max_length=1000,
    )
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @field_validator('value')
    @classmethod
    def reject_zero(cls, v: Decimal) -> Decimal:
        if v == 0 or not v.is_finite():
            raise ValueError("Transaction value must be a finite non-zero number")
        return v


# =============================================================================
# ACCOUNT
# =============================================================================

class AccountSummary(LedgerModel):
    """Account metadata as shown in listings."""

    id: UUID = Field(
        default_factory=uuid4,
        description="Unique account ID"
    )
    name: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Account name"
    )
    description: str = Field(
        default="",
        max_length=1000,
    )
    budget: Decimal = Field(
        default=Decimal("0"),
        description="Budget, set by user"
    )
    current_balance: Decimal = Field(
        default=Decimal("0"),
        description="Auto-calculated from transactions"
    )
    is_favorite: bool = False
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class AccountDetail(AccountSummary):
    """Account with its ledger, owner reference hidden."""

    transactions: list[Transaction] = Field(default_factory=list)


class Account(AccountDetail):
    """
    The full stored account record.

    ``version`` is bumped on every successful save and is used by
    storage to reject writes based on a stale read.
    """

    owner_id: str = Field(
        ...,
        min_length=1,
        description="Opaque owner reference"
    )
    version: int = Field(
        default=0,
        ge=0,
        description="Optimistic concurrency counter"
    )

    @property
    def ledger_balance(self) -> Decimal:
        """Sum of all transaction values."""
        return sum((t.value for t in self.transactions), Decimal("0"))

    def to_summary(self) -> AccountSummary:
        return AccountSummary.model_validate(
            self.model_dump(exclude={"transactions", "owner_id", "version"})
        )

    def to_detail(self) -> AccountDetail:
        return AccountDetail.model_validate(
            self.model_dump(exclude={"owner_id", "version"})
        )


# =============================================================================
# RESULT ENVELOPES
# =============================================================================

class Pageable(LedgerModel):
    """Pagination metadata returned alongside every listing."""

    limit: int = Field(ge=0)
    offset: int = Field(ge=0)
    total: int = Field(ge=0)


class Page(LedgerModel, Generic[T]):
    """One window over an ordered sequence."""

    data: list[T] = Field(default_factory=list)
    pageable: Pageable


class DeleteResult(LedgerModel):
    """Outcome of removing an embedded entity."""

    acknowledged: bool = True
    deleted_count: int = Field(ge=0)


class GlobalInfo(LedgerModel):
    """
    Spend statistics across every account of one owner.

    ``total_spent`` is the signed net sum of all transactions,
    not the sum of debits.
    """

    total_budget: Decimal = Decimal("0")
    total_spent: Decimal = Decimal("0")
    total_spent_this_month: Decimal = Decimal("0")
    spent_by_type: dict[str, Decimal] = Field(default_factory=dict)
