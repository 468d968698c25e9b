"""
Global Spend Summary

A pure function over a materialized list of accounts. It reads nothing
from storage and keeps no state, so it can run alongside mutations
without coordination; freshness is whatever the caller's read gave it.
"""

from datetime import datetime, timezone, tzinfo
from decimal import Decimal
from typing import Iterable, Optional

from budget_ledger.models import Account, GlobalInfo


UNTYPED_KEY = "untyped"


def _in_zone(moment: datetime, tz: Optional[tzinfo]) -> datetime:
    # Naive timestamps are taken as UTC. tz=None converts to server local time.
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(tz)


def summarize(
    accounts: Iterable[Account],
    now: Optional[datetime] = None,
    tz: Optional[tzinfo] = None,
    untyped_key: str = UNTYPED_KEY,
) -> GlobalInfo:
    """
    Aggregate budget and spend statistics.

    Args:
        accounts: Every account of one owner
        now: Reference time for "this month" (defaults to the current time)
        tz: Zone in which month boundaries are drawn; None = server local time
        untyped_key: Bucket for transactions without a type tag

    "This month" means the same calendar year and month as ``now``,
    both timestamps viewed in ``tz``.
    """
    reference = _in_zone(now or datetime.now(timezone.utc), tz)

    total_budget = Decimal("0")
    total_spent = Decimal("0")
    total_spent_this_month = Decimal("0")
    spent_by_type: dict[str, Decimal] = {}

    for account in accounts:
        total_budget += account.budget

        for transaction in account.transactions:
            total_spent += transaction.value

            created = _in_zone(transaction.created_at, tz)
            if (created.year, created.month) == (reference.year, reference.month):
                total_spent_this_month += transaction.value

            key = transaction.type or untyped_key
            spent_by_type[key] = spent_by_type.get(key, Decimal("0")) + transaction.value

    return GlobalInfo(
        total_budget=total_budget,
        total_spent=total_spent,
        total_spent_this_month=total_spent_this_month,
        spent_by_type=spent_by_type,
    )
