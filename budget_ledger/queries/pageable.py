"""
Pagination Helpers

``build_pageable`` validates and echoes the pagination window; it does
not clamp. An offset beyond the total is legal and simply produces an
empty page when ``paginate`` slices the ordered items.
"""

from typing import Any, Optional, Sequence, TypeVar

from budget_ledger.errors import ValidationError
from budget_ledger.models import Pageable, ValidationIssue


T = TypeVar("T")


def _check_non_negative_int(value: Any, field: str) -> list[ValidationIssue]:
    if isinstance(value, bool) or not isinstance(value, int):
        return [ValidationIssue(
            field=field,
            issue_type="invalid_type",
            message=f"{field} must be an integer, got {type(value).__name__}",
        )]
    if value < 0:
        return [ValidationIssue(
            field=field,
            issue_type="invalid_value",
            message=f"{field} must not be negative",
        )]
    return []


def build_pageable(limit: int, offset: int, total: int) -> Pageable:
    """
    Build the pagination metadata envelope.

    Raises:
        ValidationError: If any value is not a non-negative integer
    """
    issues = (
        _check_non_negative_int(limit, "limit")
        + _check_non_negative_int(offset, "offset")
        + _check_non_negative_int(total, "total")
    )
    if issues:
        raise ValidationError("Pagination parameters are not valid", issues=issues)
    return Pageable(limit=limit, offset=offset, total=total)


def paginate(items: Sequence[T], limit: int, offset: int) -> list[T]:
    """Slice one window out of already ordered items."""
    return list(items[offset:offset + limit])


def resolve_limit(
    limit: Optional[int],
    default_limit: int,
    max_limit: Optional[int] = None,
) -> int:
    """
    Apply the configured default page size and upper bound.

    Raises:
        ValidationError: If the requested limit exceeds max_limit
    """
    if limit is None:
        return default_limit
    if (
        max_limit is not None
        and not isinstance(limit, bool)
        and isinstance(limit, int)
        and limit > max_limit
    ):
        raise ValidationError(
            "Pagination parameters are not valid",
            issues=[ValidationIssue(
                field="limit",
                issue_type="invalid_value",
                message=f"limit must not exceed {max_limit}",
            )],
        )
    return limit
