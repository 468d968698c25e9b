"""Sorting and pagination helpers shared by listing operations."""

from budget_ledger.queries.pageable import build_pageable, paginate, resolve_limit
from budget_ledger.queries.sorting import (
    SortDirection,
    SortKey,
    apply_sort,
    compile_sort,
    format_sort,
)

__all__ = [
    "SortDirection",
    "SortKey",
    "apply_sort",
    "build_pageable",
    "compile_sort",
    "format_sort",
    "paginate",
    "resolve_limit",
]
