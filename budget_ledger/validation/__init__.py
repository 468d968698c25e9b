"""Payload validation package."""

from budget_ledger.validation.validator import (
    MODIFIABLE_FIELDS,
    PayloadValidator,
    issues_from_pydantic,
    value_kind,
)

__all__ = [
    "MODIFIABLE_FIELDS",
    "PayloadValidator",
    "issues_from_pydantic",
    "value_kind",
]
