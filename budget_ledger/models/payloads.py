"""
Payload Schemas

Incoming creation/update payloads are checked against these schemas
before they touch an account. A failed check is reported as a list of
ValidationIssue objects, never silently coerced.
"""

from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from pydantic import (
    BaseModel,
    Field,
    StrictBool,
    StrictStr,
    field_validator,
    model_validator,
)

from budget_ledger.models.account import LedgerModel


def to_decimal(value: Any) -> Decimal:
    """
    Convert a numeric input to Decimal.

    Accepts int, float and Decimal. Rejects bool, strings and
    non-finite values with ValueError.
    """
    if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
        raise ValueError(f"Expected a number, got {type(value).__name__}")
    try:
        # str() keeps 0.1 as 0.1 instead of its binary expansion
        result = Decimal(str(value)) if isinstance(value, float) else Decimal(value)
    except InvalidOperation:
        raise ValueError(f"Not a valid number: {value!r}")
    if not result.is_finite():
        raise ValueError("Number must be finite")
    return result


class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_type', 'invalid_value')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        default="error",
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )
    suggested_fix: Optional[str] = Field(
        default=None,
        description="Suggested fix if available"
    )


class CreateAccountPayload(LedgerModel):
    """
    Account creation request.

    Name and description are both optional, but at least one of them
    must be a non-empty string.
    """

    name: Optional[StrictStr] = Field(default=None, max_length=200)
    description: Optional[StrictStr] = Field(default=None, max_length=1000)
    budget: Decimal = Field(default=Decimal("0"))

    @field_validator('budget', mode='before')
    @classmethod
    def numeric_budget(cls, v: Any) -> Decimal:
        if v is None:
            return Decimal("0")
        return to_decimal(v)

    @model_validator(mode='after')
    def require_name_or_description(self) -> 'CreateAccountPayload':
        # One of the two is enough: a missing name takes the configured
        # placeholder and a missing description becomes "".
        if not self.name and not self.description:
            raise ValueError("Either a name or a description is required")
        return self


class UpdateAccountPayload(LedgerModel):
    """Partial account update. ``None`` means 'leave unchanged'."""

    name: Optional[StrictStr] = Field(default=None, min_length=1, max_length=200)
    description: Optional[StrictStr] = Field(default=None, max_length=1000)
    is_favorite: Optional[StrictBool] = None
    budget: Optional[Decimal] = None

    @field_validator('budget', mode='before')
    @classmethod
    def numeric_budget(cls, v: Any) -> Optional[Decimal]:
        if v is None:
            return None
        return to_decimal(v)

    def changes(self) -> dict[str, Any]:
        """Fields that were actually supplied."""
        return self.model_dump(exclude_none=True)
