"""
Payload Validation

DESIGN DECISION: Validation happens in two distinct stages for updates:

STAGE 1 - TYPE AGREEMENT:
- Every supplied modifiable field must have the same kind of value
  (string, number, boolean) as the field it replaces
- Disagreement is a TypeMismatchError, not a ValidationError

STAGE 2 - SCHEMA VALIDATION:
- Lengths, required combinations, numeric sanity
- Failures become a ValidationError carrying ValidationIssue objects

Creation payloads only go through stage 2. Transaction amounts have
their own check because a bad amount is its own error kind.

IMPORTANT: Validation NEVER silently fixes issues.
"""

from decimal import Decimal
from typing import Any, Mapping, Optional, Union

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from budget_ledger.errors import InvalidAmountError, TypeMismatchError, ValidationError
from budget_ledger.models import (
    Account,
    CreateAccountPayload,
    UpdateAccountPayload,
    ValidationIssue,
    to_decimal,
)


# API name -> attribute name. Only these fields may be changed by update.
MODIFIABLE_FIELDS: dict[str, str] = {
    "name": "name",
    "description": "description",
    "isFavorite": "is_favorite",
    "is_favorite": "is_favorite",
    "budget": "budget",
}


def value_kind(value: Any) -> str:
    """Coarse runtime type used for update type agreement."""
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float, Decimal)):
        return "number"
    if isinstance(value, str):
        return "string"
    return type(value).__name__


def issues_from_pydantic(error: PydanticValidationError) -> list[ValidationIssue]:
    """Translate pydantic errors into ValidationIssue objects."""
    issues = []
    for err in error.errors():
        location = ".".join(str(part) for part in err.get("loc", ())) or "payload"
        issues.append(ValidationIssue(
            field=location,
            issue_type=err.get("type", "invalid"),
            message=err.get("msg", "Invalid value"),
            severity="error",
        ))
    return issues


class PayloadValidator:
    """Validates account payloads and transaction amounts."""

    def validate_create(
        self,
        payload: Union[Mapping[str, Any], CreateAccountPayload, None],
    ) -> CreateAccountPayload:
        """
        Validate an account creation payload.

        Raises:
            ValidationError: If the payload is not a mapping or fails the schema
        """
        if isinstance(payload, CreateAccountPayload):
            return payload
        if isinstance(payload, BaseModel):
            payload = payload.model_dump(exclude_none=True)
        if not isinstance(payload, Mapping):
            raise ValidationError(
                "Account payload must be an object",
                issues=[ValidationIssue(
                    field="payload",
                    issue_type="invalid_type",
                    message=f"Expected an object, got {type(payload).__name__}",
                )],
            )
        try:
            return CreateAccountPayload.model_validate(dict(payload))
        except PydanticValidationError as e:
            raise ValidationError(
                "Account creation payload is not valid",
                issues=issues_from_pydantic(e),
            ) from e

    def validate_update(
        self,
        payload: Union[Mapping[str, Any], UpdateAccountPayload, None],
        current: Account,
    ) -> dict[str, Any]:
        """
        Validate a partial update against the current account.

        Returns:
            Attribute name -> new value, for supplied fields only.
            Non-modifiable keys are ignored.

        Raises:
            TypeMismatchError: If a value's type disagrees with the stored field
            ValidationError: If the payload fails the schema
        """
        if isinstance(payload, BaseModel):
            payload = payload.model_dump(exclude_none=True)
        if payload is None:
            return {}
        if not isinstance(payload, Mapping):
            raise ValidationError(
                "Update payload must be an object",
                issues=[ValidationIssue(
                    field="payload",
                    issue_type="invalid_type",
                    message=f"Expected an object, got {type(payload).__name__}",
                )],
            )

        # Stage 1: type agreement
        supplied: dict[str, Any] = {}
        for key, value in payload.items():
            attribute = MODIFIABLE_FIELDS.get(key)
            if attribute is None or value is None:
                continue
            expected = value_kind(getattr(current, attribute))
            received = value_kind(value)
            if expected != received:
                raise TypeMismatchError(
                    f"Field '{key}' expects a {expected}, got a {received}",
                    field=key,
                    expected=expected,
                    received=received,
                )
            supplied[attribute] = value

        # Stage 2: schema
        try:
            return UpdateAccountPayload.model_validate(supplied).changes()
        except PydanticValidationError as e:
            raise ValidationError(
                "Account update payload is not valid",
                issues=issues_from_pydantic(e),
            ) from e

    def validate_amount(self, value: Any) -> Decimal:
        """
        Validate a transaction amount.

        Raises:
            InvalidAmountError: If the value is missing, non-numeric, non-finite or zero
        """
        if value is None:
            raise InvalidAmountError("Transaction value is required")
        try:
            amount = to_decimal(value)
        except ValueError as e:
            raise InvalidAmountError(f"Transaction value is not valid: {e}", value=value) from e
        if amount == 0:
            raise InvalidAmountError("Transaction cannot be zero.", value=value)
        return amount

    def validate_number(self, value: Any, field: str) -> Decimal:
        """Validate an arbitrary numeric field (zero allowed)."""
        try:
            return to_decimal(value)
        except ValueError as e:
            raise ValidationError(
                f"Field '{field}' must be a number",
                issues=[ValidationIssue(
                    field=field,
                    issue_type="invalid_type",
                    message=str(e),
                )],
            ) from e

    def validate_optional_text(self, value: Any, field: str) -> Optional[str]:
        """Optional free-text field: must be a string when present."""
        if value is None or isinstance(value, str):
            return value
        raise ValidationError(
            f"Field '{field}' must be a string",
            issues=[ValidationIssue(
                field=field,
                issue_type="invalid_type",
                message=f"Expected a string, got {type(value).__name__}",
            )],
        )
