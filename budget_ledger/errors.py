"""
Error Taxonomy

DESIGN DECISION: Every failure the engine can report has its own class.
Callers (an HTTP layer, a CLI, a bot) map the class to a response
without inspecting messages. Each class carries a suggested
``status_code`` for that purpose.

Domain errors are raised where they are detected and never retried here.
Storage errors come from the persistence collaborator and are kept
separate from domain errors.
"""

from typing import Optional


class LedgerError(Exception):
    """Base class for all errors raised by the engine."""

    status_code: int = 500
    code: Optional[str] = None

    def __init__(self, message: str = "", **context):
        super().__init__(message or self.__class__.__name__)
        self.message = message or self.__class__.__name__
        self.context = context

    def to_dict(self) -> dict:
        """Plain representation for transport layers."""
        result = {
            "error": self.__class__.__name__,
            "message": self.message,
        }
        if self.code:
            result["code"] = self.code
        if self.context:
            result["context"] = {k: str(v) for k, v in self.context.items()}
        return result


# =============================================================================
# DOMAIN ERRORS
# =============================================================================

class ValidationError(LedgerError):
    """
    Malformed creation or update payload.

    ``issues`` holds the structured findings (see ValidationIssue).
    """

    status_code = 422

    def __init__(self, message: str = "", issues: Optional[list] = None, **context):
        super().__init__(message or "Payload is not valid", **context)
        self.issues = list(issues or [])

    def to_dict(self) -> dict:
        result = super().to_dict()
        result["issues"] = [
            issue.model_dump() if hasattr(issue, "model_dump") else issue
            for issue in self.issues
        ]
        return result


class InvalidAmountError(LedgerError):
    """Transaction value is zero, missing or not a number."""

    status_code = 422


class InvalidFieldError(LedgerError):
    """Sort expression names a field that is not sortable."""

    status_code = 422
    code = "2006"


class InvalidDirectionError(LedgerError):
    """Sort expression uses a direction other than asc/desc."""

    status_code = 422
    code = "2008"


class TypeMismatchError(LedgerError):
    """Update value type disagrees with the stored field type."""

    status_code = 422


class NotFoundError(LedgerError):
    """Account, transaction or user does not exist."""

    status_code = 404


class BalanceOverrideError(LedgerError):
    """Direct balance override is disabled or was requested without a reason."""

    status_code = 403


# =============================================================================
# STORAGE ERRORS
# =============================================================================

class StorageError(LedgerError):
    """Base exception for storage operations."""

    status_code = 500


class StorageConnectionError(StorageError):
    """Could not connect to storage backend."""

    status_code = 503


class DuplicateError(StorageError):
    """Attempted to insert a duplicate entity."""

    status_code = 409


class ConcurrentUpdateError(StorageError):
    """Stored record changed since it was read (version mismatch)."""

    status_code = 409
