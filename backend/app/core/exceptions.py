"""
Domain errors raised by the ledger services.

Routes never build these into HTTP responses themselves; the handlers
registered in ``app.main`` translate each one to a status code.
"""
import enum
from typing import Any, Dict, List, Optional


class LedgerError(Exception):
    """Base class for every error the ledger services raise."""
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> Dict[str, Any]:
        return {"error": type(self).__name__, "message": self.message}


class ValidationError(LedgerError):
    """User input failed a required-field or enum check."""
    status_code = 422

    def __init__(self, field: str, message: Optional[str] = None):
        super().__init__(message or f"Invalid or missing value for '{field}'")
        self.field = field

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["field"] = self.field
        return data


class NotFound(LedgerError):
    """Record or settlement group does not exist for this owner."""
    status_code = 404


class SettleFailure(str, enum.Enum):
    """Reasons a settle attempt can be refused."""
    DELETED_MEMBER = "DeletedMember"


class SettleError(LedgerError):
    """Settlement refused before any field was written."""
    status_code = 409

    def __init__(self, reason: SettleFailure, message: Optional[str] = None):
        super().__init__(message or f"Cannot settle: {reason.value}")
        self.reason = reason

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["reason"] = self.reason.value
        return data


class ConfirmationRequired(LedgerError):
    """Destructive operation invoked without explicit confirmation."""
    status_code = 400


class PartialFailure(LedgerError):
    """
    A multi-step operation completed some of its steps.

    ``completed`` and ``failed`` describe exactly what happened so the
    client can retry the missing step by hand. Nothing is rolled back.
    """
    status_code = 207

    def __init__(self, message: str, completed: List[Dict[str, Any]], failed: List[Dict[str, Any]]):
        super().__init__(message)
        self.completed = completed
        self.failed = failed

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["completed"] = self.completed
        data["failed"] = self.failed
        return data


class StoreError(LedgerError):
    """The record store failed; the operation was aborted."""
    status_code = 503

    def __init__(self, message: str = "The record store is unavailable, please try again"):
        super().__init__(message)


class Unauthenticated(LedgerError):
    """No valid session for a mutating operation."""
    status_code = 401

    def __init__(self, message: str = "Not authenticated"):
        super().__init__(message)
