"""
Exception taxonomy for booking and account operations.

The scheduling core and the stores raise these; the service layer turns them
into ``ActionResult`` objects so nothing escapes to the HTTP layer as a fault.
"""
from typing import Dict, List, Optional


class SlotbookError(Exception):
    """Base class for all domain errors."""

    message = "Operation failed."

    def __init__(self, detail: Optional[str] = None):
        super().__init__(detail or self.message)
        self.detail = detail or self.message


class BookingValidationError(SlotbookError):
    """Field-scoped input problems. ``errors`` maps field name -> messages."""

    message = "Validation failed."

    def __init__(self, errors: Dict[str, List[str]]):
        super().__init__(self.message)
        self.errors = errors


class ConflictError(SlotbookError):
    message = "This time slot overlaps with an existing booking. Please choose another time."


class AuthorizationError(SlotbookError):
    message = "Authentication required. Please log in."


class NotFoundError(SlotbookError):
    message = "Record not found or you do not have permission to access it."


class StorageError(SlotbookError):
    """Any persistence failure. ``detail`` is for logs only."""

    message = "An unexpected error occurred. Please try again."


class DuplicateKeyError(StorageError):
    """Raised by stores when a uniqueness constraint rejects a write."""

    message = "Record already exists."
