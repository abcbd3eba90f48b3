"""
Error kinds raised inside the rental document engine.

Controller and orchestrator entry points catch these and return structured
results, so none of them should escape to the HTTP layer uncaught.
"""
from typing import List, Optional


class DocumentEngineError(Exception):
    """Base class for every failure the engine reports."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(DocumentEngineError):
    """Booking is missing fields required by a validation profile."""

    def __init__(self, message: str, missing_fields: Optional[List[str]] = None):
        super().__init__(message)
        self.missing_fields = missing_fields or []


class TemplateMissingError(DocumentEngineError):
    """Template file not found or unreadable (operator/config problem)."""

    def __init__(self, message: str, template_path: Optional[str] = None):
        super().__init__(message)
        self.template_path = template_path


class RenderError(DocumentEngineError):
    """Template tokens and data map do not line up (data problem)."""

    def __init__(self, message: str, missing_tokens: Optional[List[str]] = None):
        super().__init__(message)
        self.missing_tokens = missing_tokens or []


class UploadError(DocumentEngineError):
    pass


class PersistenceError(DocumentEngineError):
    pass


class DocumentTimeoutError(DocumentEngineError):
    def __init__(self, step: str, timeout: float):
        super().__init__(f"{step} timed out after {timeout:g}s")
        self.step = step
        self.timeout = timeout


class BookingNotFoundError(DocumentEngineError):
    def __init__(self, booking_id: str):
        super().__init__(f"Booking {booking_id} not found")
        self.booking_id = booking_id


class InvalidTransitionError(DocumentEngineError):
    pass
