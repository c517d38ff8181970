from __future__ import annotations
"""Domain errors raised by services and rendered as `{"message": ...}` responses."""
from typing import Optional


class FintrackError(Exception):
    """Base error. `status_code` is the HTTP status used when rendered."""
    status_code: int = 500
    default_message: str = "Internal Server Error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationFailed(FintrackError):
    status_code = 400
    default_message = "Invalid request"


class AuthenticationRequired(FintrackError):
    status_code = 401
    default_message = "Not authenticated"


class PermissionDenied(FintrackError):
    status_code = 403
    default_message = "Permission denied"


class NotFound(FintrackError):
    status_code = 404
    default_message = "Not found"


class InvalidStateTransition(FintrackError):
    status_code = 409
    default_message = "Invalid state transition"


class UpstreamError(FintrackError):
    """An external service failed. The message shown to clients stays generic."""
    status_code = 500
    default_message = "Upstream service unavailable"
