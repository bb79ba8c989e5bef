"""
Domain error types.

Services raise these instead of ``HTTPException`` so they stay usable outside
a request. The server maps each one to its ``status_code`` and renders the
error envelope ``{"success": false, "message": ..., "code": ...}``.
"""

from __future__ import annotations

from typing import Optional


class DocuVaultError(Exception):
    """Base class for expected, client-facing errors."""

    status_code: int = 400
    code: str = "ERROR"

    def __init__(self, message: str, code: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code


class BadRequestError(DocuVaultError):
    status_code = 400
    code = "VALIDATION_ERROR"


class UnauthorizedError(DocuVaultError):
    status_code = 401
    code = "UNAUTHORIZED"


class ForbiddenError(DocuVaultError):
    status_code = 403
    code = "INSUFFICIENT_PERMISSIONS"


class NotFoundError(DocuVaultError):
    status_code = 404
    code = "NOT_FOUND"


class ConflictError(DocuVaultError):
    status_code = 409
    code = "CONFLICT"


class NotificationError(DocuVaultError):
    """Raised inside the notification fan-out; never reaches a client."""

    status_code = 500
    code = "NOTIFICATION_FAILED"


class ServiceUnavailableError(DocuVaultError):
    """A backing service (object storage) is not configured or unreachable."""

    status_code = 503
    code = "SERVICE_UNAVAILABLE"
