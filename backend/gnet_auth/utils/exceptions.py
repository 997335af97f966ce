"""Application error types

Every error carries the HTTP status it maps to. The handlers registered in
``main.py`` render them as ``{"success": false, "message": ...}``.
"""
from typing import Optional
from fastapi import status


class AuthServiceError(Exception):
    """Base class for errors raised by the auth flows"""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, error: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.error = error

    def to_dict(self) -> dict:
        body = {"success": False, "message": self.message}
        if self.error:
            body["error"] = self.error
        return body


class ValidationError(AuthServiceError):
    status_code = status.HTTP_400_BAD_REQUEST


class ConflictError(AuthServiceError):
    status_code = status.HTTP_400_BAD_REQUEST


class AuthError(AuthServiceError):
    status_code = status.HTTP_401_UNAUTHORIZED


class PermissionDeniedError(AuthServiceError):
    status_code = status.HTTP_403_FORBIDDEN


class NotFoundError(AuthServiceError):
    status_code = status.HTTP_404_NOT_FOUND


class DependencyError(AuthServiceError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


class MailDeliveryError(Exception):
    """Raised by the mailer when a required email could not be delivered"""
