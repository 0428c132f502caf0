"""Typed application errors.

Every error carries the HTTP status and machine-readable code used when it is
rendered into the JSON error envelope at the API boundary.
"""

from typing import Any, Optional


class AppError(Exception):
    """Base exception for the review service."""

    status_code: int = 500
    code: str = "APP_ERROR"

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        code: Optional[str] = None,
        details: Optional[Any] = None,
    ):
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        if code is not None:
            self.code = code
        self.details = details
        super().__init__(message)


class ValidationError(AppError):
    """Request or configuration failed validation."""

    status_code = 400
    code = "VALIDATION_ERROR"

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message, details=details)


class AuthenticationError(AppError):
    """Missing or invalid bearer token."""

    status_code = 401
    code = "AUTHENTICATION_ERROR"

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message, details=details)


class RateLimitError(AppError):
    """Client exceeded its request budget for the current window."""

    status_code = 429
    code = "RATE_LIMIT_EXCEEDED"

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message, details=details)


class SessionError(AppError):
    """Session is missing, expired, or storage is unavailable."""

    status_code = 404
    code = "SESSION_ERROR"

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message, details=details)


class AIServiceError(AppError):
    """The upstream completion API failed or returned nothing usable."""

    status_code = 502
    code = "AI_SERVICE_ERROR"

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message, details=details)
