"""Custom exception classes for the School Portal backend.

This module defines application-specific exceptions following Google Python
Style Guide. Every exception carries a machine-readable ``kind`` and the HTTP
status it is rendered with, so route handlers can let them propagate to the
application-level exception handler.
"""

from typing import Optional

from fastapi import status


class SchoolPortalError(Exception):
    """Base exception for all School Portal errors."""

    kind = "InternalError"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        """Initialize the exception.

        Args:
            message: Human-readable message returned to the caller.
        """
        self.message = message or self.default_message
        super().__init__(self.message)


class Unauthorized(SchoolPortalError):
    """Raised when the request carries no readable token."""

    kind = "Unauthorized"
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Unauthorized"


class TokenExpired(SchoolPortalError):
    """Raised when the token's expiry claim lies in the past."""

    kind = "TokenExpired"
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Token expired"


class Forbidden(SchoolPortalError):
    """Raised when the caller's role may not use the endpoint."""

    kind = "Forbidden"
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Forbidden"


class DuplicateUsername(SchoolPortalError):
    """Raised when registering a username that is already taken."""

    kind = "DuplicateUsername"
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Username already exists"


class InvalidCredentials(SchoolPortalError):
    """Raised on unknown username or wrong password."""

    kind = "InvalidCredentials"
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Invalid credentials"


class PendingApproval(SchoolPortalError):
    """Raised when an inactive account tries to log in."""

    kind = "PendingApproval"
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Account pending approval"


class NotFound(SchoolPortalError):
    """Raised when a requested account cannot be found."""

    kind = "NotFound"
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "User not found"

    def __init__(self, user_id: Optional[str] = None, message: Optional[str] = None):
        """Initialize the exception.

        Args:
            user_id: The ID of the account that was not found.
            message: Optional message overriding the default.
        """
        self.user_id = user_id
        super().__init__(message)


class ValidationError(SchoolPortalError):
    """Raised when data validation fails."""

    kind = "ValidationError"
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request data"


class InternalError(SchoolPortalError):
    """Raised when a storage operation or transaction fails."""

    pass
