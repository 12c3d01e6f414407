"""
Error types for the Storefront service.

Every layer raises these unchanged; only the handlers registered in
``main.py`` turn them into HTTP responses.
"""
from enum import Enum


class AppError(Exception):
    """Base class for errors that map to an HTTP error envelope."""
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationFailed(AppError):
    """Request input has the wrong shape, type or value."""
    status_code = 400


class InvalidCredentials(AppError):
    """Login email/password pair did not match an active user."""
    status_code = 401


class NotFound(AppError):
    """Target row does not exist or is soft-deleted."""
    status_code = 404


class DuplicateEmail(AppError):
    """Registration email is already taken."""
    status_code = 500


class HashError(AppError):
    """The password hashing backend failed."""
    status_code = 500


class DenyReason(str, Enum):
    """Why the access policy refused a request."""
    UNAUTHENTICATED = "Unauthenticated"
    TOKEN_INVALID = "TokenInvalid"
    TOKEN_EXPIRED = "TokenExpired"
    MALFORMED_CLAIMS = "MalformedClaims"
    ROLE_FORBIDDEN = "RoleForbidden"


DENY_MESSAGES = {
    DenyReason.UNAUTHENTICATED: "Please login first",
    DenyReason.TOKEN_INVALID: "Invalid token",
    DenyReason.TOKEN_EXPIRED: "Token has expired",
    DenyReason.MALFORMED_CLAIMS: "Malformed token claims",
    DenyReason.ROLE_FORBIDDEN: "Invalid role",
}


class AccessDenied(AppError):
    """Raised by the access policy; the status depends on the reason."""

    def __init__(self, reason: DenyReason):
        super().__init__(DENY_MESSAGES[reason])
        self.reason = reason
        self.status_code = 403 if reason is DenyReason.ROLE_FORBIDDEN else 401


class TokenError(Exception):
    """Base class for token parsing failures."""


class TokenInvalid(TokenError):
    """Bad signature, malformed token, unexpected algorithm or issuer."""


class TokenExpired(TokenError):
    """The token's exp claim is in the past."""


class ClaimsMissing(TokenError):
    """A required claim (sub or role) is absent."""
