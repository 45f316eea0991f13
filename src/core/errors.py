"""Domain error taxonomy shared by the discussion and moderation modules.

Every error carries a stable machine-readable ``code``; the HTTP layer maps
codes to status codes through ``ERROR_STATUS_MAP``.
"""

from fastapi import status


class DomainError(Exception):
    """Base domain error."""

    code = "domain_error"

    def __init__(self, message: str, code: str | None = None):
        self.message = message
        if code:
            self.code = code
        super().__init__(message)


class ValidationError(DomainError):
    """Malformed input the caller can correct."""

    code = "validation_error"

    def __init__(self, message: str = "Invalid input"):
        super().__init__(message)


class InvalidNestingError(DomainError):
    """Reply to a reply (comment depth is capped at one)."""

    code = "invalid_nesting"

    def __init__(self, message: str = "Replies cannot be replied to"):
        super().__init__(message)


class AuthenticationRequiredError(DomainError):
    """Write attempted without an authenticated principal."""

    code = "authentication_required"

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message)


class PermissionDeniedError(DomainError):
    """Principal lacks the capability for the operation."""

    code = "permission_denied"

    def __init__(self, message: str = "Permission denied"):
        super().__init__(message)


class NotFoundError(DomainError):
    """Target does not exist (or is not visible to the caller)."""

    code = "not_found"

    def __init__(self, message: str = "Not found"):
        super().__init__(message)


class ConflictError(DomainError):
    """Operation conflicts with the current state."""

    code = "conflict"

    def __init__(self, message: str = "Conflict"):
        super().__init__(message)


class RateLimitExceededError(DomainError):
    """Too many writes in the current window."""

    code = "rate_limit_exceeded"

    def __init__(self, message: str = "Rate limit exceeded"):
        super().__init__(message)


ERROR_STATUS_MAP: dict[str, int] = {
    ValidationError.code: status.HTTP_400_BAD_REQUEST,
    InvalidNestingError.code: status.HTTP_400_BAD_REQUEST,
    AuthenticationRequiredError.code: status.HTTP_401_UNAUTHORIZED,
    PermissionDeniedError.code: status.HTTP_403_FORBIDDEN,
    NotFoundError.code: status.HTTP_404_NOT_FOUND,
    ConflictError.code: status.HTTP_409_CONFLICT,
    RateLimitExceededError.code: status.HTTP_429_TOO_MANY_REQUESTS,
}


def status_for_error(error: DomainError) -> int:
    """HTTP status code for a domain error (500 for unmapped codes)."""
    return ERROR_STATUS_MAP.get(error.code, status.HTTP_500_INTERNAL_SERVER_ERROR)
