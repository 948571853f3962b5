"""Domain exceptions shared by services, repositories and the HTTP layer."""
from typing import Optional


class BookingError(Exception):
    """Base exception for application errors."""

    def __init__(self, message: str = "", details: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details


class ValidationError(BookingError):
    """Raised when input is missing or malformed."""
    pass


class ConflictError(BookingError):
    """Raised when a uniqueness rule would be violated."""
    pass


class AuthError(BookingError):
    """Raised on bad credentials or a wrong current password."""
    pass


class NotFoundError(BookingError):
    """Raised when the target is absent or not owned by the caller."""
    pass


class StoreError(BookingError):
    """Raised when the underlying database operation fails."""
    pass


class NotAuthenticatedError(BookingError):
    """Raised by the session gate when the caller carries no valid identity."""
    pass


class CsrfError(BookingError):
    """Raised when a mutating request carries no valid anti-forgery token."""
    pass
