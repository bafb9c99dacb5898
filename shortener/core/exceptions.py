"""
Custom Exceptions

This module defines the error taxonomy of the alias service.
Services raise these; the API layer maps each one to an HTTP status
and a short human-readable message.

Every error except DatabaseError is terminal from the caller's point of view.
DatabaseError (store unavailable or unexpected failure) may be retried.
"""

from typing import Optional


class ShortenerException(Exception):
    """Base exception for the URL shortener service."""
    pass


class InvalidURLError(ShortenerException):
    """Raised when URL validation fails."""

    def __init__(self, url: str, reason: str = "Invalid URL format"):
        self.url = url
        self.reason = reason
        super().__init__(f"{reason}: {url}")


class InvalidCodeError(ShortenerException):
    """Raised when a requested custom code has a bad alphabet or length."""

    def __init__(self, code: str, reason: str = "Invalid short code"):
        self.code = code
        self.reason = reason
        super().__init__(f"{reason}: '{code}'")


class CodeTakenError(ShortenerException):
    """Raised when a short code is already claimed by a live alias."""

    def __init__(self, code: str):
        self.code = code
        super().__init__(f"Short code '{code}' is already in use")


class QuotaExceededError(ShortenerException):
    """Raised when an owner already holds the maximum number of live aliases."""

    def __init__(self, owner_id: str, limit: int):
        self.owner_id = owner_id
        self.limit = limit
        super().__init__(
            f"Maximum of {limit} shortened links reached. Delete some to create more."
        )


class AliasNotFoundError(ShortenerException):
    """Raised when a short code (or link id) is absent or expired."""

    def __init__(self, short_code: str):
        self.short_code = short_code
        super().__init__(f"Short code '{short_code}' not found")


class UnauthorizedError(ShortenerException):
    """Raised when an API credential is missing, unknown or revoked."""

    def __init__(self, reason: str = "Invalid API key"):
        self.reason = reason
        super().__init__(reason)


class DatabaseError(ShortenerException):
    """Raised when database operations fail."""

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        self.original_error = original_error
        super().__init__(f"Database error: {message}")
