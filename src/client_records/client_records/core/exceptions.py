from __future__ import annotations

from typing import Iterable

from .constants import DUPLICATE_CLIENT_CODE, DUPLICATE_CLIENT_MESSAGE


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules.

    ``missing_fields`` lists every required field that was blank and
    ``invalid_fields`` every field whose value could not be accepted.
    """

    def __init__(self, message: str, *, missing_fields: Iterable[str] = (), invalid_fields: Iterable[str] = ()):
        super().__init__(message)
        self.missing_fields = list(missing_fields)
        self.invalid_fields = list(invalid_fields)


class DuplicateClientError(DomainError):
    """Raised when another client already has the same name and mobile."""

    code = DUPLICATE_CLIENT_CODE

    def __init__(self, message: str = DUPLICATE_CLIENT_MESSAGE):
        super().__init__(message)


class AuthenticationError(DomainError):
    """Raised when the session is missing or the password is wrong."""


class PersistenceError(Exception):
    """Raised when the store is unreachable or rejects a write."""
