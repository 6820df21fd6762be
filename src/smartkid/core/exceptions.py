from __future__ import annotations

from typing import Mapping, Optional


class DomainError(Exception):
    """Base exception for business rule violations."""

    status_code = 400


class ValidationError(DomainError):
    """Raised when input data is malformed or violates domain rules.

    ``errors`` maps field names to messages so clients can highlight them.
    """

    status_code = 400

    def __init__(self, message: str, *, field: Optional[str] = None, errors: Optional[Mapping[str, str]] = None):
        super().__init__(message)
        self.errors = dict(errors or {})
        if field and field not in self.errors:
            self.errors[field] = message


class AuthenticationError(DomainError):
    """Raised when credentials or tokens are missing, wrong or expired."""

    status_code = 401


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""

    status_code = 403


class NotFoundError(DomainError):
    """Raised when an entity is absent or outside the caller's reach."""

    status_code = 404


class ConflictError(DomainError):
    """Raised when a write would break a uniqueness rule."""

    status_code = 409
