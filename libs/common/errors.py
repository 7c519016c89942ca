"""Service error taxonomy.

Each error carries the HTTP status it maps to; the app's exception handlers
render every one of them as ``{"error": message}``.
"""

from typing import Optional


class ServiceError(Exception):
    """Base class for errors surfaced to API clients."""

    status_code: int = 400

    def __init__(self, message: str, *, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    @property
    def headers(self) -> Optional[dict[str, str]]:
        return None


class ValidationError(ServiceError):
    """Malformed input, format failure or non-numeric path id."""

    status_code = 400


class AuthError(ServiceError):
    """Missing, invalid or expired bearer token, or bad credentials."""

    status_code = 401

    @property
    def headers(self) -> Optional[dict[str, str]]:
        return {"WWW-Authenticate": "Bearer"}


class ForbiddenError(ServiceError):
    status_code = 403


class NotFoundError(ServiceError):
    status_code = 404


class InvariantError(ServiceError):
    """A domain rule was broken (negative stock, illegal transition, bad rating)."""

    status_code = 400


class ConflictError(ServiceError):
    """Duplicate username or email."""

    status_code = 400


class InfrastructureError(ServiceError):
    """Database connection or query failure."""

    status_code = 500
