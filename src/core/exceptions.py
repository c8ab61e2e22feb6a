"""Domain exceptions raised by the commerce services.

Each one maps to a single HTTP status in ``src.api.app``.
"""

from __future__ import annotations


class CommerceError(Exception):
    """Base class for expected business-rule failures."""

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ResourceNotFoundError(CommerceError):
    """Raised when a referenced row does not exist."""

    status_code = 404


class BadRequestError(CommerceError):
    """Raised when a request is malformed or breaks a business rule."""

    status_code = 400


class InsufficientStockError(BadRequestError):
    """Raised when a write would drive a product's stock below zero."""


class UnauthorizedAccessError(CommerceError):
    """Raised when a customer touches another customer's order, detail or cart."""

    status_code = 403


class UserServiceUnavailable(CommerceError):
    """Raised when the identity provider cannot be reached or is not configured."""

    status_code = 503


class UserServiceError(CommerceError):
    """Raised when the identity provider answers with an unexpected error."""

    status_code = 502
