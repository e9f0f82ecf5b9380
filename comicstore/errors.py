"""Custom exceptions for the comic store."""

from __future__ import annotations

from typing import Any


class ShopError(Exception):
    """Base exception for all comic store errors."""

    status_code = 500

    def __init__(self, message: str, **extra: Any):
        self.message = message
        self.extra = extra
        super().__init__(message)


class ValidationError(ShopError):
    """Raised when input is missing or malformed."""

    status_code = 400


class EditionInUseError(ValidationError):
    """Raised when an edition referenced by a cart item or order is changed."""

    def __init__(self, edition_id: int, action: str = "modify"):
        self.edition_id = edition_id
        super().__init__(
            f"Cannot {action} edition {edition_id}: it is referenced by a cart item or an order"
        )


class InsufficientStockError(ShopError):
    """Raised when an edition has fewer copies available than requested."""

    status_code = 400

    def __init__(self, edition_id: int, available: int, **extra: Any):
        self.edition_id = edition_id
        self.available = available
        super().__init__("Insufficient stock", available=available, **extra)


class AuthenticationError(ShopError):
    """Raised when the caller cannot be identified."""

    status_code = 401


class ForbiddenError(ShopError):
    """Raised when the caller is authenticated but not allowed to act."""

    status_code = 403


class NotFoundError(ShopError):
    """Raised when a referenced entity doesn't exist."""

    status_code = 404

    def __init__(self, entity: str, entity_id: Any = None):
        self.entity = entity
        self.entity_id = entity_id
        msg = f"{entity} not found"
        if entity_id is not None:
            msg = f"{entity} not found: {entity_id}"
        super().__init__(msg)


class ConflictError(ShopError):
    """Raised when a unique value is already taken."""

    status_code = 409


class PaymentGatewayError(ShopError):
    """Raised when the payment gateway is unreachable or rejects a call."""

    status_code = 502
