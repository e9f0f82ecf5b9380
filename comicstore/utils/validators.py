"""
Input validators — used by the workflow functions before touching the DB.
"""

from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation

from comicstore.errors import ValidationError


def validate_email(email: str) -> bool:
    """Basic email format check."""
    pattern = r"^[a-zA-Z0-9_.+-]+@[a-zA-Z0-9-]+\.[a-zA-Z0-9-.]+$"
    return bool(re.match(pattern, email or ""))


def validate_username(username: str) -> tuple[bool, str]:
    """Username rules: 3‑30 chars, alphanumeric + underscores."""
    if len(username) < 3:
        return False, "Username must be at least 3 characters"
    if len(username) > 30:
        return False, "Username must be at most 30 characters"
    if not re.match(r"^[a-zA-Z0-9_]+$", username):
        return False, "Username may only contain letters, digits, and underscores"
    return True, ""


def validate_password(password: str) -> tuple[bool, str]:
    """Password rules: min 6 chars, at least one digit."""
    if len(password) < 6:
        return False, "Password must be at least 6 characters"
    if not any(c.isdigit() for c in password):
        return False, "Password must contain at least one digit"
    return True, ""


def validate_price(price) -> tuple[bool, str]:
    """Price must be a positive number."""
    try:
        p = Decimal(str(price))
    except (InvalidOperation, ValueError, TypeError):
        return False, "Price must be a number"
    if not p.is_finite() or p <= 0:
        return False, "Price must be positive"
    return True, ""


def validate_quantity(qty) -> tuple[bool, str]:
    """Quantity must be a positive integer."""
    if isinstance(qty, bool):
        return False, "Quantity must be an integer"
    try:
        q = int(qty)
    except (ValueError, TypeError):
        return False, "Quantity must be an integer"
    if q != qty and str(q) != str(qty).strip():
        return False, "Quantity must be an integer"
    if q < 1:
        return False, "Quantity must be at least 1"
    return True, ""


def require_fields(message: str, **fields) -> None:
    """Raise ValidationError if any field is missing (None or empty)."""
    missing = [name for name, value in fields.items() if value is None or value == ""]
    if missing:
        raise ValidationError(message, missing=missing)


def check(result: tuple[bool, str]) -> None:
    """Raise ValidationError for a failed ``validate_*`` result."""
    ok, msg = result
    if not ok:
        raise ValidationError(msg)
