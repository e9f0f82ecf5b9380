"""
Shipping addresses — each user manages their own.
"""

from __future__ import annotations

from comicstore.errors import NotFoundError, ValidationError
from comicstore.models import User
from comicstore.utils.helpers import update_row
from comicstore.utils.validators import require_fields


def list_addresses(db, user: User) -> list[dict]:
    return db.query(
        "SELECT * FROM shipping_addresses WHERE user_id = ? ORDER BY id ASC", (user.id,)
    )


def require_address(db, user: User, address_id: int) -> dict:
    """The user's address, or NotFoundError when missing or someone else's."""
    row = db.query(
        "SELECT * FROM shipping_addresses WHERE id = ? AND user_id = ?",
        (address_id, user.id),
        one=True,
    )
    if row is None:
        raise NotFoundError("Shipping address", address_id)
    return row


def create_address(db, user: User, address: str | None, recipient_name: str | None,
                   phone: str | None) -> dict:
    require_fields(
        "Please provide the address, recipient name and phone number",
        address=address, recipient_name=recipient_name, phone=phone,
    )
    aid = db.execute(
        "INSERT INTO shipping_addresses (user_id, address, recipient_name, phone) "
        "VALUES (?, ?, ?, ?)",
        (user.id, address, recipient_name, phone),
    )
    return require_address(db, user, aid)


def update_address(db, user: User, address_id: int, address: str | None = None,
                   recipient_name: str | None = None, phone: str | None = None) -> dict:
    require_address(db, user, address_id)
    changes = {
        k: v for k, v in
        {"address": address, "recipient_name": recipient_name, "phone": phone}.items()
        if v
    }
    update_row(db, "shipping_addresses", address_id, changes)
    return require_address(db, user, address_id)


def delete_address(db, user: User, address_id: int) -> None:
    require_address(db, user, address_id)
    if db.query("SELECT id FROM orders WHERE address_id = ? LIMIT 1", (address_id,), one=True):
        raise ValidationError(f"Cannot delete address {address_id}: orders were shipped to it")
    db.update("DELETE FROM shipping_addresses WHERE id = ?", (address_id,))
