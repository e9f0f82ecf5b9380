"""
User administration — listing, roles, activation and deletion.
"""

from __future__ import annotations

import logging

from comicstore.errors import NotFoundError, ValidationError
from comicstore.models import Role, User
from comicstore.utils.helpers import Like, Page, paginate

logger = logging.getLogger(__name__)

_PUBLIC_COLUMNS = "id, username, email, full_name, role, is_active, created_at"


def user_summary(db, user_id: int) -> dict | None:
    return db.query(
        "SELECT id, username, full_name FROM users WHERE id = ?", (user_id,), one=True
    )


def _public(row: dict) -> dict:
    return User.from_row(row).to_dict()


def get_user(db, user_id: int) -> dict:
    row = db.query(f"SELECT {_PUBLIC_COLUMNS} FROM users WHERE id = ?", (user_id,), one=True)
    if row is None:
        raise NotFoundError("User", user_id)
    user = _public(row)
    user["order_count"] = db.scalar("SELECT COUNT(*) FROM orders WHERE user_id = ?", (user_id,))
    return user


def list_users(db, page=None, limit=None, role: str | None = None) -> Page:
    return paginate(
        db, "users", {"role": role or None},
        order_by="created_at DESC, id DESC", page=page, limit=limit, expand=_public,
    )


def search_users(db, keyword: str, page=None, limit=None) -> Page:
    """Substring match on username, email or full name."""
    return paginate(
        db, "users", {"username": Like(keyword or "", ("username", "email", "full_name"))},
        order_by="created_at DESC, id DESC", page=page, limit=limit, expand=_public,
    )


def count_users(db) -> int:
    return db.scalar("SELECT COUNT(*) FROM users")


def update_user_role(db, user_id: int, role, acting_user: User) -> dict:
    try:
        new_role = Role(role)
    except ValueError:
        raise ValidationError(
            f"Invalid role. Role must be one of: {', '.join(r.value for r in Role)}"
        ) from None
    get_user(db, user_id)
    if user_id == acting_user.id and new_role is not Role.ADMIN:
        raise ValidationError("You cannot remove your own admin role")
    db.update("UPDATE users SET role = ? WHERE id = ?", (new_role.value, user_id))
    logger.info(f"User {user_id} role set to {new_role.value} by user {acting_user.id}")
    return get_user(db, user_id)


def toggle_user_status(db, user_id: int, acting_user: User) -> dict:
    """Flip the active flag; disabled users cannot log in or use earlier tokens."""
    user = get_user(db, user_id)
    if user_id == acting_user.id:
        raise ValidationError("You cannot disable your own account")
    db.update(
        "UPDATE users SET is_active = ? WHERE id = ?", (0 if user["is_active"] else 1, user_id)
    )
    return get_user(db, user_id)


def delete_user(db, user_id: int, acting_user: User) -> None:
    """Delete a user without orders, together with their cart, addresses and requests."""
    user = get_user(db, user_id)
    if user_id == acting_user.id:
        raise ValidationError("You cannot delete your own account")
    if user["order_count"] > 0:
        raise ValidationError(
            "Cannot delete a user who has placed orders; disable the account instead"
        )

    with db.transaction():
        db.update("DELETE FROM cart_items WHERE user_id = ?", (user_id,))
        db.update("DELETE FROM cancellation_requests WHERE user_id = ?", (user_id,))
        db.update("DELETE FROM shipping_addresses WHERE user_id = ?", (user_id,))
        db.update("DELETE FROM users WHERE id = ?", (user_id,))
    logger.info(f"User {user_id} deleted by user {acting_user.id}")
