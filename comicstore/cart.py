"""
Shopping cart — one row per (user, edition); adding an edition twice merges
the quantities.
"""

from __future__ import annotations

import logging
from decimal import Decimal

from comicstore import inventory
from comicstore.catalog import edition_detail
from comicstore.errors import NotFoundError
from comicstore.models import User
from comicstore.utils.validators import check, require_fields, validate_quantity

logger = logging.getLogger(__name__)


def _expand_item(db, row: dict) -> dict:
    item = dict(row)
    item["edition"] = edition_detail(db, row["edition_id"])
    return item


def _load_item(db, user: User, item_id: int) -> dict:
    row = db.query(
        "SELECT * FROM cart_items WHERE id = ? AND user_id = ?", (item_id, user.id), one=True
    )
    if row is None:
        raise NotFoundError("Cart item", item_id)
    return row


def get_cart(db, user: User) -> dict:
    """Cart items with editions attached and the running total."""
    items = [
        _expand_item(db, r)
        for r in db.query("SELECT * FROM cart_items WHERE user_id = ? ORDER BY id ASC", (user.id,))
    ]
    total = sum(
        (Decimal(i["edition"]["price"]) * i["quantity"] for i in items if i["edition"]),
        Decimal("0"),
    )
    return {"items": items, "count": len(items), "total_amount": total}


def add_to_cart(db, user: User, edition_id: int | None, quantity=1) -> dict:
    require_fields("Please provide the edition id", edition_id=edition_id)
    check(validate_quantity(quantity))
    qty = int(quantity)

    edition = inventory.require_edition(db, edition_id)
    inventory.ensure_available(edition, qty)

    with db.transaction():
        existing = db.query(
            "SELECT * FROM cart_items WHERE user_id = ? AND edition_id = ?",
            (user.id, edition.id),
            one=True,
        )
        if existing:
            merged = existing["quantity"] + qty
            inventory.ensure_available(edition, merged, currently_in_cart=existing["quantity"])
            db.update("UPDATE cart_items SET quantity = ? WHERE id = ?", (merged, existing["id"]))
            item_id = existing["id"]
        else:
            item_id = db.execute(
                "INSERT INTO cart_items (user_id, edition_id, quantity) VALUES (?, ?, ?)",
                (user.id, edition.id, qty),
            )

    logger.info(f"Cart: user {user.id} added {qty} of edition {edition.id}")
    return _expand_item(db, _load_item(db, user, item_id))


def update_cart_item(db, user: User, item_id: int, quantity) -> dict:
    check(validate_quantity(quantity))
    qty = int(quantity)
    item = _load_item(db, user, item_id)
    edition = inventory.require_edition(db, item["edition_id"])
    inventory.ensure_available(edition, qty)
    db.update("UPDATE cart_items SET quantity = ? WHERE id = ?", (qty, item_id))
    return _expand_item(db, _load_item(db, user, item_id))


def remove_from_cart(db, user: User, item_id: int) -> None:
    _load_item(db, user, item_id)
    db.update("DELETE FROM cart_items WHERE id = ?", (item_id,))


def clear_cart(db, user: User) -> int:
    removed = db.update("DELETE FROM cart_items WHERE user_id = ?", (user.id,))
    logger.info(f"Cart: cleared {removed} items for user {user.id}")
    return removed
