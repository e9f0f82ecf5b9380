"""Order processing.

Checkout writes the order, bumps the discount usage counter, debits stock
and drops the matching cart row in one transaction. Status changes restore
stock only when a shipped or delivered order comes back.
"""

from __future__ import annotations

import logging

from comicstore import inventory
from comicstore.addresses import require_address
from comicstore.catalog import edition_detail, get_discount_code
from comicstore.errors import ForbiddenError, NotFoundError
from comicstore.models import OrderStatus, StockEffect, User, transition_effect
from comicstore.users import user_summary
from comicstore.utils.helpers import Page, now_iso, paginate
from comicstore.utils.validators import check, require_fields, validate_quantity

logger = logging.getLogger(__name__)


def expand_order(db, row: dict) -> dict:
    """Attach the user, edition (with comic), address and discount to an order row."""
    order = dict(row)
    order["user"] = user_summary(db, row["user_id"])
    order["edition"] = edition_detail(db, row["edition_id"])
    order["address"] = (
        db.query("SELECT * FROM shipping_addresses WHERE id = ?", (row["address_id"],), one=True)
        if row.get("address_id") is not None
        else None
    )
    order["discount"] = (
        get_discount_code(db, row["discount_id"]) if row.get("discount_id") is not None else None
    )
    return order


def _load_order(db, order_id: int) -> dict:
    row = db.query("SELECT * FROM orders WHERE id = ?", (order_id,), one=True)
    if row is None:
        raise NotFoundError("Order", order_id)
    return row


def create_order(
    db,
    user: User,
    edition_id: int | None,
    quantity: int | None,
    address_id: int | None = None,
    discount_id: int | None = None,
    payment_method: str | None = None,
) -> dict:
    """Place an order for ``quantity`` copies of one edition."""
    require_fields(
        "Please provide the edition id and the quantity",
        edition_id=edition_id,
        quantity=quantity,
    )
    check(validate_quantity(quantity))
    qty = int(quantity)

    edition = inventory.require_edition(db, edition_id)
    inventory.ensure_available(edition, qty)
    if address_id is not None:
        require_address(db, user, address_id)
    if discount_id is not None and get_discount_code(db, discount_id) is None:
        raise NotFoundError("Discount code", discount_id)

    total = edition.price_for(qty)

    with db.transaction():
        order_id = db.execute(
            "INSERT INTO orders (user_id, edition_id, quantity, total, address_id, "
            "payment_method, discount_id, status, created_at) "
            "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)",
            (user.id, edition.id, qty, total, address_id, payment_method,
             discount_id, OrderStatus.PENDING.value, now_iso()),
        )
        if discount_id is not None:
            db.update(
                "UPDATE discount_codes SET usage_count = usage_count + 1 WHERE id = ?",
                (discount_id,),
            )
        inventory.debit(db, edition.id, qty)
        db.update(
            "DELETE FROM cart_items WHERE user_id = ? AND edition_id = ?",
            (user.id, edition.id),
        )

    logger.info(
        f"Order {order_id} created: user {user.id}, edition {edition.id}, qty {qty}, total {total}"
    )
    return expand_order(db, _load_order(db, order_id))


def update_order_status(db, order_id: int, status, user: User) -> dict:
    """Move an order to ``status``; a return from SHIPPING/SUCCESS restocks."""
    requested = OrderStatus.parse(status)

    with db.transaction():
        order = _load_order(db, order_id)
        if not user.can_access(order):
            raise ForbiddenError("You are not allowed to update this order")

        current = OrderStatus(order["status"])
        effect = transition_effect(current, requested)

        db.update("UPDATE orders SET status = ? WHERE id = ?", (requested.value, order_id))
        if effect is StockEffect.RESTORE:
            inventory.credit(db, order["edition_id"], order["quantity"])

    logger.info(
        f"Order {order_id}: {current.value} -> {requested.value} by user {user.id}"
        + (" (stock restored)" if effect is StockEffect.RESTORE else "")
    )
    return expand_order(db, _load_order(db, order_id))


def get_order(db, order_id: int, user: User) -> dict:
    order = _load_order(db, order_id)
    if not user.can_access(order):
        raise ForbiddenError("You are not allowed to view this order")
    return expand_order(db, order)


def list_orders(db, user: User, status=None, page=None, limit=None) -> Page:
    """Newest orders first; non-admins only see their own."""
    if status:
        status = OrderStatus.parse(status).value
    filters = {
        "user_id": None if user.is_admin else user.id,
        "status": status or None,
    }
    return paginate(
        db, "orders", filters,
        order_by="created_at DESC, id DESC",
        page=page, limit=limit,
        expand=lambda row: expand_order(db, row),
    )


def list_pending_orders(db, user: User, page=None, limit=None) -> Page:
    return list_orders(db, user, OrderStatus.PENDING, page, limit)


def list_successful_orders(db, user: User, page=None, limit=None) -> Page:
    return list_orders(db, user, OrderStatus.SUCCESS, page, limit)


def list_returned_orders(db, user: User, page=None, limit=None) -> Page:
    return list_orders(db, user, OrderStatus.BACK, page, limit)
