"""Cancellation requests.

A request records why a customer wants an order reversed and the admin's
answer. It never changes the order itself: moving the order to
BACK_PENDING/BACK is a separate status update.
"""

from __future__ import annotations

import logging

from comicstore.catalog import edition_detail
from comicstore.errors import ForbiddenError, NotFoundError, ValidationError
from comicstore.models import CancellationDecision, User
from comicstore.users import user_summary
from comicstore.utils.helpers import Page, now_iso, paginate, parse_int, update_row
from comicstore.utils.validators import require_fields

logger = logging.getLogger(__name__)


def _expand(db, row: dict) -> dict:
    request = dict(row)
    order = db.query("SELECT * FROM orders WHERE id = ?", (row["order_id"],), one=True)
    if order is not None:
        order["edition"] = edition_detail(db, order["edition_id"])
    request["order"] = order
    request["user"] = user_summary(db, row["user_id"])
    return request


def _load(db, request_id: int) -> dict:
    row = db.query("SELECT * FROM cancellation_requests WHERE id = ?", (request_id,), one=True)
    if row is None:
        raise NotFoundError("Cancellation request", request_id)
    return row


def create_cancellation(db, user: User, order_id: int | None, reason: str | None) -> dict:
    require_fields(
        "Please provide the order id and the cancellation reason",
        order_id=order_id, reason=reason,
    )
    order = db.query("SELECT * FROM orders WHERE id = ?", (order_id,), one=True)
    if order is None:
        raise NotFoundError("Order", order_id)
    if not user.can_access(order):
        raise ForbiddenError("You are not allowed to cancel this order")

    rid = db.execute(
        "INSERT INTO cancellation_requests (order_id, user_id, reason, decision, created_at) "
        "VALUES (?, ?, ?, ?, ?)",
        (order_id, user.id, reason, int(CancellationDecision.PENDING), now_iso()),
    )
    logger.info(f"Cancellation request {rid} opened for order {order_id} by user {user.id}")
    return _expand(db, _load(db, rid))


def get_cancellation(db, request_id: int, user: User) -> dict:
    row = _load(db, request_id)
    if not user.can_access(row):
        raise ForbiddenError("You are not allowed to view this cancellation request")
    return _expand(db, row)


def delete_cancellation(db, request_id: int, user: User) -> None:
    row = _load(db, request_id)
    if not user.can_access(row):
        raise ForbiddenError("You are not allowed to delete this cancellation request")
    db.update("DELETE FROM cancellation_requests WHERE id = ?", (request_id,))
    logger.info(f"Cancellation request {request_id} deleted by user {user.id}")


def list_cancellations(db, user: User, user_id=None, page=None, limit=None) -> Page:
    """Requests filed by ``user_id`` (default: the caller), newest first."""
    target = parse_int(user_id, user.id)
    if not user.is_admin and target != user.id:
        raise ForbiddenError("You are not allowed to view another user's cancellation requests")
    return paginate(
        db, "cancellation_requests", {"user_id": target},
        order_by="created_at DESC, id DESC",
        page=page, limit=limit,
        expand=lambda r: _expand(db, r),
    )


def _parse_decision(raw) -> int:
    try:
        return int(CancellationDecision(int(raw)))
    except (ValueError, TypeError):
        raise ValidationError(
            "Decision must be one of: "
            + ", ".join(f"{d.value} ({d.name.lower()})" for d in CancellationDecision)
        ) from None


def update_cancellation(db, request_id: int, user: User, reason: str | None = None,
                        decision=None, reply_content: str | None = None) -> dict:
    """Owners may reword the reason; admins may also decide and reply."""
    row = _load(db, request_id)
    if not user.can_access(row):
        raise ForbiddenError("You are not allowed to update this cancellation request")

    changes: dict = {}
    if not user.is_admin:
        if reason:
            changes["reason"] = reason
    else:
        if reason is not None:
            changes["reason"] = reason
        if decision is not None:
            changes["decision"] = _parse_decision(decision)
        if reply_content:
            changes["reply_content"] = reply_content
            changes["replied_at"] = now_iso()

    if not changes:
        raise ValidationError("No updatable fields were provided")

    update_row(db, "cancellation_requests", request_id, changes)
    logger.info(f"Cancellation request {request_id} updated by user {user.id}: {sorted(changes)}")
    return _expand(db, _load(db, request_id))
