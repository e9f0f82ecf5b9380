"""
Order routes — checkout, order history, status updates.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends

from comicstore import orders
from comicstore.database import Database
from comicstore.models import User
from comicstore.routes.deps import CamelModel, current_user, get_db, ok, paged

router = APIRouter(prefix="/orders", tags=["orders"])


class CreateOrderRequest(CamelModel):
    edition_id: Optional[int] = None
    quantity: Optional[int] = None
    address_id: Optional[int] = None
    discount_id: Optional[int] = None
    payment_method: Optional[str] = None


class UpdateStatusRequest(CamelModel):
    status: Optional[str] = None


@router.post("", status_code=201)
def create_order(req: CreateOrderRequest, db: Database = Depends(get_db),
                 user: User = Depends(current_user)):
    order = orders.create_order(
        db, user, req.edition_id, req.quantity,
        address_id=req.address_id,
        discount_id=req.discount_id,
        payment_method=req.payment_method,
    )
    return ok(order, "Order created")


@router.get("")
def list_orders(status: Optional[str] = None, page: Optional[str] = None,
                limit: Optional[str] = None, db: Database = Depends(get_db),
                user: User = Depends(current_user)):
    return paged(orders.list_orders(db, user, status, page, limit))


@router.get("/pending")
def list_pending(page: Optional[str] = None, limit: Optional[str] = None,
                 db: Database = Depends(get_db), user: User = Depends(current_user)):
    return paged(orders.list_pending_orders(db, user, page, limit))


@router.get("/success")
def list_success(page: Optional[str] = None, limit: Optional[str] = None,
                 db: Database = Depends(get_db), user: User = Depends(current_user)):
    return paged(orders.list_successful_orders(db, user, page, limit))


@router.get("/returned")
def list_returned(page: Optional[str] = None, limit: Optional[str] = None,
                  db: Database = Depends(get_db), user: User = Depends(current_user)):
    return paged(orders.list_returned_orders(db, user, page, limit))


@router.get("/{order_id}")
def get_order(order_id: int, db: Database = Depends(get_db),
              user: User = Depends(current_user)):
    return ok(orders.get_order(db, order_id, user))


@router.put("/{order_id}/status")
def update_status(order_id: int, req: UpdateStatusRequest, db: Database = Depends(get_db),
                  user: User = Depends(current_user)):
    order = orders.update_order_status(db, order_id, req.status, user)
    return ok(order, "Order status updated")
