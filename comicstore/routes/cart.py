from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Depends

from comicstore import cart
from comicstore.database import Database
from comicstore.models import User
from comicstore.routes.deps import CamelModel, current_user, get_db, ok

router = APIRouter(prefix="/cart", tags=["cart"])


class AddToCartRequest(CamelModel):
    edition_id: Optional[int] = None
    quantity: Any = 1


class UpdateCartRequest(CamelModel):
    quantity: Any = None


@router.get("")
def view_cart(db: Database = Depends(get_db), user: User = Depends(current_user)):
    return ok(cart.get_cart(db, user))


@router.post("", status_code=201)
def add_item(req: AddToCartRequest, db: Database = Depends(get_db),
             user: User = Depends(current_user)):
    item = cart.add_to_cart(db, user, req.edition_id, req.quantity)
    return ok(item, "Added to cart")


# Registered before /{item_id} so "clear" is not parsed as an id.
@router.delete("/clear")
def clear(db: Database = Depends(get_db), user: User = Depends(current_user)):
    removed = cart.clear_cart(db, user)
    return ok({"removed": removed}, "Cart cleared")


@router.put("/{item_id}")
def update_item(item_id: int, req: UpdateCartRequest, db: Database = Depends(get_db),
                user: User = Depends(current_user)):
    return ok(cart.update_cart_item(db, user, item_id, req.quantity), "Cart updated")


@router.delete("/{item_id}")
def remove_item(item_id: int, db: Database = Depends(get_db),
                user: User = Depends(current_user)):
    cart.remove_from_cart(db, user, item_id)
    return ok(message="Removed from cart")
