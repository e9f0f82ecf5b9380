from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends

from comicstore.database import Database
from comicstore.models import User
from comicstore.payment_client import PaymentClient, pay_for_order
from comicstore.routes.deps import CamelModel, current_user, get_db, get_payment_client, ok

router = APIRouter(prefix="/payments", tags=["payments"])


class PaymentRequest(CamelModel):
    order_id: Optional[int] = None
    return_url: Optional[str] = None
    bank_code: Optional[str] = None


@router.post("")
async def create_payment(req: PaymentRequest, db: Database = Depends(get_db),
                         user: User = Depends(current_user),
                         client: PaymentClient = Depends(get_payment_client)):
    link = await pay_for_order(db, client, user, req.order_id, req.return_url, req.bank_code)
    return ok(link, "Payment link created")


@router.get("/{txn_ref}")
async def payment_status(txn_ref: str, user: User = Depends(current_user),
                         client: PaymentClient = Depends(get_payment_client)):
    return ok(await client.query_payment(txn_ref))
