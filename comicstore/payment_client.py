"""
Payment gateway client — wraps the provider's HTTP API.
The gateway builds and signs the checkout URL; we only hand it the order.
"""

from __future__ import annotations

import logging
from decimal import Decimal

import httpx
from starlette.concurrency import run_in_threadpool

from comicstore.config import (
    PAYMENT_API_KEY, PAYMENT_CURRENCY, PAYMENT_GATEWAY_URL, PAYMENT_TIMEOUT,
)
from comicstore.errors import ForbiddenError, NotFoundError, PaymentGatewayError, ValidationError
from comicstore.models import User

logger = logging.getLogger(__name__)


def _minor_units(amount) -> int:
    return int((Decimal(amount) * 100).to_integral_value())


class PaymentClient:
    def __init__(
        self,
        base_url: str = PAYMENT_GATEWAY_URL,
        api_key: str = PAYMENT_API_KEY,
        timeout: float = PAYMENT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url
        self.api_key = api_key
        self.timeout = timeout
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            headers={"Authorization": f"Bearer {self.api_key}"},
            transport=self._transport,
        )

    async def _call(self, method: str, path: str, **kwargs) -> dict:
        async with self._client() as client:
            try:
                resp = await client.request(method, path, **kwargs)
                resp.raise_for_status()
                return resp.json()
            except httpx.ConnectError as e:
                raise PaymentGatewayError("Could not connect to the payment gateway") from e
            except httpx.HTTPStatusError as e:
                raise PaymentGatewayError(
                    f"Payment gateway returned HTTP {e.response.status_code}",
                    gatewayStatus=e.response.status_code,
                ) from e
            except (httpx.HTTPError, ValueError) as e:
                raise PaymentGatewayError(f"Payment gateway error: {e}") from e

    async def create_payment_link(self, order: dict, return_url: str,
                                  bank_code: str | None = None) -> dict:
        """Ask the gateway for a checkout URL covering ``order['total']``."""
        payload = {
            "orderId": order["id"],
            "amount": _minor_units(order["total"]),
            "currency": PAYMENT_CURRENCY,
            "returnUrl": return_url,
            "orderInfo": f"Payment for order {order['id']}",
        }
        if bank_code:
            payload["bankCode"] = bank_code

        data = await self._call("POST", "/payments", json=payload)
        url = data.get("paymentUrl")
        if not url:
            raise PaymentGatewayError("Payment gateway response has no paymentUrl")
        logger.info(f"Payment link created for order {order['id']}")
        return {"paymentUrl": url, "txnRef": data.get("txnRef")}

    async def query_payment(self, txn_ref: str) -> dict:
        """Current status of a gateway transaction."""
        return await self._call("GET", f"/payments/{txn_ref}")


async def pay_for_order(db, client: PaymentClient, user: User, order_id: int | None,
                        return_url: str | None, bank_code: str | None = None) -> dict:
    if order_id is None or not return_url:
        raise ValidationError("Please provide the order id and the return URL")
    # The connection lock can be held by a transaction in a worker thread
    order = await run_in_threadpool(
        db.query, "SELECT * FROM orders WHERE id = ?", (order_id,), one=True
    )
    if order is None:
        raise NotFoundError("Order", order_id)
    if not user.can_access(order):
        raise ForbiddenError("You are not allowed to pay for this order")
    return await client.create_payment_link(order, return_url, bank_code)
