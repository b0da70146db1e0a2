"""Payment gateway client (Midtrans Snap).

``IPaymentGateway`` is what ``PaymentService`` depends on; the Snap client
is the production implementation. Snap requires the item lines to add up to
the gross amount, so the order's tax is sent as an extra line.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Dict, List, Optional

import httpx
import structlog
from django.conf import settings

from modules.payments.constants import SNAP_BASE_URLS, SNAP_TRANSACTIONS_PATH
from modules.payments.dtos import SnapTransactionDTO
from modules.payments.exceptions import GatewayError

if TYPE_CHECKING:
    from modules.orders.models import Order

logger = structlog.get_logger(__name__)

ITEM_NAME_MAX_LENGTH = 50
TAX_ITEM_ID = "tax"


class IPaymentGateway(ABC):
    @abstractmethod
    def create_transaction(self, order: Order, gateway_order_id: str) -> SnapTransactionDTO:
        """Open a payment transaction for ``order``.

        Raises:
            GatewayError: the gateway could not be reached or refused the request.
        """


def _amount(value: Decimal) -> int:
    return int(value)


def build_transaction_payload(order: Order, gateway_order_id: str) -> Dict[str, Any]:
    items: List[Dict[str, Any]] = [
        {
            "id": str(item.id),
            "name": item.product_name[:ITEM_NAME_MAX_LENGTH],
            "price": _amount(item.unit_price),
            "quantity": item.quantity,
        }
        for item in order.items.all()
    ]
    if order.tax:
        items.append(
            {"id": TAX_ITEM_ID, "name": "Tax", "price": _amount(order.tax), "quantity": 1}
        )

    customer: Dict[str, Any] = {"first_name": order.customer_name}
    if order.user is not None:
        customer["email"] = order.user.email
        if order.user.phone:
            customer["phone"] = order.user.phone

    return {
        "transaction_details": {
            "order_id": gateway_order_id,
            "gross_amount": _amount(order.total),
        },
        "customer_details": customer,
        "item_details": items,
    }


class MidtransSnapGateway(IPaymentGateway):
    """Creates Snap transactions over HTTPS with the server key as Basic auth."""

    def __init__(
        self,
        server_key: Optional[str] = None,
        environment: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._server_key = server_key or settings.MIDTRANS_SERVER_KEY
        environment = environment or settings.MIDTRANS_ENVIRONMENT
        self._base_url = SNAP_BASE_URLS[environment]
        self._timeout = timeout if timeout is not None else settings.PAYMENT_GATEWAY_TIMEOUT
        self._transport = transport

    def create_transaction(self, order: Order, gateway_order_id: str) -> SnapTransactionDTO:
        payload = build_transaction_payload(order, gateway_order_id)
        log = logger.bind(order_id=str(order.id), gateway_order_id=gateway_order_id)

        try:
            with httpx.Client(
                base_url=self._base_url,
                auth=(self._server_key, ""),
                timeout=self._timeout,
                transport=self._transport,
                headers={"Accept": "application/json"},
            ) as client:
                response = client.post(SNAP_TRANSACTIONS_PATH, json=payload)
        except httpx.HTTPError as exc:
            log.error("payment.gateway_unreachable", error=str(exc))
            raise GatewayError(f"Payment gateway unreachable: {exc}") from exc

        if response.status_code >= 400:
            log.error(
                "payment.gateway_rejected",
                status_code=response.status_code,
                body=response.text[:500],
            )
            raise GatewayError(
                f"Payment gateway rejected the transaction ({response.status_code})."
            )

        try:
            body = response.json()
            transaction = SnapTransactionDTO(
                token=body["token"], redirect_url=body["redirect_url"]
            )
        except (ValueError, KeyError, TypeError) as exc:
            log.error("payment.gateway_bad_response", body=response.text[:500])
            raise GatewayError("Payment gateway returned an unexpected response.") from exc

        log.info("payment.gateway_transaction_created")
        return transaction
