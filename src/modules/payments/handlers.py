"""Event handlers for Payments domain events (fed by the outbox relay)."""

from __future__ import annotations

import structlog

from modules.payments.events import PaymentFailed, PaymentSettled
from shared.domain.bus import IEventHandler

logger = structlog.get_logger(__name__)


class PaymentSettledHandler(IEventHandler[PaymentSettled]):
    def handle(self, event: PaymentSettled) -> None:
        logger.info(
            "payment.event.settled",
            payment_id=str(event.aggregate_id),
            order_id=event.order_id,
            gateway_order_id=event.gateway_order_id,
            gross_amount=event.gross_amount,
            payment_type=event.payment_type,
        )


class PaymentFailedHandler(IEventHandler[PaymentFailed]):
    def handle(self, event: PaymentFailed) -> None:
        logger.warning(
            "payment.event.failed",
            payment_id=str(event.aggregate_id),
            order_id=event.order_id,
            gateway_order_id=event.gateway_order_id,
            transaction_status=event.transaction_status,
        )


payment_settled_handler = PaymentSettledHandler()
payment_failed_handler = PaymentFailedHandler()
