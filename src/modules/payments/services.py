"""Payment service layer.

Two use cases:

- ``create_payment_token``: open a gateway transaction for a pending order
  and record the attempt once the gateway has answered.
- ``process_webhook_notification``: authenticate a gateway notification,
  check it against the stored attempt, record it, then move the order.

Notification handling commits the payment update before touching the order,
so the received data is kept even when the order transition fails; that
failure is still raised so the gateway redelivers.
"""

from __future__ import annotations

import secrets
import time
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import TYPE_CHECKING, Callable, Optional
from uuid import UUID

import structlog
from django.conf import settings
from django.utils import timezone

from modules.orders.constants import OrderStatus
from modules.orders.exceptions import OrderNotFound
from modules.payments.constants import (
    FAILED_TRANSACTION_STATUSES,
    GATEWAY_TIMESTAMP_FORMAT,
    ORDER_STATUS_FOR_TRANSACTION,
    TransactionStatus,
)
from modules.payments.dtos import PaymentTokenDTO
from modules.payments.events import PaymentFailed, PaymentSettled
from modules.payments.exceptions import (
    InvalidAmount,
    InvalidSignature,
    OrderNotPending,
    PaymentAlreadyExists,
    PaymentNotFound,
)
from modules.payments.signature import verify_signature

if TYPE_CHECKING:
    from modules.orders.repositories.interfaces import IOrderRepository
    from modules.orders.services import OrderService
    from modules.payments.dtos import PaymentNotificationDTO
    from modules.payments.gateway import IPaymentGateway
    from modules.payments.models import Payment
    from modules.payments.repositories.interfaces import IPaymentRepository

logger = structlog.get_logger(__name__)


def parse_gateway_time(value: Optional[str]) -> Optional[datetime]:
    """Parse a gateway timestamp (local time of the configured ``TIME_ZONE``)."""
    if not value:
        return None
    try:
        parsed = datetime.strptime(value, GATEWAY_TIMESTAMP_FORMAT)
    except ValueError:
        return None
    return timezone.make_aware(parsed, timezone.get_current_timezone())


class PaymentService:
    def __init__(
        self,
        payment_repository: IPaymentRepository,
        order_repository: IOrderRepository,
        order_service: OrderService,
        gateway: IPaymentGateway,
        server_key: Optional[str] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._payment_repo = payment_repository
        self._order_repo = order_repository
        self._orders = order_service
        self._gateway = gateway
        self._server_key = server_key or settings.MIDTRANS_SERVER_KEY
        self._clock = clock

    # ------------------------------------------------------------------
    # Payment token
    # ------------------------------------------------------------------

    def create_payment_token(self, order_id: UUID) -> PaymentTokenDTO:
        """Open a gateway transaction for a pending order.

        The payment row is only written after the gateway answered, so a
        failed call leaves nothing behind.

        Raises:
            OrderNotFound: the order does not exist.
            OrderNotPending: the order is no longer waiting for payment.
            PaymentAlreadyExists: an earlier attempt already settled.
            GatewayError: the gateway call failed.
        """
        order = self._order_repo.get_by_id(str(order_id))
        if order is None:
            raise OrderNotFound(f"Order {order_id} not found.")

        log = logger.bind(order_id=str(order.id), order_number=order.order_number)

        if order.status != OrderStatus.PENDING:
            log.warning("payment.order_not_pending", status=order.status)
            raise OrderNotPending("Order must be pending to create a payment.")

        if any(p.is_settled for p in self._payment_repo.list_for_order(str(order.id))):
            log.warning("payment.already_settled")
            raise PaymentAlreadyExists("Payment already processed for this order.")

        gateway_order_id = self._gateway_order_id(order.order_number)
        transaction = self._gateway.create_transaction(order, gateway_order_id)

        payment = self._payment_repo.create(
            {
                "order_id": order.id,
                "gateway_order_id": gateway_order_id,
                "gross_amount": order.total,
                "payment_metadata": {},
            }
        )
        log.info(
            "payment.token_created",
            payment_id=str(payment.id),
            gateway_order_id=gateway_order_id,
        )
        return PaymentTokenDTO(
            payment_id=payment.id,
            token=transaction.token,
            redirect_url=transaction.redirect_url,
        )

    def _gateway_order_id(self, order_number: str) -> str:
        return f"{order_number}-{int(self._clock())}-{secrets.token_hex(2)}"

    # ------------------------------------------------------------------
    # Webhook
    # ------------------------------------------------------------------

    def process_webhook_notification(self, notification: PaymentNotificationDTO) -> Payment:
        """Reconcile one gateway notification.

        Redelivering the same notification is safe: the payment is rewritten
        with the same values and an order already in the target status is
        left alone.

        Raises:
            InvalidSignature: the signature does not match; nothing is changed.
            PaymentNotFound: no attempt carries the notified order id.
            InvalidAmount: the notified amount differs from the stored one.
            OrderNotFound, InvalidStatusTransition: the order could not be
                moved; the payment update is already committed.
        """
        log = logger.bind(
            gateway_order_id=notification.order_id,
            transaction_status=notification.transaction_status,
        )
        log.info("payment.webhook_received")

        if not verify_signature(
            notification.order_id,
            notification.status_code,
            notification.gross_amount,
            notification.signature_key,
            self._server_key,
        ):
            log.warning("payment.invalid_signature")
            raise InvalidSignature("Invalid signature.")

        payment = self._payment_repo.get_by_gateway_order_id(notification.order_id)
        if payment is None:
            log.warning("payment.not_found")
            raise PaymentNotFound(f"Payment {notification.order_id} not found.")

        try:
            gross_amount = Decimal(notification.gross_amount)
        except InvalidOperation as exc:
            log.warning("payment.amount_unreadable", gross_amount=notification.gross_amount)
            raise InvalidAmount("Invalid payment amount.") from exc
        if not gross_amount.is_finite() or gross_amount != payment.gross_amount:
            log.warning(
                "payment.amount_mismatch",
                expected=str(payment.gross_amount),
                received=notification.gross_amount,
            )
            raise InvalidAmount("Invalid payment amount.")

        self._apply_notification(payment, notification)
        self._payment_repo.save(payment)
        log.info("payment.updated", payment_id=str(payment.id))

        target_status = ORDER_STATUS_FOR_TRANSACTION.get(notification.transaction_status)
        if target_status is None:
            if notification.transaction_status == TransactionStatus.PENDING:
                log.info("payment.awaiting_settlement")
            else:
                log.warning("payment.unhandled_transaction_status")
            return payment

        try:
            self._orders.update_status(
                payment.order_id,
                target_status,
                notes=f"Payment {notification.transaction_status}",
                allow_same_status=True,
            )
        except Exception:
            log.exception("payment.order_transition_failed", target_status=target_status)
            raise

        log.info("payment.order_transitioned", target_status=target_status)
        return payment

    def _apply_notification(
        self, payment: Payment, notification: PaymentNotificationDTO
    ) -> None:
        previous_status = payment.transaction_status

        payment.transaction_id = notification.transaction_id
        payment.transaction_status = notification.transaction_status
        payment.payment_type = notification.payment_type
        payment.transaction_time = (
            parse_gateway_time(notification.transaction_time) or timezone.now()
        )
        settlement_time = parse_gateway_time(notification.settlement_time)
        if settlement_time is not None:
            payment.settlement_time = settlement_time
        payment.status_message = notification.status_message
        payment.fraud_status = notification.fraud_status
        payment.payment_metadata = notification.raw_payload()

        if previous_status == notification.transaction_status:
            return
        if notification.transaction_status == TransactionStatus.SETTLEMENT:
            payment.add_domain_event(
                PaymentSettled(
                    aggregate_id=payment.id,
                    order_id=str(payment.order_id),
                    gateway_order_id=payment.gateway_order_id,
                    gross_amount=str(payment.gross_amount),
                    payment_type=payment.payment_type,
                )
            )
        elif notification.transaction_status in FAILED_TRANSACTION_STATUSES:
            payment.add_domain_event(
                PaymentFailed(
                    aggregate_id=payment.id,
                    order_id=str(payment.order_id),
                    gateway_order_id=payment.gateway_order_id,
                    transaction_status=notification.transaction_status,
                )
            )
