"""Django ORM implementation of the Payment repository."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import structlog
from django.core.exceptions import ValidationError
from django.db import models, transaction

from modules.core.models import OutboxEvent
from modules.payments.models import Payment
from modules.payments.repositories.interfaces import IPaymentRepository

logger = structlog.get_logger(__name__)

OUTBOX_TOPIC = "payments"


class PaymentDjangoRepository(IPaymentRepository):
    def create(self, data: Dict[str, Any]) -> Payment:
        payment = Payment.objects.create(**data)
        logger.info(
            "payment.persisted",
            payment_id=str(payment.id),
            gateway_order_id=payment.gateway_order_id,
        )
        return payment

    def get_by_id(self, id: str) -> Optional[Payment]:
        try:
            return Payment.objects.select_related("order").filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def get_by_gateway_order_id(self, gateway_order_id: str) -> Optional[Payment]:
        return (
            Payment.objects.select_related("order")
            .filter(gateway_order_id=gateway_order_id)
            .first()
        )

    def list_for_order(self, order_id: str) -> List[Payment]:
        try:
            return list(Payment.objects.filter(order_id=order_id).order_by("-created_at"))
        except (ValueError, ValidationError):
            return []

    def list(self, filters: Optional[Dict[str, Any]] = None) -> models.QuerySet:
        queryset = Payment.objects.select_related("order")
        if filters:
            queryset = queryset.filter(**filters)
        return queryset

    @transaction.atomic
    def save(self, entity: Payment) -> Payment:
        """Persist the attempt and move its pending domain events to the outbox."""
        entity.save()
        for event in entity.domain_events:
            OutboxEvent.record(event, topic=OUTBOX_TOPIC)
        entity.clear_domain_events()
        return entity
