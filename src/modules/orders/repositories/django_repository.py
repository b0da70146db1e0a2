"""Django ORM implementation of the Order repository.

Domain events collected on the aggregate are written to the outbox in the
same transaction as the order itself (see ``save``).
"""

from __future__ import annotations

from datetime import date
from typing import Any, Dict, Optional
from uuid import UUID

import structlog
from django.core.exceptions import ValidationError
from django.db import models, transaction

from modules.core.models import OutboxEvent
from modules.orders.models import (
    Order,
    OrderItem,
    OrderNumberSequence,
    OrderStatusHistory,
)
from modules.orders.numbering import day_prefix, parse_sequence
from modules.orders.repositories.interfaces import IOrderRepository

logger = structlog.get_logger(__name__)

OUTBOX_TOPIC = "orders"


class OrderDjangoRepository(IOrderRepository):
    """Concrete Order repository backed by Django ORM."""

    def _base_queryset(self) -> models.QuerySet:
        return Order.objects.select_related("user").prefetch_related(
            "items", "status_history"
        )

    # ------------------------------------------------------------------
    # Create (aggregate root + children)
    # ------------------------------------------------------------------

    @transaction.atomic
    def create(self, data: Dict[str, Any]) -> Order:
        items = data.pop("items")
        order = Order(**data)
        order.save()
        OrderItem.objects.bulk_create(
            [OrderItem(order=order, **item_data) for item_data in items]
        )
        logger.info(
            "order.persisted",
            order_id=str(order.id),
            order_number=order.order_number,
            item_count=len(items),
        )
        return order

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def get_by_id(self, id: str) -> Optional[Order]:
        try:
            return self._base_queryset().filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def get_for_update(self, id: str) -> Optional[Order]:
        try:
            return Order.objects.select_for_update().filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def get_by_number(self, order_number: str) -> Optional[Order]:
        return self._base_queryset().filter(order_number=order_number).first()

    def get_by_idempotency_key(self, key: str) -> Optional[Order]:
        return self._base_queryset().filter(idempotency_key=key).first()

    def list(self, filters: Optional[Dict[str, Any]] = None) -> models.QuerySet:
        queryset = self._base_queryset()
        if filters:
            queryset = queryset.filter(**filters)
        return queryset.order_by("-created_at", "-id")

    # ------------------------------------------------------------------
    # Save (IRepository contract)
    # ------------------------------------------------------------------

    @transaction.atomic
    def save(self, entity: Order) -> Order:
        """Persist the order and move its pending domain events to the outbox."""
        entity.save()

        events = entity.domain_events
        for event in events:
            OutboxEvent.record(event, topic=OUTBOX_TOPIC)
        entity.clear_domain_events()

        logger.debug("order.saved", order_id=str(entity.id), event_count=len(events))
        return entity

    # ------------------------------------------------------------------
    # Order-specific
    # ------------------------------------------------------------------

    def add_history(
        self,
        order_id: UUID,
        new_status: str,
        old_status: Optional[str] = None,
        notes: str = "",
        changed_by_id: Optional[UUID] = None,
    ) -> OrderStatusHistory:
        return OrderStatusHistory.objects.create(
            order_id=order_id,
            old_status=old_status,
            new_status=new_status,
            notes=notes,
            changed_by_id=changed_by_id,
        )

    def next_order_sequence(self, prefix: str, day: date) -> int:
        with transaction.atomic():
            counter = (
                OrderNumberSequence.objects.select_for_update()
                .filter(prefix=prefix, day=day)
                .first()
            )
            if counter is None:
                OrderNumberSequence.objects.get_or_create(
                    prefix=prefix,
                    day=day,
                    defaults={"last_value": self._highest_existing_sequence(prefix, day)},
                )
                counter = OrderNumberSequence.objects.select_for_update().get(
                    prefix=prefix, day=day
                )

            counter.last_value += 1
            counter.save(update_fields=["last_value"])
            return counter.last_value

    @staticmethod
    def _highest_existing_sequence(prefix: str, day: date) -> int:
        """Largest sequence already used that day by orders predating the counter."""
        numbers = Order.objects.filter(
            order_number__startswith=f"{day_prefix(prefix, day)}-"
        ).values_list("order_number", flat=True)
        return max((parse_sequence(n) or 0 for n in numbers), default=0)
