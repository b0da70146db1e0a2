"""Payment attempts made through the external gateway.

- One order may have several attempts; each has its own gateway order id.
- ``gross_amount`` is fixed when the attempt is created and every
  notification is checked against it.
- Notifications update the attempt in place; ``payment_metadata`` keeps the
  last raw notification for auditing.
"""

from __future__ import annotations

from django.db import models

from modules.core.models import BaseModel
from modules.payments.constants import FraudStatus, TransactionStatus
from shared.domain.events import DomainEventMixin


class Payment(DomainEventMixin, BaseModel):
    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.CASCADE,
        related_name="payments",
    )
    gateway_order_id = models.CharField(max_length=100, unique=True)
    gross_amount = models.DecimalField(max_digits=10, decimal_places=2)
    payment_type = models.CharField(max_length=50, blank=True, default="")
    transaction_status = models.CharField(
        max_length=50,
        choices=TransactionStatus.choices,
        blank=True,
        default="",
    )
    transaction_id = models.CharField(max_length=100, blank=True, default="")
    transaction_time = models.DateTimeField(null=True, blank=True, default=None)
    settlement_time = models.DateTimeField(null=True, blank=True, default=None)
    fraud_status = models.CharField(
        max_length=50,
        choices=FraudStatus.choices,
        blank=True,
        default="",
    )
    status_message = models.TextField(blank=True, default="")
    payment_metadata = models.JSONField(default=dict, blank=True)

    class Meta:
        db_table = "payments"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["transaction_status"], name="payments_status_idx"),
            models.Index(fields=["transaction_id"], name="payments_transaction_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(gross_amount__gte=0),
                name="payments_gross_amount_non_negative",
            ),
        ]

    @property
    def is_settled(self) -> bool:
        return self.transaction_status == TransactionStatus.SETTLEMENT

    def __str__(self) -> str:
        return f"{self.gateway_order_id} ({self.transaction_status or 'created'})"
