"""Domain events for the Payments bounded context."""

from __future__ import annotations

from dataclasses import dataclass

from shared.domain.events import DomainEvent


@dataclass(frozen=True)
class PaymentSettled(DomainEvent):
    order_id: str = ""
    gateway_order_id: str = ""
    gross_amount: str = "0.00"
    payment_type: str = ""


@dataclass(frozen=True)
class PaymentFailed(DomainEvent):
    order_id: str = ""
    gateway_order_id: str = ""
    transaction_status: str = ""
