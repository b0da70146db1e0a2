"""Payment DTOs for the Service Layer."""

from __future__ import annotations

from typing import Any, Dict, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class PaymentNotificationDTO(BaseModel):
    """Asynchronous notification pushed by the gateway.

    Amounts and codes stay strings: the signature is computed over the exact
    text the gateway sent.
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    order_id: str
    status_code: str
    gross_amount: str
    signature_key: str
    transaction_status: str = ""
    transaction_id: str = ""
    transaction_time: str = ""
    settlement_time: Optional[str] = None
    status_message: str = ""
    payment_type: str = ""
    fraud_status: str = ""
    merchant_id: str = ""
    currency: str = ""

    def raw_payload(self) -> Dict[str, Any]:
        """Everything received, extra gateway fields included."""
        return self.model_dump(mode="json", exclude_none=True)


class PaymentTokenDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    payment_id: UUID
    token: str
    redirect_url: str


class SnapTransactionDTO(BaseModel):
    """Token/redirect pair returned by the gateway for a new transaction."""

    model_config = ConfigDict(frozen=True)

    token: str
    redirect_url: str
