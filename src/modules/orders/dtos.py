"""Order DTOs for the Service Layer.

Framework-agnostic, immutable Pydantic v2 models exchanged between the DRF
views and ``OrderService``.

- ``CartItemDTO``: one submitted cart line.
- ``CreateOrderDTO``: a whole order request (member, kiosk or guest).
"""

from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from modules.orders.constants import MAX_ITEM_QUANTITY, OrderSource


class CartItemDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    product_id: UUID
    quantity: int
    notes: Optional[str] = ""
    customization_ids: List[UUID] = []

    @field_validator("quantity")
    @classmethod
    def quantity_in_range(cls, v: int) -> int:
        if not 1 <= v <= MAX_ITEM_QUANTITY:
            raise ValueError(f"Quantity must be between 1 and {MAX_ITEM_QUANTITY}.")
        return v


class CreateOrderDTO(BaseModel):
    """Order creation request.

    Guest orders have no ``user_id`` and must carry a ``customer_name``;
    member orders default the name from the account.
    """

    model_config = ConfigDict(frozen=True)

    items: List[CartItemDTO]
    source: OrderSource
    user_id: Optional[UUID] = None
    customer_name: Optional[str] = None
    notes: Optional[str] = ""
    idempotency_key: Optional[str] = None

    @field_validator("items")
    @classmethod
    def items_must_not_be_empty(cls, v: List[CartItemDTO]) -> List[CartItemDTO]:
        if not v:
            raise ValueError("Order must have at least one item.")
        return v

    @model_validator(mode="after")
    def owner_matches_source(self) -> CreateOrderDTO:
        if self.source == OrderSource.MEMBER and self.user_id is None:
            raise ValueError("Member orders need a user.")
        if self.source != OrderSource.MEMBER and not (self.customer_name or "").strip():
            raise ValueError("Customer name is required.")
        return self
