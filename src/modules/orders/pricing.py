"""Cart validation and pricing.

``CartValidator.price`` turns the submitted cart into priced order item
snapshots or rejects the whole cart with the first problem found, walking
lines in submission order. Nothing is written here, so a rejected cart
leaves no trace (and consumes no order number).
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Sequence, Tuple
from uuid import UUID

import structlog

from modules.orders.constants import DEFAULT_TAX_RATE
from modules.orders.exceptions import (
    CustomizationNotFound,
    InvalidCustomization,
    InvalidQuantity,
    InvalidUnitPrice,
    ProductNotAvailable,
    ProductNotCustomizable,
    ProductNotFound,
)

if TYPE_CHECKING:
    from modules.catalog.repositories.interfaces import ICatalogReader
    from modules.orders.dtos import CartItemDTO

logger = structlog.get_logger(__name__)

CENT = Decimal("0.01")
WHOLE_UNIT = Decimal("1")


def compute_tax(subtotal: Decimal, rate: Decimal = DEFAULT_TAX_RATE) -> Decimal:
    """``round(subtotal * rate)`` to whole currency units, half up."""
    return (subtotal * rate).quantize(WHOLE_UNIT, rounding=ROUND_HALF_UP).quantize(CENT)


@dataclass(frozen=True)
class PricedCustomization:
    id: UUID
    customization_type: str
    option_name: str
    price_modifier: Decimal

    def snapshot(self) -> Dict[str, Any]:
        return {
            "id": str(self.id),
            "customization_type": self.customization_type,
            "option_name": self.option_name,
            "price_modifier": str(self.price_modifier),
        }


@dataclass(frozen=True)
class PricedLine:
    product_id: UUID
    product_name: str
    unit_price: Decimal
    quantity: int
    subtotal: Decimal
    customizations: Tuple[PricedCustomization, ...] = ()
    notes: str = ""

    def snapshot(self) -> Dict[str, Any]:
        """Row data for ``OrderItem``."""
        return {
            "product_id": self.product_id,
            "product_name": self.product_name,
            "unit_price": self.unit_price,
            "quantity": self.quantity,
            "subtotal": self.subtotal,
            "customizations": [c.snapshot() for c in self.customizations],
            "notes": self.notes,
        }


@dataclass(frozen=True)
class PricedCart:
    lines: Tuple[PricedLine, ...]
    subtotal: Decimal
    tax: Decimal
    total: Decimal
    item_count: int = 0


class CartValidator:
    """Validates a cart against live catalog state and prices it."""

    def __init__(
        self, catalog: ICatalogReader, tax_rate: Optional[Decimal] = None
    ) -> None:
        self._catalog = catalog
        self._tax_rate = DEFAULT_TAX_RATE if tax_rate is None else tax_rate

    def price(self, items: Sequence[CartItemDTO]) -> PricedCart:
        lines: List[PricedLine] = []
        subtotal = Decimal("0.00")

        for item in items:
            line = self._price_line(item)
            subtotal += line.subtotal
            lines.append(line)

        subtotal = subtotal.quantize(CENT)
        tax = compute_tax(subtotal, self._tax_rate)
        cart = PricedCart(
            lines=tuple(lines),
            subtotal=subtotal,
            tax=tax,
            total=subtotal + tax,
            item_count=sum(line.quantity for line in lines),
        )
        logger.debug(
            "cart.priced",
            line_count=len(lines),
            subtotal=str(cart.subtotal),
            total=str(cart.total),
        )
        return cart

    def _price_line(self, item: CartItemDTO) -> PricedLine:
        if item.quantity < 1:
            raise InvalidQuantity(
                f"Quantity for product {item.product_id} must be at least 1."
            )

        product = self._catalog.get_product(str(item.product_id))
        if product is None:
            raise ProductNotFound(f"Product {item.product_id} not found.")
        if not product.is_available:
            raise ProductNotAvailable(product.name)

        # Duplicate selections of the same option count once.
        selected_ids = list(dict.fromkeys(item.customization_ids))
        if selected_ids and not product.is_customizable:
            raise ProductNotCustomizable(f"Product '{product.name}' is not customizable.")

        customizations = tuple(
            self._resolve_customization(product, customization_id)
            for customization_id in selected_ids
        )

        unit_price = product.base_price + sum(
            (c.price_modifier for c in customizations), Decimal("0.00")
        )
        if unit_price < 0:
            raise InvalidUnitPrice(
                f"Customizations bring the price of '{product.name}' below zero."
            )

        return PricedLine(
            product_id=product.id,
            product_name=product.name,
            unit_price=unit_price.quantize(CENT),
            quantity=item.quantity,
            subtotal=(unit_price * item.quantity).quantize(CENT),
            customizations=customizations,
            notes=item.notes or "",
        )

    def _resolve_customization(self, product: Any, customization_id: UUID) -> PricedCustomization:
        customization = self._catalog.get_customization(str(customization_id))
        if customization is None:
            raise CustomizationNotFound(f"Customization {customization_id} not found.")
        if str(customization.product_id) != str(product.id):
            raise InvalidCustomization(
                f"Customization {customization_id} does not belong to product "
                f"'{product.name}'."
            )
        return PricedCustomization(
            id=customization.id,
            customization_type=customization.customization_type,
            option_name=customization.option_name,
            price_modifier=customization.price_modifier,
        )
