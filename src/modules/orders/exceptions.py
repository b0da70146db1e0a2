"""Order domain exceptions.

Raised by the pricing code, the number generator and ``OrderService``.
Views translate them into HTTP responses.
"""

from __future__ import annotations


class OrderNotFound(Exception):
    """The requested order does not exist."""


class OrderAccessDenied(Exception):
    """The caller may not see this order (members only see their own)."""


class InvalidStatusTransition(Exception):
    """The target status is not an allowed successor of the current one."""


class OrderNumberGenerationFailed(Exception):
    """The daily order number sequence could not be advanced."""


class CartError(Exception):
    """Base class for carts rejected during pricing."""


class ProductNotFound(CartError):
    """A cart line references a missing or soft-deleted product."""


class CustomizationNotFound(CartError):
    """A cart line references a missing customization option."""


class ProductNotAvailable(CartError):
    """A cart line references a product that is currently unavailable."""

    def __init__(self, product_name: str) -> None:
        self.product_name = product_name
        super().__init__(f"Product '{product_name}' is not available.")


class ProductNotCustomizable(CartError):
    """Customizations were selected for a product that does not take any."""


class InvalidCustomization(CartError):
    """A selected customization belongs to a different product."""


class InvalidQuantity(CartError):
    """A cart line has a zero or negative quantity."""


class InvalidUnitPrice(CartError):
    """Customization modifiers push a line's unit price below zero."""


class IdempotencyKeyConflict(Exception):
    """The idempotency key already belongs to an order placed by someone else."""
