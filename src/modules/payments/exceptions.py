"""Payment domain exceptions.

Webhook boundary codes: ``InvalidSignature`` 401, ``PaymentNotFound`` 404,
``InvalidAmount`` 400, anything else 500.
"""

from __future__ import annotations


class InvalidSignature(Exception):
    """The notification signature does not match the shared server key."""


class PaymentNotFound(Exception):
    """No payment attempt carries the notified gateway order id."""


class InvalidAmount(Exception):
    """The notified gross amount differs from the stored one or is unreadable."""


class PaymentAlreadyExists(Exception):
    """The order already has a settled payment."""


class OrderNotPending(Exception):
    """Payment tokens are only issued for pending orders."""


class GatewayError(Exception):
    """The payment gateway call failed or returned an unusable response."""
