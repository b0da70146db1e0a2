"""Payment gateway constants.

Gateway transaction statuses map onto order status changes::

    settlement              -> preparing
    pending                 -> (no change)
    expire / cancel / deny  -> cancelled

Anything else leaves the order untouched.
"""

from django.db import models

from modules.orders.constants import OrderStatus


class TransactionStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    SETTLEMENT = "settlement", "Settlement"
    EXPIRE = "expire", "Expire"
    CANCEL = "cancel", "Cancel"
    DENY = "deny", "Deny"
    REFUND = "refund", "Refund"


class FraudStatus(models.TextChoices):
    ACCEPT = "accept", "Accept"
    CHALLENGE = "challenge", "Challenge"
    DENY = "deny", "Deny"


class GatewayEnvironment(models.TextChoices):
    SANDBOX = "sandbox", "Sandbox"
    PRODUCTION = "production", "Production"


ORDER_STATUS_FOR_TRANSACTION: dict[str, str] = {
    TransactionStatus.SETTLEMENT: OrderStatus.PREPARING,
    TransactionStatus.EXPIRE: OrderStatus.CANCELLED,
    TransactionStatus.CANCEL: OrderStatus.CANCELLED,
    TransactionStatus.DENY: OrderStatus.CANCELLED,
}

FAILED_TRANSACTION_STATUSES: set[str] = {
    TransactionStatus.EXPIRE,
    TransactionStatus.CANCEL,
    TransactionStatus.DENY,
}

SNAP_BASE_URLS: dict[str, str] = {
    GatewayEnvironment.SANDBOX: "https://app.sandbox.midtrans.com",
    GatewayEnvironment.PRODUCTION: "https://app.midtrans.com",
}

SNAP_TRANSACTIONS_PATH = "/snap/v1/transactions"

GATEWAY_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
