"""Order domain constants.

Status workflow::

    pending -> preparing -> ready -> completed
    pending -> cancelled

``completed`` and ``cancelled`` accept no further transitions.
"""

from decimal import Decimal

from django.db import models


class OrderStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    PREPARING = "preparing", "Preparing"
    READY = "ready", "Ready"
    COMPLETED = "completed", "Completed"
    CANCELLED = "cancelled", "Cancelled"


class OrderSource(models.TextChoices):
    GUEST = "guest", "Guest"
    MEMBER = "member", "Member"
    KIOSK = "kiosk", "Kiosk"


VALID_TRANSITIONS: dict[str, set[str]] = {
    OrderStatus.PENDING: {OrderStatus.PREPARING, OrderStatus.CANCELLED},
    OrderStatus.PREPARING: {OrderStatus.READY},
    OrderStatus.READY: {OrderStatus.COMPLETED},
    OrderStatus.COMPLETED: set(),
    OrderStatus.CANCELLED: set(),
}

TERMINAL_STATES: set[str] = {OrderStatus.COMPLETED, OrderStatus.CANCELLED}

DEFAULT_TAX_RATE = Decimal("0.10")

ORDER_NUMBER_SEQUENCE_WIDTH = 3

MAX_ITEM_QUANTITY = 100
