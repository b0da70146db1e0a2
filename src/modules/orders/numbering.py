"""Human-readable order numbers: ``<PREFIX>-<YYMMDD>-<NNN>``.

The sequence restarts at 1 every day (server ``TIME_ZONE``) and is padded
to three digits; from 1000 orders in a day the number simply gets wider.
The counter itself lives in ``OrderNumberSequence`` and is advanced under a
row lock by the order repository, so ``generate`` must run inside the
transaction that inserts the order.
"""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING, Callable, Optional

import structlog
from django.conf import settings
from django.db import DatabaseError
from django.utils import timezone

from modules.orders.constants import ORDER_NUMBER_SEQUENCE_WIDTH
from modules.orders.exceptions import OrderNumberGenerationFailed

if TYPE_CHECKING:
    from modules.orders.repositories.interfaces import IOrderRepository

logger = structlog.get_logger(__name__)


def day_prefix(prefix: str, day: date) -> str:
    return f"{prefix}-{day:%y%m%d}"


def format_order_number(prefix: str, day: date, sequence: int) -> str:
    return f"{day_prefix(prefix, day)}-{sequence:0{ORDER_NUMBER_SEQUENCE_WIDTH}d}"


def parse_sequence(order_number: str) -> Optional[int]:
    """Trailing sequence of an order number, ``None`` if it is not numeric."""
    tail = order_number.rsplit("-", 1)[-1]
    return int(tail) if tail.isdigit() else None


class OrderNumberGenerator:
    def __init__(
        self,
        repository: IOrderRepository,
        prefix: Optional[str] = None,
        today: Callable[[], date] = timezone.localdate,
    ) -> None:
        self._repo = repository
        self._prefix = prefix or settings.ORDER_NUMBER_PREFIX
        self._today = today

    def generate(self) -> str:
        day = self._today()
        try:
            sequence = self._repo.next_order_sequence(self._prefix, day)
        except DatabaseError as exc:
            logger.error("order_number.generation_failed", day=day.isoformat())
            raise OrderNumberGenerationFailed(
                f"Could not allocate an order number for {day.isoformat()}."
            ) from exc

        order_number = format_order_number(self._prefix, day, sequence)
        logger.info("order_number.allocated", order_number=order_number)
        return order_number
