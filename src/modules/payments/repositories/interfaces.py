from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.payments.models import Payment


class IPaymentRepository(IRepository["Payment"]):
    @abstractmethod
    def create(self, data: Dict[str, Any]) -> Payment:
        """Insert a payment attempt."""

    @abstractmethod
    def get_by_gateway_order_id(self, gateway_order_id: str) -> Optional[Payment]:
        """Retrieve an attempt (with its order) by the id the gateway knows."""

    @abstractmethod
    def list_for_order(self, order_id: str) -> List[Payment]:
        """All attempts made for an order, newest first."""
