"""Order service layer (Use Cases).

Orchestrates order creation and the status workflow. All write operations
are atomic: the service defines the unit-of-work boundary.

Business rules enforced:
- The whole cart is validated and priced before anything is written, so a
  rejected cart consumes no order number and leaves no rows behind.
- Order numbers are allocated inside the creating transaction.
- An idempotency key replays only the order its own requester placed.
- Status transitions follow ``VALID_TRANSITIONS``; every change is recorded
  in the status history and raises domain events through the outbox.
- Members only see their own orders.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, NamedTuple, Optional
from uuid import UUID

import structlog
from django.conf import settings
from django.db import IntegrityError, models, transaction
from django.utils import timezone

from modules.accounts.capabilities import Capability, role_has
from modules.accounts.exceptions import UserNotFound
from modules.orders.constants import OrderSource, OrderStatus
from modules.orders.events import (
    OrderCancelled,
    OrderCompleted,
    OrderCreated,
    OrderStatusChanged,
)
from modules.orders.exceptions import (
    IdempotencyKeyConflict,
    InvalidStatusTransition,
    OrderAccessDenied,
    OrderNotFound,
)
from modules.orders.numbering import OrderNumberGenerator
from modules.orders.pricing import CartValidator

if TYPE_CHECKING:
    from modules.accounts.repositories.interfaces import IUserRepository
    from modules.catalog.repositories.interfaces import ICatalogReader
    from modules.orders.dtos import CreateOrderDTO
    from modules.orders.models import Order
    from modules.orders.repositories.interfaces import IOrderRepository

logger = structlog.get_logger(__name__)


class PlacedOrder(NamedTuple):
    order: Order
    created: bool


class OrderService:
    """Application service for Order use-cases.

    Receives repositories via constructor injection. The number generator
    and cart validator default to ones built on the same repositories.
    """

    def __init__(
        self,
        order_repository: IOrderRepository,
        catalog_reader: ICatalogReader,
        user_repository: IUserRepository,
        number_generator: Optional[OrderNumberGenerator] = None,
        cart_validator: Optional[CartValidator] = None,
    ) -> None:
        self._order_repo = order_repository
        self._catalog = catalog_reader
        self._user_repo = user_repository
        self._numbers = number_generator or OrderNumberGenerator(order_repository)
        self._cart = cart_validator or CartValidator(
            catalog_reader, tax_rate=settings.ORDER_TAX_RATE
        )

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def create_order(self, dto: CreateOrderDTO) -> Order:
        """Create an order and return it; see ``place_order``."""
        return self.place_order(dto).order

    def place_order(self, dto: CreateOrderDTO) -> PlacedOrder:
        """Create an order, or replay the one an idempotency key already made.

        Two requests racing with the same new key both reach the insert; the
        loser's transaction rolls back on the unique key (no order number is
        consumed) and it replays the winner's order.

        Raises:
            IdempotencyKeyConflict: the key belongs to another requester.
            UserNotFound, CartError, OrderNumberGenerationFailed: see
                ``_place_order``.
        """
        try:
            return self._place_order(dto)
        except IntegrityError:
            if not dto.idempotency_key:
                raise
            existing = self._replayable(dto)
            if existing is None:
                raise
            return PlacedOrder(order=existing, created=False)

    @transaction.atomic
    def _place_order(self, dto: CreateOrderDTO) -> PlacedOrder:
        """Validate, price and persist a new order in ``pending``.

        Steps:
        1. Replay the requester's own order on an idempotency key hit.
        2. Resolve the member account (member orders only).
        3. Price the cart; any cart error aborts before writing.
        4. Allocate the order number and persist order + items.
        5. Record the initial history entry and ``OrderCreated``.

        Raises:
            IdempotencyKeyConflict: the key belongs to another requester.
            UserNotFound: the member account does not exist.
            CartError: any pricing rejection (see ``modules.orders.pricing``).
            OrderNumberGenerationFailed: the daily counter could not advance.
        """
        log = logger.bind(source=str(dto.source), user_id=str(dto.user_id or ""))
        log.info("order.creation_started", line_count=len(dto.items))

        if dto.idempotency_key:
            existing = self._replayable(dto)
            if existing is not None:
                log.info("order.idempotency_hit", order_id=str(existing.id))
                return PlacedOrder(order=existing, created=False)

        customer_name = (dto.customer_name or "").strip()
        user_id = None
        if dto.user_id is not None:
            user = self._user_repo.get_by_id(str(dto.user_id))
            if user is None:
                raise UserNotFound(f"User {dto.user_id} not found.")
            user_id = user.id
            customer_name = customer_name or user.full_name

        cart = self._cart.price(dto.items)
        order_number = self._numbers.generate()

        order = self._order_repo.create(
            {
                "order_number": order_number,
                "user_id": user_id,
                "customer_name": customer_name,
                "status": OrderStatus.PENDING,
                "source": dto.source,
                "subtotal": cart.subtotal,
                "tax": cart.tax,
                "total": cart.total,
                "notes": dto.notes or "",
                "idempotency_key": dto.idempotency_key,
                "items": [line.snapshot() for line in cart.lines],
            }
        )

        order.add_domain_event(
            OrderCreated(
                aggregate_id=order.id,
                order_number=order.order_number,
                source=str(order.source),
                total=str(order.total),
            )
        )
        self._order_repo.save(order)
        self._order_repo.add_history(
            order_id=order.id,
            new_status=OrderStatus.PENDING,
            notes="Order created",
            changed_by_id=user_id,
        )

        log.info(
            "order.created",
            order_id=str(order.id),
            order_number=order.order_number,
            total=str(order.total),
        )
        return PlacedOrder(
            order=self._order_repo.get_by_id(str(order.id)) or order, created=True
        )

    def _replayable(self, dto: CreateOrderDTO) -> Optional[Order]:
        """The order this requester already placed under ``dto.idempotency_key``.

        A key only replays for the same source and owner; orders without an
        owner must also carry the same customer name.
        """
        existing = self._order_repo.get_by_idempotency_key(dto.idempotency_key)
        if existing is None:
            return None

        same_owner = str(existing.user_id or "") == str(dto.user_id or "")
        if dto.user_id is None:
            same_owner = same_owner and existing.customer_name == (
                dto.customer_name or ""
            ).strip()
        if existing.source != dto.source or not same_owner:
            logger.warning("order.idempotency_conflict", order_id=str(existing.id))
            raise IdempotencyKeyConflict(
                "Idempotency key was already used for a different order."
            )
        return existing

    def create_guest_order(self, dto: CreateOrderDTO) -> Order:
        return self.place_guest_order(dto).order

    def place_guest_order(self, dto: CreateOrderDTO) -> PlacedOrder:
        """Public ordering without an account: never linked to a user."""
        guest_dto = dto.model_copy(update={"source": OrderSource.GUEST, "user_id": None})
        return self.place_order(guest_dto)

    @transaction.atomic
    def update_status(
        self,
        order_id: UUID,
        new_status: str,
        notes: str = "",
        changed_by: Optional[UUID] = None,
        allow_same_status: bool = False,
    ) -> Order:
        """Transition an order to ``new_status``.

        The order row is locked (``SELECT FOR UPDATE``) before the
        transition is validated, so concurrent updates serialize and the
        check always sees the current status.

        ``allow_same_status`` turns a request for the current status into a
        no-op instead of an error; payment notifications are redelivered and
        use it.

        Raises:
            OrderNotFound: the order does not exist.
            InvalidStatusTransition: the transition is not allowed.
        """
        order = self._order_repo.get_for_update(str(order_id))
        if not order:
            raise OrderNotFound(f"Order {order_id} not found.")

        log = logger.bind(
            order_id=str(order_id),
            current_status=order.status,
            new_status=new_status,
        )

        if allow_same_status and order.status == new_status:
            log.info("order.status_unchanged")
            return self._order_repo.get_by_id(str(order_id)) or order

        if not order.can_transition_to(new_status):
            log.warning("order.invalid_transition")
            raise InvalidStatusTransition(
                f"Cannot transition from {order.status} to {new_status}."
            )

        old_status = order.status
        order.apply_status(new_status, timezone.now())
        order.add_domain_event(
            OrderStatusChanged(
                aggregate_id=order.id,
                order_number=order.order_number,
                old_status=str(old_status),
                new_status=str(new_status),
            )
        )
        if new_status == OrderStatus.CANCELLED:
            order.add_domain_event(
                OrderCancelled(aggregate_id=order.id, order_number=order.order_number)
            )
        elif new_status == OrderStatus.COMPLETED:
            order.add_domain_event(
                OrderCompleted(aggregate_id=order.id, order_number=order.order_number)
            )
        self._order_repo.save(order)

        self._order_repo.add_history(
            order_id=order.id,
            new_status=new_status,
            old_status=old_status,
            notes=notes,
            changed_by_id=changed_by,
        )

        log.info("order.status_updated")
        return self._order_repo.get_by_id(str(order_id)) or order

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_order(self, order_id: str) -> Order:
        """Raises:
        OrderNotFound: if the order does not exist.
        """
        order = self._order_repo.get_by_id(order_id)
        if not order:
            raise OrderNotFound(f"Order {order_id} not found.")
        return order

    def get_order_for(
        self, order_id: str, user_id: Optional[UUID], role: Optional[str]
    ) -> Order:
        """Fetch an order on behalf of a caller.

        Staff holding ``VIEW_ANY_ORDER`` see every order; everyone else only
        sees orders placed from their own account.

        Raises:
            OrderNotFound: the order does not exist.
            OrderAccessDenied: the caller may not see it.
        """
        order = self.get_order(order_id)
        if role_has(role, Capability.VIEW_ANY_ORDER):
            return order
        if user_id is None or str(order.user_id) != str(user_id):
            logger.warning(
                "order.access_denied", order_id=str(order_id), user_id=str(user_id)
            )
            raise OrderAccessDenied("You do not have access to this order.")
        return order

    def get_order_by_number(self, order_number: str) -> Order:
        order = self._order_repo.get_by_number(order_number)
        if not order:
            raise OrderNotFound(f"Order {order_number} not found.")
        return order

    def list_my_orders(self, user_id: UUID) -> models.QuerySet:
        return self._order_repo.list({"user_id": user_id})

    def list_orders(self, filters: Optional[Dict[str, Any]] = None) -> models.QuerySet:
        """Return orders newest first, optionally filtered."""
        return self._order_repo.list(filters)
