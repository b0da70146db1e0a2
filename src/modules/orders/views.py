"""Order API views.

Exposes ``OrderService`` over HTTP using a DRF ViewSet. Domain exceptions
are caught and translated into HTTP status codes; the view never swallows
generic exceptions.
"""

from __future__ import annotations

from typing import Optional

from django_filters.rest_framework import DjangoFilterBackend
from pydantic import ValidationError as PydanticValidationError
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.filters import OrderingFilter
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.throttling import BaseThrottle
from rest_framework.viewsets import GenericViewSet

from modules.accounts.capabilities import Capability
from modules.accounts.constants import UserRole
from modules.accounts.exceptions import UserNotFound
from modules.accounts.permissions import request_role, requires
from modules.accounts.repositories.django_repository import UserDjangoRepository
from modules.catalog.repositories.django_repository import ProductDjangoRepository
from modules.core.pagination import StandardResultsSetPagination
from modules.core.responses import error_response, success_response
from modules.orders.constants import OrderSource
from modules.orders.dtos import CartItemDTO, CreateOrderDTO
from modules.orders.exceptions import (
    CartError,
    CustomizationNotFound,
    IdempotencyKeyConflict,
    InvalidStatusTransition,
    OrderAccessDenied,
    OrderNotFound,
    OrderNumberGenerationFailed,
    ProductNotFound,
)
from modules.orders.filters import OrderFilter
from modules.orders.models import Order
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.serializers import (
    CreateOrderSerializer,
    GuestOrderSerializer,
    OrderListSerializer,
    OrderSerializer,
    OrderTrackingSerializer,
    UpdateStatusSerializer,
)
from modules.orders.services import OrderService

IDEMPOTENCY_HEADER = "Idempotency-Key"


def build_order_service() -> OrderService:
    return OrderService(
        order_repository=OrderDjangoRepository(),
        catalog_reader=ProductDjangoRepository(),
        user_repository=UserDjangoRepository(),
    )


def _creation_error(exc: Exception) -> Response:
    if isinstance(exc, (ProductNotFound, CustomizationNotFound, UserNotFound)):
        return error_response(str(exc), status=status.HTTP_404_NOT_FOUND)
    if isinstance(exc, IdempotencyKeyConflict):
        return error_response(str(exc), status=status.HTTP_409_CONFLICT)
    if isinstance(exc, OrderNumberGenerationFailed):
        return error_response(
            "Could not allocate an order number.",
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )
    return error_response(str(exc), status=status.HTTP_400_BAD_REQUEST)


class OrderViewSet(GenericViewSet):
    """ViewSet for Order operations.

    Does **not** extend ``ModelViewSet``: all ORM access goes through the
    service/repository layer.
    """

    queryset = Order.objects.all()
    serializer_class = OrderSerializer
    filterset_class = OrderFilter
    ordering_fields = ["created_at", "total", "status"]
    ordering = ["-created_at", "-id"]
    filter_backends = [DjangoFilterBackend, OrderingFilter]

    permission_map = {
        "create": [IsAuthenticated, requires(Capability.PLACE_ORDER)],
        "guest": [AllowAny],
        "track": [AllowAny],
        "me": [IsAuthenticated, requires(Capability.VIEW_OWN_ORDERS)],
        "retrieve": [
            IsAuthenticated,
            requires(Capability.VIEW_OWN_ORDERS, Capability.VIEW_ANY_ORDER),
        ],
        "list": [IsAuthenticated, requires(Capability.LIST_ORDERS)],
        "by_number": [IsAuthenticated, requires(Capability.LOOKUP_ORDER_NUMBER)],
        "update_status": [IsAuthenticated, requires(Capability.UPDATE_ORDER_STATUS)],
    }

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = build_order_service()

    def get_permissions(self):
        classes = self.permission_map.get(self.action, [IsAuthenticated])
        return [permission() for permission in classes]

    def get_throttles(self) -> list[BaseThrottle]:
        throttle_scope: str | None
        if self.action in {"create", "guest"}:
            throttle_scope = "order_creation"
        elif self.action in {"list", "me"}:
            throttle_scope = "order_listing"
        else:
            throttle_scope = None
        self.throttle_scope = throttle_scope
        return super().get_throttles()

    def get_queryset(self):
        return self._service.list_orders()

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    def create(self, request: Request) -> Response:
        """POST /api/v1/orders/

        Kiosk devices order on behalf of walk-in customers (``source=kiosk``,
        no owning user); everyone else orders for their own account.
        Supports idempotency via the ``Idempotency-Key`` header: a reused key
        returns the original order with 200 when the same requester sends it,
        and 409 when the key belongs to an order placed by another requester.
        """
        serializer = CreateOrderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        if request_role(request) == UserRole.KIOSK:
            source, user_id = OrderSource.KIOSK, None
        else:
            source, user_id = OrderSource.MEMBER, request.user.pk

        return self._place(request, serializer.validated_data, source, user_id)

    @action(detail=False, methods=["post"])
    def guest(self, request: Request) -> Response:
        """POST /api/v1/orders/guest/"""
        serializer = GuestOrderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return self._place(request, serializer.validated_data, OrderSource.GUEST, None)

    def _place(
        self, request: Request, data: dict, source: str, user_id: Optional[object]
    ) -> Response:
        idempotency_key = request.headers.get(IDEMPOTENCY_HEADER) or None
        try:
            dto = CreateOrderDTO(
                items=[CartItemDTO(**item) for item in data["items"]],
                source=source,
                user_id=user_id,
                customer_name=data.get("customer_name") or None,
                notes=data.get("notes", ""),
                idempotency_key=idempotency_key,
            )
        except PydanticValidationError as exc:
            errors = exc.errors(
                include_url=False, include_context=False, include_input=False
            )
            return error_response("Validation failed", details={"errors": errors})

        try:
            if source == OrderSource.GUEST:
                placed = self._service.place_guest_order(dto)
            else:
                placed = self._service.place_order(dto)
        except (
            CartError,
            UserNotFound,
            OrderNumberGenerationFailed,
            IdempotencyKeyConflict,
        ) as exc:
            return _creation_error(exc)

        return success_response(
            OrderSerializer(placed.order).data,
            status=status.HTTP_201_CREATED if placed.created else status.HTTP_200_OK,
        )

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def list(self, request: Request) -> Response:
        """GET /api/v1/orders/

        Filtering (status, source, date range) is handled by ``OrderFilter``
        via ``filter_backends``. Results are paginated.
        """
        queryset = self.filter_queryset(self.get_queryset())
        paginator = StandardResultsSetPagination()
        page = paginator.paginate_queryset(queryset, request, view=self)
        serializer = OrderListSerializer(page, many=True)
        return paginator.get_paginated_response(serializer.data)

    @action(detail=False, methods=["get"])
    def me(self, request: Request) -> Response:
        """GET /api/v1/orders/me/"""
        queryset = self._service.list_my_orders(request.user.pk)
        paginator = StandardResultsSetPagination()
        page = paginator.paginate_queryset(queryset, request, view=self)
        serializer = OrderListSerializer(page, many=True)
        return paginator.get_paginated_response(serializer.data)

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/orders/{pk}/"""
        try:
            order = self._service.get_order_for(
                str(pk), user_id=request.user.pk, role=request_role(request)
            )
        except OrderNotFound:
            return error_response("Order not found.", status=status.HTTP_404_NOT_FOUND)
        except OrderAccessDenied as exc:
            return error_response(str(exc), status=status.HTTP_403_FORBIDDEN)
        return success_response(OrderSerializer(order).data)

    @action(detail=False, methods=["get"], url_path=r"track/(?P<order_id>[^/.]+)")
    def track(self, request: Request, order_id: str | None = None) -> Response:
        """GET /api/v1/orders/track/{id}/ for customers without an account."""
        try:
            order = self._service.get_order(str(order_id))
        except OrderNotFound:
            return error_response("Order not found.", status=status.HTTP_404_NOT_FOUND)
        return success_response(OrderTrackingSerializer(order).data)

    @action(
        detail=False, methods=["get"], url_path=r"number/(?P<order_number>[-\w]+)"
    )
    def by_number(self, request: Request, order_number: str | None = None) -> Response:
        """GET /api/v1/orders/number/{order_number}/"""
        try:
            order = self._service.get_order_by_number(str(order_number))
        except OrderNotFound:
            return error_response("Order not found.", status=status.HTTP_404_NOT_FOUND)
        return success_response(OrderSerializer(order).data)

    # ------------------------------------------------------------------
    # Status Update
    # ------------------------------------------------------------------

    @action(detail=True, methods=["put", "patch"], url_path="status")
    def update_status(self, request: Request, pk: str | None = None) -> Response:
        """PUT/PATCH /api/v1/orders/{pk}/status/"""
        serializer = UpdateStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            order = self._service.update_status(
                order_id=str(pk),
                new_status=serializer.validated_data["status"],
                notes=serializer.validated_data["notes"],
                changed_by=request.user.pk,
            )
        except OrderNotFound:
            return error_response("Order not found.", status=status.HTTP_404_NOT_FOUND)
        except InvalidStatusTransition as exc:
            return error_response(str(exc), status=status.HTTP_400_BAD_REQUEST)

        return success_response(OrderSerializer(order).data)
