"""A failing order creation leaves nothing behind."""

from __future__ import annotations

import uuid
from unittest.mock import patch

import pytest
from django.db import OperationalError

from modules.core.models import OutboxEvent
from modules.orders.constants import OrderSource
from modules.orders.dtos import CartItemDTO, CreateOrderDTO
from modules.orders.exceptions import OrderNumberGenerationFailed, ProductNotFound
from modules.orders.models import Order, OrderItem, OrderNumberSequence, OrderStatusHistory

pytestmark = pytest.mark.integration


def _assert_nothing_written():
    assert Order.objects.count() == 0
    assert OrderItem.objects.count() == 0
    assert OrderStatusHistory.objects.count() == 0
    assert OutboxEvent.objects.count() == 0


class TestCreationAtomicity:
    def test_cart_error_consumes_no_number(self, order_service, matcha_latte, place_order):
        dto = CreateOrderDTO(
            items=[
                CartItemDTO(product_id=matcha_latte.id, quantity=1),
                CartItemDTO(product_id=uuid.uuid4(), quantity=1),
            ],
            source=OrderSource.GUEST,
            customer_name="Budi",
        )

        with pytest.raises(ProductNotFound):
            order_service.create_order(dto)

        _assert_nothing_written()
        assert OrderNumberSequence.objects.count() == 0
        assert place_order().order_number.endswith("-001")

    def test_failure_after_insert_rolls_everything_back(self, order_service, matcha_latte):
        dto = CreateOrderDTO(
            items=[CartItemDTO(product_id=matcha_latte.id, quantity=1)],
            source=OrderSource.GUEST,
            customer_name="Budi",
        )

        with patch(
            "modules.orders.repositories.django_repository.OrderDjangoRepository.add_history",
            side_effect=RuntimeError("disk full"),
        ):
            with pytest.raises(RuntimeError):
                order_service.create_order(dto)

        _assert_nothing_written()
        assert not OrderNumberSequence.objects.filter(last_value__gt=0).exists()

    def test_counter_failure_is_reported(self, api_client, matcha_latte):
        with patch(
            "modules.orders.repositories.django_repository.OrderDjangoRepository.next_order_sequence",
            side_effect=OperationalError("database is locked"),
        ):
            response = api_client.post(
                "/api/v1/orders/guest/",
                {
                    "items": [{"product_id": str(matcha_latte.id), "quantity": 1}],
                    "customer_name": "Budi",
                },
                format="json",
            )

        assert response.status_code == 500
        assert response.json()["error"] == "Could not allocate an order number."
        _assert_nothing_written()

    def test_number_generation_error_type(self, order_service, matcha_latte):
        dto = CreateOrderDTO(
            items=[CartItemDTO(product_id=matcha_latte.id, quantity=1)],
            source=OrderSource.GUEST,
            customer_name="Budi",
        )
        with patch(
            "modules.orders.repositories.django_repository.OrderDjangoRepository.next_order_sequence",
            side_effect=OperationalError("database is locked"),
        ):
            with pytest.raises(OrderNumberGenerationFailed):
                order_service.create_order(dto)
