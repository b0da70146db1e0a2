from __future__ import annotations

import uuid

import pytest
from pydantic import ValidationError

from modules.orders.constants import MAX_ITEM_QUANTITY, OrderSource
from modules.orders.dtos import CartItemDTO, CreateOrderDTO

pytestmark = pytest.mark.unit


def _item(**overrides):
    data = {"product_id": uuid.uuid4(), "quantity": 1}
    data.update(overrides)
    return CartItemDTO(**data)


class TestCartItemDTO:
    @pytest.mark.parametrize("quantity", [0, -1, MAX_ITEM_QUANTITY + 1])
    def test_quantity_out_of_range(self, quantity):
        with pytest.raises(ValidationError):
            _item(quantity=quantity)

    def test_defaults(self):
        item = _item()
        assert item.customization_ids == []
        assert item.notes == ""

    def test_is_frozen(self):
        item = _item()
        with pytest.raises(ValidationError):
            item.quantity = 5


class TestCreateOrderDTO:
    def test_requires_items(self):
        with pytest.raises(ValidationError, match="at least one item"):
            CreateOrderDTO(items=[], source=OrderSource.GUEST, customer_name="Budi")

    def test_member_order_needs_user(self):
        with pytest.raises(ValidationError, match="Member orders need a user"):
            CreateOrderDTO(items=[_item()], source=OrderSource.MEMBER)

    @pytest.mark.parametrize("source", [OrderSource.GUEST, OrderSource.KIOSK])
    @pytest.mark.parametrize("name", [None, "", "   "])
    def test_walk_in_orders_need_a_name(self, source, name):
        with pytest.raises(ValidationError, match="Customer name is required"):
            CreateOrderDTO(items=[_item()], source=source, customer_name=name)

    def test_member_order_without_name(self):
        dto = CreateOrderDTO(
            items=[_item()], source=OrderSource.MEMBER, user_id=uuid.uuid4()
        )
        assert dto.customer_name is None

    def test_unknown_source(self):
        with pytest.raises(ValidationError):
            CreateOrderDTO(items=[_item()], source="drive-thru", customer_name="Budi")
