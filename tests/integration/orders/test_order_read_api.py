"""Order read endpoints: visibility rules, tracking, listing and lookups."""

from __future__ import annotations

import uuid
from datetime import timedelta

import pytest
from django.utils import timezone

from modules.orders.constants import OrderStatus
from modules.orders.models import Order

pytestmark = pytest.mark.integration

ORDERS_URL = "/api/v1/orders/"


def _detail(order) -> str:
    return f"{ORDERS_URL}{order.id}/"


class TestRetrieve:
    def test_member_sees_own_order(self, member_client, member_order):
        response = member_client.get(_detail(member_order))

        assert response.status_code == 200
        assert response.json()["data"]["order_number"] == member_order.order_number

    def test_member_cannot_see_someone_elses_order(
        self, client_for, other_member, member_order
    ):
        response = client_for(other_member).get(_detail(member_order))
        assert response.status_code == 403

    def test_member_cannot_see_guest_order(self, member_client, guest_order):
        assert member_client.get(_detail(guest_order)).status_code == 403

    @pytest.mark.parametrize("client_fixture", ["barista_client", "admin_client"])
    def test_staff_sees_any_order(self, request, client_fixture, member_order):
        client = request.getfixturevalue(client_fixture)
        response = client.get(_detail(member_order))

        assert response.status_code == 200
        assert response.json()["data"]["status_history"][0]["notes"] == "Order created"

    def test_kiosk_cannot_read_orders(self, kiosk_client, guest_order):
        assert kiosk_client.get(_detail(guest_order)).status_code == 403

    def test_unknown_order(self, barista_client):
        response = barista_client.get(f"{ORDERS_URL}{uuid.uuid4()}/")

        assert response.status_code == 404
        assert response.json() == {"success": False, "error": "Order not found."}

    def test_malformed_id_is_not_found(self, barista_client):
        assert barista_client.get(f"{ORDERS_URL}not-a-uuid/").status_code == 404


class TestTrack:
    def test_public_tracking(self, api_client, guest_order):
        response = api_client.get(f"{ORDERS_URL}track/{guest_order.id}/")

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["status"] == OrderStatus.PENDING
        assert data["total"] == "99000.00"
        assert "user_id" not in data
        assert "status_history" not in data

    def test_unknown_order(self, api_client):
        response = api_client.get(f"{ORDERS_URL}track/{uuid.uuid4()}/")
        assert response.status_code == 404


class TestMyOrders:
    def test_lists_only_own_orders(self, member_client, place_order, member_user, other_member):
        mine = place_order(user=member_user)
        place_order(user=other_member)
        place_order()

        response = member_client.get(f"{ORDERS_URL}me/")

        assert response.status_code == 200
        body = response.json()
        assert [o["id"] for o in body["data"]] == [str(mine.id)]
        assert body["data"][0]["item_count"] == 2
        assert body["pagination"]["total"] == 1

    def test_kiosk_has_no_history(self, kiosk_client):
        assert kiosk_client.get(f"{ORDERS_URL}me/").status_code == 403


class TestListOrders:
    def test_newest_first_with_pagination(self, barista_client, place_order):
        orders = [place_order() for _ in range(3)]

        response = barista_client.get(ORDERS_URL, {"limit": 2})

        assert response.status_code == 200
        body = response.json()
        assert [o["id"] for o in body["data"]] == [str(orders[2].id), str(orders[1].id)]
        assert body["pagination"] == {"page": 1, "limit": 2, "total": 3, "total_pages": 2}

    def test_second_page(self, barista_client, place_order):
        orders = [place_order() for _ in range(3)]

        body = barista_client.get(ORDERS_URL, {"limit": 2, "page": 2}).json()

        assert [o["id"] for o in body["data"]] == [str(orders[0].id)]

    def test_filter_by_status(self, barista_client, place_order, order_service):
        preparing = place_order()
        place_order()
        order_service.update_status(preparing.id, OrderStatus.PREPARING)

        body = barista_client.get(ORDERS_URL, {"status": "preparing"}).json()

        assert [o["id"] for o in body["data"]] == [str(preparing.id)]

    def test_filter_by_source(self, barista_client, place_order, member_user):
        member = place_order(user=member_user)
        place_order()

        body = barista_client.get(ORDERS_URL, {"source": "member"}).json()

        assert [o["id"] for o in body["data"]] == [str(member.id)]

    def test_filter_by_date_range(self, barista_client, place_order):
        old = place_order()
        recent = place_order()
        Order.objects.filter(id=old.id).update(
            created_at=timezone.now() - timedelta(days=10)
        )
        since = (timezone.localdate() - timedelta(days=1)).isoformat()

        body = barista_client.get(ORDERS_URL, {"start_date": since}).json()

        assert [o["id"] for o in body["data"]] == [str(recent.id)]

    def test_invalid_status_filter(self, barista_client):
        response = barista_client.get(ORDERS_URL, {"status": "brewing"})
        assert response.status_code == 400

    def test_members_cannot_list_everything(self, member_client):
        assert member_client.get(ORDERS_URL).status_code == 403


class TestLookupByNumber:
    def test_admin_lookup(self, admin_client, guest_order):
        response = admin_client.get(f"{ORDERS_URL}number/{guest_order.order_number}/")

        assert response.status_code == 200
        assert response.json()["data"]["id"] == str(guest_order.id)

    def test_unknown_number(self, admin_client):
        response = admin_client.get(f"{ORDERS_URL}number/MC-000101-999/")
        assert response.status_code == 404

    def test_barista_cannot_lookup_by_number(self, barista_client, guest_order):
        response = barista_client.get(f"{ORDERS_URL}number/{guest_order.order_number}/")
        assert response.status_code == 403
