"""Order status workflow rules, checked on unsaved ``Order`` instances."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from modules.orders.constants import TERMINAL_STATES, VALID_TRANSITIONS, OrderStatus
from modules.orders.models import Order

pytestmark = pytest.mark.unit

ALLOWED = {
    (OrderStatus.PENDING, OrderStatus.PREPARING),
    (OrderStatus.PENDING, OrderStatus.CANCELLED),
    (OrderStatus.PREPARING, OrderStatus.READY),
    (OrderStatus.READY, OrderStatus.COMPLETED),
}

ALL_PAIRS = [(src, dst) for src in OrderStatus for dst in OrderStatus]


def _order(status: str) -> Order:
    return Order(order_number="MC-250107-001", status=status)


class TestTransitions:
    @pytest.mark.parametrize(("current", "target"), ALL_PAIRS)
    def test_only_workflow_edges_are_allowed(self, current, target):
        expected = (current, target) in ALLOWED
        assert _order(current).can_transition_to(target) is expected

    def test_table_covers_every_status(self):
        assert set(VALID_TRANSITIONS) == set(OrderStatus.values)

    @pytest.mark.parametrize("status", [OrderStatus.COMPLETED, OrderStatus.CANCELLED])
    def test_terminal_states_accept_nothing(self, status):
        order = _order(status)
        assert order.is_terminal
        assert not any(order.can_transition_to(target) for target in OrderStatus)

    def test_preparing_cannot_be_cancelled(self):
        assert not _order(OrderStatus.PREPARING).can_transition_to(OrderStatus.CANCELLED)

    def test_same_status_is_not_a_transition(self):
        for status in OrderStatus:
            assert not _order(status).can_transition_to(status)

    def test_terminal_set(self):
        assert TERMINAL_STATES == {OrderStatus.COMPLETED, OrderStatus.CANCELLED}


class TestApplyStatus:
    def test_completion_stamps_completed_at(self):
        now = datetime(2025, 1, 7, 10, 30, tzinfo=timezone.utc)
        order = _order(OrderStatus.READY)

        changed = order.apply_status(OrderStatus.COMPLETED, now)

        assert order.status == OrderStatus.COMPLETED
        assert order.completed_at == now
        assert changed == ["status", "completed_at"]

    def test_other_statuses_leave_completed_at_empty(self):
        order = _order(OrderStatus.PENDING)

        changed = order.apply_status(OrderStatus.PREPARING, datetime.now(timezone.utc))

        assert order.completed_at is None
        assert changed == ["status"]
