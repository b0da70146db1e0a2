"""Unit tests for the OutboxEvent model.

Covers:
- Event creation with all required fields.
- ``record()`` serializes a domain event into the payload.
- mark_as_published() / mark_as_failed(error) transitions.
- ``deliverable()`` selection for the relay.
"""

from __future__ import annotations

import uuid
from decimal import Decimal

import pytest

from modules.core.models import EventStatus, OutboxEvent, serialize_event_payload
from modules.orders.events import OrderCreated

pytestmark = pytest.mark.unit


def _make_event(**overrides) -> OutboxEvent:
    defaults = {
        "event_type": "OrderCreated",
        "payload": {"order_number": "MC-250107-001", "total": "99000.00"},
        "aggregate_id": "abc-123",
        "topic": "orders",
    }
    defaults.update(overrides)
    return OutboxEvent.objects.create(**defaults)


class TestOutboxEventCreation:
    def test_create_event_with_defaults(self):
        event = _make_event()
        event.refresh_from_db()
        assert event.event_type == "OrderCreated"
        assert event.topic == "orders"
        assert event.status == EventStatus.PENDING
        assert event.processed_at is None
        assert event.error_message is None
        assert event.retry_count == 0

    def test_id_is_uuid7(self):
        event = _make_event()
        assert isinstance(event.id, uuid.UUID)
        assert event.id.version == 7


class TestRecord:
    def test_record_stores_serialized_domain_event(self):
        aggregate_id = uuid.uuid4()
        domain_event = OrderCreated(
            aggregate_id=aggregate_id,
            order_number="MC-250107-001",
            source="guest",
            total=str(Decimal("99000.00")),
        )

        stored = OutboxEvent.record(domain_event, topic="orders")
        stored.refresh_from_db()

        assert stored.event_type == "OrderCreated"
        assert stored.aggregate_id == str(aggregate_id)
        assert stored.payload["order_number"] == "MC-250107-001"
        assert stored.payload["aggregate_id"] == str(aggregate_id)
        assert stored.payload["total"] == "99000.00"

    def test_serialized_payload_is_json_safe(self):
        domain_event = OrderCreated(aggregate_id=uuid.uuid4(), order_number="MC-1")
        payload = serialize_event_payload(domain_event)
        assert isinstance(payload["event_id"], str)
        assert isinstance(payload["occurred_on"], str)
        assert payload["event_name"] == "OrderCreated"


class TestStatusTransitions:
    def test_mark_as_published(self):
        event = _make_event()
        event.mark_as_published()
        event.refresh_from_db()

        assert event.status == EventStatus.PUBLISHED
        assert event.processed_at is not None

    def test_mark_as_failed_increments_retry(self):
        event = _make_event()
        event.mark_as_failed("Error 1")
        event.mark_as_failed("Error 2")
        event.refresh_from_db()

        assert event.status == EventStatus.FAILED
        assert event.retry_count == 2
        assert event.error_message == "Error 2"

    def test_str_representation(self):
        result = str(_make_event(aggregate_id="order-456"))
        assert "OrderCreated" in result
        assert "PENDING" in result
        assert "order-456" in result


class TestDeliverable:
    def test_pending_and_retryable_failures_are_deliverable(self):
        pending = _make_event()
        retryable = _make_event(status=EventStatus.FAILED, retry_count=2)
        exhausted = _make_event(status=EventStatus.FAILED, retry_count=5)
        published = _make_event(status=EventStatus.PUBLISHED)

        ids = set(OutboxEvent.objects.deliverable(max_retries=5).values_list("id", flat=True))

        assert pending.id in ids
        assert retryable.id in ids
        assert exhausted.id not in ids
        assert published.id not in ids
