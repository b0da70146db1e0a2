"""Celery tasks owned by the core module."""

import structlog
from celery import shared_task
from django.db import transaction

from modules.core.models import OutboxEvent
from shared.infrastructure.bus import event_bus

logger = structlog.get_logger(__name__)

OUTBOX_BATCH_SIZE = 100
OUTBOX_MAX_RETRIES = 5


@shared_task(name="core.publish_outbox_events")
def publish_outbox_events(batch_size: int = OUTBOX_BATCH_SIZE) -> dict:
    """Relay stored domain events to the in-process event bus.

    Each event is handled in its own transaction; a handler error marks only
    that event as failed and the relay moves on.
    """
    published = failed = 0
    events = list(OutboxEvent.objects.deliverable(OUTBOX_MAX_RETRIES)[:batch_size])

    for outbox_event in events:
        log = logger.bind(
            outbox_event_id=str(outbox_event.id),
            event_type=outbox_event.event_type,
            aggregate_id=outbox_event.aggregate_id,
        )
        event_class = event_bus.resolve(outbox_event.event_type)
        if event_class is None:
            outbox_event.mark_as_failed(
                f"No handler registered for {outbox_event.event_type}."
            )
            log.warning("outbox.unknown_event_type")
            failed += 1
            continue

        try:
            with transaction.atomic():
                event_bus.publish(event_class.from_payload(outbox_event.payload))
                outbox_event.mark_as_published()
        except Exception as exc:
            outbox_event.mark_as_failed(str(exc))
            log.exception("outbox.publish_failed")
            failed += 1
        else:
            published += 1

    if events:
        logger.info("outbox.relay_completed", published=published, failed=failed)
    return {"published": published, "failed": failed}
