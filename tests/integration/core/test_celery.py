import pytest

from config.celery import app
from modules.core.tasks import publish_outbox_events

pytestmark = pytest.mark.integration


class TestCeleryApp:
    def test_app_name(self):
        assert app.main == "cafe"

    def test_relay_task_registered(self):
        assert "core.publish_outbox_events" in app.tasks
        assert publish_outbox_events.name == "core.publish_outbox_events"

    def test_relay_is_scheduled(self, settings):
        schedule = settings.CELERY_BEAT_SCHEDULE
        assert any(
            entry["task"] == "core.publish_outbox_events" for entry in schedule.values()
        )

    def test_eager_run_with_empty_outbox(self):
        assert publish_outbox_events.delay().get() == {"published": 0, "failed": 0}
