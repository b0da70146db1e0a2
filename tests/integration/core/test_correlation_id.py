import uuid

import pytest

pytestmark = pytest.mark.integration


class TestCorrelationId:
    def test_incoming_id_is_echoed(self, api_client_with_correlation):
        client, cid = api_client_with_correlation

        response = client.get("/health")

        assert response["X-Request-ID"] == cid

    def test_generated_when_missing(self, api_client):
        response = api_client.get("/api/v1/products/")

        generated = response["X-Request-ID"]
        assert uuid.UUID(generated).version == 4
