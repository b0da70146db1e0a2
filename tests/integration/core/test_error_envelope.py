"""Framework errors come back in the same envelope as domain errors."""

import pytest

pytestmark = pytest.mark.integration


class TestErrorEnvelope:
    def test_validation_error(self, api_client):
        response = api_client.post("/api/v1/orders/guest/", {}, format="json")

        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["error"] == "Validation failed"
        assert set(body["details"]) == {"items", "customer_name"}

    def test_authentication_error(self, api_client):
        response = api_client.get("/api/v1/orders/")

        assert response.status_code == 401
        assert response.json() == {
            "success": False,
            "error": "Authentication credentials were not provided.",
        }

    def test_permission_error(self, member_client):
        response = member_client.get("/api/v1/orders/")

        assert response.status_code == 403
        body = response.json()
        assert body["success"] is False
        assert body["error"] == "You do not have permission to perform this action."

    def test_method_not_allowed(self, barista_client):
        response = barista_client.delete("/api/v1/orders/me/")

        assert response.status_code == 405
        assert response.json()["success"] is False
