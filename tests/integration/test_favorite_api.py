"""
Integration tests for the favorite-number service endpoints.

Exercises the endpoint through Flask's test client with the exact
payloads the load test sends: randomised valid bodies and the four
invalid probes.

Key SDET Concepts Demonstrated:
- Reusing production payload factories as test data
- Negative testing for bad JSON, wrong types and wrong content-type
"""

from __future__ import annotations

import json

import pytest

from loadtest.payloads import invalid_favorite_payloads, random_favorite_payload

pytestmark = pytest.mark.integration

JSON_HEADERS = {"Content-Type": "application/json"}


def _post(client, body: str, headers: dict[str, str] | None = None):
    return client.post(
        "/api/v1/favorite",
        data=body,
        headers=JSON_HEADERS if headers is None else headers,
    )


class TestHealth:
    """Tests for the health endpoint."""

    def test_health_reports_service(self, client):
        # Act
        response = client.get("/api/health")

        # Assert
        assert response.status_code == 200
        assert response.get_json() == {"status": "healthy", "service": "favorite"}


class TestFavoriteAccepted:
    """Tests for requests the endpoint accepts."""

    def test_valid_payload_returns_ok(self, client, valid_payload):
        """Test the success body, which has no msg field."""
        # Act
        response = _post(client, json.dumps(valid_payload))

        # Assert
        assert response.status_code == 200
        assert response.get_json() == {"isOK": True}

    def test_every_generated_payload_is_accepted(self, client):
        """Test that the load generator never produces a body the server rejects."""
        for _ in range(50):
            # Act
            response = _post(client, json.dumps(random_favorite_payload()))

            # Assert
            assert response.status_code == 200


class TestFavoriteRejected:
    """Tests for requests the endpoint rejects."""

    @pytest.mark.parametrize("index", range(4))
    def test_invalid_probe_payloads_return_400(self, client, index):
        """Test each of the four probe payloads."""
        # Arrange
        payload = invalid_favorite_payloads()[index]

        # Act
        response = _post(client, json.dumps(payload))

        # Assert
        assert response.status_code == 400
        assert response.get_json() == {"isOK": False, "msg": "request not valid"}

    @pytest.mark.parametrize(
        "body",
        [
            '{"userId": "not-closed',
            "[]",
            '{"userId": 5, "favNum": 1}',
            '{"userId": "550e8400-e29b-41d4-a716-446655440000", "favNum": "42"}',
            '{"userId": "550e8400-e29b-41d4-a716-446655440000", "favNum": 4.5}',
        ],
    )
    def test_unreadable_body_returns_json_not_valid(self, client, body):
        """Test malformed JSON and wrongly typed fields."""
        # Act
        response = _post(client, body)

        # Assert
        assert response.status_code == 400
        assert response.get_json() == {"isOK": False, "msg": "json not valid"}

    @pytest.mark.parametrize("body", ["", "null", " null\n"])
    def test_empty_or_null_body_fails_validation(self, client, body):
        """Test that a body with nothing to bind reaches the field rules."""
        # Act
        response = _post(client, body)

        # Assert
        assert response.status_code == 400
        assert response.get_json() == {"isOK": False, "msg": "request not valid"}

    def test_empty_body_fails_validation_without_content_type(self, client):
        """Test that an empty body is not treated as unreadable JSON."""
        # Act
        response = client.post("/api/v1/favorite")

        # Assert
        assert response.status_code == 400
        assert response.get_json() == {"isOK": False, "msg": "request not valid"}

    def test_wrong_content_type_returns_400(self, client, valid_payload):
        """Test that a JSON body without a JSON content-type is not bound."""
        # Act
        response = _post(client, json.dumps(valid_payload), headers={"Content-Type": "text/plain"})

        # Assert
        assert response.status_code == 400

    def test_get_is_not_allowed(self, client):
        assert client.get("/api/v1/favorite").status_code == 405
