"""HTTP tests for the /api/users endpoints."""

from datetime import date
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from src.user_registry.entities.service.user import UserRepository, calculate_age


def _create(client: TestClient, payload: dict) -> dict:
    response = client.post("/api/users", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


class TestListUsers:
    def test_empty(self, client: TestClient):
        response = client.get("/api/users")

        assert response.status_code == 200
        assert response.json() == []

    def test_lists_created_users_with_age(self, client: TestClient, user_payload):
        _create(client, user_payload)
        _create(client, {**user_payload, "email": "second@example.com"})

        response = client.get("/api/users")

        assert response.status_code == 200
        body = response.json()
        assert len(body) == 2
        expected_age = calculate_age(date(1990, 1, 1))
        assert all(item["age"] == expected_age for item in body)


class TestCreateUser:
    def test_created_with_location(self, client: TestClient, user_payload):
        response = client.post("/api/users", json=user_payload)

        assert response.status_code == 201
        body = response.json()
        assert body["id"]
        assert body["email"] == user_payload["email"]
        assert body["first_name"] == user_payload["first_name"]
        assert response.headers["location"] == f"/api/users/{body['id']}"

    def test_supplied_id_used_as_is(self, client: TestClient, user_payload):
        body = _create(client, {**user_payload, "id": "0b6d6a52-6c3c-4b0e-9f0c-1a2b3c4d5e6f"})

        assert body["id"] == "0b6d6a52-6c3c-4b0e-9f0c-1a2b3c4d5e6f"

    @pytest.mark.parametrize("user_id", ["", "a/b", "not-a-uuid"])
    def test_malformed_id_rejected_before_saving(
        self, client: TestClient, user_payload, user_id
    ):
        response = client.post("/api/users", json={**user_payload, "id": user_id})

        assert response.status_code == 400
        assert response.json()["message"] == "Identifier must be a UUID."
        assert "location" not in response.headers
        assert client.get("/api/users").json() == []

    def test_timestamps_set_by_server(self, client: TestClient, user_payload):
        epoch = "1970-01-01T00:00:00Z"

        body = _create(
            client, {**user_payload, "created_at": epoch, "updated_at": epoch}
        )

        assert not body["created_at"].startswith("1970")
        assert not body["updated_at"].startswith("1970")

    def test_create_then_get(self, client: TestClient, user_payload):
        created = _create(client, user_payload)

        response = client.get(f"/api/users/{created['id']}")

        assert response.status_code == 200
        body = response.json()
        for field in ("first_name", "last_name", "email", "date_of_birth", "phone_number"):
            assert body[field] == user_payload[field]
        assert body["id"] == created["id"]
        assert body["age"] >= 0

    def test_duplicate_email(self, client: TestClient, user_payload):
        _create(client, user_payload)

        response = client.post(
            "/api/users",
            json={**user_payload, "first_name": "Jane", "email": "JohnDoe@example.com"},
        )

        assert response.status_code == 400
        assert response.json() == {"message": "Email must be unique."}
        assert len(client.get("/api/users").json()) == 1

    def test_underage(self, client: TestClient, user_payload):
        today = date.today()
        ten_years_ago = date(today.year - 10, 1, 1).isoformat()

        response = client.post(
            "/api/users", json={**user_payload, "date_of_birth": ten_years_ago}
        )

        assert response.status_code == 400
        assert response.json() == {"message": "User must be 18 years or older."}

    def test_invalid_phone_number(self, client: TestClient, user_payload):
        response = client.post("/api/users", json={**user_payload, "phone_number": "12345"})

        assert response.status_code == 400
        body = response.json()
        assert body["message"] == "Phone number must be 10 digits."
        assert body["errors"][0]["loc"] == ["body", "phone_number"]

    def test_missing_first_name(self, client: TestClient, user_payload):
        payload = {k: v for k, v in user_payload.items() if k != "first_name"}

        response = client.post("/api/users", json=payload)

        assert response.status_code == 400
        assert response.json()["message"].startswith("first_name")

    def test_invalid_email(self, client: TestClient, user_payload):
        response = client.post("/api/users", json={**user_payload, "email": "nope"})

        assert response.status_code == 400
        assert response.json()["message"].startswith("email")


class TestGetUser:
    def test_not_found_has_empty_body(self, client: TestClient):
        response = client.get("/api/users/does-not-exist")

        assert response.status_code == 404
        assert response.content == b""


class TestUpdateUser:
    def test_update_then_get(self, client: TestClient, user_payload):
        created = _create(client, user_payload)
        changes = {
            "first_name": "Jane",
            "last_name": "Smith",
            "email": "jane.smith@example.com",
            "date_of_birth": "1985-05-20",
            "phone_number": "0987654321",
        }

        response = client.put(f"/api/users/{created['id']}", json=changes)

        assert response.status_code == 204
        assert response.content == b""
        body = client.get(f"/api/users/{created['id']}").json()
        for field, value in changes.items():
            assert body[field] == value

    def test_not_found(self, client: TestClient, user_payload):
        response = client.put("/api/users/does-not-exist", json=user_payload)

        assert response.status_code == 404

    def test_duplicate_email_of_other_user(self, client: TestClient, user_payload):
        _create(client, {**user_payload, "email": "taken@example.com"})
        created = _create(client, user_payload)

        response = client.put(
            f"/api/users/{created['id']}",
            json={**user_payload, "email": "taken@example.com"},
        )

        assert response.status_code == 400
        assert response.json() == {"message": "Email must be unique."}

    def test_underage(self, client: TestClient, user_payload):
        created = _create(client, user_payload)
        today = date.today()

        response = client.put(
            f"/api/users/{created['id']}",
            json={**user_payload, "date_of_birth": date(today.year - 5, 1, 1).isoformat()},
        )

        assert response.status_code == 400
        assert response.json() == {"message": "User must be 18 years or older."}


class TestDeleteUser:
    def test_delete_then_get(self, client: TestClient, user_payload):
        created = _create(client, user_payload)

        response = client.delete(f"/api/users/{created['id']}")

        assert response.status_code == 204
        assert client.get(f"/api/users/{created['id']}").status_code == 404

    def test_not_found(self, client: TestClient):
        response = client.delete("/api/users/does-not-exist")

        assert response.status_code == 404


class TestErrorHandling:
    def test_store_failure_is_generic_500(self, client: TestClient):
        failure = OperationalError("SELECT", {}, Exception("connection refused"))

        with patch.object(UserRepository, "list_all", side_effect=failure):
            response = client.get("/api/users")

        assert response.status_code == 500
        assert response.json() == {"message": "Internal server error"}
        assert "connection refused" not in response.text

    def test_unexpected_exception_is_generic_500(self, client: TestClient):
        with patch.object(UserRepository, "get", side_effect=RuntimeError("boom")):
            response = client.get("/api/users/any-id")

        assert response.status_code == 500
        assert response.json()["message"] == "Internal server error"
        assert "boom" not in response.text

    def test_request_id_echoed(self, client: TestClient):
        response = client.get("/api/users", headers={"X-Request-ID": "req-123"})

        assert response.headers["X-Request-ID"] == "req-123"

    def test_request_id_generated(self, client: TestClient):
        response = client.get("/api/users")

        assert response.headers["X-Request-ID"]
        assert response.headers["X-Content-Type-Options"] == "nosniff"


class TestHealth:
    def test_liveness(self, client: TestClient):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "service": "api"}

    def test_readiness(self, client: TestClient):
        response = client.get("/health/ready")

        assert response.status_code == 200
        assert response.json()["checks"]["database"]["status"] == "healthy"

    def test_readiness_database_down(self, client: TestClient):
        deps = client.app.state.app_dependencies

        with patch.object(deps.database_service, "health_check", return_value=False):
            response = client.get("/health/ready")

        assert response.status_code == 503
        assert response.json()["status"] == "not_ready"
