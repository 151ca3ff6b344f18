"""
Tests for the error envelope, authentication and the auth/status endpoints
"""
import pytest
from fastapi.testclient import TestClient

from taskboard.infrastructure.repositories.users import UserRepository
from taskboard.main import create_app


class TestEnvelope:
    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.text == "ok"

    def test_request_id_is_echoed(self, client):
        response = client.get("/health", headers={"X-Request-ID": "abc-123"})
        assert response.headers["X-Request-ID"] == "abc-123"

    def test_request_id_is_generated(self, client):
        assert client.get("/health").headers.get("X-Request-ID")

    def test_unauthenticated(self, client):
        response = client.get("/user/lists")
        assert response.status_code == 401
        assert response.json() == {
            "code": 401,
            "status_text": "Unauthorized",
            "description": "user is not authenticated",
        }

    def test_bad_token(self, client):
        response = client.get("/user/lists", headers={"Authorization": "Bearer not-a-jwt"})
        assert response.status_code == 401

    def test_token_in_query(self, client, register_user):
        token = register_user("q@example.com")["access_token"]
        assert client.get("/user/lists", params={"jwt": token}).status_code == 200

    def test_invalid_json(self, client, auth_headers):
        response = client.post(
            "/user/lists", content=b"{not json", headers={**auth_headers, "Content-Type": "application/json"},
        )
        assert response.status_code == 400
        assert response.json()["description"] == "failed to decode request body"

    def test_empty_body(self, client, auth_headers):
        response = client.post("/user/lists", headers=auth_headers)
        assert response.status_code == 400
        assert response.json()["description"] == "request body is empty"

    def test_validation_error(self, client, auth_headers):
        response = client.post("/user/lists", json={"title": "   "}, headers=auth_headers)
        assert response.status_code == 422
        body = response.json()
        assert body["code"] == 422
        assert any("title" in message for message in body["data"])

    def test_empty_patch(self, client, auth_headers):
        task = client.post("/user/lists/default", json={"title": "T"}, headers=auth_headers).json()["data"]
        response = client.patch(f"/user/tasks/{task['id']}", json={}, headers=auth_headers)
        assert response.status_code == 400
        assert response.json()["description"] == "data is empty"

    def test_bad_after_date(self, client, auth_headers):
        response = client.get("/user/tasks/upcoming", params={"after_date": "tomorrow"}, headers=auth_headers)
        assert response.status_code == 400

    def test_missing_task(self, client, auth_headers):
        response = client.get("/user/tasks/" + "0" * 27, headers=auth_headers)
        assert response.status_code == 404
        assert response.json()["description"] == "task not found"

    def test_foreign_list_is_not_found(self, client, auth_headers, register_user):
        other = register_user("other@example.com")
        other_headers = {"Authorization": f"Bearer {other['access_token']}"}
        foreign = client.post("/user/lists", json={"title": "Theirs"}, headers=other_headers).json()["data"]

        response = client.get(f"/user/lists/{foreign['id']}", headers=auth_headers)
        assert response.status_code == 404
        assert response.json()["description"] == "list not found"

    def test_heading_must_belong_to_list(self, client, auth_headers):
        inbox = client.get("/user/lists/default", headers=auth_headers).json()["data"]
        work = client.post("/user/lists", json={"title": "Work"}, headers=auth_headers).json()["data"]
        heading = client.post(
            f"/user/lists/{work['id']}/headings", json={"title": "Q1"}, headers=auth_headers,
        ).json()["data"]

        response = client.get(f"/user/lists/{inbox['id']}/headings/{heading['id']}", headers=auth_headers)
        assert response.status_code == 404


class TestAuthEndpoints:
    def test_duplicate_registration(self, client, register_user):
        register_user("dup@example.com")
        response = client.post("/register", json={"email": "dup@example.com", "password": "secret123"})
        assert response.status_code == 409
        assert response.json()["description"] == "user with this email already exists"

    def test_login_sets_refresh_cookie(self, client, register_user):
        register_user("ann@example.com")
        response = client.post("/login", json={"email": "ann@example.com", "password": "secret123"})
        assert response.status_code == 200
        assert "refreshToken=" in response.headers["set-cookie"]
        assert "HttpOnly" in response.headers["set-cookie"]

    def test_wrong_password(self, client, register_user):
        register_user("ann@example.com")
        response = client.post("/login", json={"email": "ann@example.com", "password": "nope-nope"})
        assert response.status_code == 401

    def test_refresh_with_header(self, client, register_user):
        tokens = register_user("ann@example.com", user_agent="pytest")
        response = client.post(
            "/refresh-tokens", headers={"refreshToken": tokens["refresh_token"], "User-Agent": "pytest"},
        )
        assert response.status_code == 200
        assert response.json()["data"]["refresh_token"] != tokens["refresh_token"]

    def test_refresh_without_token(self, client):
        client.cookies.clear()
        response = client.post("/refresh-tokens")
        assert response.status_code == 401
        assert response.json()["description"] == "session not found"

    def test_profile_update_and_delete(self, client, auth_headers):
        response = client.patch("/user", json={"email": "new@example.com"}, headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["data"]["email"] == "new@example.com"

        same = client.patch("/user", json={"email": "new@example.com"}, headers=auth_headers)
        assert same.status_code == 400

        assert client.delete("/user", headers=auth_headers).status_code == 200
        assert client.get("/user", headers=auth_headers).status_code == 401

    def test_token_of_deleted_user_is_rejected(self, client, auth_headers):
        assert client.get("/user/lists", headers=auth_headers).status_code == 200
        assert client.delete("/user", headers=auth_headers).status_code == 200

        response = client.get("/user/lists", headers=auth_headers)
        assert response.status_code == 401
        assert response.json()["description"] == "user is not authenticated"

    def test_email_taken_concurrently(self, client, auth_headers, register_user, monkeypatch):
        register_user("taken@example.com")
        # the other user commits the email after the availability check
        monkeypatch.setattr(UserRepository, "email_taken", lambda self, email, except_user_id: False)

        response = client.patch("/user", json={"email": "taken@example.com"}, headers=auth_headers)
        assert response.status_code == 409
        assert response.json()["description"] == "this email already taken"


class TestStatuses:
    def test_list_statuses(self, client, auth_headers):
        data = client.get("/statuses", headers=auth_headers).json()["data"]
        assert [s["title"] for s in data] == ["Not started", "Planned", "Completed", "Archived"]

    @pytest.mark.parametrize("status_id, code", [("1", 200), ("99", 404), ("abc", 400)])
    def test_get_status(self, client, auth_headers, status_id, code):
        assert client.get(f"/statuses/{status_id}", headers=auth_headers).status_code == code


class TestRateLimit:
    def test_requests_over_the_limit_are_rejected(self, settings):
        settings.HTTP_REQUEST_LIMIT_BY_IP = 2
        with TestClient(create_app(settings)) as limited:
            assert limited.get("/health").status_code == 200
            assert limited.get("/health").status_code == 200
            response = limited.get("/health")
        assert response.status_code == 429
        assert response.json()["description"] == "too many requests"
