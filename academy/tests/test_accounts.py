"""Tests for login, session lookup and password management endpoints."""

from unittest.mock import AsyncMock, patch

import pytest

from academy import config
from academy.auth import portal_home
from academy.models import Profile, Student


class TestPortalRouting:
    @pytest.mark.parametrize("role", ["admin", "teacher", "parent", "student"])
    def test_portal_home_for_each_role(self, role):
        assert portal_home(role) == f"/portal/{role}"

    def test_unknown_role_lands_on_home_page(self):
        assert portal_home(None) == "/"
        assert portal_home("alumni") == "/"


class TestLogin:
    def test_login_with_email_redirects_to_role_portal(self, client, make_user, auth_client):
        user_id, _ = make_user("parent", email="parent@example.com")

        response = client.post(
            "/api/login", json={"identifier": "parent@example.com", "password": "Sup3r-secret-pass"}
        )

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["role"] == "parent"
        assert body["redirectTo"] == "/portal/parent"
        assert auth_client.tokens[body["accessToken"]] == user_id

    def test_login_with_student_id(self, client, make_user):
        make_user("student", email="STU123456@student.vigyanit.com")

        response = client.post(
            "/api/login", json={"identifier": "stu123456", "password": "Sup3r-secret-pass"}
        )

        assert response.status_code == 200
        assert response.json()["redirectTo"] == "/portal/student"

    def test_pending_reset_redirects_to_reset_page(self, client, make_user):
        make_user("teacher", email="t@example.com", metadata={"require_password_reset": True})

        response = client.post(
            "/api/login", json={"identifier": "t@example.com", "password": "Sup3r-secret-pass"}
        )

        assert response.json()["redirectTo"] == "/reset-password-required"

    def test_bad_credentials_return_401(self, client, make_user):
        make_user("parent", email="parent@example.com")

        response = client.post(
            "/api/login", json={"identifier": "parent@example.com", "password": "wrong"}
        )

        assert response.status_code == 401
        assert response.json() == {"success": False, "error": "Invalid login credentials"}

    def test_missing_fields_return_400(self, client):
        response = client.post("/api/login", json={"identifier": "parent@example.com"})

        assert response.status_code == 400
        assert response.json()["error"] == "Missing required fields"

    def test_login_is_rate_limited(self, client):
        payload = {"identifier": "nobody@example.com", "password": "x"}
        for _ in range(10):
            assert client.post("/api/login", json=payload).status_code == 401

        response = client.post("/api/login", json=payload)

        assert response.status_code == 429
        assert "Retry-After" in response.headers


class TestMe:
    def test_requires_session(self, client):
        response = client.get("/api/me")

        assert response.status_code == 401
        assert response.json()["error"] == "Unauthorized"

    def test_invalid_token_is_unauthorized(self, client):
        response = client.get("/api/me", headers={"Authorization": "Bearer nope"})

        assert response.status_code == 401

    def test_session_cookie_is_accepted(self, client, make_user, auth_client):
        user_id, headers = make_user("student")
        token = headers["Authorization"].split(" ", 1)[1]
        client.cookies.set("sb-access-token", token)

        response = client.get("/api/me")

        assert response.status_code == 200
        assert response.json()["id"] == user_id
        assert response.json()["portal"] == "/portal/student"


class TestChangePassword:
    def test_changes_password_and_clears_reset_flag(self, client, make_user, auth_client):
        user_id, headers = make_user("parent", metadata={"require_password_reset": True})

        response = client.post(
            "/api/change-password",
            json={"newPassword": "a-much-longer-pass", "confirmPassword": "a-much-longer-pass"},
            headers=headers,
        )

        assert response.status_code == 200
        assert response.json()["redirectTo"] == "/portal/parent"
        assert auth_client.passwords[user_id] == "a-much-longer-pass"
        assert auth_client.users[user_id]["user_metadata"]["require_password_reset"] is False

    def test_short_password_rejected(self, client, make_user):
        _, headers = make_user("parent")

        response = client.post(
            "/api/change-password",
            json={"newPassword": "short", "confirmPassword": "short"},
            headers=headers,
        )

        assert response.status_code == 400
        assert response.json()["error"] == "Password must be at least 12 characters."

    def test_mismatched_passwords_rejected(self, client, make_user):
        _, headers = make_user("parent")

        response = client.post(
            "/api/change-password",
            json={"newPassword": "a-much-longer-pass", "confirmPassword": "another-long-pass"},
            headers=headers,
        )

        assert response.status_code == 400
        assert response.json()["error"] == "Passwords do not match."


class TestResetPassword:
    def test_admin_issues_one_time_password(self, client, make_user, admin_headers, auth_client):
        user_id, _ = make_user("student")

        response = client.post(
            "/api/reset-password", json={"userId": user_id}, headers=admin_headers
        )

        assert response.status_code == 200
        one_time_password = response.json()["oneTimePassword"]
        assert len(one_time_password) == 14
        assert auth_client.passwords[user_id] == one_time_password
        assert auth_client.users[user_id]["user_metadata"]["require_password_reset"] is True

    def test_non_admin_is_forbidden(self, client, make_user):
        user_id, headers = make_user("teacher")

        response = client.post("/api/reset-password", json={"userId": user_id}, headers=headers)

        assert response.status_code == 403
        assert response.json()["error"] == "Forbidden"

    def test_auth_failure_returns_generic_error(self, client, admin_headers):
        response = client.post(
            "/api/reset-password", json={"userId": "missing-user"}, headers=admin_headers
        )

        assert response.status_code == 500
        assert response.json()["error"] == "Failed to reset password"


class TestForgotPassword:
    @pytest.fixture
    def send_email(self):
        with patch("academy.routes.accounts.send_email", new_callable=AsyncMock) as mock_send:
            mock_send.return_value = {"id": "email-1"}
            yield mock_send

    def test_student_id_is_looked_up(self, client, db_session, send_email):
        db_session.add(Profile(id="stu-1", email="STU000001@student.vigyanit.com", role="student"))
        db_session.add(
            Student(
                profile_id="stu-1",
                student_number="STU000001",
                student_email="STU000001@student.vigyanit.com",
            )
        )
        db_session.commit()

        response = client.post("/api/forgot-password", json={"identifier": "STU000001"})

        assert response.status_code == 200
        assert response.json()["success"] is True
        kwargs = send_email.call_args.kwargs
        assert kwargs["to"] == config.OFFICE_EMAIL
        assert kwargs["subject"] == "[Vigyanit Academy] Password Reset Request - STU000001"
        assert "Email: STU000001@student.vigyanit.com" in kwargs["text"]
        assert "User Found: Yes" in kwargs["text"]

    def test_unknown_identifier_gets_same_response(self, client, send_email):
        response = client.post("/api/forgot-password", json={"identifier": "STU999999"})

        assert response.status_code == 200
        assert response.json()["message"].startswith("If an account exists")
        assert "User Found: No" in send_email.call_args.kwargs["text"]

    def test_email_failure_still_succeeds(self, client, send_email):
        send_email.side_effect = RuntimeError("resend down")

        response = client.post("/api/forgot-password", json={"identifier": "a@example.com"})

        assert response.status_code == 200
        assert response.json()["success"] is True

    def test_blank_identifier_rejected(self, client, send_email):
        response = client.post("/api/forgot-password", json={"identifier": "   "})

        assert response.status_code == 400
        assert response.json()["error"] == "Please enter an email or student ID"
        send_email.assert_not_called()

    def test_limited_to_three_requests(self, client, send_email):
        for _ in range(3):
            assert client.post("/api/forgot-password", json={"identifier": "a@example.com"}).status_code == 200

        response = client.post("/api/forgot-password", json={"identifier": "a@example.com"})

        assert response.status_code == 429
        assert response.json()["error"].startswith("Too many requests. Please try again in ")
