"""Tests for app-wide behaviour: health, security headers, error rendering and outbound services."""

from unittest.mock import AsyncMock, patch

import httpx
import pytest

from academy import email_service
from academy.email_service import EmailNotConfigured, EmailSendError, send_email
from academy.email_templates import password_reset_request_text
from academy.security_headers import get_csp_policy
from academy.turnstile import verify_turnstile


def test_health_check(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}
    assert "Content-Security-Policy" not in response.headers


def test_security_headers_on_api_responses(client):
    response = client.get("/")

    assert response.headers["X-Frame-Options"] == "DENY"
    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert response.headers["Referrer-Policy"] == "strict-origin-when-cross-origin"
    assert "frame-ancestors 'none'" in response.headers["Content-Security-Policy"]


def test_csp_allows_supabase_project():
    with patch("academy.security_headers.SUPABASE_URL", "https://abc.supabase.co"):
        assert "https://abc.supabase.co" in get_csp_policy()


def test_unknown_route_rendered_as_error(client):
    response = client.get("/api/does-not-exist")

    assert response.status_code == 404
    assert response.json()["success"] is False


def test_reset_request_text_flags_unknown_accounts():
    text = password_reset_request_text("STU000009", None, False)

    assert "Email: Not found in database" in text
    assert "This identifier was not found in the system." in text


class TestSendEmail:
    @pytest.mark.asyncio
    async def test_not_configured(self):
        with patch.object(email_service.config, "RESEND_API_KEY", ""):
            with pytest.raises(EmailNotConfigured):
                await send_email("office@example.com", "Subject", text="Body")

    @pytest.mark.asyncio
    async def test_sends_through_resend(self):
        with patch.object(email_service.config, "RESEND_API_KEY", "re_test"), patch(
            "academy.email_service.resend.Emails.send", return_value={"id": "email-1"}
        ) as mock_send:
            result = await send_email("office@example.com", "Subject", text="Body")

        assert result == {"id": "email-1"}
        params = mock_send.call_args.args[0]
        assert params["to"] == ["office@example.com"]
        assert params["text"] == "Body"
        assert "html" not in params
        assert params["from"] == email_service.config.RESEND_FROM_EMAIL

    @pytest.mark.asyncio
    async def test_resend_failure_is_wrapped(self):
        with patch.object(email_service.config, "RESEND_API_KEY", "re_test"), patch(
            "academy.email_service.resend.Emails.send", side_effect=RuntimeError("bad key")
        ):
            with pytest.raises(EmailSendError):
                await send_email(["a@example.com"], "Subject", html="<p>Hi</p>")


class TestTurnstile:
    @pytest.mark.asyncio
    async def test_skipped_without_secret(self):
        with patch("academy.turnstile.config.TURNSTILE_SECRET_KEY", ""):
            assert await verify_turnstile("token") is True

    @pytest.mark.asyncio
    async def test_failed_verification(self):
        reply = httpx.Response(200, json={"success": False, "error-codes": ["invalid-input-response"]})
        with patch("academy.turnstile.config.TURNSTILE_SECRET_KEY", "secret"), patch.object(
            httpx.AsyncClient, "post", new_callable=AsyncMock, return_value=reply
        ) as mock_post:
            assert await verify_turnstile("token", "203.0.113.5") is False

        assert mock_post.call_args.kwargs["data"]["remoteip"] == "203.0.113.5"

    @pytest.mark.asyncio
    async def test_fails_open_when_service_unreachable(self):
        with patch("academy.turnstile.config.TURNSTILE_SECRET_KEY", "secret"), patch.object(
            httpx.AsyncClient, "post", new_callable=AsyncMock, side_effect=httpx.ConnectError("down")
        ):
            assert await verify_turnstile("token") is True
