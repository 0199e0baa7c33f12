"""
Supabase Auth (GoTrue) REST client.

User administration and session verification go through the hosted auth
service; only profile and role data lives in our own tables.
"""

import logging
from typing import Any, Optional

import httpx

from .config import (
    SUPABASE_ANON_KEY,
    SUPABASE_SERVICE_ROLE_KEY,
    SUPABASE_TIMEOUT_SECONDS,
    SUPABASE_URL,
)
from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class SupabaseAuthError(Exception):
    """Non-2xx response from the auth service"""

    def __init__(self, message: str, status_code: int = 500):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def _error_message(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return response.text[:200] or f"HTTP {response.status_code}"

    if isinstance(payload, dict):
        for field in ("msg", "message", "error_description", "error"):
            if payload.get(field):
                return str(payload[field])
    return f"HTTP {response.status_code}"


def _unwrap_user(payload: Any) -> dict:
    # Admin endpoints return the user object; some versions wrap it in {"user": ...}
    if isinstance(payload, dict) and isinstance(payload.get("user"), dict) and "id" not in payload:
        return payload["user"]
    return payload if isinstance(payload, dict) else {}


class SupabaseAuthClient:
    def __init__(
        self,
        url: Optional[str] = SUPABASE_URL,
        service_role_key: Optional[str] = SUPABASE_SERVICE_ROLE_KEY,
        anon_key: Optional[str] = SUPABASE_ANON_KEY,
        timeout: float = SUPABASE_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.url = (url or "").rstrip("/")
        self.service_role_key = service_role_key
        self.anon_key = anon_key or service_role_key
        self.timeout = timeout
        self._transport = transport

    def _headers(self, *, admin: bool, access_token: Optional[str] = None) -> dict:
        if not self.url:
            raise ConfigurationError("SUPABASE_URL is not configured")

        key = self.service_role_key if admin else self.anon_key
        if not key:
            raise ConfigurationError("Supabase API key is not configured")

        return {
            "apikey": key,
            "Authorization": f"Bearer {access_token or key}",
            "Content-Type": "application/json",
        }

    async def _request(
        self,
        method: str,
        path: str,
        *,
        admin: bool = True,
        access_token: Optional[str] = None,
        json: Optional[dict] = None,
        params: Optional[dict] = None,
    ) -> Any:
        headers = self._headers(admin=admin, access_token=access_token)

        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            response = await client.request(
                method, f"{self.url}{path}", headers=headers, json=json, params=params
            )

        if response.status_code >= 400:
            message = _error_message(response)
            logger.warning(f"Supabase auth {method} {path} failed ({response.status_code}): {message}")
            raise SupabaseAuthError(message, response.status_code)

        if not response.content:
            return {}
        return response.json()

    # Session endpoints

    async def get_user(self, access_token: str) -> dict:
        return await self._request("GET", "/auth/v1/user", admin=False, access_token=access_token)

    async def sign_in_with_password(self, email: str, password: str) -> dict:
        return await self._request(
            "POST",
            "/auth/v1/token",
            admin=False,
            params={"grant_type": "password"},
            json={"email": email, "password": password},
        )

    async def update_current_user(
        self,
        access_token: str,
        password: Optional[str] = None,
        user_metadata: Optional[dict] = None,
    ) -> dict:
        body: dict[str, Any] = {}
        if password is not None:
            body["password"] = password
        if user_metadata is not None:
            body["data"] = user_metadata
        return await self._request(
            "PUT", "/auth/v1/user", admin=False, access_token=access_token, json=body
        )

    # Admin endpoints (service role)

    async def admin_create_user(
        self,
        email: str,
        password: str,
        email_confirm: bool = True,
        user_metadata: Optional[dict] = None,
    ) -> dict:
        payload = await self._request(
            "POST",
            "/auth/v1/admin/users",
            json={
                "email": email,
                "password": password,
                "email_confirm": email_confirm,
                "user_metadata": user_metadata or {},
            },
        )
        return _unwrap_user(payload)

    async def admin_update_user_by_id(
        self,
        user_id: str,
        password: Optional[str] = None,
        user_metadata: Optional[dict] = None,
    ) -> dict:
        body: dict[str, Any] = {}
        if password is not None:
            body["password"] = password
        if user_metadata is not None:
            body["user_metadata"] = user_metadata
        payload = await self._request("PUT", f"/auth/v1/admin/users/{user_id}", json=body)
        return _unwrap_user(payload)

    async def admin_delete_user(self, user_id: str) -> None:
        await self._request("DELETE", f"/auth/v1/admin/users/{user_id}")

    async def admin_list_users(self, page: int = 1, per_page: int = 200) -> list[dict]:
        payload = await self._request(
            "GET", "/auth/v1/admin/users", params={"page": page, "per_page": per_page}
        )
        if isinstance(payload, dict):
            return payload.get("users", [])
        return payload or []

    async def admin_find_user_by_email(self, email: str, per_page: int = 200) -> Optional[dict]:
        email = email.strip().lower()
        page = 1
        while True:
            users = await self.admin_list_users(page=page, per_page=per_page)
            for user in users:
                if str(user.get("email", "")).lower() == email:
                    return user
            if len(users) < per_page:
                return None
            page += 1


_client: Optional[SupabaseAuthClient] = None


def get_auth_client() -> SupabaseAuthClient:
    """FastAPI dependency; override in tests"""
    global _client
    if _client is None:
        _client = SupabaseAuthClient()
    return _client
