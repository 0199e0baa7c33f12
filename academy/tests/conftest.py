"""Pytest fixtures for academy API tests.

Every test gets empty tables in the in-memory SQLite database, a fresh rate
limiter and an in-process stand-in for Supabase Auth.
"""

import uuid
from typing import Optional

import pytest
from fastapi.testclient import TestClient

from academy.database import Base, SessionLocal, engine
from academy.main import app
from academy.models import Profile, Teacher
from academy.rate_limiter import limiter
from academy.supabase_auth import SupabaseAuthError, get_auth_client


class FakeAuthClient:
    """Keeps auth users in memory and mirrors the SupabaseAuthClient surface"""

    def __init__(self):
        self.users: dict[str, dict] = {}
        self.passwords: dict[str, str] = {}
        self.tokens: dict[str, str] = {}
        self.deleted: list[str] = []
        self.fail_create_for: set[str] = set()

    def add_user(self, email: str, password: str = "Sup3r-secret-pass", metadata: Optional[dict] = None) -> dict:
        user_id = str(uuid.uuid4())
        user = {"id": user_id, "email": email, "user_metadata": dict(metadata or {})}
        self.users[user_id] = user
        self.passwords[user_id] = password
        return user

    def issue_token(self, user_id: str) -> str:
        token = f"token-{user_id}"
        self.tokens[token] = user_id
        return token

    def _find_by_email(self, email: str) -> Optional[dict]:
        for user in self.users.values():
            if user["email"].lower() == email.lower():
                return user
        return None

    async def get_user(self, access_token: str) -> dict:
        user_id = self.tokens.get(access_token)
        if not user_id or user_id not in self.users:
            raise SupabaseAuthError("Invalid JWT", 401)
        return self.users[user_id]

    async def sign_in_with_password(self, email: str, password: str) -> dict:
        user = self._find_by_email(email)
        if not user or self.passwords[user["id"]] != password:
            raise SupabaseAuthError("Invalid login credentials", 400)
        return {
            "access_token": self.issue_token(user["id"]),
            "refresh_token": "refresh-token",
            "user": user,
        }

    async def update_current_user(self, access_token, password=None, user_metadata=None) -> dict:
        user = await self.get_user(access_token)
        if password is not None:
            self.passwords[user["id"]] = password
        if user_metadata is not None:
            user["user_metadata"].update(user_metadata)
        return user

    async def admin_create_user(self, email, password, email_confirm=True, user_metadata=None) -> dict:
        if email in self.fail_create_for:
            raise SupabaseAuthError("Database error creating new user", 500)
        if self._find_by_email(email):
            raise SupabaseAuthError(
                "A user with this email address has already been registered", 422
            )
        return self.add_user(email, password, user_metadata)

    async def admin_update_user_by_id(self, user_id, password=None, user_metadata=None) -> dict:
        if user_id not in self.users:
            raise SupabaseAuthError("User not found", 404)
        if password is not None:
            self.passwords[user_id] = password
        if user_metadata is not None:
            self.users[user_id]["user_metadata"].update(user_metadata)
        return self.users[user_id]

    async def admin_delete_user(self, user_id) -> None:
        if user_id not in self.users:
            raise SupabaseAuthError("User not found", 404)
        del self.users[user_id]
        self.deleted.append(user_id)

    async def admin_find_user_by_email(self, email, per_page=200) -> Optional[dict]:
        return self._find_by_email(email)


@pytest.fixture(autouse=True)
def database():
    """Create all tables before a test and drop them afterwards."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def _reset_rate_limits():
    limiter.reset()
    yield
    limiter.reset()


@pytest.fixture
def db_session():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def auth_client():
    return FakeAuthClient()


@pytest.fixture
def client(auth_client):
    """Create a test client for the FastAPI app."""
    app.dependency_overrides[get_auth_client] = lambda: auth_client
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(auth_client, db_session):
    """Create an auth user with a profile and return (profile id, auth headers)."""

    def _make_user(role: str, email: Optional[str] = None, metadata: Optional[dict] = None):
        email = email or f"{role}-{uuid.uuid4().hex[:8]}@vigyanitacademy.test"
        user = auth_client.add_user(email, metadata=metadata)
        profile = Profile(id=user["id"], email=email, full_name=f"Test {role.title()}", role=role)
        if role == "teacher":
            profile.teacher = Teacher(department="Mathematics")
        db_session.add(profile)
        db_session.commit()
        token = auth_client.issue_token(user["id"])
        return user["id"], {"Authorization": f"Bearer {token}"}

    return _make_user


@pytest.fixture
def admin_headers(make_user):
    _, headers = make_user("admin")
    return headers
