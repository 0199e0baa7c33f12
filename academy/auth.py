import logging
from dataclasses import dataclass, field
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from .config import SESSION_COOKIE_NAME
from .database import get_db
from .exceptions import ApiError
from .models import Profile
from .supabase_auth import SupabaseAuthClient, SupabaseAuthError, get_auth_client

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)

PORTAL_ROLE_MAP = {
    "/portal/admin": "admin",
    "/portal/teacher": "teacher",
    "/portal/parent": "parent",
    "/portal/student": "student",
}

RESET_REQUIRED_PATH = "/reset-password-required"


@dataclass
class CurrentUser:
    id: str
    email: Optional[str]
    role: Optional[str]
    access_token: str
    user_metadata: dict = field(default_factory=dict)

    @property
    def requires_password_reset(self) -> bool:
        return bool(self.user_metadata.get("require_password_reset"))


def portal_home(role: Optional[str]) -> str:
    for prefix, portal_role in PORTAL_ROLE_MAP.items():
        if portal_role == role:
            return prefix
    return "/"


def get_access_token(
    request: Request, credentials: Optional[HTTPAuthorizationCredentials]
) -> Optional[str]:
    if credentials and credentials.credentials:
        return credentials.credentials
    return request.cookies.get(SESSION_COOKIE_NAME)


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
    auth_client: SupabaseAuthClient = Depends(get_auth_client),
) -> CurrentUser:
    """Resolve the Supabase session and the caller's role from their profile"""
    token = get_access_token(request, credentials)
    if not token:
        raise ApiError(401, "Unauthorized")

    try:
        user = await auth_client.get_user(token)
    except SupabaseAuthError as e:
        logger.warning(f"Session verification failed: {e.message}")
        raise ApiError(401, "Unauthorized") from e

    user_id = user.get("id")
    if not user_id:
        raise ApiError(401, "Unauthorized")

    profile = db.query(Profile).filter(Profile.id == user_id).first()

    return CurrentUser(
        id=user_id,
        email=user.get("email"),
        role=profile.role if profile else None,
        access_token=token,
        user_metadata=user.get("user_metadata") or {},
    )


def require_role(*roles: str):
    """Dependency factory restricting a route to the given profile roles"""

    async def role_checker(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if user.role not in roles:
            logger.warning(f"User {user.id} with role {user.role} denied; requires {roles}")
            raise ApiError(403, "Forbidden")
        return user

    return role_checker


require_admin = require_role("admin")
require_teacher = require_role("teacher", "admin")
