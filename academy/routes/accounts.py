import logging
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from .. import config
from ..auth import RESET_REQUIRED_PATH, CurrentUser, get_current_user, portal_home, require_admin
from ..codes import generate_one_time_password, normalize_login_identifier
from ..database import get_db
from ..email_service import send_email
from ..email_templates import password_reset_request_subject, password_reset_request_text
from ..exceptions import ApiError
from ..models import Profile, Student
from ..rate_limiter import create_rate_limiter
from ..schemas import (
    ChangePasswordRequest,
    ForgotPasswordRequest,
    LoginRequest,
    ResetPasswordRequest,
)
from ..supabase_auth import SupabaseAuthClient, SupabaseAuthError, get_auth_client

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Accounts"])

rate_limit_login = create_rate_limiter(limit=10, window_seconds=60, key_prefix="login")
# 3 requests per 10 minutes per client
rate_limit_forgot_password = create_rate_limiter(
    limit=3, window_seconds=600, key_prefix="forgot-password"
)


def landing_path(role: Optional[str], user_metadata: dict) -> str:
    if user_metadata.get("require_password_reset"):
        return RESET_REQUIRED_PATH
    return portal_home(role)


@router.post("/login")
async def login(
    data: LoginRequest,
    db: Session = Depends(get_db),
    auth_client: SupabaseAuthClient = Depends(get_auth_client),
    _: None = Depends(rate_limit_login),
):
    """Sign in with an email or student ID and return the session and portal"""
    email = normalize_login_identifier(data.identifier)

    try:
        session = await auth_client.sign_in_with_password(email, data.password)
    except SupabaseAuthError as e:
        logger.info(f"Login failed for {email}: {e.message}")
        raise ApiError(401, e.message) from e

    user = session.get("user") or {}
    profile = db.query(Profile).filter(Profile.id == user.get("id")).first()
    role = profile.role if profile else None

    return {
        "success": True,
        "accessToken": session.get("access_token"),
        "refreshToken": session.get("refresh_token"),
        "role": role,
        "redirectTo": landing_path(role, user.get("user_metadata") or {}),
    }


@router.get("/me")
async def me(user: CurrentUser = Depends(get_current_user)):
    return {
        "success": True,
        "id": user.id,
        "email": user.email,
        "role": user.role,
        "portal": portal_home(user.role),
        "requirePasswordReset": user.requires_password_reset,
    }


@router.post("/change-password")
async def change_password(
    data: ChangePasswordRequest,
    user: CurrentUser = Depends(get_current_user),
    auth_client: SupabaseAuthClient = Depends(get_auth_client),
):
    """Replace a one-time password with the user's own and clear the reset flag"""
    if len(data.newPassword) < config.MIN_PASSWORD_LENGTH:
        raise ApiError(400, f"Password must be at least {config.MIN_PASSWORD_LENGTH} characters.")
    if data.newPassword != data.confirmPassword:
        raise ApiError(400, "Passwords do not match.")

    try:
        await auth_client.update_current_user(
            user.access_token,
            password=data.newPassword,
            user_metadata={"require_password_reset": False},
        )
    except SupabaseAuthError as e:
        raise ApiError(400, e.message) from e

    logger.info(f"User {user.id} changed their password")
    return {"success": True, "redirectTo": portal_home(user.role)}


@router.post("/forgot-password")
async def forgot_password(
    data: ForgotPasswordRequest,
    db: Session = Depends(get_db),
    _: None = Depends(rate_limit_forgot_password),
):
    """
    Forward a reset request to the office.

    The response is identical whether or not the account exists so the
    endpoint cannot be used to probe for accounts.
    """
    identifier = data.identifier
    user_email: Optional[str] = None
    user_found = False

    try:
        if "@" in identifier:
            user_email = identifier
            user_found = True
        else:
            student = db.query(Student).filter(Student.student_number == identifier).first()
            if student:
                user_email = student.student_email
                user_found = True
    except Exception as e:
        logger.error(f"[Forgot Password Error] {e}")
        raise ApiError(500, "Unable to process request. Please try again later.") from e

    try:
        result = await send_email(
            to=config.OFFICE_EMAIL,
            subject=password_reset_request_subject(identifier),
            text=password_reset_request_text(identifier, user_email, user_found),
        )
        logger.info(f"[Forgot Password] Email sent. ID: {result.get('id') if isinstance(result, dict) else result}")
    except Exception as e:
        # Still report success to prevent information disclosure
        logger.error(f"[Forgot Password Email Error] {e}")

    return {
        "success": True,
        "message": (
            "If an account exists, a password reset request has been sent to "
            f"{config.OFFICE_EMAIL}"
        ),
    }


@router.post("/reset-password")
async def reset_password(
    data: ResetPasswordRequest,
    admin: CurrentUser = Depends(require_admin),
    auth_client: SupabaseAuthClient = Depends(get_auth_client),
):
    """Issue a one-time password; the user must choose a new one at next login"""
    one_time_password = generate_one_time_password()

    try:
        await auth_client.admin_update_user_by_id(
            data.userId,
            password=one_time_password,
            user_metadata={"require_password_reset": True},
        )
    except Exception as e:
        logger.error(f"Password reset error for {data.userId}: {e}")
        raise ApiError(500, "Failed to reset password") from e

    logger.info(f"Admin {admin.id} reset the password of {data.userId}")
    return {"success": True, "oneTimePassword": one_time_password}
