import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..auth import CurrentUser, require_admin
from ..database import get_db
from ..exceptions import ApiError
from ..models import Profile, Teacher
from ..schemas import CreateTeacherRequest, RemoveTeacherRequest
from ..supabase_auth import SupabaseAuthClient, get_auth_client

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Staff"])


@router.post("/create-teacher")
async def create_teacher(
    data: CreateTeacherRequest,
    admin: CurrentUser = Depends(require_admin),
    db: Session = Depends(get_db),
    auth_client: SupabaseAuthClient = Depends(get_auth_client),
):
    """Register a teacher: confirmed auth user, profile and teacher row"""
    try:
        auth_user = await auth_client.admin_create_user(
            email=data.email,
            password=data.password,
            email_confirm=True,
            user_metadata={"role": "teacher"},
        )
    except Exception as e:
        logger.error(f"Teacher creation error: {e}")
        raise ApiError(500, str(e) or "An error occurred") from e

    user_id = auth_user.get("id")
    if not user_id:
        raise ApiError(400, "Failed to create teacher")

    try:
        profile = Profile(id=user_id, email=data.email, full_name=data.fullName, role="teacher")
        profile.teacher = Teacher(department=data.department)
        db.add(profile)
        db.commit()
    except Exception as e:
        db.rollback()
        logger.error(f"Teacher creation error: {e}")
        # Do not leave a login without a profile behind
        try:
            await auth_client.admin_delete_user(user_id)
        except Exception as cleanup_error:
            logger.error(f"Failed to remove auth user {user_id}: {cleanup_error}")
        raise ApiError(500, str(e) or "An error occurred") from e

    logger.info(f"Admin {admin.id} registered teacher {data.email}")
    return {"success": True, "email": data.email}


@router.post("/remove-teacher")
async def remove_teacher(
    data: RemoveTeacherRequest,
    admin: CurrentUser = Depends(require_admin),
    db: Session = Depends(get_db),
    auth_client: SupabaseAuthClient = Depends(get_auth_client),
):
    """Delete a teacher's login; their profile and teacher row go with it"""
    profile = db.query(Profile).filter(Profile.id == data.profileId).first()
    if not profile or profile.role != "teacher":
        raise ApiError(404, "Teacher not found")

    try:
        await auth_client.admin_delete_user(profile.id)
        db.delete(profile)
        db.commit()
    except Exception as e:
        db.rollback()
        logger.error(f"Teacher removal error: {e}")
        raise ApiError(500, str(e) or "An error occurred") from e

    logger.info(f"Admin {admin.id} removed teacher {data.profileId}")
    return {"success": True}
