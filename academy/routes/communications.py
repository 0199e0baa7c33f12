import logging

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from .. import config
from ..auth import CurrentUser, require_admin
from ..database import get_db
from ..email_service import is_configured, send_email
from ..email_templates import announcement_subject, contact_inquiry_html, contact_inquiry_subject
from ..exceptions import ApiError
from ..models import Announcement, Contact, Profile, TrialLesson
from ..rate_limiter import create_rate_limiter
from ..schemas import AnnouncementRequest, ContactRequest, TrialLessonRequest
from ..turnstile import require_turnstile

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Communications"])

rate_limit_contact = create_rate_limiter(limit=5, window_seconds=600, key_prefix="contact")
rate_limit_trial_lesson = create_rate_limiter(
    limit=5, window_seconds=600, key_prefix="trial-lesson"
)


def announcement_recipients(db: Session, target_role: str) -> list[str]:
    """Profile emails for an announcement audience"""
    query = db.query(Profile.email).filter(Profile.email.isnot(None))
    if target_role == "all_students_parents":
        query = query.filter(Profile.role.in_(("student", "parent")))
    elif target_role != "all":
        query = query.filter(Profile.role == target_role)
    return [email for (email,) in query.all() if email]


@router.post("/send-announcement")
async def send_announcement(
    data: AnnouncementRequest,
    admin: CurrentUser = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Store an announcement and email it to its audience"""
    try:
        announcement = Announcement(
            title=data.title,
            content=data.content,
            author_id=admin.id,
            target_role=data.target_role,
            type=data.type or "announcement",
            priority=data.priority or "normal",
        )
        db.add(announcement)
        db.commit()

        emails = announcement_recipients(db, data.target_role)
    except Exception as e:
        db.rollback()
        logger.error(f"Announcement error: {e}")
        raise ApiError(500, str(e) or "An error occurred") from e

    if emails and is_configured():
        recipients = emails
        if len(emails) > config.ANNOUNCEMENT_MAX_RECIPIENTS:
            # Resend caps recipients per message; larger audiences need batching
            logger.warning(
                f"Announcement audience of {len(emails)} exceeds "
                f"{config.ANNOUNCEMENT_MAX_RECIPIENTS}; only the first recipient is emailed"
            )
            recipients = emails[:1]
        try:
            await send_email(
                to=recipients,
                subject=announcement_subject(data.title, data.type),
                text=data.content,
                from_address=config.ANNOUNCEMENT_FROM_EMAIL,
            )
        except Exception as e:
            logger.error(f"Failed to send announcement emails: {e}")

    return {"success": True, "recipients": len(emails)}


@router.post("/trial-lesson")
async def book_trial_lesson(
    data: TrialLessonRequest,
    request: Request,
    db: Session = Depends(get_db),
    _: None = Depends(rate_limit_trial_lesson),
):
    await require_turnstile(data.turnstileToken, request)
    try:
        db.add(
            TrialLesson(
                parent_name=data.parentName,
                parent_email=data.parentEmail,
                parent_phone=data.parentPhone,
                student_name=data.studentName,
                course_id=data.courseId,
                class_id=data.classId,
            )
        )
        db.commit()
    except Exception as e:
        db.rollback()
        logger.error(f"Trial lesson submission error: {e}")
        raise ApiError(500, str(e) or "An error occurred") from e

    logger.info(f"Trial lesson booked for {data.studentName}")
    return {"success": True}


@router.post("/contact")
async def submit_contact(
    data: ContactRequest,
    request: Request,
    db: Session = Depends(get_db),
    _: None = Depends(rate_limit_contact),
):
    """Save a contact form message and forward it to the office"""
    await require_turnstile(data.turnstileToken, request)
    try:
        db.add(Contact(name=data.name, email=data.email, phone=data.phone, message=data.message))
        db.commit()
    except Exception as e:
        db.rollback()
        logger.error(f"Contact submission error: {e}")
        raise ApiError(500, "Failed to save message. Please try again later.") from e

    try:
        await send_email(
            to=config.OFFICE_EMAIL,
            subject=contact_inquiry_subject(data.name),
            html=contact_inquiry_html(data.name, data.email, data.phone, data.message),
            from_address=config.INQUIRY_FROM_EMAIL,
        )
    except Exception as e:
        # The message is already saved
        logger.error(f"Contact email error: {e}")

    return {"success": True}
