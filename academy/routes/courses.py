import logging

from fastapi import APIRouter, Depends
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..auth import CurrentUser, require_admin
from ..codes import generate_class_code, unique_class_code
from ..database import get_db
from ..exceptions import ApiError
from ..models import Course, Profile, SchoolClass
from ..schemas import (
    AssignClassRequest,
    ClassResponse,
    CourseResponse,
    CreateClassRequest,
    CreateCourseRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Courses"])

DEFAULT_ROOM = "Main Hall"


def class_code_taken(db: Session, code: str) -> bool:
    return db.query(SchoolClass.id).filter(SchoolClass.code == code).first() is not None


@router.post("/create-course")
async def create_course(
    data: CreateCourseRequest,
    admin: CurrentUser = Depends(require_admin),
    db: Session = Depends(get_db),
):
    if db.query(Course.id).filter(Course.code == data.code).first():
        raise ApiError(409, f"Course code {data.code} already exists")

    course = Course(name=data.name, code=data.code, description=data.description)
    try:
        db.add(course)
        db.commit()
        db.refresh(course)
    except Exception as e:
        db.rollback()
        logger.error(f"Course creation error: {e}")
        raise ApiError(500, str(e) or "An error occurred") from e

    return {"success": True, "course": CourseResponse.model_validate(course).model_dump(mode="json")}


@router.post("/create-class")
async def create_class(
    data: CreateClassRequest,
    admin: CurrentUser = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Create a class; the code is derived from course, day and start time unless given"""
    course = db.query(Course).filter(Course.id == data.course_id).first()
    if not course:
        raise ApiError(404, "Course not found")

    if data.code:
        if class_code_taken(db, data.code):
            raise ApiError(409, f"Class code {data.code} already exists")
        code = data.code
    else:
        base = generate_class_code(course.code, data.day_of_week, data.start_time)
        code = unique_class_code(base, lambda candidate: class_code_taken(db, candidate))

    school_class = SchoolClass(
        course_id=course.id,
        name=data.name,
        code=code,
        day_of_week=data.day_of_week,
        start_time=data.start_time,
        end_time=data.end_time,
        room=data.room or DEFAULT_ROOM,
    )
    try:
        db.add(school_class)
        db.commit()
        db.refresh(school_class)
    except IntegrityError as e:
        # Another admin took the same code between the check and the insert
        db.rollback()
        raise ApiError(409, f"Class code {code} already exists") from e
    except Exception as e:
        db.rollback()
        logger.error(f"Class creation error: {e}")
        raise ApiError(500, str(e) or "An error occurred") from e

    return {
        "success": True,
        "class": ClassResponse.model_validate(school_class).model_dump(mode="json"),
    }


@router.post("/assign-class")
async def assign_class(
    data: AssignClassRequest,
    admin: CurrentUser = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Assign a teacher to a class, or unassign when no teacher is given"""
    school_class = db.query(SchoolClass).filter(SchoolClass.id == data.classId).first()
    if not school_class:
        raise ApiError(404, "Class not found")

    if data.teacherId:
        teacher = (
            db.query(Profile)
            .filter(Profile.id == data.teacherId, Profile.role == "teacher")
            .first()
        )
        if not teacher:
            raise ApiError(404, "Teacher not found")

    school_class.teacher_id = data.teacherId
    db.commit()
    db.refresh(school_class)

    logger.info(f"Class {school_class.code} assigned to {data.teacherId or 'nobody'}")
    return {
        "success": True,
        "class": ClassResponse.model_validate(school_class).model_dump(mode="json"),
    }
