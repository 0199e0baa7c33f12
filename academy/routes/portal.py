"""Teacher portal writes: attendance and test scores for a class"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..auth import CurrentUser, require_teacher
from ..database import get_db
from ..exceptions import ApiError
from ..models import Attendance, SchoolClass, TestScore
from ..schemas import AttendanceRequest, ScoresRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/portal/teacher", tags=["Teacher Portal"])


def get_owned_class(db: Session, class_id: str, user: CurrentUser) -> SchoolClass:
    """Load a class the caller may write to; admins may write to any class"""
    school_class = db.query(SchoolClass).filter(SchoolClass.id == class_id).first()
    if not school_class:
        raise ApiError(404, "Class not found")
    if user.role != "admin" and school_class.teacher_id != user.id:
        logger.warning(f"Teacher {user.id} denied access to class {class_id}")
        raise ApiError(403, "Forbidden")
    return school_class


@router.post("/classes/{class_id}/attendance")
async def record_attendance(
    class_id: str,
    data: AttendanceRequest,
    user: CurrentUser = Depends(require_teacher),
    db: Session = Depends(get_db),
):
    school_class = get_owned_class(db, class_id, user)

    # A repeated (student, date) in one batch keeps its last status
    records = {(r.studentId, r.date): r for r in data.records}

    try:
        for record in records.values():
            row = (
                db.query(Attendance)
                .filter(
                    Attendance.class_id == school_class.id,
                    Attendance.student_id == record.studentId,
                    Attendance.date == record.date,
                )
                .first()
            )
            if row:
                row.status = record.status
            else:
                db.add(
                    Attendance(
                        class_id=school_class.id,
                        student_id=record.studentId,
                        date=record.date,
                        status=record.status,
                    )
                )
        db.commit()
    except Exception as e:
        db.rollback()
        logger.error(f"Attendance error for class {class_id}: {e}")
        raise ApiError(500, str(e) or "An error occurred") from e

    return {"success": True, "saved": len(records)}


@router.post("/classes/{class_id}/scores")
async def record_scores(
    class_id: str,
    data: ScoresRequest,
    user: CurrentUser = Depends(require_teacher),
    db: Session = Depends(get_db),
):
    """Scores are keyed by course so a student keeps them across classes"""
    school_class = get_owned_class(db, class_id, user)

    records = {(r.studentId, r.testName, r.date): r for r in data.records}

    try:
        for record in records.values():
            row = (
                db.query(TestScore)
                .filter(
                    TestScore.course_id == school_class.course_id,
                    TestScore.student_id == record.studentId,
                    TestScore.test_name == record.testName,
                    TestScore.date == record.date,
                )
                .first()
            )
            if row is None:
                row = TestScore(
                    course_id=school_class.course_id,
                    student_id=record.studentId,
                    test_name=record.testName,
                    date=record.date,
                )
                db.add(row)
            row.class_id = school_class.id
            row.score = record.score
            row.max_score = record.maxScore
        db.commit()
    except Exception as e:
        db.rollback()
        logger.error(f"Score entry error for class {class_id}: {e}")
        raise ApiError(500, str(e) or "An error occurred") from e

    return {"success": True, "saved": len(records)}
