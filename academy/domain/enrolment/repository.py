"""Enrolment repository - Database operations for parents and students"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ...models import ClassStudent, Parent, ParentStudent, Profile, Student

logger = logging.getLogger(__name__)


class EnrolmentRepository:
    """Repository for enrolment database operations"""

    @staticmethod
    def student_number_exists(db: Session, student_number: str) -> bool:
        return (
            db.query(Student.id).filter(Student.student_number == student_number).first()
            is not None
        )

    @staticmethod
    def get_student_by_profile_id(db: Session, profile_id: str) -> Optional[Student]:
        return db.query(Student).filter(Student.profile_id == profile_id).first()

    @staticmethod
    def create_profile(db: Session, **profile_data) -> Profile:
        profile = Profile(**profile_data)
        db.add(profile)
        db.commit()
        db.refresh(profile)
        return profile

    @staticmethod
    def create_parent(db: Session, profile_id: str, **parent_data) -> Parent:
        parent = Parent(profile_id=profile_id, **parent_data)
        db.add(parent)
        db.commit()
        db.refresh(parent)
        return parent

    @staticmethod
    def create_student(db: Session, profile_id: str, **student_data) -> Student:
        student = Student(profile_id=profile_id, **student_data)
        db.add(student)
        db.commit()
        db.refresh(student)
        return student

    @staticmethod
    def add_class_enrolments(db: Session, student_id: str, class_ids: list[str]) -> int:
        for class_id in class_ids:
            db.add(ClassStudent(class_id=class_id, student_id=student_id))
        db.commit()
        return len(class_ids)

    @staticmethod
    def link_parent_student(
        db: Session, parent_id: str, student_id: str, relationship_type: str
    ) -> ParentStudent:
        link = ParentStudent(
            parent_id=parent_id, student_id=student_id, relationship_type=relationship_type
        )
        db.add(link)
        db.commit()
        return link

    @staticmethod
    def mark_checkout_pending(db: Session, profile_id: str, checkout_session_id: str) -> bool:
        updated = (
            db.query(Student)
            .filter(Student.profile_id == profile_id)
            .update(
                {
                    Student.stripe_checkout_session_id: checkout_session_id,
                    Student.payment_status: "pending",
                },
                synchronize_session=False,
            )
        )
        db.commit()
        return updated > 0

    @staticmethod
    def delete_profiles(db: Session, profile_ids: list[str]) -> None:
        for profile in db.query(Profile).filter(Profile.id.in_(profile_ids)).all():
            db.delete(profile)
        db.query(ParentStudent).filter(
            ParentStudent.student_id.in_(profile_ids) | ParentStudent.parent_id.in_(profile_ids)
        ).delete(synchronize_session=False)
        db.query(ClassStudent).filter(ClassStudent.student_id.in_(profile_ids)).delete(
            synchronize_session=False
        )
        db.commit()
