"""Enrolment service - Business logic for family sign-up and payment"""

import logging

from sqlalchemy.orm import Session

from ... import pricing
from ...codes import generate_student_password, student_login_email, unique_student_number
from ...exceptions import ApiError
from ...payments import create_checkout_session
from ...shared.validators import parse_int_or_none
from ...supabase_auth import SupabaseAuthClient
from .repository import EnrolmentRepository
from .schemas import CheckoutRequest, EnrolRequest

logger = logging.getLogger(__name__)


class EnrolmentService:
    """Service for enrolment operations"""

    def __init__(self, db: Session, auth_client: SupabaseAuthClient):
        self.db = db
        self.auth = auth_client
        self.repo = EnrolmentRepository()

    async def enrol(self, data: EnrolRequest) -> dict:
        """
        Create the parent and student accounts and link them.

        Auth users are created first because profile ids are the auth ids.
        If a later step fails, every auth user created here is removed again.
        """
        created_auth_ids: list[str] = []
        try:
            parent_id = await self._create_parent(data, created_auth_ids)
            student_id, student_number = await self._create_student(data, created_auth_ids)

            self._enrol_in_classes(data, student_id)

            self.repo.link_parent_student(
                self.db,
                parent_id=parent_id,
                student_id=student_id,
                relationship_type=data.parent.relationship or "parent",
            )
        except Exception:
            self.db.rollback()
            await self._cleanup(created_auth_ids)
            raise

        logger.info(f"Enrolled student {student_number} for parent {parent_id}")
        return {"studentId": student_id, "studentNumber": student_number}

    async def _create_parent(self, data: EnrolRequest, created: list[str]) -> str:
        parent = data.parent
        auth_user = await self.auth.admin_create_user(
            email=parent.email,
            password=parent.password,
            email_confirm=True,
            user_metadata={"role": "parent"},
        )
        parent_id = auth_user.get("id")
        if not parent_id:
            raise ApiError(400, "Failed to create user")
        created.append(parent_id)

        self.repo.create_profile(
            self.db,
            id=parent_id,
            email=parent.email,
            full_name=f"{parent.firstName} {parent.lastName}",
            first_name=parent.firstName,
            last_name=parent.lastName,
            role="parent",
        )
        self.repo.create_parent(
            self.db,
            profile_id=parent_id,
            phone=parent.phone,
            address=parent.address,
            suburb=parent.suburb,
            postcode=parent.postcode,
            state=parent.state,
            occupation=parent.occupation,
            referral_source=parent.referralSource,
        )
        return parent_id

    async def _create_student(self, data: EnrolRequest, created: list[str]) -> tuple[str, str]:
        student = data.student
        student_number = unique_student_number(
            lambda candidate: self.repo.student_number_exists(self.db, candidate)
        )
        login_email = student_login_email(student_number)

        auth_user = await self.auth.admin_create_user(
            email=login_email,
            password=generate_student_password(),
            email_confirm=True,
            user_metadata={"role": "student"},
        )
        student_id = auth_user.get("id")
        if not student_id:
            raise ApiError(400, "Failed to create user")
        created.append(student_id)

        self.repo.create_profile(
            self.db,
            id=student_id,
            email=login_email,
            full_name=f"{student.firstName} {student.lastName}",
            first_name=student.firstName,
            last_name=student.lastName,
            role="student",
        )

        subjects = data.selection.subjects
        selected_subjects = [s.subject for s in subjects]
        course_names = ", ".join(s.courseName or "" for s in subjects)
        class_names = ", ".join(s.className or "" for s in subjects)

        self.repo.create_student(
            self.db,
            profile_id=student_id,
            student_number=student_number,
            student_email=login_email,
            grade_level=parse_int_or_none(student.gradeLevel),
            gender=student.gender,
            date_of_birth=student.dateOfBirth,
            school_name=student.schoolName,
            selected_subject=selected_subjects[0] if selected_subjects else None,
            selected_subjects=selected_subjects,
            selected_course=course_names or None,
            preferred_class=class_names or None,
            payment_method=data.paymentMethod or "stripe",
        )
        return student_id, student_number

    def _enrol_in_classes(self, data: EnrolRequest, student_id: str) -> None:
        class_ids = [s.classId for s in data.selection.subjects if s.classId]
        if not class_ids:
            return
        try:
            self.repo.add_class_enrolments(self.db, student_id, class_ids)
        except Exception as e:
            # The family account stands; the office can place the student manually
            self.db.rollback()
            logger.error(f"Class enrolment error for student {student_id}: {e}")

    async def _cleanup(self, auth_ids: list[str]) -> None:
        if not auth_ids:
            return
        try:
            self.repo.delete_profiles(self.db, auth_ids)
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to remove partial enrolment rows: {e}")
        for auth_id in auth_ids:
            try:
                await self.auth.admin_delete_user(auth_id)
            except Exception as e:
                logger.error(f"Failed to remove auth user {auth_id} after enrolment error: {e}")

    def start_checkout(self, data: CheckoutRequest, origin: str) -> str:
        selections = [s.model_dump() for s in data.selections] if data.selections else None
        amount = pricing.calculate_amount(
            data.yearLevel, data.courseName, data.subjectCount, selections
        )

        session = create_checkout_session(
            origin=origin,
            amount_cents=amount,
            student_id=data.studentId,
            student_name=data.studentName,
            year_level=data.yearLevel,
            course_name=data.courseName,
            parent_email=data.parentEmail,
        )

        if not self.repo.mark_checkout_pending(self.db, data.studentId, session.id):
            logger.warning(f"Checkout {session.id} created for unknown student {data.studentId}")

        return session.url

    def bank_transfer_amount(self, student_id: str) -> int:
        student = self.repo.get_student_by_profile_id(self.db, student_id)
        if not student:
            raise ApiError(404, "Student not found")
        return pricing.bank_transfer_amount(student.grade_level)
