import uuid

from sqlalchemy import (
    JSON,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    Time,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base

ROLES = ("admin", "teacher", "parent", "student")


def generate_id():
    return str(uuid.uuid4())


class Profile(Base):
    """One row per Supabase auth user; the id is the auth user id"""

    __tablename__ = "profiles"

    id = Column(String(36), primary_key=True)
    email = Column(String(255), index=True, nullable=True)
    full_name = Column(String(255), nullable=True)
    first_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=True)
    role = Column(String(20), index=True, nullable=False)  # admin, teacher, parent, student
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    teacher = relationship(
        "Teacher", back_populates="profile", uselist=False, cascade="all, delete-orphan"
    )
    parent = relationship(
        "Parent", back_populates="profile", uselist=False, cascade="all, delete-orphan"
    )
    student = relationship(
        "Student", back_populates="profile", uselist=False, cascade="all, delete-orphan"
    )


class Teacher(Base):
    __tablename__ = "teachers"

    id = Column(String(36), primary_key=True, default=generate_id)
    profile_id = Column(
        String(36), ForeignKey("profiles.id", ondelete="CASCADE"), unique=True, nullable=False
    )
    department = Column(String(100), nullable=True)

    profile = relationship("Profile", back_populates="teacher")


class Parent(Base):
    __tablename__ = "parents"

    id = Column(String(36), primary_key=True, default=generate_id)
    profile_id = Column(
        String(36), ForeignKey("profiles.id", ondelete="CASCADE"), unique=True, nullable=False
    )
    phone = Column(String(50), nullable=True)
    address = Column(String(255), nullable=True)
    suburb = Column(String(100), nullable=True)
    postcode = Column(String(10), nullable=True)
    state = Column(String(10), nullable=True)
    occupation = Column(String(100), nullable=True)
    referral_source = Column(String(100), nullable=True)

    profile = relationship("Profile", back_populates="parent")


class Student(Base):
    __tablename__ = "students"

    id = Column(String(36), primary_key=True, default=generate_id)
    profile_id = Column(
        String(36), ForeignKey("profiles.id", ondelete="CASCADE"), unique=True, nullable=False
    )
    student_number = Column(String(20), unique=True, index=True, nullable=False)
    student_email = Column(String(255), nullable=True)  # Synthetic login email
    grade_level = Column(Integer, nullable=True)
    gender = Column(String(20), nullable=True)
    date_of_birth = Column(Date, nullable=True)
    school_name = Column(String(255), nullable=True)
    selected_subject = Column(String(100), nullable=True)
    selected_subjects = Column(JSON, default=list, nullable=True)
    selected_course = Column(Text, nullable=True)  # Comma-joined course names
    preferred_class = Column(Text, nullable=True)  # Comma-joined class names
    payment_method = Column(String(30), default="stripe", nullable=True)  # stripe, bank_transfer
    payment_status = Column(String(30), nullable=True)  # pending, paid
    stripe_checkout_session_id = Column(String(255), nullable=True)

    profile = relationship("Profile", back_populates="student")


class ParentStudent(Base):
    __tablename__ = "parent_student"

    id = Column(String(36), primary_key=True, default=generate_id)
    parent_id = Column(String(36), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False)
    student_id = Column(String(36), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False)
    relationship_type = Column(String(30), default="parent", nullable=False)


class Course(Base):
    __tablename__ = "courses"

    id = Column(String(36), primary_key=True, default=generate_id)
    name = Column(String(255), nullable=False)
    code = Column(String(50), unique=True, index=True, nullable=False)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    classes = relationship("SchoolClass", back_populates="course")


class SchoolClass(Base):
    __tablename__ = "classes"

    id = Column(String(36), primary_key=True, default=generate_id)
    course_id = Column(String(36), ForeignKey("courses.id", ondelete="CASCADE"), nullable=False)
    teacher_id = Column(String(36), ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True)
    name = Column(String(255), nullable=False)
    code = Column(String(50), unique=True, index=True, nullable=False)
    day_of_week = Column(String(10), nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    room = Column(String(100), default="Main Hall", nullable=False)

    course = relationship("Course", back_populates="classes")


class ClassStudent(Base):
    __tablename__ = "class_students"
    __table_args__ = (UniqueConstraint("class_id", "student_id"),)

    id = Column(String(36), primary_key=True, default=generate_id)
    class_id = Column(String(36), ForeignKey("classes.id", ondelete="CASCADE"), nullable=False)
    student_id = Column(String(36), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False)


class Announcement(Base):
    __tablename__ = "announcements"

    id = Column(String(36), primary_key=True, default=generate_id)
    title = Column(String(255), nullable=False)
    content = Column(Text, nullable=False)
    author_id = Column(String(36), ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True)
    target_role = Column(String(30), nullable=False)  # all, all_students_parents, or a role
    type = Column(String(30), default="announcement", nullable=False)
    priority = Column(String(20), default="normal", nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class TrialLesson(Base):
    __tablename__ = "trial_lessons"

    id = Column(String(36), primary_key=True, default=generate_id)
    parent_name = Column(String(255), nullable=False)
    parent_email = Column(String(255), nullable=False)
    parent_phone = Column(String(50), nullable=True)
    student_name = Column(String(255), nullable=False)
    course_id = Column(String(36), ForeignKey("courses.id", ondelete="SET NULL"), nullable=True)
    class_id = Column(String(36), ForeignKey("classes.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class Contact(Base):
    __tablename__ = "contacts"

    id = Column(String(36), primary_key=True, default=generate_id)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False)
    phone = Column(String(50), nullable=True)
    message = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class Attendance(Base):
    __tablename__ = "attendance"
    __table_args__ = (UniqueConstraint("class_id", "student_id", "date"),)

    id = Column(String(36), primary_key=True, default=generate_id)
    class_id = Column(String(36), ForeignKey("classes.id", ondelete="CASCADE"), nullable=False)
    student_id = Column(String(36), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False)
    date = Column(Date, nullable=False)
    status = Column(String(20), default="present", nullable=False)


class TestScore(Base):
    __tablename__ = "test_scores"
    __table_args__ = (UniqueConstraint("course_id", "student_id", "test_name", "date"),)
    __test__ = False  # Not a pytest test class

    id = Column(String(36), primary_key=True, default=generate_id)
    course_id = Column(String(36), ForeignKey("courses.id", ondelete="CASCADE"), nullable=False)
    class_id = Column(String(36), ForeignKey("classes.id", ondelete="SET NULL"), nullable=True)
    student_id = Column(String(36), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False)
    test_name = Column(String(255), nullable=False)
    score = Column(Float, default=0, nullable=False)
    max_score = Column(Float, default=100, nullable=False)
    date = Column(Date, nullable=False)
