import datetime
from typing import Annotated, Literal, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, field_validator

from .models import ROLES
from .shared.validators import blank_to_none, validate_email

RequiredStr = Annotated[str, Field(min_length=1)]
OptionalStr = Annotated[Optional[str], BeforeValidator(blank_to_none)]

ANNOUNCEMENT_AUDIENCES = ("all", "all_students_parents") + ROLES

# Accounts

class LoginRequest(BaseModel):
    identifier: RequiredStr  # Email or student ID
    password: RequiredStr

class ChangePasswordRequest(BaseModel):
    newPassword: RequiredStr
    confirmPassword: RequiredStr

class ForgotPasswordRequest(BaseModel):
    identifier: str = Field(default="", validate_default=True)

    @field_validator("identifier")
    @classmethod
    def require_identifier(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("Please enter an email or student ID")
        return v

class ResetPasswordRequest(BaseModel):
    userId: RequiredStr

class CreateTeacherRequest(BaseModel):
    email: RequiredStr
    password: RequiredStr
    fullName: RequiredStr
    department: RequiredStr

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str) -> str:
        return validate_email(v)

class RemoveTeacherRequest(BaseModel):
    profileId: RequiredStr

# Courses and classes

class CreateCourseRequest(BaseModel):
    name: RequiredStr
    code: RequiredStr
    description: RequiredStr

class CourseResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    code: str
    description: OptionalStr = None

class CreateClassRequest(BaseModel):
    course_id: RequiredStr
    name: RequiredStr
    day_of_week: RequiredStr
    start_time: datetime.time
    end_time: datetime.time
    code: OptionalStr = None  # Generated from course, day and start time when omitted
    room: OptionalStr = None

class ClassResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    course_id: str
    teacher_id: OptionalStr = None
    name: str
    code: str
    day_of_week: str
    start_time: datetime.time
    end_time: datetime.time
    room: str

class AssignClassRequest(BaseModel):
    classId: RequiredStr
    teacherId: OptionalStr = None

# Communications

class AnnouncementRequest(BaseModel):
    title: RequiredStr
    content: RequiredStr
    target_role: str = "all"
    type: OptionalStr = None
    priority: OptionalStr = None

    @field_validator("target_role")
    @classmethod
    def check_audience(cls, v: str) -> str:
        if v not in ANNOUNCEMENT_AUDIENCES:
            raise ValueError("Invalid target role")
        return v

class TrialLessonRequest(BaseModel):
    parentName: RequiredStr
    parentEmail: RequiredStr
    parentPhone: OptionalStr = None
    studentName: RequiredStr
    courseId: OptionalStr = None
    classId: OptionalStr = None
    turnstileToken: OptionalStr = None

    @field_validator("parentEmail")
    @classmethod
    def check_email(cls, v: str) -> str:
        return validate_email(v)


class ContactRequest(BaseModel):
    name: RequiredStr
    email: RequiredStr
    phone: OptionalStr = None
    message: RequiredStr
    turnstileToken: OptionalStr = None

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str) -> str:
        return validate_email(v)


# Teacher portal

AttendanceStatus = Literal["present", "absent", "late", "excused"]

class AttendanceRecord(BaseModel):
    studentId: RequiredStr
    date: datetime.date
    status: AttendanceStatus = "present"

class AttendanceRequest(BaseModel):
    records: list[AttendanceRecord]

class ScoreRecord(BaseModel):
    studentId: RequiredStr
    testName: RequiredStr
    score: float = Field(default=0, ge=0)
    maxScore: float = Field(default=100, gt=0)
    date: datetime.date

class ScoresRequest(BaseModel):
    records: list[ScoreRecord]
