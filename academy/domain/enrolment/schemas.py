"""Enrolment domain schemas - Pydantic models for validation"""

import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ...schemas import OptionalStr, RequiredStr
from ...shared.validators import validate_email


class ParentDetails(BaseModel):
    email: RequiredStr
    password: RequiredStr
    firstName: RequiredStr
    lastName: RequiredStr
    phone: OptionalStr = None
    address: OptionalStr = None
    suburb: OptionalStr = None
    postcode: OptionalStr = None
    state: OptionalStr = None
    occupation: OptionalStr = None
    referralSource: OptionalStr = None
    relationship: OptionalStr = None

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str) -> str:
        return validate_email(v)


class StudentDetails(BaseModel):
    firstName: RequiredStr
    lastName: RequiredStr
    gradeLevel: Optional[str | int] = None
    gender: OptionalStr = None
    dateOfBirth: Optional[datetime.date] = None
    schoolName: OptionalStr = None

    @field_validator("dateOfBirth", mode="before")
    @classmethod
    def blank_date(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v


class SubjectSelection(BaseModel):
    subject: RequiredStr
    courseName: OptionalStr = None
    className: OptionalStr = None
    classId: OptionalStr = None


class Selection(BaseModel):
    subjects: list[SubjectSelection] = Field(default_factory=list)


class EnrolRequest(BaseModel):
    parent: ParentDetails
    student: StudentDetails
    selection: Selection = Field(default_factory=Selection)
    paymentMethod: OptionalStr = None
    turnstileToken: OptionalStr = None


class EnrolResponse(BaseModel):
    success: bool = True
    studentId: str
    studentNumber: str


class CheckoutSelection(BaseModel):
    courseName: str = ""


class CheckoutRequest(BaseModel):
    studentName: RequiredStr
    yearLevel: RequiredStr
    courseName: RequiredStr
    parentEmail: RequiredStr
    studentId: RequiredStr
    subjectCount: Optional[int] = Field(default=None, ge=1)
    selections: Optional[list[CheckoutSelection]] = None

    @field_validator("yearLevel", mode="before")
    @classmethod
    def year_as_text(cls, v):
        # The enrolment form posts the year as a number
        return str(v) if isinstance(v, int) else v


class CheckoutResponse(BaseModel):
    success: bool = True
    url: str
