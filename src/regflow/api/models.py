"""Pydantic models for REST API."""

from datetime import datetime
from typing import Any, Generic, Literal, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")

CategoryLiteral = Literal["core", "elective", "general", "departmental"]
_TIME = r"^\d{1,2}:\d{2}$"


class APIResponse(BaseModel, Generic[T]):
    """Standard API response wrapper.

    ``details`` carries complete lists (validation errors, unknown IDs)
    alongside the summary in ``error``.
    """

    data: T | None = None
    error: str | None = None
    details: list[str] | None = None


# Course models


class ScheduleModel(BaseModel):
    """Weekly meeting pattern."""

    days: list[str] = Field(..., min_length=1)
    start_time: str = Field(..., pattern=_TIME)
    end_time: str = Field(..., pattern=_TIME)


class CourseCreate(BaseModel):
    """Request model for adding a catalog course."""

    code: str = Field(..., min_length=1, max_length=20)
    title: str = Field(default="", max_length=255)
    description: str = ""
    credits: int = Field(..., gt=0)
    category: CategoryLiteral = "elective"
    instructor: str = Field(default="", max_length=255)
    semester: str = Field(default="", max_length=50)
    schedule: ScheduleModel | None = None
    prerequisites: list[str] = Field(default_factory=list)
    capacity: int = Field(default=0, ge=0)


class CourseUpdate(BaseModel):
    """Request model for updating a course (partial update).

    Enrollment counts are not patchable.
    """

    model_config = ConfigDict(extra="forbid")

    title: str | None = Field(default=None, max_length=255)
    description: str | None = None
    credits: int | None = Field(default=None, gt=0)
    category: CategoryLiteral | None = None
    instructor: str | None = Field(default=None, max_length=255)
    semester: str | None = Field(default=None, max_length=50)
    schedule: ScheduleModel | None = None
    prerequisites: list[str] | None = None
    capacity: int | None = Field(default=None, ge=0)


class CourseResponse(BaseModel):
    """Response model for a course."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    code: str
    title: str
    description: str
    credits: int
    category: str
    instructor: str
    semester: str
    schedule_days: list[str]
    start_time: str | None
    end_time: str | None
    prerequisites: list[str]
    capacity: int
    enrolled: int


def course_to_response(course: Any) -> CourseResponse:
    """Convert a Course model to CourseResponse."""
    return CourseResponse.model_validate(course)


# Student models


class StudentResponse(BaseModel):
    """Response model for a student."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    email: str
    major: str
    faculty: str
    level: str
    session: str
    gpa: float
    completed_courses: list[str]
    current_registrations: list[str]
    min_credits: int
    max_credits: int
    status: str


def student_to_response(student: Any) -> StudentResponse:
    """Convert a Student model to StudentResponse."""
    return StudentResponse.model_validate(student)


# Registration models


class SelectionRequest(BaseModel):
    """A proposed course selection."""

    course_ids: list[str] = Field(default_factory=list)
    session: str | None = Field(default=None, max_length=20)


class ValidationResponse(BaseModel):
    """Verdict for a proposed selection."""

    valid: bool
    errors: list[str]
    warnings: list[str]
    total_credits: int


class RegistrationResponse(BaseModel):
    """Response model for a registration."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    student_id: str
    student_name: str
    course_ids: list[str]
    status: str
    total_credits: int
    session: str
    semester: str
    submitted_at: datetime | None
    created_at: datetime
    updated_at: datetime


def registration_to_response(registration: Any) -> RegistrationResponse:
    """Convert a Registration model to RegistrationResponse."""
    return RegistrationResponse.model_validate(registration)


class SubmissionResponse(BaseModel):
    """A registration that reached pending, with advisory warnings."""

    registration: RegistrationResponse
    warnings: list[str]


# Review models


class BulkApproveRequest(BaseModel):
    """Request model for approving several registrations at once."""

    registration_ids: list[str] = Field(..., min_length=1)


class ReviewOutcomeResponse(BaseModel):
    """Response model for one administrative action."""

    model_config = ConfigDict(from_attributes=True)

    item_id: str
    success: bool
    status: str | None
    error: str | None
    error_type: str | None


class BulkReviewResponse(BaseModel):
    """Response model for a bulk approval."""

    committed: bool
    outcomes: list[ReviewOutcomeResponse]
