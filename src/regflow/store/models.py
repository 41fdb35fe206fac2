"""SQLAlchemy models for the record store."""

from __future__ import annotations

import uuid
from datetime import datetime  # noqa: TC003 - used at runtime for SQLAlchemy
from enum import StrEnum
from typing import Any

from sqlalchemy import (
    JSON,
    CheckConstraint,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    func,
    text,
)
from sqlalchemy.orm import (
    DeclarativeBase,
    Mapped,
    mapped_column,
)

from regflow.schedule import MeetingPattern


class CourseCategory(StrEnum):
    """Course category enum."""

    CORE = "core"
    ELECTIVE = "elective"
    GENERAL = "general"
    DEPARTMENTAL = "departmental"


class StudentStatus(StrEnum):
    """Account status enum. Only ACTIVE students may register."""

    ACTIVE = "active"
    PENDING_APPROVAL = "pending_approval"
    REJECTED = "rejected"


class RegistrationStatus(StrEnum):
    """Registration record status enum.

    OVERRIDDEN is declared for compatibility with existing records; no
    transition reaches it.
    """

    DRAFT = "draft"
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    OVERRIDDEN = "overridden"


# Statuses that occupy the single (student, session) registration slot
ACTIVE_REGISTRATION_STATUSES = (
    RegistrationStatus.DRAFT,
    RegistrationStatus.PENDING,
    RegistrationStatus.APPROVED,
)


def generate_uuid() -> str:
    """Generate a new UUID string."""
    return str(uuid.uuid4())


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


class Course(Base):
    """Course model - a catalog entry with its live enrollment counter."""

    __tablename__ = "courses"
    __table_args__ = (
        CheckConstraint("credits > 0", name="ck_courses_credits_positive"),
        CheckConstraint("capacity >= 0", name="ck_courses_capacity_non_negative"),
        CheckConstraint("enrolled >= 0", name="ck_courses_enrolled_non_negative"),
        CheckConstraint("enrolled <= capacity", name="ck_courses_enrolled_within_capacity"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    code: Mapped[str] = mapped_column(String(20), nullable=False, unique=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    credits: Mapped[int] = mapped_column(Integer, nullable=False)
    category: Mapped[str] = mapped_column(String(20), nullable=False)
    instructor: Mapped[str] = mapped_column(String(255), nullable=False)
    semester: Mapped[str] = mapped_column(String(50), nullable=False)
    schedule_days: Mapped[list[str]] = mapped_column(JSON, nullable=False)
    start_time: Mapped[str | None] = mapped_column(String(5), nullable=True)
    end_time: Mapped[str | None] = mapped_column(String(5), nullable=True)
    prerequisites: Mapped[list[str]] = mapped_column(JSON, nullable=False)
    capacity: Mapped[int] = mapped_column(Integer, nullable=False)
    enrolled: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now(), onupdate=func.now()
    )

    def __init__(
        self,
        code: str,
        credits: int,
        id: str | None = None,
        title: str = "",
        description: str = "",
        category: str = CourseCategory.ELECTIVE.value,
        instructor: str = "",
        semester: str = "",
        schedule_days: list[str] | None = None,
        start_time: str | None = None,
        end_time: str | None = None,
        prerequisites: list[str] | None = None,
        capacity: int = 0,
        enrolled: int = 0,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.id = id if id is not None else generate_uuid()
        self.code = code
        self.title = title
        self.description = description
        self.credits = credits
        self.category = CourseCategory(category).value
        self.instructor = instructor
        self.semester = semester
        self.schedule_days = list(schedule_days or [])
        self.start_time = start_time
        self.end_time = end_time
        self.prerequisites = list(prerequisites or [])
        self.capacity = capacity
        self.enrolled = enrolled

    @property
    def course_category(self) -> CourseCategory:
        """Get category as CourseCategory enum."""
        return CourseCategory(self.category)

    @property
    def meeting_pattern(self) -> MeetingPattern | None:
        """Weekly meeting pattern, or None when the course has no schedule."""
        if not self.schedule_days or self.start_time is None or self.end_time is None:
            return None
        return MeetingPattern.parse(self.schedule_days, self.start_time, self.end_time)

    @property
    def is_full(self) -> bool:
        return self.enrolled >= self.capacity

    def __repr__(self) -> str:
        return (
            f"<Course(id={self.id!r}, code={self.code!r}, "
            f"enrolled={self.enrolled!r}, capacity={self.capacity!r})>"
        )


class Student(Base):
    """Student model - profile, academic history and account status."""

    __tablename__ = "students"

    id: Mapped[str] = mapped_column(String(128), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    major: Mapped[str] = mapped_column(String(255), nullable=False)
    faculty: Mapped[str] = mapped_column(String(255), nullable=False)
    level: Mapped[str] = mapped_column(String(20), nullable=False)
    session: Mapped[str] = mapped_column(String(20), nullable=False)
    gpa: Mapped[float] = mapped_column(Float, nullable=False)
    completed_courses: Mapped[list[str]] = mapped_column(JSON, nullable=False)
    current_registrations: Mapped[list[str]] = mapped_column(JSON, nullable=False)
    min_credits: Mapped[int] = mapped_column(Integer, nullable=False)
    max_credits: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now(), onupdate=func.now()
    )

    def __init__(
        self,
        id: str,
        name: str,
        email: str = "",
        major: str = "Undeclared",
        faculty: str = "General Studies",
        level: str = "100",
        session: str = "2025/2026",
        gpa: float = 0.0,
        completed_courses: list[str] | None = None,
        current_registrations: list[str] | None = None,
        min_credits: int = 15,
        max_credits: int = 24,
        status: str = StudentStatus.ACTIVE.value,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.id = id
        self.name = name
        self.email = email
        self.major = major
        self.faculty = faculty
        self.level = level
        self.session = session
        self.gpa = gpa
        self.completed_courses = list(completed_courses or [])
        self.current_registrations = list(current_registrations or [])
        self.min_credits = min_credits
        self.max_credits = max_credits
        self.status = StudentStatus(status).value

    @property
    def student_status(self) -> StudentStatus:
        """Get status as StudentStatus enum."""
        return StudentStatus(self.status)

    def __repr__(self) -> str:
        return f"<Student(id={self.id!r}, name={self.name!r}, status={self.status!r})>"


class Registration(Base):
    """Registration model - one student's course selection for a session."""

    __tablename__ = "registrations"
    __table_args__ = (
        # One live record per student and session; rejected records don't count
        Index(
            "uq_registrations_active_per_session",
            "student_id",
            "session",
            unique=True,
            sqlite_where=text("status IN ('draft', 'pending', 'approved')"),
        ),
        Index("ix_registrations_status", "status"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    student_id: Mapped[str] = mapped_column(
        String(128), ForeignKey("students.id"), nullable=False
    )
    student_name: Mapped[str] = mapped_column(String(255), nullable=False)
    course_ids: Mapped[list[str]] = mapped_column(JSON, nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    total_credits: Mapped[int] = mapped_column(Integer, nullable=False)
    session: Mapped[str] = mapped_column(String(20), nullable=False)
    semester: Mapped[str] = mapped_column(String(50), nullable=False)
    submitted_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now(), onupdate=func.now()
    )

    def __init__(
        self,
        student_id: str,
        session: str,
        id: str | None = None,
        student_name: str = "",
        course_ids: list[str] | None = None,
        status: str | None = None,
        total_credits: int = 0,
        semester: str = "First",
        submitted_at: datetime | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.id = id if id is not None else generate_uuid()
        self.student_id = student_id
        self.student_name = student_name
        self.course_ids = list(course_ids or [])
        self.status = status if status is not None else RegistrationStatus.DRAFT.value
        self.total_credits = total_credits
        self.session = session
        self.semester = semester
        self.submitted_at = submitted_at

    @property
    def registration_status(self) -> RegistrationStatus:
        """Get status as RegistrationStatus enum."""
        return RegistrationStatus(self.status)

    @registration_status.setter
    def registration_status(self, value: RegistrationStatus) -> None:
        """Set status from RegistrationStatus enum."""
        self.status = value.value

    def __repr__(self) -> str:
        return (
            f"<Registration(id={self.id!r}, student_id={self.student_id!r}, "
            f"status={self.status!r})>"
        )
