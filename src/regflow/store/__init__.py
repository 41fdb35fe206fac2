"""Record Store - Persistent storage for students, courses and registrations."""

from regflow.store.exceptions import (
    CourseExistsError,
    CourseNotFoundError,
    RegistrationConflictError,
    RegistrationNotFoundError,
    StaleRegistrationError,
    StorageError,
    StoreError,
    StudentExistsError,
    StudentNotFoundError,
)
from regflow.store.models import (
    ACTIVE_REGISTRATION_STATUSES,
    Course,
    CourseCategory,
    Registration,
    RegistrationStatus,
    Student,
    StudentStatus,
)
from regflow.store.store import RecordStore

__all__ = [
    "ACTIVE_REGISTRATION_STATUSES",
    "Course",
    "CourseCategory",
    "CourseExistsError",
    "CourseNotFoundError",
    "RecordStore",
    "Registration",
    "RegistrationConflictError",
    "RegistrationNotFoundError",
    "RegistrationStatus",
    "StaleRegistrationError",
    "StorageError",
    "StoreError",
    "Student",
    "StudentExistsError",
    "StudentNotFoundError",
    "StudentStatus",
]
