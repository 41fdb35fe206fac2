"""RecordStore - Main API for record store operations."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from datetime import datetime
from typing import Any

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Session

from regflow.schedule import MeetingPattern
from regflow.logging import sanitize_for_log
from regflow.store.database import Database
from regflow.store.exceptions import (
    CourseExistsError,
    CourseNotFoundError,
    RegistrationConflictError,
    RegistrationNotFoundError,
    StaleRegistrationError,
    StorageError,
    StudentExistsError,
    StudentNotFoundError,
)
from regflow.store.migration import migrate_course_document, migrate_student_document
from regflow.store.models import (
    ACTIVE_REGISTRATION_STATUSES,
    Course,
    CourseCategory,
    Registration,
    RegistrationStatus,
    Student,
    StudentStatus,
)
from regflow.validation.catalog import Catalog

logger = logging.getLogger(__name__)

# Catalog fields an administrator may patch; enrolled belongs to the ledger
_COURSE_PATCHABLE = frozenset(
    {
        "title",
        "description",
        "credits",
        "category",
        "instructor",
        "semester",
        "prerequisites",
        "capacity",
    }
)


class RecordStore:
    """Main API for record store operations.

    Provides reads, writes and conditional updates for Students, Courses and
    Registrations, plus ``transaction()`` for multi-row atomic units.
    """

    def __init__(
        self,
        db_path: str = "regflow.db",
        busy_timeout: float = 30.0,
        student_defaults: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the store with a SQLite database.

        Creates database and tables if they don't exist.

        Args:
            db_path: Path to SQLite database file
            busy_timeout: Seconds to wait for the database write lock
            student_defaults: Overrides for missing student fields on import
        """
        self.student_defaults = dict(student_defaults or {})
        self._db = Database(db_path, busy_timeout=busy_timeout)
        self._db.create_tables()

    def close(self) -> None:
        """Close the database connection."""
        self._db.close()

    @contextmanager
    def transaction(self) -> Iterator[Session]:
        """Open one atomic unit of work.

        Everything done through the yielded session commits together or not
        at all. The write lock is held from the start, so a read inside the
        unit sees no concurrent write before commit. Lock or I/O failures
        surface as StorageError; any other exception rolls back and
        propagates unchanged.

        Raises:
            StorageError: If the database cannot complete the transaction
        """
        try:
            session = self._db.get_write_session()
        except OperationalError as e:
            logger.warning("Write lock not acquired: %s", e)
            raise StorageError(f"Transaction failed: {e}") from e
        try:
            yield session
            session.commit()
        except OperationalError as e:
            session.rollback()
            logger.warning("Transaction rolled back by database: %s", e)
            raise StorageError(f"Transaction failed: {e}") from e
        except BaseException:
            session.rollback()
            raise
        finally:
            session.close()

    # --- Student Operations ---

    def put_student(
        self,
        student_id: str,
        document: dict[str, Any],
        defaults: dict[str, Any] | None = None,
    ) -> Student:
        """Create or replace a student from a (possibly partial) document.

        Missing fields are filled by ``migrate_student_document``.

        Args:
            student_id: Account identifier from the identity provider
            document: Student fields, snake_case or camelCase
            defaults: Overrides for the migration defaults, on top of the
                store's ``student_defaults``

        Returns:
            The stored Student object
        """
        fields = migrate_student_document(
            student_id, document, {**self.student_defaults, **(defaults or {})}
        )
        with self.transaction() as session:
            student = session.get(Student, student_id)
            if student is None:
                student = Student(**fields)
                session.add(student)
            else:
                for key, value in fields.items():
                    setattr(student, key, value)
            session.flush()
            session.refresh(student)
        logger.info("Stored student %s (%s)", student_id, sanitize_for_log(student.email))
        return student

    def create_student(self, student_id: str, document: dict[str, Any]) -> Student:
        """Create a new student.

        Raises:
            StudentExistsError: If a student with this ID already exists
        """
        fields = migrate_student_document(student_id, document, self.student_defaults)
        try:
            with self.transaction() as session:
                student = Student(**fields)
                session.add(student)
                session.flush()
                session.refresh(student)
        except IntegrityError as e:
            raise StudentExistsError(f"Student with id '{student_id}' already exists") from e
        return student

    def get_student(self, student_id: str) -> Student:
        """Get student by ID.

        Raises:
            StudentNotFoundError: If student doesn't exist
        """
        session = self._db.get_session()
        try:
            student = session.get(Student, student_id)
            if student is None:
                raise StudentNotFoundError(f"Student with id '{student_id}' not found")
            return student
        finally:
            session.close()

    def list_students(self, status: StudentStatus | None = None) -> list[Student]:
        """List students, optionally filtered by account status, ordered by name."""
        session = self._db.get_session()
        try:
            stmt = select(Student)
            if status is not None:
                stmt = stmt.where(Student.status == status.value)
            stmt = stmt.order_by(Student.name, Student.id)
            return list(session.execute(stmt).scalars().all())
        finally:
            session.close()

    def list_pending_users(self) -> list[Student]:
        """List accounts awaiting administrator activation."""
        return self.list_students(status=StudentStatus.PENDING_APPROVAL)

    def update_user_status(
        self,
        student_id: str,
        status: StudentStatus,
        expected_status: StudentStatus | None = None,
    ) -> Student:
        """Set a student's account status.

        Args:
            student_id: The student's ID
            status: New account status
            expected_status: Only write if the current status matches

        Raises:
            StudentNotFoundError: If student doesn't exist
            StaleRegistrationError: If the current status differs from expected_status
        """
        with self.transaction() as session:
            student = session.get(Student, student_id)
            if student is None:
                raise StudentNotFoundError(f"Student with id '{student_id}' not found")
            if expected_status is not None and student.status != expected_status.value:
                raise StaleRegistrationError(
                    f"Student '{student_id}' is {student.status}, expected {expected_status.value}"
                )
            student.status = status.value
            session.flush()
            session.refresh(student)
        return student

    # --- Course Operations ---

    def add_course(self, document: dict[str, Any]) -> Course:
        """Add a catalog course.

        Raises:
            CourseExistsError: If a course with the same code or ID exists
            InvalidMeetingPatternError: If the schedule is malformed
        """
        fields = migrate_course_document(document)
        try:
            with self.transaction() as session:
                course = Course(**fields)
                session.add(course)
                session.flush()
                session.refresh(course)
        except IntegrityError as e:
            raise CourseExistsError(f"Course '{fields['code']}' already exists") from e
        return course

    def import_courses(self, documents: Iterable[dict[str, Any]]) -> list[Course]:
        """Add many catalog courses in one transaction.

        Raises:
            CourseExistsError: If any code or ID collides; nothing is imported
        """
        courses = [Course(**migrate_course_document(doc)) for doc in documents]
        try:
            with self.transaction() as session:
                session.add_all(courses)
                session.flush()
        except IntegrityError as e:
            raise CourseExistsError(f"Course import collided with existing course: {e}") from e
        logger.info("Imported %d courses", len(courses))
        return courses

    def get_course(self, course_id: str) -> Course:
        """Get course by ID.

        Raises:
            CourseNotFoundError: If course doesn't exist
        """
        session = self._db.get_session()
        try:
            course = session.get(Course, course_id)
            if course is None:
                raise CourseNotFoundError(f"Course with id '{course_id}' not found")
            return course
        finally:
            session.close()

    def list_courses(self) -> list[Course]:
        """List all courses, ordered by code."""
        session = self._db.get_session()
        try:
            stmt = select(Course).order_by(Course.code)
            return list(session.execute(stmt).scalars().all())
        finally:
            session.close()

    def load_catalog(self) -> Catalog:
        """Snapshot the whole catalog as a Catalog handle."""
        return Catalog(self.list_courses())

    def update_course(
        self,
        course_id: str,
        schedule: dict[str, Any] | None = None,
        **patch: Any,
    ) -> Course:
        """Update catalog fields. Only provided fields are updated.

        Args:
            course_id: The course's ID
            schedule: New meeting pattern as {"days", "start_time", "end_time"};
                an empty dict clears the schedule
            **patch: Any of title, description, credits, category, instructor,
                semester, prerequisites, capacity

        Raises:
            CourseNotFoundError: If course doesn't exist
            ValueError: If a field is not patchable or a value is invalid
            InvalidMeetingPatternError: If the schedule is malformed
        """
        unknown = set(patch) - _COURSE_PATCHABLE
        if unknown:
            raise ValueError(f"Cannot update course fields: {', '.join(sorted(unknown))}")

        with self.transaction() as session:
            course = session.get(Course, course_id)
            if course is None:
                raise CourseNotFoundError(f"Course with id '{course_id}' not found")

            for key, value in patch.items():
                if value is None:
                    continue
                if key == "category":
                    value = CourseCategory(value).value
                elif key == "prerequisites":
                    value = [str(code) for code in value]
                elif key == "credits" and value <= 0:
                    raise ValueError(f"Course credits must be positive, got {value}")
                elif key == "capacity" and value < course.enrolled:
                    raise ValueError(
                        f"Capacity {value} is below current enrollment {course.enrolled}"
                    )
                setattr(course, key, value)

            if schedule is not None:
                if schedule:
                    pattern = MeetingPattern.parse(
                        schedule.get("days") or [],
                        schedule.get("start_time", ""),
                        schedule.get("end_time", ""),
                    )
                    course.schedule_days = list(pattern.days)
                    course.start_time = pattern.start_time
                    course.end_time = pattern.end_time
                else:
                    course.schedule_days = []
                    course.start_time = None
                    course.end_time = None

            session.flush()
            session.refresh(course)
        return course

    # --- Registration Operations ---

    def create_registration(
        self,
        student_id: str,
        session_label: str,
        course_ids: list[str],
        student_name: str = "",
        semester: str = "First",
        status: RegistrationStatus = RegistrationStatus.DRAFT,
        total_credits: int = 0,
        submitted_at: datetime | None = None,
    ) -> Registration:
        """Create a registration record.

        The live-record check and the insert share one transaction.

        Args:
            student_id: The owning student's ID
            session_label: Academic session (e.g. "2025/2026")
            course_ids: Selected course IDs, in selection order
            student_name: Denormalised for the review queue
            semester: Semester label
            status: Initial status (DRAFT or PENDING)
            total_credits: Credit sum of course_ids
            submitted_at: Submission time when created directly as PENDING

        Returns:
            Created Registration object with generated ID

        Raises:
            StudentNotFoundError: If student doesn't exist
            RegistrationConflictError: If a live record exists for the session
        """
        try:
            with self.transaction() as session:
                if session.get(Student, student_id) is None:
                    raise StudentNotFoundError(f"Student with id '{student_id}' not found")

                existing = self._find_active(session, student_id, session_label)
                if existing is not None:
                    raise RegistrationConflictError(
                        f"Student '{student_id}' already has a {existing.status} registration "
                        f"'{existing.id}' for session {session_label}"
                    )

                registration = Registration(
                    student_id=student_id,
                    student_name=student_name,
                    course_ids=list(course_ids),
                    status=status.value,
                    total_credits=total_credits,
                    session=session_label,
                    semester=semester,
                    submitted_at=submitted_at,
                )
                session.add(registration)
                session.flush()
                session.refresh(registration)
        except IntegrityError as e:
            raise RegistrationConflictError(
                f"Student '{student_id}' already has a live registration "
                f"for session {session_label}"
            ) from e
        return registration

    def get_registration(self, registration_id: str) -> Registration:
        """Get registration by ID.

        Raises:
            RegistrationNotFoundError: If registration doesn't exist
        """
        session = self._db.get_session()
        try:
            registration = session.get(Registration, registration_id)
            if registration is None:
                raise RegistrationNotFoundError(
                    f"Registration with id '{registration_id}' not found"
                )
            return registration
        finally:
            session.close()

    def find_active_registration(self, student_id: str, session_label: str) -> Registration | None:
        """Get the student's live (draft, pending or approved) record for a session."""
        session = self._db.get_session()
        try:
            return self._find_active(session, student_id, session_label)
        finally:
            session.close()

    def list_registrations(
        self,
        student_id: str | None = None,
        session_label: str | None = None,
        status: RegistrationStatus | None = None,
    ) -> list[Registration]:
        """List registrations with optional filters.

        Returns:
            List of registrations, oldest first
        """
        session = self._db.get_session()
        try:
            stmt = select(Registration)

            if student_id is not None:
                stmt = stmt.where(Registration.student_id == student_id)
            if session_label is not None:
                stmt = stmt.where(Registration.session == session_label)
            if status is not None:
                stmt = stmt.where(Registration.status == status.value)

            stmt = stmt.order_by(Registration.created_at, Registration.id)
            return list(session.execute(stmt).scalars().all())
        finally:
            session.close()

    def update_registration_courses(
        self,
        registration_id: str,
        course_ids: list[str],
        total_credits: int,
        expected_status: RegistrationStatus = RegistrationStatus.DRAFT,
    ) -> Registration:
        """Overwrite a record's course set, if it still has expected_status.

        Raises:
            RegistrationNotFoundError: If registration doesn't exist
            StaleRegistrationError: If the record's status is not expected_status
        """
        return self._conditional_registration_update(
            registration_id,
            expected_status,
            course_ids=list(course_ids),
            total_credits=total_credits,
        )

    def update_registration_status(
        self,
        registration_id: str,
        status: RegistrationStatus,
        expected_status: RegistrationStatus | None = None,
        course_ids: list[str] | None = None,
        total_credits: int | None = None,
        submitted_at: datetime | None = None,
    ) -> Registration:
        """Set a record's status, optionally conditional on its current status.

        Course set, credit total and submission time, when given, are written
        by the same conditional statement.

        Raises:
            RegistrationNotFoundError: If registration doesn't exist
            StaleRegistrationError: If the record's status is not expected_status
        """
        values: dict[str, Any] = {"status": status.value}
        if course_ids is not None:
            values["course_ids"] = list(course_ids)
        if total_credits is not None:
            values["total_credits"] = total_credits
        if submitted_at is not None:
            values["submitted_at"] = submitted_at
        return self._conditional_registration_update(registration_id, expected_status, **values)

    def _conditional_registration_update(
        self,
        registration_id: str,
        expected_status: RegistrationStatus | None,
        **values: Any,
    ) -> Registration:
        with self.transaction() as session:
            stmt = update(Registration).where(Registration.id == registration_id)
            if expected_status is not None:
                stmt = stmt.where(Registration.status == expected_status.value)
            result = session.execute(
                stmt.values(**values).execution_options(synchronize_session=False)
            )
            registration = session.get(Registration, registration_id, populate_existing=True)
            if registration is None:
                raise RegistrationNotFoundError(
                    f"Registration with id '{registration_id}' not found"
                )
            if result.rowcount == 0:
                raise StaleRegistrationError(
                    f"Registration '{registration_id}' is {registration.status}, "
                    f"expected {expected_status.value if expected_status else 'any'}"
                )
        return registration

    @staticmethod
    def _find_active(session: Session, student_id: str, session_label: str) -> Registration | None:
        stmt = (
            select(Registration)
            .where(
                Registration.student_id == student_id,
                Registration.session == session_label,
                Registration.status.in_([s.value for s in ACTIVE_REGISTRATION_STATUSES]),
            )
            .order_by(Registration.created_at.desc())
            .limit(1)
        )
        return session.execute(stmt).scalar_one_or_none()
