"""RegistrationWorkflow - Registration state machine management."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from regflow.ledger import CapacityRaceError, RegistrationNotPendingError
from regflow.store import (
    RegistrationConflictError,
    RegistrationStatus,
    StaleRegistrationError,
    StudentStatus,
)
from regflow.validation import validate
from regflow.workflow.exceptions import (
    InvalidTransitionError,
    RegistrationValidationError,
    StudentNotActiveError,
)
from regflow.workflow.models import SubmissionResult
from regflow.workflow.transitions import ensure_registration_transition

if TYPE_CHECKING:
    from regflow.api.events import EventManager
    from regflow.ledger import CommitResult, EnrollmentLedger
    from regflow.store import RecordStore, Registration, Student
    from regflow.validation import Catalog, CourseRecord, ValidationResult

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    # SQLite DateTime columns hold naive UTC
    return datetime.now(UTC).replace(tzinfo=None)


class RegistrationWorkflow:
    """Drives registration records through draft, pending and a final status.

    Students create and edit drafts and submit them; submission runs the
    validation engine and only a clean verdict moves a record to pending.
    Administrators approve (through the enrollment ledger) or reject pending
    records. Approved and rejected are terminal; a rejected student starts
    over with a new record.
    """

    def __init__(
        self,
        store: RecordStore,
        ledger: EnrollmentLedger,
        event_manager: EventManager | None = None,
        default_session: str = "2025/2026",
        default_semester: str = "First",
    ) -> None:
        """Initialize the workflow.

        Args:
            store: RecordStore for reads and conditional writes.
            ledger: EnrollmentLedger performing approval commits.
            event_manager: Optional sink for outcome notifications.
            default_session: Session label when the student record has none.
            default_semester: Semester label for new records.
        """
        self.store = store
        self.ledger = ledger
        self.event_manager = event_manager
        self.default_session = default_session
        self.default_semester = default_semester

    # --- Self-service ---

    def validate_selection(self, student_id: str, course_ids: list[str]) -> ValidationResult:
        """Validate a candidate selection against the live catalog.

        Raises:
            StudentNotFoundError: If the student doesn't exist.
            UnknownCourseError: If any course ID is not in the catalog.
        """
        student = self.store.get_student(student_id)
        catalog = self.store.load_catalog()
        return validate(student, catalog.resolve(course_ids), catalog)

    def get_active_registration(
        self, student_id: str, session_label: str | None = None
    ) -> Registration | None:
        """Get the student's draft, pending or approved record for a session."""
        student = self.store.get_student(student_id)
        return self.store.find_active_registration(
            student_id, session_label or self._session_for(student)
        )

    def create_draft(
        self,
        student_id: str,
        course_ids: list[str],
        session_label: str | None = None,
    ) -> Registration:
        """Save a new draft registration.

        Raises:
            StudentNotActiveError: If the account is not active.
            UnknownCourseError: If any course ID is not in the catalog.
            RegistrationConflictError: If a live record exists for the session.
        """
        student = self._active_student(student_id)
        catalog = self.store.load_catalog()
        courses = catalog.resolve(course_ids)

        registration = self.store.create_registration(
            student_id=student.id,
            session_label=session_label or self._session_for(student),
            course_ids=[course.id for course in courses],
            student_name=student.name,
            semester=self.default_semester,
            status=RegistrationStatus.DRAFT,
            total_credits=sum(course.credits for course in courses),
        )
        logger.info("Created draft registration %s for student %s", registration.id, student.id)
        if self.event_manager is not None:
            self.event_manager.emit_registration_created(
                registration.id, student.id, registration.status
            )
        return registration

    def update_draft(self, registration_id: str, course_ids: list[str]) -> Registration:
        """Overwrite a draft's course set.

        Raises:
            InvalidTransitionError: If the record is no longer a draft.
            StudentNotActiveError: If the account is not active.
            UnknownCourseError: If any course ID is not in the catalog.
        """
        registration = self.store.get_registration(registration_id)
        ensure_registration_transition(
            registration.id, registration.registration_status, RegistrationStatus.DRAFT
        )
        self._active_student(registration.student_id)
        courses = self.store.load_catalog().resolve(course_ids)
        return self._overwrite_draft(registration, courses)

    def submit(self, registration_id: str) -> SubmissionResult:
        """Move a draft to pending if its course set validates.

        On a failing verdict the record stays a draft and every error is
        reported.

        Raises:
            RegistrationValidationError: If validation fails.
            InvalidTransitionError: If the record is not a draft.
            StudentNotActiveError: If the account is not active.
        """
        registration = self.store.get_registration(registration_id)
        ensure_registration_transition(
            registration.id, registration.registration_status, RegistrationStatus.PENDING
        )
        student = self._active_student(registration.student_id)
        catalog = self.store.load_catalog()
        courses = catalog.resolve(registration.course_ids)

        verdict = self._require_valid(student, courses, catalog, registration.id)
        return self._mark_pending(registration, courses, verdict)

    def submit_selection(
        self,
        student_id: str,
        course_ids: list[str],
        session_label: str | None = None,
    ) -> SubmissionResult:
        """Submit a selection directly, superseding the session's draft if any.

        Nothing is written when validation fails.

        Raises:
            RegistrationValidationError: If validation fails.
            RegistrationConflictError: If a pending or approved record exists.
            StudentNotActiveError: If the account is not active.
        """
        student = self._active_student(student_id)
        session_label = session_label or self._session_for(student)
        catalog = self.store.load_catalog()
        courses = catalog.resolve(course_ids)

        existing = self.store.find_active_registration(student.id, session_label)
        if existing is not None and existing.registration_status is not RegistrationStatus.DRAFT:
            raise RegistrationConflictError(
                f"Student '{student.id}' already has a {existing.status} registration "
                f"'{existing.id}' for session {session_label}"
            )

        verdict = self._require_valid(
            student, courses, catalog, existing.id if existing is not None else None
        )

        if existing is not None:
            draft = self._overwrite_draft(existing, courses)
            return self._mark_pending(draft, courses, verdict)

        registration = self.store.create_registration(
            student_id=student.id,
            session_label=session_label,
            course_ids=[course.id for course in courses],
            student_name=student.name,
            semester=self.default_semester,
            status=RegistrationStatus.PENDING,
            total_credits=verdict.total_credits,
            submitted_at=_utcnow(),
        )
        logger.info(
            "Student %s submitted registration %s directly (%d credits)",
            student.id,
            registration.id,
            verdict.total_credits,
        )
        if self.event_manager is not None:
            self.event_manager.emit_registration_created(
                registration.id, student.id, registration.status
            )
            self.event_manager.emit_registration_submitted(
                registration.id, student.id, verdict.total_credits, verdict.warnings
            )
        return SubmissionResult(registration=registration, validation=verdict)

    # --- Administrative ---

    def list_pending(self) -> list[Registration]:
        """Registrations awaiting an administrator decision, oldest first."""
        return self.store.list_registrations(status=RegistrationStatus.PENDING)

    def approve(self, registration_id: str) -> Registration:
        """Approve a pending registration through the ledger.

        If the ledger commit fails the record stays pending.

        Raises:
            CapacityRaceError: If a course filled up since submission.
            InvalidTransitionError: If the record is not pending.
            StorageError: If the commit failed at the database layer.
        """
        registration = self.store.get_registration(registration_id)
        ensure_registration_transition(
            registration.id, registration.registration_status, RegistrationStatus.APPROVED
        )
        self._commit([registration.id])

        logger.info("Approved registration %s", registration.id)
        if self.event_manager is not None:
            self.event_manager.emit_registration_approved(registration.id, registration.student_id)
        return self.store.get_registration(registration.id)

    def bulk_approve(self, registration_ids: list[str]) -> CommitResult:
        """Approve many pending registrations in one all-or-nothing commit.

        Raises:
            CapacityRaceError: If any course lacks seats; nothing is approved.
            InvalidTransitionError: If any record is not pending.
            RegistrationNotFoundError: If any record doesn't exist.
            StorageError: If the commit failed at the database layer.
        """
        ids = list(dict.fromkeys(registration_ids))
        registrations = [self.store.get_registration(rid) for rid in ids]
        for registration in registrations:
            ensure_registration_transition(
                registration.id, registration.registration_status, RegistrationStatus.APPROVED
            )

        result = self._commit([r.id for r in registrations])

        logger.info("Bulk-approved %d registration(s)", len(registrations))
        if self.event_manager is not None:
            for registration in registrations:
                self.event_manager.emit_registration_approved(
                    registration.id, registration.student_id
                )
        return result

    def reject(self, registration_id: str) -> Registration:
        """Reject a pending registration. No enrollment changes.

        Raises:
            InvalidTransitionError: If the record is not pending.
        """
        registration = self.store.get_registration(registration_id)
        ensure_registration_transition(
            registration.id, registration.registration_status, RegistrationStatus.REJECTED
        )
        try:
            rejected = self.store.update_registration_status(
                registration.id,
                RegistrationStatus.REJECTED,
                expected_status=RegistrationStatus.PENDING,
            )
        except StaleRegistrationError as e:
            current = self.store.get_registration(registration.id)
            raise InvalidTransitionError(
                registration.id, current.status, RegistrationStatus.REJECTED.value
            ) from e

        logger.info("Rejected registration %s", registration.id)
        if self.event_manager is not None:
            self.event_manager.emit_registration_rejected(rejected.id, rejected.student_id)
        return rejected

    # --- Helpers ---

    def _session_for(self, student: Student) -> str:
        return student.session or self.default_session

    def _active_student(self, student_id: str) -> Student:
        student = self.store.get_student(student_id)
        if student.student_status is not StudentStatus.ACTIVE:
            raise StudentNotActiveError(student.id, student.status)
        return student

    def _require_valid(
        self,
        student: Student,
        courses: list[CourseRecord],
        catalog: Catalog,
        registration_id: str | None,
    ) -> ValidationResult:
        verdict = validate(student, courses, catalog)
        if not verdict.valid:
            logger.info(
                "Submission for student %s rejected by validation: %d error(s)",
                student.id,
                len(verdict.errors),
            )
            raise RegistrationValidationError(verdict.errors, verdict.warnings, registration_id)
        return verdict

    def _overwrite_draft(
        self, registration: Registration, courses: list[CourseRecord]
    ) -> Registration:
        try:
            updated = self.store.update_registration_courses(
                registration.id,
                [course.id for course in courses],
                total_credits=sum(course.credits for course in courses),
                expected_status=RegistrationStatus.DRAFT,
            )
        except StaleRegistrationError as e:
            current = self.store.get_registration(registration.id)
            raise InvalidTransitionError(
                registration.id, current.status, RegistrationStatus.DRAFT.value
            ) from e
        logger.info("Updated draft registration %s", registration.id)
        return updated

    def _mark_pending(
        self,
        registration: Registration,
        courses: list[CourseRecord],
        verdict: ValidationResult,
    ) -> SubmissionResult:
        # The frozen set is the validated one, even if the draft was edited since
        try:
            pending = self.store.update_registration_status(
                registration.id,
                RegistrationStatus.PENDING,
                expected_status=RegistrationStatus.DRAFT,
                course_ids=[course.id for course in courses],
                total_credits=verdict.total_credits,
                submitted_at=_utcnow(),
            )
        except StaleRegistrationError as e:
            current = self.store.get_registration(registration.id)
            raise InvalidTransitionError(
                registration.id, current.status, RegistrationStatus.PENDING.value
            ) from e

        logger.info(
            "Registration %s submitted (%d credits)", pending.id, verdict.total_credits
        )
        if self.event_manager is not None:
            self.event_manager.emit_registration_submitted(
                pending.id, pending.student_id, verdict.total_credits, verdict.warnings
            )
        return SubmissionResult(registration=pending, validation=verdict)

    def _commit(self, registration_ids: list[str]) -> CommitResult:
        try:
            return self.ledger.commit_bulk(registration_ids)
        except CapacityRaceError as e:
            logger.warning("Approval blocked by capacity race: %s", e)
            if self.event_manager is not None:
                self.event_manager.emit_capacity_race(e.registration_ids, e.course_codes)
            raise
        except RegistrationNotPendingError as e:
            raise InvalidTransitionError(
                e.registration_id, e.status, RegistrationStatus.APPROVED.value
            ) from e
