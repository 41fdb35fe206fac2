"""Enrollment ledger - the atomic approval commit."""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING

from sqlalchemy import update

from regflow.ledger.exceptions import CapacityRaceError, RegistrationNotPendingError
from regflow.ledger.models import CommitResult
from regflow.store import (
    Course,
    CourseNotFoundError,
    Registration,
    RegistrationNotFoundError,
    RegistrationStatus,
    StorageError,
    Student,
    StudentNotFoundError,
)

if TYPE_CHECKING:
    from sqlalchemy.orm import Session

    from regflow.store import RecordStore

logger = logging.getLogger(__name__)


class EnrollmentLedger:
    """Commits approved registrations to student records and course counters.

    A commit, single or bulk, is exactly one store transaction that:

    - requires every registration to still be pending,
    - takes one seat per course per registration with a conditional
      increment (``enrolled < capacity``), so the capacity re-check and the
      increment are the same statement,
    - overwrites each student's current registrations,
    - marks each registration approved and re-stamps its credit total.

    Any failure rolls the whole transaction back. Only StorageError is
    retried.
    """

    def __init__(
        self,
        store: RecordStore,
        max_attempts: int = 3,
        retry_backoff: float = 0.05,
    ) -> None:
        """Initialize the ledger.

        Args:
            store: RecordStore providing the transaction primitive.
            max_attempts: Transaction attempts before a StorageError propagates.
            retry_backoff: Seconds slept after the first failed attempt,
                growing linearly per attempt.
        """
        self.store = store
        self.max_attempts = max(1, max_attempts)
        self.retry_backoff = retry_backoff

    def commit(self, registration_id: str) -> CommitResult:
        """Approve one pending registration atomically.

        Raises:
            CapacityRaceError: If any of its courses is now full.
            RegistrationNotPendingError: If it is no longer pending.
            RegistrationNotFoundError: If it doesn't exist.
            StorageError: If every attempt failed at the database layer.
        """
        return self.commit_bulk([registration_id])

    def commit_bulk(self, registration_ids: list[str]) -> CommitResult:
        """Approve many pending registrations as one all-or-nothing unit.

        Seats are counted across the batch: two registrations competing for
        a course's last seat fail the whole batch.

        Raises:
            CapacityRaceError: Naming every registration/course without a seat.
            RegistrationNotPendingError: If any registration is not pending.
            RegistrationNotFoundError: If any registration doesn't exist.
            StorageError: If every attempt failed at the database layer.
        """
        ids = list(dict.fromkeys(registration_ids))
        if not ids:
            return CommitResult(registration_ids=[], attempts=0)

        attempt = 1
        while True:
            try:
                result = self._commit_once(ids)
            except StorageError:
                if attempt >= self.max_attempts:
                    logger.error(
                        "Ledger commit of %d registration(s) failed after %d attempts",
                        len(ids),
                        attempt,
                    )
                    raise
                logger.warning(
                    "Ledger commit attempt %d/%d failed, retrying", attempt, self.max_attempts
                )
                time.sleep(self.retry_backoff * attempt)
                attempt += 1
                continue

            result.attempts = attempt
            logger.info(
                "Committed %d registration(s): %s", len(ids), ", ".join(result.registration_ids)
            )
            return result

    def _commit_once(self, ids: list[str]) -> CommitResult:
        with self.store.transaction() as session:
            registrations = [self._load_pending(session, rid) for rid in ids]

            full: list[tuple[str, str]] = []
            for registration in registrations:
                for course_id in registration.course_ids:
                    if not self._take_seat(session, course_id):
                        full.append((registration.id, self._course_code(session, course_id)))
            if full:
                logger.warning("Capacity re-check failed: %s", full)
                raise CapacityRaceError(full)

            enrolled: dict[str, int] = {}
            for registration in registrations:
                total = 0
                for course_id in registration.course_ids:
                    course = self._load_course(session, course_id)
                    enrolled[course.id] = course.enrolled
                    total += course.credits

                student = session.get(Student, registration.student_id)
                if student is None:
                    raise StudentNotFoundError(
                        f"Student with id '{registration.student_id}' not found"
                    )
                student.current_registrations = list(registration.course_ids)

                result = session.execute(
                    update(Registration)
                    .where(
                        Registration.id == registration.id,
                        Registration.status == RegistrationStatus.PENDING.value,
                    )
                    .values(status=RegistrationStatus.APPROVED.value, total_credits=total)
                    .execution_options(synchronize_session=False)
                )
                if result.rowcount != 1:
                    raise RegistrationNotPendingError(registration.id, registration.status)

            return CommitResult(registration_ids=[r.id for r in registrations], enrolled=enrolled)

    @staticmethod
    def _load_pending(session: Session, registration_id: str) -> Registration:
        registration = session.get(Registration, registration_id)
        if registration is None:
            raise RegistrationNotFoundError(f"Registration with id '{registration_id}' not found")
        if registration.status != RegistrationStatus.PENDING.value:
            raise RegistrationNotPendingError(registration_id, registration.status)
        return registration

    @staticmethod
    def _take_seat(session: Session, course_id: str) -> bool:
        result = session.execute(
            update(Course)
            .where(Course.id == course_id, Course.enrolled < Course.capacity)
            .values(enrolled=Course.enrolled + 1)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    @staticmethod
    def _load_course(session: Session, course_id: str) -> Course:
        # Refresh: the conditional increments bypassed the identity map
        course = session.get(Course, course_id, populate_existing=True)
        if course is None:
            raise CourseNotFoundError(f"Course with id '{course_id}' not found")
        return course

    def _course_code(self, session: Session, course_id: str) -> str:
        return self._load_course(session, course_id).code
