"""ReviewService - the administrator's queue and actions."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from regflow.ledger import CapacityRaceError, LedgerError
from regflow.review.models import BulkReviewReport, ReviewOutcome
from regflow.store import RegistrationStatus, StaleRegistrationError, StoreError, StudentStatus
from regflow.workflow import InvalidTransitionError, WorkflowError, ensure_account_transition

if TYPE_CHECKING:
    from regflow.api.events import EventManager
    from regflow.store import RecordStore, Registration, Student
    from regflow.workflow import RegistrationWorkflow

logger = logging.getLogger(__name__)

# Failures reported back to the operator rather than raised
_REPORTABLE = (WorkflowError, LedgerError, StoreError)


class ReviewService:
    """Administrative review surface over the registration workflow.

    Lists the pending queues and performs approve/reject actions, turning
    engine failures into ReviewOutcome reports so an operator sees every
    item's result.
    """

    def __init__(
        self,
        workflow: RegistrationWorkflow,
        event_manager: EventManager | None = None,
    ) -> None:
        self.workflow = workflow
        self.store: RecordStore = workflow.store
        self.event_manager = event_manager

    # --- Queues ---

    def list_pending_registrations(self) -> list[Registration]:
        """Pending registrations only; drafts never appear here."""
        return self.workflow.list_pending()

    def list_pending_users(self) -> list[Student]:
        """Accounts awaiting activation."""
        return self.store.list_pending_users()

    # --- Registration actions ---

    def approve(self, registration_id: str) -> ReviewOutcome:
        """Approve one registration and report the outcome."""
        try:
            registration = self.workflow.approve(registration_id)
        except _REPORTABLE as e:
            logger.warning("Approval of %s failed: %s", registration_id, e)
            return self._failure(registration_id, e)
        return ReviewOutcome(item_id=registration.id, success=True, status=registration.status)

    def reject(self, registration_id: str) -> ReviewOutcome:
        """Reject one registration and report the outcome."""
        try:
            registration = self.workflow.reject(registration_id)
        except _REPORTABLE as e:
            logger.warning("Rejection of %s failed: %s", registration_id, e)
            return self._failure(registration_id, e)
        return ReviewOutcome(item_id=registration.id, success=True, status=registration.status)

    def bulk_approve(self, registration_ids: list[str]) -> BulkReviewReport:
        """Approve a batch atomically and report one outcome per registration.

        When the batch fails, the registration(s) that caused it carry the
        cause; the rest report that the batch was rolled back.
        """
        ids = list(dict.fromkeys(registration_ids))
        try:
            self.workflow.bulk_approve(ids)
        except _REPORTABLE as e:
            logger.warning("Bulk approval of %d registration(s) rolled back: %s", len(ids), e)
            return BulkReviewReport(committed=False, outcomes=self._bulk_failures(ids, e))

        return BulkReviewReport(
            committed=True,
            outcomes=[
                ReviewOutcome(item_id=rid, success=True, status=RegistrationStatus.APPROVED.value)
                for rid in ids
            ],
        )

    # --- Account actions ---

    def activate_user(self, student_id: str) -> ReviewOutcome:
        """Activate a pending account."""
        return self._set_account_status(student_id, StudentStatus.ACTIVE)

    def reject_user(self, student_id: str) -> ReviewOutcome:
        """Reject a pending account."""
        return self._set_account_status(student_id, StudentStatus.REJECTED)

    def _set_account_status(self, student_id: str, target: StudentStatus) -> ReviewOutcome:
        try:
            student = self.store.get_student(student_id)
            ensure_account_transition(student.id, student.student_status, target)
            try:
                updated = self.store.update_user_status(
                    student.id, target, expected_status=StudentStatus.PENDING_APPROVAL
                )
            except StaleRegistrationError as e:
                current = self.store.get_student(student.id)
                raise InvalidTransitionError(student.id, current.status, target.value) from e
        except _REPORTABLE as e:
            logger.warning("Account change for %s failed: %s", student_id, e)
            return self._failure(student_id, e)

        logger.info("Account %s is now %s", updated.id, updated.status)
        if self.event_manager is not None:
            self.event_manager.emit_user_status_changed(updated.id, updated.status)
        return ReviewOutcome(item_id=updated.id, success=True, status=updated.status)

    # --- Helpers ---

    def _failure(self, item_id: str, error: Exception) -> ReviewOutcome:
        return ReviewOutcome(
            item_id=item_id,
            success=False,
            status=self._current_status(item_id),
            error=str(error),
            error_type=type(error).__name__,
        )

    def _current_status(self, item_id: str) -> str | None:
        for lookup in (self.store.get_registration, self.store.get_student):
            try:
                return lookup(item_id).status
            except StoreError:
                continue
        return None

    def _bulk_failures(self, ids: list[str], error: Exception) -> list[ReviewOutcome]:
        culprits: dict[str, str] = {}
        if isinstance(error, CapacityRaceError):
            for rid, code in error.full_courses:
                culprits[rid] = f"{culprits[rid]}, {code}" if rid in culprits else code
            culprits = {rid: f"Capacity exceeded for: {codes}" for rid, codes in culprits.items()}
        elif isinstance(error, InvalidTransitionError):
            culprits[error.subject_id] = str(error)

        outcomes = []
        for rid in ids:
            if rid in culprits:
                message = culprits[rid]
            elif culprits:
                message = "Not approved: batch rolled back because of other registrations"
            else:
                message = f"Not approved: batch rolled back ({error})"
            outcomes.append(
                ReviewOutcome(
                    item_id=rid,
                    success=False,
                    status=self._current_status(rid),
                    error=message,
                    error_type=type(error).__name__,
                )
            )
        return outcomes
