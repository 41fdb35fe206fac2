"""Unit tests for the RegistrationWorkflow."""

from unittest.mock import patch

import pytest

from regflow.api.events import Event, EventManager, EventType, Subscriber
from regflow.ledger import CapacityRaceError, EnrollmentLedger
from regflow.store import (
    RecordStore,
    RegistrationConflictError,
    RegistrationStatus,
)
from regflow.validation import UnknownCourseError, validate
from regflow.workflow import (
    InvalidTransitionError,
    RegistrationValidationError,
    RegistrationWorkflow,
    StudentNotActiveError,
)


@pytest.fixture
def event_manager() -> EventManager:
    return EventManager()


@pytest.fixture
def subscriber(event_manager: EventManager) -> Subscriber:
    return event_manager.subscribe()


@pytest.fixture
def workflow(seeded_store: RecordStore, event_manager: EventManager) -> RegistrationWorkflow:
    ledger = EnrollmentLedger(seeded_store, retry_backoff=0)
    return RegistrationWorkflow(seeded_store, ledger, event_manager=event_manager)


def drain(subscriber: Subscriber) -> list[Event]:
    events = []
    while not subscriber.queue.empty():
        events.append(subscriber.queue.get_nowait())
    return events


def event_types(subscriber: Subscriber) -> list[EventType]:
    return [e.event_type for e in drain(subscriber)]


@pytest.mark.unit
class TestValidateSelection:
    """Tests for validate_selection."""

    def test_valid_selection(self, workflow: RegistrationWorkflow, valid_selection) -> None:
        result = workflow.validate_selection("stu-1", valid_selection)

        assert result.valid
        assert result.total_credits == 16
        assert result.warnings == ["You have not selected some core courses: CS101"]

    def test_unknown_course(self, workflow: RegistrationWorkflow) -> None:
        with pytest.raises(UnknownCourseError) as exc_info:
            workflow.validate_selection("stu-1", ["c-cs201", "c-nope"])
        assert exc_info.value.course_ids == ["c-nope"]

    def test_validation_writes_nothing(
        self, workflow: RegistrationWorkflow, seeded_store: RecordStore
    ) -> None:
        workflow.validate_selection("stu-1", ["c-cs201"])
        assert seeded_store.list_registrations() == []


@pytest.mark.unit
class TestDrafts:
    """Tests for draft creation and editing."""

    def test_create_draft(
        self, workflow: RegistrationWorkflow, subscriber: Subscriber, valid_selection
    ) -> None:
        draft = workflow.create_draft("stu-1", valid_selection)

        assert draft.registration_status == RegistrationStatus.DRAFT
        assert draft.course_ids == valid_selection
        assert draft.total_credits == 16
        assert draft.student_name == "Ada Obi"
        assert draft.session == "2025/2026"
        assert draft.semester == "First"
        assert event_types(subscriber) == [EventType.REGISTRATION_CREATED]

    def test_draft_may_be_invalid(self, workflow: RegistrationWorkflow) -> None:
        """Saving a draft does not validate it."""
        draft = workflow.create_draft("stu-1", ["c-cs201"])
        assert draft.total_credits == 4

    def test_duplicate_ids_collapse(self, workflow: RegistrationWorkflow) -> None:
        draft = workflow.create_draft("stu-1", ["c-cs201", "c-mth101", "c-cs201"])
        assert draft.course_ids == ["c-cs201", "c-mth101"]

    def test_second_draft_conflicts(self, workflow: RegistrationWorkflow) -> None:
        workflow.create_draft("stu-1", ["c-cs201"])
        with pytest.raises(RegistrationConflictError):
            workflow.create_draft("stu-1", ["c-mth101"])

    def test_inactive_student_cannot_create(
        self, workflow: RegistrationWorkflow, seeded_store: RecordStore
    ) -> None:
        seeded_store.put_student("stu-3", {"name": "New", "status": "pending_approval"})
        with pytest.raises(StudentNotActiveError):
            workflow.create_draft("stu-3", ["c-cs201"])

    def test_update_draft(self, workflow: RegistrationWorkflow, valid_selection) -> None:
        draft = workflow.create_draft("stu-1", ["c-cs201"])
        updated = workflow.update_draft(draft.id, valid_selection)

        assert updated.id == draft.id
        assert updated.course_ids == valid_selection
        assert updated.total_credits == 16

    def test_get_active_registration(self, workflow: RegistrationWorkflow) -> None:
        assert workflow.get_active_registration("stu-1") is None

        draft = workflow.create_draft("stu-1", ["c-cs201"])
        assert workflow.get_active_registration("stu-1").id == draft.id
        assert workflow.get_active_registration("stu-1", "2030/2031") is None


@pytest.mark.unit
class TestSubmit:
    """Tests for submitting drafts."""

    def test_invalid_draft_stays_draft(
        self, workflow: RegistrationWorkflow, seeded_store: RecordStore
    ) -> None:
        draft = workflow.create_draft("stu-1", ["c-cs201"])

        with pytest.raises(RegistrationValidationError) as exc_info:
            workflow.submit(draft.id)

        assert exc_info.value.errors == ["Minimum credit load not met. Required: 15, Selected: 4"]
        assert exc_info.value.registration_id == draft.id
        assert seeded_store.get_registration(draft.id).status == "draft"

    def test_valid_draft_becomes_pending(
        self, workflow: RegistrationWorkflow, subscriber: Subscriber, valid_selection
    ) -> None:
        draft = workflow.create_draft("stu-1", valid_selection)
        result = workflow.submit(draft.id)

        assert result.registration.id == draft.id
        assert result.registration.registration_status == RegistrationStatus.PENDING
        assert result.registration.submitted_at is not None
        assert result.registration.total_credits == 16
        assert result.validation.warnings == ["You have not selected some core courses: CS101"]

        submitted = [
            e for e in drain(subscriber) if e.event_type == EventType.REGISTRATION_SUBMITTED
        ]
        assert submitted[0].data["total_credits"] == 16

    def test_pending_cannot_be_resubmitted_or_edited(
        self, workflow: RegistrationWorkflow, valid_selection
    ) -> None:
        draft = workflow.create_draft("stu-1", valid_selection)
        workflow.submit(draft.id)

        with pytest.raises(InvalidTransitionError):
            workflow.submit(draft.id)
        with pytest.raises(InvalidTransitionError):
            workflow.update_draft(draft.id, ["c-cs201"])

    def test_edit_during_submit_does_not_freeze_unvalidated_set(
        self, workflow: RegistrationWorkflow, seeded_store: RecordStore, valid_selection
    ) -> None:
        """A draft edited between validation and the status write keeps the validated set."""
        draft = workflow.create_draft("stu-1", valid_selection)

        def validate_then_edit(student, courses, catalog):
            verdict = validate(student, courses, catalog)
            workflow.update_draft(draft.id, ["c-cs101", "c-eng101"])
            return verdict

        with patch("regflow.workflow.workflow.validate", side_effect=validate_then_edit):
            result = workflow.submit(draft.id)

        stored = seeded_store.get_registration(draft.id)
        assert stored.status == "pending"
        assert stored.course_ids == valid_selection
        assert stored.total_credits == 16
        assert result.registration.course_ids == valid_selection


@pytest.mark.unit
class TestSubmitSelection:
    """Tests for direct submission."""

    def test_creates_pending_record(
        self, workflow: RegistrationWorkflow, subscriber: Subscriber, valid_selection
    ) -> None:
        result = workflow.submit_selection("stu-1", valid_selection)

        assert result.registration.status == "pending"
        assert result.registration.total_credits == 16
        assert event_types(subscriber) == [
            EventType.REGISTRATION_CREATED,
            EventType.REGISTRATION_SUBMITTED,
        ]

    def test_supersedes_existing_draft(
        self, workflow: RegistrationWorkflow, seeded_store: RecordStore, valid_selection
    ) -> None:
        draft = workflow.create_draft("stu-1", ["c-cs201"])
        result = workflow.submit_selection("stu-1", valid_selection)

        assert result.registration.id == draft.id
        assert result.registration.course_ids == valid_selection
        assert len(seeded_store.list_registrations(student_id="stu-1")) == 1

    def test_existing_pending_conflicts(
        self, workflow: RegistrationWorkflow, valid_selection
    ) -> None:
        workflow.submit_selection("stu-1", valid_selection)
        with pytest.raises(RegistrationConflictError):
            workflow.submit_selection("stu-1", valid_selection)

    def test_invalid_selection_writes_nothing(
        self, workflow: RegistrationWorkflow, seeded_store: RecordStore
    ) -> None:
        with pytest.raises(RegistrationValidationError) as exc_info:
            workflow.submit_selection("stu-1", ["c-cs101", "c-eng101"])

        assert "Schedule conflict between CS101 and ENG101." in exc_info.value.errors
        assert exc_info.value.registration_id is None
        assert seeded_store.list_registrations() == []

    def test_invalid_selection_leaves_draft_untouched(
        self, workflow: RegistrationWorkflow, seeded_store: RecordStore
    ) -> None:
        draft = workflow.create_draft("stu-1", ["c-cs201"])
        with pytest.raises(RegistrationValidationError):
            workflow.submit_selection("stu-1", ["c-mth101"])

        stored = seeded_store.get_registration(draft.id)
        assert stored.course_ids == ["c-cs201"]
        assert stored.status == "draft"


@pytest.mark.unit
class TestReview:
    """Tests for approve, reject and the pending queue."""

    def test_drafts_never_listed_as_pending(
        self, workflow: RegistrationWorkflow, valid_selection
    ) -> None:
        workflow.create_draft("stu-1", ["c-cs201"])
        submitted = workflow.submit_selection("stu-2", valid_selection)

        assert [r.id for r in workflow.list_pending()] == [submitted.registration.id]

    def test_approve(
        self,
        workflow: RegistrationWorkflow,
        seeded_store: RecordStore,
        subscriber: Subscriber,
        valid_selection,
    ) -> None:
        rid = workflow.submit_selection("stu-1", valid_selection).registration.id
        drain(subscriber)

        approved = workflow.approve(rid)

        assert approved.status == "approved"
        assert seeded_store.get_course("c-art101").enrolled == 1
        assert seeded_store.get_student("stu-1").current_registrations == valid_selection
        assert event_types(subscriber) == [EventType.REGISTRATION_APPROVED]

    def test_approve_draft_is_invalid(self, workflow: RegistrationWorkflow) -> None:
        draft = workflow.create_draft("stu-1", ["c-cs201"])
        with pytest.raises(InvalidTransitionError):
            workflow.approve(draft.id)

    def test_reject_changes_no_enrollment(
        self, workflow: RegistrationWorkflow, seeded_store: RecordStore, valid_selection
    ) -> None:
        rid = workflow.submit_selection("stu-1", valid_selection).registration.id

        rejected = workflow.reject(rid)

        assert rejected.status == "rejected"
        assert all(c.enrolled == 0 for c in seeded_store.list_courses())
        with pytest.raises(InvalidTransitionError):
            workflow.approve(rid)

    def test_resubmission_after_rejection_uses_new_record(
        self, workflow: RegistrationWorkflow, valid_selection
    ) -> None:
        rid = workflow.submit_selection("stu-1", valid_selection).registration.id
        workflow.reject(rid)

        again = workflow.submit_selection("stu-1", valid_selection)

        assert again.registration.id != rid
        assert again.registration.status == "pending"

    def test_approval_race_keeps_loser_pending(
        self,
        workflow: RegistrationWorkflow,
        seeded_store: RecordStore,
        subscriber: Subscriber,
        valid_selection,
    ) -> None:
        """Both pass validation while ART101 has a seat; only one can be approved."""
        first = workflow.submit_selection("stu-1", valid_selection).registration.id
        second = workflow.submit_selection("stu-2", valid_selection).registration.id
        workflow.approve(first)
        drain(subscriber)

        with pytest.raises(CapacityRaceError):
            workflow.approve(second)

        assert seeded_store.get_registration(second).status == "pending"
        assert seeded_store.get_course("c-art101").enrolled == 1
        events = drain(subscriber)
        assert [e.event_type for e in events] == [EventType.CAPACITY_RACE]
        assert events[0].data["course_codes"] == ["ART101"]

    def test_bulk_approve(
        self, workflow: RegistrationWorkflow, seeded_store: RecordStore
    ) -> None:
        selection = ["c-cs201", "c-mth101", "c-phy101", "c-gst111", "c-eng101"]
        a = workflow.submit_selection("stu-1", selection).registration.id
        b = workflow.submit_selection("stu-2", selection).registration.id

        result = workflow.bulk_approve([a, b])

        assert result.registration_ids == [a, b]
        assert seeded_store.get_course("c-eng101").enrolled == 2
        assert workflow.list_pending() == []
