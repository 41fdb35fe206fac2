"""Self-service endpoints scoped to one student."""

from fastapi import APIRouter, status

from regflow.api.dependencies import StoreDep, WorkflowDep
from regflow.api.models import (
    APIResponse,
    RegistrationResponse,
    SelectionRequest,
    StudentResponse,
    SubmissionResponse,
    ValidationResponse,
    registration_to_response,
    student_to_response,
)

router = APIRouter(prefix="/students", tags=["students"])


@router.get("/{student_id}", response_model=APIResponse[StudentResponse])
def get_student(student_id: str, store: StoreDep) -> APIResponse[StudentResponse]:
    """Get a student profile."""
    student = store.get_student(student_id)
    return APIResponse(data=student_to_response(student))


@router.post("/{student_id}/validate", response_model=APIResponse[ValidationResponse])
def validate_selection(
    student_id: str, selection: SelectionRequest, workflow: WorkflowDep
) -> APIResponse[ValidationResponse]:
    """Validate a candidate selection without saving it."""
    verdict = workflow.validate_selection(student_id, selection.course_ids)
    return APIResponse(data=ValidationResponse(**verdict.to_dict()))


@router.get(
    "/{student_id}/registration",
    response_model=APIResponse[RegistrationResponse | None],
)
def get_active_registration(
    student_id: str, workflow: WorkflowDep, session: str | None = None
) -> APIResponse[RegistrationResponse | None]:
    """Get the student's live registration for a session, if any."""
    registration = workflow.get_active_registration(student_id, session)
    if registration is None:
        return APIResponse(data=None)
    return APIResponse(data=registration_to_response(registration))


@router.post(
    "/{student_id}/registrations",
    response_model=APIResponse[RegistrationResponse],
    status_code=status.HTTP_201_CREATED,
)
def create_draft(
    student_id: str, selection: SelectionRequest, workflow: WorkflowDep
) -> APIResponse[RegistrationResponse]:
    """Save a draft registration."""
    registration = workflow.create_draft(student_id, selection.course_ids, selection.session)
    return APIResponse(data=registration_to_response(registration))


@router.post(
    "/{student_id}/submit",
    response_model=APIResponse[SubmissionResponse],
    status_code=status.HTTP_201_CREATED,
)
def submit_selection(
    student_id: str, selection: SelectionRequest, workflow: WorkflowDep
) -> APIResponse[SubmissionResponse]:
    """Submit a selection directly for approval."""
    result = workflow.submit_selection(student_id, selection.course_ids, selection.session)
    return APIResponse(
        data=SubmissionResponse(
            registration=registration_to_response(result.registration),
            warnings=result.validation.warnings,
        )
    )
