"""Self-service endpoints on a single registration record."""

from fastapi import APIRouter

from regflow.api.dependencies import StoreDep, WorkflowDep
from regflow.api.models import (
    APIResponse,
    RegistrationResponse,
    SelectionRequest,
    SubmissionResponse,
    registration_to_response,
)

router = APIRouter(prefix="/registrations", tags=["registrations"])


@router.get("/{registration_id}", response_model=APIResponse[RegistrationResponse])
def get_registration(
    registration_id: str, store: StoreDep
) -> APIResponse[RegistrationResponse]:
    """Get a registration by ID."""
    registration = store.get_registration(registration_id)
    return APIResponse(data=registration_to_response(registration))


@router.put("/{registration_id}/courses", response_model=APIResponse[RegistrationResponse])
def update_draft(
    registration_id: str, selection: SelectionRequest, workflow: WorkflowDep
) -> APIResponse[RegistrationResponse]:
    """Replace a draft's course selection."""
    registration = workflow.update_draft(registration_id, selection.course_ids)
    return APIResponse(data=registration_to_response(registration))


@router.post("/{registration_id}/submit", response_model=APIResponse[SubmissionResponse])
def submit_draft(registration_id: str, workflow: WorkflowDep) -> APIResponse[SubmissionResponse]:
    """Submit a draft for approval."""
    result = workflow.submit(registration_id)
    return APIResponse(
        data=SubmissionResponse(
            registration=registration_to_response(result.registration),
            warnings=result.validation.warnings,
        )
    )
