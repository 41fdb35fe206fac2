"""Administrative review endpoints."""

from fastapi import APIRouter, Response, status

from regflow.api.dependencies import ReviewDep
from regflow.api.models import (
    APIResponse,
    BulkApproveRequest,
    BulkReviewResponse,
    RegistrationResponse,
    ReviewOutcomeResponse,
    StudentResponse,
    registration_to_response,
    student_to_response,
)
from regflow.review import ReviewOutcome

router = APIRouter(prefix="/admin", tags=["admin"])


def _outcome_status(outcome: ReviewOutcome) -> int:
    if outcome.success:
        return status.HTTP_200_OK
    if outcome.error_type and outcome.error_type.endswith("NotFoundError"):
        return status.HTTP_404_NOT_FOUND
    if outcome.error_type == "StorageError":
        return status.HTTP_503_SERVICE_UNAVAILABLE
    return status.HTTP_409_CONFLICT


def _outcome_response(
    outcome: ReviewOutcome, response: Response
) -> APIResponse[ReviewOutcomeResponse]:
    response.status_code = _outcome_status(outcome)
    return APIResponse(
        data=ReviewOutcomeResponse.model_validate(outcome),
        error=outcome.error,
    )


@router.get(
    "/registrations/pending",
    response_model=APIResponse[list[RegistrationResponse]],
)
def list_pending_registrations(review: ReviewDep) -> APIResponse[list[RegistrationResponse]]:
    """List registrations awaiting review, oldest first."""
    registrations = review.list_pending_registrations()
    return APIResponse(data=[registration_to_response(r) for r in registrations])


@router.post(
    "/registrations/bulk-approve",
    response_model=APIResponse[BulkReviewResponse],
)
def bulk_approve(
    request: BulkApproveRequest, review: ReviewDep, response: Response
) -> APIResponse[BulkReviewResponse]:
    """Approve several registrations as one atomic batch."""
    report = review.bulk_approve(request.registration_ids)
    if not report.committed:
        response.status_code = status.HTTP_409_CONFLICT
    return APIResponse(
        data=BulkReviewResponse(
            committed=report.committed,
            outcomes=[ReviewOutcomeResponse.model_validate(o) for o in report.outcomes],
        ),
        error=None if report.committed else "Bulk approval rolled back",
    )


@router.post(
    "/registrations/{registration_id}/approve",
    response_model=APIResponse[ReviewOutcomeResponse],
)
def approve_registration(
    registration_id: str, review: ReviewDep, response: Response
) -> APIResponse[ReviewOutcomeResponse]:
    """Approve a pending registration."""
    return _outcome_response(review.approve(registration_id), response)


@router.post(
    "/registrations/{registration_id}/reject",
    response_model=APIResponse[ReviewOutcomeResponse],
)
def reject_registration(
    registration_id: str, review: ReviewDep, response: Response
) -> APIResponse[ReviewOutcomeResponse]:
    """Reject a pending registration."""
    return _outcome_response(review.reject(registration_id), response)


@router.get("/users/pending", response_model=APIResponse[list[StudentResponse]])
def list_pending_users(review: ReviewDep) -> APIResponse[list[StudentResponse]]:
    """List accounts awaiting activation."""
    return APIResponse(data=[student_to_response(s) for s in review.list_pending_users()])


@router.post("/users/{student_id}/activate", response_model=APIResponse[ReviewOutcomeResponse])
def activate_user(
    student_id: str, review: ReviewDep, response: Response
) -> APIResponse[ReviewOutcomeResponse]:
    """Activate a pending account."""
    return _outcome_response(review.activate_user(student_id), response)


@router.post("/users/{student_id}/reject", response_model=APIResponse[ReviewOutcomeResponse])
def reject_user(
    student_id: str, review: ReviewDep, response: Response
) -> APIResponse[ReviewOutcomeResponse]:
    """Reject a pending account."""
    return _outcome_response(review.reject_user(student_id), response)
