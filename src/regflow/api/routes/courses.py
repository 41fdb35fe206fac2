"""Catalog endpoints."""

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from regflow.api.dependencies import StoreDep
from regflow.api.models import (
    APIResponse,
    CourseCreate,
    CourseResponse,
    CourseUpdate,
    course_to_response,
)

router = APIRouter(prefix="/courses", tags=["courses"])


@router.get("", response_model=APIResponse[list[CourseResponse]])
def list_courses(store: StoreDep) -> APIResponse[list[CourseResponse]]:
    """List the catalog, ordered by course code."""
    courses = store.list_courses()
    return APIResponse(data=[course_to_response(c) for c in courses])


@router.post(
    "",
    response_model=APIResponse[CourseResponse],
    status_code=status.HTTP_201_CREATED,
)
def create_course(course: CourseCreate, store: StoreDep) -> APIResponse[CourseResponse]:
    """Add a catalog course."""
    document = course.model_dump(exclude={"schedule"})
    if course.schedule is not None:
        document["schedule"] = course.schedule.model_dump()
    created = store.add_course(document)
    return APIResponse(data=course_to_response(created))


@router.get("/{course_id}", response_model=APIResponse[CourseResponse])
def get_course(course_id: str, store: StoreDep) -> APIResponse[CourseResponse]:
    """Get a course by ID."""
    course = store.get_course(course_id)
    return APIResponse(data=course_to_response(course))


@router.patch("/{course_id}", response_model=APIResponse[CourseResponse])
def update_course(
    course_id: str, course: CourseUpdate, store: StoreDep
) -> APIResponse[CourseResponse] | JSONResponse:
    """Update a course (partial update).

    An explicit ``"schedule": null`` clears the meeting pattern.
    """
    patch = course.model_dump(exclude_unset=True, exclude={"schedule"})
    schedule = None
    if "schedule" in course.model_fields_set:
        schedule = course.schedule.model_dump() if course.schedule is not None else {}
    try:
        updated = store.update_course(course_id, schedule=schedule, **patch)
    except ValueError as e:
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content=APIResponse[None](data=None, error=str(e)).model_dump(),
        )
    return APIResponse(data=course_to_response(updated))
