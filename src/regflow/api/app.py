"""FastAPI application setup."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from regflow.api.dependencies import (
    close_store,
    close_workflow,
    init_event_manager,
    init_store,
    init_workflow,
)
from regflow.api.models import APIResponse
from regflow.api.routes import admin, courses, events, registrations, students
from regflow.config import Settings, get_settings
from regflow.ledger import CapacityRaceError, EnrollmentLedger
from regflow.review import ReviewService
from regflow.schedule import InvalidMeetingPatternError
from regflow.store import (
    CourseExistsError,
    CourseNotFoundError,
    RegistrationConflictError,
    RegistrationNotFoundError,
    StorageError,
    StoreError,
    StudentExistsError,
    StudentNotFoundError,
)
from regflow.validation import UnknownCourseError
from regflow.workflow import (
    InvalidTransitionError,
    RegistrationValidationError,
    RegistrationWorkflow,
    StudentNotActiveError,
)

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator


def _error_response(
    status_code: int, error: str, details: list[str] | None = None
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=APIResponse[None](data=None, error=error, details=details).model_dump(),
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    settings: Settings = app.state.settings

    # Startup
    store = init_store(settings)
    event_manager = init_event_manager()
    ledger = EnrollmentLedger(
        store,
        max_attempts=settings.commit_retries,
        retry_backoff=settings.retry_backoff_seconds,
    )
    workflow = RegistrationWorkflow(
        store,
        ledger,
        event_manager=event_manager,
        default_session=settings.default_session,
        default_semester=settings.default_semester,
    )
    init_workflow(workflow, ReviewService(workflow, event_manager=event_manager))

    yield
    # Shutdown
    close_workflow()
    close_store()


def register_exception_handlers(app: FastAPI) -> None:
    """Map engine exceptions to HTTP responses."""

    @app.exception_handler(RegistrationValidationError)
    async def validation_failed_handler(
        _request: Request, exc: RegistrationValidationError
    ) -> JSONResponse:
        return _error_response(
            status.HTTP_422_UNPROCESSABLE_ENTITY, "Registration failed validation", exc.errors
        )

    @app.exception_handler(UnknownCourseError)
    async def unknown_course_handler(_request: Request, exc: UnknownCourseError) -> JSONResponse:
        return _error_response(
            status.HTTP_422_UNPROCESSABLE_ENTITY, "Unknown course", list(exc.course_ids)
        )

    @app.exception_handler(InvalidMeetingPatternError)
    async def bad_schedule_handler(
        _request: Request, exc: InvalidMeetingPatternError
    ) -> JSONResponse:
        return _error_response(status.HTTP_422_UNPROCESSABLE_ENTITY, str(exc))

    @app.exception_handler(StudentNotActiveError)
    async def student_not_active_handler(
        _request: Request, exc: StudentNotActiveError
    ) -> JSONResponse:
        return _error_response(status.HTTP_403_FORBIDDEN, str(exc))

    @app.exception_handler(InvalidTransitionError)
    async def invalid_transition_handler(
        _request: Request, exc: InvalidTransitionError
    ) -> JSONResponse:
        return _error_response(status.HTTP_409_CONFLICT, str(exc))

    @app.exception_handler(CapacityRaceError)
    async def capacity_race_handler(_request: Request, exc: CapacityRaceError) -> JSONResponse:
        return _error_response(status.HTTP_409_CONFLICT, "Capacity exceeded", exc.course_codes)

    @app.exception_handler(RegistrationConflictError)
    async def registration_conflict_handler(
        _request: Request, exc: RegistrationConflictError
    ) -> JSONResponse:
        return _error_response(status.HTTP_409_CONFLICT, str(exc))

    @app.exception_handler(CourseExistsError)
    async def course_exists_handler(_request: Request, _exc: CourseExistsError) -> JSONResponse:
        return _error_response(status.HTTP_409_CONFLICT, "Course with this code already exists")

    @app.exception_handler(StudentExistsError)
    async def student_exists_handler(_request: Request, _exc: StudentExistsError) -> JSONResponse:
        return _error_response(status.HTTP_409_CONFLICT, "Student already exists")

    @app.exception_handler(StudentNotFoundError)
    async def student_not_found_handler(
        _request: Request, _exc: StudentNotFoundError
    ) -> JSONResponse:
        return _error_response(status.HTTP_404_NOT_FOUND, "Student not found")

    @app.exception_handler(CourseNotFoundError)
    async def course_not_found_handler(
        _request: Request, _exc: CourseNotFoundError
    ) -> JSONResponse:
        return _error_response(status.HTTP_404_NOT_FOUND, "Course not found")

    @app.exception_handler(RegistrationNotFoundError)
    async def registration_not_found_handler(
        _request: Request, _exc: RegistrationNotFoundError
    ) -> JSONResponse:
        return _error_response(status.HTTP_404_NOT_FOUND, "Registration not found")

    @app.exception_handler(StorageError)
    async def storage_error_handler(_request: Request, _exc: StorageError) -> JSONResponse:
        return _error_response(status.HTTP_503_SERVICE_UNAVAILABLE, "Storage unavailable, retry")

    @app.exception_handler(StoreError)
    async def store_error_handler(_request: Request, _exc: StoreError) -> JSONResponse:
        return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="Regflow API",
        description="REST API for Regflow - Course Registration Engine",
        version="0.1.0",
        lifespan=lifespan,
    )

    # Store config for lifespan manager
    app.state.settings = settings or get_settings()

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    # Include routers
    app.include_router(courses.router, prefix="/api/v1")
    app.include_router(students.router, prefix="/api/v1")
    app.include_router(registrations.router, prefix="/api/v1")
    app.include_router(admin.router, prefix="/api/v1")
    app.include_router(events.router, prefix="/api/v1")

    return app


def main() -> None:
    """Run the API server with uvicorn."""
    import uvicorn  # noqa: PLC0415

    from regflow.logging import get_logger, setup_logging  # noqa: PLC0415

    settings = get_settings()
    setup_logging(settings=settings)
    get_logger("api").info("Starting regflow API on %s:%d", settings.host, settings.port)
    uvicorn.run("regflow.api.app:app", host=settings.host, port=settings.port)


# Default app instance
app = create_app()
