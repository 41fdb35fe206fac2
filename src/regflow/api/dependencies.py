"""FastAPI dependencies for dependency injection."""

from __future__ import annotations

from collections.abc import Generator  # noqa: TC003
from typing import TYPE_CHECKING, Annotated

from fastapi import Depends

from regflow.api.events import EventManager
from regflow.review import ReviewService
from regflow.store import RecordStore
from regflow.workflow import RegistrationWorkflow

if TYPE_CHECKING:
    from regflow.config import Settings

# Global instances (initialized on app startup)
_store: RecordStore | None = None
_event_manager: EventManager | None = None
_workflow: RegistrationWorkflow | None = None
_review: ReviewService | None = None


def init_store(settings: Settings) -> RecordStore:
    """Initialize the global RecordStore instance."""
    global _store  # noqa: PLW0603
    _store = RecordStore(
        settings.db_path,
        busy_timeout=settings.busy_timeout_seconds,
        student_defaults={
            "session": settings.default_session,
            "min_credits": settings.default_min_credits,
            "max_credits": settings.default_max_credits,
        },
    )
    return _store


def close_store() -> None:
    """Close the global RecordStore instance."""
    global _store  # noqa: PLW0603
    if _store is not None:
        _store.close()
        _store = None


def get_store() -> Generator[RecordStore, None, None]:
    """Dependency that provides the RecordStore instance."""
    if _store is None:
        raise RuntimeError("RecordStore not initialized. Call init_store() first.")
    yield _store


StoreDep = Annotated[RecordStore, Depends(get_store)]


def init_event_manager() -> EventManager:
    """Initialize the global EventManager instance."""
    global _event_manager  # noqa: PLW0603
    _event_manager = EventManager()
    return _event_manager


def get_event_manager() -> Generator[EventManager, None, None]:
    """Dependency that provides the EventManager instance."""
    if _event_manager is None:
        raise RuntimeError("EventManager not initialized. Call init_event_manager() first.")
    yield _event_manager


EventManagerDep = Annotated[EventManager, Depends(get_event_manager)]


def init_workflow(workflow: RegistrationWorkflow, review: ReviewService) -> None:
    """Initialize the global workflow and review service."""
    global _workflow, _review  # noqa: PLW0603
    _workflow = workflow
    _review = review


def close_workflow() -> None:
    """Drop the global workflow and review service."""
    global _workflow, _review  # noqa: PLW0603
    _workflow = None
    _review = None


def get_workflow() -> Generator[RegistrationWorkflow, None, None]:
    """Dependency that provides the RegistrationWorkflow instance."""
    if _workflow is None:
        raise RuntimeError("Workflow not initialized. Call init_workflow() first.")
    yield _workflow


WorkflowDep = Annotated[RegistrationWorkflow, Depends(get_workflow)]


def get_review() -> Generator[ReviewService, None, None]:
    """Dependency that provides the ReviewService instance."""
    if _review is None:
        raise RuntimeError("ReviewService not initialized. Call init_workflow() first.")
    yield _review


ReviewDep = Annotated[ReviewService, Depends(get_review)]
