"""Server-Sent Events (SSE) endpoint for registration dashboards."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from fastapi import APIRouter, Query
from fastapi.responses import StreamingResponse

from regflow.api.dependencies import EventManagerDep, WorkflowDep
from regflow.api.models import registration_to_response

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

    from regflow.api.events import Event

router = APIRouter(prefix="/events", tags=["events"])

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


@router.get("/stream")
async def event_stream(
    event_manager: EventManagerDep,
    workflow: WorkflowDep,
    student_id: str | None = Query(default=None, description="Only this student's events"),
) -> StreamingResponse:
    """Subscribe to registration and account events.

    A student-scoped stream opens with a ``registration_snapshot`` event
    holding the student's live registration. Unknown students get a 404
    before the stream starts. Heartbeats fill quiet periods.
    """
    snapshot: Event | None = None
    if student_id is not None:
        # Sync store read, kept off the event loop
        registration = await asyncio.to_thread(workflow.get_active_registration, student_id)
        snapshot = event_manager.create_snapshot_event(
            student_id,
            registration_to_response(registration).model_dump(mode="json")
            if registration is not None
            else None,
        )

    subscriber = event_manager.subscribe(student_id)

    async def generate() -> AsyncGenerator[str, None]:
        try:
            if snapshot is not None:
                yield snapshot.to_sse()
            while True:
                try:
                    event = await asyncio.wait_for(
                        subscriber.queue.get(), timeout=event_manager._heartbeat_interval
                    )
                except TimeoutError:
                    event = event_manager.create_heartbeat_event()
                yield event.to_sse()
        except asyncio.CancelledError:
            pass
        finally:
            event_manager.unsubscribe(subscriber.id)

    return StreamingResponse(generate(), media_type="text/event-stream", headers=SSE_HEADERS)
