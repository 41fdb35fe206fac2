"""Event manager for Server-Sent Events (SSE).

This is the notification layer: the workflow and review service report
registration and account outcomes here, and the dashboard stream relays
them to subscribers.
"""

from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any
from uuid import uuid4


class EventType(str, Enum):
    """Types of events that can be emitted."""

    REGISTRATION_CREATED = "registration_created"
    REGISTRATION_SUBMITTED = "registration_submitted"
    REGISTRATION_APPROVED = "registration_approved"
    REGISTRATION_REJECTED = "registration_rejected"
    CAPACITY_RACE = "capacity_race"
    USER_STATUS_CHANGED = "user_status_changed"
    REGISTRATION_SNAPSHOT = "registration_snapshot"
    HEARTBEAT = "heartbeat"


def _now() -> str:
    return datetime.now(UTC).isoformat().replace("+00:00", "Z")


@dataclass
class Event:
    """An event to be sent via SSE."""

    event_type: EventType
    data: dict[str, Any]
    student_id: str | None = None

    def to_sse(self) -> str:
        """Convert to SSE format."""
        return f"event: {self.event_type.value}\ndata: {json.dumps(self.data)}\n\n"


@dataclass
class Subscriber:
    """A subscriber to the event stream."""

    id: str
    queue: asyncio.Queue[Event]
    student_id: str | None = None  # None means subscribe to every student

    @classmethod
    def create(cls, student_id: str | None = None) -> Subscriber:
        """Create a new subscriber."""
        return cls(id=str(uuid4()), queue=asyncio.Queue(), student_id=student_id)

    def wants(self, event: Event) -> bool:
        return (
            self.student_id is None
            or event.student_id is None
            or self.student_id == event.student_id
        )


@dataclass
class EventManager:
    """Manager for SSE events."""

    _subscribers: dict[str, Subscriber] = field(default_factory=dict)
    _heartbeat_interval: int = 30  # seconds

    def subscribe(self, student_id: str | None = None) -> Subscriber:
        """Subscribe a client to events.

        Args:
            student_id: Optional student ID to filter events. None means all students.

        Returns:
            Subscriber instance for receiving events.
        """
        subscriber = Subscriber.create(student_id)
        self._subscribers[subscriber.id] = subscriber
        return subscriber

    def unsubscribe(self, subscriber_id: str) -> None:
        """Unsubscribe a client from events.

        Args:
            subscriber_id: ID of the subscriber to remove.
        """
        self._subscribers.pop(subscriber_id, None)

    async def emit(self, event: Event) -> None:
        """Emit an event to all matching subscribers."""
        for subscriber in list(self._subscribers.values()):
            if subscriber.wants(event):
                await subscriber.queue.put(event)

    def emit_sync(self, event: Event) -> None:
        """Emit an event synchronously (for use in non-async contexts)."""
        for subscriber in list(self._subscribers.values()):
            if subscriber.wants(event):
                subscriber.queue.put_nowait(event)

    @property
    def subscriber_count(self) -> int:
        """Get the number of active subscribers."""
        return len(self._subscribers)

    # Convenience methods for emitting specific event types

    def emit_registration_created(
        self, registration_id: str, student_id: str, status: str
    ) -> None:
        """Emit a registration_created event."""
        self.emit_sync(
            Event(
                event_type=EventType.REGISTRATION_CREATED,
                student_id=student_id,
                data={
                    "registration_id": registration_id,
                    "student_id": student_id,
                    "status": status,
                },
            )
        )

    def emit_registration_submitted(
        self, registration_id: str, student_id: str, total_credits: int, warnings: list[str]
    ) -> None:
        """Emit a registration_submitted event."""
        self.emit_sync(
            Event(
                event_type=EventType.REGISTRATION_SUBMITTED,
                student_id=student_id,
                data={
                    "registration_id": registration_id,
                    "student_id": student_id,
                    "total_credits": total_credits,
                    "warnings": warnings,
                },
            )
        )

    def emit_registration_approved(self, registration_id: str, student_id: str) -> None:
        """Emit a registration_approved event."""
        self.emit_sync(
            Event(
                event_type=EventType.REGISTRATION_APPROVED,
                student_id=student_id,
                data={"registration_id": registration_id, "student_id": student_id},
            )
        )

    def emit_registration_rejected(self, registration_id: str, student_id: str) -> None:
        """Emit a registration_rejected event."""
        self.emit_sync(
            Event(
                event_type=EventType.REGISTRATION_REJECTED,
                student_id=student_id,
                data={"registration_id": registration_id, "student_id": student_id},
            )
        )

    def emit_capacity_race(self, registration_ids: list[str], course_codes: list[str]) -> None:
        """Emit a capacity_race event for administrators."""
        self.emit_sync(
            Event(
                event_type=EventType.CAPACITY_RACE,
                data={
                    "registration_ids": registration_ids,
                    "course_codes": course_codes,
                    "timestamp": _now(),
                },
            )
        )

    def emit_user_status_changed(self, student_id: str, status: str) -> None:
        """Emit a user_status_changed event."""
        self.emit_sync(
            Event(
                event_type=EventType.USER_STATUS_CHANGED,
                student_id=student_id,
                data={"student_id": student_id, "status": status},
            )
        )

    def create_snapshot_event(
        self, student_id: str, registration: dict[str, Any] | None
    ) -> Event:
        """Create the opening event of a student-scoped stream.

        Carries the student's live registration (or None) so a dashboard can
        render before the first change arrives.
        """
        return Event(
            event_type=EventType.REGISTRATION_SNAPSHOT,
            student_id=student_id,
            data={"student_id": student_id, "registration": registration, "timestamp": _now()},
        )

    def create_heartbeat_event(self) -> Event:
        """Create a heartbeat event."""
        return Event(
            event_type=EventType.HEARTBEAT,
            student_id=None,  # Heartbeat goes to all subscribers
            data={"timestamp": _now()},
        )
