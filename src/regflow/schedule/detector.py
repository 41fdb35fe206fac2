"""Schedule conflict detection."""

from __future__ import annotations

from regflow.schedule.models import MeetingPattern


def conflicts(a: MeetingPattern | None, b: MeetingPattern | None) -> bool:
    """Decide whether two weekly meeting patterns overlap.

    Patterns conflict when they share a weekday and their half-open
    intervals ``[start, end)`` intersect. A missing or day-less pattern
    never conflicts.
    """
    if a is None or b is None or a.is_empty() or b.is_empty():
        return False
    if a.day_keys.isdisjoint(b.day_keys):
        return False
    return a.start < b.end and b.start < a.end
