"""Schema defaulting for loosely-shaped student and course documents.

Documents imported from older exports may be missing fields. They are
normalised here, once, before they reach the typed models; nothing past
the store boundary supplies fallbacks of its own.
"""

from __future__ import annotations

from typing import Any

from regflow.schedule import InvalidMeetingPatternError, MeetingPattern
from regflow.store.models import CourseCategory, StudentStatus

STUDENT_DEFAULTS: dict[str, Any] = {
    "name": "Unknown",
    "email": "",
    "major": "Undeclared",
    "faculty": "General Studies",
    "level": "100",
    "session": "2025/2026",
    "gpa": 0.0,
    "min_credits": 15,
    "max_credits": 24,
    "status": StudentStatus.ACTIVE.value,
}

# camelCase keys used by exported documents
_STUDENT_ALIASES = {
    "completedCourses": "completed_courses",
    "currentRegistrations": "current_registrations",
    "minCredits": "min_credits",
    "maxCredits": "max_credits",
}

# Older catalogs label general-studies courses "gst"
_LEGACY_CATEGORIES = {"gst": CourseCategory.GENERAL.value}

_COURSE_ALIASES = {
    "type": "category",
    "startTime": "start_time",
    "endTime": "end_time",
}


def _falsy_to_default(value: Any, default: Any) -> Any:
    return default if value in (None, "") else value


def migrate_student_document(
    student_id: str,
    document: dict[str, Any],
    defaults: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Return a complete student field mapping for ``Student(**fields)``.

    Args:
        student_id: Account identifier from the identity provider.
        document: Raw document, snake_case or camelCase keys.
        defaults: Overrides for STUDENT_DEFAULTS (e.g. configured credit bounds).

    Raises:
        ValueError: If status is not a known StudentStatus.
    """
    merged = {**STUDENT_DEFAULTS, **(defaults or {})}
    data = {_STUDENT_ALIASES.get(key, key): value for key, value in document.items()}

    fields: dict[str, Any] = {"id": student_id}
    for key, default in merged.items():
        fields[key] = _falsy_to_default(data.get(key), default)

    fields["status"] = StudentStatus(fields["status"]).value
    fields["gpa"] = float(fields["gpa"])
    fields["min_credits"] = int(fields["min_credits"])
    fields["max_credits"] = int(fields["max_credits"])
    fields["completed_courses"] = [str(c) for c in data.get("completed_courses") or []]
    fields["current_registrations"] = [str(c) for c in data.get("current_registrations") or []]
    return fields


def migrate_course_document(document: dict[str, Any]) -> dict[str, Any]:
    """Return a complete course field mapping for ``Course(**fields)``.

    Flattens a nested ``schedule`` object, canonicalises its times to
    "HH:MM" and rejects malformed ones. A schedule must give weekdays and
    both times, or none of them.

    Raises:
        KeyError: If ``code`` or ``credits`` is missing.
        ValueError: If category is unknown or credits/capacity are invalid.
        InvalidMeetingPatternError: If the schedule is incomplete or malformed.
    """
    data = {_COURSE_ALIASES.get(key, key): value for key, value in document.items()}
    schedule = data.pop("schedule", None) or {}
    days = data.get("schedule_days", schedule.get("days")) or []
    start = data.get("start_time", schedule.get("startTime", schedule.get("start_time")))
    end = data.get("end_time", schedule.get("endTime", schedule.get("end_time")))

    credits = int(data["credits"])
    if credits <= 0:
        raise ValueError(f"Course credits must be positive, got {credits}")
    capacity = int(data.get("capacity") or 0)
    enrolled = int(data.get("enrolled") or 0)
    if capacity < 0 or enrolled < 0:
        raise ValueError("Course capacity and enrolled must be non-negative")
    if enrolled > capacity:
        raise ValueError(f"Course enrolled {enrolled} exceeds capacity {capacity}")
    category = str(data.get("category") or CourseCategory.ELECTIVE.value)

    fields: dict[str, Any] = {
        "code": str(data["code"]),
        "credits": credits,
        "title": data.get("title") or "",
        "description": data.get("description") or "",
        "category": CourseCategory(_LEGACY_CATEGORIES.get(category, category)).value,
        "instructor": data.get("instructor") or "",
        "semester": data.get("semester") or "",
        "prerequisites": [str(p) for p in data.get("prerequisites") or []],
        "capacity": capacity,
        "enrolled": enrolled,
        "schedule_days": [],
        "start_time": None,
        "end_time": None,
    }
    if data.get("id"):
        fields["id"] = str(data["id"])

    if days or start or end:
        if not (days and start and end):
            raise InvalidMeetingPatternError(
                f"Incomplete schedule for {fields['code']}: "
                f"days={list(days)!r}, start={start!r}, end={end!r}"
            )
        pattern = MeetingPattern.parse(days, start, end)
        fields["schedule_days"] = list(pattern.days)
        fields["start_time"] = pattern.start_time
        fields["end_time"] = pattern.end_time
    return fields
