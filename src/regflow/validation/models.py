"""Data models for the validation module."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any, Protocol

from regflow.schedule import MeetingPattern

CORE_CATEGORY = "core"


class CourseRecord(Protocol):
    """Course fields the validator reads."""

    id: str
    code: str
    credits: int
    category: str
    prerequisites: Sequence[str]
    capacity: int
    enrolled: int

    @property
    def meeting_pattern(self) -> MeetingPattern | None: ...


class StudentRecord(Protocol):
    """Student fields the validator reads."""

    completed_courses: Sequence[str]
    min_credits: int
    max_credits: int


@dataclass(frozen=True)
class ValidationResult:
    """Verdict for one proposed course selection.

    Attributes:
        errors: Every rule violation, in rule order.
        warnings: Advisory messages; never affect validity.
        total_credits: Credit sum of the selection.
    """

    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    total_credits: int = 0

    @property
    def valid(self) -> bool:
        return not self.errors

    def to_dict(self) -> dict[str, Any]:
        return {
            "valid": self.valid,
            "errors": list(self.errors),
            "warnings": list(self.warnings),
            "total_credits": self.total_credits,
        }
