"""Meeting pattern model."""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass

from regflow.schedule.exceptions import InvalidMeetingPatternError

_TIME_PATTERN = re.compile(r"^(\d{1,2}):(\d{2})$")


def parse_time_of_day(value: str) -> int:
    """Parse an "HH:MM" 24-hour string into minutes since midnight.

    Single-digit hours ("9:30") are accepted.

    Raises:
        InvalidMeetingPatternError: If the string is not a valid time of day.
    """
    match = _TIME_PATTERN.match(value.strip()) if isinstance(value, str) else None
    if match is None:
        raise InvalidMeetingPatternError(f"Malformed time of day: {value!r}")
    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23 or minutes > 59:
        raise InvalidMeetingPatternError(f"Time of day out of range: {value!r}")
    return hours * 60 + minutes


def format_minutes(minutes: int) -> str:
    """Format minutes since midnight as canonical "HH:MM"."""
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


@dataclass(frozen=True)
class MeetingPattern:
    """A course's recurring weekly schedule.

    Attributes:
        days: Weekday tokens in catalog order (e.g. ("Mon", "Wed")).
        start: Start time in minutes since midnight.
        end: End time in minutes since midnight (exclusive).
    """

    days: tuple[str, ...]
    start: int
    end: int

    def __post_init__(self) -> None:
        if self.start >= self.end:
            raise InvalidMeetingPatternError(
                f"Meeting must end after it starts: "
                f"{format_minutes(self.start)}-{format_minutes(self.end)}"
            )

    @classmethod
    def parse(cls, days: Iterable[str], start_time: str, end_time: str) -> MeetingPattern:
        """Build a pattern from weekday tokens and "HH:MM" strings.

        Blank weekday tokens are dropped and duplicates collapsed, keeping
        first-seen order.

        Raises:
            InvalidMeetingPatternError: If no weekday remains or a time is malformed.
        """
        tokens: list[str] = []
        seen: set[str] = set()
        for day in days:
            token = day.strip()
            if token and token.casefold() not in seen:
                seen.add(token.casefold())
                tokens.append(token)
        if not tokens:
            raise InvalidMeetingPatternError("Meeting pattern has no weekdays")
        return cls(
            days=tuple(tokens),
            start=parse_time_of_day(start_time),
            end=parse_time_of_day(end_time),
        )

    @property
    def start_time(self) -> str:
        return format_minutes(self.start)

    @property
    def end_time(self) -> str:
        return format_minutes(self.end)

    @property
    def day_keys(self) -> frozenset[str]:
        """Case-folded weekday tokens used for comparison."""
        return frozenset(day.casefold() for day in self.days)

    def is_empty(self) -> bool:
        return not self.days
