"""Schedule - Weekly meeting patterns and conflict detection."""

from regflow.schedule.detector import conflicts
from regflow.schedule.exceptions import InvalidMeetingPatternError
from regflow.schedule.models import MeetingPattern, format_minutes, parse_time_of_day

__all__ = [
    "InvalidMeetingPatternError",
    "MeetingPattern",
    "conflicts",
    "format_minutes",
    "parse_time_of_day",
]
