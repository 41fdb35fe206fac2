"""Exceptions for the schedule module."""


class InvalidMeetingPatternError(ValueError):
    """Meeting pattern has a malformed time or an empty/inverted interval."""
