"""Exceptions for the validation module."""


class UnknownCourseError(LookupError):
    """A selected course ID is not present in the catalog."""

    def __init__(self, course_ids: list[str]) -> None:
        self.course_ids = course_ids
        super().__init__(f"Unknown course ids: {', '.join(course_ids)}")
