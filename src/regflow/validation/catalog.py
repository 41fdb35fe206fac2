"""Catalog handle passed explicitly to validation and approval."""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from regflow.validation.exceptions import UnknownCourseError
from regflow.validation.models import CORE_CATEGORY, CourseRecord


class Catalog:
    """Immutable, ordered view of the course catalog.

    Built from a store snapshot or from test fixtures; iteration follows the
    order the courses were supplied in.
    """

    def __init__(self, courses: Iterable[CourseRecord]) -> None:
        self._courses: tuple[CourseRecord, ...] = tuple(courses)
        self._by_id = {course.id: course for course in self._courses}

    def __iter__(self) -> Iterator[CourseRecord]:
        return iter(self._courses)

    def __len__(self) -> int:
        return len(self._courses)

    def __contains__(self, course_id: object) -> bool:
        return course_id in self._by_id

    def get(self, course_id: str) -> CourseRecord | None:
        return self._by_id.get(course_id)

    def resolve(self, course_ids: Iterable[str]) -> list[CourseRecord]:
        """Map selected IDs to courses, dropping repeats and keeping order.

        Raises:
            UnknownCourseError: Listing every ID not in the catalog.
        """
        seen: set[str] = set()
        courses: list[CourseRecord] = []
        missing: list[str] = []
        for course_id in course_ids:
            if course_id in seen:
                continue
            seen.add(course_id)
            course = self._by_id.get(course_id)
            if course is None:
                missing.append(course_id)
            else:
                courses.append(course)
        if missing:
            raise UnknownCourseError(missing)
        return courses

    def core_courses(self) -> list[CourseRecord]:
        return [course for course in self._courses if course.category == CORE_CATEGORY]
