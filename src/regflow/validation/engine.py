"""Validation engine - decides whether a course selection is admissible.

Rules, all evaluated on every call:

1. Credit load within the student's [min_credits, max_credits] bounds.
2. Every prerequisite of every selected course completed.
3. No selected course already full (snapshot; the ledger re-checks).
4. No two selected courses meet at overlapping times on a shared day.
5. Advisory only: core courses from the catalog missing from the selection.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from regflow.schedule import conflicts
from regflow.validation.catalog import Catalog
from regflow.validation.models import CourseRecord, StudentRecord, ValidationResult


def credit_total(courses: Iterable[CourseRecord]) -> int:
    """Sum of credit weights."""
    return sum(course.credits for course in courses)


def _dedupe(courses: Sequence[CourseRecord]) -> list[CourseRecord]:
    seen: set[str] = set()
    unique: list[CourseRecord] = []
    for course in courses:
        if course.id not in seen:
            seen.add(course.id)
            unique.append(course)
    return unique


def check_credit_load(student: StudentRecord, total: int) -> list[str]:
    errors = []
    if total < student.min_credits:
        errors.append(
            f"Minimum credit load not met. Required: {student.min_credits}, Selected: {total}"
        )
    if total > student.max_credits:
        errors.append(
            f"Maximum credit load exceeded. Allowed: {student.max_credits}, Selected: {total}"
        )
    return errors


def check_prerequisites(student: StudentRecord, courses: Sequence[CourseRecord]) -> list[str]:
    completed = set(student.completed_courses)
    errors = []
    for course in courses:
        missing = [code for code in course.prerequisites if code not in completed]
        if missing:
            errors.append(f"{course.code}: Missing prerequisites: {', '.join(missing)}")
    return errors


def check_capacity(courses: Sequence[CourseRecord]) -> list[str]:
    return [
        f"{course.code}: Course is currently full."
        for course in courses
        if course.enrolled >= course.capacity
    ]


def check_schedule_conflicts(courses: Sequence[CourseRecord]) -> list[str]:
    """One error per conflicting pair, in (i, j) selection-index order."""
    patterns = [course.meeting_pattern for course in courses]
    errors = []
    for i in range(len(courses)):
        for j in range(i + 1, len(courses)):
            if conflicts(patterns[i], patterns[j]):
                errors.append(
                    f"Schedule conflict between {courses[i].code} and {courses[j].code}."
                )
    return errors


def core_course_warnings(courses: Sequence[CourseRecord], catalog: Catalog) -> list[str]:
    selected = {course.id for course in courses}
    missing = [core.code for core in catalog.core_courses() if core.id not in selected]
    if not missing:
        return []
    return [f"You have not selected some core courses: {', '.join(missing)}"]


def validate(
    student: StudentRecord,
    selected_courses: Sequence[CourseRecord],
    catalog: Catalog,
) -> ValidationResult:
    """Evaluate a proposed selection against the student record and catalog.

    Pure and deterministic: identical inputs give identical, identically
    ordered errors and warnings. Repeated courses count once.

    Args:
        student: The student proposing the selection.
        selected_courses: Courses in selection order.
        catalog: Full catalog, used for the core-course advisory.

    Returns:
        ValidationResult with every error and warning found.
    """
    courses = _dedupe(selected_courses)
    total = credit_total(courses)

    errors: list[str] = []
    errors.extend(check_credit_load(student, total))
    errors.extend(check_prerequisites(student, courses))
    errors.extend(check_capacity(courses))
    errors.extend(check_schedule_conflicts(courses))

    return ValidationResult(
        errors=errors,
        warnings=core_course_warnings(courses, catalog),
        total_credits=total,
    )
