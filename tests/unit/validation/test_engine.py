"""Unit tests for the validation engine."""

import pytest

from regflow.store import Course, Student
from regflow.validation import Catalog, UnknownCourseError, ValidationResult, validate


def make_course(
    code: str,
    credits: int = 3,
    category: str = "elective",
    days: list[str] | None = None,
    start: str | None = None,
    end: str | None = None,
    prerequisites: list[str] | None = None,
    capacity: int = 30,
    enrolled: int = 0,
) -> Course:
    return Course(
        id=f"id-{code.lower()}",
        code=code,
        credits=credits,
        category=category,
        schedule_days=days,
        start_time=start,
        end_time=end,
        prerequisites=prerequisites,
        capacity=capacity,
        enrolled=enrolled,
    )


@pytest.fixture
def student() -> Student:
    return Student(
        id="stu-1",
        name="Ada Obi",
        completed_courses=["MTH101"],
        min_credits=15,
        max_credits=24,
    )


@pytest.fixture
def courses() -> dict[str, Course]:
    return {
        c.code: c
        for c in [
            make_course("CS101", 3, "core", ["Mon", "Wed"], "09:00", "10:30"),
            make_course("CS102", 3, "core", ["Tue"], "09:00", "10:30"),
            make_course("MTH101", 3, "core", ["Thu"], "09:00", "10:30"),
            make_course("CS201", 4, "departmental", ["Tue"], "11:00", "12:00", ["CS101", "MTH101"]),
            make_course("CS301", 4, "departmental", ["Fri"], "11:00", "12:00", ["CS201", "CS102"]),
            make_course("ENG101", 3, "elective", ["Mon"], "10:00", "11:00"),
            make_course("PHY101", 4, "elective", ["Fri"], "08:00", "10:00"),
            make_course("BIO101", 3, "elective", ["Wed"], "14:00", "16:00"),
            make_course("CHM101", 3, "elective", ["Thu"], "14:00", "16:00"),
            make_course("ART101", 3, "elective", capacity=20, enrolled=20),
            make_course("GST111", 2, "general"),
        ]
    }


@pytest.fixture
def catalog(courses: dict[str, Course]) -> Catalog:
    return Catalog(courses.values())


def pick(courses: dict[str, Course], *codes: str) -> list[Course]:
    return [courses[code] for code in codes]


@pytest.mark.unit
class TestCreditLoad:
    """Tests for the credit load rule."""

    def test_below_minimum_gives_exactly_one_error(
        self, student: Student, courses: dict[str, Course], catalog: Catalog
    ) -> None:
        """12 credits against [15, 24] yields only the minimum-load error."""
        selected = pick(courses, "CS101", "CS102", "MTH101", "BIO101")
        result = validate(student, selected, catalog)

        assert result.total_credits == 12
        assert not result.valid
        assert result.errors == ["Minimum credit load not met. Required: 15, Selected: 12"]

    def test_above_maximum(self, courses: dict[str, Course], catalog: Catalog) -> None:
        student = Student(id="s", name="S", completed_courses=["MTH101"], max_credits=10)
        selected = pick(courses, "CS101", "CS102", "MTH101", "BIO101")
        result = validate(student, selected, catalog)

        assert "Maximum credit load exceeded. Allowed: 10, Selected: 12" in result.errors

    def test_exact_bounds_are_valid(
        self, student: Student, courses: dict[str, Course], catalog: Catalog
    ) -> None:
        selected = pick(courses, "CS101", "CS102", "MTH101", "BIO101", "CHM101")
        result = validate(student, selected, catalog)

        assert result.total_credits == 15
        assert result.valid

    def test_empty_selection_fails_minimum(self, student: Student, catalog: Catalog) -> None:
        result = validate(student, [], catalog)

        assert result.errors == ["Minimum credit load not met. Required: 15, Selected: 0"]


@pytest.mark.unit
class TestPrerequisites:
    """Tests for the prerequisite rule."""

    def test_missing_prerequisites_listed_in_course_order(
        self, student: Student, courses: dict[str, Course], catalog: Catalog
    ) -> None:
        selected = pick(courses, "CS301", "CS102", "MTH101", "BIO101", "CHM101")
        result = validate(student, selected, catalog)

        assert "CS301: Missing prerequisites: CS201, CS102" in result.errors

    def test_completed_prerequisites_pass(
        self, student: Student, courses: dict[str, Course], catalog: Catalog
    ) -> None:
        student.completed_courses = ["CS101", "MTH101"]
        selected = pick(courses, "CS201", "CS102", "MTH101", "BIO101", "GST111")
        result = validate(student, selected, catalog)

        assert not any("Missing prerequisites" in e for e in result.errors)

    def test_one_error_per_course(
        self, student: Student, courses: dict[str, Course], catalog: Catalog
    ) -> None:
        student.completed_courses = []
        selected = pick(courses, "CS201", "CS301", "CS102", "BIO101", "CHM101")
        result = validate(student, selected, catalog)

        prereq_errors = [e for e in result.errors if "Missing prerequisites" in e]
        assert prereq_errors == [
            "CS201: Missing prerequisites: CS101, MTH101",
            "CS301: Missing prerequisites: CS201, CS102",
        ]


@pytest.mark.unit
class TestCapacity:
    """Tests for the capacity rule."""

    def test_full_course_always_errors(
        self, student: Student, courses: dict[str, Course], catalog: Catalog
    ) -> None:
        selected = pick(courses, "ART101", "CS101", "CS102", "MTH101", "BIO101")
        result = validate(student, selected, catalog)

        assert "ART101: Course is currently full." in result.errors

    def test_zero_capacity_course_is_full(self, student: Student, catalog: Catalog) -> None:
        closed = make_course("SEM499", credits=15, capacity=0)
        result = validate(student, [closed], catalog)

        assert result.errors == ["SEM499: Course is currently full."]

    def test_seat_left_passes(self, student: Student, catalog: Catalog) -> None:
        almost = make_course("SEM498", credits=15, capacity=10, enrolled=9)
        result = validate(student, [almost], catalog)

        assert result.valid


@pytest.mark.unit
class TestScheduleConflicts:
    """Tests for the schedule conflict rule."""

    def test_overlapping_pair_reported_in_selection_order(
        self, student: Student, courses: dict[str, Course], catalog: Catalog
    ) -> None:
        selected = pick(courses, "ENG101", "CS101", "CS102", "MTH101", "BIO101")
        result = validate(student, selected, catalog)

        assert "Schedule conflict between ENG101 and CS101." in result.errors

    def test_every_conflicting_pair_reported(
        self, student: Student, courses: dict[str, Course], catalog: Catalog
    ) -> None:
        clash = make_course("ENG102", 3, "elective", ["Mon"], "09:30", "10:15")
        selected = [courses["CS101"], courses["ENG101"], clash] + pick(courses, "CS102", "BIO101")
        result = validate(student, selected, catalog)

        conflicts = [e for e in result.errors if e.startswith("Schedule conflict")]
        assert conflicts == [
            "Schedule conflict between CS101 and ENG101.",
            "Schedule conflict between CS101 and ENG102.",
            "Schedule conflict between ENG101 and ENG102.",
        ]

    def test_unscheduled_courses_never_conflict(
        self, student: Student, courses: dict[str, Course], catalog: Catalog
    ) -> None:
        selected = pick(courses, "GST111", "CS101", "CS102", "MTH101", "BIO101", "CHM101")
        result = validate(student, selected, catalog)

        assert not any(e.startswith("Schedule conflict") for e in result.errors)


@pytest.mark.unit
class TestCoreAdvisory:
    """Tests for the core-course warning."""

    def test_single_warning_lists_missing_core_courses(
        self, student: Student, courses: dict[str, Course], catalog: Catalog
    ) -> None:
        selected = pick(courses, "CS101", "BIO101", "CHM101", "PHY101", "GST111")
        result = validate(student, selected, catalog)

        assert result.warnings == ["You have not selected some core courses: CS102, MTH101"]

    def test_warnings_never_affect_validity(
        self, student: Student, courses: dict[str, Course], catalog: Catalog
    ) -> None:
        selected = pick(courses, "BIO101", "CHM101", "PHY101", "GST111", "ENG101")
        result = validate(student, selected, catalog)

        assert result.valid
        assert len(result.warnings) == 1

    def test_no_warning_when_all_core_selected(
        self, student: Student, courses: dict[str, Course], catalog: Catalog
    ) -> None:
        selected = pick(courses, "CS101", "CS102", "MTH101", "BIO101", "CHM101")
        result = validate(student, selected, catalog)

        assert result.warnings == []


@pytest.mark.unit
class TestValidate:
    """Tests for validate as a whole."""

    def test_errors_ordered_by_rule(
        self, student: Student, courses: dict[str, Course], catalog: Catalog
    ) -> None:
        """Credit load, then prerequisites, then capacity, then conflicts."""
        student.completed_courses = []
        selected = pick(courses, "ENG101", "CS101", "ART101", "CS201")
        result = validate(student, selected, catalog)

        assert result.errors == [
            "Minimum credit load not met. Required: 15, Selected: 13",
            "CS201: Missing prerequisites: CS101, MTH101",
            "ART101: Course is currently full.",
            "Schedule conflict between ENG101 and CS101.",
        ]

    def test_deterministic(
        self, student: Student, courses: dict[str, Course], catalog: Catalog
    ) -> None:
        selected = pick(courses, "ENG101", "CS101", "ART101", "CS301", "GST111")
        first = validate(student, selected, catalog)
        second = validate(student, selected, catalog)

        assert first == second
        assert first.to_dict() == second.to_dict()

    def test_repeated_course_counts_once(
        self, student: Student, courses: dict[str, Course], catalog: Catalog
    ) -> None:
        cs101 = courses["CS101"]
        result = validate(student, [cs101, cs101], catalog)

        assert result.total_credits == 3
        assert not any(e.startswith("Schedule conflict") for e in result.errors)

    def test_result_to_dict(self) -> None:
        result = ValidationResult(errors=["x"], warnings=["w"], total_credits=9)
        assert result.to_dict() == {
            "valid": False,
            "errors": ["x"],
            "warnings": ["w"],
            "total_credits": 9,
        }


@pytest.mark.unit
class TestCatalog:
    """Tests for the Catalog handle."""

    def test_resolve_keeps_order_and_drops_repeats(
        self, courses: dict[str, Course], catalog: Catalog
    ) -> None:
        resolved = catalog.resolve(["id-cs102", "id-cs101", "id-cs102"])
        assert [c.code for c in resolved] == ["CS102", "CS101"]

    def test_resolve_lists_every_unknown_id(self, catalog: Catalog) -> None:
        with pytest.raises(UnknownCourseError) as exc_info:
            catalog.resolve(["id-cs101", "nope-1", "nope-2"])

        assert exc_info.value.course_ids == ["nope-1", "nope-2"]
        assert isinstance(exc_info.value, LookupError)

    def test_core_courses_in_catalog_order(self, catalog: Catalog) -> None:
        assert [c.code for c in catalog.core_courses()] == ["CS101", "CS102", "MTH101"]

    def test_membership_and_length(self, catalog: Catalog) -> None:
        assert "id-cs101" in catalog
        assert "id-none" not in catalog
        assert len(catalog) == 11
        assert catalog.get("id-none") is None
