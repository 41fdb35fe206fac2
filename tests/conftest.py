"""Shared pytest fixtures and configuration."""

import pytest

from regflow.store import RecordStore, RegistrationStatus


# Register custom markers
def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers for test categorization."""
    config.addinivalue_line("markers", "unit: fast tests with no external dependencies")
    config.addinivalue_line("markers", "integration: component interaction tests")


# Catalog used across store, workflow, ledger, review and API tests.
# ART101 has a single seat; ENG101 clashes with CS101 on Monday morning.
COURSE_DOCUMENTS = [
    {
        "id": "c-cs101",
        "code": "CS101",
        "title": "Introduction to Programming",
        "credits": 3,
        "category": "core",
        "schedule": {"days": ["Mon", "Wed"], "startTime": "09:00", "endTime": "10:30"},
        "capacity": 30,
    },
    {
        "id": "c-cs201",
        "code": "CS201",
        "title": "Data Structures",
        "credits": 4,
        "category": "core",
        "prerequisites": ["CS101"],
        "schedule": {"days": ["Tue", "Thu"], "startTime": "09:00", "endTime": "10:30"},
        "capacity": 30,
    },
    {
        "id": "c-mth101",
        "code": "MTH101",
        "title": "Calculus I",
        "credits": 3,
        "category": "core",
        "schedule": {"days": ["Mon", "Wed"], "startTime": "11:00", "endTime": "12:30"},
        "capacity": 30,
    },
    {
        "id": "c-phy101",
        "code": "PHY101",
        "title": "General Physics",
        "credits": 4,
        "category": "elective",
        "schedule": {"days": ["Fri"], "startTime": "09:00", "endTime": "12:00"},
        "capacity": 30,
    },
    {
        "id": "c-gst111",
        "code": "GST111",
        "title": "Communication in English",
        "credits": 2,
        "type": "gst",
        "schedule": {"days": ["Tue"], "startTime": "14:00", "endTime": "16:00"},
        "capacity": 100,
    },
    {
        "id": "c-eng101",
        "code": "ENG101",
        "title": "Technical Writing",
        "credits": 3,
        "category": "elective",
        "schedule": {"days": ["Mon"], "startTime": "10:00", "endTime": "11:00"},
        "capacity": 30,
    },
    {
        "id": "c-art101",
        "code": "ART101",
        "title": "Studio Art",
        "credits": 3,
        "category": "elective",
        "capacity": 1,
    },
]

# 16 credits, no clashes, prerequisites met for a student who passed CS101
VALID_SELECTION = ["c-cs201", "c-mth101", "c-phy101", "c-gst111", "c-art101"]


def _seed(store: RecordStore) -> RecordStore:
    """Load the shared catalog and two active students into a store."""
    store.import_courses(COURSE_DOCUMENTS)
    for student_id, name in (("stu-1", "Ada Obi"), ("stu-2", "Bayo Ade")):
        store.put_student(
            student_id,
            {
                "name": name,
                "email": f"{student_id}@example.edu",
                "completedCourses": ["CS101"],
                "minCredits": 15,
                "maxCredits": 24,
            },
        )
    return store


def _make_pending(store: RecordStore, student_id: str, course_ids: list[str]) -> str:
    registration = store.create_registration(
        student_id=student_id,
        session_label="2025/2026",
        course_ids=course_ids,
        status=RegistrationStatus.PENDING,
        total_credits=0,
    )
    return registration.id


# Shared fixtures


@pytest.fixture
def store():
    """Create an in-memory RecordStore."""
    s = RecordStore(":memory:")
    yield s
    s.close()


@pytest.fixture
def seeded_store(store: RecordStore) -> RecordStore:
    """In-memory RecordStore with the shared catalog and students."""
    return _seed(store)


@pytest.fixture
def seed():
    """Function loading the shared catalog and students into any store."""
    return _seed


@pytest.fixture
def make_pending():
    """Function inserting a pending registration directly, returning its ID."""
    return _make_pending


@pytest.fixture
def valid_selection() -> list[str]:
    """16 credits, no clashes, prerequisites met for stu-1 and stu-2."""
    return list(VALID_SELECTION)
