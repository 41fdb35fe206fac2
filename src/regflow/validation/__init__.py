"""Validation - Admissibility rules for a proposed course selection."""

from regflow.validation.catalog import Catalog
from regflow.validation.engine import credit_total, validate
from regflow.validation.exceptions import UnknownCourseError
from regflow.validation.models import CourseRecord, StudentRecord, ValidationResult

__all__ = [
    "Catalog",
    "CourseRecord",
    "StudentRecord",
    "UnknownCourseError",
    "ValidationResult",
    "credit_total",
    "validate",
]
