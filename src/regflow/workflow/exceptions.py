"""Exceptions for the Workflow module."""

from __future__ import annotations


class WorkflowError(Exception):
    """Base exception for workflow errors."""

    pass


class RegistrationValidationError(WorkflowError):
    """Selection failed validation; the record was not submitted.

    Attributes:
        errors: Every validation error, verbatim and in rule order.
        warnings: Advisory messages from the same verdict.
        registration_id: The draft left untouched, if there was one.
    """

    def __init__(
        self,
        errors: list[str],
        warnings: list[str] | None = None,
        registration_id: str | None = None,
    ) -> None:
        self.errors = list(errors)
        self.warnings = list(warnings or [])
        self.registration_id = registration_id
        super().__init__("; ".join(self.errors))


class InvalidTransitionError(WorkflowError):
    """The requested status change is not allowed from the current status."""

    def __init__(self, subject_id: str, current: str, target: str) -> None:
        self.subject_id = subject_id
        self.current = current
        self.target = target
        super().__init__(f"Cannot move '{subject_id}' from {current} to {target}")


class UnsupportedTransitionError(InvalidTransitionError):
    """Transition into a status that has no defined semantics (overridden)."""


class StudentNotActiveError(WorkflowError):
    """Only active accounts may create or submit registrations."""

    def __init__(self, student_id: str, status: str) -> None:
        self.student_id = student_id
        self.status = status
        super().__init__(f"Student '{student_id}' is {status}, not active")
