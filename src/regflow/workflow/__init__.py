"""Workflow package - Registration state machine."""

from regflow.workflow.exceptions import (
    InvalidTransitionError,
    RegistrationValidationError,
    StudentNotActiveError,
    UnsupportedTransitionError,
    WorkflowError,
)
from regflow.workflow.models import SubmissionResult
from regflow.workflow.transitions import (
    ACCOUNT_TRANSITIONS,
    REGISTRATION_TRANSITIONS,
    TERMINAL_STATUSES,
    ensure_account_transition,
    ensure_registration_transition,
)
from regflow.workflow.workflow import RegistrationWorkflow

__all__ = [
    "ACCOUNT_TRANSITIONS",
    "InvalidTransitionError",
    "REGISTRATION_TRANSITIONS",
    "RegistrationValidationError",
    "RegistrationWorkflow",
    "StudentNotActiveError",
    "SubmissionResult",
    "TERMINAL_STATUSES",
    "UnsupportedTransitionError",
    "WorkflowError",
    "ensure_account_transition",
    "ensure_registration_transition",
]
