"""Legal status transitions for registrations and student accounts."""

from __future__ import annotations

from regflow.store import RegistrationStatus, StudentStatus
from regflow.workflow.exceptions import InvalidTransitionError, UnsupportedTransitionError

REGISTRATION_TRANSITIONS: dict[RegistrationStatus, frozenset[RegistrationStatus]] = {
    RegistrationStatus.DRAFT: frozenset({RegistrationStatus.DRAFT, RegistrationStatus.PENDING}),
    RegistrationStatus.PENDING: frozenset(
        {RegistrationStatus.APPROVED, RegistrationStatus.REJECTED}
    ),
    RegistrationStatus.APPROVED: frozenset(),
    RegistrationStatus.REJECTED: frozenset(),
    RegistrationStatus.OVERRIDDEN: frozenset(),
}

TERMINAL_STATUSES = frozenset({RegistrationStatus.APPROVED, RegistrationStatus.REJECTED})

ACCOUNT_TRANSITIONS: dict[StudentStatus, frozenset[StudentStatus]] = {
    StudentStatus.PENDING_APPROVAL: frozenset({StudentStatus.ACTIVE, StudentStatus.REJECTED}),
    StudentStatus.ACTIVE: frozenset(),
    StudentStatus.REJECTED: frozenset(),
}


def ensure_registration_transition(
    registration_id: str, current: RegistrationStatus, target: RegistrationStatus
) -> None:
    """Raise unless ``current -> target`` is a legal registration transition.

    Raises:
        UnsupportedTransitionError: If target is OVERRIDDEN.
        InvalidTransitionError: For any other illegal transition.
    """
    if target is RegistrationStatus.OVERRIDDEN:
        raise UnsupportedTransitionError(registration_id, current.value, target.value)
    if target not in REGISTRATION_TRANSITIONS[current]:
        raise InvalidTransitionError(registration_id, current.value, target.value)


def ensure_account_transition(
    student_id: str, current: StudentStatus, target: StudentStatus
) -> None:
    """Raise unless ``current -> target`` is a legal account transition.

    Raises:
        InvalidTransitionError: If the transition is not allowed.
    """
    if target not in ACCOUNT_TRANSITIONS[current]:
        raise InvalidTransitionError(student_id, current.value, target.value)
