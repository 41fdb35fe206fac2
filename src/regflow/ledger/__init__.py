"""Ledger package - Atomic enrollment commits."""

from regflow.ledger.exceptions import (
    CapacityRaceError,
    LedgerError,
    RegistrationNotPendingError,
)
from regflow.ledger.ledger import EnrollmentLedger
from regflow.ledger.models import CommitResult

__all__ = [
    "CapacityRaceError",
    "CommitResult",
    "EnrollmentLedger",
    "LedgerError",
    "RegistrationNotPendingError",
]
