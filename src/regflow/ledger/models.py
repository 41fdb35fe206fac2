"""Data models for the Ledger module."""

from dataclasses import dataclass, field


@dataclass
class CommitResult:
    """Outcome of a successful ledger commit.

    Attributes:
        registration_ids: Registrations now approved, in commit order.
        enrolled: Course ID to enrolled count after the commit.
        attempts: Transaction attempts used (more than 1 after a StorageError retry).
    """

    registration_ids: list[str]
    enrolled: dict[str, int] = field(default_factory=dict)
    attempts: int = 1
