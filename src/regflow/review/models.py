"""Data models for the Review module."""

from dataclasses import dataclass, field


@dataclass
class ReviewOutcome:
    """Result of one administrative action on one item.

    Attributes:
        item_id: Registration or student ID acted on.
        success: Whether the action took effect.
        status: Item status after the action (unchanged on failure).
        error: Human-readable cause when success is False.
        error_type: Exception class name when success is False.
    """

    item_id: str
    success: bool
    status: str | None = None
    error: str | None = None
    error_type: str | None = None


@dataclass
class BulkReviewReport:
    """Per-item outcomes of a bulk approval.

    Storage is all-or-nothing, so either every outcome succeeded
    (committed=True) or none did.
    """

    committed: bool
    outcomes: list[ReviewOutcome] = field(default_factory=list)

    @property
    def succeeded(self) -> list[str]:
        return [o.item_id for o in self.outcomes if o.success]

    @property
    def failed(self) -> list[str]:
        return [o.item_id for o in self.outcomes if not o.success]
