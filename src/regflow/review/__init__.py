"""Review package - Administrative review surface."""

from regflow.review.models import BulkReviewReport, ReviewOutcome
from regflow.review.service import ReviewService

__all__ = [
    "BulkReviewReport",
    "ReviewOutcome",
    "ReviewService",
]
