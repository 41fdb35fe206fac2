"""Data models for the Workflow module."""

from dataclasses import dataclass

from regflow.store import Registration
from regflow.validation import ValidationResult


@dataclass
class SubmissionResult:
    """A registration that reached pending, with the verdict that let it through.

    Attributes:
        registration: The record, now pending.
        validation: The passing verdict; its warnings are worth showing.
    """

    registration: Registration
    validation: ValidationResult
