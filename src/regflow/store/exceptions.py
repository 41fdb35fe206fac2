"""Custom exceptions for the record store."""


class StoreError(Exception):
    """Base exception for record store errors."""


class StorageError(StoreError):
    """The database rejected or could not complete a transaction.

    This is the only store error that may succeed when retried.
    """


class StudentNotFoundError(StoreError):
    """Student with given ID does not exist."""


class StudentExistsError(StoreError):
    """Student with given ID already exists."""


class CourseNotFoundError(StoreError):
    """Course with given ID does not exist."""


class CourseExistsError(StoreError):
    """Course with given code already exists."""


class RegistrationNotFoundError(StoreError):
    """Registration with given ID does not exist."""


class RegistrationConflictError(StoreError):
    """Student already has a live registration for the session."""


class StaleRegistrationError(StoreError):
    """Registration status changed between read and conditional write."""
