"""Exceptions for the Ledger module."""


class LedgerError(Exception):
    """Base exception for ledger errors."""

    pass


class CapacityRaceError(LedgerError):
    """A course filled up between submission and the approval commit.

    Attributes:
        full_courses: (registration_id, course_code) pairs that found no seat.
    """

    def __init__(self, full_courses: list[tuple[str, str]]) -> None:
        self.full_courses = full_courses
        listing = ", ".join(f"{code} (registration {rid})" for rid, code in full_courses)
        super().__init__(f"Capacity exceeded at commit time: {listing}")

    @property
    def registration_ids(self) -> list[str]:
        return list(dict.fromkeys(rid for rid, _ in self.full_courses))

    @property
    def course_codes(self) -> list[str]:
        return list(dict.fromkeys(code for _, code in self.full_courses))


class RegistrationNotPendingError(LedgerError):
    """A registration left the pending state before it could be committed."""

    def __init__(self, registration_id: str, status: str) -> None:
        self.registration_id = registration_id
        self.status = status
        super().__init__(f"Registration '{registration_id}' is {status}, expected pending")
