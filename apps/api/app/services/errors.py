from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from app.schemas.candidates import Candidate
    from app.services.capacity_policy import SlotViolation


class SchedulingError(Exception):
    """Base class for errors raised by the scheduling core."""


class CapacityExceededError(SchedulingError):
    """Confirmation would put more than two confirmed candidates in one slot."""

    def __init__(self, violations: list["SlotViolation"]):
        self.violations = violations
        super().__init__("; ".join(v.reason for v in violations))

    def to_detail(self) -> dict:
        return {
            "error": "capacity_exceeded",
            "message": "The same date and time slot can hold at most 2 confirmed sessions.",
            "violations": [v.to_dict() for v in self.violations],
        }


class AlreadyConfirmedError(SchedulingError):
    """A candidate passed for confirmation is already confirmed."""

    def __init__(self, candidates: list["Candidate"]):
        self.candidates = candidates
        super().__init__(
            "Already confirmed: " + ", ".join(c.id for c in candidates)
        )

    def to_detail(self) -> dict:
        return {
            "error": "already_confirmed",
            "message": "Confirmed candidates cannot be confirmed again.",
            "candidates": [
                {
                    "candidate_id": c.id,
                    "instructor_name": c.instructor_name,
                    "date": c.date.isoformat(),
                    "time_slot": c.time_slot.value,
                }
                for c in self.candidates
            ],
        }


class CalendarMirrorError(SchedulingError):
    """An external calendar operation failed (auth, network, missing credential)."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class AccountError(SchedulingError):
    """Invalid account-role request (bad email, unknown role, duplicate, self-removal)."""
