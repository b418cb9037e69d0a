from __future__ import annotations

import datetime as dt
from typing import Optional

from pydantic import BaseModel, Field

from app.models.session_candidate import CandidateStatus, SessionCandidate
from app.scheduling.time_slots import TimeSlot


class Candidate(BaseModel):
    """Domain view of a `session_candidates` row."""

    id: str
    instructor_id: str
    instructor_name: str
    month: str
    date: dt.date
    time_slot: TimeSlot
    memo: Optional[str] = None
    status: CandidateStatus
    submitted_at: dt.datetime
    confirmed_at: Optional[dt.datetime] = None
    google_calendar_event_id: Optional[str] = None
    admin_google_calendar_event_id: Optional[str] = None
    admin_calendar_user_id: Optional[str] = None

    @classmethod
    def from_row(cls, row: SessionCandidate) -> "Candidate":
        return cls(
            id=row.id,
            instructor_id=row.instructor_id,
            instructor_name=row.instructor_name,
            month=row.month,
            date=row.date,
            time_slot=TimeSlot(row.time_slot),
            memo=row.memo or None,
            status=CandidateStatus(row.status),
            submitted_at=row.submitted_at,
            confirmed_at=row.confirmed_at,
            google_calendar_event_id=row.google_calendar_event_id or None,
            admin_google_calendar_event_id=row.admin_google_calendar_event_id or None,
            admin_calendar_user_id=row.admin_calendar_user_id or None,
        )

    def to_row_values(self) -> dict:
        return {
            "id": self.id,
            "instructor_id": self.instructor_id,
            "instructor_name": self.instructor_name,
            "month": self.month,
            "date": self.date,
            "time_slot": self.time_slot,
            "memo": self.memo or None,
            "status": self.status,
            "submitted_at": self.submitted_at,
            "confirmed_at": self.confirmed_at,
            "google_calendar_event_id": self.google_calendar_event_id,
            "admin_google_calendar_event_id": self.admin_google_calendar_event_id,
            "admin_calendar_user_id": self.admin_calendar_user_id,
        }

    @property
    def slot_key(self) -> tuple[dt.date, TimeSlot]:
        return (self.date, self.time_slot)


class CandidateCreate(BaseModel):
    date: dt.date
    time_slot: TimeSlot
    memo: Optional[str] = None
    # Only honoured for admins; instructors always submit as themselves
    instructor_id: Optional[str] = None
    instructor_name: Optional[str] = None


class CandidateUpdate(BaseModel):
    date: Optional[dt.date] = None
    time_slot: Optional[TimeSlot] = None
    memo: Optional[str] = None
    instructor_id: Optional[str] = None
    instructor_name: Optional[str] = None


class BoardEntry(BaseModel):
    """Entry of the instructor calendar; other instructors' entries are masked."""

    id: str
    date: dt.date
    time_slot: TimeSlot
    status: CandidateStatus
    is_mine: bool
    instructor_name: str
    memo: Optional[str] = None


class CandidateIds(BaseModel):
    candidate_ids: list[str] = Field(default_factory=list)
