import enum
import uuid
from sqlalchemy import CheckConstraint, Column, Date, DateTime, Enum, String, Text
from sqlalchemy.sql import func

from app.core.database import Base
from app.scheduling.time_slots import TimeSlot


class CandidateStatus(str, enum.Enum):
    submitted = "submitted"
    confirmed = "confirmed"


class SessionCandidate(Base):
    __tablename__ = "session_candidates"
    __table_args__ = (
        CheckConstraint(
            "(status = 'confirmed') = (confirmed_at IS NOT NULL)",
            name="ck_session_candidates_confirmed_at",
        ),
    )

    id = Column(String, primary_key=True, default=lambda: uuid.uuid4().hex)

    instructor_id = Column(String, nullable=False, index=True)
    instructor_name = Column(String, nullable=False)

    month = Column(String(7), nullable=False, index=True)  # YYYY-MM
    date = Column(Date, nullable=False, index=True)
    time_slot = Column(
        Enum(TimeSlot, name="time_slot", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    )
    memo = Column(Text, nullable=True)

    status = Column(
        Enum(CandidateStatus, name="candidate_status"),
        nullable=False,
        default=CandidateStatus.submitted,
        index=True,
    )
    submitted_at = Column(DateTime(timezone=True), nullable=False)
    confirmed_at = Column(DateTime(timezone=True), nullable=True)  # set iff status == confirmed

    # External calendar mirrors, filled after confirmation (best-effort)
    google_calendar_event_id = Column(String, nullable=True)
    admin_google_calendar_event_id = Column(String, nullable=True)
    admin_calendar_user_id = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
