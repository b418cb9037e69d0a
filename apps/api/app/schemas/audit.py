import datetime as dt

from pydantic import BaseModel

from app.models.audit_log import AuditLog
from app.scheduling.time_slots import TimeSlot


class AuditLogEntry(BaseModel):
    id: str
    candidate_id: str
    action: str
    actor_id: str
    actor_name: str
    timestamp: dt.datetime
    date: dt.date
    time_slot: TimeSlot
    instructor_id: str
    instructor_name: str

    @classmethod
    def from_row(cls, row: AuditLog) -> "AuditLogEntry":
        return cls(
            id=row.id,
            candidate_id=row.event_id,
            action=row.action,
            actor_id=row.admin_id,
            actor_name=row.admin_name,
            timestamp=row.timestamp,
            date=row.event_date,
            time_slot=TimeSlot(row.event_time_slot),
            instructor_id=row.instructor_id,
            instructor_name=row.instructor_name,
        )

    def to_row(self) -> AuditLog:
        return AuditLog(
            id=self.id,
            event_id=self.candidate_id,
            action=self.action,
            admin_id=self.actor_id,
            admin_name=self.actor_name,
            timestamp=self.timestamp,
            event_date=self.date,
            event_time_slot=self.time_slot.value,
            instructor_id=self.instructor_id,
            instructor_name=self.instructor_name,
        )
