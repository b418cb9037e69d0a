from __future__ import annotations

import logging
import uuid
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.models.audit_log import AuditLog
from app.schemas.audit import AuditLogEntry
from app.schemas.auth import Actor
from app.schemas.candidates import Candidate

logger = logging.getLogger(__name__)

ACTION_CONFIRMED = "confirmed"


def new_entry_id(now: datetime) -> str:
    return f"audit-{int(now.timestamp() * 1000)}-{uuid.uuid4().hex[:9]}"


def build_confirmation_entry(candidate: Candidate, actor: Actor, now: datetime) -> AuditLogEntry:
    return AuditLogEntry(
        id=new_entry_id(now),
        candidate_id=candidate.id,
        action=ACTION_CONFIRMED,
        actor_id=actor.id,
        actor_name=actor.name,
        timestamp=now,
        date=candidate.date,
        time_slot=candidate.time_slot,
        instructor_id=candidate.instructor_id,
        instructor_name=candidate.instructor_name,
    )


class AuditLogService:
    """Append-only log of confirmation actions."""

    def __init__(self, db: Session):
        self.db = db

    def record(self, entry: AuditLogEntry) -> bool:
        """
        Append one entry. Returns False when the write failed.

        Failures are logged and swallowed: the confirmation they describe has
        already been committed and stays committed.
        """
        try:
            self.db.add(entry.to_row())
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception("Failed to write audit log for candidate %s", entry.candidate_id)
            return False
        return True

    def list(self) -> list[AuditLogEntry]:
        rows = self.db.execute(
            select(AuditLog).order_by(AuditLog.timestamp.desc(), AuditLog.created_at.desc())
        ).scalars().all()
        return [AuditLogEntry.from_row(r) for r in rows]
