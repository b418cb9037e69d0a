from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.models.session_candidate import CandidateStatus, SessionCandidate
from app.schemas.auth import Actor
from app.schemas.candidates import BoardEntry, Candidate, CandidateCreate, CandidateUpdate
from app.scheduling.time_slots import month_of

logger = logging.getLogger(__name__)

MASKED_INSTRUCTOR_NAME = "Taken"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CandidateStore:
    """
    CRUD over `session_candidates`.

    Ownership rules are enforced here as silent no-ops:
      - instructors always author candidates as themselves
      - instructors only edit/delete their own candidates, and only while submitted
      - admins (or a forced delete) may touch anything
    Every mutating call commits and re-reads from the database.
    """

    def __init__(self, db: Session):
        self.db = db

    # ---------- reads ----------
    def get(self, candidate_id: str) -> Optional[Candidate]:
        row = self.db.get(SessionCandidate, candidate_id)
        return Candidate.from_row(row) if row else None

    def get_many(self, candidate_ids: list[str]) -> list[Candidate]:
        """Resolve ids in the given order; unknown ids are dropped."""
        if not candidate_ids:
            return []
        rows = self.db.execute(
            select(SessionCandidate).where(SessionCandidate.id.in_(candidate_ids))
        ).scalars().all()
        by_id = {r.id: r for r in rows}
        ordered = dict.fromkeys(candidate_ids)
        return [Candidate.from_row(by_id[i]) for i in ordered if i in by_id]

    def list_all(self) -> list[Candidate]:
        rows = self.db.execute(
            select(SessionCandidate).order_by(SessionCandidate.date, SessionCandidate.instructor_name)
        ).scalars().all()
        return [Candidate.from_row(r) for r in rows]

    def list_by_status(self, status: CandidateStatus) -> list[Candidate]:
        rows = self.db.execute(
            select(SessionCandidate)
            .where(SessionCandidate.status == status)
            .order_by(SessionCandidate.date, SessionCandidate.instructor_name)
        ).scalars().all()
        return [Candidate.from_row(r) for r in rows]

    def list_by_instructor(self, instructor_id: str) -> list[Candidate]:
        rows = self.db.execute(
            select(SessionCandidate)
            .where(SessionCandidate.instructor_id == instructor_id)
            .order_by(SessionCandidate.date)
        ).scalars().all()
        return [Candidate.from_row(r) for r in rows]

    def list_confirmed_with_event_ids(self) -> list[Candidate]:
        rows = self.db.execute(
            select(SessionCandidate).where(
                SessionCandidate.status == CandidateStatus.confirmed,
                or_(
                    SessionCandidate.google_calendar_event_id.is_not(None),
                    SessionCandidate.admin_google_calendar_event_id.is_not(None),
                ),
            )
        ).scalars().all()
        return [Candidate.from_row(r) for r in rows]

    def count_confirmed_in_slot(self, candidate: Candidate) -> int:
        return sum(
            1
            for c in self.list_by_status(CandidateStatus.confirmed)
            if c.slot_key == candidate.slot_key
        )

    def board_for_instructor(self, actor: Actor) -> list[BoardEntry]:
        out: list[BoardEntry] = []
        for c in self.list_all():
            mine = c.instructor_id == actor.id
            out.append(
                BoardEntry(
                    id=c.id,
                    date=c.date,
                    time_slot=c.time_slot,
                    status=c.status,
                    is_mine=mine,
                    instructor_name=c.instructor_name if mine else MASKED_INSTRUCTOR_NAME,
                    memo=c.memo if mine else None,
                )
            )
        return out

    # ---------- writes ----------
    def create(self, payload: CandidateCreate, actor: Actor) -> Candidate:
        if actor.is_admin and payload.instructor_id:
            instructor_id = payload.instructor_id
            instructor_name = payload.instructor_name or actor.name
        else:
            # instructors can only author their own candidates
            instructor_id, instructor_name = actor.id, actor.name

        row = SessionCandidate(
            instructor_id=instructor_id,
            instructor_name=instructor_name,
            month=month_of(payload.date),
            date=payload.date,
            time_slot=payload.time_slot,
            memo=payload.memo or None,
            status=CandidateStatus.submitted,
            submitted_at=_utcnow(),
            confirmed_at=None,
        )
        self.db.add(row)
        self._commit("create candidate")
        self.db.refresh(row)
        logger.info("Candidate %s submitted for %s %s by %s", row.id, row.date, row.time_slot, actor.id)
        return Candidate.from_row(row)

    def update(self, candidate_id: str, patch: CandidateUpdate, actor: Actor) -> Optional[Candidate]:
        row = self.db.get(SessionCandidate, candidate_id)
        if not row:
            return None

        changes = patch.model_dump(exclude_unset=True)
        if not actor.is_admin:
            if row.instructor_id != actor.id or row.status == CandidateStatus.confirmed:
                return Candidate.from_row(row)
            changes.pop("instructor_id", None)
            changes.pop("instructor_name", None)

        # required columns cannot be nulled through a partial update
        for key in ("date", "time_slot", "instructor_id", "instructor_name"):
            if key in changes and changes[key] is None:
                changes.pop(key)

        if not changes:
            return Candidate.from_row(row)

        if "date" in changes:
            changes["month"] = month_of(changes["date"])
        if "memo" in changes:
            changes["memo"] = changes["memo"] or None

        for key, value in changes.items():
            setattr(row, key, value)
        self._commit("update candidate")
        self.db.refresh(row)
        return Candidate.from_row(row)

    def delete(self, candidate_id: str, actor: Actor, force: bool = False) -> bool:
        """Returns True when a row was removed."""
        row = self.db.get(SessionCandidate, candidate_id)
        if not row:
            return False

        privileged = force or actor.is_admin
        if not privileged:
            if row.instructor_id != actor.id or row.status == CandidateStatus.confirmed:
                return False

        self.db.delete(row)
        self._commit("delete candidate")
        logger.info("Candidate %s deleted by %s", candidate_id, actor.id)
        return True

    def remove(self, candidate_id: str) -> bool:
        """Unconditional delete used by calendar reconciliation."""
        row = self.db.get(SessionCandidate, candidate_id)
        if not row:
            return False
        self.db.delete(row)
        self._commit("remove candidate")
        return True

    def set_status(
        self,
        candidate_id: str,
        status: CandidateStatus,
        now: Optional[datetime] = None,
    ) -> Optional[Candidate]:
        row = self.db.get(SessionCandidate, candidate_id)
        if not row:
            return None

        row.status = status
        row.confirmed_at = (now or _utcnow()) if status == CandidateStatus.confirmed else None
        self._commit("set candidate status")
        self.db.refresh(row)
        return Candidate.from_row(row)

    def set_calendar_event_ids(
        self,
        candidate_id: str,
        instructor_event_id: Optional[str] = None,
        admin_event_id: Optional[str] = None,
        admin_calendar_user_id: Optional[str] = None,
    ) -> Optional[Candidate]:
        row = self.db.get(SessionCandidate, candidate_id)
        if not row:
            return None

        if instructor_event_id:
            row.google_calendar_event_id = instructor_event_id
        if admin_event_id:
            row.admin_google_calendar_event_id = admin_event_id
            row.admin_calendar_user_id = admin_calendar_user_id
        self._commit("store calendar event ids")
        self.db.refresh(row)
        return Candidate.from_row(row)

    def _commit(self, what: str) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception("Failed to %s", what)
            raise
