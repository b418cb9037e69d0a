"""
Candidate -> confirmed workflow.

Order of effects for every confirmation:
  1. capacity validation (nothing is written when it fails)
  2. status=confirmed + confirmed_at committed to the store
  3. audit entry appended
  4. instructor and admin calendar events created, each best-effort

Calendar failures never undo step 2; they are returned as warnings next to
the successful result. There is no cancellation once step 2 has run.
"""
from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Optional

from app.models.session_candidate import CandidateStatus
from app.schemas.auth import Actor
from app.schemas.candidates import Candidate
from app.services.audit_log import AuditLogService, build_confirmation_entry
from app.services.calendar_mirror import CalendarMirror
from app.services.candidate_store import CandidateStore
from app.services.capacity_policy import can_confirm, can_confirm_batch
from app.services.errors import AlreadyConfirmedError, CalendarMirrorError, CapacityExceededError

logger = logging.getLogger(__name__)


class TitleVariant(str, enum.Enum):
    session = "session"
    paired_session = "paired_session"


class CalendarSide(str, enum.Enum):
    instructor = "instructor"
    admin = "admin"


@dataclass
class MirrorWarning:
    candidate_id: str
    instructor_name: str
    calendar: CalendarSide
    message: str

    def to_dict(self) -> dict:
        return {
            "candidate_id": self.candidate_id,
            "instructor_name": self.instructor_name,
            "calendar": self.calendar.value,
            "message": self.message,
        }


@dataclass
class ConfirmationResult:
    candidate: Candidate
    title_variant: TitleVariant
    audit_recorded: bool
    warnings: list[MirrorWarning] = field(default_factory=list)


@dataclass
class BatchConfirmationResult:
    confirmed: list[ConfirmationResult] = field(default_factory=list)

    @property
    def warnings(self) -> list[MirrorWarning]:
        return [w for r in self.confirmed for w in r.warnings]


@dataclass
class DeletionResult:
    candidate_id: str
    deleted: bool
    warnings: list[MirrorWarning] = field(default_factory=list)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ConfirmationWorkflow:
    def __init__(
        self,
        store: CandidateStore,
        audit_log: AuditLogService,
        mirror: CalendarMirror,
        session_title: str,
        paired_session_title: str,
        now: Callable[[], datetime] = _utcnow,
    ):
        self.store = store
        self.audit_log = audit_log
        self.mirror = mirror
        self.session_title = session_title
        self.paired_session_title = paired_session_title
        self.now = now

    # ---------- confirm ----------
    def confirm_one(self, candidate_id: str, actor: Actor) -> Optional[ConfirmationResult]:
        if not actor.is_admin:
            return None

        candidate = self.store.get(candidate_id)
        if not candidate:
            return None
        if candidate.status == CandidateStatus.confirmed:
            raise AlreadyConfirmedError([candidate])

        existing = self.store.list_by_status(CandidateStatus.confirmed)
        decision = can_confirm(candidate, existing)
        if not decision.accepted:
            logger.info("Confirmation of %s rejected: %s", candidate_id, decision.violations[0].reason)
            raise CapacityExceededError(decision.violations)

        return self._apply_confirmation(candidate, actor)

    def confirm_batch(self, candidate_ids: list[str], actor: Actor) -> BatchConfirmationResult:
        result = BatchConfirmationResult()
        if not actor.is_admin:
            return result

        candidates = self.store.get_many(candidate_ids)
        if not candidates:
            return result

        already = [c for c in candidates if c.status == CandidateStatus.confirmed]
        if already:
            raise AlreadyConfirmedError(already)

        # one snapshot for the whole batch
        existing = self.store.list_by_status(CandidateStatus.confirmed)
        decision = can_confirm_batch(candidates, existing)
        if not decision.accepted:
            logger.info("Batch of %d rejected: %d slot violation(s)", len(candidates), len(decision.violations))
            raise CapacityExceededError(decision.violations)

        # sequential so audit order and failure attribution follow the batch order
        for c in candidates:
            applied = self._apply_confirmation(c, actor)
            if applied is not None:
                result.confirmed.append(applied)

        if result.warnings:
            logger.warning(
                "Batch confirmed %d candidate(s) with %d calendar warning(s)",
                len(result.confirmed),
                len(result.warnings),
            )
        return result

    def _apply_confirmation(self, candidate: Candidate, actor: Actor) -> Optional[ConfirmationResult]:
        now = self.now()
        confirmed = self.store.set_status(candidate.id, CandidateStatus.confirmed, now)
        if confirmed is None:
            # deleted between validation and commit
            return None

        audit_recorded = self.audit_log.record(build_confirmation_entry(confirmed, actor, now))

        in_slot = self.store.count_confirmed_in_slot(confirmed)
        variant = TitleVariant.session if in_slot <= 1 else TitleVariant.paired_session
        variant_title = self.session_title if variant == TitleVariant.session else self.paired_session_title

        warnings: list[MirrorWarning] = []
        instructor_event_id = None
        admin_event_id = None

        try:
            instructor_event_id = self.mirror.add_event(
                confirmed.instructor_id,
                confirmed.date,
                confirmed.time_slot,
                self.session_title,
                f"Registered automatically by the consultation scheduler\nInstructor: {confirmed.instructor_name}",
            )
        except CalendarMirrorError as e:
            logger.warning("Instructor calendar mirror failed for %s: %s", confirmed.id, e.message)
            warnings.append(MirrorWarning(confirmed.id, confirmed.instructor_name, CalendarSide.instructor, e.message))

        try:
            admin_event_id = self.mirror.add_event(
                actor.id,
                confirmed.date,
                confirmed.time_slot,
                f"{variant_title} {confirmed.instructor_name}",
                f"Registered automatically by the consultation scheduler (admin)\nInstructor: {confirmed.instructor_name}",
            )
        except CalendarMirrorError as e:
            logger.warning("Admin calendar mirror failed for %s: %s", confirmed.id, e.message)
            warnings.append(MirrorWarning(confirmed.id, confirmed.instructor_name, CalendarSide.admin, e.message))

        if instructor_event_id or admin_event_id:
            confirmed = self.store.set_calendar_event_ids(
                confirmed.id,
                instructor_event_id=instructor_event_id,
                admin_event_id=admin_event_id,
                admin_calendar_user_id=actor.id if admin_event_id else None,
            ) or confirmed

        logger.info("Candidate %s confirmed by %s (%s)", confirmed.id, actor.id, variant.value)
        return ConfirmationResult(
            candidate=confirmed,
            title_variant=variant,
            audit_recorded=audit_recorded,
            warnings=warnings,
        )

    # ---------- revert ----------
    def revert_to_submitted(self, candidate_id: str, actor: Actor) -> Optional[Candidate]:
        """Admin correction. Mirrored calendar events and their ids are left as they are."""
        if not actor.is_admin:
            return None
        if not self.store.get(candidate_id):
            return None
        return self.store.set_status(candidate_id, CandidateStatus.submitted)

    # ---------- delete ----------
    def delete_candidate(self, candidate_id: str, actor: Actor, force: bool = False) -> DeletionResult:
        candidate = self.store.get(candidate_id)
        if not candidate:
            return DeletionResult(candidate_id=candidate_id, deleted=False)

        privileged = force or actor.is_admin
        if not privileged and (
            candidate.instructor_id != actor.id or candidate.status == CandidateStatus.confirmed
        ):
            return DeletionResult(candidate_id=candidate_id, deleted=False)

        warnings: list[MirrorWarning] = []
        if candidate.status == CandidateStatus.confirmed:
            if candidate.google_calendar_event_id:
                try:
                    self.mirror.delete_event(candidate.instructor_id, candidate.google_calendar_event_id)
                except CalendarMirrorError as e:
                    logger.warning("Instructor calendar delete failed for %s: %s", candidate.id, e.message)
                    warnings.append(
                        MirrorWarning(candidate.id, candidate.instructor_name, CalendarSide.instructor, e.message)
                    )
            if candidate.admin_google_calendar_event_id:
                admin_user_id = candidate.admin_calendar_user_id or actor.id
                try:
                    self.mirror.delete_event(admin_user_id, candidate.admin_google_calendar_event_id)
                except CalendarMirrorError as e:
                    logger.warning("Admin calendar delete failed for %s: %s", candidate.id, e.message)
                    warnings.append(
                        MirrorWarning(candidate.id, candidate.instructor_name, CalendarSide.admin, e.message)
                    )

        deleted = self.store.delete(candidate_id, actor, force=force)
        return DeletionResult(candidate_id=candidate_id, deleted=deleted, warnings=warnings)

    def delete_batch(self, candidate_ids: list[str], actor: Actor) -> list[DeletionResult]:
        if not actor.is_admin:
            return []
        return [self.delete_candidate(i, actor, force=True) for i in dict.fromkeys(candidate_ids)]
