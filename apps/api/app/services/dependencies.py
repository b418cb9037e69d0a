from fastapi import Depends
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.database import get_db
from app.services.audit_log import AuditLogService
from app.services.calendar_mirror import CalendarMirror
from app.services.candidate_store import CandidateStore
from app.services.confirmation_workflow import ConfirmationWorkflow
from app.services.google_calendar import GoogleCalendarClient, get_calendar_client


def get_candidate_store(db: Session = Depends(get_db)) -> CandidateStore:
    return CandidateStore(db)


def get_calendar_mirror(
    db: Session = Depends(get_db),
    client: GoogleCalendarClient = Depends(get_calendar_client),
) -> CalendarMirror:
    return CalendarMirror(db, client, settings.calendar_time_zone)


def get_workflow(
    db: Session = Depends(get_db),
    mirror: CalendarMirror = Depends(get_calendar_mirror),
) -> ConfirmationWorkflow:
    return ConfirmationWorkflow(
        store=CandidateStore(db),
        audit_log=AuditLogService(db),
        mirror=mirror,
        session_title=settings.session_title,
        paired_session_title=settings.paired_session_title,
    )
