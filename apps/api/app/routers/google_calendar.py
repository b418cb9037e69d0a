from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query

from app.core.config import settings
from app.routers.auth import get_current_actor, get_current_admin
from app.schemas.auth import Actor
from app.scheduling.time_slots import conflicting_slots
from app.services.calendar_mirror import CalendarMirror
from app.services.candidate_store import CandidateStore
from app.services.dependencies import get_calendar_mirror, get_candidate_store
from app.services.errors import CalendarMirrorError

router = APIRouter()


@router.get("/conflicts")
def get_slot_conflicts(
    start_date: date = Query(...),
    end_date: date = Query(...),
    actor: Actor = Depends(get_current_actor),
    mirror: CalendarMirror = Depends(get_calendar_mirror),
):
    """
    Slots the caller is already busy in, according to their own Google calendar.
    Without a usable credential this returns no conflicts and authenticated=False.
    """
    if end_date < start_date:
        raise HTTPException(status_code=400, detail="end_date must be >= start_date")

    try:
        events = mirror.list_events(actor.id, start_date, end_date)
    except CalendarMirrorError as e:
        return {"authenticated": False, "message": e.message, "conflicts": []}

    conflicts = conflicting_slots(events, settings.calendar_time_zone)
    return {
        "authenticated": True,
        "conflicts": [
            {"date": d.isoformat(), "time_slots": sorted(s.value for s in slots)}
            for d, slots in sorted(conflicts.items())
            if start_date <= d <= end_date
        ],
    }


@router.post("/sync-deleted")
def sync_deleted_events(
    admin: Actor = Depends(get_current_admin),
    mirror: CalendarMirror = Depends(get_calendar_mirror),
    store: CandidateStore = Depends(get_candidate_store),
):
    """
    Remove confirmed candidates whose event was deleted directly in the
    instructor's or admin's calendar, deleting the other side's event too.
    """
    removed = mirror.reconcile_deleted_externally(store, fallback_admin_id=admin.id)
    return {"deleted_event_ids": removed}
