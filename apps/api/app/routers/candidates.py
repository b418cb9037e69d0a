from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from app.models.session_candidate import CandidateStatus
from app.routers.auth import get_current_actor
from app.schemas.auth import Actor
from app.schemas.candidates import BoardEntry, Candidate, CandidateCreate, CandidateUpdate
from app.services.candidate_store import CandidateStore
from app.services.confirmation_workflow import ConfirmationWorkflow
from app.services.dependencies import get_candidate_store, get_workflow

router = APIRouter()


@router.post("", response_model=Candidate)
def submit_candidate(
    payload: CandidateCreate,
    actor: Actor = Depends(get_current_actor),
    store: CandidateStore = Depends(get_candidate_store),
):
    """Submit a candidate slot. Instructors always submit as themselves."""
    return store.create(payload, actor)


@router.get("", response_model=list[Candidate])
def list_candidates(
    status: Optional[CandidateStatus] = Query(None),
    instructor_id: Optional[str] = Query(None),
    actor: Actor = Depends(get_current_actor),
    store: CandidateStore = Depends(get_candidate_store),
):
    """
    Full candidate list (admin) with optional filters.
    Instructors only ever get their own candidates here; see /board for the shared view.
    """
    if not actor.is_admin:
        instructor_id = actor.id

    if instructor_id:
        rows = store.list_by_instructor(instructor_id)
        return [c for c in rows if status is None or c.status == status]
    if status:
        return store.list_by_status(status)
    return store.list_all()


@router.get("/mine", response_model=list[Candidate])
def list_my_candidates(
    actor: Actor = Depends(get_current_actor),
    store: CandidateStore = Depends(get_candidate_store),
):
    return store.list_by_instructor(actor.id)


@router.get("/board", response_model=list[BoardEntry])
def candidate_board(
    actor: Actor = Depends(get_current_actor),
    store: CandidateStore = Depends(get_candidate_store),
):
    """Everyone's candidates; entries owned by other instructors are anonymized."""
    return store.board_for_instructor(actor)


@router.get("/{candidate_id}", response_model=Candidate)
def get_candidate(
    candidate_id: str,
    actor: Actor = Depends(get_current_actor),
    store: CandidateStore = Depends(get_candidate_store),
):
    c = store.get(candidate_id)
    if not c or (not actor.is_admin and c.instructor_id != actor.id):
        raise HTTPException(status_code=404, detail="Candidate not found")
    return c


@router.patch("/{candidate_id}", response_model=Candidate)
def update_candidate(
    candidate_id: str,
    payload: CandidateUpdate,
    actor: Actor = Depends(get_current_actor),
    store: CandidateStore = Depends(get_candidate_store),
):
    """
    Partial update. Returns the current state; a request the caller is not
    allowed to make (someone else's candidate, or a confirmed one for
    instructors) leaves it unchanged.
    """
    c = store.update(candidate_id, payload, actor)
    if not c:
        raise HTTPException(status_code=404, detail="Candidate not found")
    return c


@router.delete("/{candidate_id}")
def delete_candidate(
    candidate_id: str,
    actor: Actor = Depends(get_current_actor),
    workflow: ConfirmationWorkflow = Depends(get_workflow),
):
    """Delete a candidate. Confirmed candidates have their calendar events removed first."""
    result = workflow.delete_candidate(candidate_id, actor)
    return {
        "candidate_id": result.candidate_id,
        "deleted": result.deleted,
        "warnings": [w.to_dict() for w in result.warnings],
    }
