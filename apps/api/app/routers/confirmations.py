from fastapi import APIRouter, Depends, HTTPException

from app.routers.auth import get_current_admin
from app.schemas.auth import Actor
from app.schemas.candidates import Candidate, CandidateIds
from app.services.confirmation_workflow import ConfirmationResult, ConfirmationWorkflow
from app.services.dependencies import get_workflow
from app.services.errors import AlreadyConfirmedError, CapacityExceededError

router = APIRouter()


def _confirmation_out(result: ConfirmationResult) -> dict:
    return {
        "candidate": result.candidate.model_dump(mode="json"),
        "title_variant": result.title_variant.value,
        "audit_recorded": result.audit_recorded,
        "warnings": [w.to_dict() for w in result.warnings],
    }


@router.post("/candidates/{candidate_id}/confirm")
def confirm_candidate(
    candidate_id: str,
    admin: Actor = Depends(get_current_admin),
    workflow: ConfirmationWorkflow = Depends(get_workflow),
):
    """
    Confirm one candidate (admin only).

    409 when the slot already holds 2 confirmed sessions or the candidate is
    already confirmed. Calendar problems come back as `warnings` with a 200.
    """
    try:
        result = workflow.confirm_one(candidate_id, admin)
    except (CapacityExceededError, AlreadyConfirmedError) as e:
        raise HTTPException(status_code=409, detail=e.to_detail())

    if result is None:
        raise HTTPException(status_code=404, detail="Candidate not found")
    return _confirmation_out(result)


@router.post("/candidates/confirm-batch")
def confirm_candidates(
    payload: CandidateIds,
    admin: Actor = Depends(get_current_admin),
    workflow: ConfirmationWorkflow = Depends(get_workflow),
):
    """All-or-nothing validation, then per-candidate confirmation with a failure report."""
    if not payload.candidate_ids:
        raise HTTPException(status_code=400, detail="Select at least one candidate to confirm")

    try:
        result = workflow.confirm_batch(payload.candidate_ids, admin)
    except (CapacityExceededError, AlreadyConfirmedError) as e:
        raise HTTPException(status_code=409, detail=e.to_detail())

    return {
        "confirmed": [_confirmation_out(r) for r in result.confirmed],
        "warnings": [w.to_dict() for w in result.warnings],
    }


@router.post("/candidates/{candidate_id}/revert", response_model=Candidate)
def revert_candidate(
    candidate_id: str,
    admin: Actor = Depends(get_current_admin),
    workflow: ConfirmationWorkflow = Depends(get_workflow),
):
    """Back to submitted. Existing calendar events are not touched."""
    c = workflow.revert_to_submitted(candidate_id, admin)
    if not c:
        raise HTTPException(status_code=404, detail="Candidate not found")
    return c


@router.post("/candidates/delete-batch")
def delete_candidates(
    payload: CandidateIds,
    admin: Actor = Depends(get_current_admin),
    workflow: ConfirmationWorkflow = Depends(get_workflow),
):
    results = workflow.delete_batch(payload.candidate_ids, admin)
    return {
        "deleted": [r.candidate_id for r in results if r.deleted],
        "warnings": [w.to_dict() for r in results for w in r.warnings],
    }
