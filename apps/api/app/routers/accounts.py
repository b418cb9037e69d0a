from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.routers.auth import get_current_admin
from app.schemas.accounts import AccountCreate, AccountDelete, AccountsOut
from app.schemas.auth import Actor
from app.services.accounts import add_account, list_accounts, remove_account
from app.services.errors import AccountError

router = APIRouter()


@router.get("/accounts", response_model=AccountsOut)
def get_accounts(
    db: Session = Depends(get_db),
    admin: Actor = Depends(get_current_admin),
):
    """Registered instructor and admin emails (admin only)."""
    return list_accounts(db)


@router.post("/accounts")
def create_account(
    payload: AccountCreate,
    db: Session = Depends(get_db),
    admin: Actor = Depends(get_current_admin),
):
    try:
        row = add_account(db, payload.email, payload.role)
    except AccountError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"ok": True, "email": row.email, "role": row.role.value}


@router.delete("/accounts")
def delete_account(
    payload: AccountDelete,
    db: Session = Depends(get_db),
    admin: Actor = Depends(get_current_admin),
):
    """Remove an account role. Admins cannot remove their own admin row."""
    try:
        removed = remove_account(db, payload.email, admin)
    except AccountError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"ok": True, "removed": removed}
