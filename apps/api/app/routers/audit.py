from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.routers.auth import get_current_admin
from app.schemas.audit import AuditLogEntry
from app.schemas.auth import Actor
from app.services.audit_log import AuditLogService

router = APIRouter()


@router.get("", response_model=list[AuditLogEntry])
def list_audit_logs(
    db: Session = Depends(get_db),
    admin: Actor = Depends(get_current_admin),
):
    """Confirmation history, newest first (admin only)."""
    return AuditLogService(db).list()
