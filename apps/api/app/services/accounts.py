from __future__ import annotations

import logging
import re
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.models.account_role import AccountRole, AccountRoleType
from app.models.user_token import UserToken
from app.schemas.accounts import AccountsOut, AdminAccountOut, InstructorAccountOut
from app.schemas.auth import Actor
from app.services.errors import AccountError

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def normalize_email(email: str | None) -> str:
    return (email or "").strip().lower()


def is_admin_email(db: Session, email: str) -> bool:
    """Admins come from the ADMIN_EMAILS setting plus account_roles rows with role=admin."""
    email = normalize_email(email)
    if not email:
        return False
    if email in settings.admin_email_list:
        return True
    row = db.get(AccountRole, email)
    return bool(row and row.role == AccountRoleType.admin)


def list_accounts(db: Session) -> AccountsOut:
    roles = db.execute(select(AccountRole).order_by(AccountRole.created_at.desc())).scalars().all()

    emails = [r.email for r in roles]
    email_to_user: dict[str, str] = {}
    if emails:
        tokens = db.execute(select(UserToken).where(UserToken.email.in_(emails))).scalars().all()
        email_to_user = {t.email.lower(): t.user_id for t in tokens}

    return AccountsOut(
        instructors=[
            InstructorAccountOut(email=r.email, created_at=r.created_at, user_id=email_to_user.get(r.email))
            for r in roles
            if r.role == AccountRoleType.instructor
        ],
        admins=[
            AdminAccountOut(email=r.email, created_at=r.created_at)
            for r in roles
            if r.role == AccountRoleType.admin
        ],
    )


def add_account(db: Session, email: str, role: str) -> AccountRole:
    email = normalize_email(email)
    if not email:
        raise AccountError("Email address is required")
    if not EMAIL_RE.match(email):
        raise AccountError("Enter a valid email address")
    try:
        role_type = AccountRoleType(role)
    except ValueError:
        raise AccountError("role must be 'instructor' or 'admin'")

    if db.get(AccountRole, email):
        raise AccountError("This email address is already registered")

    row = AccountRole(email=email, role=role_type)
    db.add(row)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise AccountError("This email address is already registered")
    db.refresh(row)
    logger.info("Account role added: %s (%s)", email, role_type.value)
    return row


def remove_account(db: Session, email: str, actor: Actor) -> bool:
    email = normalize_email(email)
    if not email:
        raise AccountError("Email address is required")

    row = db.get(AccountRole, email)
    if not row:
        return False
    if email == normalize_email(actor.email) and row.role == AccountRoleType.admin:
        raise AccountError("You cannot remove your own admin role")

    db.delete(row)
    db.commit()
    logger.info("Account role removed: %s by %s", email, actor.id)
    return True


def store_credentials(db: Session, actor: Actor, access_token: str, refresh_token: str | None) -> UserToken:
    """Upsert the actor's calendar credential (done by the sign-in hook)."""
    row = db.get(UserToken, actor.id)
    if row is None:
        row = UserToken(user_id=actor.id, email=normalize_email(actor.email), access_token=access_token)
        db.add(row)
    row.email = normalize_email(actor.email)
    row.access_token = access_token
    if refresh_token:
        row.refresh_token = refresh_token
    row.updated_at = datetime.now(timezone.utc)
    db.commit()
    db.refresh(row)
    return row
