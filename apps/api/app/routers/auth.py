from datetime import datetime, timedelta, timezone
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from jose import JWTError, jwt
from typing import Optional

from app.core.database import get_db
from app.core.config import settings
from app.schemas.auth import Actor, CalendarCredentials
from app.services.accounts import is_admin_email, store_credentials

router = APIRouter()
security = HTTPBearer(auto_error=False)

# JWT settings
SECRET_KEY = settings.jwt_secret_key
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = 60 * 24 * 90  # 90 days, matches the sign-in session


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None):
    """Create a JWT access token. Claims: sub, name, email."""
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode.update({"exp": expire})
    encoded_jwt = jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)
    return encoded_jwt


def decode_token(token: str) -> dict:
    try:
        return jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials",
        )


def get_current_actor(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> Actor:
    """Resolve the signed-in user. Admin flag comes from ADMIN_EMAILS + account_roles."""
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    payload = decode_token(credentials.credentials)
    user_id = payload.get("sub")
    email = payload.get("email") or ""
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials",
        )

    return Actor(
        id=str(user_id),
        name=payload.get("name") or email or str(user_id),
        email=email,
        is_admin=is_admin_email(db, email),
    )


def get_current_admin(actor: Actor = Depends(get_current_actor)) -> Actor:
    if not actor.is_admin:
        raise HTTPException(status_code=403, detail="This endpoint requires the admin role")
    return actor


@router.get("/me")
def get_current_user_info(actor: Actor = Depends(get_current_actor)):
    """Get current authenticated user info."""
    return actor


@router.put("/calendar-credentials")
def save_calendar_credentials(
    payload: CalendarCredentials,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    """Store the caller's Google tokens so confirmations can be mirrored into their calendar."""
    row = store_credentials(db, actor, payload.access_token, payload.refresh_token)
    return {"user_id": row.user_id, "has_refresh_token": bool(row.refresh_token)}
