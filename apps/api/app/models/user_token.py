from sqlalchemy import Column, DateTime, String, Text
from sqlalchemy.sql import func

from app.core.database import Base


class UserToken(Base):
    """Per-user Google credentials captured at sign-in."""

    __tablename__ = "user_tokens"

    user_id = Column(String, primary_key=True)
    email = Column(String, nullable=False, index=True)

    access_token = Column(Text, nullable=False)
    refresh_token = Column(Text, nullable=True)

    updated_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
