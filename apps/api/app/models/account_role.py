import enum
from sqlalchemy import Column, DateTime, Enum, String
from sqlalchemy.sql import func

from app.core.database import Base


class AccountRoleType(str, enum.Enum):
    instructor = "instructor"
    admin = "admin"


class AccountRole(Base):
    __tablename__ = "account_roles"

    email = Column(String, primary_key=True)  # always stored lower-cased
    role = Column(Enum(AccountRoleType, name="account_role_type"), nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
