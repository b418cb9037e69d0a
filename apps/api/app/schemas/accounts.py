from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel


class AccountCreate(BaseModel):
    # validated in the service so the normalized (trimmed, lower-cased) form is checked
    email: str
    role: str


class AccountDelete(BaseModel):
    email: str


class InstructorAccountOut(BaseModel):
    email: str
    role: Literal["instructor"] = "instructor"
    created_at: Optional[datetime] = None
    user_id: Optional[str] = None


class AdminAccountOut(BaseModel):
    email: str
    role: Literal["admin"] = "admin"
    created_at: Optional[datetime] = None


class AccountsOut(BaseModel):
    instructors: list[InstructorAccountOut]
    admins: list[AdminAccountOut]
