from pydantic import BaseModel


class Actor(BaseModel):
    """The signed-in user as seen by the scheduling core."""

    id: str
    name: str
    email: str
    is_admin: bool = False


class CalendarCredentials(BaseModel):
    access_token: str
    refresh_token: str | None = None
