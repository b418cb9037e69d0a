"""Shared fixtures: in-memory SQLite, a fake Google Calendar client, and an authenticated TestClient."""

import os
from datetime import date, datetime, timedelta, timezone
from pathlib import Path
import sys

# settings are read at import time
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ADMIN_EMAILS"] = "admin@example.com"
os.environ["JWT_SECRET_KEY"] = "test-secret"
os.environ["SESSION_TITLE"] = "Group Consultation"
os.environ["PAIRED_SESSION_TITLE"] = "Instructor Dialogue"

sys.path.append(str(Path(__file__).resolve().parents[1]))

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from app.core.database import Base, get_db  # noqa: E402
from app.main import app  # noqa: E402
from app.models.user_token import UserToken  # noqa: E402
from app.routers.auth import create_access_token  # noqa: E402
from app.schemas.auth import Actor  # noqa: E402
from app.schemas.candidates import CandidateCreate  # noqa: E402
from app.scheduling.time_slots import TimeSlot  # noqa: E402
from app.services.audit_log import AuditLogService  # noqa: E402
from app.services.calendar_mirror import CalendarMirror  # noqa: E402
from app.services.candidate_store import CandidateStore  # noqa: E402
from app.services.confirmation_workflow import ConfirmationWorkflow  # noqa: E402
from app.services.google_calendar import GoogleCalendarApiError, get_calendar_client  # noqa: E402


class FakeCalendarClient:
    """In-memory stand-in for GoogleCalendarClient."""

    def __init__(self):
        self.events: dict[str, dict] = {}
        self.listed_events: list[dict] = []
        self.calls: list[tuple] = []
        self.refresh_error: GoogleCalendarApiError | None = None
        self.insert_error: GoogleCalendarApiError | None = None
        self.delete_error: GoogleCalendarApiError | None = None
        self.get_error: GoogleCalendarApiError | None = None
        self._next_id = 0

    def refresh_credential(self, refresh_token):
        self.calls.append(("refresh", refresh_token))
        if self.refresh_error:
            raise self.refresh_error
        return f"fresh-{refresh_token}"

    def insert_event(self, access_token, event):
        self.calls.append(("insert", access_token, event["summary"]))
        if self.insert_error:
            raise self.insert_error
        self._next_id += 1
        event_id = f"evt-{self._next_id}"
        self.events[event_id] = {**event, "access_token": access_token}
        return event_id

    def delete_event(self, access_token, event_id):
        self.calls.append(("delete", access_token, event_id))
        if self.delete_error:
            raise self.delete_error
        if event_id not in self.events:
            raise GoogleCalendarApiError(404, "Not Found")
        del self.events[event_id]

    def get_event(self, access_token, event_id):
        self.calls.append(("get", access_token, event_id))
        if self.get_error:
            raise self.get_error
        if event_id not in self.events:
            raise GoogleCalendarApiError(404, "Not Found")
        return self.events[event_id]

    def list_events(self, access_token, time_min, time_max):
        self.calls.append(("list", access_token, time_min, time_max))
        return list(self.listed_events)

    def summaries(self) -> list[str]:
        return [e["summary"] for e in self.events.values()]


class StepClock:
    """Deterministic `now` that advances one second per call."""

    def __init__(self, start: datetime):
        self.current = start

    def __call__(self) -> datetime:
        self.current += timedelta(seconds=1)
        return self.current


ADMIN = Actor(id="admin-1", name="Admin One", email="admin@example.com", is_admin=True)
ALICE = Actor(id="inst-alice", name="Alice", email="alice@example.com", is_admin=False)
BOB = Actor(id="inst-bob", name="Bob", email="bob@example.com", is_admin=False)
CAROL = Actor(id="inst-carol", name="Carol", email="carol@example.com", is_admin=False)

DAY = date(2025, 3, 14)


@pytest.fixture
def db():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def calendar():
    return FakeCalendarClient()


@pytest.fixture
def store(db):
    return CandidateStore(db)


@pytest.fixture
def mirror(db, calendar):
    return CalendarMirror(db, calendar, "Asia/Tokyo")


@pytest.fixture
def workflow(db, store, mirror):
    return ConfirmationWorkflow(
        store=store,
        audit_log=AuditLogService(db),
        mirror=mirror,
        session_title="Group Consultation",
        paired_session_title="Instructor Dialogue",
        now=StepClock(datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)),
    )


@pytest.fixture
def client(db, calendar):
    def override_get_db():
        yield db

    def override_calendar_client():
        yield calendar

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_calendar_client] = override_calendar_client
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def auth_headers(actor: Actor) -> dict[str, str]:
    token = create_access_token({"sub": actor.id, "name": actor.name, "email": actor.email})
    return {"Authorization": f"Bearer {token}"}


def add_credential(db, actor: Actor, access_token: str = None, refresh_token: str = None) -> UserToken:
    row = UserToken(
        user_id=actor.id,
        email=actor.email,
        access_token=access_token or f"token-{actor.id}",
        refresh_token=refresh_token,
    )
    db.add(row)
    db.commit()
    return row


def submit(store: CandidateStore, actor: Actor, day: date = DAY, slot: TimeSlot = TimeSlot.SLOT_A, memo=None):
    return store.create(CandidateCreate(date=day, time_slot=slot, memo=memo), actor)
