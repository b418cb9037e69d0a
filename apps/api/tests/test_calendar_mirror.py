"""Tests for credential handling and external-deletion reconciliation."""

from datetime import date

import pytest

from app.models.session_candidate import CandidateStatus
from app.models.user_token import UserToken
from app.scheduling.time_slots import TimeSlot
from app.services.errors import CalendarMirrorError
from app.services.google_calendar import GoogleCalendarApiError

from conftest import ADMIN, ALICE, BOB, DAY, add_credential, submit


def test_missing_credential_raises(mirror):
    with pytest.raises(CalendarMirrorError):
        mirror.add_event(ALICE.id, DAY, TimeSlot.SLOT_A, "Group Consultation", "")


def test_refresh_token_is_used_and_persisted(db, mirror, calendar):
    add_credential(db, ALICE, access_token="stale", refresh_token="r-alice")

    event_id = mirror.add_event(ALICE.id, DAY, TimeSlot.SLOT_A, "Group Consultation", "")

    assert calendar.events[event_id]["access_token"] == "fresh-r-alice"
    db.expire_all()
    assert db.get(UserToken, ALICE.id).access_token == "fresh-r-alice"


def test_failed_refresh_falls_back_to_stored_token(db, mirror, calendar):
    add_credential(db, ALICE, access_token="stale", refresh_token="r-alice")
    calendar.refresh_error = GoogleCalendarApiError(400, "invalid_grant")

    event_id = mirror.add_event(ALICE.id, DAY, TimeSlot.SLOT_A, "Group Consultation", "")

    assert calendar.events[event_id]["access_token"] == "stale"
    db.expire_all()
    assert db.get(UserToken, ALICE.id).access_token == "stale"


def test_without_refresh_token_stored_token_is_used(db, mirror, calendar):
    add_credential(db, ALICE, access_token="only")

    mirror.add_event(ALICE.id, DAY, TimeSlot.SLOT_A, "Group Consultation", "")

    assert not [c for c in calendar.calls if c[0] == "refresh"]


@pytest.mark.parametrize("status", [404, 410])
def test_delete_of_gone_event_is_success(db, mirror, calendar, status):
    add_credential(db, ALICE)
    calendar.delete_error = GoogleCalendarApiError(status, "gone")

    mirror.delete_event(ALICE.id, "evt-old")


def test_delete_failure_raises_with_status(db, mirror, calendar):
    add_credential(db, ALICE)
    calendar.delete_error = GoogleCalendarApiError(403, "forbidden")

    with pytest.raises(CalendarMirrorError) as exc:
        mirror.delete_event(ALICE.id, "evt-1")

    assert exc.value.status_code == 403


def test_event_exists(db, mirror, calendar):
    add_credential(db, ALICE)
    event_id = mirror.add_event(ALICE.id, DAY, TimeSlot.SLOT_A, "Group Consultation", "")

    assert mirror.event_exists(ALICE.id, event_id) is True
    assert mirror.event_exists(ALICE.id, "evt-unknown") is False
    assert mirror.event_exists(BOB.id, event_id) is None

    calendar.get_error = GoogleCalendarApiError(None, "Network error")
    assert mirror.event_exists(ALICE.id, event_id) is None


def test_list_events_covers_whole_days(db, mirror, calendar):
    add_credential(db, ALICE)
    calendar.listed_events = [{"id": "x"}]

    events = mirror.list_events(ALICE.id, date(2025, 3, 1), date(2025, 3, 31))

    assert events == [{"id": "x"}]
    _, _, time_min, time_max = calendar.calls[-1]
    assert time_min == "2025-03-01T00:00:00+09:00"
    assert time_max == "2025-03-31T23:59:59+09:00"


# ---------- reconcile_deleted_externally ----------
@pytest.fixture
def confirmed_pair(db, workflow, store):
    for actor in (ADMIN, ALICE, BOB):
        add_credential(db, actor)
    a = submit(store, ALICE)
    b = submit(store, BOB, slot=TimeSlot.SLOT_B)
    workflow.confirm_batch([a.id, b.id], ADMIN)
    return store.get(a.id), store.get(b.id)


def test_reconcile_with_nothing_deleted_keeps_everything(mirror, store, confirmed_pair):
    assert mirror.reconcile_deleted_externally(store, ADMIN.id) == []
    assert len(store.list_by_status(CandidateStatus.confirmed)) == 2


def test_instructor_side_deletion_cancels_session(mirror, store, calendar, confirmed_pair):
    a, b = confirmed_pair
    del calendar.events[a.google_calendar_event_id]

    removed = mirror.reconcile_deleted_externally(store, ADMIN.id)

    assert removed == [a.id]
    assert store.get(a.id) is None
    assert a.admin_google_calendar_event_id not in calendar.events
    assert store.get(b.id) is not None


def test_admin_side_deletion_cancels_session(mirror, store, calendar, confirmed_pair):
    a, _ = confirmed_pair
    del calendar.events[a.admin_google_calendar_event_id]

    removed = mirror.reconcile_deleted_externally(store, ADMIN.id)

    assert removed == [a.id]
    assert a.google_calendar_event_id not in calendar.events


def test_admin_side_not_probed_when_instructor_side_is_gone(mirror, store, calendar, confirmed_pair):
    a, _ = confirmed_pair
    del calendar.events[a.google_calendar_event_id]
    calendar.calls.clear()

    mirror.reconcile_deleted_externally(store, ADMIN.id)

    probed = [c[2] for c in calendar.calls if c[0] == "get"]
    assert a.admin_google_calendar_event_id not in probed


def test_unreachable_calendar_is_not_treated_as_deletion(mirror, store, calendar, confirmed_pair):
    calendar.get_error = GoogleCalendarApiError(503, "unavailable")

    assert mirror.reconcile_deleted_externally(store, ADMIN.id) == []
    assert len(store.list_by_status(CandidateStatus.confirmed)) == 2


def test_counterpart_delete_failure_still_removes_candidate(mirror, store, calendar, confirmed_pair):
    a, _ = confirmed_pair
    del calendar.events[a.google_calendar_event_id]
    calendar.delete_error = GoogleCalendarApiError(500, "Backend Error")

    assert mirror.reconcile_deleted_externally(store, ADMIN.id) == [a.id]
    assert store.get(a.id) is None


def test_submitted_candidates_are_ignored(mirror, store, calendar, workflow, confirmed_pair):
    a, _ = confirmed_pair
    workflow.revert_to_submitted(a.id, ADMIN)
    del calendar.events[a.google_calendar_event_id]

    assert mirror.reconcile_deleted_externally(store, ADMIN.id) == []
    assert store.get(a.id) is not None
