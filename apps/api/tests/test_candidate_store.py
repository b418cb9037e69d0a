"""Tests for candidate CRUD and ownership rules."""

from datetime import date

from app.models.session_candidate import CandidateStatus, SessionCandidate
from app.schemas.candidates import Candidate, CandidateCreate, CandidateUpdate
from app.scheduling.time_slots import TimeSlot
from app.services.candidate_store import MASKED_INSTRUCTOR_NAME

from conftest import ADMIN, ALICE, BOB, DAY, submit


def test_create_uses_actor_identity_for_instructors(store):
    payload = CandidateCreate(
        date=DAY,
        time_slot=TimeSlot.SLOT_B,
        memo="first try",
        instructor_id="someone-else",
        instructor_name="Mallory",
    )

    c = store.create(payload, ALICE)

    assert c.instructor_id == ALICE.id
    assert c.instructor_name == "Alice"
    assert c.status == CandidateStatus.submitted
    assert c.confirmed_at is None
    assert c.month == "2025-03"
    assert c.memo == "first try"


def test_admin_may_submit_on_behalf_of_instructor(store):
    payload = CandidateCreate(date=DAY, time_slot=TimeSlot.SLOT_A, instructor_id=BOB.id, instructor_name="Bob")

    c = store.create(payload, ADMIN)

    assert (c.instructor_id, c.instructor_name) == (BOB.id, "Bob")


def test_empty_memo_is_stored_as_none(store):
    assert submit(store, ALICE, memo="").memo is None


def test_update_by_owner(store):
    c = submit(store, ALICE)

    updated = store.update(c.id, CandidateUpdate(date=date(2025, 4, 2), memo="moved"), ALICE)

    assert updated.date == date(2025, 4, 2)
    assert updated.month == "2025-04"
    assert updated.memo == "moved"


def test_update_by_other_instructor_is_a_no_op(store):
    c = submit(store, ALICE, memo="mine")

    result = store.update(c.id, CandidateUpdate(memo="hijacked"), BOB)

    assert result.memo == "mine"
    assert store.get(c.id).memo == "mine"


def test_instructor_cannot_reassign_ownership(store):
    c = submit(store, ALICE)

    result = store.update(c.id, CandidateUpdate(instructor_id=BOB.id, memo="note"), ALICE)

    assert result.instructor_id == ALICE.id
    assert result.memo == "note"


def test_confirmed_candidate_is_frozen_for_instructor(store):
    c = submit(store, ALICE)
    store.set_status(c.id, CandidateStatus.confirmed)

    result = store.update(c.id, CandidateUpdate(time_slot=TimeSlot.SLOT_B), ALICE)

    assert result.time_slot == TimeSlot.SLOT_A


def test_admin_may_edit_confirmed_candidate(store):
    c = submit(store, ALICE)
    store.set_status(c.id, CandidateStatus.confirmed)

    result = store.update(c.id, CandidateUpdate(time_slot=TimeSlot.SLOT_B), ADMIN)

    assert result.time_slot == TimeSlot.SLOT_B


def test_update_cannot_null_required_fields(store):
    c = submit(store, ALICE)

    result = store.update(c.id, CandidateUpdate(date=None, time_slot=None), ALICE)

    assert result.date == DAY
    assert result.time_slot == TimeSlot.SLOT_A


def test_update_unknown_candidate_returns_none(store):
    assert store.update("missing", CandidateUpdate(memo="x"), ADMIN) is None


def test_delete_rules(store):
    mine = submit(store, ALICE)
    confirmed = submit(store, ALICE, slot=TimeSlot.SLOT_B)
    store.set_status(confirmed.id, CandidateStatus.confirmed)

    assert store.delete(mine.id, BOB) is False
    assert store.delete(confirmed.id, ALICE) is False
    assert store.delete(mine.id, ALICE) is True
    assert store.delete(confirmed.id, ALICE, force=True) is True
    assert store.get(mine.id) is None
    assert store.get(confirmed.id) is None
    assert store.delete("missing", ADMIN) is False


def test_set_status_keeps_confirmed_at_in_step(store):
    c = submit(store, ALICE)

    confirmed = store.set_status(c.id, CandidateStatus.confirmed)
    assert confirmed.status == CandidateStatus.confirmed
    assert confirmed.confirmed_at is not None

    reverted = store.set_status(c.id, CandidateStatus.submitted)
    assert reverted.status == CandidateStatus.submitted
    assert reverted.confirmed_at is None


def test_get_many_keeps_request_order_and_drops_unknown(store):
    a = submit(store, ALICE)
    b = submit(store, BOB)

    result = store.get_many([b.id, "missing", a.id, b.id])

    assert [c.id for c in result] == [b.id, a.id]


def test_list_filters(store):
    a = submit(store, ALICE)
    b = submit(store, BOB, slot=TimeSlot.SLOT_B)
    store.set_status(b.id, CandidateStatus.confirmed)

    assert [c.id for c in store.list_by_instructor(ALICE.id)] == [a.id]
    assert [c.id for c in store.list_by_status(CandidateStatus.confirmed)] == [b.id]
    assert {c.id for c in store.list_all()} == {a.id, b.id}


def test_board_masks_other_instructors(store):
    submit(store, ALICE, memo="alice note")
    submit(store, BOB, memo="bob note")

    board = {e.is_mine: e for e in store.board_for_instructor(ALICE)}

    assert board[True].instructor_name == "Alice"
    assert board[True].memo == "alice note"
    assert board[False].instructor_name == MASKED_INSTRUCTOR_NAME
    assert board[False].memo is None


def test_set_calendar_event_ids_only_overwrites_given_ids(store):
    c = submit(store, ALICE)
    store.set_calendar_event_ids(c.id, instructor_event_id="evt-i")

    result = store.set_calendar_event_ids(c.id, admin_event_id="evt-a", admin_calendar_user_id=ADMIN.id)

    assert result.google_calendar_event_id == "evt-i"
    assert result.admin_google_calendar_event_id == "evt-a"
    assert result.admin_calendar_user_id == ADMIN.id


def test_row_mapping_accounts_for_every_column(store):
    c = submit(store, ALICE, memo="note")
    store.set_calendar_event_ids(c.id, instructor_event_id="evt-i")
    c = store.get(c.id)

    values = c.to_row_values()
    row = SessionCandidate(**values)

    assert set(values) == {col.name for col in SessionCandidate.__table__.columns} - {"created_at"}
    assert Candidate.from_row(row) == c


def test_admin_edit_is_not_capacity_checked(store):
    for actor in (ALICE, BOB):
        store.set_status(submit(store, actor).id, CandidateStatus.confirmed)
    moved = submit(store, ADMIN, slot=TimeSlot.SLOT_B)
    store.set_status(moved.id, CandidateStatus.confirmed)

    result = store.update(moved.id, CandidateUpdate(time_slot=TimeSlot.SLOT_A), ADMIN)

    assert result.time_slot == TimeSlot.SLOT_A
    assert store.count_confirmed_in_slot(result) == 3
