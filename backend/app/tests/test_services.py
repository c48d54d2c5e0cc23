"""
Service-level tests for the settlement engine and deletion cascade.
"""
from datetime import date, timedelta

import pytest

from app.core.context import SessionContext
from app.core.exceptions import NotFound, PartialFailure, SettleError, Unauthenticated
from app.models.settlement import Settlement
from app.schemas.resolution import OtherResolution, ThreeWayResolution
from app.schemas.standby import StandbyCreate
from app.services import deletion_service, settlement_service, standby_service, standby_store

YESTERDAY = date.today() - timedelta(days=1)


def add(db, ctx, **fields):
    data = {"person_name": "john smith", "shift_date": YESTERDAY, "shift_type": "Day"}
    data.update(fields)
    return standby_service.create_event(db, ctx, StandbyCreate(**data))


def test_writes_need_a_session(db_session):
    with pytest.raises(Unauthenticated):
        add(db_session, None)
    with pytest.raises(Unauthenticated):
        settlement_service.settle(db_session, None, 1, 2)
    with pytest.raises(Unauthenticated):
        deletion_service.soft_delete(db_session, None, 1)


def test_reads_without_session_are_empty(db_session, ctx):
    add(db_session, ctx)
    assert standby_store.list_events(db_session, None) == []
    assert standby_store.list_all(db_session, None) == []
    assert standby_store.list_distinct_names(db_session, None, 10) == []


def test_settle_writes_all_three_fields_together(db_session, ctx):
    a = add(db_session, ctx)
    b = add(db_session, ctx, worked_for_me=True)

    settlement = settlement_service.settle(db_session, ctx, a.id, b.id)

    assert a.settled and b.settled
    assert a.settlement_group_id == b.settlement_group_id == settlement.id
    assert a.settled_at == b.settled_at
    assert db_session.query(Settlement).count() == 1


def test_three_way_twice_keeps_one_marker(db_session, ctx):
    a = add(db_session, ctx)
    b = add(db_session, ctx, person_name="jane doe", worked_for_me=True)

    group_id = settlement_service.settle(db_session, ctx, a.id, b.id, ThreeWayResolution()).id
    settlement_service.unsettle(db_session, ctx, group_id)
    settlement_service.settle(db_session, ctx, a.id, b.id, ThreeWayResolution())

    assert a.notes == "Three way standby"
    assert b.notes == "Three way standby"


def test_settle_against_deleted_changes_nothing(db_session, ctx):
    a = add(db_session, ctx, notes="keep me")
    b = add(db_session, ctx, worked_for_me=True)
    deletion_service.soft_delete(db_session, ctx, b.id)

    with pytest.raises(SettleError):
        settlement_service.settle(db_session, ctx, a.id, b.id, OtherResolution(note="swap"))

    db_session.refresh(a)
    assert a.settled is False
    assert a.settlement_group_id is None
    assert a.notes == "keep me"
    assert db_session.query(Settlement).count() == 0


def test_soft_delete_cascades_and_is_idempotent(db_session, ctx):
    a = add(db_session, ctx)
    b = add(db_session, ctx, worked_for_me=True)
    settlement_service.settle(db_session, ctx, a.id, b.id)

    deleted = deletion_service.soft_delete(db_session, ctx, a.id)
    stamp = deleted.deleted_at
    assert stamp is not None
    assert b.settled is False
    assert b.settlement_group_id is None

    again = deletion_service.soft_delete(db_session, ctx, a.id)
    assert again.deleted_at == stamp


def test_restore_never_resurrects_the_pair(db_session, ctx):
    a = add(db_session, ctx)
    b = add(db_session, ctx, worked_for_me=True)
    settlement_service.settle(db_session, ctx, a.id, b.id)
    deletion_service.soft_delete(db_session, ctx, a.id)

    restored = deletion_service.restore(db_session, ctx, a.id)

    assert restored.deleted_at is None
    assert restored.settled is False
    assert restored.settled_at is None
    assert restored.settlement_group_id is None


def test_link_on_add_reports_partial_failure(db_session, ctx):
    with pytest.raises(PartialFailure) as excinfo:
        settlement_service.link_on_add(
            db_session, ctx, StandbyCreate(person_name="amy", shift_date=YESTERDAY, shift_type="Night"), 999
        )

    failure = excinfo.value
    created_id = failure.completed[0]["standby_id"]
    assert failure.failed[0]["reason"]["error"] == "NotFound"
    created = standby_store.get_by_id(db_session, ctx, created_id)
    assert created.settled is False
    assert created.deleted_at is None


def test_get_by_id_is_owner_scoped(db_session, ctx):
    a = add(db_session, ctx)
    other = SessionContext(user_id=ctx.user_id + 1, username="mallory")
    with pytest.raises(NotFound):
        standby_store.get_by_id(db_session, other, a.id)


def test_settle_candidates_skip_deleted_source(db_session, ctx):
    owed = add(db_session, ctx)
    owe = add(db_session, ctx, worked_for_me=True)
    assert [c.id for c in settlement_service.settle_candidates(db_session, ctx, owed.id)] == [owe.id]

    deletion_service.soft_delete(db_session, ctx, owed.id)
    assert settlement_service.settle_candidates(db_session, ctx, owed.id) == []


def test_other_reason_is_recorded_on_both_sides(db_session, ctx):
    a = add(db_session, ctx, notes="Swapped the late shift")
    b = add(db_session, ctx, person_name="jane doe", worked_for_me=True)

    settlement_service.settle(db_session, ctx, a.id, b.id, OtherResolution(note="late"))

    assert a.notes == "Swapped the late shift\n\nlate"
    assert b.notes == "late"
