import uuid
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from roadworks.core.clock import MonotonicClock, as_utc
from roadworks.core.errors import StorageUnavailable
from roadworks.models.enums import ActivityAction, UserRole
from roadworks.services.activity_store import ActivityDraft, ActivityStore

from roadworks.tests.factories import create_project, create_user

T0 = datetime(2026, 6, 1, 9, 0, tzinfo=timezone.utc)


def ticking(start=T0, step=timedelta(seconds=1)):
    state = {"t": start - step}

    def source():
        state["t"] += step
        return state["t"]

    return source


def draft(project, actor, summary="note", **kw):
    return ActivityDraft(project_id=project.id, actor_id=actor.id, summary=summary, **kw)


def test_append_assigns_increasing_timestamps(db):
    store = ActivityStore(MonotonicClock(lambda: T0))
    p = create_project(db)
    admin = create_user(db, UserRole.admin)

    rows = [store.append(db, draft(p, admin, f"n{i}")) for i in range(3)]

    stamps = [as_utc(r.created_at) for r in rows]
    assert stamps == sorted(stamps)
    assert len(set(stamps)) == 3
    assert len({r.id for r in rows}) == 3
    assert rows[0].action == ActivityAction.NOTE


def test_snapshot_is_newest_entry_and_precedes_later_appends(db):
    store = ActivityStore(MonotonicClock(lambda: T0))
    p = create_project(db)
    admin = create_user(db, UserRole.admin)

    assert store.snapshot(db, p.id) is None

    first = store.append(db, draft(p, admin))
    snap = store.snapshot(db, p.id)
    assert snap == as_utc(first.created_at)
    assert store.snapshot(db, p.id) == snap

    row = store.append(db, draft(p, admin))
    assert as_utc(row.created_at) > snap


def test_snapshot_is_capped_at_the_clock_reading(db):
    writer = ActivityStore(MonotonicClock(lambda: T0 + timedelta(hours=1)))
    lagging = ActivityStore(MonotonicClock(lambda: T0))
    p = create_project(db)
    admin = create_user(db, UserRole.admin)

    writer.append(db, draft(p, admin))
    assert lagging.snapshot(db, p.id) == T0


def test_query_after_is_strict_and_newest_first(db):
    store = ActivityStore(MonotonicClock(ticking()))
    p = create_project(db)
    other = create_project(db, name="Other")
    admin = create_user(db, UserRole.admin)

    e1 = store.append(db, draft(p, admin, "first"))
    e2 = store.append(db, draft(p, admin, "second"))
    e3 = store.append(db, draft(p, admin, "third"))
    store.append(db, draft(other, admin, "elsewhere"))

    assert [e.id for e in store.query_after(db, p.id)] == [e3.id, e2.id, e1.id]
    assert [e.id for e in store.query_after(db, p.id, cursor=as_utc(e1.created_at))] == [e3.id, e2.id]
    assert store.query_after(db, p.id, cursor=as_utc(e3.created_at)) == []


def test_query_after_loads_actor_and_milestone_fields(db):
    from roadworks.models.milestone import Milestone

    store = ActivityStore()
    p = create_project(db)
    admin = create_user(db, UserRole.admin, name="Ward Engineer")
    m = Milestone(project_id=p.id, name="Base course laid")
    db.add(m)
    db.commit()

    store.append(db, draft(p, admin, "milestone", milestone_id=m.id, details={"k": 1}))
    (entry,) = store.query_after(db, p.id)
    assert entry.actor.name == "Ward Engineer"
    assert entry.milestone.name == "Base course laid"
    assert entry.details_json == {"k": 1}


def test_query_after_limit_takes_oldest_past_cursor(db):
    store = ActivityStore(MonotonicClock(ticking()))
    p = create_project(db)
    admin = create_user(db, UserRole.admin)

    rows = [store.append(db, draft(p, admin, f"n{i}")) for i in range(5)]

    got = store.query_after(db, p.id, cursor=as_utc(rows[0].created_at), limit=2)
    assert [e.id for e in got] == [rows[2].id, rows[1].id]


def test_query_after_id_breaks_ties_on_the_cursor_timestamp(db):
    store = ActivityStore(MonotonicClock(ticking()))
    p = create_project(db)
    admin = create_user(db, UserRole.admin)
    rows = [store.append(db, draft(p, admin, f"n{i}")) for i in range(3)]
    for r in rows:
        r.created_at = T0
    db.commit()

    ordered = sorted(rows, key=lambda r: r.id)
    got = store.query_after(db, p.id, cursor=T0, after_id=ordered[0].id)
    assert {e.id for e in got} == {ordered[1].id, ordered[2].id}
    assert store.query_after(db, p.id, cursor=T0, after_id=ordered[2].id) == []
    assert store.query_after(db, p.id, cursor=T0) == []


def test_list_page_paginates_newest_first(db):
    store = ActivityStore(MonotonicClock(ticking()))
    p = create_project(db)
    admin = create_user(db, UserRole.admin)
    rows = [store.append(db, draft(p, admin, f"n{i}")) for i in range(5)]

    page1, more1 = store.list_page(db, p.id, page=1, page_size=2)
    page3, more3 = store.list_page(db, p.id, page=3, page_size=2)

    assert [e.id for e in page1] == [rows[4].id, rows[3].id]
    assert more1 is True
    assert [e.id for e in page3] == [rows[0].id]
    assert more3 is False


def _broken_session(exc):
    db = MagicMock()
    db.commit.side_effect = exc
    db.execute.side_effect = exc
    return db


def test_outage_on_append_is_storage_unavailable():
    store = ActivityStore()
    db = _broken_session(OperationalError("INSERT", {}, Exception("server closed the connection")))

    with pytest.raises(StorageUnavailable):
        store.append(db, ActivityDraft(project_id=uuid.uuid4(), actor_id=uuid.uuid4(), summary="x"))
    db.rollback.assert_called_once()


def test_outage_on_query_is_storage_unavailable():
    store = ActivityStore()
    db = _broken_session(OperationalError("SELECT", {}, Exception("could not connect")))

    with pytest.raises(StorageUnavailable):
        store.query_after(db, uuid.uuid4())


def test_integrity_errors_are_not_storage_outages():
    store = ActivityStore()
    db = _broken_session(IntegrityError("INSERT", {}, Exception("fk violation")))

    with pytest.raises(IntegrityError):
        store.append(db, ActivityDraft(project_id=uuid.uuid4(), actor_id=uuid.uuid4(), summary="x"))
