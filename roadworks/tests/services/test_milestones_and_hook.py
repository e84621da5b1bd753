import uuid
from datetime import date

import pytest

from roadworks.core.errors import Forbidden, NotFound, Unauthenticated
from roadworks.models.enums import ActivityAction, UserRole
from roadworks.services.activity_hook import record_activity
from roadworks.services.activity_store import ActivityStore
from roadworks.services.milestones_service import MilestonesService

from roadworks.tests.factories import add_member, caller_for, create_project, create_user


def test_create_milestone_appends_linked_entry(db):
    p = create_project(db)
    admin = create_user(db, UserRole.admin)
    store = ActivityStore()

    m = MilestonesService(store).create(db, caller_for(admin), project_id=p.id, name="Kerbing", due_date=date(2026, 9, 1))

    (entry,) = store.query_after(db, p.id)
    assert entry.action == ActivityAction.MILESTONE_CREATED
    assert entry.milestone.id == m.id
    assert [x.name for x in MilestonesService(store).list(db, caller_for(admin), p.id)] == ["Kerbing"]


def test_milestones_follow_feed_access(db):
    p = create_project(db)
    outsider = create_user(db, UserRole.contractor)
    member = create_user(db, UserRole.other)
    add_member(db, p, member)
    svc = MilestonesService(ActivityStore())

    with pytest.raises(Forbidden):
        svc.list(db, caller_for(outsider), p.id)
    svc.create(db, caller_for(member), project_id=p.id, name="Drainage")
    assert len(svc.list(db, caller_for(member), p.id)) == 1


def test_record_activity_actor_is_caller(db):
    p = create_project(db)
    contractor = create_user(db, UserRole.contractor)
    add_member(db, p, contractor)

    e = record_activity(db, ActivityStore(), caller_for(contractor), project_id=p.id,
                        summary="Crew on site", details={"crew": 4})
    assert e.actor_id == contractor.id
    assert e.action == ActivityAction.NOTE
    assert e.details_json == {"crew": 4}


def test_record_activity_rejections(db):
    p = create_project(db)
    other_p = create_project(db, name="Other")
    admin = create_user(db, UserRole.admin)
    outsider = create_user(db, UserRole.contractor)
    store = ActivityStore()
    foreign = MilestonesService(store).create(db, caller_for(admin), project_id=other_p.id, name="Elsewhere")

    with pytest.raises(Unauthenticated):
        record_activity(db, store, None, project_id=p.id, summary="x")
    with pytest.raises(Forbidden):
        record_activity(db, store, caller_for(outsider), project_id=p.id, summary="x")
    with pytest.raises(NotFound):
        record_activity(db, store, caller_for(admin), project_id=uuid.uuid4(), summary="x")
    with pytest.raises(NotFound):
        record_activity(db, store, caller_for(admin), project_id=p.id, summary="x", milestone_id=foreign.id)
