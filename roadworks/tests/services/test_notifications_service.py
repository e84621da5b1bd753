import uuid
from datetime import datetime, timedelta, timezone

import pytest

from roadworks.core.errors import NotFound, Unauthenticated
from roadworks.models.enums import NotificationType, UserRole
from roadworks.services.activity_store import ActivityStore
from roadworks.services.assignments_service import AssignmentsService
from roadworks.services.milestones_service import MilestonesService
from roadworks.services.notifications_service import INBOX_SIZE, NotificationsService

from roadworks.tests.factories import (
    add_member,
    caller_for,
    create_notification,
    create_project,
    create_segment,
    create_user,
)

T0 = datetime(2026, 8, 1, 7, 0, tzinfo=timezone.utc)


def test_inbox_is_owner_scoped_newest_first(db):
    alice = create_user(db, UserRole.contractor, name="Alice")
    bob = create_user(db, UserRole.contractor, name="Bob")
    for i in range(3):
        create_notification(db, alice, f"a{i}", created_at=T0 + timedelta(minutes=i))
    create_notification(db, bob, "b0", created_at=T0)

    rows = NotificationsService().list_for(db, caller_for(alice))
    assert [n.title for n in rows] == ["a2", "a1", "a0"]


def test_inbox_keeps_latest_thirty(db):
    user = create_user(db, UserRole.other)
    for i in range(INBOX_SIZE + 5):
        create_notification(db, user, f"n{i}", created_at=T0 + timedelta(seconds=i))

    rows = NotificationsService().list_for(db, caller_for(user))
    assert len(rows) == INBOX_SIZE == 30
    assert rows[0].title == f"n{INBOX_SIZE + 4}"
    assert rows[-1].title == "n5"


def test_inbox_requires_caller(db):
    with pytest.raises(Unauthenticated):
        NotificationsService().list_for(db, None)


def test_mark_read_only_for_owner(db):
    alice = create_user(db, UserRole.contractor)
    bob = create_user(db, UserRole.contractor)
    n = create_notification(db, alice)
    svc = NotificationsService()

    with pytest.raises(NotFound):
        svc.mark_read(db, caller_for(bob), n.id)
    with pytest.raises(NotFound):
        svc.mark_read(db, caller_for(alice), uuid.uuid4())

    assert svc.mark_read(db, caller_for(alice), n.id).is_read is True
    # marking twice is harmless
    assert svc.mark_read(db, caller_for(alice), n.id).is_read is True


def test_notify_dedupes_recipients(db):
    user = create_user(db, UserRole.other)
    rows = NotificationsService().notify(db, [user.id, user.id], title="t", message="m")
    assert len(rows) == 1
    assert rows[0].type == NotificationType.system.value
    assert NotificationsService().notify(db, [], title="t", message="m") == []


def test_new_milestone_notifies_other_members(db):
    p = create_project(db)
    admin = create_user(db, UserRole.admin)
    member = create_user(db, UserRole.contractor)
    add_member(db, p, admin)
    add_member(db, p, member)

    MilestonesService(ActivityStore()).create(db, caller_for(admin), project_id=p.id, name="Kerbing")

    (n,) = NotificationsService().list_for(db, caller_for(member))
    assert n.type == NotificationType.milestone.value
    assert n.project_id == p.id
    assert "Kerbing" in n.message
    assert NotificationsService().list_for(db, caller_for(admin)) == []


def test_new_assignment_notifies_contractor(db):
    p = create_project(db)
    admin = create_user(db, UserRole.admin)
    contractor = create_user(db, UserRole.contractor)
    seg = create_segment(db, p, name="MG Road")

    AssignmentsService(ActivityStore()).create(
        db, caller_for(admin),
        road_segment_id=seg.id, contractor_id=contractor.id,
        start_at=T0, end_at=T0 + timedelta(days=3),
    )

    (n,) = NotificationsService().list_for(db, caller_for(contractor))
    assert n.type == NotificationType.assignment.value
    assert n.message == "You were assigned to MG Road."
    assert n.is_read is False
