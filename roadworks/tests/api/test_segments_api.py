import uuid
from datetime import datetime, timedelta, timezone

from roadworks.models.enums import ActivityAction, UserRole

from roadworks.tests.factories import add_member, auth_headers, create_assignment, create_project, create_segment, create_user

DAY1 = datetime(2026, 3, 1, tzinfo=timezone.utc)


def day(n):
    return DAY1 + timedelta(days=n - 1)


def test_segment_status_listing(client, db):
    p = create_project(db)
    contractor = create_user(db, UserRole.contractor)
    seg = create_segment(db, p, name="Mall Road", coords=[(76.7794, 30.3782), (76.7821, 30.3790)])
    a1 = create_assignment(db, seg, contractor, day(1), day(10))
    create_assignment(db, seg, contractor, day(3), day(6))

    r = client.get(
        f"/api/v1/projects/{p.id}/segments",
        params={"now": day(4).isoformat()},
        headers=auth_headers(contractor),
    )
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["asOfIso"] == day(4).isoformat()
    (s,) = body["segments"]
    assert s["name"] == "Mall Road"
    assert s["status"] == "active"
    assert s["activeAssignmentId"] == str(a1.id)
    assert s["renderedGeometry"] == [[30.3782, 76.7794], [30.3790, 76.7821]]

    later = client.get(
        f"/api/v1/projects/{p.id}/segments",
        params={"now": day(11).isoformat()},
        headers=auth_headers(contractor),
    ).json()
    assert later["segments"][0]["status"] == "completed"
    assert later["segments"][0]["activeAssignmentId"] is None


def test_segment_listing_errors(client, db):
    p = create_project(db)
    admin = create_user(db, UserRole.admin)

    assert client.get(f"/api/v1/projects/{p.id}/segments").status_code == 401
    r = client.get(f"/api/v1/projects/{uuid.uuid4()}/segments", headers=auth_headers(admin))
    assert r.status_code == 404
    assert r.json()["errorType"] == "NotFound"


def test_create_segment(client, db):
    p = create_project(db)
    admin = create_user(db, UserRole.admin)

    r = client.post(
        f"/api/v1/projects/{p.id}/segments",
        json={"name": "Ring Road", "coordinates": [[0, 0], [0, 1]]},
        headers=auth_headers(admin),
    )
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["geometry"] == {"type": "LineString", "coordinates": [[0.0, 0.0], [0.0, 1.0]]}
    assert round(body["lengthMeters"]) == 111195

    poll = client.get(f"/api/v1/projects/{p.id}/activity/poll", headers=auth_headers(admin)).json()
    assert [e["action"] for e in poll["entries"]] == [ActivityAction.SEGMENT_CREATED]


def test_create_segment_rejects_bad_geometry(client, db):
    p = create_project(db)
    admin = create_user(db, UserRole.admin)
    url = f"/api/v1/projects/{p.id}/segments"

    r = client.post(url, json={"name": "Bad", "coordinates": [[-200, 10]]}, headers=auth_headers(admin))
    assert r.status_code == 422
    assert r.json()["errorType"] == "InvalidGeometry"

    r = client.post(url, json={"name": "Dot", "coordinates": [[10, 20], [10, 20]]}, headers=auth_headers(admin))
    assert r.status_code == 422

    poll = client.get(f"/api/v1/projects/{p.id}/activity/poll", headers=auth_headers(admin)).json()
    assert poll["entries"] == []


def test_create_segment_admin_only(client, db):
    p = create_project(db)
    contractor = create_user(db, UserRole.contractor)
    add_member(db, p, contractor)

    r = client.post(
        f"/api/v1/projects/{p.id}/segments",
        json={"name": "Ring Road", "coordinates": [[0, 0], [0, 1]]},
        headers=auth_headers(contractor),
    )
    assert r.status_code == 403
