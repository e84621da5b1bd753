import uuid

from jose import jwt

from roadworks.core.security import create_access_token, decode_token
from roadworks.models.enums import UserRole

from roadworks.tests.factories import auth_headers, create_project, create_user


def test_health(client):
    r = client.get("/api/v1/health")
    assert r.status_code == 200
    assert r.json()["status"] == "ok"
    assert r.json()["database"] == "ok"


def test_request_id_is_echoed(client):
    r = client.get("/api/v1/health", headers={"X-Request-Id": "abc-123"})
    assert r.headers["X-Request-Id"] == "abc-123"
    assert r.json()["request_id"] == "abc-123"

    r2 = client.get("/api/v1/health")
    assert r2.headers["X-Request-Id"]


def test_token_round_trip():
    uid = str(uuid.uuid4())
    payload = decode_token(create_access_token(uid, {"role": "admin"}))
    assert payload["sub"] == uid
    assert payload["role"] == "admin"
    assert payload["exp"] > payload["iat"]


def test_missing_token_is_401(client, db):
    p = create_project(db)
    r = client.get(f"/api/v1/projects/{p.id}/activity/poll")
    assert r.status_code == 401
    assert r.json()["errorType"] == "Unauthenticated"


def test_bad_tokens_are_401(client, db):
    p = create_project(db)
    url = f"/api/v1/projects/{p.id}/activity/poll"

    r = client.get(url, headers={"Authorization": "Bearer not-a-jwt"})
    assert r.status_code == 401

    forged = jwt.encode({"sub": str(uuid.uuid4()), "role": "admin"}, "wrong-secret", algorithm="HS256")
    r = client.get(url, headers={"Authorization": f"Bearer {forged}"})
    assert r.status_code == 401

    no_role = create_access_token(str(uuid.uuid4()), {})
    r = client.get(url, headers={"Authorization": f"Bearer {no_role}"})
    assert r.status_code == 401

    bad_role = create_access_token(str(uuid.uuid4()), {"role": "mayor"})
    r = client.get(url, headers={"Authorization": f"Bearer {bad_role}"})
    assert r.status_code == 401

    expired = create_access_token(str(uuid.uuid4()), {"role": "admin"}, expires_minutes=-5)
    r = client.get(url, headers={"Authorization": f"Bearer {expired}"})
    assert r.status_code == 401


def test_malformed_project_id_is_400(client, db):
    admin = create_user(db, UserRole.admin)
    r = client.get("/api/v1/projects/not-a-uuid/activity/poll", headers=auth_headers(admin))
    assert r.status_code == 400
