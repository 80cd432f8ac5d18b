# tests/test_api.py
from datetime import timedelta

import pytest
from fastapi.testclient import TestClient

from servicedesk.backend.app.db import get_db
from servicedesk.backend.app.main import app
from servicedesk.backend.app.models import Role, ServiceRequest, Status, User
from servicedesk.backend.app.services.directory import UserDirectory

from conftest import NOW, reload


@pytest.fixture
def client(db):
    def _get_db():
        yield db

    app.dependency_overrides[get_db] = _get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def headers(user):
    return {"X-User-Id": str(user.id)}


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_identity_is_required(client, make_user):
    assert client.get("/api/requests/summary").status_code == 422
    assert client.get("/api/requests/summary", headers={"X-User-Id": "999"}).status_code == 401


def test_request_lifecycle_over_http(client, db, make_user):
    creator = make_user()
    admin = make_user(Role.ADMIN)
    tech = make_user(Role.TECHNICIAN)

    created = client.post(
        "/api/requests",
        json={"title": "Laptop will not boot", "description": "Black screen", "priority": "high"},
        headers=headers(creator),
    )
    assert created.status_code == 201
    body = created.json()
    assert body["status_name"] == "Open"
    assert body["priority"] == "High"
    request_id = body["id"]

    blocked = client.post(
        f"/api/requests/{request_id}/change-status", json={"status_id": 2}, headers=headers(tech)
    )
    assert blocked.status_code == 409

    assigned = client.post(
        f"/api/requests/{request_id}/assign-technician",
        json={"technician_id": tech.id},
        headers=headers(admin),
    )
    assert assigned.status_code == 200

    for status_id, who in ((2, tech), (3, tech), (4, admin)):
        resp = client.post(
            f"/api/requests/{request_id}/change-status",
            json={"status_id": status_id},
            headers=headers(who),
        )
        assert resp.status_code == 200

    assert reload(db, ServiceRequest, request_id).status_id == Status.CLOSED
    detail = client.get(f"/api/requests/{request_id}", headers=headers(creator)).json()
    assert detail["technician_id"] == tech.id
    assert detail["status_name"] == "Closed"


def test_update_outcomes_over_http(client, make_user, make_request):
    creator = make_user()
    stranger = make_user()
    request = make_request(creator)

    assert client.put("/api/requests/999", json={"title": "x"}, headers=headers(creator)).status_code == 404
    assert (
        client.put(f"/api/requests/{request.id}", json={"title": "x"}, headers=headers(stranger)).status_code
        == 403
    )
    assert (
        client.put(f"/api/requests/{request.id}", json={"priority": "asap"}, headers=headers(creator)).status_code
        == 400
    )
    assert (
        client.put(f"/api/requests/{request.id}", json={"title": "New title"}, headers=headers(creator)).status_code
        == 204
    )


def test_missing_request_is_404_not_409(client, make_user):
    admin = make_user(Role.ADMIN)
    resp = client.post("/api/requests/31337/change-status", json={"status_id": 2}, headers=headers(admin))
    assert resp.status_code == 404


def test_dashboard_endpoints(client, make_user, make_request):
    admin = make_user(Role.ADMIN)
    user = make_user()
    make_request(user, created_at=NOW - timedelta(days=400))

    summary = client.get("/api/requests/summary-with-trends", headers=headers(admin)).json()
    assert summary["open"] == 1
    assert set(summary["trends"]) == {"open", "in_progress", "resolved", "closed"}

    assert client.get("/api/requests/priority-breakdown", headers=headers(admin)).json() == {
        "low": 0,
        "normal": 1,
        "high": 0,
    }
    assert client.get("/api/requests/priority-breakdown", headers=headers(user)).status_code == 403
    assert client.get("/api/requests/created-today", headers=headers(admin)).json() == {"created_today": 0}
    assert len(client.get("/api/requests/recent-activity", headers=headers(user)).json()) == 1


def test_last_admin_conflict_over_http(client, make_user):
    admin = make_user(Role.ADMIN)

    resp = client.put(f"/api/users/{admin.id}/role", json={"role": "User"}, headers=headers(admin))
    assert resp.status_code == 409
    assert "last active admin" in resp.json()["detail"]

    resp = client.post(f"/api/users/{admin.id}/deactivate", headers=headers(admin))
    assert resp.status_code == 409


def test_user_endpoints(client, make_user):
    admin = make_user(Role.ADMIN)
    user = make_user()

    created = client.post(
        "/api/users",
        json={
            "first_name": "linus",
            "last_name": "torvalds",
            "email": "Linus@Example.com",
            "password": "penguin-power",
            "role": "Technician",
        },
        headers=headers(admin),
    )
    assert created.status_code == 201
    new_id = created.json()["id"]

    duplicate = client.post(
        "/api/users",
        json={"first_name": "L", "last_name": "T", "email": "linus@example.com", "password": "12345678"},
        headers=headers(admin),
    )
    assert duplicate.status_code == 409

    assert client.post("/api/users", json={}, headers=headers(user)).status_code == 403

    techs = client.get("/api/users/technicians", headers=headers(admin)).json()
    assert techs == [{"id": new_id, "first_name": "Linus", "last_name": "Torvalds"}]

    listing = client.get("/api/users", params={"role": "technician"}, headers=headers(admin)).json()
    assert listing["total"] == 1
    assert listing["data"][0]["email"] == "linus@example.com"

    me = client.get("/api/users/current", headers=headers(user)).json()
    assert me["id"] == user.id
    assert me["role"] == "User"

    assert client.get("/api/users/4040", headers=headers(admin)).status_code == 404


def test_deactivated_admin_is_refused(client, db, make_user):
    make_user(Role.ADMIN)
    former = make_user(Role.ADMIN, active=False)

    assert client.get("/api/requests/summary", headers=headers(former)).status_code == 403
    assert client.get("/api/users", headers=headers(former)).status_code == 403

    resp = client.post(f"/api/users/{former.id}/activate", headers=headers(former))
    assert resp.status_code == 403
    assert reload(db, User, former.id).is_active is False

    resp = client.post(
        "/api/users",
        json={
            "first_name": "Mal",
            "last_name": "Lory",
            "email": "mal@example.com",
            "password": "12345678",
            "role": "Admin",
        },
        headers=headers(former),
    )
    assert resp.status_code == 403
    assert UserDirectory(db).email_taken("mal@example.com") is False


def test_workflow_rejections_map_to_status_codes(client, make_user, make_request):
    admin = make_user(Role.ADMIN)
    tech = make_user(Role.TECHNICIAN)
    user = make_user()
    unassigned = make_request(user)
    resolved = make_request(user, status=Status.RESOLVED, technician=tech)

    def change(request_id, status_id, who):
        return client.post(
            f"/api/requests/{request_id}/change-status", json={"status_id": status_id}, headers=headers(who)
        ).status_code

    def assign(request_id, technician_id, who):
        return client.post(
            f"/api/requests/{request_id}/assign-technician",
            json={"technician_id": technician_id},
            headers=headers(who),
        ).status_code

    assert change(resolved.id, 4, tech) == 403
    assert change(unassigned.id, 2, user) == 403
    assert change(unassigned.id, 2, tech) == 409
    assert change(31337, 2, tech) == 404

    assert assign(unassigned.id, tech.id, tech) == 403
    assert assign(31337, tech.id, admin) == 404
    assert assign(resolved.id, tech.id, admin) == 409
