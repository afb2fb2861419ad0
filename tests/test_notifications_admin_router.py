from datetime import datetime, timezone
from types import SimpleNamespace

import pytest
from sqlalchemy.exc import IntegrityError

import jobautoflow.routers.admin as admin_mod
import jobautoflow.routers.notifications as notif_mod
from factories import job_namespace


def _notification(nid="n1", is_read=False):
    return SimpleNamespace(
        id=nid,
        type="application",
        title="Application Submitted",
        message="done",
        data={"job_id": "j1"},
        is_read=is_read,
        created_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
    )


def test_list_notifications_unread_filter(monkeypatch, client):
    captured = {}

    def _list(db, uid, unread_only, limit, offset):
        captured["unread_only"] = unread_only
        return [_notification()], 1

    monkeypatch.setattr(notif_mod, "list_for_user", _list)
    resp = client.get("/notifications", params={"unread_only": "true"})
    assert resp.status_code == 200
    assert resp.json()["total"] == 1
    assert captured["unread_only"] is True


def test_mark_read_and_read_all(monkeypatch, client):
    monkeypatch.setattr(notif_mod, "mark_read", lambda db, nid, uid: _notification(nid, is_read=True))
    monkeypatch.setattr(notif_mod, "mark_all_read", lambda db, uid: 4)
    r1 = client.post("/notifications/n1/read")
    r2 = client.post("/notifications/read-all")
    assert r1.json()["is_read"] is True
    assert r2.json() == {"updated": 4}


def test_mark_read_missing(monkeypatch, client):
    monkeypatch.setattr(notif_mod, "mark_read", lambda db, nid, uid: None)
    assert client.post("/notifications/nope/read").status_code == 404


def test_admin_routes_require_admin(client):
    resp = client.get("/admin/jobs/stats")
    assert resp.status_code == 403


def test_admin_ingest_job(monkeypatch, admin_client):
    captured = {}

    def _create(db, data):
        captured.update(data)
        return job_namespace(title=data["title"])

    monkeypatch.setattr(admin_mod, "create_job", _create)
    resp = admin_client.post(
        "/admin/jobs",
        json={"title": "SRE", "company": "ACME", "skills_required": ["k8s"], "location_type": "remote"},
    )
    assert resp.status_code == 201
    assert resp.json()["title"] == "SRE"
    assert captured["status"] == "active"


def test_admin_ingest_duplicate_is_409(monkeypatch, admin_client):
    def _create(db, data):
        raise IntegrityError("insert", {}, Exception("unique"))

    class _DB:
        def rollback(self):
            pass

    def _db_override():
        yield _DB()

    from jobautoflow.database import get_db
    from jobautoflow.main import app

    app.dependency_overrides[get_db] = _db_override
    monkeypatch.setattr(admin_mod, "create_job", _create)
    resp = admin_client.post("/admin/jobs", json={"title": "SRE", "company": "ACME", "source": "x", "external_id": "1"})
    assert resp.status_code == 409


def test_admin_patch_job(monkeypatch, admin_client):
    captured = {}

    def _update(db, job_id, data):
        captured.update(data)
        return job_namespace(status=data["status"])

    monkeypatch.setattr(admin_mod, "update_job", _update)
    resp = admin_client.patch("/admin/jobs/j1", json={"status": "closed"})
    assert resp.status_code == 200
    assert resp.json()["status"] == "closed"
    assert captured == {"status": "closed"}


def test_admin_patch_missing_job(monkeypatch, admin_client):
    monkeypatch.setattr(admin_mod, "update_job", lambda db, job_id, data: None)
    assert admin_client.patch("/admin/jobs/j1", json={"status": "closed"}).status_code == 404


def test_admin_job_stats(monkeypatch, admin_client):
    stats = {"total": 3, "active": 2, "new_this_week": 1, "top_companies": [{"company": "ACME", "count": 2}]}
    monkeypatch.setattr(admin_mod, "get_job_stats", lambda db: stats)
    resp = admin_client.get("/admin/jobs/stats")
    assert resp.status_code == 200
    assert resp.json() == stats


def test_admin_job_stats_failure(monkeypatch, admin_client):
    monkeypatch.setattr(admin_mod, "get_job_stats", lambda db: (_ for _ in ()).throw(RuntimeError("db")))
    resp = admin_client.get("/admin/jobs/stats")
    assert resp.status_code == 500


def test_delete_notification(monkeypatch, client):
    deleted = []
    monkeypatch.setattr(notif_mod, "delete_notification", lambda db, nid, uid: deleted.append((nid, uid)) or True)
    resp = client.delete("/notifications/n1")
    assert resp.status_code == 200
    assert deleted == [("n1", "user-1")]


def test_delete_missing_notification(monkeypatch, client):
    monkeypatch.setattr(notif_mod, "delete_notification", lambda db, nid, uid: False)
    resp = client.delete("/notifications/n1")
    assert resp.status_code == 404
    assert resp.json()["code"] == "NOT_FOUND"


def _account(user_id="u2", **kwargs):
    data = {
        "id": user_id,
        "email": f"{user_id}@example.com",
        "first_name": "Grace",
        "last_name": "Hopper",
        "is_active": True,
        "is_admin": False,
        "created_at": datetime(2024, 1, 1, tzinfo=timezone.utc),
    }
    data.update(kwargs)
    return SimpleNamespace(**data)


def test_admin_stats(monkeypatch, admin_client):
    stats = {"users": {"total": 2}, "applications": {"total": 1}, "jobs": {"total": 4}}
    monkeypatch.setattr(admin_mod, "get_stats", lambda db: stats)
    resp = admin_client.get("/admin/stats")
    assert resp.status_code == 200
    assert resp.json() == stats


def test_admin_list_users_pages(monkeypatch, admin_client):
    captured = {}

    def _list(db, search, is_active, is_admin, limit, offset):
        captured.update(search=search, is_active=is_active, limit=limit, offset=offset)
        return [_account()], 41

    monkeypatch.setattr(admin_mod, "get_all_users_paginated", _list)
    resp = admin_client.get("/admin/users", params={"search": "grace", "is_active": "true", "page": 3, "page_size": 20})
    assert resp.status_code == 200
    body = resp.json()
    assert body["total"] == 41
    assert body["items"][0]["email"] == "u2@example.com"
    assert captured == {"search": "grace", "is_active": True, "limit": 20, "offset": 40}


def test_admin_get_user_detail(monkeypatch, admin_client):
    monkeypatch.setattr(admin_mod, "get_by_id", lambda db, uid: _account(uid))
    monkeypatch.setattr(admin_mod, "get_profile", lambda db, uid: object())
    monkeypatch.setattr(admin_mod, "get_preferences", lambda db, uid: SimpleNamespace(auto_apply_enabled=True))
    monkeypatch.setattr(admin_mod, "count_for_user", lambda db, uid: 7)
    resp = admin_client.get("/admin/users/u2")
    assert resp.status_code == 200
    body = resp.json()
    assert body["has_profile"] is True
    assert body["auto_apply_enabled"] is True
    assert body["application_count"] == 7


def test_admin_get_missing_user(monkeypatch, admin_client):
    monkeypatch.setattr(admin_mod, "get_by_id", lambda db, uid: None)
    assert admin_client.get("/admin/users/nope").status_code == 404


def test_admin_update_user(monkeypatch, admin_client):
    captured = {}

    def _update(db, uid, **fields):
        captured.update(fields)
        return _account(uid, **fields)

    monkeypatch.setattr(admin_mod, "update_user", _update)
    resp = admin_client.patch("/admin/users/u2", json={"is_active": False})
    assert resp.status_code == 200
    assert resp.json()["is_active"] is False
    assert captured == {"is_active": False}


def test_admin_cannot_demote_or_deactivate_self(monkeypatch, admin_client):
    monkeypatch.setattr(admin_mod, "update_user", lambda *a, **k: pytest.fail("self update must be refused"))
    assert admin_client.patch("/admin/users/admin-1", json={"is_admin": False}).status_code == 400
    assert admin_client.patch("/admin/users/admin-1", json={"is_active": False}).status_code == 400


def test_admin_update_missing_user(monkeypatch, admin_client):
    monkeypatch.setattr(admin_mod, "update_user", lambda db, uid, **fields: None)
    assert admin_client.patch("/admin/users/nope", json={"is_admin": True}).status_code == 404


def test_admin_delete_user(monkeypatch, admin_client):
    deleted = []
    monkeypatch.setattr(admin_mod, "delete_user", lambda db, uid: deleted.append(uid) or True)
    assert admin_client.delete("/admin/users/u2").status_code == 200
    assert deleted == ["u2"]


def test_admin_delete_self_or_missing(monkeypatch, admin_client):
    monkeypatch.setattr(admin_mod, "delete_user", lambda db, uid: False)
    assert admin_client.delete("/admin/users/admin-1").status_code == 400
    assert admin_client.delete("/admin/users/nope").status_code == 404


def test_user_admin_routes_require_admin(client):
    assert client.get("/admin/users").status_code == 403
    assert client.delete("/admin/users/u2").status_code == 403
