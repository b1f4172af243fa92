# -*- coding: utf-8 -*-
"""内部备份 / 恢复接口。"""
from datetime import datetime, timedelta

from sqlalchemy import select

from extensions.database import db
from models import Comment
from services.backup_service import BackupService
from utils.datetime_helpers import to_iso

INTERNAL = {"x-internal-request": "true"}


def _seed(app, tenant_id="tenant-test", resource_id="1"):
    """一条父评论 + 两条回复，时间依次递增。"""
    base = datetime(2024, 1, 1, 12, 0, 0)
    with app.app_context():
        parent = Comment(
            tenant_id=tenant_id, resource_type="post", resource_id=resource_id,
            content="parent", guest_name="g", status="APPROVED", created_at=base,
        )
        db.session.add(parent)
        db.session.flush()
        for i in (1, 2):
            db.session.add(Comment(
                tenant_id=tenant_id, resource_type="post", resource_id=resource_id,
                content=f"child-{i}", guest_name="g", status="APPROVED",
                parent_id=parent.id, created_at=base + timedelta(minutes=i),
            ))
        db.session.commit()
        return parent.id


def test_internal_endpoints_require_header(client):
    assert client.request("GET", "/internal/export")["_http_status"] == 403
    assert client.request("POST", "/internal/restore", json_data={"comments": []})["_http_status"] == 403
    resp = client.request("GET", "/internal/export", headers={"x-internal-request": "yes"})
    assert resp["_http_status"] == 403


def test_health_needs_no_header(client):
    resp = client.request("GET", "/internal/health")
    assert resp["_http_status"] == 200
    assert resp["status"] == "ok"
    assert resp["internal"] is True
    assert resp["service"]


def test_export_orders_by_created_at_desc(app, client):
    _seed(app)
    resp = client.request("GET", "/internal/export", headers=INTERNAL)
    assert resp["_http_status"] == 200
    contents = [c["content"] for c in resp["data"]["comments"]]
    assert contents == ["child-2", "child-1", "parent"]
    assert resp["meta"]["counts"]["comments"] == 3
    assert resp["meta"]["tenantId"] == "tenant-test"
    assert resp["meta"]["exportedAt"].endswith("Z")

    # POST 同样可用
    resp = client.request("POST", "/internal/export", headers=INTERNAL)
    assert resp["meta"]["counts"]["comments"] == 3


def test_export_is_tenant_scoped(app, client):
    _seed(app, tenant_id="tenant-a")
    _seed(app, tenant_id="tenant-b")
    resp = client.request("GET", "/internal/export", headers={**INTERNAL, "x-tenant-id": "tenant-a"})
    assert resp["meta"]["counts"]["comments"] == 3
    assert {c["tenantId"] for c in resp["data"]["comments"]} == {"tenant-a"}


def test_restore_children_first_input(app, client):
    _seed(app)
    exported = client.request("GET", "/internal/export", headers=INTERNAL)["data"]["comments"]
    # 导出顺序是 createdAt 倒序，即子评论在前
    assert exported[-1]["parentId"] is None

    resp = client.request("POST", "/internal/restore", json_data={"comments": exported}, headers=INTERNAL)
    assert resp["_http_status"] == 200
    assert resp["data"]["comments"] == {"deleted": 3, "restored": 3, "skipped": 0}
    assert resp["meta"]["tenantId"] == "tenant-test"
    assert resp["meta"]["restoredAt"].endswith("Z")

    again = client.request("GET", "/internal/export", headers=INTERNAL)["data"]["comments"]
    assert sorted(c["id"] for c in again) == sorted(c["id"] for c in exported)
    by_id = {c["id"]: c for c in again}
    for c in exported:
        assert by_id[c["id"]]["parentId"] == c["parentId"]
        assert by_id[c["id"]]["createdAt"] == c["createdAt"]


def test_restore_twice_reports_same_counts(app, client):
    _seed(app)
    exported = client.request("GET", "/internal/export", headers=INTERNAL)["data"]["comments"]

    first = client.request("POST", "/internal/restore", json_data={"comments": exported}, headers=INTERNAL)
    second = client.request("POST", "/internal/restore", json_data={"comments": exported}, headers=INTERNAL)
    assert first["data"]["comments"] == second["data"]["comments"] == {"deleted": 3, "restored": 3, "skipped": 0}


def test_restore_skips_bad_items_without_aborting(app, client):
    now = to_iso(datetime(2024, 2, 1))
    items = [
        {"id": 10, "resourceType": "post", "resourceId": "1", "content": "ok", "status": "APPROVED", "createdAt": now},
        {"id": 11, "resourceType": "post", "resourceId": "1", "content": "orphan", "parentId": 999, "createdAt": now},
        {"id": 12, "resourceType": "post", "resourceId": "1", "content": "bad status", "status": "NOPE"},
        {"resourceType": "post", "resourceId": "1", "content": "no id"},
        {"id": 10, "resourceType": "post", "resourceId": "1", "content": "duplicate id"},
        {"id": 13, "resourceType": "post", "resourceId": "1", "content": "reply", "parentId": 10, "createdAt": now},
    ]
    resp = client.request("POST", "/internal/restore", json_data={"comments": items}, headers=INTERNAL)
    assert resp["_http_status"] == 200
    assert resp["data"]["comments"] == {"deleted": 0, "restored": 2, "skipped": 4}

    with app.app_context():
        rows = {c.id: c for c in db.session.execute(select(Comment)).scalars()}
        assert set(rows) == {10, 13}
        assert rows[13].parent_id == 10
        assert rows[10].tenant_id == "tenant-test"


def test_restore_rewrites_records_into_resolved_tenant(app, client):
    _seed(app, tenant_id="tenant-b")
    items = [{"id": 50, "tenantId": "tenant-zzz", "resourceType": "post", "resourceId": "7", "content": "moved"}]
    resp = client.request(
        "POST", "/internal/restore", json_data={"comments": items},
        headers={**INTERNAL, "x-tenant-id": "tenant-a"},
    )
    assert resp["data"]["comments"] == {"deleted": 0, "restored": 1, "skipped": 0}

    with app.app_context():
        assert db.session.get(Comment, 50).tenant_id == "tenant-a"
        # 其他租户的数据不受影响
        others = db.session.execute(select(Comment).where(Comment.tenant_id == "tenant-b")).scalars().all()
        assert len(others) == 3


def test_restore_rejects_non_list_payload(client):
    resp = client.request("POST", "/internal/restore", json_data={"comments": {"id": 1}}, headers=INTERNAL)
    assert resp["_http_status"] == 400


def test_order_for_restore_is_stable_and_parents_first():
    items = [
        {"id": 3, "parentId": 1},
        {"id": 1, "parentId": None},
        {"id": 4, "parentId": 2},
        {"id": 2},
    ]
    ordered = BackupService.order_for_restore(items)
    assert [i["id"] for i in ordered] == [1, 2, 3, 4]


def test_restore_keeps_comments_of_accounts_unknown_here(app, client, make_post):
    post = make_post()
    items = [
        {"id": 70, "resourceType": "post", "resourceId": str(post["id"]), "content": "from another instance",
         "authorId": 4242, "status": "APPROVED", "isPrivate": "false"},
        {"id": 71, "resourceType": "post", "resourceId": str(post["id"]), "content": "bad author",
         "authorId": "someone"},
    ]
    resp = client.request("POST", "/internal/restore", json_data={"comments": items}, headers=INTERNAL)
    assert resp["data"]["comments"] == {"deleted": 0, "restored": 1, "skipped": 1}

    with app.app_context():
        row = db.session.get(Comment, 70)
        assert row.author_id == 4242
        assert row.author is None
        assert row.is_private is False

    listed = client.request("GET", f"/api/comments/post/{post['id']}")["data"]
    assert [c["id"] for c in listed["comments"]] == [70]
    assert listed["comments"][0]["author"] is None


def test_restore_parses_string_flags(app, client):
    items = [
        {"id": 80, "resourceType": "post", "resourceId": "1", "content": "a", "isPrivate": "false", "isDeleted": "0"},
        {"id": 81, "resourceType": "post", "resourceId": "1", "content": "b", "isPrivate": "true", "isDeleted": True},
        {"id": 82, "resourceType": "post", "resourceId": "1", "content": "c", "isPrivate": 0},
    ]
    resp = client.request("POST", "/internal/restore", json_data={"comments": items}, headers=INTERNAL)
    assert resp["data"]["comments"]["restored"] == 3

    with app.app_context():
        rows = {c.id: c for c in db.session.execute(select(Comment)).scalars()}
        assert (rows[80].is_private, rows[80].is_deleted) == (False, False)
        assert (rows[81].is_private, rows[81].is_deleted) == (True, True)
        assert rows[82].is_private is False
