# -*- coding: utf-8 -*-


def test_duplicate_slug_is_validation_error(admin_client):
    resp = admin_client.request("POST", "/api/tags", json_data={"name": "Python", "slug": "python"})
    assert resp["_http_status"] == 201
    resp = admin_client.request("POST", "/api/tags", json_data={"name": "Py", "slug": "python"})
    assert resp["_http_status"] == 400
    assert resp["statusCode"] == 400


def test_post_count_and_posts_by_slug(client, admin_client, make_post):
    tag = admin_client.request("POST", "/api/tags", json_data={"name": "Flask"})["data"]
    assert tag["slug"] == "flask"
    public = make_post(tagIds=[tag["id"]])
    make_post(tagIds=[tag["id"]], status="PRIVATE")

    tags = client.request("GET", "/api/tags")["data"]
    assert tags == [{**tag, "postCount": 1}]

    resp = client.request("GET", "/api/tags/flask/posts")
    assert [p["id"] for p in resp["data"]] == [public["id"]]
    assert client.request("GET", "/api/tags/nope")["_http_status"] == 404


def test_tags_by_name_are_created_on_post_save(client, make_post):
    post = make_post(tags=["Redis", "Caching"])
    assert sorted(t["slug"] for t in post["tags"]) == ["caching", "redis"]
    assert {t["name"] for t in client.request("GET", "/api/tags")["data"]} == {"Redis", "Caching"}


def test_update_and_delete_tag(client, admin_client, make_post):
    tag = admin_client.request("POST", "/api/tags", json_data={"name": "Old", "slug": "old"})["data"]
    post = make_post(tagIds=[tag["id"]])

    resp = admin_client.request("PUT", f"/api/tags/{tag['id']}", json_data={"name": "New", "slug": "new"})
    assert resp["data"] == {"id": tag["id"], "name": "New", "slug": "new"}

    assert admin_client.request("DELETE", f"/api/tags/{tag['id']}")["_http_status"] == 200
    detail = admin_client.request("GET", f"/api/posts/admin/{post['id']}")["data"]
    assert detail["tags"] == []


def test_service_list_and_resolve_tags(app, admin_client):
    from services.tag_service import TagService

    admin_client.request("POST", "/api/tags", json_data={"name": "Go", "slug": "go"})
    with app.app_context():
        assert [t["slug"] for t in TagService.list_all()] == ["go"]
        resolved = TagService.resolve_tags(tag_names=["Go", "Rust"])
        assert sorted(t.slug for t in resolved) == ["go", "rust"]
