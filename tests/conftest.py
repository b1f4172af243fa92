import uuid

import pytest

import extensions.redis_client as redis_client
from app import create_app
from constants.roles import UserRole
from extensions.database import db
from extensions.jwt import create_token
from models import User
from utils.password import hash_password
from tests.utils.api_client import APIClient
from tests.utils.fake_redis import FakeRedis

DEFAULT_TENANT = "tenant-test"


@pytest.fixture(autouse=True)
def fake_redis():
    """所有测试共用进程内 Redis 替身，避免依赖真实 Redis。"""
    fake = FakeRedis()
    redis_client._redis_client = fake
    yield fake
    redis_client._redis_client = None


@pytest.fixture
def app():
    """内存 SQLite；每个测试一个全新的库。"""
    app = create_app("testing")
    with app.app_context():
        db.create_all()
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def make_user(app):
    """直接落库创建账号，返回 (user_id, token)。"""
    def _create(role=UserRole.USER.value, email=None, password="Passw0rd!", name=None):
        suffix = uuid.uuid4().hex[:8]
        email = email or f"user_{suffix}@example.com"
        with app.app_context():
            user = User(
                email=email,
                password_hash=hash_password(password),
                name=name or f"user_{suffix}",
                role=role,
            )
            db.session.add(user)
            db.session.commit()
            token = create_token(user.id, user.email, user.role)
            return user.id, token
    return _create


@pytest.fixture
def client(app):
    """匿名客户端"""
    return APIClient(app.test_client())


@pytest.fixture
def admin_client(app, make_user):
    _, token = make_user(role=UserRole.ADMIN.value, name="admin")
    c = APIClient(app.test_client())
    c.set_token(token)
    return c


@pytest.fixture
def user_client(app, make_user):
    user_id, token = make_user(role=UserRole.USER.value, name="reader")
    c = APIClient(app.test_client())
    c.set_token(token)
    c.user_id = user_id
    return c


@pytest.fixture
def make_post(admin_client):
    """通过管理端接口创建文章，返回文章数据。"""
    def _create(title=None, status="PUBLIC", **extra):
        suffix = uuid.uuid4().hex[:8]
        payload = {
            "title": title or f"Post {suffix}",
            "content": "<p>hello world</p>",
            "status": status,
        }
        payload.update(extra)
        resp = admin_client.request("POST", "/api/posts", json_data=payload)
        assert resp["_http_status"] == 201, f"创建文章失败: {resp}"
        return resp["data"]
    return _create


@pytest.fixture
def make_comment(client):
    """游客在文章下发表评论，返回评论数据。"""
    def _create(post_id, content="nice post", parent_id=None, guest_password="1234", api=None, **extra):
        payload = {"content": content, "guestName": "guest", "guestPassword": guest_password}
        if parent_id is not None:
            payload["parentId"] = parent_id
        payload.update(extra)
        resp = (api or client).request("POST", f"/api/comments/post/{post_id}", json_data=payload)
        assert resp["_http_status"] == 201, f"发表评论失败: {resp}"
        return resp["data"]
    return _create
