# -*- coding: utf-8 -*-
import base64
import json
import time

import pytest
from google.oauth2 import id_token as google_id_token

from tests.utils.api_client import APIClient


GOOGLE_CLIENT_ID = "test-google-client"


def _seg(obj):
    return base64.urlsafe_b64encode(json.dumps(obj).encode()).rstrip(b"=").decode()


@pytest.fixture
def google_tokens(monkeypatch):
    """
    替换 Google 验签：只认由 issue() 签发过的凭证，其余一律视为签名无效。
    issue(**overrides) 返回凭证字符串。
    """
    issued = {}

    def _verify(credential, request, audience):
        payload = issued.get(credential)
        if payload is None:
            raise ValueError("Could not verify token signature.")
        if payload["aud"] != audience:
            raise ValueError("Token has wrong audience")
        return payload

    def issue(**overrides):
        payload = {
            "aud": GOOGLE_CLIENT_ID,
            "iss": "https://accounts.google.com",
            "exp": int(time.time()) + 600,
            "sub": "google-123",
            "email": "someone@example.com",
            "email_verified": True,
            "name": "Someone",
            "picture": "https://example.com/a.png",
        }
        payload.update(overrides)
        credential = f"{_seg({'alg': 'RS256'})}.{_seg(payload)}.sig-{len(issued)}"
        issued[credential] = payload
        return credential

    monkeypatch.setattr(google_id_token, "verify_oauth2_token", _verify)
    return issue


def _register(client, email, password="secret1", name="writer"):
    return client.request("POST", "/api/auth/register", json_data={"email": email, "password": password, "name": name})


def test_first_registered_user_becomes_admin(client):
    first = _register(client, "first@example.com")
    assert first["_http_status"] == 201
    assert first["data"]["user"]["role"] == "ADMIN"
    assert first["data"]["token"]

    second = _register(client, "second@example.com")
    assert second["data"]["user"]["role"] == "USER"


@pytest.mark.parametrize(
    "email, password, name",
    [
        ("", "secret1", "n"),
        ("not-an-email", "secret1", "n"),
        ("ok@example.com", "123", "n"),
        ("ok@example.com", "secret1", ""),
    ],
)
def test_register_validation(client, email, password, name):
    assert _register(client, email, password, name)["_http_status"] == 400


def test_register_duplicate_email(client):
    _register(client, "dup@example.com")
    assert _register(client, "DUP@example.com")["_http_status"] == 400


def test_login_me_and_logout(app, client):
    _register(client, "me@example.com", password="secret1", name="Me")

    assert client.request("POST", "/api/auth/login", json_data={"email": "me@example.com", "password": "bad"})["_http_status"] == 401
    resp = client.request("POST", "/api/auth/login", json_data={"email": "me@example.com", "password": "secret1"})
    assert resp["_http_status"] == 200
    token = resp["data"]["token"]

    api = APIClient(app.test_client())
    api.set_token(token)
    me = api.request("GET", "/api/auth/me")
    assert me["data"]["email"] == "me@example.com"
    assert "password_hash" not in me["data"]

    assert api.request("POST", "/api/auth/logout")["_http_status"] == 200
    assert api.request("GET", "/api/auth/me")["_http_status"] == 401


def test_update_me_and_change_password(app, client):
    token = _register(client, "edit@example.com", password="secret1")["data"]["token"]
    api = APIClient(app.test_client())
    api.set_token(token)

    resp = api.request("PUT", "/api/auth/me", json_data={"name": "New Name", "bio": "hi"})
    assert resp["data"]["name"] == "New Name"
    assert resp["data"]["bio"] == "hi"

    resp = api.request("PUT", "/api/auth/me", json_data={"newPassword": "secret2", "currentPassword": "wrong"})
    assert resp["_http_status"] == 400
    resp = api.request("PUT", "/api/auth/me", json_data={"newPassword": "secret2", "currentPassword": "secret1"})
    assert resp["_http_status"] == 200

    login = client.request("POST", "/api/auth/login", json_data={"email": "edit@example.com", "password": "secret2"})
    assert login["_http_status"] == 200


def test_me_requires_token(client):
    assert client.request("GET", "/api/auth/me")["_http_status"] == 401
    resp = client.request("GET", "/api/auth/me", headers={"Authorization": "Bearer garbage"})
    assert resp["_http_status"] == 401


@pytest.mark.parametrize("overrides", [{"aud": "someone-else"}, {"email_verified": False}, {"email": ""}])
def test_google_credential_is_validated(client, google_tokens, overrides):
    resp = client.request("POST", "/api/auth/google", json_data={"credential": google_tokens(**overrides)})
    assert resp["_http_status"] == 400


def test_google_forged_credential_is_rejected(client, google_tokens):
    payload = {
        "aud": GOOGLE_CLIENT_ID,
        "iss": "https://accounts.google.com",
        "exp": int(time.time()) + 600,
        "sub": "google-owner",
        "email": "owner@example.com",
        "email_verified": True,
    }
    forged = f"{_seg({'alg': 'RS256'})}.{_seg(payload)}.not-a-signature"
    resp = client.request("POST", "/api/auth/google", json_data={"credential": forged})
    assert resp["_http_status"] == 400
    assert "token" not in (resp.get("data") or {})


def test_google_unknown_signing_key_rejected_by_verifier(client, monkeypatch):
    # 真实验签流程，仅把 Google 公钥下载替换为空集合
    monkeypatch.setattr(google_id_token, "_fetch_certs", lambda request, certs_url: {})
    payload = {
        "aud": GOOGLE_CLIENT_ID,
        "iss": "https://accounts.google.com",
        "exp": int(time.time()) + 600,
        "sub": "google-owner",
        "email": "owner@example.com",
        "email_verified": True,
    }
    forged = f"{_seg({'alg': 'RS256', 'kid': 'k1'})}.{_seg(payload)}.bm90LWEtc2lnbmF0dXJl"
    resp = client.request("POST", "/api/auth/google", json_data={"credential": forged})
    assert resp["_http_status"] == 400
    assert "token" not in (resp.get("data") or {})


def test_google_login_creates_and_links_users(client, google_tokens):
    resp = client.request("POST", "/api/auth/google", json_data={"credential": google_tokens()})
    assert resp["_http_status"] == 200
    assert resp["data"]["user"]["role"] == "USER"
    assert resp["data"]["user"]["avatar"] == "https://example.com/a.png"

    # 已有邮箱账号登录 Google 时绑定，不重复创建
    _register(client, "linked@example.com")
    resp = client.request(
        "POST", "/api/auth/google",
        json_data={"credential": google_tokens(sub="google-456", email="linked@example.com")},
    )
    assert resp["_http_status"] == 200
    assert resp["data"]["user"]["email"] == "linked@example.com"


def test_google_login_promotes_whitelisted_email(client, google_tokens):
    resp = client.request(
        "POST", "/api/auth/google",
        json_data={"credential": google_tokens(sub="google-owner", email="owner@example.com")},
    )
    assert resp["data"]["user"]["role"] == "ADMIN"
    assert client.request("POST", "/api/auth/google", json_data={})["_http_status"] == 400
