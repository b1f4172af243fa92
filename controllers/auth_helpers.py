# controllers/auth_helpers.py
from __future__ import annotations

from functools import wraps

from flask import g, request

from extensions.jwt import decode_token, TokenError
from repositories.user_repository import UserRepository
from utils.permissions import is_admin
from utils.response import error_response


def extract_bearer(auth_header: str | None) -> str | None:
    if not auth_header or not auth_header.startswith("Bearer "):
        return None
    return auth_header[7:].strip() or None


def _authenticate():
    """
    读取 Authorization 头并解析出用户。
    返回 (user, error_message)，两者恰有一个为 None；未携带 token 时都为 None。
    """
    token = extract_bearer(request.headers.get("Authorization"))
    if token is None:
        return None, None
    try:
        payload = decode_token(token)
    except TokenError:
        return None, "Token 无效或已过期"

    user_id = payload.get("sub")
    if user_id is None:
        return None, "Token 载荷无效"
    user = UserRepository.find_by_id(user_id)
    if not user:
        return None, "用户不存在"
    return user, None


def auth_required():
    """必须登录：校验 Bearer token 并注入 g.current_user。"""
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            user, err = _authenticate()
            g.current_user = user
            if user is None:
                return error_response(code=401, message=err or "缺少或无效 Authorization")
            return fn(*args, **kwargs)

        return wrapper

    return decorator


def optional_auth():
    """
    可选登录：token 缺失或无效都按游客处理。
    过期 token 不应导致游客评论、文章浏览失败。
    """
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            g.current_user, _ = _authenticate()
            return fn(*args, **kwargs)

        return wrapper

    return decorator


def admin_required():
    """管理员校验，需叠加在 @auth_required 之后。"""
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            user = getattr(g, "current_user", None)
            if not user:
                return error_response(code=401, message="未登录")
            if not is_admin(user):
                return error_response(code=403, message="需要管理员权限")
            return fn(*args, **kwargs)

        return wrapper

    return decorator
