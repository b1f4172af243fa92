from __future__ import annotations

from flask import g

from constants.roles import UserRole
from utils.exceptions import ForbiddenError, UnauthorizedError


def get_current_user(required: bool = True):
    """
    获取当前登录用户（由 auth_required / optional_auth 写入 g.current_user）
    """
    user = getattr(g, "current_user", None)
    if not user and required:
        raise UnauthorizedError("需要登录")
    return user


def is_admin(user=None) -> bool:
    user = user if user is not None else getattr(g, "current_user", None)
    if not user:
        return False
    return user.role == UserRole.ADMIN.value


def assert_admin(user=None):
    user = user if user is not None else get_current_user()
    if not is_admin(user):
        raise ForbiddenError("需要管理员权限")
