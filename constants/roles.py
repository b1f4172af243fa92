from __future__ import annotations

from enum import Enum


class UserRole(str, Enum):
    """
    博客账号角色：
    - USER：普通读者，可评论、管理自己的评论
    - ADMIN：博主 / 管理员，可发文、审核与删除评论
    """

    USER = "USER"
    ADMIN = "ADMIN"

    @classmethod
    def values(cls) -> list[str]:
        return [role.value for role in cls]

    @classmethod
    def has_value(cls, value: str) -> bool:
        return value in cls.values()


ROLE_LABELS_ZH: dict[str, str] = {
    UserRole.USER.value: "读者",
    UserRole.ADMIN.value: "管理员",
}

DEFAULT_ROLE = UserRole.USER


def normalize_role(raw: str | None, default: UserRole = DEFAULT_ROLE) -> str:
    """
    清洗外部传入的角色值：
    - None 或空 => 默认
    - 去掉首尾空白、转大写
    - 校验是否在已注册角色中
    """
    if not raw:
        return default.value
    value = raw.strip().upper()
    if not UserRole.has_value(value):
        raise ValueError(f"非法角色: {raw}")
    return value
