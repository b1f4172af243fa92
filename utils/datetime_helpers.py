# -*- coding: utf-8 -*-
"""Datetime helpers.

数据库中的 ``datetime`` 一律按 UTC（无时区信息）存储，
接口层统一输出带 ``Z`` 后缀的 ISO 8601 字符串；备份恢复时再解析回来。
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional


def utcnow() -> datetime:
    """返回去掉时区信息的当前 UTC 时间，与数据库存储格式一致。"""

    return datetime.now(timezone.utc).replace(tzinfo=None)


def _ensure_utc(dt: datetime) -> datetime:
    """将给定 ``datetime`` 统一转换为带 UTC 时区的对象。"""

    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def to_iso(dt: Optional[datetime]) -> Optional[str]:
    """格式化为 ``2024-01-01T00:00:00.000Z``；``None`` 原样返回。"""

    if dt is None:
        return None
    value = _ensure_utc(dt)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


def parse_iso(value: Optional[str]) -> Optional[datetime]:
    """解析 ISO 字符串（支持 ``Z`` 后缀），返回无时区的 UTC ``datetime``。

    :raises ValueError: 格式无法识别时。
    """

    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return _ensure_utc(value).replace(tzinfo=None)
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(text)
    return _ensure_utc(parsed).replace(tzinfo=None)
