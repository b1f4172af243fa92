# -*- coding: utf-8 -*-
"""constants/content.py
--------------------------------------------------------------------
文章与页面的状态枚举。

约束：
- 状态只是可见性标签，不存在状态流转。
- 文章：DRAFT / PUBLIC / PRIVATE，前台仅展示 PUBLIC。
- 页面：DRAFT / PUBLISHED；类型 STATIC（静态页）/ NOTICE（公告）。
"""

from enum import Enum

from utils.exceptions import ValidationError


class PostStatus(Enum):
    DRAFT = "DRAFT"
    PUBLIC = "PUBLIC"
    PRIVATE = "PRIVATE"

    @classmethod
    def values(cls) -> list[str]:
        return [m.value for m in cls]


# 列表接口 status 过滤的别名：PUBLISHED / ALL = PUBLIC + PRIVATE
PUBLISHED_POST_STATUSES = [PostStatus.PUBLIC.value, PostStatus.PRIVATE.value]
POST_STATUS_FILTERS = PostStatus.values() + ["PUBLISHED", "ALL"]

POST_SORT_FIELDS = ("publishedAt", "updatedAt", "viewCount", "likeCount")


class PageStatus(Enum):
    DRAFT = "DRAFT"
    PUBLISHED = "PUBLISHED"

    @classmethod
    def values(cls) -> list[str]:
        return [m.value for m in cls]


class PageType(Enum):
    STATIC = "STATIC"
    NOTICE = "NOTICE"

    @classmethod
    def values(cls) -> list[str]:
        return [m.value for m in cls]


def validate_post_status(status: str):
    if status not in PostStatus.values():
        raise ValidationError(f"文章状态必须是 {PostStatus.values()} 之一")


def validate_page_status(status: str):
    if status not in PageStatus.values():
        raise ValidationError(f"页面状态必须是 {PageStatus.values()} 之一")


def validate_page_type(page_type: str):
    if page_type not in PageType.values():
        raise ValidationError(f"页面类型必须是 {PageType.values()} 之一")
