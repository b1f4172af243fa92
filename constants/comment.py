# -*- coding: utf-8 -*-
"""constants/comment.py
--------------------------------------------------------------------
评论相关枚举常量。

- CommentStatus：审核状态，PENDING / APPROVED / REJECTED / SPAM。
- 文章评论统一使用 resource_type = "post"，resource_id 为文章 ID 的字符串形式。
"""

from enum import Enum

from utils.exceptions import ValidationError


class CommentStatus(Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    SPAM = "SPAM"

    @classmethod
    def values(cls) -> list[str]:
        return [m.value for m in cls]


POST_RESOURCE_TYPE = "post"

DELETED_PLACEHOLDER = "已删除的评论"


def validate_comment_status(status: str):
    if status not in CommentStatus.values():
        raise ValidationError(f"评论状态必须是 {CommentStatus.values()} 之一")
