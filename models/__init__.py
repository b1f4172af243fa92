# -*- coding: utf-8 -*-
"""
__init__.py
--------------------------------------------------------------------
汇总导入所有模型，使得：
- Flask-Migrate/Alembic 自动检测模型。
- 外部模块可简化引用：from models import Post, Comment
注意：
- 避免循环导入：各模型仅在这里集中 import。
"""

from .mixins import TimestampMixin, SoftDeleteMixin
from .user import User
from .category import Category
from .tag import Tag, post_tag
from .post import Post, PostView
from .page import Page
from .comment import Comment

__all__ = [
    "TimestampMixin", "SoftDeleteMixin",
    "User", "Category", "Tag", "post_tag", "Post", "PostView", "Page", "Comment",
]
