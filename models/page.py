# -*- coding: utf-8 -*-
"""
page.py
--------------------------------------------------------------------
独立页面与公告：
- type = STATIC（关于我等静态页）/ NOTICE（公告，可置顶、带徽标）。
- status = DRAFT / PUBLISHED；published_at 在首次发布时写入，之后不再改动。
"""

from extensions.database import db
from .mixins import TimestampMixin, COMMON_TABLE_ARGS
from constants.content import PageStatus, PageType
from utils.datetime_helpers import to_iso


class Page(TimestampMixin, db.Model):
    __tablename__ = "page"
    __table_args__ = (
        db.Index("ix_page_type_status", "type", "status"),
        COMMON_TABLE_ARGS,
    )

    id = db.Column(db.Integer, primary_key=True)
    slug = db.Column(db.String(200), unique=True, nullable=False, index=True)
    title = db.Column(db.String(200), nullable=False)
    type = db.Column(db.String(16), nullable=False, default=PageType.STATIC.value, server_default=PageType.STATIC.value)
    content = db.Column(db.Text, nullable=False)
    excerpt = db.Column(db.String(500))
    status = db.Column(db.String(16), nullable=False, default=PageStatus.DRAFT.value, server_default=PageStatus.DRAFT.value)
    badge = db.Column(db.String(20))
    badge_color = db.Column(db.String(20))
    is_pinned = db.Column(db.Boolean, nullable=False, default=False, server_default="0")
    template = db.Column(db.String(50))
    view_count = db.Column(db.Integer, nullable=False, default=0, server_default="0")
    author_id = db.Column(db.Integer, db.ForeignKey("user.id", ondelete="SET NULL"))
    published_at = db.Column(db.DateTime)

    author = db.relationship("User", lazy="joined")

    def to_dict(self):
        return {
            "id": self.id,
            "slug": self.slug,
            "title": self.title,
            "type": self.type,
            "content": self.content,
            "excerpt": self.excerpt,
            "status": self.status,
            "badge": self.badge,
            "badgeColor": self.badge_color,
            "isPinned": self.is_pinned,
            "template": self.template,
            "viewCount": self.view_count,
            "author": self.author.to_brief() if self.author else None,
            "publishedAt": to_iso(self.published_at),
            "createdAt": to_iso(self.created_at),
            "updatedAt": to_iso(self.updated_at),
        }
