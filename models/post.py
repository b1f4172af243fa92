# -*- coding: utf-8 -*-
"""
post.py
--------------------------------------------------------------------
博客文章 + 阅读记录：
- Post: slug 唯一；status = DRAFT / PUBLIC / PRIVATE，仅 PUBLIC 对外可见。
- reading_time 在创建/更新时按正文计算（分钟）。
- featured 由服务层维护：任意时刻最多一篇。
- PostView: (post_id, ip_hash) 唯一，用于 24 小时内同一 IP 只计一次阅读。
"""

from extensions.database import db
from .mixins import TimestampMixin, COMMON_TABLE_ARGS
from .tag import post_tag
from constants.content import PostStatus
from utils.datetime_helpers import to_iso


class Post(TimestampMixin, db.Model):
    __tablename__ = "post"
    __table_args__ = (
        db.Index("ix_post_status_published", "status", "published_at"),
        COMMON_TABLE_ARGS,
    )

    id = db.Column(db.Integer, primary_key=True)
    slug = db.Column(db.String(200), unique=True, nullable=False, index=True)
    title = db.Column(db.String(200), nullable=False)
    excerpt = db.Column(db.String(500))
    content = db.Column(db.Text, nullable=False)
    cover_image = db.Column(db.String(500))

    view_count = db.Column(db.Integer, nullable=False, default=0, server_default="0")
    like_count = db.Column(db.Integer, nullable=False, default=0, server_default="0")
    reading_time = db.Column(db.Integer, nullable=False, default=1, server_default="1")

    status = db.Column(db.String(16), nullable=False, default=PostStatus.DRAFT.value, server_default=PostStatus.DRAFT.value)
    featured = db.Column(db.Boolean, nullable=False, default=False, server_default="0")

    author_id = db.Column(db.Integer, db.ForeignKey("user.id", ondelete="SET NULL"))
    category_id = db.Column(db.Integer, db.ForeignKey("category.id", ondelete="SET NULL"), index=True)
    published_at = db.Column(db.DateTime)

    author = db.relationship("User", lazy="joined")
    category = db.relationship("Category", back_populates="posts", lazy="joined")
    tags = db.relationship("Tag", secondary=post_tag, back_populates="posts", lazy="selectin")

    def __repr__(self):
        return f"<Post id={self.id} slug={self.slug} status={self.status}>"

    def to_dict(self, with_content: bool = True):
        data = {
            "id": self.id,
            "slug": self.slug,
            "title": self.title,
            "excerpt": self.excerpt,
            "coverImage": self.cover_image,
            "viewCount": self.view_count,
            "likeCount": self.like_count,
            "readingTime": self.reading_time,
            "status": self.status,
            "featured": self.featured,
            "publishedAt": to_iso(self.published_at),
            "createdAt": to_iso(self.created_at),
            "updatedAt": to_iso(self.updated_at),
            "author": self.author.to_brief() if self.author else None,
            "category": self.category.to_dict() if self.category else None,
            "tags": [t.to_dict() for t in self.tags],
        }
        if with_content:
            data["content"] = self.content
        return data


class PostView(db.Model):
    __tablename__ = "post_view"
    __table_args__ = (
        db.UniqueConstraint("post_id", "ip_hash", name="uq_post_view_ip"),
        COMMON_TABLE_ARGS,
    )

    id = db.Column(db.Integer, primary_key=True)
    post_id = db.Column(db.Integer, db.ForeignKey("post.id", ondelete="CASCADE"), nullable=False, index=True)
    ip_hash = db.Column(db.String(64), nullable=False)
    created_at = db.Column(db.DateTime, nullable=False)
