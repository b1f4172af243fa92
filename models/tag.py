# -*- coding: utf-8 -*-
"""
tag.py
--------------------------------------------------------------------
标签系统：
- Tag: 全局标签（名称 + slug，均唯一）。
- post_tag: 文章与标签的多对多中间表，删除任一侧时级联清理映射。
"""

from extensions.database import db
from .mixins import TimestampMixin, COMMON_TABLE_ARGS


post_tag = db.Table(
    "post_tag",
    db.Column("post_id", db.Integer, db.ForeignKey("post.id", ondelete="CASCADE"), primary_key=True),
    db.Column("tag_id", db.Integer, db.ForeignKey("tag.id", ondelete="CASCADE"), primary_key=True),
    db.Index("ix_post_tag_tag", "tag_id"),
)


class Tag(TimestampMixin, db.Model):
    __tablename__ = "tag"
    __table_args__ = (COMMON_TABLE_ARGS,)

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(30), unique=True, nullable=False)
    slug = db.Column(db.String(30), unique=True, nullable=False, index=True)

    posts = db.relationship("Post", secondary=post_tag, back_populates="tags", lazy="dynamic")

    def to_dict(self):
        return {"id": self.id, "name": self.name, "slug": self.slug}
