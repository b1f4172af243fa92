# -*- coding: utf-8 -*-
"""
category.py
--------------------------------------------------------------------
文章分类：一篇文章只属于一个分类（多对一）。
- name / slug 均唯一，slug 用于前台路由 /category/<slug>
- 有文章的分类不允许删除（服务层校验）
"""

from extensions.database import db
from .mixins import TimestampMixin, COMMON_TABLE_ARGS


class Category(TimestampMixin, db.Model):
    __tablename__ = "category"
    __table_args__ = (COMMON_TABLE_ARGS,)

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(50), unique=True, nullable=False)
    slug = db.Column(db.String(50), unique=True, nullable=False, index=True)
    description = db.Column(db.String(200))
    icon = db.Column(db.String(50))
    color = db.Column(db.String(20))

    posts = db.relationship("Post", back_populates="category", lazy="dynamic")

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "slug": self.slug,
            "description": self.description,
            "icon": self.icon,
            "color": self.color,
        }
