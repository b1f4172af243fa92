# -*- coding: utf-8 -*-
"""
comment.py
--------------------------------------------------------------------
多租户通用评论：
- tenant_id 隔离租户；resource_type + resource_id 指向被评论对象（文章为 "post" + 文章 ID）。
- 作者二选一：登录用户 author_id，或游客 guest_name/guest_email（guest_password 为哈希）。
  author_id 是逻辑关联，对应账号在本实例可能不存在，此时 author 为 None。
- parent_id 自关联，数据库层 ON DELETE CASCADE；删除带回复的评论走软删除。
- ip_hash 只存加盐 SHA-256，不落原始 IP。
"""

from extensions.database import db
from .mixins import TimestampMixin, SoftDeleteMixin, COMMON_TABLE_ARGS
from constants.comment import CommentStatus
from utils.datetime_helpers import to_iso


class Comment(TimestampMixin, SoftDeleteMixin, db.Model):
    __tablename__ = "comment"
    __table_args__ = (
        db.Index("ix_comment_tenant_resource", "tenant_id", "resource_type", "resource_id"),
        COMMON_TABLE_ARGS,
    )

    id = db.Column(db.Integer, primary_key=True)
    tenant_id = db.Column(db.String(64), nullable=False, index=True)
    resource_type = db.Column(db.String(32), nullable=False)
    resource_id = db.Column(db.String(64), nullable=False)
    content = db.Column(db.Text, nullable=False)

    # 逻辑关联 user.id，无外键约束
    author_id = db.Column(db.Integer, index=True)
    guest_name = db.Column(db.String(50))
    guest_email = db.Column(db.String(120))
    guest_password = db.Column(db.String(255))

    parent_id = db.Column(db.Integer, db.ForeignKey("comment.id", ondelete="CASCADE"), index=True)
    status = db.Column(db.String(16), nullable=False, default=CommentStatus.PENDING.value, server_default=CommentStatus.PENDING.value)
    is_private = db.Column(db.Boolean, nullable=False, default=False, server_default="0")
    ip_hash = db.Column(db.String(64))

    author = db.relationship(
        "User",
        primaryjoin="foreign(Comment.author_id) == User.id",
        lazy="joined",
        viewonly=True,
    )

    def __repr__(self):
        return f"<Comment id={self.id} tenant={self.tenant_id} parent={self.parent_id}>"

    @property
    def is_guest(self) -> bool:
        return self.author_id is None

    def to_dict(self):
        """完整记录（导出/恢复使用），不含 guest_password 以外的派生字段。"""
        return {
            "id": self.id,
            "tenantId": self.tenant_id,
            "resourceType": self.resource_type,
            "resourceId": self.resource_id,
            "content": self.content,
            "authorId": self.author_id,
            "guestName": self.guest_name,
            "guestEmail": self.guest_email,
            "guestPassword": self.guest_password,
            "parentId": self.parent_id,
            "status": self.status,
            "isPrivate": self.is_private,
            "isDeleted": self.is_deleted,
            "ipHash": self.ip_hash,
            "createdAt": to_iso(self.created_at),
            "updatedAt": to_iso(self.updated_at),
        }
