# models/mixins.py
from sqlalchemy import func, DateTime
from extensions.database import db
from utils.datetime_helpers import utcnow

# MySQL 部署时的表选项，SQLite 会忽略
COMMON_TABLE_ARGS = {
    "mysql_engine": "InnoDB",
    "mysql_charset": "utf8mb4",
    "mysql_collate": "utf8mb4_unicode_ci",
}


class TimestampMixin:
    created_at = db.Column(DateTime, nullable=False, default=utcnow, server_default=func.now(), index=True)
    updated_at = db.Column(DateTime, nullable=False, default=utcnow, server_default=func.now(), onupdate=utcnow, index=True)


class SoftDeleteMixin:
    """
    软删除：行保留在表中，仅打标记。
    被删评论仍作为回复树的占位节点参与展示。
    """
    is_deleted = db.Column(db.Boolean, nullable=False, default=False, server_default="0", index=True, comment="是否已删除")
    deleted_at = db.Column(DateTime, comment="删除时间")

    def soft_delete(self, at=None):
        self.is_deleted = True
        self.deleted_at = at or utcnow()
