# services/backup_service.py
"""
评论备份 / 恢复（供集群内备份聚合服务调用）。

恢复流程不是一个事务：
  1. 删除租户下全部评论并提交，记录 deleted；
  2. 稳定排序，无 parentId 的记录排在前面；
  3. 逐条插入并单独提交，单条失败只计入 skipped，不影响后续记录。
"""
import logging
from typing import Any, Dict, List

from sqlalchemy.exc import SQLAlchemyError

from models.comment import Comment
from repositories.comment_repository import CommentRepository
from constants.comment import CommentStatus
from utils.datetime_helpers import utcnow, to_iso, parse_iso
from utils.pagination import parse_bool

logger = logging.getLogger(__name__)


class RestoreItemError(ValueError):
    pass


class BackupService:

    @staticmethod
    def export(tenant_id: str) -> Dict[str, Any]:
        comments = [c.to_dict() for c in CommentRepository.list_for_export(tenant_id)]
        logger.info("[Export] tenant=%s comments=%s", tenant_id, len(comments))
        return {
            "data": {"comments": comments},
            "meta": {
                "counts": {"comments": len(comments)},
                "exportedAt": to_iso(utcnow()),
                "tenantId": tenant_id,
            },
        }

    @staticmethod
    def order_for_restore(items: List[dict]) -> List[dict]:
        """父评论优先；sorted 是稳定排序，其余保持输入顺序。"""
        def has_parent(item):
            return isinstance(item, dict) and item.get("parentId") not in (None, "")

        return sorted(items, key=lambda item: 1 if has_parent(item) else 0)

    @staticmethod
    def _build_comment(tenant_id: str, item: dict, restored_ids: set) -> Comment:
        if not isinstance(item, dict):
            raise RestoreItemError("记录不是对象")
        try:
            comment_id = int(item["id"])
        except (KeyError, TypeError, ValueError):
            raise RestoreItemError("id 缺失或不是整数")

        parent_id = item.get("parentId")
        if parent_id not in (None, ""):
            try:
                parent_id = int(parent_id)
            except (TypeError, ValueError):
                raise RestoreItemError("parentId 不是整数")
            if parent_id not in restored_ids:
                raise RestoreItemError(f"父评论 {parent_id} 未恢复")
        else:
            parent_id = None

        author_id = item.get("authorId")
        if author_id not in (None, ""):
            try:
                author_id = int(author_id)
            except (TypeError, ValueError):
                raise RestoreItemError("authorId 不是整数")
        else:
            author_id = None

        content = item.get("content")
        if content is None or not item.get("resourceType") or item.get("resourceId") in (None, ""):
            raise RestoreItemError("content / resourceType / resourceId 缺失")

        status = item.get("status") or CommentStatus.PENDING.value
        if status not in CommentStatus.values():
            raise RestoreItemError(f"非法状态 {status}")

        created_at = utcnow()
        if item.get("createdAt"):
            try:
                created_at = parse_iso(item["createdAt"])
            except ValueError:
                raise RestoreItemError("createdAt 不是合法时间")

        return Comment(
            id=comment_id,
            # 统一写入当前解析出的租户，忽略备份里的 tenantId
            tenant_id=tenant_id,
            resource_type=item["resourceType"],
            resource_id=str(item["resourceId"]),
            content=content,
            author_id=author_id,
            guest_name=item.get("guestName"),
            guest_email=item.get("guestEmail"),
            guest_password=item.get("guestPassword"),
            parent_id=parent_id,
            status=status,
            is_private=parse_bool(item.get("isPrivate"), False),
            is_deleted=parse_bool(item.get("isDeleted"), False),
            ip_hash=item.get("ipHash"),
            created_at=created_at,
            updated_at=utcnow(),
        )

    @staticmethod
    def restore(tenant_id: str, items) -> Dict[str, Any]:
        results = {"deleted": 0, "restored": 0, "skipped": 0}

        results["deleted"] = CommentRepository.delete_by_tenant(tenant_id)
        CommentRepository.commit()
        logger.info("[Restore] deleted %s comments for tenant %s", results["deleted"], tenant_id)

        restored_ids: set = set()
        for item in BackupService.order_for_restore(items or []):
            try:
                comment = BackupService._build_comment(tenant_id, item, restored_ids)
                CommentRepository.add(comment)
                CommentRepository.commit()
            except (RestoreItemError, SQLAlchemyError) as e:
                CommentRepository.rollback()
                results["skipped"] += 1
                item_id = item.get("id") if isinstance(item, dict) else None
                logger.error("[Restore] failed to restore comment %s: %s", item_id, e)
                continue
            restored_ids.add(comment.id)
            results["restored"] += 1

        logger.info(
            "[Restore] tenant=%s restored=%s skipped=%s",
            tenant_id, results["restored"], results["skipped"],
        )
        return {
            "data": {"comments": results},
            "meta": {"restoredAt": to_iso(utcnow()), "tenantId": tenant_id},
        }
