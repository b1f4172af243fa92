# services/comment_service.py
"""
评论业务规则：

- 列表：顶层评论按时间倒序，回复按时间正序挂在父评论下；
  私密评论只有管理员和作者可见，非管理员只看到已审核通过的评论（自己的除外）；
  已软删除的评论以占位内容展示，保证回复仍有锚点。
- 创建：回复只能挂在同一文章、同一租户下未删除的顶层评论上。
- 删除：普通删除一律软删除；管理员硬删除会连同全部后代一起删除。
"""
import logging
from typing import Optional

from flask import current_app

from models.comment import Comment
from models.post import Post
from repositories.comment_repository import CommentRepository
from repositories.post_repository import PostRepository
from services.rate_limit_service import CommentRateLimiter
from constants.comment import CommentStatus, POST_RESOURCE_TYPE, DELETED_PLACEHOLDER, validate_comment_status
from constants.content import PostStatus
from utils.datetime_helpers import to_iso
from utils.exceptions import ValidationError, UnauthorizedError, ForbiddenError, NotFoundError
from utils.password import hash_password, verify_password, validate_guest_password
from utils.permissions import is_admin

logger = logging.getLogger(__name__)


class CommentService:

    # ---------------- 序列化 ----------------
    @staticmethod
    def format_comment(comment: Comment, viewer=None, admin: bool = False) -> dict:
        base = {
            "id": comment.id,
            "postId": _post_id_of(comment),
            "parentId": comment.parent_id,
            "createdAt": to_iso(comment.created_at),
        }
        if comment.is_deleted:
            base.update({
                "content": DELETED_PLACEHOLDER,
                "isDeleted": True,
                "isPrivate": False,
                "author": None,
                "guestName": None,
            })
            return base

        base.update({
            "content": comment.content,
            "isDeleted": False,
            "isPrivate": comment.is_private,
            "author": comment.author.to_brief() if comment.author else None,
            "guestName": comment.guest_name,
            "isOwner": bool(viewer and comment.author_id == viewer.id),
            "updatedAt": to_iso(comment.updated_at),
        })
        if admin:
            base["status"] = comment.status
            base["guestEmail"] = comment.guest_email
        return base

    @staticmethod
    def format_admin(comment: Comment) -> dict:
        data = CommentService.format_comment(comment, admin=True)
        data.update({
            "tenantId": comment.tenant_id,
            "resourceType": comment.resource_type,
            "resourceId": comment.resource_id,
            "status": comment.status,
            "isDeleted": comment.is_deleted,
            "ipHash": comment.ip_hash,
        })
        return data

    # ---------------- 可见性 ----------------
    @staticmethod
    def _visible_to(comment: Comment, viewer, admin: bool) -> bool:
        if admin:
            return True
        own = viewer is not None and comment.author_id == viewer.id
        if comment.is_private and not own:
            return False
        return own or comment.status == CommentStatus.APPROVED.value

    @staticmethod
    def _get_post(post_id) -> Post:
        post = PostRepository.get_by_id(post_id)
        if not post:
            raise NotFoundError("文章不存在")
        return post

    @staticmethod
    def list_for_post(tenant_id: str, post_id, viewer=None) -> dict:
        admin = is_admin(viewer) if viewer else False
        post = CommentService._get_post(post_id)
        if post.status != PostStatus.PUBLIC.value and not admin:
            raise NotFoundError("文章不存在")

        all_comments = CommentRepository.list_for_resource(tenant_id, POST_RESOURCE_TYPE, str(post.id))
        visible = [c for c in all_comments if CommentService._visible_to(c, viewer, admin)]

        # 多层回复（恢复数据可能出现）统一挂到顶层祖先下；
        # 祖先链上任一评论对当前用户不可见时，整条回复不展示
        parent_of = {c.id: c.parent_id for c in all_comments}
        visible_ids = {c.id for c in visible}
        replies_by_root: dict[int, list] = {}
        top_level = []
        for c in visible:
            if c.parent_id is None:
                top_level.append(c)
                continue
            root = _visible_thread_root(c.id, parent_of, visible_ids)
            if root is not None:
                replies_by_root.setdefault(root, []).append(c)

        tree = []
        shown = 0
        # 顶层倒序，回复保持正序
        for c in sorted(top_level, key=lambda x: (x.created_at, x.id), reverse=True):
            item = CommentService.format_comment(c, viewer, admin)
            replies = sorted(replies_by_root.get(c.id, []), key=lambda x: (x.created_at, x.id))
            item["replies"] = [CommentService.format_comment(r, viewer, admin) for r in replies]
            item["replyCount"] = len(replies)
            tree.append(item)
            shown += sum(1 for x in [c, *replies] if not x.is_deleted)

        return {"comments": tree, "totalCount": shown}

    # ---------------- 创建 ----------------
    @staticmethod
    def _validate_content(content) -> str:
        if not isinstance(content, str) or not content.strip():
            raise ValidationError("评论内容不能为空")
        max_len = current_app.config.get("COMMENT_MAX_LENGTH", 2000)
        if len(content) > max_len:
            raise ValidationError(f"评论内容不能超过 {max_len} 字")
        return content.strip()

    @staticmethod
    def _validate_parent(tenant_id: str, post: Post, parent_id) -> Optional[Comment]:
        if parent_id in (None, ""):
            return None
        parent = CommentRepository.get_by_id(tenant_id, parent_id)
        if (
            parent is None
            or parent.resource_type != POST_RESOURCE_TYPE
            or parent.resource_id != str(post.id)
        ):
            raise ValidationError("回复的评论不存在")
        if parent.is_deleted:
            raise ValidationError("不能回复已删除的评论")
        if parent.parent_id is not None:
            raise ValidationError("只能回复顶层评论")
        return parent

    @staticmethod
    def create(tenant_id: str, post_id, data: dict, user=None, ip_hash: Optional[str] = None) -> dict:
        post = CommentService._get_post(post_id)
        if post.status != PostStatus.PUBLIC.value:
            raise ForbiddenError("非公开文章不能评论")

        content = CommentService._validate_content(data.get("content"))
        is_private = bool(data.get("isPrivate", False))
        if is_private and user is None:
            raise UnauthorizedError("私密评论需要登录后发表")

        parent = CommentService._validate_parent(tenant_id, post, data.get("parentId"))

        limiter = CommentRateLimiter(ip_hash) if ip_hash else None
        if limiter:
            limiter.ensure_not_blocked()

        admin = is_admin(user) if user else False
        auto_approve = current_app.config.get("COMMENT_AUTO_APPROVE", True)
        comment = Comment(
            tenant_id=tenant_id,
            resource_type=POST_RESOURCE_TYPE,
            resource_id=str(post.id),
            content=content,
            parent_id=parent.id if parent else None,
            is_private=is_private,
            status=CommentStatus.APPROVED.value if (admin or auto_approve) else CommentStatus.PENDING.value,
            ip_hash=ip_hash,
        )
        if user is not None:
            comment.author_id = user.id
        else:
            guest_name = (data.get("guestName") or "").strip()
            if not guest_name:
                raise ValidationError("请填写昵称")
            guest_password = data.get("guestPassword")
            errors = validate_guest_password(guest_password)
            if errors:
                raise ValidationError(errors[0])
            comment.guest_name = guest_name[:50]
            comment.guest_email = (data.get("guestEmail") or "").strip() or None
            comment.guest_password = hash_password(guest_password)

        CommentRepository.add(comment)
        CommentRepository.commit()
        if limiter:
            limiter.record()
        logger.info(
            "新评论 id=%s tenant=%s post=%s parent=%s guest=%s",
            comment.id, tenant_id, post.id, comment.parent_id, comment.is_guest,
        )
        return CommentService.format_comment(comment, user, admin)

    # ---------------- 修改 / 删除 ----------------
    @staticmethod
    def _get(tenant_id: str, comment_id) -> Comment:
        comment = CommentRepository.get_by_id(tenant_id, comment_id)
        if not comment:
            raise NotFoundError("评论不存在")
        return comment

    @staticmethod
    def _check_guest_password(comment: Comment, guest_password, mismatch_error):
        if not guest_password:
            raise ValidationError("请输入评论密码")
        if not verify_password(comment.guest_password, guest_password):
            raise mismatch_error("评论密码不正确")

    @staticmethod
    def update(tenant_id: str, comment_id, data: dict, user=None) -> dict:
        comment = CommentService._get(tenant_id, comment_id)
        if comment.is_deleted:
            raise ValidationError("已删除的评论不能修改")

        admin = is_admin(user) if user else False
        owner = user is not None and comment.author_id == user.id
        if not admin and not owner:
            if comment.guest_password:
                CommentService._check_guest_password(comment, data.get("guestPassword"), ForbiddenError)
            else:
                raise ForbiddenError("没有权限修改该评论")

        if "content" in data:
            comment.content = CommentService._validate_content(data.get("content"))
        if "isPrivate" in data and (admin or owner):
            comment.is_private = bool(data.get("isPrivate"))
        CommentRepository.commit()
        return CommentService.format_comment(comment, user, admin)

    @staticmethod
    def delete(tenant_id: str, comment_id, data: dict, user=None):
        """软删除：清空内容与游客凭据，保留记录以维持回复结构。"""
        comment = CommentService._get(tenant_id, comment_id)
        if comment.is_deleted:
            raise ValidationError("评论已删除")

        admin = is_admin(user) if user else False
        owner = user is not None and comment.author_id == user.id
        if not admin and not owner:
            if comment.guest_password:
                CommentService._check_guest_password(comment, data.get("guestPassword"), UnauthorizedError)
            else:
                raise ForbiddenError("没有权限删除该评论")

        comment.soft_delete()
        comment.content = ""
        comment.guest_name = None
        comment.guest_password = None
        CommentRepository.commit()
        logger.info("软删除评论 id=%s tenant=%s", comment.id, tenant_id)

    # ---------------- 管理端 ----------------
    @staticmethod
    def list_admin(tenant_id: str, page: int, limit: int, include_deleted: bool = False,
                   status: Optional[str] = None, post_id: Optional[str] = None):
        if status:
            status = status.upper()
            validate_comment_status(status)
        items, total = CommentRepository.list_admin(
            tenant_id,
            page=page,
            limit=limit,
            include_deleted=include_deleted,
            status=status,
            resource_type=POST_RESOURCE_TYPE if post_id else None,
            resource_id=str(post_id) if post_id else None,
        )
        return [CommentService.format_admin(c) for c in items], total

    @staticmethod
    def hard_delete(tenant_id: str, comment_id) -> int:
        comment = CommentService._get(tenant_id, comment_id)
        ids = CommentRepository.collect_descendant_ids(tenant_id, [comment.id])
        CommentRepository.delete_by_ids(tenant_id, ids)
        CommentRepository.commit()
        logger.info("硬删除评论 root=%s tenant=%s count=%s", comment_id, tenant_id, len(ids))
        return len(ids)

    @staticmethod
    def bulk_hard_delete(tenant_id: str, ids) -> int:
        if not isinstance(ids, list) or not ids:
            raise ValidationError("ids 必须是非空数组")
        try:
            root_ids = [int(i) for i in ids]
        except (TypeError, ValueError):
            raise ValidationError("ids 必须是整数数组")
        all_ids = CommentRepository.collect_descendant_ids(tenant_id, root_ids)
        CommentRepository.delete_by_ids(tenant_id, all_ids)
        CommentRepository.commit()
        logger.info("批量硬删除评论 tenant=%s requested=%s deleted=%s", tenant_id, len(root_ids), len(all_ids))
        return len(all_ids)

    @staticmethod
    def set_status(tenant_id: str, comment_id, status: str) -> dict:
        status = (status or "").upper()
        validate_comment_status(status)
        comment = CommentService._get(tenant_id, comment_id)
        comment.status = status
        CommentRepository.commit()
        return CommentService.format_admin(comment)

    @staticmethod
    def approve(tenant_id: str, comment_id) -> dict:
        return CommentService.set_status(tenant_id, comment_id, CommentStatus.APPROVED.value)

    @staticmethod
    def list_recent(tenant_id: str, limit: int = 5, viewer=None) -> list[dict]:
        admin = is_admin(viewer) if viewer else False
        items = CommentRepository.list_recent(
            tenant_id,
            limit=limit,
            status=None if admin else CommentStatus.APPROVED.value,
            include_private=admin,
        )
        return [CommentService.format_comment(c, viewer, admin) for c in items]

    @staticmethod
    def list_mine(tenant_id: str, user, page: int, limit: int):
        items, total = CommentRepository.list_by_author(tenant_id, user.id, page=page, limit=limit)
        data = []
        for c in items:
            item = CommentService.format_comment(c, user)
            item["status"] = c.status
            data.append(item)
        return data, total


def _post_id_of(comment: Comment):
    if comment.resource_type != POST_RESOURCE_TYPE:
        return None
    try:
        return int(comment.resource_id)
    except (TypeError, ValueError):
        return comment.resource_id


def _visible_thread_root(comment_id: int, parent_of: dict, visible_ids: set) -> Optional[int]:
    """沿 parent_id 找到顶层祖先；链上有不可见或缺失的评论时返回 None。"""
    node = comment_id
    seen = set()
    while parent_of.get(node) is not None:
        if node in seen:
            return None
        seen.add(node)
        node = parent_of[node]
        if node not in visible_ids:
            return None
    return node
