# services/post_service.py
import logging
import time
from datetime import timedelta
from typing import Optional, List, Tuple

from flask import current_app
from sqlalchemy.exc import IntegrityError

from models.post import Post, PostView
from repositories.post_repository import PostRepository
from repositories.category_repository import CategoryRepository
from repositories.comment_repository import CommentRepository
from services.tag_service import TagService
from constants.content import (
    PostStatus,
    PUBLISHED_POST_STATUSES,
    POST_STATUS_FILTERS,
    POST_SORT_FIELDS,
    validate_post_status,
)
from constants.comment import POST_RESOURCE_TYPE
from utils.datetime_helpers import utcnow, parse_iso
from utils.exceptions import ValidationError, ForbiddenError, NotFoundError
from utils.reading_time import calculate_reading_time
from utils.validators import slugify, validate_slug

logger = logging.getLogger(__name__)


class PostService:

    # ---------------- 查询 ----------------
    @staticmethod
    def resolve_statuses(status_filter: Optional[str], admin: bool) -> List[str]:
        """
        status 过滤：
          - 空 / PUBLIC       -> 仅 PUBLIC（管理员不传时默认 PUBLIC + PRIVATE）
          - PUBLISHED / ALL   -> PUBLIC + PRIVATE，仅管理员
          - PRIVATE / DRAFT   -> 对应状态，仅管理员
        """
        if status_filter:
            status_filter = status_filter.strip().upper()
        if not status_filter:
            return list(PUBLISHED_POST_STATUSES) if admin else [PostStatus.PUBLIC.value]
        if status_filter not in POST_STATUS_FILTERS:
            raise ValidationError(f"status 必须是 {POST_STATUS_FILTERS} 之一")
        if status_filter == PostStatus.PUBLIC.value:
            return [PostStatus.PUBLIC.value]
        if not admin:
            raise ForbiddenError("没有权限查看该状态的文章")
        if status_filter in ("PUBLISHED", "ALL"):
            return list(PUBLISHED_POST_STATUSES)
        return [status_filter]

    @staticmethod
    def list_posts(
        page: int,
        limit: int,
        admin: bool = False,
        status: Optional[str] = None,
        category: Optional[str] = None,
        tag: Optional[str] = None,
        search: Optional[str] = None,
        sort_by: Optional[str] = None,
        featured: Optional[bool] = None,
    ) -> Tuple[List[Post], int]:
        statuses = PostService.resolve_statuses(status, admin)
        if sort_by and sort_by not in POST_SORT_FIELDS:
            raise ValidationError(f"sortBy 必须是 {list(POST_SORT_FIELDS)} 之一")
        return PostRepository.list(
            statuses=statuses,
            page=page,
            limit=limit,
            category_slug=category,
            tag_slug=tag,
            search=search,
            featured=featured,
            sort_by=sort_by or "publishedAt",
        )

    @staticmethod
    def list_featured() -> List[Post]:
        items, _ = PostRepository.list(statuses=[PostStatus.PUBLIC.value], page=1, limit=5, featured=True)
        return items

    @staticmethod
    def list_top_viewed(limit: int = 5) -> List[Post]:
        return PostRepository.list_top_viewed(limit)

    @staticmethod
    def get_visible_by_slug(slug: str, admin: bool = False) -> Post:
        post = PostRepository.get_by_slug(slug)
        # 非 PUBLIC 文章对非管理员表现为不存在
        if not post or (post.status != PostStatus.PUBLIC.value and not admin):
            raise NotFoundError("文章不存在")
        return post

    @staticmethod
    def get(post_id) -> Post:
        post = PostRepository.get_by_id(post_id)
        if not post:
            raise NotFoundError("文章不存在")
        return post

    @staticmethod
    def get_adjacent(slug: str, admin: bool = False) -> dict:
        post = PostService.get_visible_by_slug(slug, admin)
        prev_post, next_post = PostRepository.find_adjacent(post)

        def _brief(p):
            return {"id": p.id, "slug": p.slug, "title": p.title} if p else None

        return {"prev": _brief(prev_post), "next": _brief(next_post)}

    # ---------------- 阅读计数 / 推荐 ----------------
    @staticmethod
    def record_view(post: Post, ip_hash: str) -> bool:
        """同一 IP 在窗口期内只计一次，返回本次是否计数。"""
        window = current_app.config.get("POST_VIEW_WINDOW_SECONDS", 86400)
        now = utcnow()
        view = PostRepository.get_view(post.id, ip_hash)
        if view is None:
            PostRepository.add_view(PostView(post_id=post.id, ip_hash=ip_hash, created_at=now))
        elif view.created_at < now - timedelta(seconds=window):
            view.created_at = now
        else:
            return False

        post.view_count = (post.view_count or 0) + 1
        try:
            PostRepository.commit()
        except IntegrityError:
            # 并发请求已写入同一 (post, ip) 记录
            PostRepository.rollback()
            return False
        PostService.refresh_featured()
        return True

    @staticmethod
    def refresh_featured():
        """点赞数最高（其次阅读数）的 PUBLIC 文章成为唯一推荐。"""
        top = PostRepository.find_most_popular_public()
        if top is None:
            return
        changed = False
        for post in PostRepository.list_featured():
            if post.id != top.id:
                post.featured = False
                changed = True
        if not top.featured:
            top.featured = True
            changed = True
        if changed:
            PostRepository.commit()
            logger.info("推荐文章更新为 id=%s", top.id)

    # ---------------- 写入 ----------------
    @staticmethod
    def _unique_slug(base: str, exclude_id: Optional[int] = None) -> str:
        if not PostRepository.slug_exists(base, exclude_id):
            return base
        return f"{base}-{int(time.time() * 1000)}"

    @staticmethod
    def _apply_relations(post: Post, data: dict):
        if "categoryId" in data:
            category_id = data.get("categoryId")
            if category_id in (None, ""):
                post.category = None
            else:
                category = CategoryRepository.get_by_id(_as_int("categoryId", category_id))
                if not category:
                    raise ValidationError("分类不存在")
                post.category = category
        if "tagIds" in data or "tags" in data:
            tag_ids = [_as_int("tagIds", t) for t in (data.get("tagIds") or [])]
            post.tags = TagService.resolve_tags(tag_ids=tag_ids, tag_names=data.get("tags") or [])

    @staticmethod
    def _apply_status(post: Post, data: dict):
        if "status" in data:
            status = (data.get("status") or "").upper()
            validate_post_status(status)
            post.status = status
        if data.get("publishedAt"):
            try:
                post.published_at = parse_iso(data["publishedAt"])
            except ValueError:
                raise ValidationError("publishedAt 不是合法的时间格式")
        elif post.status != PostStatus.DRAFT.value and post.published_at is None:
            post.published_at = utcnow()

    @staticmethod
    def create(author, data: dict) -> Post:
        title = (data.get("title") or "").strip()
        content = data.get("content") or ""
        if not title:
            raise ValidationError("标题不能为空")
        if not content.strip():
            raise ValidationError("正文不能为空")

        slug = (data.get("slug") or "").strip().lower()
        if slug and not validate_slug(slug):
            raise ValidationError("slug 只能包含小写字母、数字和连字符")
        # 纯中文/韩文标题生成不出 slug 时用时间戳兜底
        slug = slug or slugify(title) or f"post-{int(time.time() * 1000)}"

        post = Post(
            slug=PostService._unique_slug(slug),
            title=title,
            excerpt=data.get("excerpt"),
            content=content,
            cover_image=data.get("coverImage"),
            reading_time=calculate_reading_time(content),
            status=PostStatus.PUBLIC.value,
            featured=bool(data.get("featured", False)),
            author_id=author.id if author else None,
        )
        PostService._apply_status(post, data)
        PostService._apply_relations(post, data)
        PostRepository.add(post)
        PostRepository.commit()
        logger.info("创建文章 id=%s slug=%s status=%s", post.id, post.slug, post.status)

        PostService.refresh_featured()
        return post

    @staticmethod
    def update(post_id, data: dict) -> Post:
        post = PostService.get(post_id)
        if "title" in data:
            title = (data.get("title") or "").strip()
            if not title:
                raise ValidationError("标题不能为空")
            post.title = title
        if "slug" in data and data.get("slug"):
            slug = data["slug"].strip().lower()
            if not validate_slug(slug):
                raise ValidationError("slug 只能包含小写字母、数字和连字符")
            if PostRepository.slug_exists(slug, exclude_id=post.id):
                raise ValidationError("slug 已被其他文章使用")
            post.slug = slug
        if "content" in data:
            content = data.get("content") or ""
            if not content.strip():
                raise ValidationError("正文不能为空")
            post.content = content
            post.reading_time = calculate_reading_time(content)
        if "excerpt" in data:
            post.excerpt = data.get("excerpt")
        if "coverImage" in data:
            post.cover_image = data.get("coverImage")
        if "featured" in data:
            post.featured = bool(data.get("featured"))

        PostService._apply_status(post, data)
        PostService._apply_relations(post, data)
        PostRepository.commit()
        return post

    @staticmethod
    def _delete_many(posts: List[Post], tenant_id: Optional[str]):
        ids = [p.id for p in posts]
        if tenant_id:
            CommentRepository.delete_by_resources(tenant_id, POST_RESOURCE_TYPE, ids)
        PostRepository.delete_views(ids)
        for post in posts:
            PostRepository.delete(post)
        PostRepository.commit()

    @staticmethod
    def delete(post_id, tenant_id: Optional[str] = None):
        post = PostService.get(post_id)
        PostService._delete_many([post], tenant_id)
        logger.info("删除文章 id=%s", post_id)

    @staticmethod
    def bulk_delete(ids, tenant_id: Optional[str] = None) -> int:
        if not isinstance(ids, list) or not ids:
            raise ValidationError("ids 必须是非空数组")
        posts = PostRepository.get_by_ids(_as_int("ids", i) for i in ids)
        PostService._delete_many(posts, tenant_id)
        logger.info("批量删除文章 count=%s", len(posts))
        return len(posts)


def _as_int(name: str, value) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{name} 必须是整数")
