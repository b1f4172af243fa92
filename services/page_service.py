# services/page_service.py
import logging
from typing import Optional, List, Tuple

from sqlalchemy.exc import IntegrityError

from models.page import Page
from repositories.page_repository import PageRepository
from constants.content import PageStatus, PageType, validate_page_status, validate_page_type
from utils.datetime_helpers import utcnow
from utils.exceptions import ValidationError, NotFoundError
from utils.validators import resolve_slug

logger = logging.getLogger(__name__)

_SIMPLE_FIELDS = {
    "content": "content",
    "excerpt": "excerpt",
    "badge": "badge",
    "badgeColor": "badge_color",
    "template": "template",
}


class PageService:

    @staticmethod
    def list_published(page: int, limit: int, page_type: Optional[str] = None) -> Tuple[List[Page], int]:
        if page_type:
            page_type = page_type.upper()
            validate_page_type(page_type)
        return PageRepository.list(page=page, limit=limit, page_type=page_type, status=PageStatus.PUBLISHED.value)

    @staticmethod
    def list_notices(page: int, limit: int) -> Tuple[List[Page], int]:
        return PageService.list_published(page, limit, PageType.NOTICE.value)

    @staticmethod
    def list_admin(page: int, limit: int, page_type: Optional[str] = None, status: Optional[str] = None):
        if page_type:
            page_type = page_type.upper()
            validate_page_type(page_type)
        if status:
            status = status.upper()
            validate_page_status(status)
        return PageRepository.list(page=page, limit=limit, page_type=page_type, status=status)

    @staticmethod
    def get(page_id: int) -> Page:
        page = PageRepository.get_by_id(page_id)
        if not page:
            raise NotFoundError("页面不存在")
        return page

    @staticmethod
    def view_by_slug(slug: str, admin: bool = False) -> Page:
        """前台读取页面并累加阅读数；未发布页面对非管理员表现为不存在。"""
        page = PageRepository.get_by_slug(slug)
        if not page or (page.status != PageStatus.PUBLISHED.value and not admin):
            raise NotFoundError("页面不存在")
        page.view_count = (page.view_count or 0) + 1
        PageRepository.commit()
        return page

    @staticmethod
    def get_adjacent_notices(slug: str) -> dict:
        notice = PageRepository.get_by_slug(slug)
        if not notice or notice.type != PageType.NOTICE.value or notice.status != PageStatus.PUBLISHED.value:
            raise NotFoundError("公告不存在")
        prev_notice, next_notice = PageRepository.find_adjacent_notices(notice)

        def _brief(p):
            return {"id": p.id, "slug": p.slug, "title": p.title, "publishedAt": p.to_dict()["publishedAt"]} if p else None

        return {"prev": _brief(prev_notice), "next": _brief(next_notice)}

    @staticmethod
    def stats() -> dict:
        result = {"total": 0, "published": 0, "drafts": 0, "notices": 0, "staticPages": 0}
        for page_type, status, n in PageRepository.count_grouped():
            result["total"] += n
            if status == PageStatus.PUBLISHED.value:
                result["published"] += n
            elif status == PageStatus.DRAFT.value:
                result["drafts"] += n
            if page_type == PageType.NOTICE.value:
                result["notices"] += n
            elif page_type == PageType.STATIC.value:
                result["staticPages"] += n
        result["totalViews"] = PageRepository.sum_views()
        return result

    @staticmethod
    def _apply_status(page: Page, status: Optional[str]):
        if status is None:
            return
        status = status.upper()
        validate_page_status(status)
        page.status = status
        # 首次发布时记录发布时间，之后保持不变
        if status == PageStatus.PUBLISHED.value and page.published_at is None:
            page.published_at = utcnow()

    @staticmethod
    def create(author, data: dict) -> Page:
        title = (data.get("title") or "").strip()
        if not title:
            raise ValidationError("标题不能为空")
        if not (data.get("content") or "").strip():
            raise ValidationError("内容不能为空")
        slug = resolve_slug(data.get("slug"), title)
        if PageRepository.slug_exists(slug):
            raise ValidationError("已存在相同 slug 的页面")

        page_type = (data.get("type") or PageType.STATIC.value).upper()
        validate_page_type(page_type)

        page = Page(
            slug=slug,
            title=title,
            type=page_type,
            status=PageStatus.DRAFT.value,
            is_pinned=bool(data.get("isPinned", False)),
            author_id=author.id if author else None,
        )
        for key, attr in _SIMPLE_FIELDS.items():
            if key in data:
                setattr(page, attr, data.get(key))
        PageService._apply_status(page, data.get("status"))

        PageRepository.add(page)
        try:
            PageRepository.commit()
        except IntegrityError:
            PageRepository.rollback()
            raise ValidationError("已存在相同 slug 的页面")
        logger.info("创建页面 id=%s slug=%s type=%s", page.id, page.slug, page.type)
        return page

    @staticmethod
    def update(page_id: int, data: dict) -> Page:
        page = PageService.get(page_id)
        if "title" in data:
            title = (data.get("title") or "").strip()
            if not title:
                raise ValidationError("标题不能为空")
            page.title = title
        if data.get("slug"):
            slug = resolve_slug(data["slug"], None)
            if PageRepository.slug_exists(slug, exclude_id=page.id):
                raise ValidationError("已存在相同 slug 的页面")
            page.slug = slug
        if "type" in data:
            page_type = (data.get("type") or "").upper()
            validate_page_type(page_type)
            page.type = page_type
        if "isPinned" in data:
            page.is_pinned = bool(data.get("isPinned"))
        for key, attr in _SIMPLE_FIELDS.items():
            if key in data:
                setattr(page, attr, data.get(key))
        PageService._apply_status(page, data.get("status"))
        PageRepository.commit()
        return page

    @staticmethod
    def delete(page_id: int):
        page = PageService.get(page_id)
        PageRepository.delete(page)
        PageRepository.commit()
        logger.info("删除页面 id=%s", page_id)
