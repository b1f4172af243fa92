# repositories/page_repository.py
from typing import Optional, List, Tuple

from sqlalchemy import select, func, desc, asc

from extensions.database import db
from models.page import Page
from constants.content import PageStatus, PageType


class PageRepository:
    @staticmethod
    def get_by_id(page_id: int) -> Optional[Page]:
        return db.session.get(Page, page_id)

    @staticmethod
    def get_by_slug(slug: str) -> Optional[Page]:
        stmt = select(Page).where(Page.slug == slug)
        return db.session.execute(stmt).unique().scalar_one_or_none()

    @staticmethod
    def slug_exists(slug: str, exclude_id: Optional[int] = None) -> bool:
        stmt = select(Page.id).where(Page.slug == slug)
        if exclude_id is not None:
            stmt = stmt.where(Page.id != exclude_id)
        return db.session.execute(stmt).first() is not None

    @staticmethod
    def list(
        page: int = 1,
        limit: int = 10,
        page_type: Optional[str] = None,
        status: Optional[str] = None,
    ) -> Tuple[List[Page], int]:
        """置顶优先，其次按发布时间 / 创建时间倒序。"""
        conditions = []
        if page_type:
            conditions.append(Page.type == page_type)
        if status:
            conditions.append(Page.status == status)

        total = db.session.execute(select(func.count(Page.id)).where(*conditions)).scalar_one()
        stmt = (
            select(Page)
            .where(*conditions)
            .order_by(desc(Page.is_pinned), desc(Page.published_at), desc(Page.created_at), desc(Page.id))
            .offset((page - 1) * limit)
            .limit(limit)
        )
        return list(db.session.execute(stmt).unique().scalars()), total

    @staticmethod
    def find_adjacent_notices(notice: Page) -> Tuple[Optional[Page], Optional[Page]]:
        if notice.published_at is None:
            return None, None
        base = select(Page).where(
            Page.type == PageType.NOTICE.value,
            Page.status == PageStatus.PUBLISHED.value,
            Page.id != notice.id,
        )
        prev_stmt = base.where(Page.published_at < notice.published_at).order_by(desc(Page.published_at)).limit(1)
        next_stmt = base.where(Page.published_at > notice.published_at).order_by(asc(Page.published_at)).limit(1)
        return (
            db.session.execute(prev_stmt).unique().scalar_one_or_none(),
            db.session.execute(next_stmt).unique().scalar_one_or_none(),
        )

    @staticmethod
    def count_grouped() -> List[Tuple[str, str, int]]:
        stmt = select(Page.type, Page.status, func.count(Page.id)).group_by(Page.type, Page.status)
        return [(t, s, int(n)) for t, s, n in db.session.execute(stmt).all()]

    @staticmethod
    def sum_views() -> int:
        return int(db.session.execute(select(func.coalesce(func.sum(Page.view_count), 0))).scalar_one())

    @staticmethod
    def add(page: Page):
        db.session.add(page)
        db.session.flush()
        return page

    @staticmethod
    def delete(page: Page):
        db.session.delete(page)

    @staticmethod
    def commit():
        db.session.commit()

    @staticmethod
    def rollback():
        db.session.rollback()
