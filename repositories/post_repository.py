# repositories/post_repository.py
from typing import Optional, List, Tuple, Iterable

from sqlalchemy import select, func, desc, asc, or_, delete

from extensions.database import db
from models.post import Post, PostView
from models.category import Category
from models.tag import Tag
from constants.content import PostStatus

_SORT_COLUMNS = {
    "publishedAt": Post.published_at,
    "updatedAt": Post.updated_at,
    "viewCount": Post.view_count,
    "likeCount": Post.like_count,
}


class PostRepository:
    @staticmethod
    def get_by_id(post_id) -> Optional[Post]:
        try:
            post_id = int(post_id)
        except (TypeError, ValueError):
            return None
        return db.session.get(Post, post_id)

    @staticmethod
    def get_by_slug(slug: str) -> Optional[Post]:
        stmt = select(Post).where(Post.slug == slug)
        return db.session.execute(stmt).unique().scalar_one_or_none()

    @staticmethod
    def slug_exists(slug: str, exclude_id: Optional[int] = None) -> bool:
        stmt = select(Post.id).where(Post.slug == slug)
        if exclude_id is not None:
            stmt = stmt.where(Post.id != exclude_id)
        return db.session.execute(stmt).first() is not None

    @staticmethod
    def list(
        statuses: List[str],
        page: int = 1,
        limit: int = 10,
        category_slug: Optional[str] = None,
        tag_slug: Optional[str] = None,
        search: Optional[str] = None,
        featured: Optional[bool] = None,
        sort_by: str = "publishedAt",
    ) -> Tuple[List[Post], int]:
        conditions = [Post.status.in_(statuses)]
        if category_slug:
            conditions.append(Post.category.has(Category.slug == category_slug))
        if tag_slug:
            conditions.append(Post.tags.any(Tag.slug == tag_slug))
        if search:
            kw = f"%{search.strip()}%"
            conditions.append(or_(Post.title.ilike(kw), Post.excerpt.ilike(kw), Post.content.ilike(kw)))
        if featured is not None:
            conditions.append(Post.featured == featured)

        total = db.session.execute(select(func.count(Post.id)).where(*conditions)).scalar_one()

        sort_col = _SORT_COLUMNS.get(sort_by, Post.published_at)
        stmt = (
            select(Post)
            .where(*conditions)
            .order_by(desc(sort_col), desc(Post.created_at), desc(Post.id))
            .offset((page - 1) * limit)
            .limit(limit)
        )
        items = list(db.session.execute(stmt).unique().scalars())
        return items, total

    @staticmethod
    def list_top_viewed(limit: int = 5) -> List[Post]:
        stmt = (
            select(Post)
            .where(Post.status == PostStatus.PUBLIC.value)
            .order_by(desc(Post.view_count), desc(Post.published_at))
            .limit(limit)
        )
        return list(db.session.execute(stmt).unique().scalars())

    @staticmethod
    def list_recent(limit: int = 5) -> List[Post]:
        stmt = select(Post).order_by(desc(Post.created_at), desc(Post.id)).limit(limit)
        return list(db.session.execute(stmt).unique().scalars())

    @staticmethod
    def find_most_popular_public() -> Optional[Post]:
        stmt = (
            select(Post)
            .where(Post.status == PostStatus.PUBLIC.value)
            .order_by(desc(Post.like_count), desc(Post.view_count), desc(Post.id))
            .limit(1)
        )
        return db.session.execute(stmt).unique().scalar_one_or_none()

    @staticmethod
    def list_featured() -> List[Post]:
        stmt = select(Post).where(Post.featured == True)  # noqa: E712
        return list(db.session.execute(stmt).unique().scalars())

    @staticmethod
    def find_adjacent(post: Post) -> Tuple[Optional[Post], Optional[Post]]:
        """按 published_at 取同为 PUBLIC 的上一篇 / 下一篇。"""
        if post.published_at is None:
            return None, None
        base = select(Post).where(Post.status == PostStatus.PUBLIC.value, Post.id != post.id)
        prev_stmt = base.where(Post.published_at < post.published_at).order_by(desc(Post.published_at)).limit(1)
        next_stmt = base.where(Post.published_at > post.published_at).order_by(asc(Post.published_at)).limit(1)
        prev_post = db.session.execute(prev_stmt).unique().scalar_one_or_none()
        next_post = db.session.execute(next_stmt).unique().scalar_one_or_none()
        return prev_post, next_post

    @staticmethod
    def count_by_status() -> dict:
        stmt = select(Post.status, func.count(Post.id)).group_by(Post.status)
        return {status: int(n) for status, n in db.session.execute(stmt).all()}

    @staticmethod
    def sum_views() -> int:
        return int(db.session.execute(select(func.coalesce(func.sum(Post.view_count), 0))).scalar_one())

    @staticmethod
    def get_by_ids(post_ids: Iterable[int]) -> List[Post]:
        ids = {int(p) for p in post_ids}
        if not ids:
            return []
        return list(db.session.execute(select(Post).where(Post.id.in_(ids))).unique().scalars())

    # ---------------- 阅读记录 ----------------
    @staticmethod
    def get_view(post_id: int, ip_hash: str) -> Optional[PostView]:
        stmt = select(PostView).where(PostView.post_id == post_id, PostView.ip_hash == ip_hash)
        return db.session.execute(stmt).scalar_one_or_none()

    @staticmethod
    def add_view(view: PostView):
        db.session.add(view)

    @staticmethod
    def delete_views(post_ids: Iterable[int]):
        db.session.execute(delete(PostView).where(PostView.post_id.in_(list(post_ids))))

    @staticmethod
    def add(post: Post):
        db.session.add(post)
        db.session.flush()
        return post

    @staticmethod
    def delete(post: Post):
        db.session.delete(post)

    @staticmethod
    def commit():
        db.session.commit()

    @staticmethod
    def rollback():
        db.session.rollback()
