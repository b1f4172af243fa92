# repositories/category_repository.py
from typing import Optional, List, Tuple

from sqlalchemy import select, func, case

from extensions.database import db
from models.category import Category
from models.post import Post
from constants.content import PostStatus


class CategoryRepository:
    @staticmethod
    def get_by_id(category_id: int) -> Optional[Category]:
        return db.session.get(Category, category_id)

    @staticmethod
    def get_by_slug(slug: str) -> Optional[Category]:
        stmt = select(Category).where(Category.slug == slug)
        return db.session.execute(stmt).scalar_one_or_none()

    @staticmethod
    def get_by_name(name: str) -> Optional[Category]:
        stmt = select(Category).where(Category.name == name)
        return db.session.execute(stmt).scalar_one_or_none()

    @staticmethod
    def list_with_counts() -> List[Tuple[Category, int, int]]:
        """返回 [(category, public_count, private_count)]，按名称排序。"""
        public_cnt = func.coalesce(func.sum(case((Post.status == PostStatus.PUBLIC.value, 1), else_=0)), 0)
        private_cnt = func.coalesce(func.sum(case((Post.status == PostStatus.PRIVATE.value, 1), else_=0)), 0)
        stmt = (
            select(Category, public_cnt, private_cnt)
            .outerjoin(Post, Post.category_id == Category.id)
            .group_by(Category.id)
            .order_by(Category.name.asc())
        )
        return [(c, int(pub), int(pri)) for c, pub, pri in db.session.execute(stmt).all()]

    @staticmethod
    def count_posts(category_id: int, status: Optional[str] = None) -> int:
        stmt = select(func.count(Post.id)).where(Post.category_id == category_id)
        if status:
            stmt = stmt.where(Post.status == status)
        return db.session.execute(stmt).scalar_one()

    @staticmethod
    def add(category: Category):
        db.session.add(category)
        db.session.flush()
        return category

    @staticmethod
    def delete(category: Category):
        db.session.delete(category)

    @staticmethod
    def commit():
        db.session.commit()

    @staticmethod
    def rollback():
        db.session.rollback()
