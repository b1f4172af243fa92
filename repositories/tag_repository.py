# repositories/tag_repository.py
from typing import Optional, List, Tuple, Iterable

from sqlalchemy import select, func, and_

from extensions.database import db
from models.tag import Tag, post_tag
from models.post import Post
from constants.content import PostStatus


class TagRepository:
    @staticmethod
    def get_by_id(tag_id: int) -> Optional[Tag]:
        return db.session.get(Tag, tag_id)

    @staticmethod
    def get_by_slug(slug: str) -> Optional[Tag]:
        stmt = select(Tag).where(Tag.slug == slug)
        return db.session.execute(stmt).scalar_one_or_none()

    @staticmethod
    def get_by_name(name: str) -> Optional[Tag]:
        stmt = select(Tag).where(Tag.name == name)
        return db.session.execute(stmt).scalar_one_or_none()

    @staticmethod
    def get_by_ids(tag_ids: Iterable[int]) -> List[Tag]:
        ids = {int(t) for t in tag_ids if t is not None}
        if not ids:
            return []
        stmt = select(Tag).where(Tag.id.in_(ids))
        return list(db.session.execute(stmt).scalars())

    @staticmethod
    def list_with_counts() -> List[Tuple[Tag, int]]:
        """返回 [(tag, public_post_count)]，只统计 PUBLIC 文章。"""
        cnt = func.count(Post.id)
        stmt = (
            select(Tag, cnt)
            .outerjoin(post_tag, post_tag.c.tag_id == Tag.id)
            .outerjoin(Post, and_(Post.id == post_tag.c.post_id, Post.status == PostStatus.PUBLIC.value))
            .group_by(Tag.id)
            .order_by(Tag.name.asc())
        )
        return [(t, int(n)) for t, n in db.session.execute(stmt).all()]

    @staticmethod
    def add(tag: Tag):
        db.session.add(tag)
        db.session.flush()
        return tag

    @staticmethod
    def delete(tag: Tag):
        db.session.delete(tag)

    @staticmethod
    def commit():
        db.session.commit()

    @staticmethod
    def rollback():
        db.session.rollback()
