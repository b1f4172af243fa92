# repositories/comment_repository.py
from typing import Optional, List, Tuple, Iterable, Set

from sqlalchemy import select, func, desc, delete

from extensions.database import db
from models.comment import Comment


class CommentRepository:
    """
    评论仓储：所有查询都带 tenant_id，跨租户的数据互不可见。
    写操作不自动 commit。
    """

    @staticmethod
    def get_by_id(tenant_id: str, comment_id) -> Optional[Comment]:
        try:
            comment_id = int(comment_id)
        except (TypeError, ValueError):
            return None
        stmt = select(Comment).where(Comment.tenant_id == tenant_id, Comment.id == comment_id)
        return db.session.execute(stmt).unique().scalar_one_or_none()

    @staticmethod
    def list_for_resource(tenant_id: str, resource_type: str, resource_id: str) -> List[Comment]:
        """某个资源下的全部评论（含已删除），按创建时间正序。"""
        stmt = (
            select(Comment)
            .where(
                Comment.tenant_id == tenant_id,
                Comment.resource_type == resource_type,
                Comment.resource_id == resource_id,
            )
            .order_by(Comment.created_at.asc(), Comment.id.asc())
        )
        return list(db.session.execute(stmt).unique().scalars())

    @staticmethod
    def list_admin(
        tenant_id: str,
        page: int = 1,
        limit: int = 20,
        include_deleted: bool = False,
        status: Optional[str] = None,
        resource_type: Optional[str] = None,
        resource_id: Optional[str] = None,
    ) -> Tuple[List[Comment], int]:
        conditions = [Comment.tenant_id == tenant_id]
        if not include_deleted:
            conditions.append(Comment.is_deleted == False)  # noqa: E712
        if status:
            conditions.append(Comment.status == status)
        if resource_type:
            conditions.append(Comment.resource_type == resource_type)
        if resource_id:
            conditions.append(Comment.resource_id == resource_id)

        total = db.session.execute(select(func.count(Comment.id)).where(*conditions)).scalar_one()
        stmt = (
            select(Comment)
            .where(*conditions)
            .order_by(desc(Comment.created_at), desc(Comment.id))
            .offset((page - 1) * limit)
            .limit(limit)
        )
        return list(db.session.execute(stmt).unique().scalars()), total

    @staticmethod
    def list_by_author(tenant_id: str, author_id: int, page: int = 1, limit: int = 20) -> Tuple[List[Comment], int]:
        conditions = [
            Comment.tenant_id == tenant_id,
            Comment.author_id == author_id,
            Comment.is_deleted == False,  # noqa: E712
        ]
        total = db.session.execute(select(func.count(Comment.id)).where(*conditions)).scalar_one()
        stmt = (
            select(Comment)
            .where(*conditions)
            .order_by(desc(Comment.created_at), desc(Comment.id))
            .offset((page - 1) * limit)
            .limit(limit)
        )
        return list(db.session.execute(stmt).unique().scalars()), total

    @staticmethod
    def list_recent(tenant_id: str, limit: int = 5, status: Optional[str] = None, include_private: bool = False) -> List[Comment]:
        stmt = select(Comment).where(
            Comment.tenant_id == tenant_id,
            Comment.is_deleted == False,  # noqa: E712
        )
        if status:
            stmt = stmt.where(Comment.status == status)
        if not include_private:
            stmt = stmt.where(Comment.is_private == False)  # noqa: E712
        stmt = stmt.order_by(desc(Comment.created_at), desc(Comment.id)).limit(limit)
        return list(db.session.execute(stmt).unique().scalars())

    @staticmethod
    def list_for_export(tenant_id: str) -> List[Comment]:
        stmt = (
            select(Comment)
            .where(Comment.tenant_id == tenant_id)
            .order_by(desc(Comment.created_at), desc(Comment.id))
        )
        return list(db.session.execute(stmt).unique().scalars())

    @staticmethod
    def count_by_status(tenant_id: str) -> dict:
        stmt = (
            select(Comment.status, func.count(Comment.id))
            .where(Comment.tenant_id == tenant_id, Comment.is_deleted == False)  # noqa: E712
            .group_by(Comment.status)
        )
        return {status: int(n) for status, n in db.session.execute(stmt).all()}

    @staticmethod
    def count_for_tenant(tenant_id: str) -> int:
        stmt = select(func.count(Comment.id)).where(Comment.tenant_id == tenant_id)
        return db.session.execute(stmt).scalar_one()

    @staticmethod
    def has_replies(tenant_id: str, comment_id: int) -> bool:
        stmt = select(Comment.id).where(Comment.tenant_id == tenant_id, Comment.parent_id == comment_id).limit(1)
        return db.session.execute(stmt).first() is not None

    @staticmethod
    def collect_descendant_ids(tenant_id: str, root_ids: Iterable[int]) -> List[int]:
        """
        广度优先收集 root_ids 及其全部后代的 ID（只包含真实存在的记录）。
        返回顺序：根在前，后代按层级在后。
        """
        wanted = [int(i) for i in root_ids]
        if not wanted:
            return []
        stmt = select(Comment.id).where(Comment.tenant_id == tenant_id, Comment.id.in_(wanted))
        frontier = [cid for (cid,) in db.session.execute(stmt).all()]

        seen: Set[int] = set(frontier)
        ordered: List[int] = list(frontier)
        while frontier:
            stmt = select(Comment.id).where(Comment.tenant_id == tenant_id, Comment.parent_id.in_(frontier))
            children = [cid for (cid,) in db.session.execute(stmt).all() if cid not in seen]
            seen.update(children)
            ordered.extend(children)
            frontier = children
        return ordered

    @staticmethod
    def delete_by_ids(tenant_id: str, ids: List[int]):
        if not ids:
            return
        db.session.execute(
            delete(Comment)
            .where(Comment.tenant_id == tenant_id, Comment.id.in_(ids))
            .execution_options(synchronize_session=False)
        )
        db.session.expire_all()

    @staticmethod
    def delete_by_tenant(tenant_id: str) -> int:
        """删除租户全部评论，返回删除条数（先计数，级联删除的子评论不会计入 rowcount）。"""
        total = CommentRepository.count_for_tenant(tenant_id)
        db.session.execute(
            delete(Comment).where(Comment.tenant_id == tenant_id).execution_options(synchronize_session=False)
        )
        db.session.expire_all()
        return total

    @staticmethod
    def delete_by_resources(tenant_id: str, resource_type: str, resource_ids: Iterable[str]):
        ids = [str(r) for r in resource_ids]
        if not ids:
            return
        db.session.execute(
            delete(Comment)
            .where(
                Comment.tenant_id == tenant_id,
                Comment.resource_type == resource_type,
                Comment.resource_id.in_(ids),
            )
            .execution_options(synchronize_session=False)
        )

    @staticmethod
    def add(comment: Comment):
        db.session.add(comment)
        db.session.flush()
        return comment

    @staticmethod
    def commit():
        db.session.commit()

    @staticmethod
    def rollback():
        db.session.rollback()
