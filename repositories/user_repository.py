# repositories/user_repository.py
from __future__ import annotations
from typing import Optional

from sqlalchemy import select, func

from models.user import User
from extensions.database import db


class UserRepository:
    """
    账号仓储层。
    说明：
    - 不做业务规则判断（首个账号成为管理员、白名单提权等在服务层）。
    - 写操作不自动 commit，由上层显式调用 commit()。
    """

    @staticmethod
    def find_by_id(user_id) -> Optional[User]:
        try:
            user_id = int(user_id)
        except (TypeError, ValueError):
            return None
        return db.session.get(User, user_id)

    @staticmethod
    def find_by_email(email: str) -> Optional[User]:
        stmt = select(User).where(func.lower(User.email) == email.strip().lower())
        return db.session.execute(stmt).scalar_one_or_none()

    @staticmethod
    def find_by_google_id(google_id: str) -> Optional[User]:
        stmt = select(User).where(User.google_id == google_id)
        return db.session.execute(stmt).scalar_one_or_none()

    @staticmethod
    def count() -> int:
        return db.session.execute(select(func.count(User.id))).scalar_one()

    @staticmethod
    def add(user: User):
        db.session.add(user)

    @staticmethod
    def commit():
        db.session.commit()

    @staticmethod
    def rollback():
        db.session.rollback()
