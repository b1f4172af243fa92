# -*- coding: utf-8 -*-
"""
user.py
--------------------------------------------------------------------
博客账号。
说明：
- 邮箱密码注册的账号 password_hash 非空；Google 登录的账号可只有 google_id。
- role 为全局角色：USER / ADMIN。第一个注册的账号自动成为 ADMIN。
- 作者主页展示用的 bio / avatar 直接放在账号表上。
"""

from extensions.database import db
from .mixins import TimestampMixin, COMMON_TABLE_ARGS
from constants.roles import UserRole


class User(TimestampMixin, db.Model):
    __tablename__ = "user"
    __table_args__ = (COMMON_TABLE_ARGS,)

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(120), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255))
    google_id = db.Column(db.String(64), unique=True)
    name = db.Column(db.String(50), nullable=False)
    avatar = db.Column(db.String(500))
    bio = db.Column(db.Text)
    role = db.Column(db.String(16), nullable=False, default=UserRole.USER.value, server_default=UserRole.USER.value)

    def __repr__(self):
        return f"<User id={self.id} email={self.email} role={self.role}>"

    @property
    def role_label(self) -> str:
        from constants.roles import ROLE_LABELS_ZH
        return ROLE_LABELS_ZH.get(self.role, self.role)

    def to_brief(self):
        return {"id": self.id, "name": self.name, "avatar": self.avatar}

    def to_dict(self):
        return {
            "id": self.id,
            "email": self.email,
            "name": self.name,
            "avatar": self.avatar,
            "bio": self.bio,
            "role": self.role,
        }
