# services/user_service.py
import logging

from flask import current_app
from google.auth.exceptions import GoogleAuthError
from google.auth.transport import requests as google_requests
from google.oauth2 import id_token as google_id_token
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from models.user import User
from repositories.user_repository import UserRepository
from extensions.jwt import create_token, revoke_token
from constants.roles import UserRole
from utils.password import hash_password, verify_password
from utils.validators import validate_email
from utils.exceptions import BizError, ValidationError, UnauthorizedError, NotFoundError, InternalError

logger = logging.getLogger(__name__)

PASSWORD_MIN_LENGTH = 6


class UserService:

    @staticmethod
    def _is_whitelisted_admin(email: str) -> bool:
        admins = {e.lower() for e in current_app.config.get("ADMIN_EMAILS", [])}
        return email.lower() in admins

    @staticmethod
    def issue_token(user: User) -> str:
        return create_token(user.id, user.email, user.role)

    @staticmethod
    def _auth_payload(user: User) -> dict:
        return {"token": UserService.issue_token(user), "user": user.to_dict()}

    @staticmethod
    def _save(user: User):
        UserRepository.add(user)
        try:
            UserRepository.commit()
        except IntegrityError:
            UserRepository.rollback()
            raise BizError("邮箱或 Google 账号已被占用", code=409)
        except SQLAlchemyError:
            UserRepository.rollback()
            logger.exception("保存账号失败 email=%s", user.email)
            raise InternalError("数据库错误")

    @staticmethod
    def register(email: str, password: str, name: str) -> dict:
        email = (email or "").strip()
        name = (name or "").strip()
        if not email or not password or not name:
            raise ValidationError("邮箱、密码、昵称均为必填")
        if not validate_email(email):
            raise ValidationError("邮箱格式不正确")
        if len(password) < PASSWORD_MIN_LENGTH:
            raise ValidationError(f"密码长度至少 {PASSWORD_MIN_LENGTH} 位")
        if UserRepository.find_by_email(email):
            raise ValidationError("邮箱已被注册")

        # 第一个注册的账号即站长
        is_first = UserRepository.count() == 0
        role = UserRole.ADMIN.value if is_first or UserService._is_whitelisted_admin(email) else UserRole.USER.value
        user = User(email=email, password_hash=hash_password(password), name=name, role=role)
        UserService._save(user)
        logger.info("新账号注册 id=%s role=%s", user.id, user.role)
        return UserService._auth_payload(user)

    @staticmethod
    def login(email: str, password: str) -> dict:
        email = (email or "").strip()
        if not email or not password:
            raise ValidationError("请输入邮箱和密码")
        user = UserRepository.find_by_email(email)
        if not user or not verify_password(user.password_hash, password):
            raise UnauthorizedError("邮箱或密码错误")
        return UserService._auth_payload(user)

    @staticmethod
    def _parse_google_credential(credential: str) -> dict:
        client_id = current_app.config.get("GOOGLE_CLIENT_ID")
        if not client_id:
            raise InternalError("服务端未配置 GOOGLE_CLIENT_ID")
        try:
            # 校验 Google 公钥签名、aud、iss 与过期时间
            payload = google_id_token.verify_oauth2_token(credential, google_requests.Request(), client_id)
        except (ValueError, GoogleAuthError) as e:
            logger.warning("Google 凭证校验失败: %s", e)
            raise ValidationError("无效的 Google 凭证")

        if not payload.get("email_verified"):
            raise ValidationError("Google 邮箱未验证")
        if not payload.get("email") or not payload.get("sub"):
            raise ValidationError("无效的 Google 凭证")
        return payload

    @staticmethod
    def google_login(credential: str) -> dict:
        if not credential:
            raise ValidationError("缺少 Google 凭证")
        payload = UserService._parse_google_credential(credential)
        email = payload["email"]

        user = UserRepository.find_by_email(email)
        if user is None:
            user = User(
                email=email,
                google_id=payload["sub"],
                name=payload.get("name") or email.split("@")[0],
                avatar=payload.get("picture"),
                role=UserRole.ADMIN.value if UserService._is_whitelisted_admin(email) else UserRole.USER.value,
            )
        elif not user.google_id:
            # 已有邮箱账号，绑定 Google
            user.google_id = payload["sub"]
            user.avatar = user.avatar or payload.get("picture")

        if UserService._is_whitelisted_admin(email) and user.role != UserRole.ADMIN.value:
            user.role = UserRole.ADMIN.value
        UserService._save(user)
        return UserService._auth_payload(user)

    @staticmethod
    def get_me(user_id: int) -> User:
        user = UserRepository.find_by_id(user_id)
        if not user:
            raise NotFoundError("用户不存在")
        return user

    @staticmethod
    def update_me(user: User, data: dict) -> User:
        name = data.get("name")
        if name is not None:
            name = str(name).strip()
            if not name:
                raise ValidationError("昵称不能为空")
            user.name = name
        if "avatar" in data:
            user.avatar = data.get("avatar") or None
        if "bio" in data:
            user.bio = data.get("bio")

        new_password = data.get("newPassword")
        if new_password:
            current_password = data.get("currentPassword")
            if not current_password:
                raise ValidationError("请输入当前密码")
            # Google 账号没有密码时可直接设置
            if user.password_hash and not verify_password(user.password_hash, current_password):
                raise ValidationError("当前密码不正确")
            if len(new_password) < PASSWORD_MIN_LENGTH:
                raise ValidationError(f"密码长度至少 {PASSWORD_MIN_LENGTH} 位")
            user.password_hash = hash_password(new_password)

        UserService._save(user)
        return user

    @staticmethod
    def logout(token: str | None):
        if token:
            revoke_token(token)
