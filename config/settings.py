# config/settings.py
import os
from dotenv import load_dotenv

BASE_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
load_dotenv(os.path.join(BASE_DIR, ".env"))  # 自动加载环境变量


def _as_bool(val, default=False):
    if val is None:
        return default
    return str(val).lower() in ("1", "true", "yes", "on")


def _as_list(val):
    if not val:
        return []
    return [item.strip() for item in str(val).split(",") if item.strip()]


class BaseConfig:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "jwt-secret-key")
    JWT_EXPIRES_SECONDS = int(os.getenv("JWT_EXPIRES_SECONDS", 7 * 24 * 3600))
    REDIS_URL = os.getenv("REDIS_URL", "redis://127.0.0.1:6379/0")

    # 日志相关
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    LOG_DIR = os.getenv("LOG_DIR", "./logs")
    LOG_JSON = os.getenv("LOG_JSON", "1") == "1"  # 是否 JSON 格式
    LOG_MAX_BYTES = int(os.getenv("LOG_MAX_BYTES", 5 * 1024 * 1024))
    LOG_BACKUP_COUNT = int(os.getenv("LOG_BACKUP_COUNT", 5))
    # 超过该耗时的请求以 WARNING 记录
    LOG_SLOW_REQUEST_MS = int(os.getenv("LOG_SLOW_REQUEST_MS", 1000))
    APP_NAME = os.getenv("APP_NAME", "devlog-api")

    # 多租户：无 x-tenant-id / 子域名时的兜底租户
    TENANT_ID = os.getenv("TENANT_ID", "default")

    # Google 登录
    GOOGLE_CLIENT_ID = os.getenv("GOOGLE_CLIENT_ID")
    # 白名单邮箱登录后自动成为管理员
    ADMIN_EMAILS = _as_list(os.getenv("ADMIN_EMAILS"))

    # IP 哈希盐值（评论、浏览量去重）
    IP_HASH_SALT = os.getenv("IP_HASH_SALT", "default-salt-change-in-production")

    # ========= 评论相关 =========
    COMMENT_MAX_LENGTH = int(os.getenv("COMMENT_MAX_LENGTH", 2000))
    GUEST_PASSWORD_MIN_LENGTH = int(os.getenv("GUEST_PASSWORD_MIN_LENGTH", 4))
    # 新评论是否直接通过审核；关闭后新评论进入 PENDING
    COMMENT_AUTO_APPROVE = _as_bool(os.getenv("COMMENT_AUTO_APPROVE", "1"), True)
    # 同一 IP 在窗口期内最多发表的评论数
    COMMENT_RATE_LIMIT = int(os.getenv("COMMENT_RATE_LIMIT", 10))
    COMMENT_RATE_WINDOW_SECONDS = int(os.getenv("COMMENT_RATE_WINDOW_SECONDS", 60))

    # 文章浏览量去重窗口（秒）
    POST_VIEW_WINDOW_SECONDS = int(os.getenv("POST_VIEW_WINDOW_SECONDS", 24 * 3600))

    # 分页
    DEFAULT_PAGE_SIZE = int(os.getenv("DEFAULT_PAGE_SIZE", 10))
    MAX_PAGE_SIZE = int(os.getenv("MAX_PAGE_SIZE", 100))

    # =========================================


class DevelopmentConfig(BaseConfig):
    DEBUG = True
    SQLALCHEMY_DATABASE_URI = os.getenv("DEV_DATABASE_URI", "sqlite:///" + os.path.join(BASE_DIR, "dev.db"))


class ProductionConfig(BaseConfig):
    DEBUG = False
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URI")


class TestingConfig(BaseConfig):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = os.getenv("TEST_DATABASE_URI", "sqlite:///:memory:")
    LOG_JSON = False
    LOG_DIR = os.getenv("TEST_LOG_DIR", os.path.join(BASE_DIR, "logs", "test"))
    TENANT_ID = "test"
    JWT_SECRET_KEY = "test-jwt-secret"
    COMMENT_AUTO_APPROVE = True
    GOOGLE_CLIENT_ID = "test-google-client"
    ADMIN_EMAILS = ["owner@example.com"]
    COMMENT_RATE_LIMIT = 30


config_map = {
    "development": DevelopmentConfig,
    "production": ProductionConfig,
    "testing": TestingConfig,
}


def get_config(config_name):
    return config_map.get(config_name, DevelopmentConfig)
