# services/rate_limit_service.py
import logging

from flask import current_app

from repositories.rate_limit_repository import RateLimitRepository
from utils.exceptions import BizError

logger = logging.getLogger(__name__)


class CommentRateLimiter:
    """按 IP 哈希限制评论发布频率：窗口内超过上限返回 429。"""

    def __init__(self, ip_hash: str, limit: int | None = None, window_seconds: int | None = None):
        cfg = current_app.config
        self.key = f"comment:rate:{ip_hash}"
        self.limit = limit if limit is not None else cfg.get("COMMENT_RATE_LIMIT", 10)
        self.window_seconds = window_seconds if window_seconds is not None else cfg.get("COMMENT_RATE_WINDOW_SECONDS", 60)

    def ensure_not_blocked(self):
        count = RateLimitRepository.get_count(self.key)
        if count >= self.limit:
            ttl = RateLimitRepository.get_ttl(self.key)
            logger.warning("评论频率超限 key=%s count=%s ttl=%s", self.key, count, ttl)
            raise BizError(message=f"评论过于频繁，请 {max(ttl, 1)} 秒后重试", code=429)

    def record(self) -> int:
        return RateLimitRepository.hit(self.key, self.window_seconds)

    def clear(self):
        RateLimitRepository.clear(self.key)
