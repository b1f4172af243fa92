from flask import current_app, request

from utils.exceptions import ValidationError


def _positive_int(name: str, raw, default: int) -> int:
    if raw is None or raw == "":
        return default
    try:
        value = int(raw)
    except (TypeError, ValueError):
        raise ValidationError(f"{name} 必须为正整数")
    if value < 1:
        raise ValidationError(f"{name} 必须为正整数")
    return value


def get_page_args(default_limit: int | None = None) -> tuple[int, int]:
    """从 query string 读取 page / limit，limit 不超过 MAX_PAGE_SIZE。"""
    cfg = current_app.config
    default_limit = default_limit or cfg.get("DEFAULT_PAGE_SIZE", 10)
    page = _positive_int("page", request.args.get("page"), 1)
    limit = _positive_int("limit", request.args.get("limit"), default_limit)
    return page, min(limit, cfg.get("MAX_PAGE_SIZE", 100))


def parse_bool(raw, default: bool | None = None) -> bool | None:
    if raw is None or raw == "":
        return default
    if isinstance(raw, bool):
        return raw
    return str(raw).strip().lower() in ("1", "true", "yes", "on")
