import re
import unicodedata

EMAIL_RE = re.compile(r"^[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}$")
SLUG_RE = re.compile(r"^[a-z0-9-]+$")
# 保留 CJK / 韩文音节，其余非字母数字统一替换为连字符
_SLUG_STRIP_RE = re.compile(r"[^a-z0-9一-鿿가-힣]+")


def validate_email(email: str) -> bool:
    return bool(EMAIL_RE.match(email))


def validate_slug(slug: str) -> bool:
    return bool(SLUG_RE.match(slug))


def slugify(text: str, allow_unicode: bool = False) -> str:
    """
    生成 URL slug：
      1. NFKD 归一化，去掉重音符
      2. 转小写，非字母数字替换为 "-"
      3. 合并连续 "-"，去掉首尾 "-"
    allow_unicode=False 时中文/韩文等字符会被丢弃，可能返回空串，由调用方兜底。
    """
    if not text:
        return ""
    value = unicodedata.normalize("NFKD", text)
    value = "".join(ch for ch in value if not unicodedata.combining(ch))
    value = unicodedata.normalize("NFKC", value).lower()
    if allow_unicode:
        value = _SLUG_STRIP_RE.sub("-", value)
    else:
        value = re.sub(r"[^a-z0-9]+", "-", value)
    return value.strip("-")


def resolve_slug(slug: str | None, source: str | None) -> str:
    """显式 slug 必须合法；未提供时由 source 生成，生成失败抛 ValidationError。"""
    from utils.exceptions import ValidationError

    if slug:
        slug = slug.strip().lower()
        if not validate_slug(slug):
            raise ValidationError("slug 只能包含小写字母、数字和连字符")
        return slug
    generated = slugify(source or "")
    if not generated:
        raise ValidationError("无法根据标题生成 slug，请手动填写")
    return generated
