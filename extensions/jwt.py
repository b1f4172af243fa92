# extensions/jwt.py
"""
HS256 令牌的签发、校验与吊销。

载荷：sub(用户 ID) / email / role / iss / iat / exp / jti。
登出时把 jti 写入 Redis 黑名单，TTL 与令牌剩余有效期一致。
"""
import time, json, base64, hmac, hashlib, uuid
from flask import current_app
from extensions.redis_client import get_redis

REVOKED_PREFIX = "jwt:blk:"
_HEADER = {"alg": "HS256", "typ": "JWT"}


class TokenError(ValueError):
    pass


def _b64encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode()


def decode_segment(seg: str):
    """解码 JWT 的单个 base64url 段（不校验签名）。"""
    pad = "=" * (-len(seg) % 4)
    return json.loads(base64.urlsafe_b64decode(seg + pad).decode())


def _sign(signing_input: str) -> str:
    secret = current_app.config["JWT_SECRET_KEY"].encode()
    return _b64encode(hmac.new(secret, signing_input.encode(), hashlib.sha256).digest())


def _issuer() -> str:
    return current_app.config.get("APP_NAME", "devlog-api")


def create_token(user_id: int, email: str, role: str, expires_seconds: int | None = None) -> str:
    if expires_seconds is None:
        expires_seconds = current_app.config.get("JWT_EXPIRES_SECONDS", 7 * 24 * 3600)
    issued_at = int(time.time())
    claims = {
        "sub": user_id,
        "email": email,
        "role": role,
        "iss": _issuer(),
        "iat": issued_at,
        "exp": issued_at + expires_seconds,
        "jti": uuid.uuid4().hex,
    }
    segments = [
        _b64encode(json.dumps(_HEADER, separators=(",", ":")).encode()),
        _b64encode(json.dumps(claims, separators=(",", ":")).encode()),
    ]
    signing_input = ".".join(segments)
    return f"{signing_input}.{_sign(signing_input)}"


def _verify(token: str) -> dict:
    parts = token.split(".")
    if len(parts) != 3:
        raise TokenError("token格式错误")
    header_seg, payload_seg, signature = parts

    if decode_segment(header_seg).get("alg") != _HEADER["alg"]:
        raise TokenError("不支持的签名算法")
    if not hmac.compare_digest(_sign(f"{header_seg}.{payload_seg}"), signature):
        raise TokenError("签名不匹配")

    payload = decode_segment(payload_seg)
    exp = payload.get("exp")
    if exp and time.time() > exp:
        raise TokenError("token已过期")
    iss = payload.get("iss")
    if iss and iss != _issuer():
        raise TokenError("签发方不匹配")
    return payload


def decode_token(token: str, check_revoked: bool = True) -> dict:
    try:
        payload = _verify(token)
    except TokenError:
        raise
    except (ValueError, TypeError, AttributeError) as e:
        # base64 / JSON 解析失败
        raise TokenError("token不合法") from e

    if check_revoked and is_token_revoked(payload.get("jti")):
        raise TokenError("token已失效")
    return payload


def revoke_token(token: str):
    """
    把 token 的 jti 加入黑名单。
    token 本身已无效（过期、伪造）时无需处理，直接返回。
    """
    try:
        payload = decode_token(token, check_revoked=False)
    except TokenError:
        return
    jti, exp = payload.get("jti"), payload.get("exp")
    if not jti or not exp:
        return
    ttl = max(int(exp - time.time()), 1)
    get_redis().setex(f"{REVOKED_PREFIX}{jti}", ttl, "1")


def is_token_revoked(jti: str | None) -> bool:
    if not jti:
        return False
    return bool(get_redis().get(f"{REVOKED_PREFIX}{jti}"))
