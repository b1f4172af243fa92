import hashlib

from flask import current_app, request


def get_client_ip() -> str:
    """优先取反向代理写入的 X-Forwarded-For 第一个地址。"""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    return request.remote_addr or "unknown"


def hash_ip(ip: str) -> str:
    salt = current_app.config.get("IP_HASH_SALT", "")
    return hashlib.sha256(f"{ip}{salt}".encode("utf-8")).hexdigest()


def current_ip_hash() -> str:
    return hash_ip(get_client_ip())
