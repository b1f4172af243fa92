# middlewares/tenant.py
"""
租户识别 + 内部请求校验。

租户 ID 来源（按优先级）：
  1. x-tenant-id 请求头（网关从 JWT claim 注入）
  2. Host 子域名：blog.example.com -> tenant-blog；localhost / IP 不参与
  3. 配置项 TENANT_ID（单租户部署兜底）
"""
import functools
from dataclasses import dataclass
from typing import Optional

from flask import current_app, g, request

from utils.response import error_response

TENANT_PREFIX = "tenant-"
INTERNAL_HEADER = "x-internal-request"


@dataclass
class Tenant:
    id: str
    name: Optional[str] = None


def _with_prefix(value: str) -> str:
    return value if value.startswith(TENANT_PREFIX) else f"{TENANT_PREFIX}{value}"


def extract_tenant_from_host(host: str | None) -> str | None:
    if not host:
        return None
    hostname = host.split(":")[0]
    if hostname in ("localhost", "127.0.0.1"):
        return None
    parts = hostname.split(".")
    if len(parts) >= 3 and not all(p.isdigit() for p in parts):
        return f"{TENANT_PREFIX}{parts[0]}"
    return None


def resolve_tenant_from_request() -> Tenant | None:
    tenant_id = (request.headers.get("x-tenant-id") or "").strip()
    tenant_name = request.headers.get("x-tenant-name")

    if not tenant_id:
        host = request.headers.get("Host") or request.headers.get("X-Forwarded-Host")
        from_host = extract_tenant_from_host(host)
        if from_host:
            tenant_id = from_host
            tenant_name = from_host[len(TENANT_PREFIX):]

    if not tenant_id:
        fallback = current_app.config.get("TENANT_ID")
        if fallback:
            tenant_id = _with_prefix(fallback)
            tenant_name = tenant_name or tenant_id[len(TENANT_PREFIX):]

    if not tenant_id:
        return None
    return Tenant(id=tenant_id, name=tenant_name)


def get_current_tenant() -> Tenant | None:
    return getattr(g, "tenant", None)


def tenant_required(fn):
    @functools.wraps(fn)
    def _wrap(*args, **kwargs):
        tenant = resolve_tenant_from_request()
        if tenant is None:
            return error_response(code=400, message="无法识别租户，需要 x-tenant-id 或有效的 Host")
        g.tenant = tenant
        return fn(*args, **kwargs)
    return _wrap


def internal_only(fn):
    """仅允许集群内服务间调用（网关会剥离外部请求的该头）。"""
    @functools.wraps(fn)
    def _wrap(*args, **kwargs):
        if request.headers.get(INTERNAL_HEADER) != "true":
            return error_response(code=403, message="该接口仅供内部服务调用")
        return fn(*args, **kwargs)
    return _wrap
