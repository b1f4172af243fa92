# controllers/internal_controller.py
"""
集群内部接口：备份聚合服务通过这些接口导出 / 恢复评论。
不做用户鉴权，只校验 x-internal-request 头和租户。
"""
from flask import Blueprint, current_app, request, g

from middlewares.tenant import tenant_required, internal_only
from services.backup_service import BackupService
from utils.exceptions import ValidationError
from utils.response import json_response


internal_bp = Blueprint("internal", __name__, url_prefix="/internal")


@internal_bp.route("/export", methods=["GET", "POST"])
@internal_only
@tenant_required
def export_comments():
    result = BackupService.export(g.tenant.id)
    return json_response(data=result["data"], meta=result["meta"])


@internal_bp.post("/restore")
@internal_only
@tenant_required
def restore_comments():
    body = request.get_json(silent=True) or {}
    comments = body.get("comments") or []
    if not isinstance(comments, list):
        raise ValidationError("comments 必须是数组")
    result = BackupService.restore(g.tenant.id, comments)
    return json_response(data=result["data"], meta=result["meta"])


@internal_bp.get("/health")
def internal_health():
    return {"status": "ok", "service": current_app.config.get("APP_NAME", "devlog-api"), "internal": True}
