# controllers/page_controller.py
from flask import Blueprint, request, g

from controllers.auth_helpers import auth_required, optional_auth, admin_required
from services.page_service import PageService
from utils.pagination import get_page_args
from utils.permissions import is_admin
from utils.response import json_response, page_meta


page_bp = Blueprint("page", __name__, url_prefix="/api/pages")


@page_bp.get("")
def list_pages():
    page, limit = get_page_args()
    items, total = PageService.list_published(page, limit, request.args.get("type"))
    return json_response(data=[p.to_dict() for p in items], meta=page_meta(total, page, limit))


@page_bp.get("/notices")
def list_notices():
    page, limit = get_page_args()
    items, total = PageService.list_notices(page, limit)
    return json_response(data=[p.to_dict() for p in items], meta=page_meta(total, page, limit))


@page_bp.get("/notices/<slug>/adjacent")
def adjacent_notices(slug: str):
    return json_response(data=PageService.get_adjacent_notices(slug))


@page_bp.get("/slug/<slug>")
@optional_auth()
def get_page_by_slug(slug: str):
    return json_response(data=PageService.view_by_slug(slug, admin=is_admin()).to_dict())


# ---------------- 管理端 ----------------
@page_bp.get("/admin")
@auth_required()
@admin_required()
def admin_list_pages():
    page, limit = get_page_args()
    items, total = PageService.list_admin(
        page, limit,
        page_type=request.args.get("type"),
        status=request.args.get("status"),
    )
    return json_response(data=[p.to_dict() for p in items], meta=page_meta(total, page, limit))


@page_bp.get("/admin/stats")
@auth_required()
@admin_required()
def admin_page_stats():
    return json_response(data=PageService.stats())


@page_bp.get("/admin/<int:page_id>")
@auth_required()
@admin_required()
def admin_get_page(page_id: int):
    return json_response(data=PageService.get(page_id).to_dict())


@page_bp.post("")
@auth_required()
@admin_required()
def create_page():
    data = request.get_json(silent=True) or {}
    page = PageService.create(g.current_user, data)
    return json_response(data=page.to_dict(), message="创建成功", code=201)


@page_bp.put("/<int:page_id>")
@auth_required()
@admin_required()
def update_page(page_id: int):
    data = request.get_json(silent=True) or {}
    page = PageService.update(page_id, data)
    return json_response(data=page.to_dict(), message="更新成功")


@page_bp.delete("/<int:page_id>")
@auth_required()
@admin_required()
def delete_page(page_id: int):
    PageService.delete(page_id)
    return json_response(message="删除成功")
