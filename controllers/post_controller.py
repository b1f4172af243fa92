# controllers/post_controller.py
from flask import Blueprint, request, g

from controllers.auth_helpers import auth_required, optional_auth, admin_required
from middlewares.tenant import tenant_required, get_current_tenant
from services.post_service import PostService
from utils.ip_hash import current_ip_hash
from utils.pagination import get_page_args, parse_bool
from utils.permissions import is_admin
from utils.response import json_response, page_meta


post_bp = Blueprint("post", __name__, url_prefix="/api/posts")


@post_bp.get("")
@optional_auth()
def list_posts():
    page, limit = get_page_args()
    args = request.args
    items, total = PostService.list_posts(
        page=page,
        limit=limit,
        admin=is_admin(),
        status=args.get("status"),
        category=args.get("category"),
        tag=args.get("tag"),
        search=args.get("search"),
        sort_by=args.get("sortBy"),
        featured=parse_bool(args.get("featured")),
    )
    return json_response(
        data=[p.to_dict(with_content=False) for p in items],
        meta=page_meta(total, page, limit),
    )


@post_bp.get("/featured")
def featured_posts():
    return json_response(data=[p.to_dict(with_content=False) for p in PostService.list_featured()])


@post_bp.get("/top-viewed")
def top_viewed_posts():
    limit = request.args.get("limit", default=5, type=int)
    limit = min(max(limit, 1), 20)
    return json_response(data=[p.to_dict(with_content=False) for p in PostService.list_top_viewed(limit)])


@post_bp.get("/admin/<int:post_id>")
@auth_required()
@admin_required()
def get_post_for_edit(post_id: int):
    return json_response(data=PostService.get(post_id).to_dict())


@post_bp.get("/<slug>")
@optional_auth()
def get_post(slug: str):
    post = PostService.get_visible_by_slug(slug, admin=is_admin())
    PostService.record_view(post, current_ip_hash())
    return json_response(data=post.to_dict())


@post_bp.get("/<slug>/adjacent")
@optional_auth()
def adjacent_posts(slug: str):
    return json_response(data=PostService.get_adjacent(slug, admin=is_admin()))


@post_bp.post("")
@auth_required()
@admin_required()
def create_post():
    data = request.get_json(silent=True) or {}
    post = PostService.create(g.current_user, data)
    return json_response(data=post.to_dict(), message="创建成功", code=201)


@post_bp.put("/<int:post_id>")
@auth_required()
@admin_required()
def update_post(post_id: int):
    data = request.get_json(silent=True) or {}
    post = PostService.update(post_id, data)
    return json_response(data=post.to_dict(), message="更新成功")


@post_bp.delete("/<int:post_id>")
@tenant_required
@auth_required()
@admin_required()
def delete_post(post_id: int):
    PostService.delete(post_id, tenant_id=get_current_tenant().id)
    return json_response(message="删除成功")


@post_bp.post("/bulk-delete")
@tenant_required
@auth_required()
@admin_required()
def bulk_delete_posts():
    data = request.get_json(silent=True) or {}
    deleted = PostService.bulk_delete(data.get("ids"), tenant_id=get_current_tenant().id)
    return json_response(data={"deletedCount": deleted}, message="删除成功")
