# controllers/comment_controller.py
from flask import Blueprint, request, g

from controllers.auth_helpers import auth_required, optional_auth, admin_required
from middlewares.tenant import tenant_required
from services.comment_service import CommentService
from utils.ip_hash import current_ip_hash
from utils.pagination import get_page_args, parse_bool
from utils.response import json_response, page_meta


comment_bp = Blueprint("comment", __name__, url_prefix="/api/comments")


@comment_bp.get("/post/<int:post_id>")
@tenant_required
@optional_auth()
def list_post_comments(post_id: int):
    data = CommentService.list_for_post(g.tenant.id, post_id, viewer=g.current_user)
    return json_response(data=data)


@comment_bp.post("/post/<int:post_id>")
@tenant_required
@optional_auth()
def create_comment(post_id: int):
    data = request.get_json(silent=True) or {}
    comment = CommentService.create(
        g.tenant.id,
        post_id,
        data,
        user=g.current_user,
        ip_hash=current_ip_hash(),
    )
    return json_response(data=comment, code=201)


@comment_bp.get("/recent")
@tenant_required
@optional_auth()
def recent_comments():
    limit = request.args.get("limit", default=5, type=int)
    limit = min(max(limit, 1), 50)
    return json_response(data=CommentService.list_recent(g.tenant.id, limit=limit, viewer=g.current_user))


@comment_bp.get("/me")
@tenant_required
@auth_required()
def my_comments():
    page, limit = get_page_args(default_limit=20)
    items, total = CommentService.list_mine(g.tenant.id, g.current_user, page, limit)
    return json_response(data=items, meta=page_meta(total, page, limit))


@comment_bp.put("/<int:comment_id>")
@tenant_required
@optional_auth()
def update_comment(comment_id: int):
    data = request.get_json(silent=True) or {}
    comment = CommentService.update(g.tenant.id, comment_id, data, user=g.current_user)
    return json_response(data=comment, message="更新成功")


@comment_bp.delete("/<int:comment_id>")
@tenant_required
@optional_auth()
def delete_comment(comment_id: int):
    data = request.get_json(silent=True) or {}
    CommentService.delete(g.tenant.id, comment_id, data, user=g.current_user)
    return json_response(data={"success": True}, message="评论已删除")


# ---------------- 管理端 ----------------
@comment_bp.get("/admin")
@tenant_required
@auth_required()
@admin_required()
def admin_list_comments():
    page, limit = get_page_args(default_limit=20)
    items, total = CommentService.list_admin(
        g.tenant.id,
        page,
        limit,
        include_deleted=parse_bool(request.args.get("includeDeleted"), False),
        status=request.args.get("status"),
        post_id=request.args.get("postId"),
    )
    return json_response(data=items, meta=page_meta(total, page, limit))


@comment_bp.delete("/admin/<int:comment_id>")
@tenant_required
@auth_required()
@admin_required()
def admin_delete_comment(comment_id: int):
    deleted = CommentService.hard_delete(g.tenant.id, comment_id)
    return json_response(data={"deletedCount": deleted}, message="评论已永久删除")


@comment_bp.post("/admin/bulk-delete")
@tenant_required
@auth_required()
@admin_required()
def admin_bulk_delete_comments():
    data = request.get_json(silent=True) or {}
    deleted = CommentService.bulk_hard_delete(g.tenant.id, data.get("ids"))
    return json_response(data={"deletedCount": deleted}, message="评论已永久删除")


@comment_bp.post("/<int:comment_id>/approve")
@tenant_required
@auth_required()
@admin_required()
def approve_comment(comment_id: int):
    return json_response(data=CommentService.approve(g.tenant.id, comment_id), message="已通过审核")


@comment_bp.patch("/<int:comment_id>/status")
@tenant_required
@auth_required()
@admin_required()
def set_comment_status(comment_id: int):
    data = request.get_json(silent=True) or {}
    return json_response(data=CommentService.set_status(g.tenant.id, comment_id, data.get("status")))
