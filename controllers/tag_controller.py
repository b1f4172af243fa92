# controllers/tag_controller.py
from flask import Blueprint, request

from controllers.auth_helpers import auth_required, optional_auth, admin_required
from services.tag_service import TagService
from services.post_service import PostService
from utils.pagination import get_page_args
from utils.permissions import is_admin
from utils.response import json_response, page_meta


tag_bp = Blueprint("tag", __name__, url_prefix="/api/tags")


@tag_bp.get("")
def list_tags():
    return json_response(data=TagService.list_all())


@tag_bp.get("/<slug>")
def get_tag(slug: str):
    return json_response(data=TagService.get_by_slug(slug).to_dict())


@tag_bp.get("/<slug>/posts")
@optional_auth()
def tag_posts(slug: str):
    tag = TagService.get_by_slug(slug)
    page, limit = get_page_args()
    items, total = PostService.list_posts(
        page=page,
        limit=limit,
        admin=is_admin(),
        status=request.args.get("status"),
        tag=tag.slug,
    )
    return json_response(
        data=[p.to_dict(with_content=False) for p in items],
        meta=page_meta(total, page, limit, tag=tag.to_dict()),
    )


@tag_bp.post("")
@auth_required()
@admin_required()
def create_tag():
    tag = TagService.create(request.get_json(silent=True) or {})
    return json_response(data=tag.to_dict(), message="创建成功", code=201)


@tag_bp.put("/<int:tag_id>")
@auth_required()
@admin_required()
def update_tag(tag_id: int):
    tag = TagService.update(tag_id, request.get_json(silent=True) or {})
    return json_response(data=tag.to_dict(), message="更新成功")


@tag_bp.delete("/<int:tag_id>")
@auth_required()
@admin_required()
def delete_tag(tag_id: int):
    TagService.delete(tag_id)
    return json_response(message="删除成功")
