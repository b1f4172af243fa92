# controllers/category_controller.py
from flask import Blueprint, request

from controllers.auth_helpers import auth_required, optional_auth, admin_required
from services.category_service import CategoryService
from services.post_service import PostService
from utils.pagination import get_page_args
from utils.permissions import is_admin
from utils.response import json_response, page_meta


category_bp = Blueprint("category", __name__, url_prefix="/api/categories")


@category_bp.get("")
@optional_auth()
def list_categories():
    return json_response(data=CategoryService.list_all(include_private=is_admin()))


@category_bp.get("/<slug>")
def get_category(slug: str):
    return json_response(data=CategoryService.get_by_slug(slug).to_dict())


@category_bp.get("/<slug>/posts")
@optional_auth()
def category_posts(slug: str):
    category = CategoryService.get_by_slug(slug)
    page, limit = get_page_args()
    items, total = PostService.list_posts(
        page=page,
        limit=limit,
        admin=is_admin(),
        status=request.args.get("status"),
        category=category.slug,
    )
    return json_response(
        data=[p.to_dict(with_content=False) for p in items],
        meta=page_meta(total, page, limit, category=category.to_dict()),
    )


@category_bp.post("")
@auth_required()
@admin_required()
def create_category():
    data = request.get_json(silent=True) or {}
    category = CategoryService.create(data)
    return json_response(data=category.to_dict(), message="创建成功", code=201)


@category_bp.put("/<int:category_id>")
@auth_required()
@admin_required()
def update_category(category_id: int):
    data = request.get_json(silent=True) or {}
    category = CategoryService.update(category_id, data)
    return json_response(data=category.to_dict(), message="更新成功")


@category_bp.delete("/<int:category_id>")
@auth_required()
@admin_required()
def delete_category(category_id: int):
    CategoryService.delete(category_id)
    return json_response(message="删除成功")
