# services/category_service.py
import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError

from models.category import Category
from repositories.category_repository import CategoryRepository
from utils.exceptions import ValidationError, NotFoundError
from utils.validators import resolve_slug

logger = logging.getLogger(__name__)


class CategoryService:

    @staticmethod
    def list_all(include_private: bool = False) -> list[dict]:
        result = []
        for category, public_cnt, private_cnt in CategoryRepository.list_with_counts():
            item = category.to_dict()
            item["postCount"] = public_cnt
            if include_private:
                item["privateCount"] = private_cnt
            result.append(item)
        return result

    @staticmethod
    def get_by_slug(slug: str) -> Category:
        category = CategoryRepository.get_by_slug(slug)
        if not category:
            raise NotFoundError("分类不存在")
        return category

    @staticmethod
    def get(category_id: int) -> Category:
        category = CategoryRepository.get_by_id(category_id)
        if not category:
            raise NotFoundError("分类不存在")
        return category

    @staticmethod
    def _check_unique(name: str, slug: str, exclude_id: Optional[int] = None):
        same_name = CategoryRepository.get_by_name(name)
        if same_name and same_name.id != exclude_id:
            raise ValidationError("分类名称已存在")
        same_slug = CategoryRepository.get_by_slug(slug)
        if same_slug and same_slug.id != exclude_id:
            raise ValidationError("分类 slug 已存在")

    @staticmethod
    def create(data: dict) -> Category:
        name = (data.get("name") or "").strip()
        if not name:
            raise ValidationError("分类名称不能为空")
        slug = resolve_slug(data.get("slug"), name)
        CategoryService._check_unique(name, slug)

        category = Category(
            name=name,
            slug=slug,
            description=data.get("description"),
            icon=data.get("icon"),
            color=data.get("color"),
        )
        CategoryRepository.add(category)
        try:
            CategoryRepository.commit()
        except IntegrityError:
            CategoryRepository.rollback()
            raise ValidationError("分类名称或 slug 已存在")
        logger.info("创建分类 id=%s slug=%s", category.id, category.slug)
        return category

    @staticmethod
    def update(category_id: int, data: dict) -> Category:
        category = CategoryService.get(category_id)
        name = category.name
        if "name" in data:
            name = (data.get("name") or "").strip()
            if not name:
                raise ValidationError("分类名称不能为空")
        slug = resolve_slug(data.get("slug"), name) if data.get("slug") else category.slug
        CategoryService._check_unique(name, slug, exclude_id=category.id)

        category.name = name
        category.slug = slug
        for field in ("description", "icon", "color"):
            if field in data:
                setattr(category, field, data.get(field))
        try:
            CategoryRepository.commit()
        except IntegrityError:
            CategoryRepository.rollback()
            raise ValidationError("分类名称或 slug 已存在")
        return category

    @staticmethod
    def delete(category_id: int):
        category = CategoryService.get(category_id)
        post_count = CategoryRepository.count_posts(category.id)
        if post_count > 0:
            raise ValidationError(f"该分类下还有 {post_count} 篇文章，无法删除")
        CategoryRepository.delete(category)
        CategoryRepository.commit()
        logger.info("删除分类 id=%s", category_id)
