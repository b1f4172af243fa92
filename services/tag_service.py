# services/tag_service.py
import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError

from models.tag import Tag
from repositories.tag_repository import TagRepository
from utils.exceptions import ValidationError, NotFoundError
from utils.validators import resolve_slug

logger = logging.getLogger(__name__)


class TagService:

    @staticmethod
    def list_all() -> list[dict]:
        result = []
        for tag, post_count in TagRepository.list_with_counts():
            item = tag.to_dict()
            item["postCount"] = post_count
            result.append(item)
        return result

    @staticmethod
    def get_by_slug(slug: str) -> Tag:
        tag = TagRepository.get_by_slug(slug)
        if not tag:
            raise NotFoundError("标签不存在")
        return tag

    @staticmethod
    def get(tag_id: int) -> Tag:
        tag = TagRepository.get_by_id(tag_id)
        if not tag:
            raise NotFoundError("标签不存在")
        return tag

    @staticmethod
    def _check_unique(name: str, slug: str, exclude_id: Optional[int] = None):
        same_slug = TagRepository.get_by_slug(slug)
        if same_slug and same_slug.id != exclude_id:
            raise ValidationError("标签 slug 已存在")
        same_name = TagRepository.get_by_name(name)
        if same_name and same_name.id != exclude_id:
            raise ValidationError("标签名称已存在")

    @staticmethod
    def create(data: dict) -> Tag:
        name = (data.get("name") or "").strip()
        if not name:
            raise ValidationError("标签名称不能为空")
        slug = resolve_slug(data.get("slug"), name)
        TagService._check_unique(name, slug)

        tag = Tag(name=name, slug=slug)
        TagRepository.add(tag)
        try:
            TagRepository.commit()
        except IntegrityError:
            TagRepository.rollback()
            raise ValidationError("标签名称或 slug 已存在")
        return tag

    @staticmethod
    def update(tag_id: int, data: dict) -> Tag:
        tag = TagService.get(tag_id)
        name = tag.name
        if "name" in data:
            name = (data.get("name") or "").strip()
            if not name:
                raise ValidationError("标签名称不能为空")
        slug = resolve_slug(data.get("slug"), name) if data.get("slug") else tag.slug
        TagService._check_unique(name, slug, exclude_id=tag.id)

        tag.name = name
        tag.slug = slug
        try:
            TagRepository.commit()
        except IntegrityError:
            TagRepository.rollback()
            raise ValidationError("标签名称或 slug 已存在")
        return tag

    @staticmethod
    def delete(tag_id: int):
        tag = TagService.get(tag_id)
        # 文章关联由 post_tag 级联清理
        TagRepository.delete(tag)
        TagRepository.commit()
        logger.info("删除标签 id=%s", tag_id)

    @staticmethod
    def resolve_tags(tag_ids=None, tag_names=None) -> list[Tag]:
        """文章保存时使用：按 ID 取已有标签，按名称查找或新建。"""
        tags = {t.id: t for t in TagRepository.get_by_ids(tag_ids or [])}
        for raw in tag_names or []:
            name = str(raw).strip()
            if not name:
                continue
            tag = TagRepository.get_by_name(name)
            if tag is None:
                slug = resolve_slug(None, name)
                tag = TagRepository.get_by_slug(slug) or TagRepository.add(Tag(name=name, slug=slug))
            tags[tag.id] = tag
        return list(tags.values())
