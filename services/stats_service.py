# services/stats_service.py
from repositories.post_repository import PostRepository
from repositories.page_repository import PageRepository
from repositories.comment_repository import CommentRepository
from repositories.category_repository import CategoryRepository
from repositories.tag_repository import TagRepository
from services.comment_service import CommentService
from services.page_service import PageService
from constants.content import PostStatus
from constants.comment import CommentStatus


class StatsService:

    @staticmethod
    def dashboard(tenant_id: str, admin_user=None) -> dict:
        post_counts = PostRepository.count_by_status()
        comment_counts = CommentRepository.count_by_status(tenant_id)

        return {
            "posts": {
                "total": sum(post_counts.values()),
                "public": post_counts.get(PostStatus.PUBLIC.value, 0),
                "private": post_counts.get(PostStatus.PRIVATE.value, 0),
                "draft": post_counts.get(PostStatus.DRAFT.value, 0),
            },
            "comments": {
                "total": sum(comment_counts.values()),
                "pending": comment_counts.get(CommentStatus.PENDING.value, 0),
                "approved": comment_counts.get(CommentStatus.APPROVED.value, 0),
                "rejected": comment_counts.get(CommentStatus.REJECTED.value, 0),
                "spam": comment_counts.get(CommentStatus.SPAM.value, 0),
            },
            "pages": PageService.stats(),
            "totalViews": PostRepository.sum_views(),
            "categories": [
                {"id": c.id, "name": c.name, "slug": c.slug, "postCount": pub}
                for c, pub, _ in CategoryRepository.list_with_counts()
            ],
            "tags": [
                {"id": t.id, "name": t.name, "slug": t.slug, "postCount": n}
                for t, n in TagRepository.list_with_counts()
            ],
            "recentPosts": [p.to_dict(with_content=False) for p in PostRepository.list_recent(5)],
            "recentComments": CommentService.list_recent(tenant_id, limit=5, viewer=admin_user),
        }
