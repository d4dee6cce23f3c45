"""Articles with their categories and tags."""

from typing import Any, Optional

from backoffice.errors import EntityNotFoundError
from backoffice.gateway.base import Row, eq
from backoffice.services.base import AssetSpec, EntityService, ReferenceSpec, UsageGuard, logged
from backoffice.services.validation import validate_range


class ArticleCategoryService(EntityService):
    table = "article_categories"
    label = "article category"
    multilingual_fields = ("title", "subtitle")
    search_fields = ("title", "subtitle")
    filter_fields = {"is_active": "is_active"}
    asset_fields = {"icon": AssetSpec("article-category", allow_icon_class=True)}
    guards = (
        UsageGuard("articles", "article_category_id", "Cannot delete: Category is being used by articles"),
    )


class ArticleTagService(EntityService):
    table = "article_tags"
    label = "article tag"
    multilingual_fields = ("title",)
    search_fields = ("title",)
    filter_fields = {"is_active": "is_active"}
    guards = (
        UsageGuard("articles", "article_tag_id", "Cannot delete: Tag is being used by articles"),
    )


class ArticleService(EntityService):
    """
    Blog articles.

    New articles start with zero views and likes. ``increment_view`` and
    ``toggle_like`` adjust the counters in place.
    """

    table = "articles"
    label = "article"
    multilingual_fields = ("title", "preview_description", "description")
    search_fields = ("title", "preview_description")
    sortable = ("created_at", "updated_at", "total_views", "like", "post_schedule")
    filter_fields = {
        "is_active": "is_active",
        "category_id": "article_category_id",
        "tag_id": "article_tag_id",
    }
    datetime_fields = ("post_schedule",)
    asset_fields = {"image": AssetSpec("article")}
    references = (
        ReferenceSpec("article_category_id", "article_categories", "Invalid article category ID"),
        ReferenceSpec("article_tag_id", "article_tags", "Invalid article tag ID"),
    )
    default_values = {"total_views": 0, "like": 0, "is_active": True}

    async def validate(self, payload: Row, existing: Optional[Row]) -> None:
        validate_range(payload.get("minute_read"), "minute_read", "Minute read cannot be negative", minimum=0)
        validate_range(payload.get("total_views"), "total_views", "Total views cannot be negative", minimum=0)
        validate_range(payload.get("like"), "like", "Likes cannot be negative", minimum=0)

    async def _set_counter(self, article_id: Any, column: str, delta: int) -> Row:
        article = await self.get_by_id(article_id)
        if article is None:
            raise EntityNotFoundError("Article not found")
        value = max(0, int(article.get(column) or 0) + delta)
        row = self._check(
            await self.gateway.update(self.table, {column: value}, [eq("id", article_id)])
        ).first
        return row

    @logged("incrementing views of")
    async def increment_view(self, article_id: Any) -> Row:
        return await self._set_counter(article_id, "total_views", 1)

    @logged("liking")
    async def toggle_like(self, article_id: Any, liked: bool = True) -> Row:
        """Add a like, or withdraw one when ``liked`` is False (never below zero)."""
        return await self._set_counter(article_id, "like", 1 if liked else -1)
