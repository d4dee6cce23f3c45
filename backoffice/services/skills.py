"""Skills and skill categories (slugged)."""

from typing import Any, List, Mapping, Optional

from backoffice.errors import EntityValidationError
from backoffice.gateway.base import Predicate, Row, gte
from backoffice.multilingual import Locale, resolve_text
from backoffice.services.base import AssetSpec, EntityService, ReferenceSpec, UsageGuard
from backoffice.services.validation import slugify, validate_range


class SluggedService(EntityService):
    """Slug generated from the English title when not given, unique per table."""

    async def ensure_slug(self, payload: Row, existing: Optional[Row]) -> None:
        if payload.get("slug"):
            slug = slugify(payload["slug"])
            message = "Slug already exists"
        elif "title" in payload or existing is None:
            slug = slugify(resolve_text(payload.get("title"), Locale.EN))
            message = "Generated slug already exists"
        else:
            return
        if not slug:
            return
        if await self.slug_taken(slug, exclude_id=existing["id"] if existing else None):
            raise EntityValidationError(message, field="slug")
        payload["slug"] = slug

    async def validate(self, payload: Row, existing: Optional[Row]) -> None:
        await self.ensure_slug(payload, existing)


class SkillCategoryService(SluggedService):
    table = "skill_categories"
    label = "skill category"
    multilingual_fields = ("title",)
    search_fields = ("title",)
    plain_search_fields = ("slug",)
    asset_fields = {"icon": AssetSpec("skill-category", allow_icon_class=True)}
    guards = (
        UsageGuard("skills", "skill_category_id", "Cannot delete: Category has associated skills"),
    )


class SkillService(SluggedService):
    table = "skills"
    label = "skill"
    multilingual_fields = ("title",)
    search_fields = ("title",)
    plain_search_fields = ("slug",)
    sortable = ("created_at", "updated_at", "percent_skills", "long_experience")
    filter_fields = {"category_id": "skill_category_id"}
    asset_fields = {"icon": AssetSpec("skill", allow_icon_class=True)}
    references = (
        ReferenceSpec("skill_category_id", "skill_categories", "Invalid skill category ID"),
    )
    detach_on_delete = (
        ("experience_skills", "skill_id"),
        ("project_skills", "skill_id"),
        ("certificate_skills", "skill_id"),
        ("featured_service_skills", "skill_id"),
    )

    async def build_filters(self, params: Mapping[str, Any]) -> Optional[List[Predicate]]:
        predicates = await super().build_filters(params)
        if predicates is None:
            return None
        if params.get("min_percent") not in (None, ""):
            predicates.append(gte("percent_skills", self.coerce_value(self.table, "percent_skills", params["min_percent"])))
        if params.get("min_experience") not in (None, ""):
            predicates.append(gte("long_experience", self.coerce_value(self.table, "long_experience", params["min_experience"])))
        return predicates

    async def validate(self, payload: Row, existing: Optional[Row]) -> None:
        validate_range(
            payload.get("percent_skills"), "percent_skills",
            "Percent skills must be between 0 and 100", minimum=0, maximum=100,
        )
        validate_range(
            payload.get("long_experience"), "long_experience",
            "Experience years cannot be negative", minimum=0,
        )
        await super().validate(payload, existing)
