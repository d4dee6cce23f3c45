"""Work experience entries and their categories."""

from typing import Optional

from backoffice.gateway.base import Row
from backoffice.services.base import AssetSpec, EntityService, LinkSpec, ReferenceSpec, UsageGuard
from backoffice.services.validation import validate_range

EXPERIENCE_SKILLS = LinkSpec(
    name="skill_ids",
    junction="experience_skills",
    parent_column="experience_id",
    child_column="skill_id",
    child_table="skills",
    label="Skill",
)


class ExperienceCategoryService(EntityService):
    table = "experience_categories"
    label = "experience category"
    multilingual_fields = ("title",)
    search_fields = ("title",)
    guards = (
        UsageGuard(
            "experiences", "experience_category_id",
            "Cannot delete: Category is being used by experiences",
        ),
    )


class ExperienceService(EntityService):
    table = "experiences"
    label = "experience"
    multilingual_fields = ("title", "subtitle", "description", "key_achievements", "location")
    search_fields = ("title", "subtitle", "description")
    sortable = ("created_at", "updated_at", "experience_long")
    filter_fields = {"category_id": "experience_category_id"}
    link_filters = {"skill_id": "skill_ids"}
    url_fields = {"company_link": "Invalid company link URL"}
    asset_fields = {"company_logo": AssetSpec("experience")}
    references = (
        ReferenceSpec("experience_category_id", "experience_categories", "Invalid experience category ID"),
    )
    links = (EXPERIENCE_SKILLS,)

    async def validate(self, payload: Row, existing: Optional[Row]) -> None:
        validate_range(
            payload.get("experience_long"), "experience_long",
            "Experience duration cannot be negative", minimum=0,
        )
