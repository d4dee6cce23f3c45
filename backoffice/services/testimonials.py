"""Client testimonials and their categories."""

from typing import List, Optional

from backoffice.gateway.base import Row, not_null
from backoffice.multilingual import Locale, resolve_text
from backoffice.services.base import AssetSpec, EntityService, ReferenceSpec, UsageGuard, logged
from backoffice.services.validation import validate_range


class TestimonialCategoryService(EntityService):
    table = "testimonial_categories"
    label = "testimonial category"
    multilingual_fields = ("title",)
    search_fields = ("title",)
    guards = (
        UsageGuard(
            "testimonials", "testimonial_category_id",
            "Cannot delete: Category is being used in testimonials",
        ),
    )


class TestimonialService(EntityService):
    table = "testimonials"
    label = "testimonial"
    multilingual_fields = ("job", "project", "industry", "message")
    search_fields = ("job", "project", "industry", "message")
    plain_search_fields = ("name",)
    sortable = ("created_at", "updated_at", "star", "year", "name")
    filter_fields = {
        "category_id": "testimonial_category_id",
        "year": "year",
        "star": "star",
    }
    asset_fields = {"profile": AssetSpec("testimonial")}
    references = (
        ReferenceSpec("testimonial_category_id", "testimonial_categories", "Invalid testimonial category ID"),
    )

    async def validate(self, payload: Row, existing: Optional[Row]) -> None:
        validate_range(payload.get("star"), "star", "Star rating must be between 1 and 5", minimum=1, maximum=5)

    @logged("fetching years of")
    async def get_unique_years(self) -> List[int]:
        """Distinct testimonial years, newest first."""
        response = self._check(
            await self.gateway.select(self.table, columns=["year"], filters=[not_null("year")])
        )
        return sorted({row["year"] for row in response.data}, reverse=True)

    @logged("fetching industries of")
    async def get_unique_industries(self, locale: Locale = Locale.EN) -> List[str]:
        """Distinct industry labels in ``locale`` (with fallback), in first-seen order."""
        response = self._check(
            await self.gateway.select(self.table, columns=["industry"], filters=[not_null("industry")])
        )
        labels = (resolve_text(row["industry"], locale) for row in response.data)
        return list(dict.fromkeys(label for label in labels if label))
