"""Package pricing with linked benefits and exclusions."""

from typing import Optional

from backoffice.errors import EntityValidationError
from backoffice.gateway.base import Row
from backoffice.services.base import EntityService, LinkSpec, UsageGuard
from backoffice.services.skills import SluggedService

PACKAGE_BENEFITS = LinkSpec(
    name="benefit_ids",
    junction="package_pricing_benefits",
    parent_column="package_pricing_id",
    child_column="package_benefit_id",
    child_table="package_benefits",
    label="Benefit",
)

PACKAGE_EXCLUSIONS = LinkSpec(
    name="exclusion_ids",
    junction="package_pricing_exclusions",
    parent_column="package_pricing_id",
    child_column="package_exclusion_id",
    child_table="package_exclusions",
    label="Exclusion",
)


class PackageBenefitService(SluggedService):
    table = "package_benefits"
    label = "package benefit"
    multilingual_fields = ("title",)
    search_fields = ("title",)
    guards = (
        UsageGuard(
            "package_pricing_benefits", "package_benefit_id",
            "Cannot delete: This benefit is being used in package pricing",
        ),
    )


class PackageExclusionService(SluggedService):
    table = "package_exclusions"
    label = "package exclusion"
    multilingual_fields = ("title",)
    search_fields = ("title",)
    guards = (
        UsageGuard(
            "package_pricing_exclusions", "package_exclusion_id",
            "Cannot delete: This exclusion is being used in package pricing",
        ),
    )


class PackagePricingService(EntityService):
    table = "package_pricing"
    label = "package pricing"
    multilingual_fields = ("title", "description", "work_duration")
    search_fields = ("title", "description")
    sortable = ("created_at", "updated_at", "price")
    link_filters = {"benefit_id": "benefit_ids", "exclusion_id": "exclusion_ids"}
    links = (PACKAGE_BENEFITS, PACKAGE_EXCLUSIONS)

    async def validate(self, payload: Row, existing: Optional[Row]) -> None:
        if existing is None or "price" in payload:
            price = payload.get("price")
            try:
                valid = price is not None and not isinstance(price, bool) and float(price) > 0
            except (TypeError, ValueError):
                valid = False
            if not valid:
                raise EntityValidationError("Price must be greater than 0", field="price")
