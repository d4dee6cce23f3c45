"""
Service offerings: featured services, benefits, work process steps,
promise items, FAQs, brands and the tech stack.
"""

from typing import Any, Mapping, Optional, Sequence

from backoffice.errors import EntityNotFoundError, EntityValidationError
from backoffice.gateway.base import Order, Row, eq, gt, in_, not_null
from backoffice.services.base import (
    AssetSpec,
    EntityService,
    LinkSpec,
    ReferenceSpec,
    UsageGuard,
    logged,
    utcnow,
)

FEATURED_SERVICE_BENEFITS = LinkSpec(
    name="benefit_ids",
    junction="featured_service_benefits",
    parent_column="featured_service_id",
    child_column="benefit_id",
    child_table="service_benefits",
    label="Benefit",
)

FEATURED_SERVICE_SKILLS = LinkSpec(
    name="skill_ids",
    junction="featured_service_skills",
    parent_column="featured_service_id",
    child_column="skill_id",
    child_table="skills",
    label="Skill",
)

PROCESS_ACTIVITIES = LinkSpec(
    name="activity_ids",
    junction="service_process_activity_links",
    parent_column="service_process_id",
    child_column="process_activity_id",
    child_table="process_activities",
    label="Activity",
)


class ServiceBenefitService(EntityService):
    table = "service_benefits"
    label = "service benefit"
    multilingual_fields = ("title",)
    search_fields = ("title",)
    guards = (
        UsageGuard(
            "featured_service_benefits", "benefit_id",
            "Cannot delete: This benefit is being used by other services",
        ),
    )


class FeaturedServiceService(EntityService):
    table = "featured_services"
    label = "featured service"
    multilingual_fields = ("title", "preview_description", "description")
    search_fields = ("title", "preview_description", "description")
    link_filters = {"benefit_id": "benefit_ids", "skill_id": "skill_ids"}
    asset_fields = {"icon": AssetSpec("featured-services", allow_icon_class=True)}
    links = (FEATURED_SERVICE_BENEFITS, FEATURED_SERVICE_SKILLS)


class ProcessActivityService(EntityService):
    table = "process_activities"
    label = "process activity"
    multilingual_fields = ("title",)
    search_fields = ("title",)
    link_filters = {"process_id": "process_ids"}
    links = (
        LinkSpec(
            name="process_ids",
            junction="service_process_activity_links",
            parent_column="process_activity_id",
            child_column="service_process_id",
            child_table="service_processes",
            label="Service process",
        ),
    )


class ServiceProcessService(EntityService):
    """
    Ordered work process steps.

    New steps are appended (``order_no`` = current maximum + 1) and the
    remaining steps close the gap after a delete.
    """

    table = "service_processes"
    label = "service process"
    multilingual_fields = ("title", "description", "work_duration")
    search_fields = ("title", "description")
    sortable = ("order_no", "created_at", "updated_at")
    default_order = (Order("order_no", ascending=True),)
    filter_fields = {"is_active": "is_active"}
    link_filters = {"activity_id": "activity_ids"}
    asset_fields = {"icon": AssetSpec("service-process", allow_icon_class=True)}
    links = (PROCESS_ACTIVITIES,)
    default_values = {"is_active": True}

    async def next_order_no(self) -> int:
        response = self._check(
            await self.gateway.select(
                self.table,
                columns=["order_no"],
                filters=[not_null("order_no")],
                order=[Order("order_no", ascending=False)],
                range=(0, 0),
            )
        )
        current = response.first["order_no"] if response.first else 0
        return (current or 0) + 1

    async def create(self, data: Mapping[str, Any], related_ids=None, files=None) -> Row:
        payload = dict(data)
        payload["order_no"] = await self.next_order_no()
        return await super().create(payload, related_ids, files)

    async def delete(self, entity_id: Any) -> None:
        existing = await self.require(entity_id)
        await super().delete(entity_id)
        if existing.get("order_no"):
            await self.compact_after(existing["order_no"])

    @logged("reordering")
    async def compact_after(self, deleted_order_no: int) -> None:
        response = self._check(
            await self.gateway.select(
                self.table,
                columns=["id", "order_no"],
                filters=[gt("order_no", deleted_order_no)],
                order=[Order("order_no", ascending=True)],
            )
        )
        for row in response.data:
            self._check(
                await self.gateway.update(
                    self.table, {"order_no": row["order_no"] - 1}, [eq("id", row["id"])]
                )
            )

    @logged("reordering")
    async def reorder(self, new_order: Sequence[Mapping[str, Any]]) -> None:
        """Apply ``[{"id": ..., "order_no": ...}, ...]``; order numbers must be unique."""
        numbers = [item.get("order_no") for item in new_order]
        if len(set(numbers)) != len(numbers):
            raise EntityValidationError("Order numbers must be unique", field="order_no")
        for number in numbers:
            if not isinstance(number, int) or isinstance(number, bool) or number < 1:
                raise EntityValidationError("Order number must be a positive integer", field="order_no")
        ids = [item.get("id") for item in new_order]
        found = self._check(
            await self.gateway.select(self.table, columns=["id"], filters=[in_("id", ids)])
        )
        missing = set(ids) - {row["id"] for row in found.data}
        if missing:
            raise EntityNotFoundError(f"{self.label.capitalize()} not found: {', '.join(sorted(map(str, missing)))}")
        now = utcnow()
        for item in new_order:
            self._check(
                await self.gateway.update(
                    self.table,
                    {"order_no": item["order_no"], "updated_at": now},
                    [eq("id", item["id"])],
                )
            )


class PromiseItemService(EntityService):
    table = "promise_items"
    label = "promise item"
    multilingual_fields = ("title", "subtitle")
    search_fields = ("title", "subtitle")
    asset_fields = {"icon": AssetSpec("promise-item", allow_icon_class=True)}


class FaqService(EntityService):
    table = "faqs"
    label = "faq"
    multilingual_fields = ("title", "description")
    search_fields = ("title", "description")


class BrandService(EntityService):
    table = "brands"
    label = "brand"
    multilingual_fields = ("title",)
    search_fields = ("title",)
    asset_fields = {"image": AssetSpec("brand")}


class TechStackSkillService(EntityService):
    table = "tech_stack_skills"
    label = "tech stack skill"
    multilingual_fields = ("title",)
    search_fields = ("title",)
    guards = (
        UsageGuard(
            "tech_stacks", "tech_stack_skill_id",
            "Cannot delete: This skill is being used by tech stacks",
        ),
    )


class TechStackService(EntityService):
    table = "tech_stacks"
    label = "tech stack"
    multilingual_fields = ("title",)
    search_fields = ("title",)
    filter_fields = {"skill_id": "tech_stack_skill_id"}
    asset_fields = {"icon": AssetSpec("tech-stack", allow_icon_class=True)}
    references = (
        ReferenceSpec("tech_stack_skill_id", "tech_stack_skills", "Invalid tech stack skill ID"),
    )
