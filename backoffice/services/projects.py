"""Portfolio projects, their skill links and gallery images."""

from typing import Any, List, Sequence

from backoffice.errors import EntityNotFoundError
from backoffice.files import UploadedFile, save_image
from backoffice.gateway.base import Order, Row, eq
from backoffice.services.base import ChildSpec, EntityService, LinkSpec, logged, utcnow
from backoffice.services.compensation import CompensationLog

PROJECT_SKILLS = LinkSpec(
    name="skill_ids",
    junction="project_skills",
    parent_column="project_id",
    child_column="skill_id",
    child_table="skills",
    label="Skill",
)

IMAGE_FOLDER = "projects"


class ProjectService(EntityService):
    table = "projects"
    label = "project"
    multilingual_fields = ("title", "subtitle", "description")
    search_fields = ("title", "subtitle", "description")
    plain_search_fields = ("meta_title",)
    link_filters = {"skill_id": "skill_ids"}
    url_fields = {
        "link_demo": "Invalid demo link URL",
        "link_source_code": "Invalid source code link URL",
    }
    links = (PROJECT_SKILLS,)
    children = (ChildSpec("project_images", "project_id", asset_field="image"),)

    async def get_images(self, project_id: Any) -> List[Row]:
        response = self._check(
            await self.gateway.select(
                "project_images",
                filters=[eq("project_id", project_id)],
                order=[Order("id", ascending=True)],
            )
        )
        return response.data

    @logged("adding images to")
    async def add_images(self, project_id: Any, files: Sequence[UploadedFile]) -> List[Row]:
        """Store each file and insert one ``project_images`` row per file."""
        await self.require(project_id)
        rows: List[Row] = []
        async with CompensationLog(f"add images to project {project_id}") as log:
            for file in files:
                path = await save_image(self.storage, file, IMAGE_FOLDER)
                log.record(f"remove uploaded {path}", lambda path=path: self.remove_files_quietly([path]))
                now = utcnow()
                row = self._check(
                    await self.gateway.insert(
                        "project_images",
                        {"project_id": project_id, "image": path, "created_at": now, "updated_at": now},
                    )
                ).first
                log.record(
                    f"delete project image {row['id']}",
                    lambda row_id=row["id"]: self.gateway.delete("project_images", [eq("id", row_id)]),
                )
                rows.append(row)
        return rows

    @logged("removing image from")
    async def remove_image(self, image_id: Any) -> None:
        response = self._check(
            await self.gateway.select("project_images", filters=[eq("id", image_id)], range=(0, 0))
        )
        image = response.first
        if image is None:
            raise EntityNotFoundError("Project image not found")
        self._check(await self.gateway.delete("project_images", [eq("id", image_id)]))
        await self.remove_files_quietly([image.get("image")])
