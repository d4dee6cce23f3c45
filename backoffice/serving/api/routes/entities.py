"""
Collection Endpoints

One CRUD router per collection entity, built from the service registry:
list, detail, create, update, delete, bulk operations, junction links and
asset uploads.
"""

from typing import Any, Callable, Dict, List, Optional

import structlog
from fastapi import APIRouter, Depends, File, Request, Response, UploadFile, status
from pydantic import BaseModel, Field

from backoffice.errors import EntityNotFoundError, EntityValidationError
from backoffice.serving.api.dependencies import get_registry, read_upload
from backoffice.services.base import EntityService
from backoffice.services.registry import ENTITY_SERVICES, ServiceRegistry

logger = structlog.get_logger(__name__)


class ListResponse(BaseModel):
    """Paginated listing"""
    data: List[Dict[str, Any]]
    count: int


class WritePayload(BaseModel):
    """Create/update body: column values plus junction child ids by relation name"""
    data: Dict[str, Any] = Field(default_factory=dict)
    related_ids: Optional[Dict[str, List[int]]] = None


class BulkCreatePayload(BaseModel):
    items: List[Dict[str, Any]]


class BulkUpdateItem(BaseModel):
    id: int
    data: Dict[str, Any]


class BulkUpdatePayload(BaseModel):
    updates: List[BulkUpdateItem]


class IdsPayload(BaseModel):
    ids: List[int]


def service_dependency(name: str) -> Callable[..., EntityService]:
    def dependency(registry: ServiceRegistry = Depends(get_registry)) -> EntityService:
        return registry.entity(name)

    dependency.__name__ = f"get_{name.replace('-', '_')}_service"
    return dependency


def build_entity_router(name: str) -> APIRouter:
    """CRUD router for the collection registered under ``name``."""
    router = APIRouter()
    get_service = service_dependency(name)

    @router.get("", response_model=ListResponse)
    async def list_entities(request: Request, service: EntityService = Depends(get_service)) -> ListResponse:
        """
        List rows. Query parameters: ``search``, ``sort``, ``order``,
        ``page``, ``limit`` and the entity's own filters.
        """
        result = await service.get_all(dict(request.query_params))
        return ListResponse(data=result.data, count=result.count)

    @router.post("", status_code=status.HTTP_201_CREATED)
    async def create_entity(payload: WritePayload, service: EntityService = Depends(get_service)) -> Dict[str, Any]:
        return await service.create(payload.data, related_ids=payload.related_ids)

    @router.post("/bulk", status_code=status.HTTP_201_CREATED)
    async def bulk_create(payload: BulkCreatePayload, service: EntityService = Depends(get_service)) -> List[Dict[str, Any]]:
        return await service.bulk_create(payload.items)

    @router.put("/bulk")
    async def bulk_update(payload: BulkUpdatePayload, service: EntityService = Depends(get_service)) -> List[Dict[str, Any]]:
        return await service.bulk_update([item.model_dump() for item in payload.updates])

    @router.post("/bulk-delete")
    async def bulk_delete(payload: IdsPayload, service: EntityService = Depends(get_service)) -> Dict[str, int]:
        return {"deleted": await service.bulk_delete(payload.ids)}

    @router.get("/{entity_id:int}")
    async def get_entity(entity_id: int, service: EntityService = Depends(get_service)) -> Dict[str, Any]:
        row = await service.get_by_id(entity_id, with_relations=True)
        if row is None:
            raise EntityNotFoundError(f"{service.label.capitalize()} not found")
        return row

    @router.put("/{entity_id:int}")
    async def update_entity(
        entity_id: int,
        payload: WritePayload,
        service: EntityService = Depends(get_service),
    ) -> Dict[str, Any]:
        return await service.update(entity_id, payload.data, related_ids=payload.related_ids)

    @router.delete("/{entity_id:int}", status_code=status.HTTP_204_NO_CONTENT)
    async def delete_entity(entity_id: int, service: EntityService = Depends(get_service)) -> Response:
        await service.delete(entity_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    @router.get("/{entity_id:int}/links/{relation}")
    async def get_links(entity_id: int, relation: str, service: EntityService = Depends(get_service)) -> Dict[str, List[int]]:
        await service.require(entity_id)
        return {relation: await service.get_links(entity_id, relation)}

    @router.put("/{entity_id:int}/links/{relation}")
    async def replace_links(
        entity_id: int,
        relation: str,
        payload: IdsPayload,
        service: EntityService = Depends(get_service),
    ) -> Dict[str, List[int]]:
        await service.require(entity_id)
        return {relation: await service.replace_links(entity_id, relation, payload.ids)}

    @router.post("/{entity_id:int}/assets/{field}")
    async def upload_asset(
        entity_id: int,
        field: str,
        file: UploadFile = File(...),
        service: EntityService = Depends(get_service),
    ) -> Dict[str, Any]:
        """Store an uploaded file in an asset column, replacing the previous file."""
        if field not in service.asset_fields:
            raise EntityValidationError(f"{service.label} has no file field {field}", field=field)
        uploaded = await read_upload(file)
        if uploaded is None:
            raise EntityValidationError("No file uploaded", field=field)
        return await service.update(entity_id, {}, files={field: uploaded})

    return router


def entity_routers() -> Dict[str, APIRouter]:
    routers = {name: build_entity_router(name) for name in ENTITY_SERVICES}
    logger.info("Entity routers initialized", count=len(routers))
    return routers
