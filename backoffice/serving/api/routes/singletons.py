"""
Singleton Page Endpoints

GET/PUT for one-row pages (About, Contact, Web settings ...).
"""

from typing import Any, Callable, Dict, Optional

import structlog
from fastapi import APIRouter, Depends, File, UploadFile

from backoffice.errors import EntityNotFoundError, EntityValidationError
from backoffice.serving.api.dependencies import get_registry, read_upload
from backoffice.services.base import SingletonService
from backoffice.services.registry import SINGLETON_SERVICES, ServiceRegistry

logger = structlog.get_logger(__name__)


def singleton_dependency(name: str) -> Callable[..., SingletonService]:
    def dependency(registry: ServiceRegistry = Depends(get_registry)) -> SingletonService:
        return registry.singleton(name)

    dependency.__name__ = f"get_{name.replace('-', '_')}_service"
    return dependency


def build_singleton_router(name: str) -> APIRouter:
    router = APIRouter()
    get_service = singleton_dependency(name)

    @router.get("")
    async def get_page(service: SingletonService = Depends(get_service)) -> Optional[Dict[str, Any]]:
        row = await service.get()
        if row is None:
            raise EntityNotFoundError(f"{service.label.capitalize()} not found")
        return row

    @router.put("")
    async def save_page(data: Dict[str, Any], service: SingletonService = Depends(get_service)) -> Dict[str, Any]:
        """Update the page row, creating it on first save."""
        return await service.save(data)

    @router.post("/assets/{field}")
    async def upload_asset(
        field: str,
        file: UploadFile = File(...),
        service: SingletonService = Depends(get_service),
    ) -> Dict[str, Any]:
        if field not in service.asset_fields:
            raise EntityValidationError(f"{service.label} has no file field {field}", field=field)
        uploaded = await read_upload(file)
        if uploaded is None:
            raise EntityValidationError("No file uploaded", field=field)
        return await service.save({}, files={field: uploaded})

    return router


def singleton_routers() -> Dict[str, APIRouter]:
    routers = {name: build_singleton_router(name) for name in SINGLETON_SERVICES}
    logger.info("Singleton routers initialized", count=len(routers))
    return routers
