"""
Entity Action Endpoints

Operations beyond plain CRUD: article counters, process ordering,
project image galleries, certificate file removal and testimonial facets.
"""

from typing import Any, Dict, List

import structlog
from fastapi import APIRouter, Depends, File, Query, Response, UploadFile, status
from pydantic import BaseModel

from backoffice.multilingual import Locale
from backoffice.serving.api.dependencies import get_registry, read_upload_list
from backoffice.services.registry import ServiceRegistry

router = APIRouter()
logger = structlog.get_logger(__name__)

logger.info("Actions router initialized")


class LikePayload(BaseModel):
    liked: bool = True


class OrderItem(BaseModel):
    id: int
    order_no: int


class ReorderPayload(BaseModel):
    items: List[OrderItem]


@router.post("/articles/{article_id}/view")
async def increment_article_view(
    article_id: int, registry: ServiceRegistry = Depends(get_registry)
) -> Dict[str, Any]:
    return await registry.articles.increment_view(article_id)


@router.post("/articles/{article_id}/like")
async def toggle_article_like(
    article_id: int,
    payload: LikePayload,
    registry: ServiceRegistry = Depends(get_registry),
) -> Dict[str, Any]:
    return await registry.articles.toggle_like(article_id, liked=payload.liked)


@router.put("/service-processes/order", status_code=status.HTTP_204_NO_CONTENT)
async def reorder_service_processes(
    payload: ReorderPayload, registry: ServiceRegistry = Depends(get_registry)
) -> Response:
    await registry.service_processes.reorder([item.model_dump() for item in payload.items])
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/projects/{project_id}/images")
async def list_project_images(
    project_id: int, registry: ServiceRegistry = Depends(get_registry)
) -> List[Dict[str, Any]]:
    await registry.projects.require(project_id)
    return await registry.projects.get_images(project_id)


@router.post("/projects/{project_id}/images", status_code=status.HTTP_201_CREATED)
async def add_project_images(
    project_id: int,
    files: List[UploadFile] = File(...),
    registry: ServiceRegistry = Depends(get_registry),
) -> List[Dict[str, Any]]:
    return await registry.projects.add_images(project_id, await read_upload_list(files))


@router.delete("/projects/images/{image_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_project_image(
    image_id: int, registry: ServiceRegistry = Depends(get_registry)
) -> Response:
    await registry.projects.remove_image(image_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/certificates/{certificate_id}/files")
async def delete_certificate_files(
    certificate_id: int,
    kind: str = Query("both", pattern="^(pdf|image|both)$"),
    registry: ServiceRegistry = Depends(get_registry),
) -> Dict[str, Any]:
    return await registry.certificates.delete_files(certificate_id, kind)


@router.get("/testimonials/years")
async def testimonial_years(registry: ServiceRegistry = Depends(get_registry)) -> List[int]:
    return await registry.testimonials.get_unique_years()


@router.get("/testimonials/industries")
async def testimonial_industries(
    locale: Locale = Locale.EN, registry: ServiceRegistry = Depends(get_registry)
) -> List[str]:
    return await registry.testimonials.get_unique_industries(locale)
