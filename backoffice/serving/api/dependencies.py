"""
Request dependencies.

The gateway, service registry and session tracker are built once in the
application lifespan and stored on ``app.state``; routes receive them
through these dependencies so tests can override them.
"""

from typing import List, Optional

from fastapi import Request, UploadFile

from backoffice.analytics.sessions import SessionTracker
from backoffice.files import UploadedFile
from backoffice.gateway.base import QueryGateway
from backoffice.services.registry import ServiceRegistry
from backoffice.services.visitors import VisitorService


def get_gateway(request: Request) -> QueryGateway:
    return request.app.state.gateway


def get_registry(request: Request) -> ServiceRegistry:
    return request.app.state.registry


def get_visitor_service(request: Request) -> VisitorService:
    return get_registry(request).visitors


def get_session_tracker(request: Request) -> SessionTracker:
    return request.app.state.sessions


async def read_upload(upload: Optional[UploadFile]) -> Optional[UploadedFile]:
    """Read a multipart upload into memory; empty parts count as absent."""
    if upload is None or not upload.filename:
        return None
    content = await upload.read()
    return UploadedFile(
        filename=upload.filename,
        content=content,
        content_type=upload.content_type or "application/octet-stream",
    )


async def read_upload_list(uploads: List[UploadFile]) -> List[UploadedFile]:
    files = []
    for upload in uploads:
        uploaded = await read_upload(upload)
        if uploaded is not None:
            files.append(uploaded)
    return files
