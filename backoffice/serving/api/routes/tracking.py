"""
Tracking Endpoints

Public write endpoints called by the portfolio site: page views, visitor
events and visit duration / read time.
"""

from typing import Any, Dict, Optional

import structlog
from fastapi import APIRouter, Depends, Request, status
from pydantic import BaseModel, Field

from backoffice.analytics.sessions import SessionTracker
from backoffice.serving.api.dependencies import get_session_tracker, get_visitor_service
from backoffice.serving.cache import analytics_cache
from backoffice.services.visitors import VisitorService

router = APIRouter()
logger = structlog.get_logger(__name__)

logger.info("Tracking router initialized")


class PageViewPayload(BaseModel):
    page_url: str = Field(min_length=1)
    session_id: Optional[str] = None
    referer: Optional[str] = None
    geo: Optional[Dict[str, Any]] = None


class EventPayload(BaseModel):
    visitor_id: str
    event_type: str = Field(min_length=1)
    event_data: Dict[str, Any] = Field(default_factory=dict)


class DurationPayload(BaseModel):
    visitor_id: str
    duration_seconds: Optional[int] = Field(default=None, ge=0)
    read_minutes: Optional[float] = Field(default=None, ge=0)


@router.post("/page-view", status_code=status.HTTP_201_CREATED)
async def track_page_view(
    payload: PageViewPayload,
    request: Request,
    service: VisitorService = Depends(get_visitor_service),
    sessions: SessionTracker = Depends(get_session_tracker),
) -> Dict[str, Any]:
    """
    Record a page view; the user agent and client address come from the request.

    Clients that send no session id are grouped by address and user agent
    until the session expires.
    """
    user_agent = request.headers.get("user-agent")
    ip_address = request.client.host if request.client else None
    session_id = payload.session_id or sessions.get_session_id(f"{ip_address}|{user_agent}")
    row = await service.track_page_view(
        page_url=payload.page_url,
        session_id=session_id,
        user_agent=user_agent,
        referer=payload.referer or request.headers.get("referer"),
        ip_address=ip_address,
        geo=payload.geo,
    )
    await analytics_cache.invalidate_all()
    return {"id": row["id"], "session_id": row["session_id"]}


@router.post("/event", status_code=status.HTTP_201_CREATED)
async def track_event(
    payload: EventPayload,
    service: VisitorService = Depends(get_visitor_service),
) -> Dict[str, Any]:
    row = await service.track_event(payload.visitor_id, payload.event_type, payload.event_data)
    return {"id": row["id"]}


@router.post("/duration")
async def track_duration(
    payload: DurationPayload,
    service: VisitorService = Depends(get_visitor_service),
) -> Dict[str, Any]:
    """Either ``duration_seconds`` or ``read_minutes`` (from the read-time tracker)."""
    if payload.read_minutes is not None:
        row = await service.record_read_time(payload.visitor_id, payload.read_minutes)
    else:
        row = await service.update_duration(payload.visitor_id, payload.duration_seconds)
    await analytics_cache.invalidate_all()
    return {"id": row["id"], "duration_seconds": row["duration_seconds"]}
