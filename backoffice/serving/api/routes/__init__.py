"""API route modules"""

from .actions import router as actions_router
from .analytics import router as analytics_router
from .entities import entity_routers
from .health import router as health_router
from .singletons import singleton_routers
from .tracking import router as tracking_router

__all__ = [
    "actions_router",
    "analytics_router",
    "entity_routers",
    "health_router",
    "singleton_routers",
    "tracking_router",
]
