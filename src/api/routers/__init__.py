"""API routers package."""

from src.api.routers.assessments import router as assessments_router
from src.api.routers.health import router as health_router
from src.api.routers.insights import router as insights_router

__all__ = [
    "assessments_router",
    "health_router",
    "insights_router",
]
