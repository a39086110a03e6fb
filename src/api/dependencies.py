"""FastAPI dependency injection for services.

The service registry is created by the application lifespan and stored on
``app.state``. Endpoints receive the services they need through Depends().
"""

from typing import Annotated

from fastapi import Depends, Request

from src.modules.assessment.session_store import SessionStore
from src.modules.insights.client import AIInsightClient
from src.shared.service_registry import ServiceRegistry


def get_registry(request: Request) -> ServiceRegistry:
    """Get the service registry owned by the running application."""
    return request.app.state.registry


RegistryDep = Annotated[ServiceRegistry, Depends(get_registry)]


def get_session_store(registry: RegistryDep) -> SessionStore:
    """Get the session store instance."""
    return registry.session_store


def get_insight_client(registry: RegistryDep) -> AIInsightClient:
    """Get the AI insight client instance."""
    return registry.insight_client


# Type aliases for service dependencies
SessionStoreDep = Annotated[SessionStore, Depends(get_session_store)]
InsightClientDep = Annotated[AIInsightClient, Depends(get_insight_client)]
