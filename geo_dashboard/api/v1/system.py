"""System endpoints — health check and widget registry info."""

from fastapi import APIRouter, Depends

from geo_dashboard.api.v1.dependencies import get_session
from geo_dashboard.services.orchestrator.session import DashboardSession

router = APIRouter(prefix="/system", tags=["system"])


@router.get("/health")
async def health_check(session: DashboardSession = Depends(get_session)):
    """Basic liveness probe."""
    return {
        "status": "ok",
        "mounted": session.is_mounted,
        "lifecycle": session.lifecycle,
    }


@router.get("/widgets")
async def registered_widgets(session: DashboardSession = Depends(get_session)):
    """Known widget type tags and whether their renderer is loaded yet."""
    registry = session.renderer.registry
    return {
        "known_tags": registry.known_tags(),
        "renderers": registry.describe(),
    }
