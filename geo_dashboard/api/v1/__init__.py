"""
API v1 — Router aggregation.
"""

from fastapi import APIRouter

from geo_dashboard.api.v1.dashboard import router as dashboard_router
from geo_dashboard.api.v1.system import router as system_router

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(system_router)
api_router.include_router(dashboard_router)
