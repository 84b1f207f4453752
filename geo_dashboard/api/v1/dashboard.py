"""
Dashboard API — the caller-facing projection of the session.

Routes:
  GET  /dashboard           → phase, loading flag, location, rendered widgets
  GET  /dashboard/location  → resolver state only
  POST /dashboard/refresh   → re-resolve location in the current lifecycle
  POST /dashboard/retry     → tear down and mount a fresh lifecycle
"""

import asyncio
from typing import Optional

from fastapi import APIRouter, Depends, Query

from geo_dashboard.api.v1.dependencies import get_session, require_mounted
from geo_dashboard.services.orchestrator.session import DashboardSession

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("")
async def get_dashboard(
    wait: Optional[float] = Query(
        None, ge=0, le=60, description="Seconds to wait for a settled phase",
    ),
    session: DashboardSession = Depends(get_session),
):
    """
    Current projection.  With ``wait``, blocks (up to that many seconds)
    until the phase is ready, error or denied.
    """
    if wait and session.is_mounted:
        try:
            await session.wait_settled(timeout=wait)
        except asyncio.TimeoutError:
            pass
    return session.snapshot()


@router.get("/location")
async def get_location(session: DashboardSession = Depends(require_mounted)):
    return session.resolver.current_state().to_dict()


@router.post("/refresh")
async def refresh_location(session: DashboardSession = Depends(require_mounted)):
    session.refresh()
    return {"status": "refreshing", "generation": session.resolver.generation}


@router.post("/retry")
async def retry(session: DashboardSession = Depends(get_session)):
    session.remount()
    return {"status": "remounted", "lifecycle": session.lifecycle}
