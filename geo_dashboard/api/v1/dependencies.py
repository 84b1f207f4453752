"""
FastAPI dependencies — access to the app-scoped DashboardSession.

The session is created and mounted by the application lifespan and
stored on ``app.state.session``.
"""

from fastapi import Depends, HTTPException, Request

from geo_dashboard.services.orchestrator.session import DashboardSession


def get_session(request: Request) -> DashboardSession:
    session = getattr(request.app.state, "session", None)
    if session is None:
        raise HTTPException(status_code=503, detail="Dashboard session not initialised")
    return session


def require_mounted(
    session: DashboardSession = Depends(get_session),
) -> DashboardSession:
    """Dependency: the session must be mounted (not torn down)."""
    if not session.is_mounted:
        raise HTTPException(status_code=503, detail="Dashboard session is not mounted")
    return session
