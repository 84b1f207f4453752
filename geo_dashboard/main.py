"""
FastAPI application factory + lifespan.

The application lifespan IS the dashboard's consumer lifecycle:
- Startup: build the DashboardSession and mount it (location resolution
  and widget fetching start in the background).
- Shutdown: unmount it, so nothing still in flight applies its result,
  then close the cache store.
"""

from contextlib import asynccontextmanager
from typing import Callable, Optional

from fastapi import FastAPI

from geo_dashboard import __version__
from geo_dashboard.api.v1 import api_router
from geo_dashboard.core.config import settings
from geo_dashboard.services.orchestrator.session import DashboardSession, build_session

SessionFactory = Callable[[], DashboardSession]


def create_fastapi_app(session_factory: Optional[SessionFactory] = None) -> FastAPI:
    """Application factory for FastAPI."""
    factory = session_factory or (lambda: build_session(settings))

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        session = factory()
        app.state.session = session
        session.mount()

        yield

        await session.aclose()

    app = FastAPI(
        title=f"{settings.APP_NAME} API",
        description="Location-gated widget dashboard",
        version=__version__,
        lifespan=lifespan,
        docs_url="/api/docs" if settings.DEBUG else None,
        redoc_url="/api/redoc" if settings.DEBUG else None,
    )

    app.include_router(api_router)

    @app.get("/")
    async def root():
        return {
            "app": settings.APP_NAME,
            "version": __version__,
            "status": "running",
            "docs": "/api/docs" if settings.DEBUG else "disabled",
        }

    return app


# Module-level instance for ``uvicorn geo_dashboard.main:app``
app = create_fastapi_app()
