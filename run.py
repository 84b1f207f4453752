"""
GeoDashboard — Application Runner.

Usage:
    python run.py          → API server (port from API_PORT)
    python run.py api      → API server
    python run.py once     → mount one session, wait until settled,
                             print the projection as JSON, exit
"""

import asyncio
import json
import sys

import uvicorn

from geo_dashboard.core.config import settings
from geo_dashboard.core.logging_config import setup_logging
from geo_dashboard.services.orchestrator.session import build_session


def run_api() -> None:
    """Start the FastAPI server."""
    print(f"🚀 API  → http://localhost:{settings.API_PORT}")
    if settings.DEBUG:
        print(f"📄 Docs → http://localhost:{settings.API_PORT}/api/docs")
    uvicorn.run(
        "geo_dashboard.main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=settings.DEBUG,
        log_config=None,
    )


async def _run_once() -> int:
    session = build_session(settings)
    session.mount()
    try:
        try:
            await session.wait_settled(timeout=settings.SETTLE_TIMEOUT_SECONDS)
        except asyncio.TimeoutError:
            print(
                f"⚠️  Not settled after {settings.SETTLE_TIMEOUT_SECONDS}s",
                file=sys.stderr,
            )
        snapshot = session.snapshot()
    finally:
        await session.aclose()

    print(json.dumps(snapshot, indent=2, ensure_ascii=False, default=str))
    return 0 if snapshot.get("phase") == "ready" else 1


def run_once() -> None:
    sys.exit(asyncio.run(_run_once()))


if __name__ == "__main__":
    setup_logging(settings)
    mode = sys.argv[1].lower() if len(sys.argv) > 1 else "api"
    runners = {"api": run_api, "once": run_once}
    runner = runners.get(mode)
    if runner is None:
        print(f"Unknown mode '{mode}'. Use: api | once")
        sys.exit(1)
    runner()
