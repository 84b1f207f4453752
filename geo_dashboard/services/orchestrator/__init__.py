"""
Orchestrator package — location-gated widget data.

Modules:
  state     — FetchStatus and Phase enums
  pipeline  — WidgetDataOrchestrator (resolver → fetch → widget list)
  session   — DashboardSession (one consumer lifetime: mount → unmount)

Usage::

    from geo_dashboard.services.orchestrator import build_session

    session = build_session(settings)
    session.mount()
    await session.wait_settled()
    payload = session.snapshot()
"""

from geo_dashboard.services.orchestrator.pipeline import WidgetDataOrchestrator, WidgetFetcher
from geo_dashboard.services.orchestrator.session import DashboardSession, build_session
from geo_dashboard.services.orchestrator.state import FetchStatus, Phase

__all__ = [
    "DashboardSession",
    "FetchStatus",
    "Phase",
    "WidgetDataOrchestrator",
    "WidgetFetcher",
    "build_session",
]
