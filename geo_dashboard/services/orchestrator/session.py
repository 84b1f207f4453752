"""
DashboardSession — one consumer lifetime.

Wires LocationResolver → WidgetDataOrchestrator → WidgetRenderer.
``mount()`` creates fresh resolver/orchestrator instances (status back to
PENDING, only the persisted cache survives); ``unmount()`` tears them
down so nothing in flight can apply its result afterwards.

``remount()`` is the explicit retry: a brand-new lifecycle.
``refresh()`` re-resolves the location inside the current lifecycle.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Optional

from geo_dashboard.core.config import Settings
from geo_dashboard.core.storage import SqlKeyValueStore
from geo_dashboard.services.broker.api_config import APIConfigLoader, api_config_loader
from geo_dashboard.services.broker.widget_api import WidgetAPIService
from geo_dashboard.services.location.cache import LocationCache
from geo_dashboard.services.location.resolver import LocationResolver
from geo_dashboard.services.location.sources import LocationSource, build_location_source
from geo_dashboard.services.orchestrator.pipeline import WidgetDataOrchestrator, WidgetFetcher
from geo_dashboard.services.orchestrator.state import Phase
from geo_dashboard.services.widgets.renderer import WidgetRenderer, widget_renderer

logger = logging.getLogger(__name__)


class DashboardSession:

    def __init__(
        self,
        source: Optional[LocationSource],
        cache: LocationCache,
        fetcher: WidgetFetcher,
        renderer: Optional[WidgetRenderer] = None,
    ) -> None:
        self._source = source
        self._cache = cache
        self._fetcher = fetcher
        self._renderer = renderer or widget_renderer
        self._resolver: Optional[LocationResolver] = None
        self._orchestrator: Optional[WidgetDataOrchestrator] = None
        self._lifecycle = 0

    # ── Lifecycle ────────────────────────────────────────────

    @property
    def is_mounted(self) -> bool:
        return self._orchestrator is not None

    @property
    def lifecycle(self) -> int:
        return self._lifecycle

    @property
    def resolver(self) -> Optional[LocationResolver]:
        return self._resolver

    @property
    def orchestrator(self) -> Optional[WidgetDataOrchestrator]:
        return self._orchestrator

    @property
    def renderer(self) -> WidgetRenderer:
        return self._renderer

    def mount(self) -> None:
        """Start a fresh lifecycle. Must be called inside a running loop."""
        if self.is_mounted:
            return
        self._lifecycle += 1
        self._resolver = LocationResolver(self._source, self._cache)
        self._orchestrator = WidgetDataOrchestrator(self._resolver, self._fetcher)
        self._resolver.start()
        logger.info(f"[Session] Mounted (lifecycle {self._lifecycle})")

    def unmount(self) -> None:
        if not self.is_mounted:
            return
        self._orchestrator.close()
        self._resolver.close()
        self._orchestrator = None
        self._resolver = None
        logger.info(f"[Session] Unmounted (lifecycle {self._lifecycle})")

    def remount(self) -> None:
        self.unmount()
        self.mount()

    async def aclose(self) -> None:
        """Unmount and release the cache store (engines, connections)."""
        self.unmount()
        await self._cache.close()
        logger.info("[Session] Store closed")

    def refresh(self) -> None:
        """Re-resolve the location within the current lifecycle."""
        if not self.is_mounted:
            raise RuntimeError("Session is not mounted")
        self._resolver.refresh()

    async def wait_settled(self, timeout: Optional[float] = None) -> Phase:
        if not self.is_mounted:
            raise RuntimeError("Session is not mounted")
        return await self._orchestrator.wait_settled(timeout)

    # ── Projection ───────────────────────────────────────────

    def snapshot(self) -> Dict[str, Any]:
        """Caller-facing state plus the rendered widgets."""
        if not self.is_mounted:
            return {"mounted": False, "lifecycle": self._lifecycle, "widgets": []}

        rendered = self._renderer.render_all(self._orchestrator.widgets())
        return {
            "mounted": True,
            "lifecycle": self._lifecycle,
            **self._orchestrator.snapshot(),
            "widgets": [w.to_dict() for w in rendered],
        }


def build_session(cfg: Settings) -> DashboardSession:
    """Assemble a session from configuration."""
    store = SqlKeyValueStore(
        cfg.LOCATION_CACHE_URL,
        echo=cfg.DEBUG,
        async_url=cfg.LOCATION_CACHE_ASYNC_URL or None,
    )
    loader = (
        APIConfigLoader(Path(cfg.WIDGET_API_CONFIG))
        if cfg.WIDGET_API_CONFIG
        else api_config_loader
    )
    return DashboardSession(
        source=build_location_source(cfg),
        cache=LocationCache(store, cfg.LOCATION_CACHE_KEY),
        fetcher=WidgetAPIService(cfg.WIDGET_API_ID, loader=loader),
    )
