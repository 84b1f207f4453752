"""
WidgetDataOrchestrator — location-gated widget fetching.

Single Responsibility: watch a LocationResolver and keep the widget list
in sync with the latest granted location.

Rules:
  - A fetch is issued if and only if the resolver is GRANTED with a
    location; the request carries exactly those coordinates.
  - Every newly published location issues a new fetch with a new
    generation.  A result whose generation is no longer current on
    arrival is dropped (last location wins).
  - DENIED invalidates any in-flight fetch and clears the list.
  - ``close()`` (consumer torn down) cancels the in-flight fetch,
    guarantees no later result is applied, and releases every pending
    ``wait_settled()`` caller.

``is_loading()`` is derived, never stored: true while the list is empty,
the resolver is not DENIED, and the current fetch has neither completed
nor failed.

Usage::

    orchestrator = WidgetDataOrchestrator(resolver, WidgetAPIService())
    resolver.start()
    await orchestrator.wait_settled(timeout=15)
    orchestrator.widgets()
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Dict, List, Optional, Protocol, Tuple

from geo_dashboard.services.broker.widget_api import WidgetFetchError
from geo_dashboard.services.location.resolver import LocationResolver
from geo_dashboard.services.location.types import LocationValue, ResolverState
from geo_dashboard.services.orchestrator.state import FetchStatus, Phase
from geo_dashboard.services.widgets.base import WidgetDescriptor

logger = logging.getLogger(__name__)

OrchestratorListener = Callable[["WidgetDataOrchestrator"], None]


class WidgetFetcher(Protocol):

    async def fetch_widgets(self, location: LocationValue) -> List[WidgetDescriptor]:
        ...


class WidgetDataOrchestrator:

    def __init__(self, resolver: LocationResolver, fetcher: WidgetFetcher) -> None:
        self._resolver = resolver
        self._fetcher = fetcher
        self._widgets: Tuple[WidgetDescriptor, ...] = ()
        self._fetch_status = FetchStatus.IDLE
        self._error: Optional[str] = None
        self._fetch_generation = 0
        self._fetch_task: Optional[asyncio.Task] = None
        self._fetched_for: Optional[Tuple[int, LocationValue]] = None
        self._listeners: List[OrchestratorListener] = []
        self._settle_waiters: List[asyncio.Future] = []
        self._closed = False

        self._unsubscribe = resolver.subscribe(self._on_resolver_change)
        self._on_resolver_change(resolver.current_state())

    # ─────────────────────────────────────────────────────────
    #  PROJECTION
    # ─────────────────────────────────────────────────────────

    def widgets(self) -> List[WidgetDescriptor]:
        return list(self._widgets)

    def is_loading(self) -> bool:
        if self._resolver.current_state().is_denied:
            return False
        if self._widgets:
            return False
        return self._fetch_status not in (FetchStatus.READY, FetchStatus.FAILED)

    @property
    def fetch_status(self) -> FetchStatus:
        return self._fetch_status

    @property
    def fetch_completed(self) -> bool:
        return self._fetch_status is FetchStatus.READY

    @property
    def error(self) -> Optional[str]:
        return self._error

    @property
    def fetch_generation(self) -> int:
        return self._fetch_generation

    @property
    def resolver(self) -> LocationResolver:
        return self._resolver

    @property
    def phase(self) -> Phase:
        if self._resolver.current_state().is_denied:
            return Phase.DENIED
        if self._fetch_status is FetchStatus.FAILED:
            return Phase.ERROR
        if self._fetch_status is FetchStatus.READY:
            return Phase.READY
        if self._fetch_status is FetchStatus.LOADING:
            return Phase.LOADING
        return Phase.LOCATING

    def snapshot(self) -> Dict[str, Any]:
        return {
            "phase": self.phase.value,
            "loading": self.is_loading(),
            "fetch_status": self._fetch_status.value,
            "fetch_completed": self.fetch_completed,
            "error": self._error,
            "widget_count": len(self._widgets),
            "location": self._resolver.current_state().to_dict(),
        }

    # ─────────────────────────────────────────────────────────
    #  LIFECYCLE
    # ─────────────────────────────────────────────────────────

    def subscribe(self, listener: OrchestratorListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    async def wait_settled(self, timeout: Optional[float] = None) -> Phase:
        """
        Wait until the phase is READY, ERROR or DENIED.

        If the orchestrator is closed first, returns the phase it had at
        teardown (which may be unsettled) instead of waiting further.
        """
        if self._closed or self.phase.is_settled:
            return self.phase

        settled = asyncio.get_running_loop().create_future()

        def _check(_: "WidgetDataOrchestrator") -> None:
            if not settled.done() and self.phase.is_settled:
                settled.set_result(self.phase)

        unsubscribe = self.subscribe(_check)
        self._settle_waiters.append(settled)
        try:
            return await asyncio.wait_for(settled, timeout)
        finally:
            unsubscribe()
            if settled in self._settle_waiters:
                self._settle_waiters.remove(settled)

    def close(self) -> None:
        """Detach from the resolver; no in-flight result will be applied."""
        if self._closed:
            return
        self._closed = True
        self._unsubscribe()
        self._invalidate_fetch()
        self._listeners.clear()

        phase = self.phase
        for waiter in self._settle_waiters:
            if not waiter.done():
                waiter.set_result(phase)
        self._settle_waiters.clear()
        logger.debug(f"[Orchestrator] Closed in phase {phase.value}")

    # ─────────────────────────────────────────────────────────
    #  REACTIONS
    # ─────────────────────────────────────────────────────────

    def _on_resolver_change(self, state: ResolverState) -> None:
        if self._closed:
            return

        if state.is_denied:
            self._invalidate_fetch()
            self._fetched_for = None
            self._widgets = ()
            self._fetch_status = FetchStatus.IDLE
            self._error = None
            self._notify()
            return

        if not state.is_granted:
            # PENDING (possibly with a provisional seed): nothing to fetch yet
            return

        key = (state.generation, state.location)
        if key == self._fetched_for:
            return
        self._fetched_for = key
        self._issue_fetch(state.location)

    def _issue_fetch(self, location: LocationValue) -> None:
        self._fetch_generation += 1
        generation = self._fetch_generation
        self._fetch_status = FetchStatus.LOADING
        self._error = None

        logger.info(
            f"[Orchestrator] Fetch #{generation} for "
            f"({location.latitude}, {location.longitude})"
        )
        self._fetch_task = asyncio.get_running_loop().create_task(
            self._run_fetch(generation, location),
            name=f"widget-fetch-{generation}",
        )
        self._notify()

    async def _run_fetch(self, generation: int, location: LocationValue) -> None:
        try:
            widgets = await self._fetcher.fetch_widgets(location)
        except asyncio.CancelledError:
            raise
        except WidgetFetchError as exc:
            self._apply_failure(generation, str(exc))
            return
        except Exception as exc:
            logger.error(f"[Orchestrator] Fetch #{generation} crashed: {exc}", exc_info=True)
            self._apply_failure(generation, f"Unexpected error: {exc}")
            return

        self._apply_success(generation, widgets)

    # ─────────────────────────────────────────────────────────
    #  APPLY
    # ─────────────────────────────────────────────────────────

    def _is_current(self, generation: int) -> bool:
        return not self._closed and generation == self._fetch_generation

    def _apply_success(self, generation: int, widgets: List[WidgetDescriptor]) -> None:
        if not self._is_current(generation):
            logger.debug(f"[Orchestrator] Discarding stale result of fetch #{generation}")
            return
        self._widgets = tuple(widgets)
        self._fetch_status = FetchStatus.READY
        self._error = None
        logger.info(f"[Orchestrator] Fetch #{generation} ready: {len(self._widgets)} widgets")
        self._notify()

    def _apply_failure(self, generation: int, error: str) -> None:
        if not self._is_current(generation):
            logger.debug(f"[Orchestrator] Discarding stale failure of fetch #{generation}")
            return
        self._widgets = ()
        self._fetch_status = FetchStatus.FAILED
        self._error = error
        logger.warning(f"[Orchestrator] Fetch #{generation} failed: {error}")
        self._notify()

    def _invalidate_fetch(self) -> None:
        self._fetch_generation += 1
        if self._fetch_task is not None and not self._fetch_task.done():
            self._fetch_task.cancel()
        self._fetch_task = None

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception:
                logger.exception("[Orchestrator] Listener raised")
