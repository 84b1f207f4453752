"""
LocationResolver — permission → reading → publish state machine.

States::

    PENDING ──granted + reading ok──▶ GRANTED
       │
       └──denied / no source / reading failed──▶ DENIED

Cycle (one per ``start()`` / ``refresh()``):
  1. On construction the cached location (if any) is surfaced
     synchronously as a provisional seed; status stays PENDING.
  2. ``query_permission()`` is awaited.
  3. Granted → ``read_location()`` is awaited; success publishes
     GRANTED + location, then overwrites the cache (async write);
     failure → DENIED.
  4. Denied, or no source at all → DENIED without any reading.

Each cycle runs in its own asyncio task with a ``CancellationToken``
and a generation number.  Both are checked before every transition, so
a cycle that was closed or superseded never touches the state.

There is no automatic retry: ``refresh()`` is the explicit trigger.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, List, Optional

from geo_dashboard.services.location.cache import LocationCache
from geo_dashboard.services.location.sources import LocationSource
from geo_dashboard.services.location.types import (
    FailureReason,
    PermissionAnswer,
    PermissionState,
    ResolverState,
)

logger = logging.getLogger(__name__)

ResolverListener = Callable[[ResolverState], None]


class CancellationToken:
    """Cooperative cancellation flag handed to one resolution cycle."""

    __slots__ = ("_cancelled",)

    def __init__(self) -> None:
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


class LocationResolver:
    """
    Produces a ``ResolverState`` from a location source and a cache.

    Usage::

        resolver = LocationResolver(source, LocationCache(store))
        resolver.subscribe(on_change)
        resolver.start()              # inside a running event loop
        ...
        resolver.close()              # consumer torn down
    """

    def __init__(
        self,
        source: Optional[LocationSource],
        cache: LocationCache,
    ) -> None:
        self._source = source
        self._cache = cache
        self._listeners: List[ResolverListener] = []
        self._generation = 0
        self._token: Optional[CancellationToken] = None
        self._task: Optional[asyncio.Task] = None
        self._closed = False

        seed = cache.load()
        self._state = ResolverState(location=seed, provisional=seed is not None)
        if seed is not None:
            logger.info(
                f"[LocationResolver] Seeded with cached location "
                f"({seed.latitude}, {seed.longitude})"
            )

    # ─────────────────────────────────────────────────────────
    #  PUBLIC API
    # ─────────────────────────────────────────────────────────

    def current_state(self) -> ResolverState:
        return self._state

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def closed(self) -> bool:
        return self._closed

    def subscribe(self, listener: ResolverListener) -> Callable[[], None]:
        """Register a state listener. Returns an unsubscribe callable."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def start(self) -> asyncio.Task:
        """Start the first resolution cycle (idempotent)."""
        if self._task is not None:
            return self._task
        return self._begin_cycle()

    def refresh(self) -> asyncio.Task:
        """
        Explicitly start a new cycle, superseding any in-flight one.

        The last published state stays visible until the new cycle
        transitions.
        """
        self._cancel_current()
        return self._begin_cycle()

    async def wait(self) -> ResolverState:
        """Wait until the latest cycle has finished (superseded ones skipped)."""
        while self._task is not None and not self._task.done():
            task = self._task
            await asyncio.wait({task})
        return self._state

    def close(self) -> None:
        """Cancel the running cycle. No further transitions are applied."""
        if self._closed:
            return
        self._closed = True
        self._cancel_current()
        self._listeners.clear()
        logger.debug("[LocationResolver] Closed")

    # ─────────────────────────────────────────────────────────
    #  CYCLE
    # ─────────────────────────────────────────────────────────

    def _begin_cycle(self) -> asyncio.Task:
        if self._closed:
            raise RuntimeError("LocationResolver is closed")

        self._generation += 1
        token = CancellationToken()
        self._token = token
        self._task = asyncio.get_running_loop().create_task(
            self._run_cycle(self._generation, token),
            name=f"location-cycle-{self._generation}",
        )
        logger.debug(f"[LocationResolver] Cycle {self._generation} started")
        return self._task

    def _cancel_current(self) -> None:
        if self._token is not None:
            self._token.cancel()
        if self._task is not None and not self._task.done():
            self._task.cancel()

    async def _run_cycle(self, generation: int, token: CancellationToken) -> None:
        if self._source is None:
            self._deny(generation, token, FailureReason.CAPABILITY_UNAVAILABLE)
            return

        try:
            answer = await self._source.query_permission()
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            logger.warning(f"[LocationResolver] Permission query failed: {exc}")
            answer = PermissionAnswer.DENIED

        if answer != PermissionAnswer.GRANTED:
            self._deny(generation, token, FailureReason.PERMISSION_DENIED)
            return

        if not self._is_current(generation, token):
            return

        try:
            location = await self._source.read_location()
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            logger.warning(f"[LocationResolver] Location reading failed: {exc}")
            self._deny(generation, token, FailureReason.READING_FAILED)
            return

        applied = self._transition(
            generation,
            token,
            ResolverState(
                status=PermissionState.GRANTED,
                location=location,
                generation=generation,
            ),
        )
        if applied:
            await self._cache.save(location)

    # ─────────────────────────────────────────────────────────
    #  TRANSITIONS
    # ─────────────────────────────────────────────────────────

    def _is_current(self, generation: int, token: CancellationToken) -> bool:
        return (
            not self._closed
            and not token.cancelled
            and generation == self._generation
        )

    def _deny(
        self,
        generation: int,
        token: CancellationToken,
        reason: FailureReason,
    ) -> None:
        # Any location kept after a denial is informational only
        last = self._state.location
        self._transition(
            generation,
            token,
            ResolverState(
                status=PermissionState.DENIED,
                location=last,
                reason=reason,
                provisional=last is not None,
                generation=generation,
            ),
        )

    def _transition(
        self,
        generation: int,
        token: CancellationToken,
        new_state: ResolverState,
    ) -> bool:
        if not self._is_current(generation, token):
            logger.debug(
                f"[LocationResolver] Dropping stale transition to "
                f"{new_state.status.value} (cycle {generation})"
            )
            return False

        self._state = new_state
        logger.info(
            f"[LocationResolver] {new_state.status.value.upper()}"
            + (f" ({new_state.reason.value})" if new_state.reason else "")
            + (
                f" at ({new_state.location.latitude}, {new_state.location.longitude})"
                if new_state.is_granted
                else ""
            )
        )
        self._notify()
        return True

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self._state)
            except Exception:
                logger.exception("[LocationResolver] Listener raised")
