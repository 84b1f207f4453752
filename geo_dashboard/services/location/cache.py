"""LocationCache — the single persisted last-known-location record."""

from __future__ import annotations

import logging
from typing import Optional

from geo_dashboard.core.storage import KeyValueStore
from geo_dashboard.services.location.types import InvalidLocationError, LocationValue

logger = logging.getLogger(__name__)

DEFAULT_CACHE_KEY = "last_known_location"


class LocationCache:
    """
    Reads and overwrites one serialized ``LocationValue``.

    ``load()`` is synchronous so a resolver can surface the seed before
    its first await; ``save()`` is a coroutine and never blocks the loop.
    A missing, unreadable or corrupt record loads as ``None``; the cache
    never raises into the resolver.
    """

    def __init__(self, store: KeyValueStore, key: str = DEFAULT_CACHE_KEY) -> None:
        self._store = store
        self._key = key

    @property
    def key(self) -> str:
        return self._key

    def load(self) -> Optional[LocationValue]:
        try:
            raw = self._store.get(self._key)
        except Exception as exc:
            logger.warning(f"[LocationCache] Cannot read '{self._key}': {exc}")
            return None

        if raw is None:
            return None

        try:
            return LocationValue.from_json(raw)
        except InvalidLocationError as exc:
            logger.warning(f"[LocationCache] Ignoring corrupt record '{self._key}': {exc}")
            return None

    async def save(self, location: LocationValue) -> bool:
        """Overwrite the record. Returns ``False`` if the store failed."""
        try:
            await self._store.aset(self._key, location.to_json())
        except Exception as exc:
            logger.error(f"[LocationCache] Cannot write '{self._key}': {exc}")
            return False
        return True

    async def close(self) -> None:
        await self._store.aclose()
