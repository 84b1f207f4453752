from __future__ import annotations

import pytest

from geo_dashboard.core.storage import InMemoryKeyValueStore
from geo_dashboard.services.location.cache import LocationCache
from geo_dashboard.services.widgets.registry import WidgetRegistry
from geo_dashboard.services.widgets.renderer import WidgetRenderer


@pytest.fixture()
def store() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture()
def cache(store: InMemoryKeyValueStore) -> LocationCache:
    return LocationCache(store)


@pytest.fixture()
def registry() -> WidgetRegistry:
    """Fresh registry so lazy-load state never leaks between tests."""
    return WidgetRegistry.from_config()


@pytest.fixture()
def renderer(registry: WidgetRegistry) -> WidgetRenderer:
    return WidgetRenderer(registry)
