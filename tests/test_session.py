from __future__ import annotations

import asyncio

import pytest
from fakes import FakeFetcher, FakeLocationSource, descriptors, settle

from geo_dashboard.services.location.cache import LocationCache
from geo_dashboard.services.location.types import LocationValue, PermissionAnswer
from geo_dashboard.services.orchestrator.session import DashboardSession
from geo_dashboard.services.orchestrator.state import Phase
from geo_dashboard.services.widgets.base import WidgetDescriptor
from geo_dashboard.services.widgets.renderer import WidgetRenderer


def test_snapshot_renders_widgets_in_order(
    cache: LocationCache, renderer: WidgetRenderer,
) -> None:
    fetcher = FakeFetcher(
        widgets=[
            WidgetDescriptor(type="kpi", data={"label": "Visitors", "value": 41.26}),
            WidgetDescriptor(type="weather_radar", data={}),
        ]
    )
    session = DashboardSession(FakeLocationSource(), cache, fetcher, renderer)

    async def scenario() -> dict:
        session.mount()
        try:
            assert await session.wait_settled(timeout=2) is Phase.READY
            return session.snapshot()
        finally:
            session.unmount()

    snapshot = asyncio.run(scenario())

    assert snapshot["mounted"] is True
    assert snapshot["phase"] == "ready"
    assert snapshot["loading"] is False
    assert snapshot["location"]["location"] == {"latitude": 12.9, "longitude": 77.6}
    kpi, unknown = snapshot["widgets"]
    assert kpi["position"] == 0
    assert kpi["widget_type"] == "kpi"
    assert kpi["data"]["value"] == 41.3
    assert unknown["position"] == 1
    assert unknown["widget_type"] == "unknown"
    assert unknown["metadata"]["requested_type"] == "weather_radar"


def test_unmount_mid_fetch_applies_nothing(cache: LocationCache) -> None:
    fetcher = FakeFetcher(manual=True)
    session = DashboardSession(FakeLocationSource(), cache, fetcher)

    async def scenario() -> None:
        session.mount()
        orchestrator = session.orchestrator
        await session.resolver.wait()
        await settle()
        assert orchestrator.phase is Phase.LOADING

        session.unmount()
        fetcher.resolve(0, descriptors("kpi"))
        await settle()

        assert orchestrator.widgets() == []
        assert session.is_mounted is False
        assert session.snapshot() == {"mounted": False, "lifecycle": 1, "widgets": []}

    asyncio.run(scenario())


def test_unmount_mid_reading_leaves_cache_alone(cache: LocationCache) -> None:
    async def scenario() -> None:
        gate = asyncio.get_running_loop().create_future()
        session = DashboardSession(FakeLocationSource(readings=[gate]), cache, FakeFetcher())
        session.mount()
        await settle()

        resolver = session.resolver
        session.unmount()
        await settle()
        assert resolver.closed is True

    asyncio.run(scenario())
    assert cache.load() is None


def test_remount_starts_a_new_lifecycle(cache: LocationCache) -> None:
    source = FakeLocationSource(
        answer=PermissionAnswer.DENIED,
        readings=[LocationValue(3.0, 4.0)],
    )
    fetcher = FakeFetcher(widgets=descriptors("text", data={"body": "hi"}))
    session = DashboardSession(source, cache, fetcher)

    async def scenario() -> None:
        session.mount()
        assert await session.wait_settled(timeout=2) is Phase.DENIED
        first_resolver = session.resolver

        source.answer = PermissionAnswer.GRANTED
        session.remount()
        assert session.lifecycle == 2
        assert session.resolver is not first_resolver
        assert first_resolver.closed is True
        assert await session.wait_settled(timeout=2) is Phase.READY
        session.unmount()

    asyncio.run(scenario())
    assert fetcher.requests == [LocationValue(3.0, 4.0)]
    assert cache.load() == LocationValue(3.0, 4.0)


def test_mount_is_idempotent(cache: LocationCache) -> None:
    source = FakeLocationSource()
    session = DashboardSession(source, cache, FakeFetcher())

    async def scenario() -> None:
        session.mount()
        session.mount()
        assert session.lifecycle == 1
        await session.wait_settled(timeout=2)
        session.unmount()

    asyncio.run(scenario())
    assert source.permission_calls == 1


def test_refresh_requires_a_mounted_session(cache: LocationCache) -> None:
    session = DashboardSession(FakeLocationSource(), cache, FakeFetcher())
    with pytest.raises(RuntimeError):
        session.refresh()
    with pytest.raises(RuntimeError):
        asyncio.run(session.wait_settled())


def test_unmount_releases_pending_waiters(cache: LocationCache) -> None:
    fetcher = FakeFetcher(manual=True)
    session = DashboardSession(FakeLocationSource(), cache, fetcher)

    async def scenario() -> None:
        session.mount()
        waiter = asyncio.ensure_future(session.wait_settled())
        await session.resolver.wait()
        await settle()
        assert not waiter.done()

        session.unmount()
        phase = await asyncio.wait_for(waiter, timeout=0.5)
        assert phase is Phase.LOADING

    asyncio.run(scenario())


def test_remount_releases_waiters_of_the_old_lifecycle(cache: LocationCache) -> None:
    async def scenario() -> None:
        gate = asyncio.get_running_loop().create_future()
        source = FakeLocationSource(readings=[gate, LocationValue(1.0, 2.0)])
        session = DashboardSession(source, cache, FakeFetcher(widgets=descriptors("kpi")))
        session.mount()
        await settle()

        waiter = asyncio.ensure_future(session.wait_settled(timeout=5))
        await settle()
        session.remount()

        assert await asyncio.wait_for(waiter, timeout=0.5) is Phase.LOCATING
        assert await session.wait_settled(timeout=2) is Phase.READY
        await session.aclose()
        assert session.is_mounted is False

    asyncio.run(scenario())
