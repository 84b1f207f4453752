"""Scripted collaborators for resolver/orchestrator tests."""

from __future__ import annotations

import asyncio
from typing import Any, List, Optional, Union

from geo_dashboard.services.location.sources import LocationReadingError
from geo_dashboard.services.location.types import LocationValue, PermissionAnswer
from geo_dashboard.services.widgets.base import WidgetDescriptor

Reading = Union[LocationValue, Exception, "asyncio.Future[LocationValue]"]


class FakeLocationSource:
    """
    Permission answer plus a queue of readings.

    Each reading is a LocationValue, an exception to raise, or a future
    the test resolves later.
    """

    def __init__(
        self,
        answer: PermissionAnswer = PermissionAnswer.GRANTED,
        readings: Optional[List[Reading]] = None,
        permission_error: Optional[Exception] = None,
    ) -> None:
        self.answer = answer
        self.readings: List[Reading] = (
            list(readings) if readings is not None else [LocationValue(12.9, 77.6)]
        )
        self.permission_error = permission_error
        self.permission_calls = 0
        self.reading_calls = 0

    async def query_permission(self) -> PermissionAnswer:
        self.permission_calls += 1
        await asyncio.sleep(0)
        if self.permission_error is not None:
            raise self.permission_error
        return self.answer

    async def read_location(self) -> LocationValue:
        self.reading_calls += 1
        if not self.readings:
            raise LocationReadingError("no more readings scripted")
        item = self.readings.pop(0)
        if isinstance(item, asyncio.Future):
            return await item
        if isinstance(item, Exception):
            raise item
        return item


class FakeFetcher:
    """
    Records every request.

    In ``manual`` mode each call parks on a future the test settles with
    ``resolve(i, widgets)`` / ``fail(i, exc)``; otherwise it returns
    ``widgets`` (or raises ``error``) immediately.
    """

    def __init__(
        self,
        widgets: Optional[List[WidgetDescriptor]] = None,
        error: Optional[Exception] = None,
        manual: bool = False,
    ) -> None:
        self.widgets = list(widgets or [])
        self.error = error
        self.manual = manual
        self.requests: List[LocationValue] = []
        self.pending: List[asyncio.Future] = []

    async def fetch_widgets(self, location: LocationValue) -> List[WidgetDescriptor]:
        self.requests.append(location)
        if self.manual:
            future = asyncio.get_running_loop().create_future()
            self.pending.append(future)
            return await future
        await asyncio.sleep(0)
        if self.error is not None:
            raise self.error
        return list(self.widgets)

    def resolve(self, index: int, widgets: List[WidgetDescriptor]) -> bool:
        future = self.pending[index]
        if future.done():
            return False
        future.set_result(widgets)
        return True

    def fail(self, index: int, exc: Exception) -> bool:
        future = self.pending[index]
        if future.done():
            return False
        future.set_exception(exc)
        return True


async def settle(rounds: int = 20) -> None:
    """Let every ready task run a few steps."""
    for _ in range(rounds):
        await asyncio.sleep(0)


def descriptors(*tags: str, data: Any = None) -> List[WidgetDescriptor]:
    return [WidgetDescriptor(type=tag, data=data) for tag in tags]
