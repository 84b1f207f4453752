"""
WidgetAPIService — widget list for a location, from the widget endpoint.

Single Responsibility: given a ``LocationValue``, resolve the endpoint
config, execute the request via HTTPClient, and turn the JSON list into
``WidgetDescriptor`` values.

Does NOT decide *when* to call; that's the orchestrator's job.

Usage::

    from geo_dashboard.services.broker.widget_api import WidgetAPIService

    service = WidgetAPIService(api_id="widgets")
    descriptors = await service.fetch_widgets(LocationValue(12.9, 77.6))
"""

from __future__ import annotations

import logging
from typing import Any, List, Optional

from geo_dashboard.services.broker.api_config import APIConfigLoader, api_config_loader
from geo_dashboard.services.broker.http_client import HTTPClient, http_client
from geo_dashboard.services.location.types import LocationValue
from geo_dashboard.services.widgets.base import WidgetDescriptor

logger = logging.getLogger(__name__)


class WidgetFetchError(Exception):
    """The widget list could not be fetched or parsed."""


class WidgetAPIService:

    def __init__(
        self,
        api_id: str = "widgets",
        loader: Optional[APIConfigLoader] = None,
        client: Optional[HTTPClient] = None,
    ) -> None:
        self._api_id = api_id
        self._loader = loader or api_config_loader
        self._client = client or http_client

    async def fetch_widgets(self, location: LocationValue) -> List[WidgetDescriptor]:
        """
        Fetch the ordered widget list for ``location``.

        Raises:
            WidgetFetchError: endpoint missing/disabled, HTTP failure,
                              or a response that is not a list.
        """
        endpoint = self._loader.get(self._api_id)
        if endpoint is None:
            raise WidgetFetchError(f"Endpoint '{self._api_id}' is not configured")
        if not endpoint.enabled:
            raise WidgetFetchError(f"Endpoint '{self._api_id}' is disabled")

        result = await self._client.fetch_for_location(endpoint, location)
        if not result.ok:
            raise WidgetFetchError(result.error or "Unknown fetch error")

        return parse_widget_list(result.data)


def parse_widget_list(raw: Any) -> List[WidgetDescriptor]:
    """
    Convert the endpoint's JSON list into descriptors, preserving order.

    Items without a string ``type`` are dropped with a warning; anything
    other than a list is a fetch failure.
    """
    if not isinstance(raw, list):
        raise WidgetFetchError(
            f"Expected a list of widgets, got {type(raw).__name__}"
        )

    descriptors: List[WidgetDescriptor] = []
    for index, item in enumerate(raw):
        if not isinstance(item, dict) or not isinstance(item.get("type"), str):
            logger.warning(f"[WidgetAPI] Dropping item {index}: no string 'type'")
            continue
        descriptors.append(WidgetDescriptor(type=item["type"], data=item.get("data")))

    return descriptors
