"""
Location-scoped HTTP transport for the widget endpoint.

One call, one request: ``fetch_for_location`` puts the coordinates under
the endpoint's configured parameter names, sends them (query string for
GET, JSON body for POST) and hands back a ``FetchResult``.  Transport
problems are reported in the result instead of raised, so the caller
only has to look at ``result.ok``.

Response bodies are decoded strictly: ``NaN``, ``Infinity`` and
``-Infinity`` literals are refused, since nothing downstream can put
them back on the wire.

Usage::

    result = await http_client.fetch_for_location(endpoint, LocationValue(12.9, 77.6))
    if result.ok:
        items = result.data
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

import httpx

from geo_dashboard.services.broker.api_config import APIEndpoint
from geo_dashboard.services.location.types import LocationValue

logger = logging.getLogger(__name__)

# auth_type → (header name, value template)
_AUTH_SCHEMES: Dict[str, Tuple[str, str]] = {
    "bearer": ("Authorization", "Bearer {}"),
    "api_key": ("X-API-Key", "{}"),
}

_ERROR_BODY_PREVIEW = 200


@dataclass(frozen=True)
class FetchResult:
    api_id: str
    ok: bool
    status: int
    data: Any = None
    error: Optional[str] = None


def _refuse_constant(name: str) -> Any:
    raise ValueError(f"non-finite number {name} is not allowed")


def decode_json(text: str) -> Any:
    """``json.loads`` that refuses the non-standard NaN/Infinity literals."""
    return json.loads(text, parse_constant=_refuse_constant)


def coordinate_params(endpoint: APIEndpoint, location: LocationValue) -> Dict[str, Any]:
    """Static endpoint params overlaid with the two coordinate fields."""
    params = dict(endpoint.params)
    params[endpoint.latitude_param] = location.latitude
    params[endpoint.longitude_param] = location.longitude
    return params


def select_path(data: Any, path: Optional[str]) -> Any:
    """Walk a dotted ``response_key``; ``None`` once a step is not an object."""
    if not path:
        return data
    for step in path.split("."):
        if not isinstance(data, dict):
            return None
        data = data.get(step)
    return data


class HTTPClient:
    """
    Opens a short-lived ``httpx.AsyncClient`` per call.

    ``transport`` is handed straight to httpx; tests pass an
    ``httpx.MockTransport``.
    """

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None) -> None:
        self._transport = transport

    async def fetch_for_location(
        self, endpoint: APIEndpoint, location: LocationValue,
    ) -> FetchResult:
        payload = coordinate_params(endpoint, location)
        try:
            response = await self._send(endpoint, payload)
        except httpx.TimeoutException:
            return self._failed(endpoint, f"Timeout after {endpoint.timeout}s")
        except httpx.ConnectError as exc:
            return self._failed(endpoint, f"Connection failed: {exc}")
        except httpx.HTTPError as exc:
            return self._failed(endpoint, f"HTTP error: {exc}")

        if response.is_error:
            preview = response.text[:_ERROR_BODY_PREVIEW]
            return self._failed(
                endpoint, f"HTTP {response.status_code}: {preview}", response.status_code,
            )

        try:
            body = decode_json(response.text)
        except ValueError as exc:
            return self._failed(endpoint, f"Invalid JSON response: {exc}")

        return FetchResult(
            api_id=endpoint.api_id,
            ok=True,
            status=response.status_code,
            data=select_path(body, endpoint.response_key),
        )

    async def _send(self, endpoint: APIEndpoint, payload: Dict[str, Any]) -> httpx.Response:
        headers = {**endpoint.headers, **auth_headers(endpoint)}
        async with httpx.AsyncClient(
            timeout=endpoint.timeout, transport=self._transport,
        ) as client:
            if endpoint.method == "POST":
                return await client.post(endpoint.base_url, headers=headers, json=payload)
            return await client.get(endpoint.base_url, headers=headers, params=payload)

    @staticmethod
    def _failed(endpoint: APIEndpoint, error: str, status: int = 0) -> FetchResult:
        logger.error(f"[HTTPClient] {endpoint.api_id}: {error}")
        return FetchResult(api_id=endpoint.api_id, ok=False, status=status, error=error)


def auth_headers(endpoint: APIEndpoint) -> Dict[str, str]:
    """Auth header for ``endpoint``, token read from its env var at call time."""
    scheme = _AUTH_SCHEMES.get(endpoint.auth_type)
    if scheme is None or not endpoint.auth_env_var:
        return {}

    token = os.environ.get(endpoint.auth_env_var, "")
    if not token:
        logger.warning(
            f"[HTTPClient] {endpoint.api_id}: env var '{endpoint.auth_env_var}' is empty, "
            f"sending without credentials"
        )
        return {}

    header, template = scheme
    return {header: template.format(token)}


http_client = HTTPClient()
