"""
Permission-and-location sources.

A source answers two asynchronous questions:

  ``query_permission()`` → PermissionAnswer.GRANTED | DENIED
  ``read_location()``    → LocationValue  (raises LocationReadingError)

A platform without any location capability has no source at all
(``None``); the resolver treats that exactly like a denial.

Implementations:
  StaticLocationSource  — fixed coordinates from configuration.
  IPGeolocationSource   — coordinates from an IP-geolocation HTTP API.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Protocol

import httpx

from geo_dashboard.core.config import Settings
from geo_dashboard.services.location.types import (
    InvalidLocationError,
    LocationValue,
    PermissionAnswer,
)

logger = logging.getLogger(__name__)


class LocationReadingError(Exception):
    """The device/positioning layer could not produce a reading."""


class LocationSource(Protocol):

    async def query_permission(self) -> PermissionAnswer:
        ...

    async def read_location(self) -> LocationValue:
        ...


def _answer(consent: bool) -> PermissionAnswer:
    return PermissionAnswer.GRANTED if consent else PermissionAnswer.DENIED


class StaticLocationSource:
    """Always reports the configured coordinates once consent is given."""

    def __init__(self, latitude: float, longitude: float, consent: bool = True) -> None:
        self._location = LocationValue(latitude=latitude, longitude=longitude)
        self._consent = consent

    async def query_permission(self) -> PermissionAnswer:
        return _answer(self._consent)

    async def read_location(self) -> LocationValue:
        return self._location


class IPGeolocationSource:
    """
    Approximate location from the public IP address.

    Accepts either ``latitude``/``longitude`` or ``lat``/``lon`` in the
    JSON response (both conventions are common among providers).
    """

    def __init__(
        self,
        url: str,
        consent: bool = False,
        timeout: float = 5,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._url = url
        self._consent = consent
        self._timeout = timeout
        self._transport = transport

    async def query_permission(self) -> PermissionAnswer:
        return _answer(self._consent)

    async def read_location(self) -> LocationValue:
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout, transport=self._transport,
            ) as client:
                response = await client.get(self._url)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPError as exc:
            raise LocationReadingError(f"IP geolocation request failed: {exc}") from exc
        except ValueError as exc:
            raise LocationReadingError(f"IP geolocation returned invalid JSON: {exc}") from exc

        return self._parse(payload)

    @staticmethod
    def _parse(payload: Any) -> LocationValue:
        if not isinstance(payload, dict):
            raise LocationReadingError("IP geolocation response is not an object")

        lat = _first_present(payload, "latitude", "lat")
        lon = _first_present(payload, "longitude", "lon")
        if lat is None or lon is None:
            raise LocationReadingError("IP geolocation response has no coordinates")

        try:
            return LocationValue(latitude=float(lat), longitude=float(lon))
        except (TypeError, ValueError, InvalidLocationError) as exc:
            raise LocationReadingError(f"Unusable coordinates: {exc}") from exc


def _first_present(payload: Dict[str, Any], *keys: str) -> Any:
    for key in keys:
        if payload.get(key) is not None:
            return payload[key]
    return None


def build_location_source(cfg: Settings) -> Optional[LocationSource]:
    """
    Build the source selected by ``LOCATION_PROVIDER``.

    Returns ``None`` when no capability is configured, which the
    resolver reports as ``CAPABILITY_UNAVAILABLE``.
    """
    provider = cfg.LOCATION_PROVIDER.strip().lower()

    if provider == "static":
        if not cfg.has_static_location:
            logger.warning(
                "[LocationSource] LOCATION_PROVIDER=static but STATIC_LATITUDE/"
                "STATIC_LONGITUDE are not set; no location capability"
            )
            return None
        return StaticLocationSource(
            cfg.STATIC_LATITUDE, cfg.STATIC_LONGITUDE, consent=cfg.LOCATION_CONSENT,
        )

    if provider == "ip":
        return IPGeolocationSource(
            cfg.IP_GEOLOCATION_URL,
            consent=cfg.LOCATION_CONSENT,
            timeout=cfg.IP_GEOLOCATION_TIMEOUT,
        )

    if provider not in ("", "none"):
        logger.warning(f"[LocationSource] Unknown LOCATION_PROVIDER '{provider}'")
    return None
