"""
Location package — permission-gated location resolution.

Modules:
  types     : LocationValue, PermissionState, FailureReason, ResolverState.
  sources   : LocationSource protocol and concrete sources.
  cache     : LocationCache over an injected key/value store.
  resolver  : LocationResolver state machine.
"""

from geo_dashboard.services.location.cache import LocationCache
from geo_dashboard.services.location.resolver import CancellationToken, LocationResolver
from geo_dashboard.services.location.sources import (
    IPGeolocationSource,
    LocationReadingError,
    LocationSource,
    StaticLocationSource,
    build_location_source,
)
from geo_dashboard.services.location.types import (
    FailureReason,
    InvalidLocationError,
    LocationValue,
    PermissionAnswer,
    PermissionState,
    ResolverState,
)

__all__ = [
    "CancellationToken",
    "FailureReason",
    "IPGeolocationSource",
    "InvalidLocationError",
    "LocationCache",
    "LocationReadingError",
    "LocationResolver",
    "LocationSource",
    "LocationValue",
    "PermissionAnswer",
    "PermissionState",
    "ResolverState",
    "StaticLocationSource",
    "build_location_source",
]
