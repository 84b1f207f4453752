"""
Location value types and resolver state.

``LocationValue`` is immutable and replaced wholesale on every new
resolution.  ``ResolverState`` is the snapshot exposed to consumers:
``status`` plus the location (if any), the failure reason when denied,
and whether the location is only a provisional seed from the cache.
"""

from __future__ import annotations

import json
import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional


class InvalidLocationError(ValueError):
    """Raised when a serialized location cannot be turned into a LocationValue."""


class PermissionState(str, Enum):
    PENDING = "pending"
    GRANTED = "granted"
    DENIED = "denied"


class PermissionAnswer(str, Enum):
    """What the permission subsystem reports."""
    GRANTED = "granted"
    DENIED = "denied"


class FailureReason(str, Enum):
    """Why a resolution cycle ended in ``DENIED``."""
    PERMISSION_DENIED = "permission_denied"
    CAPABILITY_UNAVAILABLE = "capability_unavailable"
    READING_FAILED = "reading_failed"


@dataclass(frozen=True)
class LocationValue:
    latitude: float
    longitude: float

    def __post_init__(self) -> None:
        for name, value, limit in (
            ("latitude", self.latitude, 90.0),
            ("longitude", self.longitude, 180.0),
        ):
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise InvalidLocationError(f"{name} must be a number, got {value!r}")
            if math.isnan(value) or abs(value) > limit:
                raise InvalidLocationError(f"{name} out of range: {value}")

    def to_dict(self) -> Dict[str, float]:
        return {"latitude": self.latitude, "longitude": self.longitude}

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod
    def from_dict(cls, raw: Any) -> "LocationValue":
        if not isinstance(raw, dict):
            raise InvalidLocationError(f"Expected an object, got {type(raw).__name__}")
        try:
            return cls(latitude=raw["latitude"], longitude=raw["longitude"])
        except KeyError as exc:
            raise InvalidLocationError(f"Missing field {exc}") from exc

    @classmethod
    def from_json(cls, text: str) -> "LocationValue":
        try:
            raw = json.loads(text)
        except (TypeError, ValueError) as exc:
            raise InvalidLocationError(f"Not valid JSON: {exc}") from exc
        return cls.from_dict(raw)


@dataclass(frozen=True)
class ResolverState:
    """
    Snapshot of a LocationResolver.

    A ``PENDING`` state may carry a location: that is the cached seed,
    flagged ``provisional=True``, and never proof of permission.
    """
    status: PermissionState = PermissionState.PENDING
    location: Optional[LocationValue] = None
    reason: Optional[FailureReason] = None
    provisional: bool = False
    generation: int = 0

    @property
    def is_granted(self) -> bool:
        return self.status is PermissionState.GRANTED and self.location is not None

    @property
    def is_denied(self) -> bool:
        return self.status is PermissionState.DENIED

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "location": self.location.to_dict() if self.location else None,
            "reason": self.reason.value if self.reason else None,
            "provisional": self.provisional,
            "generation": self.generation,
        }
