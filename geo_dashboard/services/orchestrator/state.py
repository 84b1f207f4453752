"""
Orchestrator status types.

``FetchStatus`` tracks the widget fetch explicitly so that a failed or
legitimately-empty fetch is never mistaken for "still loading".
``Phase`` is the single value a caller renders from.
"""

from __future__ import annotations

from enum import Enum


class FetchStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    FAILED = "failed"


class Phase(str, Enum):
    LOCATING = "locating"
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"
    DENIED = "denied"

    @property
    def is_settled(self) -> bool:
        return self in (Phase.READY, Phase.ERROR, Phase.DENIED)
