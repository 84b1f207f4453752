"""
Shared payload models and helpers for chart renderers.

DRY: the series payload and colour palette live here once,
imported by each individual chart module.
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


# ─── Colour palette ─────────────────────────────────────────────────

FALLBACK_PALETTE = [
    "#3b82f6", "#22c55e", "#ef4444", "#f59e0b",
    "#8b5cf6", "#ec4899", "#14b8a6", "#f97316",
]


def alpha(hex_color: str, a: float = 0.15) -> str:
    """Convert '#RRGGBB' → 'rgba(r,g,b,a)'."""
    h = hex_color.lstrip("#")
    if len(h) != 6:
        return f"rgba(100,100,100,{a})"
    r, g, b = int(h[:2], 16), int(h[2:4], 16), int(h[4:6], 16)
    return f"rgba({r},{g},{b},{a})"


def palette_color(index: int, explicit: Optional[str] = None) -> str:
    return explicit or FALLBACK_PALETTE[index % len(FALLBACK_PALETTE)]


# ─── Payload models ─────────────────────────────────────────────────

class Series(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    label: str
    values: List[float]
    color: Optional[str] = None


class SeriesPayload(BaseModel):
    """``{"title"?, "labels": [...], "series": [{"label", "values"}]}``"""
    title: Optional[str] = None
    labels: List[str]
    series: List[Series] = Field(min_length=1)

    @model_validator(mode="after")
    def _values_match_labels(self) -> "SeriesPayload":
        for s in self.series:
            if len(s.values) != len(self.labels):
                raise ValueError(
                    f"series '{s.label}' has {len(s.values)} values "
                    f"for {len(self.labels)} labels"
                )
        return self
