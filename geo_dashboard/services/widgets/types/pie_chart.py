"""Pie chart: share of a whole, with computed percentages."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from geo_dashboard.services.widgets.base import BaseRenderer, RenderedWidget
from geo_dashboard.services.widgets.types.common import palette_color


class Slice(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    label: str
    value: float = Field(ge=0)
    color: Optional[str] = None


class PiePayload(BaseModel):
    title: Optional[str] = None
    slices: List[Slice] = Field(min_length=1)


class PieChart(BaseRenderer):

    def render(self) -> RenderedWidget:
        try:
            payload = self.parse(PiePayload)
        except ValidationError as exc:
            return self._invalid(exc)

        total = sum(s.value for s in payload.slices)
        percentages = [
            round(s.value / total * 100, 1) if total > 0 else 0.0
            for s in payload.slices
        ]

        return self._result(
            {
                "chart_type": "pie",
                "title": payload.title,
                "labels": [s.label for s in payload.slices],
                "datasets": [
                    {
                        "data": [s.value for s in payload.slices],
                        "backgroundColor": [
                            palette_color(i, s.color)
                            for i, s in enumerate(payload.slices)
                        ],
                    }
                ],
                "percentages": percentages,
            },
            category="chart",
            total=total,
        )
