"""Bar chart: one or more series over shared labels."""

from __future__ import annotations

from pydantic import ValidationError

from geo_dashboard.services.widgets.base import BaseRenderer, RenderedWidget
from geo_dashboard.services.widgets.types.common import SeriesPayload, palette_color


class BarChart(BaseRenderer):

    def render(self) -> RenderedWidget:
        try:
            payload = self.parse(SeriesPayload)
        except ValidationError as exc:
            return self._invalid(exc)

        datasets = [
            {
                "label": s.label,
                "data": s.values,
                "backgroundColor": palette_color(i, s.color),
            }
            for i, s in enumerate(payload.series)
        ]

        return self._result(
            {
                "chart_type": "bar",
                "title": payload.title,
                "labels": payload.labels,
                "datasets": datasets,
                "stacked": bool(self.config.get("stacked", False)),
            },
            category="chart",
            total_points=len(payload.labels),
        )
