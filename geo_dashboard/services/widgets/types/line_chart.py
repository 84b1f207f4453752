"""Line chart: one or more series over shared labels."""

from __future__ import annotations

from pydantic import ValidationError

from geo_dashboard.services.widgets.base import BaseRenderer, RenderedWidget
from geo_dashboard.services.widgets.types.common import (
    SeriesPayload,
    alpha,
    palette_color,
)


class LineChart(BaseRenderer):

    def render(self) -> RenderedWidget:
        try:
            payload = self.parse(SeriesPayload)
        except ValidationError as exc:
            return self._invalid(exc)

        tension = 0.4 if self.config.get("curve_type") == "smooth" else 0.0
        datasets = []
        for i, s in enumerate(payload.series):
            color = palette_color(i, s.color)
            datasets.append({
                "label": s.label,
                "data": s.values,
                "borderColor": color,
                "backgroundColor": alpha(color),
                "tension": tension,
                "fill": False,
            })

        return self._result(
            {"chart_type": "line", "title": payload.title,
             "labels": payload.labels, "datasets": datasets},
            category="chart",
            total_points=len(payload.labels),
        )
