"""KPI: a single headline value with optional unit and trend."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, ValidationError

from geo_dashboard.services.widgets.base import BaseRenderer, RenderedWidget


class KpiPayload(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    label: str
    value: float
    unit: Optional[str] = None
    previous: Optional[float] = None


class KpiCard(BaseRenderer):

    def render(self) -> RenderedWidget:
        try:
            payload = self.parse(KpiPayload)
        except ValidationError as exc:
            return self._invalid(exc)

        decimals = self.config.get("decimals", 1)
        trend = None
        if payload.previous is not None:
            if payload.value > payload.previous:
                trend = "up"
            elif payload.value < payload.previous:
                trend = "down"
            else:
                trend = "flat"

        return self._result(
            {
                "label": payload.label,
                "value": round(payload.value, decimals),
                "unit": payload.unit or "",
                "trend": trend,
            },
            category="kpi",
        )
