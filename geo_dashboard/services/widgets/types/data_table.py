"""
Table: column headers plus rows of cells.

Rows must have exactly one cell per column.  Long tables are cut at
``max_rows`` and flagged ``truncated``.
"""

from __future__ import annotations

import math
from typing import Any, List, Optional

from pydantic import BaseModel, Field, ValidationError, model_validator

from geo_dashboard.services.widgets.base import BaseRenderer, RenderedWidget


class TablePayload(BaseModel):
    title: Optional[str] = None
    columns: List[str] = Field(min_length=1)
    rows: List[List[Any]] = Field(default_factory=list)

    @model_validator(mode="after")
    def _rows_match_columns(self) -> "TablePayload":
        width = len(self.columns)
        for i, row in enumerate(self.rows):
            if len(row) != width:
                raise ValueError(f"row {i} has {len(row)} cells, expected {width}")
            for j, cell in enumerate(row):
                if isinstance(cell, float) and not math.isfinite(cell):
                    raise ValueError(f"row {i} cell {j} is not a finite number")
        return self


class DataTable(BaseRenderer):

    def render(self) -> RenderedWidget:
        try:
            payload = self.parse(TablePayload)
        except ValidationError as exc:
            return self._invalid(exc)

        max_rows = self.config.get("max_rows", 500)
        rows = payload.rows[:max_rows]

        return self._result(
            {
                "title": payload.title,
                "columns": [{"key": f"c{i}", "label": c} for i, c in enumerate(payload.columns)],
                "rows": [
                    {f"c{i}": cell for i, cell in enumerate(row)}
                    for row in rows
                ],
            },
            category="table",
            total_rows=len(payload.rows),
            truncated=len(payload.rows) > len(rows),
        )
