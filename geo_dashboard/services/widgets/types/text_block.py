"""Text: a title and a body paragraph."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ValidationError

from geo_dashboard.services.widgets.base import BaseRenderer, RenderedWidget


class TextPayload(BaseModel):
    title: Optional[str] = None
    body: str


class TextBlock(BaseRenderer):

    def render(self) -> RenderedWidget:
        try:
            payload = self.parse(TextPayload)
        except ValidationError as exc:
            return self._invalid(exc)

        max_length = self.config.get("max_length", 2000)
        body = payload.body
        truncated = len(body) > max_length
        if truncated:
            body = body[:max_length].rstrip() + "…"

        return self._result(
            {"title": payload.title, "body": body},
            category="text",
            truncated=truncated,
        )
