"""
BaseRenderer — Abstract base class for all widget renderers.

Single Responsibility: define the contract that every renderer must
follow.  Renderers receive one widget's opaque payload and return a
structured JSON-ready description.  Validating that payload is the
renderer's own job; the dispatcher never inspects it.

Usage in a concrete renderer::

    from geo_dashboard.services.widgets.base import BaseRenderer, RenderedWidget

    class KpiCard(BaseRenderer):
        def render(self) -> RenderedWidget:
            ...
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

PayloadT = TypeVar("PayloadT", bound=BaseModel)


@dataclass(frozen=True)
class WidgetDescriptor:
    """One backend-declared widget: a type tag plus an opaque payload."""
    type: str
    data: Any = None

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, "data": self.data}


@dataclass
class RenderContext:
    """Everything a renderer needs: the descriptor and its registry config."""
    descriptor: WidgetDescriptor
    position: int = 0
    config: Dict[str, Any] = field(default_factory=dict)


@dataclass
class RenderedWidget:
    """
    Standardized output from any renderer.

    Placeholders (unknown tag, invalid payload, renderer failure) are
    RenderedWidgets too, flagged in ``metadata``.
    """
    position: int
    widget_type: str
    renderer: Optional[str]
    data: Any
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_placeholder(self) -> bool:
        return bool(self.metadata.get("placeholder") or self.metadata.get("error"))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "position": self.position,
            "widget_type": self.widget_type,
            "renderer": self.renderer,
            "data": self.data,
            "metadata": self.metadata,
        }


class BaseRenderer(ABC):
    """
    Abstract base class for all renderers.

    Subclasses MUST implement:
      - ``render()`` → RenderedWidget

    The payload is available as ``self.payload``; ``parse()`` validates
    it against a pydantic model.
    """

    def __init__(self, ctx: RenderContext) -> None:
        self.ctx = ctx

    @abstractmethod
    def render(self) -> RenderedWidget:
        ...

    # ── Convenience properties ───────────────────────────────────

    @property
    def payload(self) -> Any:
        return self.ctx.descriptor.data

    @property
    def widget_type(self) -> str:
        return self.ctx.descriptor.type

    @property
    def config(self) -> Dict[str, Any]:
        return self.ctx.config

    # ── Validation ───────────────────────────────────────────────

    def parse(self, model: Type[PayloadT]) -> PayloadT:
        """Validate the payload; raises ``pydantic.ValidationError``."""
        return model.model_validate(self.payload)

    # ── Result builders ──────────────────────────────────────────

    def _result(self, data: Any, **meta: Any) -> RenderedWidget:
        """Shorthand to build a RenderedWidget."""
        return RenderedWidget(
            position=self.ctx.position,
            widget_type=self.widget_type,
            renderer=type(self).__name__,
            data=data,
            metadata={"category": meta.pop("category", self.widget_type), **meta},
        )

    def _invalid(self, exc: ValidationError) -> RenderedWidget:
        """Build the standard result for a payload that failed validation."""
        return RenderedWidget(
            position=self.ctx.position,
            widget_type=self.widget_type,
            renderer=type(self).__name__,
            data=None,
            metadata={
                "error": True,
                "invalid_payload": True,
                "message": "Widget payload is invalid",
                "errors": _summarize_errors(exc),
            },
        )


def _summarize_errors(exc: ValidationError) -> List[str]:
    summary: List[str] = []
    for err in exc.errors():
        loc = ".".join(str(part) for part in err.get("loc", ())) or "<root>"
        summary.append(f"{loc}: {err.get('msg', 'invalid')}")
    return summary
