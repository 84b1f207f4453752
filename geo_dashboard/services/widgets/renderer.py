"""
WidgetRenderer — Dispatch each descriptor to its renderer.

Single Responsibility: given WidgetDescriptors, look up the renderer in
the WidgetRegistry and execute ``render()``.  No business logic, no
network or storage access.

Never raises: an unknown tag becomes the "unknown widget" placeholder,
and any failure while loading or running a renderer becomes an error
placeholder for that widget alone.

Usage::

    from geo_dashboard.services.widgets.renderer import widget_renderer

    rendered = widget_renderer.render_all(orchestrator.widgets())
    payload = [w.to_dict() for w in rendered]
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, List, Optional

from geo_dashboard.services.widgets.base import (
    RenderContext,
    RenderedWidget,
    WidgetDescriptor,
)
from geo_dashboard.services.widgets.registry import (
    NotFound,
    RendererLoadError,
    WidgetRegistry,
    widget_registry,
)

logger = logging.getLogger(__name__)

UNKNOWN_WIDGET_TYPE = "unknown"


class WidgetRenderer:
    """
    Pipeline per descriptor:
      1. Resolve the tag in the WidgetRegistry.
      2. Load the renderer class (first use only).
      3. Build RenderContext with the registry's default config.
      4. Call ``renderer.render()`` → RenderedWidget.
    """

    def __init__(self, registry: Optional[WidgetRegistry] = None) -> None:
        self._registry = registry or widget_registry

    @property
    def registry(self) -> WidgetRegistry:
        return self._registry

    def render_all(self, descriptors: Iterable[WidgetDescriptor]) -> List[RenderedWidget]:
        """Render every descriptor, preserving order."""
        return [
            self.render(descriptor, position=i)
            for i, descriptor in enumerate(descriptors)
        ]

    def render(self, descriptor: Any, position: int = 0) -> RenderedWidget:
        """Render one descriptor."""
        if not isinstance(descriptor, WidgetDescriptor):
            logger.warning(f"[WidgetRenderer] Not a WidgetDescriptor: {descriptor!r}")
            return self._error_placeholder(
                repr(descriptor), position, None, "Malformed widget descriptor",
            )

        # 1. Registry lookup
        handle = self._registry.resolve(descriptor.type)
        if isinstance(handle, NotFound):
            logger.info(f"[WidgetRenderer] Unknown widget type '{handle.tag}'")
            return self._unknown_placeholder(descriptor.type, position)

        # 2. Load renderer class
        try:
            renderer_cls = handle.load()
        except RendererLoadError as exc:
            logger.error(f"[WidgetRenderer] {exc}")
            return self._error_placeholder(
                descriptor.type, position, handle.class_name, str(exc),
            )

        # 3 + 4. Execute
        ctx = RenderContext(
            descriptor=descriptor,
            position=position,
            config=dict(handle.default_config),
        )
        try:
            return renderer_cls(ctx).render()
        except Exception as exc:
            logger.error(
                f"[WidgetRenderer] Error rendering '{descriptor.type}': {exc}",
                exc_info=True,
            )
            return self._error_placeholder(
                descriptor.type, position, handle.class_name, str(exc),
            )

    @staticmethod
    def _unknown_placeholder(tag: Any, position: int) -> RenderedWidget:
        return RenderedWidget(
            position=position,
            widget_type=UNKNOWN_WIDGET_TYPE,
            renderer=None,
            data=None,
            metadata={
                "placeholder": True,
                "requested_type": tag if isinstance(tag, str) else repr(tag),
                "message": "Unknown widget",
            },
        )

    @staticmethod
    def _error_placeholder(
        tag: str,
        position: int,
        renderer: Optional[str],
        error: str,
    ) -> RenderedWidget:
        return RenderedWidget(
            position=position,
            widget_type="error",
            renderer=renderer,
            data=None,
            metadata={"error": True, "requested_type": tag, "message": error},
        )


# ── Singleton ────────────────────────────────────────────────────
widget_renderer = WidgetRenderer()
