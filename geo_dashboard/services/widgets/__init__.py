"""
Widget dispatch.

Modules:
  base      : BaseRenderer ABC, WidgetDescriptor, RenderedWidget.
  registry  : WidgetRegistry — tag → lazily-loaded RendererHandle.
  renderer  : WidgetRenderer — descriptor → RenderedWidget, never raises.
  types/    : Concrete renderers (text, KPI, charts, table).
"""

from geo_dashboard.services.widgets.base import (
    BaseRenderer,
    RenderedWidget,
    WidgetDescriptor,
)
from geo_dashboard.services.widgets.registry import (
    NotFound,
    RendererHandle,
    RendererLoadError,
    WidgetRegistry,
    widget_registry,
)
from geo_dashboard.services.widgets.renderer import WidgetRenderer, widget_renderer

__all__ = [
    "BaseRenderer",
    "NotFound",
    "RenderedWidget",
    "RendererHandle",
    "RendererLoadError",
    "WidgetDescriptor",
    "WidgetRegistry",
    "WidgetRenderer",
    "widget_registry",
    "widget_renderer",
]
