"""
Widget Registry Configuration.

Maps widget type tags (the ``type`` field of every item the widget
endpoint returns) to the renderer that draws them.  This file is the
ONLY place where you register a new widget type; the renderer module
is imported lazily the first time its tag shows up in a payload.

Keys:
  type tag → str : must match the backend's ``type`` value.

Values: dict with:
  module         → str  : module under ``geo_dashboard.services.widgets.types``.
  class_name     → str  : BaseRenderer subclass exported by that module.
  category       → str  : "text" | "kpi" | "chart" | "table"
  default_config → dict : renderer-specific defaults.

To add a new widget type:
  1. Create the renderer class in geo_dashboard/services/widgets/types/
  2. Add an entry here.
  Done. Tags the backend sends but nobody registered render as the
  "unknown widget" placeholder.
"""

WIDGET_REGISTRY: dict[str, dict] = {
    # ── Text ─────────────────────────────────────────────────
    "text": {
        "module": "text_block",
        "class_name": "TextBlock",
        "category": "text",
        "default_config": {"max_length": 2000},
    },

    # ── KPIs ─────────────────────────────────────────────────
    "kpi": {
        "module": "kpi_card",
        "class_name": "KpiCard",
        "category": "kpi",
        "default_config": {"decimals": 1},
    },

    # ── Charts ───────────────────────────────────────────────
    "line_chart": {
        "module": "line_chart",
        "class_name": "LineChart",
        "category": "chart",
        "default_config": {"curve_type": "smooth"},
    },
    "bar_chart": {
        "module": "bar_chart",
        "class_name": "BarChart",
        "category": "chart",
        "default_config": {"stacked": False},
    },
    "pie_chart": {
        "module": "pie_chart",
        "class_name": "PieChart",
        "category": "chart",
        "default_config": {},
    },

    # ── Tables ───────────────────────────────────────────────
    "table": {
        "module": "data_table",
        "class_name": "DataTable",
        "category": "table",
        "default_config": {"max_rows": 500},
    },
}

# Package where renderer modules live
RENDERER_PACKAGE = "geo_dashboard.services.widgets.types"
