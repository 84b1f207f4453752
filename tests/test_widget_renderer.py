from __future__ import annotations

import pytest

from geo_dashboard.services.widgets.base import WidgetDescriptor
from geo_dashboard.services.widgets.registry import WidgetRegistry
from geo_dashboard.services.widgets.renderer import UNKNOWN_WIDGET_TYPE, WidgetRenderer
from geo_dashboard.services.widgets.types.kpi_card import KpiCard


SERIES = {
    "title": "Footfall",
    "labels": ["Mon", "Tue", "Wed"],
    "series": [{"label": "Store A", "values": [10, 12, 9]}],
}


def test_render_all_preserves_order_and_positions(renderer: WidgetRenderer) -> None:
    rendered = renderer.render_all([
        WidgetDescriptor("text", {"body": "Welcome"}),
        WidgetDescriptor("nope", {}),
        WidgetDescriptor("kpi", {"label": "Temp", "value": 21.04, "unit": "°C"}),
    ])

    assert [r.position for r in rendered] == [0, 1, 2]
    assert [r.widget_type for r in rendered] == ["text", UNKNOWN_WIDGET_TYPE, "kpi"]
    assert rendered[2].data == {"label": "Temp", "value": 21.0, "unit": "°C", "trend": None}


def test_unknown_tag_yields_placeholder(renderer: WidgetRenderer) -> None:
    result = renderer.render(WidgetDescriptor("weather_radar", {"x": 1}), position=4)

    assert result.is_placeholder
    assert result.position == 4
    assert result.renderer is None
    assert result.metadata == {
        "placeholder": True,
        "requested_type": "weather_radar",
        "message": "Unknown widget",
    }


def test_non_string_tag_yields_placeholder(renderer: WidgetRenderer) -> None:
    result = renderer.render(WidgetDescriptor(7, None))  # type: ignore[arg-type]
    assert result.widget_type == UNKNOWN_WIDGET_TYPE
    assert result.metadata["requested_type"] == "7"


def test_malformed_descriptor_yields_error_placeholder(renderer: WidgetRenderer) -> None:
    result = renderer.render({"type": "kpi"})
    assert result.widget_type == "error"
    assert result.metadata["message"] == "Malformed widget descriptor"


def test_only_rendered_types_are_loaded(
    registry: WidgetRegistry, renderer: WidgetRenderer,
) -> None:
    renderer.render(WidgetDescriptor("text", {"body": "hi"}))

    assert registry.resolve("text").is_loaded
    for tag in ("kpi", "line_chart", "bar_chart", "pie_chart", "table"):
        assert not registry.resolve(tag).is_loaded


def test_broken_registration_is_isolated_to_its_widget() -> None:
    registry = WidgetRegistry.from_config()
    registry.register("radar", "geo_dashboard.services.widgets.types.radar", "Radar")
    renderer = WidgetRenderer(registry)

    first, second = renderer.render_all([
        WidgetDescriptor("radar", {}),
        WidgetDescriptor("text", {"body": "still here"}),
    ])

    assert first.widget_type == "error"
    assert first.metadata["requested_type"] == "radar"
    assert second.data["body"] == "still here"


def test_renderer_exception_becomes_error_placeholder(
    renderer: WidgetRenderer, monkeypatch,
) -> None:
    def explode(self):
        raise ZeroDivisionError("bad math")

    monkeypatch.setattr(KpiCard, "render", explode)
    result = renderer.render(WidgetDescriptor("kpi", {"label": "x", "value": 1}), 2)

    assert result.widget_type == "error"
    assert result.renderer == "KpiCard"
    assert result.position == 2
    assert result.metadata["message"] == "bad math"


def test_invalid_payload_is_reported_not_raised(renderer: WidgetRenderer) -> None:
    result = renderer.render(WidgetDescriptor("kpi", {"label": "Visitors"}))

    assert result.widget_type == "kpi"
    assert result.data is None
    assert result.metadata["invalid_payload"] is True
    assert result.metadata["errors"] == ["value: Field required"]


def test_non_object_payload_is_invalid(renderer: WidgetRenderer) -> None:
    result = renderer.render(WidgetDescriptor("table", "not a table"))
    assert result.metadata["invalid_payload"] is True
    assert result.is_placeholder


def test_kpi_trend(renderer: WidgetRenderer) -> None:
    def trend(value, previous):
        payload = {"label": "Sales", "value": value, "previous": previous}
        return renderer.render(WidgetDescriptor("kpi", payload)).data["trend"]

    assert trend(5, 3) == "up"
    assert trend(2, 3) == "down"
    assert trend(3, 3) == "flat"


def test_line_chart_uses_smooth_curves(renderer: WidgetRenderer) -> None:
    result = renderer.render(WidgetDescriptor("line_chart", SERIES))

    assert result.data["chart_type"] == "line"
    assert result.data["labels"] == ["Mon", "Tue", "Wed"]
    dataset = result.data["datasets"][0]
    assert dataset["tension"] == 0.4
    assert dataset["borderColor"] == "#3b82f6"
    assert dataset["backgroundColor"] == "rgba(59,130,246,0.15)"
    assert result.metadata["total_points"] == 3


def test_bar_chart_rejects_mismatched_series(renderer: WidgetRenderer) -> None:
    payload = {"labels": ["a", "b"], "series": [{"label": "s", "values": [1]}]}
    result = renderer.render(WidgetDescriptor("bar_chart", payload))
    assert result.metadata["invalid_payload"] is True

    ok = renderer.render(WidgetDescriptor("bar_chart", SERIES))
    assert ok.data["chart_type"] == "bar"
    assert ok.data["stacked"] is False


def test_pie_chart_percentages(renderer: WidgetRenderer) -> None:
    payload = {"slices": [
        {"label": "North", "value": 1},
        {"label": "South", "value": 2},
    ]}
    result = renderer.render(WidgetDescriptor("pie_chart", payload))

    assert result.data["percentages"] == [33.3, 66.7]
    assert result.metadata["total"] == 3


def test_pie_chart_all_zero_slices(renderer: WidgetRenderer) -> None:
    payload = {"slices": [{"label": "a", "value": 0}, {"label": "b", "value": 0}]}
    result = renderer.render(WidgetDescriptor("pie_chart", payload))
    assert result.data["percentages"] == [0.0, 0.0]


def test_table_rows_are_capped() -> None:
    registry = WidgetRegistry()
    registry.register(
        "table",
        "geo_dashboard.services.widgets.types.data_table",
        "DataTable",
        default_config={"max_rows": 2},
    )
    payload = {"columns": ["city", "visits"], "rows": [["a", 1], ["b", 2], ["c", 3]]}
    result = WidgetRenderer(registry).render(WidgetDescriptor("table", payload))

    assert result.data["columns"] == [
        {"key": "c0", "label": "city"},
        {"key": "c1", "label": "visits"},
    ]
    assert result.data["rows"] == [{"c0": "a", "c1": 1}, {"c0": "b", "c1": 2}]
    assert result.metadata["total_rows"] == 3
    assert result.metadata["truncated"] is True


def test_table_rejects_ragged_rows(renderer: WidgetRenderer) -> None:
    payload = {"columns": ["a", "b"], "rows": [["x"]]}
    result = renderer.render(WidgetDescriptor("table", payload))
    assert result.metadata["invalid_payload"] is True


def test_long_text_is_truncated() -> None:
    registry = WidgetRegistry()
    registry.register(
        "text",
        "geo_dashboard.services.widgets.types.text_block",
        "TextBlock",
        default_config={"max_length": 5},
    )
    result = WidgetRenderer(registry).render(WidgetDescriptor("text", {"body": "abcdefgh"}))

    assert result.data["body"] == "abcde…"
    assert result.metadata["truncated"] is True


@pytest.mark.parametrize(
    "tag, payload",
    [
        ("kpi", {"label": "Visitors", "value": float("nan")}),
        ("kpi", {"label": "Visitors", "value": 3, "previous": float("-inf")}),
        ("line_chart", {"labels": ["a"], "series": [{"label": "s", "values": [float("inf")]}]}),
        ("pie_chart", {"slices": [{"label": "a", "value": float("inf")}]}),
        ("table", {"columns": ["a"], "rows": [[float("nan")]]}),
    ],
)
def test_non_finite_numbers_are_invalid_payloads(
    renderer: WidgetRenderer, tag: str, payload: dict,
) -> None:
    result = renderer.render(WidgetDescriptor(tag, payload))

    assert result.widget_type == tag
    assert result.data is None
    assert result.metadata["invalid_payload"] is True
