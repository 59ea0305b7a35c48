from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

import pandas as pd

from netviz.config.observability import log_event
from netviz.schemas.datasets import GAPMINDER
from netviz.schemas.records import GapminderRecord
from netviz.viz.base import IChartController, Margin, Viewport
from netviz.viz.elements import Element, ElementLayer
from netviz.viz.render import axis_layer, compose, element_rows, rect_layer, rows_to_frame, text_layer
from netviz.viz.scales import BandScale, LinearScale, tick_labels
from netviz.viz.selection import SelectionBroadcaster, SelectionChanged
from netviz.viz.theme import MEASURE_COLORS, MUTED_TEXT, SMALL_FONT_SIZE, VALUE_TEXT, apply_theme
from netviz.viz.transitions import STYLE_GROUP

FIXED_CODES = ("LIE", "BER", "LUX", "NOR", "JAP", "MAL", "GUI", "LIB", "ERI", "BUR")
MEASURES = ("gdp", "net")
MEASURE_LABELS = {"gdp": "GDP per capita (USD)", "net": "Internet (%)"}

GROUP_MS = 400
BAR_ENTER_MS = 550
BAR_UPDATE_MS = 450
BAR_EXIT_MS = 250
NAME_ENTER_MS = 300
NAME_EXIT_MS = 200
HIGHLIGHT_MS = 250
OUTER_PADDING = 0.35
INNER_PADDING = 0.18
GDP_HEADROOM = 1.1
DIMMED_OPACITY = 0.3

Measure = Tuple[str, float]


def _code(record: GapminderRecord) -> str:
    return record.code


def _measure_key(measure: Measure) -> str:
    return measure[0]


def fun_fact(record: GapminderRecord) -> str:
    return f"~{record.net:.1f}% online"


def format_measure(kind: str, value: float) -> str:
    return f"${value:,.0f}" if kind == "gdp" else f"{value:.1f}%"


class GroupedBarsController(IChartController):
    """GDP per capita next to internet usage for a fixed sample of countries.

    Each country in the sample has a chip; toggling a chip adds or removes its group of
    two bars (GDP on the right axis, internet % on the left). Groups stay in sample
    order.

    Filters:
      - toggle (list[str]): chip codes toggled in order.
    """

    chart_key = "grouped_bars"
    dataset = GAPMINDER
    title = "GDP per Capita vs Internet Usage (Selected Countries)"
    default_viewport = Viewport(1100, 520, Margin(40, 80, 100, 70))

    def __init__(self, records, settings, scheduler=None, viewport=None):
        super().__init__(records, settings, scheduler, viewport)
        by_code = {r.code: r for r in self.records if r.gdp is not None}
        self.sample: List[GapminderRecord] = [by_code[c] for c in FIXED_CODES if c in by_code]
        self._order = {code: i for i, code in enumerate(FIXED_CODES)}
        w, h = self.viewport.inner_width, self.viewport.inner_height
        self.x = BandScale.padded([], (0, w), OUTER_PADDING)
        self.x_inner = BandScale.padded(MEASURES, (0, 0), INNER_PADDING)
        self.y_left = LinearScale((0, 100), (h, 0)).nice()
        self.y_right = LinearScale((0, 1), (h, 0)).nice()
        self.chips = ElementLayer("chips", "chip", self.scheduler)
        self.groups = ElementLayer("groups", "group", self.scheduler)
        self.names = ElementLayer("names", "text", self.scheduler)
        self._selection = SelectionBroadcaster(self.chart_key)
        self._selection.subscribe(self._on_chips)
        self.render()

    @property
    def selection(self) -> SelectionBroadcaster:
        return self._selection

    def toggle(self, code: str) -> None:
        code = str(code).strip().upper()
        if not any(r.code == code for r in self.sample):
            log_event("chip_ignored", chart_key=self.chart_key, code=code)
            return
        self._selection.toggle(code)

    def _on_chips(self, event: SelectionChanged) -> None:
        self.render()

    def apply_filters(self, filters: Dict[str, Any]) -> None:
        for code in filters.get("toggle") or []:
            self.toggle(code)

    def visible_subset(self) -> List[GapminderRecord]:
        chosen = self._selection.snapshot()
        return sorted((r for r in self.sample if r.code in chosen), key=lambda r: self._order[r.code])

    def _y(self, kind: str, value: float) -> float:
        return self.y_right(value) if kind == "gdp" else self.y_left(value)

    def render(self) -> None:
        selected = self.visible_subset()
        h = self.viewport.inner_height
        max_gdp = max((r.gdp for r in selected), default=0.0) or 1.0
        self.y_right = LinearScale((0, max_gdp * GDP_HEADROOM), (h, 0)).nice()
        self.y_left = LinearScale((0, 100), (h, 0)).nice()
        self.x = self.x.with_domain([r.code for r in selected])
        self.x_inner = self.x_inner.with_range((0, max(0.0, self.x.bandwidth)))

        self.chips.join(self.sample, _code, enter=self._draw_chip, update=self._draw_chip)
        self.groups.join(selected, _code, enter=self._enter_group, update=self._update_group)
        self.names.join(selected, _code, enter=self._enter_name, update=self._update_name, exit=self._exit_name)
        self.restyle()

    def _draw_chip(self, element: Element, record: GapminderRecord) -> None:
        active = record.code in self._selection
        element.attrs.update(active=active, text=record.name if active else fun_fact(record))

    def _enter_group(self, element: Element, record: GapminderRecord) -> None:
        element.attrs.update(tx=self.x(record.code), opacity=1.0)
        self._update_group(element, record)

    def _update_group(self, element: Element, record: GapminderRecord) -> None:
        self.scheduler.animate(element, None, {"tx": self.x(record.code)}, GROUP_MS)
        measures: List[Measure] = [("gdp", record.gdp), ("net", record.net)]
        bars = element.child("bars", "rect", self.scheduler)
        bars.join(measures, _measure_key, enter=self._enter_bar, update=self._update_bar, exit=self._exit_bar(bars))
        values = element.child("values", "text", self.scheduler)
        values.join(measures, _measure_key, enter=self._enter_value, update=self._update_value)

    def _enter_bar(self, element: Element, measure: Measure) -> None:
        kind, value = measure
        h = self.viewport.inner_height
        element.attrs.update(
            x=self.x_inner(kind),
            y=h,
            width=self.x_inner.bandwidth,
            height=0.0,
            fill=MEASURE_COLORS[kind],
            opacity=0.9,
        )
        y = self._y(kind, value)
        self.scheduler.animate(element, None, {"y": y, "height": h - y}, BAR_ENTER_MS)

    def _update_bar(self, element: Element, measure: Measure) -> None:
        kind, value = measure
        y = self._y(kind, value)
        self.scheduler.animate(
            element,
            None,
            {"x": self.x_inner(kind), "y": y, "width": self.x_inner.bandwidth, "height": self.viewport.inner_height - y},
            BAR_UPDATE_MS,
        )

    def _exit_bar(self, layer: ElementLayer):
        def exit_bar(element: Element) -> None:
            layer.transition_out(element, {"y": self.viewport.inner_height, "height": 0.0}, BAR_EXIT_MS)

        return exit_bar

    def _enter_value(self, element: Element, measure: Measure) -> None:
        kind, _ = measure
        element.attrs.update(
            x=self.x_inner(kind) + self.x_inner.bandwidth / 2, y=self.viewport.inner_height - 4, text="", opacity=0.0
        )
        self._update_value(element, measure)

    def _update_value(self, element: Element, measure: Measure) -> None:
        kind, value = measure
        self.scheduler.animate(
            element,
            None,
            {
                "x": self.x_inner(kind) + self.x_inner.bandwidth / 2,
                "y": self._y(kind, value) - 6,
                "text": format_measure(kind, value),
                "opacity": 1.0,
            },
            BAR_UPDATE_MS,
        )

    def _name_x(self, record: GapminderRecord) -> float:
        return (self.x(record.code) or 0.0) + self.x.bandwidth / 2

    def _enter_name(self, element: Element, record: GapminderRecord) -> None:
        element.attrs.update(x=self._name_x(record), y=self.viewport.inner_height + 28, opacity=0.0, text=record.name)
        self._update_name(element, record)

    def _update_name(self, element: Element, record: GapminderRecord) -> None:
        self.scheduler.animate(
            element,
            None,
            {"x": self._name_x(record), "y": self.viewport.inner_height + 28, "text": record.name, "opacity": 1.0},
            NAME_ENTER_MS,
        )

    def _exit_name(self, element: Element) -> None:
        self.names.transition_out(element, {"opacity": 0.0}, NAME_EXIT_MS)

    def restyle(self) -> None:
        for element in self.groups:
            target = 1.0 if self.is_highlighted(element.key) else DIMMED_OPACITY
            if element.attrs.get("opacity") != target:
                self.scheduler.animate(element, None, {"opacity": target}, HIGHLIGHT_MS, group=STYLE_GROUP)

    def chip_states(self) -> List[Dict[str, Any]]:
        return [
            {"code": el.key, "label": el.attrs["text"], "active": el.attrs["active"]} for el in self.chips
        ]

    def _group_rows(self, child: str, dx: float, dy: float) -> List[Dict[str, Any]]:
        rows: List[Dict[str, Any]] = []
        for group in self.groups.all_elements():
            layer: Optional[ElementLayer] = group.children.get(child)
            if layer is None:
                continue
            for row in element_rows(layer, dx=dx + group.attrs["tx"], dy=dy, opacity=group.attrs.get("opacity", 1.0)):
                row["group"] = str(group.key)
                rows.append(row)
        return rows

    def frame(self) -> pd.DataFrame:
        return rows_to_frame(
            element_rows(self.groups) + self._group_rows("bars", 0, 0) + self._group_rows("values", 0, 0)
            + element_rows(self.names)
        )

    def to_spec(self) -> Dict[str, Any]:
        apply_theme()
        m = self.viewport.margin
        layers = [
            rect_layer(self._group_rows("bars", m.left, m.top)),
            text_layer(
                self._group_rows("values", m.left, m.top),
                align="center",
                baseline="alphabetic",
                font_size=SMALL_FONT_SIZE,
                color=VALUE_TEXT,
            ),
            text_layer(element_rows(self.names, dx=m.left, dy=m.top), align="center", font_size=SMALL_FONT_SIZE, color=MUTED_TEXT),
            axis_layer(tick_labels(self.x, 0, str), "bottom", self.viewport),
            axis_layer(tick_labels(self.y_left, 6, lambda v: f"{v:g}%"), "left", self.viewport),
            axis_layer(tick_labels(self.y_right, 6, lambda v: f"${v:,.0f}"), "right", self.viewport),
        ]
        usermeta = {
            "chips": self.chip_states(),
            "selection": sorted(self._selection.snapshot()),
            "legend": [{"measure": k, "label": MEASURE_LABELS[k], "color": MEASURE_COLORS[k]} for k in MEASURES],
        }
        return compose(layers, self.viewport, self.title, usermeta)
