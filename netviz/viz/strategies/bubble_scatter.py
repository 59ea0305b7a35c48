from typing import Any, Dict, List, Optional

import altair as alt
import pandas as pd

from netviz.config.observability import log_event
from netviz.schemas.datasets import GAPMINDER
from netviz.schemas.records import GapminderRecord
from netviz.services.validators import clamp_cap
from netviz.viz.base import IChartController, Margin, Viewport
from netviz.viz.brush import BrushRect, hit_test
from netviz.viz.elements import Element, ElementLayer
from netviz.viz.render import axis_layer, circle_layer, compose, element_rows, rows_to_frame
from netviz.viz.scales import LinearScale, SequentialColorScale, SqrtScale, tick_labels
from netviz.viz.selection import SelectionBroadcaster
from netviz.viz.theme import DOT_STROKE, apply_theme
from netviz.viz.transitions import STYLE_GROUP

UPDATE_MS = 500
EXIT_MS = 300
MAX_RADIUS = 14
SELECTED_OPACITY = 0.95
DIMMED_OPACITY = 0.2
SELECTED_STROKE = 1.6
BASE_STROKE = 0.6


def _code(record: GapminderRecord) -> str:
    return record.code


class BubbleScatterController(IChartController):
    """Urbanization against internet use, one bubble per country.

    Filters:
      - cap (int): number of countries shown (first N in file order), clamped to
        [settings.scatter_cap_min, settings.scatter_cap_max]; non-numeric input
        falls back to settings.scatter_default_cap.
      - brush ([x0, y0, x1, y1] in plot pixels, or null): brushed points become the
        view's selection, which other views subscribe to.

    Bubble area, not radius, is proportional to internet use. Changing the cap clears
    the brush and the selection.
    """

    chart_key = "bubble_scatter"
    dataset = GAPMINDER
    title = "Urbanization vs Internet Use"
    default_viewport = Viewport(1100, 520, Margin(24, 28, 56, 70))

    def __init__(self, records, settings, scheduler=None, viewport=None):
        super().__init__(records, settings, scheduler, viewport)
        w, h = self.viewport.inner_width, self.viewport.inner_height
        self.x = LinearScale((0, 100), (0, w)).nice()
        self.y = LinearScale((0, 100), (h, 0)).nice()
        self.r = SqrtScale((0, 100), (0, MAX_RADIUS))
        self.c = SequentialColorScale((0, 100))
        self.cap: int = settings.scatter_default_cap
        self.brush_rect: Optional[BrushRect] = None
        self.dots = ElementLayer("dots", "circle", self.scheduler)
        self._selection = SelectionBroadcaster(self.chart_key)
        self.render()

    @property
    def selection(self) -> SelectionBroadcaster:
        return self._selection

    def set_cap(self, raw: Any) -> None:
        self.cap = clamp_cap(raw, self.settings)
        self.render()

    def apply_filters(self, filters: Dict[str, Any]) -> None:
        if "cap" in filters:
            self.set_cap(filters["cap"])
        if "brush" in filters:
            self.brush(filters["brush"])

    def visible_subset(self) -> List[GapminderRecord]:
        return self.records[: self.cap]

    @property
    def count_text(self) -> str:
        return f"Showing {len(self.visible_subset())} countries"

    def render(self) -> None:
        self.dots.join(self.visible_subset(), _code, enter=self._enter_dot, update=self._update_dot, exit=self._exit_dot)
        self.brush_rect = None
        self._selection.clear()
        self.restyle()

    def _enter_dot(self, element: Element, record: GapminderRecord) -> None:
        element.attrs.update(
            cx=self.x(record.urb),
            cy=self.y(record.net),
            r=0.0,
            fill=self.c(record.net),
            opacity=0.9,
            stroke=DOT_STROKE,
            stroke_width=BASE_STROKE,
        )
        self._update_dot(element, record)

    def _update_dot(self, element: Element, record: GapminderRecord) -> None:
        self.scheduler.animate(
            element,
            None,
            {"cx": self.x(record.urb), "cy": self.y(record.net), "r": self.r(record.net), "fill": self.c(record.net)},
            UPDATE_MS,
        )

    def _exit_dot(self, element: Element) -> None:
        self.dots.transition_out(element, {"r": 0.0}, EXIT_MS)

    def brush(self, raw: Any) -> frozenset:
        """Select the points inside a brush rectangle; ``None`` or zero area clears."""
        rect = raw if isinstance(raw, BrushRect) or raw is None else BrushRect.parse(raw)
        if rect is None or rect.is_empty:
            return self.clear_brush()
        self.brush_rect = rect
        hits = hit_test(
            rect,
            self.visible_subset(),
            _code,
            x_of=lambda d: d.urb,
            y_of=lambda d: d.net,
            x_scale=self.x,
            y_scale=self.y,
        )
        log_event("brush", chart_key=self.chart_key, hits=len(hits))
        keys = self._selection.replace(hits, active=True)
        self.restyle()
        return keys

    def clear_brush(self) -> frozenset:
        self.brush_rect = None
        keys = self._selection.clear()
        self.restyle()
        return keys

    def restyle(self) -> None:
        filtering = self._selection.active
        for element in self.dots:
            chosen = element.key in self._selection
            self.scheduler.cancel(element, STYLE_GROUP)
            element.attrs["opacity"] = SELECTED_OPACITY if not filtering or chosen else DIMMED_OPACITY
            element.attrs["stroke_width"] = SELECTED_STROKE if chosen else BASE_STROKE

    def frame(self) -> pd.DataFrame:
        return rows_to_frame(element_rows(self.dots))

    def to_spec(self) -> Dict[str, Any]:
        apply_theme()
        m = self.viewport.margin
        by_code = {r.code: r for r in self.visible_subset()}
        dots = element_rows(self.dots, dx=m.left, dy=m.top)
        for row in dots:
            record = by_code.get(row["key"])
            row["name"] = record.name if record else row["key"]
            row["urb"] = record.urb if record else None
            row["net"] = record.net if record else None
        layers = [
            circle_layer(
                dots,
                tooltip=[
                    alt.Tooltip("name:N", title="Country"),
                    alt.Tooltip("urb:Q", title="Urban rate (%)", format=".1f"),
                    alt.Tooltip("net:Q", title="Internet (%)", format=".1f"),
                ],
            ),
            axis_layer(tick_labels(self.x, 10, lambda v: f"{v:g}%"), "bottom", self.viewport),
            axis_layer(tick_labels(self.y, 6, lambda v: f"{v:g}%"), "left", self.viewport),
        ]
        brush = self.brush_rect
        usermeta = {
            "cap": self.cap,
            "count_text": self.count_text,
            "brush": None if brush is None else [brush.x0, brush.y0, brush.x1, brush.y1],
            "selection": sorted(self._selection.snapshot()),
            "selection_active": self._selection.active,
        }
        return compose(layers, self.viewport, self.title, usermeta)
