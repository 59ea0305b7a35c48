from typing import Any, Dict, List, Sequence, Tuple

import pandas as pd

from netviz.schemas.datasets import INTERNET_USE
from netviz.schemas.records import InternetUseRecord
from netviz.viz.base import IChartController, Margin, Viewport
from netviz.viz.elements import Element, ElementLayer
from netviz.viz.paths import monotone_path
from netviz.viz.render import (
    axis_layer,
    compose,
    element_rows,
    line_layer,
    line_rows,
    rect_layer,
    rows_to_frame,
    text_layer,
)
from netviz.viz.scales import LinearScale, OrdinalScale, extent, tick_labels
from netviz.viz.theme import SERIES_COLORS, apply_theme
from netviz.viz.transitions import STYLE_GROUP

PICKS = ("USA", "GBR", "DEU", "JPN", "MEX")
HIGHLIGHT_MS = 250
DIMMED_OPACITY = 0.25
LEGEND_ROW = 18

Series = Tuple[str, List[InternetUseRecord]]


def _series_key(series: Series) -> str:
    return series[0]


class TimeSeriesController(IChartController):
    """Percent internet usage over time, one line per country.

    Filters:
      - countries (list[str]): country codes to draw, in legend order (default: USA, GBR, DEU, JPN, MEX).

    Lines are monotone-x curves that break at undefined points. When linked to another
    view's selection, lines outside it are dimmed. Each line's SVG path data is
    exported under ``usermeta["paths"]``.
    """

    chart_key = "time_series"
    dataset = INTERNET_USE
    title = "Percent Internet Usage Over Time"
    default_viewport = Viewport(900, 400, Margin(28, 90, 42, 60))

    def __init__(self, records, settings, scheduler=None, viewport=None):
        super().__init__(records, settings, scheduler, viewport)
        self.countries: List[str] = list(PICKS)
        self.color = OrdinalScale(PICKS, SERIES_COLORS, unknown=SERIES_COLORS[0])
        self.x = LinearScale((0, 1), (0, self.viewport.inner_width))
        self.y = LinearScale((0, 100), (self.viewport.inner_height, 0)).nice()
        self.paths = ElementLayer("series", "path", self.scheduler)
        self.legend = ElementLayer("legend", "legend_entry", self.scheduler)
        self.render()

    def set_countries(self, codes: Sequence[str]) -> None:
        self.countries = list(dict.fromkeys(str(c).strip().upper() for c in codes if str(c).strip()))
        self.color = OrdinalScale(self.countries, SERIES_COLORS, unknown=SERIES_COLORS[0])
        self.render()

    def apply_filters(self, filters: Dict[str, Any]) -> None:
        if filters.get("countries") is not None:
            self.set_countries(filters["countries"])

    def visible_subset(self) -> List[InternetUseRecord]:
        picks = set(self.countries)
        return [r for r in self.records if r.code in picks]

    def series(self) -> List[Series]:
        grouped: Dict[str, List[InternetUseRecord]] = {}
        for record in self.visible_subset():
            grouped.setdefault(record.code, []).append(record)
        return [(code, sorted(grouped[code], key=lambda r: r.year)) for code in self.countries if code in grouped]

    def render(self) -> None:
        series = self.series()
        years = extent([r.year for _, values in series for r in values]) or (0, 1)
        self.x = LinearScale(years, (0, self.viewport.inner_width))
        self.paths.join(series, _series_key, enter=self._draw_series, update=self._draw_series)
        self.legend.join(self.countries, lambda code: code, enter=self._draw_legend, update=self._draw_legend)
        self.restyle()

    def _draw_series(self, element: Element, series: Series) -> None:
        code, values = series
        points = [(self.x(r.year), self.y(r.value)) for r in values]
        element.attrs.update(
            d=monotone_path(points),
            points=points,
            stroke=self.color(code),
            stroke_width=2,
            fill="none",
        )
        element.attrs.setdefault("opacity", 1.0)

    def _draw_legend(self, element: Element, code: str) -> None:
        row = self.countries.index(code)
        element.attrs.update(
            x=self.viewport.inner_width - 80, y=6 + row * LEGEND_ROW, width=12, height=12, fill=self.color(code), text=code
        )

    def restyle(self) -> None:
        for element in self.paths:
            target = 1.0 if self.is_highlighted(element.key) else DIMMED_OPACITY
            if element.attrs.get("opacity") != target:
                self.scheduler.animate(element, None, {"opacity": target}, HIGHLIGHT_MS, group=STYLE_GROUP)

    def frame(self) -> pd.DataFrame:
        return rows_to_frame(element_rows(self.paths) + element_rows(self.legend))

    def to_spec(self) -> Dict[str, Any]:
        apply_theme()
        m = self.viewport.margin
        legend_boxes = element_rows(self.legend, dx=m.left, dy=m.top)
        legend_text = [dict(row, x=row["x"] + 18, y=row["y"] + 6) for row in legend_boxes]
        layers = [
            line_layer(line_rows(self.paths, dx=m.left, dy=m.top)),
            rect_layer(legend_boxes),
            text_layer(legend_text),
            axis_layer(tick_labels(self.x, 10, lambda v: f"{v:.0f}"), "bottom", self.viewport),
            axis_layer(tick_labels(self.y, 6, lambda v: f"{v:g}%"), "left", self.viewport),
        ]
        # SVG path data per series, in plot-area pixels (before the margin offset).
        paths = {str(el.key): el.attrs.get("d", "") for el in self.paths}
        usermeta = {"countries": self.countries, "years": [self.x.domain[0], self.x.domain[1]], "paths": paths}
        return compose(layers, self.viewport, self.title, usermeta)
