from typing import Any, Dict, List, Optional

import altair as alt
import pandas as pd

from netviz.schemas.datasets import INTERNET_USE
from netviz.schemas.records import InternetUseRecord
from netviz.services.validators import clamp_int
from netviz.viz.base import IChartController, Margin, Viewport
from netviz.viz.elements import Element, ElementLayer
from netviz.viz.render import axis_layer, compose, element_rows, rect_layer, rows_to_frame, text_layer
from netviz.viz.scales import BandScale, LinearScale, tick_labels
from netviz.viz.theme import BAR_FILL, apply_theme

UPDATE_MS = 600
EXIT_MS = 300
BAND_PADDING = 0.12
MAX_TOP_N = 50


def _code(record: InternetUseRecord) -> str:
    return record.code


class BarRankingController(IChartController):
    """Top-N countries by internet use in one year, as horizontal bars.

    Filters:
      - year (int): year to rank; defaults to the most recent year in the data.
      - top_n (int): number of bars, clamped to [1, 50]; default settings.bar_top_n.

    Bars grow from zero width on enter and shrink back to zero before removal; value
    labels slide along with the bar ends.
    """

    chart_key = "bar_ranking"
    dataset = INTERNET_USE
    title = "Internet use by country"
    default_viewport = Viewport(900, 380, Margin(10, 24, 36, 140))

    def __init__(self, records, settings, scheduler=None, viewport=None):
        super().__init__(records, settings, scheduler, viewport)
        self.years: List[int] = sorted({r.year for r in self.records})
        self.year: Optional[int] = self.years[-1] if self.years else None
        self.top_n: int = settings.bar_top_n
        self.x = LinearScale((0, 100), (0, self.viewport.inner_width))
        self.y = BandScale.padded([], (0, self.viewport.inner_height), BAND_PADDING)
        self.bars = ElementLayer("bars", "rect", self.scheduler)
        self.labels = ElementLayer("labels", "text", self.scheduler)
        self.render()

    def select_year(self, year: Any) -> None:
        self.year = int(year)
        self.render()

    def set_top_n(self, raw: Any) -> None:
        self.top_n = clamp_int(raw, default=self.settings.bar_top_n, lo=1, hi=MAX_TOP_N, field="top_n")
        self.render()

    def apply_filters(self, filters: Dict[str, Any]) -> None:
        if "top_n" in filters:
            self.set_top_n(filters["top_n"])
        if filters.get("year") is not None:
            self.select_year(filters["year"])

    def visible_subset(self) -> List[InternetUseRecord]:
        if self.year is None:
            return []
        rows = [r for r in self.records if r.year == self.year]
        rows.sort(key=lambda r: r.value, reverse=True)
        return rows[: self.top_n]

    def render(self) -> None:
        top = self.visible_subset()
        max_value = max((r.value for r in top), default=0.0) or 100.0
        self.x = LinearScale((0, max_value), (0, self.viewport.inner_width))
        self.y = self.y.with_domain([r.code for r in top])
        self.bars.join(top, _code, enter=self._enter_bar, update=self._update_bar, exit=self._exit_bar)
        self.labels.join(top, _code, enter=self._enter_label, update=self._update_label)

    def _enter_bar(self, element: Element, record: InternetUseRecord) -> None:
        element.attrs.update(
            x=0.0, y=self.y(record.code), height=self.y.bandwidth, width=0.0, fill=BAR_FILL, opacity=1.0
        )
        self._update_bar(element, record)

    def _update_bar(self, element: Element, record: InternetUseRecord) -> None:
        self.scheduler.animate(
            element,
            None,
            {"y": self.y(record.code), "height": self.y.bandwidth, "width": self.x(record.value)},
            UPDATE_MS,
        )

    def _exit_bar(self, element: Element) -> None:
        self.bars.transition_out(element, {"width": 0.0}, EXIT_MS)

    def _enter_label(self, element: Element, record: InternetUseRecord) -> None:
        element.attrs.update(x=0.0, y=self.y(record.code) + self.y.bandwidth / 2, text="", opacity=1.0)
        self._update_label(element, record)

    def _update_label(self, element: Element, record: InternetUseRecord) -> None:
        self.scheduler.animate(
            element,
            None,
            {
                "x": self.x(record.value) + 6,
                "y": self.y(record.code) + self.y.bandwidth / 2,
                "text": f"{record.value:.1f}%",
            },
            UPDATE_MS,
        )

    def frame(self) -> pd.DataFrame:
        return rows_to_frame(element_rows(self.bars) + element_rows(self.labels))

    def to_spec(self) -> Dict[str, Any]:
        apply_theme()
        m = self.viewport.margin
        values = {r.code: r.value for r in self.visible_subset()}
        bars = element_rows(self.bars, dx=m.left, dy=m.top)
        for row in bars:
            row["value"] = values.get(row["key"])
        layers = [
            rect_layer(
                bars,
                tooltip=[alt.Tooltip("key:N", title="Country"), alt.Tooltip("value:Q", title="Internet (%)", format=".1f")],
            ),
            text_layer(element_rows(self.labels, dx=m.left, dy=m.top)),
            axis_layer(tick_labels(self.x, 5, lambda v: f"{v:g}%"), "bottom", self.viewport),
            axis_layer(tick_labels(self.y, 0, str), "left", self.viewport),
        ]
        usermeta = {
            "years": self.years,
            "year": self.year,
            "top_n": self.top_n,
            "visible": [r.code for r in self.visible_subset()],
        }
        title = self.title if self.year is None else f"{self.title} ({self.year})"
        return compose(layers, self.viewport, title, usermeta)
