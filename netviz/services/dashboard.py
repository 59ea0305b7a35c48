"""The four-view page: loads both files, builds the views and links their selections.

Each view depends on exactly one file. When a file fails to load, only the views
that need it are left out (``None``); the rest of the page still works.
"""
import asyncio
from typing import Any, Dict, List, Optional

from netviz.config.observability import log_error, log_event
from netviz.config.settings import settings as default_settings
from netviz.schemas.datasets import GAPMINDER, INTERNET_USE
from netviz.services.data_loader import LoadFailure, LoadResult, load_gapminder, load_internet_use
from netviz.viz.base import IChartController
from netviz.viz.strategies.bar_ranking import BarRankingController
from netviz.viz.strategies.bubble_scatter import BubbleScatterController
from netviz.viz.strategies.grouped_bars import GroupedBarsController
from netviz.viz.strategies.time_series import TimeSeriesController
from netviz.viz.selection import Subscription
from netviz.viz.transitions import TransitionScheduler


class Dashboard:
    def __init__(
        self,
        internet_use: LoadResult,
        gapminder: LoadResult,
        settings: Any = None,
        scheduler: Optional[TransitionScheduler] = None,
    ):
        self.settings = settings or default_settings
        self.scheduler = scheduler or TransitionScheduler()
        self.errors: Dict[str, LoadFailure] = {}
        self.bar: Optional[BarRankingController] = None
        self.line: Optional[TimeSeriesController] = None
        self.grouped: Optional[GroupedBarsController] = None
        self.scatter: Optional[BubbleScatterController] = None
        self.links: List[Subscription] = []

        if internet_use.ok:
            self.bar = BarRankingController(internet_use.records, self.settings, self.scheduler)
            self.line = TimeSeriesController(internet_use.records, self.settings, self.scheduler)
        else:
            self._skip(INTERNET_USE, internet_use.error, ["bar_ranking", "time_series"])

        if gapminder.ok:
            self.grouped = GroupedBarsController(gapminder.records, self.settings, self.scheduler)
            self.scatter = BubbleScatterController(gapminder.records, self.settings, self.scheduler)
        else:
            self._skip(GAPMINDER, gapminder.error, ["grouped_bars", "bubble_scatter"])

        self._link()

    def _skip(self, dataset: str, error: Optional[LoadFailure], views: List[str]) -> None:
        if error is not None:
            self.errors[dataset] = error
        log_error("views_skipped", str(error), dataset=dataset, views=",".join(views))

    def _link(self) -> None:
        # Only views keyed by the scatter's country codes can follow its selection.
        if self.scatter is None or self.grouped is None:
            return
        self.links.append(self.scatter.selection.subscribe(self.grouped.on_linked_selection))
        log_event("views_linked", source=self.scatter.chart_key, target=self.grouped.chart_key)

    def views(self) -> Dict[str, IChartController]:
        candidates = (self.bar, self.line, self.grouped, self.scatter)
        return {view.chart_key: view for view in candidates if view is not None}

    def tick(self, now: Optional[float] = None) -> int:
        return self.scheduler.tick(now)


async def load_dashboard(settings: Any = None, scheduler: Optional[TransitionScheduler] = None) -> Dashboard:
    settings = settings or default_settings
    internet_use, gapminder = await asyncio.gather(
        asyncio.to_thread(load_internet_use, settings.internet_use_csv, settings),
        asyncio.to_thread(load_gapminder, settings.gapminder_csv, settings),
    )
    return Dashboard(internet_use, gapminder, settings=settings, scheduler=scheduler)
